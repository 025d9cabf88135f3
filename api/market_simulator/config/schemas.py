"""Pydantic schemas for configuration validation."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from . import catalog

Region = Literal["North America", "Europe", "Asia", "Global"]
EventKind = Literal[
    "positive", "negative", "neutral", "split", "alliance", "merger", "political", "disaster"
]
# A scalar multiplier, or multipliers keyed by symbol, sector, region or "default".
Impact = float | dict[str, float]


def _check_impact(value: Impact | None) -> Impact | None:
    if value is None:
        return value
    factors = value.values() if isinstance(value, dict) else [value]
    for factor in factors:
        if factor <= 0:
            raise ValueError(f"Impact factors must be positive, got {factor}")
    return value


# ============================================================================
# Market Settings
# ============================================================================

class SimulationSettings(BaseModel):
    """Core simulation parameters."""

    rng_seed: int = Field(42, description="Master seed for all derived RNG streams")
    num_days: int = Field(30, description="Default number of days for a CLI run", gt=0)
    start_date: datetime = Field(
        datetime(2024, 1, 1, 9, 30, tzinfo=timezone.utc),
        description="Simulated wall clock at initialization (UTC)",
    )
    initial_history_length: int = Field(252, description="Seed history length in days", ge=2)
    history_margin: int = Field(50, description="Extra days kept beyond the seed length", ge=0)
    min_initial_price: float = Field(8.0, gt=0)
    max_initial_price: float = Field(12.0, gt=0)
    intraday_volatility: float = Field(0.03, description="Daily diffusion scale", ge=0)
    min_price: float = Field(0.01, description="Strictly positive price floor", gt=0)
    inflation_rate: float = Field(0.02 / 365, description="Daily inflation drift")
    event_history_limit: int = Field(100, gt=0)
    portfolio_history_limit: int = Field(200, gt=0)
    spillover_damping: float = Field(
        0.25,
        description="Fraction of a macro impact felt by companies the event does not name",
        ge=0,
        le=1,
    )
    featured_threshold: float = Field(
        0.05, description="Minimum |impact - 1| for a corporate event to be featured", ge=0
    )
    sector_drag_rates: dict[str, float] = Field(
        default_factory=lambda: dict(catalog.DEFAULT_SECTOR_DRAG_RATES)
    )
    regional_drag_rates: dict[str, float] = Field(
        default_factory=lambda: dict(catalog.DEFAULT_REGIONAL_DRAG_RATES)
    )

    @field_validator("start_date")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @model_validator(mode="after")
    def validate_price_range(self) -> SimulationSettings:
        """Validate min_initial_price < max_initial_price."""
        if self.min_initial_price >= self.max_initial_price:
            raise ValueError(
                f"min_initial_price must be below max_initial_price: "
                f"min={self.min_initial_price}, max={self.max_initial_price}"
            )
        return self

    @property
    def history_window(self) -> int:
        """Maximum number of points kept in any rolling history."""
        return self.initial_history_length + self.history_margin


class TradingSettings(BaseModel):
    """Investor sizing and trade-outcome parameters."""

    buy_fraction: float = Field(0.2, description="Share of cash spent per buy", gt=0, le=1)
    sell_fraction: float = Field(0.5, description="Share of holdings sold per sell", gt=0, le=1)
    evaluation_horizon: int = Field(5, description="Days until a trade is scored", gt=0)
    outcome_gain: float = Field(10.0, gt=0)
    signal_gain: float = Field(10.0, description="Score scale for fixed-weight strategies", gt=0)
    noise_volume_max: float = Field(50_000.0, ge=0)
    long_term_holding_days: int = Field(365, gt=0)
    tax_period_days: int = Field(365, gt=0)


class CorporateSettings(BaseModel):
    """Corporate AI thresholds, effects and learning horizons."""

    hidden_layers: list[int] = Field(default_factory=lambda: [5])
    split_threshold: float = 1.5
    alliance_threshold: float = 2.0
    acquisition_threshold: float = 2.5
    min_split_price: float = Field(250.0, gt=0)
    alliance_bump: float = Field(1.03, gt=0)
    acquirer_bump: float = Field(1.05, gt=0)
    target_bump: float = Field(1.15, gt=0)
    max_target_cap_ratio: float = Field(0.5, gt=0)
    split_horizon: int = Field(60, gt=0)
    alliance_horizon: int = Field(90, gt=0)
    acquisition_horizon: int = Field(180, gt=0)
    min_action_interval: int = Field(20, ge=0)
    action_interval_range: int = Field(30, ge=1)
    learning_rate_min: float = Field(0.01, gt=0)
    learning_rate_max: float = Field(0.05, gt=0)
    cosmetic_event_probability: float = Field(0.15, ge=0, le=1)
    neutral_event_share: float = Field(0.8, ge=0, le=1)
    outcome_gain: float = Field(5.0, gt=0)


class NewsPickerSettings(BaseModel):
    """Macro event scheduling and news picker network settings."""

    enabled: bool = True
    hidden_layers: list[int] = Field(default_factory=lambda: [8])
    learning_rate: float = Field(0.02, gt=0)
    first_event_delay: int = Field(200, ge=0)
    first_event_range: int = Field(165, ge=1)
    interval_min: int = Field(15, ge=1)
    interval_range: int = Field(20, ge=1)
    evaluation_horizon: int = Field(10, gt=0)
    outcome_gain: float = Field(10.0, gt=0)


class ArticleSettings(BaseModel):
    """Article reinforcement settings."""

    evaluation_horizon: int = Field(5, gt=0)
    outcome_gain: float = Field(10.0, gt=0)
    learning_rate: float = Field(0.01, description="Phrase weight step for the template writer", gt=0)


# ============================================================================
# Companies and Population
# ============================================================================

class CompanyConfig(BaseModel):
    """A listed company or ETF."""

    symbol: str = Field(..., min_length=1)
    name: str
    sector: str
    region: Region
    is_etf: bool = False
    base_price: float | None = Field(
        None, description="Seed price; drawn from the initial price range when omitted", gt=0
    )
    shares_outstanding: float | None = Field(None, gt=0)
    eps: float | None = Field(None, gt=0)


class PopulationConfig(BaseModel):
    """Investor population shape."""

    mode: Literal["standard", "realistic"] = "standard"
    ai_investors: int = Field(999, ge=0)
    chaos_agents: int = Field(10, ge=0)
    advanced_traders: int = Field(10, ge=0)
    elite_traders: int = Field(5, ge=0)
    master_traders: int = Field(3, ge=0)
    include_oracle: bool = True
    simple_traders: int = Field(0, ge=0)
    complex_traders: int = Field(0, ge=0)
    human_cash: float = Field(1_000_000.0, ge=0)
    ai_cash: float = Field(100.0, ge=0)
    human_jurisdiction: str = "USA_WA"

    @model_validator(mode="after")
    def validate_tiers_fit(self) -> PopulationConfig:
        """Tier upgrades and chaos agents must fit inside the AI population."""
        if self.mode == "standard" and self.ai_investors > 0:
            upgraded = max(
                self.advanced_traders,
                self.elite_traders,
                self.master_traders,
                int(self.include_oracle),
            )
            if upgraded + self.chaos_agents > self.ai_investors:
                raise ValueError(
                    f"Tier upgrades ({upgraded}) plus chaos agents ({self.chaos_agents}) "
                    f"exceed ai_investors ({self.ai_investors})"
                )
        return self


class TaxRegime(BaseModel):
    """Capital gains tax regime for one jurisdiction."""

    ltcg_rate: float = Field(..., ge=0, le=1)
    ltcg_exemption: float = Field(0.0, ge=0)
    stcg_rate: float = Field(..., ge=0, le=1)
    stcg_exemption: float = Field(0.0, ge=0)
    description: str = ""


# ============================================================================
# Event Catalogs
# ============================================================================

class MacroEventConfig(BaseModel):
    """A macro event template drawn by the news picker."""

    name: str
    description: str = ""
    impact: Impact
    kind: EventKind
    region: Region = "Global"
    category: str

    @field_validator("impact")
    @classmethod
    def validate_impact(cls, v: Impact) -> Impact:
        """Validate impact factors are positive."""
        return _check_impact(v)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        """Validate category is a news picker output slot."""
        if v not in catalog.NEWS_EVENT_CATEGORIES:
            raise ValueError(f"Unknown news category: {v}")
        return v


class CorporateEventConfig(BaseModel):
    """A cosmetic company event template."""

    name: str
    description: str = ""
    impact: float | None = Field(None, gt=0)
    kind: Literal["positive", "negative", "neutral"]


class CorporateEventPool(BaseModel):
    """Cosmetic event templates for one sector, bucketed by sentiment."""

    positive: list[CorporateEventConfig] = Field(default_factory=list)
    negative: list[CorporateEventConfig] = Field(default_factory=list)
    neutral: list[CorporateEventConfig] = Field(default_factory=list)


# ============================================================================
# Scenario Events Configuration
# ============================================================================

class OneTimeSchedule(BaseModel):
    """One-time event schedule (executes once)."""
    type: Literal["OneTime"] = "OneTime"
    day: int = Field(..., description="Day on which the event executes", ge=0)


class RepeatingSchedule(BaseModel):
    """Repeating event schedule (executes at regular intervals)."""
    type: Literal["Repeating"] = "Repeating"
    start_day: int = Field(..., description="First day on which the event executes", ge=0)
    interval: int = Field(..., description="Days between executions", gt=0)


EventSchedule = OneTimeSchedule | RepeatingSchedule


class StockSplitEvent(BaseModel):
    """Force a stock split regardless of the corporate AI."""
    type: Literal["StockSplit"] = "StockSplit"
    symbol: str = Field(..., description="Company to split")
    ratio: int = Field(..., description="New shares per old share", ge=2)
    schedule: EventSchedule = Field(..., description="When event executes")


class MacroShockEvent(BaseModel):
    """Force a macro event as the day's active event."""
    type: Literal["MacroShock"] = "MacroShock"
    name: str = "Macro Shock"
    description: str = ""
    impact: Impact = Field(..., description="Scalar or keyed price multipliers")
    kind: EventKind = "negative"
    region: Region = "Global"
    schedule: EventSchedule = Field(..., description="When event executes")

    @field_validator("impact")
    @classmethod
    def validate_impact(cls, v: Impact) -> Impact:
        """Validate impact factors are positive."""
        return _check_impact(v)


class CompanyShockEvent(BaseModel):
    """Apply a one-day multiplier to a single company."""
    type: Literal["CompanyShock"] = "CompanyShock"
    symbol: str = Field(..., description="Company to shock")
    name: str = "Company Shock"
    description: str = ""
    impact: float = Field(..., description="Price multiplier", gt=0)
    kind: Literal["positive", "negative", "neutral"] = "negative"
    schedule: EventSchedule = Field(..., description="When event executes")


ScenarioEvent = Annotated[
    StockSplitEvent | MacroShockEvent | CompanyShockEvent,
    Field(discriminator="type"),
]


# ============================================================================
# Simulation Configuration
# ============================================================================

class SimulationConfig(BaseModel):
    """Complete simulation configuration."""

    simulation: SimulationSettings = Field(default_factory=SimulationSettings)
    companies: list[CompanyConfig] = Field(
        default_factory=lambda: [CompanyConfig(**c) for c in catalog.DEFAULT_COMPANIES],
        min_length=1,
    )
    population: PopulationConfig = Field(default_factory=PopulationConfig)
    trading: TradingSettings = Field(default_factory=TradingSettings)
    corporate: CorporateSettings = Field(default_factory=CorporateSettings)
    news_picker: NewsPickerSettings = Field(default_factory=NewsPickerSettings)
    articles: ArticleSettings = Field(default_factory=ArticleSettings)
    macro_events: list[MacroEventConfig] = Field(
        default_factory=lambda: [MacroEventConfig(**e) for e in catalog.DEFAULT_MACRO_EVENTS]
    )
    corporate_events: dict[str, CorporateEventPool] = Field(
        default_factory=lambda: {
            sector: CorporateEventPool(**pool)
            for sector, pool in catalog.DEFAULT_CORPORATE_EVENTS.items()
        }
    )
    tax_regimes: dict[str, TaxRegime] = Field(
        default_factory=lambda: {
            name: TaxRegime(**regime) for name, regime in catalog.DEFAULT_TAX_REGIMES.items()
        }
    )
    scenario_events: list[ScenarioEvent] = Field(
        default_factory=list, description="Optional scenario events to execute during simulation"
    )

    @field_validator("companies")
    @classmethod
    def validate_unique_symbols(cls, v: list[CompanyConfig]) -> list[CompanyConfig]:
        """Validate that all company symbols are unique."""
        symbols = [company.symbol for company in v]
        if len(symbols) != len(set(symbols)):
            duplicates = sorted({s for s in symbols if symbols.count(s) > 1})
            raise ValueError(f"Duplicate company symbols found: {duplicates}")
        return v

    @model_validator(mode="after")
    def validate_references(self) -> SimulationConfig:
        """Validate that jurisdictions and scenario symbols exist."""
        if self.population.human_jurisdiction not in self.tax_regimes:
            raise ValueError(
                f"Unknown human_jurisdiction: {self.population.human_jurisdiction}"
            )
        symbols = {company.symbol for company in self.companies}
        for i, event in enumerate(self.scenario_events):
            if isinstance(event, (StockSplitEvent, CompanyShockEvent)) and event.symbol not in symbols:
                raise ValueError(
                    f"Scenario event {i} references unknown symbol: {event.symbol}"
                )
        if self.corporate.learning_rate_min > self.corporate.learning_rate_max:
            raise ValueError("corporate.learning_rate_min must not exceed learning_rate_max")
        return self

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> SimulationConfig:
        """Create config from dictionary."""
        return cls.model_validate(config_dict)
