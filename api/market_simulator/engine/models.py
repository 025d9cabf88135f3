"""Simulation state records.

Everything the engine mutates lives in a ``SimulationState`` built from these
pydantic models, so a state snapshot is ``state.model_dump_json()`` and a
restore is ``SimulationState.model_validate_json(text)``.

Companies and investors are kept in flat lists and referenced by symbol or
id; no record holds a pointer into another.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from market_simulator.config.schemas import EventKind, Impact, Region, SimulationConfig
from market_simulator.engine.network import NeuralNetwork

TradeSide = Literal["buy", "sell"]
CorporateAction = Literal["split", "alliance", "acquisition"]


# ============================================================================
# Prices
# ============================================================================

class PricePoint(BaseModel):
    """One day of OHLCV data."""

    day: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


class ValuePoint(BaseModel):
    """A single-value series point (market index, portfolio value)."""

    day: int
    value: float


# ============================================================================
# Companies
# ============================================================================

class CorporateAI(BaseModel):
    """Per-company decision networks and their schedule."""

    split_network: NeuralNetwork
    alliance_network: NeuralNetwork
    acquisition_network: NeuralNetwork
    learning_rate: float
    next_action_day: int

    def network_for(self, action: CorporateAction) -> NeuralNetwork:
        match action:
            case "split":
                return self.split_network
            case "alliance":
                return self.alliance_network
            case "acquisition":
                return self.acquisition_network
            case _:
                raise ValueError(f"Unknown corporate action: {action}")


class Company(BaseModel):
    """A listed company and its rolling price history."""

    symbol: str
    name: str
    sector: str
    region: Region
    is_etf: bool = False
    shares_outstanding: float
    eps: float
    is_delisted: bool = False
    price_history: list[PricePoint]
    corporate_ai: CorporateAI

    @property
    def last_close(self) -> float:
        return self.price_history[-1].close

    @property
    def market_cap(self) -> float:
        return self.last_close * self.shares_outstanding

    @property
    def is_tradable(self) -> bool:
        """Listed and with enough history for the daily passes."""
        return not self.is_delisted and len(self.price_history) >= 2

    def scale_close(self, factor: float, floor: float) -> None:
        """Multiply the running close, keeping it above ``floor`` and inside high/low."""
        bar = self.price_history[-1]
        bar.close = max(floor, bar.close * factor)
        bar.high = max(bar.high, bar.close)
        bar.low = min(bar.low, bar.close)


# ============================================================================
# Strategies
# ============================================================================

class SimpleStrategy(BaseModel):
    """Fixed-weight momentum versus volatility scoring."""
    type: Literal["Simple"] = "Simple"
    price_momentum_weight: float
    volatility_weight: float
    risk_aversion: float


class ComplexWeights(BaseModel):
    growth: float
    value: float
    trend: float
    safety: float


class ComplexStrategy(BaseModel):
    """Fixed-weight blend of growth, value, trend and safety signals."""
    type: Literal["Complex"] = "Complex"
    weights: ComplexWeights
    risk_aversion: float
    trade_frequency: int = Field(1, ge=1)


class HyperComplexStrategy(BaseModel):
    """Network-scored strategy; the only one that learns."""
    type: Literal["HyperComplex"] = "HyperComplex"
    network: NeuralNetwork
    risk_aversion: float
    trade_frequency: int = Field(1, ge=1)
    learning_rate: float


class RandomStrategy(BaseModel):
    """Noise trader."""
    type: Literal["Random"] = "Random"
    trade_chance: float = Field(..., ge=0, le=1)


Strategy = Annotated[
    SimpleStrategy | ComplexStrategy | HyperComplexStrategy | RandomStrategy,
    Field(discriminator="type"),
]


# ============================================================================
# Deferred decisions
# ============================================================================

class DeferredDecision(BaseModel):
    """A decision waiting for its outcome to mature."""

    created_day: int
    evaluation_day: int
    reference_value: float
    features: list[float] = Field(default_factory=list)


class TradeDecision(DeferredDecision):
    """An executed investor trade; reference_value is the fill price."""

    investor_id: str
    symbol: str
    side: TradeSide
    shares: int


class CorporateActionDecision(DeferredDecision):
    """A corporate action; reference_value is the stock close when it was taken."""

    symbol: str
    action: CorporateAction
    reference_market_index: float


class NewsCategoryDecision(DeferredDecision):
    """A news picker choice; reference_value is the market index at the time."""

    category_index: int
    direction: float


class ArticleDecision(DeferredDecision):
    """A generated article awaiting reinforcement."""

    event_id: str
    subject_symbol: str | None = None
    direction: float
    trace: Any = None


# ============================================================================
# Investors
# ============================================================================

class Lot(BaseModel):
    """A discrete purchase, consumed oldest-first on sale."""

    purchase_time: datetime
    purchase_price: float
    shares: int = Field(..., ge=0)
    indicators_at_purchase: dict[str, float] = Field(default_factory=dict)


class Investor(BaseModel):
    """A human or autonomous market participant."""

    id: str
    name: str
    is_human: bool = False
    strategy_name: str = ""
    jurisdiction: str = "GLOBAL"
    cash: float
    holdings: dict[str, list[Lot]] = Field(default_factory=dict)
    strategy: Strategy
    pending_trades: list[TradeDecision] = Field(default_factory=list)
    annual_net_ltcg: float = 0.0
    annual_net_stcg: float = 0.0
    tax_loss_carryforward: float = 0.0
    total_taxes_paid: float = 0.0
    portfolio_history: list[ValuePoint] = Field(default_factory=list)


# ============================================================================
# Events
# ============================================================================

class Event(BaseModel):
    """A macro, corporate or cosmetic event, with its generated article."""

    id: str
    day: int
    subject_symbol: str | None = None
    subject_name: str | None = None
    name: str
    description: str = ""
    kind: EventKind
    impact: Impact | None = None
    region: Region = "Global"
    category: str | None = None
    headline: str = ""
    summary: str = ""
    body: str = ""
    image_url: str | None = None
    split_ratio: int | None = None
    partner_symbol: str | None = None
    acquired_symbol: str | None = None

    @property
    def is_macro(self) -> bool:
        return self.subject_symbol is None


# ============================================================================
# Aggregate root
# ============================================================================

class SimulationState(BaseModel):
    """The whole simulation.

    ``day`` is the last completed day; each company's last price point is the
    in-progress bar for ``day + 1``.
    """

    config: SimulationConfig
    day: int
    time: datetime
    start_date: datetime
    companies: list[Company]
    investors: list[Investor]
    news_picker: NeuralNetwork | None = None
    active_event: Event | None = None
    event_history: list[Event] = Field(default_factory=list)
    event_sequence: int = 0
    market_index_history: list[ValuePoint] = Field(default_factory=list)
    next_macro_event_day: int
    corporate_actions: list[CorporateActionDecision] = Field(default_factory=list)
    news_decisions: list[NewsCategoryDecision] = Field(default_factory=list)
    article_decisions: list[ArticleDecision] = Field(default_factory=list)
    # Learned phrase scores of the article writer, keyed by phrase token.
    article_weights: dict[str, float] = Field(default_factory=dict)

    def company(self, symbol: str) -> Company | None:
        for company in self.companies:
            if company.symbol == symbol:
                return company
        return None

    def investor(self, investor_id: str) -> Investor | None:
        for investor in self.investors:
            if investor.id == investor_id:
                return investor
        return None

    def active_companies(self) -> list[Company]:
        return [c for c in self.companies if not c.is_delisted]

    @property
    def market_index(self) -> float:
        """Latest market index value, 0 before any point exists."""
        if not self.market_index_history:
            return 0.0
        return self.market_index_history[-1].value
