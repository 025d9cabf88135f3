"""Configuration module for Market Simulator."""
from pydantic import ValidationError

from .loader import load_config
from .schemas import (
    ArticleSettings,
    CompanyConfig,
    CompanyShockEvent,
    CorporateEventConfig,
    CorporateEventPool,
    CorporateSettings,
    EventSchedule,
    MacroEventConfig,
    MacroShockEvent,
    NewsPickerSettings,
    OneTimeSchedule,
    PopulationConfig,
    RepeatingSchedule,
    ScenarioEvent,
    SimulationConfig,
    SimulationSettings,
    StockSplitEvent,
    TaxRegime,
    TradingSettings,
)

__all__ = [
    "ArticleSettings",
    "CompanyConfig",
    "CompanyShockEvent",
    "CorporateEventConfig",
    "CorporateEventPool",
    "CorporateSettings",
    "EventSchedule",
    "MacroEventConfig",
    "MacroShockEvent",
    "NewsPickerSettings",
    "OneTimeSchedule",
    "PopulationConfig",
    "RepeatingSchedule",
    "ScenarioEvent",
    "SimulationConfig",
    "SimulationSettings",
    "StockSplitEvent",
    "TaxRegime",
    "TradingSettings",
    "ValidationError",
    "load_config",
]
