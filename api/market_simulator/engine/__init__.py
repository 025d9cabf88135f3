"""Simulation core: state records, daily transition and time advancement."""
from .actions import inject_scenario_event, player_buy, player_sell
from .advancer import advance
from .initializer import HUMAN_INVESTOR_ID, initialize
from .models import SimulationState
from .news import (
    Article,
    ArticleGenerator,
    Collaborators,
    ImageLookup,
    PlaceholderImageLookup,
    TemplateArticleGenerator,
)
from .transition import DayReport, run_daily_transition

__all__ = [
    "Article",
    "ArticleGenerator",
    "Collaborators",
    "DayReport",
    "HUMAN_INVESTOR_ID",
    "ImageLookup",
    "PlaceholderImageLookup",
    "SimulationState",
    "TemplateArticleGenerator",
    "advance",
    "initialize",
    "inject_scenario_event",
    "player_buy",
    "player_sell",
    "run_daily_transition",
]
