"""Event publication, macro event selection and price impact resolution."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np

from market_simulator.config.catalog import NEWS_EVENT_CATEGORIES, NEWS_PICKER_NEURONS
from market_simulator.config.schemas import (
    EventSchedule,
    MacroShockEvent,
    OneTimeSchedule,
    RepeatingSchedule,
)
from market_simulator.engine.indicators import compute_market_indicators, mean_impact, vectorize
from market_simulator.engine.ledger import DeferredOutcomeLedger
from market_simulator.engine.models import (
    ArticleDecision,
    Company,
    Event,
    NewsCategoryDecision,
    SimulationState,
)
from market_simulator.engine.network import feed_forward
from market_simulator.engine.news import Collaborators, article_direction

logger = logging.getLogger(__name__)


def schedule_is_due(schedule: EventSchedule, day: int) -> bool:
    """Whether a scenario schedule fires on ``day``."""
    match schedule:
        case OneTimeSchedule(day=d):
            return day == d
        case RepeatingSchedule(start_day=start, interval=interval):
            return day >= start and (day - start) % interval == 0
        case _:
            raise ValueError(f"Unknown schedule type: {type(schedule)}")


def resolve_impact(
    impact: float | Mapping[str, float] | None,
    event_region: str,
    company: Company,
    spillover_damping: float,
) -> float:
    """Price multiplier an event applies to one company.

    Keyed impacts apply directly when they name the company's symbol, sector
    or region (or carry a ``default``); scalar impacts apply directly inside
    the event's region or everywhere for global events. Anything else feels a
    damped spillover of the average impact.
    """
    match impact:
        case None:
            return 1.0
        case Mapping():
            for key in (company.symbol, company.sector, company.region, "default"):
                if key in impact:
                    return float(impact[key])
            return 1.0 + (mean_impact(impact) - 1.0) * spillover_damping
        case _:
            if event_region in ("Global", company.region):
                return float(impact)
            return 1.0 + (float(impact) - 1.0) * spillover_damping


def publish_event(
    state: SimulationState,
    collaborators: Collaborators,
    keywords: Sequence[str | None] = (),
    **fields: Any,
) -> Event:
    """Create an event dated tomorrow, write its article and file it.

    The article is queued for reinforcement unless its tone is neutral.

    Args:
        state: Simulation state (mutated).
        collaborators: Article writer and image lookup.
        keywords: Hints for the illustration lookup.
        **fields: Event fields other than id, day and the generated copy.

    Returns:
        The published event, already at the head of ``event_history``.
    """
    settings = state.config.simulation
    next_day = state.day + 1
    draft = Event(id=f"{next_day}-{state.event_sequence}", day=next_day, **fields)
    state.event_sequence += 1

    article = collaborators.articles.generate(draft, state)
    image_url = collaborators.images.pick_image(article.headline, *(k for k in keywords if k))
    event = draft.model_copy(
        update={
            "headline": article.headline,
            "summary": article.summary,
            "body": article.body,
            "image_url": image_url,
        }
    )

    state.event_history.insert(0, event)
    del state.event_history[settings.event_history_limit:]

    direction = article_direction(event)
    if direction != 0:
        subject = state.company(event.subject_symbol) if event.subject_symbol else None
        reference = subject.last_close if subject else state.market_index
        DeferredOutcomeLedger(state.article_decisions).record(
            ArticleDecision(
                created_day=next_day,
                evaluation_day=next_day + state.config.articles.evaluation_horizon,
                reference_value=reference,
                event_id=event.id,
                subject_symbol=event.subject_symbol,
                direction=direction,
                trace=article.trace,
            )
        )
    return event


def generate_macro_event(
    state: SimulationState,
    rng: np.random.Generator,
    collaborators: Collaborators,
) -> Event | None:
    """Fire today's macro event, if any, and make it the active event.

    A scheduled macro shock takes precedence and leaves the regular schedule
    untouched. Otherwise, on a macro day, the news picker scores the event
    categories from market-wide indicators, an event is drawn from the best
    category's pool (or from every macro event when that pool is empty), and
    the choice is queued for evaluation.
    """
    config = state.config
    next_day = state.day + 1

    for scenario in config.scenario_events:
        if isinstance(scenario, MacroShockEvent) and schedule_is_due(scenario.schedule, next_day):
            event = publish_event(
                state,
                collaborators,
                keywords=("macro", scenario.kind),
                name=scenario.name,
                description=scenario.description,
                kind=scenario.kind,
                impact=scenario.impact,
                region=scenario.region,
            )
            state.active_event = event
            logger.info("Day %d: scheduled macro shock %r", next_day, scenario.name)
            return event

    settings = config.news_picker
    if not settings.enabled or not config.macro_events or state.news_picker is None:
        return None
    if next_day < state.next_macro_event_day:
        return None

    features = compute_market_indicators(
        state.companies, state.market_index_history, state.event_history, next_day
    )
    vector = vectorize(features, NEWS_PICKER_NEURONS)
    category_index = int(np.argmax(feed_forward(state.news_picker, vector)))
    category = NEWS_EVENT_CATEGORIES[category_index]

    pool = [e for e in config.macro_events if e.category == category]
    if not pool:
        pool = list(config.macro_events)
    template = pool[int(rng.integers(len(pool)))]

    event = publish_event(
        state,
        collaborators,
        keywords=("macro", template.kind),
        name=template.name,
        description=template.description,
        kind=template.kind,
        impact=template.impact,
        region=template.region,
        category=category,
    )
    state.active_event = event

    DeferredOutcomeLedger(state.news_decisions).record(
        NewsCategoryDecision(
            created_day=next_day,
            evaluation_day=next_day + settings.evaluation_horizon,
            reference_value=state.market_index,
            features=vector.tolist(),
            category_index=category_index,
            direction=float(np.sign(mean_impact(template.impact) - 1.0)),
        )
    )
    state.next_macro_event_day = (
        next_day + settings.interval_min + int(rng.integers(settings.interval_range))
    )
    logger.info("Day %d: macro event %r from category %s", next_day, template.name, category)
    return event
