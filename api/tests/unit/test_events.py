"""Unit tests for event scheduling, publication and impact resolution."""

import pytest

from market_simulator.config import MacroShockEvent, OneTimeSchedule, RepeatingSchedule
from market_simulator.engine.events import (
    generate_macro_event,
    publish_event,
    resolve_impact,
    schedule_is_due,
)
from market_simulator.engine.news import Collaborators, TemplateArticleGenerator
from market_simulator.sampling import make_rng


@pytest.fixture
def collaborators():
    return Collaborators(articles=TemplateArticleGenerator(rng=make_rng(11)))


class TestScheduleIsDue:
    def test_one_time(self):
        schedule = OneTimeSchedule(day=70)

        assert schedule_is_due(schedule, 70)
        assert not schedule_is_due(schedule, 69)
        assert not schedule_is_due(schedule, 71)

    def test_repeating(self):
        schedule = RepeatingSchedule(start_day=65, interval=10)

        due = [day for day in range(60, 100) if schedule_is_due(schedule, day)]

        assert due == [65, 75, 85, 95]


class TestResolveImpact:
    def test_missing_impact_is_neutral(self, state):
        assert resolve_impact(None, "Global", state.companies[0], 0.25) == 1.0

    def test_global_scalar_applies_everywhere(self, state):
        for company in state.companies:
            assert resolve_impact(0.9, "Global", company, 0.25) == pytest.approx(0.9)

    def test_regional_scalar_is_damped_elsewhere(self, state):
        acme = state.company("ACME")  # North America
        cure = state.company("CURE")  # Europe

        assert resolve_impact(0.8, "Europe", cure, 0.25) == pytest.approx(0.8)
        assert resolve_impact(0.8, "Europe", acme, 0.25) == pytest.approx(0.95)

    def test_keyed_impact_precedence(self, state):
        impact = {"ACME": 1.2, "Technology": 1.1, "Asia": 0.9, "default": 0.99}

        assert resolve_impact(impact, "Global", state.company("ACME"), 0.25) == pytest.approx(1.2)
        assert resolve_impact(impact, "Global", state.company("BYTE"), 0.25) == pytest.approx(1.1)
        assert resolve_impact(impact, "Global", state.company("VOLT"), 0.25) == pytest.approx(0.9)
        assert resolve_impact(impact, "Global", state.company("CURE"), 0.25) == pytest.approx(0.99)

    def test_keyed_impact_spillover(self, state):
        impact = {"Energy": 0.8, "Asia": 0.8}

        value = resolve_impact(impact, "Global", state.company("CURE"), 0.5)

        assert value == pytest.approx(0.9)


class TestPublishEvent:
    def test_event_is_dated_tomorrow_and_filed_first(self, state, collaborators):
        first = publish_event(state, collaborators, name="First", kind="neutral")
        second = publish_event(state, collaborators, name="Second", kind="neutral")

        assert first.id == f"{state.day + 1}-0"
        assert second.id == f"{state.day + 1}-1"
        assert first.day == state.day + 1
        assert [e.name for e in state.event_history] == ["Second", "First"]
        assert second.image_url
        assert second.summary

    def test_history_is_bounded(self, state, collaborators):
        state.config.simulation.event_history_limit = 3

        for i in range(5):
            publish_event(state, collaborators, name=f"E{i}", kind="neutral")

        assert [e.name for e in state.event_history] == ["E4", "E3", "E2"]

    def test_directional_article_is_queued(self, state, collaborators):
        company = state.company("CURE")

        event = publish_event(
            state, collaborators, subject_symbol="CURE", subject_name=company.name,
            name="Trial Succeeds", kind="positive", impact=1.1,
        )

        [decision] = state.article_decisions
        assert decision.event_id == event.id
        assert decision.direction == 1.0
        assert decision.reference_value == company.last_close
        assert decision.evaluation_day == state.day + 1 + state.config.articles.evaluation_horizon

    def test_neutral_article_is_not_queued(self, state, collaborators):
        publish_event(state, collaborators, name="Board Meeting", kind="neutral")

        assert state.article_decisions == []


class TestGenerateMacroEvent:
    def test_nothing_before_first_scheduled_day(self, state, collaborators):
        state.next_macro_event_day = state.day + 10

        assert generate_macro_event(state, make_rng(1), collaborators) is None
        assert state.active_event is None

    def test_picker_event_on_schedule(self, state, collaborators):
        state.next_macro_event_day = state.day + 1
        settings = state.config.news_picker

        event = generate_macro_event(state, make_rng(1), collaborators)

        assert event is not None
        assert event.is_macro
        assert state.active_event is event
        assert event.name in {e.name for e in state.config.macro_events}
        [decision] = state.news_decisions
        assert decision.evaluation_day == state.day + 1 + settings.evaluation_horizon
        assert len(decision.features) == 5
        gap = state.next_macro_event_day - (state.day + 1)
        assert settings.interval_min <= gap < settings.interval_min + settings.interval_range

    def test_disabled_picker_fires_nothing(self, state, collaborators):
        state.config.news_picker.enabled = False
        state.next_macro_event_day = state.day + 1

        assert generate_macro_event(state, make_rng(1), collaborators) is None
        assert state.news_decisions == []

    def test_scheduled_shock_takes_precedence(self, state, collaborators):
        state.config.news_picker.enabled = False
        state.next_macro_event_day = state.day + 1
        state.config.scenario_events.append(
            MacroShockEvent(
                name="Rate Shock", impact=0.9, schedule=OneTimeSchedule(day=state.day + 1)
            )
        )

        event = generate_macro_event(state, make_rng(1), collaborators)

        assert event.name == "Rate Shock"
        assert state.active_event is event
        # The picker schedule and ledger are left alone.
        assert state.next_macro_event_day == state.day + 1
        assert state.news_decisions == []
