"""Article and illustration collaborators.

The engine only needs strings back from an article writer, plus an opaque
trace it returns through ``reinforce`` once the article's market outcome is
known. ``TemplateArticleGenerator`` is the bundled writer: a slot grammar
whose phrase choices are weighted by learnable scores.
"""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

import numpy as np

from market_simulator.engine.indicators import mean_impact
from market_simulator.engine.models import Company, Event, SimulationState
from market_simulator.sampling.seed_manager import SeedManager

logger = logging.getLogger(__name__)

Sentiment = Literal["positive", "negative", "neutral"]


@dataclass
class Article:
    """Generated copy for an event."""

    headline: str
    summary: str
    body: str
    trace: Any = None


class ArticleGenerator(Protocol):
    """Writes articles and learns from their outcomes."""

    def generate(self, event: Event, state: SimulationState) -> Article:
        ...

    def reinforce(self, trace: Any, outcome: float, state: SimulationState) -> None:
        ...


class ImageLookup(Protocol):
    """Finds an illustration for a headline."""

    def pick_image(self, headline: str, *keywords: str) -> str:
        ...


def article_sentiment(event: Event) -> Sentiment:
    """Tone an article about ``event`` should take."""
    if event.kind in ("positive", "split", "alliance", "merger"):
        return "positive"
    if event.kind in ("negative", "disaster", "political") and event.impact is not None:
        if mean_impact(event.impact) < 1:
            return "negative"
    return "neutral"


def article_direction(event: Event) -> float:
    """Expected price direction implied by the article's tone."""
    return {"positive": 1.0, "negative": -1.0, "neutral": 0.0}[article_sentiment(event)]


# ============================================================================
# Template writer
# ============================================================================

# slot -> [(token, template)]; templates are formatted with the article context.
_PHRASES: dict[str, list[tuple[str, str]]] = {
    "subject_company": [
        ("subject_company.shares", "Shares of {name}"),
        ("subject_company.ticker", "{name} ({symbol})"),
        ("subject_company.sector", "The {sector} firm"),
    ],
    "subject_market": [
        ("subject_market.broad", "The broader market"),
        ("subject_market.sentiment", "Investor sentiment"),
        ("subject_market.economy", "The global economy"),
    ],
    "verb_positive": [
        ("verb_positive.surged", "surged"),
        ("verb_positive.climbed", "climbed"),
        ("verb_positive.rallied", "rallied"),
        ("verb_positive.soared", "soared"),
    ],
    "verb_negative": [
        ("verb_negative.plummeted", "plummeted"),
        ("verb_negative.tumbled", "tumbled"),
        ("verb_negative.slumped", "slumped"),
        ("verb_negative.headwinds", "faced headwinds"),
    ],
    "verb_neutral": [
        ("verb_neutral.reported", "reported little change"),
        ("verb_neutral.steady", "remained steady"),
        ("verb_neutral.flat", "traded flat"),
    ],
    "connector": [
        ("connector.as", "as investors weighed"),
        ("connector.following", "following"),
        ("connector.back", "on the back of"),
        ("connector.amid", "amid"),
    ],
    "quote_positive": [
        ("quote_positive.leadership",
         '"This is a clear and decisive move that demonstrates their market leadership," commented one analyst.'),
        ("quote_positive.upside", '"We see meaningful upside from here," said a portfolio manager.'),
    ],
    "quote_negative": [
        ("quote_negative.headwind",
         '"The situation is developing, but this is a major headwind," stated a market expert.'),
        ("quote_negative.caution", '"We would stay cautious until the dust settles," one strategist warned.'),
    ],
    "quote_neutral": [
        ("quote_neutral.nonevent",
         '"This appears to be a non-event for long-term valuations," an analyst noted.'),
        ("quote_neutral.wait", '"Markets are waiting for more data," a trader said.'),
    ],
    "outlook_positive": [
        ("outlook_positive.momentum", "Looking ahead, the outlook appears well-positioned to build on this momentum."),
    ],
    "outlook_negative": [
        ("outlook_negative.recovery", "The road to recovery looks challenging, with uncertainty clouding the outlook."),
    ],
    "outlook_neutral": [
        ("outlook_neutral.unchanged", "The outlook remains largely unchanged as investors digest the news."),
    ],
}

_TOKENS = frozenset(token for phrases in _PHRASES.values() for token, _ in phrases)

_OBJECTS: dict[str, str] = {
    "split": "a {ratio}-for-1 stock split",
    "alliance": "a major strategic alliance",
    "merger": "a major acquisition",
    "positive": "{event}",
    "negative": "{event}",
    "neutral": "{event}",
    "political": "rising geopolitical tensions",
    "disaster": "a large-scale disaster",
}


def _sentence_case(text: str) -> str:
    text = re.sub(r"\s+([,.])", r"\1", text.strip())
    return text[:1].upper() + text[1:]


class TemplateArticleGenerator:
    """Slot-grammar article writer with reinforceable phrase weights.

    Each slot picks one phrase by softmax over the phrases' weights. The keys
    of the chosen phrases form the trace; ``reinforce`` moves each of their
    weights toward the outcome, so phrases used in articles that preceded
    the predicted move are favoured later.

    The weights live in ``state.article_weights`` so they travel with the
    state through advances and checkpoints. Without a fixed ``rng`` each
    article draws from a stream derived from the simulation seed and the
    event id.
    """

    def __init__(
        self,
        rng: np.random.Generator | None = None,
        learning_rate: float | None = None,
        temperature: float = 0.8,
    ) -> None:
        self.rng = rng
        self.learning_rate = learning_rate
        self.temperature = temperature

    def _rng_for(self, event: Event, state: SimulationState) -> np.random.Generator:
        if self.rng is not None:
            return self.rng
        return SeedManager(state.config.simulation.rng_seed).article_rng(event.id)

    def _pick(
        self,
        slot: str,
        trace: list[str],
        weights: dict[str, float],
        rng: np.random.Generator,
    ) -> str:
        phrases = _PHRASES[slot]
        logits = np.array([weights.get(token, 0.0) for token, _ in phrases]) / self.temperature
        probs = np.exp(logits - logits.max())
        probs /= probs.sum()
        token, template = phrases[int(rng.choice(len(phrases), p=probs))]
        trace.append(token)
        return template

    def generate(self, event: Event, state: SimulationState) -> Article:
        company = state.company(event.subject_symbol) if event.subject_symbol else None
        sentiment = article_sentiment(event)
        rng = self._rng_for(event, state)
        weights = state.article_weights
        trace: list[str] = []
        context = {
            "name": company.name if company else "The market",
            "symbol": company.symbol if company else "MARKET",
            "sector": company.sector if company else "global economy",
            "event": event.name.lower(),
            "ratio": event.split_ratio or 2,
        }

        subject = self._pick("subject_company" if company else "subject_market", trace, weights, rng)
        verb = self._pick(f"verb_{sentiment}", trace, weights, rng)
        connector = self._pick("connector", trace, weights, rng)
        lead = f"{subject} {verb} {connector} {_OBJECTS[event.kind]}, {_price_detail(company)}."
        quote = self._pick(f"quote_{sentiment}", trace, weights, rng)
        outlook = self._pick(f"outlook_{sentiment}", trace, weights, rng)

        summary = _sentence_case(lead.format(**context))
        body = " ".join([summary, event.description, quote, outlook]).replace("  ", " ")
        return Article(headline=event.name, summary=summary, body=body.strip(), trace=trace)

    def reinforce(self, trace: Any, outcome: float, state: SimulationState) -> None:
        if not isinstance(trace, list):
            logger.warning("Ignoring article trace of type %s", type(trace).__name__)
            return
        lr = self.learning_rate
        if lr is None:
            lr = state.config.articles.learning_rate
        weights = state.article_weights
        for token in trace:
            if token in _TOKENS:
                current = weights.get(token, 0.0)
                weights[token] = current + lr * (outcome - current)


def _price_detail(company: Company | None) -> str:
    if company is None or len(company.price_history) < 2:
        return "with spillover effects across the global economy"
    close = company.price_history[-1].close
    previous = company.price_history[-2].close
    change = (close - previous) / previous * 100 if previous > 0 else 0.0
    return f"trading at ${close:.2f}, a move of {change:+.2f}%"


class PlaceholderImageLookup:
    """Deterministic placeholder illustrations keyed by the keywords."""

    def __init__(self, base_url: str = "https://picsum.photos/seed") -> None:
        self.base_url = base_url.rstrip("/")

    def pick_image(self, headline: str, *keywords: str) -> str:
        key = "|".join(k for k in keywords if k) or headline
        digest = hashlib.sha256(key.encode()).hexdigest()[:12]
        return f"{self.base_url}/{digest}/800/450"


@dataclass
class Collaborators:
    """External services the daily transition calls out to."""

    articles: ArticleGenerator = field(default_factory=TemplateArticleGenerator)
    images: ImageLookup = field(default_factory=PlaceholderImageLookup)
