"""Scoring for trending topics.

Two scorers share the mention windows produced by the aggregator:

- VelocityScorer: mentions per hour in the short window, boosted by how
  much faster the short window runs than the medium one (acceleration).
- TrendScorer: weighted composite of velocity, volume, recency and source
  credibility, clamped to [0, 1].
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Sequence

import numpy as np

from trendbot.core.logging import get_logger
from trendbot.core.settings import TrendingConfig
from trendbot.core.time import age_hours
from trendbot.trender.models import KeywordMention, TopicScores, WindowCounts

logger = get_logger(__name__)

# Division guard for sparse data
EPSILON = 1e-9

# Acceleration used when the medium window is empty but the short one is not
ACCELERATION_CAP = 10.0

# raw_velocity * acceleration at or above this maps to normalized velocity 1.0
VELOCITY_SCALE = 5.0

# Mentions at or above this map to volume score 1.0
VOLUME_SCALE = 10.0

WEIGHT_SUM_TOLERANCE = 1e-6


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp to [low, high], mapping NaN to ``low``."""
    if value != value:
        return low
    return float(np.clip(value, low, high))


@dataclass(frozen=True)
class VelocityMetrics:
    """Velocity of a topic in one cycle."""
    raw: float
    medium: float
    acceleration: float
    normalized: float
    short_mentions: int
    medium_mentions: int


class VelocityScorer:
    """Computes raw and normalized mention velocity."""

    def __init__(self, config: TrendingConfig):
        self.config = config

    def acceleration(self, raw_velocity: float, medium_velocity: float) -> float:
        """
        Ratio of short-window rate to medium-window rate (>1 means accelerating).

        With an empty medium window the ratio is 1 when the short window is
        also empty and ACCELERATION_CAP otherwise.
        """
        if medium_velocity > EPSILON:
            return raw_velocity / medium_velocity
        if raw_velocity <= 0:
            return 1.0
        return ACCELERATION_CAP

    def calculate(self, windows: WindowCounts) -> VelocityMetrics:
        raw = windows.short / max(self.config.short_window_hours, EPSILON)
        medium = windows.medium / max(self.config.medium_window_hours, EPSILON)
        acceleration = self.acceleration(raw, medium)

        if windows.short == 0:
            normalized = 0.0
        else:
            normalized = clamp((raw * acceleration) / VELOCITY_SCALE)

        return VelocityMetrics(
            raw=raw,
            medium=medium,
            acceleration=acceleration,
            normalized=normalized,
            short_mentions=windows.short,
            medium_mentions=windows.medium
        )


class TrendScorer:
    """Combines velocity, volume, recency and credibility into one score."""

    def __init__(self, config: TrendingConfig):
        self.config = config
        self.weights: Dict[str, float] = config.weights

        total = sum(self.weights.values())
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            logger.warning(
                f"Scoring weights sum to {total:.3f}, not 1.0; "
                f"trend scores will be clamped to [0, 1]"
            )

    @staticmethod
    def volume_score(mention_count: int) -> float:
        return clamp(mention_count / VOLUME_SCALE)

    def recency_score(self, mentions: Sequence[KeywordMention], now: datetime) -> float:
        """1 for brand-new mentions, falling to 0 at an average age of one medium window."""
        if not mentions:
            return 0.0
        avg_age = float(np.mean([age_hours(m.timestamp, now) for m in mentions]))
        return clamp(1 - avg_age / max(self.config.medium_window_hours, EPSILON))

    @staticmethod
    def credibility_score(mentions: Sequence[KeywordMention]) -> float:
        if not mentions:
            return 0.0
        return clamp(float(np.mean([m.credibility for m in mentions])))

    def combine(self, velocity_normalized: float, volume: float,
                recency: float, credibility: float) -> float:
        total = (
            velocity_normalized * self.weights['velocity']
            + volume * self.weights['volume']
            + recency * self.weights['recency']
            + credibility * self.weights['credibility']
        )
        return clamp(total)

    def score(self, mentions: Sequence[KeywordMention], velocity: VelocityMetrics,
              now: datetime) -> TopicScores:
        volume = self.volume_score(len(mentions))
        recency = self.recency_score(mentions, now)
        credibility = self.credibility_score(mentions)

        return TopicScores(
            velocity_raw=velocity.raw,
            velocity_normalized=velocity.normalized,
            acceleration=velocity.acceleration,
            volume_score=volume,
            recency_score=recency,
            credibility_score=credibility,
            trend_score=self.combine(velocity.normalized, volume, recency, credibility)
        )


def rank_topics(topics: Sequence, limit: Optional[int] = None) -> list:
    """Sort by trend score descending (keyword breaks ties) and apply an optional limit."""
    ranked = sorted(topics, key=lambda t: (-t.trend_score, t.keyword))
    return ranked if limit is None else ranked[:limit]
