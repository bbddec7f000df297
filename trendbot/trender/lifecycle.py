"""Lifecycle tracking for trending topics.

Each cycle compares a topic's normalized velocity with the snapshot stored
by the previous cycle and maps the relative change onto a stage:

    pct_change >= +0.50            emerging
    +0.10 <  pct_change < +0.50    rising
    -0.10 <= pct_change <= +0.10   peak
    -0.50 <  pct_change < -0.10    declining
    pct_change <= -0.50            fading

The current snapshot is appended only after classification, so a cycle
never compares against itself.
"""

from collections import Counter
from datetime import datetime
from typing import Dict, Iterable

from trendbot.core.logging import get_logger
from trendbot.trender.models import (
    LifecycleAssessment,
    LifecycleStage,
    TopicRecord,
    VelocitySnapshot,
)
from trendbot.trender.score import EPSILON
from trendbot.trender.store import TopicStore

logger = get_logger(__name__)

MIN_HISTORY_POINTS = 2
EMERGING_THRESHOLD = 0.50
RISING_THRESHOLD = 0.10
DECLINING_THRESHOLD = -0.10
FADING_THRESHOLD = -0.50

INSUFFICIENT_HISTORY_CONFIDENCE = 0.3
BASE_CONFIDENCE = 0.5
CONFIDENCE_PER_POINT = 0.05
MAX_CONFIDENCE = 0.95


def classify_change(pct_change: float) -> LifecycleStage:
    """Map a relative velocity change onto a lifecycle stage."""
    if pct_change >= EMERGING_THRESHOLD:
        return LifecycleStage.EMERGING
    if pct_change > RISING_THRESHOLD:
        return LifecycleStage.RISING
    if pct_change >= DECLINING_THRESHOLD:
        return LifecycleStage.PEAK
    if pct_change > FADING_THRESHOLD:
        return LifecycleStage.DECLINING
    return LifecycleStage.FADING


def history_confidence(history_length: int) -> float:
    """Confidence grows with available history, capped at MAX_CONFIDENCE."""
    if history_length < MIN_HISTORY_POINTS:
        return INSUFFICIENT_HISTORY_CONFIDENCE
    return min(MAX_CONFIDENCE, BASE_CONFIDENCE + CONFIDENCE_PER_POINT * history_length)


def describe(stage: LifecycleStage, pct_change: float) -> str:
    percent = pct_change * 100
    if stage is LifecycleStage.EMERGING:
        return f"Rapidly rising (+{percent:.0f}%)"
    if stage is LifecycleStage.RISING:
        return f"Gaining momentum (+{percent:.0f}%)"
    if stage is LifecycleStage.PEAK:
        return "At peak popularity"
    if stage is LifecycleStage.DECLINING:
        return f"Losing momentum ({percent:.0f}%)"
    return f"Rapidly declining ({percent:.0f}%)"


class LifecycleTracker:
    """Classifies topic stages and maintains their velocity history."""

    def __init__(self, store: TopicStore):
        self.store = store

    def classify(self, record: TopicRecord) -> LifecycleAssessment:
        """Classify a record against its latest stored snapshot."""
        history = record.history
        history_length = len(history)

        if history_length < MIN_HISTORY_POINTS:
            return LifecycleAssessment(
                stage=LifecycleStage.EMERGING,
                confidence=INSUFFICIENT_HISTORY_CONFIDENCE,
                description="Newly detected trend",
                history_length=history_length
            )

        current = record.scores.velocity_normalized
        previous = history[-1].velocity_normalized
        change = current - previous
        pct_change = change / max(previous, EPSILON)
        stage = classify_change(pct_change)

        return LifecycleAssessment(
            stage=stage,
            confidence=history_confidence(history_length),
            description=describe(stage, pct_change),
            velocity_change=change,
            velocity_change_percent=pct_change * 100,
            history_length=history_length
        )

    def update(self, record: TopicRecord, now: datetime) -> LifecycleAssessment:
        """Classify, then append this cycle's snapshot to the record's history."""
        with self.store.lock:
            assessment = self.classify(record)
            record.lifecycle = assessment
            self.store.append_history(record, VelocitySnapshot(
                timestamp=now,
                mentions=record.mention_count,
                velocity_raw=record.scores.velocity_raw,
                velocity_normalized=record.scores.velocity_normalized,
                trend_score=record.scores.trend_score
            ))
        return assessment

    @staticmethod
    def distribution(assessments: Iterable[LifecycleAssessment]) -> Dict[str, int]:
        """Count topics per stage, in stage order; stages with no topics are omitted."""
        counts = Counter(a.stage for a in assessments if a is not None)
        return {stage.value: counts[stage] for stage in LifecycleStage if counts[stage]}
