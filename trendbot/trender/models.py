"""Data types for the trending engine.

TopicRecord is the mutable, store-owned state of a keyword. Everything that
leaves the engine (TrendingTopic, Cluster, AnalysisResult) is a frozen
snapshot so readers never need the store lock.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Deque, Dict, List, Mapping, Optional, Set, Tuple

HISTORY_CAPACITY = 24


class LifecycleStage(str, Enum):
    """Trajectory of a topic based on velocity change since the prior cycle."""
    EMERGING = "emerging"
    RISING = "rising"
    PEAK = "peak"
    DECLINING = "declining"
    FADING = "fading"


@dataclass(frozen=True)
class ArticleRef:
    """Reference to the article behind a mention."""
    article_id: str
    title: str
    source_name: str
    published_at: datetime
    credibility: float
    link: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.article_id,
            'title': self.title,
            'link': self.link,
            'source': self.source_name,
            'published_at': self.published_at.isoformat(),
            'credibility': self.credibility
        }


@dataclass(frozen=True)
class KeywordMention:
    """One occurrence of a keyword in one article."""
    keyword: str
    article: ArticleRef
    timestamp: datetime
    credibility: float


@dataclass(frozen=True)
class WindowCounts:
    """Mentions counted in the short/medium/long windows."""
    short: int = 0
    medium: int = 0
    long: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {'short': self.short, 'medium': self.medium, 'long': self.long}


@dataclass(frozen=True)
class TimeDistribution:
    """Mentions in the last hour, 4 hours and 24 hours."""
    last_hour: int = 0
    last_4_hours: int = 0
    last_24_hours: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'last_hour': self.last_hour,
            'last_4_hours': self.last_4_hours,
            'last_24_hours': self.last_24_hours
        }


@dataclass(frozen=True)
class TopicScores:
    """Scores computed for a topic in one cycle. All but velocity_raw are in [0, 1]."""
    velocity_raw: float = 0.0
    velocity_normalized: float = 0.0
    acceleration: float = 1.0
    volume_score: float = 0.0
    recency_score: float = 0.0
    credibility_score: float = 0.0
    trend_score: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            'velocity_raw': self.velocity_raw,
            'velocity_normalized': self.velocity_normalized,
            'acceleration': self.acceleration,
            'volume': self.volume_score,
            'recency': self.recency_score,
            'credibility': self.credibility_score,
            'trend_score': self.trend_score
        }


@dataclass(frozen=True)
class VelocitySnapshot:
    """Historical entry appended once per cycle."""
    timestamp: datetime
    mentions: int
    velocity_raw: float
    velocity_normalized: float
    trend_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp.isoformat(),
            'mentions': self.mentions,
            'velocity_raw': self.velocity_raw,
            'velocity_normalized': self.velocity_normalized,
            'trend_score': self.trend_score
        }


@dataclass(frozen=True)
class LifecycleAssessment:
    """Lifecycle classification of a topic."""
    stage: LifecycleStage
    confidence: float
    description: str
    velocity_change: float = 0.0
    velocity_change_percent: float = 0.0
    history_length: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'stage': self.stage.value,
            'confidence': self.confidence,
            'description': self.description,
            'velocity_change': self.velocity_change,
            'velocity_change_percent': self.velocity_change_percent,
            'history_length': self.history_length
        }


@dataclass
class TopicRecord:
    """Store-owned state of a keyword across cycles."""
    keyword: str
    mentions: List[KeywordMention] = field(default_factory=list)
    scores: TopicScores = field(default_factory=TopicScores)
    windows: WindowCounts = field(default_factory=WindowCounts)
    history: Deque[VelocitySnapshot] = field(default_factory=lambda: deque(maxlen=HISTORY_CAPACITY))
    lifecycle: Optional[LifecycleAssessment] = None
    first_seen: Optional[datetime] = None
    last_seen: Optional[datetime] = None
    article_ids: Set[str] = field(default_factory=set, repr=False)
    _unsorted: bool = field(default=False, init=False, repr=False, compare=False)

    @property
    def mention_count(self) -> int:
        return len(self.mentions)

    def has_article(self, article_id: str) -> bool:
        return article_id in self.article_ids

    def add_mention(self, mention: KeywordMention) -> None:
        """
        Append a mention.

        Out-of-order appends leave the list unsorted until ``sort_mentions``
        runs, so a batch is sorted once rather than once per mention.
        """
        if self.mentions and mention.timestamp < self.mentions[-1].timestamp:
            self._unsorted = True
        self.mentions.append(mention)
        self.article_ids.add(mention.article.article_id)
        if not self._unsorted:
            self._refresh_seen()

    def sort_mentions(self) -> None:
        """Restore timestamp order after out-of-order appends."""
        if self._unsorted:
            self.mentions.sort(key=lambda m: m.timestamp)
            self._unsorted = False
            self._refresh_seen()

    def prune_before(self, cutoff: datetime) -> int:
        """Drop mentions older than ``cutoff``; return how many were dropped."""
        self.sort_mentions()
        kept = [m for m in self.mentions if m.timestamp >= cutoff]
        dropped = len(self.mentions) - len(kept)
        if dropped:
            self.mentions = kept
            self.article_ids = {m.article.article_id for m in kept}
            self._refresh_seen()
        return dropped

    def _refresh_seen(self) -> None:
        if self.mentions:
            self.first_seen = self.mentions[0].timestamp
            self.last_seen = self.mentions[-1].timestamp
        else:
            self.first_seen = None
            self.last_seen = None

    def snapshot(self, distribution: Optional[TimeDistribution] = None,
                 include_lifecycle: bool = True) -> "TrendingTopic":
        """Freeze the record into a result entry."""
        articles = tuple(sorted(
            (m.article for m in self.mentions),
            key=lambda a: a.published_at,
            reverse=True
        ))
        return TrendingTopic(
            keyword=self.keyword,
            mentions=self.mention_count,
            scores=self.scores,
            windows=self.windows,
            distribution=distribution or TimeDistribution(),
            lifecycle=self.lifecycle if include_lifecycle else None,
            articles=articles,
            first_seen=self.first_seen,
            last_seen=self.last_seen
        )


@dataclass(frozen=True)
class TrendingTopic:
    """Immutable view of a topic as reported in an analysis result."""
    keyword: str
    mentions: int
    scores: TopicScores
    windows: WindowCounts
    distribution: TimeDistribution
    lifecycle: Optional[LifecycleAssessment]
    articles: Tuple[ArticleRef, ...]
    first_seen: Optional[datetime]
    last_seen: Optional[datetime]

    @property
    def trend_score(self) -> float:
        return self.scores.trend_score

    @property
    def velocity(self) -> float:
        return self.scores.velocity_raw

    @property
    def velocity_normalized(self) -> float:
        return self.scores.velocity_normalized

    def to_dict(self) -> Dict[str, Any]:
        return {
            'keyword': self.keyword,
            'mentions': self.mentions,
            'velocity': self.velocity,
            'velocity_normalized': self.velocity_normalized,
            'trend_score': self.trend_score,
            'scores': self.scores.to_dict(),
            'windows': self.windows.to_dict(),
            'distribution': self.distribution.to_dict(),
            'lifecycle': self.lifecycle.to_dict() if self.lifecycle else None,
            'articles': [a.to_dict() for a in self.articles],
            'first_seen': self.first_seen.isoformat() if self.first_seen else None,
            'last_seen': self.last_seen.isoformat() if self.last_seen else None
        }


@dataclass(frozen=True)
class Cluster:
    """Group of similar keywords led by a representative topic."""
    cluster_id: str
    representative: str
    members: Tuple[TrendingTopic, ...]

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def keywords(self) -> List[str]:
        return [t.keyword for t in self.members]

    @property
    def total_mentions(self) -> int:
        return sum(t.mentions for t in self.members)

    @property
    def seed_trend_score(self) -> float:
        return self.members[0].trend_score if self.members else 0.0

    @property
    def avg_trend_score(self) -> float:
        if not self.members:
            return 0.0
        return sum(t.trend_score for t in self.members) / len(self.members)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.cluster_id,
            'main_topic': self.representative,
            'topics': self.keywords,
            'size': self.size,
            'total_mentions': self.total_mentions,
            'avg_trend_score': self.avg_trend_score
        }


@dataclass(frozen=True)
class AnalysisSummary:
    """Aggregate statistics over the trending set."""
    avg_velocity: float = 0.0
    avg_trend_score: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {'avg_velocity': self.avg_velocity, 'avg_trend_score': self.avg_trend_score}


@dataclass(frozen=True)
class AnalysisResult:
    """Immutable output of one analysis cycle."""
    trending: Tuple[TrendingTopic, ...] = ()
    clusters: Tuple[Cluster, ...] = ()
    lifecycle_distribution: Dict[str, int] = field(default_factory=dict)
    summary: AnalysisSummary = field(default_factory=AnalysisSummary)
    skipped_articles: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def keywords(self) -> List[str]:
        return [t.keyword for t in self.trending]

    def get_topic(self, keyword: str) -> Optional[TrendingTopic]:
        for topic in self.trending:
            if topic.keyword == keyword:
                return topic
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'trending': [t.to_dict() for t in self.trending],
            'clusters': [c.to_dict() for c in self.clusters],
            'lifecycle_distribution': dict(self.lifecycle_distribution),
            'summary': self.summary.to_dict(),
            'skipped_articles': self.skipped_articles,
            'metadata': {
                key: dict(value) if isinstance(value, Mapping) else value
                for key, value in self.metadata.items()
            }
        }
