"""Pipeline orchestrator for trending topics.

Coordinates one analysis cycle over a batch of articles:
1. Validation: coerce raw records into Articles, skipping malformed ones
2. Aggregation: extract keywords and append mentions to topic records
3. Expiry: drop mentions and topics outside the long window
4. Scoring: velocity, composite trend score and lifecycle per topic
5. Selection: min_mentions / min_velocity cutoffs, ranking, limit
6. Clustering and lifecycle summary, per options
"""

import time
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from trendbot.core.errors import ArticleValidationError, ConfigurationError
from trendbot.core.logging import get_logger
from trendbot.core.models import Article, coerce_article
from trendbot.core.settings import TrendingConfig
from trendbot.core.time import get_current_utc_time, to_utc
from trendbot.trender.aggregator import MentionAggregator
from trendbot.trender.cluster import ClusterEngine
from trendbot.trender.keywords import KeywordExtractor
from trendbot.trender.lifecycle import LifecycleTracker
from trendbot.trender.models import (
    AnalysisResult,
    AnalysisSummary,
    TopicRecord,
    TrendingTopic,
    VelocitySnapshot,
)
from trendbot.trender.score import TrendScorer, VelocityScorer, rank_topics
from trendbot.trender.store import TopicStore

logger = get_logger(__name__)

ArticleInput = Union[Article, Dict[str, Any]]


class AnalysisOptions(BaseModel):
    """Per-call options for ``TrendingAnalyzer.analyze``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    limit: Optional[int] = Field(default=None, ge=0)  # None: unrestricted
    include_lifecycle: bool = True
    include_clusters: bool = True
    now: Optional[datetime] = None

    @field_validator("now")
    @classmethod
    def normalize_now(cls, v):
        return to_utc(v) if v is not None else None

    @classmethod
    def coerce(cls, options: Union["AnalysisOptions", Dict[str, Any], None]) -> "AnalysisOptions":
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        try:
            return cls(**options)
        except (TypeError, ValidationError) as e:
            raise ConfigurationError(f"Invalid analysis options: {e}") from e


class TrendingAnalyzer:
    """
    Trending topic detection engine.

    Wires keyword extraction, mention aggregation, scoring, lifecycle
    tracking and clustering around an injected TopicStore. The store is
    mutated only inside ``analyze`` and only under its lock, so concurrent
    callers are serialized. Results are immutable snapshots; the last one
    is kept in ``last_result``.
    """

    def __init__(self, config: Union[TrendingConfig, Dict[str, Any], None] = None,
                 store: Optional[TopicStore] = None,
                 stopwords: Optional[Iterable[str]] = None):
        if config is None:
            config = TrendingConfig()
        elif not isinstance(config, TrendingConfig):
            config = TrendingConfig.from_dict(config)

        self.config = config
        self.store = store if store is not None else TopicStore()
        self.extractor = KeywordExtractor(
            min_length=config.min_keyword_length,
            max_length=config.max_keyword_length,
            stopwords=stopwords
        )
        self.aggregator = MentionAggregator(self.store, self.extractor, config)
        self.velocity_scorer = VelocityScorer(config)
        self.trend_scorer = TrendScorer(config)
        self.lifecycle = LifecycleTracker(self.store)
        self.cluster_engine = ClusterEngine.from_config(config)
        self.last_result: Optional[AnalysisResult] = None
        self._cycle = 0
        self._published_cycle = 0

    def validate_articles(self, articles: Optional[Iterable[ArticleInput]]) -> Tuple[List[Article], int]:
        """Coerce raw records into Articles; return (valid, skipped count)."""
        valid: List[Article] = []
        skipped = 0
        for raw in articles or ():
            try:
                valid.append(coerce_article(raw))
            except ArticleValidationError as e:
                skipped += 1
                logger.warning(f"Skipping malformed article: {e}")
        return valid, skipped

    def score_record(self, record: TopicRecord, now: datetime) -> None:
        """Recompute windows and scores for one record."""
        record.windows = self.aggregator.count_windows(record, now)
        velocity = self.velocity_scorer.calculate(record.windows)
        record.scores = self.trend_scorer.score(record.mentions, velocity, now)

    def is_trending(self, record: TopicRecord) -> bool:
        return (
            record.mention_count >= self.config.min_mentions
            and record.scores.velocity_raw >= self.config.min_velocity
        )

    def analyze(self, articles: Optional[Iterable[ArticleInput]] = None,
                options: Union[AnalysisOptions, Dict[str, Any], None] = None) -> AnalysisResult:
        """
        Run one analysis cycle.

        Args:
            articles: Article models or raw dicts; malformed entries are skipped
            options: AnalysisOptions or a dict of them

        Returns:
            AnalysisResult with ranked trending topics, clusters and lifecycle summary

        Raises:
            ConfigurationError: if options are invalid
        """
        options = AnalysisOptions.coerce(options)
        now = options.now or get_current_utc_time()
        start_time = time.time()

        valid, skipped = self.validate_articles(articles)
        logger.info(f"Starting trending analysis: {len(valid)} articles, {skipped} skipped")

        with self.store.lock:
            self._cycle += 1
            cycle = self._cycle
            touched, added = self.aggregator.ingest(valid)
            removed = self.store.purge_expired(now - self.config.long_window)

            qualifying: List[TrendingTopic] = []
            for record in self.store:
                self.score_record(record, now)
                self.lifecycle.update(record, now)
                if self.is_trending(record):
                    qualifying.append(record.snapshot(
                        distribution=self.aggregator.time_distribution(record, now),
                        include_lifecycle=options.include_lifecycle
                    ))
            total_topics = len(self.store)

        ranked = rank_topics(qualifying)
        trending = ranked if options.limit is None else ranked[:options.limit]

        clusters = self.cluster_engine.cluster(ranked) if options.include_clusters else []
        distribution = (
            self.lifecycle.distribution(t.lifecycle for t in ranked)
            if options.include_lifecycle else {}
        )

        result = AnalysisResult(
            trending=tuple(trending),
            clusters=tuple(clusters),
            lifecycle_distribution=MappingProxyType(distribution),
            summary=self.summarize(trending),
            skipped_articles=skipped,
            metadata=MappingProxyType({
                'total_topics': total_topics,
                'qualifying_count': len(ranked),
                'trending_count': len(trending),
                'processed_articles': len(valid),
                'new_mentions': added,
                'touched_topics': len(touched),
                'purged_topics': len(removed),
                'time_window': MappingProxyType({
                    'short': self.config.short_window.total_seconds(),
                    'medium': self.config.medium_window.total_seconds(),
                    'long': self.config.long_window.total_seconds()
                }),
                'timestamp': now.isoformat()
            })
        )
        with self.store.lock:
            # A slower, older cycle never replaces a newer result
            if cycle > self._published_cycle:
                self._published_cycle = cycle
                self.last_result = result

        runtime = time.time() - start_time
        logger.info(f"Trending analysis completed in {runtime:.3f}s: "
                    f"{len(trending)} trending of {total_topics} topics, {len(clusters)} clusters")
        return result

    @staticmethod
    def summarize(trending: List[TrendingTopic]) -> AnalysisSummary:
        if not trending:
            return AnalysisSummary()
        return AnalysisSummary(
            avg_velocity=sum(t.velocity for t in trending) / len(trending),
            avg_trend_score=sum(t.trend_score for t in trending) / len(trending)
        )

    def get_trend_history(self, keyword: str) -> List[VelocitySnapshot]:
        """Historical velocity snapshots for a keyword, oldest first."""
        return self.store.get_history(keyword.lower())

    def get_stats(self) -> Dict[str, Any]:
        stats = self.store.stats()
        stats['clusters'] = len(self.last_result.clusters) if self.last_result else 0
        stats['config'] = self.config.model_dump(mode="json")
        return stats

    def cleanup(self) -> None:
        """Clear all topic state. Idempotent."""
        self.store.cleanup()
        self.last_result = None

    clear_history = cleanup


def run_trending(articles: Iterable[ArticleInput],
                 config: Union[TrendingConfig, Dict[str, Any], None] = None,
                 **options: Any) -> AnalysisResult:
    """One-shot analysis with a fresh store."""
    analyzer = TrendingAnalyzer(config)
    try:
        return analyzer.analyze(articles, options or None)
    finally:
        analyzer.cleanup()
