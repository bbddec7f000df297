"""Aggregation of keyword mentions into topic records and time windows."""

from datetime import datetime, timedelta
from typing import Iterable, Set, Tuple

from trendbot.core.logging import get_logger
from trendbot.core.models import Article
from trendbot.core.settings import TrendingConfig
from trendbot.core.time import within_window
from trendbot.trender.keywords import KeywordExtractor
from trendbot.trender.models import (
    ArticleRef,
    KeywordMention,
    TimeDistribution,
    TopicRecord,
    WindowCounts,
)
from trendbot.trender.store import TopicStore

logger = get_logger(__name__)

# Fixed reporting buckets, independent of the configured windows
DISTRIBUTION_BUCKETS = (timedelta(hours=1), timedelta(hours=4), timedelta(hours=24))


def article_ref(article: Article) -> ArticleRef:
    return ArticleRef(
        article_id=article.id,
        title=article.title,
        source_name=article.source_name,
        published_at=article.published_at,
        credibility=article.source_credibility,
        link=article.link
    )


class MentionAggregator:
    """Appends keyword mentions to topic records and counts them per window."""

    def __init__(self, store: TopicStore, extractor: KeywordExtractor, config: TrendingConfig):
        self.store = store
        self.extractor = extractor
        self.config = config

    def mentions_for(self, article: Article) -> Iterable[KeywordMention]:
        """Yield one mention per distinct keyword found in the article."""
        ref = article_ref(article)
        for keyword in sorted(self.extractor.extract(article.content)):
            yield KeywordMention(
                keyword=keyword,
                article=ref,
                timestamp=article.published_at,
                credibility=article.source_credibility
            )

    def ingest(self, articles: Iterable[Article]) -> Tuple[Set[str], int]:
        """
        Record mentions for every (article, keyword) pair.

        An article already recorded for a keyword is not recorded again.
        Each touched record is sorted once after the whole batch is in.

        Returns:
            (touched keywords, number of new mentions)
        """
        touched: Set[str] = set()
        added = 0

        with self.store.lock:
            for article in articles:
                for mention in self.mentions_for(article):
                    record = self.store.get_or_create(mention.keyword)
                    touched.add(mention.keyword)
                    if record.has_article(mention.article.article_id):
                        continue
                    record.add_mention(mention)
                    added += 1

            for keyword in touched:
                self.store.get(keyword).sort_mentions()

        logger.debug(f"Aggregated {added} new mentions across {len(touched)} keywords")
        return touched, added

    def count_windows(self, record: TopicRecord, now: datetime) -> WindowCounts:
        """Count the record's mentions in the short, medium and long windows."""
        short = medium = long = 0
        for mention in record.mentions:
            if within_window(mention.timestamp, now, self.config.short_window):
                short += 1
            if within_window(mention.timestamp, now, self.config.medium_window):
                medium += 1
            if within_window(mention.timestamp, now, self.config.long_window):
                long += 1
        return WindowCounts(short=short, medium=medium, long=long)

    @staticmethod
    def time_distribution(record: TopicRecord, now: datetime) -> TimeDistribution:
        counts = [
            sum(1 for m in record.mentions if within_window(m.timestamp, now, bucket))
            for bucket in DISTRIBUTION_BUCKETS
        ]
        return TimeDistribution(last_hour=counts[0], last_4_hours=counts[1], last_24_hours=counts[2])
