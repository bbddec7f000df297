"""Tests for the topic store and mention aggregation."""

import random
import time
from datetime import timedelta

from trendbot.core.models import Article
from trendbot.core.settings import TrendingConfig
from trendbot.trender.aggregator import MentionAggregator, article_ref
from trendbot.trender.keywords import KeywordExtractor
from trendbot.trender.models import KeywordMention, VelocitySnapshot
from trendbot.trender.store import TopicStore


def article(now, title, minutes_ago=10, article_id=None, credibility=0.8):
    return Article(
        id=article_id,
        title=title,
        published_at=now - timedelta(minutes=minutes_ago),
        source_name='Wire',
        source_credibility=credibility
    )


class TestTopicStore:
    """Record lifecycle inside the store."""

    def setup_method(self):
        self.store = TopicStore()

    def test_get_or_create_returns_same_record(self):
        first = self.store.get_or_create('ai')
        second = self.store.get_or_create('ai')

        assert first is second
        assert len(self.store) == 1
        assert 'ai' in self.store
        assert self.store.get('climate') is None

    def test_custom_history_capacity(self, now):
        store = TopicStore(history_capacity=3)
        record = store.get_or_create('ai')
        for i in range(5):
            store.append_history(record, VelocitySnapshot(now + timedelta(hours=i), 1, 1.0, 0.2, 0.3))

        history = store.get_history('ai')
        assert len(history) == 3
        assert history[0].timestamp == now + timedelta(hours=2)

    def test_history_of_unknown_keyword_is_empty(self):
        assert self.store.get_history('nothing') == []

    def test_purge_removes_old_mentions_and_empty_records(self, now):
        aggregator = MentionAggregator(self.store, KeywordExtractor(), TrendingConfig())
        aggregator.ingest([
            article(now, 'Storm warning', minutes_ago=30 * 60),
            article(now, 'Budget vote', minutes_ago=10),
            article(now, 'Budget storm', minutes_ago=25 * 60),
        ])

        removed = self.store.purge_expired(now - timedelta(hours=24))

        assert removed == ['storm', 'warning']
        assert self.store.keywords() == ['budget', 'vote']
        assert self.store.get('budget').mention_count == 1

    def test_cleanup_is_idempotent(self):
        self.store.get_or_create('ai')
        self.store.cleanup()
        self.store.cleanup()

        assert len(self.store) == 0
        assert self.store.stats() == {'tracked_topics': 0, 'total_mentions': 0, 'history_points': 0}

    def test_iteration_tolerates_mutation(self):
        for keyword in ('a', 'b', 'c'):
            self.store.get_or_create(keyword)

        for record in self.store:
            self.store.get_or_create(record.keyword + 'x')

        assert len(self.store) == 6


class TestMentionAggregator:
    """Mentions, deduplication and window counts."""

    def setup_method(self):
        self.config = TrendingConfig()
        self.store = TopicStore()
        self.aggregator = MentionAggregator(self.store, KeywordExtractor(), self.config)

    def test_one_mention_per_keyword_per_article(self, now):
        touched, added = self.aggregator.ingest([article(now, 'AI beats AI at chess', article_id='a1')])

        assert touched == {'ai', 'beats', 'chess'}
        assert added == 3
        assert self.store.get('ai').mention_count == 1

    def test_same_article_not_counted_twice(self, now):
        batch = [article(now, 'Climate summit', article_id='c1')]
        self.aggregator.ingest(batch)
        touched, added = self.aggregator.ingest(batch)

        assert touched == {'climate', 'summit'}
        assert added == 0
        assert self.store.get('climate').mention_count == 1

    def test_mentions_kept_in_time_order(self, now):
        self.aggregator.ingest([
            article(now, 'Markets rally', minutes_ago=5, article_id='m1'),
            article(now, 'Markets slump', minutes_ago=300, article_id='m2'),
            article(now, 'Markets steady', minutes_ago=60, article_id='m3'),
        ])
        record = self.store.get('markets')

        timestamps = [m.timestamp for m in record.mentions]
        assert timestamps == sorted(timestamps)
        assert record.first_seen == now - timedelta(minutes=300)
        assert record.last_seen == now - timedelta(minutes=5)

    def test_mention_carries_article_reference(self, now):
        item = article(now, 'Vaccine approved', article_id='v1', credibility=0.7)
        mention = next(iter(self.aggregator.mentions_for(item)))

        assert isinstance(mention, KeywordMention)
        assert mention.article == article_ref(item)
        assert mention.credibility == 0.7
        assert mention.timestamp == item.published_at

    def test_window_counts_are_nested(self, now):
        self.aggregator.ingest([
            article(now, 'Storm', minutes_ago=m, article_id=f's{m}')
            for m in (10, 50, 90, 200, 600, 1400)
        ])
        windows = self.aggregator.count_windows(self.store.get('storm'), now)

        assert (windows.short, windows.medium, windows.long) == (2, 4, 6)

    def test_window_boundary_is_inclusive(self, now):
        self.aggregator.ingest([article(now, 'Storm', minutes_ago=60, article_id='edge')])
        windows = self.aggregator.count_windows(self.store.get('storm'), now)

        assert windows.short == 1

    def test_time_distribution(self, now):
        self.aggregator.ingest([
            article(now, 'Storm', minutes_ago=m, article_id=f's{m}')
            for m in (10, 100, 300, 1000)
        ])
        distribution = MentionAggregator.time_distribution(self.store.get('storm'), now)

        assert distribution.to_dict() == {'last_hour': 1, 'last_4_hours': 2, 'last_24_hours': 4}

    def test_large_shuffled_batch(self, now):
        rng = random.Random(42)
        articles = [article(now, f'AI story {i}', minutes_ago=rng.uniform(0, 24 * 60 - 1), article_id=f'ai-{i}')
                    for i in range(6000)]
        rng.shuffle(articles)

        start = time.perf_counter()
        _, added = self.aggregator.ingest(articles)
        _, readded = self.aggregator.ingest(articles[:3000])
        elapsed = time.perf_counter() - start

        record = self.store.get('ai')
        timestamps = [m.timestamp for m in record.mentions]
        assert added == 12000  # 'ai' and 'story' per article
        assert readded == 0
        assert record.mention_count == 6000
        assert timestamps == sorted(timestamps)
        assert record.first_seen == timestamps[0]
        assert record.last_seen == timestamps[-1]
        assert elapsed < 5.0


class TestTopicRecord:
    """Mention bookkeeping on a single record."""

    def test_article_ids_follow_pruning(self, now):
        store = TopicStore()
        aggregator = MentionAggregator(store, KeywordExtractor(), TrendingConfig())
        aggregator.ingest([
            article(now, 'Storm', minutes_ago=30 * 60, article_id='old'),
            article(now, 'Storm', minutes_ago=10, article_id='fresh'),
        ])
        record = store.get('storm')

        assert record.prune_before(now - timedelta(hours=24)) == 1
        assert record.has_article('fresh')
        assert not record.has_article('old')

        # a pruned article can be recorded again
        aggregator.ingest([article(now, 'Storm', minutes_ago=30, article_id='old')])
        assert record.mention_count == 2

    def test_out_of_order_appends_sorted_on_demand(self, now):
        store = TopicStore()
        aggregator = MentionAggregator(store, KeywordExtractor(), TrendingConfig())
        record = store.get_or_create('storm')
        for minutes_ago, article_id in ((10, 'a'), (90, 'b'), (40, 'c')):
            mention = next(iter(aggregator.mentions_for(article(now, 'Storm', minutes_ago, article_id))))
            record.add_mention(mention)

        record.sort_mentions()

        assert [m.article.article_id for m in record.mentions] == ['b', 'c', 'a']
        assert record.first_seen == now - timedelta(minutes=90)
        assert record.last_seen == now - timedelta(minutes=10)
