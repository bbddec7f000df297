"""Tests for keyword similarity and greedy clustering."""

import pytest

from trendbot.trender.cluster import ClusterEngine, levenshtein_distance, similarity
from trendbot.trender.models import TimeDistribution, TopicScores, TrendingTopic, WindowCounts


def topic(keyword, trend_score, mentions=5):
    return TrendingTopic(
        keyword=keyword,
        mentions=mentions,
        scores=TopicScores(trend_score=trend_score),
        windows=WindowCounts(),
        distribution=TimeDistribution(),
        lifecycle=None,
        articles=(),
        first_seen=None,
        last_seen=None
    )


class TestLevenshtein:
    """Edit distance."""

    @pytest.mark.parametrize('a, b, expected', [
        ('', '', 0),
        ('abc', '', 3),
        ('', 'abc', 3),
        ('kitten', 'sitting', 3),
        ('flaw', 'lawn', 2),
        ('election', 'elections', 1),
        ('technology', 'tech', 6),
        ('same', 'same', 0),
    ])
    def test_distance(self, a, b, expected):
        assert levenshtein_distance(a, b) == expected
        assert levenshtein_distance(b, a) == expected


class TestSimilarity:
    """Normalized similarity."""

    @pytest.mark.parametrize('keyword', ['ai', 'climate', 'x', 'technology'])
    def test_identity(self, keyword):
        assert similarity(keyword, keyword) == 1.0

    @pytest.mark.parametrize('a, b', [
        ('technology', 'tech'),
        ('climate', 'weather'),
        ('artificial', 'intelligence'),
        ('election', 'elections'),
    ])
    def test_symmetry_and_bounds(self, a, b):
        value = similarity(a, b)
        assert value == similarity(b, a)
        assert 0.0 <= value <= 1.0

    def test_reference_values(self):
        assert similarity('technology', 'tech') == pytest.approx(0.4)
        assert similarity('election', 'elections') == pytest.approx(8 / 9)
        assert similarity('climate', 'weather') < 0.5

    @pytest.mark.parametrize('a, b', [
        ('kitten', 'sitting'),
        ('storm', 'stormy'),
        ('budget', 'vaccine'),
        ('a', ''),
    ])
    def test_matches_normalized_edit_distance(self, a, b):
        expected = 1 - levenshtein_distance(a, b) / max(len(a), len(b))
        assert similarity(a, b) == pytest.approx(expected)

    def test_case_insensitive(self):
        assert similarity('AI', 'ai') == 1.0

    def test_empty_strings(self):
        assert similarity('', '') == 1.0
        assert similarity('', 'ai') == 0.0


class TestClusterEngine:
    """Greedy clustering."""

    def test_similar_keywords_grouped_under_highest_scorer(self):
        engine = ClusterEngine(similarity_threshold=0.6, max_cluster_size=10)
        topics = [topic('elections', 0.7), topic('election', 0.9), topic('climate', 0.8)]

        clusters = engine.cluster(topics)

        assert [c.representative for c in clusters] == ['election', 'climate']
        assert clusters[0].keywords == ['election', 'elections']
        assert clusters[0].cluster_id == 'cluster_1'
        assert clusters[0].total_mentions == 10
        assert clusters[0].avg_trend_score == pytest.approx(0.8)

    def test_clusters_ranked_by_seed_score(self):
        engine = ClusterEngine()
        clusters = engine.cluster([topic('budget', 0.2), topic('storm', 0.9), topic('vaccine', 0.5)])
        scores = [c.seed_trend_score for c in clusters]
        assert scores == sorted(scores, reverse=True)

    def test_every_topic_in_exactly_one_cluster(self):
        engine = ClusterEngine(similarity_threshold=0.3)
        keywords = ['market', 'markets', 'marked', 'storm', 'storms', 'stormy', 'budget', 'budgets']
        topics = [topic(k, 1.0 - i * 0.05) for i, k in enumerate(keywords)]

        clustered = [k for c in engine.cluster(topics) for k in c.keywords]

        assert sorted(clustered) == sorted(keywords)

    def test_cluster_size_is_bounded(self):
        engine = ClusterEngine(similarity_threshold=0.5, max_cluster_size=3)
        topics = [topic(f'storm{suffix}', 0.9 - i * 0.01)
                  for i, suffix in enumerate(['', 's', 'y', 'ed', 'er', 'ing'])]

        clusters = engine.cluster(topics)

        assert all(c.size <= 3 for c in clusters)
        assert sum(c.size for c in clusters) == len(topics)

    def test_threshold_zero_groups_everything_up_to_cap(self):
        engine = ClusterEngine(similarity_threshold=0.0, max_cluster_size=10)
        clusters = engine.cluster([topic(k, 0.5) for k in ('alpha', 'beta', 'gamma')])
        assert len(clusters) == 1

    def test_threshold_one_only_groups_identical(self):
        engine = ClusterEngine(similarity_threshold=1.0)
        clusters = engine.cluster([topic('alpha', 0.5), topic('alphas', 0.3)])
        assert [c.size for c in clusters] == [1, 1]

        relaxed = ClusterEngine(similarity_threshold=0.8)
        assert [c.size for c in relaxed.cluster([topic('alpha', 0.5), topic('alphas', 0.3)])] == [2]

    def test_empty_input(self):
        assert ClusterEngine().cluster([]) == []
