"""Trending topics detection package.

This package contains modules for:
- Keyword extraction (keywords.py)
- Topic state and history (store.py)
- Mention aggregation into time windows (aggregator.py)
- Velocity and trend scoring (score.py)
- Lifecycle tracking (lifecycle.py)
- Keyword clustering (cluster.py)
- Analysis orchestration (pipeline.py)
"""

from .keywords import KeywordExtractor, DEFAULT_STOPWORDS
from .store import TopicStore
from .aggregator import MentionAggregator
from .score import VelocityScorer, VelocityMetrics, TrendScorer
from .lifecycle import LifecycleTracker
from .cluster import ClusterEngine, levenshtein_distance, similarity
from .models import (
    AnalysisResult,
    Cluster,
    LifecycleStage,
    TopicRecord,
    TrendingTopic
)
from .pipeline import AnalysisOptions, TrendingAnalyzer, run_trending

__all__ = [
    # Extraction and aggregation
    'KeywordExtractor',
    'DEFAULT_STOPWORDS',
    'TopicStore',
    'MentionAggregator',

    # Scoring
    'VelocityScorer',
    'VelocityMetrics',
    'TrendScorer',
    'LifecycleTracker',

    # Clustering
    'ClusterEngine',
    'levenshtein_distance',
    'similarity',

    # Results
    'AnalysisResult',
    'Cluster',
    'LifecycleStage',
    'TopicRecord',
    'TrendingTopic',

    # Orchestration
    'AnalysisOptions',
    'TrendingAnalyzer',
    'run_trending'
]
