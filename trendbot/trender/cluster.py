"""Clustering of related trending keywords.

Keywords are compared with a normalized Levenshtein similarity and grouped
greedily: the highest-scoring unclustered topic seeds a cluster and absorbs
every remaining unclustered topic similar enough to it, until the cluster
is full.
"""

from typing import List, Sequence, Set

from rapidfuzz.distance import Levenshtein

from trendbot.core.logging import get_logger
from trendbot.core.settings import TrendingConfig
from trendbot.trender.models import Cluster, TrendingTopic
from trendbot.trender.score import rank_topics

logger = get_logger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.6
DEFAULT_MAX_CLUSTER_SIZE = 10


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit substitution, insertion and deletion costs."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """1 - levenshtein(a, b) / max(len(a), len(b)), case-insensitive, in [0, 1]."""
    a = a.lower()
    b = b.lower()
    if not a and not b:
        return 1.0
    return Levenshtein.normalized_similarity(a, b)


class ClusterEngine:
    """Greedy keyword clustering over the trending set."""

    def __init__(self, similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
                 max_cluster_size: int = DEFAULT_MAX_CLUSTER_SIZE):
        self.similarity_threshold = similarity_threshold
        self.max_cluster_size = max_cluster_size

    @classmethod
    def from_config(cls, config: TrendingConfig) -> "ClusterEngine":
        return cls(config.similarity_threshold, config.max_cluster_size)

    def cluster(self, topics: Sequence[TrendingTopic]) -> List[Cluster]:
        """
        Partition topics into clusters of similar keywords.

        Args:
            topics: Trending topics, in any order

        Returns:
            Clusters ranked by their seed's trend score
        """
        ordered = rank_topics(topics)
        clustered: Set[str] = set()
        clusters: List[Cluster] = []

        for seed in ordered:
            if seed.keyword in clustered:
                continue
            clustered.add(seed.keyword)
            members = [seed]

            for other in ordered:
                if len(members) >= self.max_cluster_size:
                    break
                if other.keyword in clustered:
                    continue
                if similarity(seed.keyword, other.keyword) >= self.similarity_threshold:
                    members.append(other)
                    clustered.add(other.keyword)

            clusters.append(Cluster(
                cluster_id=f"cluster_{len(clusters) + 1}",
                representative=seed.keyword,
                members=tuple(members)
            ))

        logger.debug(f"Clustered {len(ordered)} topics into {len(clusters)} clusters")
        return clusters
