#!/usr/bin/env python3
"""
Demo script showing a trending analysis over sample articles.

Runs two cycles on the same analyzer:
1. A first batch of articles (everything is "emerging")
2. A second batch an hour later, where lifecycle stages start to move
"""

import json
from datetime import datetime, timezone, timedelta

from trendbot.core.logging import setup_logging
from trendbot.core.settings import load_trending_config
from trendbot.trender import TrendingAnalyzer


def create_sample_articles(now, batch):
    """Sample articles around a few stories."""
    def article(idx, title, minutes_ago, source, credibility):
        return {
            'id': f'demo-{batch}-{idx}',
            'title': title,
            'publishedAt': (now - timedelta(minutes=minutes_ago)).isoformat(),
            'source': {'name': source, 'credibility': credibility},
        }

    return [
        article(1, 'AI breakthrough in machine learning', 30, 'TechNews', 0.95),
        article(2, 'AI tools transform industries', 45, 'BBC', 0.98),
        article(3, 'Experts warn about AI safety', 20, 'Reuters', 0.97),
        article(4, 'Europe proposes AI regulation', 10, 'Guardian', 0.92),
        article(5, 'Climate summit draws world leaders', 120, 'BBC', 0.98),
        article(6, 'Climate policy debate intensifies', 50, 'Guardian', 0.92),
        article(7, 'Climate technology shows promise', 40, 'Science', 0.98),
        article(8, 'Election results analyzed', 600, 'CNN', 0.88),
        article(9, 'Election turnout breaks records', 400, 'BBC', 0.98),
        article(10, 'Final election numbers released', 240, 'Reuters', 0.97),
    ]


def main():
    setup_logging("demo")
    analyzer = TrendingAnalyzer(load_trending_config())
    now = datetime.now(timezone.utc)

    print("=== Cycle 1 ===")
    result = analyzer.analyze(create_sample_articles(now, 1), {'now': now, 'limit': 10})
    print(json.dumps(result.to_dict()['summary'], indent=2))

    later = now + timedelta(hours=1)
    print("\n=== Cycle 2 (one hour later) ===")
    result = analyzer.analyze(create_sample_articles(later, 2), {'now': later, 'limit': 10})

    for topic in result.trending:
        stage = topic.lifecycle.stage.value if topic.lifecycle else '-'
        print(f"  {topic.keyword:<12} score={topic.trend_score:.3f} "
              f"velocity={topic.velocity:.2f}/h mentions={topic.mentions} stage={stage}")

    print("\nClusters:")
    for cluster in result.clusters:
        print(f"  {cluster.cluster_id}: {', '.join(cluster.keywords)}")

    print("\nLifecycle distribution:", dict(result.lifecycle_distribution))
    analyzer.cleanup()


if __name__ == "__main__":
    main()
