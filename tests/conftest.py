"""Shared fixtures for trender tests."""

from datetime import datetime, timezone, timedelta
from itertools import count

import pytest


NOW = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """Fixed analysis time so window arithmetic is deterministic."""
    return NOW


@pytest.fixture
def make_article(now):
    """Factory for raw article dicts published ``minutes_ago`` before ``now``."""
    ids = count(1)

    def _make(title, minutes_ago=10, credibility=0.9, source='Wire', text='', article_id=None):
        return {
            'id': article_id or f'article-{next(ids)}',
            'title': title,
            'text': text,
            'published_at': now - timedelta(minutes=minutes_ago),
            'source_name': source,
            'source_credibility': credibility,
        }

    return _make


@pytest.fixture
def scenario_articles(make_article):
    """16 articles: 'AI' in 9 of them, 7 inside the last hour."""
    return [
        # AI: rapidly rising
        make_article('AI Revolution: New Breakthrough in Machine Learning', 30, 0.95, 'TechNews'),
        make_article('AI-Powered Tools Transform Industries', 45, 0.98, 'BBC'),
        make_article('AI Safety Concerns Rise Among Experts', 90, 0.97, 'Reuters'),
        make_article('European Union Proposes AI Regulations', 20, 0.92, 'Guardian'),
        make_article('Startup Announces Latest AI Model', 10, 0.90, 'TechCrunch'),
        make_article('Shocking AI Discovery Will Blow Your Mind', 5, 0.30, 'BlogSpot'),
        make_article('Hospitals Adopt AI Diagnostics', 15, 0.95, 'Nature'),
        make_article('AI Chips Drive Semiconductor Rally', 50, 0.96, 'Bloomberg'),
        make_article('Teachers Debate AI In Classrooms', 150, 0.90, 'NPR'),

        # Climate: steady
        make_article('Climate Summit Draws World Leaders', 120, 0.98, 'BBC'),
        make_article('Climate Change Impact Worsens', 110, 0.99, 'Nature'),
        make_article('Climate Technology Shows Promise', 55, 0.98, 'Science'),
        make_article('Climate Policy Debate Intensifies', 30, 0.92, 'Guardian'),

        # Election: old news
        make_article('Election Results Analyzed by Experts', 20 * 60, 0.88, 'CNN'),
        make_article('Election Turnout Breaks Records', 19 * 60, 0.98, 'BBC'),
        make_article('Final Election Numbers Released', 270, 0.97, 'Reuters'),
    ]
