"""Tests for deterministic fallback trend synthesis."""

from agents import fallback
from agents.fallback import generate_fallback
from models.item import SourceName


def test_scenario_reddit_then_github(scenario_items):
    trends = generate_fallback(scenario_items)

    assert [t.topic for t in trends] == ["Trending on Reddit", "Trending on GitHub"]
    reddit, github = trends
    assert reddit.score == 30
    assert reddit.examples == ["reddit-50", "reddit-30", "reddit-10"]
    assert reddit.sources == ["Reddit"]
    assert github.score == 20
    assert github.examples == ["github-a", "github-b"]
    assert github.summary == "Popular content from GitHub with 2 relevant items"


def test_is_deterministic(scenario_items):
    first = generate_fallback(scenario_items)
    second = generate_fallback(scenario_items)

    def shape(trends):
        return [(t.topic, t.score, t.examples, t.sources) for t in trends]

    assert shape(first) == shape(second)


def test_groups_follow_encounter_order_not_score(item_factory):
    items = [
        item_factory("hn", SourceName.HACKER_NEWS, 1),
        item_factory("gh", SourceName.GITHUB, 9000),
        item_factory("hn2", SourceName.HACKER_NEWS, 2),
    ]
    topics = [t.topic for t in generate_fallback(items)]
    assert topics == ["Trending on Hacker News", "Trending on GitHub"]


def test_score_caps_at_100_and_examples_at_three(item_factory):
    items = [item_factory(f"post-{i}", SourceName.REDDIT, i) for i in range(15)]
    (trend,) = generate_fallback(items)
    assert trend.score == 100
    assert trend.examples == ["post-14", "post-13", "post-12"]


def test_one_trend_per_source(item_factory):
    items = [item_factory(f"{source.value}-{i}", source, i) for source in SourceName for i in range(2)]
    trends = generate_fallback(items)
    assert [t.sources for t in trends] == [[source.value] for source in SourceName]


def test_trend_count_is_capped(monkeypatch, item_factory):
    monkeypatch.setattr(fallback, "MAX_FALLBACK_TRENDS", 2)
    items = [item_factory(f"{source.value}-{i}", source, i) for source in SourceName for i in range(2)]
    topics = [t.topic for t in generate_fallback(items)]
    assert topics == ["Trending on Reddit", "Trending on GitHub"]


def test_empty_input_gives_no_trends():
    assert generate_fallback([]) == []
