"""End-to-end tests for TrendPipeline.run with fake connectors and client."""

import asyncio
import json

from agents.summarizer import TrendSummarizer
from models.item import SourceName
from models.trend import Provenance
from pipeline import TrendPipeline

LIVE_REPLY = json.dumps([
    {"topic": "Founder tooling", "score": 81, "summary": "s", "sources": ["Reddit", "GitHub"], "examples": []},
])


class ExplodingSummarizer:
    async def summarize_detailed(self, items):
        raise RuntimeError("summarizer crashed")

    async def close(self):
        pass


def _run(pipeline):
    return asyncio.run(pipeline.run())


def test_all_sources_empty_returns_failure(config, connector_factory, client_factory):
    client = client_factory(content=LIVE_REPLY)
    pipeline = TrendPipeline(
        config,
        connectors=[connector_factory(SourceName.REDDIT), connector_factory(SourceName.GITHUB)],
        summarizer=TrendSummarizer(config, client=client),
    )

    result = _run(pipeline)

    assert result.to_json_dict()["success"] is False
    assert result.error == "No data collected from any source"
    assert result.trends == []
    assert client.completions.calls == []


def test_summarizer_failure_yields_demo_result(config, connector_factory, client_factory, scenario_items):
    reddit = [i for i in scenario_items if i.source is SourceName.REDDIT]
    github = [i for i in scenario_items if i.source is SourceName.GITHUB]
    pipeline = TrendPipeline(
        config,
        connectors=[connector_factory(SourceName.GITHUB, github), connector_factory(SourceName.REDDIT, reddit)],
        summarizer=TrendSummarizer(config, client=client_factory(content="no json here")),
    )

    result = _run(pipeline)

    assert result.success is True
    assert result.source is Provenance.DEMO
    assert result.total_items == 5
    assert 1 <= len(result.trends) <= 5
    reddit_trend, github_trend = result.trends
    assert (reddit_trend.topic, reddit_trend.score) == ("Trending on Reddit", 30)
    assert reddit_trend.examples == ["reddit-50", "reddit-30", "reddit-10"]
    assert (github_trend.topic, github_trend.score) == ("Trending on GitHub", 20)
    assert github_trend.examples == ["github-a", "github-b"]


def test_live_success_is_tagged_live(config, connector_factory, client_factory, item_factory):
    client = client_factory(content=LIVE_REPLY)
    pipeline = TrendPipeline(
        config,
        connectors=[
            connector_factory(SourceName.HACKER_NEWS, [item_factory("hn", SourceName.HACKER_NEWS, 12)]),
            connector_factory(SourceName.REDDIT, error=RuntimeError("down")),
        ],
        summarizer=TrendSummarizer(config, client=client),
    )

    result = _run(pipeline)

    assert result.success is True
    assert result.source is Provenance.LIVE
    assert result.total_items == 1
    assert result.trends[0].topic == "Founder tooling"
    assert "1. [Hacker News] hn (Score: 12)" in client.completions.calls[0]["messages"][1]["content"]


def test_unexpected_error_becomes_failed_result(config, connector_factory, item_factory):
    pipeline = TrendPipeline(
        config,
        connectors=[connector_factory(SourceName.REDDIT, [item_factory("r")])],
        summarizer=ExplodingSummarizer(),
    )

    result = _run(pipeline)

    assert result.success is False
    assert result.error == "summarizer crashed"


def test_close_closes_summarizer(config, client_factory):
    client = client_factory(content=LIVE_REPLY)
    pipeline = TrendPipeline(config, connectors=[], summarizer=TrendSummarizer(config, client=client))
    asyncio.run(pipeline.close())
    assert client.closed is True
