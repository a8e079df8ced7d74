"""Tests for prompt construction, reply parsing and fallback substitution."""

import asyncio
import json
from dataclasses import replace

import pytest

from agents.summarizer import (
    SYSTEM_PROMPT,
    SummarizationFailure,
    TrendSummarizer,
    build_prompt,
    parse_trends,
    render_item,
)
from models.item import SourceName

VALID_REPLY = json.dumps([
    {
        "topic": "AI Agents",
        "score": 150,
        "summary": "Agents everywhere",
        "sources": ["Reddit", "GitHub", "Reddit"],
        "examples": ["agent-kit"],
    },
    {"topic": "Climate SaaS", "score": -20, "summary": "Carbon tools", "sources": ["Hacker News"]},
])


def _summarize(config, client, items):
    summarizer = TrendSummarizer(config, client=client)
    return asyncio.run(summarizer.summarize_detailed(items))


# --- Prompt ---

def test_render_item_line(item_factory):
    item = item_factory("Agent   kit", SourceName.GITHUB, 4200, description="Build\nagents")
    assert render_item(3, item) == "3. [GitHub] Agent kit: Build agents (Score: 4200)"


def test_render_item_without_description(item_factory):
    assert render_item(1, item_factory("Launch day", SourceName.REDDIT, 7)) == "1. [Reddit] Launch day (Score: 7)"


def test_build_prompt_lists_items_in_order(scenario_items):
    prompt = build_prompt(scenario_items)
    assert "Analyze these 5 tech and startup related items" in prompt
    assert prompt.index("1. [Reddit] reddit-10") < prompt.index("5. [GitHub] github-b")
    assert prompt.rstrip().endswith("Return only valid JSON array, no other text.")


# --- Parsing ---

def test_parse_trends_clamps_and_dedups():
    trends = parse_trends(VALID_REPLY)
    assert [t.topic for t in trends] == ["AI Agents", "Climate SaaS"]
    assert trends[0].score == 100
    assert trends[1].score == 0
    assert trends[0].sources == ["Reddit", "GitHub"]
    assert trends[0].timestamp == trends[1].timestamp


def test_parse_trends_accepts_code_fence_and_wrapper():
    fenced = f"```json\n{VALID_REPLY}\n```"
    assert len(parse_trends(fenced)) == 2
    wrapped = json.dumps({"trends": json.loads(VALID_REPLY)})
    assert len(parse_trends(wrapped)) == 2


def test_parse_trends_drops_unusable_elements():
    reply = json.dumps([{"topic": "Kept", "score": 50}, "noise", {"score": 90}, {"topic": "  "}])
    assert [t.topic for t in parse_trends(reply)] == ["Kept"]


@pytest.mark.parametrize("reply, reason", [
    ("", "empty"),
    (None, "empty"),
    ("Here are the trends: AI is hot.", "unparsable"),
    ('{"topic": "not an array"}', "unparsable"),
    ("[]", "empty"),
])
def test_parse_trends_failures(reply, reason):
    with pytest.raises(SummarizationFailure) as excinfo:
        parse_trends(reply)
    assert excinfo.value.reason == reason


# --- Summarizer ---

def test_live_summary_used_when_valid(config, client_factory, scenario_items):
    client = client_factory(content=VALID_REPLY)
    outcome = _summarize(config, client, scenario_items)

    assert outcome.used_fallback is False
    assert outcome.reason is None
    assert outcome.trends[0].topic == "AI Agents"


def test_request_parameters(config, client_factory, scenario_items):
    client = client_factory(content=VALID_REPLY)
    _summarize(config, client, scenario_items)

    (call,) = client.completions.calls
    assert call["model"] == config.completion_model
    assert call["temperature"] == 0.3
    assert call["max_tokens"] == 2000
    assert call["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert "[Reddit] reddit-50 (Score: 50)" in call["messages"][1]["content"]


@pytest.mark.parametrize("content", ["Sorry, I cannot help with that.", "[]", ""])
def test_bad_reply_falls_back(config, client_factory, scenario_items, content):
    outcome = _summarize(config, client_factory(content=content), scenario_items)

    assert outcome.used_fallback is True
    assert [t.topic for t in outcome.trends] == ["Trending on Reddit", "Trending on GitHub"]


def test_client_error_falls_back(config, client_factory, scenario_items):
    outcome = _summarize(config, client_factory(error=RuntimeError("connection reset")), scenario_items)
    assert outcome.used_fallback is True
    assert outcome.reason == "request_failed"


def test_timeout_falls_back(config, client_factory, scenario_items):
    config = replace(config, completion_timeout=0.05)
    outcome = _summarize(config, client_factory(content=VALID_REPLY, delay=0.5), scenario_items)
    assert outcome.used_fallback is True
    assert outcome.reason == "timeout"


def test_missing_api_key_falls_back(config, scenario_items):
    config = replace(config, completion_api_key="")
    outcome = _summarize(config, None, scenario_items)
    assert outcome.used_fallback is True
    assert outcome.reason == "no_api_key"
    assert 1 <= len(outcome.trends) <= 5


def test_summarize_returns_trends_only(config, client_factory, scenario_items):
    summarizer = TrendSummarizer(config, client=client_factory(content="not json"))
    trends = asyncio.run(summarizer.summarize(scenario_items))
    assert trends[0].score == 30


def test_close_releases_client(config, client_factory):
    client = client_factory(content=VALID_REPLY)
    asyncio.run(TrendSummarizer(config, client=client).close())
    assert client.closed is True
