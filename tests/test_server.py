"""Tests for the aiohttp HTTP adapter."""

import asyncio

from aiohttp import test_utils

from models.trend import Trend, TrendResult
from server import create_app
from storage import save_result


class FakePipeline:
    def __init__(self, result):
        self.result = result
        self.runs = 0
        self.closed = False

    async def run(self):
        self.runs += 1
        return self.result

    async def close(self):
        self.closed = True


def _live_result(topic="AI Agents"):
    return TrendResult.ok([Trend(topic=topic, score=88, sources=["Reddit"])], total_items=4)


def _request(config, pipeline, path):
    async def go():
        app = create_app(config, pipeline=pipeline)
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.get(path)
            return resp.status, await resp.json(), dict(resp.headers)

    return asyncio.run(go())


def test_trends_success_is_stored(config):
    pipeline = FakePipeline(_live_result())
    status, body, headers = _request(config, pipeline, "/api/trends")

    assert status == 200
    assert body["success"] is True
    assert body["source"] == "live"
    assert headers["Access-Control-Allow-Origin"] == "*"
    assert (config.data_dir / "trends-latest.json").exists()
    assert pipeline.closed is True


def test_trends_failure_serves_cache(config):
    save_result(_live_result("Cached topic"), config.data_dir)
    pipeline = FakePipeline(TrendResult.failure("No data collected from any source"))

    status, body, _ = _request(config, pipeline, "/api/trends")

    assert status == 200
    assert body["source"] == "cache"
    assert body["trends"][0]["topic"] == "Cached topic"


def test_trends_failure_without_cache(config):
    pipeline = FakePipeline(TrendResult.failure("No data collected from any source"))
    status, body, _ = _request(config, pipeline, "/api/trends")

    assert status == 500
    assert body["success"] is False
    assert body["error"] == "No data collected from any source"
    assert body["trends"] == []


def test_latest_falls_back_to_demo(config):
    status, body, _ = _request(config, FakePipeline(_live_result()), "/api/trends/latest")
    assert status == 200
    assert body["source"] == "demo"
    assert len(body["trends"]) == 5


def test_health(config):
    status, body, _ = _request(config, FakePipeline(_live_result()), "/api/health")
    assert status == 200
    assert body["status"] == "OK"
    assert body["service"] == "TrendPilot API"
