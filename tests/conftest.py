"""Shared fixtures: fake connectors, a fake completion client, item factories."""

import asyncio
from types import SimpleNamespace

import pytest

from config import Config
from models.item import ItemKind, RawItem, SourceName
from sources.base import SourceConnector


class StaticConnector(SourceConnector):
    """Connector returning canned items after an optional delay, or raising."""

    def __init__(self, source: SourceName, items=(), delay: float = 0.0, error: BaseException | None = None):
        super().__init__(timeout=1.0)
        self.source = source
        self.items = list(items)
        self.delay = delay
        self.error = error
        self.calls = 0

    async def collect(self, session):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.items)


class FakeCompletions:
    def __init__(self, content=None, error=None, delay: float = 0.0):
        self.content = content
        self.error = error
        self.delay = delay
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeCompletionClient:
    """Stands in for AsyncOpenAI: exposes chat.completions.create and close()."""

    def __init__(self, content=None, error=None, delay: float = 0.0):
        self.completions = FakeCompletions(content=content, error=error, delay=delay)
        self.chat = SimpleNamespace(completions=self.completions)
        self.closed = False

    async def close(self):
        self.closed = True


def make_item(title: str, source: SourceName = SourceName.REDDIT, score: int = 0, **kwargs) -> RawItem:
    kinds = {
        SourceName.REDDIT: ItemKind.DISCUSSION,
        SourceName.GITHUB: ItemKind.REPOSITORY,
        SourceName.HACKER_NEWS: ItemKind.STORY,
        SourceName.PRODUCT_HUNT: ItemKind.PRODUCT,
    }
    kwargs.setdefault("kind", kinds[source])
    return RawItem(title=title, source=source, score=score, **kwargs)


@pytest.fixture
def config(tmp_path):
    return Config(
        completion_api_key="test-key",
        completion_timeout=1.0,
        data_dir=tmp_path / "data",
        log_dir=tmp_path / "log",
    )


@pytest.fixture
def item_factory():
    return make_item


@pytest.fixture
def connector_factory():
    return StaticConnector


@pytest.fixture
def client_factory():
    return FakeCompletionClient


@pytest.fixture
def scenario_items():
    """3 Reddit items (10, 50, 30) followed by 2 GitHub items (5, 5)."""
    return [
        make_item("reddit-10", SourceName.REDDIT, 10),
        make_item("reddit-50", SourceName.REDDIT, 50),
        make_item("reddit-30", SourceName.REDDIT, 30),
        make_item("github-a", SourceName.GITHUB, 5),
        make_item("github-b", SourceName.GITHUB, 5),
    ]
