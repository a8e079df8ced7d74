"""Hacker News connector: top stories via the Firebase API.

Two-stage fetch. The top story id list is fetched first and truncated to
the configured limit, then every story is fetched concurrently with its own
short timeout. A failed story yields None and is dropped; it never aborts
the batch.
"""

import asyncio
import logging
from typing import Any

import aiohttp

from models.item import ItemKind, RawItem, SourceName, from_unix
from sources.base import DEFAULT_USER_AGENT, SourceConnector, SourceUnavailable, as_int, as_text, request_json

logger = logging.getLogger(__name__)

HN_DISCUSSION_URL = "https://news.ycombinator.com/item?id={id}"


def parse_story(payload: Any, story_id: int) -> RawItem | None:
    """Convert one item payload into a RawItem, or None if unusable.

    Deleted, dead and untitled items are skipped.
    """
    if not isinstance(payload, dict):
        return None
    if payload.get("deleted") or payload.get("dead"):
        return None
    title = as_text(payload.get("title"))
    if not title:
        return None
    return RawItem(
        title=title,
        source=SourceName.HACKER_NEWS,
        url=as_text(payload.get("url")) or HN_DISCUSSION_URL.format(id=story_id),
        score=as_int(payload.get("score")),
        created_at=from_unix(payload.get("time")),
        kind=ItemKind.STORY,
    )


class HackerNewsConnector(SourceConnector):
    """Top N stories, fetched one request per story."""

    source = SourceName.HACKER_NEWS

    def __init__(
        self,
        top_stories_url: str,
        item_url: str,
        limit: int = 30,
        timeout: float = 10.0,
        item_timeout: float = 5.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        super().__init__(timeout=timeout, user_agent=user_agent)
        self.top_stories_url = top_stories_url
        self.item_url = item_url
        self.limit = limit
        self.item_timeout = item_timeout

    async def _story_ids(self, session: aiohttp.ClientSession) -> list[int]:
        payload = await request_json(
            session, "GET", self.top_stories_url, source=self.source, timeout=self.timeout,
        )
        if not isinstance(payload, list):
            raise SourceUnavailable(self.source, "malformed top stories payload")
        return payload[: self.limit]

    async def _fetch_story(self, session: aiohttp.ClientSession, story_id: int) -> RawItem | None:
        """Fetch one story; any failure yields None."""
        try:
            payload = await request_json(
                session,
                "GET",
                self.item_url.format(id=story_id),
                source=self.source,
                timeout=self.item_timeout,
            )
        except asyncio.TimeoutError:
            logger.debug("HN story timed out | id=%s", story_id)
            return None
        except (SourceUnavailable, aiohttp.ClientError) as e:
            logger.debug("HN story fetch failed | id=%s error=%s", story_id, e)
            return None
        return parse_story(payload, story_id)

    async def collect(self, session: aiohttp.ClientSession) -> list[RawItem]:
        story_ids = await self._story_ids(session)

        tasks = [self._fetch_story(session, story_id) for story_id in story_ids]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        stories = []
        failed = 0
        for story_id, result in zip(story_ids, results):
            if isinstance(result, BaseException):
                logger.debug("HN story error | id=%s error=%s", story_id, result)
                failed += 1
            elif result is None:
                failed += 1
            else:
                stories.append(result)

        if failed:
            logger.debug("HN stories skipped | failed=%d of %d", failed, len(story_ids))
        return stories
