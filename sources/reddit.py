"""Reddit connector: top posts of the day from a set of subreddits.

Tries an OAuth client-credentials exchange first for the higher rate limit.
If credentials are missing, or any step of the authenticated path fails,
the same listing is requested from the public JSON endpoint.
"""

import asyncio
import base64
import logging
from typing import Any

import aiohttp
from pydantic import ValidationError

from models.item import ItemKind, RawItem, SourceName, from_unix
from sources.base import DEFAULT_USER_AGENT, SourceConnector, SourceUnavailable, as_int, as_text, request_json

logger = logging.getLogger(__name__)

REDDIT_BASE_URL = "https://reddit.com"


def parse_listing(payload: Any) -> list[RawItem]:
    """Convert a Reddit listing payload into RawItems.

    Posts without a string title, or that fail validation, are skipped.

    Raises:
        SourceUnavailable: If the payload is not a listing
    """
    try:
        children = payload["data"]["children"]
    except (KeyError, TypeError) as e:
        raise SourceUnavailable(SourceName.REDDIT, "malformed listing payload") from e
    if not isinstance(children, list):
        raise SourceUnavailable(SourceName.REDDIT, "malformed listing payload")

    items = []
    for position, child in enumerate(children):
        post = child.get("data") if isinstance(child, dict) else None
        if not isinstance(post, dict):
            continue
        title = as_text(post.get("title"))
        if not title:
            continue
        permalink = as_text(post.get("permalink"))
        try:
            items.append(RawItem(
                title=title,
                source=SourceName.REDDIT,
                url=f"{REDDIT_BASE_URL}{permalink}" if permalink else as_text(post.get("url")),
                score=as_int(post.get("score")),
                created_at=from_unix(post.get("created_utc")),
                kind=ItemKind.DISCUSSION,
                category=as_text(post.get("subreddit")) or None,
            ))
        except ValidationError as e:
            logger.debug("Dropping invalid Reddit post | index=%d errors=%d", position, e.error_count())
    return items


class RedditConnector(SourceConnector):
    """Top posts (``t=day``) across the configured subreddits."""

    source = SourceName.REDDIT

    def __init__(
        self,
        subreddits: list[str],
        public_url: str,
        oauth_url: str,
        token_url: str,
        limit: int = 25,
        client_id: str = "",
        client_secret: str = "",
        timeout: float = 10.0,
        auth_timeout: float = 5.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        super().__init__(timeout=timeout, user_agent=user_agent)
        self.subreddits = list(subreddits)
        self.public_url = public_url
        self.oauth_url = oauth_url
        self.token_url = token_url
        self.limit = limit
        self.client_id = client_id
        self.client_secret = client_secret
        self.auth_timeout = auth_timeout

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _url(self, template: str) -> str:
        return template.format(subreddits="+".join(self.subreddits))

    def _params(self) -> dict[str, str]:
        return {"limit": str(self.limit), "t": "day"}

    def _basic_auth(self) -> str:
        credentials = f"{self.client_id}:{self.client_secret}".encode()
        return "Basic " + base64.b64encode(credentials).decode("ascii")

    async def _access_token(self, session: aiohttp.ClientSession) -> str:
        """Exchange client credentials for a bearer token."""
        payload = await request_json(
            session,
            "POST",
            self.token_url,
            source=self.source,
            timeout=self.auth_timeout,
            data={"grant_type": "client_credentials"},
            headers={"Authorization": self._basic_auth()},
        )
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise SourceUnavailable(self.source, "token response missing access_token")
        return token

    async def _fetch_authenticated(self, session: aiohttp.ClientSession) -> Any:
        token = await self._access_token(session)
        return await request_json(
            session,
            "GET",
            self._url(self.oauth_url),
            source=self.source,
            timeout=self.timeout,
            params=self._params(),
            headers={"Authorization": f"Bearer {token}"},
        )

    async def collect(self, session: aiohttp.ClientSession) -> list[RawItem]:
        if self.has_credentials:
            try:
                items = parse_listing(await self._fetch_authenticated(session))
                logger.debug("Reddit listing fetched with OAuth | items=%d", len(items))
                return items
            except (SourceUnavailable, aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.info("Reddit auth failed, using public API | error=%s", str(e) or type(e).__name__)
        else:
            logger.debug("Reddit credentials not configured, using public API")

        payload = await request_json(
            session,
            "GET",
            self._url(self.public_url),
            source=self.source,
            timeout=self.timeout,
            params=self._params(),
        )
        return parse_listing(payload)
