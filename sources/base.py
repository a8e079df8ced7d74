"""Shared plumbing for source connectors.

Every connector follows the same contract: ``fetch()`` returns a list of
RawItem and never raises. Transport errors, non-2xx statuses, auth failures,
rate limits, timeouts and malformed payloads are all converted to an empty
list inside ``fetch()``; the cause is reported through the log only. One
dead source must never block the pipeline.

Subclasses implement ``collect(session)``, which is free to raise.

Error Handling Strategy:
    - SourceUnavailable: raised by connectors for HTTP/auth/payload problems
    - asyncio.TimeoutError: request exceeded its per-call timeout
    - aiohttp.ClientError: connection-level failure
    - Anything else: unexpected bug in a parser, still contained
"""

import asyncio
import logging
import ssl
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

import aiohttp
import certifi

from models.item import RawItem, SourceName

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "TrendPilot/1.0"


class SourceUnavailable(Exception):
    """A source could not deliver usable data (HTTP, auth, or payload error)."""

    def __init__(self, source: SourceName, reason: str):
        super().__init__(f"{source.value}: {reason}")
        self.source = source
        self.reason = reason


def create_ssl_context() -> ssl.SSLContext:
    """Create an SSL context that verifies against the certifi CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())


def as_int(value: Any) -> int:
    """Best-effort integer conversion for popularity counters (0 on failure)."""
    if isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


def as_text(value: Any) -> str:
    """Stripped string for text fields; anything that is not a string becomes empty."""
    return value.strip() if isinstance(value, str) else ""


def parse_iso(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp such as GitHub's ``2024-01-01T00:00:00Z``."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


async def request_json(
    session: aiohttp.ClientSession,
    method: str,
    url: str,
    *,
    source: SourceName,
    timeout: float,
    **kwargs: Any,
) -> Any:
    """Perform one HTTP request and decode its JSON body.

    Args:
        session: aiohttp client session owned by the calling connector
        method: HTTP method
        url: Request URL
        source: Source name used in raised errors
        timeout: Total timeout for this request in seconds
        **kwargs: Passed through to ``session.request`` (params, json, headers, ...)

    Returns:
        Decoded JSON payload

    Raises:
        SourceUnavailable: On non-2xx status or undecodable body
        asyncio.TimeoutError: When the request exceeds ``timeout``
        aiohttp.ClientError: On connection-level failures
    """
    async with session.request(
        method,
        url,
        timeout=aiohttp.ClientTimeout(total=timeout),
        **kwargs,
    ) as resp:
        if resp.status in (401, 403):
            raise SourceUnavailable(source, f"authentication failed (HTTP {resp.status})")
        if resp.status == 429:
            raise SourceUnavailable(source, "rate limited (HTTP 429)")
        if not 200 <= resp.status < 300:
            raise SourceUnavailable(source, f"HTTP {resp.status}")
        try:
            return await resp.json(content_type=None)
        except ValueError as e:
            raise SourceUnavailable(source, f"malformed JSON: {e}") from e


class SourceConnector(ABC):
    """Base class for a single external source.

    Attributes:
        source: Which origin this connector pulls from
        timeout: Bulk request timeout in seconds
        user_agent: User-Agent header for every request
    """

    source: SourceName

    def __init__(self, timeout: float = 10.0, user_agent: str = DEFAULT_USER_AGENT):
        self.timeout = timeout
        self.user_agent = user_agent

    @abstractmethod
    async def collect(self, session: aiohttp.ClientSession) -> list[RawItem]:
        """Fetch and normalize items. May raise; ``fetch`` contains failures."""
        raise NotImplementedError

    async def fetch(self) -> list[RawItem]:
        """Fetch items from the source, returning an empty list on any failure."""
        start = time.monotonic()
        try:
            async with aiohttp.ClientSession(
                headers={"User-Agent": self.user_agent},
                connector=aiohttp.TCPConnector(ssl=create_ssl_context()),
            ) as session:
                items = await self.collect(session)
        except SourceUnavailable as e:
            logger.warning("Source unavailable | source=%s reason=%s", self.source.value, e.reason)
            return []
        except asyncio.TimeoutError:
            logger.warning("Source timed out | source=%s timeout=%.0fs", self.source.value, self.timeout)
            return []
        except aiohttp.ClientError as e:
            logger.warning("Source request failed | source=%s error=%s: %s", self.source.value, type(e).__name__, e)
            return []
        except Exception as e:
            logger.error(
                "Source failed unexpectedly | source=%s error=%s: %s",
                self.source.value, type(e).__name__, e, exc_info=True,
            )
            return []

        logger.info(
            "Source fetched | source=%s items=%d duration=%.2fs",
            self.source.value, len(items), time.monotonic() - start,
        )
        return list(items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source={self.source.value!r})"
