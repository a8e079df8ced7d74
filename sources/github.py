"""GitHub connector: most-starred repositories created after a cutoff date."""

import logging
from datetime import date, timedelta
from typing import Any

import aiohttp
from pydantic import ValidationError

from models.item import ItemKind, RawItem, SourceName
from sources.base import (
    DEFAULT_USER_AGENT,
    SourceConnector,
    SourceUnavailable,
    as_int,
    as_text,
    parse_iso,
    request_json,
)

logger = logging.getLogger(__name__)


def resolve_created_after(created_after: str, lookback_days: int, today: date | None = None) -> str:
    """Return the search cutoff as ``YYYY-MM-DD``.

    An explicit ``created_after`` wins; otherwise the cutoff is
    ``lookback_days`` before today.
    """
    if created_after:
        return created_after
    today = today or date.today()
    return (today - timedelta(days=lookback_days)).isoformat()


def parse_search(payload: Any) -> list[RawItem]:
    """Convert a repository search payload into RawItems (stars as score).

    Raises:
        SourceUnavailable: If the payload has no ``items`` list
    """
    repos = payload.get("items") if isinstance(payload, dict) else None
    if not isinstance(repos, list):
        raise SourceUnavailable(SourceName.GITHUB, "malformed search payload")

    items = []
    for position, repo in enumerate(repos):
        if not isinstance(repo, dict):
            continue
        name = as_text(repo.get("name"))
        if not name:
            continue
        try:
            items.append(RawItem(
                title=name,
                source=SourceName.GITHUB,
                url=as_text(repo.get("html_url")),
                score=as_int(repo.get("stargazers_count")),
                created_at=parse_iso(repo.get("created_at")),
                description=as_text(repo.get("description")) or None,
                kind=ItemKind.REPOSITORY,
                category=as_text(repo.get("language")) or None,
            ))
        except ValidationError as e:
            logger.debug("Dropping invalid repository | index=%d errors=%d", position, e.error_count())
    return items


class GitHubConnector(SourceConnector):
    """Single repository search, sorted by stars descending."""

    source = SourceName.GITHUB

    def __init__(
        self,
        search_url: str,
        created_after: str,
        token: str = "",
        per_page: int = 20,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        super().__init__(timeout=timeout, user_agent=user_agent)
        self.search_url = search_url
        self.created_after = created_after
        self.token = token
        self.per_page = per_page

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _params(self) -> dict[str, str]:
        return {
            "q": f"created:>{self.created_after}",
            "sort": "stars",
            "order": "desc",
            "per_page": str(self.per_page),
        }

    async def collect(self, session: aiohttp.ClientSession) -> list[RawItem]:
        payload = await request_json(
            session,
            "GET",
            self.search_url,
            source=self.source,
            timeout=self.timeout,
            params=self._params(),
            headers=self._headers(),
        )
        return parse_search(payload)
