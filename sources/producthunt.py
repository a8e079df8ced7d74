"""Product Hunt connector: top-voted posts via the v2 GraphQL API.

Auxiliary source; only built when an API token is configured.
"""

import logging
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

TOP_POSTS_QUERY = """
query TopPosts($first: Int!) {
  posts(order: VOTES, first: $first) {
    edges {
      node {
        name
        tagline
        votesCount
        website
        url
        createdAt
      }
    }
  }
}
"""


def parse_posts(payload: Any) -> list[RawItem]:
    """Convert a GraphQL posts payload into RawItems (votes as score).

    Raises:
        SourceUnavailable: On GraphQL errors or an unexpected shape
    """
    if not isinstance(payload, dict):
        raise SourceUnavailable(SourceName.PRODUCT_HUNT, "malformed GraphQL payload")
    if payload.get("errors") and not payload.get("data"):
        first = payload["errors"][0] if isinstance(payload["errors"], list) else payload["errors"]
        message = first.get("message") if isinstance(first, dict) else str(first)
        raise SourceUnavailable(SourceName.PRODUCT_HUNT, f"GraphQL error: {message}")
    try:
        edges = payload["data"]["posts"]["edges"]
    except (KeyError, TypeError) as e:
        raise SourceUnavailable(SourceName.PRODUCT_HUNT, "malformed GraphQL payload") from e
    if not isinstance(edges, list):
        raise SourceUnavailable(SourceName.PRODUCT_HUNT, "malformed GraphQL payload")

    items = []
    for position, edge in enumerate(edges):
        node = edge.get("node") if isinstance(edge, dict) else None
        if not isinstance(node, dict):
            continue
        name = as_text(node.get("name"))
        if not name:
            continue
        try:
            items.append(RawItem(
                title=name,
                source=SourceName.PRODUCT_HUNT,
                url=as_text(node.get("website")) or as_text(node.get("url")),
                score=as_int(node.get("votesCount")),
                created_at=parse_iso(node.get("createdAt")),
                description=as_text(node.get("tagline")) or None,
                kind=ItemKind.PRODUCT,
            ))
        except ValidationError as e:
            logger.debug("Dropping invalid post | index=%d errors=%d", position, e.error_count())
    return items


class ProductHuntConnector(SourceConnector):
    """Single GraphQL query ordered by vote count."""

    source = SourceName.PRODUCT_HUNT

    def __init__(
        self,
        graphql_url: str,
        token: str,
        limit: int = 20,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        super().__init__(timeout=timeout, user_agent=user_agent)
        self.graphql_url = graphql_url
        self.token = token
        self.limit = limit

    async def collect(self, session: aiohttp.ClientSession) -> list[RawItem]:
        if not self.token:
            raise SourceUnavailable(self.source, "no API token configured")
        payload = await request_json(
            session,
            "POST",
            self.graphql_url,
            source=self.source,
            timeout=self.timeout,
            json={"query": TOP_POSTS_QUERY, "variables": {"first": self.limit}},
            headers={"Authorization": f"Bearer {self.token}", "Accept": "application/json"},
        )
        return parse_posts(payload)
