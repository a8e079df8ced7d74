"""Source connectors for the TrendPilot pipeline.

Each connector fetches from one external API and normalizes the response
into RawItem objects. ``fetch()`` never raises; failures become an empty
list and a log line.

RedditConnector:
    Top posts of the day, OAuth first with public-endpoint fallback.

GitHubConnector:
    Most-starred repositories created after a cutoff date.

HackerNewsConnector:
    Top stories, fetched concurrently one request per story.

ProductHuntConnector:
    Top-voted posts via GraphQL (only when a token is configured).

Example:
    >>> from sources import build_connectors
    >>> connectors = build_connectors(Config.load())
"""

from config import Config
from sources.base import SourceConnector, SourceUnavailable
from sources.github import GitHubConnector, resolve_created_after
from sources.hackernews import HackerNewsConnector
from sources.producthunt import ProductHuntConnector
from sources.reddit import RedditConnector


def build_connectors(config: Config) -> list[SourceConnector]:
    """Create every enabled connector from configuration, in priority order."""
    connectors: list[SourceConnector] = [
        RedditConnector(
            subreddits=config.reddit_subreddits,
            public_url=config.reddit_public_url,
            oauth_url=config.reddit_oauth_url,
            token_url=config.reddit_token_url,
            limit=config.reddit_limit,
            client_id=config.reddit_client_id,
            client_secret=config.reddit_client_secret,
            timeout=config.fetch_timeout,
            auth_timeout=config.item_timeout,
            user_agent=config.reddit_user_agent,
        ),
        GitHubConnector(
            search_url=config.github_search_url,
            created_after=resolve_created_after(config.github_created_after, config.github_lookback_days),
            token=config.github_token,
            per_page=config.github_per_page,
            timeout=config.fetch_timeout,
        ),
        HackerNewsConnector(
            top_stories_url=config.hn_top_stories_url,
            item_url=config.hn_item_url,
            limit=config.hn_story_limit,
            timeout=config.fetch_timeout,
            item_timeout=config.item_timeout,
        ),
    ]
    if config.producthunt_enabled:
        connectors.append(ProductHuntConnector(
            graphql_url=config.producthunt_url,
            token=config.producthunt_token,
            limit=config.producthunt_limit,
            timeout=config.fetch_timeout,
        ))
    return connectors


__all__ = [
    "build_connectors",
    "SourceConnector",
    "SourceUnavailable",
    "RedditConnector",
    "GitHubConnector",
    "HackerNewsConnector",
    "ProductHuntConnector",
]
