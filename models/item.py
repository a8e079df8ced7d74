"""Raw item model for content pulled from a single source.

Each RawItem represents one post, repository, story or product fetched by a
source connector. Items are immutable once built; the aggregator owns the
combined list until it is handed to the summarizer.

Score Semantics:
    ``score`` is the source-native popularity metric (upvotes, stars,
    points, votes). Scales differ wildly between sources, so scores are
    only ever compared within one source.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SourceName(str, Enum):
    """Origins the pipeline can pull from.

    Values are the display names shown in prompts, trend ``sources`` lists
    and the presentation layer.
    """

    REDDIT = "Reddit"
    GITHUB = "GitHub"
    HACKER_NEWS = "Hacker News"
    PRODUCT_HUNT = "Product Hunt"


class ItemKind(str, Enum):
    """What kind of content an item is."""

    DISCUSSION = "discussion"  # Reddit post
    REPOSITORY = "repository"  # GitHub repo
    STORY = "story"            # Hacker News story
    PRODUCT = "product"        # Product Hunt launch


class RawItem(BaseModel):
    """A single piece of content normalized from one source.

    Attributes:
        title: Post title, repository name, story headline or product name
        source: Origin of the item
        url: Link to the item (may be empty)
        score: Source-native popularity metric
        created_at: Creation timestamp (UTC), when the source provides one
        description: Optional body text (repo description, product tagline)
        kind: Content kind
        category: Optional grouping inside the source (subreddit, language)

    Example:
        >>> item = RawItem(title="Show HN: ...", source=SourceName.HACKER_NEWS, score=120)
        >>> item.kind is None
        True
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(description="Item title")
    source: SourceName = Field(description="Origin of the item")
    url: str = Field(default="", description="Link to the item")
    score: int = Field(default=0, description="Source-native popularity metric")
    created_at: datetime | None = Field(default=None, alias="createdAt", description="Creation time (UTC)")
    description: str | None = Field(default=None, description="Optional body or tagline")
    kind: ItemKind | None = Field(default=None, description="Content kind")
    category: str | None = Field(default=None, description="Subreddit or primary language")

    def __str__(self) -> str:
        """Human-readable representation for logging."""
        return f"RawItem({self.source.value}, '{self.title[:50]}', score={self.score})"


def from_unix(seconds: float | int | None) -> datetime | None:
    """Convert a Unix timestamp to an aware UTC datetime."""
    if seconds is None:
        return None
    try:
        return datetime.fromtimestamp(float(seconds), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None
