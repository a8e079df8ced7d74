"""Deterministic trend synthesis used when the completion model is unavailable.

Groups items by source and produces one "Trending on <source>" trend per
group. No network, no randomness: the same item sequence always yields the
same topics, scores and example ordering.
"""

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from models.item import RawItem, SourceName
from models.trend import Trend

logger = logging.getLogger(__name__)

MAX_FALLBACK_TRENDS = 5
EXAMPLES_PER_TREND = 3
POINTS_PER_ITEM = 10


def generate_fallback(items: Sequence[RawItem]) -> list[Trend]:
    """Build up to five per-source trends from raw items.

    Groups are emitted in the order their source was first encountered,
    not by score. Within a group, examples are the top three titles by
    score (ties keep input order). The trend score is ten points per item,
    capped at 100.

    Args:
        items: Aggregated raw items (may be empty)

    Returns:
        At most MAX_FALLBACK_TRENDS trends

    Example:
        >>> [t.topic for t in generate_fallback(items)]
        ['Trending on Reddit', 'Trending on GitHub']
    """
    groups: dict[SourceName, list[RawItem]] = {}
    for item in items:
        groups.setdefault(item.source, []).append(item)

    timestamp = datetime.now(timezone.utc)
    trends = []
    for source, group in groups.items():
        top = sorted(group, key=lambda item: item.score, reverse=True)[:EXAMPLES_PER_TREND]
        trends.append(Trend(
            topic=f"Trending on {source.value}",
            score=min(100, len(group) * POINTS_PER_ITEM),
            summary=f"Popular content from {source.value} with {len(group)} relevant items",
            sources=[source.value],
            examples=[item.title for item in top],
            timestamp=timestamp,
        ))

    logger.debug("Fallback trends generated | groups=%d items=%d", len(groups), len(items))
    return trends[:MAX_FALLBACK_TRENDS]
