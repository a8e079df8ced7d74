"""Concurrent aggregation across source connectors.

Runs every connector at once and joins unconditionally: each connector's
outcome is collected as either a list of items or an exception, and no
failure cancels or blocks its siblings. Results are buffered per connector
and concatenated in a fixed source priority (Reddit, GitHub, Hacker News,
Product Hunt), never in completion order, so the downstream prompt is
reproducible.

Error Handling Strategy:
    - Connectors already convert their own failures to empty lists
    - An exception escaping a connector anyway is logged and treated as empty
    - If every connector comes back empty, EmptyAggregateError is raised;
      summarizing zero items is meaningless
"""

import asyncio
import logging
import time
from collections.abc import Sequence

from models.item import RawItem, SourceName
from sources.base import SourceConnector

logger = logging.getLogger(__name__)

SOURCE_PRIORITY: tuple[SourceName, ...] = (
    SourceName.REDDIT,
    SourceName.GITHUB,
    SourceName.HACKER_NEWS,
    SourceName.PRODUCT_HUNT,
)

EMPTY_AGGREGATE_MESSAGE = "No data collected from any source"


class EmptyAggregateError(Exception):
    """Every source connector returned no items."""

    def __init__(self, message: str = EMPTY_AGGREGATE_MESSAGE):
        super().__init__(message)


def _priority(source: SourceName) -> int:
    try:
        return SOURCE_PRIORITY.index(source)
    except ValueError:
        return len(SOURCE_PRIORITY)


async def aggregate(connectors: Sequence[SourceConnector]) -> list[RawItem]:
    """Fetch from all connectors concurrently and merge the results.

    Args:
        connectors: Source connectors to run

    Returns:
        Items from every connector that produced any, grouped by source in
        SOURCE_PRIORITY order (connectors with equal priority keep their
        given order), each group in the order its connector returned it

    Raises:
        EmptyAggregateError: If no connector produced a single item

    Example:
        >>> items = await aggregate(build_connectors(config))
        >>> items[0].source
        <SourceName.REDDIT: 'Reddit'>
    """
    start = time.monotonic()
    results = await asyncio.gather(
        *(connector.fetch() for connector in connectors),
        return_exceptions=True,
    )

    # Buffer each outcome in its connector's slot before ordering
    slots: list[tuple[int, int, list[RawItem]]] = []
    errors = 0
    counts: dict[str, int] = {}
    for position, (connector, result) in enumerate(zip(connectors, results)):
        name = connector.source.value
        if isinstance(result, BaseException):
            logger.warning("Connector error | source=%s error=%s (%s)", name, result, type(result).__name__)
            errors += 1
            counts[name] = 0
            continue
        counts[name] = counts.get(name, 0) + len(result)
        slots.append((_priority(connector.source), position, list(result)))

    slots.sort(key=lambda slot: (slot[0], slot[1]))
    items = [item for _, _, batch in slots for item in batch]

    logger.info(
        "Sources aggregated | items=%d sources=%d errors=%d counts=%s duration=%.2fs",
        len(items), len(connectors), errors, counts, time.monotonic() - start,
    )
    if not items:
        raise EmptyAggregateError()
    return items
