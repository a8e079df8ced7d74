"""Pipeline orchestration for trend aggregation.

This module composes the aggregation, summarization and fallback stages into
one call, ``TrendPipeline.run() -> TrendResult``, which every hosting
adapter (CLI, HTTP server, scheduled job) uses.

Pipeline Flow:
    1. AGGREGATE: Fetch all sources concurrently, merge in source priority
    2. SUMMARIZE: One completion call turns the items into 3-5 trends
    3. FALLBACK: On any summarization failure, per-source trends instead
    4. WRAP: Trends, item count and provenance become a TrendResult

Failure Semantics:
    - No source returned anything: failed result, summarizer never called
    - Summarization failed: successful result with provenance ``demo``
    - Anything unexpected: failed result carrying the error message
    ``run()`` never raises; callers only ever see a result value.
"""

import logging
import time
import uuid
from collections import Counter
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from agents.summarizer import TrendSummarizer
from aggregator import EmptyAggregateError, aggregate
from config import Config
from models.trend import Provenance, TrendResult
from observability.logging import clear_context, set_run_context
from observability.tracing import setup_tracing, trace_operation
from sources import build_connectors
from sources.base import SourceConnector

logger = logging.getLogger(__name__)


@dataclass
class PipelineStats:
    """Counts from a single run, logged when the run finishes.

    Attributes:
        items: Raw items aggregated across sources
        per_source: Item count per source name
        trends: Trends in the result
        fallback: Whether the fallback generator produced the trends
        fallback_reason: Why summarization failed, if it did
        duration: Total run time in seconds
    """

    items: int = 0
    per_source: dict[str, int] = field(default_factory=dict)
    trends: int = 0
    fallback: bool = False
    fallback_reason: str | None = None
    duration: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        d = asdict(self)
        d["duration"] = round(d["duration"], 2)
        return d


class TrendPipeline:
    """Aggregate, summarize and wrap; the single entry point of the core.

    Components:
        - Source connectors (built from config unless injected)
        - TrendSummarizer (built from config unless injected)

    The pipeline keeps no state between runs.
    """

    def __init__(
        self,
        config: Config,
        connectors: Sequence[SourceConnector] | None = None,
        summarizer: TrendSummarizer | None = None,
    ):
        """Initialize the pipeline.

        Args:
            config: Application configuration
            connectors: Override the configured source connectors
            summarizer: Override the configured summarizer
        """
        self.config = config
        self.connectors = list(connectors) if connectors is not None else build_connectors(config)
        self.summarizer = summarizer if summarizer is not None else TrendSummarizer(config)

    async def run(self) -> TrendResult:
        """Execute one pipeline run.

        Returns:
            A successful TrendResult (provenance ``live`` or ``demo``), or a
            failed one with ``error`` set. Never raises.
        """
        run_id = uuid.uuid4().hex[:8]
        set_run_context(run_id)
        start = time.monotonic()
        stats = PipelineStats()

        logger.info(
            "Pipeline started | sources=%s",
            ",".join(c.source.value for c in self.connectors),
        )

        try:
            with trace_operation("aggregate", {"sources": len(self.connectors)}) as attrs:
                items = await aggregate(self.connectors)
                attrs["items"] = len(items)
            stats.items = len(items)
            stats.per_source = dict(Counter(item.source.value for item in items))

            outcome = await self.summarizer.summarize_detailed(items)
            stats.trends = len(outcome.trends)
            stats.fallback = outcome.used_fallback
            stats.fallback_reason = outcome.reason

            provenance = Provenance.DEMO if outcome.used_fallback else Provenance.LIVE
            result = TrendResult.ok(outcome.trends, total_items=len(items), provenance=provenance)

        except EmptyAggregateError as e:
            logger.warning("Pipeline produced no items | error=%s", e)
            result = TrendResult.failure(str(e))
        except Exception as e:
            logger.error("Pipeline failed | error=%s type=%s", e, type(e).__name__, exc_info=True)
            result = TrendResult.failure(str(e) or type(e).__name__)
        finally:
            stats.duration = time.monotonic() - start

        logger.info(
            "Pipeline finished | success=%s source=%s stats=%s",
            result.success, result.source.value, stats.to_dict(),
        )
        clear_context()
        return result

    async def close(self) -> None:
        """Release summarizer resources."""
        await self.summarizer.close()


async def run_once(config: Config) -> TrendResult:
    """Build a pipeline from configuration, run it once and clean up.

    Args:
        config: Application configuration
    """
    if config.enable_logfire:
        setup_tracing(enabled=True, service_name="trendpilot", token=config.logfire_token)

    pipeline = TrendPipeline(config)
    try:
        return await pipeline.run()
    finally:
        try:
            await pipeline.close()
        except Exception as e:
            logger.warning("Pipeline cleanup failed | error=%s", e)
