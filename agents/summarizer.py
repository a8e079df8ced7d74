"""Trend summarizer backed by an OpenAI-compatible chat-completion endpoint.

This module turns the aggregated item list into a prompt, makes exactly one
completion call, and parses the reply into Trend objects.

Design Philosophy:
    - One call, no retry loop: the fallback generator is the retry
    - Low temperature: consistent rankings over creative ones
    - Trust the model's order and count once the reply validates

Failure Handling:
    Any failure (missing key, timeout, HTTP error, empty body, prose instead
    of JSON, an empty array) is logged with its reason and replaced by
    ``generate_fallback`` on the same items. Callers never see an exception
    from ``summarize``.
"""

import asyncio
import json
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import openai
from openai import AsyncOpenAI
from pydantic import ValidationError

from agents.fallback import generate_fallback
from config import Config
from models.item import RawItem
from models.trend import Trend
from observability.tracing import trace_operation

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = "You are an expert trend analyst. Always respond with valid JSON."

TREND_PROMPT = """
Analyze these {count} tech and startup related items and identify emerging trends. Please respond with a JSON array of 3-5 trend objects, each containing:

{{
    "topic": "Clear, concise trend name",
    "score": 85,
    "summary": "Brief explanation of why this is trending and its importance",
    "sources": ["Source1", "Source2"],
    "examples": ["Specific example 1", "Specific example 2"]
}}

Focus on:
- Cross-platform patterns and recurring themes
- Emerging technologies and business models
- Items with high engagement scores
- Recent and relevant content

Items to analyze:
{items}

Return only valid JSON array, no other text."""

_CODE_FENCE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?```$", re.DOTALL | re.IGNORECASE)


class SummarizationFailure(Exception):
    """The completion call failed or returned nothing usable.

    Attributes:
        reason: Short machine-readable cause (timeout, request_failed,
                unparsable, empty, no_api_key)
    """

    def __init__(self, reason: str, detail: str = ""):
        super().__init__(f"{reason}: {detail}" if detail else reason)
        self.reason = reason
        self.detail = detail


@dataclass
class SummaryOutcome:
    """Trends plus whether they came from the fallback generator."""

    trends: list[Trend]
    used_fallback: bool = False
    reason: str | None = None


def render_item(index: int, item: RawItem) -> str:
    """Render one item as a single prompt line (1-based index)."""
    title = " ".join(item.title.split())
    description = f": {' '.join(item.description.split())}" if item.description else ""
    return f"{index}. [{item.source.value}] {title}{description} (Score: {item.score})"


def build_prompt(items: Sequence[RawItem]) -> str:
    """Build the user prompt listing every item."""
    lines = [render_item(i, item) for i, item in enumerate(items, start=1)]
    return TREND_PROMPT.format(count=len(items), items="\n".join(lines))


def _strip_code_fence(text: str) -> str:
    match = _CODE_FENCE.match(text)
    return match.group(1).strip() if match else text


def parse_trends(text: str | None, timestamp: datetime | None = None) -> list[Trend]:
    """Parse a completion reply into validated trends.

    Accepts a bare JSON array (optionally inside a markdown code fence) or
    an object whose ``trends`` key holds the array. Elements that are not
    objects or lack a topic are dropped. Every trend gets the same fresh
    timestamp; score clamping and source dedup happen in the Trend model.

    Raises:
        SummarizationFailure: If the reply is empty, not JSON, not an
            array, or yields no usable trends
    """
    body = (text or "").strip()
    if not body:
        raise SummarizationFailure("empty", "no content in response")

    try:
        data = json.loads(_strip_code_fence(body))
    except json.JSONDecodeError as e:
        raise SummarizationFailure("unparsable", f"invalid JSON ({e.msg} at pos {e.pos})") from e

    if isinstance(data, dict) and isinstance(data.get("trends"), list):
        data = data["trends"]
    if not isinstance(data, list):
        raise SummarizationFailure("unparsable", f"expected JSON array, got {type(data).__name__}")

    stamp = timestamp or datetime.now(timezone.utc)
    trends = []
    for position, raw in enumerate(data):
        if not isinstance(raw, dict):
            logger.debug("Dropping non-object trend | index=%d", position)
            continue
        try:
            trends.append(Trend(
                topic=raw.get("topic"),
                score=raw.get("score"),
                summary=raw.get("summary"),
                sources=raw.get("sources"),
                examples=raw.get("examples"),
                timestamp=stamp,
            ))
        except ValidationError as e:
            logger.debug("Dropping invalid trend | index=%d errors=%d", position, e.error_count())

    if not trends:
        raise SummarizationFailure("empty", f"no usable trends in {len(data)} element(s)")
    return trends


def _create_client(config: Config) -> AsyncOpenAI:
    """Create the completion client with automatic retries disabled."""
    return AsyncOpenAI(
        base_url=config.completion_base_url,
        api_key=config.completion_api_key,
        timeout=config.completion_timeout,
        max_retries=0,
        default_headers={
            "HTTP-Referer": config.completion_referer,
            "X-Title": config.completion_title,
        },
    )


class TrendSummarizer:
    """Summarizes aggregated items into 3-5 ranked trends.

    Example:
        >>> summarizer = TrendSummarizer(config)
        >>> trends = await summarizer.summarize(items)
    """

    def __init__(self, config: Config, client: Any | None = None):
        """Initialize the summarizer.

        Args:
            config: Application configuration (model, budget, timeout)
            client: Optional pre-built client exposing
                    ``chat.completions.create``; built from config when omitted
        """
        self.config = config
        if client is None and config.completion_api_key:
            client = _create_client(config)
        self._client = client

    async def _complete(self, prompt: str) -> str:
        """Make the single completion call and return the message text."""
        try:
            response = await self._client.chat.completions.create(
                model=self.config.completion_model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=self.config.completion_max_tokens,
                temperature=self.config.completion_temperature,
            )
        except openai.APITimeoutError as e:
            raise SummarizationFailure("timeout", str(e)) from e
        except openai.APIStatusError as e:
            raise SummarizationFailure("request_failed", f"HTTP {e.status_code}") from e
        except openai.APIError as e:
            raise SummarizationFailure("request_failed", f"{type(e).__name__}: {e}") from e

        choices = getattr(response, "choices", None) or []
        if not choices or choices[0].message is None:
            raise SummarizationFailure("empty", "response has no choices")
        return choices[0].message.content or ""

    async def _summarize_live(self, items: Sequence[RawItem]) -> list[Trend]:
        if self._client is None:
            raise SummarizationFailure("no_api_key", "completion API key not configured")

        prompt = build_prompt(items)
        try:
            text = await asyncio.wait_for(self._complete(prompt), timeout=self.config.completion_timeout)
        except asyncio.TimeoutError as e:
            raise SummarizationFailure("timeout", f"no reply within {self.config.completion_timeout:.0f}s") from e
        except SummarizationFailure:
            raise
        except Exception as e:
            raise SummarizationFailure("request_failed", f"{type(e).__name__}: {e}") from e

        try:
            return parse_trends(text)
        except SummarizationFailure:
            logger.debug("Unparsable completion | preview=%r", text[:200])
            raise

    async def summarize_detailed(self, items: Sequence[RawItem]) -> SummaryOutcome:
        """Summarize items, reporting whether the fallback was used."""
        with trace_operation("summarize", {"items": len(items)}) as attrs:
            try:
                trends = await self._summarize_live(items)
            except SummarizationFailure as e:
                logger.warning(
                    "Summarization failed, using fallback | reason=%s detail=%s items=%d",
                    e.reason, e.detail, len(items),
                )
                trends = generate_fallback(items)
                attrs.update({"fallback": True, "reason": e.reason, "trends": len(trends)})
                return SummaryOutcome(trends=trends, used_fallback=True, reason=e.reason)

            attrs.update({"fallback": False, "trends": len(trends)})
            logger.info(
                "Trends summarized | model=%s items=%d trends=%d",
                self.config.completion_model, len(items), len(trends),
            )
            return SummaryOutcome(trends=trends)

    async def summarize(self, items: Sequence[RawItem]) -> list[Trend]:
        """Summarize items into trends (fallback substituted on any failure)."""
        return (await self.summarize_detailed(items)).trends

    async def close(self) -> None:
        """Release the underlying HTTP client, if it exposes one."""
        close = getattr(self._client, "close", None)
        if close is not None:
            result = close()
            if asyncio.iscoroutine(result):
                await result
