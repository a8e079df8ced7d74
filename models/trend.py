"""Trend and pipeline result models.

A Trend is a synthesized cross-source theme; a TrendResult wraps the trends
of one pipeline run together with provenance. These shapes are the only
contract the presentation layer relies on, and it does not re-validate them,
so the invariants live in the validators here:

    - Trend.score is always an integer in [0, 100]
    - Trend.sources never contains duplicates

Both hold no matter what the completion model returned.
"""

import logging
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

SCORE_MIN = 0
SCORE_MAX = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clamp_score(value: Any) -> int:
    """Coerce a raw score into an integer within [0, 100].

    Accepts ints, floats and numeric strings. Anything non-numeric
    (including booleans, NaN and None) becomes 0.

    Example:
        >>> clamp_score(150), clamp_score(-20), clamp_score("87.6")
        (100, 0, 88)
    """
    if isinstance(value, bool) or value is None:
        return SCORE_MIN
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return SCORE_MIN
    if not isinstance(value, (int, float)):
        return SCORE_MIN
    if isinstance(value, float):
        if math.isnan(value):
            return SCORE_MIN
        if math.isinf(value):
            return SCORE_MAX if value > 0 else SCORE_MIN
        value = int(round(value))
    return max(SCORE_MIN, min(SCORE_MAX, value))


def unique_strings(values: Any) -> list[str]:
    """Normalize a raw list into unique, non-empty strings (first occurrence wins)."""
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, (list, tuple, set)):
        return []
    seen: dict[str, None] = {}
    for value in values:
        if value is None:
            continue
        text = str(value).strip()
        if text:
            seen.setdefault(text, None)
    return list(seen)


class Provenance(str, Enum):
    """Where a TrendResult came from."""

    LIVE = "live"    # Fresh fetch summarized by the completion model
    CACHE = "cache"  # Stored result served by a hosting adapter
    DEMO = "demo"    # Fallback synthesis or canned demo data


class Trend(BaseModel):
    """A synthesized theme spanning one or more sources.

    Attributes:
        topic: Short trend name
        score: Popularity score, clamped to [0, 100]
        summary: Why it is trending
        sources: Source names backing the trend (deduplicated)
        examples: Representative item titles, most relevant first
        timestamp: When the trend was synthesized
    """

    model_config = ConfigDict(frozen=True)

    topic: str = Field(description="Clear, concise trend name")
    score: int = Field(default=0, ge=SCORE_MIN, le=SCORE_MAX, description="Normalized popularity")
    summary: str = Field(default="", description="Why this is trending")
    sources: list[str] = Field(default_factory=list, description="Deduplicated source names")
    examples: list[str] = Field(default_factory=list, description="Representative items")
    timestamp: datetime = Field(default_factory=_utcnow, description="Synthesis time (UTC)")

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, v: Any) -> int:
        return clamp_score(v)

    @field_validator("sources", mode="before")
    @classmethod
    def _dedupe_sources(cls, v: Any) -> list[str]:
        return unique_strings(v)

    @field_validator("examples", mode="before")
    @classmethod
    def _coerce_examples(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        if not isinstance(v, (list, tuple)):
            return []
        return [str(example) for example in v if example is not None]

    @field_validator("summary", mode="before")
    @classmethod
    def _coerce_summary(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("topic", mode="before")
    @classmethod
    def _coerce_topic(cls, v: Any) -> str:
        text = "" if v is None else str(v).strip()
        if not text:
            raise ValueError("topic must be a non-empty string")
        return text


class TrendResult(BaseModel):
    """Output of one pipeline run.

    Constructed fresh on every run and never mutated; adapters that re-tag a
    stored result use ``with_provenance`` which returns a copy.

    Attributes:
        success: False only when no trends could be produced
        trends: Trends in the order the summarizer produced them
        total_items: Number of raw items consumed (JSON: ``totalItems``)
        timestamp: When the result was built
        source: Provenance tag (live, cache, demo)
        error: Failure message, present only when success is False
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    success: bool
    trends: list[Trend] = Field(default_factory=list)
    total_items: int = Field(default=0, alias="totalItems", ge=0)
    timestamp: datetime = Field(default_factory=_utcnow)
    source: Provenance = Provenance.LIVE
    error: str | None = None

    @classmethod
    def ok(
        cls,
        trends: list[Trend],
        total_items: int,
        provenance: Provenance = Provenance.LIVE,
    ) -> "TrendResult":
        """Build a successful result."""
        return cls(success=True, trends=list(trends), total_items=total_items, source=provenance)

    @classmethod
    def failure(cls, error: str) -> "TrendResult":
        """Build a failed result carrying an error message."""
        return cls(success=False, error=error or "Unknown error")

    def with_provenance(self, provenance: Provenance) -> "TrendResult":
        """Return a copy tagged with a different provenance."""
        return self.model_copy(update={"source": provenance})

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize for the presentation layer (camelCase, error only on failure)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_json_dict(cls, data: dict[str, Any]) -> "TrendResult":
        """Rebuild a result from its JSON form."""
        return cls.model_validate(data)
