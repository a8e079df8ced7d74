"""Pydantic models for the TrendPilot pipeline.

RawItem:
    One item fetched from a source (title, source, url, score, ...).

SourceName / ItemKind:
    Enums for item origin and content kind.

Trend:
    Synthesized theme with a clamped 0-100 score and deduplicated sources.

TrendResult:
    Output of one pipeline run, with a Provenance tag.

Example:
    >>> from models import RawItem, SourceName, Trend
    >>> Trend(topic="AI agents", score=150, sources=["Reddit", "Reddit"]).score
    100
"""

from models.item import RawItem, SourceName, ItemKind
from models.trend import Trend, TrendResult, Provenance, clamp_score

__all__ = [
    "RawItem",
    "SourceName",
    "ItemKind",
    "Trend",
    "TrendResult",
    "Provenance",
    "clamp_score",
]
