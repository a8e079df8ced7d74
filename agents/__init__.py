"""Trend synthesis for the TrendPilot pipeline.

TrendSummarizer:
    One chat-completion call that turns aggregated items into 3-5 trends.
    Falls back to generate_fallback on any failure.

generate_fallback:
    Deterministic per-source trends with no external dependency.

Example:
    >>> from agents import TrendSummarizer
    >>> outcome = await TrendSummarizer(config).summarize_detailed(items)
    >>> outcome.used_fallback
    False
"""

from agents.fallback import generate_fallback
from agents.summarizer import SummarizationFailure, SummaryOutcome, TrendSummarizer

__all__ = [
    "TrendSummarizer",
    "SummaryOutcome",
    "SummarizationFailure",
    "generate_fallback",
]
