"""
AI agents for the standup tracker.

- WeeklySummaryAgent: structured weekly summary with defensive parsing
- FieldDraftAgent: drafts individual standup fields
"""

from .weekly_summary_agent import WeeklySummaryAgent
from .field_draft_agent import FieldDraftAgent
from .response_parser import (
    ParseOutcome,
    ParsedSummary,
    extract_summary_from_text,
    parse_summary_response,
    strip_code_fence,
)

__all__ = [
    "WeeklySummaryAgent",
    "FieldDraftAgent",
    "ParseOutcome",
    "ParsedSummary",
    "extract_summary_from_text",
    "parse_summary_response",
    "strip_code_fence",
]
