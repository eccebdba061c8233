"""
Field drafting agent

Drafts a member's yesterday / today / blockers standup fields. Used by the
submission form, not by the weekly report pipeline.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional
import asyncio
import json

from ..config import settings
from ..schemas.report import TeamMemberUpdate
from ..services.llm_provider import LLMProvider, get_llm_provider
from ..utils.logging import get_logger

logger = get_logger(__name__)

FIELD_TYPES = ("yesterday", "today", "blockers")

HTML_RULES = """The response should be:
- HTML format with proper tags (use <p>, <ul>, <li>, <strong> tags)
- Direct and concise - no introductory fluff or explanations
- Relevant to their role
- Use <strong> for bold text, not **markdown** syntax"""

SYSTEM_PROMPTS: Dict[str, str] = {
    "yesterday": f"""You are an AI assistant helping a team member generate a "What did you do yesterday?" update for their daily standup.

Generate a brief, direct summary of what they accomplished the previous day. Be realistic and achievable for one day's work, and start immediately with the content, no preamble.

{HTML_RULES}""",
    "today": f"""You are an AI assistant helping a team member generate a "What will you do today?" update for their daily standup.

Based on the team member's role and any previous context, generate a realistic plan for what they should focus on today. Show progression from previous work if applicable.

{HTML_RULES}""",
    "blockers": f"""You are an AI assistant helping a team member generate a "Any blockers or challenges?" update for their daily standup.

Based on the team member's role and any previous context, list realistic blockers or challenges such as dependencies, technical issues or resource constraints. If there are none, say so.

{HTML_RULES}""",
}

FIELD_QUESTIONS = {
    "yesterday": '"What did you do yesterday?"',
    "today": '"What will you do today?"',
    "blockers": '"Any blockers or challenges?"',
}

RECENT_CONTEXT_DAYS = 3
RECENT_CONTEXT_LIMIT = 3


def fallback_text(field_type: str) -> str:
    return f"AI generation failed. Please enter your {field_type} update manually."


class FieldDraftAgent:
    """Generates draft standup fields for one team member"""

    def __init__(self, llm_provider: Optional[LLMProvider] = None):
        self.llm_provider = llm_provider or get_llm_provider()

    def _recent_entries(
        self,
        previous_entries: List[TeamMemberUpdate],
        now: Optional[datetime] = None,
    ) -> List[TeamMemberUpdate]:
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=RECENT_CONTEXT_DAYS)
        recent = []
        for entry in previous_entries:
            if entry.last_updated is None:
                continue
            stamp = entry.last_updated
            if stamp.tzinfo is None:
                stamp = stamp.replace(tzinfo=timezone.utc)
            if stamp >= cutoff:
                recent.append(entry)
        return recent[-RECENT_CONTEXT_LIMIT:]

    def build_prompt(
        self,
        member_name: str,
        member_role: str,
        field_type: str,
        context: Optional[str] = None,
        previous_entries: Optional[List[TeamMemberUpdate]] = None,
        target_date: Optional[date] = None,
    ) -> str:
        previous_entries = previous_entries or []
        if field_type == "yesterday":
            history = self._recent_entries(previous_entries)
        else:
            history = previous_entries[-RECENT_CONTEXT_LIMIT:]

        lines = [
            f"Generate a {FIELD_QUESTIONS[field_type]} update for:",
            f"- Name: {member_name}",
            f"- Role: {member_role}",
        ]
        if target_date:
            lines.append(f"- Date: {target_date.isoformat()}")
        if context:
            lines.append(f"- Additional context: {context}")
        if history:
            payload = [entry.model_dump(mode="json", by_alias=True) for entry in history]
            lines.append(f"- Previous entries for context: {json.dumps(payload, indent=2)}")
        lines.append("")
        lines.append("Provide the content in HTML format only, no introductory text.")
        return "\n".join(lines)

    async def generate_field(
        self,
        member_name: str,
        member_role: str,
        field_type: str,
        context: Optional[str] = None,
        previous_entries: Optional[List[TeamMemberUpdate]] = None,
        target_date: Optional[date] = None,
    ) -> str:
        """Draft one field; returns a manual-entry hint instead of raising"""
        if field_type not in FIELD_TYPES:
            raise ValueError(f"Unknown field type: {field_type}")

        try:
            response = await self.llm_provider.generate_completion(
                prompt=self.build_prompt(member_name, member_role, field_type, context, previous_entries, target_date),
                system_prompt=SYSTEM_PROMPTS[field_type],
                max_tokens=settings.field_max_tokens,
            )
            content = (response.get("content") or "").strip()
            if not content:
                raise ValueError("empty completion")
            return content
        except Exception as e:
            logger.error(f"AI field generation failed for {member_name} ({field_type}): {e}")
            return fallback_text(field_type)

    async def generate_full_report(
        self,
        member_name: str,
        member_role: str,
        previous_entries: Optional[List[TeamMemberUpdate]] = None,
        target_date: Optional[date] = None,
    ) -> Dict[str, str]:
        """Draft all three fields concurrently"""
        yesterday, today, blockers = await asyncio.gather(
            self.generate_field(member_name, member_role, "yesterday", previous_entries=previous_entries, target_date=target_date),
            self.generate_field(member_name, member_role, "today", previous_entries=previous_entries),
            self.generate_field(member_name, member_role, "blockers", previous_entries=previous_entries),
        )
        return {"yesterday": yesterday, "today": today, "blockers": blockers}
