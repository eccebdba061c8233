from typing import Dict, Any, List, Optional
import json

from ..config import settings
from ..schemas.report import StandupDay, WeekRange, WeeklyReportSummary
from ..services.llm_provider import LLMProvider, get_llm_provider
from ..utils.logging import get_logger
from .response_parser import ParsedSummary, distinct_member_names, parse_summary_response

logger = get_logger(__name__)


class WeeklySummaryAgent:
    """Agent that turns a week of standup updates into a structured summary"""

    def __init__(self, llm_provider: Optional[LLMProvider] = None, max_tokens: Optional[int] = None):
        self.llm_provider = llm_provider or get_llm_provider()
        self.max_tokens = max_tokens or settings.summary_max_tokens

    def get_system_prompt(self) -> str:
        return """You are a project manager creating a weekly standup summary.

CRITICAL RULES:
1. The memberSummaries object must use EXACT member names as keys (no quotes around the keys)
2. Do NOT use generic field names like "role", "concerns", "progress" as keys
3. Do NOT escape quotes in JSON keys - use clean member names directly
4. Return ONLY valid JSON without any markdown formatting or code blocks (no ``` fences)

Return ONLY a JSON object with exactly these keys:
{
  "keyAccomplishments": ["accomplishment 1", "accomplishment 2"],
  "ongoingWork": ["ongoing work 1", "ongoing work 2"],
  "blockers": ["blocker 1", "blocker 2"],
  "teamInsights": "Brief team observation",
  "recommendations": ["recommendation 1", "recommendation 2"],
  "memberSummaries": {
    "<exact member name>": {
      "role": "Developer",
      "keyContributions": ["contribution 1", "contribution 2"],
      "progress": "Brief progress summary",
      "concerns": ["concern 1"],
      "nextWeekFocus": "What they're focusing on next"
    }
  }
}"""

    def serialize_week(self, days: List[StandupDay]) -> List[Dict[str, Any]]:
        """Week data as sent to the model; rich-text HTML is kept as-is"""
        return [
            {
                "date": day.date.isoformat(),
                "teamMembers": [
                    {
                        "name": member.name,
                        "role": member.role,
                        "yesterday": member.yesterday,
                        "today": member.today,
                        "blockers": member.blockers,
                    }
                    for member in day.team_members
                ],
            }
            for day in days
        ]

    def build_prompt(
        self,
        days: List[StandupDay],
        week: WeekRange,
        custom_prompt: Optional[str] = None
    ) -> str:
        """Format the week's updates into the user prompt"""
        if custom_prompt:
            return custom_prompt

        member_list = ", ".join(distinct_member_names(days))
        week_data = json.dumps(self.serialize_week(days), indent=2, ensure_ascii=False)

        return f"""Analyze this standup data for {week.week_start.isoformat()} to {week.week_end.isoformat()}:

{week_data}

IMPORTANT: The team members are: {member_list}

Create a summary with:
1. Team accomplishments, ongoing work, and blockers
2. Individual summaries for each team member

CRITICAL: In memberSummaries, use ONLY these exact names as keys: {member_list}
Do NOT use any other keys like "role", "concerns", "progress", etc.

Return only valid JSON."""

    async def _call_llm(self, prompt: str) -> Dict[str, Any]:
        """Call LLM to generate summary using LLMProvider"""
        return await self.llm_provider.generate_completion(
            prompt=prompt,
            system_prompt=self.get_system_prompt(),
            max_tokens=self.max_tokens,
        )

    async def summarize(
        self,
        days: List[StandupDay],
        week: WeekRange,
        custom_prompt: Optional[str] = None
    ) -> WeeklyReportSummary:
        """Summarize the week; always returns a usable summary.

        Any failure (transport, HTTP status, timeout, unexpected error while
        repairing the output) yields the failure-sentinel summary instead of
        raising.
        """
        try:
            parsed = await self.summarize_detailed(days, week, custom_prompt)
            return parsed.summary
        except Exception as e:
            logger.error(f"AI summary generation failed for {week}: {e}", exc_info=True)
            return WeeklyReportSummary.ai_failure()

    async def summarize_detailed(
        self,
        days: List[StandupDay],
        week: WeekRange,
        custom_prompt: Optional[str] = None
    ) -> ParsedSummary:
        """Like summarize() but exposes the parse outcome and propagates errors"""
        logger.info(f"Requesting AI summary for {week} ({len(days)} days)")

        prompt = self.build_prompt(days, week, custom_prompt)
        llm_response = await self._call_llm(prompt)

        parsed = parse_summary_response(llm_response.get("content", ""), days)
        logger.info(
            f"AI summary parsed as {parsed.outcome.value} with "
            f"{len(parsed.summary.member_summaries)} member summaries "
            f"(tokens used: {llm_response.get('tokens_used', 0)})"
        )
        return parsed
