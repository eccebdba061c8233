"""
Defensive parsing of weekly-summary model output.

The model is asked for a bare JSON object but does not always comply. Parsing
yields a tagged result:

- ``valid``         JSON decoded and every memberSummaries key matched a member
- ``needs_repair``  JSON decoded but member keys were dropped or synthesized
- ``unparseable``   not JSON; the summary comes from the text heuristics
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import json
import re

from pydantic import ValidationError

from ..exceptions import AIResponseParseError
from ..schemas.report import MemberSummary, StandupDay, WeeklyReportSummary
from ..utils.logging import get_logger
from ..utils.text import first_sentence, is_blank_rich_text, strip_html

logger = get_logger(__name__)

_FENCE_START_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_END_RE = re.compile(r"\s*```$")

BULLET_PREFIXES = ("-", "•", "*")
DEFAULT_TEXT_INSIGHT = "AI analysis completed. Review the data for specific insights."

MAX_SYNTHESIZED_CONTRIBUTIONS = 3
MAX_FOCUS_CHARS = 200

# Checked in order; the first matching group sets the section
SECTION_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("accomplishments", ("accomplishment", "completed", "finished")),
    ("ongoing", ("ongoing", "in progress", "planned")),
    ("blockers", ("blocker", "challenge", "obstacle")),
    ("recommendations", ("recommendation", "suggestion", "action")),
    ("insights", ("insight", "observation", "pattern")),
    ("member", ("member", "summary")),
]


class ParseOutcome(str, Enum):
    VALID = "valid"
    NEEDS_REPAIR = "needs_repair"
    UNPARSEABLE = "unparseable"


@dataclass
class ParsedSummary:
    outcome: ParseOutcome
    summary: WeeklyReportSummary
    dropped_keys: List[str] = field(default_factory=list)
    synthesized_members: bool = False


def strip_code_fence(text: str) -> str:
    """Remove a leading/trailing ``` fence, with or without a json tag."""
    cleaned = (text or "").strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_START_RE.sub("", cleaned, count=1)
        cleaned = _FENCE_END_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def decode_summary_json(text: str) -> Dict[str, Any]:
    """Decode fence-stripped model text into a JSON object.

    Raises:
        AIResponseParseError: if the text is not a JSON object
    """
    cleaned = strip_code_fence(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise AIResponseParseError(f"Model response is not valid JSON: {e}", raw_text=text) from e

    if not isinstance(data, dict):
        raise AIResponseParseError("Model response is not a JSON object", raw_text=text)
    return data


def distinct_member_names(days: List[StandupDay]) -> List[str]:
    names: List[str] = []
    for day in days:
        for member in day.team_members:
            if member.name not in names:
                names.append(member.name)
    return names


def clean_member_key(key: str) -> str:
    return key.strip().strip("\"'").strip()


def clean_member_summaries(
    raw: Any,
    member_names: List[str],
) -> Tuple[Dict[str, MemberSummary], List[str]]:
    """Keep only entries whose key names a real member; return (kept, dropped keys)."""
    if not isinstance(raw, dict):
        return {}, []

    by_lower = {name.lower(): name for name in member_names}
    cleaned: Dict[str, MemberSummary] = {}
    dropped: List[str] = []

    for key, value in raw.items():
        match = by_lower.get(clean_member_key(str(key)).lower())
        if match is None or not isinstance(value, dict):
            dropped.append(str(key))
            continue
        try:
            cleaned[match] = MemberSummary.model_validate(value)
        except ValidationError:
            dropped.append(str(key))

    return cleaned, dropped


def synthesize_member_summaries(days: List[StandupDay]) -> Dict[str, MemberSummary]:
    """Build one summary per member directly from their raw updates."""
    summaries: Dict[str, MemberSummary] = {}

    for name in distinct_member_names(days):
        updates = [member for day in days for member in day.team_members if member.name == name]
        day_count = len(updates)
        role = updates[0].role if updates and updates[0].role else "Developer"

        contributions = []
        for update in updates:
            if not update.yesterday:
                continue
            sentence = first_sentence(strip_html(update.yesterday))
            if sentence:
                contributions.append(sentence)
        contributions = contributions[:MAX_SYNTHESIZED_CONTRIBUTIONS]

        concerns = [
            strip_html(update.blockers)
            for update in updates
            if not is_blank_rich_text(update.blockers)
        ]
        concerns = [concern for concern in concerns if concern]

        todays = [update.today for update in updates if update.today]
        focus = strip_html(todays[-1])[:MAX_FOCUS_CHARS] if todays else ""

        summaries[name] = MemberSummary(
            role=role,
            key_contributions=contributions or [f"Worked on {day_count} day(s) this week"],
            progress=(
                f"Completed work on {day_count} day(s) this week "
                f"with {len(contributions)} key contributions"
            ),
            concerns=concerns or ["No blockers reported"],
            next_week_focus=focus or "Continue current project work",
        )

    return summaries


def parse_summary_response(text: str, days: List[StandupDay]) -> ParsedSummary:
    """Turn raw model text into a usable summary, repairing what it can."""
    member_names = distinct_member_names(days)

    try:
        data = decode_summary_json(text)
    except AIResponseParseError as e:
        logger.warning(f"JSON parsing failed, using text extraction: {e.message}")
        return ParsedSummary(
            outcome=ParseOutcome.UNPARSEABLE,
            summary=extract_summary_from_text(text),
        )

    members, dropped = clean_member_summaries(data.get("memberSummaries"), member_names)
    if dropped:
        logger.info(f"Dropped memberSummaries keys not matching a team member: {dropped}")

    try:
        summary = WeeklyReportSummary.model_validate({
            "keyAccomplishments": data.get("keyAccomplishments"),
            "ongoingWork": data.get("ongoingWork"),
            "blockers": data.get("blockers"),
            "teamInsights": data.get("teamInsights"),
            "recommendations": data.get("recommendations"),
        })
    except ValidationError as e:
        logger.warning(f"Model JSON failed validation, using text extraction: {e}")
        return ParsedSummary(
            outcome=ParseOutcome.UNPARSEABLE,
            summary=extract_summary_from_text(text),
        )

    synthesized = False
    if not members and member_names:
        logger.warning("No valid member summaries in model output, synthesizing from updates")
        members = synthesize_member_summaries(days)
        synthesized = True

    summary.member_summaries = members
    outcome = ParseOutcome.NEEDS_REPAIR if dropped or synthesized else ParseOutcome.VALID
    return ParsedSummary(
        outcome=outcome,
        summary=summary,
        dropped_keys=dropped,
        synthesized_members=synthesized,
    )


def _section_for(lower_line: str, current: str) -> str:
    for section, keywords in SECTION_KEYWORDS:
        if any(keyword in lower_line for keyword in keywords):
            return section
    return current


def extract_summary_from_text(text: str) -> WeeklyReportSummary:
    """Best-effort summary from free text; never raises."""
    lists: Dict[str, List[str]] = {
        "accomplishments": [],
        "ongoing": [],
        "blockers": [],
        "recommendations": [],
    }
    members: Dict[str, Dict[str, Any]] = {}
    team_insights = ""
    section = ""
    current_member: Optional[str] = None

    lines = [line.strip() for line in (text or "").splitlines()]
    for line in (line for line in lines if line):
        lower_line = line.lower()
        section = _section_for(lower_line, section)
        is_bullet = line.startswith(BULLET_PREFIXES)

        if section == "member" and ":" in line and not is_bullet:
            name = line.split(":", 1)[0].strip()
            if 0 < len(name) < 50:
                current_member = name
                members[name] = {
                    "role": "Team Member",
                    "keyContributions": [],
                    "progress": "",
                    "concerns": [],
                    "nextWeekFocus": "",
                }

        if is_bullet:
            item = line[1:].strip()
            if section in lists:
                lists[section].append(item)
            elif section == "member" and current_member in members:
                members[current_member]["keyContributions"].append(item)
        elif section == "insights" and len(line) > 20:
            team_insights = line
        elif current_member in members and len(line) > 10:
            member = members[current_member]
            if "progress" in lower_line or "accomplished" in lower_line:
                member["progress"] = line
            elif "concern" in lower_line or "blocker" in lower_line:
                member["concerns"].append(line)
            elif "next week" in lower_line or "focus" in lower_line:
                member["nextWeekFocus"] = line

    return WeeklyReportSummary.model_validate({
        "keyAccomplishments": lists["accomplishments"],
        "ongoingWork": lists["ongoing"],
        "blockers": lists["blockers"],
        "teamInsights": team_insights or DEFAULT_TEXT_INSIGHT,
        "recommendations": lists["recommendations"],
        "memberSummaries": members,
    })
