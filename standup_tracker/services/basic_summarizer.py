from typing import List

from ..schemas.report import StandupDay, WeeklyReportSummary

# Fixed cap per list, kept for compatibility with stored reports
MAX_ITEMS = 10


def generate_basic_summary(days: List[StandupDay]) -> WeeklyReportSummary:
    """Deterministic, AI-free summary built from the raw update text."""
    accomplishments: List[str] = []
    ongoing_work: List[str] = []
    blockers: List[str] = []

    for day in days:
        for member in day.team_members:
            if member.yesterday.strip():
                accomplishments.append(f"{member.name}: {member.yesterday}")
            if member.today.strip():
                ongoing_work.append(f"{member.name}: {member.today}")
            if member.blockers.strip():
                blockers.append(f"{member.name}: {member.blockers}")

    return WeeklyReportSummary(
        key_accomplishments=accomplishments[:MAX_ITEMS],
        ongoing_work=ongoing_work[:MAX_ITEMS],
        blockers=blockers[:MAX_ITEMS],
        team_insights=(
            f"Auto-generated basic summary for {len(days)} days with "
            f"{len(accomplishments)} accomplishments, {len(ongoing_work)} ongoing tasks, "
            f"and {len(blockers)} blockers."
        ),
        recommendations=[],
        member_summaries={},
    )
