from typing import Iterable, List
import csv
import io

from ..schemas.report import WeeklyReport

CSV_HEADER = ["Date", "Team Member", "Role", "Yesterday", "Today", "Blockers"]


def report_rows(report: WeeklyReport) -> Iterable[List[str]]:
    """One row per member update, in day order"""
    for day in report.entries:
        for member in day.team_members:
            yield [
                day.date.isoformat(),
                member.name,
                member.role,
                member.yesterday,
                member.today,
                member.blockers,
            ]


def report_to_csv(report: WeeklyReport) -> str:
    """Render a report's entries as CSV with every field quoted"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    writer.writerows(report_rows(report))
    return buffer.getvalue()


def csv_filename(report: WeeklyReport) -> str:
    return f"weekly-report-{report.week_start.isoformat()}-{report.week_end.isoformat()}.csv"
