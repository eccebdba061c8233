"""Tests for CSV export of weekly reports."""

from datetime import date

from standup_tracker.schemas.report import StandupDay, WeeklyReport
from standup_tracker.services.csv_export import csv_filename, report_to_csv


def create_report(days) -> WeeklyReport:
    return WeeklyReport(week_start=date(2024, 1, 8), week_end=date(2024, 1, 14), entries=days)


class TestReportToCsv:

    def test_header_only_for_empty_report(self):
        assert report_to_csv(create_report([])) == (
            '"Date","Team Member","Role","Yesterday","Today","Blockers"\n'
        )

    def test_every_field_quoted(self, make_update):
        report = create_report([StandupDay(date=date(2024, 1, 9), team_members=[
            make_update("Alice", yesterday="Login, signup", today="Payments", blockers=""),
        ])])

        lines = report_to_csv(report).splitlines()

        assert lines[1] == '"2024-01-09","Alice","Developer","Login, signup","Payments",""'

    def test_embedded_quotes_are_doubled(self, make_update):
        report = create_report([StandupDay(date=date(2024, 1, 9), team_members=[
            make_update("Alice", yesterday='Fixed the "save" button'),
        ])])

        assert '"Fixed the ""save"" button"' in report_to_csv(report)

    def test_rows_follow_day_then_member_order(self, make_day):
        report = create_report([
            make_day(date(2024, 1, 8), "Alice", "Bob"),
            make_day(date(2024, 1, 9), "Carol"),
        ])

        rows = report_to_csv(report).splitlines()[1:]

        assert [row.split(",")[1] for row in rows] == ['"Alice"', '"Bob"', '"Carol"']

    def test_filename(self):
        assert csv_filename(create_report([])) == "weekly-report-2024-01-08-2024-01-14.csv"
