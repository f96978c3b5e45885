from __future__ import annotations

from datetime import date

from core.export import CSV_PREFIX, REPORT_PREFIX, export_filename, users_to_csv, users_to_report
from tests.conftest import make_user


def _users():
    return [
        make_user(1, name="John Doe", revenue=1234, signup_date=date(2024, 1, 5), last_active=date(2024, 6, 1)),
        make_user(2, name="Jane Smith", status="pending", revenue=100, country="UK", signup_date=date(2023, 12, 31), last_active=date(2024, 6, 2)),
    ]


def test_csv_layout() -> None:
    lines = users_to_csv(_users()).splitlines()
    assert lines[0] == "Name,Email,Status,Revenue,Country,Signup Date,Last Active"
    assert lines[1] == '"John Doe","john.doe@example.com","active","$1234","USA","2024-01-05","2024-06-01"'
    assert lines[2] == '"Jane Smith","jane.smith@example.com","pending","$100","UK","2023-12-31","2024-06-02"'
    assert len(lines) == 3


def test_csv_for_empty_snapshot_is_header_only() -> None:
    assert users_to_csv([]) == "Name,Email,Status,Revenue,Country,Signup Date,Last Active\n"


def test_text_report_layout() -> None:
    text = users_to_report(_users(), title="Insights Dashboard", generated_on=date(2024, 6, 15))
    lines = text.splitlines()
    assert lines[0] == "Insights Dashboard - User Report"
    assert lines[1] == "Generated on: Jun 15, 2024"
    assert lines[2] == "Total Users: 2"
    assert lines[4] == "User Details:"
    assert lines[5] == "Name: John Doe, Email: john.doe@example.com, Signup: Jan 5, 2024, Status: active"
    assert lines[6] == "Name: Jane Smith, Email: jane.smith@example.com, Signup: Dec 31, 2023, Status: pending"


def test_export_filenames() -> None:
    on = date(2024, 6, 15)
    assert export_filename(CSV_PREFIX, "csv", on=on) == "users-data-2024-06-15.csv"
    assert export_filename(REPORT_PREFIX, "txt", on=on) == "users-report-2024-06-15.txt"
