from __future__ import annotations

import csv
from datetime import date
from typing import Optional, Sequence

from core.data import UserRecord, format_long_date, users_to_frame


CSV_HEADER = ["Name", "Email", "Status", "Revenue", "Country", "Signup Date", "Last Active"]
CSV_PREFIX = "users-data"
REPORT_PREFIX = "users-report"


def export_filename(prefix: str, extension: str, *, on: Optional[date] = None) -> str:
    on = on or date.today()
    return f"{prefix}-{on.isoformat()}.{extension}"


def users_to_csv(users: Sequence[UserRecord]) -> str:
    df = users_to_frame(users)
    out = df.assign(revenue=df["revenue"].apply(lambda v: f"${int(v)}"))[
        ["name", "email", "status", "revenue", "country", "signup_date", "last_active"]
    ]
    out.columns = CSV_HEADER
    body = out.to_csv(index=False, header=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    return ",".join(CSV_HEADER) + "\n" + body


def users_to_report(users: Sequence[UserRecord], *, title: str, generated_on: Optional[date] = None) -> str:
    generated_on = generated_on or date.today()
    lines = [
        f"{title} - User Report",
        f"Generated on: {format_long_date(generated_on)}",
        f"Total Users: {len(users)}",
        "",
        "User Details:",
    ]
    lines.extend(
        f"Name: {u.name}, Email: {u.email}, Signup: {format_long_date(u.signup_date)}, Status: {u.status}"
        for u in users
    )
    return "\n".join(lines) + "\n"
