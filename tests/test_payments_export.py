"""
Payment list export (CSV / XLSX).
- instructor only, attachment headers, BOM-prefixed CSV, XLSX signature and
  contents.
"""

import csv
import io

from openpyxl import load_workbook

from tests.helpers import auth_header, setup_instructor_and_student


def _seed_payment(client, ctx):
    res = client.post(
        "/api/payments/",
        json={"student": ctx["student_id"], "due_date": "2026-05-01T00:00:00"},
        headers=auth_header(ctx["instructor_token"]),
    )
    assert res.status_code == 201, res.text


def test_export_csv(client, db_session):
    ctx = setup_instructor_and_student(client, db_session, full_name="Lee Student")
    _seed_payment(client, ctx)

    res = client.get(
        f"/api/payments/instructor/{ctx['instructor_id']}/export",
        headers=auth_header(ctx["instructor_token"]),
    )
    assert res.status_code == 200, res.text
    assert res.headers["content-type"].startswith("text/csv")
    assert "attachment" in res.headers.get("content-disposition", "")

    text = res.content.decode("utf-8")
    assert text.startswith("\ufeff")

    rows = list(csv.reader(io.StringIO(text.lstrip("\ufeff"))))
    assert rows[0] == ["student", "email", "plan", "amount", "due_date", "status", "paid_date"]
    assert rows[1] == ["Lee Student", ctx["student_email"], "2classes", "14.99", "05/01/2026", "pending", ""]


def test_export_xlsx(client, db_session):
    ctx = setup_instructor_and_student(client, db_session, full_name="Lee Student")
    _seed_payment(client, ctx)

    res = client.get(
        f"/api/payments/instructor/{ctx['instructor_id']}/export.xlsx?status=pending",
        headers=auth_header(ctx["instructor_token"]),
    )
    assert res.status_code == 200
    assert res.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert "pending" in res.headers.get("content-disposition", "")

    # XLSX is a ZIP container
    assert res.content[:2] == b"PK"

    ws = load_workbook(io.BytesIO(res.content)).active
    assert ws.title == "payments"
    values = [list(r) for r in ws.iter_rows(values_only=True)]
    assert values[1][0] == "Lee Student"
    assert values[1][5] == "pending"


def test_export_requires_instructor(client, db_session):
    ctx = setup_instructor_and_student(client, db_session)

    res = client.get(
        f"/api/payments/instructor/{ctx['instructor_id']}/export",
        headers=auth_header(ctx["student_token"]),
    )
    assert res.status_code == 403
