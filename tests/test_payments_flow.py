"""
Payment API.
- instructor creates payments for own students only, student pays own
  payments only, instructor listing with status filter, written reminders.
"""

import uuid

from tests.helpers import (
    auth_header,
    create_instructor_in_db,
    create_student_in_db,
    login,
    setup_instructor_and_student,
)


def _create_payment(client, token, student_id, **overrides):
    body = {"student": student_id, "due_date": "2026-05-01T00:00:00"}
    body.update(overrides)
    return client.post("/api/payments/", json=body, headers=auth_header(token))


def test_instructor_creates_payment_with_plan_fee(client, db_session):
    ctx = setup_instructor_and_student(client, db_session)

    res = _create_payment(client, ctx["instructor_token"], ctx["student_id"])
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["status"] == "pending"
    assert body["membership_plan"] == "2classes"
    assert float(body["amount"]) == 14.99
    assert body["instructor_id"] == ctx["instructor_id"]
    assert body["paid_date"] is None


def test_instructor_cannot_bill_other_instructors_student(client, db_session):
    ctx = setup_instructor_and_student(client, db_session)
    other = create_instructor_in_db(db_session)
    other_token = login(client, other.email, "SenseiPass1")

    res = _create_payment(client, other_token, ctx["student_id"])
    assert res.status_code == 403
    assert res.json()["detail"] == "Not authorized to manage this student"


def test_student_cannot_create_payment(client, db_session):
    ctx = setup_instructor_and_student(client, db_session)

    res = _create_payment(client, ctx["student_token"], ctx["student_id"])
    assert res.status_code == 403
    assert res.json()["detail"] == "User role student is not authorized to access this route"


def test_student_pays_own_payment(client, db_session):
    ctx = setup_instructor_and_student(client, db_session)
    payment_id = _create_payment(client, ctx["instructor_token"], ctx["student_id"]).json()["id"]

    res = client.patch(f"/api/payments/{payment_id}/pay", headers=auth_header(ctx["student_token"]))
    assert res.status_code == 200, res.text
    assert res.json()["status"] == "paid"
    assert res.json()["paid_date"] is not None

    listing = client.get(f"/api/payments/student/{ctx['student_id']}", headers=auth_header(ctx["student_token"]))
    assert listing.status_code == 200
    assert [p["status"] for p in listing.json()] == ["paid"]


def test_student_cannot_pay_someone_elses_payment(client, db_session):
    ctx = setup_instructor_and_student(client, db_session)
    payment_id = _create_payment(client, ctx["instructor_token"], ctx["student_id"]).json()["id"]

    other = create_student_in_db(db_session, instructor=ctx["instructor"])
    other_token = login(client, other.email, "StudentPass1")

    res = client.patch(f"/api/payments/{payment_id}/pay", headers=auth_header(other_token))
    assert res.status_code == 403
    assert res.json()["detail"] == "Not authorized to pay this payment"


def test_pay_unknown_payment_404(client, db_session):
    ctx = setup_instructor_and_student(client, db_session)

    res = client.patch(f"/api/payments/{uuid.uuid4()}/pay", headers=auth_header(ctx["student_token"]))
    assert res.status_code == 404
    assert res.json()["detail"] == "Payment not found"


def test_instructor_payment_list_with_status_filter(client, db_session):
    ctx = setup_instructor_and_student(client, db_session)
    token = ctx["instructor_token"]
    first = _create_payment(client, token, ctx["student_id"], due_date="2026-04-01T00:00:00").json()
    _create_payment(client, token, ctx["student_id"], due_date="2026-05-01T00:00:00")
    client.patch(f"/api/payments/{first['id']}/pay", headers=auth_header(ctx["student_token"]))

    # another instructor's student never shows up
    outsider = create_student_in_db(db_session, instructor=create_instructor_in_db(db_session))
    _create_payment(client, login(client, outsider.instructor.email, "SenseiPass1"), str(outsider.id))

    url = f"/api/payments/instructor/{ctx['instructor_id']}"
    everything = client.get(url, headers=auth_header(token))
    assert everything.status_code == 200, everything.text
    rows = everything.json()
    assert [r["due_date"][:10] for r in rows] == ["2026-05-01", "2026-04-01"]
    assert rows[0]["student"]["email"] == ctx["student_email"]

    pending = client.get(f"{url}?status=pending", headers=auth_header(token)).json()
    assert [r["status"] for r in pending] == ["pending"]

    paid = client.get(f"{url}?status=paid", headers=auth_header(token)).json()
    assert [r["id"] for r in paid] == [first["id"]]

    bad = client.get(f"{url}?status=late", headers=auth_header(token))
    assert bad.status_code == 400


def test_send_reminder(client, db_session, notifier):
    ctx = setup_instructor_and_student(client, db_session)

    res = client.post(
        f"/api/payments/send-reminder/{ctx['student_id']}",
        json={"subject": "Dues", "message": "Please pay this month's fee."},
        headers=auth_header(ctx["instructor_token"]),
    )
    assert res.status_code == 200, res.text
    assert res.json()["message"] == "Reminder sent successfully"
    assert notifier.sent == [(ctx["student_email"], "Dues", "Please pay this month's fee.")]


def test_send_reminder_delivery_failure_500(client, db_session, notifier):
    ctx = setup_instructor_and_student(client, db_session)
    notifier.failing.add(ctx["student_email"])

    res = client.post(
        f"/api/payments/send-reminder/{ctx['student_id']}",
        json={"subject": "Dues", "message": "Please pay."},
        headers=auth_header(ctx["instructor_token"]),
    )
    assert res.status_code == 500
