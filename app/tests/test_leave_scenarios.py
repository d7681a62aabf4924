"""
End-to-end walkthrough of the leave lifecycle for one employee:
apply -> approve -> insufficient balance -> overlap -> re-review -> cancel.
"""
from datetime import date

from fastapi import status

from app.models.attendance import Attendance, AttendanceStatus
from app.models.leave import LeaveBalance, LeaveType
from app.services.leave_balance_service import get_balance


def _apply(client, headers, leave_type, start, end):
    return client.post(
        "/api/v1/leaves/apply",
        json={
            "leave_type": leave_type,
            "start_date": start,
            "end_date": end,
            "reason": "Personal matters to attend to",
        },
        headers=headers,
    )


def _balance_view(client, headers, leave_type):
    items = client.get("/api/v1/leaves/balances", headers=headers).json()["items"]
    item = next(i for i in items if i["leave_type"] == leave_type)
    return {k: item[k] for k in ("total_allocated", "used", "remaining")}


def test_leave_lifecycle_walkthrough(client, db, employee, hr_user, balances, headers_for):
    me = headers_for(employee)
    hr = headers_for(hr_user)

    # Mon-Fri PAID leave against a fresh balance of 20
    applied = _apply(client, me, "PAID", "2026-01-05", "2026-01-09")
    assert applied.status_code == status.HTTP_201_CREATED
    paid = applied.json()
    assert paid["status"] == "PENDING"
    assert paid["days_requested"] == 5
    assert _balance_view(client, me, "PAID") == {"total_allocated": 20, "used": 0, "remaining": 20}

    # Approval charges the balance and marks five LEAVE days
    assert client.post(f"/api/v1/leaves/{paid['id']}/review", json={"decision": "APPROVED"}, headers=hr).status_code == 200
    assert _balance_view(client, me, "PAID") == {"total_allocated": 20, "used": 5, "remaining": 15}
    leave_days = db.query(Attendance).filter(
        Attendance.employee_id == employee.id,
        Attendance.status == AttendanceStatus.LEAVE,
    ).count()
    assert leave_days == 5

    # SICK balance down to 3 cannot cover a 5-weekday request
    sick = get_balance(db, employee.id, LeaveType.SICK, 2026)
    sick.used = 7
    sick.remaining = 3
    db.commit()
    insufficient = _apply(client, me, "SICK", "2026-02-02", "2026-02-06")
    assert insufficient.status_code == status.HTTP_400_BAD_REQUEST
    assert "available: 3, requested: 5" in insufficient.json()["detail"]

    # Jan 10-14 pending, then Jan 13-17 overlaps it
    first = _apply(client, me, "CASUAL", "2026-01-10", "2026-01-14")
    assert first.status_code == status.HTTP_201_CREATED
    overlapping = _apply(client, me, "CASUAL", "2026-01-13", "2026-01-17")
    assert overlapping.status_code == status.HTTP_409_CONFLICT
    assert overlapping.json()["code"] == "OVERLAPPING_REQUEST"

    # The approved request cannot be reviewed again
    again = client.post(f"/api/v1/leaves/{paid['id']}/review", json={"decision": "REJECTED"}, headers=hr)
    assert again.status_code == status.HTTP_400_BAD_REQUEST
    assert again.json()["code"] == "ALREADY_REVIEWED"

    # Cancelling the pending request never touches the balance
    before = _balance_view(client, me, "CASUAL")
    cancelled = client.post(f"/api/v1/leaves/{first.json()['id']}/cancel", headers=me)
    assert cancelled.json()["status"] == "CANCELLED"
    assert _balance_view(client, me, "CASUAL") == before == {"total_allocated": 10, "used": 0, "remaining": 10}

    # Conservation and non-negativity hold on every row
    for balance in db.query(LeaveBalance).all():
        db.refresh(balance)
        assert balance.remaining >= 0
        assert balance.used + balance.remaining == balance.total_allocated

    # Only the approved weekdays were touched
    marked = {r.work_date for r in db.query(Attendance).filter(Attendance.employee_id == employee.id).all()}
    assert marked == {date(2026, 1, d) for d in range(5, 10)}
