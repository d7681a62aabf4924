"""
Cancellation of PENDING requests by their owner.
A cancelled request never touches the balance or attendance and no longer
blocks an overlapping application.
"""
from fastapi import status

from app.models.attendance import Attendance
from app.models.leave import LeaveBalance, LeaveRequest, LeaveStatus, LeaveType


def _apply(client, headers, start="2026-01-05", end="2026-01-09"):
    response = client.post(
        "/api/v1/leaves/apply",
        json={
            "leave_type": "PAID",
            "start_date": start,
            "end_date": end,
            "reason": "Plans changed, need time off",
        },
        headers=headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def _cancel(client, leave_id, headers):
    return client.post(f"/api/v1/leaves/{leave_id}/cancel", headers=headers)


def test_owner_cancels_pending_request(client, db, clock, employee, balances, headers_for):
    leave = _apply(client, headers_for(employee))
    clock.advance(hours=2)

    response = _cancel(client, leave["id"], headers_for(employee))

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "CANCELLED"
    assert data["cancelled_at"].startswith("2026-01-05T11:00:00")

    balance = db.query(LeaveBalance).filter(
        LeaveBalance.employee_id == employee.id,
        LeaveBalance.leave_type == LeaveType.PAID,
    ).first()
    db.refresh(balance)
    assert balance.used == 0
    assert balance.remaining == 20
    assert db.query(Attendance).count() == 0


def test_cancel_someone_elses_request(client, db, employee, other_employee, balances, headers_for):
    leave = _apply(client, headers_for(employee))

    response = _cancel(client, leave["id"], headers_for(other_employee))

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["code"] == "FORBIDDEN"
    stored = db.query(LeaveRequest).filter(LeaveRequest.id == leave["id"]).first()
    db.refresh(stored)
    assert stored.status == LeaveStatus.PENDING


def test_reviewer_cannot_cancel_on_behalf_of_employee(client, employee, hr_user, balances, headers_for):
    leave = _apply(client, headers_for(employee))

    response = _cancel(client, leave["id"], headers_for(hr_user))

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_cancel_approved_request_fails(client, db, employee, hr_user, balances, headers_for):
    leave = _apply(client, headers_for(employee))
    client.post(
        f"/api/v1/leaves/{leave['id']}/review",
        json={"decision": "APPROVED"},
        headers=headers_for(hr_user),
    )

    response = _cancel(client, leave["id"], headers_for(employee))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "INVALID_STATE"
    # Approved leave stays charged and marked
    assert db.query(Attendance).count() == 5


def test_cancel_twice_fails(client, employee, balances, headers_for):
    leave = _apply(client, headers_for(employee))
    assert _cancel(client, leave["id"], headers_for(employee)).status_code == 200

    response = _cancel(client, leave["id"], headers_for(employee))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "INVALID_STATE"


def test_cancel_missing_request(client, employee, balances, headers_for):
    response = _cancel(client, 4242, headers_for(employee))

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["code"] == "NOT_FOUND"


def test_cancelled_request_cannot_be_reviewed(client, employee, hr_user, balances, headers_for):
    leave = _apply(client, headers_for(employee))
    _cancel(client, leave["id"], headers_for(employee))

    response = client.post(
        f"/api/v1/leaves/{leave['id']}/review",
        json={"decision": "APPROVED"},
        headers=headers_for(hr_user),
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "ALREADY_REVIEWED"


def test_cancelled_request_does_not_block_reapplication(client, employee, balances, headers_for):
    headers = headers_for(employee)
    leave = _apply(client, headers)
    _cancel(client, leave["id"], headers)

    again = _apply(client, headers)

    assert again["status"] == "PENDING"
    assert again["id"] != leave["id"]


def test_cancelled_request_shows_in_history(client, employee, balances, headers_for):
    headers = headers_for(employee)
    leave = _apply(client, headers)
    _cancel(client, leave["id"], headers)

    response = client.get("/api/v1/leaves/my?status=CANCELLED", headers=headers)

    assert response.status_code == status.HTTP_200_OK
    items = response.json()["items"]
    assert [item["id"] for item in items] == [leave["id"]]
    assert items[0]["status"] == "CANCELLED"
