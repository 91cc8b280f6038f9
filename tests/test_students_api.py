from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import engine
from backend.app.main import app


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def create_class(client: TestClient, **overrides) -> int:
    payload = {"name": "Starters B", "course_name": "Cambridge Starters", "schedule": "T2, T4"}
    payload.update(overrides)
    resp = client.post("/classes/", json=payload)
    assert resp.status_code == 201
    return resp.json()["id"]


def create_student(client: TestClient, **overrides) -> dict:
    payload = {"full_name": "Hoang E", "registered_sessions": 10, "attended_sessions": 12}
    payload.update(overrides)
    resp = client.post("/students/", json=payload)
    assert resp.status_code == 201
    return resp.json()


def test_create_and_get_student():
    client = TestClient(app)
    class_id = create_class(client)
    student = create_student(client, class_id=class_id, registered_sessions=20, attended_sessions=3)

    resp = client.get(f"/students/{student['id']}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["full_name"] == "Hoang E"
    assert data["status"] == "studying"
    assert data["class_id"] == class_id
    assert data["bad_debt"] is False


def test_create_student_with_unknown_class():
    client = TestClient(app)
    resp = client.post("/students/", json={"full_name": "X", "class_id": 42})
    assert resp.status_code == 404


def test_get_missing_student():
    client = TestClient(app)
    assert client.get("/students/999").status_code == 404


def test_ledger_projects_end_date():
    client = TestClient(app)
    class_id = create_class(client)
    student = create_student(client, class_id=class_id, registered_sessions=10, attended_sessions=7)

    resp = client.get(f"/students/{student['id']}/ledger", params={"as_of": "2024-06-02"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["remaining_sessions"] == 3
    assert data["debt_sessions"] == 0
    assert data["is_expiring_soon"] is True
    assert data["schedule_days"] == [1, 3]
    assert data["expected_end_date"] == "2024-06-10"
    assert data["upcoming_sessions"] == ["2024-06-03", "2024-06-05", "2024-06-10"]


def test_withdrawing_student_in_arrears_sets_bad_debt():
    client = TestClient(app)
    student = create_student(client, registered_sessions=5, attended_sessions=8)

    resp = client.patch(f"/students/{student['id']}/enrollment", json={"status": "withdrawn"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["bad_debt"] is True
    assert data["bad_debt_sessions"] == 3
    assert Decimal(data["bad_debt_amount"]) == Decimal("450000")


def test_enrollment_update_rejects_negative_counters():
    client = TestClient(app)
    student = create_student(client)
    resp = client.patch(f"/students/{student['id']}/enrollment", json={"attended_sessions": -1})
    assert resp.status_code == 422


def test_reconcile_endpoint_reports_action():
    client = TestClient(app)
    student = create_student(client, registered_sessions=10, attended_sessions=4)

    resp = client.post(f"/students/{student['id']}/reconcile")
    assert resp.status_code == 200
    data = resp.json()
    assert data["action"] == "no-action"
    assert data["student"]["id"] == student["id"]


def test_settlement_endpoint_paid():
    client = TestClient(app)
    class_id = create_class(client)
    student = create_student(client, class_id=class_id)

    resp = client.post(
        f"/students/{student['id']}/settlement",
        json={"decision": "paid", "payment_method": "transfer", "collected_by_name": "Thu ngân"},
    )
    assert resp.status_code == 201
    invoice = resp.json()
    assert invoice["invoice_code"].startswith("STL-")
    assert invoice["status"] == "paid"
    assert invoice["debt_sessions"] == 2
    assert Decimal(invoice["total_amount"]) == Decimal("300000")
    assert Decimal(invoice["remaining_amount"]) == Decimal("0")
    assert invoice["class_name"] == "Starters B"

    data = client.get(f"/students/{student['id']}").json()
    assert data["status"] == "withdrawn"
    assert data["class_id"] is None
    assert data["bad_debt"] is False


def test_settlement_endpoint_bad_debt_then_listed():
    client = TestClient(app)
    student = create_student(client)

    resp = client.post(f"/students/{student['id']}/settlement", json={"decision": "bad_debt", "note": "<i>Mất liên lạc</i>"})
    assert resp.status_code == 201
    assert resp.json()["note"] == "Mất liên lạc"

    data = client.get(f"/students/{student['id']}").json()
    assert data["bad_debt"] is True
    assert data["bad_debt_note"] == "Mất liên lạc"

    history = client.get(f"/students/{student['id']}/settlements").json()
    assert [row["status"] for row in history] == ["bad_debt"]

    listed = client.get("/settlements/", params={"status": "bad_debt"}).json()
    assert [row["student_id"] for row in listed] == [student["id"]]
    assert client.get("/settlements/", params={"status": "paid"}).json() == []


def test_settlement_without_debt_returns_400():
    client = TestClient(app)
    student = create_student(client, registered_sessions=10, attended_sessions=10)

    resp = client.post(f"/students/{student['id']}/settlement", json={"decision": "paid"})
    assert resp.status_code == 400
    assert resp.json()["code"] == "VALIDATION_ERROR"


def test_settlement_for_missing_student_returns_404():
    client = TestClient(app)
    resp = client.post("/students/999/settlement", json={"decision": "paid"})
    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"


def test_settlement_rejects_unknown_decision():
    client = TestClient(app)
    student = create_student(client)
    resp = client.post(f"/students/{student['id']}/settlement", json={"decision": "forgive"})
    assert resp.status_code == 422


@pytest.mark.parametrize("field", ["status", "registered_sessions", "attended_sessions"])
def test_enrollment_update_rejects_null_and_writes_nothing(field):
    client = TestClient(app)
    student = create_student(client, registered_sessions=10, attended_sessions=4)

    resp = client.patch(f"/students/{student['id']}/enrollment", json={field: None})
    assert resp.status_code == 422

    data = client.get(f"/students/{student['id']}").json()
    assert data["status"] == "studying"
    assert data["registered_sessions"] == 10
    assert data["attended_sessions"] == 4


def test_enrollment_update_can_unassign_class():
    client = TestClient(app)
    class_id = create_class(client)
    student = create_student(client, class_id=class_id, registered_sessions=10, attended_sessions=4)

    resp = client.patch(f"/students/{student['id']}/enrollment", json={"class_id": None})
    assert resp.status_code == 200
    assert resp.json()["class_id"] is None
