from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.class_group import ClassGroup
from backend.app.models.student import Student


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def seed_students():
    db = SessionLocal()
    try:
        class_group = ClassGroup(name="PET", schedule="T3, T5")
        db.add(class_group)
        db.commit()
        db.add_all(
            [
                Student(full_name="An", status="studying", class_id=class_group.id, registered_sessions=10, attended_sessions=8),
                Student(full_name="Binh", status="studying", registered_sessions=10, attended_sessions=5),
                Student(full_name="Chi", status="studying", registered_sessions=10, attended_sessions=1),
                Student(full_name="Dung", status="trial", registered_sessions=2, attended_sessions=1),
                Student(full_name="Giang", status="studying", registered_sessions=10, attended_sessions=13),
                Student(full_name="Ha", status="debt", registered_sessions=10, attended_sessions=4),
                Student(full_name="Khoa", status="withdrawn", registered_sessions=10, attended_sessions=12),
                Student(
                    full_name="Lan",
                    status="withdrawn",
                    registered_sessions=10,
                    attended_sessions=12,
                    bad_debt=True,
                    bad_debt_sessions=2,
                    bad_debt_amount=Decimal("300000"),
                    bad_debt_note="Nợ 2 buổi - Tất toán",
                ),
            ]
        )
        db.commit()
    finally:
        db.close()


def test_expiring_soon_lists_studying_students_by_sessions_left():
    seed_students()
    client = TestClient(app)

    resp = client.get("/dashboard/expiring-soon", params={"as_of": "2024-06-02"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["as_of"] == "2024-06-02"
    assert [row["full_name"] for row in data["students"]] == ["An", "Binh"]
    first = data["students"][0]
    assert first["remaining_sessions"] == 2
    assert first["class_name"] == "PET"
    assert first["expected_end_date"] == "2024-06-06"


def test_expiring_soon_custom_threshold():
    seed_students()
    client = TestClient(app)
    data = client.get("/dashboard/expiring-soon", params={"as_of": "2024-06-02", "threshold": 9}).json()
    assert [row["full_name"] for row in data["students"]] == ["An", "Binh", "Chi"]


def test_debt_list_excludes_withdrawn_students():
    seed_students()
    client = TestClient(app)

    data = client.get("/dashboard/debt", params={"as_of": "2024-06-02"}).json()
    assert [row["full_name"] for row in data["students"]] == ["Giang", "Ha"]
    assert data["students"][0]["debt_sessions"] == 3
    assert data["students"][0]["debt_amount"] == "450000.00"
    assert data["total_debt_amount"] == "450000.00"


def test_bad_debt_list():
    seed_students()
    client = TestClient(app)

    data = client.get("/dashboard/bad-debt").json()
    assert [row["full_name"] for row in data["students"]] == ["Lan"]
    assert data["students"][0]["bad_debt_amount"] == "300000.00"
    assert data["total_bad_debt_amount"] == "300000.00"
