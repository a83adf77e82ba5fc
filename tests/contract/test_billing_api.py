"""Contract tests for the billing HTTP endpoints."""

import pytest
from fastapi.testclient import TestClient

from src.api.app import app
from src.models import BillingEntity, BillingEntityMember
from src.services import get_db


@pytest.fixture
def client(session_factory):
    """Test client whose requests use the in-memory test database."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def owner(db_session, community, units):
    """Billing entity holding A1 and A2 from seq 1 onward."""
    entity = BillingEntity(community_id=community.id, code="E1", name="Owner A")
    db_session.add(entity)
    db_session.flush()
    db_session.add_all(
        [
            BillingEntityMember(billing_entity_id=entity.id, unit_id=units[0].id, start_seq=1),
            BillingEntityMember(billing_entity_id=entity.id, unit_id=units[1].id, start_seq=1),
        ]
    )
    db_session.commit()
    return entity


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestAllocateEndpoint:
    def test_allocate_expense(self, client, units, equal_rule, add_expense):
        expense = add_expense("100.00")

        response = client.post(f"/expenses/{expense.id}/allocate")

        assert response.status_code == 200
        body = response.json()
        assert body["expense_id"] == expense.id
        assert body["total"] == "100.00"
        assert body["weight_vector_id"] is not None
        assert body["lines"] == [
            {"unit_id": units[0].id, "amount": "33.34"},
            {"unit_id": units[1].id, "amount": "33.33"},
            {"unit_id": units[2].id, "amount": "33.33"},
        ]

    def test_missing_expense_is_404(self, client, equal_rule):
        response = client.post("/expenses/999/allocate")

        assert response.status_code == 404
        assert response.json() == {
            "detail": {"error": {"code": "not_found", "message": "Expense 999 not found"}}
        }

    def test_unsupported_target_type_is_422(self, client, units, equal_rule, add_expense):
        expense = add_expense("10.00", target_type="BUILDING")

        response = client.post(f"/expenses/{expense.id}/allocate")

        assert response.status_code == 422
        assert response.json()["detail"]["error"]["code"] == "unsupported_target_type"


class TestAllocatePeriodEndpoint:
    def test_recomputes_every_expense(self, client, period, units, equal_rule, add_expense):
        shared = add_expense("30.00")
        private = add_expense("5.00", target_type="UNIT", target_id=units[1].id)

        response = client.post(f"/periods/{period.id}/allocate")

        assert response.status_code == 200
        body = response.json()
        assert body["period_id"] == period.id
        assert [item["expense_id"] for item in body["expenses"]] == [shared.id, private.id]
        assert [item["total"] for item in body["expenses"]] == ["30.00", "5.00"]
        assert body["expenses"][1]["lines"] == [{"unit_id": units[1].id, "amount": "5.00"}]

    def test_period_without_expenses(self, client, period):
        response = client.post(f"/periods/{period.id}/allocate")

        assert response.status_code == 200
        assert response.json() == {"period_id": period.id, "expenses": []}

    def test_missing_period_is_404(self, client):
        response = client.post("/periods/999/allocate")

        assert response.status_code == 404
        assert response.json() == {
            "detail": {"error": {"code": "not_found", "message": "Period 999 not found"}}
        }


class TestRebillEndpoint:
    def test_rebill_period(self, client, period, owner, units, equal_rule, add_expense):
        expense = add_expense("100.00")
        client.post(f"/expenses/{expense.id}/allocate")

        response = client.get(f"/bills/{period.id}")

        assert response.status_code == 200
        assert response.json() == {"ok": True, "created": 1, "dropped": 1}

    def test_rebill_without_lines(self, client, period):
        response = client.get(f"/bills/{period.id}")

        assert response.status_code == 200
        assert response.json() == {"ok": True, "created": 0, "dropped": 0}

    def test_get_generated_bill(self, client, period, owner, units, equal_rule, add_expense):
        expense = add_expense("100.00")
        client.post(f"/expenses/{expense.id}/allocate")
        client.get(f"/bills/{period.id}")

        response = client.get(f"/bills/{period.id}/entities/{owner.id}")

        assert response.status_code == 200
        body = response.json()
        assert body["billing_entity_id"] == owner.id
        assert body["period_id"] == period.id
        assert body["total_amount"] == "66.67"
        assert body["lines"] == [{"expense_id": expense.id, "amount": "66.67", "currency": "RON"}]

    def test_missing_bill_is_404(self, client, period, owner):
        response = client.get(f"/bills/{period.id}/entities/{owner.id}")

        assert response.status_code == 404
        assert response.json()["detail"]["error"]["code"] == "not_found"


class TestBillingEntitiesEndpoint:
    def test_list_totals(self, client, community, period, owner, equal_rule, add_expense):
        expense = add_expense("100.00")
        client.post(f"/expenses/{expense.id}/allocate")

        response = client.get(f"/communities/{community.id}/periods/{period.code}/billing-entities")

        assert response.status_code == 200
        assert response.json() == {
            "period_code": "2025-05",
            "items": [
                {
                    "billing_entity_id": owner.id,
                    "code": "E1",
                    "name": "Owner A",
                    "total_amount": "66.67",
                }
            ],
        }

    def test_unknown_period_code_is_404(self, client, community, period):
        response = client.get(f"/communities/{community.id}/periods/2030-01/billing-entities")

        assert response.status_code == 404
