"""Integration tests for rolling allocation lines up into bills."""

import logging
from decimal import Decimal

import pytest

from src.models import Bill, BillingEntity, BillingEntityMember, BillLine
from src.services.allocation_service import AllocationService
from src.services.bills_service import BillsService
from src.services.errors import NotFoundError


def _entity(db_session, community, code, name, memberships):
    """Create a billing entity with (unit, start_seq, end_seq) memberships."""
    entity = BillingEntity(community_id=community.id, code=code, name=name)
    db_session.add(entity)
    db_session.flush()
    db_session.add_all(
        [
            BillingEntityMember(billing_entity_id=entity.id, unit_id=unit.id, start_seq=start, end_seq=end)
            for unit, start, end in memberships
        ]
    )
    db_session.commit()
    return entity


@pytest.fixture
def allocated(db_session, units, equal_rule, add_expense):
    """Expense 1: 100.00 over A1..A3. Expense 2: 10.00 on A3 only."""
    shared = add_expense("100.00", description="Cleaning")
    private = add_expense("10.00", target_type="UNIT", target_id=units[2].id, description="Repair")
    service = AllocationService(db_session)
    service.allocate(shared.id)
    service.allocate(private.id)
    return shared, private


class TestRebill:
    """Period seq is 5 in the shared fixture."""

    def test_one_bill_per_entity(self, db_session, community, period, units, allocated):
        shared, private = allocated
        owner_a = _entity(db_session, community, "E1", "Owner A", [(units[0], 1, None), (units[1], 1, None)])
        owner_b = _entity(db_session, community, "E2", "Owner B", [(units[2], 3, None)])

        result = BillsService(db_session).rebill(period.id)

        assert result.to_dict() == {"ok": True, "created": 2, "dropped": 0}

        bill_a = BillsService(db_session).get_bill(period.id, owner_a.id)
        assert bill_a.total_amount == Decimal("66.67")
        assert [(line.expense_id, line.amount) for line in bill_a.lines] == [(shared.id, Decimal("66.67"))]

        bill_b = BillsService(db_session).get_bill(period.id, owner_b.id)
        assert bill_b.total_amount == Decimal("43.33")
        assert [(line.expense_id, line.amount) for line in bill_b.lines] == [
            (shared.id, Decimal("33.33")),
            (private.id, Decimal("10.00")),
        ]
        assert all(line.currency == "RON" for line in bill_b.lines)

    def test_bill_totals_match_allocated_total(self, db_session, community, period, units, allocated):
        _entity(db_session, community, "E1", "Owner A", [(units[0], 1, None)])
        _entity(db_session, community, "E2", "Owner B", [(units[1], 1, None), (units[2], 1, None)])

        BillsService(db_session).rebill(period.id)

        totals = [bill.total_amount for bill in db_session.query(Bill).all()]
        assert sum(totals) == Decimal("110.00")

    def test_units_without_membership_are_dropped(self, db_session, community, period, units, allocated, caplog):
        _entity(db_session, community, "E1", "Owner A", [(units[0], 1, None), (units[1], 1, None)])
        # Ended at seq 5: not active in the fixture period
        _entity(db_session, community, "E2", "Former owner", [(units[2], 1, 5)])

        with caplog.at_level(logging.WARNING, logger="src.services.bills_service"):
            result = BillsService(db_session).rebill(period.id)

        assert result.created == 1
        assert result.dropped == 2
        assert "2 allocation lines dropped" in caplog.text
        assert db_session.query(Bill).count() == 1

    def test_rerun_is_idempotent(self, db_session, community, period, units, allocated):
        _entity(db_session, community, "E1", "Owner A", [(u, 1, None) for u in units])
        service = BillsService(db_session)

        first = service.rebill(period.id)
        second = service.rebill(period.id)

        assert first == second
        assert db_session.query(Bill).count() == 1
        assert db_session.query(BillLine).count() == 2
        assert db_session.query(Bill).one().total_amount == Decimal("110.00")

    def test_rerun_picks_up_reallocation(self, db_session, community, period, units, allocated):
        shared, _ = allocated
        entity = _entity(db_session, community, "E1", "Owner A", [(units[0], 1, None)])
        service = BillsService(db_session)
        service.rebill(period.id)

        shared.allocatable_amount = Decimal("30.00")
        db_session.commit()
        AllocationService(db_session).allocate(shared.id)
        service.rebill(period.id)

        assert service.get_bill(period.id, entity.id).total_amount == Decimal("10.00")

    def test_bill_left_from_earlier_run_is_reported(
        self, db_session, community, period, units, allocated, caplog
    ):
        _entity(db_session, community, "E1", "Owner A", [(units[0], 1, None), (units[1], 1, None)])
        seller = _entity(db_session, community, "E2", "Seller", [(units[2], 1, None)])
        service = BillsService(db_session)
        service.rebill(period.id)
        stale_bill = service.get_bill(period.id, seller.id)

        membership = db_session.query(BillingEntityMember).filter_by(billing_entity_id=seller.id).one()
        membership.end_seq = 5
        db_session.commit()

        with caplog.at_level(logging.WARNING, logger="src.services.bills_service"):
            result = service.rebill(period.id)

        assert result.created == 1
        assert f"bills [{stale_bill.id}]" in caplog.text
        assert service.get_bill(period.id, seller.id).total_amount == Decimal("43.33")

    def test_no_stale_warning_when_every_bill_is_rewritten(
        self, db_session, community, period, units, allocated, caplog
    ):
        _entity(db_session, community, "E1", "Owner A", [(u, 1, None) for u in units])
        service = BillsService(db_session)
        service.rebill(period.id)

        with caplog.at_level(logging.WARNING, logger="src.services.bills_service"):
            service.rebill(period.id)

        assert "left unchanged" not in caplog.text

    def test_overlapping_membership_latest_start_wins(self, db_session, community, period, units, allocated):
        _entity(db_session, community, "E1", "Owner A", [(units[0], 1, None)])
        buyer = _entity(db_session, community, "E2", "Buyer", [(units[0], 4, None)])

        result = BillsService(db_session).rebill(period.id)

        assert result.created == 1
        assert BillsService(db_session).get_bill(period.id, buyer.id).total_amount == Decimal("33.34")

    def test_period_without_lines(self, db_session, period, units):
        assert BillsService(db_session).rebill(period.id).to_dict() == {
            "ok": True,
            "created": 0,
            "dropped": 0,
        }
        assert db_session.query(Bill).count() == 0


class TestGetBill:
    def test_missing_bill(self, db_session, period):
        with pytest.raises(NotFoundError, match="No bill for billing entity 5"):
            BillsService(db_session).get_bill(period.id, 5)


class TestListBillingEntities:
    def test_totals_per_entity_ordered_by_code(self, db_session, community, period, units, allocated):
        _entity(db_session, community, "Z9", "Owner B", [(units[2], 1, None)])
        _entity(db_session, community, "A1", "Owner A", [(units[0], 1, None), (units[1], 1, None)])
        _entity(db_session, community, "M5", "Vacant", [])

        totals = BillsService(db_session).list_billing_entities(community.id, period.code)

        assert [(item.code, item.total_amount) for item in totals] == [
            ("A1", Decimal("66.67")),
            ("M5", Decimal("0.00")),
            ("Z9", Decimal("43.33")),
        ]

    def test_unknown_period_code(self, db_session, community, period):
        with pytest.raises(NotFoundError, match="Period 1999-01 not found"):
            BillsService(db_session).list_billing_entities(community.id, "1999-01")
