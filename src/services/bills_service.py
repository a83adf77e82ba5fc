"""Bill aggregation: roll a period's allocation lines up into per-billing-entity bills."""

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import NamedTuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from src.models.allocation_line import AllocationLine
from src.models.bill import Bill, BillLine
from src.models.billing_entity import BillingEntity, BillingEntityMember
from src.models.expense import Expense
from src.services.errors import NotFoundError
from src.services.membership import window_contains
from src.services.period_service import PeriodService

logger = logging.getLogger(__name__)


@dataclass
class RebillResult:
    """Outcome of regenerating a period's bills."""

    created: int
    dropped: int = 0

    def to_dict(self) -> dict:
        return {"ok": True, "created": self.created, "dropped": self.dropped}


class BillingEntityTotal(NamedTuple):
    """Allocated total of one billing entity's active units in a period."""

    billing_entity_id: int
    code: str
    name: str
    total_amount: Decimal


@dataclass
class _EntityBucket:
    total: Decimal
    items: dict[int, Decimal]
    currencies: dict[int, str]


class BillsService:
    """Service for bill generation and lookups.

    Bill and BillLine rows are written only by ``rebill``; allocation lines are
    read-only here.
    """

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session

    def active_entity_by_unit(self, community_id: int, seq: int) -> dict[int, int]:
        """Map unit id -> billing entity id for memberships active at ``seq``.

        When a unit has several active memberships the one that started last wins.
        """
        members = (
            self.db.query(BillingEntityMember)
            .join(BillingEntity, BillingEntity.id == BillingEntityMember.billing_entity_id)
            .filter(BillingEntity.community_id == community_id)
            .order_by(BillingEntityMember.start_seq, BillingEntityMember.id)
            .all()
        )
        by_unit: dict[int, int] = {}
        for member in members:
            if not window_contains(member.start_seq, member.end_seq, seq):
                continue
            previous = by_unit.get(member.unit_id)
            if previous is not None and previous != member.billing_entity_id:
                logger.warning(
                    "Unit %d has overlapping billing memberships at seq %d (%d, %d); using %d",
                    member.unit_id,
                    seq,
                    previous,
                    member.billing_entity_id,
                    member.billing_entity_id,
                )
            by_unit[member.unit_id] = member.billing_entity_id
        return by_unit

    def rebill(self, period_id: int) -> RebillResult:
        """Regenerate one bill per billing entity from the period's allocation lines.

        Lines of units without an active billing-entity membership are left
        out of every bill; their count is reported in ``dropped`` and logged.

        Args:
            period_id: Period to bill

        Returns:
            RebillResult with the number of bills written and lines dropped

        Raises:
            NotFoundError: period does not exist
        """
        representative = (
            self.db.query(AllocationLine.community_id)
            .filter(AllocationLine.period_id == period_id)
            .first()
        )
        if representative is None:
            logger.info("No allocation lines for period %d; nothing to bill", period_id)
            return RebillResult(created=0)

        community_id = representative.community_id
        period = PeriodService(self.db).require(period_id)
        entity_by_unit = self.active_entity_by_unit(community_id, period.seq)

        rows = (
            self.db.query(
                AllocationLine.unit_id,
                AllocationLine.expense_id,
                AllocationLine.amount,
                Expense.currency,
            )
            .join(Expense, Expense.id == AllocationLine.expense_id)
            .filter(
                AllocationLine.period_id == period_id,
                AllocationLine.community_id == community_id,
            )
            .order_by(AllocationLine.expense_id, AllocationLine.unit_id)
            .all()
        )

        buckets: dict[int, _EntityBucket] = {}
        dropped_units: set[int] = set()
        dropped = 0
        for row in rows:
            entity_id = entity_by_unit.get(row.unit_id)
            if entity_id is None:
                dropped += 1
                dropped_units.add(row.unit_id)
                continue
            bucket = buckets.setdefault(entity_id, _EntityBucket(Decimal("0.00"), defaultdict(Decimal), {}))
            bucket.total += row.amount
            bucket.items[row.expense_id] += row.amount
            bucket.currencies[row.expense_id] = row.currency

        if dropped:
            logger.warning(
                "Period %s: %d allocation lines dropped from billing, units without an "
                "active billing entity: %s",
                period.code,
                dropped,
                sorted(dropped_units),
            )

        stale_bill_ids = [
            row.id
            for row in self.db.query(Bill.id)
            .filter(
                Bill.community_id == community_id,
                Bill.period_id == period_id,
                Bill.billing_entity_id.notin_(list(buckets)),
            )
            .order_by(Bill.id)
            .all()
        ]
        if stale_bill_ids:
            logger.warning(
                "Period %s: bills %s belong to billing entities without lines in this run "
                "and were left unchanged",
                period.code,
                stale_bill_ids,
            )

        try:
            for entity_id in sorted(buckets):
                self._replace_bill(community_id, period_id, entity_id, buckets[entity_id])
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Rebilled period %s (community %d): %d bills, %d lines dropped",
            period.code,
            community_id,
            len(buckets),
            dropped,
        )
        return RebillResult(created=len(buckets), dropped=dropped)

    def _replace_bill(
        self,
        community_id: int,
        period_id: int,
        billing_entity_id: int,
        bucket: _EntityBucket,
    ) -> Bill:
        bill = (
            self.db.query(Bill)
            .filter(
                Bill.community_id == community_id,
                Bill.period_id == period_id,
                Bill.billing_entity_id == billing_entity_id,
            )
            .first()
        )
        if bill is None:
            bill = Bill(
                community_id=community_id,
                period_id=period_id,
                billing_entity_id=billing_entity_id,
                total_amount=bucket.total,
            )
            self.db.add(bill)
            self.db.flush()
        else:
            bill.total_amount = bucket.total

        self.db.query(BillLine).filter(BillLine.bill_id == bill.id).delete(
            synchronize_session="fetch"
        )
        self.db.add_all(
            [
                BillLine(
                    bill_id=bill.id,
                    expense_id=expense_id,
                    amount=amount,
                    currency=bucket.currencies.get(expense_id),
                )
                for expense_id, amount in sorted(bucket.items.items())
            ]
        )
        return bill

    def get_bill(self, period_id: int, billing_entity_id: int) -> Bill:
        """Get a billing entity's bill for a period, with its lines loaded.

        Raises:
            NotFoundError: no bill has been generated for this pair
        """
        bill = (
            self.db.query(Bill)
            .options(selectinload(Bill.lines))
            .filter(Bill.period_id == period_id, Bill.billing_entity_id == billing_entity_id)
            .first()
        )
        if bill is None:
            raise NotFoundError(
                f"No bill for billing entity {billing_entity_id} in period {period_id}"
            )
        return bill

    def list_billing_entities(self, community_id: int, period_code: str) -> list[BillingEntityTotal]:
        """Allocated totals per billing entity for a period, ordered by entity code.

        Entities without active members (or without allocations) report 0.00.

        Raises:
            NotFoundError: period code is unknown for the community
        """
        period = PeriodService(self.db).get_by_code(community_id, period_code)
        if period is None:
            raise NotFoundError(f"Period {period_code} not found for community {community_id}")

        entity_by_unit = self.active_entity_by_unit(community_id, period.seq)
        unit_totals = (
            self.db.query(AllocationLine.unit_id, func.sum(AllocationLine.amount).label("total"))
            .filter(
                AllocationLine.period_id == period.id,
                AllocationLine.community_id == community_id,
            )
            .group_by(AllocationLine.unit_id)
            .all()
        )
        totals: dict[int, Decimal] = defaultdict(lambda: Decimal("0.00"))
        for row in unit_totals:
            entity_id = entity_by_unit.get(row.unit_id)
            if entity_id is not None:
                totals[entity_id] += Decimal(str(row.total))

        entities = (
            self.db.query(BillingEntity)
            .filter(BillingEntity.community_id == community_id)
            .order_by(BillingEntity.code)
            .all()
        )
        return [
            BillingEntityTotal(
                billing_entity_id=entity.id,
                code=entity.code,
                name=entity.name,
                total_amount=totals[entity.id].quantize(Decimal("0.01")),
            )
            for entity in entities
        ]


__all__ = ["BillsService", "RebillResult", "BillingEntityTotal"]
