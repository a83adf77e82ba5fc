"""Scope resolution: which units an expense applies to in a given period."""

import logging

from sqlalchemy.orm import Session

from src.models.community import Unit
from src.models.expense import ExpenseTargetType
from src.models.expense_target import ExpenseTargetMember, ExpenseTargetSet
from src.models.unit_group import UnitGroup, UnitGroupMember
from src.services.errors import NotFoundError, UnsupportedTargetTypeError
from src.services.membership import window_contains
from src.services.period_service import PeriodService

logger = logging.getLogger(__name__)


def _unique(unit_ids: list[int]) -> list[int]:
    """Deduplicate while keeping first-seen order."""
    return list(dict.fromkeys(unit_ids))


class ScopeService:
    """Resolves an expense target to the exact list of unit ids it covers.

    Read-only: never writes to the session.
    """

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session

    def resolve_units(
        self,
        community_id: int,
        period_id: int,
        target_type: str,
        target_id: int,
        period_seq: int | None = None,
    ) -> list[int]:
        """Resolve the units of a target for a period.

        Args:
            community_id: Community owning the expense
            period_id: Period the expense belongs to
            target_type: One of COMMUNITY, UNIT, EXPLICIT_SET, GROUP
            target_id: Id of the community, unit, target set or group
            period_seq: Seq of the period when the caller already loaded it

        Returns:
            Unique unit ids, in ascending id order for rule-based scopes

        Raises:
            UnsupportedTargetTypeError: target_type is not recognized
            NotFoundError: referenced period, unit, target set or group is missing
        """
        try:
            kind = ExpenseTargetType(target_type)
        except ValueError:
            raise UnsupportedTargetTypeError(str(target_type)) from None

        if kind is ExpenseTargetType.COMMUNITY:
            unit_ids = self._community_units(community_id)
        elif kind is ExpenseTargetType.UNIT:
            unit_ids = self._single_unit(community_id, target_id)
        elif kind is ExpenseTargetType.EXPLICIT_SET:
            unit_ids = self._explicit_set_units(community_id, target_id)
        else:
            if period_seq is None:
                period_seq = PeriodService(self.db).require(period_id).seq
            unit_ids = self._group_units(community_id, target_id, period_seq)

        logger.debug(
            "scope.resolve: community_id=%d period_id=%d target=%s:%d units=%d",
            community_id,
            period_id,
            kind.value,
            target_id,
            len(unit_ids),
        )
        return unit_ids

    def _community_units(self, community_id: int) -> list[int]:
        rows = (
            self.db.query(Unit.id)
            .filter(Unit.community_id == community_id)
            .order_by(Unit.id)
            .all()
        )
        return [row.id for row in rows]

    def _single_unit(self, community_id: int, unit_id: int) -> list[int]:
        unit = (
            self.db.query(Unit.id)
            .filter(Unit.id == unit_id, Unit.community_id == community_id)
            .first()
        )
        if unit is None:
            raise NotFoundError(f"Unit {unit_id} not found in community {community_id}")
        return [unit.id]

    def _explicit_set_units(self, community_id: int, set_id: int) -> list[int]:
        target_set = self.db.get(ExpenseTargetSet, set_id)
        if target_set is None or target_set.community_id != community_id:
            raise NotFoundError(f"Expense target set {set_id} not found in community {community_id}")
        rows = (
            self.db.query(ExpenseTargetMember.unit_id)
            .filter(ExpenseTargetMember.set_id == set_id)
            .order_by(ExpenseTargetMember.unit_id)
            .all()
        )
        return _unique([row.unit_id for row in rows])

    def _group_units(self, community_id: int, group_id: int, seq: int) -> list[int]:
        group = self.db.get(UnitGroup, group_id)
        if group is None or group.community_id != community_id:
            raise NotFoundError(f"Unit group {group_id} not found in community {community_id}")
        rows = (
            self.db.query(UnitGroupMember)
            .filter(UnitGroupMember.group_id == group_id)
            .order_by(UnitGroupMember.unit_id, UnitGroupMember.start_seq)
            .all()
        )
        return _unique(
            [m.unit_id for m in rows if window_contains(m.start_seq, m.end_seq, seq)]
        )


__all__ = ["ScopeService"]
