"""Allocation service for distributing an expense across the units in its scope.

Pipeline per expense:
1. Resolve the effective allocation rule
2. Resolve the units in scope (ScopeService)
3. Build normalized weights (WeightBuilder)
4. Split the amount to the cent and persist weight vector + allocation lines
   in one transaction, replacing whatever the previous run wrote
"""

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.orm import Session

from src.models.allocation_line import AllocationLine
from src.models.allocation_rule import AllocationRule
from src.models.expense import Expense, ExpenseType
from src.models.weight_vector import WeightItem, WeightVector
from src.services.errors import AmbiguousRuleError, NotFoundError
from src.services.period_service import PeriodService
from src.services.scope_service import ScopeService
from src.services.weights import WeightBuilder, WeightEntry

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass
class AllocatedLine:
    unit_id: int
    amount: Decimal


@dataclass
class AllocationResult:
    """Outcome of allocating one expense."""

    expense_id: int
    lines: list[AllocatedLine] = field(default_factory=list)
    weight_vector_id: int | None = None

    @property
    def total(self) -> Decimal:
        return sum((line.amount for line in self.lines), Decimal("0.00"))

    def to_dict(self) -> dict:
        """Serializable form; amounts are decimal strings to keep cents exact."""
        return {
            "expenseId": self.expense_id,
            "lines": [{"unitId": line.unit_id, "amount": str(line.amount)} for line in self.lines],
        }


def split_amount(total: Decimal, weights: list[float]) -> list[Decimal]:
    """Split ``total`` by ``weights`` into cent amounts that sum exactly to ``total``.

    Each share is rounded half away from zero at the cent. Whatever residue
    remains is added in full to the share with the largest weight (the first
    one on ties); it is not spread over several shares.

    Args:
        total: Amount to split
        weights: Normalized weights, one per share

    Returns:
        Rounded amounts in the same order as ``weights``
    """
    if not weights:
        return []

    total = Decimal(str(total)).quantize(CENT, rounding=ROUND_HALF_UP)
    amounts = [
        (total * Decimal(str(weight))).quantize(CENT, rounding=ROUND_HALF_UP) for weight in weights
    ]

    diff = total - sum(amounts, Decimal("0.00"))
    if abs(diff) >= CENT:
        top = max(range(len(weights)), key=lambda i: weights[i])
        amounts[top] += diff

    return amounts


class AllocationService:
    """Weighted expense allocation engine."""

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session
        self.scopes = ScopeService(db_session)
        self.weights = WeightBuilder(db_session)

    def resolve_rule(self, expense: Expense) -> AllocationRule:
        """Effective rule of an expense.

        Order: the expense type's rule; else the community rule flagged
        ``is_default``; else the community's only rule.

        Raises:
            NotFoundError: referenced expense type or rule is missing, or the
                community has no rule at all
            AmbiguousRuleError: several candidates and no single default
        """
        if expense.expense_type_id is not None:
            expense_type = self.db.get(ExpenseType, expense.expense_type_id)
            if expense_type is None:
                raise NotFoundError(f"ExpenseType {expense.expense_type_id} not found")
            if expense_type.rule_id is not None:
                rule = self.db.get(AllocationRule, expense_type.rule_id)
                if rule is None:
                    raise NotFoundError(f"AllocationRule {expense_type.rule_id} not found")
                return rule

        candidates = (
            self.db.query(AllocationRule)
            .filter(AllocationRule.community_id == expense.community_id)
            .order_by(AllocationRule.id)
            .all()
        )
        if not candidates:
            raise NotFoundError(
                f"No allocation rule for expense {expense.id} in community {expense.community_id}"
            )

        defaults = [rule for rule in candidates if rule.is_default]
        if len(defaults) == 1:
            return defaults[0]
        if not defaults and len(candidates) == 1:
            return candidates[0]

        raise AmbiguousRuleError(
            f"Community {expense.community_id} has {len(candidates)} allocation rules "
            f"({len(defaults)} marked default); cannot pick one for expense {expense.id}"
        )

    def allocate(self, expense_id: int) -> AllocationResult:
        """Allocate one expense, replacing any previous allocation of it.

        Args:
            expense_id: Expense to allocate

        Returns:
            AllocationResult with one line per unit in scope

        Raises:
            NotFoundError: expense, period or rule is missing
            ConfigurationError: unsupported target type or method
        """
        expense = self.db.get(Expense, expense_id)
        if expense is None:
            raise NotFoundError(f"Expense {expense_id} not found")

        period = PeriodService(self.db).require(expense.period_id)
        rule = self.resolve_rule(expense)
        unit_ids = self.scopes.resolve_units(
            expense.community_id,
            expense.period_id,
            expense.target_type,
            expense.target_id,
            period_seq=period.seq,
        )
        entries = self.weights.build_weights(expense.period_id, unit_ids, rule)
        amounts = split_amount(expense.allocatable_amount, [entry.weight for entry in entries])

        if not entries:
            logger.warning(
                "Expense %d resolved to an empty scope (%s:%d); clearing its allocation",
                expense.id,
                expense.target_type,
                expense.target_id,
            )

        lines = [AllocatedLine(entry.unit_id, amount) for entry, amount in zip(entries, amounts)]

        try:
            vector = self._upsert_vector(expense, rule)
            self._replace_weight_items(vector, entries)
            self._replace_lines(expense, vector, lines)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        result = AllocationResult(expense_id=expense.id, lines=lines, weight_vector_id=vector.id)
        logger.info(
            "Allocated expense %d (%s %s) over %d units with rule %d (%s), vector %d",
            expense.id,
            expense.allocatable_amount,
            expense.currency,
            len(lines),
            rule.id,
            rule.method,
            vector.id,
        )
        return result

    def allocate_period(self, period_id: int) -> list[AllocationResult]:
        """Recompute every expense of a period, in expense id order.

        Each expense commits on its own; a failure stops the run and leaves
        already recomputed expenses committed.
        """
        PeriodService(self.db).require(period_id)
        expense_ids = [
            row.id
            for row in self.db.query(Expense.id)
            .filter(Expense.period_id == period_id)
            .order_by(Expense.id)
            .all()
        ]
        logger.info("Recomputing %d expenses for period %d", len(expense_ids), period_id)
        return [self.allocate(expense_id) for expense_id in expense_ids]

    def _upsert_vector(self, expense: Expense, rule: AllocationRule) -> WeightVector:
        vector = (
            self.db.query(WeightVector)
            .filter(
                WeightVector.community_id == expense.community_id,
                WeightVector.period_id == expense.period_id,
                WeightVector.rule_id == rule.id,
                WeightVector.scope_type == expense.target_type,
                WeightVector.scope_id == expense.target_id,
            )
            .first()
        )
        if vector is None:
            vector = WeightVector(
                community_id=expense.community_id,
                period_id=expense.period_id,
                rule_id=rule.id,
                scope_type=expense.target_type,
                scope_id=expense.target_id,
            )
            self.db.add(vector)
            self.db.flush()
        return vector

    def _replace_weight_items(self, vector: WeightVector, entries: list[WeightEntry]) -> None:
        self.db.query(WeightItem).filter(WeightItem.vector_id == vector.id).delete(
            synchronize_session="fetch"
        )
        self.db.add_all(
            [
                WeightItem(
                    vector_id=vector.id,
                    unit_id=entry.unit_id,
                    raw_value=entry.raw,
                    weight=entry.weight,
                )
                for entry in entries
            ]
        )

    def _replace_lines(
        self,
        expense: Expense,
        vector: WeightVector,
        lines: list[AllocatedLine],
    ) -> None:
        self.db.query(AllocationLine).filter(AllocationLine.expense_id == expense.id).delete(
            synchronize_session="fetch"
        )
        expense.weight_vector_id = vector.id
        self.db.add_all(
            [
                AllocationLine(
                    community_id=expense.community_id,
                    period_id=expense.period_id,
                    expense_id=expense.id,
                    unit_id=line.unit_id,
                    amount=line.amount,
                )
                for line in lines
            ]
        )


__all__ = ["AllocationService", "AllocationResult", "AllocatedLine", "split_amount", "CENT"]
