"""Weight builder: raw values and normalized weights for units in scope."""

import logging
from typing import NamedTuple

from sqlalchemy.orm import Session

from src.models.allocation_rule import AllocationRule
from src.models.period_measure import MeasureScope, PeriodMeasure
from src.services.allocation_rules import (
    EqualMethod,
    MeasureMethod,
    MixedMethod,
    WeightMethod,
    parse_method,
)

logger = logging.getLogger(__name__)

# Floor applied to every raw value before normalizing. Keeps the division
# defined when all raws are zero; zero-valued units end up with a share
# that rounds to 0.00.
EPS = 1e-12


class WeightEntry(NamedTuple):
    """Raw measured value and normalized weight of one unit."""

    unit_id: int
    raw: float
    weight: float


def normalize(raws: list[tuple[int, float]]) -> list[WeightEntry]:
    """Normalize (unit_id, raw) pairs so weights sum to 1.

    weight_i = max(EPS, raw_i) / sum_j max(EPS, raw_j)
    """
    total = sum(max(EPS, raw) for _, raw in raws)
    return [WeightEntry(unit_id, raw, max(EPS, raw) / total) for unit_id, raw in raws]


class WeightBuilder:
    """Computes per-unit weights for an allocation rule.

    Read-only; persisting the result as a weight vector is the caller's job.
    """

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session

    def build_weights(
        self,
        period_id: int,
        unit_ids: list[int],
        rule: AllocationRule,
    ) -> list[WeightEntry]:
        """Build weights for ``unit_ids`` according to ``rule``.

        Args:
            period_id: Period whose measurements are used
            unit_ids: Units in scope (order is preserved in the result)
            rule: Allocation rule to apply

        Returns:
            One WeightEntry per unit; weights sum to 1 when unit_ids is non-empty

        Raises:
            UnsupportedMethodError: rule.method is not recognized
        """
        method = parse_method(rule.method, rule.params)
        entries = self.build_for_method(period_id, unit_ids, method)
        logger.debug(
            "weights.build: period_id=%d rule_id=%s method=%s units=%d",
            period_id,
            rule.id,
            rule.method,
            len(entries),
        )
        return entries

    def build_for_method(
        self,
        period_id: int,
        unit_ids: list[int],
        method: WeightMethod,
    ) -> list[WeightEntry]:
        """Build weights for an already parsed method variant."""
        if not unit_ids:
            return []

        if isinstance(method, EqualMethod):
            raws = [(unit_id, 1.0) for unit_id in unit_ids]
        elif isinstance(method, MeasureMethod):
            measured = self._measures(period_id, unit_ids, method.type_code)
            raws = [(unit_id, measured.get(unit_id, 0.0)) for unit_id in unit_ids]
        elif isinstance(method, MixedMethod):
            combined = {unit_id: 0.0 for unit_id in unit_ids}
            for part in method.parts:
                measured = self._measures(period_id, unit_ids, part.type_code)
                for unit_id in unit_ids:
                    combined[unit_id] += part.weight * measured.get(unit_id, 0.0)
            raws = [(unit_id, combined[unit_id]) for unit_id in unit_ids]
        else:
            raise TypeError(f"Unknown weight method variant: {method!r}")

        return normalize(raws)

    def _measures(self, period_id: int, unit_ids: list[int], type_code: str) -> dict[int, float]:
        """Measured values per unit; units without a reading are absent."""
        rows = (
            self.db.query(PeriodMeasure.scope_id, PeriodMeasure.value)
            .filter(
                PeriodMeasure.period_id == period_id,
                PeriodMeasure.scope_type == MeasureScope.UNIT.value,
                PeriodMeasure.type_code == type_code,
                PeriodMeasure.scope_id.in_(unit_ids),
            )
            .all()
        )
        return {row.scope_id: float(row.value) for row in rows}


__all__ = ["WeightBuilder", "WeightEntry", "normalize", "EPS"]
