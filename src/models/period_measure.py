"""Measure store: per-period numeric readings keyed by measure-type code."""

from decimal import Decimal
from enum import Enum

from sqlalchemy import ForeignKey, Index, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class MeasureScope(str, Enum):
    """What a measurement is attached to."""

    UNIT = "UNIT"
    COMMUNITY = "COMMUNITY"


class PeriodMeasure(Base, BaseModel):
    """A single numeric measurement for a period.

    Examples: unit area (``SQM``), resident count (``RESIDENTS``), water
    consumption (``WATER_M3``). The allocation engine only reads UNIT-scoped rows.
    """

    __tablename__ = "period_measures"

    community_id: Mapped[int] = mapped_column(
        ForeignKey("communities.id"),
        nullable=False,
    )
    period_id: Mapped[int] = mapped_column(
        ForeignKey("periods.id"),
        nullable=False,
    )
    scope_type: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=MeasureScope.UNIT.value,
    )
    scope_id: Mapped[int] = mapped_column(
        nullable=False,
        comment="Unit id when scope_type is UNIT",
    )
    type_code: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )
    value: Mapped[Decimal] = mapped_column(
        Numeric(14, 4),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint(
            "period_id",
            "scope_type",
            "scope_id",
            "type_code",
            name="uq_period_measure_scope_type",
        ),
        Index("idx_period_measure_lookup", "period_id", "type_code", "scope_type"),
    )

    def __repr__(self) -> str:
        return (
            f"<PeriodMeasure(period_id={self.period_id}, scope={self.scope_type}:{self.scope_id}, "
            f"type_code={self.type_code!r}, value={self.value})>"
        )


__all__ = ["PeriodMeasure", "MeasureScope"]
