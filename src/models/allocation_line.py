"""Allocation line ORM model: one unit's share of one expense."""

from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class AllocationLine(Base, BaseModel):
    """Per-unit allocated amount of an expense.

    For any expense the amounts of its lines sum exactly to the expense's
    allocatable amount.
    """

    __tablename__ = "allocation_lines"

    community_id: Mapped[int] = mapped_column(
        ForeignKey("communities.id"),
        nullable=False,
    )
    period_id: Mapped[int] = mapped_column(
        ForeignKey("periods.id"),
        nullable=False,
    )
    expense_id: Mapped[int] = mapped_column(
        ForeignKey("expenses.id"),
        nullable=False,
    )
    unit_id: Mapped[int] = mapped_column(
        ForeignKey("units.id"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("expense_id", "unit_id", name="uq_allocation_line_expense_unit"),
        Index("idx_allocation_line_period_community", "period_id", "community_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<AllocationLine(expense_id={self.expense_id}, unit_id={self.unit_id}, "
            f"amount={self.amount})>"
        )


__all__ = ["AllocationLine"]
