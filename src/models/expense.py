"""Expense and expense type ORM models."""

from decimal import Decimal
from enum import Enum

from sqlalchemy import ForeignKey, Index, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class ExpenseTargetType(str, Enum):
    """Scope kinds an expense can be allocated over."""

    COMMUNITY = "COMMUNITY"
    UNIT = "UNIT"
    EXPLICIT_SET = "EXPLICIT_SET"
    GROUP = "GROUP"


class ExpenseType(Base, BaseModel):
    """Category of expense, optionally carrying a default allocation rule."""

    __tablename__ = "expense_types"

    community_id: Mapped[int] = mapped_column(
        ForeignKey("communities.id"),
        nullable=False,
        index=True,
    )
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    rule_id: Mapped[int | None] = mapped_column(
        ForeignKey("allocation_rules.id"),
        nullable=True,
    )

    rule: Mapped["AllocationRule | None"] = relationship(  # noqa: F821
        "AllocationRule",
        foreign_keys=[rule_id],
    )

    __table_args__ = (UniqueConstraint("community_id", "code", name="uq_expense_type_community_code"),)

    def __repr__(self) -> str:
        return f"<ExpenseType(id={self.id}, code={self.code!r}, rule_id={self.rule_id})>"


class Expense(Base, BaseModel):
    """A single cost of a community for a period, to be split across units.

    After allocation ``weight_vector_id`` points at the vector whose weights
    produced the expense's allocation lines.
    """

    __tablename__ = "expenses"

    community_id: Mapped[int] = mapped_column(
        ForeignKey("communities.id"),
        nullable=False,
    )
    period_id: Mapped[int] = mapped_column(
        ForeignKey("periods.id"),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    allocatable_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )
    currency: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        default="RON",
    )

    # Scope: plain string so unknown values surface as a configuration error
    target_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=ExpenseTargetType.COMMUNITY.value,
    )
    target_id: Mapped[int] = mapped_column(
        nullable=False,
        comment="Community, unit, target set or group id depending on target_type",
    )

    expense_type_id: Mapped[int | None] = mapped_column(
        ForeignKey("expense_types.id"),
        nullable=True,
    )
    weight_vector_id: Mapped[int | None] = mapped_column(
        ForeignKey("weight_vectors.id"),
        nullable=True,
    )

    expense_type: Mapped["ExpenseType | None"] = relationship(
        "ExpenseType",
        foreign_keys=[expense_type_id],
    )

    __table_args__ = (Index("idx_expense_community_period", "community_id", "period_id"),)

    def __repr__(self) -> str:
        return (
            f"<Expense(id={self.id}, period_id={self.period_id}, "
            f"amount={self.allocatable_amount} {self.currency}, "
            f"target={self.target_type}:{self.target_id})>"
        )


__all__ = ["Expense", "ExpenseType", "ExpenseTargetType"]
