"""Bill ORM models: per-billing-entity, per-period rollup of allocation lines."""

from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class Bill(Base, BaseModel):
    """
    Payable statement of a billing entity for one period.

    Exactly one bill exists per (community, period, billing entity); the bill
    aggregator replaces its lines on every run.
    """

    __tablename__ = "bills"

    # Foreign keys
    community_id: Mapped[int] = mapped_column(
        ForeignKey("communities.id"),
        nullable=False,
    )
    period_id: Mapped[int] = mapped_column(
        ForeignKey("periods.id"),
        nullable=False,
        index=True,
        comment="Associated billing period",
    )
    billing_entity_id: Mapped[int] = mapped_column(
        ForeignKey("billing_entities.id"),
        nullable=False,
        index=True,
        comment="Entity responsible for paying this bill",
    )

    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Sum of all bill lines",
    )

    # Relationships
    lines: Mapped[list["BillLine"]] = relationship(
        "BillLine",
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="BillLine.expense_id",
    )

    billing_entity: Mapped["BillingEntity"] = relationship(  # noqa: F821
        "BillingEntity",
        foreign_keys=[billing_entity_id],
    )

    # Indexes for common queries
    __table_args__ = (
        UniqueConstraint(
            "community_id",
            "period_id",
            "billing_entity_id",
            name="uq_bill_community_period_entity",
        ),
        Index("idx_bill_period_entity", "period_id", "billing_entity_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Bill(id={self.id}, period_id={self.period_id}, "
            f"billing_entity_id={self.billing_entity_id}, total_amount={self.total_amount})>"
        )


class BillLine(Base, BaseModel):
    """Contribution of a single expense to a bill."""

    __tablename__ = "bill_lines"

    bill_id: Mapped[int] = mapped_column(
        ForeignKey("bills.id"),
        nullable=False,
        index=True,
    )
    expense_id: Mapped[int] = mapped_column(
        ForeignKey("expenses.id"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )
    currency: Mapped[str | None] = mapped_column(
        String(8),
        nullable=True,
        comment="Expense currency tag, carried as-is",
    )

    bill: Mapped["Bill"] = relationship(
        "Bill",
        back_populates="lines",
    )

    def __repr__(self) -> str:
        return f"<BillLine(bill_id={self.bill_id}, expense_id={self.expense_id}, amount={self.amount})>"


__all__ = ["Bill", "BillLine"]
