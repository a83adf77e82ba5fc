"""Explicit, non-temporal unit sets that an expense can target."""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class ExpenseTargetSet(Base, BaseModel):
    """Fixed enumeration of units, used instead of a time-versioned group."""

    __tablename__ = "expense_target_sets"

    community_id: Mapped[int] = mapped_column(
        ForeignKey("communities.id"),
        nullable=False,
        index=True,
    )
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    members: Mapped[list["ExpenseTargetMember"]] = relationship(
        "ExpenseTargetMember",
        back_populates="target_set",
        cascade="all, delete-orphan",
    )


class ExpenseTargetMember(Base, BaseModel):
    __tablename__ = "expense_target_members"

    set_id: Mapped[int] = mapped_column(
        ForeignKey("expense_target_sets.id"),
        nullable=False,
        index=True,
    )
    unit_id: Mapped[int] = mapped_column(
        ForeignKey("units.id"),
        nullable=False,
    )

    target_set: Mapped["ExpenseTargetSet"] = relationship(
        "ExpenseTargetSet",
        back_populates="members",
    )

    __table_args__ = (UniqueConstraint("set_id", "unit_id", name="uq_target_member_set_unit"),)


__all__ = ["ExpenseTargetSet", "ExpenseTargetMember"]
