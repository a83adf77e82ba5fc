"""Unit group ORM models with time-versioned membership."""

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class UnitGroup(Base, BaseModel):
    """A rule-based grouping of units (e.g. 'Staircase A')."""

    __tablename__ = "unit_groups"

    community_id: Mapped[int] = mapped_column(
        ForeignKey("communities.id"),
        nullable=False,
        index=True,
    )
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    members: Mapped[list["UnitGroupMember"]] = relationship(
        "UnitGroupMember",
        back_populates="group",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<UnitGroup(id={self.id}, code={self.code!r})>"


class UnitGroupMember(Base, BaseModel):
    """Membership of a unit in a group over the window [start_seq, end_seq)."""

    __tablename__ = "unit_group_members"

    group_id: Mapped[int] = mapped_column(
        ForeignKey("unit_groups.id"),
        nullable=False,
    )
    unit_id: Mapped[int] = mapped_column(
        ForeignKey("units.id"),
        nullable=False,
    )
    start_seq: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="First period seq of membership (inclusive)",
    )
    end_seq: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Period seq where membership ends (exclusive); NULL means open-ended",
    )

    group: Mapped["UnitGroup"] = relationship(
        "UnitGroup",
        back_populates="members",
    )

    __table_args__ = (Index("idx_unit_group_member_group", "group_id", "start_seq"),)

    def __repr__(self) -> str:
        return (
            f"<UnitGroupMember(group_id={self.group_id}, unit_id={self.unit_id}, "
            f"start_seq={self.start_seq}, end_seq={self.end_seq})>"
        )


__all__ = ["UnitGroup", "UnitGroupMember"]
