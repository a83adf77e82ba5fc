"""Billing entity ORM models: the parties that pay for units' shares."""

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class BillingEntity(Base, BaseModel):
    """Party responsible for paying one or more units' allocated costs."""

    __tablename__ = "billing_entities"

    community_id: Mapped[int] = mapped_column(
        ForeignKey("communities.id"),
        nullable=False,
        index=True,
    )
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    members: Mapped[list["BillingEntityMember"]] = relationship(
        "BillingEntityMember",
        back_populates="billing_entity",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("community_id", "code", name="uq_billing_entity_community_code"),
    )

    def __repr__(self) -> str:
        return f"<BillingEntity(id={self.id}, code={self.code!r}, name={self.name!r})>"


class BillingEntityMember(Base, BaseModel):
    """Maps a unit to its paying entity over the window [start_seq, end_seq)."""

    __tablename__ = "billing_entity_members"

    billing_entity_id: Mapped[int] = mapped_column(
        ForeignKey("billing_entities.id"),
        nullable=False,
    )
    unit_id: Mapped[int] = mapped_column(
        ForeignKey("units.id"),
        nullable=False,
    )
    start_seq: Mapped[int] = mapped_column(Integer, nullable=False)
    end_seq: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Exclusive end seq; NULL means still active",
    )

    billing_entity: Mapped["BillingEntity"] = relationship(
        "BillingEntity",
        back_populates="members",
    )

    __table_args__ = (
        Index("idx_be_member_entity", "billing_entity_id", "start_seq"),
        Index("idx_be_member_unit", "unit_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<BillingEntityMember(billing_entity_id={self.billing_entity_id}, "
            f"unit_id={self.unit_id}, start_seq={self.start_seq}, end_seq={self.end_seq})>"
        )


__all__ = ["BillingEntity", "BillingEntityMember"]
