"""Community and unit ORM models."""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class Community(Base, BaseModel):
    """A multi-tenant community (e.g. a property association).

    Every other engine table is scoped to exactly one community.
    """

    __tablename__ = "communities"

    code: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    default_currency: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        default="RON",
        comment="Opaque currency tag applied to new expenses",
    )

    # Relationships
    units: Mapped[list["Unit"]] = relationship(
        "Unit",
        back_populates="community",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Community(id={self.id}, code={self.code!r})>"


class Unit(Base, BaseModel):
    """The atomic cost-bearing entity within a community (e.g. an apartment)."""

    __tablename__ = "units"

    community_id: Mapped[int] = mapped_column(
        ForeignKey("communities.id"),
        nullable=False,
        index=True,
    )
    code: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )

    community: Mapped["Community"] = relationship(
        "Community",
        back_populates="units",
    )

    __table_args__ = (
        UniqueConstraint("community_id", "code", name="uq_unit_community_code"),
    )

    def __repr__(self) -> str:
        return f"<Unit(id={self.id}, community_id={self.community_id}, code={self.code!r})>"


__all__ = ["Community", "Unit"]
