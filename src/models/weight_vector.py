"""Cached weight computations shared by expenses with the same scope and rule."""

from sqlalchemy import Float, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class WeightVector(Base, BaseModel):
    """Normalized distribution for one (community, period, rule, scope) key.

    Items are replaced in place on every allocation run; no history is kept.
    """

    __tablename__ = "weight_vectors"

    community_id: Mapped[int] = mapped_column(
        ForeignKey("communities.id"),
        nullable=False,
    )
    period_id: Mapped[int] = mapped_column(
        ForeignKey("periods.id"),
        nullable=False,
    )
    rule_id: Mapped[int] = mapped_column(
        ForeignKey("allocation_rules.id"),
        nullable=False,
    )
    scope_type: Mapped[str] = mapped_column(String(32), nullable=False)
    scope_id: Mapped[int] = mapped_column(nullable=False)

    items: Mapped[list["WeightItem"]] = relationship(
        "WeightItem",
        back_populates="vector",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint(
            "community_id",
            "period_id",
            "rule_id",
            "scope_type",
            "scope_id",
            name="uq_weight_vector_key",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<WeightVector(id={self.id}, period_id={self.period_id}, rule_id={self.rule_id}, "
            f"scope={self.scope_type}:{self.scope_id})>"
        )


class WeightItem(Base, BaseModel):
    """Raw measured value and normalized weight of one unit in a vector."""

    __tablename__ = "weight_items"

    vector_id: Mapped[int] = mapped_column(
        ForeignKey("weight_vectors.id"),
        nullable=False,
        index=True,
    )
    unit_id: Mapped[int] = mapped_column(
        ForeignKey("units.id"),
        nullable=False,
    )
    raw_value: Mapped[float] = mapped_column(Float, nullable=False)
    weight: Mapped[float] = mapped_column(Float, nullable=False)

    vector: Mapped["WeightVector"] = relationship(
        "WeightVector",
        back_populates="items",
    )

    __table_args__ = (UniqueConstraint("vector_id", "unit_id", name="uq_weight_item_vector_unit"),)


__all__ = ["WeightVector", "WeightItem"]
