"""Allocation rule ORM model: how an expense is distributed across units."""

from enum import Enum

from sqlalchemy import JSON, Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class AllocationMethod(str, Enum):
    """Supported allocation methods."""

    EQUAL = "EQUAL"
    """Every unit in scope carries the same weight"""

    BY_SQM = "BY_SQM"
    """Weighted by the unit's area measurement"""

    BY_RESIDENTS = "BY_RESIDENTS"
    """Weighted by the unit's resident count"""

    BY_CONSUMPTION = "BY_CONSUMPTION"
    """Weighted by a configurable consumption measure"""

    MIXED = "MIXED"
    """Weighted sum of several measures"""


class AllocationRule(Base, BaseModel):
    """Configured allocation method plus its parameters.

    ``method`` is stored as a plain string so that a value unknown to this
    release still loads and is rejected by the weight builder with an explicit
    error. ``params`` shape depends on the method::

        BY_CONSUMPTION: {"single": {"typeCode": "WATER_M3"}}
        MIXED:          {"mixed": {"parts": [{"typeCode": "SQM", "weight": 0.5}, ...]}}
    """

    __tablename__ = "allocation_rules"

    community_id: Mapped[int] = mapped_column(
        ForeignKey("communities.id"),
        nullable=False,
        index=True,
    )
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    method: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=AllocationMethod.EQUAL.value,
    )
    params: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    is_default: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Fallback rule for expenses whose type carries no rule",
    )

    __table_args__ = (UniqueConstraint("community_id", "code", name="uq_rule_community_code"),)

    def __repr__(self) -> str:
        return f"<AllocationRule(id={self.id}, code={self.code!r}, method={self.method})>"


__all__ = ["AllocationRule", "AllocationMethod"]
