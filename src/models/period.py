"""Period ORM model for billing cycles ordered by sequence number."""

from enum import Enum

from sqlalchemy import Enum as SQLEnum
from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class PeriodStatus(str, Enum):
    """Status of a billing period."""

    OPEN = "open"
    CLOSED = "closed"


class Period(Base, BaseModel):
    """Model representing a billing cycle of a community.

    ``seq`` increases monotonically within a community and is the authority for
    membership windows; wall-clock dates play no part in allocation.
    """

    __tablename__ = "periods"

    community_id: Mapped[int] = mapped_column(
        ForeignKey("communities.id"),
        nullable=False,
        index=True,
    )
    code: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Human-readable period identifier (e.g., '2025-01')",
    )
    seq: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Monotonic sequence number within the community",
    )
    status: Mapped[PeriodStatus] = mapped_column(
        SQLEnum(PeriodStatus),
        nullable=False,
        default=PeriodStatus.OPEN,
    )

    __table_args__ = (
        UniqueConstraint("community_id", "code", name="uq_period_community_code"),
        UniqueConstraint("community_id", "seq", name="uq_period_community_seq"),
    )

    def __repr__(self) -> str:
        return f"<Period(id={self.id}, code={self.code!r}, seq={self.seq}, status={self.status})>"


__all__ = ["Period", "PeriodStatus"]
