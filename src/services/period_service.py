"""Period lookup service for database operations."""

import logging

from sqlalchemy.orm import Session

from src.models.period import Period
from src.services.errors import NotFoundError

logger = logging.getLogger(__name__)


class PeriodService:
    """Service for read-only period lookups.

    Periods are created by administrative workflows; the engine only reads them.
    """

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session

    def get_by_id(self, period_id: int) -> Period | None:
        """Get period by ID.

        Args:
            period_id: Period ID to fetch

        Returns:
            Period if found, None otherwise
        """
        return self.db.query(Period).filter(Period.id == period_id).first()

    def require(self, period_id: int) -> Period:
        """Get period by ID or raise NotFoundError."""
        period = self.get_by_id(period_id)
        if period is None:
            raise NotFoundError(f"Period {period_id} not found")
        return period

    def get_by_code(self, community_id: int, code: str) -> Period | None:
        """Get period of a community by its human-readable code.

        Args:
            community_id: Owning community
            code: Period code (e.g. '2025-01')

        Returns:
            Period if found, None otherwise
        """
        return (
            self.db.query(Period)
            .filter(Period.community_id == community_id, Period.code == code)
            .first()
        )


__all__ = ["PeriodService"]
