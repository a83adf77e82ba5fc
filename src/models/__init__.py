"""SQLAlchemy base model with common fields and model exports."""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# Base class for all models
Base = declarative_base()


class BaseModel:
    """Base model with common timestamp fields."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


# Import models to register them with Base (after Base is defined)
# This must be after Base declaration to avoid circular imports
from src.models.allocation_line import AllocationLine  # noqa: E402
from src.models.allocation_rule import AllocationMethod, AllocationRule  # noqa: E402
from src.models.bill import Bill, BillLine  # noqa: E402
from src.models.billing_entity import BillingEntity, BillingEntityMember  # noqa: E402
from src.models.community import Community, Unit  # noqa: E402
from src.models.expense import Expense, ExpenseTargetType, ExpenseType  # noqa: E402
from src.models.expense_target import ExpenseTargetMember, ExpenseTargetSet  # noqa: E402
from src.models.period import Period, PeriodStatus  # noqa: E402
from src.models.period_measure import MeasureScope, PeriodMeasure  # noqa: E402
from src.models.unit_group import UnitGroup, UnitGroupMember  # noqa: E402
from src.models.weight_vector import WeightItem, WeightVector  # noqa: E402

__all__ = [
    "Base",
    "BaseModel",
    "AllocationLine",
    "AllocationMethod",
    "AllocationRule",
    "Bill",
    "BillLine",
    "BillingEntity",
    "BillingEntityMember",
    "Community",
    "Unit",
    "Expense",
    "ExpenseTargetType",
    "ExpenseType",
    "ExpenseTargetMember",
    "ExpenseTargetSet",
    "MeasureScope",
    "Period",
    "PeriodMeasure",
    "PeriodStatus",
    "UnitGroup",
    "UnitGroupMember",
    "WeightItem",
    "WeightVector",
]
