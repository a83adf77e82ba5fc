"""Billing API endpoints: rebill triggers, allocation recompute and read-side drill-down."""

import logging
import time

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from src.services import get_db
from src.services.allocation_service import AllocationResult, AllocationService
from src.services.bills_service import BillsService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["billing"])


# Response schemas
class RebillResponse(BaseModel):
    """Response schema for GET /bills/{period_id}."""

    ok: bool
    created: int  # Bills written for billing entities with at least one line
    dropped: int  # Allocation lines of units with no active billing entity


class AllocationLineResponse(BaseModel):
    unit_id: int
    amount: str  # Decimal formatted as string to keep cents exact


class AllocationResponse(BaseModel):
    """Response schema for an expense allocation run."""

    expense_id: int
    weight_vector_id: int | None
    total: str
    lines: list[AllocationLineResponse]


class PeriodAllocationResponse(BaseModel):
    """Response schema for recomputing every expense of a period."""

    period_id: int
    expenses: list[AllocationResponse]


class BillLineResponse(BaseModel):
    expense_id: int
    amount: str
    currency: str | None


class BillResponse(BaseModel):
    """Response schema for a single generated bill."""

    id: int
    period_id: int
    billing_entity_id: int
    total_amount: str
    lines: list[BillLineResponse]


class BillingEntityTotalResponse(BaseModel):
    billing_entity_id: int
    code: str
    name: str
    total_amount: str


class BillingEntitiesResponse(BaseModel):
    period_code: str
    items: list[BillingEntityTotalResponse]


def _allocation_response(result: AllocationResult) -> AllocationResponse:
    return AllocationResponse(
        expense_id=result.expense_id,
        weight_vector_id=result.weight_vector_id,
        total=str(result.total),
        lines=[
            AllocationLineResponse(unit_id=line.unit_id, amount=str(line.amount))
            for line in result.lines
        ],
    )


@router.get("/bills/{period_id}", response_model=RebillResponse)
def rebill_period(period_id: int, db: Session = Depends(get_db)) -> RebillResponse:
    """Regenerate all bills of a period from its allocation lines."""
    start_time = time.time()
    result = BillsService(db).rebill(period_id)
    logger.debug(
        "billing.rebill: period_id=%d created=%d dropped=%d duration_ms=%d",
        period_id,
        result.created,
        result.dropped,
        int((time.time() - start_time) * 1000),
    )
    return RebillResponse(**result.to_dict())


@router.get("/bills/{period_id}/entities/{billing_entity_id}", response_model=BillResponse)
def get_bill(period_id: int, billing_entity_id: int, db: Session = Depends(get_db)) -> BillResponse:
    """Get the generated bill of a billing entity for a period."""
    bill = BillsService(db).get_bill(period_id, billing_entity_id)
    return BillResponse(
        id=bill.id,
        period_id=bill.period_id,
        billing_entity_id=bill.billing_entity_id,
        total_amount=str(bill.total_amount),
        lines=[
            BillLineResponse(expense_id=line.expense_id, amount=str(line.amount), currency=line.currency)
            for line in bill.lines
        ],
    )


@router.post("/expenses/{expense_id}/allocate", response_model=AllocationResponse)
def recompute_expense(expense_id: int, db: Session = Depends(get_db)) -> AllocationResponse:
    """Administrative recompute of one expense's allocation."""
    return _allocation_response(AllocationService(db).allocate(expense_id))


@router.post("/periods/{period_id}/allocate", response_model=PeriodAllocationResponse)
def recompute_period(period_id: int, db: Session = Depends(get_db)) -> PeriodAllocationResponse:
    """Administrative recompute of every expense in a period, in expense id order."""
    results = AllocationService(db).allocate_period(period_id)
    return PeriodAllocationResponse(
        period_id=period_id,
        expenses=[_allocation_response(result) for result in results],
    )


@router.get(
    "/communities/{community_id}/periods/{period_code}/billing-entities",
    response_model=BillingEntitiesResponse,
)
def list_billing_entities(
    community_id: int,
    period_code: str,
    db: Session = Depends(get_db),
) -> BillingEntitiesResponse:
    """Allocated totals per billing entity for a period."""
    totals = BillsService(db).list_billing_entities(community_id, period_code)
    return BillingEntitiesResponse(
        period_code=period_code,
        items=[
            BillingEntityTotalResponse(
                billing_entity_id=item.billing_entity_id,
                code=item.code,
                name=item.name,
                total_amount=str(item.total_amount),
            )
            for item in totals
        ],
    )


__all__ = ["router"]
