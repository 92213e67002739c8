"""GET /v1/collections - the day's collection worklist"""

import time
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from microlend_gateway.api.v1.schemas import CollectionItemSchema, CollectionsResponse
from microlend_gateway.api.dependencies import get_request_id
from microlend_gateway.infrastructure.database.session import get_db
from microlend_gateway.infrastructure.database.repositories import (
    BorrowerRepository,
    LoanRepository,
    PaymentRepository,
)
from microlend_gateway.infrastructure.observability.metrics import worklist_size_gauge
from microlend_gateway.infrastructure.observability.logging import log_worklist
from microlend_gateway.utils.date_utils import lender_today
from microlend_gateway.domain.collections import build_worklist

router = APIRouter()


@router.get("/collections", response_model=CollectionsResponse)
def get_collections(
    request: Request,
    date_: Optional[date] = Query(None, alias="date", description="Collection date (default: today)"),
    db: Session = Depends(get_db),
):
    """
    Loans expected to be collected on the given date.

    Each row carries the installment target, what was already collected that
    day, and whether the target is met.
    """
    start_time = time.time()
    reference_date = date_ or lender_today()

    worklist = build_worklist(
        loans=LoanRepository(db).list_loans(),
        payments=PaymentRepository(db).list_payments(),
        borrowers=BorrowerRepository(db).list_borrowers(),
        reference_date=reference_date,
    )

    items = [
        CollectionItemSchema(
            loan_id=item.loan.id,
            borrower_id=item.loan.borrower_id,
            borrower_name=item.borrower.name if item.borrower else None,
            payment_frequency=item.loan.payment_frequency,
            status=item.loan.status,
            balance=item.loan.balance,
            target_amount=item.target_amount,
            paid_amount=item.paid_amount,
            remaining_due=item.remaining_due,
            is_paid=item.is_paid,
        )
        for item in worklist
    ]

    worklist_size_gauge.set(len(items))
    duration_ms = (time.time() - start_time) * 1000
    log_worklist(get_request_id(request), reference_date, len(items), sum(1 for i in items if i.is_paid), duration_ms)

    return CollectionsResponse(date=reference_date, due_count=len(items), items=items)
