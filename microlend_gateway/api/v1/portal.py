"""GET /v1/portal/loans/{loan_id} - read-only statement for borrowers"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from microlend_gateway.api.v1.schemas import (
    LoanResponse,
    PaymentResponse,
    ScheduleEntrySchema,
    StatementResponse,
)
from microlend_gateway.config import settings
from microlend_gateway.infrastructure.database.session import get_db
from microlend_gateway.infrastructure.database.repositories import (
    BorrowerRepository,
    LoanRepository,
    PaymentRepository,
)
from microlend_gateway.utils.date_utils import lender_today
from microlend_gateway.domain.exceptions import BorrowerNotFoundError, LoanNotFoundError, ScheduleTooLongError
from microlend_gateway.domain.statements import build_statement

router = APIRouter()


@router.get("/portal/loans/{loan_id}", response_model=StatementResponse)
def get_statement(
    loan_id: str,
    today: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    """
    Balance, progress, full schedule and today's installment for one loan.

    Borrowers look this up with the loan ID given by their agent: either the
    full id or its leading characters (case-insensitive, newest loan wins).
    """
    today = today or lender_today()

    try:
        loan = LoanRepository(db).resolve_loan(loan_id)
    except LoanNotFoundError:
        raise HTTPException(status_code=404, detail="Loan not found")

    try:
        borrower = BorrowerRepository(db).get_borrower(loan.borrower_id)
    except BorrowerNotFoundError:
        borrower = None

    try:
        statement = build_statement(
            loan,
            borrower,
            PaymentRepository(db).list_payments(loan.id),
            today,
            settings.schedule_max_periods,
        )
    except ScheduleTooLongError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return StatementResponse(
        loan=LoanResponse.model_validate(statement.loan),
        borrower_name=statement.borrower.name if statement.borrower else None,
        progress_percent=statement.progress_percent,
        is_due_today=statement.is_due_today,
        current_installment=statement.current_installment,
        paid_today=statement.paid_today,
        remaining_today=statement.remaining_today,
        fully_paid_today=statement.fully_paid_today,
        schedule=[ScheduleEntrySchema.model_validate(entry) for entry in statement.schedule],
        payments=[PaymentResponse.model_validate(p) for p in statement.payments],
    )
