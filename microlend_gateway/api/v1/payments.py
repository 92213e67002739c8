"""POST /v1/payments - record a collection and apply it to the loan balance"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from microlend_gateway.api.v1.schemas import LoanResponse, PaymentCreate, PaymentRecordedResponse, PaymentResponse
from microlend_gateway.api.dependencies import get_request_id
from microlend_gateway.infrastructure.database.session import get_db
from microlend_gateway.infrastructure.database.repositories import LoanRepository, PaymentRepository
from microlend_gateway.infrastructure.observability.metrics import record_payment
from microlend_gateway.infrastructure.observability.logging import log_payment_applied
from microlend_gateway.domain.exceptions import LoanNotFoundError, LoanNotPayableError
from microlend_gateway.domain.lifecycle import ensure_payable
from microlend_gateway.domain.models import LoanStatus
from microlend_gateway.domain.reconciliation import apply_payment

router = APIRouter()


@router.post("/payments", response_model=PaymentRecordedResponse, status_code=201)
def record_payment_endpoint(request_body: PaymentCreate, request: Request, db: Session = Depends(get_db)):
    """
    Record a payment and update the loan in the same transaction.

    Flow:
    1. Reject unknown or already-paid loans
    2. Append the payment record
    3. balance = max(0, balance - amount); status = paid when balance hits 0
    """
    request_id = get_request_id(request)
    loan_repo = LoanRepository(db)

    try:
        loan = loan_repo.get_loan(request_body.loan_id)
        ensure_payable(loan)

        payment = PaymentRepository(db).create_payment(
            loan_id=loan.id,
            amount=request_body.amount,
            payment_date=request_body.payment_date,
            notes=request_body.notes,
        )
        application = apply_payment(loan.balance, loan.status, payment.amount)
        loan = loan_repo.update_balance(loan.id, application.new_balance, application.new_status)
        db.commit()

    except LoanNotFoundError:
        db.rollback()
        raise HTTPException(status_code=404, detail="Loan not found")

    except LoanNotPayableError as e:
        db.rollback()
        logging.warning(f"Payment rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    record_payment(payment.amount, settled=loan.status == LoanStatus.PAID)
    log_payment_applied(request_id, loan.id, payment.amount, loan.balance, loan.status)

    return PaymentRecordedResponse(
        payment=PaymentResponse.model_validate(payment),
        loan=LoanResponse.model_validate(loan),
    )


@router.get("/payments", response_model=List[PaymentResponse])
def list_payments(
    loan_id: Optional[str] = Query(None, description="Only payments for this loan"),
    db: Session = Depends(get_db),
):
    """Payments, newest first"""
    return [PaymentResponse.model_validate(p) for p in PaymentRepository(db).list_payments(loan_id)]
