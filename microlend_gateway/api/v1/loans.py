"""Loan issuance, lookup, schedule and lifecycle endpoints"""

import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from microlend_gateway.api.v1.schemas import (
    AmortizationSchema,
    LoanCreate,
    LoanDetail,
    LoanPreviewResponse,
    LoanResponse,
    LoanTermsRequest,
    NotesUpdate,
    ScheduleEntrySchema,
    ScheduleResponse,
)
from microlend_gateway.api.dependencies import get_request_id
from microlend_gateway.config import settings
from microlend_gateway.infrastructure.database.session import get_db
from microlend_gateway.infrastructure.database.repositories import BorrowerRepository, LoanRepository
from microlend_gateway.infrastructure.observability.metrics import record_loan_issued
from microlend_gateway.infrastructure.observability.logging import log_loan_issued
from microlend_gateway.utils.date_utils import lender_today
from microlend_gateway.domain.amortization import amortize, build_loan_terms, loan_amortization
from microlend_gateway.domain.exceptions import (
    BorrowerNotFoundError,
    InvalidStatusTransitionError,
    LoanNotFoundError,
    ScheduleTooLongError,
)
from microlend_gateway.domain.lifecycle import transition_status
from microlend_gateway.domain.models import Loan, LoanStatus, LoanTerms
from microlend_gateway.domain.schedule import generate_due_dates, generate_schedule

router = APIRouter()


def checked_terms(request_body: LoanTermsRequest) -> LoanTerms:
    """
    Figures for the requested terms, refused with 422 when their schedule would
    exceed the configured number of entries.
    """
    terms = build_loan_terms(
        principal=request_body.principal,
        interest_rate=request_body.interest_rate,
        term_length_days=request_body.term_days,
        frequency=request_body.payment_frequency.value,
        start_date=request_body.start_date,
    )
    try:
        generate_due_dates(terms.start_date, terms.due_date, terms.payment_frequency, settings.schedule_max_periods)
    except ScheduleTooLongError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return terms


def loan_detail(loan: Loan) -> LoanDetail:
    return LoanDetail(
        **LoanResponse.model_validate(loan).model_dump(),
        amortization=AmortizationSchema.model_validate(loan_amortization(loan)),
    )


@router.post("/loans/preview", response_model=LoanPreviewResponse)
def preview_loan(request_body: LoanTermsRequest):
    """Amortization for prospective terms; nothing is persisted"""
    terms = checked_terms(request_body)
    amortization = amortize(terms.total_payable, terms.start_date, terms.due_date, terms.payment_frequency)

    return LoanPreviewResponse(
        total_payable=amortization.total_payable,
        period_count=amortization.period_count,
        installment_target=amortization.installment_target,
        start_date=terms.start_date,
        due_date=terms.due_date,
    )


@router.post("/loans", response_model=LoanDetail, status_code=201)
def create_loan(request_body: LoanCreate, request: Request, db: Session = Depends(get_db)):
    """
    Issue a loan.

    total_payable = principal × (1 + rate/100) is fixed here; the balance starts
    at total_payable and the loan starts active.
    """
    request_id = get_request_id(request)

    try:
        BorrowerRepository(db).get_borrower(request_body.borrower_id)
    except BorrowerNotFoundError:
        raise HTTPException(status_code=404, detail="Borrower not found")

    terms = checked_terms(request_body)
    loan = LoanRepository(db).create_loan(request_body.borrower_id, terms, notes=request_body.notes)
    db.commit()

    record_loan_issued(loan.payment_frequency)
    log_loan_issued(request_id, loan.id, loan.borrower_id, loan.total_payable, loan.payment_frequency)

    return loan_detail(loan)


@router.get("/loans", response_model=List[LoanResponse])
def list_loans(
    status: Optional[LoanStatus] = Query(None, description="Filter by status"),
    db: Session = Depends(get_db),
):
    loans = LoanRepository(db).list_loans(status.value if status else None)
    return [LoanResponse.model_validate(loan) for loan in loans]


@router.get("/loans/{loan_id}", response_model=LoanDetail)
def get_loan(loan_id: str, db: Session = Depends(get_db)):
    try:
        loan = LoanRepository(db).get_loan(loan_id)
    except LoanNotFoundError:
        raise HTTPException(status_code=404, detail="Loan not found")

    return loan_detail(loan)


@router.get("/loans/{loan_id}/schedule", response_model=ScheduleResponse)
def get_schedule(
    loan_id: str,
    today: Optional[date] = Query(None, description="Reference date for past/today/upcoming"),
    db: Session = Depends(get_db),
):
    """Repayment schedule, earliest first"""
    today = today or lender_today()

    try:
        loan = LoanRepository(db).get_loan(loan_id)
        schedule = generate_schedule(loan, today, settings.schedule_max_periods)
    except LoanNotFoundError:
        raise HTTPException(status_code=404, detail="Loan not found")
    except ScheduleTooLongError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ScheduleResponse(
        loan_id=loan_id,
        reference_date=today,
        entries=[ScheduleEntrySchema.model_validate(entry) for entry in schedule],
    )


@router.patch("/loans/{loan_id}/notes", response_model=LoanResponse)
def update_notes(loan_id: str, request_body: NotesUpdate, db: Session = Depends(get_db)):
    try:
        loan = LoanRepository(db).update_notes(loan_id, request_body.notes)
    except LoanNotFoundError:
        raise HTTPException(status_code=404, detail="Loan not found")

    db.commit()
    return LoanResponse.model_validate(loan)


@router.post("/loans/{loan_id}/default", response_model=LoanResponse)
def mark_defaulted(loan_id: str, request: Request, db: Session = Depends(get_db)):
    """Write off an active loan as defaulted (terminal)"""
    request_id = get_request_id(request)
    repo = LoanRepository(db)

    try:
        loan = repo.get_loan(loan_id)
        status = transition_status(loan.status, LoanStatus.DEFAULTED)
        loan = repo.update_status(loan_id, status)
    except LoanNotFoundError:
        raise HTTPException(status_code=404, detail="Loan not found")
    except InvalidStatusTransitionError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))

    db.commit()
    logging.info("Loan marked defaulted", extra={"request_id": request_id, "loan_id": loan_id})
    return LoanResponse.model_validate(loan)
