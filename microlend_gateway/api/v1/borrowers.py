"""Borrower records, standing badges and assistant risk analysis"""

import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from microlend_gateway.api.v1.schemas import (
    BorrowerCreate,
    BorrowerDetail,
    BorrowerResponse,
    BorrowerSummary,
    LoanResponse,
    RiskAnalysisResponse,
    StandingSchema,
)
from microlend_gateway.api.dependencies import get_assistant_client, get_request_id
from microlend_gateway.infrastructure.database.session import get_db
from microlend_gateway.infrastructure.database.repositories import (
    BorrowerRepository,
    LoanRepository,
    PaymentRepository,
)
from microlend_gateway.infrastructure.clients.assistant import AssistantClient
from microlend_gateway.infrastructure.observability.metrics import record_standing
from microlend_gateway.utils.date_utils import lender_today
from microlend_gateway.domain.exceptions import AssistantAPIError, BorrowerNotFoundError
from microlend_gateway.domain.models import Borrower, Loan, LoanStatus
from microlend_gateway.domain.standing import classify_standing

router = APIRouter()


def summarize(borrower: Borrower, loans: List[Loan], today: date) -> BorrowerSummary:
    standing = classify_standing(loans, today)
    record_standing(standing.status.value)
    active_loan = next((loan for loan in loans if loan.status == LoanStatus.ACTIVE), None)

    return BorrowerSummary(
        **BorrowerResponse.model_validate(borrower).model_dump(),
        standing=StandingSchema.model_validate(standing),
        active_balance=active_loan.balance if active_loan else None,
    )


@router.post("/borrowers", response_model=BorrowerResponse, status_code=201)
def create_borrower(request_body: BorrowerCreate, db: Session = Depends(get_db)):
    """Register a borrower. The identity document itself lives in external storage."""
    borrower = BorrowerRepository(db).create_borrower(
        name=request_body.name,
        phone=request_body.phone,
        address=request_body.address,
        id_image_url=request_body.id_image_url,
    )
    db.commit()
    return BorrowerResponse.model_validate(borrower)


@router.get("/borrowers", response_model=List[BorrowerSummary])
def list_borrowers(
    today: Optional[date] = Query(None, description="Reference date for overdue checks (default: today)"),
    db: Session = Depends(get_db),
):
    """All borrowers, newest first, each with a standing badge"""
    today = today or lender_today()
    loans = LoanRepository(db).list_loans()

    return [
        summarize(borrower, [loan for loan in loans if loan.borrower_id == borrower.id], today)
        for borrower in BorrowerRepository(db).list_borrowers()
    ]


@router.get("/borrowers/{borrower_id}", response_model=BorrowerDetail)
def get_borrower(
    borrower_id: str,
    today: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    try:
        borrower = BorrowerRepository(db).get_borrower(borrower_id)
    except BorrowerNotFoundError:
        raise HTTPException(status_code=404, detail="Borrower not found")

    loans = LoanRepository(db).list_loans_by_borrower(borrower_id)
    summary = summarize(borrower, loans, today or lender_today())

    return BorrowerDetail(
        **summary.model_dump(),
        loans=[LoanResponse.model_validate(loan) for loan in loans],
    )


@router.post("/borrowers/{borrower_id}/risk-analysis", response_model=RiskAnalysisResponse)
async def analyze_risk(
    borrower_id: str,
    request: Request,
    db: Session = Depends(get_db),
    assistant: AssistantClient = Depends(get_assistant_client),
):
    """
    Ask the assistant for a risk label from the borrower's loan history.

    The reply is passed through as-is; it is advisory and independent of the
    rule-based standing badge.
    """
    request_id = get_request_id(request)

    try:
        borrower = BorrowerRepository(db).get_borrower(borrower_id)
    except BorrowerNotFoundError:
        raise HTTPException(status_code=404, detail="Borrower not found")

    loans = LoanRepository(db).list_loans_by_borrower(borrower_id)
    payments = [p for loan in loans for p in PaymentRepository(db).list_payments(loan.id)]

    try:
        assessment = await assistant.analyze_borrower_risk(borrower, loans, payments)
    except AssistantAPIError as e:
        logging.error(f"Assistant error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Assistant service unavailable")

    return RiskAnalysisResponse(
        borrower_id=borrower_id,
        risk_level=assessment.risk_level,
        analysis=assessment.analysis,
    )
