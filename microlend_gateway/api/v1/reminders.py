"""POST /v1/reminders - assistant-drafted collection SMS"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from microlend_gateway.api.v1.schemas import ReminderRequest, ReminderResponse
from microlend_gateway.api.dependencies import get_assistant_client, get_request_id
from microlend_gateway.infrastructure.database.session import get_db
from microlend_gateway.infrastructure.database.repositories import BorrowerRepository, LoanRepository
from microlend_gateway.infrastructure.clients.assistant import AssistantClient
from microlend_gateway.domain.exceptions import AssistantAPIError, BorrowerNotFoundError, LoanNotFoundError

router = APIRouter()


@router.post("/reminders", response_model=ReminderResponse)
async def create_reminder(
    request_body: ReminderRequest,
    request: Request,
    db: Session = Depends(get_db),
    assistant: AssistantClient = Depends(get_assistant_client),
):
    """Draft a reminder for the loan's remaining balance in the requested tone"""
    request_id = get_request_id(request)

    try:
        loan = LoanRepository(db).get_loan(request_body.loan_id)
        borrower = BorrowerRepository(db).get_borrower(loan.borrower_id)
    except (LoanNotFoundError, BorrowerNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))

    try:
        message = await assistant.generate_collection_message(
            borrower_name=borrower.name,
            amount_due=loan.balance,
            due_date=loan.due_date,
            tone=request_body.tone.value,
        )
    except AssistantAPIError as e:
        logging.error(f"Assistant error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Assistant service unavailable")

    return ReminderResponse(loan_id=loan.id, tone=request_body.tone, message=message)
