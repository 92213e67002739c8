"""GET /v1/dashboard - portfolio totals and recent collections"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from microlend_gateway.api.v1.schemas import DailyCollectionSchema, DashboardResponse
from microlend_gateway.infrastructure.database.session import get_db
from microlend_gateway.infrastructure.database.repositories import LoanRepository, PaymentRepository
from microlend_gateway.utils.date_utils import lender_today
from microlend_gateway.domain.portfolio import daily_collections, portfolio_stats

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    today: Optional[date] = Query(None, description="Last day of the 7-day collection chart"),
    db: Session = Depends(get_db),
):
    payments = PaymentRepository(db).list_payments()
    stats = portfolio_stats(LoanRepository(db).list_loans(), payments)
    chart = daily_collections(payments, today or lender_today())

    return DashboardResponse(
        total_lent=stats.total_lent,
        total_receivable=stats.total_receivable,
        total_collected=stats.total_collected,
        outstanding=stats.outstanding,
        simple_profit=stats.simple_profit,
        active_loans_count=stats.active_loans_count,
        daily_collections=[DailyCollectionSchema.model_validate(day) for day in chart],
    )
