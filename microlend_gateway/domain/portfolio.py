"""Portfolio-level figures for the lender dashboard"""

from datetime import date, timedelta
from decimal import Decimal
from typing import List

from microlend_gateway.domain.models import DailyCollection, Loan, LoanStatus, Payment, PortfolioStats
from microlend_gateway.utils.date_utils import generate_date_range, to_date


def portfolio_stats(loans: List[Loan], payments: List[Payment]) -> PortfolioStats:
    """
    Totals across every loan and payment.

    outstanding = receivable - collected; simple profit = collected - lent
    (negative while principal is still out).
    """
    total_lent = sum((loan.principal for loan in loans), Decimal(0))
    total_receivable = sum((loan.total_payable for loan in loans), Decimal(0))
    total_collected = sum((p.amount for p in payments), Decimal(0))

    return PortfolioStats(
        total_lent=total_lent,
        total_receivable=total_receivable,
        total_collected=total_collected,
        outstanding=total_receivable - total_collected,
        simple_profit=total_collected - total_lent,
        active_loans_count=sum(1 for loan in loans if loan.status == LoanStatus.ACTIVE),
    )


def daily_collections(payments: List[Payment], end_date: date, days: int = 7) -> List[DailyCollection]:
    """Collected amount per day for the `days` days ending on end_date, oldest first"""
    end_date = to_date(end_date)
    start_date = end_date - timedelta(days=max(1, days) - 1)

    totals = {d: Decimal(0) for d in generate_date_range(start_date, end_date)}
    for payment in payments:
        day = to_date(payment.payment_date)
        if day in totals:
            totals[day] += payment.amount

    return [DailyCollection(date=d, amount=amount) for d, amount in totals.items()]
