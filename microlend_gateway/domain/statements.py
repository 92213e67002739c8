"""Borrower-facing loan statement (portal view)"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from microlend_gateway.domain.models import Borrower, Loan, LoanStatement, LoanStatus, Payment, TemporalClass
from microlend_gateway.domain.reconciliation import reconcile_payments
from microlend_gateway.domain.schedule import MAX_SCHEDULE_PERIODS, current_period_target, generate_schedule


def progress_percent(loan: Loan) -> Decimal:
    """Share of total payable already collected, 0-100"""
    if loan.total_payable <= 0:
        return Decimal(0)
    paid = loan.total_payable - loan.balance
    return (paid / loan.total_payable * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def build_statement(
    loan: Loan,
    borrower: Optional[Borrower],
    payments: List[Payment],
    today: date,
    max_periods: int = MAX_SCHEDULE_PERIODS,
) -> LoanStatement:
    """
    Everything the borrower portal shows for one loan.

    Unlike the lender worklist, "due today" here means a schedule entry falls
    today, and the installment is the schedule's per-entry target.
    """
    schedule = generate_schedule(loan, today, max_periods)
    installment = current_period_target(schedule)
    reconciliation = reconcile_payments(loan.id, today, payments, installment)

    is_due_today = loan.status == LoanStatus.ACTIVE and any(
        entry.temporal_class == TemporalClass.TODAY for entry in schedule
    )

    return LoanStatement(
        loan=loan,
        borrower=borrower,
        progress_percent=progress_percent(loan),
        schedule=schedule,
        is_due_today=is_due_today,
        current_installment=installment,
        paid_today=reconciliation.amount_collected,
        remaining_today=reconciliation.remaining_due,
        fully_paid_today=reconciliation.fully_paid,
        payments=sorted(payments, key=lambda p: p.payment_date, reverse=True),
    )
