"""Daily collection worklist: which loans are due on a date, and how much"""

from datetime import date
from typing import Dict, List

from microlend_gateway.domain.amortization import loan_amortization
from microlend_gateway.domain.models import (
    Borrower,
    CollectionItem,
    Loan,
    LoanStatus,
    Payment,
    PaymentFrequency,
)
from microlend_gateway.domain.reconciliation import reconcile_payments
from microlend_gateway.utils.date_utils import lender_today, same_day_of_month, same_weekday, to_date

COLLECTIBLE_STATUSES = (LoanStatus.ACTIVE, LoanStatus.DEFAULTED)


def is_due_on(loan: Loan, reference_date: date) -> bool:
    """
    Whether collection is expected from this loan on the reference date.

    Rules (after the loan is collectible and has started):
    - daily: every day
    - weekly: same weekday as the start date
    - monthly: same day of month as the start date
    - lump_sum: only on the due date
    Unknown frequencies are treated as daily.
    """
    if loan.status not in COLLECTIBLE_STATUSES:
        return False

    reference_date = to_date(reference_date)
    start_date = to_date(loan.start_date)
    if reference_date < start_date:
        return False

    if loan.payment_frequency == PaymentFrequency.WEEKLY:
        return same_weekday(start_date, reference_date)
    if loan.payment_frequency == PaymentFrequency.MONTHLY:
        return same_day_of_month(start_date, reference_date)
    if loan.payment_frequency == PaymentFrequency.LUMP_SUM:
        due_date = to_date(loan.due_date) if loan.due_date else lender_today()
        return due_date == reference_date
    return True


def build_worklist(
    loans: List[Loan],
    payments: List[Payment],
    borrowers: List[Borrower],
    reference_date: date,
) -> List[CollectionItem]:
    """
    Loans due on the reference date, annotated with paid/unpaid state.

    The period target is the amortization installment target of each loan.
    """
    borrowers_by_id: Dict[str, Borrower] = {b.id: b for b in borrowers}
    worklist = []

    for loan in loans:
        if not is_due_on(loan, reference_date):
            continue

        target = loan_amortization(loan, reference_date).installment_target
        reconciliation = reconcile_payments(loan.id, reference_date, payments, target)

        worklist.append(
            CollectionItem(
                loan=loan,
                borrower=borrowers_by_id.get(loan.borrower_id),
                target_amount=target,
                paid_amount=reconciliation.amount_collected,
                remaining_due=reconciliation.remaining_due,
                is_paid=reconciliation.fully_paid,
            )
        )

    return worklist
