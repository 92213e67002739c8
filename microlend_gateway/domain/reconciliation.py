"""Payment reconciliation against period targets, and balance application"""

from datetime import date
from decimal import Decimal
from typing import Iterable

from microlend_gateway.domain.models import LoanStatus, Payment, PaymentApplication, Reconciliation
from microlend_gateway.utils.date_utils import to_date


def collected_on(loan_id: str, reference_date: date, payments: Iterable[Payment]) -> Decimal:
    """
    Sum of the loan's payments dated on the reference day.

    Matching is by calendar date only; callers must pass timestamps already
    normalized to the lender's local time.
    """
    reference_date = to_date(reference_date)
    return sum(
        (p.amount for p in payments if p.loan_id == loan_id and to_date(p.payment_date) == reference_date),
        Decimal(0),
    )


def reconcile_payments(
    loan_id: str,
    reference_date: date,
    payments: Iterable[Payment],
    period_target: Decimal,
) -> Reconciliation:
    """
    Compare a day's collections with the expected installment.

    Example:
        target 120, collected 50  → remaining 70, not fully paid
        target 120, collected 150 → remaining 0, fully paid
    """
    collected = collected_on(loan_id, reference_date, payments)

    return Reconciliation(
        amount_collected=collected,
        remaining_due=max(Decimal(0), period_target - collected),
        fully_paid=collected >= period_target,
    )


def apply_payment(balance: Decimal, status: str, amount: Decimal) -> PaymentApplication:
    """
    New balance and status after a payment.

    The balance never goes below zero; the loan flips to paid exactly when it
    reaches zero, otherwise the status is left as it was.
    """
    new_balance = max(Decimal(0), balance - amount)
    new_status = LoanStatus.PAID.value if new_balance == 0 else status
    return PaymentApplication(new_balance=new_balance, new_status=new_status)
