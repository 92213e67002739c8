"""Flat-markup amortization for 5-6 style loans"""

import math
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_CEILING, ROUND_HALF_UP

from microlend_gateway.domain.models import Amortization, Loan, LoanTerms, PaymentFrequency
from microlend_gateway.utils.date_utils import lender_today, term_days

CENT = Decimal("0.01")
CURRENCY_UNIT = Decimal("1")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Coerce a numeric value to Decimal without binary float noise"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_up_to_unit(amount: Decimal) -> Decimal:
    """Ceil to the whole currency unit so installments never undershoot"""
    return amount.quantize(CURRENCY_UNIT, rounding=ROUND_CEILING)


def compute_total_payable(principal: Decimal | float, interest_rate: Decimal | float) -> Decimal:
    """principal + principal × rate / 100, kept to the cent"""
    principal = to_decimal(principal)
    interest = principal * to_decimal(interest_rate) / Decimal(100)
    return (principal + interest).quantize(CENT, rounding=ROUND_HALF_UP)


def count_periods(frequency: str, days: int) -> int:
    """
    Number of collection events over a term of `days` days.

    Unknown frequencies are treated as daily. The result is never below 1.
    """
    if frequency == PaymentFrequency.LUMP_SUM:
        return 1
    if frequency == PaymentFrequency.WEEKLY:
        return max(1, math.ceil(days / 7))
    if frequency == PaymentFrequency.MONTHLY:
        return max(1, math.ceil(days / 30))
    return max(1, days)


def amortize(
    total_payable: Decimal,
    start_date: date | datetime,
    due_date: date | datetime | None,
    frequency: str,
) -> Amortization:
    """Split an already-computed total into per-period installment targets"""
    period_count = count_periods(frequency, term_days(start_date, due_date))
    installment_target = round_up_to_unit(total_payable / Decimal(period_count))

    return Amortization(
        total_payable=total_payable,
        period_count=period_count,
        installment_target=installment_target,
    )


def calculate_amortization(
    principal: Decimal | float,
    interest_rate: Decimal | float,
    start_date: date | datetime,
    due_date: date | datetime | None,
    frequency: str,
) -> Amortization:
    """
    Reduce loan terms to total payable, period count and installment target.

    Example:
        1000 at 20%, daily, 10-day term → total 1200, 10 periods, 120 each
    """
    total_payable = compute_total_payable(principal, interest_rate)
    return amortize(total_payable, start_date, due_date, frequency)


def loan_amortization(loan: Loan, today: date | None = None) -> Amortization:
    """
    Amortization of an issued loan, using its stored total_payable.

    A loan without a due date runs until `today` (default: the lender's current day).
    """
    due_date = loan.due_date or today
    return amortize(loan.total_payable, loan.start_date, due_date, loan.payment_frequency)


def build_loan_terms(
    principal: Decimal | float,
    interest_rate: Decimal | float,
    term_length_days: int,
    frequency: str,
    start_date: date | None = None,
) -> LoanTerms:
    """
    Figures for a new loan at issuance.

    The due date is start + term; balance starts at the full total payable.
    """
    if start_date is None:
        start_date = lender_today()

    principal = to_decimal(principal)
    total_payable = compute_total_payable(principal, interest_rate)

    return LoanTerms(
        principal=principal,
        interest_rate=to_decimal(interest_rate),
        total_payable=total_payable,
        balance=total_payable,
        start_date=start_date,
        due_date=start_date + timedelta(days=max(0, term_length_days)),
        payment_frequency=frequency,
    )
