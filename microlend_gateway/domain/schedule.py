"""Repayment schedule generation"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from microlend_gateway.domain.amortization import round_up_to_unit
from microlend_gateway.domain.exceptions import ScheduleTooLongError
from microlend_gateway.domain.models import Loan, PaymentFrequency, ScheduleEntry, TemporalClass
from microlend_gateway.utils.date_utils import add_periods, lender_today, to_date

MAX_SCHEDULE_PERIODS = 1000


def classify_date(entry_date: date, today: date) -> TemporalClass:
    if entry_date < today:
        return TemporalClass.PAST
    if entry_date == today:
        return TemporalClass.TODAY
    return TemporalClass.UPCOMING


def generate_due_dates(
    start_date: date,
    due_date: date,
    frequency: str,
    max_periods: int = MAX_SCHEDULE_PERIODS,
) -> List[date]:
    """
    Collection dates between start and due date.

    The first date is one period after start (nothing is due on disbursement
    day); dates run up to and including the due date. Lump-sum loans have a
    single date, the due date.

    Raises:
        ScheduleTooLongError: if more than `max_periods` dates would be produced
    """
    if frequency == PaymentFrequency.LUMP_SUM:
        return [due_date]

    dates = []
    period = 1
    current = add_periods(start_date, frequency, period)
    while current <= due_date:
        if len(dates) >= max_periods:
            raise ScheduleTooLongError(max_periods)
        dates.append(current)
        period += 1
        current = add_periods(start_date, frequency, period)

    return dates


def generate_schedule(
    loan: Loan,
    today: date | None = None,
    max_periods: int = MAX_SCHEDULE_PERIODS,
) -> List[ScheduleEntry]:
    """
    Build the loan's repayment schedule, earliest entry first.

    Every entry carries the same target, ceil(total_payable / entry count).
    Note that the entry count follows calendar advancement and can differ from
    the amortization period count for weekly and monthly loans.
    """
    today = to_date(today or lender_today())
    start_date = to_date(loan.start_date)
    due_date = to_date(loan.due_date) if loan.due_date else today

    dates = generate_due_dates(start_date, due_date, loan.payment_frequency, max_periods)
    target = round_up_to_unit(loan.total_payable / Decimal(len(dates) or 1))

    return [
        ScheduleEntry(date=d, target_amount=target, temporal_class=classify_date(d, today))
        for d in dates
    ]


def next_due_entry(schedule: List[ScheduleEntry]) -> Optional[ScheduleEntry]:
    """Nearest entry falling today or later"""
    for entry in schedule:
        if entry.temporal_class != TemporalClass.PAST:
            return entry
    return None


def current_period_target(schedule: List[ScheduleEntry]) -> Decimal:
    """Target of the nearest open entry; the last entry's once all are past"""
    entry = next_due_entry(schedule)
    if entry is None:
        return schedule[-1].target_amount if schedule else Decimal(0)
    return entry.target_amount
