"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class PaymentFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    LUMP_SUM = "lump_sum"


class LoanStatus(str, Enum):
    ACTIVE = "active"
    PAID = "paid"
    DEFAULTED = "defaulted"


class TemporalClass(str, Enum):
    PAST = "past"
    TODAY = "today"
    UPCOMING = "upcoming"


class StandingStatus(str, Enum):
    NEW = "New"
    GOOD_PAYER = "Good Payer"
    DELINQUENT = "Delinquent"
    NEUTRAL = "Neutral"


class ReminderTone(str, Enum):
    FRIENDLY = "friendly"
    FIRM = "firm"
    URGENT = "urgent"


@dataclass
class Borrower:
    """Borrower record from the store"""

    id: str
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    id_image_url: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class Loan:
    """Loan snapshot. total_payable is fixed at issuance and never recomputed."""

    id: str
    borrower_id: str
    principal: Decimal
    interest_rate: Decimal
    total_payable: Decimal
    balance: Decimal
    start_date: date
    due_date: Optional[date]
    payment_frequency: str = PaymentFrequency.DAILY.value  # unknown values behave as daily
    status: str = LoanStatus.ACTIVE.value
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class Payment:
    """Recorded collection; append-only"""

    id: str
    loan_id: str
    amount: Decimal
    payment_date: datetime
    notes: Optional[str] = None


@dataclass(frozen=True)
class Amortization:
    """Loan terms reduced to a repayment plan"""

    total_payable: Decimal
    period_count: int
    installment_target: Decimal


@dataclass(frozen=True)
class LoanTerms:
    """Figures for a loan about to be issued"""

    principal: Decimal
    interest_rate: Decimal
    total_payable: Decimal
    balance: Decimal
    start_date: date
    due_date: date
    payment_frequency: str
    status: str = LoanStatus.ACTIVE.value


@dataclass(frozen=True)
class ScheduleEntry:
    """Single due date in a generated repayment schedule"""

    date: date
    target_amount: Decimal
    temporal_class: TemporalClass


@dataclass(frozen=True)
class Reconciliation:
    """Collections on one date measured against the period target"""

    amount_collected: Decimal
    remaining_due: Decimal
    fully_paid: bool


@dataclass(frozen=True)
class PaymentApplication:
    """Loan balance and status after a payment is applied"""

    new_balance: Decimal
    new_status: str


@dataclass(frozen=True)
class StandingResult:
    status: StandingStatus
    reason: str


@dataclass
class CollectionItem:
    """One row of a day's collection worklist"""

    loan: Loan
    borrower: Optional[Borrower]
    target_amount: Decimal
    paid_amount: Decimal
    remaining_due: Decimal
    is_paid: bool


@dataclass
class DailyCollection:
    date: date
    amount: Decimal


@dataclass
class PortfolioStats:
    """Aggregate lending figures shown on the dashboard"""

    total_lent: Decimal
    total_receivable: Decimal
    total_collected: Decimal
    outstanding: Decimal
    simple_profit: Decimal
    active_loans_count: int


@dataclass
class LoanStatement:
    """Borrower-facing view of a single loan"""

    loan: Loan
    borrower: Optional[Borrower]
    progress_percent: Decimal
    schedule: List[ScheduleEntry]
    is_due_today: bool
    current_installment: Decimal
    paid_today: Decimal
    remaining_today: Decimal
    fully_paid_today: bool
    payments: List[Payment] = field(default_factory=list)


@dataclass(frozen=True)
class RiskAssessment:
    """Assistant-produced risk label and narrative (opaque text)"""

    risk_level: str
    analysis: str
