"""Borrower standing - rule chain over a borrower's loan history"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List

from microlend_gateway.domain.models import Loan, LoanStatus, StandingResult, StandingStatus
from microlend_gateway.utils.date_utils import lender_today, to_date


@dataclass(frozen=True)
class LoanTally:
    """Counts the standing rules are evaluated against"""

    total: int
    paid: int
    defaulted: int
    overdue: int


@dataclass(frozen=True)
class StandingRule:
    name: str
    applies: Callable[[LoanTally], bool]
    status: StandingStatus
    reason: Callable[[LoanTally], str]

    def evaluate(self, tally: LoanTally) -> StandingResult:
        return StandingResult(status=self.status, reason=self.reason(tally))


# Evaluated top to bottom; the first rule that applies decides the standing.
STANDING_RULES: List[StandingRule] = [
    StandingRule(
        name="no_history",
        applies=lambda t: t.total == 0,
        status=StandingStatus.NEW,
        reason=lambda t: "No history yet.",
    ),
    StandingRule(
        name="defaulted",
        applies=lambda t: t.defaulted > 0,
        status=StandingStatus.DELINQUENT,
        reason=lambda t: f"Has {t.defaulted} defaulted loan(s). High risk.",
    ),
    StandingRule(
        name="overdue",
        applies=lambda t: t.overdue > 0,
        status=StandingStatus.DELINQUENT,
        reason=lambda t: f"Has {t.overdue} overdue active loan(s).",
    ),
    StandingRule(
        name="all_paid",
        applies=lambda t: t.paid > 0 and t.paid == t.total,
        status=StandingStatus.GOOD_PAYER,
        reason=lambda t: "Perfect payment history. All loans paid.",
    ),
    StandingRule(
        name="some_paid",
        applies=lambda t: t.paid > 0,
        status=StandingStatus.GOOD_PAYER,
        reason=lambda t: f"Has successfully paid {t.paid} loan(s).",
    ),
    StandingRule(
        name="active_only",
        applies=lambda t: True,
        status=StandingStatus.NEUTRAL,
        reason=lambda t: "Active loans exist but no full payment history yet.",
    ),
]


def tally_loans(loans: List[Loan], today: date) -> LoanTally:
    """Count paid, defaulted and overdue loans (overdue = active and past due date)"""
    today = to_date(today)
    return LoanTally(
        total=len(loans),
        paid=sum(1 for loan in loans if loan.status == LoanStatus.PAID),
        defaulted=sum(1 for loan in loans if loan.status == LoanStatus.DEFAULTED),
        overdue=sum(
            1
            for loan in loans
            if loan.status == LoanStatus.ACTIVE and loan.due_date and to_date(loan.due_date) < today
        ),
    )


def classify_standing(loans: List[Loan], today: date | None = None) -> StandingResult:
    """Classify a borrower from their full loan list"""
    tally = tally_loans(loans or [], today or lender_today())
    for rule in STANDING_RULES:
        if rule.applies(tally):
            return rule.evaluate(tally)

    # Unreachable: the last rule always applies
    raise AssertionError("standing rule chain has no fallback")


def summarize_loan_history(loans: List[Loan]) -> List[Dict[str, Any]]:
    """Compact history handed to the assistant for risk narratives"""
    return [
        {
            "amount": float(loan.total_payable),
            "status": loan.status,
            "paid": float(loan.total_payable - loan.balance),
        }
        for loan in loans
    ]
