"""Loan status lifecycle: active → paid | defaulted, both terminal"""

from microlend_gateway.domain.exceptions import InvalidStatusTransitionError, LoanNotPayableError
from microlend_gateway.domain.models import Loan, LoanStatus

ALLOWED_TRANSITIONS = {
    LoanStatus.ACTIVE: {LoanStatus.PAID, LoanStatus.DEFAULTED},
    LoanStatus.PAID: set(),
    LoanStatus.DEFAULTED: set(),
}


def transition_status(current: str, target: str) -> str:
    """Validate a status change and return the new status"""
    allowed = ALLOWED_TRANSITIONS.get(LoanStatus(current), set())
    if LoanStatus(target) not in allowed:
        raise InvalidStatusTransitionError(f"Cannot move loan from {current} to {target}")
    return LoanStatus(target).value


def ensure_payable(loan: Loan) -> None:
    """Settled loans (zero balance) take no further payments"""
    if loan.status == LoanStatus.PAID or loan.balance <= 0:
        raise LoanNotPayableError(f"Loan {loan.id} is already paid")
