"""Unit tests for the borrower portal statement and loan lifecycle"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from microlend_gateway.domain.exceptions import InvalidStatusTransitionError, LoanNotPayableError
from microlend_gateway.domain.lifecycle import ensure_payable, transition_status
from microlend_gateway.domain.models import Borrower, Payment
from microlend_gateway.domain.statements import build_statement, progress_percent


def test_statement_due_today_with_partial_payment(make_loan, reference_date):
    loan = make_loan(balance=Decimal("1020"))
    today = reference_date + timedelta(days=2)
    payments = [
        Payment(id="p1", loan_id=loan.id, amount=Decimal("120"), payment_date=datetime(2024, 3, 5, 9)),
        Payment(id="p2", loan_id=loan.id, amount=Decimal("60"), payment_date=datetime(2024, 3, 6, 9)),
    ]

    statement = build_statement(loan, Borrower(id="borrower-1", name="Jose Rizal"), payments, today)

    assert statement.is_due_today is True
    assert statement.current_installment == Decimal("120")
    assert statement.paid_today == Decimal("60")
    assert statement.remaining_today == Decimal("60")
    assert statement.fully_paid_today is False
    assert statement.progress_percent == Decimal("15.0")
    assert len(statement.schedule) == 10
    assert [p.id for p in statement.payments] == ["p2", "p1"]


def test_statement_uses_schedule_target_not_period_count(make_loan, reference_date):
    """Weekly, 60 days: portal shows 150 (8 entries) where the worklist shows 134"""
    loan = make_loan(payment_frequency="weekly", due_date=reference_date + timedelta(days=60))

    statement = build_statement(loan, None, [], reference_date + timedelta(days=7))

    assert statement.is_due_today is True
    assert statement.current_installment == Decimal("150")


def test_statement_not_due_for_defaulted_loan(make_loan, reference_date):
    statement = build_statement(make_loan(status="defaulted"), None, [], reference_date + timedelta(days=1))
    assert statement.is_due_today is False


def test_progress_percent(make_loan):
    assert progress_percent(make_loan(balance=Decimal("0"))) == Decimal("100.0")
    assert progress_percent(make_loan(total_payable=Decimal("0"), balance=Decimal("0"))) == Decimal("0")


def test_status_transitions():
    assert transition_status("active", "defaulted") == "defaulted"
    assert transition_status("active", "paid") == "paid"

    with pytest.raises(InvalidStatusTransitionError):
        transition_status("paid", "defaulted")
    with pytest.raises(InvalidStatusTransitionError):
        transition_status("defaulted", "active")


def test_paid_loan_rejects_payment(make_loan):
    with pytest.raises(LoanNotPayableError):
        ensure_payable(make_loan(status="paid", balance=Decimal("0")))

    ensure_payable(make_loan(status="defaulted"))
