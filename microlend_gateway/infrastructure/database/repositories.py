"""Data access layer for borrowers, loans and payments"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import String, func
from sqlalchemy.orm import Session
from microlend_gateway.infrastructure.database.models import BorrowerRecord, LoanRecord, PaymentRecord
from microlend_gateway.domain.models import Borrower, Loan, LoanTerms, Payment
from microlend_gateway.domain.exceptions import BorrowerNotFoundError, LoanNotFoundError
from microlend_gateway.utils.date_utils import to_lender_time

LOAN_ID_LENGTH = 36


def to_borrower(record: BorrowerRecord) -> Borrower:
    return Borrower(
        id=record.id,
        name=record.name,
        phone=record.phone,
        address=record.address,
        id_image_url=record.id_image_url,
        created_at=record.created_at,
    )


def to_loan(record: LoanRecord) -> Loan:
    return Loan(
        id=record.id,
        borrower_id=record.borrower_id,
        principal=Decimal(record.principal),
        interest_rate=Decimal(record.interest_rate),
        total_payable=Decimal(record.total_payable),
        balance=Decimal(record.balance),
        start_date=record.start_date,
        due_date=record.due_date,
        payment_frequency=record.payment_frequency,
        status=record.status,
        notes=record.notes,
        created_at=record.created_at,
    )


def to_payment(record: PaymentRecord) -> Payment:
    return Payment(
        id=record.id,
        loan_id=record.loan_id,
        amount=Decimal(record.amount),
        payment_date=to_lender_time(record.payment_date),
        notes=record.notes,
    )


class BorrowerRepository:
    """Repository for borrowers"""

    def __init__(self, db: Session):
        self.db = db

    def create_borrower(
        self,
        name: str,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        id_image_url: Optional[str] = None,
    ) -> Borrower:
        """Persist a new borrower"""
        record = BorrowerRecord(name=name, phone=phone, address=address, id_image_url=id_image_url)
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return to_borrower(record)

    def get_borrower(self, borrower_id: str) -> Borrower:
        """Fetch one borrower or raise BorrowerNotFoundError"""
        record = self.db.get(BorrowerRecord, borrower_id)
        if record is None:
            raise BorrowerNotFoundError(f"Borrower {borrower_id} not found")
        return to_borrower(record)

    def list_borrowers(self) -> List[Borrower]:
        """All borrowers, newest first"""
        records = self.db.query(BorrowerRecord).order_by(BorrowerRecord.created_at.desc()).all()
        return [to_borrower(r) for r in records]


class LoanRepository:
    """Repository for loans"""

    def __init__(self, db: Session):
        self.db = db

    def _get_record(self, loan_id: str) -> LoanRecord:
        record = self.db.get(LoanRecord, loan_id)
        if record is None:
            raise LoanNotFoundError(f"Loan {loan_id} not found")
        return record

    def create_loan(self, borrower_id: str, terms: LoanTerms, notes: Optional[str] = None) -> Loan:
        """Persist a loan issued with the given terms"""
        record = LoanRecord(
            borrower_id=borrower_id,
            principal=terms.principal,
            interest_rate=terms.interest_rate,
            total_payable=terms.total_payable,
            balance=terms.balance,
            start_date=terms.start_date,
            due_date=terms.due_date,
            payment_frequency=terms.payment_frequency,
            status=terms.status,
            notes=notes,
        )
        self.db.add(record)
        self.db.flush()
        return to_loan(record)

    def get_loan(self, loan_id: str) -> Loan:
        """Fetch one loan or raise LoanNotFoundError"""
        return to_loan(self._get_record(loan_id))

    def find_by_id_prefix(self, reference: str) -> Loan:
        """Newest loan whose id starts with `reference`, ignoring case"""
        record = (
            self.db.query(LoanRecord)
            .filter(func.lower(LoanRecord.id, type_=String).startswith(reference.lower(), autoescape=True))
            .order_by(LoanRecord.created_at.desc())
            .first()
        )
        if record is None:
            raise LoanNotFoundError(f"No loan found with reference {reference}")
        return to_loan(record)

    def resolve_loan(self, reference: str) -> Loan:
        """Look a loan up by full id, or by the short reference handed to borrowers"""
        if len(reference) == LOAN_ID_LENGTH:
            return self.get_loan(reference)
        return self.find_by_id_prefix(reference)

    def list_loans(self, status: Optional[str] = None) -> List[Loan]:
        """All loans newest first, optionally filtered by status"""
        query = self.db.query(LoanRecord)
        if status:
            query = query.filter(LoanRecord.status == status)
        return [to_loan(r) for r in query.order_by(LoanRecord.created_at.desc()).all()]

    def list_loans_by_borrower(self, borrower_id: str) -> List[Loan]:
        records = (
            self.db.query(LoanRecord)
            .filter(LoanRecord.borrower_id == borrower_id)
            .order_by(LoanRecord.created_at.desc())
            .all()
        )
        return [to_loan(r) for r in records]

    def update_balance(self, loan_id: str, balance: Decimal, status: str) -> Loan:
        """Write the balance/status pair produced by applying a payment"""
        record = self._get_record(loan_id)
        record.balance = balance
        record.status = status
        self.db.flush()
        return to_loan(record)

    def update_status(self, loan_id: str, status: str) -> Loan:
        record = self._get_record(loan_id)
        record.status = status
        self.db.flush()
        return to_loan(record)

    def update_notes(self, loan_id: str, notes: Optional[str]) -> Loan:
        record = self._get_record(loan_id)
        record.notes = notes
        self.db.flush()
        return to_loan(record)


class PaymentRepository:
    """Repository for payments (append-only)"""

    def __init__(self, db: Session):
        self.db = db

    def create_payment(
        self,
        loan_id: str,
        amount: Decimal,
        payment_date: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> Payment:
        """
        Record a collection against a loan.

        Timestamps are stored as lender wall-clock time, so calendar-day
        matching agrees with the lender's "today" on every backend.
        """
        record = PaymentRecord(
            loan_id=loan_id,
            amount=amount,
            payment_date=to_lender_time(payment_date or datetime.now(timezone.utc)),
            notes=notes,
        )
        self.db.add(record)
        self.db.flush()
        return to_payment(record)

    def list_payments(self, loan_id: Optional[str] = None) -> List[Payment]:
        """Payments newest first, optionally for one loan"""
        query = self.db.query(PaymentRecord)
        if loan_id:
            query = query.filter(PaymentRecord.loan_id == loan_id)
        return [to_payment(r) for r in query.order_by(PaymentRecord.payment_date.desc()).all()]
