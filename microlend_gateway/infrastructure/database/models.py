"""SQLAlchemy ORM models for borrowers, loans and payments"""

import uuid
from sqlalchemy import Column, String, Numeric, DateTime, Date, ForeignKey, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


class BorrowerRecord(Base):
    """Borrower identity record"""

    __tablename__ = "borrowers"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    id_image_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    loans = relationship("LoanRecord", back_populates="borrower", cascade="all, delete-orphan")


class LoanRecord(Base):
    """Issued loan; total_payable is written once at issuance"""

    __tablename__ = "loans"

    id = Column(String(36), primary_key=True, default=new_id)
    borrower_id = Column(String(36), ForeignKey("borrowers.id", ondelete="CASCADE"), nullable=False, index=True)
    principal = Column(Numeric(14, 2), nullable=False)
    interest_rate = Column(Numeric(6, 2), nullable=False)
    total_payable = Column(Numeric(14, 2), nullable=False)
    balance = Column(Numeric(14, 2), nullable=False)
    start_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    payment_frequency = Column(Text, nullable=False, default="daily")
    status = Column(Text, nullable=False, default="active")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    borrower = relationship("BorrowerRecord", back_populates="loans")
    payments = relationship("PaymentRecord", back_populates="loan", cascade="all, delete-orphan")


class PaymentRecord(Base):
    """Append-only collection record"""

    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=new_id)
    loan_id = Column(String(36), ForeignKey("loans.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    payment_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    loan = relationship("LoanRecord", back_populates="payments")
