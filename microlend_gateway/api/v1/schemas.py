"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

from microlend_gateway.config import settings
from microlend_gateway.domain.models import PaymentFrequency, ReminderTone, StandingStatus, TemporalClass

# Decimal internally, plain JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class StandingSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: StandingStatus
    reason: str


class BorrowerCreate(BaseModel):
    """Request body for POST /v1/borrowers"""

    name: str = Field(..., min_length=1, description="Borrower full name")
    phone: Optional[str] = None
    address: Optional[str] = None
    id_image_url: Optional[str] = Field(None, description="URL of the uploaded identity document")


class BorrowerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    id_image_url: Optional[str] = None
    created_at: Optional[datetime] = None


class BorrowerSummary(BorrowerResponse):
    """Borrower with standing badge and active balance"""

    standing: StandingSchema
    active_balance: Optional[Money] = None


class LoanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    borrower_id: str
    principal: Money
    interest_rate: Money
    total_payable: Money
    balance: Money
    start_date: date
    due_date: Optional[date] = None
    payment_frequency: str
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class BorrowerDetail(BorrowerSummary):
    loans: List[LoanResponse]


class RiskAnalysisResponse(BaseModel):
    """Assistant-generated risk label and narrative"""

    borrower_id: str
    risk_level: str
    analysis: str


class LoanTermsRequest(BaseModel):
    """Terms of a prospective loan"""

    principal: Decimal = Field(..., gt=0, description="Amount released to the borrower")
    interest_rate: Decimal = Field(default=Decimal(str(settings.default_interest_rate)), ge=0, description="Flat markup in percent")
    term_days: int = Field(default=settings.default_term_days, ge=0, description="Days from release to due date")
    payment_frequency: PaymentFrequency = PaymentFrequency.DAILY
    start_date: Optional[date] = Field(None, description="Release date (default: today)")


class LoanCreate(LoanTermsRequest):
    """Request body for POST /v1/loans"""

    borrower_id: str = Field(..., min_length=1)
    notes: Optional[str] = None


class AmortizationSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_payable: Money
    period_count: int
    installment_target: Money


class LoanPreviewResponse(AmortizationSchema):
    """Response for POST /v1/loans/preview"""

    start_date: date
    due_date: date


class LoanDetail(LoanResponse):
    amortization: AmortizationSchema


class NotesUpdate(BaseModel):
    notes: Optional[str] = None


class ScheduleEntrySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    target_amount: Money
    temporal_class: TemporalClass


class ScheduleResponse(BaseModel):
    """Response for GET /v1/loans/{loan_id}/schedule"""

    loan_id: str
    reference_date: date
    entries: List[ScheduleEntrySchema]


class PaymentCreate(BaseModel):
    """Request body for POST /v1/payments"""

    loan_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, description="Amount collected")
    payment_date: Optional[datetime] = Field(None, description="Collection time (default: now)")
    notes: Optional[str] = None


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    loan_id: str
    amount: Money
    payment_date: datetime
    notes: Optional[str] = None


class PaymentRecordedResponse(BaseModel):
    """Payment plus the loan as updated by it"""

    payment: PaymentResponse
    loan: LoanResponse


class CollectionItemSchema(BaseModel):
    loan_id: str
    borrower_id: str
    borrower_name: Optional[str] = None
    payment_frequency: str
    status: str
    balance: Money
    target_amount: Money
    paid_amount: Money
    remaining_due: Money
    is_paid: bool


class CollectionsResponse(BaseModel):
    """Response for GET /v1/collections"""

    date: date
    due_count: int
    items: List[CollectionItemSchema]


class DailyCollectionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    amount: Money


class DashboardResponse(BaseModel):
    """Response for GET /v1/dashboard"""

    model_config = ConfigDict(from_attributes=True)

    total_lent: Money
    total_receivable: Money
    total_collected: Money
    outstanding: Money
    simple_profit: Money
    active_loans_count: int
    daily_collections: List[DailyCollectionSchema]


class StatementResponse(BaseModel):
    """Response for GET /v1/portal/loans/{loan_id}"""

    loan: LoanResponse
    borrower_name: Optional[str] = None
    progress_percent: Money
    is_due_today: bool
    current_installment: Money
    paid_today: Money
    remaining_today: Money
    fully_paid_today: bool
    schedule: List[ScheduleEntrySchema]
    payments: List[PaymentResponse]


class ReminderRequest(BaseModel):
    """Request body for POST /v1/reminders"""

    loan_id: str = Field(..., min_length=1)
    tone: ReminderTone = ReminderTone.FRIENDLY


class ReminderResponse(BaseModel):
    loan_id: str
    tone: ReminderTone
    message: str
