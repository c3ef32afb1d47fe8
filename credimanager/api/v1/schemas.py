"""Pydantic schemas for API request/response validation"""

import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from credimanager.domain.delinquency import DelinquencyInfo, Severity, classify
from credimanager.domain.models import Borrower, Loan, LoanStatus, Payment, PaymentKind


class EmergencyContactSchema(BaseModel):
    name: str = Field(..., min_length=1)
    relation: str = ""
    phone: str = ""


class BorrowerRequest(BaseModel):
    """Request body for POST/PUT /v1/borrowers"""

    name: str = Field(..., min_length=1, description="Full name")
    national_id: str = Field("", description="National taxpayer ID (CPF)")
    phone: str = ""
    email: str = ""
    address: str = ""
    emergency_contacts: List[EmergencyContactSchema] = Field(default_factory=list)
    notes: Optional[str] = None


class BorrowerResponse(BaseModel):
    id: str
    name: str
    national_id: str
    phone: str
    email: str
    address: str
    score: int
    emergency_contacts: List[EmergencyContactSchema]
    notes: Optional[str] = None


class LoanRequest(BaseModel):
    """Request body for POST /v1/loans"""

    borrower_id: str = Field(..., min_length=1)
    principal_amount: float = Field(..., gt=0)
    monthly_interest_rate: float = Field(0.0, ge=0, description="Fractional monthly rate, 0.05 = 5%")
    installments: int = Field(1, ge=1)
    start_date: datetime.date


class LoanUpdateRequest(BaseModel):
    """Request body for PUT /v1/loans/{loan_id}"""

    borrower_id: Optional[str] = None
    principal_amount: float = Field(..., gt=0)
    monthly_interest_rate: float = Field(0.0, ge=0)
    installments: int = Field(1, ge=1)
    start_date: datetime.date


class LoanResponse(BaseModel):
    id: str
    borrower_id: str
    principal_amount: float
    monthly_interest_rate: float
    installments: int
    start_date: datetime.date
    status: LoanStatus
    display_status: LoanStatus
    remaining_principal: float
    accrued_interest: float
    total_paid: float
    total_contract_value: float
    installment_amount: float
    next_due_date: datetime.date


class PaymentRequest(BaseModel):
    """Request body for POST /v1/payments"""

    loan_id: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    date: Optional[datetime.date] = Field(None, description="Date received, defaults to today")
    kind: PaymentKind = PaymentKind.TOTAL
    notes: Optional[str] = None


class PaymentUpdateRequest(BaseModel):
    """Request body for PUT /v1/payments/{payment_id}"""

    amount: float = Field(..., gt=0)
    date: datetime.date
    kind: PaymentKind = PaymentKind.TOTAL
    notes: Optional[str] = None


class PaymentResponse(BaseModel):
    id: str
    loan_id: str
    amount: float
    date: datetime.date
    kind: PaymentKind
    notes: Optional[str] = None


class PaymentResult(BaseModel):
    """Payment mutation outcome with the reconciled loan and borrower score"""

    payment: PaymentResponse
    loan: LoanResponse
    borrower_score: Optional[int] = None
    score_delta: Optional[int] = None


class DelinquencyItem(BaseModel):
    loan_id: str
    borrower_id: str
    borrower_name: Optional[str] = None
    borrower_phone: Optional[str] = None
    borrower_score: Optional[int] = None
    due_date: datetime.date
    installment_amount: float
    remaining_principal: float
    days_until_due: int
    days_late: int
    severity: Severity


class ReceivablesSchema(BaseModel):
    current: float
    overdue: float
    settled: float
    total_volume: float
    current_percent: float
    overdue_percent: float
    settled_percent: float


class DashboardResponse(BaseModel):
    as_of: datetime.date
    total_outstanding: float
    capital_invested: float
    realized_interest: float
    projected_interest: float
    borrower_count: int
    active_count: int
    paid_count: int
    overdue_count: int
    receivables: ReceivablesSchema


class RiskAssessmentResponse(BaseModel):
    borrower_id: str
    analysis: str


def borrower_response(borrower: Borrower) -> BorrowerResponse:
    return BorrowerResponse(
        id=borrower.id,
        name=borrower.name,
        national_id=borrower.national_id,
        phone=borrower.phone,
        email=borrower.email,
        address=borrower.address,
        score=borrower.score,
        emergency_contacts=[
            EmergencyContactSchema(name=c.name, relation=c.relation, phone=c.phone)
            for c in borrower.emergency_contacts
        ],
        notes=borrower.notes,
    )


def loan_response(loan: Loan, today: datetime.date) -> LoanResponse:
    info = classify(loan, today)
    return LoanResponse(
        id=loan.id,
        borrower_id=loan.borrower_id,
        principal_amount=loan.principal_amount,
        monthly_interest_rate=loan.monthly_interest_rate,
        installments=loan.installments,
        start_date=loan.start_date,
        status=loan.status,
        display_status=LoanStatus.OVERDUE if info.is_overdue else loan.status,
        remaining_principal=loan.remaining_principal,
        accrued_interest=loan.accrued_interest,
        total_paid=loan.total_paid,
        total_contract_value=loan.total_contract_value,
        installment_amount=info.installment_amount,
        next_due_date=info.due_date,
    )


def payment_response(payment: Payment) -> PaymentResponse:
    return PaymentResponse(
        id=payment.id,
        loan_id=payment.loan_id,
        amount=payment.amount,
        date=payment.date,
        kind=payment.kind,
        notes=payment.notes,
    )


def delinquency_item(loan: Loan, borrower: Optional[Borrower], info: DelinquencyInfo) -> DelinquencyItem:
    return DelinquencyItem(
        loan_id=loan.id,
        borrower_id=loan.borrower_id,
        borrower_name=borrower.name if borrower else None,
        borrower_phone=borrower.phone if borrower else None,
        borrower_score=borrower.score if borrower else None,
        due_date=info.due_date,
        installment_amount=info.installment_amount,
        remaining_principal=loan.remaining_principal,
        days_until_due=info.days_until_due,
        days_late=info.days_late,
        severity=info.severity,
    )
