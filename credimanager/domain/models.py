"""Domain models - immutable dataclasses for borrowers, loans and payments"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Tuple

from credimanager.domain.exceptions import InvalidRecordError

INITIAL_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100


class LoanStatus(str, Enum):
    ACTIVE = "ACTIVE"
    OVERDUE = "OVERDUE"
    PAID = "PAID"


class PaymentKind(str, Enum):
    INTEREST = "INTEREST"
    PRINCIPAL = "PRINCIPAL"
    TOTAL = "TOTAL"


@dataclass(frozen=True)
class EmergencyContact:
    """Person to reach when the borrower cannot be contacted"""

    name: str
    relation: str
    phone: str


@dataclass(frozen=True)
class Borrower:
    """Borrower profile with internal credit score"""

    id: str
    name: str
    national_id: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    score: int = INITIAL_SCORE
    emergency_contacts: Tuple[EmergencyContact, ...] = ()
    notes: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise InvalidRecordError("Borrower id is required")
        if not self.name or not self.name.strip():
            raise InvalidRecordError(f"Borrower {self.id} must have a name")
        if not MIN_SCORE <= self.score <= MAX_SCORE:
            raise InvalidRecordError(f"Borrower score {self.score} outside [{MIN_SCORE}, {MAX_SCORE}]")


@dataclass(frozen=True)
class Loan:
    """Installment loan contract with balance fields derived from its payments"""

    id: str
    borrower_id: str
    principal_amount: float
    monthly_interest_rate: float  # fractional, 0.05 = 5%/month
    installments: int
    start_date: date
    status: LoanStatus = LoanStatus.ACTIVE
    remaining_principal: float = 0.0
    accrued_interest: float = 0.0  # fixed at origination / contract edit
    total_paid: float = 0.0

    def __post_init__(self):
        if not self.id or not self.borrower_id:
            raise InvalidRecordError("Loan id and borrower_id are required")
        if self.principal_amount <= 0:
            raise InvalidRecordError(f"Loan {self.id}: principal must be positive")
        if self.monthly_interest_rate < 0:
            raise InvalidRecordError(f"Loan {self.id}: interest rate cannot be negative")
        if self.installments < 1:
            raise InvalidRecordError(f"Loan {self.id}: at least one installment is required")
        if self.total_paid < 0 or self.remaining_principal < 0:
            raise InvalidRecordError(f"Loan {self.id}: balances cannot be negative")

    @property
    def total_contract_value(self) -> float:
        return self.principal_amount + self.accrued_interest


@dataclass(frozen=True)
class Payment:
    """Money received against a loan"""

    id: str
    loan_id: str
    amount: float
    date: date
    kind: PaymentKind = PaymentKind.TOTAL
    notes: Optional[str] = None

    def __post_init__(self):
        if not self.id or not self.loan_id:
            raise InvalidRecordError("Payment id and loan_id are required")
        if self.amount <= 0:
            raise InvalidRecordError(f"Payment {self.id}: amount must be positive")


@dataclass(frozen=True)
class PortfolioState:
    """Immutable snapshot of every borrower, loan and payment"""

    borrowers: Tuple[Borrower, ...] = field(default_factory=tuple)
    loans: Tuple[Loan, ...] = field(default_factory=tuple)
    payments: Tuple[Payment, ...] = field(default_factory=tuple)

    def find_borrower(self, borrower_id: str) -> Optional[Borrower]:
        return next((b for b in self.borrowers if b.id == borrower_id), None)

    def find_loan(self, loan_id: str) -> Optional[Loan]:
        return next((l for l in self.loans if l.id == loan_id), None)

    def find_payment(self, payment_id: str) -> Optional[Payment]:
        return next((p for p in self.payments if p.id == payment_id), None)

    def payments_for_loan(self, loan_id: str) -> Tuple[Payment, ...]:
        return tuple(p for p in self.payments if p.loan_id == loan_id)

    def loans_for_borrower(self, borrower_id: str) -> Tuple[Loan, ...]:
        return tuple(l for l in self.loans if l.borrower_id == borrower_id)
