"""Delinquency classification - how late (or how close to due) a loan is on a given day"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional, Tuple

from credimanager.domain.amortization import compute_installment, installments_covered, next_due_date
from credimanager.domain.models import Borrower, Loan, LoanStatus, PortfolioState
from credimanager.utils.date_utils import days_between

REMINDER_WINDOW_DAYS = 7
MINOR_MAX_DAYS = 7
MODERATE_MAX_DAYS = 30


class Severity(str, Enum):
    NONE = "NONE"
    MINOR = "MINOR"  # 1-7 days late
    MODERATE = "MODERATE"  # 8-30 days late
    CRITICAL = "CRITICAL"  # more than 30 days late


@dataclass(frozen=True)
class DelinquencyInfo:
    """Display-time view of a loan's position against its next due date"""

    due_date: date
    installment_amount: float
    days_until_due: int
    days_late: int
    is_upcoming: bool
    is_due_today: bool
    is_overdue: bool
    severity: Severity


def severity_for(days_late: int) -> Severity:
    if days_late < 1:
        return Severity.NONE
    if days_late <= MINOR_MAX_DAYS:
        return Severity.MINOR
    if days_late <= MODERATE_MAX_DAYS:
        return Severity.MODERATE
    return Severity.CRITICAL


def classify(loan: Loan, today: date) -> DelinquencyInfo:
    """
    Classify a loan against `today` (supplied by the caller, never read from the clock).

    - upcoming: 0 <= days_until_due <= 7
    - overdue:  days_late >= 1
    A PAID loan is neither upcoming nor overdue.
    """
    pmt = compute_installment(loan.principal_amount, loan.monthly_interest_rate, loan.installments)
    due = next_due_date(loan.start_date, installments_covered(loan.total_paid, pmt))

    days_until_due = days_between(today, due)
    days_late = max(0, days_between(due, today))
    open_loan = loan.status != LoanStatus.PAID

    is_overdue = open_loan and days_late >= 1
    return DelinquencyInfo(
        due_date=due,
        installment_amount=pmt,
        days_until_due=days_until_due,
        days_late=days_late,
        is_upcoming=open_loan and 0 <= days_until_due <= REMINDER_WINDOW_DAYS,
        is_due_today=open_loan and days_until_due == 0,
        is_overdue=is_overdue,
        severity=severity_for(days_late) if is_overdue else Severity.NONE,
    )


def effective_status(loan: Loan, today: date) -> LoanStatus:
    """Status to show: OVERDUE when late, otherwise what reconciliation stored"""
    if classify(loan, today).is_overdue:
        return LoanStatus.OVERDUE
    return loan.status


def upcoming_reminders(
    state: PortfolioState, today: date
) -> List[Tuple[Loan, Optional[Borrower], DelinquencyInfo]]:
    """Open loans due within the reminder window, soonest first"""
    items = []
    for loan in state.loans:
        info = classify(loan, today)
        if info.is_upcoming:
            items.append((loan, state.find_borrower(loan.borrower_id), info))
    return sorted(items, key=lambda item: item[2].days_until_due)


def overdue_loans(
    state: PortfolioState, today: date
) -> List[Tuple[Loan, Optional[Borrower], DelinquencyInfo]]:
    """Overdue loans, most late first"""
    items = []
    for loan in state.loans:
        info = classify(loan, today)
        if info.is_overdue:
            items.append((loan, state.find_borrower(loan.borrower_id), info))
    return sorted(items, key=lambda item: item[2].days_late, reverse=True)
