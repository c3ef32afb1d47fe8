"""Fixed-installment (annuity) arithmetic for monthly loans"""

import math
from datetime import date

from credimanager.domain.exceptions import InvalidScheduleError
from credimanager.domain.models import Loan
from credimanager.utils.date_utils import add_months

# total_paid is stored rounded to cents, so it may sit up to half a cent below the exact sum
HALF_CENT = 0.005


def compute_installment(principal: float, monthly_rate: float, installments: int) -> float:
    """
    Fixed periodic installment (PMT) for a loan.

    Formula:
        rate == 0:  principal / n
        otherwise:  principal * (rate * (1 + rate)^n) / ((1 + rate)^n - 1)

    Args:
        principal: Amount lent, must be positive
        monthly_rate: Fractional monthly rate (0.05 = 5%), must be >= 0
        installments: Number of monthly installments, must be >= 1

    Raises:
        InvalidScheduleError: On terms that would divide by zero or make no sense

    Example:
        1000 at 0% over 10 months -> 100.0
    """
    if principal is None or principal <= 0:
        raise InvalidScheduleError(f"Invalid schedule parameters: principal={principal}")
    if installments is None or installments < 1:
        raise InvalidScheduleError(f"Invalid schedule parameters: installments={installments}")
    if monthly_rate is None or monthly_rate < 0:
        raise InvalidScheduleError(f"Invalid schedule parameters: monthly_rate={monthly_rate}")

    if monthly_rate == 0:
        return principal / installments

    factor = (1 + monthly_rate) ** installments
    return principal * (monthly_rate * factor) / (factor - 1)


def accrued_interest(principal: float, monthly_rate: float, installments: int) -> float:
    """Total interest of the contract, fixed at origination: PMT * n - principal"""
    return compute_installment(principal, monthly_rate, installments) * installments - principal


def installments_covered(total_paid: float, installment_amount: float) -> int:
    """
    Number of full installments satisfied by cumulative payments.

    Payments are treated as undifferentiated cash; a partial installment earns no credit.
    An amount within half a cent of a whole number of installments counts as that number.
    """
    if installment_amount <= 0:
        raise InvalidScheduleError(f"Invalid schedule parameters: installment_amount={installment_amount}")
    return math.floor((total_paid + HALF_CENT) / installment_amount)


def next_due_date(start_date: date, covered: int) -> date:
    """Due date of the first unsatisfied installment: start_date + (covered + 1) months"""
    return add_months(start_date, covered + 1)


def due_date_for_loan(loan: Loan) -> date:
    """Next due date of a loan from its recorded total_paid"""
    pmt = compute_installment(loan.principal_amount, loan.monthly_interest_rate, loan.installments)
    return next_due_date(loan.start_date, installments_covered(loan.total_paid, pmt))
