"""Credit score adjustment - rewards or penalises a payment by its timing"""

from datetime import date

from credimanager.domain.amortization import compute_installment, installments_covered, next_due_date
from credimanager.domain.models import MAX_SCORE, MIN_SCORE, Loan
from credimanager.utils.date_utils import days_between

GRACE_DAYS = 7
LATE_DAYS = 15


def delta_for_lateness(diff_days: int) -> int:
    """
    Map days past due to a score delta.

    Bands:
    - paid early (< 0):     +2
    - on the due date (0):  +1
    - 1 to 7 days late:      0  (grace)
    - 8 to 15 days late:    -1
    - more than 15:         -2
    """
    if diff_days < 0:
        return 2
    elif diff_days == 0:
        return 1
    elif diff_days <= GRACE_DAYS:
        return 0
    elif diff_days <= LATE_DAYS:
        return -1
    else:
        return -2


def score_delta(loan: Loan, payment_date: date) -> int:
    """
    Score delta for a payment received on `payment_date`.

    `loan` must be the state *before* the payment is applied: its total_paid
    decides which installment's due date the payment answers.
    """
    pmt = compute_installment(loan.principal_amount, loan.monthly_interest_rate, loan.installments)
    due_date = next_due_date(loan.start_date, installments_covered(loan.total_paid, pmt))
    return delta_for_lateness(days_between(due_date, payment_date))


def apply_score_delta(current_score: int, delta: int) -> int:
    """Clamp the adjusted score to [0, 100]"""
    return max(MIN_SCORE, min(MAX_SCORE, current_score + delta))
