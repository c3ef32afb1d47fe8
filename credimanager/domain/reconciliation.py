"""Loan reconciliation engine - core business logic for balances, status and score

Every operation here is a pure transition: it takes a PortfolioState snapshot and
returns a new one, never mutating the records it was given. Operations that target
an unknown borrower, loan or payment are no-ops that hand back the same state
(permissive referential policy, the caller decides whether that is an error).
"""

import logging
import math
from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, Optional

from credimanager.domain.amortization import accrued_interest, compute_installment
from credimanager.domain.models import INITIAL_SCORE, Borrower, Loan, LoanStatus, Payment, PortfolioState
from credimanager.domain.scoring import apply_score_delta, score_delta

logger = logging.getLogger(__name__)

MONEY_PLACES = 2


@dataclass(frozen=True)
class Transition:
    """Outcome of one engine operation"""

    state: PortfolioState
    applied: bool
    score_delta: Optional[int] = None


def _noop(state: PortfolioState, reason: str, **context) -> Transition:
    logger.warning(f"Ignored: {reason}", extra=context)
    return Transition(state=state, applied=False)


def _replace_loan(state: PortfolioState, updated: Loan) -> tuple:
    return tuple(updated if l.id == updated.id else l for l in state.loans)


def reconcile_loan(loan: Loan, payments: Iterable[Payment]) -> Loan:
    """
    Recompute total_paid, remaining_principal and status from the loan's payments.

    - total_paid = sum of amounts (payments of other loans are ignored)
    - remaining  = max(0, principal + accrued_interest - total_paid), to the cent
    - status     = PAID when nothing remains; a PAID loan with a balance again goes
                   back to ACTIVE; anything else keeps its current status
    accrued_interest is contract data and is not touched here.
    """
    total_paid = round(math.fsum(p.amount for p in payments if p.loan_id == loan.id), MONEY_PLACES)
    remaining = round(max(0.0, loan.total_contract_value - total_paid), MONEY_PLACES)

    if remaining == 0:
        status = LoanStatus.PAID
    elif loan.status == LoanStatus.PAID:
        status = LoanStatus.ACTIVE
    else:
        status = loan.status

    return replace(loan, total_paid=total_paid, remaining_principal=remaining, status=status)


def _sync_loan_and_score(
    state: PortfolioState,
    loan: Loan,
    payments: tuple,
    delta: Optional[int],
) -> Transition:
    """Commit a new payment set: reconcile its loan and, if given, move the borrower score"""
    updated_loan = reconcile_loan(loan, payments)

    borrowers = state.borrowers
    if delta is not None:
        borrowers = tuple(
            replace(b, score=apply_score_delta(b.score, delta)) if b.id == loan.borrower_id else b
            for b in state.borrowers
        )

    new_state = replace(
        state,
        borrowers=borrowers,
        loans=_replace_loan(state, updated_loan),
        payments=payments,
    )
    return Transition(state=new_state, applied=True, score_delta=delta)


def on_payment_added(state: PortfolioState, payment: Payment) -> Transition:
    """
    Record a payment on its loan.

    The score delta is judged against the loan as it stood before this payment,
    then the loan is reconciled with the full payment set including it.
    """
    loan = state.find_loan(payment.loan_id)
    if loan is None:
        return _noop(state, "payment for unknown loan", loan_id=payment.loan_id, payment_id=payment.id)
    if state.find_payment(payment.id) is not None:
        return _noop(state, "duplicate payment id", payment_id=payment.id)

    delta = score_delta(loan, payment.date)
    return _sync_loan_and_score(state, loan, state.payments + (payment,), delta)


def on_payment_edited(state: PortfolioState, payment: Payment) -> Transition:
    """
    Replace a stored payment and re-reconcile its loan.

    The score baseline is the loan's stored total_paid, which still includes the
    payment's previous amount. A payment always stays on the loan it was recorded on.
    """
    existing = state.find_payment(payment.id)
    if existing is None:
        return _noop(state, "edit of unknown payment", payment_id=payment.id)
    loan = state.find_loan(existing.loan_id)
    if loan is None:
        return _noop(state, "edit of payment on unknown loan", loan_id=existing.loan_id, payment_id=payment.id)

    if payment.loan_id != existing.loan_id:
        logger.warning(
            "Payment cannot move between loans, keeping original loan",
            extra={"payment_id": payment.id, "loan_id": existing.loan_id},
        )
        payment = replace(payment, loan_id=existing.loan_id)

    delta = score_delta(loan, payment.date)
    payments = tuple(payment if p.id == payment.id else p for p in state.payments)
    return _sync_loan_and_score(state, loan, payments, delta)


def on_payment_deleted(state: PortfolioState, payment_id: str) -> Transition:
    """
    Remove a payment and re-reconcile its loan.

    The score adjustment earned by the payment is kept: score history is permanent.
    """
    payment = state.find_payment(payment_id)
    if payment is None:
        return _noop(state, "delete of unknown payment", payment_id=payment_id)

    payments = tuple(p for p in state.payments if p.id != payment_id)
    loan = state.find_loan(payment.loan_id)
    if loan is None:
        return Transition(state=replace(state, payments=payments), applied=True)

    return _sync_loan_and_score(state, loan, payments, None)


def on_borrower_deleted(state: PortfolioState, borrower_id: str) -> Transition:
    """Delete a borrower with all their loans and those loans' payments"""
    if state.find_borrower(borrower_id) is None:
        return _noop(state, "delete of unknown borrower", borrower_id=borrower_id)

    loan_ids = {l.id for l in state.loans if l.borrower_id == borrower_id}
    new_state = PortfolioState(
        borrowers=tuple(b for b in state.borrowers if b.id != borrower_id),
        loans=tuple(l for l in state.loans if l.id not in loan_ids),
        payments=tuple(p for p in state.payments if p.loan_id not in loan_ids),
    )
    return Transition(state=new_state, applied=True)


def on_loan_deleted(state: PortfolioState, loan_id: str) -> Transition:
    """Delete a loan and all its payments"""
    if state.find_loan(loan_id) is None:
        return _noop(state, "delete of unknown loan", loan_id=loan_id)

    new_state = replace(
        state,
        loans=tuple(l for l in state.loans if l.id != loan_id),
        payments=tuple(p for p in state.payments if p.loan_id != loan_id),
    )
    return Transition(state=new_state, applied=True)


def add_borrower(state: PortfolioState, borrower: Borrower) -> Transition:
    """New borrowers always start at the initial score"""
    if state.find_borrower(borrower.id) is not None:
        return _noop(state, "duplicate borrower id", borrower_id=borrower.id)
    new_borrower = replace(borrower, score=INITIAL_SCORE)
    return Transition(state=replace(state, borrowers=state.borrowers + (new_borrower,)), applied=True)


def update_borrower(state: PortfolioState, borrower: Borrower) -> Transition:
    """Replace a borrower's profile; the score only moves through payment events"""
    existing = state.find_borrower(borrower.id)
    if existing is None:
        return _noop(state, "update of unknown borrower", borrower_id=borrower.id)
    updated = replace(borrower, score=existing.score)
    borrowers = tuple(updated if b.id == borrower.id else b for b in state.borrowers)
    return Transition(state=replace(state, borrowers=borrowers), applied=True)


def originate_loan(
    loan_id: str,
    borrower_id: str,
    principal_amount: float,
    monthly_interest_rate: float,
    installments: int,
    start_date: date,
) -> Loan:
    """
    Build a fresh ACTIVE loan with its contract interest fixed.

    Raises:
        InvalidScheduleError: If the terms cannot be amortized
    """
    interest = accrued_interest(principal_amount, monthly_interest_rate, installments)
    return Loan(
        id=loan_id,
        borrower_id=borrower_id,
        principal_amount=principal_amount,
        monthly_interest_rate=monthly_interest_rate,
        installments=installments,
        start_date=start_date,
        status=LoanStatus.ACTIVE,
        remaining_principal=round(principal_amount + interest, MONEY_PLACES),
        accrued_interest=interest,
        total_paid=0.0,
    )


def add_loan(state: PortfolioState, loan: Loan) -> Transition:
    if state.find_borrower(loan.borrower_id) is None:
        return _noop(state, "loan for unknown borrower", borrower_id=loan.borrower_id, loan_id=loan.id)
    if state.find_loan(loan.id) is not None:
        return _noop(state, "duplicate loan id", loan_id=loan.id)
    return Transition(state=replace(state, loans=state.loans + (loan,)), applied=True)


def update_loan(
    state: PortfolioState,
    loan_id: str,
    principal_amount: float,
    monthly_interest_rate: float,
    installments: int,
    start_date: date,
    borrower_id: Optional[str] = None,
) -> Transition:
    """
    Edit a contract's terms.

    accrued_interest is recomputed from the new terms, payments already made are
    kept, and balance and status go through the same reconciliation as payments.

    Raises:
        InvalidScheduleError: If the new terms cannot be amortized
    """
    # Validate terms before looking anything up
    compute_installment(principal_amount, monthly_interest_rate, installments)

    loan = state.find_loan(loan_id)
    if loan is None:
        return _noop(state, "update of unknown loan", loan_id=loan_id)
    borrower_id = borrower_id or loan.borrower_id
    if state.find_borrower(borrower_id) is None:
        return _noop(state, "loan moved to unknown borrower", borrower_id=borrower_id, loan_id=loan_id)

    edited = replace(
        loan,
        borrower_id=borrower_id,
        principal_amount=principal_amount,
        monthly_interest_rate=monthly_interest_rate,
        installments=installments,
        start_date=start_date,
        accrued_interest=accrued_interest(principal_amount, monthly_interest_rate, installments),
    )
    updated = reconcile_loan(edited, state.payments_for_loan(loan_id))
    return Transition(state=replace(state, loans=_replace_loan(state, updated)), applied=True)
