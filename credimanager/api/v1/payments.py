"""/v1/payments - record, correct and remove payments

Every mutation reconciles the payment's loan; additions and edits also move the
borrower's score according to how early or late the payment was.
"""

import logging
import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from credimanager.api.dependencies import get_request_id, get_state_store, get_today
from credimanager.api.v1.schemas import (
    PaymentRequest,
    PaymentResult,
    PaymentUpdateRequest,
    loan_response,
    payment_response,
)
from credimanager.domain.exceptions import DomainException
from credimanager.domain.models import Payment
from credimanager.domain.reconciliation import Transition, on_payment_added, on_payment_deleted, on_payment_edited
from credimanager.infrastructure.observability.logging import log_payment_event
from credimanager.infrastructure.observability.metrics import record_payment_event
from credimanager.infrastructure.state_store import StateStore

router = APIRouter()


def _result(transition: Transition, payment_id: str, today: date) -> PaymentResult:
    state = transition.state
    payment = state.find_payment(payment_id)
    loan = state.find_loan(payment.loan_id)
    borrower = state.find_borrower(loan.borrower_id)
    return PaymentResult(
        payment=payment_response(payment),
        loan=loan_response(loan, today),
        borrower_score=borrower.score if borrower else None,
        score_delta=transition.score_delta,
    )


@router.post("/payments", response_model=PaymentResult, status_code=201)
def create_payment(
    body: PaymentRequest,
    request: Request,
    today: date = Depends(get_today),
    store: StateStore = Depends(get_state_store),
):
    """
    Record a payment.

    Flow:
    1. Judge the payment date against the loan's next due date (before this payment)
    2. Reconcile the loan with the new payment set
    3. Apply the clamped score delta to the borrower
    4. Persist the new snapshot
    """
    request_id = get_request_id(request)
    payment = Payment(
        id=f"p-{uuid.uuid4().hex[:9]}",
        loan_id=body.loan_id,
        amount=body.amount,
        date=body.date or today,
        kind=body.kind,
        notes=body.notes,
    )

    try:
        transition = store.apply(on_payment_added, payment)
    except DomainException as e:
        logging.warning(f"Payment rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    if not transition.applied:
        raise HTTPException(status_code=404, detail="Loan not found")

    result = _result(transition, payment.id, today)
    record_payment_event("added", transition.score_delta)
    log_payment_event(request_id, "added", payment.loan_id, transition.score_delta, result.loan.status.value)
    return result


@router.put("/payments/{payment_id}", response_model=PaymentResult)
def edit_payment(
    payment_id: str,
    body: PaymentUpdateRequest,
    request: Request,
    today: date = Depends(get_today),
    store: StateStore = Depends(get_state_store),
):
    """Correct a payment's amount, date or notes; the score is judged again on the new date"""
    request_id = get_request_id(request)
    existing = store.current().find_payment(payment_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Payment not found")

    edited = Payment(
        id=payment_id,
        loan_id=existing.loan_id,
        amount=body.amount,
        date=body.date,
        kind=body.kind,
        notes=body.notes,
    )

    try:
        transition = store.apply(on_payment_edited, edited)
    except DomainException as e:
        logging.warning(f"Payment edit rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    if not transition.applied:
        raise HTTPException(status_code=404, detail="Payment not found")

    result = _result(transition, payment_id, today)
    record_payment_event("edited", transition.score_delta)
    log_payment_event(request_id, "edited", edited.loan_id, transition.score_delta, result.loan.status.value)
    return result


@router.delete("/payments/{payment_id}", status_code=204)
def delete_payment(payment_id: str, request: Request, store: StateStore = Depends(get_state_store)):
    """Remove a payment; the loan balance is restored but the borrower score is kept"""
    request_id = get_request_id(request)

    try:
        transition = store.apply(on_payment_deleted, payment_id)
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    if not transition.applied:
        raise HTTPException(status_code=404, detail="Payment not found")

    record_payment_event("deleted", None)
    logging.info("Payment deleted", extra={"request_id": request_id, "payment_id": payment_id})
    return Response(status_code=204)
