"""/v1/loans - loan contracts and their payment history"""

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from credimanager.api.dependencies import get_state_store, get_today
from credimanager.api.v1.schemas import (
    LoanRequest,
    LoanResponse,
    LoanUpdateRequest,
    PaymentResponse,
    loan_response,
    payment_response,
)
from credimanager.domain.delinquency import effective_status
from credimanager.domain.models import LoanStatus
from credimanager.domain.reconciliation import add_loan, on_loan_deleted, originate_loan, update_loan
from credimanager.infrastructure.state_store import StateStore

router = APIRouter()


@router.get("/loans", response_model=List[LoanResponse])
def list_loans(
    status: Optional[LoanStatus] = Query(None, description="Filter on display status"),
    borrower_id: Optional[str] = Query(None),
    today: date = Depends(get_today),
    store: StateStore = Depends(get_state_store),
):
    loans = store.current().loans
    if borrower_id:
        loans = [l for l in loans if l.borrower_id == borrower_id]
    if status:
        loans = [l for l in loans if effective_status(l, today) == status]
    return [loan_response(l, today) for l in loans]


@router.get("/loans/{loan_id}", response_model=LoanResponse)
def get_loan(loan_id: str, today: date = Depends(get_today), store: StateStore = Depends(get_state_store)):
    loan = store.current().find_loan(loan_id)
    if loan is None:
        raise HTTPException(status_code=404, detail="Loan not found")
    return loan_response(loan, today)


@router.get("/loans/{loan_id}/payments", response_model=List[PaymentResponse])
def get_loan_payments(loan_id: str, store: StateStore = Depends(get_state_store)):
    """Payment history, most recent first"""
    state = store.current()
    if state.find_loan(loan_id) is None:
        raise HTTPException(status_code=404, detail="Loan not found")
    payments = sorted(state.payments_for_loan(loan_id), key=lambda p: p.date, reverse=True)
    return [payment_response(p) for p in payments]


@router.post("/loans", response_model=LoanResponse, status_code=201)
def create_loan(body: LoanRequest, today: date = Depends(get_today), store: StateStore = Depends(get_state_store)):
    """
    Originate a loan for an existing borrower.

    Interest is fixed here as PMT * installments - principal.
    """
    loan = originate_loan(
        loan_id=f"l-{uuid.uuid4().hex[:9]}",
        borrower_id=body.borrower_id,
        principal_amount=body.principal_amount,
        monthly_interest_rate=body.monthly_interest_rate,
        installments=body.installments,
        start_date=body.start_date,
    )
    result = store.apply(add_loan, loan)
    if not result.applied:
        raise HTTPException(status_code=404, detail="Borrower not found")
    return loan_response(result.state.find_loan(loan.id), today)


@router.put("/loans/{loan_id}", response_model=LoanResponse)
def edit_loan(
    loan_id: str,
    body: LoanUpdateRequest,
    today: date = Depends(get_today),
    store: StateStore = Depends(get_state_store),
):
    result = store.apply(
        update_loan,
        loan_id,
        principal_amount=body.principal_amount,
        monthly_interest_rate=body.monthly_interest_rate,
        installments=body.installments,
        start_date=body.start_date,
        borrower_id=body.borrower_id,
    )
    if not result.applied:
        raise HTTPException(status_code=404, detail="Loan or borrower not found")
    return loan_response(result.state.find_loan(loan_id), today)


@router.delete("/loans/{loan_id}", status_code=204)
def delete_loan(loan_id: str, store: StateStore = Depends(get_state_store)):
    """Delete a loan and all its payments"""
    result = store.apply(on_loan_deleted, loan_id)
    if not result.applied:
        raise HTTPException(status_code=404, detail="Loan not found")
    return Response(status_code=204)
