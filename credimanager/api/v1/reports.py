"""/v1/reports - overdue list, payment reminders and dashboard figures"""

from datetime import date
from typing import List

from fastapi import APIRouter, Depends

from credimanager.api.dependencies import get_state_store, get_today
from credimanager.api.v1.schemas import DashboardResponse, DelinquencyItem, ReceivablesSchema, delinquency_item
from credimanager.domain.delinquency import overdue_loans, upcoming_reminders
from credimanager.domain.portfolio import portfolio_summary
from credimanager.infrastructure.state_store import StateStore

router = APIRouter()


@router.get("/reports/overdue", response_model=List[DelinquencyItem])
def get_overdue(today: date = Depends(get_today), store: StateStore = Depends(get_state_store)):
    """Loans at least one day past due, most late first"""
    return [delinquency_item(*item) for item in overdue_loans(store.current(), today)]


@router.get("/reports/reminders", response_model=List[DelinquencyItem])
def get_reminders(today: date = Depends(get_today), store: StateStore = Depends(get_state_store)):
    """Loans due within the next 7 days (today included), soonest first"""
    return [delinquency_item(*item) for item in upcoming_reminders(store.current(), today)]


@router.get("/reports/dashboard", response_model=DashboardResponse)
def get_dashboard(today: date = Depends(get_today), store: StateStore = Depends(get_state_store)):
    summary = portfolio_summary(store.current(), today)
    r = summary.receivables
    return DashboardResponse(
        as_of=today,
        total_outstanding=summary.total_outstanding,
        capital_invested=summary.capital_invested,
        realized_interest=summary.realized_interest,
        projected_interest=summary.projected_interest,
        borrower_count=summary.borrower_count,
        active_count=summary.active_count,
        paid_count=summary.paid_count,
        overdue_count=summary.overdue_count,
        receivables=ReceivablesSchema(
            current=r.current,
            overdue=r.overdue,
            settled=r.settled,
            total_volume=r.total_volume,
            current_percent=r.current_percent,
            overdue_percent=r.overdue_percent,
            settled_percent=r.settled_percent,
        ),
    )
