"""Portfolio aggregates shown on the dashboard"""

from dataclasses import dataclass
from datetime import date

from credimanager.domain.amortization import due_date_for_loan
from credimanager.domain.delinquency import classify
from credimanager.domain.models import LoanStatus, PortfolioState


@dataclass(frozen=True)
class ReceivablesReport:
    """Money by bucket: still current, overdue, and already settled"""

    current: float
    overdue: float
    settled: float
    total_volume: float
    current_percent: float
    overdue_percent: float
    settled_percent: float


@dataclass(frozen=True)
class PortfolioSummary:
    total_outstanding: float
    capital_invested: float
    realized_interest: float
    projected_interest: float
    borrower_count: int
    active_count: int
    paid_count: int
    overdue_count: int
    receivables: ReceivablesReport


def _percent(part: float, total: float) -> float:
    return (part / total) * 100 if total > 0 else 0.0


def receivables_report(state: PortfolioState, today: date) -> ReceivablesReport:
    current = overdue = settled = 0.0
    for loan in state.loans:
        if loan.status == LoanStatus.PAID:
            settled += loan.total_paid
        elif today > due_date_for_loan(loan):
            overdue += loan.remaining_principal
        else:
            current += loan.remaining_principal

    total = current + overdue + settled
    return ReceivablesReport(
        current=current,
        overdue=overdue,
        settled=settled,
        total_volume=total,
        current_percent=_percent(current, total),
        overdue_percent=_percent(overdue, total),
        settled_percent=_percent(settled, total),
    )


def portfolio_summary(state: PortfolioState, today: date) -> PortfolioSummary:
    """
    Aggregate the whole book as of `today`.

    Realized interest is approximated pro rata: each loan has earned the share of
    its contract interest equal to the share of its contract value already paid.
    """
    realized = sum(
        loan.accrued_interest * (loan.total_paid / loan.total_contract_value)
        for loan in state.loans
        if loan.total_contract_value > 0
    )

    return PortfolioSummary(
        total_outstanding=sum(l.remaining_principal for l in state.loans),
        capital_invested=sum(l.principal_amount for l in state.loans),
        realized_interest=max(0.0, realized),
        projected_interest=sum(l.accrued_interest for l in state.loans),
        borrower_count=len(state.borrowers),
        active_count=sum(1 for l in state.loans if l.status == LoanStatus.ACTIVE),
        paid_count=sum(1 for l in state.loans if l.status == LoanStatus.PAID),
        overdue_count=sum(1 for l in state.loans if classify(l, today).is_overdue),
        receivables=receivables_report(state, today),
    )
