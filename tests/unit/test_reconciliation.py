"""Unit tests for loan reconciliation and state transitions"""

import pytest
from dataclasses import replace
from datetime import date
from credimanager.domain.amortization import compute_installment, due_date_for_loan, installments_covered
from credimanager.domain.exceptions import InvalidScheduleError
from credimanager.domain.models import Borrower, LoanStatus, Payment, PortfolioState
from credimanager.domain.reconciliation import (
    add_borrower,
    add_loan,
    on_borrower_deleted,
    on_loan_deleted,
    on_payment_added,
    on_payment_deleted,
    on_payment_edited,
    originate_loan,
    reconcile_loan,
    update_borrower,
    update_loan,
)
from credimanager.utils.date_utils import add_months


def _payment(pid: str, amount: float, paid_on: date, loan_id: str = "l-test-001") -> Payment:
    return Payment(id=pid, loan_id=loan_id, amount=amount, date=paid_on)


def test_originate_loan_sets_contract_fields():
    loan = originate_loan("l-1", "b-1", 1000.0, 0.05, 12, date(2024, 1, 1))

    assert loan.status == LoanStatus.ACTIVE
    assert loan.total_paid == 0
    assert loan.accrued_interest == pytest.approx(353.9048, abs=1e-3)
    assert loan.remaining_principal == pytest.approx(1353.90, abs=0.01)


def test_originate_loan_rejects_invalid_terms():
    with pytest.raises(InvalidScheduleError):
        originate_loan("l-1", "b-1", 1000.0, 0.05, 0, date(2024, 1, 1))


def test_reconcile_loan_sums_only_its_payments(zero_rate_loan):
    payments = [
        _payment("p1", 100, date(2024, 2, 1)),
        _payment("p2", 50, date(2024, 2, 15)),
        _payment("p3", 999, date(2024, 2, 15), loan_id="l-other"),
    ]

    loan = reconcile_loan(zero_rate_loan, payments)

    assert loan.total_paid == 150
    assert loan.remaining_principal == 1050
    assert loan.status == LoanStatus.ACTIVE
    assert loan.accrued_interest == zero_rate_loan.accrued_interest


def test_reconcile_loan_is_idempotent(zero_rate_loan):
    payments = [_payment("p1", 100, date(2024, 2, 1)), _payment("p2", 300, date(2024, 3, 1))]

    once = reconcile_loan(zero_rate_loan, payments)
    twice = reconcile_loan(once, payments)

    assert once == twice


def test_reconcile_loan_overpayment_floors_balance_at_zero(zero_rate_loan):
    loan = reconcile_loan(zero_rate_loan, [_payment("p1", 1500, date(2024, 2, 1))])

    assert loan.remaining_principal == 0
    assert loan.total_paid == 1500
    assert loan.status == LoanStatus.PAID


def test_reconcile_loan_keeps_overdue_status_while_balance_remains(zero_rate_loan):
    """Only the PAID transition is forced; a persisted OVERDUE stays until paid off"""
    overdue = replace(zero_rate_loan, status=LoanStatus.OVERDUE)

    assert reconcile_loan(overdue, [_payment("p1", 100, date(2024, 2, 1))]).status == LoanStatus.OVERDUE
    assert reconcile_loan(overdue, [_payment("p1", 1200, date(2024, 2, 1))]).status == LoanStatus.PAID


def test_interest_loan_paid_installment_by_installment_reaches_zero():
    """Paying the installment n times settles the contract to the cent"""
    loan = originate_loan("l-1", "b-1", 1000.0, 0.05, 12, date(2024, 1, 1))
    pmt = compute_installment(1000.0, 0.05, 12)
    payments = [_payment(f"p{i}", pmt, date(2024, 2, 1), loan_id="l-1") for i in range(12)]

    reconciled = reconcile_loan(loan, payments)

    assert reconciled.remaining_principal == 0
    assert reconciled.status == LoanStatus.PAID


def test_paying_exact_installment_advances_one_due_date_each_time():
    """Cent-rounded total_paid still covers every installment paid at the reported amount"""
    state = PortfolioState(
        borrowers=(Borrower(id="b-1", name="One"),),
        loans=(originate_loan("l-1", "b-1", 1000.0, 0.05, 12, date(2024, 1, 1)),),
    )
    pmt = compute_installment(1000.0, 0.05, 12)

    for k in range(1, 13):
        due = due_date_for_loan(state.find_loan("l-1"))
        assert due == add_months(date(2024, 1, 1), k)

        result = on_payment_added(state, _payment(f"p{k}", pmt, due, loan_id="l-1"))
        state = result.state
        loan = state.find_loan("l-1")

        assert result.score_delta == 1
        assert installments_covered(loan.total_paid, pmt) == k

    assert state.find_loan("l-1").status == LoanStatus.PAID
    assert state.find_borrower("b-1").score == 62


def test_on_payment_added_concrete_scenario(portfolio):
    """1200/0%/12 from 2024-01-01, 100 paid on the first due date"""
    payment = _payment("p1", 100, date(2024, 2, 1))

    result = on_payment_added(portfolio, payment)

    loan = result.state.find_loan("l-test-001")
    assert result.applied is True
    assert result.score_delta == 1
    assert loan.remaining_principal == 1100
    assert loan.total_paid == 100
    assert loan.status == LoanStatus.ACTIVE
    assert result.state.find_borrower("b-test-001").score == 51
    assert result.state.payments == (payment,)


def test_on_payment_added_does_not_mutate_input(portfolio):
    on_payment_added(portfolio, _payment("p1", 100, date(2024, 2, 1)))

    assert portfolio.payments == ()
    assert portfolio.find_loan("l-test-001").total_paid == 0
    assert portfolio.find_borrower("b-test-001").score == 50


def test_on_payment_added_judges_against_pre_payment_coverage(portfolio):
    """Second payment answers the 2024-03-01 installment, not the first one"""
    state = on_payment_added(portfolio, _payment("p1", 100, date(2024, 2, 1))).state

    result = on_payment_added(state, _payment("p2", 100, date(2024, 3, 20)))

    # 19 days after 2024-03-01
    assert result.score_delta == -2
    assert result.state.find_borrower("b-test-001").score == 49


def test_balance_is_non_increasing_across_additions(portfolio):
    state = portfolio
    balances = []
    for i, amount in enumerate([100, 250, 0.5, 400, 600, 100]):
        state = on_payment_added(state, _payment(f"p{i}", amount, date(2024, 2, 1))).state
        balances.append(state.find_loan("l-test-001").remaining_principal)

    assert balances == sorted(balances, reverse=True)
    assert balances[-1] == 0
    assert balances[-2] == 0


def test_paid_then_deleted_reverts_to_active(portfolio):
    state = on_payment_added(portfolio, _payment("p1", 200, date(2024, 2, 1))).state
    state = on_payment_added(state, _payment("p2", 1000, date(2024, 3, 1))).state
    assert state.find_loan("l-test-001").status == LoanStatus.PAID
    assert state.find_loan("l-test-001").remaining_principal == 0

    result = on_payment_deleted(state, "p2")

    loan = result.state.find_loan("l-test-001")
    assert loan.status == LoanStatus.ACTIVE
    assert loan.remaining_principal == 1000
    assert loan.total_paid == 200


def test_on_payment_deleted_keeps_score(portfolio):
    """Deleting a payment restores the balance but not the score"""
    state = on_payment_added(portfolio, _payment("p1", 100, date(2024, 1, 15))).state
    assert state.find_borrower("b-test-001").score == 52

    result = on_payment_deleted(state, "p1")

    assert result.score_delta is None
    assert result.state.find_borrower("b-test-001").score == 52
    assert result.state.find_loan("l-test-001").total_paid == 0
    assert result.state.payments == ()


def test_on_payment_edited_recomputes_balance_and_score(portfolio):
    state = on_payment_added(portfolio, _payment("p1", 100, date(2024, 2, 1))).state

    result = on_payment_edited(state, _payment("p1", 300, date(2024, 2, 1)))

    loan = result.state.find_loan("l-test-001")
    assert loan.total_paid == 300
    assert loan.remaining_principal == 900
    assert len(result.state.payments) == 1
    assert result.state.payments[0].amount == 300


def test_on_payment_edited_baseline_includes_old_amount(portfolio):
    """Baseline coverage is the stored total_paid, which still counts the edited payment"""
    state = on_payment_added(portfolio, _payment("p1", 100, date(2024, 2, 1))).state
    assert state.find_borrower("b-test-001").score == 51

    # stored total_paid = 100 -> judged against 2024-03-01, so 2024-02-01 is early
    result = on_payment_edited(state, _payment("p1", 100, date(2024, 2, 1)))

    assert result.score_delta == 2
    assert result.state.find_borrower("b-test-001").score == 53


def test_on_payment_edited_keeps_original_loan(portfolio, borrower):
    other = originate_loan("l-other", borrower.id, 500.0, 0.0, 5, date(2024, 1, 1))
    state = replace(portfolio, loans=portfolio.loans + (other,))
    state = on_payment_added(state, _payment("p1", 100, date(2024, 2, 1))).state

    result = on_payment_edited(state, _payment("p1", 200, date(2024, 2, 1), loan_id="l-other"))

    assert result.state.find_payment("p1").loan_id == "l-test-001"
    assert result.state.find_loan("l-test-001").total_paid == 200
    assert result.state.find_loan("l-other").total_paid == 0


@pytest.mark.parametrize(
    "operation, argument",
    [
        (on_payment_added, Payment(id="p1", loan_id="missing", amount=10, date=date(2024, 2, 1))),
        (on_payment_edited, Payment(id="missing", loan_id="l-test-001", amount=10, date=date(2024, 2, 1))),
        (on_payment_deleted, "missing"),
        (on_borrower_deleted, "missing"),
        (on_loan_deleted, "missing"),
    ],
)
def test_unknown_ids_are_noops(portfolio, operation, argument):
    result = operation(portfolio, argument)

    assert result.applied is False
    assert result.state is portfolio


def test_duplicate_payment_id_is_noop(portfolio):
    state = on_payment_added(portfolio, _payment("p1", 100, date(2024, 2, 1))).state
    result = on_payment_added(state, _payment("p1", 100, date(2024, 3, 1)))

    assert result.applied is False
    assert result.state is state


def test_on_borrower_deleted_cascades(borrower):
    other = Borrower(id="b-keep", name="Kept Borrower")
    loans = (
        originate_loan("l-a", borrower.id, 1000.0, 0.0, 10, date(2024, 1, 1)),
        originate_loan("l-b", borrower.id, 500.0, 0.02, 5, date(2024, 1, 1)),
        originate_loan("l-c", other.id, 300.0, 0.0, 3, date(2024, 1, 1)),
    )
    payments = (
        _payment("p1", 100, date(2024, 2, 1), loan_id="l-a"),
        _payment("p2", 100, date(2024, 3, 1), loan_id="l-a"),
        _payment("p3", 50, date(2024, 2, 1), loan_id="l-b"),
        _payment("p4", 100, date(2024, 2, 1), loan_id="l-c"),
    )
    state = PortfolioState(borrowers=(borrower, other), loans=loans, payments=payments)

    result = on_borrower_deleted(state, borrower.id)

    assert [b.id for b in result.state.borrowers] == ["b-keep"]
    assert [l.id for l in result.state.loans] == ["l-c"]
    assert [p.id for p in result.state.payments] == ["p4"]
    assert not any(p.loan_id in {"l-a", "l-b"} for p in result.state.payments)


def test_on_loan_deleted_cascades(portfolio):
    state = on_payment_added(portfolio, _payment("p1", 100, date(2024, 2, 1))).state

    result = on_loan_deleted(state, "l-test-001")

    assert result.state.loans == ()
    assert result.state.payments == ()
    assert result.state.borrowers == state.borrowers


def test_add_borrower_forces_initial_score():
    result = add_borrower(PortfolioState(), Borrower(id="b-1", name="New", score=90))

    assert result.state.find_borrower("b-1").score == 50


def test_update_borrower_keeps_score(portfolio, borrower):
    state = on_payment_added(portfolio, _payment("p1", 100, date(2024, 1, 1))).state

    result = update_borrower(state, replace(borrower, phone="(11) 95555-5555", score=0))

    updated = result.state.find_borrower(borrower.id)
    assert updated.phone == "(11) 95555-5555"
    assert updated.score == 52


def test_add_loan_requires_existing_borrower():
    loan = originate_loan("l-1", "b-ghost", 100.0, 0.0, 1, date(2024, 1, 1))

    result = add_loan(PortfolioState(), loan)

    assert result.applied is False
    assert result.state.loans == ()


def test_update_loan_recomputes_contract_and_balance(portfolio):
    state = on_payment_added(portfolio, _payment("p1", 300, date(2024, 2, 1))).state

    result = update_loan(state, "l-test-001", 2400.0, 0.0, 12, date(2024, 1, 1))

    loan = result.state.find_loan("l-test-001")
    assert loan.principal_amount == 2400
    assert loan.accrued_interest == 0
    assert loan.total_paid == 300
    assert loan.remaining_principal == 2100
    assert loan.status == LoanStatus.ACTIVE


def test_update_loan_can_settle_contract(portfolio):
    state = on_payment_added(portfolio, _payment("p1", 600, date(2024, 2, 1))).state

    result = update_loan(state, "l-test-001", 600.0, 0.0, 6, date(2024, 1, 1))

    assert result.state.find_loan("l-test-001").status == LoanStatus.PAID


def test_update_loan_rejects_invalid_terms(portfolio):
    with pytest.raises(InvalidScheduleError):
        update_loan(portfolio, "l-test-001", 1000.0, 0.0, 0, date(2024, 1, 1))
