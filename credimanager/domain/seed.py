"""Built-in seed dataset used when no saved snapshot can be loaded"""

from datetime import date

from credimanager.domain.models import Borrower, EmergencyContact, Payment, PortfolioState
from credimanager.domain.reconciliation import originate_loan, reconcile_loan


def seed_state() -> PortfolioState:
    """Two borrowers, three loans, a few payments; derived fields already reconciled"""
    borrowers = (
        Borrower(
            id="b-seed-001",
            name="Maria Oliveira",
            national_id="123.456.789-00",
            phone="(11) 98765-4321",
            email="maria.oliveira@example.com",
            address="Rua das Flores, 120 - Sao Paulo/SP",
            score=72,
            emergency_contacts=(EmergencyContact(name="Joao Oliveira", relation="Brother", phone="(11) 91234-5678"),),
        ),
        Borrower(
            id="b-seed-002",
            name="Carlos Souza",
            national_id="987.654.321-00",
            phone="(21) 99876-5432",
            email="carlos.souza@example.com",
            address="Av. Atlantica, 455 - Rio de Janeiro/RJ",
            score=45,
        ),
    )

    loans = (
        originate_loan("l-seed-001", "b-seed-001", 1200.0, 0.0, 12, date(2024, 1, 1)),
        originate_loan("l-seed-002", "b-seed-001", 500.0, 0.05, 5, date(2024, 3, 10)),
        originate_loan("l-seed-003", "b-seed-002", 2000.0, 0.03, 10, date(2024, 2, 15)),
    )

    payments = (
        Payment(id="p-seed-001", loan_id="l-seed-001", amount=100.0, date=date(2024, 2, 1)),
        Payment(id="p-seed-002", loan_id="l-seed-001", amount=100.0, date=date(2024, 3, 1)),
        Payment(id="p-seed-003", loan_id="l-seed-003", amount=234.46, date=date(2024, 3, 28)),
    )

    reconciled = tuple(reconcile_loan(loan, payments) for loan in loans)
    return PortfolioState(borrowers=borrowers, loans=reconciled, payments=payments)
