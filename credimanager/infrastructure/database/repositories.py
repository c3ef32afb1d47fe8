"""Data access layer for the persisted portfolio snapshot"""

import json
import logging
from datetime import date
from typing import Any, Dict

from sqlalchemy.orm import Session

from credimanager.domain.exceptions import DomainException
from credimanager.domain.models import (
    Borrower,
    EmergencyContact,
    Loan,
    LoanStatus,
    Payment,
    PaymentKind,
    PortfolioState,
)
from credimanager.domain.seed import seed_state
from credimanager.infrastructure.database.models import PortfolioSnapshot
from credimanager.infrastructure.observability.metrics import snapshot_fallback_counter

logger = logging.getLogger(__name__)


def state_to_payload(state: PortfolioState) -> Dict[str, Any]:
    """Serialize a snapshot into plain JSON-compatible data"""
    return {
        "borrowers": [
            {
                "id": b.id,
                "name": b.name,
                "national_id": b.national_id,
                "phone": b.phone,
                "email": b.email,
                "address": b.address,
                "score": b.score,
                "emergency_contacts": [
                    {"name": c.name, "relation": c.relation, "phone": c.phone} for c in b.emergency_contacts
                ],
                "notes": b.notes,
            }
            for b in state.borrowers
        ],
        "loans": [
            {
                "id": l.id,
                "borrower_id": l.borrower_id,
                "principal_amount": l.principal_amount,
                "monthly_interest_rate": l.monthly_interest_rate,
                "installments": l.installments,
                "start_date": l.start_date.isoformat(),
                "status": l.status.value,
                "remaining_principal": l.remaining_principal,
                "accrued_interest": l.accrued_interest,
                "total_paid": l.total_paid,
            }
            for l in state.loans
        ],
        "payments": [
            {
                "id": p.id,
                "loan_id": p.loan_id,
                "amount": p.amount,
                "date": p.date.isoformat(),
                "kind": p.kind.value,
                "notes": p.notes,
            }
            for p in state.payments
        ],
    }


def state_from_payload(data: Dict[str, Any]) -> PortfolioState:
    """
    Rebuild a snapshot from stored data.

    Raises:
        KeyError, TypeError, ValueError, DomainException: On malformed data
    """
    borrowers = tuple(
        Borrower(
            id=b["id"],
            name=b["name"],
            national_id=b.get("national_id", ""),
            phone=b.get("phone", ""),
            email=b.get("email", ""),
            address=b.get("address", ""),
            score=int(b["score"]),
            emergency_contacts=tuple(
                EmergencyContact(name=c["name"], relation=c["relation"], phone=c["phone"])
                for c in b.get("emergency_contacts", [])
            ),
            notes=b.get("notes"),
        )
        for b in data.get("borrowers", [])
    )
    loans = tuple(
        Loan(
            id=l["id"],
            borrower_id=l["borrower_id"],
            principal_amount=float(l["principal_amount"]),
            monthly_interest_rate=float(l["monthly_interest_rate"]),
            installments=int(l["installments"]),
            start_date=date.fromisoformat(l["start_date"]),
            status=LoanStatus(l["status"]),
            remaining_principal=float(l["remaining_principal"]),
            accrued_interest=float(l["accrued_interest"]),
            total_paid=float(l["total_paid"]),
        )
        for l in data.get("loans", [])
    )
    payments = tuple(
        Payment(
            id=p["id"],
            loan_id=p["loan_id"],
            amount=float(p["amount"]),
            date=date.fromisoformat(p["date"]),
            kind=PaymentKind(p.get("kind", PaymentKind.TOTAL.value)),
            notes=p.get("notes"),
        )
        for p in data.get("payments", [])
    )
    return PortfolioState(borrowers=borrowers, loans=loans, payments=payments)


class SnapshotRepository:
    """Repository for the single portfolio snapshot stored under a key"""

    def __init__(self, db: Session, key: str):
        self.db = db
        self.key = key

    def load_state(self) -> PortfolioState:
        """
        Load the saved snapshot.

        Falls back to the seed dataset when nothing is stored yet, or when the
        stored payload is corrupt (logged as a warning, never raised).
        """
        row = self.db.get(PortfolioSnapshot, self.key)
        if row is None:
            return seed_state()

        try:
            return state_from_payload(json.loads(row.payload))
        except (KeyError, TypeError, ValueError, AttributeError, DomainException) as e:
            snapshot_fallback_counter.inc()
            logger.warning(f"Corrupt snapshot, loading seed dataset: {e}", extra={"storage_key": self.key})
            return seed_state()

    def save_state(self, state: PortfolioState) -> None:
        """Upsert the snapshot (flushed, committed by the caller)"""
        payload = json.dumps(state_to_payload(state))
        row = self.db.get(PortfolioSnapshot, self.key)
        if row is None:
            self.db.add(PortfolioSnapshot(key=self.key, payload=payload))
        else:
            row.payload = payload
        self.db.flush()
