"""/v1/borrowers - borrower profiles"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from credimanager.api.dependencies import get_state_store
from credimanager.api.v1.schemas import BorrowerRequest, BorrowerResponse, borrower_response
from credimanager.domain.models import Borrower, EmergencyContact
from credimanager.domain.reconciliation import add_borrower, on_borrower_deleted, update_borrower
from credimanager.infrastructure.state_store import StateStore

router = APIRouter()


def _to_domain(borrower_id: str, body: BorrowerRequest) -> Borrower:
    return Borrower(
        id=borrower_id,
        name=body.name,
        national_id=body.national_id,
        phone=body.phone,
        email=body.email,
        address=body.address,
        emergency_contacts=tuple(
            EmergencyContact(name=c.name, relation=c.relation, phone=c.phone) for c in body.emergency_contacts
        ),
        notes=body.notes,
    )


@router.get("/borrowers", response_model=List[BorrowerResponse])
def list_borrowers(
    search: Optional[str] = Query(None, description="Match on name, national ID or phone"),
    store: StateStore = Depends(get_state_store),
):
    borrowers = store.current().borrowers
    if search:
        needle = search.lower()
        borrowers = [
            b for b in borrowers if needle in b.name.lower() or needle in b.national_id or needle in b.phone
        ]
    return [borrower_response(b) for b in borrowers]


@router.get("/borrowers/{borrower_id}", response_model=BorrowerResponse)
def get_borrower(borrower_id: str, store: StateStore = Depends(get_state_store)):
    borrower = store.current().find_borrower(borrower_id)
    if borrower is None:
        raise HTTPException(status_code=404, detail="Borrower not found")
    return borrower_response(borrower)


@router.post("/borrowers", response_model=BorrowerResponse, status_code=201)
def create_borrower(body: BorrowerRequest, store: StateStore = Depends(get_state_store)):
    """Register a borrower; the score always starts at 50"""
    borrower_id = f"b-{uuid.uuid4().hex[:9]}"
    result = store.apply(add_borrower, _to_domain(borrower_id, body))
    return borrower_response(result.state.find_borrower(borrower_id))


@router.put("/borrowers/{borrower_id}", response_model=BorrowerResponse)
def edit_borrower(borrower_id: str, body: BorrowerRequest, store: StateStore = Depends(get_state_store)):
    result = store.apply(update_borrower, _to_domain(borrower_id, body))
    if not result.applied:
        raise HTTPException(status_code=404, detail="Borrower not found")
    return borrower_response(result.state.find_borrower(borrower_id))


@router.delete("/borrowers/{borrower_id}", status_code=204)
def delete_borrower(borrower_id: str, store: StateStore = Depends(get_state_store)):
    """Delete a borrower together with their loans and payments"""
    result = store.apply(on_borrower_deleted, borrower_id)
    if not result.applied:
        raise HTTPException(status_code=404, detail="Borrower not found")
    return Response(status_code=204)
