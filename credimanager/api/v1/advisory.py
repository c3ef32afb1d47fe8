"""GET /v1/borrowers/{borrower_id}/risk-assessment - external risk opinion"""

from fastapi import APIRouter, Depends, HTTPException

from credimanager.api.dependencies import get_advisory_client, get_state_store
from credimanager.api.v1.schemas import RiskAssessmentResponse
from credimanager.infrastructure.clients.advisory import RiskAdvisoryClient
from credimanager.infrastructure.state_store import StateStore

router = APIRouter()


@router.get("/borrowers/{borrower_id}/risk-assessment", response_model=RiskAssessmentResponse)
async def get_risk_assessment(
    borrower_id: str,
    store: StateStore = Depends(get_state_store),
    advisory_client: RiskAdvisoryClient = Depends(get_advisory_client),
):
    """
    Ask the advisory service for a written opinion on a borrower.

    Read-only: failures come back as a fixed message, state is never touched.
    """
    state = store.current()
    borrower = state.find_borrower(borrower_id)
    if borrower is None:
        raise HTTPException(status_code=404, detail="Borrower not found")

    analysis = await advisory_client.assess(borrower, state.loans_for_borrower(borrower_id))
    return RiskAssessmentResponse(borrower_id=borrower_id, analysis=analysis)
