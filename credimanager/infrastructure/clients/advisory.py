"""Risk advisory HTTP client - free-text credit opinion from a generative model"""

import logging
from typing import Iterable, Optional

import httpx

from credimanager.config import settings
from credimanager.domain.exceptions import AdvisoryError
from credimanager.domain.models import Borrower, Loan
from credimanager.infrastructure.observability.metrics import advisory_failure_counter

NO_ANALYSIS_MESSAGE = "Unable to generate the analysis right now."
FAILURE_MESSAGE = "Error processing risk assessment."

logger = logging.getLogger(__name__)


def build_prompt(borrower: Borrower, loans: Iterable[Loan]) -> str:
    """Analyst prompt from the borrower profile and that borrower's loans"""
    history = "\n".join(
        f"- Amount: {loan.principal_amount:.2f}, Status: {loan.status.value}, "
        f"Outstanding balance: {loan.remaining_principal:.2f}"
        for loan in loans
    )
    return (
        "Act as a senior credit analyst.\n"
        "Analyse the following client and their history and give a technical risk opinion.\n\n"
        f"Client: {borrower.name}\n"
        f"Internal score: {borrower.score}/100\n"
        f"National ID: {borrower.national_id}\n"
        f"Emergency contacts: {len(borrower.emergency_contacts)} registered.\n\n"
        f"Loan history:\n{history or '- none'}\n\n"
        "Give a summary analysis in 3 paragraphs on reliability and suggestions for a future credit limit."
    )


class RiskAdvisoryClient:
    """Client for the external generative risk-assessment API"""

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.advisory_api_base
        self.model = model or settings.advisory_model
        self.api_key = api_key if api_key is not None else settings.advisory_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def _generate(self, prompt: str) -> Optional[str]:
        """
        Send the prompt and return the model text (None when the reply has none).

        Raises:
            AdvisoryError: On missing credentials, timeout, HTTP errors, or invalid response
        """
        if not self.api_key:
            raise AdvisoryError("Risk advisory API key is not configured")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/v1beta/models/{self.model}:generateContent",
                    headers={"x-goog-api-key": self.api_key},
                    json={"contents": [{"parts": [{"text": prompt}]}]},
                )
                response.raise_for_status()
                data = response.json()

                candidates = data.get("candidates") or []
                if not candidates:
                    return None
                parts = candidates[0].get("content", {}).get("parts", [])
                text = "".join(part.get("text", "") for part in parts)
                return text or None

            except httpx.TimeoutException as e:
                raise AdvisoryError(f"Risk advisory timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise AdvisoryError(f"Risk advisory error: {e.response.status_code}") from e
            except httpx.HTTPError as e:
                raise AdvisoryError(f"Risk advisory unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                raise AdvisoryError(f"Invalid response from risk advisory: {e}") from e

    async def assess(self, borrower: Borrower, loans: Iterable[Loan]) -> str:
        """
        Natural-language risk summary for a borrower.

        Never raises: failures become a fixed user-facing message so the caller's
        state flows are never affected by this lookup.
        """
        try:
            text = await self._generate(build_prompt(borrower, loans))
        except AdvisoryError as e:
            advisory_failure_counter.inc()
            logger.error(f"Risk advisory failed: {e}", extra={"borrower_id": borrower.id})
            return FAILURE_MESSAGE
        return text or NO_ANALYSIS_MESSAGE
