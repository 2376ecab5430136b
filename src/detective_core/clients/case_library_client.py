"""Case repository backed by the case library HTTP service."""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from detective_core.clients.base import BaseServiceClient
from detective_core.exceptions import CaseDefinitionError, CaseNotFoundError, CaseServiceError
from detective_core.models.case import CaseDefinition
from detective_core.repository.base import CaseRepository
from detective_core.repository.memory import parse_case
from detective_core.utils.resilience import create_fetch_retry

logger = logging.getLogger(__name__)


class HttpCaseRepository(BaseServiceClient, CaseRepository):
    """Fetches cases from `GET {base_url}/api/v1/cases/{case_id}`.

    Transport failures (connection refused, timeouts) are retried up to
    `max_attempts` times. A 404 maps to CaseNotFoundError and is never retried;
    any other error status maps to CaseServiceError.

    Usage:
        repo = HttpCaseRepository(base_url="http://case-library:8000")
        case = await repo.get_case("weekend-warriors-crisis")
    """

    def __init__(
        self,
        base_url: str = "http://case-library:8000",
        timeout: float = 10.0,
        max_attempts: int = 3,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize repository.

        Args:
            base_url: Base URL of the case library service
            timeout: Request timeout in seconds
            max_attempts: Attempts per fetch for transport failures
            transport: Optional httpx transport (tests)
        """
        super().__init__(base_url=base_url, timeout=timeout, transport=transport)
        self.max_attempts = max_attempts
        self._fetch_with_retry = create_fetch_retry(max_attempts=max_attempts)(self._fetch)

    async def get_case(self, case_id: str, correlation_id: Optional[str] = None) -> CaseDefinition:
        """Get case by ID.

        Raises:
            CaseNotFoundError: Service answered 404
            CaseServiceError: Service unreachable or answered another error status
            CaseDefinitionError: Response body is not a valid case
        """
        url = f"{self.base_url}/api/v1/cases/{quote(case_id, safe='')}"

        try:
            payload = await self._fetch_with_retry(case_id, url, correlation_id)
        except httpx.TransportError as e:
            logger.error(f"Case library unreachable after {self.max_attempts} attempts: {e}")
            raise CaseServiceError(f"Case library unreachable: {e}") from e

        case = parse_case(payload, source=url)
        if case.id != case_id:
            raise CaseDefinitionError(f"Requested case {case_id} but received {case.id}", source=url)
        return case

    async def _fetch(self, case_id: str, url: str, correlation_id: Optional[str]) -> Dict[str, Any]:
        async with self._get_client() as client:
            response = await client.get(url, headers=self._headers(correlation_id=correlation_id))

        if response.status_code == 404:
            raise CaseNotFoundError(case_id)
        if response.is_error:
            raise CaseServiceError(
                f"Case library returned {response.status_code} for case {case_id}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise CaseDefinitionError(f"Response is not JSON: {e}", source=url) from e

        # The service may wrap the document: {"case": {...}}
        if isinstance(payload, dict) and isinstance(payload.get("case"), dict):
            payload = payload["case"]
        if not isinstance(payload, dict):
            raise CaseDefinitionError("Response is not a JSON object", source=url)
        return payload
