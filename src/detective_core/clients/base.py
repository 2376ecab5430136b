"""Base HTTP client for calls to the case library service."""

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class BaseServiceClient:
    """Base class for async HTTP clients of sibling services.

    A fresh httpx.AsyncClient is opened per request. Request tracing is
    propagated via the X-Correlation-ID header.

    Usage:
        class CaseLibraryClient(BaseServiceClient):
            async def get_case(self, case_id: str) -> dict:
                async with self._get_client() as client:
                    response = await client.get(f"{self.base_url}/api/v1/cases/{case_id}")
                    response.raise_for_status()
                    return response.json()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize service client.

        Args:
            base_url: Service base URL (e.g., http://case-library:8000)
            timeout: Request timeout in seconds (default: 10.0)
            transport: Optional httpx transport (e.g., httpx.MockTransport in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

        logger.info(f"Initialized {self.__class__.__name__} with base_url={self.base_url}")

    def _headers(self, correlation_id: Optional[str] = None) -> dict:
        """Generate request headers.

        Args:
            correlation_id: Optional correlation ID for request tracing

        Returns:
            Headers dict
        """
        headers = {
            "Accept": "application/json",
        }

        if correlation_id:
            headers["X-Correlation-ID"] = correlation_id

        return headers

    def _get_client(self) -> httpx.AsyncClient:
        """Get HTTP client instance with configured timeout.

        Returns:
            Configured AsyncClient ready for use with async context manager
        """
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
