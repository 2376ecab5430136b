"""Case repository interface - read-only access to the case library."""

from abc import ABC, abstractmethod
from typing import Optional

from detective_core.models.case import CaseDefinition


class CaseRepository(ABC):
    """Read-only lookup of case definitions by id.

    Implementations return immutable CaseDefinition values that may be shared
    across sessions, and have no side effects.
    """

    @abstractmethod
    async def get_case(self, case_id: str, correlation_id: Optional[str] = None) -> CaseDefinition:
        """Fetch a case.

        `correlation_id` is forwarded by remote repositories for request tracing.

        Raises:
            CaseNotFoundError: If no case with that id exists
        """

    async def close(self) -> None:
        """Release connections. Override for remote repositories."""
        pass
