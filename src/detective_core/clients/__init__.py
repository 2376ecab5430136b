"""HTTP clients for sibling services."""

from detective_core.clients.base import BaseServiceClient
from detective_core.clients.case_library_client import HttpCaseRepository

__all__ = ["BaseServiceClient", "HttpCaseRepository"]
