"""Case repository adapters."""

from detective_core.repository.base import CaseRepository
from detective_core.repository.memory import InMemoryCaseRepository, parse_case

__all__ = [
    "CaseRepository",
    "InMemoryCaseRepository",
    "parse_case",
]
