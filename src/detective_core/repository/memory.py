"""In-process case repository, optionally loaded from a directory of JSON documents."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from detective_core.exceptions import CaseDefinitionError, CaseNotFoundError
from detective_core.models.case import CaseDefinition
from detective_core.repository.base import CaseRepository

logger = logging.getLogger(__name__)


def parse_case(payload: Dict[str, Any], source: str = "payload") -> CaseDefinition:
    """Validate a raw case document.

    Raises:
        CaseDefinitionError: If the document does not describe a valid case
    """
    try:
        return CaseDefinition.model_validate(payload)
    except ValidationError as e:
        raise CaseDefinitionError(str(e), source=source) from e


class InMemoryCaseRepository(CaseRepository):
    """Dict-backed repository.

    Usage:
        repo = InMemoryCaseRepository.from_directory("cases/")
        case = await repo.get_case("weekend-warriors-crisis")
    """

    def __init__(self, cases: Iterable[CaseDefinition] = ()):
        """Index cases by id.

        Raises:
            CaseDefinitionError: If two cases share an id
        """
        self._cases: Dict[str, CaseDefinition] = {}
        for case in cases:
            if case.id in self._cases:
                raise CaseDefinitionError(f"Duplicate case id: {case.id}")
            self._cases[case.id] = case

    @classmethod
    def from_directory(cls, directory: Union[str, Path]) -> "InMemoryCaseRepository":
        """Load every `*.json` file in a directory (sorted by file name).

        Each file holds one case document. camelCase keys of the original
        content format (rootCause, codeExamples, educationalInsights) are accepted.

        Raises:
            FileNotFoundError: If the directory does not exist
            CaseDefinitionError: If a file is not valid JSON or not a valid case
        """
        path = Path(directory)
        if not path.is_dir():
            raise FileNotFoundError(f"Case directory not found: {path}")

        cases: List[CaseDefinition] = []
        for file_path in sorted(path.glob("*.json")):
            try:
                payload = json.loads(file_path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                raise CaseDefinitionError(f"Invalid JSON: {e}", source=str(file_path)) from e
            cases.append(parse_case(payload, source=str(file_path)))

        repository = cls(cases)
        logger.info(f"Loaded {len(repository)} cases from {path}")
        return repository

    async def get_case(self, case_id: str, correlation_id: Optional[str] = None) -> CaseDefinition:
        case = self._cases.get(case_id)
        if case is None:
            raise CaseNotFoundError(case_id)
        return case

    def case_ids(self) -> List[str]:
        """Case ids in load order"""
        return list(self._cases.keys())

    def __len__(self) -> int:
        return len(self._cases)

    def __contains__(self, case_id: object) -> bool:
        return case_id in self._cases
