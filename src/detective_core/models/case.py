"""Case content models - read-only incident cases served by the case library.

Key Models:
- CaseDefinition: One authored incident scenario (crisis, symptoms, clues, solution)
- Clue: A single piece of evidence, revealed in authored order
- SolutionRubric: Diagnosis string + keyword set used for grading, plus the
  explanation material revealed once a session ends

All models are frozen and every collection is a tuple, so a loaded
CaseDefinition can be shared between concurrent sessions without copying.
Clue content is opaque markdown for the presentation layer; nothing here
parses it.

The original content documents use camelCase keys (rootCause, codeExamples,
educationalInsights); these are accepted through field aliases.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator


# ============================================================
# Enumerations
# ============================================================

class CaseDifficulty(str, Enum):
    """Authored difficulty level"""
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"
    PRINCIPAL = "principal"


class CaseCategory(str, Enum):
    """Incident area the case belongs to"""
    DATABASE = "database"
    CACHING = "caching"
    NETWORKING = "networking"
    AUTH = "auth"
    MEMORY = "memory"
    DISTRIBUTED = "distributed"


class ClueType(str, Enum):
    """Kind of evidence a clue presents"""
    METRICS = "metrics"      # Dashboards, counters, tables
    LOGS = "logs"            # Log excerpts
    CODE = "code"            # Source snippets
    CONFIG = "config"        # Configuration files, manifests
    TESTIMONY = "testimony"  # Statements from people involved


class TimelineEventType(str, Enum):
    """Severity of a crisis timeline entry"""
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


# ============================================================
# Crisis narrative
# ============================================================

class TimelineEvent(BaseModel):
    """One entry in the crisis timeline"""

    time: str = Field(description="Free-form time label (e.g., 'Friday 6pm')")
    event: str = Field(description="What happened")
    type: Optional[TimelineEventType] = Field(default=None, description="Severity")

    class Config:
        frozen = True


class Crisis(BaseModel):
    """Incident description shown when the case opens"""

    description: str
    impact: str = ""
    timeline: Tuple[TimelineEvent, ...] = ()

    class Config:
        frozen = True


class Symptoms(BaseModel):
    """What still works versus what is broken"""

    working: Tuple[str, ...] = ()
    broken: Tuple[str, ...] = ()

    class Config:
        frozen = True


# ============================================================
# Evidence
# ============================================================

class Clue(BaseModel):
    """A single piece of evidence in the investigation."""

    id: int = Field(description="Clue identifier, unique within its case")
    title: str = Field(min_length=1)
    type: ClueType
    content: str = Field(description="Opaque markdown payload for the presentation layer")
    hint: Optional[str] = Field(default=None, description="Optional nudge unlocked at a score penalty")

    @property
    def has_hint(self) -> bool:
        return bool(self.hint and self.hint.strip())

    class Config:
        frozen = True


# ============================================================
# Solution
# ============================================================

class CodeExample(BaseModel):
    """Remediation snippet shown with the solution"""

    lang: str
    code: str
    description: str = ""

    class Config:
        frozen = True


class SolutionRubric(BaseModel):
    """
    Graded solution for a case.

    Only `diagnosis` and `keywords` feed the grader. The remaining fields are
    revealed to the player after submission or when they abandon the case.
    """

    diagnosis: str = Field(description="Canonical one-sentence root cause")

    keywords: Tuple[str, ...] = Field(
        default=(),
        description="Key concepts (single words or short phrases); treated as a set"
    )

    root_cause_text: str = Field(
        default="",
        alias="rootCause",
        description="Full explanation of the root cause"
    )

    code_examples: Tuple[CodeExample, ...] = Field(default=(), alias="codeExamples")
    prevention: Tuple[str, ...] = ()
    educational_insights: Tuple[str, ...] = Field(default=(), alias="educationalInsights")

    @field_validator('diagnosis')
    @classmethod
    def diagnosis_not_empty(cls, v):
        """Ensure diagnosis is not just whitespace"""
        if not v or not v.strip():
            raise ValueError("diagnosis cannot be empty")
        return v.strip()

    @field_validator('keywords')
    @classmethod
    def keywords_unique(cls, v):
        """Strip blanks and drop case-insensitive duplicates, keeping authored order"""
        seen = set()
        result = []
        for keyword in v:
            cleaned = " ".join(keyword.split())
            if not cleaned:
                continue
            key = cleaned.lower()
            if key in seen:
                continue
            seen.add(key)
            result.append(cleaned)
        return tuple(result)

    class Config:
        frozen = True
        populate_by_name = True


# ============================================================
# Case
# ============================================================

class CaseDefinition(BaseModel):
    """
    Complete detective case as served by the case library.

    Invariants:
    - At least one clue
    - Clue ids are unique within the case
    - Clue order is the authored disclosure order
    """

    id: str = Field(min_length=1, max_length=200, description="Case slug (e.g., 'weekend-warriors-crisis')")
    title: str = Field(min_length=1)
    subtitle: str = ""
    difficulty: CaseDifficulty
    category: CaseCategory
    crisis: Crisis
    symptoms: Symptoms = Field(default_factory=Symptoms)
    clues: Tuple[Clue, ...]
    solution: SolutionRubric

    # ============================================================
    # Computed Properties
    # ============================================================
    @property
    def total_clues(self) -> int:
        return len(self.clues)

    @property
    def clue_ids(self) -> Tuple[int, ...]:
        """Clue ids in authored order"""
        return tuple(clue.id for clue in self.clues)

    @property
    def hint_count(self) -> int:
        return sum(1 for clue in self.clues if clue.has_hint)

    def get_clue(self, clue_id: int) -> Optional[Clue]:
        """Look up a clue by id (None if the case has no such clue)"""
        return self._clue_index().get(clue_id)

    def index_of(self, clue_id: int) -> int:
        """Position of a clue in authored order, -1 if absent"""
        for position, clue in enumerate(self.clues):
            if clue.id == clue_id:
                return position
        return -1

    def _clue_index(self) -> Dict[int, Clue]:
        return {clue.id: clue for clue in self.clues}

    # ============================================================
    # Validation
    # ============================================================
    @field_validator('id', 'title')
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @model_validator(mode='after')
    def validate_clues(self) -> 'CaseDefinition':
        """Ensure the case has clues and their ids are unique"""
        if not self.clues:
            raise ValueError(f"Case {self.id} must define at least one clue")

        seen = set()
        for clue in self.clues:
            if clue.id in seen:
                raise ValueError(f"Case {self.id} has duplicate clue id {clue.id}")
            seen.add(clue.id)

        return self

    class Config:
        frozen = True
        populate_by_name = True
