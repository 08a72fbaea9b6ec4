
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple
import re

from .errors import CatalogError, InvalidSkillName, MalformedResult

# Difficulty assumed for an answer whose challenge carries no measurable skill.
DEFAULT_DIFFICULTY = 2

_TRAILING_DIGITS = re.compile(r"(\d+)$")


class ResultCode(str, Enum):
    OK = "ok"
    KO = "ko"
    PARTIAL = "partial"
    TIMEDOUT = "timedout"
    SKIPPED = "skipped"

    @classmethod
    def parse(cls, raw: object) -> "ResultCode":
        """Map a submitted result code onto the enum, failing on anything unknown."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            raise MalformedResult(raw)
        key = raw.strip().lower()
        code = _RESULT_ALIASES.get(key)
        if code is None:
            raise MalformedResult(raw)
        return code


_RESULT_ALIASES: Dict[str, ResultCode] = {c.value: c for c in ResultCode}
_RESULT_ALIASES.update({"partially": ResultCode.PARTIAL, "aband": ResultCode.SKIPPED})


class ValidationStatus(str, Enum):
    VALIDATED = "validated"
    UNVALIDATED = "unvalidated"
    ARCHIVED = "archived"

    @classmethod
    def parse(cls, raw: object) -> "ValidationStatus":
        if isinstance(raw, cls):
            return raw
        key = str(raw).strip().lower()
        status = _STATUS_ALIASES.get(key)
        if status is None:
            raise CatalogError(f"unknown validation status {raw!r}")
        return status


# catalog labels used by the authoring tool
_STATUS_ALIASES: Dict[str, ValidationStatus] = {s.value: s for s in ValidationStatus}
_STATUS_ALIASES.update({
    "validé": ValidationStatus.VALIDATED,
    "validé sans test": ValidationStatus.VALIDATED,
    "pré-validé": ValidationStatus.UNVALIDATED,
    "proposé": ValidationStatus.UNVALIDATED,
    "archivé": ValidationStatus.ARCHIVED,
    "périmé": ValidationStatus.ARCHIVED,
})


class TerminationCause(str, Enum):
    PRECISION_REACHED = "precision_reached"
    MAX_ANSWERS = "max_answers"
    NO_ELIGIBLE_CHALLENGE = "no_eligible_challenge"


class SessionStatus(str, Enum):
    SELECTING_NEXT = "selecting_next"
    AWAITING_ANSWER = "awaiting_answer"
    UPDATING = "updating"
    TERMINATED = "terminated"
    INTERRUPTED = "interrupted"

    @property
    def is_final(self) -> bool:
        return self in (SessionStatus.TERMINATED, SessionStatus.INTERRUPTED)


@dataclass(frozen=True)
class Skill:
    name: str
    difficulty: int = field(init=False, compare=False)

    def __post_init__(self) -> None:
        match = _TRAILING_DIGITS.search(str(self.name))
        if match is None or int(match.group(1)) < 1:
            raise InvalidSkillName(self.name)
        object.__setattr__(self, "difficulty", int(match.group(1)))


def max_difficulty(skills: Iterable[Skill]) -> int:
    """Hardest skill difficulty, or ``DEFAULT_DIFFICULTY`` for an empty set."""
    return max((s.difficulty for s in skills), default=DEFAULT_DIFFICULTY)


@dataclass(frozen=True)
class Challenge:
    id: str
    status: ValidationStatus
    skills: FrozenSet[Skill] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", ValidationStatus.parse(self.status))
        object.__setattr__(self, "skills", frozenset(self.skills))

    @property
    def is_validated(self) -> bool:
        return self.status is ValidationStatus.VALIDATED

    @property
    def max_difficulty(self) -> int:
        return max_difficulty(self.skills)


@dataclass(frozen=True)
class Answer:
    challenge: Optional[Challenge]
    result: ResultCode

    def __post_init__(self) -> None:
        object.__setattr__(self, "result", ResultCode.parse(self.result))

    @property
    def max_difficulty(self) -> int:
        if self.challenge is None:
            return DEFAULT_DIFFICULTY
        return self.challenge.max_difficulty

    @property
    def binary_outcome(self) -> int:
        # no partial credit: only ``ok`` counts as a success
        return 1 if self.result is ResultCode.OK else 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "challenge_id": self.challenge.id if self.challenge is not None else None,
            "result": self.result.value,
            "outcome": self.binary_outcome,
            "difficulty": self.max_difficulty,
        }


@dataclass(frozen=True)
class Estimate:
    theta: float
    se: float
    info_total: float
    count: int = 0


@dataclass(frozen=True)
class SessionResult:
    final_ability: float
    se: float
    termination_cause: TerminationCause
    answers: Tuple[Answer, ...]
    certified_level: int
    pix_score: int
    audit_events: List[Dict[str, object]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        """JSON-friendly view handed to the score export collaborator."""

        return {
            "final_ability": self.final_ability,
            "se": self.se,
            "termination_cause": self.termination_cause.value,
            "answers": [a.to_dict() for a in self.answers],
            "certified_level": self.certified_level,
            "pix_score": self.pix_score,
            "audit_events": [dict(evt) for evt in self.audit_events],
        }
