"""Error taxonomy for the certification engine."""
from __future__ import annotations

from typing import Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .types import Answer

__all__ = [
    "CertError",
    "InvalidSkillName",
    "CatalogError",
    "MalformedResult",
    "NoEligibleChallenge",
    "SessionInterrupted",
    "SessionStateError",
]


class CertError(Exception):
    """Base class for every error raised by ``cert_core``."""


class InvalidSkillName(CertError, ValueError):
    """A skill name carries no usable trailing difficulty."""

    def __init__(self, name: str):
        super().__init__(f"skill name {name!r} has no trailing difficulty >= 1")
        self.name = name


class CatalogError(CertError, ValueError):
    """A catalog record could not be turned into a Challenge."""


class MalformedResult(CertError, ValueError):
    """An answer result code outside the recognised set."""

    def __init__(self, raw: object):
        super().__init__(f"unrecognised result code {raw!r}")
        self.raw = raw


class NoEligibleChallenge(CertError):
    """Every validated challenge has already been administered."""


class SessionStateError(CertError, RuntimeError):
    """A session operation was called from the wrong state."""


class SessionInterrupted(CertError):
    """Candidate-side disruption; keeps the partial session state.

    ``answers`` is the ordered answer sequence accumulated before the
    interruption and ``theta`` the last ability estimate.
    """

    def __init__(
        self,
        answers: Sequence["Answer"],
        theta: float,
        reason: Optional[str] = None,
    ):
        msg = f"session interrupted after {len(answers)} answers (theta={theta:.4f})"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.answers = tuple(answers)
        self.theta = float(theta)
        self.reason = reason
