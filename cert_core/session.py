# cert_core/session.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Set, Tuple
import logging

from .config import DEBUG_TRACE, TRACE_FIELDS, SessionConfig, load_config
from .errors import NoEligibleChallenge, SessionInterrupted, SessionStateError
from .estimator import Estimator, make_estimator
from .scoring import certified_level, pix_score
from .selector import select_next
from .types import (
    Answer,
    Challenge,
    Estimate,
    ResultCode,
    SessionResult,
    SessionStatus,
    TerminationCause,
)


log = logging.getLogger(__name__)


def _emit_trace(**values: object) -> None:
    if not DEBUG_TRACE:
        return
    ordered = []
    for key in TRACE_FIELDS:
        if key in values:
            ordered.append(f"{key}={values[key]}")
    if ordered:
        log.info("trace %s", " ".join(str(val) for val in ordered))


def stopping_cause(estimate: Estimate, cfg: SessionConfig) -> Optional[TerminationCause]:
    """Return why the session should stop after ``estimate``, or None to go on."""

    if estimate.count >= cfg.min_answers and estimate.se <= cfg.se_target:
        return TerminationCause.PRECISION_REACHED
    if estimate.count >= cfg.max_answers:
        return TerminationCause.MAX_ANSWERS
    return None


class CertificationSession:
    """One candidate's adaptive test.

    Drive it with ``next_challenge()`` / ``submit()`` until ``next_challenge``
    returns None, then call ``finalize()``.  The catalog is only read.
    """

    def __init__(
        self,
        catalog: Iterable[Challenge],
        cfg: Optional[SessionConfig] = None,
        estimator: Optional[Estimator] = None,
    ):
        self.cfg = cfg if cfg is not None else load_config()
        self.catalog: Tuple[Challenge, ...] = tuple(catalog)
        self.estimator: Estimator = estimator if estimator is not None else make_estimator(self.cfg)

        self._estimate: Estimate = self.estimator.initial(self.cfg.theta_prior)
        self._answers: List[Answer] = []
        self._administered: Set[str] = set()
        self._current: Optional[Challenge] = None
        self._status = SessionStatus.SELECTING_NEXT
        self._cause: Optional[TerminationCause] = None
        self._audit_events: List[Dict[str, object]] = []

    # -- read accessors -------------------------------------------------
    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def estimate(self) -> Estimate:
        return self._estimate

    @property
    def theta(self) -> float:
        return self._estimate.theta

    @property
    def answers(self) -> Tuple[Answer, ...]:
        return tuple(self._answers)

    @property
    def administered(self) -> frozenset[str]:
        return frozenset(self._administered)

    @property
    def current(self) -> Optional[Challenge]:
        return self._current

    @property
    def termination_cause(self) -> Optional[TerminationCause]:
        return self._cause

    @property
    def audit_events(self) -> List[Dict[str, object]]:
        return [dict(evt) for evt in self._audit_events]

    # -- transitions ----------------------------------------------------
    def _require(self, expected: SessionStatus, op: str) -> None:
        if self._status is not expected:
            raise SessionStateError(
                f"{op}() needs state {expected.value}, session is {self._status.value}"
            )

    def _terminate(self, cause: TerminationCause) -> None:
        self._status = SessionStatus.TERMINATED
        self._cause = cause
        log.info(
            "session terminated cause=%s answers=%d theta=%.4f se=%.4f",
            cause.value,
            len(self._answers),
            self._estimate.theta,
            self._estimate.se,
        )

    def next_challenge(self) -> Optional[Challenge]:
        if self._status is SessionStatus.TERMINATED:
            return None
        self._require(SessionStatus.SELECTING_NEXT, "next_challenge")
        try:
            challenge = select_next(self._estimate.theta, self.catalog, self._administered)
        except NoEligibleChallenge as exc:
            log.debug("selector exhausted: %s", exc)
            self._terminate(TerminationCause.NO_ELIGIBLE_CHALLENGE)
            return None
        self._current = challenge
        self._administered.add(challenge.id)
        self._status = SessionStatus.AWAITING_ANSWER
        return challenge

    def submit(self, result: object) -> Answer:
        """Record the candidate's result code for the current challenge.

        A malformed code raises MalformedResult before anything is recorded.
        """

        self._require(SessionStatus.AWAITING_ANSWER, "submit")
        answer = Answer(self._current, ResultCode.parse(result))
        before = self._estimate

        self._status = SessionStatus.UPDATING
        try:
            after = self.estimator.update(before, answer)
        except Exception:
            self._status = SessionStatus.AWAITING_ANSWER
            raise

        self._answers.append(answer)
        self._estimate = after
        self._current = None

        challenge_id = answer.challenge.id if answer.challenge is not None else None
        log.debug(
            "update challenge=%s result=%s b=%d theta=%.4f->%.4f se=%.4f n=%d",
            challenge_id,
            answer.result.value,
            answer.max_difficulty,
            before.theta,
            after.theta,
            after.se,
            after.count,
        )
        _emit_trace(
            challenge_id=challenge_id,
            result=answer.result.value,
            outcome=answer.binary_outcome,
            difficulty=answer.max_difficulty,
            theta_before=before.theta,
            theta_after=after.theta,
            se_after=after.se,
        )
        self._audit_events.append({
            "t": datetime.now(timezone.utc).isoformat(),
            "challenge_id": challenge_id,
            "result": answer.result.value,
            "outcome": int(answer.binary_outcome),
            "difficulty": int(answer.max_difficulty),
            "theta_before": float(before.theta),
            "theta_after": float(after.theta),
            "se_after": float(after.se),
        })

        cause = stopping_cause(after, self.cfg)
        if cause is not None:
            self._terminate(cause)
        else:
            self._status = SessionStatus.SELECTING_NEXT
        return answer

    def time_out(self) -> Answer:
        return self.submit(ResultCode.TIMEDOUT)

    def interrupt(self, reason: Optional[str] = None) -> SessionInterrupted:
        """Abort the session and return the error carrying the partial state."""

        if self._status.is_final:
            raise SessionStateError(f"cannot interrupt a {self._status.value} session")
        self._status = SessionStatus.INTERRUPTED
        self._current = None
        log.warning(
            "session interrupted answers=%d theta=%.4f reason=%s",
            len(self._answers),
            self._estimate.theta,
            reason,
        )
        return SessionInterrupted(self._answers, self._estimate.theta, reason)

    def finalize(self) -> SessionResult:
        self._require(SessionStatus.TERMINATED, "finalize")
        theta = self._estimate.theta
        return SessionResult(
            final_ability=theta,
            se=self._estimate.se,
            termination_cause=self._cause,
            answers=tuple(self._answers),
            certified_level=certified_level(theta, self.cfg),
            pix_score=pix_score(theta, self.cfg),
            audit_events=self.audit_events,
        )
