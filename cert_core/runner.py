"""Async driver for a certification session.

The only blocking point of a session is waiting for the candidate's answer.
:func:`administer` awaits it with an optional timeout, synthesising a
``timedout`` answer when the deadline passes so the session always moves on.
Cancellation or a failing answer source interrupts the session and surfaces
:class:`~cert_core.errors.SessionInterrupted` with the partial answers.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from .errors import MalformedResult
from .session import CertificationSession
from .types import Challenge, SessionResult, SessionStatus

__all__ = ["AnswerSource", "administer"]

log = logging.getLogger(__name__)

AnswerSource = Callable[[Challenge], Awaitable[object]]


async def administer(
    session: CertificationSession,
    respond: AnswerSource,
    timeout: Optional[float] = None,
) -> SessionResult:
    """Run ``session`` to termination, asking ``respond`` for each result code.

    ``timeout`` defaults to the session's ``answer_timeout_sec``.
    Malformed result codes propagate unchanged and leave the session waiting
    for a valid answer to the same challenge; calling ``administer`` again
    asks for that challenge first.
    """

    if timeout is None:
        timeout = session.cfg.answer_timeout_sec

    while True:
        if session.status is SessionStatus.AWAITING_ANSWER:
            challenge = session.current
        else:
            challenge = session.next_challenge()
        if challenge is None:
            break
        try:
            raw = await asyncio.wait_for(respond(challenge), timeout)
        except asyncio.TimeoutError:
            log.info("answer timed out challenge=%s after %ss", challenge.id, timeout)
            session.time_out()
            continue
        except asyncio.CancelledError as exc:
            raise session.interrupt("cancelled") from exc
        except MalformedResult:
            raise
        except Exception as exc:
            raise session.interrupt(f"{type(exc).__name__}: {exc}") from exc
        session.submit(raw)

    return session.finalize()
