from __future__ import annotations

import asyncio
from dataclasses import replace

import pytest

from cert_core.errors import MalformedResult, SessionInterrupted
from cert_core.runner import administer
from cert_core.session import CertificationSession
from cert_core.types import ResultCode, SessionStatus, TerminationCause

from tests.conftest import build_synthetic_catalog


def test_administer_runs_session_to_completion(cfg):
    session = CertificationSession(build_synthetic_catalog(), cfg=cfg)

    async def respond(challenge):
        await asyncio.sleep(0)
        return "ok"

    result = asyncio.run(administer(session, respond))

    assert result.termination_cause is TerminationCause.MAX_ANSWERS
    assert len(result.answers) == cfg.max_answers
    assert all(a.result is ResultCode.OK for a in result.answers)


def test_slow_answer_is_synthesised_as_timeout(cfg):
    session = CertificationSession(build_synthetic_catalog(), cfg=cfg)
    calls = []

    async def respond(challenge):
        calls.append(challenge.id)
        if len(calls) == 1:
            await asyncio.sleep(10)
        return "ok"

    result = asyncio.run(administer(session, respond, timeout=0.01))

    assert result.answers[0].result is ResultCode.TIMEDOUT
    assert result.answers[0].binary_outcome == 0
    assert all(a.result is ResultCode.OK for a in result.answers[1:])
    assert len(result.answers) == cfg.max_answers


def test_timeout_defaults_to_session_config(cfg):
    session = CertificationSession(build_synthetic_catalog(), cfg=replace(cfg, answer_timeout_sec=0.01, min_answers=1, max_answers=2))

    async def respond(challenge):
        await asyncio.sleep(10)
        return "ok"

    result = asyncio.run(administer(session, respond))
    assert [a.result for a in result.answers] == [ResultCode.TIMEDOUT, ResultCode.TIMEDOUT]


def test_cancellation_interrupts_with_partial_answers(cfg):
    session = CertificationSession(build_synthetic_catalog(), cfg=cfg)

    async def main():
        blocked = asyncio.Event()
        calls = []

        async def respond(challenge):
            calls.append(challenge.id)
            if len(calls) == 1:
                return "ok"
            blocked.set()
            await asyncio.Event().wait()

        task = asyncio.create_task(administer(session, respond))
        await blocked.wait()
        task.cancel()
        with pytest.raises(SessionInterrupted) as info:
            await task
        return info.value

    err = asyncio.run(main())

    assert len(err.answers) == 1
    assert err.answers[0].result is ResultCode.OK
    assert err.theta == session.theta
    assert err.reason == "cancelled"
    assert isinstance(err.__cause__, asyncio.CancelledError)
    assert session.status is SessionStatus.INTERRUPTED


def test_disconnect_interrupts_session(cfg):
    session = CertificationSession(build_synthetic_catalog(), cfg=cfg)

    async def respond(challenge):
        raise ConnectionError("socket closed")

    with pytest.raises(SessionInterrupted) as info:
        asyncio.run(administer(session, respond))

    assert info.value.answers == ()
    assert info.value.theta == cfg.theta_prior
    assert isinstance(info.value.__cause__, ConnectionError)
    assert "socket closed" in info.value.reason


def test_malformed_result_propagates(cfg):
    session = CertificationSession(build_synthetic_catalog(), cfg=cfg)

    async def respond(challenge):
        return "meh"

    with pytest.raises(MalformedResult):
        asyncio.run(administer(session, respond))
    assert session.status is SessionStatus.AWAITING_ANSWER
    assert session.answers == ()


def test_administer_resumes_after_malformed_result(cfg):
    session = CertificationSession(build_synthetic_catalog(), cfg=cfg)
    asked = []

    async def garbled(challenge):
        return "meh"

    async def respond(challenge):
        asked.append(challenge.id)
        return "ok"

    with pytest.raises(MalformedResult):
        asyncio.run(administer(session, garbled))
    pending = session.current.id

    result = asyncio.run(administer(session, respond))

    assert asked[0] == pending == "c3_0"
    assert result.answers[0].challenge.id == pending
    assert len(result.answers) == cfg.max_answers
    assert result.termination_cause is TerminationCause.MAX_ANSWERS


def test_sessions_run_concurrently_on_shared_catalog(cfg):
    catalog = tuple(build_synthetic_catalog(levels=range(1, 9), per_level=2))

    async def strong(challenge):
        await asyncio.sleep(0)
        return "ok"

    async def weak(challenge):
        await asyncio.sleep(0)
        return "ko"

    async def main():
        sessions = [CertificationSession(catalog, cfg=cfg) for _ in range(2)]
        return await asyncio.gather(administer(sessions[0], strong), administer(sessions[1], weak))

    high, low = asyncio.run(main())
    assert high.final_ability > cfg.theta_prior > low.final_ability
