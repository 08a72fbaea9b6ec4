from __future__ import annotations

import pytest

from cert_core.errors import CatalogError, InvalidSkillName, MalformedResult
from cert_core.types import (
    DEFAULT_DIFFICULTY,
    Answer,
    Challenge,
    ResultCode,
    Skill,
    ValidationStatus,
)


@pytest.mark.parametrize(
    "name, difficulty",
    [("url1", 1), ("@web5", 5), ("@info12", 12), ("recherche 3", 3)],
)
def test_skill_difficulty_comes_from_trailing_number(name, difficulty):
    assert Skill(name).difficulty == difficulty


@pytest.mark.parametrize("name", ["web", "@url", "", "url0", "5web"])
def test_skill_without_trailing_difficulty_is_rejected(name):
    with pytest.raises(InvalidSkillName):
        Skill(name)


def test_max_difficulty_takes_the_hardest_skill():
    url1 = Skill("url1")
    web5 = Skill("web5")
    challenge = Challenge("recXXX", ValidationStatus.VALIDATED, [url1, web5])
    answer = Answer(challenge, ResultCode.OK)

    assert answer.max_difficulty == 5
    assert answer.binary_outcome == 1


def test_max_difficulty_defaults_when_challenge_is_missing():
    answer = Answer(None, "ok")

    assert answer.max_difficulty == DEFAULT_DIFFICULTY == 2
    assert answer.binary_outcome == 1


def test_empty_skill_set_and_partial_result():
    challenge = Challenge("recXXX", "validé", [])
    answer = Answer(challenge, "partial")

    assert answer.max_difficulty == 2
    assert answer.binary_outcome == 0


def test_single_easy_skill_is_not_floored():
    challenge = Challenge("recXXX", ValidationStatus.VALIDATED, [Skill("url1")])
    assert Answer(challenge, "ko").max_difficulty == 1


@pytest.mark.parametrize("code", [c for c in ResultCode if c is not ResultCode.OK])
def test_every_non_ok_result_scores_zero(code):
    challenge = Challenge("recXXX", ValidationStatus.VALIDATED, [Skill("web3")])
    assert Answer(challenge, code).binary_outcome == 0


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("ok", ResultCode.OK),
        (" OK ", ResultCode.OK),
        ("partially", ResultCode.PARTIAL),
        ("aband", ResultCode.SKIPPED),
        ("timedout", ResultCode.TIMEDOUT),
    ],
)
def test_result_code_parsing_accepts_known_spellings(raw, expected):
    assert ResultCode.parse(raw) is expected


@pytest.mark.parametrize("raw", ["maybe", "", None, 1, "okk"])
def test_malformed_result_codes_fail_fast(raw):
    with pytest.raises(MalformedResult):
        Answer(None, raw)


def test_validation_status_aliases():
    assert Challenge("a", "validé").status is ValidationStatus.VALIDATED
    assert Challenge("b", "archivé").status is ValidationStatus.ARCHIVED
    assert Challenge("c", "proposé").status is ValidationStatus.UNVALIDATED
    with pytest.raises(CatalogError):
        Challenge("d", "lost")


def test_value_objects_are_immutable():
    challenge = Challenge("recXXX", ValidationStatus.VALIDATED, [Skill("web3")])
    answer = Answer(challenge, "ok")

    with pytest.raises(AttributeError):
        answer.result = ResultCode.KO  # type: ignore[misc]
    assert isinstance(challenge.skills, frozenset)
    assert answer.to_dict() == {"challenge_id": "recXXX", "result": "ok", "outcome": 1, "difficulty": 3}
