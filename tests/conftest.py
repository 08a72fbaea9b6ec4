from __future__ import annotations

import pytest

from cert_core.config import SessionConfig
from cert_core.types import Challenge, Skill, ValidationStatus


def build_synthetic_catalog(
    *,
    levels: range | list[int] = range(1, 6),
    per_level: int = 1,
    include_unvalidated: bool = True,
) -> list[Challenge]:
    """Create a deterministic synthetic catalog for tests and smoke runs."""

    challenges: list[Challenge] = []
    for level in levels:
        for idx in range(per_level):
            challenges.append(
                Challenge(
                    id=f"c{level}_{idx}",
                    status=ValidationStatus.VALIDATED,
                    skills=[Skill(f"@skill{level}")],
                )
            )
        if include_unvalidated:
            challenges.append(
                Challenge(id=f"u{level}", status=ValidationStatus.UNVALIDATED, skills=[Skill(f"@draft{level}")])
            )
            challenges.append(
                Challenge(id=f"a{level}", status=ValidationStatus.ARCHIVED, skills=[Skill(f"@old{level}")])
            )
    return challenges


@pytest.fixture
def synthetic_catalog() -> list[Challenge]:
    return build_synthetic_catalog()


@pytest.fixture
def cfg() -> SessionConfig:
    return SessionConfig(
        theta_min=1.0,
        theta_max=8.0,
        theta_prior=3.0,
        estimator="rasch",
        se_target=0.3,
        min_answers=3,
        max_answers=4,
        answer_timeout_sec=None,
    )
