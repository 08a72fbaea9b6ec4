# cert_core/selector.py
from __future__ import annotations

import logging
from typing import AbstractSet, Iterable, List

from .errors import NoEligibleChallenge
from .types import Challenge

log = logging.getLogger(__name__)


def eligible_challenges(
    catalog: Iterable[Challenge],
    administered: AbstractSet[str],
) -> List[Challenge]:
    """Validated challenges that have not been administered yet."""
    return [c for c in catalog if c.is_validated and c.id not in administered]


def select_next(
    theta: float,
    catalog: Iterable[Challenge],
    administered: AbstractSet[str],
) -> Challenge:
    """
    Pick the challenge whose difficulty is closest to ``theta``.

    Under the 1PL model an item is most informative when its difficulty equals
    the ability, so minimising ``|difficulty - theta|`` maximises Fisher
    information. Ties go to the lowest challenge id.

    Raises NoEligibleChallenge when nothing is left to administer.
    """
    pool = eligible_challenges(catalog, administered)
    if not pool:
        raise NoEligibleChallenge(
            f"no validated challenge left ({len(administered)} administered)"
        )

    best = min(pool, key=lambda c: (abs(c.max_difficulty - theta), str(c.id)))
    log.debug(
        "select challenge=%s difficulty=%d theta=%.4f pool=%d",
        best.id,
        best.max_difficulty,
        theta,
        len(pool),
    )
    return best
