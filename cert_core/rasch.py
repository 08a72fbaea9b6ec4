"""Rasch 1PL utilities used by the ability estimators.

This module provides a minimal set of helpers for computing logistic
probabilities, Fisher information, and a damped MAP (Newton) update for the
candidate ability parameter.  Item difficulty ``b`` is expressed on the same
scale as the skill difficulties (levels 1..8), so ``θ`` reads directly as a
level.
"""
from __future__ import annotations

import math
from typing import Optional, Tuple

__all__ = [
    "sigma",
    "rasch_p",
    "item_info",
    "map_update",
    "se_from_info",
]

_EPS = 1e-6


def sigma(x: float) -> float:
    """Return the logistic function ``σ(x) = 1 / (1 + e^{−x})``.

    The implementation guards against overflow for large negative inputs by
    handling the positive and negative halves of the real line separately.
    """

    if x >= 0:
        z = math.exp(-x)
        return 1.0 / (1.0 + z)
    z = math.exp(x)
    return z / (1.0 + z)


def rasch_p(theta: float, b: float) -> float:
    """Compute the Rasch 1PL probability of a correct answer.

    Parameters
    ----------
    theta: float
        Current estimate of the candidate ability.
    b: float
        Item difficulty parameter.

    Returns
    -------
    float
        ``σ(theta − b)``
    """

    return sigma(theta - b)


def item_info(theta: float, b: float, a: float = 1.0) -> float:
    """Fisher information contributed by a single 1PL item.

    Peaks at ``theta == b``, which is why the selector targets the challenge
    whose difficulty is closest to the current estimate.
    """

    p = rasch_p(theta, b)
    info = (a * a) * p * (1.0 - p)
    return max(info, 0.0)


def map_update(
    theta: float,
    b: float,
    correct: bool,
    a: float = 1.0,
    prior_var: float = 1.0,
    eta: float = 1.0,
    bounds: Optional[Tuple[float, float]] = None,
) -> float:
    """Perform a damped Newton/MAP update for the Rasch person ability.

    ``prior_var`` adds Gaussian precision to the curvature, damping the step,
    while ``eta`` throttles it further.  The step has the sign of
    ``correct − p`` so a success never lowers ``theta`` and a failure never
    raises it.  When ``bounds`` is given the result is clamped into it.
    """

    p = rasch_p(theta, b)
    grad = ((1.0 if correct else 0.0) - p) * a
    info = (a * a) * p * (1.0 - p) + (1.0 / max(prior_var, _EPS))
    step = eta * grad / max(info, _EPS)
    out = float(theta + step)
    if bounds is not None:
        lo, hi = bounds
        out = max(lo, min(hi, out))
    return out


def se_from_info(info_total: float) -> float:
    """Convert accumulated Fisher information into a standard error."""

    return 1.0 / math.sqrt(max(info_total, _EPS))
