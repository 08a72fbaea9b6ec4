"""Ability estimation policies.

Any object with ``initial(theta0)`` and ``update(estimate, answer)`` can drive
a session.  Two policies ship with the engine:

* :class:`RaschEstimator` (default) applies one damped MAP step of the
  1PL likelihood per answer.
* :class:`EloEstimator` applies ``θ ← θ + K_n (y − P)`` with ``K_n`` shrinking
  as answers accumulate.

Both read the answer through ``binary_outcome`` and ``max_difficulty`` only,
clamp θ into the configured range, and accumulate Fisher information so the
stopping rule has a standard error to look at.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from . import rasch
from .config import SessionConfig
from .types import Answer, Estimate

__all__ = [
    "Estimator",
    "RaschEstimator",
    "EloEstimator",
    "make_estimator",
    "replay",
]

log = logging.getLogger(__name__)


class Estimator(Protocol):
    def initial(self, theta0: float) -> Estimate: ...

    def update(self, estimate: Estimate, answer: Answer) -> Estimate: ...


class _InfoTracking:
    """Shared prior and information bookkeeping."""

    def __init__(self, cfg: Optional[SessionConfig] = None):
        self.cfg = cfg or SessionConfig()

    @property
    def bounds(self) -> tuple[float, float]:
        return (self.cfg.theta_min, self.cfg.theta_max)

    def initial(self, theta0: float) -> Estimate:
        info0 = 1.0 / self.cfg.prior_var
        return Estimate(
            theta=self.cfg.clamp(theta0),
            se=rasch.se_from_info(info0),
            info_total=info0,
            count=0,
        )

    def _absorb(self, estimate: Estimate, theta_after: float, b: float) -> Estimate:
        info_delta = rasch.item_info(theta_after, b)
        info_total = max(estimate.info_total + info_delta, 1e-6)
        return Estimate(
            theta=theta_after,
            se=rasch.se_from_info(info_total),
            info_total=info_total,
            count=estimate.count + 1,
        )


class RaschEstimator(_InfoTracking):
    name = "rasch"

    def update(self, estimate: Estimate, answer: Answer) -> Estimate:
        b = answer.max_difficulty
        theta_after = rasch.map_update(
            estimate.theta,
            b,
            bool(answer.binary_outcome),
            a=1.0,
            prior_var=self.cfg.prior_var,
            eta=self.cfg.eta,
            bounds=self.bounds,
        )
        return self._absorb(estimate, theta_after, b)


class EloEstimator(_InfoTracking):
    name = "elo"

    def step_size(self, count: int) -> float:
        return self.cfg.elo_k / (1.0 + self.cfg.elo_k_decay * max(count, 0))

    def update(self, estimate: Estimate, answer: Answer) -> Estimate:
        b = answer.max_difficulty
        p = rasch.rasch_p(estimate.theta, b)
        k = self.step_size(estimate.count)
        theta_after = self.cfg.clamp(estimate.theta + k * (answer.binary_outcome - p))
        return self._absorb(estimate, theta_after, b)


_REGISTRY: Dict[str, Callable[[SessionConfig], Estimator]] = {
    RaschEstimator.name: RaschEstimator,
    EloEstimator.name: EloEstimator,
}


def make_estimator(cfg: Optional[SessionConfig] = None) -> Estimator:
    cfg = cfg or SessionConfig()
    key = (cfg.estimator or "").strip().lower()
    factory = _REGISTRY.get(key)
    if factory is None:
        raise ValueError(f"unknown estimator {cfg.estimator!r}; expected one of {sorted(_REGISTRY)}")
    return factory(cfg)


def replay(estimator: Estimator, answers: Iterable[Answer], theta0: float) -> List[Estimate]:
    """Re-run an answer sequence and return the estimate after every step.

    The first element is the prior estimate, so the list has
    ``len(answers) + 1`` entries.
    """

    est = estimator.initial(theta0)
    trajectory = [est]
    for answer in answers:
        est = estimator.update(est, answer)
        trajectory.append(est)
    log.debug("replayed %d answers, final theta=%.4f se=%.4f", est.count, est.theta, est.se)
    return trajectory
