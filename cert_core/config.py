from __future__ import annotations
from dataclasses import dataclass, fields, replace
from typing import Optional
import os, json, pathlib, logging

log = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


THETA_MIN: float = 1.0
THETA_MAX: float = 8.0
THETA_PRIOR: float = 3.0

RASCH_PRIOR_VAR: float = 1.0
RASCH_ETA: float = 1.0

ELO_K: float = 1.0
ELO_K_DECAY: float = 0.25

ESTIMATOR: str = "rasch"

SE_TARGET: float = 0.45
MIN_ANSWERS: int = 3
MAX_ANSWERS: int = 20

ANSWER_TIMEOUT_SEC: Optional[float] = None

PIX_PER_LEVEL: int = 8

CATALOG_MIN_PER_DIFFICULTY: int = 2

DEBUG_TRACE: bool = False
TRACE_FIELDS: tuple[str, ...] = (
    "challenge_id",
    "result",
    "outcome",
    "difficulty",
    "theta_before",
    "theta_after",
    "se_after",
)
# // env overrides for staging/ops; defaults remain conservative.
THETA_MIN = _env_float("CERT_THETA_MIN", THETA_MIN)
THETA_MAX = _env_float("CERT_THETA_MAX", THETA_MAX)
THETA_PRIOR = _env_float("CERT_THETA_PRIOR", THETA_PRIOR)
RASCH_PRIOR_VAR = _env_float("CERT_RASCH_PRIOR_VAR", RASCH_PRIOR_VAR)
RASCH_ETA = _env_float("CERT_RASCH_ETA", RASCH_ETA)
ELO_K = _env_float("CERT_ELO_K", ELO_K)
ELO_K_DECAY = _env_float("CERT_ELO_K_DECAY", ELO_K_DECAY)
ESTIMATOR = _env_str("CERT_ESTIMATOR", ESTIMATOR)
SE_TARGET = _env_float("CERT_SE_TARGET", SE_TARGET)
MIN_ANSWERS = _env_int("CERT_MIN_ANSWERS", MIN_ANSWERS)
MAX_ANSWERS = _env_int("CERT_MAX_ANSWERS", MAX_ANSWERS)
ANSWER_TIMEOUT_SEC = _env_float("CERT_ANSWER_TIMEOUT_SEC", ANSWER_TIMEOUT_SEC)
PIX_PER_LEVEL = _env_int("CERT_PIX_PER_LEVEL", PIX_PER_LEVEL)
CATALOG_MIN_PER_DIFFICULTY = _env_int("CERT_CATALOG_MIN_PER_DIFFICULTY", CATALOG_MIN_PER_DIFFICULTY)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", DEBUG_TRACE)


@dataclass(frozen=True)
class SessionConfig:
    """Per-session tuning; defaults come from the module constants above."""

    theta_min: float = THETA_MIN
    theta_max: float = THETA_MAX
    theta_prior: float = THETA_PRIOR
    prior_var: float = RASCH_PRIOR_VAR
    eta: float = RASCH_ETA
    elo_k: float = ELO_K
    elo_k_decay: float = ELO_K_DECAY
    estimator: str = ESTIMATOR
    se_target: float = SE_TARGET
    min_answers: int = MIN_ANSWERS
    max_answers: int = MAX_ANSWERS
    answer_timeout_sec: Optional[float] = ANSWER_TIMEOUT_SEC

    def __post_init__(self) -> None:
        if self.theta_min >= self.theta_max:
            raise ValueError(f"theta_min ({self.theta_min}) must be below theta_max ({self.theta_max})")
        if not self.theta_min <= self.theta_prior <= self.theta_max:
            raise ValueError(f"theta_prior ({self.theta_prior}) outside [{self.theta_min}, {self.theta_max}]")
        if self.prior_var <= 0:
            raise ValueError("prior_var must be positive")
        if self.max_answers < 1:
            raise ValueError("max_answers must be at least 1")
        if self.min_answers < 0:
            raise ValueError("min_answers cannot be negative")
        if self.min_answers > self.max_answers:
            raise ValueError(f"min_answers ({self.min_answers}) exceeds max_answers ({self.max_answers})")
        if self.se_target <= 0:
            raise ValueError("se_target must be positive")
        if self.eta <= 0:
            raise ValueError("eta must be positive")
        if self.elo_k <= 0:
            raise ValueError("elo_k must be positive")
        if self.elo_k_decay < 0:
            raise ValueError("elo_k_decay cannot be negative")
        if self.answer_timeout_sec is not None and self.answer_timeout_sec <= 0:
            raise ValueError("answer_timeout_sec must be positive when set")

    def clamp(self, theta: float) -> float:
        return max(self.theta_min, min(self.theta_max, float(theta)))


def load_config(path: str | pathlib.Path = "config.json") -> SessionConfig:
    """Build a SessionConfig from defaults, overlaid with ``config.json`` keys."""

    cfg = SessionConfig()
    p = pathlib.Path(path)
    if not p.exists():
        return cfg
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log.warning("ignoring unreadable config file %s: %s", p, exc)
        return cfg
    if not isinstance(raw, dict):
        log.warning("ignoring config file %s: expected a JSON object", p)
        return cfg
    known = {f.name for f in fields(SessionConfig)}
    overrides = {k: v for k, v in raw.items() if k in known}
    unknown = sorted(set(raw) - known)
    if unknown:
        log.debug("config keys not used by the engine: %s", ", ".join(unknown))
    return replace(cfg, **overrides)
