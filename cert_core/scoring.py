from __future__ import annotations
import math
from typing import Optional

from .config import PIX_PER_LEVEL, SessionConfig


def _clamped(theta: float, cfg: Optional[SessionConfig]) -> float:
    cfg = cfg or SessionConfig()
    return cfg.clamp(theta)


def certified_level(theta: float, cfg: Optional[SessionConfig] = None) -> int:
    """Highest whole level reached by the ability estimate."""
    # tolerate float noise just under an integer level
    return int(math.floor(_clamped(theta, cfg) + 1e-9))


def pix_score(theta: float, cfg: Optional[SessionConfig] = None, per_level: int = PIX_PER_LEVEL) -> int:
    """Scale θ onto the pix axis (``per_level`` pix for each level)."""
    return int(round(_clamped(theta, cfg) * per_level))
