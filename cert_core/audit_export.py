"""Export per-answer audit events as a JSON-safe payload.

Events are checked, not repaired: a missing or mistyped field raises
``ValueError`` naming the event index and the field.
"""
from __future__ import annotations

import math
from typing import Any, Callable, Dict, Iterable, List, Mapping

from .types import ResultCode

_FIELDS: tuple[str, ...] = (
    "t",
    "challenge_id",
    "result",
    "outcome",
    "difficulty",
    "theta_before",
    "theta_after",
    "se_after",
)


def _as_int(val: Any) -> int:
    if isinstance(val, bool) or not isinstance(val, int):
        raise TypeError(f"expected int, got {val!r}")
    return val


def _as_float(val: Any) -> float:
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise TypeError(f"expected number, got {val!r}")
    if not math.isfinite(val):
        raise ValueError(f"expected finite number, got {val!r}")
    return float(val)


def _as_text(val: Any) -> str:
    if not isinstance(val, str) or not val:
        raise TypeError(f"expected non-empty string, got {val!r}")
    return val


def _as_result(val: Any) -> str:
    return ResultCode(_as_text(val)).value


def _as_outcome(val: Any) -> int:
    out = _as_int(val)
    if out not in (0, 1):
        raise ValueError(f"outcome must be 0 or 1, got {out}")
    return out


def _as_challenge_id(val: Any) -> str | None:
    return None if val is None else _as_text(val)


_CHECKS: Dict[str, Callable[[Any], Any]] = {
    "t": _as_text,
    "challenge_id": _as_challenge_id,
    "result": _as_result,
    "outcome": _as_outcome,
    "difficulty": _as_int,
    "theta_before": _as_float,
    "theta_after": _as_float,
    "se_after": _as_float,
}


def _checked_event(idx: int, event: Any) -> Dict[str, Any]:
    if not isinstance(event, Mapping):
        raise ValueError(f"audit event {idx} is not a mapping: {event!r}")
    out: Dict[str, Any] = {}
    for key in _FIELDS:
        if key not in event:
            raise ValueError(f"audit event {idx} lacks {key!r}")
        try:
            out[key] = _CHECKS[key](event[key])
        except (TypeError, ValueError) as exc:
            raise ValueError(f"audit event {idx} field {key!r}: {exc}") from exc
    return out


def to_json(events: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """Return ``{"events": [...]}`` with the fixed audit fields, in order."""

    checked: List[Dict[str, Any]] = [_checked_event(i, evt) for i, evt in enumerate(events)]
    return {"events": checked}


__all__ = ["to_json"]
