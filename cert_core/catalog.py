
from __future__ import annotations
import json, logging, pathlib, importlib.resources as ir
from typing import Iterable, List, Literal, Mapping, Optional, Tuple

from .errors import CatalogError, InvalidSkillName
from .types import Challenge, Skill, ValidationStatus

log = logging.getLogger(__name__)

OnInvalid = Literal["reject", "drop"]


def parse_challenge(record: Mapping[str, object]) -> Challenge:
    """Build a Challenge from one catalog record.

    Raises InvalidSkillName for a skill without trailing difficulty and
    CatalogError for any other malformed field.
    """
    if not isinstance(record, Mapping):
        raise CatalogError(f"catalog record must be an object, got {type(record).__name__}")
    cid = record.get("id")
    if cid is None or not str(cid).strip():
        raise CatalogError(f"catalog record without id: {record!r}")
    raw_skills = record.get("skills") or []
    if isinstance(raw_skills, str) or not isinstance(raw_skills, (list, tuple)):
        raise CatalogError(f"challenge {cid}: skills must be a list of names")
    skills = [Skill(str(name)) for name in raw_skills]
    status = ValidationStatus.parse(record.get("status", ""))
    return Challenge(id=str(cid), status=status, skills=skills)


def challenges_from_records(
    records: Iterable[Mapping[str, object]],
    on_invalid: OnInvalid = "reject",
) -> Tuple[Challenge, ...]:
    if on_invalid not in ("reject", "drop"):
        raise ValueError(f"on_invalid must be 'reject' or 'drop', got {on_invalid!r}")
    out: List[Challenge] = []
    seen: set[str] = set()
    for rec in records:
        try:
            ch = parse_challenge(rec)
        except InvalidSkillName as exc:
            if on_invalid == "reject":
                raise
            log.warning("dropping challenge %s: %s", rec.get("id"), exc)
            continue
        if ch.id in seen:
            raise CatalogError(f"duplicate challenge id {ch.id!r}")
        seen.add(ch.id)
        out.append(ch)
    return tuple(out)


def _read_records(path: Optional[str | pathlib.Path]) -> list:
    if path is None:
        data = ir.files(__package__).joinpath("data").joinpath("catalog.json").read_text(encoding="utf-8")
    else:
        data = pathlib.Path(path).read_text(encoding="utf-8")
    raw = json.loads(data)
    if not isinstance(raw, list):
        raise CatalogError("catalog file must hold a JSON list of challenges")
    return raw


def load_catalog(
    path: Optional[str | pathlib.Path] = None,
    on_invalid: OnInvalid = "reject",
) -> Tuple[Challenge, ...]:
    """Load the challenge catalog (the packaged sample when ``path`` is None)."""
    catalog = challenges_from_records(_read_records(path), on_invalid=on_invalid)
    log.debug("loaded %d challenges (%d validated)", len(catalog), sum(c.is_validated for c in catalog))
    return catalog
