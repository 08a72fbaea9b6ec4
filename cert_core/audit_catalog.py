
from __future__ import annotations

import argparse
import json
import math
from pathlib import Path
from typing import Iterable

from . import config
from .catalog import load_catalog
from .types import Challenge, ValidationStatus


def _levels() -> tuple[int, ...]:
    lo = int(math.ceil(config.THETA_MIN))
    hi = int(math.floor(config.THETA_MAX))
    return tuple(range(lo, hi + 1))


def audit_challenges(challenges: Iterable[Challenge]) -> dict[str, object]:
    levels = _levels()
    coverage: dict[int, int] = {lvl: 0 for lvl in levels}
    statuses: dict[str, int] = {s.value: 0 for s in ValidationStatus}
    totals = {"challenges": 0, "validated": 0, "validated_without_skills": 0}

    for ch in challenges:
        totals["challenges"] += 1
        statuses[ch.status.value] += 1
        if not ch.is_validated:
            continue
        totals["validated"] += 1
        if not ch.skills:
            totals["validated_without_skills"] += 1
        lvl = ch.max_difficulty
        coverage[lvl] = coverage.get(lvl, 0) + 1

    warnings: list[str] = []
    for lvl in levels:
        if coverage.get(lvl, 0) < config.CATALOG_MIN_PER_DIFFICULTY:
            warnings.append(
                f"difficulty {lvl} has {coverage.get(lvl, 0)} validated challenges "
                f"(<{config.CATALOG_MIN_PER_DIFFICULTY})"
            )
    outside = sorted(lvl for lvl in coverage if lvl not in levels and coverage[lvl])
    for lvl in outside:
        warnings.append(f"difficulty {lvl} lies outside the ability range [{levels[0]}, {levels[-1]}]")
    if totals["validated_without_skills"]:
        warnings.append(
            f"{totals['validated_without_skills']} validated challenges carry no skill "
            f"(scored at the default difficulty)"
        )

    return {"coverage": coverage, "statuses": statuses, "warnings": warnings, "totals": totals}


def print_report(summary: dict[str, object]) -> None:
    coverage: dict[int, int] = summary["coverage"]  # type: ignore[assignment]
    print("=== Catalog Coverage (validated) ===")
    print("  " + "  ".join(f"{lvl}:{coverage[lvl]:3d}" for lvl in sorted(coverage)))
    print("\nStatuses:", summary["statuses"])

    warnings: list[str] = summary["warnings"]  # type: ignore[assignment]
    if warnings:
        print("\nWarnings:")
        for msg in warnings:
            print(f" - {msg}")
    else:
        print("\nNo warnings.")

    print("\nTotals:", summary["totals"])


def write_summary(summary: dict[str, object], path: Path = Path("catalog_audit.json")) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True)
    path.write_text(text + "\n", encoding="utf-8")
    return text


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Audit difficulty coverage of a challenge catalog.")
    ap.add_argument("catalog", nargs="?", default=None, help="catalog JSON (default: packaged sample)")
    ap.add_argument("--out", type=Path, default=None, help="write the JSON summary here")
    ap.add_argument("--drop-invalid", action="store_true", help="drop challenges with invalid skill names")
    args = ap.parse_args(argv)

    challenges = load_catalog(args.catalog, on_invalid="drop" if args.drop_invalid else "reject")
    summary = audit_challenges(challenges)
    print_report(summary)
    if args.out is not None:
        write_summary(summary, path=args.out)
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
