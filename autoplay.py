# autoplay.py
from __future__ import annotations
import argparse, asyncio, json, logging
from dataclasses import replace
from typing import Optional

from cert_core.audit_export import to_json as audit_to_json
from cert_core.catalog import load_catalog
from cert_core.config import load_config
from cert_core.runner import administer
from cert_core.session import CertificationSession
from cert_core.types import Challenge, ResultCode


def _answer_for(challenge: Challenge, profile: str, ability: float) -> ResultCode:
    if profile == "perfect":
        return ResultCode.OK
    if profile == "all-wrong":
        return ResultCode.KO
    if profile == "partial":
        return ResultCode.PARTIAL
    # threshold candidate: solves everything at or below its level
    return ResultCode.OK if challenge.max_difficulty <= ability else ResultCode.KO


def run(profile: str, ability: float, catalog_path: Optional[str], estimator: Optional[str],
        max_answers: Optional[int]) -> dict:
    cfg = load_config()
    if estimator:
        cfg = replace(cfg, estimator=estimator)
    if max_answers:
        cfg = replace(cfg, max_answers=max_answers)
    session = CertificationSession(load_catalog(catalog_path, on_invalid="drop"), cfg=cfg)

    async def respond(challenge: Challenge) -> str:
        return _answer_for(challenge, profile, ability).value

    res = asyncio.run(administer(session, respond))
    out = res.to_dict()
    out["audit_events"] = audit_to_json(res.audit_events)["events"]
    return out


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--profile", choices=["perfect", "all-wrong", "partial", "threshold"], default="threshold")
    ap.add_argument("--ability", type=float, default=5.0, help="true level of the threshold candidate")
    ap.add_argument("--catalog", default=None)
    ap.add_argument("--estimator", choices=["rasch", "elo"], default=None)
    ap.add_argument("--max-answers", type=int, default=None)
    ap.add_argument("-v", "--verbose", action="store_true")
    a = ap.parse_args()
    logging.basicConfig(level=logging.DEBUG if a.verbose else logging.INFO, format="[%(levelname)s] %(message)s")
    result = run(a.profile, a.ability, a.catalog, a.estimator, a.max_answers)
    print(json.dumps(result, indent=2))

if __name__ == "__main__":
    main()
