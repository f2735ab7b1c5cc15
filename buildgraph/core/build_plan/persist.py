from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from buildgraph.core.build_plan.models import BuildPlan

_PLAN_ID_RE = re.compile(r"[0-9a-f]{64}")


@dataclass(frozen=True)
class PlanPointer:
    plan_id: str
    file_path: str
    created_ts: Optional[str] = None


def _plans_dir(out_dir: Path) -> Path:
    d = Path(out_dir) / ".buildgraph" / "plans"
    d.mkdir(parents=True, exist_ok=True)
    return d


def save_plan(out_dir: Path, plan: BuildPlan) -> str:
    payload: Dict[str, Any] = plan.to_dict()
    plan_id = payload["plan_id"]
    payload["created_ts"] = (
        datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
    )
    out = _plans_dir(out_dir) / f"{plan_id}.json"
    out.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return plan_id


def load_plan(out_dir: Path, plan_id: str) -> BuildPlan:
    if not _PLAN_ID_RE.fullmatch(plan_id or ""):
        raise ValueError(f"Invalid plan_id: {plan_id!r}")
    p = _plans_dir(out_dir) / f"{plan_id}.json"
    if not p.exists():
        raise FileNotFoundError(f"Plan not found: {p}")
    return BuildPlan.from_dict(json.loads(p.read_text(encoding="utf-8")))


def list_plans(out_dir: Path, limit: int = 50) -> List[PlanPointer]:
    files = sorted(_plans_dir(out_dir).glob("*.json"), key=lambda p: p.stat().st_mtime, reverse=True)
    out: List[PlanPointer] = []
    for p in files[: max(1, min(limit, 200))]:
        created_ts = None
        try:
            created_ts = json.loads(p.read_text(encoding="utf-8")).get("created_ts")
        except (OSError, json.JSONDecodeError):
            created_ts = None
        out.append(PlanPointer(plan_id=p.stem, file_path=str(p), created_ts=created_ts))
    return out
