"""Build and write the JSON report of a scan session."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .result import risk_level, risk_score
from .session import ScanSession


def build_report(session: ScanSession, timestamp: Optional[datetime] = None) -> Dict[str, Any]:
    """Return a serializable report of every unit and its active findings."""

    moment = timestamp or datetime.now(timezone.utc)
    active = session.store.all_active_findings()
    summary = session.aggregate_by_severity()
    scripts = []
    for unit_id, unit in session.units.items():
        scripts.append(
            {
                "url": unit_id,
                "size": unit.size,
                "first_party": unit.first_party,
                "has_source_map": unit.has_source_map,
                "scan_error": session.failure(unit_id) or unit.fetch_error,
                "findings": [finding.to_report_dict() for finding in session.active_findings(unit_id)],
            }
        )
    return {
        "timestamp": moment.isoformat(),
        "scripts_analyzed": len(session.units),
        "total_findings": summary.total,
        "findings_by_risk": summary.to_dict(),
        "risk_score": risk_score(active),
        "risk_level": risk_level(active),
        "scripts": scripts,
    }


def write_report(report: Dict[str, Any], output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(report, indent=2), encoding="utf-8")
