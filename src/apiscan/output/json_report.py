"""JSON reporter for CI pipelines and dashboards."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any, Dict, List

from apiscan import __version__
from apiscan.findings.models import ScanResult
from apiscan.findings.scoring import calculate_score, score_label


def _options_dict(result: ScanResult) -> Dict[str, Any]:
    return {k: v for k, v in asdict(result.options).items() if v is not None}


def to_dict(result: ScanResult) -> Dict[str, Any]:
    """Convert ScanResult to a JSON-serialisable dict."""
    score = calculate_score(result.stats)

    suppressed_list: List[Dict[str, Any]] = []
    for s in result.suppressed:
        suppressed_list.append({
            "rule_id": s.rule_id,
            "file_path": s.file_path,
            "line": s.line,
            "source": s.source,
        })

    return {
        "version": __version__,
        "id": result.id,
        "scanned_at": result.scanned_at.isoformat(),
        "score": score,
        "score_label": score_label(score),
        "stats": result.stats.to_dict(),
        "issues": [i.to_dict() for i in result.issues],
        "suppressed": suppressed_list,
        "options": _options_dict(result),
    }


def render(result: ScanResult) -> str:
    """Return formatted JSON string."""
    return json.dumps(to_dict(result), indent=2)
