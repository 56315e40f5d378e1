"""SARIF v2.1.0 reporter for GitHub Code Scanning and other SARIF viewers."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from apiscan import __version__
from apiscan.findings.models import ScanIssue, ScanResult
from apiscan.rules.registry import RuleRegistry

SARIF_SCHEMA = (
    "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/main/sarif-2.1/schema/"
    "sarif-schema-2.1.0.json"
)

_SEVERITY_MAP = {
    "critical": "error",
    "high": "error",
    "medium": "warning",
    "low": "note",
    "info": "note",
}


def _level(severity: str) -> str:
    return _SEVERITY_MAP.get(severity, "warning")


def _rule_entry(issue: ScanIssue, registry: Optional[RuleRegistry]) -> Dict[str, Any]:
    rule = registry.get(issue.rule_id) if registry is not None else None
    description = rule.definition.description if rule is not None else issue.rule_name
    severity = rule.severity if rule is not None else issue.severity
    return {
        "id": issue.rule_id,
        "name": issue.rule_name,
        "shortDescription": {"text": issue.rule_name},
        "fullDescription": {"text": description},
        "defaultConfiguration": {"level": _level(severity)},
        "properties": {
            "category": issue.category,
            "security-severity": _security_severity(severity),
        },
    }


def to_dict(result: ScanResult, registry: Optional[RuleRegistry] = None) -> Dict[str, Any]:
    """Convert ScanResult to a SARIF v2.1.0 dict."""
    rules: List[Dict[str, Any]] = []
    seen_rules: set[str] = set()
    results: List[Dict[str, Any]] = []

    for issue in result.issues:
        # Rule definition (only once per rule_id)
        if issue.rule_id not in seen_rules:
            seen_rules.add(issue.rule_id)
            rules.append(_rule_entry(issue, registry))

        region: Dict[str, Any] = {
            "startLine": max(issue.line, 1),
            "startColumn": max(issue.column, 1),
        }
        if issue.code_snippet:
            region["snippet"] = {"text": issue.code_snippet}

        results.append({
            "ruleId": issue.rule_id,
            "level": _level(issue.severity),
            "message": {"text": f"{issue.message}. {issue.suggestion}".strip()},
            "locations": [
                {
                    "physicalLocation": {
                        "artifactLocation": {"uri": issue.file_path},
                        "region": region,
                    }
                }
            ],
        })

    return {
        "$schema": SARIF_SCHEMA,
        "version": "2.1.0",
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": "apiscan",
                        "version": __version__,
                        "rules": rules,
                    }
                },
                "results": results,
            }
        ],
    }


def render(result: ScanResult, registry: Optional[RuleRegistry] = None) -> str:
    """Return SARIF JSON string."""
    return json.dumps(to_dict(result, registry), indent=2)


def _security_severity(severity: str) -> str:
    """Map severity to SARIF security-severity score (0.0 to 10.0)."""
    mapping = {
        "critical": "9.5",
        "high": "7.5",
        "medium": "5.0",
        "low": "2.0",
        "info": "0.0",
    }
    return mapping.get(severity, "5.0")
