"""Rule models, the registry, and the built-in catalog."""

from apiscan.rules.custom import RuleLoadError
from apiscan.rules.models import Rule, RuleDefinition, make_issue
from apiscan.rules.registry import RuleRegistry, build_registry

__all__ = [
    "Rule",
    "RuleDefinition",
    "RuleLoadError",
    "RuleRegistry",
    "build_registry",
    "make_issue",
]
