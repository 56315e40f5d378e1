"""Built-in rules in catalog order."""

from apiscan.rules.builtin.best_practices import ALL_BEST_PRACTICE_RULES
from apiscan.rules.builtin.design import ALL_DESIGN_RULES
from apiscan.rules.builtin.documentation import ALL_DOCUMENTATION_RULES
from apiscan.rules.builtin.error_handling import ALL_ERROR_HANDLING_RULES
from apiscan.rules.builtin.performance import ALL_PERFORMANCE_RULES
from apiscan.rules.builtin.security import ALL_SECURITY_RULES
from apiscan.rules.models import Rule

ALL_BUILTIN_RULES: list[Rule] = [
    *ALL_SECURITY_RULES,
    *ALL_DESIGN_RULES,
    *ALL_ERROR_HANDLING_RULES,
    *ALL_PERFORMANCE_RULES,
    *ALL_DOCUMENTATION_RULES,
    *ALL_BEST_PRACTICE_RULES,
]

__all__ = ["ALL_BUILTIN_RULES"]
