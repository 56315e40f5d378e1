"""Rule-based static analysis for API quality issues."""

__version__ = "0.1.0"
