"""Default configuration values and starter .apiscan.toml template."""

DEFAULT_TOML = """\
# apiscan configuration
version = "1.0"

[scan]
# languages = ["javascript", "typescript"]   # empty = every supported language
# categories = ["security", "design"]         # empty = every category
# severity_threshold = "low"                   # skip rules below this severity
max_file_size = 512000                         # bytes; larger files are skipped
# exclude = ["node_modules", "*.test.*"]       # replaces the built-in exclude set
respect_suppressions = true                    # honour // apiscan-ignore comments

[rules]
# enable = ["SEC001", "SEC002"]   # empty = all enabled
# disable = ["DOC001"]            # always wins over enable

[output]
format = "terminal"       # terminal | json | sarif
show_summary = true
fail_on = "high"          # critical | high | medium | low | info
# min_score = 70          # fail when the quality score drops below this
"""
