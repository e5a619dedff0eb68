"""
luaudecl.core: shared primitives used across the scanner, resolver and emitter.

Modules:
  - span: best-effort source locations
  - diagnostics: Diagnostic record printed by the CLI
  - errors: exception kinds raised by every pipeline phase
  - names: declaration-facing name transforms
  - config: run configuration (CLI + JSON file)
"""

__all__ = [
    "span",
    "diagnostics",
    "errors",
    "names",
    "config",
]
