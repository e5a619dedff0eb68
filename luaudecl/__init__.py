# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
luaudecl package: Luau declaration-file generator for mlua_bindgen sources.

Subpackages:
  - core: diagnostics, spans, error kinds, name helpers, configuration
  - parser: Rust source scanner (lark grammar + AST builders)
  - luau: Luau type model, item conversion, module resolution, emission
"""

__all__ = ["core", "parser", "luau", "bindgen", "declgen"]
