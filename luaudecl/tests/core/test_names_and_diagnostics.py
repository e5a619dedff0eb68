# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from luaudecl.core.diagnostics import Diagnostic, diag_to_json
from luaudecl.core.errors import ParseError, UnresolvedReferenceError
from luaudecl.core.names import strip_module_suffix, strip_prefix, userdata_name
from luaudecl.core.span import Span
from luaudecl.parser.ast import Located


def test_strip_prefix() -> None:
	assert strip_prefix("LuaVector") == "Vector"
	assert strip_prefix("lua_add") == "add"
	assert strip_prefix("LUA_CONST") == "CONST"
	assert strip_prefix("Lua") == "Lua"
	assert strip_prefix("Vector") == "Vector"
	assert userdata_name("Vector") == "uVector"


def test_strip_module_suffix() -> None:
	assert strip_module_suffix("math_module") == "math"
	assert strip_module_suffix("math") is None
	assert strip_module_suffix("_module") is None


def test_error_to_diagnostic_keeps_location_and_phase() -> None:
	err = ParseError("bad thing", loc=Located(line=3, column=7)).with_file("src/lib.rs")
	diag = err.to_diagnostic()
	assert diag.phase == "parse"
	assert diag.render() == "src/lib.rs:3:7: error: bad thing"
	assert UnresolvedReferenceError("x").phase == "resolution"


def test_with_file_does_not_override_known_file() -> None:
	err = ParseError("oops", loc=Span(file="a.rs", line=1, column=1))
	assert err.with_file("b.rs").span.file == "a.rs"


def test_render_with_notes_and_unknown_location() -> None:
	diag = Diagnostic(message="dup", severity="warning", notes=["first here"])
	assert diag.render() == "?:?:?: warning: dup\n  note: first here"


def test_diag_to_json_fields() -> None:
	diag = Diagnostic(message="m", phase="io", span=Span(line=4, column=2))
	assert diag_to_json(diag, source="x.rs") == {
		"phase": "io",
		"code": None,
		"message": "m",
		"severity": "error",
		"file": "x.rs",
		"line": 4,
		"column": 2,
		"notes": [],
	}
	assert diag_to_json(Diagnostic(message="m"), default_phase="bindgen")["phase"] == "bindgen"
