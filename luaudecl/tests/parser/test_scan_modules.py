# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from luaudecl.core.errors import ParseError, UnsupportedConstructError
from luaudecl.parser import scan_source


def test_scan_main_module_with_includes() -> None:
	parsed = scan_source(
		"""
/// Scripting entry point.
#[mlua_bindgen(main, include = [inner_module, imported::imported_module])]
pub mod main {
	use super::*;

	#[mlua_bindgen]
	pub fn do_something_better(_: &Lua, a: Vec<String>) -> [String; 3] {
		todo!()
	}
}
"""
	)
	(module,) = parsed.modules
	assert module.name == "main"
	assert module.is_root
	assert module.visibility == "pub"
	assert module.doc == "Scripting entry point."
	assert [r.name for r in module.references] == ["inner", "imported"]
	assert [r.path for r in module.references] == ["inner_module", "imported::imported_module"]
	assert [f.name for f in module.functions] == ["do_something_better"]


def test_scan_module_post_init_and_ignore() -> None:
	parsed = scan_source(
		"""
#[mlua_bindgen(post_init = crate::setup::run)]
mod tools {}

#[mlua_bindgen(ignore)]
mod hidden {}

#[mlua_bindgen]
#[bindgen_ignore]
mod also_hidden {}
"""
	)
	tools, hidden, also_hidden = parsed.modules
	assert tools.post_init == "crate::setup::run"
	assert not tools.ignored
	assert hidden.ignored
	assert also_hidden.ignored


def test_include_without_module_suffix_is_parse_error() -> None:
	with pytest.raises(ParseError, match="_module"):
		scan_source(
			"""
#[mlua_bindgen(include = [math])]
mod root {}
"""
		)


def test_repeated_include_is_parse_error() -> None:
	with pytest.raises(ParseError, match="included more than once"):
		scan_source(
			"""
#[mlua_bindgen(include = [math_module, crate::math_module])]
mod root {}
"""
		)


def test_unknown_and_repeated_arguments_are_parse_errors() -> None:
	with pytest.raises(ParseError, match="unknown #\\[mlua_bindgen\\] argument 'fancy'"):
		scan_source(
			"""
#[mlua_bindgen(main, fancy)]
mod root {}
"""
		)
	with pytest.raises(ParseError, match="'main' is repeated"):
		scan_source(
			"""
#[mlua_bindgen(main, main)]
mod root {}
"""
		)
	with pytest.raises(ParseError, match="malformed"):
		scan_source(
			"""
#[mlua_bindgen(include = math_module)]
mod root {}
"""
		)


def test_nested_annotated_module_is_unsupported() -> None:
	with pytest.raises(UnsupportedConstructError, match="can't be nested"):
		scan_source(
			"""
#[mlua_bindgen]
mod outer {
	#[mlua_bindgen]
	mod inner {}
}
"""
		)


def test_out_of_line_module_is_unsupported() -> None:
	with pytest.raises(UnsupportedConstructError, match="declared inline"):
		scan_source(
			"""
#[mlua_bindgen]
mod imported;
"""
		)


def test_module_collects_only_annotated_items() -> None:
	parsed = scan_source(
		"""
#[mlua_bindgen(include = [super_inner_module])]
mod inner {
	use super::*;

	#[mlua_bindgen]
	pub fn mul(_: &Lua, val1: f64, val2: f64) -> f64 {
		val1 * val2
	}

	fn helper() -> u8 { 3 }

	#[mlua_bindgen]
	pub enum Numbers {
		Num1,
		Num2,
		Num3,
		Num5 = 5,
	}

	pub struct Plain;
}
"""
	)
	(module,) = parsed.modules
	assert [f.name for f in module.functions] == ["mul"]
	assert [e.name for e in module.enums] == ["Numbers"]
	assert module.enums[0].variants == [("Num1", 0), ("Num2", 1), ("Num3", 2), ("Num5", 5)]
