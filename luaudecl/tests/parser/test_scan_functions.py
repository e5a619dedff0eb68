# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

import pytest

from luaudecl.core.errors import ParseError, StructuralError, UnsupportedConstructError
from luaudecl.parser import scan_source
from luaudecl.parser.ast import InferredType, PathType, TupleType
from luaudecl.parser.parsed import FuncKind


def test_scan_free_function_hides_lua_argument() -> None:
	parsed = scan_source(
		"""
use mlua::prelude::*;

#[mlua_bindgen]
pub fn add(_: &Lua, a: f64, b: f64) -> f64 {
	a + b
}

fn not_exported(x: u8) -> u8 { x }
"""
	)
	assert [f.name for f in parsed.functions] == ["add"]
	fn = parsed.functions[0]
	assert fn.kind is FuncKind.FUNC
	assert [a.name for a in fn.args] == ["arg0", "a", "b"]
	assert [a.name for a in fn.visible_args] == ["a", "b"]
	assert isinstance(fn.return_type, PathType)
	assert fn.return_type.name == "f64"


def test_scan_function_without_return_type_returns_unit() -> None:
	parsed = scan_source(
		"""
#[mlua_bindgen]
fn say_hi(_: &mlua::Lua, to: String) {
	println!("hi, {to}");
}
"""
	)
	ret = parsed.functions[0].return_type
	assert isinstance(ret, TupleType)
	assert ret.elems == []


def test_scan_function_needs_lua_argument() -> None:
	with pytest.raises(StructuralError, match="doesn't take enough arguments"):
		scan_source(
			"""
#[mlua_bindgen]
fn lonely() {}
"""
		)


def test_scan_function_rejects_arguments_on_item_attribute() -> None:
	with pytest.raises(ParseError, match="only takes arguments on modules"):
		scan_source(
			"""
#[mlua_bindgen(main)]
fn f(_: &Lua) {}
"""
		)


def test_scan_impl_collects_members_by_marker() -> None:
	parsed = scan_source(
		"""
#[mlua_bindgen]
impl Vector {
	#[func]
	fn new(_: &Lua, x: f64, y: f64) -> Self {
		Self { x, y }
	}

	#[method]
	fn add(_: &Lua, this: &Self, other: Vector) -> Self {
		Self { x: this.x + other.x, y: this.y + other.y }
	}

	#[method_mut]
	fn scale(_: &Lua, this: &mut Self, by: f64) {
		this.x *= by;
	}

	#[get]
	fn x(_: &Lua, this: &Self) -> f64 { this.x }

	#[set]
	fn x(_: &Lua, this: &mut Self, val: f64) { this.x = val; }

	#[meta]
	fn __tostring(_: &Lua) -> String { String::new() }

	#[bindgen_ignore]
	fn internal(&self) {}
}
"""
	)
	(ty,) = parsed.types
	assert ty.name == "Vector"
	assert [f.name for f in ty.funcs] == ["new"]
	assert [f.name for f in ty.methods] == ["add", "scale"]
	assert ty.methods[1].kind is FuncKind.METHOD_MUT
	assert [f.name for f in ty.getters] == ["x"]
	assert [f.name for f in ty.setters] == ["x"]
	assert [f.name for f in ty.meta_funcs] == ["__tostring"]
	assert [a.name for a in ty.methods[0].visible_args] == ["other"]
	assert [a.name for a in ty.setters[0].visible_args] == ["val"]


def test_scan_impl_accepts_inferred_plumbing_types() -> None:
	parsed = scan_source(
		"""
#[mlua_bindgen]
impl CoolNumber {
	#[func]
	pub fn new(_: _, val: f64) -> Self {
		Self { val }
	}
}
"""
	)
	new = parsed.types[0].funcs[0]
	assert isinstance(new.args[0].type_expr, InferredType)
	assert [a.name for a in new.visible_args] == ["val"]


def test_getter_with_visible_argument_is_structural_error() -> None:
	with pytest.raises(StructuralError, match="getter 'Thing::size'"):
		scan_source(
			"""
#[mlua_bindgen]
impl Thing {
	#[get]
	fn size(_: &Lua, this: &Self, extra: u8) -> u8 { 0 }
}
"""
		)


def test_setter_needs_exactly_one_value() -> None:
	with pytest.raises(StructuralError, match="setter 'Thing::size'"):
		scan_source(
			"""
#[mlua_bindgen]
impl Thing {
	#[set]
	fn size(_: &Lua, this: &mut Self) {}
}
"""
		)


def test_self_receiver_is_rejected() -> None:
	with pytest.raises(StructuralError, match="self argument"):
		scan_source(
			"""
#[mlua_bindgen]
impl Thing {
	#[method]
	fn poke(&self, lua: &Lua) {}
}
"""
		)


def test_impl_member_needs_one_marker() -> None:
	with pytest.raises(StructuralError, match="needs one of"):
		scan_source(
			"""
#[mlua_bindgen]
impl Thing {
	fn plain(_: &Lua) {}
}
"""
		)
	with pytest.raises(StructuralError, match="more than one kind marker"):
		scan_source(
			"""
#[mlua_bindgen]
impl Thing {
	#[func]
	#[method]
	fn both(_: &Lua, this: &Self) {}
}
"""
		)


def test_trait_impl_is_unsupported() -> None:
	with pytest.raises(UnsupportedConstructError, match="trait impls"):
		scan_source(
			"""
#[mlua_bindgen]
impl Display for Thing {
	fn fmt(&self, f: &mut Formatter<'_>) -> fmt::Result { Ok(()) }
}
"""
		)


def test_annotated_struct_points_at_impl_block() -> None:
	with pytest.raises(UnsupportedConstructError, match="annotate its impl block instead"):
		scan_source(
			"""
#[mlua_bindgen]
#[derive(Debug, Clone)]
pub struct Vector {
	x: f64,
}
"""
		)


def test_doc_comments_and_doc_attributes_become_docs() -> None:
	parsed = scan_source(
		"""
/// Adds two numbers.
/// Twice as fast.
#[mlua_bindgen]
fn add(_: &Lua, a: f64, b: f64) -> f64 { a + b }

#[doc = "Greets someone."]
#[mlua_bindgen]
fn greet(_: &Lua, who: String) {}
"""
	)
	assert parsed.functions[0].doc == "Adds two numbers.\nTwice as fast."
	assert parsed.functions[1].doc == "Greets someone."


def test_ignored_function_skips_validation() -> None:
	parsed = scan_source(
		"""
#[mlua_bindgen]
#[bindgen_ignore]
fn helper() {}
"""
	)
	assert parsed.functions[0].ignored


def test_syntax_error_carries_file_and_line() -> None:
	with pytest.raises(ParseError) as info:
		scan_source("#[mlua_bindgen]\nfn broken(;) {}\n", Path("src/broken.rs"))
	err = info.value
	assert err.span.file == str(Path("src/broken.rs"))
	assert err.span.line == 2


def test_unrelated_rust_items_are_skipped() -> None:
	parsed = scan_source(
		r'''
#![allow(dead_code)]
use std::sync::atomic::{AtomicU32, Ordering};

mod imported;

static COUNTER: AtomicU32 = AtomicU32::new(0);
const NAME: &str = "x\"y";
type Pair<'a> = (&'a str, u8);

trait Shape {
	fn area(&self) -> f64;
}

macro_rules! square {
	($x:expr) => { $x * $x };
}

#[derive(Debug, Clone, Copy)]
pub(crate) struct Point(f64, f64);

impl<'a, T: Clone> Holder<'a, T> where T: Default {
	fn get(&self) -> Option<&'a T> { self.0.as_ref() }
}

fn main() {
	let c = 'c';
	let s = r#"raw "text""#;
	COUNTER.fetch_add(1, Ordering::SeqCst);
}
'''
	)
	assert parsed.functions == []
	assert parsed.modules == []
	assert parsed.types == []
