# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from pathlib import Path

import pytest

TARGET_RS = """\
use mlua::prelude::*;
use std::sync::atomic::{AtomicU32, Ordering};

mod imported;

static COUNTER: AtomicU32 = AtomicU32::new(0);

#[derive(Debug, Clone, Copy)]
pub struct Vector {
	x: f64,
	y: f64,
}

pub struct CoolNumber {
	val: f64,
}

#[mlua_bindgen]
mod super_inner {
	use super::*;

	#[mlua_bindgen]
	pub fn add(_: &Lua, a: f64, b: f64) -> f64 {
		a + b
	}

	#[mlua_bindgen]
	pub fn subtract(_: &Lua, a: f64, b: f64) -> f64 {
		a - b
	}

	#[mlua_bindgen]
	impl CoolNumber {
		#[func]
		pub fn new(_: _, val: f64) -> Self {
			Self { val }
		}

		#[get]
		pub fn value(_: _, this: &Self) -> f64 {
			this.val
		}
	}
}

#[mlua_bindgen(include = [super_inner_module])]
mod inner {
	use super::*;

	#[mlua_bindgen]
	pub fn mul(_: &Lua, val1: f64, val2: f64) -> f64 {
		val1 * val2
	}

	#[mlua_bindgen]
	pub enum Numbers {
		Num1,
		Num2,
		Num3,
		Num5 = 5,
	}

	#[mlua_bindgen]
	pub fn do_something(_: &Lua, num: u32) -> Option<String> {
		COUNTER.fetch_add(num, Ordering::SeqCst);
		None
	}
}

/// Scripting entry point.
#[mlua_bindgen(main, include = [inner_module, imported::imported_module])]
mod main {
	use super::*;

	/// A 2D vector.
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

		#[method]
		fn hello(_: &Lua, this: &Self) {
			println!("hello from {:?}", this);
		}

		#[get]
		fn x(_: &Lua, this: &Self) -> f64 {
			this.x
		}

		#[get]
		fn y(_: &Lua, this: &Self) -> f64 {
			this.y
		}

		#[set]
		fn x(_: &Lua, this: &mut Self, val: f64) {
			this.x = val;
		}

		#[set]
		fn y(_: &Lua, this: &mut Self, val: f64) {
			this.y = val;
		}
	}

	#[mlua_bindgen]
	pub enum GreatEnum {
		Var1,
		Var2,
		Var4 = 3,
		Var100 = 100,
		Var101,
	}

	#[mlua_bindgen]
	pub fn do_something_better(_: &Lua, names: Vec<String>, loud: Option<bool>) -> [String; 3] {
		todo!()
	}
}

fn main() {}
"""

IMPORTED_RS = """\
use mlua::prelude::*;

#[mlua_bindgen]
pub mod imported {
	use super::*;

	#[mlua_bindgen]
	pub fn say_hi(_: &mlua::Lua, to: String) {
		println!("hi, {to}");
	}
}
"""


@pytest.fixture
def sample_crate(tmp_path: Path) -> Path:
	"""A small crate layout with annotated modules spread over two files."""
	src = tmp_path / "src"
	src.mkdir()
	(src / "main.rs").write_text(TARGET_RS, encoding="utf-8")
	(src / "imported.rs").write_text(IMPORTED_RS, encoding="utf-8")
	return src
