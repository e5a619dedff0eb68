# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration emitter: Luau items -> declaration file text.

Every unit expands to a pair `(global_text, nested_text)`:

- `global_text` must live at file scope (`export type uVector = {...}`
  for a userdata type, hoisted out of any module nesting);
- `nested_text` is the unit itself, either as a top-level `declare` form
  or, with `inside_parent=True`, as a table field ending in `,`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Tuple, Union

from luaudecl.core.errors import ResolutionError
from luaudecl.core.names import userdata_name
from luaudecl.core.span import Span

from .items import LuaEnum, LuaFunc, LuaModule, LuaStruct

INDENT = "    "
HEADER = "-- Luau declarations generated by luaudecl from #[mlua_bindgen] sources. Do not edit."

LuaUnit = Union[LuaFunc, LuaEnum, LuaStruct, LuaModule]
# A hoisted `export type` block and the struct it was rendered from.
Global = Tuple[LuaStruct, str]


def add_indent(text: str, levels: int = 1) -> str:
	"""Indent every non-empty line of `text` by `levels` steps."""
	pad = INDENT * levels
	return "".join(pad + line if line.strip() else line for line in text.splitlines(keepends=True))


def lua_expand(unit: LuaUnit, inside_parent: bool) -> Tuple[str, str]:
	globals_, nested = _expand(unit, inside_parent)
	return "\n".join(text for _, text in globals_), nested


def _expand(unit: LuaUnit, inside_parent: bool) -> Tuple[List[Global], str]:
	if isinstance(unit, LuaFunc):
		return _expand_func(unit, inside_parent)
	if isinstance(unit, LuaEnum):
		return _expand_enum(unit, inside_parent)
	if isinstance(unit, LuaStruct):
		return _expand_struct(unit, inside_parent)
	if isinstance(unit, LuaModule):
		return _expand_module(unit, inside_parent)
	raise TypeError(f"can't expand {type(unit).__name__} into a declaration")


def _doc_comment(doc: str | None) -> str:
	if not doc:
		return ""
	level = 0
	# Pick a long-bracket level the text can't terminate early.
	while ("]" + "=" * level + "]") in doc:
		level += 1
	eq = "=" * level
	return f"--[{eq}[{doc}]{eq}]\n"


def _open_table(name: str, inside_parent: bool) -> str:
	return f"{name}: {{\n" if inside_parent else f"declare {name}: {{\n"


def _close_table(inside_parent: bool) -> str:
	return "},\n" if inside_parent else "}\n"


def _expand_func(func: LuaFunc, inside_parent: bool) -> Tuple[List[Global], str]:
	text = _doc_comment(func.doc)
	if inside_parent:
		text += f"{func.name}: {func.as_type()},\n"
	else:
		text += f"declare function {func.name}({func.fmt_args()}){func.ret.ty.render_return(declare=True)}\n"
	return [], text


def _expand_enum(enum: LuaEnum, inside_parent: bool) -> Tuple[List[Global], str]:
	# Only presence and numeric type are declared; values live in the runtime.
	text = _doc_comment(enum.doc) + _open_table(enum.name, inside_parent)
	for variant in enum.variants:
		text += f"{INDENT}{variant.name}: number,\n"
	text += _close_table(inside_parent)
	return [], text


def _expand_struct(struct: LuaStruct, inside_parent: bool) -> Tuple[List[Global], str]:
	type_name = userdata_name(struct.name)
	doc = _doc_comment(struct.doc)

	global_text = doc + f"export type {type_name} = {{\n"
	for fld in struct.fields:
		global_text += f"{INDENT}{fld},\n"
	for method in struct.methods:
		global_text += f"{INDENT}{method.name}: {method.as_type(self_type=type_name)},\n"
	global_text += "}\n"

	nested = doc + _open_table(struct.name, inside_parent)
	for func in struct.funcs:
		nested += f"{INDENT}{func.name}: {func.as_type()},\n"
	nested += _close_table(inside_parent)
	return [(struct, global_text)], nested


def _expand_module(module: LuaModule, inside_parent: bool) -> Tuple[List[Global], str]:
	globals_: Dict[str, Global] = {}
	text = _doc_comment(module.doc) + _open_table(module.name, inside_parent)
	for child in [*module.structs, *module.enums, *module.funcs, *module.mods]:
		child_globals, child_nested = _expand(child, True)
		_merge_globals(globals_, child_globals)
		text += add_indent(child_nested)
	text += _close_table(inside_parent)
	return list(globals_.values()), text


def _merge_globals(seen: Dict[str, Global], new: Iterable[Global]) -> List[str]:
	"""
	Add `new` userdata exports to `seen`, keyed by their `uName`.

	A module reachable through several parents hands back the same struct
	more than once; only the first copy is kept. Two different structs that
	export the same type name are a `ResolutionError`. Returns the texts
	that were not seen before, in order.
	"""
	fresh: List[str] = []
	for struct, text in new:
		type_name = userdata_name(struct.name)
		previous = seen.get(type_name)
		if previous is None:
			seen[type_name] = (struct, text)
			fresh.append(text)
			continue
		first, first_text = previous
		if first is struct or first_text == text:
			continue
		raise ResolutionError(
			f"userdata type '{type_name}' is declared more than once",
			loc=Span.from_loc(struct.loc).in_file(struct.path),
			notes=[f"first declared at {Span.from_loc(first.loc).in_file(first.path).describe()}"],
		)
	return fresh


class DeclarationFile:
	"""
	An ordered list of top-level units rendered into one declaration file.

	Each unit contributes its global text (if any) and then its own
	declaration; consecutive blocks are separated by a blank line. A
	userdata type is exported once, however many modules include it.
	"""

	def __init__(self, header: str | None = HEADER) -> None:
		self.header = header
		self.items: List[LuaUnit] = []

	def add_item(self, item: LuaUnit) -> None:
		self.items.append(item)

	def add_items(self, items: Iterable[LuaUnit]) -> None:
		for item in items:
			self.add_item(item)

	def add_root(self, root: LuaModule) -> None:
		"""Hoist the root module's contents to the top level; the root itself is never a table."""
		self.add_items(root.structs)
		self.add_items(root.enums)
		self.add_items(root.funcs)
		self.add_items(root.mods)

	def to_string(self) -> str:
		blocks: List[str] = []
		if self.header:
			blocks.append(self.header + "\n")
		seen: Dict[str, Global] = {}
		for item in self.items:
			item_globals, nested = _expand(item, False)
			fresh = _merge_globals(seen, item_globals)
			if fresh:
				blocks.append("\n".join(fresh))
			if nested:
				blocks.append(nested)
		return "\n".join(blocks)

	def write(self, path: Path) -> None:
		path.write_text(self.to_string(), encoding="utf-8")

	def __str__(self) -> str:
		return self.to_string()


__all__ = ["INDENT", "HEADER", "add_indent", "lua_expand", "DeclarationFile"]
