# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Luau-side items: scanned declarations after type mapping.

Each `from_parsed` consumes a `parser.parsed` record, maps its Rust types
through a `TypeMapper` and strips the conventional `lua` prefix from every
declaration-facing item name. Field, argument, variant and module names are
kept as written because the runtime registers them under those names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from luaudecl.core.names import strip_prefix
from luaudecl.parser.ast import Located
from luaudecl.parser.parsed import ParsedEnum, ParsedFunction, ParsedModule, ParsedType

from .types import LuaType, TypeMapper


@dataclass(frozen=True)
class LuaArg:
	name: str
	ty: LuaType

	def __str__(self) -> str:
		return self.ty.render_field(self.name)


@dataclass(frozen=True)
class LuaReturn:
	ty: LuaType

	@property
	def optional(self) -> bool:
		return self.ty.is_optional


@dataclass(frozen=True)
class LuaField:
	name: str
	ty: LuaType

	def __str__(self) -> str:
		return self.ty.render_field(self.name)


@dataclass(frozen=True)
class LuaVariant:
	name: str
	value: int


@dataclass
class LuaFunc:
	name: str
	args: List[LuaArg] = field(default_factory=list)
	ret: LuaReturn = field(default_factory=lambda: LuaReturn(LuaType.void()))
	doc: Optional[str] = None

	@classmethod
	def from_parsed(cls, parsed: ParsedFunction, mapper: TypeMapper) -> "LuaFunc":
		args = [
			LuaArg(name=a.name, ty=mapper.map_value(a.type_expr, f"argument '{a.name}' of '{parsed.name}'"))
			for a in parsed.visible_args
		]
		return cls(
			name=strip_prefix(parsed.name),
			args=args,
			ret=LuaReturn(mapper.map(parsed.return_type)),
			doc=parsed.doc,
		)

	def fmt_args(self, *, self_type: Optional[str] = None) -> str:
		"""Comma-separated argument list; `self_type` prepends a `self` parameter."""
		parts = [str(a) for a in self.args]
		if self_type is not None:
			parts.insert(0, f"self: {self_type}")
		return ", ".join(parts)

	def as_type(self, *, self_type: Optional[str] = None) -> str:
		"""Function-type form: `(a: number, b: string?) -> number`."""
		return f"({self.fmt_args(self_type=self_type)}) {self.ret.ty.render_return(declare=False)}"


@dataclass
class LuaStruct:
	"""A userdata type: exported structural type plus a table of class functions."""

	name: str
	fields: List[LuaField] = field(default_factory=list)
	funcs: List[LuaFunc] = field(default_factory=list)
	methods: List[LuaFunc] = field(default_factory=list)
	meta_funcs: List[LuaFunc] = field(default_factory=list)
	doc: Optional[str] = None
	loc: Optional[Located] = field(default=None, compare=False)
	path: Optional[Path] = field(default=None, compare=False)

	@classmethod
	def from_parsed(cls, parsed: ParsedType, mapper: TypeMapper, *, path: Optional[Path] = None) -> "LuaStruct":
		bound = mapper.bind_self(parsed.name)
		fields: List[LuaField] = []
		for getter in parsed.getters:
			if getter.ignored:
				continue
			fields.append(LuaField(name=getter.name, ty=bound.map_value(getter.return_type, f"field '{getter.name}'")))
		known = {f.name for f in fields}
		for setter in parsed.setters:
			if setter.ignored:
				continue
			value_ty = bound.map_value(setter.visible_args[0].type_expr, f"field '{setter.name}'")
			# Write-only fields still show up on the type.
			if setter.name not in known:
				fields.append(LuaField(name=setter.name, ty=value_ty))
				known.add(setter.name)
		return cls(
			name=strip_prefix(parsed.name),
			fields=fields,
			funcs=[LuaFunc.from_parsed(f, bound) for f in parsed.funcs if not f.ignored],
			methods=[LuaFunc.from_parsed(f, bound) for f in parsed.methods if not f.ignored],
			meta_funcs=[LuaFunc.from_parsed(f, bound) for f in parsed.meta_funcs if not f.ignored],
			doc=parsed.doc,
			loc=parsed.loc,
			path=path,
		)


@dataclass
class LuaEnum:
	name: str
	variants: List[LuaVariant] = field(default_factory=list)
	doc: Optional[str] = None

	@classmethod
	def from_parsed(cls, parsed: ParsedEnum) -> "LuaEnum":
		return cls(
			name=strip_prefix(parsed.name),
			variants=[LuaVariant(name=n, value=v) for n, v in parsed.variants],
			doc=parsed.doc,
		)


@dataclass
class LuaModule:
	"""
	A node of the module tree.

	`includes` holds the names of requested modules that are not attached
	yet; `mods` the attached children.
	"""

	name: str
	is_root: bool = False
	ignored: bool = False
	includes: List[str] = field(default_factory=list)
	mods: List["LuaModule"] = field(default_factory=list)
	funcs: List[LuaFunc] = field(default_factory=list)
	structs: List[LuaStruct] = field(default_factory=list)
	enums: List[LuaEnum] = field(default_factory=list)
	doc: Optional[str] = None
	post_init: Optional[str] = None
	loc: Optional[Located] = None
	path: Optional[Path] = None

	@classmethod
	def from_parsed(cls, parsed: ParsedModule, mapper: TypeMapper) -> "LuaModule":
		module = cls(
			name=parsed.name,
			is_root=parsed.is_root,
			ignored=parsed.ignored,
			includes=[r.name for r in parsed.references],
			doc=parsed.doc,
			post_init=parsed.post_init,
			loc=parsed.loc,
			path=parsed.path,
		)
		if parsed.ignored:
			# Nothing under an ignored module is emitted; skip mapping its types.
			return module
		module.funcs = [LuaFunc.from_parsed(f, mapper) for f in parsed.functions if not f.ignored]
		module.structs = [LuaStruct.from_parsed(t, mapper, path=parsed.path) for t in parsed.types if not t.ignored]
		module.enums = [LuaEnum.from_parsed(e) for e in parsed.enums if not e.ignored]
		return module

	def insert_module(self, child: "LuaModule") -> None:
		"""Attach `child` and drop its name from the outstanding includes."""
		self.includes = [n for n in self.includes if n != child.name]
		self.mods.append(child)


__all__ = [
	"LuaArg",
	"LuaReturn",
	"LuaField",
	"LuaVariant",
	"LuaFunc",
	"LuaStruct",
	"LuaEnum",
	"LuaModule",
]
