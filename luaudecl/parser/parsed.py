# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Annotated declarations found by the scanner.

These records are host-side: names are the Rust identifiers as written and
types are still syntax (`ast.TypeExpr`). The Luau side (`luau.items`)
converts them with a `TypeMapper`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import List, Optional, Tuple

from luaudecl.core.errors import ParseError
from luaudecl.core.names import MODULE_SUFFIX, strip_module_suffix

from .ast import Located, TupleType, TypeExpr


class FuncKind(Enum):
	"""How a function is registered with the runtime."""

	FUNC = auto()
	METHOD = auto()
	METHOD_MUT = auto()
	GETTER = auto()
	SETTER = auto()
	META = auto()

	@property
	def required_args(self) -> int:
		"""Leading plumbing arguments (`&Lua`, `&Self`) hidden from scripts."""
		if self in (FuncKind.FUNC, FuncKind.META):
			return 1
		return 2


# Marker attribute on impl members -> kind.
IMPL_MARKERS = {
	"func": FuncKind.FUNC,
	"method": FuncKind.METHOD,
	"method_mut": FuncKind.METHOD_MUT,
	"get": FuncKind.GETTER,
	"set": FuncKind.SETTER,
	"meta": FuncKind.META,
}


@dataclass
class FuncArg:
	name: str
	type_expr: TypeExpr
	# Plumbing argument that exists only for the embedding convention.
	required: bool = False


@dataclass
class ParsedFunction:
	name: str
	kind: FuncKind = FuncKind.FUNC
	args: List[FuncArg] = field(default_factory=list)
	# An omitted return type is the unit tuple.
	return_type: TypeExpr = field(default_factory=TupleType)
	ignored: bool = False
	doc: Optional[str] = None
	loc: Optional[Located] = None

	@property
	def visible_args(self) -> List[FuncArg]:
		return [a for a in self.args if not a.required]


@dataclass
class ParsedType:
	"""An annotated `impl` block: one userdata type exposed to scripts."""

	name: str
	getters: List[ParsedFunction] = field(default_factory=list)
	setters: List[ParsedFunction] = field(default_factory=list)
	funcs: List[ParsedFunction] = field(default_factory=list)
	methods: List[ParsedFunction] = field(default_factory=list)
	meta_funcs: List[ParsedFunction] = field(default_factory=list)
	ignored: bool = False
	doc: Optional[str] = None
	loc: Optional[Located] = None


@dataclass
class ParsedEnum:
	name: str
	variants: List[Tuple[str, int]] = field(default_factory=list)
	ignored: bool = False
	doc: Optional[str] = None
	loc: Optional[Located] = None


@dataclass(frozen=True)
class ModuleReference:
	"""
	An `include = [...]` entry.

	`path` is the text as written (`crate::math_module`); `name` is the
	logical module name used for matching (`math`).
	"""

	path: str
	name: str

	@classmethod
	def from_path(cls, path: str, *, loc: Optional[Located] = None) -> "ModuleReference":
		last = path.split("::")[-1].strip()
		name = strip_module_suffix(last)
		if name is None:
			raise ParseError(f"included module '{path}' has to end with the \"{MODULE_SUFFIX}\" suffix", loc=loc)
		return cls(path=path, name=name)


@dataclass
class ParsedModule:
	name: str
	is_root: bool = False
	ignored: bool = False
	visibility: Optional[str] = None
	references: List[ModuleReference] = field(default_factory=list)
	functions: List[ParsedFunction] = field(default_factory=list)
	types: List[ParsedType] = field(default_factory=list)
	enums: List[ParsedEnum] = field(default_factory=list)
	post_init: Optional[str] = None
	doc: Optional[str] = None
	loc: Optional[Located] = None
	path: Optional[Path] = None


@dataclass
class ParsedFile:
	"""Everything annotated in one source file, in source order."""

	path: Optional[Path] = None
	modules: List[ParsedModule] = field(default_factory=list)
	# Annotated items outside any module.
	functions: List[ParsedFunction] = field(default_factory=list)
	types: List[ParsedType] = field(default_factory=list)
	enums: List[ParsedEnum] = field(default_factory=list)


__all__ = [
	"FuncKind",
	"IMPL_MARKERS",
	"FuncArg",
	"ParsedFunction",
	"ParsedType",
	"ParsedEnum",
	"ModuleReference",
	"ParsedModule",
	"ParsedFile",
]
