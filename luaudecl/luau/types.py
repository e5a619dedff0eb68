# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Luau type model and the Rust -> Luau type mapper.

`LuaType` is a closed tagged union (`LuaKind` + payload). Values are frozen
and compare structurally, so mapped types can be asserted on directly:

	TypeMapper(TypeRegistry.with_defaults()).map(parse_type_expr("Vec<u8>"))
	    == LuaType.array(LuaType.number())

`TypeRegistry` holds the primitive equivalences (canonical Rust type name ->
LuaType). It is built by the caller and handed to the mapper; there is no
process-wide table.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from luaudecl.core.errors import StructuralError, UnsupportedConstructError
from luaudecl.core.names import strip_prefix, userdata_name
from luaudecl.parser.ast import (
	ArrayType,
	AssocBinding,
	ConstArg,
	DynTraitType,
	FnPointerType,
	ImplTraitType,
	InferredType,
	LifetimeArg,
	NeverType,
	PathSegment,
	PathType,
	PointerType,
	QualifiedPathType,
	RefType,
	SliceType,
	TupleType,
	TypeExpr,
)


class LuaKind(Enum):
	"""Kinds of Luau types the generator can emit."""

	INTEGER = auto()
	NUMBER = auto()
	BOOLEAN = auto()
	STRING = auto()
	FUNCTION = auto()
	ARRAY = auto()
	OPTIONAL = auto()
	EITHER = auto()
	TUPLE = auto()
	TABLE = auto()
	THREAD = auto()
	USERDATA = auto()
	NIL = auto()
	VOID = auto()
	CUSTOM = auto()
	ERROR = auto()
	ANY = auto()


_SCALAR_TEXT = {
	LuaKind.INTEGER: "integer",
	LuaKind.NUMBER: "number",
	LuaKind.BOOLEAN: "boolean",
	LuaKind.STRING: "string",
	# Declaration files have no bare `function`/`table`; use catch-all shapes.
	LuaKind.FUNCTION: "(...any) -> ...any",
	LuaKind.TABLE: "{[any]: any}",
	LuaKind.THREAD: "thread",
	LuaKind.USERDATA: "userdata",
	LuaKind.NIL: "nil",
	LuaKind.VOID: "()",
	LuaKind.ERROR: "error",
	LuaKind.ANY: "any",
}


@dataclass(frozen=True)
class LuaType:
	"""
	A Luau type descriptor.

	Invariants:
	- ARRAY and OPTIONAL carry exactly one element in `args`.
	- EITHER carries exactly two, TUPLE at least one.
	- CUSTOM carries the declaration-facing `name` (prefix already stripped).
	- OPTIONAL never wraps another OPTIONAL.
	"""

	kind: LuaKind
	args: Tuple["LuaType", ...] = ()
	name: str = ""

	@staticmethod
	def integer() -> "LuaType":
		return LuaType(LuaKind.INTEGER)

	@staticmethod
	def number() -> "LuaType":
		return LuaType(LuaKind.NUMBER)

	@staticmethod
	def boolean() -> "LuaType":
		return LuaType(LuaKind.BOOLEAN)

	@staticmethod
	def string() -> "LuaType":
		return LuaType(LuaKind.STRING)

	@staticmethod
	def function() -> "LuaType":
		return LuaType(LuaKind.FUNCTION)

	@staticmethod
	def table() -> "LuaType":
		return LuaType(LuaKind.TABLE)

	@staticmethod
	def thread() -> "LuaType":
		return LuaType(LuaKind.THREAD)

	@staticmethod
	def userdata() -> "LuaType":
		return LuaType(LuaKind.USERDATA)

	@staticmethod
	def nil() -> "LuaType":
		return LuaType(LuaKind.NIL)

	@staticmethod
	def void() -> "LuaType":
		return LuaType(LuaKind.VOID)

	@staticmethod
	def error() -> "LuaType":
		return LuaType(LuaKind.ERROR)

	@staticmethod
	def any() -> "LuaType":
		return LuaType(LuaKind.ANY)

	@staticmethod
	def array(elem: "LuaType") -> "LuaType":
		return LuaType(LuaKind.ARRAY, (elem,))

	@staticmethod
	def optional(inner: "LuaType", *, loc: object = None) -> "LuaType":
		if inner.kind is LuaKind.OPTIONAL:
			raise StructuralError(
				"Luau optional types can't be nested (an Option inside an Option)",
				loc=loc,
			)
		return LuaType(LuaKind.OPTIONAL, (inner,))

	@staticmethod
	def either(left: "LuaType", right: "LuaType") -> "LuaType":
		return LuaType(LuaKind.EITHER, (left, right))

	@staticmethod
	def tuple(elems: Sequence["LuaType"]) -> "LuaType":
		if not elems:
			return LuaType.void()
		return LuaType(LuaKind.TUPLE, tuple(elems))

	@staticmethod
	def custom(name: str) -> "LuaType":
		return LuaType(LuaKind.CUSTOM, name=name)

	@property
	def is_optional(self) -> bool:
		return self.kind is LuaKind.OPTIONAL

	@property
	def is_void(self) -> bool:
		return self.kind is LuaKind.VOID

	@property
	def inner(self) -> "LuaType":
		"""The wrapped type of an OPTIONAL, `self` for everything else."""
		return self.args[0] if self.kind is LuaKind.OPTIONAL else self

	def __str__(self) -> str:
		kind = self.kind
		if kind in _SCALAR_TEXT:
			return _SCALAR_TEXT[kind]
		if kind is LuaKind.ARRAY:
			return f"{{{_render_member(self.args[0])}}}"
		if kind is LuaKind.OPTIONAL:
			# Callers add `?` or `| nil` depending on position.
			return str(self.args[0])
		if kind is LuaKind.EITHER:
			return f"{_render_member(self.args[0], union=True)} | {_render_member(self.args[1], union=True)}"
		if kind is LuaKind.TUPLE:
			return "(" + ", ".join(_render_member(a) for a in self.args) + ")"
		if kind is LuaKind.CUSTOM:
			return userdata_name(self.name)
		raise AssertionError(f"unhandled LuaKind {kind}")

	def render_field(self, name: str) -> str:
		"""`name: T` or `name: T?` for arguments and table fields."""
		if not self.is_optional:
			return f"{name}: {self}"
		return f"{name}: {_wrap_compound(self.inner)}?"

	def render_return(self, *, declare: bool) -> str:
		"""
		Return annotation of a function.

		`declare=True` gives the `declare function f(...)` suffix (`: T`,
		empty for VOID); otherwise the function-type arrow (`-> T`, `-> ()`).
		"""
		if self.is_void:
			return "" if declare else "-> ()"
		if self.is_optional:
			text = f"{_wrap_compound(self.inner)} | nil"
		elif self.kind is LuaKind.FUNCTION:
			text = f"({self})"
		else:
			text = str(self)
		return f": {text}" if declare else f"-> {text}"


def _wrap_compound(ty: LuaType) -> str:
	if ty.kind in (LuaKind.EITHER, LuaKind.FUNCTION):
		return f"({ty})"
	return str(ty)


def _render_member(ty: LuaType, *, union: bool = False) -> str:
	"""Element of an array, union or tuple; a nested optional keeps its `?`."""
	if ty.is_optional:
		return f"{_wrap_compound(ty.inner)}?"
	if union and ty.kind is LuaKind.FUNCTION:
		return f"({ty})"
	return str(ty)


# ---------------------------------------------------------------- registry


_DEFAULT_TYPES: Tuple[Tuple[LuaType, Tuple[str, ...]], ...] = (
	(LuaType.number(), ("i8", "i16", "i32", "i64", "i128", "isize")),
	(LuaType.number(), ("u8", "u16", "u32", "u64", "u128", "usize")),
	(LuaType.number(), ("f32", "f64")),
	(LuaType.boolean(), ("bool",)),
	(LuaType.string(), ("str", "String", "CString", "CStr", "OsString", "OsStr", "PathBuf", "Path", "BString", "BStr")),
	(LuaType.table(), ("HashMap", "BTreeMap", "Box", "Table")),
	(LuaType.error(), ("Error",)),
	(LuaType.thread(), ("Thread",)),
	(LuaType.userdata(), ("AnyUserData", "LightUserData", "UserDataRef", "UserDataRefMut")),
	(LuaType.function(), ("Function",)),
	(LuaType.any(), ("Value",)),
)

# Luau spellings accepted when registering types from configuration.
_LUAU_NAMES: Dict[str, LuaType] = {
	"integer": LuaType.integer(),
	"number": LuaType.number(),
	"boolean": LuaType.boolean(),
	"string": LuaType.string(),
	"function": LuaType.function(),
	"table": LuaType.table(),
	"thread": LuaType.thread(),
	"userdata": LuaType.userdata(),
	"nil": LuaType.nil(),
	"error": LuaType.error(),
	"any": LuaType.any(),
}


class TypeRegistry:
	"""
	Primitive equivalences keyed by the last identifier of a Rust type path.

	Lookups ignore module paths: `std::string::String` and `String` both hit
	the `String` entry.
	"""

	def __init__(self, entries: Optional[Mapping[str, LuaType]] = None) -> None:
		self._entries: Dict[str, LuaType] = dict(entries or {})

	@classmethod
	def with_defaults(cls) -> "TypeRegistry":
		registry = cls()
		for lua_type, names in _DEFAULT_TYPES:
			for name in names:
				registry.register(name, lua_type)
		return registry

	def register(self, name: str, lua_type: LuaType) -> None:
		self._entries[name] = lua_type

	def register_luau(self, name: str, luau_name: str) -> None:
		"""Register `name` using a Luau spelling (`number`, `string`, or a custom type name)."""
		self.register(name, luau_type_from_name(luau_name))

	def lookup(self, name: str) -> Optional[LuaType]:
		return self._entries.get(name)

	def copy(self) -> "TypeRegistry":
		return TypeRegistry(self._entries)

	def __contains__(self, name: object) -> bool:
		return name in self._entries

	def __iter__(self) -> Iterator[str]:
		return iter(sorted(self._entries))

	def __len__(self) -> int:
		return len(self._entries)


def luau_type_from_name(luau_name: str) -> LuaType:
	"""Map a Luau primitive spelling to its LuaType; other names become custom types."""
	text = luau_name.strip()
	found = _LUAU_NAMES.get(text)
	if found is not None:
		return found
	return LuaType.custom(strip_prefix(text))


# ---------------------------------------------------------------- mapper


_UNSUPPORTED = {
	SliceType: "slice types",
	PointerType: "raw pointer types",
	NeverType: "the never type `!`",
	ImplTraitType: "`impl Trait` types",
	DynTraitType: "`dyn Trait` types",
	FnPointerType: "function pointer types",
	QualifiedPathType: "qualified path types (`<T as Trait>::X`)",
	InferredType: "inferred types `_`",
}

OPTION_TYPE = "Option"
LIST_TYPE = "Vec"
UNION_TYPE = "Either"
SELF_TYPE = "Self"


class TypeMapper:
	"""
	Convert Rust type expressions into `LuaType`.

	Resolution order: arrays, references, `Option<T>`, `Vec<T>`,
	`Either<L, R>`, tuples, then registry lookup by the last path segment.
	Anything else raises `UnsupportedConstructError`.

	`self_name` binds `Self` to the userdata type whose impl block is being
	converted.
	"""

	def __init__(self, registry: Optional[TypeRegistry] = None, *, self_name: Optional[str] = None) -> None:
		self.registry = registry if registry is not None else TypeRegistry.with_defaults()
		self.self_name = self_name

	def bind_self(self, name: str) -> "TypeMapper":
		return TypeMapper(self.registry, self_name=name)

	def map(self, ty: TypeExpr) -> LuaType:
		"""Map a type in return position, where tuples and `()` are allowed."""
		if isinstance(ty, ArrayType):
			return LuaType.array(self.map_value(ty.elem, "an array element"))
		if isinstance(ty, RefType):
			return self.map(ty.inner)
		if isinstance(ty, PathType):
			return self._map_path(ty)
		if isinstance(ty, TupleType):
			return LuaType.tuple([self.map_value(e, "a tuple element") for e in ty.elems])
		what = _UNSUPPORTED.get(type(ty), type(ty).__name__)
		raise UnsupportedConstructError(f"{what} can't be mapped to a Luau type", loc=getattr(ty, "loc", None))

	def map_value(self, ty: TypeExpr, what: str = "a value") -> LuaType:
		"""Map an argument, field or element type; tuples are return-only in Luau."""
		lua_type = self.map(ty)
		if lua_type.kind in (LuaKind.TUPLE, LuaKind.VOID):
			raise StructuralError(
				f"tuple type '{lua_type}' can only be used as a return type, not as {what}",
				loc=getattr(ty, "loc", None),
			)
		return lua_type

	def _map_path(self, ty: PathType) -> LuaType:
		seg = ty.last
		if seg.fn_inputs is not None:
			raise UnsupportedConstructError(
				f"parenthesized trait path '{seg.name}(..)' can't be mapped to a Luau type",
				loc=ty.loc,
			)
		name = seg.name
		if seg.args:
			if name == OPTION_TYPE:
				return LuaType.optional(self.map_value(self._single_arg(ty, seg), "an optional value"), loc=ty.loc)
			if name == LIST_TYPE:
				return LuaType.array(self.map_value(self._single_arg(ty, seg), "an array element"))
			if name == UNION_TYPE:
				args = self._type_args(ty, seg)
				if len(args) != 2:
					raise StructuralError(
						f"Luau union types have to contain exactly 2 generic arguments, '{UNION_TYPE}' got {len(args)}",
						loc=ty.loc,
					)
				return LuaType.either(self.map_value(args[0], "a union member"), self.map_value(args[1], "a union member"))
		if name == SELF_TYPE and self.self_name is not None:
			return LuaType.custom(strip_prefix(self.self_name))
		found = self.registry.lookup(name)
		if found is not None:
			return found
		return LuaType.custom(strip_prefix(name))

	def _single_arg(self, ty: PathType, seg: PathSegment) -> TypeExpr:
		args = self._type_args(ty, seg)
		if len(args) != 1:
			raise StructuralError(
				f"'{seg.name}' takes exactly 1 generic argument, got {len(args)}",
				loc=ty.loc,
			)
		return args[0]

	def _type_args(self, ty: PathType, seg: PathSegment) -> List[TypeExpr]:
		out: List[TypeExpr] = []
		for arg in seg.args:
			if isinstance(arg, (LifetimeArg, ConstArg, AssocBinding)):
				raise StructuralError(
					f"'{seg.name}' only takes type arguments",
					loc=getattr(arg, "loc", None) or ty.loc,
				)
			out.append(arg)
		return out


__all__ = [
	"LuaKind",
	"LuaType",
	"TypeRegistry",
	"TypeMapper",
	"luau_type_from_name",
]
