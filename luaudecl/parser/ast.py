# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Syntax tree produced by `parser.parse_source`.

Only the parts of a Rust file that matter for declaration generation are
kept: item headers, attributes, doc comments, function signatures and type
expressions. Bodies are dropped by the grammar.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class Located:
	line: int
	column: int


# ---------------------------------------------------------------- types


class TypeExpr:
	loc: Optional[Located]


@dataclass
class LifetimeArg:
	name: str
	loc: Optional[Located] = None


@dataclass
class ConstArg:
	text: str
	loc: Optional[Located] = None


@dataclass
class AssocBinding:
	name: str
	type_expr: Optional[TypeExpr]
	loc: Optional[Located] = None


GenericArg = Union[TypeExpr, LifetimeArg, ConstArg, AssocBinding]


@dataclass
class PathSegment:
	"""
	One `::`-separated path segment.

	`fn_inputs` is set for the parenthesized sugar form (`Fn(u8) -> u8`);
	`args` holds angle-bracketed generic arguments otherwise.
	"""

	name: str
	args: List[GenericArg] = field(default_factory=list)
	fn_inputs: Optional[List[TypeExpr]] = None
	fn_output: Optional[TypeExpr] = None


@dataclass
class PathType(TypeExpr):
	segments: List[PathSegment]
	loc: Optional[Located] = None

	@property
	def last(self) -> PathSegment:
		return self.segments[-1]

	@property
	def name(self) -> str:
		return self.segments[-1].name

	def __str__(self) -> str:
		return "::".join(s.name for s in self.segments)


@dataclass
class RefType(TypeExpr):
	inner: TypeExpr
	mutable: bool = False
	lifetime: Optional[str] = None
	loc: Optional[Located] = None


@dataclass
class PointerType(TypeExpr):
	inner: TypeExpr
	mutable: bool = False
	loc: Optional[Located] = None


@dataclass
class ArrayType(TypeExpr):
	elem: TypeExpr
	length: str
	loc: Optional[Located] = None


@dataclass
class SliceType(TypeExpr):
	elem: TypeExpr
	loc: Optional[Located] = None


@dataclass
class TupleType(TypeExpr):
	elems: List[TypeExpr] = field(default_factory=list)
	loc: Optional[Located] = None


@dataclass
class NeverType(TypeExpr):
	loc: Optional[Located] = None


@dataclass
class ImplTraitType(TypeExpr):
	loc: Optional[Located] = None


@dataclass
class DynTraitType(TypeExpr):
	loc: Optional[Located] = None


@dataclass
class FnPointerType(TypeExpr):
	loc: Optional[Located] = None


@dataclass
class QualifiedPathType(TypeExpr):
	loc: Optional[Located] = None


@dataclass
class InferredType(TypeExpr):
	loc: Optional[Located] = None


# ---------------------------------------------------------------- attributes


@dataclass
class Attribute:
	"""
	An outer attribute `#[path ...]`.

	`args` is the raw source text between the delimiters of a delimited
	input (`#[mlua_bindgen(main)]` -> `"main"`); `value` is the decoded
	string of an `= "..."` input.
	"""

	path: List[str]
	loc: Located
	args: Optional[str] = None
	value: Optional[str] = None

	@property
	def name(self) -> str:
		return self.path[-1] if self.path else ""


# ---------------------------------------------------------------- items


@dataclass
class Item:
	loc: Located
	attrs: List[Attribute] = field(default_factory=list)
	docs: List[str] = field(default_factory=list)
	visibility: Optional[str] = None

	def attr_named(self, name: str) -> List[Attribute]:
		return [a for a in self.attrs if a.name == name]


@dataclass
class FnParam:
	"""
	A function parameter.

	`name` is None for destructuring patterns and `_`. Receivers (`self`,
	`&mut self`) set `receiver` and carry no type.
	"""

	loc: Located
	name: Optional[str] = None
	type_expr: Optional[TypeExpr] = None
	receiver: bool = False


@dataclass
class FunctionItem(Item):
	name: str = ""
	params: List[FnParam] = field(default_factory=list)
	return_type: Optional[TypeExpr] = None


@dataclass
class ImplBlock(Item):
	self_type: Optional[TypeExpr] = None
	trait_type: Optional[TypeExpr] = None
	members: List[Item] = field(default_factory=list)


@dataclass
class EnumVariantDef:
	name: str
	loc: Located
	attrs: List[Attribute] = field(default_factory=list)
	docs: List[str] = field(default_factory=list)
	# "tuple" / "struct" for variants carrying data.
	fields_kind: Optional[str] = None
	discriminant: Optional[str] = None
	discriminant_loc: Optional[Located] = None


@dataclass
class EnumItem(Item):
	name: str = ""
	variants: List[EnumVariantDef] = field(default_factory=list)


@dataclass
class ModuleItem(Item):
	name: str = ""
	items: List[Item] = field(default_factory=list)
	# False for `mod name;` declarations.
	inline: bool = True


@dataclass
class OtherItem(Item):
	"""Items the scanner only needs to recognize (struct, trait, use, ...)."""

	kind: str = ""
	name: Optional[str] = None


@dataclass
class SourceFile:
	items: List[Item] = field(default_factory=list)
