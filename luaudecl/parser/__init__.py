# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source scanner: Rust files -> annotated declarations (`parsed.ParsedFile`).

Only items carrying `#[mlua_bindgen]` are interpreted. Top-level annotated
modules, functions, impl blocks and enums are collected; inside an annotated
module every annotated function/impl/enum becomes part of that module.
Everything else in the file is parsed for structure and then skipped.

All failures are raised as `BindgenError` subclasses; the first one aborts
the scan.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from lark import Token, Tree
from lark.exceptions import UnexpectedInput

from luaudecl.core.errors import (
	BindgenError,
	ParseError,
	SourceIOError,
	StructuralError,
	UnsupportedConstructError,
)
from luaudecl.core.span import Span

from . import parser as _parser
from .ast import (
	Attribute,
	EnumItem,
	FunctionItem,
	ImplBlock,
	Item,
	Located,
	ModuleItem,
	PathType,
	TupleType,
)
from .parsed import (
	IMPL_MARKERS,
	FuncArg,
	FuncKind,
	ModuleReference,
	ParsedEnum,
	ParsedFile,
	ParsedFunction,
	ParsedModule,
	ParsedType,
)

BINDGEN_ATTR = "mlua_bindgen"
IGNORE_ATTR = "bindgen_ignore"
SOURCE_SUFFIX = ".rs"

_DISCRIMINANT_RE = re.compile(
	r"^(?P<lit>0[xX][0-9a-fA-F_]+|0[oO][0-7_]+|0[bB][01_]+|[0-9][0-9_]*)"
	r"(?:[iu](?:8|16|32|64|128|size))?$"
)

_PLUMBING = {
	1: "`&Lua`",
	2: "`&Lua` and `&Self`",
}


@dataclass
class _ModuleArgs:
	is_root: bool = False
	ignore: bool = False
	references: List[ModuleReference] = field(default_factory=list)
	post_init: Optional[str] = None


def scan_source(source: str, path: Path | None = None) -> ParsedFile:
	"""Scan one file's text. `path` only labels diagnostics and the result."""
	try:
		syntax = _parser.parse_source(source)
	except UnexpectedInput as err:
		line = getattr(err, "line", None)
		column = getattr(err, "column", None)
		# lark reports end-of-input as line/column -1.
		span = Span(
			file=str(path) if path is not None else None,
			line=line if line is not None and line > 0 else None,
			column=column if column is not None and column > 0 else None,
			raw=err,
		)
		raise ParseError(str(err).strip(), loc=span) from err
	try:
		return _scan_items(syntax.items, path)
	except BindgenError as err:
		raise err.with_file(path)


def scan_file(path: Path) -> ParsedFile:
	try:
		source = path.read_text(encoding="utf-8")
	except (OSError, UnicodeDecodeError) as err:
		raise SourceIOError(f"can't read '{path}': {err}", loc=Span(file=str(path))) from err
	return scan_source(source, path)


def collect_sources(paths: Iterable[Path | str], max_depth: Optional[int] = None) -> List[Path]:
	"""
	Expand input paths into the ordered list of `.rs` files to scan.

	Files are taken as given; directories are walked recursively in sorted
	order. `max_depth` bounds the walk: 0 keeps only files directly inside
	the directory, None means unlimited.
	"""
	files: List[Path] = []
	for raw in paths:
		path = Path(raw)
		if path.is_dir():
			files.extend(_walk(path, max_depth))
		elif path.is_file():
			files.append(path)
		else:
			raise SourceIOError(f"input path '{path}' does not exist", loc=Span(file=str(path)))
	return files


def scan_paths(paths: Iterable[Path | str], max_depth: Optional[int] = None) -> List[ParsedFile]:
	return [scan_file(p) for p in collect_sources(paths, max_depth)]


def _walk(root: Path, max_depth: Optional[int]) -> List[Path]:
	found: List[Path] = []
	for candidate in sorted(root.rglob(f"*{SOURCE_SUFFIX}")):
		if not candidate.is_file():
			continue
		depth = len(candidate.relative_to(root).parts) - 1
		if max_depth is not None and depth > max_depth:
			continue
		found.append(candidate)
	return found


# ---------------------------------------------------------------- items


def _scan_items(items: Sequence[Item], path: Path | None) -> ParsedFile:
	parsed = ParsedFile(path=path)
	for item in items:
		attr = _bindgen_attr(item)
		if attr is None:
			continue
		if isinstance(item, ModuleItem):
			module = _scan_module(item, attr)
			module.path = path
			parsed.modules.append(module)
			continue
		_reject_item_args(attr)
		if isinstance(item, FunctionItem):
			parsed.functions.append(_scan_function(item, FuncKind.FUNC))
		elif isinstance(item, ImplBlock):
			parsed.types.append(_scan_impl(item))
		elif isinstance(item, EnumItem):
			parsed.enums.append(_scan_enum(item))
		else:
			raise _unsupported_item(item)
	return parsed


def _scan_module(item: ModuleItem, attr: Attribute) -> ParsedModule:
	if not item.inline:
		raise UnsupportedConstructError(
			f"module '{item.name}' has to be declared inline to be exported (`mod {item.name} {{ ... }}`)",
			loc=item.loc,
		)
	args = _parse_module_args(attr)
	module = ParsedModule(
		name=item.name,
		is_root=args.is_root,
		ignored=args.ignore or _is_ignored(item),
		visibility=item.visibility,
		references=args.references,
		post_init=args.post_init,
		doc=_doc(item.docs),
		loc=item.loc,
	)
	for inner in item.items:
		inner_attr = _bindgen_attr(inner)
		if inner_attr is None:
			continue
		if isinstance(inner, ModuleItem):
			raise UnsupportedConstructError(
				f"module '{inner.name}' can't be nested inside module '{item.name}'; "
				f"declare it at file level and include it as '{inner.name}_module'",
				loc=inner.loc,
			)
		_reject_item_args(inner_attr)
		if isinstance(inner, FunctionItem):
			module.functions.append(_scan_function(inner, FuncKind.FUNC))
		elif isinstance(inner, ImplBlock):
			module.types.append(_scan_impl(inner))
		elif isinstance(inner, EnumItem):
			module.enums.append(_scan_enum(inner))
		else:
			raise _unsupported_item(inner)
	return module


def _scan_function(item: FunctionItem, kind: FuncKind, *, owner: Optional[str] = None) -> ParsedFunction:
	if _is_ignored(item):
		return ParsedFunction(name=item.name, kind=kind, ignored=True, doc=_doc(item.docs), loc=item.loc)
	label = f"{owner}::{item.name}" if owner else item.name
	required = kind.required_args
	args: List[FuncArg] = []
	for index, param in enumerate(item.params):
		if param.receiver or param.type_expr is None:
			raise StructuralError(
				f"function '{label}' can't take the self argument; "
				f"take {_PLUMBING[2]} as its first arguments instead",
				loc=param.loc,
			)
		args.append(FuncArg(name=param.name or f"arg{index}", type_expr=param.type_expr, required=index < required))
	if len(args) < required:
		raise StructuralError(
			f"function '{label}' doesn't take enough arguments: it should take "
			f"{_PLUMBING[required]} as its first {required} argument{'s' if required > 1 else ''}",
			loc=item.loc,
		)
	visible = len(args) - required
	if kind is FuncKind.GETTER and visible != 0:
		raise StructuralError(
			f"getter '{label}' can't take script-visible arguments (found {visible})",
			loc=item.loc,
		)
	if kind is FuncKind.SETTER and visible != 1:
		raise StructuralError(
			f"setter '{label}' has to take exactly one value argument (found {visible})",
			loc=item.loc,
		)
	return ParsedFunction(
		name=item.name,
		kind=kind,
		args=args,
		return_type=item.return_type if item.return_type is not None else TupleType(loc=item.loc),
		doc=_doc(item.docs),
		loc=item.loc,
	)


def _scan_impl(item: ImplBlock) -> ParsedType:
	self_type = item.self_type
	if not isinstance(self_type, PathType):
		raise UnsupportedConstructError("only impl blocks on named types can be exported", loc=item.loc)
	name = self_type.name
	if _is_ignored(item):
		return ParsedType(name=name, ignored=True, doc=_doc(item.docs), loc=item.loc)
	if item.trait_type is not None:
		raise UnsupportedConstructError(
			f"trait impls can't be exported; move the functions of '{name}' into an inherent impl block",
			loc=item.loc,
		)
	parsed = ParsedType(name=name, doc=_doc(item.docs), loc=item.loc)
	for member in item.members:
		if not isinstance(member, FunctionItem):
			raise UnsupportedConstructError(
				f"only functions can be exported from the impl block of '{name}'",
				loc=member.loc,
			)
		if _is_ignored(member):
			continue
		markers = [a.name for a in member.attrs if a.name in IMPL_MARKERS]
		if not markers:
			raise StructuralError(
				f"function '{name}::{member.name}' needs one of "
				+ ", ".join(f"#[{m}]" for m in IMPL_MARKERS),
				loc=member.loc,
			)
		if len(markers) > 1:
			raise StructuralError(
				f"function '{name}::{member.name}' has more than one kind marker: "
				+ ", ".join(f"#[{m}]" for m in markers),
				loc=member.loc,
			)
		kind = IMPL_MARKERS[markers[0]]
		func = _scan_function(member, kind, owner=name)
		if kind is FuncKind.FUNC:
			parsed.funcs.append(func)
		elif kind in (FuncKind.METHOD, FuncKind.METHOD_MUT):
			parsed.methods.append(func)
		elif kind is FuncKind.GETTER:
			parsed.getters.append(func)
		elif kind is FuncKind.SETTER:
			parsed.setters.append(func)
		else:
			parsed.meta_funcs.append(func)
	return parsed


def _scan_enum(item: EnumItem) -> ParsedEnum:
	if _is_ignored(item):
		return ParsedEnum(name=item.name, ignored=True, doc=_doc(item.docs), loc=item.loc)
	variants = []
	value = 0
	for variant in item.variants:
		if variant.fields_kind is not None:
			raise UnsupportedConstructError(
				f"enum variant '{item.name}::{variant.name}' carries data; only unit variants can be exported",
				loc=variant.loc,
			)
		if variant.discriminant is not None:
			value = _parse_discriminant(item.name, variant.name, variant.discriminant, variant.discriminant_loc or variant.loc)
		variants.append((variant.name, value))
		value += 1
	return ParsedEnum(name=item.name, variants=variants, doc=_doc(item.docs), loc=item.loc)


def _parse_discriminant(enum_name: str, variant: str, text: str, loc: Located) -> int:
	match = _DISCRIMINANT_RE.match(text.strip())
	if match is None:
		raise ParseError(
			f"discriminant of '{enum_name}::{variant}' has to be a non-negative integer literal, found '{text}'",
			loc=loc,
		)
	literal = match.group("lit").replace("_", "")
	if literal[:2].lower() in ("0x", "0o", "0b"):
		return int(literal, 0)
	return int(literal, 10)


# ---------------------------------------------------------------- attributes


def _bindgen_attr(item: Item) -> Optional[Attribute]:
	found = [a for a in item.attrs if a.name == BINDGEN_ATTR]
	if len(found) > 1:
		raise ParseError(f"#[{BINDGEN_ATTR}] is repeated on the same item", loc=found[1].loc)
	return found[0] if found else None


def _is_ignored(item: Item) -> bool:
	return any(a.name == IGNORE_ATTR for a in item.attrs)


def _reject_item_args(attr: Attribute) -> None:
	if attr.args:
		raise ParseError(f"#[{BINDGEN_ATTR}] only takes arguments on modules, found '({attr.args})'", loc=attr.loc)


def _parse_module_args(attr: Attribute) -> _ModuleArgs:
	"""Interpret `#[mlua_bindgen(include = [..], main, post_init = path, ignore)]`."""
	args = _ModuleArgs()
	if not attr.args:
		return args
	try:
		tree = _parser.parse_attr_args(attr.args)
	except UnexpectedInput as err:
		raise ParseError(f"malformed #[{BINDGEN_ATTR}] arguments '{attr.args}'", loc=attr.loc) from err
	seen: set[str] = set()
	for arg in tree.children:
		if not isinstance(arg, Tree):
			continue
		kind = _parser._name(arg)
		key = next(c.value for c in arg.children if isinstance(c, Token) and c.type == "NAME")
		if key in seen:
			raise ParseError(f"#[{BINDGEN_ATTR}] argument '{key}' is repeated", loc=attr.loc)
		seen.add(key)
		if key == "main" and kind == "attr_flag":
			args.is_root = True
		elif key == "ignore" and kind == "attr_flag":
			args.ignore = True
		elif key == "include" and kind == "attr_list":
			for path_tree in arg.children:
				if not isinstance(path_tree, Tree):
					continue
				ref = ModuleReference.from_path(_path_text(path_tree), loc=attr.loc)
				if any(r.name == ref.name for r in args.references):
					raise ParseError(f"module '{ref.path}' is included more than once", loc=attr.loc)
				args.references.append(ref)
		elif key == "post_init" and kind == "attr_assign":
			args.post_init = _path_text(next(c for c in arg.children if isinstance(c, Tree)))
		elif key in ("main", "ignore", "include", "post_init"):
			raise ParseError(f"#[{BINDGEN_ATTR}] argument '{key}' is malformed", loc=attr.loc)
		else:
			raise ParseError(f"unknown #[{BINDGEN_ATTR}] argument '{key}'", loc=attr.loc)
	return args


def _path_text(tree: Tree) -> str:
	return "::".join(t.value for t in tree.children if isinstance(t, Token) and t.type == "NAME")


def _doc(docs: Sequence[str]) -> Optional[str]:
	text = "\n".join(docs).strip()
	return text or None


def _unsupported_item(item: Item) -> UnsupportedConstructError:
	kind = getattr(item, "kind", type(item).__name__)
	name = getattr(item, "name", None) or "?"
	message = f"#[{BINDGEN_ATTR}] can't be applied to {kind} '{name}'"
	if kind == "struct":
		message += "; annotate its impl block instead"
	return UnsupportedConstructError(message, loc=item.loc)


__all__ = [
	"BINDGEN_ATTR",
	"IGNORE_ATTR",
	"scan_source",
	"scan_file",
	"scan_paths",
	"collect_sources",
]
