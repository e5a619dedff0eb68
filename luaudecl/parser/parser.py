# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lark front-end: Rust source text -> `parser.ast` nodes.

`parse_source` raises lark's `UnexpectedInput` on malformed source; callers
(see `parser.__init__`) convert it into a `ParseError` with a span.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree

from .ast import (
	ArrayType,
	AssocBinding,
	Attribute,
	ConstArg,
	DynTraitType,
	EnumItem,
	EnumVariantDef,
	FnParam,
	FnPointerType,
	FunctionItem,
	GenericArg,
	ImplBlock,
	ImplTraitType,
	InferredType,
	Item,
	LifetimeArg,
	Located,
	ModuleItem,
	NeverType,
	OtherItem,
	PathSegment,
	PathType,
	PointerType,
	QualifiedPathType,
	RefType,
	SliceType,
	SourceFile,
	TupleType,
	TypeExpr,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

# Earley keeps the item grammar free of LALR table conflicts around the
# token-tree rules; the basic lexer keeps keywords out of NAME.
_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="earley",
	lexer="basic",
	start="source_file",
	propagate_positions=True,
	maybe_placeholders=False,
)
_ATTR_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="earley",
	lexer="basic",
	start="attr_args",
	propagate_positions=True,
	maybe_placeholders=False,
)
_TYPE_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="earley",
	lexer="basic",
	start="type_expr",
	propagate_positions=True,
	maybe_placeholders=False,
)

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "0": "\0", "\\": "\\", "'": "'", '"': '"'}
_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F_]+\}|x[0-9a-fA-F]{2}|\n\s*|.)")

_OTHER_ITEMS = {
	"struct_item": "struct",
	"trait_item": "trait",
	"use_item": "use",
	"const_item": "const",
	"static_item": "static",
	"type_alias": "type",
	"extern_crate": "extern crate",
	"extern_block": "extern block",
	"macro_item": "macro",
}


def parse_source(source: str) -> SourceFile:
	"""Parse a whole Rust file into the item-level syntax tree."""
	tree = _PARSER.parse(source)
	return _build_source_file(tree, source)


def parse_type_expr(text: str) -> TypeExpr:
	"""Parse a standalone Rust type expression (`Option<Vec<u8>>`)."""
	tree = _TYPE_PARSER.parse(text)
	return _build_type_expr(tree)


def parse_attr_args(text: str) -> Tree:
	"""
	Parse the argument list of an `#[mlua_bindgen(...)]` attribute.

	Returns the raw `attr_args` tree; interpretation of the keywords lives in
	the scanner.
	"""
	return _ATTR_PARSER.parse(text)


def decode_string(tok: Token) -> str:
	"""Decode a Rust string literal token (normal, byte, C or raw)."""
	text = tok.value
	if text[:1] in ("b", "c"):
		text = text[1:]
	if text.startswith("r"):
		hashes = len(text) - len(text[1:].lstrip("#")) - 1
		return text[2 + hashes : len(text) - 1 - hashes]
	return _ESCAPE_RE.sub(_unescape, text[1:-1])


def _unescape(match: re.Match) -> str:
	esc = match.group(1)
	if esc.startswith("u{"):
		return chr(int(esc[2:-1].replace("_", ""), 16))
	if esc.startswith("x") and len(esc) == 3:
		return chr(int(esc[1:], 16))
	if esc.startswith("\n"):
		# Line continuation.
		return ""
	return _ESCAPES.get(esc, esc)


# ---------------------------------------------------------------- items


def _build_source_file(tree: Tree, src: str) -> SourceFile:
	items: List[Item] = []
	for child in tree.children:
		if isinstance(child, Tree) and _name(child) == "item":
			items.append(_build_item(child, src))
	return SourceFile(items=items)


def _build_item(tree: Tree, src: str) -> Item:
	attrs: List[Attribute] = []
	docs: List[str] = []
	visibility: Optional[str] = None
	kind_tree: Optional[Tree] = None
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind in ("attribute", "unsafe_attribute", "doc_comment"):
			_collect_attr(child, src, attrs, docs)
		elif kind == "visibility":
			visibility = " ".join(_slice(child, src).split())
		else:
			kind_tree = child
	if kind_tree is None:
		raise ValueError("item node missing its declaration")
	item = _build_item_kind(kind_tree, src)
	item.attrs = attrs
	item.docs = docs
	item.visibility = visibility
	return item


def _build_item_kind(tree: Tree, src: str) -> Item:
	kind = _name(tree)
	loc = _loc(tree)
	if kind == "function":
		return _build_function(tree, loc)
	if kind == "impl_block":
		return _build_impl(tree, src, loc)
	if kind == "enum_item":
		return _build_enum(tree, src, loc)
	if kind == "module_block":
		name = _first_token(tree, "NAME")
		items = [_build_item(c, src) for c in tree.children if isinstance(c, Tree) and _name(c) == "item"]
		return ModuleItem(loc=loc, name=name.value, items=items, inline=True)
	if kind == "module_decl":
		return ModuleItem(loc=loc, name=_first_token(tree, "NAME").value, inline=False)
	if kind in _OTHER_ITEMS:
		name_tok = next((c for c in tree.children if isinstance(c, Token) and c.type == "NAME"), None)
		return OtherItem(loc=loc, kind=_OTHER_ITEMS[kind], name=name_tok.value if name_tok is not None else None)
	raise ValueError(f"unexpected item kind {kind}")


def _collect_attr(tree: Tree, src: str, attrs: List[Attribute], docs: List[str]) -> None:
	"""Append an outer attribute to `attrs`, or its text to `docs` for doc forms."""
	kind = _name(tree)
	if kind == "doc_comment":
		tok = tree.children[0]
		docs.append(tok.value[3:].strip())
		return
	attr = _build_attribute(tree, src)
	if attr.path == ["doc"] and attr.value is not None:
		docs.append(attr.value.strip())
		return
	attrs.append(attr)


def _build_attribute(tree: Tree, src: str) -> Attribute:
	loc = _loc(tree)
	if _name(tree) == "unsafe_attribute":
		return Attribute(path=["unsafe"], loc=loc)
	path: List[str] = []
	input_tree: Optional[Tree] = None
	for child in tree.children:
		if isinstance(child, Tree) and _name(child) == "attr_path":
			path = [t.value for t in child.children if isinstance(t, Token) and t.type == "NAME"]
		elif isinstance(child, Tree) and _name(child) == "attr_input":
			input_tree = child
	attr = Attribute(path=path, loc=loc)
	if input_tree is None:
		return attr
	raw = _slice(input_tree, src).strip()
	if raw.startswith("="):
		strings = [c for c in input_tree.children if isinstance(c, Token) and c.type == "STRING"]
		if len(strings) == 1:
			attr.value = decode_string(strings[0])
		return attr
	attr.args = _strip_delims(raw)
	return attr


def _strip_delims(raw: str) -> str:
	raw = raw.strip()
	if len(raw) >= 2 and raw[0] in "([{" and raw[-1] in ")]}":
		return raw[1:-1].strip()
	return raw


def _build_function(tree: Tree, loc: Located) -> FunctionItem:
	name = _first_token(tree, "NAME").value
	params: List[FnParam] = []
	return_type: Optional[TypeExpr] = None
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind == "fn_params":
			params = [_build_param(p) for p in child.children if isinstance(p, Tree) and _name(p) in _PARAM_KINDS]
		elif kind == "return_type":
			return_type = _build_type_expr(_first_tree(child))
	return FunctionItem(loc=loc, name=name, params=params, return_type=return_type)


_PARAM_KINDS = {"typed_param", "ref_receiver", "value_receiver"}


def _build_param(tree: Tree) -> FnParam:
	kind = _name(tree)
	loc = _loc(tree)
	if kind in ("ref_receiver", "value_receiver"):
		name = _first_token(tree, "NAME").value
		return FnParam(loc=loc, name=name, receiver=name == "self")
	pattern, type_tree = [c for c in tree.children if isinstance(c, Tree)]
	type_expr = _build_type_expr(type_tree)
	name: Optional[str] = None
	if _name(pattern) == "ident_pattern":
		name = _first_token(pattern, "NAME").value
		if name == "_":
			name = None
	return FnParam(loc=loc, name=name, type_expr=type_expr, receiver=name == "self")


def _build_impl(tree: Tree, src: str, loc: Located) -> ImplBlock:
	self_type: Optional[TypeExpr] = None
	trait_type: Optional[TypeExpr] = None
	members: List[Item] = []
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind in ("generic_params", "where_clause", "inner_attr"):
			continue
		if kind == "impl_for":
			# `impl Trait for Type`: what we saw first was the trait.
			trait_type = self_type
			self_type = _build_type_expr(_first_tree(child))
		elif kind == "impl_member":
			members.append(_build_item(child, src))
		else:
			self_type = _build_type_expr(child)
	return ImplBlock(loc=loc, self_type=self_type, trait_type=trait_type, members=members)


def _build_enum(tree: Tree, src: str, loc: Located) -> EnumItem:
	name = _first_token(tree, "NAME").value
	variants = [_build_variant(c, src) for c in tree.children if isinstance(c, Tree) and _name(c) == "enum_variant"]
	return EnumItem(loc=loc, name=name, variants=variants)


def _build_variant(tree: Tree, src: str) -> EnumVariantDef:
	attrs: List[Attribute] = []
	docs: List[str] = []
	variant = EnumVariantDef(name=_first_token(tree, "NAME").value, loc=_loc(tree))
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind in ("attribute", "unsafe_attribute", "doc_comment"):
			_collect_attr(child, src, attrs, docs)
		elif kind == "variant_fields":
			variant.fields_kind = "struct" if _slice(child, src).lstrip().startswith("{") else "tuple"
		elif kind == "discriminant":
			text = _slice(child, src).strip()
			if text.startswith("="):
				text = text[1:].strip()
			variant.discriminant = text
			variant.discriminant_loc = _loc(child)
	variant.attrs = attrs
	variant.docs = docs
	return variant


# ---------------------------------------------------------------- types


def _build_type_expr(tree: Tree | Token) -> TypeExpr:
	if isinstance(tree, Token):
		raise ValueError(f"unexpected token {tree.type} in type position")
	kind = _name(tree)
	loc = _loc(tree)
	if kind == "path_type":
		segments = [_build_segment(c) for c in tree.children if isinstance(c, Tree)]
		if len(segments) == 1 and segments[0].name == "_" and not segments[0].args:
			return InferredType(loc=loc)
		return PathType(segments=segments, loc=loc)
	if kind == "ref_type":
		lifetime = next((c.value for c in tree.children if isinstance(c, Token) and c.type == "LIFETIME"), None)
		mutable = any(isinstance(c, Token) and c.type == "MUT" for c in tree.children)
		return RefType(inner=_build_type_expr(_first_tree(tree)), mutable=mutable, lifetime=lifetime, loc=loc)
	if kind == "ptr_type":
		mutable = any(isinstance(c, Token) and c.type == "MUT" for c in tree.children)
		return PointerType(inner=_build_type_expr(_first_tree(tree)), mutable=mutable, loc=loc)
	if kind == "array_type":
		elem_tree, len_tree = [c for c in tree.children if isinstance(c, Tree)]
		length = " ".join(t.value for t in len_tree.scan_values(lambda v: isinstance(v, Token)))
		return ArrayType(elem=_build_type_expr(elem_tree), length=length, loc=loc)
	if kind == "slice_type":
		return SliceType(elem=_build_type_expr(_first_tree(tree)), loc=loc)
	if kind == "tuple_type":
		return TupleType(elems=[_build_type_expr(c) for c in tree.children if isinstance(c, Tree)], loc=loc)
	if kind == "paren_type":
		return _build_type_expr(_first_tree(tree))
	if kind == "never_type":
		return NeverType(loc=loc)
	if kind == "impl_trait_type":
		return ImplTraitType(loc=loc)
	if kind == "dyn_trait_type":
		return DynTraitType(loc=loc)
	if kind == "fn_ptr_type":
		return FnPointerType(loc=loc)
	if kind == "qualified_path_type":
		return QualifiedPathType(loc=loc)
	raise ValueError(f"unexpected type node {kind}")


def _build_segment(tree: Tree) -> PathSegment:
	name = _first_token(tree, "NAME").value
	if _name(tree) == "fn_sugar_segment":
		inputs: List[TypeExpr] = []
		output: Optional[TypeExpr] = None
		for child in tree.children:
			if not isinstance(child, Tree):
				continue
			if _name(child) == "fn_output":
				output = _build_type_expr(_first_tree(child))
			else:
				inputs.append(_build_type_expr(child))
		return PathSegment(name=name, fn_inputs=inputs, fn_output=output)
	args: List[GenericArg] = []
	for child in tree.children:
		if isinstance(child, Tree) and _name(child) == "generic_args":
			args = [_build_generic_arg(a) for a in child.children if isinstance(a, Tree)]
	return PathSegment(name=name, args=args)


def _build_generic_arg(tree: Tree) -> GenericArg:
	kind = _name(tree)
	loc = _loc(tree)
	if kind == "lifetime_arg":
		return LifetimeArg(name=tree.children[0].value, loc=loc)
	if kind == "const_arg":
		text = "".join(t.value for t in tree.scan_values(lambda v: isinstance(v, Token)))
		return ConstArg(text=text, loc=loc)
	if kind == "assoc_binding":
		name = _first_token(tree, "NAME").value
		bound = [c for c in tree.children if isinstance(c, Tree) and _name(c) != "generic_args"]
		type_expr = _build_type_expr(bound[0]) if len(bound) == 1 else None
		return AssocBinding(name=name, type_expr=type_expr, loc=loc)
	return _build_type_expr(tree)


# ---------------------------------------------------------------- helpers


def _slice(tree: Tree, src: str) -> str:
	meta = tree.meta
	if getattr(meta, "empty", True):
		return ""
	return src[meta.start_pos : meta.end_pos]


def _first_tree(tree: Tree) -> Tree:
	return next(c for c in tree.children if isinstance(c, Tree))


def _first_token(tree: Tree, type_name: str) -> Token:
	return next(c for c in tree.children if isinstance(c, Token) and c.type == type_name)


def _loc(tree: Tree) -> Located:
	meta = tree.meta
	return Located(line=getattr(meta, "line", 0), column=getattr(meta, "column", 0))


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


__all__ = [
	"parse_source",
	"parse_type_expr",
	"parse_attr_args",
	"decode_string",
]
