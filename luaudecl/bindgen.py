# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Pipeline facade: inputs -> scan -> map -> resolve -> emit.

	text = (
		BindgenTransformer()
		.add_input("src/")
		.parse()
		.to_string()
	)

The run is fail-fast: the first `BindgenError` propagates and nothing is
produced. Non-fatal findings are collected on `diagnostics`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Tuple

from luaudecl.core.diagnostics import Diagnostic
from luaudecl.core.errors import BindgenError
from luaudecl.luau.emitter import DeclarationFile, LuaUnit
from luaudecl.luau.items import LuaEnum, LuaFunc, LuaModule, LuaStruct
from luaudecl.luau.resolver import ModuleResolver
from luaudecl.luau.types import TypeMapper, TypeRegistry
from luaudecl.parser import collect_sources, scan_file, scan_source
from luaudecl.parser.parsed import ParsedFile


def build_registry(type_map: Optional[Mapping[str, str]] = None) -> TypeRegistry:
	"""Default registry extended with `Rust name -> Luau name` entries."""
	registry = TypeRegistry.with_defaults()
	for name, luau_name in (type_map or {}).items():
		registry.register_luau(name, luau_name)
	return registry


class BindgenTransformer:
	def __init__(self, registry: Optional[TypeRegistry] = None) -> None:
		self.registry = registry if registry is not None else TypeRegistry.with_defaults()
		self.inputs: List[Path] = []
		self.sources: List[Tuple[str, Optional[Path]]] = []
		self.files: List[ParsedFile] = []
		self.resolver = ModuleResolver()
		self.diagnostics: List[Diagnostic] = []

	def add_input(self, path: Path | str, max_depth: Optional[int] = None) -> "BindgenTransformer":
		"""Add a source file, or every `.rs` file under a directory."""
		self.inputs.extend(collect_sources([path], max_depth))
		return self

	def add_input_dir(self, path: Path | str, max_depth: Optional[int] = None) -> "BindgenTransformer":
		return self.add_input(path, max_depth)

	def add_inputs(self, paths: Iterable[Path | str], max_depth: Optional[int] = None) -> "BindgenTransformer":
		self.inputs.extend(collect_sources(paths, max_depth))
		return self

	def add_source(self, source: str, path: Optional[Path] = None) -> "BindgenTransformer":
		"""Add in-memory source text; `path` only labels diagnostics."""
		self.sources.append((source, path))
		return self

	def parse(self) -> "BindgenTransformer":
		self.files = [scan_file(p) for p in self.inputs]
		self.files.extend(scan_source(text, path) for text, path in self.sources)
		return self

	def transform(self) -> DeclarationFile:
		mapper = TypeMapper(self.registry)
		modules: List[LuaModule] = []
		free: List[LuaUnit] = []
		for parsed in self.files:
			try:
				modules.extend(LuaModule.from_parsed(m, mapper) for m in parsed.modules)
				free.extend(LuaStruct.from_parsed(t, mapper, path=parsed.path) for t in parsed.types if not t.ignored)
				free.extend(LuaEnum.from_parsed(e) for e in parsed.enums if not e.ignored)
				free.extend(LuaFunc.from_parsed(f, mapper) for f in parsed.functions if not f.ignored)
			except BindgenError as err:
				raise err.with_file(parsed.path)

		root = self.resolver.resolve(modules)
		self.diagnostics.extend(self.resolver.diagnostics)

		declarations = DeclarationFile()
		declarations.add_root(root)
		declarations.add_items(free)
		return declarations

	def to_string(self) -> str:
		return self.transform().to_string()


def generate_declarations(
	paths: Iterable[Path | str],
	registry: Optional[TypeRegistry] = None,
	max_depth: Optional[int] = None,
) -> str:
	return BindgenTransformer(registry).add_inputs(paths, max_depth).parse().to_string()


__all__ = ["BindgenTransformer", "build_registry", "generate_declarations"]
