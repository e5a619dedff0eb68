# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Module graph resolution: an unordered set of `LuaModule`s with `include`
requests -> one tree rooted at the `main` module.

Resolution runs in fixpoint rounds. Each round collects every
(parent, child) pair where the child exists and has no outstanding includes
of its own, then attaches them all. A round that finds nothing ends the
loop. A resolved child is shared: every module that includes it gets it as
a child.

Anything still outstanding afterwards is an error: an include cycle or a
reference to a module that was never scanned.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Set, Tuple

from luaudecl.core.diagnostics import Diagnostic
from luaudecl.core.errors import ResolutionError, UnresolvedReferenceError
from luaudecl.core.span import Span

from .items import LuaModule


class ModuleResolver:
	"""
	Resolve modules into a single rooted tree.

	After `resolve`, `rounds` holds the number of fixpoint rounds (including
	the final round that found nothing) and `diagnostics` any warnings.
	"""

	def __init__(self) -> None:
		self.rounds = 0
		self.diagnostics: List[Diagnostic] = []

	def resolve(self, modules: Sequence[LuaModule]) -> LuaModule:
		self.rounds = 0
		self.diagnostics = []

		ignored = {m.name for m in modules if m.ignored}
		live = [m for m in modules if not m.ignored]
		root = self._pick_root(live)
		pending = self._index(root, live)
		for module in [root, *pending.values()]:
			module.includes = [n for n in module.includes if n not in ignored]

		while True:
			self.rounds += 1
			insertions: List[Tuple[LuaModule, LuaModule]] = []
			for parent in pending.values():
				for name in parent.includes:
					child = pending.get(name)
					if child is not None and child is not parent and not child.includes:
						insertions.append((parent, child))
			if not insertions:
				break
			for parent, child in insertions:
				parent.insert_module(child)

		self._check_stuck(root, pending)

		for name in list(root.includes):
			child = pending.get(name)
			if child is None:
				raise self._missing(root, name)
			root.insert_module(child)

		reachable = _reachable(root)
		for name, module in pending.items():
			if name not in reachable:
				self.diagnostics.append(
					Diagnostic(
						message=f"module '{name}' is not included by any module and is left out of the declarations",
						phase="resolution",
						severity="warning",
						span=_module_span(module),
					)
				)
		return root

	def _pick_root(self, live: Sequence[LuaModule]) -> LuaModule:
		roots = [m for m in live if m.is_root]
		if not roots:
			raise ResolutionError(
				"no main module found, can't construct a declaration file; "
				"mark one module with #[mlua_bindgen(main)]"
			)
		if len(roots) > 1:
			raise ResolutionError(
				"found multiple main modules: " + ", ".join(f"'{m.name}'" for m in roots),
				loc=_module_span(roots[1]),
				notes=[f"'{m.name}' is marked main at {_module_span(m).describe()}" for m in roots],
			)
		return roots[0]

	def _index(self, root: LuaModule, live: Sequence[LuaModule]) -> Dict[str, LuaModule]:
		pending: Dict[str, LuaModule] = {}
		first: Dict[str, LuaModule] = {root.name: root}
		for module in live:
			if module is root:
				continue
			previous = first.get(module.name)
			if previous is not None:
				raise ResolutionError(
					f"duplicate module definition for '{module.name}'",
					loc=_module_span(module),
					notes=[f"previous definition of '{module.name}' is at {_module_span(previous).describe()}"],
				)
			first[module.name] = module
			pending[module.name] = module
		return pending

	def _check_stuck(self, root: LuaModule, pending: Dict[str, LuaModule]) -> None:
		stuck = [m for m in pending.values() if m.includes]
		if not stuck:
			return
		cycle = _find_cycle({name: list(m.includes) for name, m in pending.items()})
		if cycle is not None:
			raise ResolutionError(
				"include cycle detected: " + " -> ".join(cycle),
				loc=_module_span(pending[cycle[0]]),
			)
		for module in stuck:
			for name in module.includes:
				if name not in pending:
					raise self._missing(module, name, root=root)
		# Every stuck module without a cycle waits on a missing one above.
		raise AssertionError("module resolution stalled without a cause")

	def _missing(self, module: LuaModule, name: str, *, root: Optional[LuaModule] = None) -> ResolutionError:
		if root is not None and name == root.name:
			return ResolutionError(
				f"module '{module.name}' can't include the main module '{name}'",
				loc=_module_span(module),
			)
		return UnresolvedReferenceError(
			f"module '{module.name}' includes unknown module '{name}' (expected a module named '{name}' declared with #[mlua_bindgen])",
			loc=_module_span(module),
		)


def _find_cycle(deps: Dict[str, List[str]]) -> Optional[List[str]]:
	vis: Set[str] = set()
	stack: List[str] = []
	onstack: Set[str] = set()

	def dfs(n: str) -> Optional[List[str]]:
		vis.add(n)
		stack.append(n)
		onstack.add(n)
		for m in deps.get(n, []):
			if m not in deps:
				continue
			if m not in vis:
				c = dfs(m)
				if c is not None:
					return c
			elif m in onstack:
				i = stack.index(m)
				return stack[i:] + [m]
		stack.pop()
		onstack.remove(n)
		return None

	for n in deps:
		if n not in vis:
			c = dfs(n)
			if c is not None:
				return c
	return None


def _reachable(root: LuaModule) -> Set[str]:
	seen: Set[str] = set()
	stack = list(root.mods)
	while stack:
		module = stack.pop()
		if module.name in seen:
			continue
		seen.add(module.name)
		stack.extend(module.mods)
	return seen


def _module_span(module: LuaModule) -> Span:
	return Span.from_loc(module.loc).in_file(module.path)


__all__ = ["ModuleResolver"]
