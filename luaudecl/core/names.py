# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Name transforms applied when host identifiers become Luau-facing names.
"""

from __future__ import annotations

# Longest first; matched case-insensitively.
LUA_PREFIXES: tuple[str, ...] = ("lua_", "lua")

# Marks opaque userdata handles so they never collide with structural tables.
USERDATA_PREFIX = "u"

# Naming convention every included module reference must follow.
MODULE_SUFFIX = "_module"


def strip_prefix(name: str) -> str:
	"""
	Drop a conventional `lua`/`lua_` prefix from a declaration-facing name.

	`LuaVector` -> `Vector`, `lua_add` -> `add`. A name that is nothing but
	the prefix is returned unchanged.
	"""
	lowered = name.lower()
	for prefix in LUA_PREFIXES:
		if lowered.startswith(prefix) and len(name) > len(prefix):
			return name[len(prefix):]
	return name


def userdata_name(name: str) -> str:
	return USERDATA_PREFIX + name


def strip_module_suffix(name: str) -> str | None:
	"""Return `name` without the module suffix, or None when it is missing."""
	if not name.endswith(MODULE_SUFFIX) or len(name) == len(MODULE_SUFFIX):
		return None
	return name[: -len(MODULE_SUFFIX)]


__all__ = ["LUA_PREFIXES", "USERDATA_PREFIX", "MODULE_SUFFIX", "strip_prefix", "userdata_name", "strip_module_suffix"]
