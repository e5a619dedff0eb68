# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Run configuration.

Settings come from an optional JSON file and from command-line flags; flags
win. The file looks like:

	{
		"type_map": {"Vec2": "Vector", "Handle": "userdata"},
		"max_depth": 2,
		"output": "types/api.d.luau"
	}

`type_map` extends the primitive equivalences: keys are Rust type names
(last path segment), values Luau spellings (`number`, `string`, ...) or a
custom type name.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

from .errors import ConfigError
from .span import Span

_KNOWN_KEYS = {"type_map", "max_depth", "output"}


@dataclass
class BindgenConfig:
	type_map: Dict[str, str] = field(default_factory=dict)
	max_depth: Optional[int] = None
	output: Optional[Path] = None

	def merged(
		self,
		*,
		type_map: Optional[Dict[str, str]] = None,
		max_depth: Optional[int] = None,
		output: Optional[Path] = None,
	) -> "BindgenConfig":
		"""Return a copy with the given (non-None) overrides applied."""
		combined = dict(self.type_map)
		combined.update(type_map or {})
		return BindgenConfig(
			type_map=combined,
			max_depth=max_depth if max_depth is not None else self.max_depth,
			output=output if output is not None else self.output,
		)


def load_config(path: Path) -> BindgenConfig:
	span = Span(file=str(path))
	try:
		raw = json.loads(path.read_text(encoding="utf-8"))
	except OSError as err:
		raise ConfigError(f"can't read config file: {err}", loc=span) from err
	except json.JSONDecodeError as err:
		raise ConfigError(f"invalid JSON: {err.msg}", loc=Span(file=str(path), line=err.lineno, column=err.colno)) from err
	if not isinstance(raw, dict):
		raise ConfigError("config file must contain a JSON object", loc=span)
	unknown = sorted(set(raw) - _KNOWN_KEYS)
	if unknown:
		raise ConfigError("unknown config keys: " + ", ".join(unknown), loc=span)

	type_map = raw.get("type_map", {})
	if not isinstance(type_map, dict) or not all(isinstance(k, str) and isinstance(v, str) for k, v in type_map.items()):
		raise ConfigError("'type_map' must map type names to Luau type names", loc=span)
	max_depth = raw.get("max_depth")
	if max_depth is not None and (not isinstance(max_depth, int) or isinstance(max_depth, bool) or max_depth < 0):
		raise ConfigError("'max_depth' must be a non-negative integer", loc=span)
	output = raw.get("output")
	if output is not None and not isinstance(output, str):
		raise ConfigError("'output' must be a path string", loc=span)

	return BindgenConfig(
		type_map=dict(type_map),
		max_depth=max_depth,
		# Relative outputs are taken relative to the config file.
		output=(path.parent / output) if output is not None else None,
	)


def parse_type_mapping(text: str) -> Tuple[str, str]:
	"""Split a `--type-map NAME=LUAU` value."""
	name, sep, luau = text.partition("=")
	name, luau = name.strip(), luau.strip()
	if not sep or not name or not luau:
		raise ConfigError(f"type mapping '{text}' must look like NAME=LUAU_TYPE")
	return name, luau


__all__ = ["BindgenConfig", "load_config", "parse_type_mapping"]
