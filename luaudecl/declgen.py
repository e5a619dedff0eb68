# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
luaudecl command line.

Scans Rust sources for `#[mlua_bindgen]` items and writes one Luau
declaration file, to `-o/--output` or stdout.

With --json, prints structured diagnostics (phase/message/severity/file/line/column)
and an exit_code; otherwise prints human-readable messages to stderr.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List

from luaudecl.bindgen import BindgenTransformer, build_registry
from luaudecl.core.config import BindgenConfig, load_config, parse_type_mapping
from luaudecl.core.diagnostics import Diagnostic, diag_to_json
from luaudecl.core.errors import BindgenError, SourceIOError
from luaudecl.core.span import Span


def _report(diagnostics: List[Diagnostic], *, as_json: bool, exit_code: int, output: Path | None = None, text: str | None = None) -> int:
	if as_json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [diag_to_json(d, "bindgen") for d in diagnostics],
		}
		if output is not None:
			payload["output"] = str(output)
		elif text is not None:
			payload["declarations"] = text
		print(json.dumps(payload))
	else:
		for d in diagnostics:
			print(d.render(), file=sys.stderr)
		if text is not None and output is None:
			sys.stdout.write(text)
	return exit_code


def main(argv: list[str] | None = None) -> int:
	parser = argparse.ArgumentParser(
		prog="luaudecl",
		description="Generate a Luau declaration file from #[mlua_bindgen] Rust sources",
	)
	parser.add_argument("source", type=Path, nargs="+", help="Rust source file(s) or directories to scan")
	parser.add_argument("-o", "--output", type=Path, help="Path to the declaration file (default: stdout)")
	parser.add_argument(
		"--max-depth",
		type=int,
		default=None,
		help="Directory recursion limit; 0 scans only the files directly inside a directory",
	)
	parser.add_argument(
		"--type-map",
		dest="type_map",
		action="append",
		default=[],
		metavar="NAME=LUAU",
		help="Map a Rust type name to a Luau type (repeatable)",
	)
	parser.add_argument("--config", type=Path, help="Path to a JSON config file (type_map/max_depth/output)")
	parser.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics as JSON (phase/message/severity/file/line/column)",
	)
	args = parser.parse_args(argv)

	if args.max_depth is not None and args.max_depth < 0:
		parser.error("--max-depth must be non-negative")

	diagnostics: List[Diagnostic] = []
	try:
		config = load_config(args.config) if args.config is not None else BindgenConfig()
		overrides = dict(parse_type_mapping(t) for t in args.type_map)
		config = config.merged(type_map=overrides, max_depth=args.max_depth, output=args.output)

		transformer = BindgenTransformer(build_registry(config.type_map))
		transformer.add_inputs(args.source, max_depth=config.max_depth)
		text = transformer.parse().to_string()
		diagnostics.extend(transformer.diagnostics)
	except BindgenError as err:
		diagnostics.append(err.to_diagnostic())
		return _report(diagnostics, as_json=args.json, exit_code=1)

	if config.output is not None:
		try:
			config.output.parent.mkdir(parents=True, exist_ok=True)
			config.output.write_text(text, encoding="utf-8")
		except OSError as err:
			failure = SourceIOError(f"can't write declaration file: {err.strerror or err}", loc=Span(file=str(config.output)))
			diagnostics.append(failure.to_diagnostic())
			return _report(diagnostics, as_json=args.json, exit_code=1)

	return _report(diagnostics, as_json=args.json, exit_code=0, output=config.output, text=text)


__all__ = ["main"]
