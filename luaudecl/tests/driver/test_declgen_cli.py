# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from luaudecl.declgen import main as declgen_main
from luaudecl.luau.emitter import HEADER


def test_cli_writes_to_stdout(sample_crate: Path, capsys: pytest.CaptureFixture[str]) -> None:
	exit_code = declgen_main([str(sample_crate)])
	out = capsys.readouterr()
	assert exit_code == 0
	assert out.out.startswith(HEADER)
	assert "declare inner: {" in out.out
	assert out.err == ""


def test_cli_writes_output_file(sample_crate: Path, tmp_path: Path) -> None:
	target = tmp_path / "types" / "api.d.luau"
	exit_code = declgen_main([str(sample_crate), "-o", str(target)])
	assert exit_code == 0
	assert "declare imported: {" in target.read_text(encoding="utf-8")


def test_cli_json_reports_success(sample_crate: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	target = tmp_path / "api.d.luau"
	exit_code = declgen_main([str(sample_crate), "--json", "--output", str(target)])
	payload = json.loads(capsys.readouterr().out)
	assert exit_code == 0
	assert payload["exit_code"] == 0
	assert payload["diagnostics"] == []
	assert payload["output"] == str(target)


def test_cli_json_reports_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = tmp_path / "lib.rs"
	src.write_text("#[mlua_bindgen(main, include = [ghost_module])]\nmod root {}\n", encoding="utf-8")
	target = tmp_path / "api.d.luau"
	exit_code = declgen_main([str(src), "--json", "-o", str(target)])
	payload = json.loads(capsys.readouterr().out)
	assert exit_code == 1
	assert payload["exit_code"] == 1
	(diag,) = payload["diagnostics"]
	assert diag["phase"] == "resolution"
	assert diag["severity"] == "error"
	assert diag["file"] == str(src)
	assert diag["line"] == 2
	assert "ghost" in diag["message"]
	# Fail-fast: nothing is written.
	assert not target.exists()


def test_cli_human_errors_go_to_stderr(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = tmp_path / "lib.rs"
	src.write_text(
		"#[mlua_bindgen]\nimpl Thing {\n\t#[get]\n\tfn size(_: &Lua, this: &Self, extra: u8) -> u8 { 0 }\n}\n",
		encoding="utf-8",
	)
	exit_code = declgen_main([str(src)])
	out = capsys.readouterr()
	assert exit_code == 1
	assert out.out == ""
	assert out.err.startswith(f"{src}:4:")
	assert ": error: getter 'Thing::size'" in out.err


def test_cli_prints_warnings(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = tmp_path / "lib.rs"
	src.write_text("#[mlua_bindgen(main)]\nmod root {}\n\n#[mlua_bindgen]\nmod lonely {}\n", encoding="utf-8")
	exit_code = declgen_main([str(src)])
	out = capsys.readouterr()
	assert exit_code == 0
	assert f"{src}:5:1: warning: module 'lonely'" in out.err


def test_cli_type_map_and_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = tmp_path / "lib.rs"
	src.write_text(
		"#[mlua_bindgen(main)]\nmod root {\n\t#[mlua_bindgen]\n\tfn f(_: &Lua, a: Handle, b: Tag) {}\n}\n",
		encoding="utf-8",
	)
	config = tmp_path / "luaudecl.json"
	config.write_text(json.dumps({"type_map": {"Handle": "integer", "Tag": "number"}, "output": "out.d.luau"}), encoding="utf-8")
	exit_code = declgen_main([str(src), "--config", str(config), "--type-map", "Tag=string"])
	assert exit_code == 0
	text = (tmp_path / "out.d.luau").read_text(encoding="utf-8")
	assert "declare function f(a: integer, b: string)\n" in text
	assert capsys.readouterr().out == ""


def test_cli_bad_type_map(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = tmp_path / "lib.rs"
	src.write_text("#[mlua_bindgen(main)]\nmod root {}\n", encoding="utf-8")
	exit_code = declgen_main([str(src), "--type-map", "oops", "--json"])
	payload = json.loads(capsys.readouterr().out)
	assert exit_code == 1
	assert payload["diagnostics"][0]["phase"] == "config"


def test_cli_missing_source(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	exit_code = declgen_main([str(tmp_path / "nope.rs")])
	assert exit_code == 1
	assert "error: input path" in capsys.readouterr().err
