# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure reported by the CLI.

Fatal problems travel as `BindgenError` exceptions and are converted here at
the edge; non-fatal findings (dropped orphan modules) are collected as
warnings directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a generator diagnostic (error/warning/note)."""

	message: str
	code: str | None = None
	# Pipeline phase that produced the diagnostic: parse, structural,
	# resolution, unsupported, io, config.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def render(self) -> str:
		"""Human-readable `file:line:col: severity: message` form with notes."""
		lines = [f"{self.span.describe()}: {self.severity}: {self.message}"]
		for note in self.notes:
			lines.append(f"  note: {note}")
		return "\n".join(lines)


def diag_to_json(diag: Diagnostic, default_phase: str | None = None, source: Path | None = None) -> dict:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	file = diag.span.file
	if file is None and source is not None:
		file = str(source)
	return {
		"phase": diag.phase or default_phase,
		"code": diag.code,
		"message": diag.message,
		"severity": diag.severity,
		"file": file,
		"line": diag.span.line,
		"column": diag.span.column,
		"notes": list(diag.notes),
	}


__all__ = ["Diagnostic", "diag_to_json"]
