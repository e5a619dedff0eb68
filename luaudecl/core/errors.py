# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Error kinds raised by the bindgen pipeline.

Every phase raises a subclass of `BindgenError`; the run is fail-fast, so the
first error propagates to the caller and nothing is written. The CLI turns
the exception into a `Diagnostic` with `to_diagnostic()`.
"""

from __future__ import annotations

from typing import Any, Sequence

from .diagnostics import Diagnostic
from .span import Span


class BindgenError(ValueError):
	"""Base class for all generator failures."""

	phase = "bindgen"

	def __init__(self, message: str, *, loc: Any = None, notes: Sequence[str] = ()) -> None:
		super().__init__(message)
		self.message = message
		self.loc = loc
		self.span = Span.from_loc(loc)
		self.notes = list(notes)

	def with_file(self, path: Any) -> "BindgenError":
		"""Attach `path` to the span when the raising site did not know the file."""
		self.span = self.span.in_file(path)
		return self

	def to_diagnostic(self) -> Diagnostic:
		return Diagnostic(
			message=self.message,
			phase=self.phase,
			severity="error",
			span=self.span,
			notes=list(self.notes),
		)


class ParseError(BindgenError):
	"""Malformed source, attribute arguments or type expression."""

	phase = "parse"


class StructuralError(BindgenError):
	"""Well-formed source whose shape breaks a binding rule (arity, nesting)."""

	phase = "structural"


class ResolutionError(BindgenError):
	"""Module graph could not be merged into a single rooted tree."""

	phase = "resolution"


class UnresolvedReferenceError(ResolutionError):
	"""A module includes a name that no scanned module provides."""


class UnsupportedConstructError(BindgenError):
	"""A syntactic shape outside the closed set the generator understands."""

	phase = "unsupported"


class SourceIOError(BindgenError):
	"""An input path could not be read."""

	phase = "io"


class ConfigError(BindgenError):
	"""Invalid configuration file or command-line setting."""

	phase = "config"


__all__ = [
	"BindgenError",
	"ParseError",
	"StructuralError",
	"ResolutionError",
	"UnresolvedReferenceError",
	"UnsupportedConstructError",
	"SourceIOError",
	"ConfigError",
]
