from __future__ import annotations


class ParamScanError(Exception):
	"""Base error for parameter-schema extraction."""


class SourceReadError(ParamScanError):
	"""A source file could not be read."""

	def __init__(self, path: str, reason: str):
		super().__init__(f"Cannot read {path}: {reason}")
		self.path = path


class SourceParseError(ParamScanError):
	"""A source file has syntax errors."""

	def __init__(self, path: str, line: int):
		super().__init__(f"Syntax error in {path} near line {line}")
		self.path = path
		self.line = line


class FacilityError(ParamScanError):
	"""The type-checking facility could not be built over a file set."""
