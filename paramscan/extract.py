"""Extraction driver and per-entry result cache."""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional

from .checker import NullTypeFacility, ProgramTypeFacility, TypeFacility
from .fs_scan import collect_source_files
from .model import DeclarationCall, ExtractionResult
from .scanner import scan_declarations
from .source import parse_source


logger = logging.getLogger(__name__)


def build_facility(paths: List[str]) -> TypeFacility:
	"""Program-wide facility, or the textual-only one when it cannot be built."""
	try:
		return ProgramTypeFacility(paths)
	except Exception as e:
		logger.warning("Type information unavailable, falling back to textual extraction: %s", e)
		return NullTypeFacility()


def scan_file(path: str, facility: TypeFacility) -> List[DeclarationCall]:
	unit = facility.source_unit(path) or parse_source(path)
	return scan_declarations(unit, facility)


def compute_declarations(entry_file: str) -> List[DeclarationCall]:
	"""Declaration calls of an entry file and everything it imports locally.

	Files keep discovery order; calls keep source order within a file. A file
	that cannot be read or parsed is skipped with a warning.
	"""
	files = collect_source_files(entry_file)
	facility = build_facility(files)

	calls: List[DeclarationCall] = []
	for path in files:
		try:
			calls.extend(scan_file(path, facility))
		except Exception as e:
			logger.warning("Could not analyze %s: %s", path, e)
	return calls


class ExtractionCache:
	"""Extraction results keyed by resolved entry path.

	Not synchronized: concurrent hosts must serialize access themselves.
	"""

	def __init__(self) -> None:
		self._results: Dict[str, ExtractionResult] = {}

	def __contains__(self, entry_file: str) -> bool:
		return os.path.abspath(entry_file) in self._results

	def __len__(self) -> int:
		return len(self._results)

	def get_or_compute(self, entry_file: str) -> ExtractionResult:
		key = os.path.abspath(entry_file)
		cached = self._results.get(key)
		if cached is not None:
			return cached

		try:
			result = ExtractionResult(entry=key, calls=compute_declarations(key))
		except Exception as e:
			logger.warning("Could not analyze parameter declarations of %s: %s", key, e)
			# An empty result is cached so a failing entry is not retried
			result = ExtractionResult(entry=key, calls=[])

		self._results[key] = result
		return result

	def invalidate(self, entry_file: str) -> None:
		self._results.pop(os.path.abspath(entry_file), None)

	def invalidate_all(self) -> None:
		self._results.clear()


def extract_declarations(entry_file: str, cache: Optional[ExtractionCache] = None) -> ExtractionResult:
	if cache is None:
		return ExtractionResult(entry=os.path.abspath(entry_file), calls=_safe_compute(entry_file))
	return cache.get_or_compute(entry_file)


def _safe_compute(entry_file: str) -> List[DeclarationCall]:
	try:
		return compute_declarations(entry_file)
	except Exception as e:
		logger.warning("Could not analyze parameter declarations of %s: %s", entry_file, e)
		return []
