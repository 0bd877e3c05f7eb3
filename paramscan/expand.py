"""Expansion of a declared parameter type into flat field rows.

Every query goes through a ``TypeFacility``; with ``NullTypeFacility`` only
what is written inline can be classified.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Set

from tree_sitter import Node

from .checker import TypeFacility
from .comments import comment_info
from .model import FieldRow
from .source import SourceUnit
from .types import (
	LITERAL,
	PRIMITIVE,
	REFERENCE,
	UNION,
	PropertyDesc,
	TypeDesc,
	format_number,
	written_properties,
)


logger = logging.getLogger(__name__)

PRIMITIVES = ("string", "number", "boolean")
UNKNOWN = "unknown"
PASSWORD = "password"
INDEX_KEYS = ("string", "number")

# Erased from unions, as TypeScript does without strictNullChecks
_NULLISH = ("null", "undefined")


def _is_nullish(desc: TypeDesc) -> bool:
	return desc.kind == PRIMITIVE and desc.name in _NULLISH


def _reduce(facility: TypeFacility, desc: TypeDesc, seen: Set[str]) -> Optional[Set[str]]:
	"""Primitive kinds a type reduces to; None when it is not primitive."""
	kind = desc.kind
	if kind == LITERAL:
		if isinstance(desc.value, bool):
			return {"boolean"}
		return {"string"} if isinstance(desc.value, str) else {"number"}
	if kind == PRIMITIVE:
		return {desc.name} if desc.name in PRIMITIVES else None
	if kind == UNION:
		branches = [m for m in desc.members if not _is_nullish(m)]
		if not branches:
			return None
		reduced: Set[str] = set()
		for member in branches:
			part = _reduce(facility, member, seen)
			if part is None:
				return None
			reduced |= part
		return reduced
	if kind == REFERENCE:
		token = desc.token
		if token in seen:
			# Already being expanded: contributes nothing
			return set()
		seen.add(token)
		try:
			target = facility.declared_type(desc)
			return _reduce(facility, target, seen) if target is not None else None
		finally:
			seen.discard(token)
	return None


def classify_type(facility: TypeFacility, desc: Optional[TypeDesc], seen: Optional[Set[str]] = None) -> str:
	if desc is None:
		return UNKNOWN
	reduced = _reduce(facility, desc, set() if seen is None else seen)
	if not reduced:
		return UNKNOWN
	return " | ".join(sorted(reduced))


def _values(facility: TypeFacility, desc: TypeDesc, seen: Set[str]) -> List[str]:
	if desc.kind == LITERAL:
		if isinstance(desc.value, bool):
			return []
		return [desc.value if isinstance(desc.value, str) else format_number(desc.value)]
	if desc.kind == UNION:
		values: List[str] = []
		for member in desc.members:
			values.extend(_values(facility, member, seen))
		return values
	if desc.kind == REFERENCE:
		token = desc.token
		if token in seen:
			return []
		seen.add(token)
		try:
			target = facility.declared_type(desc)
			return _values(facility, target, seen) if target is not None else []
		finally:
			seen.discard(token)
	return []


def acceptable_values(facility: TypeFacility, desc: Optional[TypeDesc], seen: Optional[Set[str]] = None) -> List[str]:
	"""Sorted, deduplicated literal values of a literal union."""
	if desc is None:
		return []
	return sorted(set(_values(facility, desc, set() if seen is None else seen)))


def field_row(facility: TypeFacility, prop: PropertyDesc) -> FieldRow:
	try:
		type_str = classify_type(facility, prop.type)
		values = acceptable_values(facility, prop.type)
	except Exception:
		logger.debug("Could not classify %s in %s", prop.name, prop.unit.path, exc_info=True)
		type_str, values = UNKNOWN, []

	info = comment_info(prop.unit, prop.declaration)
	if info.password and type_str == "string":
		type_str = PASSWORD

	return FieldRow(
		name=prop.name,
		type_str=type_str,
		optional=prop.optional,
		description=info.description,
		example=info.example or None,
		accepts_values=values or None,
	)


def _unique_rows(facility: TypeFacility, props: List[PropertyDesc]) -> List[FieldRow]:
	rows: List[FieldRow] = []
	names: Set[str] = set()
	for prop in props:
		if prop.name in names:
			continue
		names.add(prop.name)
		rows.append(field_row(facility, prop))
	return rows


def expand_type_rows(facility: TypeFacility, unit: SourceUnit, type_node: Node) -> Optional[List[FieldRow]]:
	"""Rows for every property (and index signature) of a type argument.

	Returns None when the type has no enumerable members or cannot be expanded.
	"""
	try:
		desc = facility.type_from_node(unit, type_node)
		rows = _unique_rows(facility, facility.properties_of(desc))

		for key in INDEX_KEYS:
			value = facility.index_type(desc, key)
			if value is not None:
				rows.append(
					FieldRow(
						name=f"[key: {key}]",
						type_str=classify_type(facility, value),
						optional=False,
						description="",
					)
				)
		return rows or None
	except Exception:
		logger.debug("Could not expand type at %s:%d", unit.path, unit.line_of(type_node), exc_info=True)
		return None


def project_type_literal(facility: TypeFacility, unit: SourceUnit, type_node: Node) -> List[FieldRow]:
	"""Rows for the members written in an inline type literal, nothing inherited."""
	return _unique_rows(facility, written_properties(unit, type_node))
