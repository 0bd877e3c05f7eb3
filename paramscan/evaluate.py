"""Bounded constant folding of default-value expressions."""

from __future__ import annotations

import logging
import math
import re
from typing import Callable, Dict, Optional

from tree_sitter import Node

from .checker import TypeFacility
from .settings import settings
from .source import SourceUnit, string_value
from .types import format_number, parse_number_literal, to_number


logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[a-zA-Z_$][a-zA-Z0-9_$]*$")


def _divide(left: float, right: float) -> Optional[float]:
	return left / right if right != 0 else None


def _modulo(left: float, right: float) -> Optional[float]:
	# JavaScript % keeps the sign of the dividend
	return math.fmod(left, right) if right != 0 else None


ARITHMETIC: Dict[str, Callable[[float, float], Optional[float]]] = {
	"+": lambda a, b: a + b,
	"-": lambda a, b: a - b,
	"*": lambda a, b: a * b,
	"/": _divide,
	"%": _modulo,
}


def evaluate_default(
	unit: SourceUnit,
	node: Optional[Node],
	facility: Optional[TypeFacility] = None,
	depth: int = 0,
	max_depth: Optional[int] = None,
) -> str:
	"""Literal text of an initializer, or its verbatim source when irreducible."""
	if node is None:
		return ""
	limit = settings.max_default_depth if max_depth is None else max_depth
	if depth > limit:
		return unit.node_text(node)

	def recurse(child: Optional[Node]) -> str:
		return evaluate_default(unit, child, facility, depth + 1, limit)

	kind = node.type

	if kind == "string":
		return f'"{string_value(unit, node)}"'
	if kind == "number":
		number = parse_number_literal(unit.node_text(node))
		return format_number(number) if number is not None else unit.node_text(node)
	if kind in ("true", "false", "null"):
		return kind

	if kind == "parenthesized_expression":
		inner = [c for c in node.named_children if c.type != "comment"]
		if inner:
			return recurse(inner[0])

	if kind == "binary_expression":
		left_text = recurse(node.child_by_field_name("left"))
		right_text = recurse(node.child_by_field_name("right"))
		operator = unit.node_text(node.child_by_field_name("operator"))
		left, right = to_number(left_text), to_number(right_text)
		apply = ARITHMETIC.get(operator)
		if apply is not None and left is not None and right is not None:
			result = apply(left, right)
			if result is not None and math.isfinite(result):
				return format_number(result)

	if kind == "unary_expression" and unit.node_text(node.child_by_field_name("operator")) == "-":
		inner_text = recurse(node.child_by_field_name("argument"))
		value = to_number(inner_text)
		if value is not None:
			return format_number(-value)

	if kind in ("identifier", "shorthand_property_identifier") and facility is not None:
		try:
			text = facility.type_to_string(unit, node)
			if text and text != "any" and not _IDENTIFIER.match(text):
				return text
			found = facility.value_declaration(unit, node)
			if found is not None:
				decl_unit, initializer = found
				return evaluate_default(decl_unit, initializer, facility, depth + 1, limit)
		except Exception:
			logger.debug("Could not resolve %s in %s", unit.node_text(node), unit.path, exc_info=True)

	return unit.node_text(node)
