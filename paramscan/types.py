"""Structural type descriptors built from type syntax.

Descriptors are shallow: a reference to a named type stays a ``reference``
until a type-checking facility resolves it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Tuple, Union

from tree_sitter import Node

from .source import SourceUnit, string_value


PRIMITIVE = "primitive"
LITERAL = "literal"
UNION = "union"
INTERSECTION = "intersection"
OBJECT = "object"
INTERFACE = "interface"
REFERENCE = "reference"
OPAQUE = "opaque"

LiteralValue = Union[str, float, bool]


@dataclass(eq=False)
class TypeDesc:
	kind: str
	name: str = ""
	value: Optional[LiteralValue] = None
	members: List["TypeDesc"] = field(default_factory=list)
	# Declaring syntax: object_type / reference nodes, or interface declarations
	nodes: List[Tuple[SourceUnit, Node]] = field(default_factory=list)
	text: str = ""

	@property
	def token(self) -> str:
		"""Identity of the type's declaration, stable across re-resolution."""
		if self.nodes:
			unit, node = self.nodes[0]
			return f"{self.kind}:{unit.path}:{node.start_byte}:{node.end_byte}"
		return f"{self.kind}:{self.name}:{id(self)}"

	@property
	def unit(self) -> Optional[SourceUnit]:
		return self.nodes[0][0] if self.nodes else None

	@property
	def node(self) -> Optional[Node]:
		return self.nodes[0][1] if self.nodes else None


@dataclass(eq=False)
class PropertyDesc:
	name: str
	optional: bool
	type: Optional[TypeDesc]
	unit: SourceUnit
	declaration: Node


def primitive(name: str) -> TypeDesc:
	return TypeDesc(kind=PRIMITIVE, name=name)


def literal(value: LiteralValue) -> TypeDesc:
	return TypeDesc(kind=LITERAL, value=value)


def union_of(members: List[TypeDesc]) -> TypeDesc:
	return TypeDesc(kind=UNION, members=members)


def parse_number_literal(text: str) -> Optional[float]:
	t = text.replace("_", "").strip().lower()
	if not t or t.endswith("n"):
		# BigInt literals are not folded
		return None
	try:
		if t.startswith(("0x", "0o", "0b")):
			return float(int(t, 0))
		if len(t) > 1 and t[0] == "0" and t.isdigit():
			# Legacy octal literal unless it has an 8 or 9
			return float(int(t, 8)) if all(c in "01234567" for c in t) else float(t)
		return float(t)
	except ValueError:
		return None


def to_number(text: str) -> Optional[float]:
	"""Finite numeric value of reduced text, or None when not numeric."""
	t = text.strip()
	if not t or "_" in t:
		return None
	try:
		value = float(t)
	except ValueError:
		if not t.lower().startswith(("0x", "0o", "0b")):
			return None
		try:
			value = float(int(t, 0))
		except ValueError:
			return None
	return value if math.isfinite(value) else None


def format_number(value: float) -> str:
	"""Render a number the way JavaScript's String(number) does."""
	if math.isnan(value):
		return "NaN"
	if math.isinf(value):
		return "Infinity" if value > 0 else "-Infinity"
	if value == 0:
		return "0"
	if value.is_integer() and abs(value) < 1e21:
		return str(int(value))
	text = repr(value)
	if "e" not in text:
		return text
	if 1e-6 <= abs(value) < 1e21:
		return format(Decimal(text), "f")
	mantissa, exponent = text.split("e")
	sign = "-" if exponent.startswith("-") else "+"
	digits = exponent.lstrip("+-").lstrip("0") or "0"
	return f"{mantissa}e{sign}{digits}"


def _flatten(unit: SourceUnit, node: Node, kind: str) -> List[TypeDesc]:
	members: List[TypeDesc] = []
	for child in node.named_children:
		if child.type == "comment":
			continue
		if child.type == node.type:
			members.extend(_flatten(unit, child, kind))
		else:
			members.append(describe_type_node(unit, child))
	return members


def _literal_type(unit: SourceUnit, node: Node) -> TypeDesc:
	inner = node.named_children[0] if node.named_children else None
	if inner is None:
		return TypeDesc(kind=OPAQUE, text=unit.node_text(node))
	if inner.type == "string":
		return literal(string_value(unit, inner))
	if inner.type == "number":
		number = parse_number_literal(unit.node_text(inner))
		if number is not None:
			return literal(number)
	if inner.type in ("true", "false"):
		return literal(inner.type == "true")
	if inner.type in ("null", "undefined"):
		return primitive(inner.type)
	if inner.type == "unary_expression":
		operand = inner.child_by_field_name("argument")
		op = inner.child_by_field_name("operator")
		if operand is not None and operand.type == "number" and unit.node_text(op) == "-":
			number = parse_number_literal(unit.node_text(operand))
			if number is not None:
				return literal(-number)
	return TypeDesc(kind=OPAQUE, text=unit.node_text(node))


def describe_type_node(unit: SourceUnit, node: Optional[Node]) -> TypeDesc:
	if node is None:
		return primitive("any")
	kind = node.type

	if kind == "type_annotation" or kind == "parenthesized_type":
		inner = [c for c in node.named_children if c.type != "comment"]
		return describe_type_node(unit, inner[0] if inner else None)
	if kind == "predefined_type":
		return primitive(unit.node_text(node).strip())
	if kind in ("undefined", "null"):
		return primitive(kind)
	if kind == "literal_type":
		return _literal_type(unit, node)
	if kind == "union_type":
		return TypeDesc(kind=UNION, members=_flatten(unit, node, UNION), nodes=[(unit, node)])
	if kind == "intersection_type":
		return TypeDesc(kind=INTERSECTION, members=_flatten(unit, node, INTERSECTION), nodes=[(unit, node)])
	if kind == "object_type":
		return TypeDesc(kind=OBJECT, nodes=[(unit, node)])
	if kind in ("type_identifier", "nested_type_identifier"):
		return TypeDesc(kind=REFERENCE, name=unit.node_text(node), nodes=[(unit, node)])
	if kind == "generic_type":
		name_node = node.child_by_field_name("name")
		args_node = node.child_by_field_name("type_arguments")
		args = [
			describe_type_node(unit, a)
			for a in (args_node.named_children if args_node is not None else [])
			if a.type != "comment"
		]
		return TypeDesc(
			kind=REFERENCE,
			name=unit.node_text(name_node),
			members=args,
			nodes=[(unit, node)],
		)
	return TypeDesc(kind=OPAQUE, text=unit.node_text(node), nodes=[(unit, node)])


def property_name(unit: SourceUnit, name_node: Optional[Node]) -> str:
	if name_node is None:
		return ""
	if name_node.type == "string":
		return string_value(unit, name_node)
	if name_node.type == "number":
		number = parse_number_literal(unit.node_text(name_node))
		return format_number(number) if number is not None else unit.node_text(name_node)
	return unit.node_text(name_node)


def has_optional_marker(node: Node) -> bool:
	return any(not c.is_named and c.type in ("?", "?:") for c in node.children)


def written_properties(unit: SourceUnit, object_node: Node) -> List[PropertyDesc]:
	"""Properties written directly in an object type or interface body."""
	props: List[PropertyDesc] = []
	for member in object_node.named_children:
		if member.type == "property_signature":
			props.append(
				PropertyDesc(
					name=property_name(unit, member.child_by_field_name("name")),
					optional=has_optional_marker(member),
					type=describe_type_node(unit, member.child_by_field_name("type")),
					unit=unit,
					declaration=member,
				)
			)
		elif member.type == "method_signature":
			props.append(
				PropertyDesc(
					name=property_name(unit, member.child_by_field_name("name")),
					optional=has_optional_marker(member),
					type=TypeDesc(kind=OPAQUE, text=unit.node_text(member)),
					unit=unit,
					declaration=member,
				)
			)
	return props


def written_index_signatures(unit: SourceUnit, object_node: Node) -> List[Tuple[str, TypeDesc]]:
	"""(key kind, value type) for each ``[key: string|number]: V`` member."""
	signatures: List[Tuple[str, TypeDesc]] = []
	for member in object_node.named_children:
		if member.type != "index_signature":
			continue
		key_node = member.child_by_field_name("index_type")
		if key_node is None:
			key_node = next((c for c in member.named_children if c.type == "predefined_type"), None)
		if key_node is None:
			continue
		key = unit.node_text(key_node).strip()
		if key not in ("string", "number"):
			continue
		value_node = member.child_by_field_name("type")
		if value_node is None:
			value_node = next((c for c in member.named_children if c.type == "type_annotation"), None)
		signatures.append((key, describe_type_node(unit, value_node)))
	return signatures
