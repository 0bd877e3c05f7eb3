from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from tree_sitter import Node

from .checker import NullTypeFacility, TypeFacility
from .errors import SourceParseError
from .evaluate import evaluate_default
from .expand import expand_type_rows, project_type_literal
from .model import DeclarationCall, FieldRow
from .settings import settings
from .source import SourceUnit, walk
from .types import property_name


logger = logging.getLogger(__name__)

TYPE_COMMENT = re.compile(r"/\*\*[\s\S]*?\*\s*@type\s*\{([^}]+)\}[\s\S]*?\*/")


@dataclass(frozen=True)
class TypeComment:
	type: str
	line: int


def find_type_comments(text: str) -> List[TypeComment]:
	"""Every ``/** @type {...} */`` block with the line it starts on."""
	found: List[TypeComment] = []
	for match in TYPE_COMMENT.finditer(text):
		line = text.count("\n", 0, match.start()) + 1
		found.append(TypeComment(type=match.group(1).strip(), line=line))
	return found


def nearest_type_comment(comments: List[TypeComment], line: int, lookback: int) -> Optional[TypeComment]:
	closest: Optional[TypeComment] = None
	for comment in comments:
		if line - lookback <= comment.line < line:
			if closest is None or comment.line > closest.line:
				closest = comment
	return closest


def format_type_comment(type_text: str) -> str:
	# "{{a: string; b?: number;}}" captures as "{a: string; b?: number;"
	body = type_text.strip()
	if body.startswith("{"):
		body = body[1:].rstrip("}")
	members = [m.strip() for m in body.split(";")]
	return "\n".join(f"  {m}" for m in members if m)


def _first_named(node: Optional[Node]) -> Optional[Node]:
	if node is None:
		return None
	for child in node.named_children:
		if child.type != "comment":
			return child
	return None


def _is_declaration_call(unit: SourceUnit, node: Node, function_name: str) -> bool:
	if node.type != "call_expression":
		return False
	func = node.child_by_field_name("function")
	return func is not None and func.type == "identifier" and unit.node_text(func) == function_name


def _default_values(unit: SourceUnit, call: Node, facility: Optional[TypeFacility]) -> Dict[str, str]:
	defaults: Dict[str, str] = {}
	arg = _first_named(call.child_by_field_name("arguments"))
	if arg is None or arg.type != "object":
		return defaults
	for prop in arg.named_children:
		if prop.type == "pair":
			key = property_name(unit, prop.child_by_field_name("key"))
			defaults[key] = evaluate_default(unit, prop.child_by_field_name("value"), facility)
		elif prop.type == "shorthand_property_identifier":
			defaults[unit.node_text(prop)] = evaluate_default(unit, prop, facility)
	return defaults


def _type_from_argument(
	unit: SourceUnit,
	type_node: Node,
	facility: TypeFacility,
) -> Optional[List[FieldRow]]:
	if facility.resolves_names:
		return expand_type_rows(facility, unit, type_node)
	if type_node.type == "object_type":
		return project_type_literal(facility, unit, type_node) or None
	return None


def scan_declarations(
	unit: SourceUnit,
	facility: Optional[TypeFacility] = None,
	function_name: Optional[str] = None,
	lookback: Optional[int] = None,
) -> List[DeclarationCall]:
	"""Every call of the parameter-declaring function in one file, in source order."""
	# Files with any error node are rejected whole, even where the parser recovered
	if unit.has_errors:
		raise SourceParseError(unit.path, unit.first_error_line())

	name = function_name or settings.function_name
	window = settings.type_comment_lookback if lookback is None else lookback
	checker = facility if facility is not None else NullTypeFacility()
	type_comments = find_type_comments(unit.text)
	calls: List[DeclarationCall] = []

	for node in walk(unit.root):
		if not _is_declaration_call(unit, node, name):
			continue
		line = unit.line_of(node)
		fields: Optional[List[FieldRow]] = None
		type_info = ""

		type_node = _first_named(node.child_by_field_name("type_arguments"))
		if type_node is not None:
			fields = _type_from_argument(unit, type_node, checker)
			if not fields:
				type_info = unit.node_text(type_node)
		else:
			comment = nearest_type_comment(type_comments, line, window)
			if comment is not None:
				type_info = format_type_comment(comment.type)

		calls.append(
			DeclarationCall(
				file_path=unit.path,
				line=line,
				fields=fields,
				type_info=type_info,
				defaults=_default_values(unit, node, facility if checker.resolves_names else None),
			)
		)

	logger.debug("Found %d %s calls in %s", len(calls), name, unit.path)
	return calls
