from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from .errors import SourceReadError


TYPESCRIPT = Language(tree_sitter_typescript.language_typescript())
TSX = Language(tree_sitter_typescript.language_tsx())

# JavaScript and JSX are parsed with the TSX grammar, a superset of both
GRAMMAR_BY_EXTENSION: Dict[str, Language] = {
	".ts": TYPESCRIPT,
	".mts": TYPESCRIPT,
	".cts": TYPESCRIPT,
	".tsx": TSX,
	".js": TSX,
	".jsx": TSX,
	".mjs": TSX,
	".cjs": TSX,
}

_parsers: Dict[int, Parser] = {}


def _parser_for(path: str) -> Parser:
	_, ext = os.path.splitext(path)
	language = GRAMMAR_BY_EXTENSION.get(ext.lower(), TSX)
	key = id(language)
	if key not in _parsers:
		_parsers[key] = Parser(language)
	return _parsers[key]


@dataclass(frozen=True)
class SourceUnit:
	"""A parsed source file: absolute path, raw text and syntax tree."""

	path: str
	text: str
	source: bytes
	tree: Tree

	@property
	def root(self) -> Node:
		return self.tree.root_node

	@property
	def has_errors(self) -> bool:
		return self.tree.root_node.has_error

	def node_text(self, node: Optional[Node]) -> str:
		if node is None:
			return ""
		return self.source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

	def line_of(self, node: Node) -> int:
		return node.start_point[0] + 1

	def first_error_line(self) -> int:
		for node in walk(self.root):
			if node.type == "ERROR" or node.is_missing:
				return self.line_of(node)
		return 1


def read_text(path: str) -> str:
	# Undecodable bytes become U+FFFD instead of failing the file
	try:
		with open(path, "r", encoding="utf-8", errors="replace") as fh:
			return fh.read()
	except OSError as e:
		raise SourceReadError(path, str(e)) from e


def parse_source(path: str, text: Optional[str] = None) -> SourceUnit:
	resolved = os.path.abspath(path)
	if text is None:
		text = read_text(resolved)
	source = text.encode("utf-8")
	tree = _parser_for(resolved).parse(source)
	return SourceUnit(path=resolved, text=text, source=source, tree=tree)


def walk(node: Node) -> Iterator[Node]:
	"""Pre-order traversal in source order."""
	stack: List[Node] = [node]
	while stack:
		current = stack.pop()
		yield current
		stack.extend(reversed(current.children))


def string_value(unit: SourceUnit, node: Node) -> str:
	"""Cooked value of a string literal node (quotes removed, escapes decoded)."""
	parts: List[str] = []
	for child in node.named_children:
		if child.type == "string_fragment":
			parts.append(unit.node_text(child))
		elif child.type == "escape_sequence":
			parts.append(_decode_escape(unit.node_text(child)))
	if not parts and not node.named_children:
		raw = unit.node_text(node)
		return raw[1:-1] if len(raw) >= 2 else ""
	return "".join(parts)


_SIMPLE_ESCAPES = {
	"n": "\n",
	"t": "\t",
	"r": "\r",
	"b": "\b",
	"f": "\f",
	"v": "\v",
	"0": "\0",
}


def _decode_escape(seq: str) -> str:
	body = seq[1:]
	if not body:
		return ""
	if body[0] in _SIMPLE_ESCAPES and len(body) == 1:
		return _SIMPLE_ESCAPES[body[0]]
	if body[0] == "u":
		digits = body[1:].strip("{}")
		try:
			return chr(int(digits, 16))
		except ValueError:
			return seq
	if body[0] == "x":
		try:
			return chr(int(body[1:], 16))
		except ValueError:
			return seq
	# Line continuation
	if body[0] in "\r\n":
		return ""
	return body
