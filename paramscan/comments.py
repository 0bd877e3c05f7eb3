"""Documentation comments attached to declarations.

A declaration's comment is located with ordered strategies over a
``DeclarationSpan``: first the comment nodes the parser attached right before
the declaration, then a plain scan of the leading trivia text.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from tree_sitter import Node

from .model import CommentInfo
from .source import SourceUnit


logger = logging.getLogger(__name__)

DOC_OPEN = "/**"
DOC_CLOSE = "*/"

_DESCRIPTION_END = re.compile(r"\n\s*\n|(?=@)")
_EXAMPLE_TAG = re.compile(r"@example\s+([^\n@*]+)")
_DEFAULT_TAG = re.compile(r"@default\s+([^\n@*]+)")
_PASSWORD_TAG = re.compile(r"@password\b")
_LINE_DECORATION = re.compile(r"^\s*\*\s?")


@dataclass(frozen=True)
class DeclarationSpan:
	source: bytes
	# Start of the leading trivia (end of the previous token)
	full_start: int
	start: int
	# Byte ranges of comment nodes directly preceding the declaration, in order
	comment_ranges: List[Tuple[int, int]] = field(default_factory=list)

	@property
	def leading_trivia(self) -> str:
		return self.source[self.full_start:self.start].decode("utf-8", errors="replace")


def declaration_span(unit: SourceUnit, node: Node) -> DeclarationSpan:
	ranges: List[Tuple[int, int]] = []
	prev = node.prev_sibling
	while prev is not None and prev.type == "comment":
		ranges.append((prev.start_byte, prev.end_byte))
		prev = prev.prev_sibling
	if prev is not None:
		full_start = prev.end_byte
	elif node.parent is not None:
		full_start = node.parent.start_byte
	else:
		full_start = 0
	ranges.reverse()
	return DeclarationSpan(source=unit.source, full_start=full_start, start=node.start_byte, comment_ranges=ranges)


def _strip_decoration(raw: str) -> str:
	return "\n".join(_LINE_DECORATION.sub("", line).strip() for line in raw.split("\n"))


class CommentStrategy:
	def inner_text(self, span: DeclarationSpan) -> str:
		raise NotImplementedError


class StructuredCommentStrategy(CommentStrategy):
	"""Last comment node ending right before the declaration."""

	def inner_text(self, span: DeclarationSpan) -> str:
		if not span.comment_ranges:
			return ""
		start, end = span.comment_ranges[-1]
		if span.source[end:span.start].strip():
			return ""
		raw = span.source[start:end].decode("utf-8", errors="replace").strip()
		if not raw.startswith(DOC_OPEN):
			return ""
		raw = re.sub(r"^/\*\*?\s*", "", raw)
		raw = re.sub(r"\s*\*/$", "", raw)
		return _strip_decoration(raw)


class TriviaScanStrategy(CommentStrategy):
	"""Last ``/**`` in the leading trivia and the first ``*/`` after it."""

	def inner_text(self, span: DeclarationSpan) -> str:
		leading = span.leading_trivia
		open_at = leading.rfind(DOC_OPEN)
		if open_at == -1:
			return ""
		after_open = leading[open_at + len(DOC_OPEN):]
		close_at = after_open.find(DOC_CLOSE)
		if close_at == -1:
			return ""
		return _strip_decoration(after_open[:close_at].strip())


class CommentLocator:
	def __init__(self, strategies: Optional[Sequence[CommentStrategy]] = None):
		self.strategies: Tuple[CommentStrategy, ...] = tuple(
			strategies if strategies is not None else (StructuredCommentStrategy(), TriviaScanStrategy())
		)

	def locate(self, span: DeclarationSpan) -> str:
		for strategy in self.strategies:
			inner = strategy.inner_text(span)
			if inner:
				return inner
		return ""


default_locator = CommentLocator()


def parse_doc_comment(inner: str) -> CommentInfo:
	"""Description, @example (else @default) and @password of a comment body."""
	description = _DESCRIPTION_END.split(inner, maxsplit=1)[0].strip()

	example = ""
	match = _EXAMPLE_TAG.search(inner)
	if match:
		example = match.group(1).strip()
	if not example:
		match = _DEFAULT_TAG.search(inner)
		if match:
			example = match.group(1).strip()

	return CommentInfo(
		description=description,
		example=example,
		password=bool(_PASSWORD_TAG.search(inner)),
	)


def comment_info(unit: Optional[SourceUnit], node: Optional[Node], locator: Optional[CommentLocator] = None) -> CommentInfo:
	if unit is None or node is None:
		return CommentInfo()
	try:
		inner = (locator or default_locator).locate(declaration_span(unit, node))
		if not inner:
			return CommentInfo()
		return parse_doc_comment(inner)
	except Exception:
		logger.debug("Could not read doc comment in %s at line %d", unit.path, unit.line_of(node), exc_info=True)
		return CommentInfo()
