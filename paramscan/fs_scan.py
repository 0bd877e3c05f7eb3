from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional, Set

from tree_sitter import Node

from .errors import SourceReadError
from .settings import settings
from .source import SourceUnit, parse_source, walk


logger = logging.getLogger(__name__)


def is_local_specifier(specifier: str) -> bool:
	return specifier.startswith(".")


def resolve_module_specifier(
	specifier: str,
	from_dir: str,
	extensions: Optional[Iterable[str]] = None,
) -> Optional[str]:
	if not is_local_specifier(specifier):
		# Packaged modules are not analyzable source
		return None
	exts = tuple(extensions if extensions is not None else settings.source_extensions)
	resolved = os.path.abspath(os.path.join(from_dir, specifier))

	if not os.path.splitext(resolved)[1]:
		for ext in exts:
			candidate = resolved + ext
			if os.path.isfile(candidate):
				return candidate
		for ext in exts:
			candidate = os.path.join(resolved, "index" + ext)
			if os.path.isfile(candidate):
				return candidate
		return None

	return resolved if os.path.isfile(resolved) else None


def _string_argument(unit: SourceUnit, call: Node) -> Optional[str]:
	args = call.child_by_field_name("arguments")
	if args is None or not args.named_children:
		return None
	first = args.named_children[0]
	if first.type != "string":
		return None
	return unit.node_text(first)[1:-1]


def _source_specifier(unit: SourceUnit, node: Node) -> Optional[str]:
	source = node.child_by_field_name("source")
	if source is None:
		for child in node.named_children:
			if child.type == "import_require_clause":
				source = child.child_by_field_name("source")
				if source is None:
					source = next((c for c in child.named_children if c.type == "string"), None)
	if source is None or source.type != "string":
		return None
	return unit.node_text(source)[1:-1]


def module_specifiers(unit: SourceUnit) -> List[str]:
	"""Every import, dynamic import and require specifier of a file, in source order.

	Re-exports (``export ... from``) are not edges of the module graph.
	"""
	specifiers: List[str] = []
	for node in walk(unit.root):
		found: Optional[str] = None
		if node.type == "import_statement":
			found = _source_specifier(unit, node)
		elif node.type == "call_expression":
			func = node.child_by_field_name("function")
			if func is None:
				continue
			if func.type == "import" or (func.type == "identifier" and unit.node_text(func) == "require"):
				found = _string_argument(unit, node)
		if found is not None:
			specifiers.append(found)
	return specifiers


def local_references(unit: SourceUnit, extensions: Optional[Iterable[str]] = None) -> List[str]:
	from_dir = os.path.dirname(unit.path)
	targets: List[str] = []
	for specifier in module_specifiers(unit):
		target = resolve_module_specifier(specifier, from_dir, extensions)
		if target is None:
			if is_local_specifier(specifier):
				logger.debug("Unresolved local import %r in %s", specifier, unit.path)
			continue
		targets.append(target)
	return targets


def collect_source_files(entry_file: str, extensions: Optional[Iterable[str]] = None) -> List[str]:
	"""Entry file plus its transitive local-import closure, in first-visit order.

	Depth-first; a visited set keyed by absolute path makes import cycles safe.
	"""
	visited: Set[str] = set()
	result: List[str] = []
	stack: List[str] = [os.path.abspath(entry_file)]

	while stack:
		current = stack.pop()
		if current in visited:
			continue
		visited.add(current)
		if not os.path.isfile(current):
			continue

		try:
			unit = parse_source(current)
		except SourceReadError as e:
			logger.warning("Skipping unreadable source %s: %s", current, e)
			continue
		result.append(current)
		children = [t for t in local_references(unit, extensions) if t not in visited]
		stack.extend(reversed(children))

	return result
