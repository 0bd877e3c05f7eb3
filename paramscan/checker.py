"""Type-checking facilities.

The expander and the default-value evaluator are written against
``TypeFacility``. ``ProgramTypeFacility`` resolves names across a whole file
set; ``NullTypeFacility`` knows only what a single type node spells out.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Set, Tuple

from tree_sitter import Node

from .errors import FacilityError, SourceReadError
from .fs_scan import resolve_module_specifier
from .source import SourceUnit, parse_source, string_value
from .types import (
	INTERFACE,
	INTERSECTION,
	LITERAL,
	OBJECT,
	PRIMITIVE,
	REFERENCE,
	UNION,
	PropertyDesc,
	TypeDesc,
	describe_type_node,
	format_number,
	literal,
	parse_number_literal,
	written_index_signatures,
	written_properties,
)


logger = logging.getLogger(__name__)

# Wrappers whose properties are those of their single type argument
_TRANSPARENT_GENERICS = {"Partial", "Required", "Readonly", "NonNullable"}

_SCOPE_TYPES = {"program", "statement_block"}
_TYPE_DECLARATIONS = {"type_alias_declaration", "interface_declaration", "enum_declaration"}
_VALUE_DECLARATIONS = {"lexical_declaration", "variable_declaration"}


class TypeFacility(ABC):
	"""Capability interface for type and symbol queries."""

	# False when names (aliases, interfaces, imports, constants) never resolve
	resolves_names = True

	@abstractmethod
	def source_unit(self, path: str) -> Optional[SourceUnit]:
		...

	def type_from_node(self, unit: SourceUnit, node: Node) -> TypeDesc:
		return describe_type_node(unit, node)

	@abstractmethod
	def declared_type(self, type_desc: TypeDesc) -> Optional[TypeDesc]:
		"""Target of a reference (alias value, interface, enum), or None."""

	@abstractmethod
	def properties_of(self, type_desc: TypeDesc, seen: Optional[Set[str]] = None) -> List[PropertyDesc]:
		...

	@abstractmethod
	def index_type(self, type_desc: TypeDesc, key: str, seen: Optional[Set[str]] = None) -> Optional[TypeDesc]:
		...

	@abstractmethod
	def value_declaration(self, unit: SourceUnit, identifier: Node) -> Optional[Tuple[SourceUnit, Node]]:
		"""(unit, initializer) of the variable an identifier refers to."""

	@abstractmethod
	def type_to_string(self, unit: SourceUnit, identifier: Node) -> Optional[str]:
		"""Statically known type of an identifier, as TypeScript would print it."""


class NullTypeFacility(TypeFacility):
	"""Textual-only facility: nothing resolves beyond the written syntax."""

	resolves_names = False

	def source_unit(self, path: str) -> Optional[SourceUnit]:
		return None

	def declared_type(self, type_desc: TypeDesc) -> Optional[TypeDesc]:
		return None

	def properties_of(self, type_desc: TypeDesc, seen: Optional[Set[str]] = None) -> List[PropertyDesc]:
		return []

	def index_type(self, type_desc: TypeDesc, key: str, seen: Optional[Set[str]] = None) -> Optional[TypeDesc]:
		return None

	def value_declaration(self, unit: SourceUnit, identifier: Node) -> Optional[Tuple[SourceUnit, Node]]:
		return None

	def type_to_string(self, unit: SourceUnit, identifier: Node) -> Optional[str]:
		return None


def _declaration_of(statement: Node) -> Node:
	if statement.type == "export_statement":
		decl = statement.child_by_field_name("declaration")
		if decl is not None:
			return decl
	return statement


class _ModuleSymbols:
	"""Top-level imports and re-exports of one file."""

	def __init__(self) -> None:
		# local name -> (target path, imported name); "*" marks a namespace import
		self.imports: Dict[str, Tuple[str, str]] = {}
		# exported name -> (target path or "" for this file, local name)
		self.exports: Dict[str, Tuple[str, str]] = {}
		self.star_exports: List[str] = []


def _symbol_targets(symbols: _ModuleSymbols) -> List[str]:
	# Re-export targets are outside the module graph and are loaded here
	targets = [target for target, _ in symbols.imports.values()]
	targets.extend(target for target, _ in symbols.exports.values() if target)
	targets.extend(symbols.star_exports)
	return targets


class ProgramTypeFacility(TypeFacility):
	"""Structural type and symbol resolution across a set of source files."""

	def __init__(self, paths: Iterable[str], extensions: Optional[Iterable[str]] = None):
		self._extensions = tuple(extensions) if extensions is not None else None
		self._units: Dict[str, SourceUnit] = {}
		self._symbols: Dict[str, _ModuleSymbols] = {}
		requested = [os.path.abspath(p) for p in paths]
		pending = list(requested)
		while pending:
			path = pending.pop(0)
			if path in self._units:
				continue
			try:
				unit = parse_source(path)
			except SourceReadError as e:
				if path in requested:
					raise FacilityError(str(e)) from e
				logger.debug("Skipping unreadable module %s: %s", path, e)
				continue
			self._units[path] = unit
			symbols = self._collect_symbols(unit)
			self._symbols[path] = symbols
			pending.extend(_symbol_targets(symbols))
		logger.debug("Type facility built over %d files", len(self._units))

	def source_unit(self, path: str) -> Optional[SourceUnit]:
		return self._units.get(os.path.abspath(path))

	# Module symbols

	def _collect_symbols(self, unit: SourceUnit) -> _ModuleSymbols:
		symbols = _ModuleSymbols()
		from_dir = os.path.dirname(unit.path)
		for statement in unit.root.named_children:
			if statement.type == "import_statement":
				self._collect_import(unit, statement, from_dir, symbols)
			elif statement.type == "export_statement":
				self._collect_export(unit, statement, from_dir, symbols)
		return symbols

	def _target(self, unit: SourceUnit, source: Optional[Node], from_dir: str) -> Optional[str]:
		if source is None or source.type != "string":
			return None
		return resolve_module_specifier(string_value(unit, source), from_dir, self._extensions)

	def _collect_import(self, unit: SourceUnit, statement: Node, from_dir: str, symbols: _ModuleSymbols) -> None:
		target = self._target(unit, statement.child_by_field_name("source"), from_dir)
		if target is None:
			return
		for clause in statement.named_children:
			if clause.type != "import_clause":
				continue
			for part in clause.named_children:
				if part.type == "identifier":
					symbols.imports[unit.node_text(part)] = (target, "default")
				elif part.type == "namespace_import":
					ident = next((c for c in part.named_children if c.type == "identifier"), None)
					if ident is not None:
						symbols.imports[unit.node_text(ident)] = (target, "*")
				elif part.type == "named_imports":
					for item in part.named_children:
						if item.type != "import_specifier":
							continue
						name = unit.node_text(item.child_by_field_name("name"))
						alias = item.child_by_field_name("alias")
						symbols.imports[unit.node_text(alias) if alias is not None else name] = (target, name)

	def _collect_export(self, unit: SourceUnit, statement: Node, from_dir: str, symbols: _ModuleSymbols) -> None:
		source = statement.child_by_field_name("source")
		target = self._target(unit, source, from_dir) if source is not None else ""
		if target is None:
			return
		clause = next((c for c in statement.named_children if c.type == "export_clause"), None)
		if clause is None:
			if source is not None and not any(c.type == "namespace_export" for c in statement.named_children):
				symbols.star_exports.append(target)
			return
		for item in clause.named_children:
			if item.type != "export_specifier":
				continue
			name = unit.node_text(item.child_by_field_name("name"))
			alias = item.child_by_field_name("alias")
			symbols.exports[unit.node_text(alias) if alias is not None else name] = (target, name)

	# Declaration lookup

	def _declarations_in(self, unit: SourceUnit, scope: Node, name: str, kinds: Set[str]) -> List[Node]:
		found: List[Node] = []
		for statement in scope.named_children:
			decl = _declaration_of(statement)
			if decl.type not in kinds:
				continue
			if decl.type in _VALUE_DECLARATIONS:
				for declarator in decl.named_children:
					if declarator.type != "variable_declarator":
						continue
					if unit.node_text(declarator.child_by_field_name("name")) == name:
						found.append(declarator)
			elif unit.node_text(decl.child_by_field_name("name")) == name:
				found.append(decl)
		return found

	def _lookup(self, unit: SourceUnit, at: Node, name: str, kinds: Set[str]) -> Optional[Tuple[SourceUnit, List[Node]]]:
		# Innermost enclosing scope first
		cursor = at.parent
		while cursor is not None:
			if cursor.type in _SCOPE_TYPES:
				found = self._declarations_in(unit, cursor, name, kinds)
				if found:
					return unit, found
			cursor = cursor.parent
		return self._lookup_import(unit.path, name, kinds, set())

	def _lookup_import(self, path: str, name: str, kinds: Set[str], seen: Set[str]) -> Optional[Tuple[SourceUnit, List[Node]]]:
		symbols = self._symbols.get(path)
		if symbols is None or name not in symbols.imports:
			return None
		target, imported = symbols.imports[name]
		if imported in ("*", "default"):
			return None
		return self._lookup_export(target, imported, kinds, seen)

	def _lookup_export(self, path: str, name: str, kinds: Set[str], seen: Set[str]) -> Optional[Tuple[SourceUnit, List[Node]]]:
		key = f"{path}:{name}"
		if key in seen:
			return None
		seen.add(key)
		unit = self._units.get(path)
		symbols = self._symbols.get(path)
		if unit is None or symbols is None:
			return None

		if name in symbols.exports:
			target, local = symbols.exports[name]
			if target:
				return self._lookup_export(target, local, kinds, seen)
			name = local
		found = self._declarations_in(unit, unit.root, name, kinds)
		if found:
			return unit, found
		if name in symbols.imports:
			target, imported = symbols.imports[name]
			if imported not in ("*", "default"):
				return self._lookup_export(target, imported, kinds, seen)
		for target in symbols.star_exports:
			hit = self._lookup_export(target, name, kinds, seen)
			if hit is not None:
				return hit
		return None

	def _lookup_qualified(self, unit: SourceUnit, qualified: str, kinds: Set[str]) -> Optional[Tuple[SourceUnit, List[Node]]]:
		namespace, _, name = qualified.partition(".")
		symbols = self._symbols.get(unit.path)
		if symbols is None or "." in name:
			return None
		target = symbols.imports.get(namespace)
		if target is None or target[1] != "*":
			return None
		return self._lookup_export(target[0], name, kinds, set())

	# Types

	def declared_type(self, type_desc: TypeDesc) -> Optional[TypeDesc]:
		if type_desc.kind != REFERENCE or type_desc.unit is None:
			return None
		unit, node = type_desc.unit, type_desc.node
		name = type_desc.name

		if name in _TRANSPARENT_GENERICS and len(type_desc.members) == 1:
			return type_desc.members[0]
		if name == "Record" and len(type_desc.members) == 2:
			return self._record_type(type_desc)

		if "." in name:
			hit = self._lookup_qualified(unit, name, _TYPE_DECLARATIONS)
		else:
			hit = self._lookup(unit, node, name, _TYPE_DECLARATIONS)
		if hit is None:
			return None
		decl_unit, decls = hit
		first = decls[0]

		if first.type == "type_alias_declaration":
			return describe_type_node(decl_unit, first.child_by_field_name("value"))
		if first.type == "interface_declaration":
			interfaces = [(decl_unit, d) for d in decls if d.type == "interface_declaration"]
			return TypeDesc(kind=INTERFACE, name=name, nodes=interfaces)
		if first.type == "enum_declaration":
			return self._enum_type(decl_unit, first)
		return None

	def _record_type(self, type_desc: TypeDesc) -> TypeDesc:
		return TypeDesc(kind=OBJECT, name="Record", members=list(type_desc.members), nodes=type_desc.nodes)

	def _enum_type(self, unit: SourceUnit, decl: Node) -> TypeDesc:
		members: List[TypeDesc] = []
		body = decl.child_by_field_name("body")
		next_value = 0.0
		for member in body.named_children if body is not None else []:
			if member.type == "enum_assignment":
				value_node = member.child_by_field_name("value")
				if value_node is not None and value_node.type == "string":
					members.append(literal(string_value(unit, value_node)))
					continue
				number = parse_number_literal(unit.node_text(value_node)) if value_node is not None else None
				if number is None:
					members.append(TypeDesc(kind=PRIMITIVE, name="number"))
					continue
				members.append(literal(number))
				next_value = number + 1
			elif member.type in ("property_identifier", "string"):
				members.append(literal(next_value))
				next_value += 1
		return TypeDesc(kind=UNION, members=members, nodes=[(unit, decl)])

	def _record_keys(self, keys: TypeDesc, seen: Set[str]) -> List[TypeDesc]:
		if keys.kind == REFERENCE:
			if keys.token in seen:
				return []
			seen.add(keys.token)
			target = self.declared_type(keys)
			return self._record_keys(target, seen) if target is not None else []
		if keys.kind == UNION:
			flat: List[TypeDesc] = []
			for member in keys.members:
				flat.extend(self._record_keys(member, seen))
			return flat
		return [keys]

	def properties_of(self, type_desc: TypeDesc, seen: Optional[Set[str]] = None) -> List[PropertyDesc]:
		seen = set() if seen is None else seen
		token = type_desc.token
		if token in seen:
			return []
		seen.add(token)
		try:
			return self._properties(type_desc, seen)
		finally:
			seen.discard(token)

	def _properties(self, type_desc: TypeDesc, seen: Set[str]) -> List[PropertyDesc]:
		kind = type_desc.kind
		if kind == OBJECT and type_desc.name == "Record":
			keys, value = type_desc.members
			props: List[PropertyDesc] = []
			unit, node = type_desc.unit, type_desc.node
			for key in self._record_keys(keys, set()):
				if key.kind == LITERAL and not isinstance(key.value, bool):
					name = key.value if isinstance(key.value, str) else format_number(key.value)
					props.append(PropertyDesc(name=name, optional=False, type=value, unit=unit, declaration=node))
			return props
		if kind == OBJECT:
			return written_properties(type_desc.unit, type_desc.node)
		if kind == INTERFACE:
			props = []
			for unit, decl in type_desc.nodes:
				body = decl.child_by_field_name("body")
				if body is not None:
					props.extend(written_properties(unit, body))
			for base in self._interface_bases(type_desc):
				props.extend(self.properties_of(base, seen))
			return props
		if kind == INTERSECTION:
			props = []
			for member in type_desc.members:
				props.extend(self.properties_of(member, seen))
			return props
		if kind == REFERENCE:
			target = self.declared_type(type_desc)
			return self.properties_of(target, seen) if target is not None else []
		return []

	def _interface_bases(self, type_desc: TypeDesc) -> List[TypeDesc]:
		bases: List[TypeDesc] = []
		for unit, decl in type_desc.nodes:
			for clause in decl.named_children:
				if clause.type != "extends_type_clause":
					continue
				for base in clause.named_children:
					bases.append(describe_type_node(unit, base))
		return bases

	def index_type(self, type_desc: TypeDesc, key: str, seen: Optional[Set[str]] = None) -> Optional[TypeDesc]:
		seen = set() if seen is None else seen
		token = type_desc.token
		if token in seen:
			return None
		seen.add(token)
		try:
			return self._index_type(type_desc, key, seen)
		finally:
			seen.discard(token)

	def _index_type(self, type_desc: TypeDesc, key: str, seen: Set[str]) -> Optional[TypeDesc]:
		kind = type_desc.kind
		if kind == OBJECT and type_desc.name == "Record":
			keys, value = type_desc.members
			for k in self._record_keys(keys, set()):
				if k.kind == PRIMITIVE and k.name == key:
					return value
			return None
		if kind == OBJECT:
			for sig_key, value in written_index_signatures(type_desc.unit, type_desc.node):
				if sig_key == key:
					return value
			return None
		if kind == INTERFACE:
			for unit, decl in type_desc.nodes:
				body = decl.child_by_field_name("body")
				if body is None:
					continue
				for sig_key, value in written_index_signatures(unit, body):
					if sig_key == key:
						return value
			for base in self._interface_bases(type_desc):
				found = self.index_type(base, key, seen)
				if found is not None:
					return found
			return None
		if kind == INTERSECTION:
			for member in type_desc.members:
				found = self.index_type(member, key, seen)
				if found is not None:
					return found
			return None
		if kind == REFERENCE:
			target = self.declared_type(type_desc)
			return self.index_type(target, key, seen) if target is not None else None
		return None

	# Values

	def _declarator(self, unit: SourceUnit, identifier: Node) -> Optional[Tuple[SourceUnit, Node]]:
		name = unit.node_text(identifier)
		hit = self._lookup(unit, identifier, name, _VALUE_DECLARATIONS)
		if hit is None:
			return None
		decl_unit, declarators = hit
		return decl_unit, declarators[0]

	def value_declaration(self, unit: SourceUnit, identifier: Node) -> Optional[Tuple[SourceUnit, Node]]:
		hit = self._declarator(unit, identifier)
		if hit is None:
			return None
		decl_unit, declarator = hit
		value = declarator.child_by_field_name("value")
		if value is None:
			return None
		return decl_unit, value

	def type_to_string(self, unit: SourceUnit, identifier: Node) -> Optional[str]:
		hit = self._declarator(unit, identifier)
		if hit is None:
			return "any"
		decl_unit, declarator = hit
		annotation = declarator.child_by_field_name("type")
		if annotation is not None:
			return decl_unit.node_text(annotation).lstrip(":").strip()

		value = declarator.child_by_field_name("value")
		is_const = declarator.parent is not None and any(
			c.type == "const" for c in declarator.parent.children
		)
		if value is None:
			return "any"
		literal_text = _literal_text(decl_unit, value)
		if literal_text is None:
			return None
		if is_const:
			return literal_text
		# let/var widen literal types
		if literal_text.startswith('"'):
			return "string"
		if literal_text in ("true", "false"):
			return "boolean"
		return "number"


def _literal_text(unit: SourceUnit, node: Node) -> Optional[str]:
	if node.type == "string":
		value = string_value(unit, node).replace("\\", "\\\\").replace('"', '\\"')
		return f'"{value}"'
	if node.type == "number":
		number = parse_number_literal(unit.node_text(node))
		return format_number(number) if number is not None else None
	if node.type in ("true", "false"):
		return node.type
	if node.type == "unary_expression":
		op = node.child_by_field_name("operator")
		operand = node.child_by_field_name("argument")
		if unit.node_text(op) == "-" and operand is not None and operand.type == "number":
			number = parse_number_literal(unit.node_text(operand))
			return format_number(-number) if number is not None else None
	return None
