from __future__ import annotations

import os
from typing import Dict, List, Optional

from .model import DeclarationCall, FieldRow


BANNER_OPEN = "\n***** PARAMETERS DESCRIPTION *****\n\n"
BANNER_CLOSE = "\n***** ------------------------- *****"


def _escape(text: str) -> str:
	return str(text).replace("|", "\\|").replace("\n", " ").strip()


def _center(text: str, width: int) -> str:
	if len(text) >= width:
		return text
	pad = width - len(text)
	left = pad // 2
	return " " * left + text + " " * (pad - left)


def format_params_table(rows: List[FieldRow], defaults: Dict[str, str]) -> str:
	"""Markdown table of rows plus a description list.

	The Default column shows only code defaults; the description prefers the
	code default as example, else the documented one.
	"""

	def default_of(row: FieldRow) -> str:
		return str(defaults[row.name]) if row.name in defaults else ""

	def example_of(row: FieldRow) -> str:
		return str(defaults[row.name]) if row.name in defaults else (row.example or "")

	name_w, type_w, req_w, default_w = 4, 4, 8, 7
	for r in rows:
		name_w = max(name_w, len(_escape(r.name)))
		type_w = max(type_w, len(_escape(r.type_str)))
		req_w = max(req_w, len("" if r.optional else "x"))
		default_w = max(default_w, len(_escape(default_of(r))))

	header = (
		f"| {'Name'.ljust(name_w)} | {_center('Type', type_w)} | "
		f"{_center('Required', req_w)} | {_center('Default', default_w)} |"
	)
	sep = f"|:{'-' * name_w}-|:{'-' * type_w}:|:{'-' * req_w}:|:{'-' * default_w}:|"
	body = "\n".join(
		f"| {_escape(r.name).ljust(name_w)} | {_center(_escape(r.type_str), type_w)} | "
		f"{_center('' if r.optional else 'x', req_w)} | {_center(_escape(default_of(r)), default_w)} |"
		for r in rows
	)
	table = f"## Params\n\n{header}\n{sep}\n{body}"

	lines: List[str] = []
	for r in rows:
		example = example_of(r)
		if not (r.description or example or r.accepts_values):
			continue
		example_part = f" Example: `{_escape(example)}`." if example else ""
		accepts_part = f" Can accept values: `{', '.join(r.accepts_values)}`." if r.accepts_values else ""
		lines.append(f"- **{_escape(r.name)}**: {r.description}{example_part}{accepts_part}".strip())

	if lines:
		return table + "\n\n### Params description\n\n" + "\n".join(lines)
	return table


def _format_defaults(defaults: Dict[str, str], heading: str) -> str:
	if not defaults:
		return "Default values: (none)\n"
	parts = [heading]
	for key, value in defaults.items():
		parts.append(f"  {key}: {value}\n")
	return "".join(parts)


def summarize_call(call: DeclarationCall, index: int, project_root: str) -> str:
	rel_path = os.path.relpath(call.file_path, project_root)
	parts: List[str] = [f"parseParams call #{index + 1} ({rel_path}:{call.line}):\n\n"]
	if call.fields:
		parts.append(format_params_table(call.fields, call.defaults))
	elif call.type_info:
		parts.append("Type definition:\n")
		parts.append(f"{{\n{call.type_info}\n}}\n")
		parts.append(_format_defaults(call.defaults, "\nDefault values:\n"))
	else:
		parts.append("Type definition: (not specified)\n")
		parts.append(_format_defaults(call.defaults, "Default values:\n"))
	return "".join(parts)


def format_for_docs(calls: List[DeclarationCall], project_root: Optional[str] = None) -> str:
	"""Banner text describing every declaration call, or '' when there are none."""
	if not calls:
		return ""
	root = project_root or os.getcwd()
	sections = [summarize_call(call, i, root) for i, call in enumerate(calls)]
	return BANNER_OPEN + "\n\n".join(sections) + BANNER_CLOSE
