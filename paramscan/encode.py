from __future__ import annotations

import base64
import re
from typing import Dict, List, Optional

from .model import DeclarationCall, FieldRow, ParamHash, ParamsHashData


# Synthetic rows such as "[key: string]"
INDEX_SIGNATURE_NAME = re.compile(r"^\[.+:\s*.+\]$")


def remove_quotes(value: str) -> str:
	text = str(value).strip()
	if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
		return text[1:-1]
	return text


def param_hash(row: FieldRow, defaults: Dict[str, str]) -> ParamHash:
	return ParamHash(
		name=row.name,
		type=row.type_str,
		required=not row.optional,
		default_value=remove_quotes(defaults[row.name]) if row.name in defaults else None,
		available_values=row.accepts_values or None,
		description=row.description or None,
	)


def build_params_hash(
	calls: List[DeclarationCall],
	hostname: Optional[str] = None,
	custom_script_id: Optional[int] = None,
	custom_script_name: Optional[str] = None,
) -> ParamsHashData:
	"""Merge the rows of every call; the latest call wins per parameter name."""
	params: Dict[str, ParamHash] = {}
	required = False
	for call in calls:
		for row in call.fields or []:
			if INDEX_SIGNATURE_NAME.match(row.name):
				continue
			params[row.name] = param_hash(row, call.defaults)
			if not row.optional:
				required = True

	return ParamsHashData(
		hostname=hostname or None,
		customScriptId=custom_script_id,
		customScriptName=custom_script_name or None,
		isParametersRequired=required,
		parameters=list(params.values()),
	)


def generate_params_base64(calls: List[DeclarationCall], **options) -> str:
	data = build_params_hash(calls, **options)
	payload = data.model_dump_json(exclude_none=True)
	return base64.b64encode(payload.encode("utf-8")).decode("ascii")
