from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FieldRow(BaseModel):
	model_config = ConfigDict(frozen=True)

	name: str
	type_str: str = "unknown"
	optional: bool = False
	description: str = ""
	example: Optional[str] = None
	accepts_values: Optional[List[str]] = None


class CommentInfo(BaseModel):
	model_config = ConfigDict(frozen=True)

	description: str = ""
	example: str = ""
	password: bool = False


class DeclarationCall(BaseModel):
	"""One call site of the parameter-declaring function.

	Exactly one of ``fields`` (structural rows) and ``type_info`` (raw text)
	carries the type; both are empty when the call declares no type.
	"""

	model_config = ConfigDict(frozen=True)

	file_path: str
	line: int
	fields: Optional[List[FieldRow]] = None
	type_info: str = ""
	defaults: Dict[str, str] = Field(default_factory=dict)


class ExtractionResult(BaseModel):
	model_config = ConfigDict(frozen=True)

	entry: str
	calls: List[DeclarationCall] = []


class ParamHash(BaseModel):
	name: str
	type: str
	required: bool
	default_value: Optional[str] = None
	available_values: Optional[List[str]] = None
	description: Optional[str] = None


class ParamsHashData(BaseModel):
	isParametersRequired: bool = False
	parameters: List[ParamHash] = []
	hostname: Optional[str] = None
	customScriptId: Optional[int] = None
	customScriptName: Optional[str] = None
