import base64
import json

from paramscan.encode import build_params_hash, generate_params_base64, remove_quotes
from paramscan.model import DeclarationCall, FieldRow


def _call(fields, defaults=None, line=1):
	return DeclarationCall(file_path="/tmp/index.ts", line=line, fields=fields, defaults=defaults or {})


def test_remove_quotes():
	assert remove_quotes('"abc"') == "abc"
	assert remove_quotes("'abc'") == "abc"
	assert remove_quotes("3600") == "3600"
	assert remove_quotes('"abc') == '"abc'


def test_latest_call_wins_per_name():
	calls = [
		_call([FieldRow(name="a", type_str="string"), FieldRow(name="b", type_str="number", optional=True)]),
		_call([FieldRow(name="a", type_str="number", optional=True, description="Second")], {"a": "5"}, line=9),
	]
	data = build_params_hash(calls)
	assert [p.name for p in data.parameters] == ["a", "b"]
	assert data.parameters[0].type == "number"
	assert data.parameters[0].default_value == "5"
	assert data.parameters[0].description == "Second"
	# the first call still declared a required field
	assert data.isParametersRequired is True


def test_index_signatures_and_textual_calls_are_skipped():
	calls = [
		_call([FieldRow(name="[key: string]", type_str="string"), FieldRow(name="x", type_str="boolean", optional=True)]),
		DeclarationCall(file_path="/tmp/index.js", line=2, type_info="  y: string"),
	]
	data = build_params_hash(calls)
	assert [p.name for p in data.parameters] == ["x"]
	assert data.isParametersRequired is False


def test_base64_payload():
	calls = [
		_call(
			[FieldRow(name="mode", type_str="string", accepts_values=["fast", "slow"])],
			{"mode": '"fast"'},
		)
	]
	encoded = generate_params_base64(calls, hostname="example.com", custom_script_id=7)
	payload = json.loads(base64.b64decode(encoded).decode("utf-8"))
	assert payload == {
		"isParametersRequired": True,
		"parameters": [
			{
				"name": "mode",
				"type": "string",
				"required": True,
				"default_value": "fast",
				"available_values": ["fast", "slow"],
			}
		],
		"hostname": "example.com",
		"customScriptId": 7,
	}
	assert list(payload) == ["isParametersRequired", "parameters", "hostname", "customScriptId"]
