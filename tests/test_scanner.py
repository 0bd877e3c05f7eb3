from textwrap import dedent

import pytest

from paramscan.checker import ProgramTypeFacility
from paramscan.errors import SourceParseError
from paramscan.scanner import (
	find_type_comments,
	format_type_comment,
	nearest_type_comment,
	scan_declarations,
)
from paramscan.source import parse_source


def _unit(tmp_path, code, name="index.ts"):
	p = tmp_path / name
	p.write_text(dedent(code))
	return parse_source(str(p))


def _scan_with_facility(tmp_path, code, name="index.ts"):
	p = tmp_path / name
	p.write_text(dedent(code))
	facility = ProgramTypeFacility([str(p)])
	return scan_declarations(facility.source_unit(str(p)), facility)


def test_inline_type_without_facility(tmp_path):
	unit = _unit(
		tmp_path,
		"""
		import { cs, parseParams } from 'script-helper';

		const params = parseParams<{
			/** Greeting target */
			param1: string;
			param2?: number;
		}>({
			param1: '',
			param2: 60 * 60,
		});
		""",
	)
	calls = scan_declarations(unit)
	assert len(calls) == 1
	call = calls[0]
	assert call.file_path == unit.path
	assert call.line == 4
	assert call.type_info == ""
	assert [(f.name, f.type_str, f.optional) for f in call.fields] == [
		("param1", "string", False),
		("param2", "number", True),
	]
	assert call.fields[0].description == "Greeting target"
	assert call.defaults == {"param1": '""', "param2": "3600"}


def test_named_type_without_facility_is_verbatim(tmp_path):
	unit = _unit(
		tmp_path,
		"""
		interface Params { a: string }
		parseParams<Params>({ a: 'x' });
		""",
	)
	call = scan_declarations(unit)[0]
	assert call.fields is None
	assert call.type_info == "Params"


def test_named_type_with_facility_expands(tmp_path):
	calls = _scan_with_facility(
		tmp_path,
		"""
		const DEFAULT_PORT = 8000 + 80;
		interface Params {
			/** Port to listen on */
			port: number;
			host?: string;
		}
		parseParams<Params>({ port: DEFAULT_PORT, host: 'localhost' });
		""",
	)
	call = calls[0]
	assert call.type_info == ""
	assert [f.name for f in call.fields] == ["port", "host"]
	assert call.fields[0].description == "Port to listen on"
	assert call.defaults == {"port": "8080", "host": '"localhost"'}


def test_unexpandable_type_with_facility_falls_back_to_text(tmp_path):
	call = _scan_with_facility(tmp_path, "parseParams<Missing>({});\n")[0]
	assert call.fields is None
	assert call.type_info == "Missing"


def test_type_comment_fallback(tmp_path):
	unit = _unit(
		tmp_path,
		"""
		import { parseParams } from 'script-helper';

		/**
		 * @type {{param1: string; param2?: string;}}
		 */
		const params = parseParams({
			param1: '',
		});
		""",
		name="index.js",
	)
	call = scan_declarations(unit)[0]
	assert call.fields is None
	assert call.type_info == "  param1: string\n  param2?: string"
	assert call.defaults == {"param1": '""'}


def test_type_comment_too_far_above_is_ignored(tmp_path):
	unit = _unit(
		tmp_path,
		"""
		/**
		 * @type {{a: string}}
		 */



		const unrelated = 1;

		const params = parseParams({});
		""",
		name="index.js",
	)
	call = scan_declarations(unit)[0]
	assert call.type_info == ""
	assert call.fields is None
	assert call.defaults == {}


def test_multiple_calls_in_source_order(tmp_path):
	unit = _unit(
		tmp_path,
		"""
		const a = parseParams<{ a: string }>({ a: 'first' });
		function later() {
			return parseParams<{ b: boolean }>({ b: true });
		}
		const c = cs.parseParams({ c: 1 });
		const d = parseParams(defaults);
		""",
	)
	calls = scan_declarations(unit)
	assert [c.line for c in calls] == [2, 4, 7]
	assert calls[0].defaults == {"a": '"first"'}
	assert calls[1].defaults == {"b": "true"}
	assert calls[2].defaults == {}


def test_shorthand_and_quoted_keys(tmp_path):
	calls = _scan_with_facility(
		tmp_path,
		"""
		const timeout = 5;
		parseParams({ timeout, 'api-key': 'abc', ...rest });
		""",
	)
	assert calls[0].defaults == {"timeout": "5", "api-key": '"abc"'}


def test_custom_function_name(tmp_path):
	unit = _unit(tmp_path, "declareParams<{ a: string }>({});\nparseParams({});\n")
	calls = scan_declarations(unit, function_name="declareParams")
	assert len(calls) == 1
	assert calls[0].fields[0].name == "a"


def test_syntax_error_raises(tmp_path):
	unit = _unit(tmp_path, "const = parseParams<{ a: string }>(;\n")
	with pytest.raises(SourceParseError):
		scan_declarations(unit)


def test_find_and_pick_nearest_type_comment():
	text = (
		"/**\n * @type {{a: string}}\n */\n\n"
		"/**\n * @type {{b: number}}\n */\nconst x = f();\n"
	)
	comments = find_type_comments(text)
	assert [(c.type, c.line) for c in comments] == [("{a: string", 1), ("{b: number", 5)]
	assert nearest_type_comment(comments, 8, 5).line == 5
	assert nearest_type_comment(comments, 5, 5).line == 1
	assert nearest_type_comment(comments, 20, 5) is None


def test_format_type_comment():
	assert format_type_comment("a: string; b?: number") == "  a: string\n  b?: number"
