from textwrap import dedent

from paramscan.comments import (
	CommentLocator,
	DeclarationSpan,
	StructuredCommentStrategy,
	TriviaScanStrategy,
	comment_info,
	declaration_span,
	parse_doc_comment,
)
from paramscan.source import parse_source, walk


SOURCE = dedent(
	"""
	type Params = {
		/** The user name
		 * shown in the greeting.
		 *
		 * @example alice
		 */
		name: string;
		/**
		 * API token
		 * @password
		 */
		token: string;
		/** Retries before giving up
		 * @default 3
		 */
		retries?: number;
		// plain comment
		plain: boolean;
		undocumented: string;
	};
	"""
)


def _properties(tmp_path):
	p = tmp_path / "params.ts"
	p.write_text(SOURCE)
	unit = parse_source(str(p))
	props = {
		unit.node_text(n.child_by_field_name("name")): n
		for n in walk(unit.root)
		if n.type == "property_signature"
	}
	return unit, props


def test_parse_description_and_example():
	info = parse_doc_comment("Server host\n\n@example example.com")
	assert info.description == "Server host"
	assert info.example == "example.com"
	assert info.password is False


def test_description_stops_at_tag():
	info = parse_doc_comment("Secret value @password")
	assert info.description == "Secret value"
	assert info.password is True


def test_default_used_when_no_example():
	assert parse_doc_comment("Retries\n@default 3").example == "3"
	assert parse_doc_comment("Retries\n@default 3\n@example 5").example == "5"


def test_comment_info_on_properties(tmp_path):
	unit, props = _properties(tmp_path)

	name = comment_info(unit, props["name"])
	assert name.description == "The user name\nshown in the greeting."
	assert name.example == "alice"

	token = comment_info(unit, props["token"])
	assert token.description == "API token"
	assert token.password is True

	retries = comment_info(unit, props["retries"])
	assert retries.description == "Retries before giving up"
	assert retries.example == "3"


def test_non_doc_comments_are_ignored(tmp_path):
	unit, props = _properties(tmp_path)
	assert comment_info(unit, props["plain"]).description == ""
	assert comment_info(unit, props["undocumented"]).description == ""


def test_both_strategies_agree(tmp_path):
	unit, props = _properties(tmp_path)
	span = declaration_span(unit, props["token"])

	structured = CommentLocator([StructuredCommentStrategy()]).locate(span)
	scanned = CommentLocator([TriviaScanStrategy()]).locate(span)
	assert structured == scanned == "API token\n@password"


def test_trivia_scan_without_close_marker():
	span = DeclarationSpan(source=b"/** never closed\nname: string", full_start=0, start=17)
	assert TriviaScanStrategy().inner_text(span) == ""


def test_missing_node_gives_empty_info():
	info = comment_info(None, None)
	assert info.description == "" and info.example == "" and not info.password
