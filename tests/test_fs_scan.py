from textwrap import dedent

from paramscan.fs_scan import (
	collect_source_files,
	resolve_module_specifier,
)


def _write(path, code=""):
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(dedent(code))
	return str(path)


def test_resolve_probes_extensions_then_index(tmp_path):
	util = _write(tmp_path / "lib" / "util.js")
	index = _write(tmp_path / "dir" / "index.tsx")
	exact = _write(tmp_path / "data.json", "{}")

	assert resolve_module_specifier("./lib/util", str(tmp_path)) == util
	assert resolve_module_specifier("./dir", str(tmp_path)) == index
	assert resolve_module_specifier("./data.json", str(tmp_path)) == exact
	assert resolve_module_specifier("./missing", str(tmp_path)) is None
	assert resolve_module_specifier("lodash", str(tmp_path)) is None


def test_ts_wins_over_js_for_same_stem(tmp_path):
	ts = _write(tmp_path / "mod.ts")
	_write(tmp_path / "mod.js")
	assert resolve_module_specifier("./mod", str(tmp_path)) == ts


def test_collects_local_imports_depth_first(tmp_path):
	entry = _write(
		tmp_path / "entry.ts",
		"""
		import { b } from './b';
		import './c';
		import _ from 'lodash';
		import { gone } from './missing';
		""",
	)
	b = _write(tmp_path / "b.ts", "import './d';\n")
	c = _write(tmp_path / "c.ts")
	d = _write(tmp_path / "d" / "index.ts")

	assert collect_source_files(entry) == [entry, b, d, c]


def test_reexports_are_not_followed(tmp_path):
	entry = _write(
		tmp_path / "index.ts",
		"""
		export * from './other';
		export { a } from './named';
		""",
	)
	_write(tmp_path / "other.ts", "parseParams({});\n")
	_write(tmp_path / "named.ts", "export const a = 1;\n")

	assert collect_source_files(entry) == [entry]


def test_cyclic_imports_visit_each_file_once(tmp_path):
	a = _write(tmp_path / "a.ts", "import { b } from './b';\nexport const a = 1;\n")
	b = _write(tmp_path / "b.ts", "import { a } from './a';\nimport { c } from './c';\nexport const b = 2;\n")
	c = _write(tmp_path / "c.ts", "import { a } from './a';\nexport const c = 3;\n")

	files = collect_source_files(a)
	assert files == [a, b, c]
	assert len(set(files)) == len(files)


def test_require_and_dynamic_import(tmp_path):
	entry = _write(
		tmp_path / "main.js",
		"""
		const x = require('./x');
		async function load() {
			return import('./y');
		}
		const fs = require('fs');
		""",
	)
	x = _write(tmp_path / "x.js")
	y = _write(tmp_path / "y.mjs")

	assert collect_source_files(entry) == [entry, x, y]


def test_missing_entry_yields_nothing(tmp_path):
	assert collect_source_files(str(tmp_path / "nope.ts")) == []
