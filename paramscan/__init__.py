"""Static extraction of runtime parameter schemas from script sources.

Modules:
- fs_scan.py: Local import graph discovery from an entry file.
- source.py: Source files parsed with tree-sitter.
- types.py / checker.py: Structural type descriptors and type-checking facilities.
- comments.py: Documentation comments attached to declarations.
- evaluate.py: Constant folding of default values.
- expand.py: Expansion of parameter types into field rows.
- scanner.py: Parameter-declaring call sites of one file.
- extract.py: Extraction driver and result cache.
- summarize.py / encode.py: Documentation banner and encoded parameter record.
"""

__all__ = [
	"fs_scan",
	"source",
	"types",
	"checker",
	"comments",
	"evaluate",
	"expand",
	"scanner",
	"extract",
	"summarize",
	"encode",
	"model",
	"settings",
]
