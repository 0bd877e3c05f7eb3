from __future__ import annotations

import argparse
import json
import logging
import os

import uvicorn

from paramscan.encode import generate_params_base64
from paramscan.extract import ExtractionCache
from paramscan.fs_scan import collect_source_files
from paramscan.settings import settings
from paramscan.summarize import format_for_docs


def cmd_analyze(args: argparse.Namespace) -> None:
	result = ExtractionCache().get_or_compute(args.entry)
	print(json.dumps(result.model_dump(), indent=2))


def cmd_docs(args: argparse.Namespace) -> None:
	result = ExtractionCache().get_or_compute(args.entry)
	root = os.path.abspath(args.root) if args.root else os.getcwd()
	print(format_for_docs(result.calls, root))


def cmd_encode(args: argparse.Namespace) -> None:
	result = ExtractionCache().get_or_compute(args.entry)
	print(
		generate_params_base64(
			result.calls,
			hostname=args.hostname,
			custom_script_id=args.script_id,
			custom_script_name=args.script_name,
		)
	)


def cmd_files(args: argparse.Namespace) -> None:
	for path in collect_source_files(args.entry):
		print(path)


def cmd_serve(args: argparse.Namespace) -> None:
	uvicorn.run("api:app", host=args.host, port=args.port, reload=args.reload)


def main() -> None:
	parser = argparse.ArgumentParser(prog="paramscan")
	parser.add_argument("--log-level", default=settings.log_level)
	sub = parser.add_subparsers(dest="cmd", required=True)

	pa = sub.add_parser("analyze", help="Extract parameter declarations and print them as JSON")
	pa.add_argument("entry", help="Path to the entry script")
	pa.set_defaults(func=cmd_analyze)

	pd = sub.add_parser("docs", help="Print the parameters description banner")
	pd.add_argument("entry", help="Path to the entry script")
	pd.add_argument("--root", help="Project root used for relative paths")
	pd.set_defaults(func=cmd_docs)

	pe = sub.add_parser("encode", help="Print the base64 parameters record")
	pe.add_argument("entry", help="Path to the entry script")
	pe.add_argument("--hostname")
	pe.add_argument("--script-id", type=int)
	pe.add_argument("--script-name")
	pe.set_defaults(func=cmd_encode)

	pf = sub.add_parser("files", help="List the entry script and its local imports")
	pf.add_argument("entry", help="Path to the entry script")
	pf.set_defaults(func=cmd_files)

	ps = sub.add_parser("serve", help="Run FastAPI server")
	ps.add_argument("--host", default="127.0.0.1")
	ps.add_argument("--port", type=int, default=8000)
	ps.add_argument("--reload", action="store_true")
	ps.set_defaults(func=cmd_serve)

	args = parser.parse_args()
	logging.basicConfig(
		level=args.log_level.upper(),
		format="%(levelname)s %(name)s: %(message)s",
	)
	args.func(args)


if __name__ == "__main__":
	main()
