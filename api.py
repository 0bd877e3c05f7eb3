from __future__ import annotations

import os
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from paramscan.encode import generate_params_base64
from paramscan.extract import ExtractionCache
from paramscan.model import ExtractionResult
from paramscan.summarize import format_for_docs


app = FastAPI(title="Parameter Schema Extractor")

cache = ExtractionCache()


class AnalyzeRequest(BaseModel):
	entry_path: str


class DocsRequest(AnalyzeRequest):
	project_root: Optional[str] = None


class EncodeRequest(AnalyzeRequest):
	hostname: Optional[str] = None
	custom_script_id: Optional[int] = None
	custom_script_name: Optional[str] = None


class InvalidateRequest(BaseModel):
	entry_path: Optional[str] = None


def _entry(path: str) -> str:
	entry = os.path.abspath(path)
	if not os.path.isfile(entry):
		raise HTTPException(status_code=400, detail=f"Invalid entry_path: {entry}")
	return entry


@app.post("/analyze", response_model=ExtractionResult)
def analyze(req: AnalyzeRequest) -> ExtractionResult:
	return cache.get_or_compute(_entry(req.entry_path))


@app.post("/describe")
def describe(req: DocsRequest) -> dict:
	result = cache.get_or_compute(_entry(req.entry_path))
	root = os.path.abspath(req.project_root) if req.project_root else os.getcwd()
	return {"text": format_for_docs(result.calls, root)}


@app.post("/encode")
def encode(req: EncodeRequest) -> dict:
	result = cache.get_or_compute(_entry(req.entry_path))
	encoded = generate_params_base64(
		result.calls,
		hostname=req.hostname,
		custom_script_id=req.custom_script_id,
		custom_script_name=req.custom_script_name,
	)
	return {"encoded": encoded}


@app.post("/cache/invalidate")
def invalidate(req: InvalidateRequest) -> dict:
	if req.entry_path:
		cache.invalidate(req.entry_path)
	else:
		cache.invalidate_all()
	return {"cached": len(cache)}


def create_app() -> FastAPI:
	return app
