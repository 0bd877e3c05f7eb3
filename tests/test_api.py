import base64
import json
from textwrap import dedent

import pytest
from fastapi.testclient import TestClient

import api


@pytest.fixture
def client():
	api.cache.invalidate_all()
	return TestClient(api.create_app())


@pytest.fixture
def entry(tmp_path):
	p = tmp_path / "index.ts"
	p.write_text(
		dedent(
			"""
			parseParams<{
				/** Target host
				 * @example example.com
				 */
				host: string;
				port?: number;
			}>({ port: 80 });
			"""
		)
	)
	return p


def test_analyze(client, entry):
	r = client.post("/analyze", json={"entry_path": str(entry)})
	assert r.status_code == 200
	data = r.json()
	assert data["entry"] == str(entry)
	call = data["calls"][0]
	assert call["line"] == 2
	assert [f["name"] for f in call["fields"]] == ["host", "port"]
	assert call["fields"][0]["example"] == "example.com"
	assert call["defaults"] == {"port": "80"}


def test_analyze_rejects_missing_entry(client, tmp_path):
	r = client.post("/analyze", json={"entry_path": str(tmp_path / "nope.ts")})
	assert r.status_code == 400


def test_describe(client, entry, tmp_path):
	r = client.post("/describe", json={"entry_path": str(entry), "project_root": str(tmp_path)})
	assert r.status_code == 200
	text = r.json()["text"]
	assert "parseParams call #1 (index.ts:2):" in text
	assert "- **host**: Target host Example: `example.com`." in text


def test_encode(client, entry):
	r = client.post("/encode", json={"entry_path": str(entry), "custom_script_name": "deploy"})
	assert r.status_code == 200
	payload = json.loads(base64.b64decode(r.json()["encoded"]))
	assert payload["customScriptName"] == "deploy"
	assert [p["name"] for p in payload["parameters"]] == ["host", "port"]
	assert payload["parameters"][1]["default_value"] == "80"


def test_cache_invalidation(client, entry):
	client.post("/analyze", json={"entry_path": str(entry)})
	assert client.post("/cache/invalidate", json={"entry_path": str(entry)}).json() == {"cached": 0}

	client.post("/analyze", json={"entry_path": str(entry)})
	assert client.post("/cache/invalidate", json={}).json() == {"cached": 0}
