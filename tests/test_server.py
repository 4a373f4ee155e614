"""Tests for the FastAPI server."""

import json
from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

from conftest import SAMPLE_ANALYSIS, FakeBackend
from script_analyzer.client import ScriptAnalyzerClient
from script_analyzer.errors import MissingCredentialError
from script_analyzer.server import app


@pytest.fixture(autouse=True)
def reset_workspace():
    """Reset the workspace singleton before each test."""
    import script_analyzer.server as srv
    srv._workspace = None
    yield
    if srv._workspace is not None:
        srv._workspace.close()
    srv._workspace = None


@pytest.fixture
def backend():
    return FakeBackend(json.dumps(SAMPLE_ANALYSIS))


@pytest.fixture
def patched_client(backend):
    with patch("script_analyzer.server.create_client", return_value=ScriptAnalyzerClient(backend)):
        yield


def _http():
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_index_page():
    async with _http() as client:
        resp = await client.get("/")
        assert resp.status_code == 200
        assert "script-analyzer" in resp.text


@pytest.mark.asyncio
async def test_workspace_starts_with_one_script(patched_client):
    async with _http() as client:
        resp = await client.get("/api/scripts")
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["scripts"]) == 1
        assert data["active_id"] == data["scripts"][0]["id"]
        assert data["live_analysis"] is False


@pytest.mark.asyncio
async def test_missing_credential_is_503():
    with patch("script_analyzer.server.create_client", side_effect=MissingCredentialError("GEMINI_API_KEY environment variable not set")):
        async with _http() as client:
            resp = await client.get("/api/scripts")
            assert resp.status_code == 503
            assert "GEMINI_API_KEY" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_add_update_delete_script(patched_client):
    async with _http() as client:
        resp = await client.post("/api/scripts", json={"name": "backup.sh", "content": "tar czf b.tgz ."})
        assert resp.status_code == 201
        script_id = resp.json()["id"]

        resp = await client.put(f"/api/scripts/{script_id}", json={"content": "tar czf backup.tgz ."})
        assert resp.json()["content"] == "tar czf backup.tgz ."

        resp = await client.get("/api/scripts")
        assert resp.json()["active_id"] == script_id

        resp = await client.delete(f"/api/scripts/{script_id}")
        data = resp.json()
        assert [s["name"] for s in data["scripts"]] == ["script-1.sh"]
        assert data["active_id"] == data["scripts"][0]["id"]


@pytest.mark.asyncio
async def test_unknown_script_is_404(patched_client):
    async with _http() as client:
        for method, path in [("GET", "/api/scripts/nope"), ("DELETE", "/api/scripts/nope"),
                             ("POST", "/api/scripts/nope/analyze"), ("GET", "/api/export/nope")]:
            resp = await client.request(method, path)
            assert resp.status_code == 404, path


@pytest.mark.asyncio
async def test_analyze_script(patched_client):
    async with _http() as client:
        resp = await client.post("/api/scripts", json={"content": "echo hi"})
        script_id = resp.json()["id"]
        resp = await client.post(f"/api/scripts/{script_id}/analyze")
        assert resp.status_code == 200
        data = resp.json()
        assert data["loading"] is False
        assert data["result"]["securityAudit"][0]["vulnerability"] == "Word splitting on $f"


@pytest.mark.asyncio
async def test_analyze_empty_script_is_422(patched_client, backend):
    async with _http() as client:
        active = (await client.get("/api/scripts")).json()["active_id"]
        resp = await client.post(f"/api/scripts/{active}/analyze")
        assert resp.status_code == 422
        assert resp.json()["detail"] == "Script content cannot be empty."
        assert backend.calls == []


@pytest.mark.asyncio
async def test_analyze_failure_reported_in_entry(patched_client, backend):
    backend.reply = "{}"
    async with _http() as client:
        resp = await client.post("/api/scripts", json={"name": "a.sh", "content": "echo hi"})
        script_id = resp.json()["id"]
        resp = await client.post(f"/api/scripts/{script_id}/analyze")
        assert resp.status_code == 200
        data = resp.json()
        assert data["result"] is None
        assert data["error"].startswith("Analysis failed for a.sh")
        resp = await client.get("/api/scripts")
        assert resp.json()["error"] == data["error"]


@pytest.mark.asyncio
async def test_analyze_all(patched_client, backend):
    async with _http() as client:
        await client.post("/api/scripts", json={"content": "echo 1"})
        await client.post("/api/scripts", json={"content": "echo 2"})
        resp = await client.post("/api/analyze-all")
        scripts = resp.json()["scripts"]
        # The seeded starter script is empty and skipped
        assert len(scripts) == 2
        assert all(s["result"] is not None for s in scripts)
        assert len(backend.calls) == 2


@pytest.mark.asyncio
async def test_toggle_live(patched_client):
    async with _http() as client:
        resp = await client.put("/api/live", json={"enabled": True})
        assert resp.json()["live_analysis"] is True
        resp = await client.put("/api/live", json={"enabled": False})
        assert resp.json()["live_analysis"] is False


@pytest.mark.asyncio
async def test_refactor_and_apply(patched_client, backend):
    backend.reply = json.dumps({"originalCode": "rm $f", "refactoredCode": 'rm -- "$f"', "explanation": "Quote"})
    async with _http() as client:
        resp = await client.post("/api/scripts", json={"content": "for f in *; do rm $f; done"})
        script_id = resp.json()["id"]
        resp = await client.post(f"/api/scripts/{script_id}/refactor", json={"suggestion": "Quote $f"})
        assert resp.status_code == 200
        fix = resp.json()
        assert fix["suggestion"] == "Quote $f"

        resp = await client.post(f"/api/scripts/{script_id}/fixes", json={"fixes": [fix]})
        assert resp.json()["content"] == 'for f in *; do rm -- "$f"; done'


@pytest.mark.asyncio
async def test_refactor_failure_is_502(patched_client, backend):
    backend.reply = "[]"
    async with _http() as client:
        resp = await client.post("/api/scripts", json={"name": "r.sh", "content": "ls"})
        script_id = resp.json()["id"]
        resp = await client.post(f"/api/scripts/{script_id}/refactor", json={"suggestion": "x"})
        assert resp.status_code == 502
        assert resp.json()["detail"].startswith("Refactor failed for r.sh")


@pytest.mark.asyncio
async def test_refactor_all(patched_client, backend):
    backend.reply = json.dumps([
        {"originalCode": "ls", "refactoredCode": "ls -1", "explanation": "e1", "suggestion": "one"},
        {"originalCode": "ls -1", "refactoredCode": "ls -1A", "explanation": "e2", "suggestion": "two"},
    ])
    async with _http() as client:
        resp = await client.post("/api/scripts", json={"content": "ls"})
        script_id = resp.json()["id"]
        resp = await client.post(f"/api/scripts/{script_id}/refactor-all", json={"suggestions": ["one", "two"]})
        fixes = resp.json()
        assert [f["suggestion"] for f in fixes] == ["one", "two"]
        resp = await client.post(f"/api/scripts/{script_id}/fixes", json={"fixes": fixes})
        assert resp.json()["content"] == "ls -1A"


@pytest.mark.asyncio
async def test_chat(patched_client, backend):
    backend.reply = "It lists files."
    async with _http() as client:
        resp = await client.post("/api/scripts", json={"content": "ls"})
        script_id = resp.json()["id"]
        resp = await client.post(f"/api/scripts/{script_id}/chat", json={"question": "What?"})
        assert resp.json()[-1] == {"role": "assistant", "content": "It lists files."}
        resp = await client.get(f"/api/scripts/{script_id}/chat")
        assert len(resp.json()) == 2


@pytest.mark.asyncio
async def test_export_html(patched_client):
    async with _http() as client:
        resp = await client.post("/api/scripts", json={"name": "t.sh", "content": "echo hi"})
        script_id = resp.json()["id"]
        await client.post(f"/api/scripts/{script_id}/analyze")

        resp = await client.get(f"/api/export/{script_id}?sections=summary,portability")
        assert resp.status_code == 200
        assert "text/html" in resp.headers.get("content-type", "")
        assert 'filename="t.sh.analysis.html"' in resp.headers["Content-Disposition"]
        assert "<h2>Summary</h2>" in resp.text
        assert "<h2>Strengths</h2>" not in resp.text


@pytest.mark.asyncio
async def test_export_json(patched_client):
    async with _http() as client:
        resp = await client.post("/api/scripts", json={"content": "echo hi"})
        script_id = resp.json()["id"]
        await client.post(f"/api/scripts/{script_id}/analyze")

        resp = await client.get(f"/api/export/{script_id}?format=json")
        assert "application/json" in resp.headers.get("content-type", "")
        data = json.loads(resp.text)
        assert "analysis" in data
        assert "script" in data


@pytest.mark.asyncio
async def test_export_without_result_is_404(patched_client):
    async with _http() as client:
        active = (await client.get("/api/scripts")).json()["active_id"]
        resp = await client.get(f"/api/export/{active}")
        assert resp.status_code == 404


@pytest.mark.asyncio
async def test_export_unknown_section_is_400(patched_client):
    async with _http() as client:
        resp = await client.post("/api/scripts", json={"content": "echo hi"})
        script_id = resp.json()["id"]
        await client.post(f"/api/scripts/{script_id}/analyze")
        resp = await client.get(f"/api/export/{script_id}?sections=bogus")
        assert resp.status_code == 400
