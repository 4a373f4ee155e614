"""FastAPI web server for script-analyzer."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse, Response
from pydantic import BaseModel

from .backends import create_client
from .config import get_live_delay_ms
from .contracts import RefactorResult
from .core import ExportSections, ScriptEntry
from .errors import ConfigurationError, InputValidationError, ScriptNotFoundError
from .export import analysis_to_html, analysis_to_json
from .workspace import Workspace

logger = logging.getLogger(__name__)

# Workspace singleton (created on first request)
_workspace: Workspace | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if _workspace is not None:
        _workspace.close()


app = FastAPI(title="script-analyzer", version="0.1.0", lifespan=lifespan)


def _get_workspace() -> Workspace:
    """Lazily create the client and workspace, seeded with one empty script."""
    global _workspace
    if _workspace is None:
        try:
            client = create_client()
            delay = get_live_delay_ms()
        except ConfigurationError as e:
            logger.error("Cannot create workspace: %s", e)
            raise HTTPException(status_code=503, detail=str(e))
        _workspace = Workspace(client, live_delay_ms=delay)
        _workspace.add_script()
        logger.info("Workspace ready")
    return _workspace


def _entry_or_404(script_id: str) -> ScriptEntry:
    try:
        return _get_workspace().get(script_id)
    except ScriptNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _entry_to_dict(entry: ScriptEntry, full: bool = True) -> dict:
    """Convert a ScriptEntry to a JSON-serializable dict."""
    data = {
        "id": entry.script.id,
        "name": entry.script.name,
        "loading": entry.loading,
        "error": entry.error,
        "has_result": entry.result is not None,
    }
    if full:
        data["content"] = entry.script.content
        data["result"] = entry.result.model_dump(by_alias=True) if entry.result else None
        data["chat"] = [{"role": m.role, "content": m.content} for m in entry.chat]
    return data


def _workspace_to_dict(workspace: Workspace) -> dict:
    return {
        "active_id": workspace.active_id,
        "live_analysis": workspace.live_analysis,
        "error": workspace.error,
        "scripts": [_entry_to_dict(e, full=False) for e in workspace.entries],
    }


# ── Request bodies ───────────────────────────────────────────────


class NewScript(BaseModel):
    name: Optional[str] = None
    content: str = ""


class ScriptUpdate(BaseModel):
    name: Optional[str] = None
    content: Optional[str] = None


class LiveToggle(BaseModel):
    enabled: bool


class RefactorRequest(BaseModel):
    suggestion: str


class RefactorAllRequest(BaseModel):
    suggestions: list[str]


class FixesRequest(BaseModel):
    fixes: list[RefactorResult]


class Question(BaseModel):
    question: str


# ── Routes ───────────────────────────────────────────────────────


@app.get("/")
async def index():
    """Serve the frontend."""
    html_path = Path(__file__).parent / "static" / "index.html"
    if not html_path.exists():
        raise HTTPException(status_code=404, detail="Frontend not found")
    return HTMLResponse(html_path.read_text(encoding="utf-8"))


@app.get("/api/scripts")
async def list_scripts():
    """Return the workspace: scripts, active id, live mode and last error."""
    return _workspace_to_dict(_get_workspace())


@app.post("/api/scripts", status_code=201)
async def add_script(body: NewScript):
    workspace = _get_workspace()
    script = workspace.add_script(name=body.name, content=body.content)
    return _entry_to_dict(workspace.get(script.id))


@app.get("/api/scripts/{script_id}")
async def get_script(script_id: str):
    return _entry_to_dict(_entry_or_404(script_id))


@app.put("/api/scripts/{script_id}")
async def update_script(script_id: str, body: ScriptUpdate):
    """Rename a script and/or replace its content."""
    entry = _entry_or_404(script_id)
    workspace = _get_workspace()
    if body.name is not None:
        workspace.rename(script_id, body.name)
    if body.content is not None:
        workspace.set_content(script_id, body.content)
    return _entry_to_dict(entry)


@app.delete("/api/scripts/{script_id}")
async def delete_script(script_id: str):
    _entry_or_404(script_id)
    workspace = _get_workspace()
    workspace.remove_script(script_id)
    return _workspace_to_dict(workspace)


@app.post("/api/scripts/{script_id}/activate")
async def activate_script(script_id: str):
    _entry_or_404(script_id)
    workspace = _get_workspace()
    workspace.set_active(script_id)
    return _workspace_to_dict(workspace)


@app.post("/api/scripts/{script_id}/analyze")
async def analyze_script(script_id: str):
    """Analyze one script. Model failures are reported in the entry's error."""
    _entry_or_404(script_id)
    try:
        entry = await _get_workspace().analyze(script_id)
    except InputValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _entry_to_dict(entry)


@app.post("/api/analyze-all")
async def analyze_all():
    """Analyze every non-empty script concurrently."""
    entries = await _get_workspace().analyze_all()
    return {"scripts": [_entry_to_dict(e) for e in entries]}


@app.put("/api/live")
async def set_live(body: LiveToggle):
    workspace = _get_workspace()
    workspace.set_live_analysis(body.enabled)
    return _workspace_to_dict(workspace)


@app.post("/api/scripts/{script_id}/refactor")
async def refactor_script(script_id: str, body: RefactorRequest):
    """Propose a fix for a single suggestion."""
    entry = _entry_or_404(script_id)
    result = await _get_workspace().refactor(script_id, body.suggestion)
    if result is None:
        raise HTTPException(status_code=502, detail=entry.error)
    return result.model_dump(by_alias=True)


@app.post("/api/scripts/{script_id}/refactor-all")
async def refactor_all(script_id: str, body: RefactorAllRequest):
    """Propose fixes for several suggestions in one model call."""
    entry = _entry_or_404(script_id)
    results = await _get_workspace().refactor_all(script_id, body.suggestions)
    if results is None:
        raise HTTPException(status_code=502, detail=entry.error)
    return [r.model_dump(by_alias=True) for r in results]


@app.post("/api/scripts/{script_id}/fixes")
async def apply_fixes(script_id: str, body: FixesRequest):
    """Apply fixes in order to the script's content."""
    _entry_or_404(script_id)
    content = _get_workspace().apply_all_fixes(script_id, body.fixes)
    return {"id": script_id, "content": content}


@app.get("/api/scripts/{script_id}/chat")
async def get_chat(script_id: str):
    entry = _entry_or_404(script_id)
    return [{"role": m.role, "content": m.content} for m in entry.chat]


@app.post("/api/scripts/{script_id}/chat")
async def ask_question(script_id: str, body: Question):
    _entry_or_404(script_id)
    chat = await _get_workspace().ask(script_id, body.question)
    return [{"role": m.role, "content": m.content} for m in chat]


@app.get("/api/export/{script_id}")
async def export_analysis(
    script_id: str,
    format: str = Query("html", description="Export format: html or json"),
    sections: str | None = Query(None, description="Comma-separated sections to include"),
):
    """Export a script's analysis as an HTML report or JSON."""
    entry = _entry_or_404(script_id)
    if entry.result is None:
        raise HTTPException(status_code=404, detail="Script has no analysis to export")

    safe_name = "".join(c if c.isalnum() or c in "-_. " else "" for c in entry.script.name)[:50]

    if format == "json":
        content = analysis_to_json(entry.script, entry.result)
        return Response(
            content=content,
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{safe_name}.analysis.json"'},
        )

    if sections:
        try:
            selected = ExportSections.only([s.strip() for s in sections.split(",") if s.strip()])
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    else:
        selected = ExportSections()
    content = analysis_to_html(entry.script, entry.result, selected)
    return Response(
        content=content,
        media_type="text/html",
        headers={"Content-Disposition": f'attachment; filename="{safe_name}.analysis.html"'},
    )
