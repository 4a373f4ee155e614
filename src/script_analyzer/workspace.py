"""In-memory workspace: open scripts and their analysis state.

All methods run on one asyncio event loop. Analyses for different scripts only
touch their own ScriptEntry, so they can interleave freely. Two analyses of
the same script are not ordered: whichever finishes last wins.
"""

import asyncio
import itertools
import logging
from typing import Optional

from .client import ScriptAnalyzerClient
from .config import DEFAULT_LIVE_DELAY_MS
from .contracts import RefactorResult
from .core import ChatMessage, Script, ScriptEntry
from .debounce import debounce
from .errors import AIClientError, InputValidationError, ScriptNotFoundError
from .fixes import apply_all_fixes, apply_fix

logger = logging.getLogger(__name__)

EMPTY_SCRIPT_ERROR = "Script content cannot be empty."


class Workspace:
    """Owns the script collection and orchestrates model calls for it."""

    def __init__(self, client: ScriptAnalyzerClient, live_delay_ms: float = DEFAULT_LIVE_DELAY_MS):
        self.client = client
        self.active_id: Optional[str] = None
        self.live_analysis = False
        self.error: Optional[str] = None  # latest user-facing failure
        self._entries: dict[str, ScriptEntry] = {}
        self._names = itertools.count(1)
        self._live = debounce(self._live_analyze, live_delay_ms)

    # ── Script collection ────────────────────────────────────────────

    @property
    def entries(self) -> list[ScriptEntry]:
        return list(self._entries.values())

    def get(self, script_id: str) -> ScriptEntry:
        try:
            return self._entries[script_id]
        except KeyError:
            raise ScriptNotFoundError(script_id) from None

    def add_script(self, name: str | None = None, content: str = "") -> Script:
        """Create a script and make it the active one."""
        script = Script.create(name=name or f"script-{next(self._names)}.sh", content=content)
        self._entries[script.id] = ScriptEntry(script=script)
        self.active_id = script.id
        return script

    def remove_script(self, script_id: str) -> None:
        """Delete a script together with its result, loading flag and chat."""
        self.get(script_id)
        del self._entries[script_id]
        if self.active_id == script_id:
            self._live.cancel()
            self.active_id = next(iter(self._entries), None)

    def set_active(self, script_id: str) -> None:
        self.get(script_id)
        if script_id != self.active_id:
            self._live.cancel()
        self.active_id = script_id

    def set_content(self, script_id: str, content: str) -> None:
        """Replace a script's text; reschedules live analysis for the active script."""
        entry = self.get(script_id)
        entry.script.content = content
        if self.live_analysis and script_id == self.active_id:
            self._live(script_id)

    def rename(self, script_id: str, name: str) -> None:
        self.get(script_id).script.name = name

    # ── Analysis ─────────────────────────────────────────────────────

    async def analyze(self, script_id: str) -> ScriptEntry:
        """Analyze one script and store the outcome in its entry.

        The previous result and errors are cleared first, so a failed analysis
        leaves no result and an error, never a stale result.

        Raises:
            InputValidationError: If the script is blank; the model is not called.
        """
        entry = self.get(script_id)
        if not entry.script.content.strip():
            entry.error = EMPTY_SCRIPT_ERROR
            self.error = EMPTY_SCRIPT_ERROR
            raise InputValidationError(EMPTY_SCRIPT_ERROR)

        entry.loading = True
        entry.result = None
        entry.error = None
        self.error = None
        logger.info("Analyzing %s (%d chars)", entry.script.name, len(entry.script.content))
        try:
            entry.result = await self.client.analyze(entry.script.content)
        except AIClientError as e:
            message = f"Analysis failed for {entry.script.name}: {e}"
            logger.error("%s", message)
            entry.error = message
            if script_id in self._entries:
                self.error = message
        finally:
            entry.loading = False
        return entry

    async def analyze_all(self) -> list[ScriptEntry]:
        """Analyze every non-blank script concurrently."""
        ids = [sid for sid, e in self._entries.items() if e.script.content.strip()]
        return list(await asyncio.gather(*(self.analyze(sid) for sid in ids)))

    def set_live_analysis(self, enabled: bool) -> None:
        """Toggle live mode. Disabling drops a pending run but not one in flight."""
        self.live_analysis = enabled
        if not enabled:
            self._live.cancel()

    @property
    def live_pending(self) -> bool:
        return self._live.pending

    async def _live_analyze(self, script_id: str) -> None:
        entry = self._entries.get(script_id)
        if entry is not None and entry.script.content.strip():
            await self.analyze(script_id)

    # ── Refactoring ──────────────────────────────────────────────────

    async def refactor(self, script_id: str, suggestion: str) -> Optional[RefactorResult]:
        entry = self.get(script_id)
        try:
            return await self.client.refactor(entry.script.content, suggestion)
        except AIClientError as e:
            self._refactor_failed(entry, e)
            return None

    async def refactor_all(self, script_id: str, suggestions: list[str]) -> Optional[list[RefactorResult]]:
        entry = self.get(script_id)
        try:
            return await self.client.refactor_all(entry.script.content, suggestions)
        except AIClientError as e:
            self._refactor_failed(entry, e)
            return None

    def apply_fix(self, script_id: str, original: str, refactored: str) -> str:
        entry = self.get(script_id)
        self.set_content(script_id, apply_fix(entry.script.content, original, refactored))
        return entry.script.content

    def apply_all_fixes(self, script_id: str, fixes: list[RefactorResult]) -> str:
        entry = self.get(script_id)
        self.set_content(script_id, apply_all_fixes(entry.script.content, fixes))
        return entry.script.content

    def _refactor_failed(self, entry: ScriptEntry, exc: Exception) -> None:
        message = f"Refactor failed for {entry.script.name}: {exc}"
        logger.error("%s", message)
        entry.error = message
        self.error = message

    # ── Chat ─────────────────────────────────────────────────────────

    async def ask(self, script_id: str, question: str) -> list[ChatMessage]:
        """Ask a question about a script and append both sides to its chat."""
        entry = self.get(script_id)
        if not question.strip():
            return entry.chat
        entry.chat.append(ChatMessage(role="user", content=question))
        try:
            answer = await self.client.ask(entry.script.content, question)
        except AIClientError as e:
            logger.error("Question about %s failed: %s", entry.script.name, e)
            answer = f"Sorry, I encountered an error: {e}"
        entry.chat.append(ChatMessage(role="assistant", content=answer))
        return entry.chat

    def close(self) -> None:
        """Drop any scheduled live analysis."""
        self.live_analysis = False
        self._live.cancel()
