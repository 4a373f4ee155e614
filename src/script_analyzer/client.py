"""Typed client for script analysis, refactoring and Q&A."""

import json
import logging
import re

from pydantic import TypeAdapter, ValidationError

from . import prompts
from .contracts import AnalysisResult, RefactorResult, describe_validation_error
from .errors import IncompleteResponseError, MalformedResponseError, TransportError
from .provider import ModelBackend

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```[\w-]*\s*\n(.*)\n```$", re.DOTALL)

_REFACTOR_LIST = TypeAdapter(list[RefactorResult])


class ScriptAnalyzerClient:
    """Turns domain requests into prompts and model replies into contracts.

    Construct one per process and hand it to whatever needs it. Every method
    either returns a complete, validated value or raises an AIClientError.
    """

    def __init__(self, backend: ModelBackend):
        self.backend = backend

    async def analyze(self, script: str) -> AnalysisResult:
        data = await self._generate_json(prompts.analysis_prompt(script), "analysis")
        if not isinstance(data, dict):
            raise MalformedResponseError("Analysis response is not a JSON object")
        try:
            return AnalysisResult.model_validate(data)
        except ValidationError as e:
            raise IncompleteResponseError(
                f"API response is missing required fields: {describe_validation_error(e)}"
            ) from e

    async def refactor(self, script: str, suggestion: str) -> RefactorResult:
        data = await self._generate_json(prompts.refactor_prompt(script, suggestion), "refactor")
        if not isinstance(data, dict):
            raise MalformedResponseError("Refactor response is not a JSON object")
        try:
            result = RefactorResult.model_validate(data)
        except ValidationError as e:
            raise IncompleteResponseError(
                f"Refactor response is missing fields: {describe_validation_error(e)}"
            ) from e
        return result.model_copy(update={"suggestion": suggestion})

    async def refactor_all(self, script: str, suggestions: list[str]) -> list[RefactorResult]:
        """Refactor for every suggestion in one call.

        One bad element fails the whole batch; there is no safe default for a
        missing fix.
        """
        if not suggestions:
            return []
        data = await self._generate_json(
            prompts.refactor_all_prompt(script, suggestions), "refactor-all"
        )
        if not isinstance(data, list):
            raise MalformedResponseError("Refactor-all response is not a JSON array")
        try:
            results = _REFACTOR_LIST.validate_python(data)
        except ValidationError as e:
            raise IncompleteResponseError(
                f"Refactor-all response has entries with missing fields: {describe_validation_error(e)}"
            ) from e
        missing_label = [i for i, r in enumerate(results) if not r.suggestion]
        if missing_label:
            raise IncompleteResponseError(
                f"Refactor-all response has entries with missing fields: "
                f"{', '.join(f'{i}.suggestion' for i in missing_label)}"
            )
        if len(results) != len(suggestions):
            raise IncompleteResponseError(
                f"Expected {len(suggestions)} refactors, got {len(results)}"
            )
        # the model may paraphrase the label; tag each fix with the input it answers
        return [r.model_copy(update={"suggestion": s}) for r, s in zip(results, suggestions)]

    async def ask(self, script: str, question: str) -> str:
        text = await self._generate(prompts.question_prompt(script, question), "answer", json_output=False)
        return text.strip()

    # ── Private helpers ──────────────────────────────────────────────

    async def _generate(self, prompt: str, what: str, *, json_output: bool) -> str:
        try:
            return await self.backend.generate(prompt, json_output=json_output)
        except Exception as e:
            logger.error("Model call for %s failed: %s: %s", what, type(e).__name__, e)
            raise TransportError(f"Failed to get {what} from {self.backend.name} API: {e}") from e

    async def _generate_json(self, prompt: str, what: str):
        text = await self._generate(prompt, what, json_output=True)
        return parse_json_reply(text)


def parse_json_reply(text: str):
    """Decode a JSON reply, tolerating a surrounding markdown code fence."""
    stripped = (text or "").strip()
    if not stripped:
        raise MalformedResponseError("API returned an empty response")
    match = _FENCE_RE.match(stripped)
    if match:
        stripped = match.group(1).strip()
    try:
        return json.loads(stripped)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"API response is not valid JSON: {e}") from e
