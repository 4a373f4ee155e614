"""Google Gemini backend.

Uses the google-generativeai SDK. The API key is configured once per process
when the backend is constructed.
"""

import logging
import time

import google.generativeai as genai

from ..provider import ModelBackend

logger = logging.getLogger(__name__)


class GeminiBackend(ModelBackend):
    """Backend for Gemini models."""

    name = "gemini"

    def __init__(self, api_key: str, model: str, timeout: float):
        genai.configure(api_key=api_key)
        self.model = model
        self.timeout = timeout
        self._model = genai.GenerativeModel(model)

    async def generate(self, prompt: str, *, json_output: bool = False) -> str:
        generation_config = {}
        if json_output:
            generation_config["response_mime_type"] = "application/json"

        logger.info(
            "Gemini request: model=%s json=%s prompt_chars=%d",
            self.model, json_output, len(prompt),
        )
        started_at = time.perf_counter()
        response = await self._model.generate_content_async(
            prompt,
            generation_config=generation_config or None,
            request_options={"timeout": self.timeout},
        )
        feedback = getattr(response, "prompt_feedback", None)
        if feedback and getattr(feedback, "block_reason", None):
            raise RuntimeError(f"Gemini blocked the request: {feedback.block_reason}")
        text = _response_text(response)
        logger.info(
            "Gemini response in %.1fs, response_chars=%d",
            time.perf_counter() - started_at, len(text),
        )
        return text


def _response_text(response) -> str:
    """Collect the text of the first candidate.

    ``response.text`` raises ValueError when the candidate was blocked or has
    no text parts; fall back to walking the parts so the caller gets an empty
    string instead.
    """
    try:
        return response.text or ""
    except ValueError:
        pass
    chunks = []
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            text = getattr(part, "text", None)
            if text:
                chunks.append(text)
        if chunks:
            break
    return "".join(chunks)
