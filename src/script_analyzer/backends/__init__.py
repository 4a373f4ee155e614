"""Model backends and the factory that wires one into a client."""

import logging

from ..client import ScriptAnalyzerClient
from ..config import get_api_key, get_model_name, get_request_timeout
from .gemini import GeminiBackend

logger = logging.getLogger(__name__)


def create_client(api_key: str | None = None) -> ScriptAnalyzerClient:
    """Build the process-wide client from configuration.

    Raises:
        MissingCredentialError: If no API key is given or configured.
    """
    if api_key is None:
        api_key = get_api_key()
    backend = GeminiBackend(api_key=api_key, model=get_model_name(), timeout=get_request_timeout())
    logger.info("Created %s client for model %s", backend.name, backend.model)
    return ScriptAnalyzerClient(backend)
