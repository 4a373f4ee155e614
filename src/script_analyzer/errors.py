"""Exception hierarchy for script-analyzer."""


class ScriptAnalyzerError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(ScriptAnalyzerError):
    """The process environment is not usable."""


class MissingCredentialError(ConfigurationError):
    """No API key was configured."""


class InputValidationError(ScriptAnalyzerError):
    """A request was rejected before any network call was made."""


class ScriptNotFoundError(ScriptAnalyzerError, KeyError):
    """No script with the given id exists in the workspace."""

    def __init__(self, script_id: str):
        super().__init__(script_id)
        self.script_id = script_id

    def __str__(self) -> str:
        return f"Script not found: {self.script_id}"


class AIClientError(ScriptAnalyzerError):
    """A call to the model failed or returned something unusable."""


class TransportError(AIClientError):
    """The model backend raised (network failure, quota, timeout...)."""


class MalformedResponseError(AIClientError):
    """The model reply could not be decoded into the expected JSON shape."""


class IncompleteResponseError(AIClientError):
    """The model reply decoded but lacks required fields."""
