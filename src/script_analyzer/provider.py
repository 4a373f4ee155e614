"""Abstract base class for text-generation backends."""

from abc import ABC, abstractmethod


class ModelBackend(ABC):
    """Base class for generative-AI backends.

    A backend turns a prompt into raw reply text. It knows nothing about the
    analysis schema; decoding and validation happen in the client.
    """

    name: str  # "gemini"

    @abstractmethod
    async def generate(self, prompt: str, *, json_output: bool = False) -> str:
        """Send a prompt and return the model's reply text.

        With ``json_output`` the backend asks the model for a JSON document.
        Any failure is raised as-is; the client maps it to a typed error.
        """
        ...
