"""Core data models for script-analyzer."""

import uuid
from dataclasses import dataclass, field, fields
from typing import Optional

from .contracts import AnalysisResult


@dataclass
class Script:
    """A shell script open in the workspace."""

    id: str
    name: str  # e.g. "script-1.sh"
    content: str = ""

    @classmethod
    def create(cls, name: str, content: str = "") -> "Script":
        return cls(id=uuid.uuid4().hex, name=name, content=content)


@dataclass
class ChatMessage:
    """A single question or answer in a script's chat."""

    role: str  # "user" | "assistant"
    content: str


@dataclass
class ScriptEntry:
    """Everything the workspace tracks for one script.

    Result, loading flag, error and chat live here rather than in parallel
    maps so that deleting the entry deletes all of them.
    """

    script: Script
    result: Optional[AnalysisResult] = None
    loading: bool = False
    error: Optional[str] = None
    chat: list[ChatMessage] = field(default_factory=list)


@dataclass
class ExportSections:
    """Which analysis sections end up in an exported report."""

    summary: bool = True
    strengths: bool = True
    weaknesses: bool = True
    suggestions: bool = True
    security: bool = True
    performance: bool = True
    portability: bool = True
    command_breakdown: bool = True
    logic_visualization: bool = True
    test_suite: bool = True
    translations: bool = True
    github: bool = True

    @classmethod
    def names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def only(cls, names: list[str]) -> "ExportSections":
        """Enable exactly the given sections; unknown names raise ValueError."""
        known = cls.names()
        unknown = [n for n in names if n not in known]
        if unknown:
            raise ValueError(f"Unknown export sections: {', '.join(unknown)}")
        return cls(**{n: n in names for n in known})
