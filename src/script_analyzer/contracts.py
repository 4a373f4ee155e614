"""Pydantic contracts for the structured replies of the model.

Field names are snake_case in Python and camelCase on the wire, matching the
JSON schema the prompts ask for. Every model is frozen: a result is replaced
wholesale on re-analysis, never patched.
"""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel


def unescape_newlines(text: str) -> str:
    """Turn literal ``\\n`` sequences into real newlines.

    The model sometimes double-escapes newlines inside JSON strings, so code
    and markdown arrive as one long line. This also rewrites a ``\\n`` the
    model meant literally; there is no way to tell the two apart.
    """
    return text.replace("\\n", "\n")


def _clean_code(text: str) -> str:
    return unescape_newlines(text).strip()


MultilineStr = Annotated[str, AfterValidator(unescape_newlines)]
CodeStr = Annotated[str, AfterValidator(_clean_code)]


class _Contract(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class CommandPart(_Contract):
    """One flag or argument of the main command the script builds."""

    part: str
    explanation: MultilineStr


class SecurityFinding(_Contract):
    vulnerability: MultilineStr
    recommendation: MultilineStr


class PerformanceFinding(_Contract):
    issue: MultilineStr
    suggestion: MultilineStr


class PortabilityAnalysis(_Contract):
    score: int = Field(..., ge=1, le=10, description="1 = tied to one platform, 10 = fully POSIX")
    summary: MultilineStr
    issues: list[str]


class TestSuite(_Contract):
    __test__ = False  # not a pytest class

    framework: str  # e.g. "bats"
    content: CodeStr


class Translations(_Contract):
    python: CodeStr
    powershell: CodeStr


class GithubRepo(_Contract):
    """Files suggested for publishing the script as a repository."""

    readme_content: MultilineStr
    gitignore_content: CodeStr
    file_structure: MultilineStr
    dockerfile_content: CodeStr
    man_page_content: MultilineStr
    pull_request_title: str
    pull_request_body: MultilineStr


class AnalysisResult(_Contract):
    """Complete analysis of one script."""

    summary: MultilineStr
    strengths: list[str]
    weaknesses: list[str]
    suggestions: list[str]
    command_breakdown: list[CommandPart]
    security_audit: list[SecurityFinding]
    performance_profile: list[PerformanceFinding]
    portability_analysis: PortabilityAnalysis
    test_suite: TestSuite
    translations: Translations
    mermaid_flowchart: CodeStr
    github_repo: GithubRepo


class RefactorResult(_Contract):
    """A code replacement answering a single improvement suggestion."""

    original_code: CodeStr
    refactored_code: CodeStr
    explanation: MultilineStr
    suggestion: str | None = None


def describe_validation_error(exc: ValidationError) -> str:
    """Summarize a pydantic error as a comma-separated list of field paths."""
    paths = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"]) or "<root>"
        if path not in paths:
            paths.append(path)
    return ", ".join(paths)
