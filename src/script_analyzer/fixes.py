"""Apply refactoring snippets to script text."""

from typing import Iterable

from .contracts import RefactorResult


def apply_fix(content: str, original: str, replacement: str) -> str:
    """Replace the first literal occurrence of ``original``.

    Returns ``content`` unchanged when ``original`` is empty or absent; there
    is no fuzzy matching.
    """
    if not original or original not in content:
        return content
    return content.replace(original, replacement, 1)


def apply_all_fixes(content: str, fixes: Iterable[RefactorResult]) -> str:
    """Apply fixes in order, each to the output of the previous one.

    A fix whose original snippet no longer matches is skipped.
    """
    for fix in fixes:
        content = apply_fix(content, fix.original_code, fix.refactored_code)
    return content
