"""Prompt templates and the JSON shapes they request."""

import json

MERMAID_RULES = (
    "The mermaidFlowchart must be valid Mermaid 'graph TD' syntax. Wrap EVERY node "
    'label in double quotes, e.g. A["Load config"]. If a label itself contains a '
    "double quote, write it as the entity &quot; instead. Do not use unquoted labels."
)

ANALYSIS_SCHEMA = {
    "summary": "string: a one-paragraph summary of the script's purpose and main functionality",
    "strengths": ["string: a positive aspect such as error handling, modularity or clear structure"],
    "weaknesses": ["string: a potential issue, risk or bug"],
    "suggestions": ["string: a specific, actionable improvement"],
    "commandBreakdown": [
        {
            "part": "string: a flag or argument of the main command the script builds (e.g. '-c:v libx264')",
            "explanation": "string: what this part does",
        }
    ],
    "securityAudit": [
        {"vulnerability": "string: the weakness found", "recommendation": "string: how to fix it"}
    ],
    "performanceProfile": [
        {"issue": "string: a bottleneck or wasteful construct", "suggestion": "string: a faster alternative"}
    ],
    "portabilityAnalysis": {
        "score": "integer 1-10: 10 means fully portable POSIX sh",
        "summary": "string: overall portability assessment",
        "issues": ["string: a bashism, GNU-only flag or platform assumption"],
    },
    "testSuite": {
        "framework": "string: the test framework used, preferably bats",
        "content": "string: the full test file",
    },
    "translations": {
        "python": "string: an equivalent Python 3 script",
        "powershell": "string: an equivalent PowerShell script",
    },
    "mermaidFlowchart": "string: a Mermaid flowchart of the script's control flow",
    "githubRepo": {
        "readmeContent": "string: a README.md in Markdown with title, description, features and usage",
        "gitignoreContent": "string: a .gitignore suitable for a shell script project",
        "fileStructure": "string: a text tree of the suggested directory layout",
        "dockerfileContent": "string: a Dockerfile that runs the script",
        "manPageContent": "string: a man page for the script in roff format",
        "pullRequestTitle": "string: a title for a pull request applying the suggestions",
        "pullRequestBody": "string: a Markdown body for that pull request",
    },
}

REFACTOR_SCHEMA = {
    "originalCode": "string: the exact snippet from the script, copied verbatim",
    "refactoredCode": "string: the replacement snippet",
    "explanation": "string: what changed and why",
}

REFACTOR_ALL_SCHEMA = [dict(REFACTOR_SCHEMA, suggestion="string: the suggestion this entry answers, copied verbatim")]


def _fenced(script: str) -> str:
    return f"SCRIPT:\n```bash\n{script}\n```"


def _schema_block(schema) -> str:
    return (
        "IMPORTANT: Your entire response MUST be a single JSON document matching this shape:\n"
        + json.dumps(schema, indent=2)
    )


def analysis_prompt(script: str) -> str:
    return "\n\n".join([
        "Analyze the following shell script. Describe its functionality, strengths, "
        "weaknesses and suggestions for improvement. Break down the main command it "
        "builds. Audit it for security vulnerabilities, profile its performance and "
        "assess its portability. Generate a test suite, translate it to Python and "
        "PowerShell, draw its control flow as a Mermaid flowchart, and suggest the "
        "files of a GitHub repository that publishes it.",
        MERMAID_RULES,
        _schema_block(ANALYSIS_SCHEMA),
        _fenced(script),
    ])


def refactor_prompt(script: str, suggestion: str) -> str:
    return "\n\n".join([
        "Find the part of the following shell script that the improvement suggestion "
        "applies to and rewrite it. originalCode must appear in the script exactly as "
        "written, character for character, so it can be replaced automatically.",
        f"SUGGESTION: {suggestion}",
        _schema_block(REFACTOR_SCHEMA),
        _fenced(script),
    ])


def refactor_all_prompt(script: str, suggestions: list[str]) -> str:
    numbered = "\n".join(f"{i}. {s}" for i, s in enumerate(suggestions, start=1))
    return "\n\n".join([
        "For each improvement suggestion below, find the part of the following shell "
        "script it applies to and rewrite it. Return a JSON array with exactly one "
        "entry per suggestion, in the same order. Each originalCode must appear in the "
        "script exactly as written. Later entries may build on the code produced by "
        "earlier ones.",
        f"SUGGESTIONS:\n{numbered}",
        _schema_block(REFACTOR_ALL_SCHEMA),
        _fenced(script),
    ])


def question_prompt(script: str, question: str) -> str:
    return "\n\n".join([
        "You are an expert in shell scripting. Answer the question about the following "
        "script concisely. Use Markdown where it helps.",
        _fenced(script),
        f"QUESTION: {question}",
    ])
