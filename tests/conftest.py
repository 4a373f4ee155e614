"""Shared test fixtures for script-analyzer."""

import asyncio
import copy
import json

import pytest

from script_analyzer.client import ScriptAnalyzerClient
from script_analyzer.contracts import AnalysisResult
from script_analyzer.provider import ModelBackend

SAMPLE_SCRIPT = """#!/bin/bash
set -e
for f in *.mp4; do
  ffmpeg -i $f -c:v libx264 -crf 23 "out/$f"
done
"""

SAMPLE_ANALYSIS = {
    "summary": "Transcodes every MP4 in the current directory.\\n\\nOutputs go to out/.",
    "strengths": ["Uses set -e to stop on errors"],
    "weaknesses": ["Unquoted $f breaks on file names with spaces"],
    "suggestions": ["Quote the $f variable", "Check that ffmpeg is installed"],
    "commandBreakdown": [
        {"part": "-c:v libx264", "explanation": "Encode video with x264"},
        {"part": "-crf 23", "explanation": "Constant quality factor"},
    ],
    "securityAudit": [
        {"vulnerability": "Word splitting on $f", "recommendation": "Use \"$f\""},
    ],
    "performanceProfile": [
        {"issue": "Files are encoded one at a time", "suggestion": "Use xargs -P"},
    ],
    "portabilityAnalysis": {
        "score": 7,
        "summary": "Runs anywhere bash and ffmpeg exist.",
        "issues": ["Requires bash for the shebang"],
    },
    "testSuite": {
        "framework": "bats",
        "content": "\\n@test \"creates output\" {\\n  run ./transcode.sh\\n  [ \"$status\" -eq 0 ]\\n}\\n  ",
    },
    "translations": {
        "python": "import subprocess\\nimport glob\\n",
        "powershell": "Get-ChildItem *.mp4 | ForEach-Object { ffmpeg -i $_ out/$_ }",
    },
    "mermaidFlowchart": "graph TD\\n  A[\"Start\"] --> B[\"Loop over &quot;*.mp4&quot;\"]",
    "githubRepo": {
        "readmeContent": "# Transcoder\\n\\nBatch transcode MP4 files.",
        "gitignoreContent": "out/\\n*.log\\n",
        "fileStructure": ".\\n├── transcode.sh\\n└── README.md",
        "dockerfileContent": "FROM alpine\\nRUN apk add ffmpeg bash\\n",
        "manPageContent": ".TH TRANSCODE 1\\n.SH NAME\\ntranscode",
        "pullRequestTitle": "Quote variables and check dependencies",
        "pullRequestBody": "- Quote $f\\n- Check ffmpeg",
    },
}


class FakeBackend(ModelBackend):
    """In-memory backend returning canned replies.

    ``reply`` is either a string, an exception instance (raised), or a
    callable ``(prompt) -> str | Exception`` that may be async.
    """

    name = "fake"

    def __init__(self, reply=""):
        self.reply = reply
        self.calls: list[tuple[str, bool]] = []

    async def generate(self, prompt: str, *, json_output: bool = False) -> str:
        self.calls.append((prompt, json_output))
        reply = self.reply
        if callable(reply):
            reply = reply(prompt)
            if asyncio.iscoroutine(reply):
                reply = await reply
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def analysis_data():
    return copy.deepcopy(SAMPLE_ANALYSIS)


@pytest.fixture
def analysis_json(analysis_data):
    return json.dumps(analysis_data)


@pytest.fixture
def analysis_result(analysis_data):
    return AnalysisResult.model_validate(analysis_data)


@pytest.fixture
def fake_backend(analysis_json):
    return FakeBackend(analysis_json)


@pytest.fixture
def client(fake_backend):
    return ScriptAnalyzerClient(fake_backend)
