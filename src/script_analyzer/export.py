"""Export a script's analysis to HTML and JSON formats."""

import json
from datetime import datetime, timezone
from html import escape

from .contracts import AnalysisResult
from .core import ExportSections, Script

_STYLE = """
body { font-family: -apple-system, "Segoe UI", Helvetica, Arial, sans-serif; max-width: 960px;
       margin: 2rem auto; padding: 0 1rem; color: #1f2328; line-height: 1.5; }
h1 { border-bottom: 1px solid #d0d7de; padding-bottom: .3rem; }
h2 { margin-top: 2rem; color: #4338ca; }
pre { background: #f6f8fa; border: 1px solid #d0d7de; border-radius: 6px; padding: 1rem;
      overflow-x: auto; white-space: pre; }
table { border-collapse: collapse; width: 100%; }
th, td { border: 1px solid #d0d7de; padding: .4rem .6rem; text-align: left; vertical-align: top; }
th { background: #f6f8fa; }
.score { font-size: 1.4rem; font-weight: bold; }
footer { margin-top: 3rem; color: #656d76; font-size: .85rem; }
"""


def analysis_to_html(script: Script, result: AnalysisResult, sections: ExportSections | None = None) -> str:
    """Render the selected sections of an analysis as a standalone HTML page."""
    sections = sections or ExportSections()
    title = f"Analysis of {script.name}"
    parts = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '<meta charset="utf-8">',
        f"<title>{escape(title)}</title>",
        f"<style>{_STYLE}</style>",
        "</head>",
        "<body>",
        f"<h1>{escape(title)}</h1>",
    ]

    if sections.summary:
        parts += _section("Summary", _paragraphs(result.summary))
    if sections.strengths:
        parts += _section("Strengths", _list(result.strengths))
    if sections.weaknesses:
        parts += _section("Weaknesses &amp; Risks", _list(result.weaknesses))
    if sections.suggestions:
        parts += _section("Improvement Suggestions", _list(result.suggestions))
    if sections.security:
        rows = [(f.vulnerability, f.recommendation) for f in result.security_audit]
        parts += _section("Security Audit", _table(("Vulnerability", "Recommendation"), rows))
    if sections.performance:
        rows = [(f.issue, f.suggestion) for f in result.performance_profile]
        parts += _section("Performance Profile", _table(("Issue", "Suggestion"), rows))
    if sections.portability:
        p = result.portability_analysis
        body = [f'<p class="score">Score: {p.score}/10</p>', _paragraphs(p.summary), _list(p.issues)]
        parts += _section("Portability Analysis", "\n".join(body))
    if sections.command_breakdown:
        rows = [(c.part, c.explanation) for c in result.command_breakdown]
        parts += _section("Command Breakdown", _table(("Part", "Explanation"), rows, code_first=True))
    if sections.logic_visualization:
        parts += _section("Logic Visualization", f'<pre class="mermaid">{escape(result.mermaid_flowchart)}</pre>')
    if sections.test_suite:
        suite = result.test_suite
        parts += _section(f"Generated Test Suite ({escape(suite.framework)})", _code(suite.content))
    if sections.translations:
        body = ["<h3>Python</h3>", _code(result.translations.python),
                "<h3>PowerShell</h3>", _code(result.translations.powershell)]
        parts += _section("Translations", "\n".join(body))
    if sections.github:
        repo = result.github_repo
        body = [
            "<h3>File Structure</h3>", _code(repo.file_structure),
            "<h3>README.md</h3>", _code(repo.readme_content),
            "<h3>.gitignore</h3>", _code(repo.gitignore_content),
            "<h3>Dockerfile</h3>", _code(repo.dockerfile_content),
            "<h3>Man Page</h3>", _code(repo.man_page_content),
            f"<h3>Pull Request: {escape(repo.pull_request_title)}</h3>", _code(repo.pull_request_body),
        ]
        parts += _section("GitHub Assets", "\n".join(body))

    exported = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    parts += [f"<footer>Exported {exported} by script-analyzer</footer>", "</body>", "</html>"]
    return "\n".join(parts)


def analysis_to_json(script: Script, result: AnalysisResult) -> str:
    """Export the whole analysis as JSON with the wire (camelCase) field names."""
    data = {
        "script": {"id": script.id, "name": script.name, "content": script.content},
        "analysis": result.model_dump(by_alias=True),
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def _section(heading: str, body: str) -> list[str]:
    return ["<section>", f"<h2>{heading}</h2>", body, "</section>"]


def _paragraphs(text: str) -> str:
    return "\n".join(f"<p>{escape(p)}</p>" for p in text.split("\n\n") if p.strip())


def _list(items: list[str]) -> str:
    if not items:
        return "<p><em>None.</em></p>"
    return "<ul>\n" + "\n".join(f"<li>{escape(i)}</li>" for i in items) + "\n</ul>"


def _code(text: str) -> str:
    return f"<pre><code>{escape(text)}</code></pre>"


def _table(headers: tuple[str, str], rows: list[tuple[str, str]], code_first: bool = False) -> str:
    if not rows:
        return "<p><em>None.</em></p>"
    lines = ["<table>", "<tr>" + "".join(f"<th>{h}</th>" for h in headers) + "</tr>"]
    for first, second in rows:
        cell = f"<code>{escape(first)}</code>" if code_first else escape(first)
        lines.append(f"<tr><td>{cell}</td><td>{escape(second)}</td></tr>")
    lines.append("</table>")
    return "\n".join(lines)
