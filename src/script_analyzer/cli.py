"""CLI entry point for script-analyzer."""

import asyncio
from pathlib import Path

import click
import uvicorn
from dotenv import load_dotenv

from .backends import create_client
from .core import Script
from .errors import AIClientError, ConfigurationError
from .export import analysis_to_html, analysis_to_json


@click.group()
def main():
    """Analyze shell scripts with Gemini from your browser."""
    load_dotenv()


@main.command()
@click.option("--port", default=8080, help="Port to serve on.")
@click.option("--host", default="127.0.0.1", help="Host to bind to.")
@click.option("--log-level", default="info", help="Uvicorn log level.")
def serve(port: int, host: str, log_level: str):
    """Start the web interface."""
    # Fail before binding the port rather than on the first request.
    try:
        create_client()
    except ConfigurationError as e:
        raise click.ClickException(str(e))
    click.echo(f"Starting script-analyzer on http://{host}:{port}")
    uvicorn.run("script_analyzer.server:app", host=host, port=port, reload=False, log_level=log_level)


@main.command()
@click.argument("script_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path),
              help="Write the report here instead of stdout.")
@click.option("--format", "fmt", type=click.Choice(["html", "json"]), default="html", show_default=True)
def analyze(script_file: Path, output: Path | None, fmt: str):
    """Analyze SCRIPT_FILE once and print or save the report."""
    content = script_file.read_text(encoding="utf-8")
    if not content.strip():
        raise click.ClickException("Script content cannot be empty.")
    try:
        client = create_client()
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    try:
        result = asyncio.run(client.analyze(content))
    except AIClientError as e:
        raise click.ClickException(f"Analysis failed: {e}")

    script = Script.create(name=script_file.name, content=content)
    report = analysis_to_json(script, result) if fmt == "json" else analysis_to_html(script, result)
    if output:
        output.write_text(report, encoding="utf-8")
        click.echo(f"Wrote {output}")
    else:
        click.echo(report)
