import signal
import sys

# Handle Ctrl+C gracefully before any other imports
signal.signal(signal.SIGINT, lambda *_: sys.exit(130))

import logging
from typing import List, Optional

import click
import typer

from .config import load_config
from .context import CancelContext
from .document import ErrorValue
from .handler import HookError, SearchIndexHandler
from .levels import Level, enabled_levels, normalize_level, to_levelno
from .opensearch.client import (
	get_opensearch_client,
	check_connection,
	OpenSearchError,
)
from .opensearch.indexing import ensure_index, static_index
from .opensearch.mappings import log_index_template

app = typer.Typer()


def _fail(message):
	typer.echo(typer.style(f"Error: {message}", fg=typer.colors.RED), err=True)
	raise typer.Exit(1)


def _parse_level(value: str) -> Level:
	level = normalize_level(value)
	if level is None:
		_fail(f"Unknown level '{value}'")
	return level


def _parse_fields(pairs: List[str]):
	fields = {}
	for pair in pairs or []:
		key, sep, value = pair.partition("=")
		key = key.strip()
		if not sep or not key:
			_fail(f"Field '{pair}' must look like key=value")
		fields[key] = value
	return fields


def require_opensearch():
	"""Get client and verify OpenSearch is accessible."""
	cfg = load_config()
	client = get_opensearch_client(cfg)
	try:
		check_connection(client, cfg)
	except OpenSearchError as e:
		_fail(e)
	return client, cfg


@app.command()
def init():
	"""Create the index template and the configured index (idempotent)."""
	client, cfg = require_opensearch()
	ctx = CancelContext()
	client.indices.put_index_template(
		name=f"{cfg.index}-template",
		body=log_index_template(f"{cfg.index}*"),
		ctx=ctx,
	)
	try:
		created = ensure_index(client, static_index(cfg.index), ctx)
	except (HookError, OpenSearchError) as e:
		_fail(e)
	if created is not None:
		typer.echo(f"Created index '{cfg.index}'.")
	typer.echo("Index and template initialized.")


@app.command()
def send(
	message: str = typer.Argument(..., help="Log message"),
	level: str = typer.Option("info", "--level", "-l"),
	field: List[str] = typer.Option(None, "--field", "-f", help="Structured field as key=value, repeatable"),
	error: Optional[str] = typer.Option(None, "--error", help="Error text stored in the 'error' field"),
	index: Optional[str] = typer.Option(None, "--index", help="Override the configured index"),
):
	"""Send one log record synchronously and report the result."""
	severity = _parse_level(level)
	fields = _parse_fields(field)
	if error:
		fields["error"] = ErrorValue(error)
	client, cfg = require_opensearch()
	target = index or cfg.index
	try:
		handler = SearchIndexHandler(client, cfg.source_host, level=Level.DEBUG, index=target)
	except (HookError, OpenSearchError) as e:
		_fail(e)
	record = logging.LogRecord("loghook.cli", to_levelno(severity), __file__, 0, message, None, None)
	record.fields = fields
	try:
		handler.fire(record)
	except Exception as e:
		_fail(f"{type(e).__name__}: {e}")
	finally:
		handler.close()
	typer.echo(f"Sent {severity.label} record to '{target}'.")


@app.command()
def levels(
	level: str = typer.Option(None, "--level", "-l", help="Minimum severity (defaults to LOGHOOK_LEVEL)"),
):
	"""Show which severities a handler with the given threshold ships."""
	threshold = _parse_level(level or load_config().level)
	for enabled in sorted(enabled_levels(threshold)):
		typer.echo(enabled.label)


def main():
	if len(sys.argv) == 1:
		# No arguments: show help
		command = typer.main.get_command(app)
		ctx = click.Context(command)
		typer.echo(command.get_help(ctx), err=True)
		return 0
	try:
		app()
	except typer.Exit:
		raise
	except Exception as e:
		typer.echo(typer.style(
			f"Fatal error: {type(e).__name__}: {e}",
			fg=typer.colors.RED
		), err=True)
		sys.exit(1)

if __name__ == "__main__":
	main()
