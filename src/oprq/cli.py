"""CLI entry point for oprq."""

import logging
from dataclasses import dataclass
from pathlib import Path

import click

from oprq.config import LibraryVersion, ProjectConfig, get_config_path, load_config_or_default
from oprq.core.composer import DEFAULT_NAMESPACE, compose_entry
from oprq.core.naming import derive, derive_file_path
from oprq.generator.renderer import render_operation_file
from oprq.logging_config import configure_logging
from oprq.parser.base import Document, OperationEntry, OprqError
from oprq.parser.openapi import find_operation, list_operations, load_document

logger = logging.getLogger(__name__)

OVERWRITE_CHOICES = ("yes", "no", "all", "none")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class OverwriteState:
    """Per-run answer to "overwrite existing files?"; "all"/"none" stick for the rest of the run."""

    decision: str | None = None

    def should_write(self, file_path: Path) -> bool:
        if not file_path.exists() or self.decision == "all":
            return True
        if self.decision == "none":
            return False
        answer = click.prompt(
            f"{file_path} exists. Overwrite?",
            type=click.Choice(OVERWRITE_CHOICES),
            default="no",
        )
        if answer in ("all", "none"):
            self.decision = answer
        return answer in ("yes", "all")


def _resolve_source(source: str, config: ProjectConfig, spec_name: str | None) -> tuple[str, str]:
    """Map a registered spec name to its URL. Returns (location, namespace)."""
    if source in config.specs:
        return config.specs[source].url, spec_name or source
    return source, spec_name or DEFAULT_NAMESPACE


def _load_config(config_path: Path | None) -> ProjectConfig:
    try:
        return load_config_or_default(config_path or get_config_path())
    except OprqError as e:
        raise click.ClickException(str(e)) from e


def _load(location: str) -> Document:
    try:
        return load_document(location)
    except OprqError as e:
        raise click.ClickException(str(e)) from e


def _parse_endpoint(value: str) -> tuple[str, str]:
    parts = value.split(None, 1)
    if len(parts) != 2 or not parts[1].startswith("/"):
        raise click.BadParameter(f"expected 'METHOD /path', got {value!r}", param_hint="--endpoint")
    return parts[0].lower(), parts[1].strip()


def _select_entries(document: Document, endpoints: tuple[str, ...], select_all: bool) -> list[OperationEntry]:
    if select_all:
        return list_operations(document)
    entries = []
    for value in endpoints:
        method, path = _parse_endpoint(value)
        try:
            entries.append(find_operation(document, method, path))
        except OprqError as e:
            raise click.ClickException(str(e)) from e
    return entries


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level.",
)
def main(log_level: str):
    """oprq: generate React Query API modules from OpenAPI documents."""
    configure_logging(log_level)


@main.command()
@click.argument("source")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None, help="Path to oprq.config.json.")
def operations(source: str, config_path: Path | None):
    """List the operations of an OpenAPI document (file, URL or registered spec name)."""
    config = _load_config(config_path)
    location, _ = _resolve_source(source, config, None)
    document = _load(location)

    entries = list_operations(document)
    for entry in entries:
        name = derive(entry.method, entry.path, entry.operation.operation_id).raw
        click.echo(f"[{entry.method.upper()}] {entry.path}  {name}")
    click.echo(f"Total: {len(entries)} operations")


@main.command()
@click.argument("source")
@click.option("-o", "--output", type=click.Path(path_type=Path), default=None, help="Output directory (defaults to outputPath from the config).")
@click.option("-e", "--endpoint", "endpoints", multiple=True, help="Operation to generate, as 'METHOD /path'. Repeatable.")
@click.option("-a", "--all", "select_all", is_flag=True, help="Generate every operation in the document.")
@click.option("-s", "--spec-name", default=None, help="Namespace used in API_URL and query keys.")
@click.option("--version", "library_version", type=click.Choice([v.value for v in LibraryVersion]), default=None, help="React Query major version.")
@click.option("--query-hook/--no-query-hook", default=None)
@click.option("--mutation-hook/--no-mutation-hook", default=None)
@click.option("--suspense-hook/--no-suspense-hook", default=None)
@click.option("--infinite-query-hook/--no-infinite-query-hook", default=None)
@click.option("--overwrite", is_flag=True, help="Overwrite existing files without asking.")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None, help="Path to oprq.config.json.")
def generate(
    source: str,
    output: Path | None,
    endpoints: tuple[str, ...],
    select_all: bool,
    spec_name: str | None,
    library_version: str | None,
    query_hook: bool | None,
    mutation_hook: bool | None,
    suspense_hook: bool | None,
    infinite_query_hook: bool | None,
    overwrite: bool,
    config_path: Path | None,
):
    """Generate one TypeScript module per selected operation."""
    config = _load_config(config_path)

    output = output or (Path(config.output_path) if config.output_path else None)
    if output is None:
        raise click.UsageError("No output directory: pass -o/--output or set outputPath in the config.")
    if not endpoints and not select_all:
        raise click.UsageError("Select operations with --endpoint or --all.")

    generation_config = config.generation_config(
        library_version=library_version,
        query_hook=query_hook,
        mutation_hook=mutation_hook,
        suspense_hook=suspense_hook,
        infinite_query_hook=infinite_query_hook,
    )

    location, namespace = _resolve_source(source, config, spec_name)
    click.echo(f"Loading {location}...")
    document = _load(location)
    entries = _select_entries(document, endpoints, select_all)
    click.echo(f"Selected {len(entries)} operations (React Query {generation_config.library_version.value}).")

    state = OverwriteState(decision="all" if overwrite else None)
    generated, skipped, failed = [], [], []
    for entry in entries:
        file_path = output / namespace / derive_file_path(entry.method, entry.path)
        if not state.should_write(file_path):
            skipped.append(file_path)
            continue
        try:
            artifact = compose_entry(entry, document, generation_config, namespace)
            content = render_operation_file(artifact)
        except OprqError as e:
            logger.debug("Generation failed for %s %s", entry.method, entry.path, exc_info=True)
            click.echo(f"  Failed to generate {file_path}: {e}", err=True)
            failed.append(file_path)
            continue
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        click.echo(f"  Created {file_path}")
        generated.append(file_path)

    click.echo(f"Generated: {len(generated)} files")
    if skipped:
        click.echo(f"Skipped: {len(skipped)} files")
    if failed:
        raise click.ClickException(f"{len(failed)} operations failed")
