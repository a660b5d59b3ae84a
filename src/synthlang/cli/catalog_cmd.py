"""Catalog CLI commands: validate and show."""

import json
from pathlib import Path

import click

from synthlang.catalog import (
    DEFAULT_CHORDS_PATH,
    CatalogError,
    describe_catalog,
    load_catalog,
    validate_catalog_file,
)
from synthlang.config import InterpreterConfig


def _catalog_path(path: Path | None) -> Path:
    if path is not None:
        return path
    config = click.get_current_context().find_object(InterpreterConfig)
    if config is None:
        config = InterpreterConfig.from_env()
    return config.catalog_path


@click.group()
def catalog():
    """Schema catalog commands."""
    pass


@catalog.command()
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat warnings as errors.",
)
@click.option(
    "--path",
    "target_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Validate this catalog file instead of the configured one.",
)
@click.option(
    "--chords",
    "chords_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Chord table to validate and load with the catalog.",
)
def validate(strict: bool, target_path: Path | None, chords_path: Path | None):
    """Validate a catalog YAML file against its JSON Schema."""
    catalog_path = _catalog_path(target_path)
    chords_path = chords_path or DEFAULT_CHORDS_PATH

    # ── Schema (JSON Schema) validation ─────────────────────────────────────
    issues = validate_catalog_file(catalog_path, chords_path, strict=strict)
    errors = [i for i in issues if i.severity == "error"]
    warnings = [i for i in issues if i.severity == "warning"]

    for issue in issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    if errors:
        click.echo(
            click.style(
                f"\n{len(errors)} schema error(s) found"
                + (f", {len(warnings)} warning(s)" if warnings else ""),
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    if warnings:
        click.echo(click.style(f"{len(warnings)} warning(s) found.", fg="yellow"))

    # ── Semantic (loader) validation ─────────────────────────────────────────
    try:
        loaded = load_catalog(catalog_path, chords_path)
    except CatalogError as e:
        click.echo(click.style(f"\nSemantic validation failed: {e}", fg="red"), err=True)
        raise SystemExit(1)

    click.echo(f"\nLoaded {len(loaded.components)} component kinds:")
    for kind in sorted(loaded.components):
        schema = loaded.components[kind]
        click.echo(f"  ✓ {kind} ({schema.role.value}, {len(schema.attributes)} attributes)")
    click.echo(f"Loaded {len(loaded.triggers)} trigger kinds: {', '.join(sorted(loaded.triggers))}")

    click.echo(click.style("\nCatalog is valid.", fg="green", bold=True))


@catalog.command()
@click.option("--json", "as_json", is_flag=True, default=False, help="Print as JSON.")
def show(as_json: bool):
    """List component and trigger kinds with their attributes."""
    try:
        loaded = load_catalog(_catalog_path(None))
    except CatalogError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    summary = describe_catalog(loaded)
    if as_json:
        click.echo(json.dumps(summary, indent=2))
        return

    click.echo("Components:")
    for kind, info in summary["components"].items():
        click.echo(f"  {kind} [{info['role']}]: {', '.join(info['attributes'])}")

    click.echo("Triggers:")
    for kind, info in summary["triggers"].items():
        suffix = " <name>" if info["requiresName"] else ""
        attributes = ", ".join(info["attributes"]) or "-"
        click.echo(f"  {kind}{suffix}: {attributes}")
