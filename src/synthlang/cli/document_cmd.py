"""Document CLI commands: check, dump and actions."""

import json
import math
from pathlib import Path

import click

from synthlang.catalog import CatalogError
from synthlang.config import InterpreterConfig
from synthlang.document import DocumentParser, ParseResult, Severity
from synthlang.store import InstanceStore, SetValue


def _config() -> InterpreterConfig:
    ctx = click.get_current_context()
    config = ctx.find_object(InterpreterConfig)
    return config if config is not None else InterpreterConfig.from_env()


def _json_number(value):
    """JSON has no inf or nan; spell them the way Python prints them."""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    return value


def _parse_file(path: Path, strict: bool) -> tuple[ParseResult, InstanceStore]:
    config = _config()
    try:
        catalog = config.load_catalog()
    except CatalogError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    parser = DocumentParser(catalog, strict=strict or config.strict)
    result = parser.parse(path.read_text())
    return result, parser.store


def _report(path: Path, result: ParseResult, err: bool = False) -> None:
    issues = sorted(result.errors + result.warnings, key=lambda issue: issue.line)
    for issue in issues:
        colour = "red" if issue.severity == Severity.ERROR else "yellow"
        click.echo(click.style(f"{path}:{issue}", fg=colour), err=err)


@click.group()
def document():
    """Document commands."""
    pass


@document.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Reject deprecated syntax instead of rewriting it.",
)
def check(file: Path, strict: bool):
    """Parse a document and report errors and warnings."""
    result, store = _parse_file(file, strict)
    _report(file, result)

    if not result.success:
        click.echo(
            click.style(
                f"\n{len(result.errors)} error(s) found"
                + (f", {len(result.warnings)} warning(s)" if result.warnings else ""),
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    if result.warnings:
        click.echo(click.style(f"{len(result.warnings)} warning(s) found.", fg="yellow"))

    component_count = sum(1 for info in store.name_registry.values() if not info.is_variable)
    click.echo(
        f"\n{component_count} component(s), {len(store.triggers)} trigger scope(s)"
    )
    click.echo(click.style("Document is valid.", fg="green", bold=True))


@document.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--strict", is_flag=True, default=False, help="Reject deprecated syntax.")
def dump(file: Path, strict: bool):
    """Print the parsed instance graph as JSON."""
    result, store = _parse_file(file, strict)
    _report(file, result, err=True)
    click.echo(json.dumps(store.to_dict(), indent=2))
    if not result.success:
        raise SystemExit(1)


@document.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--scope", "scope_key", required=True, help="Trigger scope key, e.g. key_f.")
@click.option(
    "--evaluate",
    is_flag=True,
    default=False,
    help="Resolve variables and expressions in SetValue actions.",
)
def actions(file: Path, scope_key: str, evaluate: bool):
    """Print the actions a trigger scope produces."""
    result, store = _parse_file(file, strict=False)
    _report(file, result, err=True)

    if store.get_trigger(scope_key) is None:
        known = ", ".join(store.triggers) or "none"
        click.echo(f"Error: Unknown scope '{scope_key}' (known: {known})", err=True)
        raise SystemExit(1)

    output = []
    for action in store.collect_actions(scope_key):
        data = action.to_dict()
        if evaluate and isinstance(action, SetValue):
            data["resolved"] = _json_number(store.resolve_value(action.value, scope_key))
        output.append(data)

    click.echo(json.dumps(output, indent=2, allow_nan=False))
