"""synthlang CLI entry point."""

import logging

import click

from synthlang.config import InterpreterConfig


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log debug output.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """synthlang: instrument document interpreter CLI."""
    config = InterpreterConfig.from_env()
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.logging_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = config


# Register subcommand groups
from synthlang.cli.catalog_cmd import catalog  # noqa: E402
from synthlang.cli.document_cmd import document  # noqa: E402

cli.add_command(catalog)
cli.add_command(document)
