"""CLI entry point for complens.

Commands:
  add / list / show: record and inspect package submissions
  review: run the AI component review on one or more packages
  settings: auto-approve / auto-reject policy
  provider: model provider credentials stored in the database
  prompt: versioned review instructions
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from complens_cli.commands.packages import add_cmd, list_cmd, show_cmd
from complens_cli.commands.prompt import prompt_group
from complens_cli.commands.provider import provider_group
from complens_cli.commands.review import review_cmd
from complens_cli.commands.settings import settings_group

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=verbose)],
    )


def _build_store(config: dict):
    """Open the SQLite store named by ``store_path`` in .complens.yml.

    This factory lives in cli.py so neither complens_core nor complens_store
    know about the CLI config format.
    """
    from complens_store.sqlite import SQLiteStore

    return SQLiteStore(db_path=config.get("store_path") or ".complens.db")


@click.group()
@click.version_option(
    version=importlib.metadata.version("complens"),
    prog_name="complens",
)
@click.option(
    "--config",
    "config_path",
    default=".complens.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="COMPLENS_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log pipeline steps at DEBUG level.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """AI review of Convex component packages against the component rubric."""
    from complens_core.config import load_config
    from complens_cli.auth import fill_github_token

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    # GITHUB_TOKEN comes from load_config; the gh session only fills a gap.
    fill_github_token(config)

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.call_on_close(store.close)


main.add_command(add_cmd)
main.add_command(list_cmd)
main.add_command(show_cmd)
main.add_command(review_cmd)
main.add_command(settings_group)
main.add_command(provider_group)
main.add_command(prompt_group)
