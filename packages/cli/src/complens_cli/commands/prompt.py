"""prompt command group: versioned review instructions.

Saving a prompt makes it active; it replaces the default framing of the
review request. The rubric, source files and response format are always
generated, so a custom prompt cannot break parsing.
"""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from complens_core.config import load_profile
from complens_core.prompt import default_instructions
from complens_cli.commands.packages import get_store

console = Console()


def _default_prompt(ctx) -> str:
    try:
        return default_instructions(load_profile(ctx.obj["config"]))
    except (FileNotFoundError, ValueError) as e:
        raise click.UsageError(str(e)) from e


@click.group("prompt")
def prompt_group():
    """Manage the review instructions sent to the model."""


@prompt_group.command("show")
@click.option("--default", "show_default", is_flag=True, help="Show the built-in prompt instead of the active one.")
@click.pass_context
def prompt_show(ctx, show_default: bool):
    """Print the active review instructions."""
    active = None if show_default else get_store(ctx).get_active_prompt()
    if active is None:
        if not show_default:
            console.print("[dim]Using the built-in prompt.[/dim]\n")
        console.print(_default_prompt(ctx), markup=False, highlight=False)
        return
    console.print(active, markup=False, highlight=False)


@prompt_group.command("save")
@click.argument("file", type=click.File("r"))
@click.option("--notes", default=None, help="What changed in this version.")
@click.option("--author", default=None, help="Recorded as the creator of this version.")
@click.pass_context
def prompt_save(ctx, file, notes: str | None, author: str | None):
    """Save the instructions in FILE as a new version and activate it."""
    try:
        version_id = get_store(ctx).save_prompt_version(file.read(), notes=notes, created_by=author)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="FILE") from e
    console.print(f"[green]✓[/green] Saved and activated prompt version {version_id}")


@prompt_group.command("activate")
@click.argument("version_id", type=int)
@click.pass_context
def prompt_activate(ctx, version_id: int):
    """Make a previously saved version active."""
    try:
        get_store(ctx).activate_prompt_version(version_id)
    except KeyError as e:
        raise click.BadParameter(f"No prompt version {version_id}.", param_hint="VERSION_ID") from e
    console.print(f"[green]✓[/green] Activated prompt version {version_id}")


@prompt_group.command("reset")
@click.pass_context
def prompt_reset(ctx):
    """Go back to the built-in instructions."""
    get_store(ctx).reset_to_default_prompt(_default_prompt(ctx))
    console.print("[green]✓[/green] Reset to the built-in prompt")


@prompt_group.command("history")
@click.option("--limit", default=50, show_default=True, help="Maximum number of versions to show.")
@click.pass_context
def prompt_history(ctx, limit: int):
    """List saved prompt versions, newest first."""
    versions = get_store(ctx).list_prompt_versions(limit=limit)
    if not versions:
        console.print("[yellow]No prompt versions saved. The built-in prompt is in use.[/yellow]")
        return

    table = Table(title="Prompt versions", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right", width=4)
    table.add_column("Active", width=6)
    table.add_column("Created", width=20)
    table.add_column("By")
    table.add_column("Notes", max_width=40)
    table.add_column("Starts with", max_width=40)
    for v in versions:
        label = "[green]*[/green]" if v.is_active else ""
        notes = v.notes or ("default" if v.is_default else "")
        first_line = v.content.strip().splitlines()[0] if v.content.strip() else ""
        table.add_row(
            str(v.id),
            label,
            v.created_at[:19].replace("T", " "),
            v.created_by or "",
            notes,
            first_line[:40],
        )
    console.print(table)
