"""settings command group: automatic approval policy."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from complens_cli.commands.packages import get_store
from complens_store.models import ADMIN_SETTING_KEYS

console = Console()

_DESCRIPTIONS = {
    "auto_approve_on_pass": "Approve a package when its AI review passes",
    "auto_reject_on_fail": "Reject a package when its AI review fails a critical criterion",
}


@click.group("settings")
def settings_group():
    """Show or change the automatic approval policy."""


@settings_group.command("show")
@click.pass_context
def settings_show(ctx):
    """Show the current policy flags."""
    policy = get_store(ctx).get_admin_policy()

    table = Table(title="Admin settings", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="bold")
    table.add_column("Value", width=6)
    table.add_column("Effect")
    for key in ADMIN_SETTING_KEYS:
        value = getattr(policy, key)
        table.add_row(key, "[green]on[/green]" if value else "[dim]off[/dim]", _DESCRIPTIONS[key])
    console.print(table)


@settings_group.command("set")
@click.argument("key", type=click.Choice(ADMIN_SETTING_KEYS))
@click.argument("value", type=click.BOOL)
@click.pass_context
def settings_set(ctx, key: str, value: bool):
    """Set KEY to true or false."""
    get_store(ctx).update_admin_setting(key, value)
    console.print(f"[green]✓[/green] {key} = {str(value).lower()}")
