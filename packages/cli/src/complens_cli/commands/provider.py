"""provider command group: model provider credentials kept in the store.

A provider enabled here takes precedence over the environment variables.
Only one provider is enabled at a time.
"""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from complens_core.models import PROVIDERS
from complens_cli.commands.packages import get_store

console = Console()


@click.group("provider")
def provider_group():
    """Show or change the stored model provider settings."""


@provider_group.command("show")
@click.pass_context
def provider_show(ctx):
    """Show stored settings for every provider. API keys are masked."""
    settings, active = get_store(ctx).get_provider_settings()

    table = Table(title="AI providers", show_header=True, header_style="bold cyan")
    table.add_column("Provider", style="bold")
    table.add_column("API key")
    table.add_column("Model")
    table.add_column("Enabled", width=8)
    for s in settings:
        table.add_row(
            s.provider,
            s.api_key or "[dim]-[/dim]",
            s.model or "[dim]-[/dim]",
            "[green]yes[/green]" if s.is_enabled else "no",
        )
    console.print(table)

    if active is None:
        console.print("[yellow]No provider enabled: reviews use the configured provider and its env API key.[/yellow]")


@provider_group.command("set")
@click.argument("name", type=click.Choice(PROVIDERS))
@click.option("--api-key", default=None, help="API key to store. Omit to keep the stored key.")
@click.option("--model", default=None, help="Model name. Omit to keep the stored model.")
@click.option("--enable/--disable", "enabled", default=None, help="Enabling a provider disables the others.")
@click.pass_context
def provider_set(ctx, name: str, api_key: str | None, model: str | None, enabled: bool | None):
    """Store settings for provider NAME."""
    store = get_store(ctx)
    settings, _ = store.get_provider_settings()
    current = next(s for s in settings if s.provider == name)

    is_enabled = current.is_enabled if enabled is None else enabled
    store.update_provider_settings(
        name,
        api_key=api_key,
        model=model if model is not None else current.model,
        is_enabled=is_enabled,
    )
    console.print(f"[green]✓[/green] Saved {name} settings" + (" (enabled)" if is_enabled else ""))

    if is_enabled and store.get_active_provider() is None:
        console.print(f"[yellow]{name} is enabled but needs both an API key and a model to be used.[/yellow]")


@provider_group.command("clear")
@click.argument("name", type=click.Choice(PROVIDERS))
@click.pass_context
def provider_clear(ctx, name: str):
    """Delete stored settings for NAME, falling back to environment variables."""
    get_store(ctx).clear_provider_settings(name)
    console.print(f"[green]✓[/green] Cleared {name} settings")
