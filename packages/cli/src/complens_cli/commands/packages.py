"""add, list and show commands: package submissions."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from complens_core.errors import InvalidUrl
from complens_core.gh.repository import parse_repository_url
from complens_core.models import AI_REVIEW_STATUSES
from complens_cli.render import criteria_table, styled_ai_status, styled_review_status

console = Console()


def get_store(ctx: click.Context):
    store = ctx.obj.get("store") if ctx.obj else None
    if store is None:
        raise click.UsageError("No store available.")
    return store


def resolve_package(store, ref: str):
    """Look a package up by id, then by name, then by a unique id prefix.

    `list` shows shortened ids, so any prefix that names one package works.
    Raises click.BadParameter when nothing or more than one package matches.
    """
    pkg = store.get_package(ref) or store.get_package_by_name(ref)
    if pkg is not None:
        return pkg

    matches = [p for p in store.list_packages() if p.id.startswith(ref)] if ref else []
    if len(matches) > 1:
        raise click.BadParameter(f"Id prefix {ref!r} matches {len(matches)} packages.", param_hint="PACKAGE")
    if not matches:
        raise click.BadParameter(f"No package with id or name {ref!r}.", param_hint="PACKAGE")
    return matches[0]


@click.command("add")
@click.argument("name")
@click.option("--version", "version", required=True, help="Submitted package version.")
@click.option("--repo", "repository_url", default=None, help="GitHub repository URL of the package.")
@click.pass_context
def add_cmd(ctx, name: str, version: str, repository_url: str | None):
    """Record a package submission."""
    if repository_url:
        try:
            parse_repository_url(repository_url)
        except InvalidUrl as e:
            raise click.BadParameter(e.message, param_hint="--repo") from e

    package_id = get_store(ctx).add_package(name, version, repository_url)
    console.print(f"[green]Added[/green] {name}@{version}  id: [bold]{package_id}[/bold]")
    if not repository_url:
        console.print("[yellow]No repository URL: an AI review will only be partial.[/yellow]")


@click.command("list")
@click.option(
    "--status",
    "ai_status",
    type=click.Choice(AI_REVIEW_STATUSES),
    default=None,
    help="Only show packages with this AI review status.",
)
@click.pass_context
def list_cmd(ctx, ai_status: str | None):
    """List submitted packages, newest first."""
    packages = get_store(ctx).list_packages(ai_status=ai_status)
    if not packages:
        console.print("[yellow]No packages found.[/yellow]")
        return

    table = Table(title="Packages", show_header=True, header_style="bold cyan")
    table.add_column("ID", width=12)
    table.add_column("Name", style="bold")
    table.add_column("Version")
    table.add_column("AI Review")
    table.add_column("Status")
    table.add_column("Repository", max_width=50)

    for p in packages:
        table.add_row(
            p.id[:12],
            p.name,
            p.version,
            styled_ai_status(p.ai_review_status),
            styled_review_status(p.review_status),
            p.repository_url or "",
        )

    console.print(table)


@click.command("show")
@click.argument("package")
@click.pass_context
def show_cmd(ctx, package: str):
    """Show a package and its latest AI review."""
    pkg = resolve_package(get_store(ctx), package)

    console.print(f"[bold]{pkg.name}@{pkg.version}[/bold]  ({pkg.id})")
    console.print(f"Repository:  {pkg.repository_url or '-'}")
    console.print(f"Status:      {styled_review_status(pkg.review_status)}")
    if pkg.reviewed_by:
        console.print(f"Reviewed by: {pkg.reviewed_by} at {(pkg.reviewed_at or '')[:19].replace('T', ' ')}")
    if pkg.review_notes:
        console.print(f"Notes:       {pkg.review_notes}")
    console.print(f"AI review:   {styled_ai_status(pkg.ai_review_status)}")

    result = pkg.ai_review
    if result is None:
        return
    console.print(f"\n{result.summary}")
    if result.error:
        console.print(f"[red]Error:[/red] {result.error}")
    if result.criteria:
        console.print(criteria_table(result, title=f"Reviewed {result.reviewed_at[:19].replace('T', ' ')}"))
