"""Rich renderings shared by the commands."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from complens_core.models import PackageInfo, ReviewResult

_AI_STATUS_STYLE = {
    "passed": "green",
    "partial": "yellow",
    "failed": "red",
    "error": "red",
    "reviewing": "cyan",
    "not_reviewed": "dim",
}

_REVIEW_STATUS_STYLE = {
    "approved": "green",
    "rejected": "red",
    "changes_requested": "yellow",
    "in_review": "cyan",
    "pending": "white",
}


def styled_ai_status(status: str) -> str:
    style = _AI_STATUS_STYLE.get(status, "white")
    return f"[{style}]{status}[/{style}]"


def styled_review_status(status: str) -> str:
    style = _REVIEW_STATUS_STYLE.get(status, "white")
    return f"[{style}]{status}[/{style}]"


def criteria_table(result: ReviewResult, title: str | None = None) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", width=3)
    table.add_column("Criterion", style="bold")
    table.add_column("Result", width=6)
    table.add_column("Notes")
    for i, c in enumerate(result.criteria, start=1):
        mark = "[green]PASS[/green]" if c.passed else "[red]FAIL[/red]"
        table.add_row(str(i), c.name, mark, c.notes)
    return table


def print_review(console: Console, pkg: PackageInfo, result: ReviewResult) -> None:
    console.print(f"\n[bold]{pkg.name}@{pkg.version}[/bold]  AI review: {styled_ai_status(result.status)}")
    console.print(result.summary)
    if result.error:
        console.print(f"[red]Error:[/red] {result.error}")
    if result.criteria:
        console.print(criteria_table(result))
