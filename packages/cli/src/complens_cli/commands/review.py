"""review command: run the AI component review on submitted packages."""

from __future__ import annotations

import dataclasses
import functools

import click
from rich.console import Console

from complens_core.config import api_key_env_var, load_profile
from complens_core.errors import ConcurrentReviewInProgress, ProviderNotConfigured
from complens_core.models import PROVIDERS, ProviderConfig
from complens_core.reviewer import build_provider, resolve_provider_config, run_review
from complens_core.scheduler import ReviewScheduler
from complens_cli.commands.packages import get_store, resolve_package
from complens_cli.render import print_review

console = Console()


def _provider_override(store, config: dict, provider: str | None, model: str | None):
    """Build the provider named on the command line, or None to let each run resolve its own."""
    if not provider and not model:
        return None
    if provider:
        api_key = config.get(f"{provider}_api_key")
        if not api_key:
            raise click.UsageError(f"{api_key_env_var(provider)} environment variable is not set.")
        provider_config = ProviderConfig(provider=provider, api_key=api_key, model=model)
    else:
        try:
            provider_config = dataclasses.replace(resolve_provider_config(store, config), model=model)
        except ProviderNotConfigured as e:
            raise click.UsageError(e.message) from e
    return build_provider(provider_config, config)


@click.command("review")
@click.argument("packages", nargs=-1, required=True)
@click.option(
    "--provider",
    type=click.Choice(PROVIDERS),
    default=None,
    help="Model provider. Overrides the provider enabled in the store.",
)
@click.option("--model", default=None, help="Model name. Defaults to the provider's configured model.")
@click.pass_context
def review_cmd(ctx, packages: tuple[str, ...], provider: str | None, model: str | None):
    """Review one or more packages (by id or name) against the component rubric.

    Reviews run in the background, one per package, and the result of each is
    stored on the package. A failed review is recorded with status "error";
    it never stops the other reviews.

    \b
    Environment variables:
      GITHUB_TOKEN         GitHub token (or use gh CLI); optional, raises rate limits
      ANTHROPIC_API_KEY    Used when no provider is enabled in the store
      OPENAI_API_KEY       Required for --provider openai
      GEMINI_API_KEY       Required for --provider gemini
    """
    store = get_store(ctx)
    config = ctx.obj["config"]

    try:
        profile = load_profile(config)
    except (FileNotFoundError, ValueError) as e:
        raise click.UsageError(str(e)) from e

    targets = [resolve_package(store, ref) for ref in packages]
    provider_instance = _provider_override(store, config, provider, model)

    run = functools.partial(run_review, backend=store, config=config, profile=profile, provider=provider_instance)

    submitted = []
    with ReviewScheduler(run, max_workers=config.get("max_workers", 4)) as scheduler:
        for pkg in targets:
            try:
                submitted.append((pkg, scheduler.submit(pkg.id)))
            except ConcurrentReviewInProgress:
                console.print(f"[yellow]{pkg.name} is already being reviewed; skipping.[/yellow]")
        console.print(f"Reviewing {len(submitted)} package(s)...")

        for pkg, future in submitted:
            print_review(console, pkg, future.result())
