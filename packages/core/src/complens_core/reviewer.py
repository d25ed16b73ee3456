"""Core review orchestration.

run_review() drives one package through:
    reviewing → locate sources → build prompt → model call → verdict
              → persist result → optional approve/reject

Each step feeds the next, so the run is strictly sequential. Every inner
step may raise; this module is the one place that catches broadly and turns
the failure into an ``error`` result, so callers never see an exception.
"""

from __future__ import annotations

import logging

from complens_core.automation import maybe_transition
from complens_core.backend import ReviewBackend
from complens_core.config import DEFAULT_CONFIG, load_profile
from complens_core.errors import PackageNotFound, ProviderNotConfigured, ReviewError
from complens_core.gh.repository import locate
from complens_core.models import (
    ERROR,
    FAILED,
    PARTIAL,
    REVIEWING,
    CriterionResult,
    PackageInfo,
    ProviderConfig,
    ReviewResult,
)
from complens_core.prompt import build_prompt
from complens_core.providers.base import BaseProvider
from complens_core.rubric import ReviewProfile
from complens_core.verdict import (
    align_criteria,
    check_criteria_count,
    check_criteria_shape,
    compose_summary,
    derive_verdict,
)

logger = logging.getLogger(__name__)

ERROR_SUMMARY = "AI review encountered an error"
NO_REPOSITORY_SUMMARY = (
    "Cannot perform full review: Package does not have a GitHub repository URL. Only npm metadata is available."
)
NO_REPOSITORY_NOTE = "Unable to check: No repository URL provided"


def build_provider(provider_config: ProviderConfig, config: dict) -> BaseProvider:
    kwargs = {
        "api_key": provider_config.api_key,
        "model": provider_config.model,
        "max_tokens": config.get("max_tokens", DEFAULT_CONFIG["max_tokens"]),
        "timeout": config.get("model_timeout", DEFAULT_CONFIG["model_timeout"]),
    }
    name = provider_config.provider
    if name == "anthropic":
        from complens_core.providers.anthropic import AnthropicProvider

        return AnthropicProvider(**kwargs)
    if name == "openai":
        from complens_core.providers.openai import OpenAIProvider

        return OpenAIProvider(**kwargs)
    if name == "gemini":
        from complens_core.providers.gemini import GeminiProvider

        return GeminiProvider(**kwargs)
    raise ValueError(f"Unknown model provider: {name!r}. Choose 'anthropic', 'openai' or 'gemini'.")


def resolve_provider_config(backend: ReviewBackend, config: dict) -> ProviderConfig:
    """Pick the provider for this run.

    A provider enabled in the store wins. Otherwise the configured provider
    is used with its API key from the environment.
    """
    active = backend.get_active_provider()
    if active is not None:
        return active

    name = config.get("provider") or DEFAULT_CONFIG["provider"]
    api_key = config.get(f"{name}_api_key")
    if not api_key:
        raise ProviderNotConfigured(name)
    return ProviderConfig(provider=name, api_key=api_key, model=config.get("model"))


def _missing_repository_result(profile: ReviewProfile) -> ReviewResult:
    return ReviewResult(
        status=PARTIAL,
        summary=NO_REPOSITORY_SUMMARY,
        criteria=[CriterionResult(name=c.name, passed=False, notes=NO_REPOSITORY_NOTE) for c in profile.criteria],
    )


def _not_a_component_result(profile: ReviewProfile) -> ReviewResult:
    definition = profile.definition_file
    subject = profile.subject
    criteria = [
        CriterionResult(
            name=c.name,
            passed=False,
            notes=f"Failed: No {definition} found" if i == 0 else f"Unable to check: Not a {subject}",
        )
        for i, c in enumerate(profile.criteria)
    ]
    return ReviewResult(
        status=FAILED,
        summary=(
            f"Review failed: No {definition} found in repository. This package is not a valid {subject}. "
            f"Components must have {definition} with defineComponent()."
        ),
        criteria=criteria,
    )


def _match_criteria(criteria: list[CriterionResult], profile: ReviewProfile, mode: str) -> list[CriterionResult]:
    if mode == "by_name":
        return align_criteria(criteria, profile.criteria)
    if mode == "strict":
        check_criteria_shape(criteria, profile.criteria)
        return criteria
    # Lenient mode trusts positions when names drift, but every rubric slot needs an answer.
    check_criteria_count(criteria, profile.criteria)
    try:
        check_criteria_shape(criteria, profile.criteria)
    except ReviewError as e:
        logger.warning("Criteria do not match the rubric, trusting positions: %s", e)
    return criteria


def _review(
    pkg: PackageInfo,
    backend: ReviewBackend,
    config: dict,
    profile: ReviewProfile,
    provider: BaseProvider | None,
) -> ReviewResult:
    package_id = pkg.id
    if not pkg.repository_url:
        logger.info("Package %s has no repository URL; recording partial review.", pkg.name)
        result = _missing_repository_result(profile)
        backend.save_ai_review_result(package_id, result)
        return result

    located = locate(
        pkg.repository_url,
        token=config.get("github_token"),
        profile=profile,
        timeout=config.get("github_timeout", DEFAULT_CONFIG["github_timeout"]),
    )
    if not located.found:
        logger.info("No %s found in %s", profile.definition_file, pkg.repository_url)
        result = _not_a_component_result(profile)
        backend.save_ai_review_result(package_id, result)
        return result

    logger.info(
        "Located %s at %s with %d sibling file(s)",
        profile.definition_file,
        located.definition_path,
        len(located.files) - 1,
    )

    if provider is None:
        provider = build_provider(resolve_provider_config(backend, config), config)

    prompt = build_prompt(
        profile,
        {"name": pkg.name, "version": pkg.version},
        located.files,
        instructions=backend.get_active_prompt(),
    )
    parsed = provider.review(prompt)

    criteria = _match_criteria(parsed.criteria, profile, config.get("criteria_matching", "lenient"))
    verdict = derive_verdict(criteria, profile.criteria)
    result = ReviewResult(
        status=verdict.status,
        summary=compose_summary(parsed.summary, parsed.suggestions),
        criteria=criteria,
    )
    backend.save_ai_review_result(package_id, result)

    transition = maybe_transition(
        verdict.status,
        backend.get_admin_policy(),
        verdict.any_critical_failed,
        reviewed_by=config.get("reviewed_by", DEFAULT_CONFIG["reviewed_by"]),
    )
    if transition is not None:
        logger.info("Package %s: requesting review status %s", pkg.name, transition.review_status)
        backend.update_review_status(package_id, transition)

    return result


def run_review(
    package_id: str,
    backend: ReviewBackend,
    config: dict,
    profile: ReviewProfile | None = None,
    provider: BaseProvider | None = None,
) -> ReviewResult:
    """Run the full AI review for one package and return the stored result.

    Never raises for pipeline failures: they are stored as an ``error``
    result with the exception message. ``provider`` overrides provider
    resolution (tests, or a caller that already built one).
    """
    try:
        pkg = backend.get_package(package_id)
        if pkg is None:
            raise PackageNotFound(package_id)
        # Recorded before any network call, so a crash leaves a visible "reviewing".
        backend.set_ai_review_status(package_id, REVIEWING)
        return _review(pkg, backend, config, profile or load_profile(config), provider)
    except Exception as e:
        logger.exception("AI review failed for package %s", package_id)
        message = e.message if isinstance(e, ReviewError) else str(e)
        result = ReviewResult(status=ERROR, summary=ERROR_SUMMARY, criteria=[], error=message)

    try:
        backend.save_ai_review_result(package_id, result)
    except KeyError:
        # Nothing to write the error onto: the package does not exist.
        logger.error("Could not record review error for unknown package %s", package_id)
    return result
