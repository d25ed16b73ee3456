"""Domain records shared by the pipeline and the store.

Statuses are plain strings so they persist and serialise without conversion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

# AI review lifecycle: not_reviewed -> reviewing -> passed | failed | partial | error
NOT_REVIEWED = "not_reviewed"
REVIEWING = "reviewing"
PASSED = "passed"
FAILED = "failed"
PARTIAL = "partial"
ERROR = "error"

AI_REVIEW_STATUSES = (NOT_REVIEWED, REVIEWING, PASSED, FAILED, PARTIAL, ERROR)
TERMINAL_STATUSES = (PASSED, FAILED, PARTIAL, ERROR)

# Human-facing review status of a package submission.
PENDING = "pending"
IN_REVIEW = "in_review"
APPROVED = "approved"
CHANGES_REQUESTED = "changes_requested"
REJECTED = "rejected"

REVIEW_STATUSES = (PENDING, IN_REVIEW, APPROVED, CHANGES_REQUESTED, REJECTED)

PROVIDERS = ("anthropic", "openai", "gemini")


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class RepositoryFile:
    """A file fetched from the hosted repository. Lives for one review run."""

    path: str
    content: str


@dataclass
class CriterionResult:
    name: str
    passed: bool
    notes: str = ""


@dataclass
class ReviewResult:
    """Outcome of one review run, as persisted on the package.

    ``criteria`` is empty exactly when ``status`` is ``error``; otherwise it
    follows the rubric order.
    """

    status: str
    summary: str
    criteria: list[CriterionResult] = field(default_factory=list)
    error: str | None = None
    reviewed_at: str = field(default_factory=utc_now)


@dataclass
class PackageInfo:
    id: str
    name: str
    version: str
    repository_url: str | None = None
    review_status: str = PENDING
    reviewed_by: str | None = None
    reviewed_at: str | None = None
    review_notes: str | None = None
    ai_review_status: str = NOT_REVIEWED
    ai_review: ReviewResult | None = None


@dataclass
class ProviderConfig:
    """The single resolved model provider used for a run."""

    provider: str  # "anthropic" | "openai" | "gemini"
    api_key: str
    model: str | None = None


@dataclass
class AdminPolicy:
    auto_approve_on_pass: bool = False
    auto_reject_on_fail: bool = False


@dataclass
class StatusTransition:
    """A follow-up review status change requested by the automation trigger."""

    review_status: str  # "approved" | "rejected"
    reviewed_by: str
    notes: str
