"""Exception hierarchy for the review pipeline.

Inner components raise these and let them propagate; run_review() is the
single place that catches them and turns them into an ``error`` result.
"""

from __future__ import annotations

from typing import Any


class ReviewError(Exception):
    """Base class for every error raised by the review pipeline."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class InvalidUrl(ReviewError):
    """The repository URL does not look like github.com/owner/repo."""

    def __init__(self, url: str):
        super().__init__("Invalid GitHub repository URL", {"url": url})
        self.url = url


class PackageNotFound(ReviewError):
    def __init__(self, package_id: str):
        super().__init__("Package not found", {"package_id": package_id})
        self.package_id = package_id


class ProviderNotConfigured(ReviewError):
    """No active model provider, or the active provider has no API key."""

    def __init__(self, provider: str | None = None):
        if provider:
            message = f"{provider.upper()}_API_KEY not configured"
        else:
            message = "No AI provider configured"
        super().__init__(message, {"provider": provider} if provider else None)
        self.provider = provider


class UnexpectedResponseShape(ReviewError):
    """The provider answered with something other than a text block."""

    def __init__(self, provider: str, received: str):
        super().__init__(f"Unexpected response type from {provider}", {"received": received})
        self.provider = provider


class MalformedJson(ReviewError):
    """No JSON document could be extracted from the model's text."""

    def __init__(self, raw: str):
        super().__init__("Model response is not valid JSON", {"response": raw[:200]})
        self.raw = raw


class InvalidReviewPayload(ReviewError):
    """The JSON parsed but is missing ``summary``/``criteria`` or has wrong types."""


class CriteriaShapeMismatch(ReviewError):
    """The criteria returned by the model do not line up with the rubric."""

    def __init__(self, message: str, expected: list[str], received: list[str]):
        super().__init__(message, {"expected": len(expected), "received": len(received)})
        self.expected = expected
        self.received = received


class ConcurrentReviewInProgress(ReviewError):
    def __init__(self, package_id: str):
        super().__init__("A review is already running for this package", {"package_id": package_id})
        self.package_id = package_id
