"""Base provider implementing the Template Method pattern.

All providers share the same review algorithm:
    review() → complete()   ← only this differs per provider
             → parse_response()

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - complete: make one raw API call and return the text response

There is no retry loop: a failed call propagates to run_review(), which
records an ``error`` result. Re-running a review is cheap and idempotent.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from complens_core.errors import InvalidReviewPayload, MalformedJson
from complens_core.models import CriterionResult

logger = logging.getLogger(__name__)

_MAX_TOKENS = 2048

_JSON_FENCE_RE = re.compile(r"```json\n?([\s\S]*?)\n?```")
_ANY_FENCE_RE = re.compile(r"```\n?([\s\S]*?)\n?```")


@dataclass
class ParsedReview:
    summary: str
    criteria: list[CriterionResult] = field(default_factory=list)
    suggestions: str = ""


class BaseProvider(ABC):
    NAME: str = ""
    MODEL: str = ""
    MAX_TOKENS: int = _MAX_TOKENS

    def __init__(self, model: str | None = None, max_tokens: int | None = None):
        self.model = model or self.MODEL
        self.max_tokens = max_tokens or self.MAX_TOKENS

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def review(self, prompt: str) -> ParsedReview:
        """Send ``prompt`` as a single-turn completion and parse the verdict."""
        logger.debug("%s: requesting review from %s (%d prompt chars)", self.NAME, self.model, len(prompt))
        raw = self.complete(prompt, self.max_tokens)
        return parse_response(raw)

    # ------------------------------------------------------------------ #
    # Abstract: implement in each provider                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def complete(self, prompt: str, max_tokens: int) -> str:
        """Make a single API call and return the raw text response.

        Must raise UnexpectedResponseShape when the provider answers with
        anything other than text.
        """


def extract_json(raw: str):
    """Pull a JSON document out of the model's text.

    Candidates are tried in order: a ```json fence, a bare ``` fence, the
    text with one outer fence stripped, then the trimmed text itself. The
    outer-strip candidate covers payloads whose string values contain their
    own fenced code, which the non-greedy fence patterns cut short.
    """
    text = raw.strip()
    candidates = []
    for pattern in (_JSON_FENCE_RE, _ANY_FENCE_RE):
        match = pattern.search(text)
        if match:
            candidates.append(match.group(1))
    outer = re.sub(r"\s*```$", "", re.sub(r"^```(?:json)?\s*", "", text))
    candidates += [outer, text]

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    raise MalformedJson(raw)


def parse_response(raw: str) -> ParsedReview:
    """Validate the model's JSON and normalise it into a ParsedReview.

    Length and order against the rubric are not checked here; see
    complens_core.verdict for that.
    """
    data = extract_json(raw)
    if not isinstance(data, dict):
        raise InvalidReviewPayload(f"Expected a JSON object, got {type(data).__name__}")

    summary = data.get("summary")
    if not isinstance(summary, str):
        raise InvalidReviewPayload("Response is missing a 'summary' string")

    criteria = data.get("criteria")
    if not isinstance(criteria, list):
        raise InvalidReviewPayload("Response is missing a 'criteria' array")

    suggestions = data.get("suggestions")
    if suggestions is None:
        suggestions = ""
    elif not isinstance(suggestions, str):
        raise InvalidReviewPayload("'suggestions' must be a string")

    results = []
    for i, item in enumerate(criteria):
        if not isinstance(item, dict):
            raise InvalidReviewPayload(f"Criterion {i} is not an object")
        results.append(
            CriterionResult(
                name=str(item.get("name", "")),
                # Anything but a literal true counts as a failure.
                passed=item.get("passed") is True,
                notes=str(item.get("notes") or ""),
            )
        )

    return ParsedReview(summary=summary, criteria=results, suggestions=suggestions)
