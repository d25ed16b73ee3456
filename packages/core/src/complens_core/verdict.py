"""Verdict derivation from per-criterion results.

Policy:
  - any critical criterion failed       → failed
  - otherwise, any criterion failed     → partial
  - otherwise                           → passed

Criteria are matched to the rubric by position. align_criteria() offers a
name-based alternative, and check_criteria_shape() reports a response that
does not line up, so callers can pick how much to trust the model's echo.
check_criteria_count() is the floor every caller applies: one answer per
rubric entry, so an empty reply can never derive "passed".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from complens_core.errors import CriteriaShapeMismatch
from complens_core.models import FAILED, PARTIAL, PASSED, CriterionResult
from complens_core.rubric import ReviewCriterion


@dataclass(frozen=True)
class Verdict:
    status: str
    any_critical_failed: bool
    all_passed: bool


def derive_verdict(criteria: Sequence[CriterionResult], rubric: Sequence[ReviewCriterion]) -> Verdict:
    # An answer past the end of the rubric has no criticality and counts as non-critical.
    any_critical_failed = any(
        not result.passed and i < len(rubric) and rubric[i].critical for i, result in enumerate(criteria)
    )
    all_passed = all(result.passed for result in criteria)

    if any_critical_failed:
        status = FAILED
    elif not all_passed:
        status = PARTIAL
    else:
        status = PASSED
    return Verdict(status=status, any_critical_failed=any_critical_failed, all_passed=all_passed)


def compose_summary(summary: str, suggestions: str | None) -> str:
    if suggestions:
        return f"{summary}\n\nSuggestions: {suggestions}"
    return summary


def check_criteria_count(criteria: Sequence[CriterionResult], rubric: Sequence[ReviewCriterion]) -> None:
    """Raise CriteriaShapeMismatch unless there is exactly one answer per rubric entry."""
    if len(criteria) != len(rubric):
        raise CriteriaShapeMismatch(
            f"Model returned {len(criteria)} criteria, rubric has {len(rubric)}",
            [c.name for c in rubric],
            [c.name for c in criteria],
        )


def check_criteria_shape(criteria: Sequence[CriterionResult], rubric: Sequence[ReviewCriterion]) -> None:
    """Raise CriteriaShapeMismatch unless ``criteria`` echoes the rubric names in order."""
    check_criteria_count(criteria, rubric)
    expected = [c.name for c in rubric]
    received = [c.name for c in criteria]
    for i, (want, got) in enumerate(zip(expected, received)):
        if want != got:
            raise CriteriaShapeMismatch(f"Criterion {i + 1} is {got!r}, expected {want!r}", expected, received)


def align_criteria(
    criteria: Sequence[CriterionResult], rubric: Sequence[ReviewCriterion]
) -> list[CriterionResult]:
    """Reorder ``criteria`` into rubric order by name.

    Raises CriteriaShapeMismatch when a rubric name is missing, a name is
    repeated, or the model invented a criterion.
    """
    expected = [c.name for c in rubric]
    received = [c.name for c in criteria]

    by_name: dict[str, CriterionResult] = {}
    for result in criteria:
        if result.name in by_name:
            raise CriteriaShapeMismatch(f"Criterion {result.name!r} appears more than once", expected, received)
        by_name[result.name] = result

    missing = [name for name in expected if name not in by_name]
    if missing:
        raise CriteriaShapeMismatch(f"Missing criteria: {', '.join(missing)}", expected, received)
    extra = [name for name in received if name not in set(expected)]
    if extra:
        raise CriteriaShapeMismatch(f"Unknown criteria: {', '.join(extra)}", expected, received)

    return [by_name[name] for name in expected]
