"""Tests for verdict derivation and criteria matching."""

import pytest

from complens_core.errors import CriteriaShapeMismatch
from complens_core.models import CriterionResult
from complens_core.rubric import DEFAULT_PROFILE, ReviewCriterion
from complens_core.verdict import (
    align_criteria,
    check_criteria_count,
    check_criteria_shape,
    compose_summary,
    derive_verdict,
)

RUBRIC = (
    ReviewCriterion("config", "c", critical=True),
    ReviewCriterion("functions", "f", critical=True),
    ReviewCriterion("indexes", "i"),
    ReviewCriterion("auth", "a"),
)


def _results(*passed, names=None):
    names = names or [c.name for c in RUBRIC]
    return [CriterionResult(name=n, passed=p) for n, p in zip(names, passed)]


class TestDeriveVerdict:
    def test_all_passed(self):
        verdict = derive_verdict(_results(True, True, True, True), RUBRIC)
        assert verdict.status == "passed"
        assert verdict.all_passed is True
        assert verdict.any_critical_failed is False

    def test_non_critical_failure_is_partial(self):
        verdict = derive_verdict(_results(True, True, False, True), RUBRIC)
        assert verdict.status == "partial"
        assert verdict.any_critical_failed is False

    def test_critical_failure_is_failed(self):
        verdict = derive_verdict(_results(True, False, True, True), RUBRIC)
        assert verdict.status == "failed"
        assert verdict.any_critical_failed is True

    def test_critical_dominates_non_critical(self):
        assert derive_verdict(_results(False, True, False, False), RUBRIC).status == "failed"

    def test_matching_is_positional_not_by_name(self):
        # Names are swapped, but position 0 is still the critical slot.
        results = _results(False, True, True, True, names=["auth", "functions", "indexes", "config"])
        assert derive_verdict(results, RUBRIC).status == "failed"

    def test_extra_answers_count_as_non_critical(self):
        results = _results(True, True, True, True) + [CriterionResult(name="bonus", passed=False)]
        assert derive_verdict(results, RUBRIC).status == "partial"

    def test_empty_criteria_pass(self):
        assert derive_verdict([], RUBRIC).status == "passed"

    def test_deterministic(self):
        results = _results(True, True, False, True)
        assert derive_verdict(results, RUBRIC) == derive_verdict(list(results), RUBRIC)

    def test_default_rubric_first_five_are_critical(self):
        criteria = [CriterionResult(name=c.name, passed=True) for c in DEFAULT_PROFILE.criteria]
        criteria[4].passed = False
        assert derive_verdict(criteria, DEFAULT_PROFILE.criteria).status == "failed"
        criteria[4].passed = True
        criteria[5].passed = False
        assert derive_verdict(criteria, DEFAULT_PROFILE.criteria).status == "partial"


class TestComposeSummary:
    def test_appends_suggestions(self):
        assert compose_summary("Good.", "Add indexes.") == "Good.\n\nSuggestions: Add indexes."

    def test_empty_suggestions_leave_summary_alone(self):
        assert compose_summary("Good.", "") == "Good."
        assert compose_summary("Good.", None) == "Good."


class TestCheckCriteriaShape:
    def test_matching_shape_passes(self):
        check_criteria_shape(_results(True, False, True, True), RUBRIC)

    def test_wrong_count(self):
        with pytest.raises(CriteriaShapeMismatch) as exc_info:
            check_criteria_shape(_results(True, True), RUBRIC)
        assert exc_info.value.details == {"expected": 4, "received": 2}

    def test_wrong_order(self):
        with pytest.raises(CriteriaShapeMismatch):
            check_criteria_shape(
                _results(True, True, True, True, names=["functions", "config", "indexes", "auth"]), RUBRIC
            )


class TestCheckCriteriaCount:
    def test_names_are_not_checked(self):
        shuffled = _results(True, True, True, True, names=["auth", "config", "functions", "indexes"])
        check_criteria_count(shuffled, RUBRIC)

    def test_empty_answer_rejected(self):
        with pytest.raises(CriteriaShapeMismatch) as exc_info:
            check_criteria_count([], RUBRIC)
        assert exc_info.value.message == "Model returned 0 criteria, rubric has 4"


class TestAlignCriteria:
    def test_reorders_by_name(self):
        shuffled = _results(True, False, True, True, names=["auth", "config", "functions", "indexes"])
        aligned = align_criteria(shuffled, RUBRIC)
        assert [c.name for c in aligned] == ["config", "functions", "indexes", "auth"]
        assert [c.passed for c in aligned] == [False, True, True, True]

    def test_missing_name(self):
        with pytest.raises(CriteriaShapeMismatch, match="Missing criteria: auth"):
            align_criteria(_results(True, True, True), RUBRIC)

    def test_duplicate_name(self):
        with pytest.raises(CriteriaShapeMismatch, match="more than once"):
            align_criteria(_results(True, True, True, True, names=["config", "config", "indexes", "auth"]), RUBRIC)

    def test_unknown_name(self):
        results = _results(True, True, True, True) + [CriterionResult(name="made up", passed=True)]
        with pytest.raises(CriteriaShapeMismatch, match="Unknown criteria: made up"):
            align_criteria(results, RUBRIC)
