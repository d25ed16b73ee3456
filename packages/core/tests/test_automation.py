"""Tests for the auto-approve / auto-reject decision."""

from complens_core.automation import AUTO_APPROVE_NOTES, AUTO_REJECT_NOTES, maybe_transition
from complens_core.models import AdminPolicy

BOTH_ON = AdminPolicy(auto_approve_on_pass=True, auto_reject_on_fail=True)
BOTH_OFF = AdminPolicy()


def test_pass_with_auto_approve():
    transition = maybe_transition("passed", BOTH_ON, any_critical_failed=False)
    assert transition.review_status == "approved"
    assert transition.reviewed_by == "AI"
    assert transition.notes == AUTO_APPROVE_NOTES


def test_fail_with_auto_reject():
    transition = maybe_transition("failed", BOTH_ON, any_critical_failed=True, reviewed_by="bot")
    assert transition.review_status == "rejected"
    assert transition.reviewed_by == "bot"
    assert transition.notes == AUTO_REJECT_NOTES


def test_policy_off_does_nothing():
    assert maybe_transition("passed", BOTH_OFF, any_critical_failed=False) is None
    assert maybe_transition("failed", BOTH_OFF, any_critical_failed=True) is None


def test_partial_never_transitions():
    assert maybe_transition("partial", BOTH_ON, any_critical_failed=False) is None


def test_error_never_transitions():
    assert maybe_transition("error", BOTH_ON, any_critical_failed=False) is None


def test_failed_without_critical_failure_is_not_rejected():
    assert maybe_transition("failed", BOTH_ON, any_critical_failed=False) is None


def test_only_the_matching_flag_applies():
    approve_only = AdminPolicy(auto_approve_on_pass=True)
    assert maybe_transition("failed", approve_only, any_critical_failed=True) is None
    reject_only = AdminPolicy(auto_reject_on_fail=True)
    assert maybe_transition("passed", reject_only, any_critical_failed=False) is None
