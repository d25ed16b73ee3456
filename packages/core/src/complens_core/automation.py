"""Decide whether a verdict should move the package's review status."""

from __future__ import annotations

from complens_core.models import APPROVED, FAILED, PASSED, REJECTED, AdminPolicy, StatusTransition

AUTO_APPROVE_NOTES = "Auto-approved: AI review passed all criteria"
AUTO_REJECT_NOTES = "Auto-rejected: AI review found critical issues"


def maybe_transition(
    status: str,
    policy: AdminPolicy,
    any_critical_failed: bool,
    reviewed_by: str = "AI",
) -> StatusTransition | None:
    """Return the transition to request, or None when the policy asks for nothing.

    Only decides; writing the transition is the store's job. A ``failed``
    status without a critical failure cannot come out of derive_verdict, but
    it is still not rejected here.
    """
    if status == PASSED and policy.auto_approve_on_pass:
        return StatusTransition(review_status=APPROVED, reviewed_by=reviewed_by, notes=AUTO_APPROVE_NOTES)
    if status == FAILED and policy.auto_reject_on_fail and any_critical_failed:
        return StatusTransition(review_status=REJECTED, reviewed_by=reviewed_by, notes=AUTO_REJECT_NOTES)
    return None
