"""
Tests for policy status derivation and manual transitions.
"""

import pytest

from new_business.errors import ValidationError
from new_business.tracker.models import PolicyStatus, RequirementStatus
from new_business.tracker.status import (
    MANUAL_TRANSITIONS,
    all_requirements_met,
    apply_manual_status,
    derive,
    derive_status,
)


APPROVED = RequirementStatus.APPROVED
WAIVED = RequirementStatus.WAIVED
OUTSTANDING = RequirementStatus.OUTSTANDING
SUBMITTED = RequirementStatus.SUBMITTED
REJECTED = RequirementStatus.REJECTED


class TestDerivation:
    """Tests for automatic status derivation."""

    @pytest.mark.parametrize("status", [PolicyStatus.PENDING_REQUIREMENTS, PolicyStatus.COMPLETE])
    def test_empty_checklist_archives(self, make_policy, status):
        """A policy with no requirements has nothing left to wait for."""
        policy = make_policy(status=status)
        assert derive(policy).status == PolicyStatus.ARCHIVED

    @pytest.mark.parametrize("statuses", [
        [APPROVED],
        [WAIVED],
        [APPROVED, WAIVED, APPROVED],
    ])
    def test_all_met_archives(self, make_policy, statuses):
        policy = make_policy(statuses)
        assert derive(policy).status == PolicyStatus.ARCHIVED

    @pytest.mark.parametrize("statuses", [
        [OUTSTANDING, OUTSTANDING],
        [APPROVED, SUBMITTED],
        [WAIVED, OUTSTANDING],
        [REJECTED],
        [APPROVED, APPROVED, REJECTED],
    ])
    def test_any_unmet_is_pending(self, make_policy, statuses):
        policy = make_policy(statuses)
        assert derive(policy).status == PolicyStatus.PENDING_REQUIREMENTS

    def test_complete_with_open_items_goes_back_to_pending(self, make_policy):
        policy = make_policy([APPROVED, OUTSTANDING], status=PolicyStatus.COMPLETE)
        assert derive(policy).status == PolicyStatus.PENDING_REQUIREMENTS

    @pytest.mark.parametrize("sticky", [PolicyStatus.IN_REVIEW, PolicyStatus.ARCHIVED])
    @pytest.mark.parametrize("statuses", [[], [APPROVED], [OUTSTANDING], [REJECTED, WAIVED]])
    def test_sticky_statuses_never_change(self, make_policy, sticky, statuses):
        policy = make_policy(statuses, status=sticky)
        assert derive(policy) is policy
        assert derive_status(policy) == sticky

    def test_unchanged_status_returns_same_object(self, make_policy):
        policy = make_policy([OUTSTANDING])
        assert derive(policy) is policy

    def test_derivation_only_touches_status(self, make_policy):
        policy = make_policy([APPROVED, WAIVED], follow_up_date="2024-03-05")
        derived = derive(policy)

        assert derived is not policy
        assert derived.model_dump(exclude={"status"}) == policy.model_dump(exclude={"status"})
        assert policy.status == PolicyStatus.PENDING_REQUIREMENTS

    def test_derivation_is_idempotent(self, make_policy):
        for statuses in ([], [OUTSTANDING], [APPROVED]):
            once = derive(make_policy(statuses))
            assert derive(once) == once

    def test_all_requirements_met_empty(self):
        assert all_requirements_met([]) is True


class TestManualTransitions:
    """Tests for explicit user status changes."""

    def test_restore_archived_with_empty_checklist(self, make_policy):
        policy = make_policy(status=PolicyStatus.ARCHIVED)
        restored = apply_manual_status(policy, PolicyStatus.PENDING_REQUIREMENTS)
        assert restored.status == PolicyStatus.PENDING_REQUIREMENTS

    def test_pending_to_in_review(self, make_policy):
        policy = make_policy([OUTSTANDING])
        assert apply_manual_status(policy, PolicyStatus.IN_REVIEW).status == PolicyStatus.IN_REVIEW

    def test_in_review_back_to_pending(self, make_policy):
        policy = make_policy([APPROVED], status=PolicyStatus.IN_REVIEW)
        changed = apply_manual_status(policy, PolicyStatus.PENDING_REQUIREMENTS)
        assert changed.status == PolicyStatus.PENDING_REQUIREMENTS

    @pytest.mark.parametrize("current,target", [
        (PolicyStatus.ARCHIVED, PolicyStatus.COMPLETE),
        (PolicyStatus.ARCHIVED, PolicyStatus.IN_REVIEW),
        (PolicyStatus.PENDING_REQUIREMENTS, PolicyStatus.COMPLETE),
        (PolicyStatus.IN_REVIEW, PolicyStatus.COMPLETE),
    ])
    def test_disallowed_transitions(self, make_policy, current, target):
        policy = make_policy(status=current)
        with pytest.raises(ValidationError):
            apply_manual_status(policy, target)

    def test_same_status_is_a_no_op(self, make_policy):
        policy = make_policy(status=PolicyStatus.IN_REVIEW)
        assert apply_manual_status(policy, PolicyStatus.IN_REVIEW) is policy

    def test_every_status_can_be_archived_or_restored(self):
        for status in PolicyStatus:
            if status == PolicyStatus.ARCHIVED:
                assert MANUAL_TRANSITIONS[status] == {PolicyStatus.PENDING_REQUIREMENTS}
            else:
                assert PolicyStatus.ARCHIVED in MANUAL_TRANSITIONS[status]
