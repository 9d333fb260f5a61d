"""
Policy status derivation.

Derived transitions (run after every requirement or communication change
unless the caller skips derivation):

    Pending Requirements / Complete --all requirements met--> Archived
    Pending Requirements / Complete --otherwise-------------> Pending Requirements
    In Review / Archived  --------------------------------> unchanged (sticky)

Manual transitions are explicit user actions and never re-derived; see
MANUAL_TRANSITIONS.
"""

import logging
from typing import Dict, FrozenSet, Iterable

from new_business.errors import ValidationError
from new_business.tracker.models import (
    Policy,
    PolicyStatus,
    Requirement,
    RequirementStatus,
)


logger = logging.getLogger(__name__)

STICKY_STATUSES: FrozenSet[PolicyStatus] = frozenset({
    PolicyStatus.ARCHIVED,
    PolicyStatus.IN_REVIEW,
})

MET_REQUIREMENT_STATUSES: FrozenSet[RequirementStatus] = frozenset({
    RequirementStatus.APPROVED,
    RequirementStatus.WAIVED,
})

MANUAL_TRANSITIONS: Dict[PolicyStatus, FrozenSet[PolicyStatus]] = {
    PolicyStatus.PENDING_REQUIREMENTS: frozenset({PolicyStatus.IN_REVIEW, PolicyStatus.ARCHIVED}),
    PolicyStatus.IN_REVIEW: frozenset({PolicyStatus.PENDING_REQUIREMENTS, PolicyStatus.ARCHIVED}),
    PolicyStatus.COMPLETE: frozenset({
        PolicyStatus.PENDING_REQUIREMENTS,
        PolicyStatus.IN_REVIEW,
        PolicyStatus.ARCHIVED,
    }),
    # Restore
    PolicyStatus.ARCHIVED: frozenset({PolicyStatus.PENDING_REQUIREMENTS}),
}


def is_requirement_met(requirement: Requirement) -> bool:
    return requirement.status in MET_REQUIREMENT_STATUSES


def all_requirements_met(requirements: Iterable[Requirement]) -> bool:
    """True for an empty checklist or one where every item is Approved or Waived."""
    return all(is_requirement_met(r) for r in requirements)


def derive_status(policy: Policy) -> PolicyStatus:
    """Status the derivation rule assigns to *policy*."""
    if policy.status in STICKY_STATUSES:
        return policy.status
    if all_requirements_met(policy.requirements):
        return PolicyStatus.ARCHIVED
    return PolicyStatus.PENDING_REQUIREMENTS


def derive(policy: Policy) -> Policy:
    """
    Recompute a policy's status from its requirements.

    Returns the same object when the status does not change, otherwise a
    copy differing only in ``status``.
    """
    status = derive_status(policy)
    if status == policy.status:
        return policy

    logger.debug(f"Policy {policy.id}: {policy.status.value} -> {status.value}")
    return policy.model_copy(update={"status": status})


def apply_manual_status(policy: Policy, status: PolicyStatus) -> Policy:
    """
    Set a status by explicit user action.

    Raises:
        ValidationError: if the transition is not in MANUAL_TRANSITIONS
    """
    if status == policy.status:
        return policy

    allowed = MANUAL_TRANSITIONS.get(policy.status, frozenset())
    if status not in allowed:
        raise ValidationError(
            f"Cannot change status from '{policy.status.value}' to '{status.value}'"
        )
    return policy.model_copy(update={"status": status})
