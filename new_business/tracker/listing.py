"""
List view: filtering, ordering and card summaries.
"""

from datetime import date
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

from new_business.tracker.models import (
    Policy,
    PolicyQuery,
    PolicyStatus,
    Requirement,
    RequirementStatus,
)
from new_business.tracker.status import is_requirement_met
from new_business.tracker.urgency import (
    DateProximity,
    classify_date,
    classify_follow_up,
    date_sort_value,
    is_sort_urgent,
    is_urgent,
)


ALL = "All"

OPEN_REQUIREMENT_STATUSES = (RequirementStatus.OUTSTANDING, RequirementStatus.REJECTED)


def matches_search(policy: Policy, search_term: str) -> bool:
    """Case-insensitive substring match on client name, policy number or carrier."""
    if not search_term:
        return True
    needle = search_term.lower()
    return (
        needle in policy.client_name.lower()
        or needle in policy.policy_number.lower()
        or needle in policy.carrier.value.lower()
    )


def matches_query(policy: Policy, query: PolicyQuery) -> bool:
    if query.show_archived != (policy.status == PolicyStatus.ARCHIVED):
        return False
    if not matches_search(policy, query.search_term):
        return False
    if query.type_filter != ALL and policy.policy_type.value != query.type_filter:
        return False
    if query.status_filter != ALL and policy.status.value != query.status_filter:
        return False
    return True


def filter_policies(policies: Iterable[Policy], query: PolicyQuery) -> List[Policy]:
    """Archived/active partition, then search, type and status filters."""
    return [p for p in policies if matches_query(p, query)]


def sort_policies(policies: Iterable[Policy], show_archived: bool, today: date) -> List[Policy]:
    """
    Order policies for display. Both orderings are stable.

    Archived view: newest effective date first; unparseable dates count as
    +infinity and so come first.
    Active view: sort-urgent policies first, then soonest effective date;
    unparseable dates last.
    """
    if show_archived:
        return sorted(policies, key=lambda p: date_sort_value(p.effective_date), reverse=True)

    return sorted(
        policies,
        key=lambda p: (not is_sort_urgent(p, today), date_sort_value(p.effective_date)),
    )


def list_policies(policies: Iterable[Policy], query: PolicyQuery, today: date) -> List[Policy]:
    return sort_policies(filter_policies(policies, query), query.show_archived, today)


class PolicySummary(BaseModel):
    """Card data for one policy in the list view."""
    policy: Policy
    progress_percent: float = Field(description="Approved or waived share of the checklist, 0-100")
    outstanding_requirements: List[Requirement] = Field(default_factory=list)
    is_urgent: bool
    effective_proximity: DateProximity
    follow_up_proximity: Optional[DateProximity] = Field(default=None)
    email_subject: str


def requirement_progress(requirements: List[Requirement]) -> float:
    if not requirements:
        return 100.0
    met = sum(1 for r in requirements if is_requirement_met(r))
    return met / len(requirements) * 100


def email_subject(policy: Policy) -> str:
    return f"Regarding Your Insurance Policy: {policy.policy_number} - {policy.client_name}"


def summarize(policy: Policy, today: date) -> PolicySummary:
    follow_up = None
    if policy.status != PolicyStatus.ARCHIVED:
        follow_up = classify_follow_up(policy.follow_up_date, today)

    return PolicySummary(
        policy=policy,
        progress_percent=requirement_progress(policy.requirements),
        outstanding_requirements=[
            r for r in policy.requirements if r.status in OPEN_REQUIREMENT_STATUSES
        ],
        is_urgent=is_urgent(policy, today),
        effective_proximity=classify_date(policy.effective_date, today),
        follow_up_proximity=follow_up,
        email_subject=email_subject(policy),
    )
