"""
Policy tracking core: models, status derivation, urgency and list ordering.
"""

from .models import (
    CarrierName,
    PolicyType,
    RequirementStatus,
    PolicyStatus,
    Requirement,
    Communication,
    Policy,
    PolicyDetails,
    PolicyChanges,
    PolicyQuery,
    RequirementTemplate,
)
from .status import derive, apply_manual_status, all_requirements_met
from .urgency import is_urgent, is_sort_urgent, classify_date, classify_follow_up
from .listing import filter_policies, sort_policies, list_policies, summarize

__all__ = [
    "CarrierName",
    "PolicyType",
    "RequirementStatus",
    "PolicyStatus",
    "Requirement",
    "Communication",
    "Policy",
    "PolicyDetails",
    "PolicyChanges",
    "PolicyQuery",
    "RequirementTemplate",
    "derive",
    "apply_manual_status",
    "all_requirements_met",
    "is_urgent",
    "is_sort_urgent",
    "classify_date",
    "classify_follow_up",
    "filter_policies",
    "sort_policies",
    "list_policies",
    "summarize",
]
