"""
Deadline urgency and date-proximity classification.

Two urgency predicates exist and are kept apart on purpose:

- ``is_urgent`` drives the red card badge: effective OR follow-up date
  strictly before today + 7 days.
- ``is_sort_urgent`` drives list ordering: effective date only, on or
  before today + 7 days.

All functions take ``today`` explicitly and never raise on malformed dates;
those are treated as unknown (not urgent, infinitely far away).
"""

import math
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from new_business.tracker.models import Policy, PolicyStatus


URGENCY_WINDOW_DAYS = 7
MONTH_WINDOW_DAYS = 30


class ProximityKind(str, Enum):
    PAST_DUE = "past_due"
    TODAY = "today"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"
    LATER = "later"
    NO_DATE = "no_date"
    UNKNOWN = "unknown"


class DateProximity(BaseModel):
    """How far a date is from today, with its display label."""
    kind: ProximityKind
    days: Optional[int] = Field(default=None, description="Calendar days from today; negative when past")
    label: str


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a stored YYYY-MM-DD (or full ISO timestamp) value; None when unusable."""
    if not value or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        return None


def date_sort_value(value: Optional[str]) -> float:
    """Ordinal for sorting; unparseable dates are +infinity."""
    parsed = parse_date(value)
    if parsed is None:
        return math.inf
    return float(parsed.toordinal())


def urgency_threshold(today: date) -> date:
    return today + timedelta(days=URGENCY_WINDOW_DAYS)


def is_urgent(policy: Policy, today: date) -> bool:
    """Card badge urgency."""
    if policy.status != PolicyStatus.PENDING_REQUIREMENTS:
        return False

    threshold = urgency_threshold(today)
    for value in (policy.effective_date, policy.follow_up_date):
        parsed = parse_date(value)
        if parsed is not None and parsed < threshold:
            return True
    return False


def is_sort_urgent(policy: Policy, today: date) -> bool:
    """List ordering urgency (effective date only, inclusive threshold)."""
    if policy.status != PolicyStatus.PENDING_REQUIREMENTS:
        return False

    effective = parse_date(policy.effective_date)
    if effective is None:
        return False
    return effective <= urgency_threshold(today)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _plural(count: int) -> str:
    return "s" if count > 1 else ""


def days_until(value: Optional[str], today: date) -> Optional[int]:
    parsed = parse_date(value)
    if parsed is None:
        return None
    return (parsed - today).days


def classify_date(value: Optional[str], today: date) -> DateProximity:
    """
    Classify an effective date relative to today.

    < 0 days past due, 0 today, 1-7 this week, 8-30 this month (labelled in
    weeks), beyond that later (labelled in months).
    """
    if not value:
        return DateProximity(kind=ProximityKind.NO_DATE, label="No Date")

    days = days_until(value, today)
    if days is None:
        return DateProximity(kind=ProximityKind.UNKNOWN, label="Unknown Date")

    if days < 0:
        return DateProximity(kind=ProximityKind.PAST_DUE, days=days, label="Past Due")
    if days == 0:
        return DateProximity(kind=ProximityKind.TODAY, days=days, label="Today")
    if days <= URGENCY_WINDOW_DAYS:
        return DateProximity(
            kind=ProximityKind.THIS_WEEK, days=days, label=f"in {days} day{_plural(days)}"
        )
    if days <= MONTH_WINDOW_DAYS:
        weeks = _round_half_up(days / 7)
        return DateProximity(
            kind=ProximityKind.THIS_MONTH, days=days, label=f"in {weeks} wk{_plural(weeks)}"
        )

    months = _round_half_up(days / 30)
    return DateProximity(kind=ProximityKind.LATER, days=days, label=f"in {months} mo+")


def classify_follow_up(value: Optional[str], today: date) -> Optional[DateProximity]:
    """Follow-up chip; only shown for overdue dates or those due within a week."""
    days = days_until(value, today)
    if days is None:
        return None

    if days < 0:
        overdue = -days
        return DateProximity(
            kind=ProximityKind.PAST_DUE, days=days, label=f"Due {overdue} day{_plural(overdue)} ago"
        )
    if days == 0:
        return DateProximity(kind=ProximityKind.TODAY, days=days, label="Due Today")
    if days <= URGENCY_WINDOW_DAYS:
        return DateProximity(
            kind=ProximityKind.THIS_WEEK, days=days, label=f"Due in {days} day{_plural(days)}"
        )
    return None
