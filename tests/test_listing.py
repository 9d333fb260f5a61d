"""
Tests for list filtering, ordering and card summaries.
"""

import pytest

from new_business.tracker.listing import (
    email_subject,
    filter_policies,
    list_policies,
    requirement_progress,
    sort_policies,
    summarize,
)
from new_business.tracker.models import (
    CarrierName,
    PolicyQuery,
    PolicyStatus,
    PolicyType,
    RequirementStatus,
)


@pytest.fixture
def book(make_policy):
    """A mixed set of active and archived policies."""
    return [
        make_policy(id="p1", client_name="Jane Doe", policy_number="NW-1001"),
        make_policy(
            id="p2",
            client_name="Robert Smith",
            policy_number="TR-2002",
            carrier=CarrierName.TRAVELERS,
            policy_type=PolicyType.HOME,
            status=PolicyStatus.IN_REVIEW,
        ),
        make_policy(
            id="p3",
            client_name="Maria Garcia",
            policy_number="NG-3003",
            carrier=CarrierName.NATIONAL_GENERAL,
            status=PolicyStatus.ARCHIVED,
        ),
        make_policy(
            id="p4",
            client_name="Chen Wei",
            policy_number="PR-4004",
            carrier=CarrierName.PROGRESSIVE,
            policy_type=PolicyType.RENTERS,
        ),
    ]


def ids(policies):
    return [p.id for p in policies]


class TestFiltering:
    """Tests for the archived/active partition and filters."""

    def test_partition(self, book):
        active = filter_policies(book, PolicyQuery())
        archived = filter_policies(book, PolicyQuery(show_archived=True))

        assert all(p.status != PolicyStatus.ARCHIVED for p in active)
        assert all(p.status == PolicyStatus.ARCHIVED for p in archived)
        assert sorted(ids(active) + ids(archived)) == sorted(ids(book))

    @pytest.mark.parametrize("term,expected", [
        ("jane", ["p1"]),
        ("SMITH", ["p2"]),
        ("pr-40", ["p4"]),
        ("travel", ["p2"]),
        ("", ["p1", "p2", "p4"]),
    ])
    def test_search(self, book, term, expected):
        assert ids(filter_policies(book, PolicyQuery(search_term=term))) == expected

    def test_search_matches_carrier_in_archive(self, book):
        query = PolicyQuery(search_term="national", show_archived=True)
        assert ids(filter_policies(book, query)) == ["p3"]

    def test_type_filter(self, book):
        query = PolicyQuery(type_filter=PolicyType.HOME.value)
        assert ids(filter_policies(book, query)) == ["p2"]

    def test_status_filter(self, book):
        query = PolicyQuery(status_filter=PolicyStatus.PENDING_REQUIREMENTS.value)
        assert ids(filter_policies(book, query)) == ["p1", "p4"]

    def test_filters_combine(self, book):
        query = PolicyQuery(search_term="chen", type_filter=PolicyType.AUTO.value)
        assert filter_policies(book, query) == []


class TestSorting:
    """Tests for list ordering."""

    def test_active_view_urgent_first(self, make_policy, today):
        policies = [
            make_policy(id="later", effective_date="2024-03-20"),
            make_policy(id="soon", effective_date="2024-03-05"),
            make_policy(id="unknown", effective_date="TBD"),
            make_policy(id="threshold", effective_date="2024-03-08"),
            make_policy(id="mid", effective_date="2024-03-15"),
        ]
        ordered = sort_policies(policies, show_archived=False, today=today)
        assert ids(ordered) == ["soon", "threshold", "mid", "later", "unknown"]

    def test_example_urgent_before_distant(self, make_policy, today):
        distant = make_policy(id="distant", effective_date="2024-03-21")
        close = make_policy(id="close", effective_date="2024-03-04")
        assert ids(sort_policies([distant, close], False, today)) == ["close", "distant"]

    def test_in_review_sorts_by_date_only(self, make_policy, today):
        policies = [
            make_policy(id="review", effective_date="2024-03-02", status=PolicyStatus.IN_REVIEW),
            make_policy(id="pending-far", effective_date="2024-04-01"),
            make_policy(id="pending-near", effective_date="2024-03-06"),
        ]
        ordered = sort_policies(policies, False, today)
        assert ids(ordered) == ["pending-near", "review", "pending-far"]

    def test_archived_view_newest_first(self, make_policy, today):
        policies = [
            make_policy(id="jan", effective_date="2024-01-01", status=PolicyStatus.ARCHIVED),
            make_policy(id="bad", effective_date="???", status=PolicyStatus.ARCHIVED),
            make_policy(id="feb", effective_date="2024-02-01", status=PolicyStatus.ARCHIVED),
        ]
        assert ids(sort_policies(policies, True, today)) == ["bad", "feb", "jan"]

    @pytest.mark.parametrize("show_archived", [False, True])
    def test_stable_for_equal_keys(self, make_policy, today, show_archived):
        status = PolicyStatus.ARCHIVED if show_archived else PolicyStatus.PENDING_REQUIREMENTS
        policies = [
            make_policy(id=name, effective_date="2024-04-10", status=status)
            for name in ("a", "b", "c")
        ]
        assert ids(sort_policies(policies, show_archived, today)) == ["a", "b", "c"]

    def test_sort_is_idempotent(self, make_policy, today):
        policies = [
            make_policy(id=str(i), effective_date=value)
            for i, value in enumerate(["2024-04-10", "2024-03-03", "x", "2024-03-03", "2024-03-25"])
        ]
        once = sort_policies(policies, False, today)
        assert sort_policies(once, False, today) == once

    def test_list_policies_filters_then_sorts(self, book, today):
        book[3] = book[3].model_copy(update={"effective_date": "2024-03-02"})
        assert ids(list_policies(book, PolicyQuery(), today)) == ["p4", "p1", "p2"]


class TestSummaries:
    """Tests for card summaries."""

    def test_progress(self, make_policy):
        policy = make_policy([
            RequirementStatus.APPROVED,
            RequirementStatus.WAIVED,
            RequirementStatus.OUTSTANDING,
        ])
        assert requirement_progress(policy.requirements) == pytest.approx(200 / 3)

    def test_progress_without_requirements(self):
        assert requirement_progress([]) == 100.0

    def test_outstanding_requirements(self, make_policy, today):
        policy = make_policy([
            RequirementStatus.OUTSTANDING,
            RequirementStatus.SUBMITTED,
            RequirementStatus.REJECTED,
            RequirementStatus.APPROVED,
        ])
        summary = summarize(policy, today)
        assert [r.id for r in summary.outstanding_requirements] == ["req-0", "req-2"]

    def test_summary_fields(self, make_policy, today):
        policy = make_policy(
            [RequirementStatus.OUTSTANDING],
            effective_date="2024-03-04",
            follow_up_date="2024-02-29",
        )
        summary = summarize(policy, today)

        assert summary.is_urgent is True
        assert summary.effective_proximity.label == "in 3 days"
        assert summary.follow_up_proximity.label == "Due 1 day ago"
        assert summary.progress_percent == 0
        assert summary.email_subject == "Regarding Your Insurance Policy: NW-1001 - Jane Doe"

    def test_archived_has_no_follow_up_chip(self, make_policy, today):
        policy = make_policy(follow_up_date="2024-03-01", status=PolicyStatus.ARCHIVED)
        summary = summarize(policy, today)
        assert summary.follow_up_proximity is None
        assert summary.is_urgent is False

    def test_email_subject(self, make_policy):
        policy = make_policy(client_name="Chen Wei", policy_number="PR-4004")
        assert email_subject(policy) == "Regarding Your Insurance Policy: PR-4004 - Chen Wei"
