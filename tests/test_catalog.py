"""
Tests for the carrier requirement catalog.
"""

import pytest

from new_business.errors import ValidationError
from new_business.tracker.catalog import (
    COMMON_REQUIREMENTS,
    CUSTOM_REQUIREMENT_DESCRIPTION,
    available_requirements,
    carrier_requirements,
    custom_requirements,
    select_requirements,
)
from new_business.tracker.models import CarrierName, PolicyType


class TestAvailableRequirements:
    """Tests for the selectable checklist items."""

    @pytest.mark.parametrize("carrier", list(CarrierName))
    @pytest.mark.parametrize("policy_type", list(PolicyType))
    def test_sorted_and_unique(self, carrier, policy_type):
        names = [t.name for t in available_requirements(carrier, policy_type)]
        assert names == sorted(names, key=str.lower)
        assert len(names) == len(set(names))
        assert "Signed Application" in names

    def test_common_items_always_offered(self):
        names = {t.name for t in available_requirements(CarrierName.FOREMOST, PolicyType.HOME)}
        assert {name for name, _ in COMMON_REQUIREMENTS} <= names

    def test_nationwide_auto(self):
        names = [t.name for t in carrier_requirements(CarrierName.NATIONWIDE, PolicyType.AUTO)]
        assert "Driver's License Photos" in names
        assert "Good Student Proof" in names
        assert len(available_requirements(CarrierName.NATIONWIDE, PolicyType.AUTO)) == 11

    def test_esign_description_for_renters(self):
        signed = carrier_requirements(CarrierName.FOREMOST, PolicyType.RENTERS)[0]
        assert signed.name == "Signed Application"
        assert signed.description == "E-signed application is required."


class TestSelection:
    """Tests for building a new policy's checklist."""

    def test_selected_in_alphabetical_order(self):
        templates = select_requirements(
            CarrierName.PROGRESSIVE,
            PolicyType.AUTO,
            ["Signed Application", "Application", "Payment Confirmation"],
        )
        assert [t.name for t in templates] == [
            "Application",
            "Payment Confirmation",
            "Signed Application",
        ]

    def test_custom_requirements_follow_selected(self):
        templates = select_requirements(
            CarrierName.TRAVELERS,
            PolicyType.HOME,
            ["Alarm Certificate"],
            ["Pool fence photos", "  ", "pool FENCE photos", "HOA letter"],
        )
        assert [t.name for t in templates] == ["Alarm Certificate", "Pool fence photos", "HOA letter"]
        assert templates[-1].description == CUSTOM_REQUIREMENT_DESCRIPTION

    def test_unknown_name_rejected(self):
        with pytest.raises(ValidationError, match="Jewelry Appraisal"):
            select_requirements(CarrierName.NATIONWIDE, PolicyType.AUTO, ["Jewelry Appraisal"])

    def test_nothing_selected(self):
        assert select_requirements(CarrierName.NC_GRANGE, PolicyType.AUTO, []) == []

    def test_custom_only(self):
        assert [t.name for t in custom_requirements([" Lien holder info "])] == ["Lien holder info"]
