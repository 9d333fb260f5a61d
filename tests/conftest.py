"""
Pytest configuration and fixtures.
"""

import uuid
import pytest
from datetime import date
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from new_business.core.storage import JsonFileRepository
from new_business.tracker.models import (
    CarrierName,
    Policy,
    PolicyStatus,
    PolicyType,
    Requirement,
)
from new_business.tracker.service import PolicyService


# Fixed "today" used across tests (2024 is a leap year: today + 7 days is 2024-03-08)
TODAY = date(2024, 3, 1)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_policy():
    """
    Factory for policies.
    Requirement statuses are given positionally; any Policy field can be
    overridden by keyword.
    """
    def _make(requirement_statuses=(), **overrides):
        requirements = [
            Requirement(id=f"req-{i}", name=f"Requirement {i}", status=status)
            for i, status in enumerate(requirement_statuses)
        ]
        fields = {
            "id": str(uuid.uuid4()),
            "client_name": "Jane Doe",
            "client_email": "jane@example.com",
            "client_phone": "336-555-0100",
            "policy_number": "NW-1001",
            "carrier": CarrierName.NATIONWIDE,
            "policy_type": PolicyType.AUTO,
            "effective_date": "2024-03-20",
            "follow_up_date": None,
            "status": PolicyStatus.PENDING_REQUIREMENTS,
            "requirements": requirements,
        }
        fields.update(overrides)
        return Policy(**fields)

    return _make


@pytest.fixture
def repository(tmp_path):
    """File repository in a temporary directory."""
    return JsonFileRepository(tmp_path / "policies.json")


@pytest.fixture
def stub_drafter(mocker):
    """Deterministic stand-in for the Vertex AI drafting client."""
    drafter = mocker.MagicMock()
    drafter.generate_draft.return_value = "<p>Hi Jane, we still need your signed application.</p>"
    return drafter


@pytest.fixture
def service(repository, stub_drafter):
    """Policy service over a temporary store with a fixed clock."""
    return PolicyService(repository=repository, drafter=stub_drafter, clock=lambda: TODAY)


@pytest.fixture
def mock_mongodb(mocker):
    """Mock MongoDB client for unit tests."""
    mock_client = mocker.MagicMock()
    mock_db = mocker.MagicMock()
    mock_collection = mocker.MagicMock()

    mock_client.__getitem__.return_value = mock_db
    mock_db.__getitem__.return_value = mock_collection
    mock_collection.name = "policies"
    mock_collection.find_one.return_value = None
    mock_collection.find.return_value.sort.return_value = []

    mocker.patch('new_business.core.mongodb_client.get_mongodb_client', return_value=mock_client)
    mocker.patch('new_business.core.mongodb_client.get_database', return_value=mock_db)
    mocker.patch('new_business.core.mongodb_client.get_collection', return_value=mock_collection)

    return mock_collection
