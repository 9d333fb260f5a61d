"""
Pydantic models for the new business tracker.
Stored and exported documents use the camelCase keys of the browser
application's backup files, so older backups load unchanged.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CarrierName(str, Enum):
    NATIONWIDE = "Nationwide"
    PROGRESSIVE = "Progressive"
    TRAVELERS = "Travelers"
    NATIONAL_GENERAL = "National General"
    NC_GRANGE = "NC Grange"
    ALAMANCE_FARMERS = "Alamance Farmers"
    FOREMOST = "Foremost"


class PolicyType(str, Enum):
    AUTO = "Auto"
    HOME = "Home"
    RENTERS = "Renters"
    UMBRELLA = "Umbrella"


class RequirementStatus(str, Enum):
    OUTSTANDING = "Outstanding"
    SUBMITTED = "Submitted"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    WAIVED = "Waived"


class PolicyStatus(str, Enum):
    PENDING_REQUIREMENTS = "Pending Requirements"
    IN_REVIEW = "In Review"
    COMPLETE = "Complete"
    ARCHIVED = "Archived"


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AttachedFile(CamelModel):
    """File reference attached to a requirement."""
    name: str
    url: str


class Requirement(CamelModel):
    """One underwriting checklist item."""
    id: str
    name: str
    description: str = ""
    status: RequirementStatus = RequirementStatus.OUTSTANDING
    file: Optional[AttachedFile] = Field(default=None)


class Communication(CamelModel):
    """Communication log entry."""
    id: str
    timestamp: str = Field(description="Creation instant, ISO-8601")
    note: str


class Policy(CamelModel):
    """A policy being onboarded."""
    id: str
    client_name: str
    client_email: str = ""
    client_phone: str = ""
    policy_number: str = ""
    carrier: CarrierName
    policy_type: PolicyType
    effective_date: str = Field(description="YYYY-MM-DD; unparseable values are kept as-is")
    follow_up_date: Optional[str] = Field(default=None, description="YYYY-MM-DD")
    status: PolicyStatus
    requirements: List[Requirement] = Field(default_factory=list)
    communications: List[Communication] = Field(default_factory=list)

    def communications_newest_first(self) -> List[Communication]:
        """Notes in display order (most recent first)."""
        return list(reversed(self.communications))

    def find_requirement(self, requirement_id: str) -> Optional[Requirement]:
        for requirement in self.requirements:
            if requirement.id == requirement_id:
                return requirement
        return None


class RequirementTemplate(CamelModel):
    """Catalog entry offered when a policy is created."""
    name: str
    description: str = ""


class PolicyDetails(CamelModel):
    """Fields entered in the add-policy flow."""
    client_name: str = Field(min_length=1)
    client_email: str = Field(min_length=1)
    client_phone: str = Field(min_length=1)
    policy_number: str = ""
    carrier: CarrierName
    policy_type: PolicyType
    effective_date: date
    follow_up_date: Optional[date] = Field(default=None)

    @field_validator("client_name", "client_email", "client_phone", "policy_number", mode="before")
    @classmethod
    def _strip(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("follow_up_date", mode="before")
    @classmethod
    def _blank_follow_up(cls, value):
        # The add form submits "" when no follow-up date was picked
        if value == "":
            return None
        return value


class PolicyChanges(CamelModel):
    """Editable policy fields; unset fields are left alone."""
    client_name: Optional[str] = Field(default=None, min_length=1)
    client_email: Optional[str] = Field(default=None, min_length=1)
    client_phone: Optional[str] = Field(default=None, min_length=1)
    policy_number: Optional[str] = Field(default=None)
    carrier: Optional[CarrierName] = Field(default=None)
    policy_type: Optional[PolicyType] = Field(default=None)
    effective_date: Optional[date] = Field(default=None)
    follow_up_date: Optional[str] = Field(
        default=None,
        description="YYYY-MM-DD, or an empty string to clear it",
    )


class PolicyQuery(BaseModel):
    """List view filter state."""
    search_term: str = ""
    type_filter: str = Field(default="All", description="'All' or a policy type value")
    status_filter: str = Field(default="All", description="'All' or a policy status value")
    show_archived: bool = False


def utc_timestamp() -> str:
    """Current instant as an ISO-8601 string (UTC, millisecond precision)."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
