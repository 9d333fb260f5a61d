"""
Pydantic schemas for API request/response validation.
"""

from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from new_business.prompts import DEFAULT_DRAFT_INSTRUCTION
from new_business.tracker.listing import PolicySummary
from new_business.tracker.models import (
    PolicyDetails,
    PolicyStatus,
    RequirementStatus,
    RequirementTemplate,
)


class CreatePolicyRequest(BaseModel):
    """Request body for adding a policy."""
    details: PolicyDetails
    requirements: List[str] = Field(
        default_factory=list,
        description="Names picked from /api/catalog/requirements"
    )
    custom_requirements: List[str] = Field(
        default_factory=list,
        description="Free-text requirement names"
    )

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "details": {
                "clientName": "Jane Doe",
                "clientEmail": "jane@example.com",
                "clientPhone": "336-555-0100",
                "policyNumber": "NW-123456",
                "carrier": "Nationwide",
                "policyType": "Auto",
                "effectiveDate": "2024-03-01",
                "followUpDate": "2024-02-20"
            },
            "requirements": ["Signed Application", "Prior Proof of Insurance"],
            "custom_requirements": ["Garaging address confirmation"]
        }
    })


class RequirementStatusRequest(BaseModel):
    status: RequirementStatus


class PolicyStatusRequest(BaseModel):
    status: PolicyStatus


class NoteRequest(BaseModel):
    note: str = Field(..., min_length=1, description="Communication note text")


class DraftRequest(BaseModel):
    instruction: str = Field(
        default=DEFAULT_DRAFT_INSTRUCTION,
        description="What the email should say"
    )


class DraftResponse(BaseModel):
    """Drafted email; on failure html holds an inline error message."""
    success: bool
    html: str
    error: Optional[str] = None


class PolicyListResponse(BaseModel):
    """Filtered and ordered list view."""
    policies: List[PolicySummary] = Field(default_factory=list)
    count: int
    show_archived: bool


class CatalogResponse(BaseModel):
    carrier: str
    policy_type: str
    requirements: List[RequirementTemplate] = Field(default_factory=list)


class ImportPreviewResponse(BaseModel):
    is_valid: bool
    message: Optional[str] = None
    policy_count: Optional[int] = None


class ImportResponse(BaseModel):
    success: bool
    imported_count: int


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(default="healthy")
    version: str
    storage_backend: str
    storage_ok: bool
    vertex_configured: bool
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
