"""
Policy Service
Every user action on the tracker goes through here: derive status, persist
the whole collection, return the saved policy.
"""

import html
import logging
import uuid
from datetime import date
from typing import Callable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from new_business.core.storage import (
    ImportPreview,
    PolicyRepository,
    backup_filename,
    get_policy_repository,
    preview_snapshot,
)
from new_business.core.vertex_client import EmailDrafter, get_draft_client
from new_business.errors import GenerationError, PolicyNotFoundError, ValidationError
from new_business.prompts import DRAFT_ERROR_HTML
from new_business.tracker.listing import PolicySummary, list_policies, summarize
from new_business.tracker.models import (
    Communication,
    Policy,
    PolicyChanges,
    PolicyDetails,
    PolicyQuery,
    PolicyStatus,
    Requirement,
    RequirementStatus,
    RequirementTemplate,
    utc_timestamp,
)
from new_business.tracker.status import apply_manual_status, derive


logger = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


class DraftResult(BaseModel):
    """Outcome of a drafting request; failures carry an inline error message."""
    success: bool
    html: str
    error: Optional[str] = Field(default=None)


class PolicyService:
    """
    Action boundary for the tracker.
    Reads the collection before each action and writes it back whole.
    """

    def __init__(
        self,
        repository: Optional[PolicyRepository] = None,
        drafter: Optional[EmailDrafter] = None,
        clock: Optional[Callable[[], date]] = None,
    ):
        """
        Args:
            repository: Policy storage (configured backend if not provided)
            drafter: Email drafter (Vertex AI client if not provided)
            clock: Returns today's date; injectable for tests
        """
        self.repository = repository or get_policy_repository()
        self._drafter = drafter
        self.clock = clock or date.today

    @property
    def drafter(self) -> EmailDrafter:
        if self._drafter is None:
            self._drafter = get_draft_client()
        return self._drafter

    # Queries

    def all_policies(self) -> List[Policy]:
        return self.repository.load_all()

    def list_policies(self, query: Optional[PolicyQuery] = None) -> List[Policy]:
        """Filtered and ordered policies for the list view."""
        return list_policies(self.repository.load_all(), query or PolicyQuery(), self.clock())

    def list_summaries(self, query: Optional[PolicyQuery] = None) -> List[PolicySummary]:
        today = self.clock()
        return [summarize(p, today) for p in self.list_policies(query)]

    def get_policy(self, policy_id: str) -> Policy:
        for policy in self.repository.load_all():
            if policy.id == policy_id:
                return policy
        raise PolicyNotFoundError(f"Policy {policy_id} not found")

    def summary(self, policy_id: str) -> PolicySummary:
        return summarize(self.get_policy(policy_id), self.clock())

    # Mutations

    def add_policy(
        self,
        details: PolicyDetails,
        requirements: Sequence[RequirementTemplate] = (),
    ) -> Policy:
        """
        Create a policy with every requirement Outstanding.
        A policy created without requirements is archived right away.
        """
        new_requirements = [
            Requirement(
                id=new_id(),
                name=template.name,
                description=template.description,
                status=RequirementStatus.OUTSTANDING,
            )
            for template in requirements
        ]

        policy = Policy(
            id=new_id(),
            client_name=details.client_name,
            client_email=details.client_email,
            client_phone=details.client_phone,
            policy_number=details.policy_number,
            carrier=details.carrier,
            policy_type=details.policy_type,
            effective_date=details.effective_date.isoformat(),
            follow_up_date=details.follow_up_date.isoformat() if details.follow_up_date else None,
            status=(
                PolicyStatus.PENDING_REQUIREMENTS if new_requirements else PolicyStatus.COMPLETE
            ),
            requirements=new_requirements,
            communications=[],
        )
        policy = derive(policy)

        self.repository.append(policy)
        logger.info(
            f"Added policy {policy.id} for {policy.client_name} "
            f"({len(new_requirements)} requirements, {policy.status.value})"
        )
        return policy

    def update_policy(self, policy: Policy, skip_derivation: bool = False) -> Policy:
        """
        Store a changed policy, re-deriving its status unless told not to.

        Raises:
            PolicyNotFoundError: if no stored policy has this id
        """
        final = policy if skip_derivation else derive(policy)

        policies = self.repository.load_all()
        if not any(p.id == final.id for p in policies):
            raise PolicyNotFoundError(f"Policy {final.id} not found")

        self.repository.save_all([final if p.id == final.id else p for p in policies])
        logger.info(f"Updated policy {final.id} ({final.status.value})")
        return final

    def edit_details(self, policy_id: str, changes: PolicyChanges) -> Policy:
        """Apply edited client/policy fields. Archived policies are read-only."""
        policy = self.get_policy(policy_id)
        self._require_active(policy)
        update = changes.model_dump(exclude_unset=True, exclude_none=True)

        if "effective_date" in update:
            update["effective_date"] = update["effective_date"].isoformat()
        if "follow_up_date" in update:
            update["follow_up_date"] = self._normalize_follow_up(update["follow_up_date"])
        for field in ("client_name", "client_email", "client_phone", "policy_number"):
            if field in update:
                update[field] = update[field].strip()
                if not update[field] and field != "policy_number":
                    raise ValidationError(f"{field.replace('_', ' ').capitalize()} is required")

        return self.update_policy(policy.model_copy(update=update))

    @staticmethod
    def _require_active(policy: Policy) -> None:
        if policy.status == PolicyStatus.ARCHIVED:
            raise ValidationError("Archived policies are read-only; restore the policy first")

    @staticmethod
    def _normalize_follow_up(value: str) -> Optional[str]:
        if not value.strip():
            return None
        try:
            return date.fromisoformat(value.strip()).isoformat()
        except ValueError as e:
            raise ValidationError(f"Invalid follow-up date: {value}") from e

    def set_requirement_status(
        self,
        policy_id: str,
        requirement_id: str,
        status: RequirementStatus,
    ) -> Policy:
        policy = self.get_policy(policy_id)
        self._require_active(policy)
        if policy.find_requirement(requirement_id) is None:
            raise PolicyNotFoundError(
                f"Requirement {requirement_id} not found on policy {policy_id}"
            )

        requirements = [
            r.model_copy(update={"status": status}) if r.id == requirement_id else r
            for r in policy.requirements
        ]
        return self.update_policy(policy.model_copy(update={"requirements": requirements}))

    def add_note(self, policy_id: str, note: str) -> Policy:
        text = note.strip()
        if not text:
            raise ValidationError("Note text is required")

        policy = self.get_policy(policy_id)
        self._require_active(policy)
        communication = Communication(id=new_id(), timestamp=utc_timestamp(), note=text)
        return self.update_policy(
            policy.model_copy(update={"communications": policy.communications + [communication]})
        )

    def delete_note(self, policy_id: str, note_id: str) -> Policy:
        policy = self.get_policy(policy_id)
        self._require_active(policy)
        remaining = [c for c in policy.communications if c.id != note_id]
        if len(remaining) == len(policy.communications):
            raise PolicyNotFoundError(f"Note {note_id} not found on policy {policy_id}")
        return self.update_policy(policy.model_copy(update={"communications": remaining}))

    def set_status(self, policy_id: str, status: PolicyStatus) -> Policy:
        """Manual status change; never re-derived."""
        policy = self.get_policy(policy_id)
        return self.update_policy(apply_manual_status(policy, status), skip_derivation=True)

    def restore(self, policy_id: str) -> Policy:
        """
        Bring an archived policy back to the active list as Pending
        Requirements, even if its checklist is already complete.
        """
        policy = self.get_policy(policy_id)
        if policy.status != PolicyStatus.ARCHIVED:
            raise ValidationError("Only archived policies can be restored")
        return self.set_status(policy_id, PolicyStatus.PENDING_REQUIREMENTS)

    def archive(self, policy_id: str) -> Policy:
        return self.set_status(policy_id, PolicyStatus.ARCHIVED)

    def delete_policy(self, policy_id: str) -> None:
        if not self.repository.remove(policy_id):
            raise PolicyNotFoundError(f"Policy {policy_id} not found")
        logger.info(f"Deleted policy {policy_id}")

    # Backup

    def export_snapshot(self) -> Tuple[str, bytes]:
        """Backup file name and contents."""
        data = self.repository.export_snapshot()
        return backup_filename(self.clock()), data

    def preview_import(self, data: bytes) -> ImportPreview:
        return preview_snapshot(data)

    def import_snapshot(self, data: bytes) -> List[Policy]:
        return self.repository.import_snapshot(data)

    # Drafting

    def generate_draft(self, policy_id: str, instruction: str) -> DraftResult:
        """
        Ask the drafting service for an email. Drafting failures come back as
        an inline HTML message instead of an exception; archived policies are
        rejected with ValidationError.
        """
        policy = self.get_policy(policy_id)
        self._require_active(policy)
        try:
            content = self.drafter.generate_draft(policy, instruction)
        except GenerationError as e:
            logger.warning(f"Draft generation failed for policy {policy_id}: {e}")
            return DraftResult(
                success=False,
                html=DRAFT_ERROR_HTML.format(reason=html.escape(str(e))),
                error=str(e),
            )
        return DraftResult(success=True, html=content)
