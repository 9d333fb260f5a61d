"""
API routes for the tracker.
Each route is an action boundary: tracker errors become HTTP errors with a
user-facing message and never escape as unhandled faults.
"""

import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile

from new_business import __version__
from new_business.config import get_settings
from new_business.core.storage import get_policy_repository
from new_business.errors import (
    PersistenceError,
    PolicyNotFoundError,
    TrackerError,
    ValidationError,
)
from new_business.tracker.catalog import available_requirements, select_requirements
from new_business.tracker.listing import ALL, PolicySummary
from new_business.tracker.models import (
    CarrierName,
    Policy,
    PolicyChanges,
    PolicyQuery,
    PolicyType,
)
from new_business.tracker.service import PolicyService
from new_business.api.schemas import (
    CatalogResponse,
    CreatePolicyRequest,
    DraftRequest,
    DraftResponse,
    HealthResponse,
    ImportPreviewResponse,
    ImportResponse,
    NoteRequest,
    PolicyListResponse,
    PolicyStatusRequest,
    RequirementStatusRequest,
)


logger = logging.getLogger(__name__)
router = APIRouter()


def get_policy_service() -> PolicyService:
    """Service wired to the configured repository and drafting client."""
    return PolicyService()


def _http_error(action: str, error: TrackerError) -> HTTPException:
    """Map a tracker error raised while performing *action* to an HTTP error."""
    if isinstance(error, PolicyNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ValidationError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, PersistenceError):
        logger.error(f"Storage failure while trying to {action}: {error}")
        return HTTPException(
            status_code=500,
            detail=f"Failed to {action}. Please try again.",
        )
    logger.exception(f"Unexpected tracker error while trying to {action}: {error}")
    return HTTPException(status_code=500, detail=str(error))


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """
    Check the health status of the API and its dependencies.
    """
    settings = get_settings()

    storage_ok = False
    try:
        get_policy_repository().load_all()
        storage_ok = True
    except PersistenceError as e:
        logger.warning(f"Storage check failed: {e}")

    return HealthResponse(
        status="healthy" if storage_ok else "degraded",
        version=__version__,
        storage_backend=settings.storage_backend,
        storage_ok=storage_ok,
        vertex_configured=settings.vertex_configured,
        timestamp=datetime.now(timezone.utc),
    )


@router.get(
    "/api/catalog/requirements",
    response_model=CatalogResponse,
    tags=["Catalog"],
    summary="Requirements offered for a carrier and policy type",
)
async def catalog_requirements(carrier: CarrierName, policy_type: PolicyType):
    return CatalogResponse(
        carrier=carrier.value,
        policy_type=policy_type.value,
        requirements=available_requirements(carrier, policy_type),
    )


@router.get(
    "/api/policies",
    response_model=PolicyListResponse,
    tags=["Policies"],
    summary="List policies",
    description="Active or archived policies, filtered and ordered for display (urgent first)",
)
async def list_policies(
    search: str = "",
    policy_type: str = ALL,
    status: str = ALL,
    archived: bool = False,
    service: PolicyService = Depends(get_policy_service),
):
    query = PolicyQuery(
        search_term=search,
        type_filter=policy_type,
        status_filter=status,
        show_archived=archived,
    )
    try:
        summaries = service.list_summaries(query)
    except TrackerError as e:
        raise _http_error("load policies", e)

    return PolicyListResponse(policies=summaries, count=len(summaries), show_archived=archived)


@router.post(
    "/api/policies",
    response_model=Policy,
    status_code=201,
    tags=["Policies"],
    summary="Add a policy",
)
async def create_policy(
    request: CreatePolicyRequest,
    service: PolicyService = Depends(get_policy_service),
):
    details = request.details
    try:
        requirements = select_requirements(
            details.carrier,
            details.policy_type,
            request.requirements,
            request.custom_requirements,
        )
        return service.add_policy(details, requirements)
    except TrackerError as e:
        raise _http_error("save the policy", e)


@router.get("/api/policies/{policy_id}", response_model=PolicySummary, tags=["Policies"])
async def get_policy(policy_id: str, service: PolicyService = Depends(get_policy_service)):
    try:
        return service.summary(policy_id)
    except TrackerError as e:
        raise _http_error("load the policy", e)


@router.put("/api/policies/{policy_id}", response_model=Policy, tags=["Policies"])
async def edit_policy(
    policy_id: str,
    changes: PolicyChanges,
    service: PolicyService = Depends(get_policy_service),
):
    try:
        return service.edit_details(policy_id, changes)
    except TrackerError as e:
        raise _http_error("save your changes", e)


@router.delete("/api/policies/{policy_id}", status_code=204, tags=["Policies"])
async def delete_policy(policy_id: str, service: PolicyService = Depends(get_policy_service)):
    try:
        service.delete_policy(policy_id)
    except TrackerError as e:
        raise _http_error("delete the policy", e)
    return Response(status_code=204)


@router.put(
    "/api/policies/{policy_id}/requirements/{requirement_id}/status",
    response_model=Policy,
    tags=["Requirements"],
)
async def set_requirement_status(
    policy_id: str,
    requirement_id: str,
    request: RequirementStatusRequest,
    service: PolicyService = Depends(get_policy_service),
):
    try:
        return service.set_requirement_status(policy_id, requirement_id, request.status)
    except TrackerError as e:
        raise _http_error("update the requirement status", e)


@router.post("/api/policies/{policy_id}/notes", response_model=Policy, tags=["Notes"])
async def add_note(
    policy_id: str,
    request: NoteRequest,
    service: PolicyService = Depends(get_policy_service),
):
    try:
        return service.add_note(policy_id, request.note)
    except TrackerError as e:
        raise _http_error("add the communication note", e)


@router.delete("/api/policies/{policy_id}/notes/{note_id}", response_model=Policy, tags=["Notes"])
async def delete_note(
    policy_id: str,
    note_id: str,
    service: PolicyService = Depends(get_policy_service),
):
    try:
        return service.delete_note(policy_id, note_id)
    except TrackerError as e:
        raise _http_error("delete the communication note", e)


@router.post("/api/policies/{policy_id}/restore", response_model=Policy, tags=["Status"])
async def restore_policy(policy_id: str, service: PolicyService = Depends(get_policy_service)):
    try:
        return service.restore(policy_id)
    except TrackerError as e:
        raise _http_error("restore the policy", e)


@router.post("/api/policies/{policy_id}/archive", response_model=Policy, tags=["Status"])
async def archive_policy(policy_id: str, service: PolicyService = Depends(get_policy_service)):
    try:
        return service.archive(policy_id)
    except TrackerError as e:
        raise _http_error("archive the policy", e)


@router.put("/api/policies/{policy_id}/status", response_model=Policy, tags=["Status"])
async def set_policy_status(
    policy_id: str,
    request: PolicyStatusRequest,
    service: PolicyService = Depends(get_policy_service),
):
    try:
        return service.set_status(policy_id, request.status)
    except TrackerError as e:
        raise _http_error("change the policy status", e)


@router.post(
    "/api/policies/{policy_id}/draft",
    response_model=DraftResponse,
    tags=["Drafting"],
    summary="Draft a client email with Gemini",
)
def draft_email(
    policy_id: str,
    request: DraftRequest,
    service: PolicyService = Depends(get_policy_service),
):
    # Sync route: FastAPI runs it in the threadpool while the model call blocks
    try:
        result = service.generate_draft(policy_id, request.instruction)
    except TrackerError as e:
        raise _http_error("generate the draft", e)
    return DraftResponse(success=result.success, html=result.html, error=result.error)


@router.get("/api/backup/export", tags=["Backup"], summary="Download a backup of all policies")
async def export_backup(service: PolicyService = Depends(get_policy_service)):
    try:
        filename, data = service.export_snapshot()
    except TrackerError as e:
        raise _http_error("export the data", e)

    return Response(
        content=data,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


async def _read_backup_file(file: UploadFile) -> bytes:
    if not (file.filename or "").lower().endswith(".json"):
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Please upload a .json backup file."
        )
    return await file.read()


@router.post(
    "/api/backup/import/preview",
    response_model=ImportPreviewResponse,
    tags=["Backup"],
    summary="Check a backup file before importing it",
)
async def preview_import(
    file: UploadFile = File(...),
    service: PolicyService = Depends(get_policy_service),
):
    data = await _read_backup_file(file)
    preview = service.preview_import(data)
    return ImportPreviewResponse(**preview.model_dump())


@router.post(
    "/api/backup/import",
    response_model=ImportResponse,
    tags=["Backup"],
    summary="Replace all policies with a backup file",
)
async def import_backup(
    file: UploadFile = File(...),
    service: PolicyService = Depends(get_policy_service),
):
    data = await _read_backup_file(file)
    try:
        policies = service.import_snapshot(data)
    except ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail=f"Import failed. Please check if the file is a valid backup file. Error: {e}",
        )
    except TrackerError as e:
        raise _http_error("import the data", e)

    return ImportResponse(success=True, imported_count=len(policies))
