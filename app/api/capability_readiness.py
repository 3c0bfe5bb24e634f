"""API endpoints for capability readiness and gap analysis."""

from datetime import date
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from app.core.capability import (
    AggregatedEvidence,
    CapabilityRequirement,
    EvidenceRecord,
    InvalidEvidenceTransition,
    ProficiencyScale,
    ReadinessResult,
    ReadinessSummary,
    ValidationStatus,
    aggregate_evidence,
    compute_readiness,
    summarize_readiness,
)
from app.core.capability.evidence import group_evidence_by_capability
from app.core.logging import get_logger
from app.db.capabilities import (
    EvidenceNotFoundError,
    fetch_evidence,
    fetch_proficiency_scale,
    fetch_requirements,
    update_evidence_status,
)

logger = get_logger(__name__)

router = APIRouter()

TargetType = Literal["job", "goal", "role"]


class ComputeReadinessRequest(BaseModel):
    """Request body for scoring caller-supplied records."""

    requirements: list[CapabilityRequirement] = Field(default_factory=list)
    evidence: list[EvidenceRecord] = Field(
        default_factory=list, description="Evidence for any capabilities, any status"
    )
    scale: Optional[ProficiencyScale] = Field(None, description="Scale for level names")
    as_of: Optional[date] = Field(None, description="Date for expiry checks (default today)")


class EvidenceValidationRequest(BaseModel):
    """Request body for a validation decision."""

    status: ValidationStatus = Field(..., description="New status")


def _compute_for_employee(
    employee_id: UUID,
    target_id: UUID,
    target_type: str,
    scale_id: Optional[UUID],
) -> ReadinessResult:
    requirements = fetch_requirements(target_id, target_type)
    evidence = fetch_evidence(employee_id)
    scale = fetch_proficiency_scale(scale_id)

    result = compute_readiness(requirements, group_evidence_by_capability(evidence), scale)

    logger.info(
        f"Computed readiness for employee {employee_id} against {target_type} {target_id}: "
        f"{result.overall_readiness:.1f}%",
        extra={"employee_id": str(employee_id), "target_id": str(target_id)},
    )
    return result


@router.get(
    "/employees/{employee_id}/readiness/{target_id}",
    response_model=ReadinessResult,
)
async def get_employee_readiness(
    employee_id: UUID,
    target_id: UUID,
    target_type: TargetType = Query("job", description="What the target id refers to"),
    scale_id: Optional[UUID] = Query(None, description="Proficiency scale for level names"),
) -> ReadinessResult:
    """
    Get an employee's readiness against a job, goal or role.

    Always computed fresh from current requirements and evidence.

    Raises:
        HTTPException 500: If computation fails
    """
    try:
        return _compute_for_employee(employee_id, target_id, target_type, scale_id)
    except Exception as e:
        logger.exception(f"Failed to compute readiness for employee {employee_id}")
        raise HTTPException(
            status_code=500,
            detail="Failed to compute readiness",
        ) from e


@router.get(
    "/employees/{employee_id}/readiness/{target_id}/summary",
    response_model=ReadinessSummary,
)
async def get_employee_readiness_summary(
    employee_id: UUID,
    target_id: UUID,
    target_type: TargetType = Query("job", description="What the target id refers to"),
    scale_id: Optional[UUID] = Query(None, description="Proficiency scale for level names"),
    limit: int = Query(5, ge=1, le=50, description="Number of top gaps to include"),
) -> ReadinessSummary:
    """
    Get the gap summary widget payload for an employee and target.

    Raises:
        HTTPException 500: If computation fails
    """
    try:
        result = _compute_for_employee(employee_id, target_id, target_type, scale_id)
        return summarize_readiness(result, limit=limit)
    except Exception as e:
        logger.exception(f"Failed to summarize readiness for employee {employee_id}")
        raise HTTPException(
            status_code=500,
            detail="Failed to summarize readiness",
        ) from e


@router.get(
    "/employees/{employee_id}/capabilities/{capability_id}/evidence",
    response_model=AggregatedEvidence,
)
async def get_capability_evidence(employee_id: UUID, capability_id: UUID) -> AggregatedEvidence:
    """
    Get the aggregated level and confidence for one employee capability.

    Raises:
        HTTPException 500: If aggregation fails
    """
    try:
        records = fetch_evidence(employee_id, capability_id)
        return aggregate_evidence(records)
    except Exception as e:
        logger.exception(
            f"Failed to aggregate evidence for employee {employee_id}, capability {capability_id}"
        )
        raise HTTPException(
            status_code=500,
            detail="Failed to aggregate evidence",
        ) from e


@router.post("/readiness/compute", response_model=ReadinessResult)
async def compute_readiness_from_records(request: ComputeReadinessRequest) -> ReadinessResult:
    """
    Score caller-supplied requirements and evidence without touching storage.

    Raises:
        HTTPException 500: If computation fails
    """
    try:
        return compute_readiness(
            request.requirements,
            group_evidence_by_capability(request.evidence),
            request.scale,
            as_of=request.as_of,
        )
    except Exception as e:
        logger.exception("Failed to compute readiness from supplied records")
        raise HTTPException(
            status_code=500,
            detail="Failed to compute readiness",
        ) from e


@router.post("/evidence/{evidence_id}/validation", response_model=EvidenceRecord)
async def validate_evidence(evidence_id: UUID, request: EvidenceValidationRequest) -> EvidenceRecord:
    """
    Record a human validation decision on an evidence record.

    Raises:
        HTTPException 404: If the evidence does not exist
        HTTPException 409: If the status change is not allowed
        HTTPException 500: If the update fails
    """
    try:
        return update_evidence_status(evidence_id, request.status)
    except EvidenceNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except InvalidEvidenceTransition as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except Exception as e:
        logger.exception(f"Failed to update validation status of evidence {evidence_id}")
        raise HTTPException(
            status_code=500,
            detail="Failed to update evidence validation",
        ) from e
