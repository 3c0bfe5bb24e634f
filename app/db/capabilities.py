"""Database operations for capability requirements, evidence and scales.

Rows are converted into the engine's validated records here. A row that
cannot be converted is logged and skipped, so one bad record never takes
down a readiness computation.
"""

from datetime import UTC, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import ValidationError

from app.core.capability.scale import parse_scale_levels
from app.core.capability.types import (
    CapabilityRequirement,
    EvidenceRecord,
    ProficiencyScale,
    ValidationStatus,
)
from app.core.capability.validation import InvalidEvidenceTransition, transition_evidence
from app.core.config import get_settings
from app.core.logging import get_logger
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)

# target_type -> (table, foreign key column)
REQUIREMENT_SOURCES: dict[str, tuple[str, str]] = {
    "job": ("job_capability_requirements", "job_id"),
    "goal": ("goal_capability_requirements", "goal_id"),
    "role": ("role_capability_requirements", "role_id"),
}

EVIDENCE_TABLE = "competency_evidence"
SCALE_TABLE = "proficiency_scales"

REQUIREMENT_COLUMNS = (
    "capability_id, required_proficiency_level, weighting, is_required, "
    "skills_competencies(name)"
)
EVIDENCE_COLUMNS = (
    "id, employee_id, competency_id, proficiency_level, confidence_score, "
    "validation_status, effective_from, expires_at, evidence_source"
)


class CapabilityDataError(Exception):
    """Raised when capability data cannot be read or written."""


class EvidenceNotFoundError(CapabilityDataError):
    """Raised when an evidence record does not exist."""


# =============================================================================
# Row conversion
# =============================================================================


def _requirement_from_row(row: dict[str, Any]) -> CapabilityRequirement:
    capability = row.get("skills_competencies") or {}
    return CapabilityRequirement(
        capability_id=row.get("capability_id"),
        capability_name=capability.get("name") if isinstance(capability, dict) else None,
        required_level=row.get("required_proficiency_level"),
        is_mandatory=row.get("is_required"),
        weight=row.get("weighting"),
    )


def _evidence_from_row(row: dict[str, Any]) -> EvidenceRecord:
    return EvidenceRecord(
        id=row.get("id"),
        employee_id=row.get("employee_id"),
        capability_id=row.get("competency_id"),
        proficiency_level=row.get("proficiency_level"),
        confidence_score=row.get("confidence_score"),
        validation_status=row.get("validation_status"),
        effective_from=row.get("effective_from"),
        expires_at=row.get("expires_at"),
        source=row.get("evidence_source"),
    )


def _convert_rows(rows: list[dict[str, Any]], convert, kind: str) -> list:
    records = []
    for row in rows:
        try:
            records.append(convert(row))
        except (ValidationError, ValueError, TypeError, OverflowError) as e:
            logger.warning(f"Skipping malformed {kind} row {row.get('id', '<no id>')}: {e}")
    return records


# =============================================================================
# Reads
# =============================================================================


def fetch_requirements(target_id: UUID | str, target_type: str = "job") -> list[CapabilityRequirement]:
    """
    List capability requirements of a job, goal or role.

    Args:
        target_id: Job, goal or role id
        target_type: One of REQUIREMENT_SOURCES

    Returns:
        Requirements in configured order

    Raises:
        ValueError: If target_type is unknown
        CapabilityDataError: If the query fails
    """
    if target_type not in REQUIREMENT_SOURCES:
        raise ValueError(f"Unknown requirement target type: {target_type}")

    table, column = REQUIREMENT_SOURCES[target_type]
    supabase = get_supabase()

    try:
        response = (
            supabase.table(table)
            .select(REQUIREMENT_COLUMNS)
            .eq(column, str(target_id))
            .order("created_at")
            .execute()
        )
    except Exception as e:
        logger.exception(f"Failed to fetch requirements for {target_type} {target_id}")
        raise CapabilityDataError(f"Failed to fetch requirements for {target_type} {target_id}") from e

    requirements = _convert_rows(response.data or [], _requirement_from_row, "requirement")

    logger.info(
        f"Fetched {len(requirements)} requirements for {target_type} {target_id}",
        extra={"target_id": str(target_id)},
    )
    return requirements


def fetch_evidence(
    employee_id: UUID | str,
    capability_id: Optional[UUID | str] = None,
) -> list[EvidenceRecord]:
    """
    List evidence records for an employee, optionally for one capability.

    All statuses are returned; the aggregator decides what counts.

    Raises:
        CapabilityDataError: If the query fails
    """
    settings = get_settings()
    supabase = get_supabase()

    try:
        query = (
            supabase.table(EVIDENCE_TABLE)
            .select(EVIDENCE_COLUMNS)
            .eq("employee_id", str(employee_id))
        )
        if capability_id is not None:
            query = query.eq("competency_id", str(capability_id))
        # Highest levels first so a capped fetch keeps the best evidence
        response = (
            query.order("proficiency_level", desc=True)
            .limit(settings.MAX_EVIDENCE_ROWS)
            .execute()
        )
    except Exception as e:
        logger.exception(f"Failed to fetch evidence for employee {employee_id}")
        raise CapabilityDataError(f"Failed to fetch evidence for employee {employee_id}") from e

    rows = response.data or []
    if len(rows) >= settings.MAX_EVIDENCE_ROWS:
        logger.warning(
            f"Evidence fetch for employee {employee_id} hit the {settings.MAX_EVIDENCE_ROWS} row cap; "
            "lowest-level records were not loaded",
            extra={"employee_id": str(employee_id)},
        )

    records = _convert_rows(rows, _evidence_from_row, "evidence")

    logger.debug(
        f"Fetched {len(records)} evidence records",
        extra={"employee_id": str(employee_id)},
    )
    return records


def fetch_proficiency_scale(scale_id: Optional[UUID | str] = None) -> Optional[ProficiencyScale]:
    """
    Load a proficiency scale.

    Falls back to DEFAULT_SCALE_ID when no id is given. Returns None when no
    scale is configured or found; callers then use the built-in default.

    Raises:
        CapabilityDataError: If the query fails
    """
    scale_id = scale_id or get_settings().DEFAULT_SCALE_ID
    if not scale_id:
        return None

    supabase = get_supabase()
    try:
        response = (
            supabase.table(SCALE_TABLE)
            .select("id, name, levels")
            .eq("id", str(scale_id))
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception(f"Failed to fetch proficiency scale {scale_id}")
        raise CapabilityDataError(f"Failed to fetch proficiency scale {scale_id}") from e

    rows = response.data or []
    if not rows:
        logger.warning(f"Proficiency scale {scale_id} not found, using default scale")
        return None

    row = rows[0]
    return parse_scale_levels(row.get("levels"), scale_id=row.get("id"), name=row.get("name"))


# =============================================================================
# Writes
# =============================================================================


def update_evidence_status(evidence_id: UUID | str, target: ValidationStatus) -> EvidenceRecord:
    """
    Record a validation decision on an evidence record.

    Args:
        evidence_id: Evidence row id
        target: New status (validated, rejected or expired)

    Returns:
        The evidence record in its new state

    Raises:
        EvidenceNotFoundError: If the record does not exist
        InvalidEvidenceTransition: If the lifecycle forbids the change, or the
            status changed between the read and the write
        CapabilityDataError: If the read or write fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table(EVIDENCE_TABLE)
            .select(EVIDENCE_COLUMNS)
            .eq("id", str(evidence_id))
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception(f"Failed to fetch evidence {evidence_id}")
        raise CapabilityDataError(f"Failed to fetch evidence {evidence_id}") from e

    rows = response.data or []
    if not rows:
        raise EvidenceNotFoundError(f"Evidence {evidence_id} not found")

    current = _evidence_from_row(rows[0])
    stored_status = rows[0].get("validation_status")
    updated = transition_evidence(current, target)

    changes: dict[str, Any] = {"validation_status": updated.validation_status.value}
    if updated.validation_status == ValidationStatus.VALIDATED:
        changes["validated_at"] = datetime.now(UTC).isoformat()

    try:
        # Only applies if nobody changed the status since it was read
        query = supabase.table(EVIDENCE_TABLE).update(changes).eq("id", str(evidence_id))
        if stored_status is None:
            query = query.is_("validation_status", "null")
        else:
            query = query.eq("validation_status", stored_status)
        response = query.execute()
    except Exception as e:
        logger.exception(f"Failed to update evidence {evidence_id}")
        raise CapabilityDataError(f"Failed to update evidence {evidence_id}") from e

    if not response.data:
        raise InvalidEvidenceTransition(
            f"Evidence {evidence_id} is no longer {current.validation_status.value}; "
            f"cannot move it to {updated.validation_status.value}"
        )

    logger.info(
        f"Evidence {evidence_id} moved to {updated.validation_status.value}",
        extra={"employee_id": updated.employee_id},
    )
    return updated
