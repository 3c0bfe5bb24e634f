"""Pydantic models for capability readiness scoring.

Records entering the engine (evidence, requirements, scales) are closed,
validated shapes. Out-of-range numbers coming from the remote store are
clamped here, at the boundary, so the scoring code never has to deal with
optional or malformed values.
"""

import math
from datetime import date, datetime
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Boundary coercion helpers
# =============================================================================


def _coerce_id(value: Any) -> Any:
    """Accept UUIDs and ints for opaque identifiers."""
    if value is None or isinstance(value, str):
        return value
    return str(value)


def _clamp_level(value: Any) -> int:
    """Truncate to int and clamp to >= 0. None, NaN and infinities mean no level."""
    if value is None:
        return 0
    number = float(value)
    if not math.isfinite(number):
        return 0
    return max(0, int(number))


def _clamp_unit(value: Any) -> float:
    """Clamp a confidence-like value into [0, 1]. None, NaN and infinities mean no confidence."""
    if value is None:
        return 0.0
    number = float(value)
    if not math.isfinite(number):
        return 0.0
    return min(1.0, max(0.0, number))


def _coerce_date(value: Any) -> Any:
    """Accept datetimes and ISO timestamps where a date is expected."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        return value[:10]
    return value


# =============================================================================
# Proficiency scales
# =============================================================================


class ProficiencyLevel(BaseModel):
    """One named level of a proficiency scale."""

    level: int = Field(..., ge=1, description="Level number (1..N)")
    name: str = Field(..., description="Display name (e.g., 'Expert')")
    description: Optional[str] = Field(None, description="What this level looks like")


class ProficiencyScale(BaseModel):
    """An ordered set of proficiency levels for a capability."""

    id: Optional[str] = Field(None, description="Scale identifier")
    name: Optional[str] = Field(None, description="Scale display name")
    levels: list[ProficiencyLevel] = Field(
        default_factory=list, description="Levels, unique by number, ascending"
    )

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return _coerce_id(v)

    @field_validator("levels", mode="before")
    @classmethod
    def normalize_levels(cls, v: Any) -> list[Any]:
        """Drop non-positive levels, keep the first of duplicates, sort ascending."""
        if not v:
            return []
        seen: dict[int, Any] = {}
        for entry in v:
            if isinstance(entry, ProficiencyLevel):
                raw_level = entry.level
            elif isinstance(entry, dict):
                raw_level = entry.get("level")
            else:
                continue
            try:
                level = int(raw_level)
            except (TypeError, ValueError):
                continue
            if level < 1 or level in seen:
                continue
            seen[level] = entry
        return [seen[level] for level in sorted(seen)]


# =============================================================================
# Evidence
# =============================================================================


class ValidationStatus(str, Enum):
    """Lifecycle state of an evidence record."""

    PENDING = "pending"
    VALIDATED = "validated"
    REJECTED = "rejected"
    EXPIRED = "expired"


class EvidenceSource(str, Enum):
    """Action that produced an evidence record."""

    SELF_DECLARATION = "self_declaration"
    MANAGER_ASSESSMENT = "manager_assessment"
    TRAINING_COMPLETION = "training_completion"
    CERTIFICATION = "certification"
    AI_INFERENCE = "ai_inference"
    PEER_FEEDBACK = "peer_feedback"
    PROJECT_DELIVERY = "project_delivery"
    OTHER = "other"


class EvidenceRecord(BaseModel):
    """A sourced claim about an employee's level in one capability.

    Records are never mutated; a status change produces a new record.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = Field(None, description="Evidence row id")
    employee_id: str = Field(..., description="Employee the evidence is about")
    capability_id: str = Field(..., description="Capability the evidence is for")
    proficiency_level: int = Field(default=0, ge=0, description="Demonstrated level")
    confidence_score: float = Field(
        default=0.0, ge=0.0, le=1.0, description="Trust in this evidence (0.0-1.0)"
    )
    validation_status: ValidationStatus = Field(
        default=ValidationStatus.PENDING, description="Validation lifecycle state"
    )
    effective_from: Optional[date] = Field(None, description="When the evidence applies from")
    expires_at: Optional[date] = Field(None, description="When the evidence lapses")
    source: EvidenceSource = Field(
        default=EvidenceSource.OTHER, description="What produced the evidence"
    )

    @field_validator("id", "employee_id", "capability_id", mode="before")
    @classmethod
    def coerce_ids(cls, v: Any) -> Any:
        return _coerce_id(v)

    @field_validator("effective_from", "expires_at", mode="before")
    @classmethod
    def coerce_dates(cls, v: Any) -> Any:
        return _coerce_date(v)

    @field_validator("proficiency_level", mode="before")
    @classmethod
    def clamp_level(cls, v: Any) -> int:
        return _clamp_level(v)

    @field_validator("confidence_score", mode="before")
    @classmethod
    def clamp_confidence(cls, v: Any) -> float:
        return _clamp_unit(v)

    @field_validator("validation_status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        if v is None:
            return ValidationStatus.PENDING
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("source", mode="before")
    @classmethod
    def normalize_source(cls, v: Any) -> EvidenceSource:
        """Unknown sources are kept as 'other' rather than rejected."""
        if isinstance(v, EvidenceSource):
            return v
        try:
            return EvidenceSource(str(v).strip().lower())
        except ValueError:
            return EvidenceSource.OTHER


class AggregatedEvidence(BaseModel):
    """Evidence for one employee/capability pair reduced to a single value."""

    current_level: int = Field(default=0, ge=0, description="Best surviving level, 0 if none")
    evidence_count: int = Field(default=0, ge=0, description="Number of surviving records")
    avg_confidence: float = Field(
        default=0.0, ge=0.0, le=1.0, description="Mean confidence of surviving records"
    )


# =============================================================================
# Requirements and gaps
# =============================================================================


class CapabilityRequirement(BaseModel):
    """A level a job, role or goal requires in one capability."""

    capability_id: str = Field(..., description="Required capability")
    capability_name: Optional[str] = Field(None, description="Display name")
    required_level: int = Field(default=0, ge=0, description="Target level")
    is_mandatory: bool = Field(default=True, description="Must-have vs nice-to-have")
    weight: float = Field(default=1.0, ge=0.0, description="Relative weight")

    @field_validator("capability_id", mode="before")
    @classmethod
    def coerce_capability_id(cls, v: Any) -> Any:
        return _coerce_id(v)

    @field_validator("required_level", mode="before")
    @classmethod
    def clamp_required_level(cls, v: Any) -> int:
        return _clamp_level(v)

    @field_validator("is_mandatory", mode="before")
    @classmethod
    def default_mandatory(cls, v: Any) -> Any:
        return True if v is None else v

    @field_validator("weight", mode="before")
    @classmethod
    def clamp_weight(cls, v: Any) -> float:
        if v is None:
            return 1.0
        number = float(v)
        # NaN and infinite weights would poison the weighted average
        if not math.isfinite(number):
            return 0.0
        return max(0.0, number)


class GapStatus(str, Enum):
    """How a current level compares to a required level."""

    MISSING = "missing"  # No surviving evidence at all
    GAP = "gap"  # Below the required level
    MEETS = "meets"  # Exactly at the required level
    EXCEEDS = "exceeds"  # Above the required level


class GapPriority(str, Enum):
    """Development priority for an open gap."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class GapItem(BaseModel):
    """One requirement compared against the employee's current level."""

    capability_id: str
    capability_name: Optional[str] = None
    required_level: int = Field(..., ge=0)
    current_level: int = Field(..., ge=0)
    gap: int = Field(..., description="required_level - current_level")
    gap_percentage: float = Field(
        ..., ge=0, le=100, description="Progress toward the required level, capped at 100"
    )
    status: GapStatus
    is_mandatory: bool
    weight: float = Field(..., ge=0)
    priority: Optional[GapPriority] = Field(None, description="Set for open gaps only")
    evidence_count: int = Field(default=0, ge=0)
    avg_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    required_level_name: Optional[str] = None
    current_level_name: Optional[str] = None


class DataQualityWarning(BaseModel):
    """Non-fatal data problem noticed while scoring."""

    code: str = Field(..., description="Machine-readable warning code")
    capability_id: Optional[str] = Field(None, description="Capability concerned, if any")
    message: str = Field(..., description="Human-readable explanation")


# =============================================================================
# Readiness results
# =============================================================================


class ReadinessBand(BaseModel):
    """A named readiness range (e.g., 'Ready Now' for 85-100%)."""

    code: str
    label: str
    min_percentage: float = Field(..., ge=0, le=100)
    max_percentage: float = Field(..., ge=0, le=100)
    successor_eligible: Literal["eligible", "conditional", "not_eligible"] = "eligible"
    description: Optional[str] = None


class GapCounts(BaseModel):
    """Number of gap items per status."""

    total: int = 0
    missing: int = 0
    gap: int = 0
    meets: int = 0
    exceeds: int = 0


class ReadinessResult(BaseModel):
    """Complete readiness assessment of one employee against one target."""

    gaps: list[GapItem] = Field(
        default_factory=list, description="All items, mandatory first then by largest gap"
    )
    overall_readiness: float = Field(
        default=0.0, ge=0, le=100, description="Weighted readiness percentage"
    )
    mandatory_gaps: list[GapItem] = Field(default_factory=list)
    optional_gaps: list[GapItem] = Field(default_factory=list)
    strengths: list[GapItem] = Field(default_factory=list)
    missing_capabilities: list[GapItem] = Field(default_factory=list)

    band: Optional[ReadinessBand] = Field(None, description="Readiness band for the score")
    mandatory_satisfied: bool = Field(
        default=True, description="No mandatory requirement is missing or short"
    )
    counts: GapCounts = Field(default_factory=GapCounts)
    warnings: list[DataQualityWarning] = Field(default_factory=list)

    computed_at: datetime = Field(
        default_factory=datetime.utcnow, description="When the result was computed"
    )
