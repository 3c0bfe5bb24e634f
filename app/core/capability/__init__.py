"""Capability readiness and gap scoring.

Turns a target's capability requirements and an employee's evidence into
gap classifications, a weighted readiness percentage and a prioritized
list of gaps.

Usage:
    from app.core.capability import compute_readiness

    result = compute_readiness(requirements, evidence_by_capability)
    print(f"{result.overall_readiness:.1f}% ({result.band.label})")
"""

from app.core.capability.bands import (
    DEFAULT_READINESS_BANDS,
    assign_readiness_band,
    validate_bands,
)
from app.core.capability.evidence import (
    aggregate_evidence,
    aggregate_evidence_by_capability,
    average_confidence,
)
from app.core.capability.gaps import classify_gap, gap_percentage
from app.core.capability.scale import DEFAULT_PROFICIENCY_SCALE, get_level_label
from app.core.capability.scorer import compute_readiness, score_requirements
from app.core.capability.summary import ReadinessSummary, summarize_readiness
from app.core.capability.types import (
    AggregatedEvidence,
    CapabilityRequirement,
    DataQualityWarning,
    EvidenceRecord,
    EvidenceSource,
    GapItem,
    GapPriority,
    GapStatus,
    ProficiencyLevel,
    ProficiencyScale,
    ReadinessBand,
    ReadinessResult,
    ValidationStatus,
)
from app.core.capability.validation import InvalidEvidenceTransition, transition_evidence

__all__ = [
    "compute_readiness",
    "score_requirements",
    "aggregate_evidence",
    "aggregate_evidence_by_capability",
    "average_confidence",
    "classify_gap",
    "gap_percentage",
    "get_level_label",
    "assign_readiness_band",
    "validate_bands",
    "summarize_readiness",
    "transition_evidence",
    "InvalidEvidenceTransition",
    "AggregatedEvidence",
    "CapabilityRequirement",
    "DataQualityWarning",
    "EvidenceRecord",
    "EvidenceSource",
    "GapItem",
    "GapPriority",
    "GapStatus",
    "ProficiencyLevel",
    "ProficiencyScale",
    "ReadinessBand",
    "ReadinessResult",
    "ReadinessSummary",
    "ValidationStatus",
    "DEFAULT_PROFICIENCY_SCALE",
    "DEFAULT_READINESS_BANDS",
]
