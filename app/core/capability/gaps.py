"""Gap classification for a single capability requirement."""

from collections.abc import Iterator
from typing import Optional

from app.core.capability.scale import DEFAULT_PROFICIENCY_SCALE, get_level_label
from app.core.capability.types import (
    AggregatedEvidence,
    CapabilityRequirement,
    DataQualityWarning,
    GapItem,
    GapPriority,
    GapStatus,
    ProficiencyScale,
)

# Shortfall (in levels) at which a gap is treated as severe
SEVERE_GAP_LEVELS = 2


def gap_percentage(current_level: int, required_level: int) -> float:
    """
    Progress toward the required level, capped at 100.

    A requirement with no positive level is trivially satisfied (100).
    """
    if required_level <= 0:
        return 100.0
    return min(100.0, max(0.0, current_level / required_level * 100))


def classify_status(current_level: int, required_level: int) -> GapStatus:
    """Status of a current level against a required level."""
    gap = required_level - current_level
    if current_level == 0:
        return GapStatus.MISSING
    if gap > 0:
        return GapStatus.GAP
    if gap < 0:
        return GapStatus.EXCEEDS
    return GapStatus.MEETS


def gap_priority(status: GapStatus, gap: int, is_mandatory: bool) -> Optional[GapPriority]:
    """Development priority for an open gap; None when the requirement is met."""
    if status in (GapStatus.MEETS, GapStatus.EXCEEDS) or gap <= 0:
        return None

    severe = status == GapStatus.MISSING or gap >= SEVERE_GAP_LEVELS
    if is_mandatory:
        return GapPriority.CRITICAL if severe else GapPriority.HIGH
    return GapPriority.MEDIUM if severe else GapPriority.LOW


def classify_gap(
    requirement: CapabilityRequirement,
    current_level: int,
    *,
    evidence: Optional[AggregatedEvidence] = None,
    scale: Optional[ProficiencyScale] = None,
    default_scale: ProficiencyScale = DEFAULT_PROFICIENCY_SCALE,
) -> GapItem:
    """
    Compare one requirement against the employee's current level.

    Args:
        requirement: The capability requirement
        current_level: Aggregated level, 0 when no evidence survives
        evidence: Aggregation the level came from (adds count/confidence)
        scale: Capability scale used for level names
        default_scale: Fallback scale for level names

    Returns:
        GapItem with gap, progress percentage, status and priority
    """
    current_level = max(0, int(current_level))
    required_level = requirement.required_level
    gap = required_level - current_level
    status = classify_status(current_level, required_level)

    return GapItem(
        capability_id=requirement.capability_id,
        capability_name=requirement.capability_name,
        required_level=required_level,
        current_level=current_level,
        gap=gap,
        gap_percentage=gap_percentage(current_level, required_level),
        status=status,
        is_mandatory=requirement.is_mandatory,
        weight=requirement.weight,
        priority=gap_priority(status, gap, requirement.is_mandatory),
        evidence_count=evidence.evidence_count if evidence else 0,
        avg_confidence=evidence.avg_confidence if evidence else 0.0,
        required_level_name=(
            get_level_label(required_level, scale, default_scale).name
            if required_level > 0
            else None
        ),
        current_level_name=(
            get_level_label(current_level, scale, default_scale).name
            if current_level > 0
            else None
        ),
    )


def requirement_warnings(requirement: CapabilityRequirement) -> Iterator[DataQualityWarning]:
    """Yield data-quality warnings for a requirement."""
    if requirement.required_level <= 0:
        yield DataQualityWarning(
            code="non_positive_required_level",
            capability_id=requirement.capability_id,
            message=(
                f"Requirement for {requirement.capability_name or requirement.capability_id} "
                "has no positive required level; treated as satisfied"
            ),
        )
