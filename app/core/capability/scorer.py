"""Readiness scoring across all requirements of a target.

This module orchestrates scoring by:
1. Aggregating each capability's evidence
2. Classifying each requirement's gap
3. Ordering and partitioning the gap items
4. Computing the weighted overall readiness and its band

Everything here is a pure function of its arguments. Results are always
computed fresh (no caching).
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Optional

from app.core.capability.bands import DEFAULT_READINESS_BANDS, assign_readiness_band
from app.core.capability.evidence import aggregate_evidence
from app.core.capability.gaps import classify_gap, requirement_warnings
from app.core.capability.scale import DEFAULT_PROFICIENCY_SCALE
from app.core.capability.types import (
    AggregatedEvidence,
    CapabilityRequirement,
    DataQualityWarning,
    EvidenceRecord,
    GapCounts,
    GapItem,
    GapStatus,
    ProficiencyScale,
    ReadinessBand,
    ReadinessResult,
)
from app.core.capability.validation import today_utc
from app.core.logging import get_logger, log_with_context

logger = get_logger(__name__)

_NO_EVIDENCE = AggregatedEvidence()


def sort_gap_items(items: Sequence[GapItem]) -> list[GapItem]:
    """Mandatory first, then largest shortfall first. Ties keep input order."""
    return sorted(items, key=lambda item: (not item.is_mandatory, -item.gap))


def item_score(item: GapItem) -> float:
    """Fraction of one requirement satisfied, capped at full credit."""
    return min(1.0, item.current_level / max(1, item.required_level))


def overall_readiness(items: Sequence[GapItem]) -> float:
    """
    Weighted readiness percentage.

    Each item contributes at most its full weight, so over-qualification on
    one capability cannot make up for shortfalls elsewhere.
    """
    total_weight = sum(item.weight for item in items)
    if total_weight <= 0:
        return 0.0

    weighted_score = sum(item_score(item) * item.weight for item in items)
    return min(100.0, max(0.0, weighted_score / total_weight * 100))


def partition_gaps(
    items: Sequence[GapItem],
) -> tuple[list[GapItem], list[GapItem], list[GapItem], list[GapItem]]:
    """
    Split gap items into (mandatory_gaps, optional_gaps, strengths, missing).

    Missing items also have a positive gap but are reported only as
    missing, so every item lands in exactly one list.
    """
    mandatory_gaps: list[GapItem] = []
    optional_gaps: list[GapItem] = []
    strengths: list[GapItem] = []
    missing: list[GapItem] = []

    for item in items:
        if item.status == GapStatus.MISSING:
            missing.append(item)
        elif item.status in (GapStatus.MEETS, GapStatus.EXCEEDS):
            strengths.append(item)
        elif item.gap > 0 and item.is_mandatory:
            mandatory_gaps.append(item)
        elif item.gap > 0:
            optional_gaps.append(item)

    return mandatory_gaps, optional_gaps, strengths, missing


def count_statuses(items: Sequence[GapItem]) -> GapCounts:
    """Count gap items per status."""
    return GapCounts(
        total=len(items),
        missing=sum(1 for i in items if i.status == GapStatus.MISSING),
        gap=sum(1 for i in items if i.status == GapStatus.GAP),
        meets=sum(1 for i in items if i.status == GapStatus.MEETS),
        exceeds=sum(1 for i in items if i.status == GapStatus.EXCEEDS),
    )


def score_requirements(
    requirements: Sequence[CapabilityRequirement],
    aggregated: Mapping[str, AggregatedEvidence],
    scale: Optional[ProficiencyScale] = None,
    *,
    default_scale: ProficiencyScale = DEFAULT_PROFICIENCY_SCALE,
    bands: Sequence[ReadinessBand] = DEFAULT_READINESS_BANDS,
) -> ReadinessResult:
    """
    Score requirements against already-aggregated evidence.

    Args:
        requirements: Requirements of the target, in configured order
        aggregated: Capability id -> aggregated evidence (absent = none)
        scale: Scale used for level names
        default_scale: Fallback scale for level names
        bands: Band table used to label the overall score

    Returns:
        ReadinessResult with ordered gaps, partitions, score and warnings
    """
    warnings: list[DataQualityWarning] = []
    items: list[GapItem] = []

    for requirement in requirements:
        evidence = aggregated.get(requirement.capability_id, _NO_EVIDENCE)
        items.append(
            classify_gap(
                requirement,
                evidence.current_level,
                evidence=evidence,
                scale=scale,
                default_scale=default_scale,
            )
        )
        warnings.extend(requirement_warnings(requirement))

    for warning in warnings:
        log_with_context(
            logger,
            logging.WARNING,
            warning.message,
            code=warning.code,
            capability_id=warning.capability_id,
        )

    gaps = sort_gap_items(items)
    mandatory_gaps, optional_gaps, strengths, missing = partition_gaps(gaps)
    score = overall_readiness(gaps)

    mandatory_satisfied = not mandatory_gaps and not any(
        item.is_mandatory and item.gap > 0 for item in missing
    )

    logger.debug(
        f"Scored {len(gaps)} requirements: readiness={score:.1f}, "
        f"mandatory_gaps={len(mandatory_gaps)}, optional_gaps={len(optional_gaps)}, "
        f"missing={len(missing)}, strengths={len(strengths)}"
    )

    return ReadinessResult(
        gaps=gaps,
        overall_readiness=score,
        mandatory_gaps=mandatory_gaps,
        optional_gaps=optional_gaps,
        strengths=strengths,
        missing_capabilities=missing,
        band=assign_readiness_band(score, bands),
        mandatory_satisfied=mandatory_satisfied,
        counts=count_statuses(gaps),
        warnings=warnings,
        computed_at=datetime.utcnow(),
    )


def compute_readiness(
    requirements: Sequence[CapabilityRequirement],
    evidence_by_capability: Mapping[str, Sequence[EvidenceRecord]],
    scale: Optional[ProficiencyScale] = None,
    *,
    as_of: Optional[date] = None,
    default_scale: ProficiencyScale = DEFAULT_PROFICIENCY_SCALE,
    bands: Sequence[ReadinessBand] = DEFAULT_READINESS_BANDS,
) -> ReadinessResult:
    """
    Compute readiness of one employee against a target's requirements.

    This is the main entry point for readiness assessment.

    Args:
        requirements: Requirements of the job, role or goal
        evidence_by_capability: Capability id -> that capability's evidence
        scale: Scale used for level names
        as_of: Date used for evidence expiry (defaults to today, UTC)
        default_scale: Fallback scale for level names
        bands: Band table used to label the overall score

    Returns:
        ReadinessResult with full breakdown
    """
    as_of = as_of or today_utc()

    aggregated = {
        requirement.capability_id: aggregate_evidence(
            evidence_by_capability.get(requirement.capability_id) or (), as_of
        )
        for requirement in requirements
    }

    return score_requirements(
        requirements,
        aggregated,
        scale,
        default_scale=default_scale,
        bands=bands,
    )
