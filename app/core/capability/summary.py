"""Gap summary for dashboard widgets.

The readiness result carries every item; a summary widget only needs the
headline numbers and the few gaps most worth working on next.
"""

from typing import Optional

from pydantic import BaseModel, Field

from app.core.capability.types import GapCounts, GapItem, GapPriority, ReadinessResult

# Lower is more urgent
PRIORITY_RANK = {
    GapPriority.CRITICAL: 1,
    GapPriority.HIGH: 2,
    GapPriority.MEDIUM: 3,
    GapPriority.LOW: 4,
}


class ReadinessSummary(BaseModel):
    """Headline view of a readiness result."""

    overall_readiness: float = Field(..., ge=0, le=100, description="Rounded to 1 decimal")
    band_code: Optional[str] = None
    band_label: Optional[str] = None
    mandatory_satisfied: bool
    counts: GapCounts
    top_gaps: list[GapItem] = Field(default_factory=list, description="Most urgent open gaps")
    warning_count: int = 0


def select_top_gaps(items: list[GapItem], limit: int = 5) -> list[GapItem]:
    """
    Pick the open gaps to show first.

    Selection criteria:
    1. Priority (critical before low)
    2. Mandatory before optional
    3. Larger shortfall first
    """
    open_items = [item for item in items if item.priority is not None]

    ordered = sorted(
        open_items,
        key=lambda item: (
            PRIORITY_RANK.get(item.priority, len(PRIORITY_RANK) + 1),
            not item.is_mandatory,
            -item.gap,
        ),
    )
    return ordered[:limit]


def summarize_readiness(result: ReadinessResult, limit: int = 5) -> ReadinessSummary:
    """Build the summary widget payload for a readiness result."""
    return ReadinessSummary(
        overall_readiness=round(result.overall_readiness, 1),
        band_code=result.band.code if result.band else None,
        band_label=result.band.label if result.band else None,
        mandatory_satisfied=result.mandatory_satisfied,
        counts=result.counts,
        top_gaps=select_top_gaps(result.gaps, limit=limit),
        warning_count=len(result.warnings),
    )
