"""Readiness bands.

Maps an overall readiness percentage onto a named band (the succession
"Ready Now / Ready 1-3 Years / ..." model). Organizations may rename or
re-range bands; ``validate_bands`` checks a custom table before use.
"""

from collections.abc import Sequence
from typing import Optional

from app.core.capability.types import ReadinessBand

DEFAULT_READINESS_BANDS: tuple[ReadinessBand, ...] = (
    ReadinessBand(
        code="ready_now",
        label="Ready Now",
        min_percentage=85,
        max_percentage=100,
        successor_eligible="eligible",
        description="Can assume role within 0-12 months",
    ),
    ReadinessBand(
        code="ready_1_3_years",
        label="Ready 1-3 Years",
        min_percentage=70,
        max_percentage=84,
        successor_eligible="eligible",
        description="Strong candidate requiring targeted development",
    ),
    ReadinessBand(
        code="ready_3_5_years",
        label="Ready 3-5 Years",
        min_percentage=55,
        max_percentage=69,
        successor_eligible="eligible",
        description="Long-term pipeline with foundational gaps",
    ),
    ReadinessBand(
        code="developing",
        label="Developing",
        min_percentage=40,
        max_percentage=54,
        successor_eligible="conditional",
        description="Early career or significant gaps to close",
    ),
    ReadinessBand(
        code="not_a_successor",
        label="Not a Successor",
        min_percentage=0,
        max_percentage=39,
        successor_eligible="not_eligible",
        description="Not suitable for this succession path",
    ),
)

MIN_BAND_COUNT = 3

# Bands are defined on whole percentages; 84 -> 85 is contiguous.
_CONTIGUITY_TOLERANCE = 1


def assign_readiness_band(
    score: float,
    bands: Sequence[ReadinessBand] = DEFAULT_READINESS_BANDS,
) -> Optional[ReadinessBand]:
    """
    Find the band for a readiness score.

    Fractional scores between whole-number bands (e.g., 84.6) belong to the
    lower band: the band chosen is the one with the highest minimum that
    does not exceed the score.

    Args:
        score: Overall readiness percentage (0-100)
        bands: Band table to use

    Returns:
        The matching band, or None if the score is below every band
    """
    candidates = [b for b in bands if b.min_percentage <= score]
    if not candidates:
        return None
    return max(candidates, key=lambda b: b.min_percentage)


def validate_bands(bands: Sequence[ReadinessBand]) -> list[str]:
    """
    Check a band table for coverage and overlap problems.

    Returns:
        List of human-readable problems (empty when the table is valid)
    """
    problems: list[str] = []

    if len(bands) < MIN_BAND_COUNT:
        problems.append(f"At least {MIN_BAND_COUNT} bands required, got {len(bands)}")

    for band in bands:
        if band.min_percentage > band.max_percentage:
            problems.append(
                f"Band '{band.label}' has min {band.min_percentage:g} above max {band.max_percentage:g}"
            )

    if not bands:
        return problems

    ordered = sorted(bands, key=lambda b: b.min_percentage)

    if ordered[0].min_percentage > 0:
        problems.append(f"Bands do not cover 0-{ordered[0].min_percentage:g}")
    if ordered[-1].max_percentage < 100:
        problems.append(f"Bands do not cover {ordered[-1].max_percentage:g}-100")

    for lower, upper in zip(ordered, ordered[1:]):
        if upper.min_percentage <= lower.max_percentage:
            problems.append(f"Bands '{lower.label}' and '{upper.label}' overlap")
        elif upper.min_percentage - lower.max_percentage > _CONTIGUITY_TOLERANCE:
            problems.append(
                f"Gap between '{lower.label}' ({lower.max_percentage:g}) "
                f"and '{upper.label}' ({upper.min_percentage:g})"
            )

    return problems
