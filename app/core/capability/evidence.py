"""Evidence aggregation.

Reduces every evidence record for one employee/capability pair to a single
current level. The policy is best-evidence-wins: the highest surviving
level counts, regardless of which record is most recent.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date
from typing import Optional

from app.core.capability.types import AggregatedEvidence, EvidenceRecord
from app.core.capability.validation import is_live, today_utc


def live_evidence(
    records: Iterable[EvidenceRecord],
    as_of: Optional[date] = None,
) -> tuple[EvidenceRecord, ...]:
    """Drop rejected and expired records."""
    as_of = as_of or today_utc()
    return tuple(r for r in records if is_live(r, as_of))


def average_confidence(
    records: Iterable[EvidenceRecord],
    as_of: Optional[date] = None,
) -> float:
    """Mean confidence of live records, 0.0 when there are none."""
    survivors = live_evidence(records, as_of)
    if not survivors:
        return 0.0
    return sum(r.confidence_score for r in survivors) / len(survivors)


def aggregate_evidence(
    records: Iterable[EvidenceRecord],
    as_of: Optional[date] = None,
) -> AggregatedEvidence:
    """
    Aggregate evidence for one employee/capability pair.

    Args:
        records: All evidence for the pair, in any order and any status
        as_of: Date used for expiry checks (defaults to today, UTC)

    Returns:
        AggregatedEvidence with the best level, survivor count and mean
        confidence. No surviving evidence gives level 0, count 0.
    """
    survivors = live_evidence(records, as_of)
    if not survivors:
        return AggregatedEvidence()

    return AggregatedEvidence(
        current_level=max(r.proficiency_level for r in survivors),
        evidence_count=len(survivors),
        avg_confidence=sum(r.confidence_score for r in survivors) / len(survivors),
    )


def aggregate_evidence_by_capability(
    records: Iterable[EvidenceRecord],
    as_of: Optional[date] = None,
) -> dict[str, AggregatedEvidence]:
    """Group a mixed list of records by capability and aggregate each group."""
    as_of = as_of or today_utc()
    return {
        capability_id: aggregate_evidence(group, as_of)
        for capability_id, group in group_evidence_by_capability(records).items()
    }


def group_evidence_by_capability(
    records: Iterable[EvidenceRecord],
) -> dict[str, list[EvidenceRecord]]:
    """Split records into per-capability lists, keeping input order."""
    grouped: dict[str, list[EvidenceRecord]] = defaultdict(list)
    for record in records:
        grouped[record.capability_id].append(record)
    return dict(grouped)
