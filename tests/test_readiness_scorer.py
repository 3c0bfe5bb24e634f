"""Tests for readiness scoring across a target's requirements.

Tests coverage:
- compute_readiness() end-to-end scenarios (missing, rejected, weighted, expired)
- Ordering: mandatory first, larger gaps first, stable ties
- Partitions: each item lands in exactly one bucket
- Overall readiness bounds and zero-weight handling
- Data-quality warnings for ill-formed requirements
"""

from datetime import date

import pytest

from app.core.capability.scorer import (
    compute_readiness,
    overall_readiness,
    score_requirements,
    sort_gap_items,
)
from app.core.capability.types import AggregatedEvidence, GapStatus, ValidationStatus


def _levels(**levels: int) -> dict[str, AggregatedEvidence]:
    return {
        capability_id: AggregatedEvidence(current_level=level, evidence_count=1 if level else 0)
        for capability_id, level in levels.items()
    }


# =============================================================================
# End-to-end scenarios
# =============================================================================


class TestScenarios:
    def test_missing_mandatory_capability(self, make_requirement, as_of):
        requirement = make_requirement("sql", required_level=3, weight=10, is_mandatory=True)

        result = compute_readiness([requirement], {}, as_of=as_of)

        item = result.gaps[0]
        assert item.status == GapStatus.MISSING
        assert item.gap_percentage == 0
        assert result.missing_capabilities == [item]
        assert result.mandatory_gaps == []
        assert result.overall_readiness == 0
        assert result.mandatory_satisfied is False

    def test_rejected_evidence_ignored(self, make_requirement, make_evidence, as_of):
        requirement = make_requirement("sql", required_level=4, weight=5)
        evidence = [
            make_evidence(2, status=ValidationStatus.VALIDATED, capability_id="sql"),
            make_evidence(5, status=ValidationStatus.REJECTED, capability_id="sql"),
        ]

        result = compute_readiness([requirement], {"sql": evidence}, as_of=as_of)

        item = result.gaps[0]
        assert item.current_level == 2
        assert item.gap == 2
        assert item.status == GapStatus.GAP
        assert item.gap_percentage == 50
        assert result.mandatory_gaps == [item]

    def test_weighted_readiness_caps_over_qualification(self, make_requirement, make_evidence, as_of):
        requirements = [
            make_requirement("sql", required_level=3, weight=10, is_mandatory=True),
            make_requirement("python", required_level=2, weight=10, is_mandatory=False),
        ]
        evidence = {"sql": [make_evidence(5, capability_id="sql")]}

        result = compute_readiness(requirements, evidence, as_of=as_of)

        assert result.overall_readiness == pytest.approx(50.0)
        assert [i.capability_id for i in result.strengths] == ["sql"]
        assert [i.capability_id for i in result.missing_capabilities] == ["python"]

    def test_expired_evidence_excluded_like_rejected(self, make_requirement, make_evidence, as_of):
        requirement = make_requirement("sql", required_level=3)
        expired = make_evidence(
            4, status=ValidationStatus.VALIDATED, capability_id="sql", expires_at=date(2025, 5, 1)
        )
        rejected = make_evidence(4, status=ValidationStatus.REJECTED, capability_id="sql")

        with_expired = compute_readiness([requirement], {"sql": [expired]}, as_of=as_of)
        with_rejected = compute_readiness([requirement], {"sql": [rejected]}, as_of=as_of)

        assert with_expired.gaps[0].status == GapStatus.MISSING
        assert with_expired.gaps[0].model_dump(exclude={"computed_at"}) == with_rejected.gaps[
            0
        ].model_dump(exclude={"computed_at"})
        assert with_expired.overall_readiness == with_rejected.overall_readiness == 0


# =============================================================================
# Ordering
# =============================================================================


class TestOrdering:
    def test_mandatory_first_then_largest_gap(self, make_requirement):
        requirements = [
            make_requirement("opt-small", required_level=2, is_mandatory=False),
            make_requirement("man-small", required_level=2),
            make_requirement("man-large", required_level=5),
            make_requirement("opt-large", required_level=4, is_mandatory=False),
            make_requirement("man-meets", required_level=1),
            make_requirement("man-exceeds", required_level=1),
        ]
        aggregated = _levels(
            **{
                "opt-small": 1,
                "man-small": 1,
                "man-large": 1,
                "opt-large": 1,
                "man-meets": 1,
                "man-exceeds": 3,
            }
        )

        result = score_requirements(requirements, aggregated)

        assert [i.capability_id for i in result.gaps] == [
            "man-large",
            "man-small",
            "man-meets",
            "man-exceeds",
            "opt-large",
            "opt-small",
        ]

    def test_ties_keep_input_order(self, make_requirement):
        requirements = [
            make_requirement("b", required_level=3),
            make_requirement("a", required_level=3),
            make_requirement("c", required_level=3),
        ]
        result = score_requirements(requirements, _levels(a=1, b=1, c=1))
        assert [i.capability_id for i in result.gaps] == ["b", "a", "c"]

    def test_mandatory_gaps_before_optional_gaps(self, make_requirement):
        requirements = [
            make_requirement(f"cap-{n}", required_level=n % 5 + 1, is_mandatory=n % 2 == 0)
            for n in range(10)
        ]
        result = score_requirements(requirements, _levels(**{f"cap-{n}": 1 for n in range(10)}))

        open_items = [i for i in result.gaps if i.gap > 0]
        flags = [i.is_mandatory for i in open_items]
        assert flags == sorted(flags, reverse=True)
        for group in (True, False):
            gaps = [i.gap for i in open_items if i.is_mandatory is group]
            assert gaps == sorted(gaps, reverse=True)

    def test_sort_gap_items_does_not_mutate_input(self, make_requirement):
        result = score_requirements([make_requirement("x", 2)], _levels(x=1))
        items = list(result.gaps)
        sort_gap_items(items)
        assert items == result.gaps


# =============================================================================
# Partitions
# =============================================================================


class TestPartitions:
    def test_every_item_in_exactly_one_partition(self, make_requirement):
        requirements = [
            make_requirement("missing-m", required_level=3),
            make_requirement("missing-o", required_level=3, is_mandatory=False),
            make_requirement("gap-m", required_level=3),
            make_requirement("gap-o", required_level=3, is_mandatory=False),
            make_requirement("meets", required_level=2),
            make_requirement("exceeds", required_level=1, is_mandatory=False),
        ]
        aggregated = _levels(**{"gap-m": 1, "gap-o": 2, "meets": 2, "exceeds": 4})

        result = score_requirements(requirements, aggregated)

        partitions = [
            result.mandatory_gaps,
            result.optional_gaps,
            result.strengths,
            result.missing_capabilities,
        ]
        for item in result.gaps:
            assert sum(item in partition for partition in partitions) == 1

        assert [i.capability_id for i in result.mandatory_gaps] == ["gap-m"]
        assert [i.capability_id for i in result.optional_gaps] == ["gap-o"]
        assert {i.capability_id for i in result.strengths} == {"meets", "exceeds"}
        assert {i.capability_id for i in result.missing_capabilities} == {"missing-m", "missing-o"}

        assert result.counts.total == 6
        assert result.counts.missing == 2
        assert result.counts.gap == 2
        assert result.counts.meets == 1
        assert result.counts.exceeds == 1

    def test_mandatory_satisfied_when_only_optional_gaps(self, make_requirement):
        requirements = [
            make_requirement("core", required_level=2),
            make_requirement("extra", required_level=4, is_mandatory=False),
        ]
        result = score_requirements(requirements, _levels(core=3, extra=1))
        assert result.mandatory_satisfied is True


# =============================================================================
# Overall readiness
# =============================================================================


class TestOverallReadiness:
    def test_empty_requirements(self):
        result = score_requirements([], {})

        assert result.overall_readiness == 0
        assert result.gaps == []
        assert result.mandatory_gaps == result.optional_gaps == []
        assert result.strengths == result.missing_capabilities == []
        assert result.counts.total == 0

    def test_zero_total_weight_scores_zero(self, make_requirement):
        requirements = [
            make_requirement("a", required_level=2, weight=0),
            make_requirement("b", required_level=2, weight=0),
        ]
        result = score_requirements(requirements, _levels(a=2, b=2))
        assert result.overall_readiness == 0

    def test_weights_are_relative(self, make_requirement):
        requirements = [
            make_requirement("a", required_level=4, weight=3),
            make_requirement("b", required_level=4, weight=1),
        ]
        result = score_requirements(requirements, _levels(a=4, b=2))
        # (1.0*3 + 0.5*1) / 4 = 0.875
        assert result.overall_readiness == pytest.approx(87.5)
        assert overall_readiness(result.gaps) == pytest.approx(87.5)

    def test_readiness_bounded(self, make_requirement):
        for current in range(0, 8):
            requirements = [
                make_requirement("a", required_level=3, weight=2),
                make_requirement("b", required_level=1, weight=0.5),
            ]
            result = score_requirements(requirements, _levels(a=current, b=current))
            assert 0 <= result.overall_readiness <= 100

    def test_band_assigned(self, make_requirement):
        result = score_requirements([make_requirement("a", required_level=2)], _levels(a=2))
        assert result.overall_readiness == 100
        assert result.band is not None
        assert result.band.code == "ready_now"


# =============================================================================
# Data quality
# =============================================================================


class TestDataQuality:
    def test_zero_required_level_flags_warning(self, make_requirement):
        requirements = [
            make_requirement("ok", required_level=2),
            make_requirement("broken", required_level=0),
        ]
        result = score_requirements(requirements, _levels(ok=2, broken=1))

        broken = next(i for i in result.gaps if i.capability_id == "broken")
        assert broken.gap_percentage == 100
        assert broken.gap <= 0
        assert [w.code for w in result.warnings] == ["non_positive_required_level"]
        assert result.warnings[0].capability_id == "broken"

    def test_zero_required_level_counts_full_credit(self, make_requirement):
        result = score_requirements([make_requirement("broken", required_level=0)], _levels(broken=1))
        assert result.overall_readiness == 100

    def test_recomputation_is_deterministic(self, make_requirement, make_evidence, as_of):
        requirements = [make_requirement("sql", 3), make_requirement("python", 2, is_mandatory=False)]
        evidence = {"sql": [make_evidence(2, capability_id="sql")]}

        first = compute_readiness(requirements, evidence, as_of=as_of)
        second = compute_readiness(requirements, evidence, as_of=as_of)

        assert first.model_dump(exclude={"computed_at"}) == second.model_dump(exclude={"computed_at"})
