"""Tests for single-requirement gap classification."""

import pytest

from app.core.capability.gaps import (
    classify_gap,
    classify_status,
    gap_percentage,
    gap_priority,
    requirement_warnings,
)
from app.core.capability.types import (
    AggregatedEvidence,
    GapPriority,
    GapStatus,
    ProficiencyLevel,
    ProficiencyScale,
)


class TestClassifyStatus:
    @pytest.mark.parametrize("required", [0, 1, 3, 5, 9])
    def test_no_evidence_is_missing_regardless_of_requirement(self, required):
        assert classify_status(0, required) == GapStatus.MISSING

    @pytest.mark.parametrize(
        "current, required, expected",
        [
            (2, 4, GapStatus.GAP),
            (1, 2, GapStatus.GAP),
            (3, 3, GapStatus.MEETS),
            (5, 3, GapStatus.EXCEEDS),
            (1, 0, GapStatus.EXCEEDS),
        ],
    )
    def test_status_rule(self, current, required, expected):
        assert classify_status(current, required) == expected

    def test_exactly_one_status_for_every_pair(self):
        for current in range(0, 7):
            for required in range(0, 7):
                status = classify_status(current, required)
                gap = required - current
                matches = [
                    current == 0,
                    current != 0 and gap > 0,
                    current != 0 and gap < 0,
                    current != 0 and gap == 0,
                ]
                assert matches.count(True) == 1
                expected = [GapStatus.MISSING, GapStatus.GAP, GapStatus.EXCEEDS, GapStatus.MEETS][
                    matches.index(True)
                ]
                assert status == expected


class TestGapPercentage:
    def test_partial_progress(self):
        assert gap_percentage(2, 4) == 50.0

    def test_capped_when_exceeding(self):
        assert gap_percentage(5, 3) == 100.0

    def test_zero_required_is_fully_satisfied(self):
        assert gap_percentage(0, 0) == 100.0
        assert gap_percentage(3, 0) == 100.0

    def test_always_within_bounds(self):
        for current in range(0, 8):
            for required in range(0, 8):
                assert 0.0 <= gap_percentage(current, required) <= 100.0


class TestGapPriority:
    @pytest.mark.parametrize(
        "status, gap, mandatory, expected",
        [
            (GapStatus.MISSING, 3, True, GapPriority.CRITICAL),
            (GapStatus.GAP, 2, True, GapPriority.CRITICAL),
            (GapStatus.GAP, 1, True, GapPriority.HIGH),
            (GapStatus.MISSING, 1, False, GapPriority.MEDIUM),
            (GapStatus.GAP, 3, False, GapPriority.MEDIUM),
            (GapStatus.GAP, 1, False, GapPriority.LOW),
            (GapStatus.MEETS, 0, True, None),
            (GapStatus.EXCEEDS, -2, True, None),
            (GapStatus.MISSING, 0, True, None),
        ],
    )
    def test_priority(self, status, gap, mandatory, expected):
        assert gap_priority(status, gap, mandatory) == expected


class TestClassifyGap:
    def test_missing_sql_requirement(self, make_requirement):
        item = classify_gap(make_requirement("sql", required_level=3, weight=10), 0)

        assert item.status == GapStatus.MISSING
        assert item.current_level == 0
        assert item.gap == 3
        assert item.gap_percentage == 0.0
        assert item.priority == GapPriority.CRITICAL
        assert item.current_level_name is None
        assert item.required_level_name == "Advanced"

    def test_partial_gap(self, make_requirement):
        item = classify_gap(make_requirement("sql", required_level=4, weight=5), 2)

        assert item.gap == 2
        assert item.status == GapStatus.GAP
        assert item.gap_percentage == 50.0
        assert item.weight == 5

    def test_exceeds_keeps_negative_gap(self, make_requirement):
        item = classify_gap(make_requirement("sql", required_level=2), 5)

        assert item.status == GapStatus.EXCEEDS
        assert item.gap == -3
        assert item.gap_percentage == 100.0
        assert item.priority is None

    def test_evidence_details_carried(self, make_requirement):
        evidence = AggregatedEvidence(current_level=3, evidence_count=4, avg_confidence=0.75)
        item = classify_gap(make_requirement("sql", required_level=3), 3, evidence=evidence)

        assert item.status == GapStatus.MEETS
        assert item.evidence_count == 4
        assert item.avg_confidence == 0.75

    def test_level_names_from_custom_scale(self, make_requirement):
        scale = ProficiencyScale(
            levels=[ProficiencyLevel(level=2, name="Practitioner"), ProficiencyLevel(level=4, name="Authority")]
        )
        item = classify_gap(make_requirement("sql", required_level=4), 2, scale=scale)

        assert item.required_level_name == "Authority"
        assert item.current_level_name == "Practitioner"

    def test_zero_required_level_is_satisfied(self, make_requirement):
        item = classify_gap(make_requirement("sql", required_level=0), 2)

        assert item.gap == -2
        assert item.gap_percentage == 100.0
        assert item.status == GapStatus.EXCEEDS


class TestRequirementWarnings:
    def test_non_positive_required_level_warns(self, make_requirement):
        warnings = list(requirement_warnings(make_requirement("sql", required_level=0)))
        assert len(warnings) == 1
        assert warnings[0].code == "non_positive_required_level"
        assert warnings[0].capability_id == "sql"

    def test_valid_requirement_no_warning(self, make_requirement):
        assert list(requirement_warnings(make_requirement("sql", required_level=2))) == []
