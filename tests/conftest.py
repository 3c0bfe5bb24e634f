"""Pytest configuration and fixtures."""

import os
from datetime import date

import pytest

from app.core.capability.types import (
    CapabilityRequirement,
    EvidenceRecord,
    ValidationStatus,
)

# Fixed evaluation date so expiry checks do not depend on the calendar
AS_OF = date(2025, 6, 1)


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["SUPABASE_URL"] = "https://test.supabase.co"
    os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-key"
    os.environ["CAPABILITY_ENGINE_ENV"] = "test"


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def make_evidence():
    """Factory for evidence records with sensible defaults."""

    def _make(
        level: int,
        status: ValidationStatus = ValidationStatus.VALIDATED,
        capability_id: str = "cap-sql",
        confidence: float = 0.8,
        expires_at: date | None = None,
        employee_id: str = "emp-1",
    ) -> EvidenceRecord:
        return EvidenceRecord(
            employee_id=employee_id,
            capability_id=capability_id,
            proficiency_level=level,
            confidence_score=confidence,
            validation_status=status,
            effective_from=date(2025, 1, 1),
            expires_at=expires_at,
        )

    return _make


@pytest.fixture
def make_requirement():
    """Factory for capability requirements."""

    def _make(
        capability_id: str,
        required_level: int = 3,
        weight: float = 1.0,
        is_mandatory: bool = True,
        name: str | None = None,
    ) -> CapabilityRequirement:
        return CapabilityRequirement(
            capability_id=capability_id,
            capability_name=name or capability_id.upper(),
            required_level=required_level,
            weight=weight,
            is_mandatory=is_mandatory,
        )

    return _make
