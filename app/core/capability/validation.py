"""Evidence validation lifecycle.

    pending --(human)--> validated --(expires_at passes)--> expired
       \\
        --(human)--> rejected

Rejected and expired are terminal. Aggregation only looks at "live"
evidence: pending or validated, and not past its expiry date whatever the
stored status says.
"""

from datetime import date, datetime, timezone
from typing import Optional

from app.core.capability.types import EvidenceRecord, ValidationStatus


class InvalidEvidenceTransition(Exception):
    """Raised when an evidence status change is not allowed."""


ALLOWED_TRANSITIONS: dict[ValidationStatus, frozenset[ValidationStatus]] = {
    ValidationStatus.PENDING: frozenset({ValidationStatus.VALIDATED, ValidationStatus.REJECTED}),
    ValidationStatus.VALIDATED: frozenset({ValidationStatus.EXPIRED}),
    ValidationStatus.REJECTED: frozenset(),
    ValidationStatus.EXPIRED: frozenset(),
}

LIVE_STATUSES = frozenset({ValidationStatus.PENDING, ValidationStatus.VALIDATED})


def today_utc() -> date:
    """Current date in UTC."""
    return datetime.now(timezone.utc).date()


def can_transition(current: ValidationStatus, target: ValidationStatus) -> bool:
    """Check whether ``current -> target`` is a legal status change."""
    return target in ALLOWED_TRANSITIONS.get(ValidationStatus(current), frozenset())


def transition_evidence(record: EvidenceRecord, target: ValidationStatus) -> EvidenceRecord:
    """
    Move a record to a new validation status.

    Args:
        record: Evidence in its current state
        target: Desired status

    Returns:
        A new EvidenceRecord carrying the target status

    Raises:
        InvalidEvidenceTransition: If the lifecycle forbids the change
    """
    target = ValidationStatus(target)
    if not can_transition(record.validation_status, target):
        raise InvalidEvidenceTransition(
            f"Cannot move evidence {record.id or '<unsaved>'} "
            f"from {record.validation_status.value} to {target.value}"
        )
    return record.model_copy(update={"validation_status": target})


def effective_status(record: EvidenceRecord, as_of: Optional[date] = None) -> ValidationStatus:
    """Status after applying expiry: anything past ``expires_at`` is expired."""
    if record.validation_status == ValidationStatus.REJECTED:
        return ValidationStatus.REJECTED

    as_of = as_of or today_utc()
    if record.expires_at is not None and record.expires_at < as_of:
        return ValidationStatus.EXPIRED

    return record.validation_status


def is_live(record: EvidenceRecord, as_of: Optional[date] = None) -> bool:
    """Whether a record counts toward aggregation."""
    return effective_status(record, as_of) in LIVE_STATUSES
