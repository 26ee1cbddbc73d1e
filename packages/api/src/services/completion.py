# This project was developed with assistance from AI tools.
"""KYC completion engine.

Derives the overall status and completion percentage of a driver's KYC
aggregate from the three mandatory category statuses (identity, address,
selfie). The references category is tracked for display only and never
participates in the derivation.

``derive_completion`` is pure. ``apply_completion`` writes the result onto a
``KYCStatus`` row, stamps lifecycle timestamps once, and reports the
transitions as events; it never touches the driver directory. Consumers of
the events live in ``services/aggregate.py``.
"""

import enum
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from db import KYCStatus
from db.enums import CategoryStatus, OverallStatus

_SUBMITTED = CategoryStatus.submitted()
_MANDATORY_COUNT = 3


class KYCEvent(str, enum.Enum):
    """Lifecycle transitions emitted by a recompute."""

    SUBMITTED = "kyc_submitted"
    VERIFIED = "kyc_verified"
    REJECTED = "kyc_rejected"


@dataclass(frozen=True)
class Completion:
    overall_status: OverallStatus
    completion_percentage: int


MandatoryStatuses = tuple[CategoryStatus, CategoryStatus, CategoryStatus]


def _all_verified(statuses: MandatoryStatuses) -> bool:
    return all(s == CategoryStatus.VERIFIED for s in statuses)


def _any_rejected(statuses: MandatoryStatuses) -> bool:
    return any(s == CategoryStatus.REJECTED for s in statuses)


def _all_submitted(statuses: MandatoryStatuses) -> bool:
    return all(s in _SUBMITTED for s in statuses)


def _any_submitted(statuses: MandatoryStatuses) -> bool:
    return any(s != CategoryStatus.NOT_SUBMITTED for s in statuses)


def _always(_statuses: MandatoryStatuses) -> bool:
    return True


# Priority-ordered: first matching rule wins. The final catch-all makes the
# mapping total over every combination of CategoryStatus values.
OVERALL_STATUS_RULES: tuple[tuple[Callable[[MandatoryStatuses], bool], OverallStatus], ...] = (
    (_all_verified, OverallStatus.VERIFIED),
    (_any_rejected, OverallStatus.REJECTED),
    (_all_submitted, OverallStatus.PENDING_REVIEW),
    (_any_submitted, OverallStatus.IN_PROGRESS),
    (_always, OverallStatus.NOT_STARTED),
)


def derive_overall_status(
    identity: CategoryStatus,
    address: CategoryStatus,
    selfie: CategoryStatus,
) -> OverallStatus:
    """Map the mandatory category statuses onto an overall status."""
    statuses = (CategoryStatus(identity), CategoryStatus(address), CategoryStatus(selfie))
    for predicate, outcome in OVERALL_STATUS_RULES:
        if predicate(statuses):
            return outcome
    raise AssertionError("unreachable: catch-all rule did not match")


def completion_percentage(
    identity: CategoryStatus,
    address: CategoryStatus,
    selfie: CategoryStatus,
) -> int:
    """Percentage of mandatory categories verified: 0, 33, 67 or 100."""
    verified = sum(
        1 for s in (identity, address, selfie) if CategoryStatus(s) == CategoryStatus.VERIFIED
    )
    return round(100 * verified / _MANDATORY_COUNT)


def derive_completion(
    identity: CategoryStatus,
    address: CategoryStatus,
    selfie: CategoryStatus,
) -> Completion:
    return Completion(
        overall_status=derive_overall_status(identity, address, selfie),
        completion_percentage=completion_percentage(identity, address, selfie),
    )


def mandatory_statuses(kyc_status: KYCStatus) -> MandatoryStatuses:
    return (
        CategoryStatus(kyc_status.identity_status),
        CategoryStatus(kyc_status.address_status),
        CategoryStatus(kyc_status.selfie_status),
    )


def apply_completion(kyc_status: KYCStatus, now: datetime) -> list[KYCEvent]:
    """Recompute derived columns of ``kyc_status`` in place.

    Idempotent: a second call with unchanged category statuses leaves every
    column as it was and returns no events.

    ``submitted_at`` and ``verified_at`` are stamped the first time their
    condition holds and are never overwritten afterwards. ``rejected_at`` is
    stamped on each transition into ``rejected``.
    """
    statuses = mandatory_statuses(kyc_status)
    completion = derive_completion(*statuses)
    previous = OverallStatus(kyc_status.overall_status) if kyc_status.overall_status else None

    kyc_status.overall_status = completion.overall_status
    kyc_status.completion_percentage = completion.completion_percentage
    kyc_status.can_resubmit = _any_rejected(statuses)

    events: list[KYCEvent] = []

    if _all_submitted(statuses) and kyc_status.submitted_at is None:
        kyc_status.submitted_at = now
        events.append(KYCEvent.SUBMITTED)

    if completion.overall_status == OverallStatus.VERIFIED:
        if kyc_status.verified_at is None:
            kyc_status.verified_at = now
        if previous != OverallStatus.VERIFIED:
            events.append(KYCEvent.VERIFIED)

    if completion.overall_status == OverallStatus.REJECTED:
        if previous != OverallStatus.REJECTED:
            kyc_status.rejected_at = now
            events.append(KYCEvent.REJECTED)
    elif kyc_status.rejection_reason is not None:
        kyc_status.rejection_reason = None

    return events
