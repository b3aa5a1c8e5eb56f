"""
Pure selection and status rules over a client's subscription ledger.

Two different rules pick "the" assignment of a client:

- current: the latest started one (tie: latest inserted), used for status
  display and the debtors list; it can be current and already expired.
- active: the best still-usable one, used to consume a visit.

Neither function reads the system clock; callers pass `today`.
"""

from datetime import date
from typing import Iterable, Optional

from Dojodesk.core.models import (
    ClientSubscription,
    STATUS_EXPIRED,
    STATUS_NONE,
    STATUS_PAID,
    STATUS_UNPAID,
)

DEBTOR_STATUSES = frozenset({STATUS_NONE, STATUS_UNPAID, STATUS_EXPIRED})


def select_current_assignment(
    assignments: Iterable[ClientSubscription], today: date
) -> Optional[ClientSubscription]:
    started = [a for a in assignments if a.start_date <= today]
    if not started:
        return None
    return max(started, key=lambda a: (a.start_date, a.id))


def is_usable(assignment: ClientSubscription, today: date) -> bool:
    return (
        assignment.start_date <= today <= assignment.end_date
        and not assignment.is_exhausted
    )


def select_active_assignment(
    assignments: Iterable[ClientSubscription], today: date
) -> Optional[ClientSubscription]:
    usable = [a for a in assignments if is_usable(a, today)]
    if not usable:
        return None
    # paid first, limited before unlimited, soonest end, latest start
    return min(
        usable,
        key=lambda a: (
            0 if a.is_paid else 1,
            0 if a.visits_total > 0 else 1,
            a.end_date,
            -a.start_date.toordinal(),
        ),
    )


def resolve_status(current: Optional[ClientSubscription], today: date) -> str:
    if current is None:
        return STATUS_NONE
    if not current.is_paid:
        return STATUS_UNPAID
    if current.end_date < today or current.is_exhausted:
        return STATUS_EXPIRED
    return STATUS_PAID


def client_status(assignments: Iterable[ClientSubscription], today: date) -> str:
    return resolve_status(select_current_assignment(assignments, today), today)


def is_debtor_status(status: str) -> bool:
    return status in DEBTOR_STATUSES
