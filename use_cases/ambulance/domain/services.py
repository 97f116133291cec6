"""
Domain Services - Waiting List Reconciliation.

Recomputes estimated start times for a waiting list after any change.
Pure business logic: no I/O, no clock access other than the default ``now``.
Opening hours and ambulance availability are not considered.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from core.domain import DomainService, InvalidStateError, as_utc, ceil_to_millis, utc_now_millis

from ..models import WaitingListEntry


def _end_of(entry: WaitingListEntry) -> datetime:
    return entry.estimated_start + timedelta(minutes=entry.estimated_duration_minutes)


def reconcile_waiting_list(
    entries: List[WaitingListEntry], now: Optional[datetime] = None
) -> List[WaitingListEntry]:
    """
    Order the entries by arrival and recompute their estimated start times.

    The list is sorted in place (stable, ties broken by entry id). The first
    entry never starts earlier than its previous estimate, its arrival or
    ``now``; every later entry starts when the previous one is expected to
    finish, but not before it arrived.

    Args:
        entries: The waiting list of one ambulance, mutated in place
        now: Reconciliation moment, rounded up to whole milliseconds
            (defaults to the current UTC time)

    Returns:
        The same list, reordered

    Raises:
        InvalidStateError: the list is empty
    """
    if not entries:
        raise InvalidStateError("cannot reconcile an empty waiting list")

    now = utc_now_millis() if now is None else ceil_to_millis(as_utc(now))

    entries.sort(key=lambda entry: (entry.waiting_since, entry.id))

    first = entries[0]
    candidates = [first.waiting_since, now]
    if first.estimated_start is not None:
        candidates.append(first.estimated_start)
    first.estimated_start = max(candidates)

    next_start = _end_of(first)
    for entry in entries[1:]:
        entry.estimated_start = max(next_start, entry.waiting_since)
        next_start = _end_of(entry)

    return entries


class WaitingListReconciler(DomainService):
    """
    Injectable wrapper around ``reconcile_waiting_list``.

    The API layer receives an instance at construction so tests can pin ``now``.
    """

    def __init__(self, clock=None):
        self._clock = clock

    def execute(
        self, entries: List[WaitingListEntry], now: Optional[datetime] = None
    ) -> List[WaitingListEntry]:
        if now is None and self._clock is not None:
            now = self._clock()
        return reconcile_waiting_list(entries, now)
