# backend/tourify/domain/booking_status.py
"""
Booking status transition rules.

PENDING -> CONFIRMED | CANCELLED, CONFIRMED -> COMPLETED. CANCELLED and
COMPLETED are terminal. Which edges an actor may take depends on the role
they act under; ownership is checked by the caller before these rules run.
"""

from typing import Dict, FrozenSet, Mapping, Union

from ..core.enums import BookingStatus, UserRole
from ..core.exceptions import InvalidStatusTransitionException

StatusLike = Union[BookingStatus, str]
EdgeTable = Mapping[BookingStatus, FrozenSet[BookingStatus]]

TERMINAL_STATUSES: FrozenSet[BookingStatus] = frozenset(
    {BookingStatus.CANCELLED, BookingStatus.COMPLETED}
)

_GUIDE_EDGES: EdgeTable = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED}),
}

_TOURIST_EDGES: EdgeTable = {
    BookingStatus.PENDING: frozenset({BookingStatus.CANCELLED}),
}


def _union(*tables: EdgeTable) -> Dict[BookingStatus, FrozenSet[BookingStatus]]:
    merged: Dict[BookingStatus, FrozenSet[BookingStatus]] = {}
    for table in tables:
        for source, targets in table.items():
            merged[source] = merged.get(source, frozenset()) | targets
    return merged


# Administrators may take any edge a guide or tourist could.
_ADMIN_EDGES = _union(_GUIDE_EDGES, _TOURIST_EDGES)

TRANSITIONS_BY_ROLE: Mapping[UserRole, EdgeTable] = {
    UserRole.GUIDE: _GUIDE_EDGES,
    UserRole.TOURIST: _TOURIST_EDGES,
    UserRole.ADMIN: _ADMIN_EDGES,
    UserRole.SUPER_ADMIN: _ADMIN_EDGES,
}


def allowed_targets(role: UserRole, current: StatusLike) -> FrozenSet[BookingStatus]:
    table = TRANSITIONS_BY_ROLE.get(UserRole(role), {})
    return table.get(BookingStatus(current), frozenset())


def ensure_transition_allowed(role: UserRole, current: StatusLike, requested: StatusLike) -> None:
    """Raise InvalidStatusTransitionException unless role may move current -> requested."""
    current_status = BookingStatus(current)
    requested_status = BookingStatus(requested)

    if current_status in TERMINAL_STATUSES:
        raise InvalidStatusTransitionException(
            current_status.value,
            requested_status.value,
            message=f"Booking is already {current_status.value.lower()} and cannot be changed",
        )
    if requested_status not in allowed_targets(role, current_status):
        raise InvalidStatusTransitionException(current_status.value, requested_status.value)
