"""Tests for the booking status transition table."""

import pytest

from tourify.core.enums import BookingStatus, UserRole
from tourify.core.exceptions import InvalidStatusTransitionException
from tourify.domain.booking_status import allowed_targets, ensure_transition_allowed

P, C, X, D = (
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.CANCELLED,
    BookingStatus.COMPLETED,
)


@pytest.mark.parametrize(
    "role,current,requested",
    [
        (UserRole.GUIDE, P, C),
        (UserRole.GUIDE, P, X),
        (UserRole.GUIDE, C, D),
        (UserRole.TOURIST, P, X),
        (UserRole.ADMIN, P, C),
        (UserRole.ADMIN, C, D),
        (UserRole.SUPER_ADMIN, P, X),
    ],
)
def test_allowed_edges(role, current, requested):
    ensure_transition_allowed(role, current, requested)


@pytest.mark.parametrize(
    "role,current,requested",
    [
        (UserRole.TOURIST, P, C),
        (UserRole.TOURIST, C, X),
        (UserRole.TOURIST, C, D),
        (UserRole.GUIDE, P, D),
        (UserRole.GUIDE, C, X),
        (UserRole.ADMIN, P, D),
    ],
)
def test_disallowed_edges(role, current, requested):
    with pytest.raises(InvalidStatusTransitionException) as exc:
        ensure_transition_allowed(role, current, requested)
    assert exc.value.code == "INVALID_STATUS_TRANSITION"
    assert exc.value.details == {"current_status": current.value, "requested_status": requested.value}


@pytest.mark.parametrize("terminal", [X, D])
@pytest.mark.parametrize("role", list(UserRole))
def test_terminal_states_are_final(role, terminal):
    for requested in BookingStatus:
        with pytest.raises(InvalidStatusTransitionException):
            ensure_transition_allowed(role, terminal, requested)


def test_statuses_accept_plain_strings():
    assert allowed_targets(UserRole.GUIDE, "PENDING") == frozenset({C, X})
    assert allowed_targets(UserRole.TOURIST, "CONFIRMED") == frozenset()
