"""Unit tests for tenancy error to HTTP status mapping."""

import pytest

from backend.app.api.errors import status_for
from backend.app.tenancy.errors import (
    CrossTenantDenied,
    NotFound,
    TenancyError,
    TenantMismatch,
    TenantScopeViolation,
    TenantUnresolved,
    UnknownCollection,
)


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (TenantUnresolved("u1"), 401),
        (TenantMismatch("et-addis", "ke-nairobi"), 403),
        (CrossTenantDenied("et-addis", "ke-nairobi"), 403),
        (NotFound("listing", {"id": "x"}), 404),
        (TenantScopeViolation("bypass"), 500),
        (UnknownCollection("broker"), 500),
        (TenancyError("generic"), 500),
    ],
)
def test_status_for(exc: TenancyError, expected: int) -> None:
    assert status_for(exc) == expected


def test_not_found_message_does_not_reveal_owner() -> None:
    """Test NotFound messages depend only on the collection."""
    assert str(NotFound("listing", {"id": "a"})) == str(NotFound("listing", {"id": "b"}))
