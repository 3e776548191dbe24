from __future__ import annotations

import pytest

from src.visitor_system.visitor_system.core.exceptions import ValidationError
from src.visitor_system.visitor_system.visitors.badges import BadgeIssuer, qr_payload, random_badge_token
from src.visitor_system.visitor_system.visitors.priority import classify_priority
from src.visitor_system.visitor_system.core.enums import Priority


class FakeVisitors:
    def __init__(self, issued):
        self._issued = set(issued)

    def issued_badges(self):
        return set(self._issued)


def test_random_token_format():
    token = random_badge_token()
    assert token.startswith("VMS")
    assert len(token) == 7
    assert token[3:].isalnum()


def test_regenerates_on_collision():
    tokens = iter(["VMSAAAA", "VMSAAAA", "VMSBBBB"])
    issuer = BadgeIssuer(FakeVisitors({"VMSAAAA"}), token_factory=lambda: next(tokens))

    assert issuer.issue() == "VMSBBBB"


def test_gives_up_when_no_free_badge():
    issuer = BadgeIssuer(FakeVisitors({"VMSAAAA"}), token_factory=lambda: "VMSAAAA")

    with pytest.raises(ValidationError):
        issuer.issue()


def test_requested_badge_is_normalised():
    issuer = BadgeIssuer(FakeVisitors(set()))
    assert issuer.issue(" vms1234 ") == "VMS1234"


def test_qr_payload():
    assert qr_payload("VMS1234") == "QR_VMS1234"


@pytest.mark.parametrize(
    "minutes, expected",
    [(0, Priority.LOW), (10, Priority.LOW), (10.5, Priority.MEDIUM), (20, Priority.MEDIUM), (21, Priority.HIGH)],
)
def test_priority_bands(minutes, expected):
    assert classify_priority(minutes) == expected
