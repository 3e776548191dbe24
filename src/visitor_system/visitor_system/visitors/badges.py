from __future__ import annotations

import secrets
import string
from typing import Callable, Optional

from ..core.constants import BADGE_MAX_ATTEMPTS, BADGE_PREFIX, BADGE_TOKEN_LENGTH, QR_PREFIX
from ..core.exceptions import ValidationError
from .repository import VisitorRepository

_ALPHABET = string.ascii_uppercase + string.digits


def random_badge_token() -> str:
    return BADGE_PREFIX + "".join(secrets.choice(_ALPHABET) for _ in range(BADGE_TOKEN_LENGTH))


def qr_payload(code: str) -> str:
    return f"{QR_PREFIX}{code}"


class BadgeIssuer:
    """Allocates badge numbers unique among currently issued badges.

    Must be called inside a store transaction: the uniqueness check and the
    save of the approved check-in form one critical section.
    """

    def __init__(self, visitors: VisitorRepository, *, token_factory: Optional[Callable[[], str]] = None):
        self._visitors = visitors
        self._token_factory = token_factory or random_badge_token

    def issue(self, requested: Optional[str] = None) -> str:
        in_use = self._visitors.issued_badges()

        if requested:
            badge = requested.strip().upper()
            if not badge:
                raise ValidationError("Badge number is required")
            if badge in in_use:
                raise ValidationError(f"Badge {badge} is already issued")
            return badge

        for _ in range(BADGE_MAX_ATTEMPTS):
            badge = self._token_factory()
            if badge not in in_use:
                return badge
        raise ValidationError("Could not allocate a free badge number")
