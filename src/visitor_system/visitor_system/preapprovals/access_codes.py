from __future__ import annotations

from ..core.constants import ACCESS_CODE_LENGTH, ACCESS_CODE_PREFIX


def derive_access_code(pre_approval_id: str, active_codes: set[str]) -> str:
    """Human-readable code derived from the record id.

    Uses the id's tail, lengthening it while it clashes with a code that is
    still active. Ids are unique, so the full id always resolves a clash.
    """
    raw = "".join(ch for ch in pre_approval_id if ch.isalnum()).upper()
    length = min(ACCESS_CODE_LENGTH, len(raw))
    while True:
        code = f"{ACCESS_CODE_PREFIX}{raw[-length:]}"
        if code not in active_codes or length >= len(raw):
            return code
        length += 2
