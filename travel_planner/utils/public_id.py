"""Public ids: 8-digit numbers users can share instead of internal uuids."""
from __future__ import annotations

import re
import secrets

PUBLIC_ID_PATTERN = re.compile(r"^\d{8}$")
PUBLIC_ID_MIN = 10_000_000
PUBLIC_ID_MAX = 99_999_999
MAX_ASSIGN_ATTEMPTS = 50


def generate_public_id() -> str:
    return str(PUBLIC_ID_MIN + secrets.randbelow(PUBLIC_ID_MAX - PUBLIC_ID_MIN + 1))


def is_public_id(value) -> bool:
    return bool(PUBLIC_ID_PATTERN.match(str(value or "")))


def assign_public_id(profile) -> str:
    """Give ``profile`` a public id not used by any other profile.

    The unique index on ``profiles.public_id`` remains the final guard; this
    only avoids the collisions we can see before flushing.
    """
    from travel_planner.models import Profile

    for _ in range(MAX_ASSIGN_ATTEMPTS):
        candidate = generate_public_id()
        if not Profile.query.filter_by(public_id=candidate).first():
            profile.public_id = candidate
            return candidate
    raise RuntimeError("Unable to allocate a unique public id.")
