"""Classify database exceptions raised through SQLAlchemy."""
from __future__ import annotations

import re

from sqlalchemy import exc as sa_exc

CONNECT_TIMEOUT_PATTERN = re.compile(
    r"CONNECT_TIMEOUT|timeout expired|connection timed out|could not connect to server: Connection timed out",
    re.IGNORECASE,
)


def is_connect_timeout_error(error: BaseException) -> bool:
    """Return True if ``error`` or anything it wraps is a connect timeout.

    Follows ``orig`` (DBAPI errors wrapped by SQLAlchemy), ``__cause__`` and
    ``__context__``, and checks the pool timeout raised when no connection
    could be checked out in time.
    """
    seen = set()
    pending = [error]
    while pending:
        current = pending.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))

        if isinstance(current, (sa_exc.TimeoutError, TimeoutError)):
            return True
        code = getattr(current, "code", None)
        if isinstance(code, str) and code.upper() == "CONNECT_TIMEOUT":
            return True
        if CONNECT_TIMEOUT_PATTERN.search(str(current)):
            return True

        pending.append(getattr(current, "orig", None))
        pending.append(current.__cause__)
        pending.append(current.__context__)
    return False
