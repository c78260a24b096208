"""
CookieSec — Risk Signals

Two independent flags per cookie. They overlap freely with each other and
with the purpose label: a CSRF token can be both important and a session
cookie.
"""

from __future__ import annotations

import re

from cookiesec.models import Cookie

SESSION_NAME_MARKERS = ("session", "sessid", "sid", "jsessionid")

IMPORTANT_NAME_PATTERN = re.compile(
    r"auth|csrf|xsrf|token|session|phpsessid|sid|jsessionid",
    re.IGNORECASE,
)


def is_session_cookie(cookie: Cookie) -> bool:
    """True for an empty value or a session-like name.

    Any empty value counts, which also catches persistent cookies that were
    deliberately cleared.
    """
    if not cookie.value:
        return True
    name = cookie.name.lower()
    return any(marker in name for marker in SESSION_NAME_MARKERS)


def is_important_cookie(name: str) -> bool:
    """True if the name looks like session, auth or CSRF material."""
    return IMPORTANT_NAME_PATTERN.search(name) is not None
