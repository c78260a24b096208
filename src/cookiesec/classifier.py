"""
CookieSec — Purpose Classifier

Maps a cookie name to a PurposeCategory with an ordered rule table.
Rules are tried top to bottom and the first match wins, so a name like
"csrf_auth_token" is a CSRF token, not an auth token.
"""

from __future__ import annotations

import re

from cookiesec.models import Classification, Cookie, PurposeCategory
from cookiesec.risk import is_important_cookie, is_session_cookie


def _rule(*patterns: str) -> re.Pattern:
    return re.compile("|".join(patterns), re.IGNORECASE)


# ═══════════════════════════════════════════════════════════════════════════
# Rule table, first match wins
# ═══════════════════════════════════════════════════════════════════════════

PURPOSE_RULES: tuple[tuple[re.Pattern, PurposeCategory], ...] = (
    (_rule("csrf", "xsrf", "antiforgery"), PurposeCategory.CSRF),
    (_rule("sess", "sessionid", "phpsessid", "sid", "jsessionid"), PurposeCategory.SESSION),
    (_rule("auth", "token", "jwt", "access", "refresh"), PurposeCategory.AUTH),
    (_rule("lang", "locale", "currency", "country"), PurposeCategory.LOCALIZATION),
    (_rule("cart", "basket", "checkout"), PurposeCategory.CART),
    (_rule("consent", "cookie_consent", "gdpr"), PurposeCategory.CONSENT),
    (_rule("track", "ga", "gid", "fbp", "utm", "gcl"), PurposeCategory.ANALYTICS),
)


def guess_purpose(name: str) -> PurposeCategory:
    """Return the category of the first matching rule, UNKNOWN if none match."""
    for pattern, category in PURPOSE_RULES:
        if pattern.search(name):
            return category
    return PurposeCategory.UNKNOWN


def classify(cookie: Cookie) -> Classification:
    """Purpose label plus session/importance signals for one cookie."""
    return Classification(
        purpose=guess_purpose(cookie.name),
        is_session=is_session_cookie(cookie),
        is_important=is_important_cookie(cookie.name),
    )
