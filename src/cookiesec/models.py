"""
CookieSec — Data Model

Immutable entities flowing through the pipeline:

  Cookie          raw (name, value) pair as seen by page scripts
  AttributeState  Secure / HttpOnly / SameSite as far as they can be known
  Classification  purpose label + session / importance signals
  Finding         one cookie with everything known about it
  Recommendation  best-practice bullet with optional sub-steps
  Report          ordered findings + recommendations + timestamp

All models are frozen pydantic models: once built they are never mutated.
"""

from __future__ import annotations

import enum
from collections import Counter
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator


# ═══════════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════════


class TriState(str, enum.Enum):
    """Observed state of a boolean cookie attribute."""
    SET = "set"
    NOT_SET_WARN = "not_set_warn"
    UNKNOWN = "unknown"


class SameSite(str, enum.Enum):
    """SameSite policy of a cookie."""
    STRICT = "Strict"
    LAX = "Lax"
    NONE = "None"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Any) -> "SameSite":
        """Map a platform value ("Strict", "lax", ...) to a member. Anything else is UNKNOWN."""
        if isinstance(value, SameSite):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN
        lowered = value.strip().lower()
        for member in (cls.STRICT, cls.LAX, cls.NONE):
            if member.value.lower() == lowered:
                return member
        return cls.UNKNOWN


class AttributeOrigin(str, enum.Enum):
    """Which resolver produced an AttributeState."""
    AUTHORITATIVE = "authoritative"
    HEURISTIC = "heuristic"


class PurposeCategory(str, enum.Enum):
    """Likely purpose of a cookie. The value is the display label."""
    CSRF = "CSRF protection token"
    SESSION = "Session identifier"
    AUTH = "Authentication/authorization token"
    LOCALIZATION = "Localization preference"
    CART = "Shopping cart/session"
    CONSENT = "Cookie consent/tracking"
    ANALYTICS = "Analytics/tracking"
    UNKNOWN = "Unknown or application-specific"


# ═══════════════════════════════════════════════════════════════════════════
# Entities
# ═══════════════════════════════════════════════════════════════════════════


class Cookie(BaseModel):
    """A cookie visible to page scripts. Names are not unique."""
    name: str
    value: str = ""

    model_config = {"frozen": True}


class AttributeState(BaseModel):
    """Security attributes of one cookie.

    A heuristic state can never claim SET, and can never claim a concrete
    NOT_SET_WARN for HttpOnly or a concrete SameSite: scripts cannot see
    those attributes, so only the authoritative source may report them.
    """
    secure: TriState = TriState.UNKNOWN
    http_only: TriState = TriState.UNKNOWN
    same_site: SameSite = SameSite.UNKNOWN
    source: AttributeOrigin = AttributeOrigin.HEURISTIC

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_heuristic_limits(self) -> "AttributeState":
        if self.source is AttributeOrigin.HEURISTIC:
            if TriState.SET in (self.secure, self.http_only):
                raise ValueError("heuristic attribute state cannot claim SET")
            if self.http_only is not TriState.UNKNOWN:
                raise ValueError("HttpOnly is not observable without an authoritative source")
            if self.same_site is not SameSite.UNKNOWN:
                raise ValueError("SameSite is not observable without an authoritative source")
        return self

    @classmethod
    def unknown(cls, source: AttributeOrigin = AttributeOrigin.HEURISTIC) -> "AttributeState":
        """Nothing known about this cookie."""
        return cls(source=source)


class Classification(BaseModel):
    """Purpose and risk signals derived from a cookie's name and value."""
    purpose: PurposeCategory = PurposeCategory.UNKNOWN
    is_session: bool = False
    is_important: bool = False

    model_config = {"frozen": True}


class Finding(BaseModel):
    """Everything known about a single cookie."""
    index: int  # 1-based, collector order
    cookie: Cookie
    attributes: AttributeState
    classification: Classification

    model_config = {"frozen": True}

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "name": self.cookie.name,
            "value": self.cookie.value,
            "purpose": self.classification.purpose.value,
            "is_session": self.classification.is_session,
            "is_important": self.classification.is_important,
            "secure": self.attributes.secure.value,
            "http_only": self.attributes.http_only.value,
            "same_site": self.attributes.same_site.value,
            "attribute_source": self.attributes.source.value,
        }


class Recommendation(BaseModel):
    """A best-practice bullet. Text uses light Markdown (**bold**, `code`)."""
    text: str
    steps: tuple[str, ...] = ()

    model_config = {"frozen": True}


class Report(BaseModel):
    """The assembled result of one analysis run."""
    page_url: str
    findings: tuple[Finding, ...] = ()
    recommendations: tuple[Recommendation, ...] = ()
    attribute_source: AttributeOrigin = AttributeOrigin.HEURISTIC
    generated_at: datetime = Field(default_factory=datetime.now)

    model_config = {"frozen": True}

    @property
    def cookie_count(self) -> int:
        return len(self.findings)

    def summary(self) -> dict[str, Any]:
        """Counts used by the JSON report and the CLI summary."""
        purposes = Counter(f.classification.purpose.value for f in self.findings)
        return {
            "total_cookies": self.cookie_count,
            "important": sum(1 for f in self.findings if f.classification.is_important),
            "session": sum(1 for f in self.findings if f.classification.is_session),
            "missing_secure": sum(
                1 for f in self.findings if f.attributes.secure is TriState.NOT_SET_WARN
            ),
            "by_purpose": dict(purposes),
        }
