"""
CookieSec — Attribute Resolver

Works out Secure / HttpOnly / SameSite for each cookie.

Two sources, picked once per run by a capability probe:
  - AuthoritativeSource: a privileged cookie jar (Playwright's
    BrowserContext.cookies(), the CookieStore API, a JSON export) that
    reports the real flags. Queried exactly once.
  - HeuristicSource: what a page script can infer on its own. Only Secure
    can be flagged, and only on HTTPS pages; everything else is UNKNOWN.

A failing authoritative query degrades to the heuristic for every cookie.
There is no retry.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional

from cookiesec.models import AttributeOrigin, AttributeState, Cookie, SameSite, TriState

logger = logging.getLogger("cookiesec.attributes")

# Async callable returning one mapping per cookie: {"name", "secure", "httpOnly", "sameSite", ...}
AttributeQuery = Callable[[], Awaitable[Iterable[Mapping[str, Any]]]]


# ═══════════════════════════════════════════════════════════════════════════
# Result
# ═══════════════════════════════════════════════════════════════════════════


@dataclass
class AttributeIndex:
    """Cookie name → AttributeState, plus the source that produced it."""
    origin: AttributeOrigin
    states: dict[str, AttributeState] = field(default_factory=dict)

    def lookup(self, name: str) -> AttributeState:
        """State for a cookie name. Unindexed names get an all-UNKNOWN state."""
        state = self.states.get(name)
        if state is None:
            return AttributeState.unknown(source=self.origin)
        return state


# ═══════════════════════════════════════════════════════════════════════════
# Sources
# ═══════════════════════════════════════════════════════════════════════════


class AttributeSource(ABC):
    """Something that can tell us about cookie attributes."""

    origin: AttributeOrigin

    @abstractmethod
    async def resolve(self, cookies: list[Cookie]) -> dict[str, AttributeState]:
        ...


class HeuristicSource(AttributeSource):
    """Best guess from script context.

    HttpOnly cookies are invisible to scripts and SameSite is never exposed,
    so both stay UNKNOWN. A missing Secure flag is only worth flagging when
    the page itself is served over HTTPS.
    """

    origin = AttributeOrigin.HEURISTIC

    def __init__(self, is_encrypted: bool):
        self.is_encrypted = is_encrypted

    def state(self) -> AttributeState:
        return AttributeState(
            secure=TriState.NOT_SET_WARN if self.is_encrypted else TriState.UNKNOWN,
            http_only=TriState.UNKNOWN,
            same_site=SameSite.UNKNOWN,
            source=self.origin,
        )

    async def resolve(self, cookies: list[Cookie]) -> dict[str, AttributeState]:
        state = self.state()
        return {c.name: state for c in cookies}


def _flag(value: Any) -> TriState:
    if value is None:
        return TriState.UNKNOWN
    return TriState.SET if value else TriState.NOT_SET_WARN


class AuthoritativeSource(AttributeSource):
    """Real attribute values from a privileged cookie jar."""

    origin = AttributeOrigin.AUTHORITATIVE

    def __init__(self, query: AttributeQuery):
        self.query = query

    @staticmethod
    def to_state(entry: Mapping[str, Any]) -> AttributeState:
        http_only = entry.get("httpOnly", entry.get("http_only"))
        same_site = entry.get("sameSite", entry.get("same_site"))
        return AttributeState(
            secure=_flag(entry.get("secure")),
            http_only=_flag(http_only),
            same_site=SameSite.parse(same_site),
            source=AttributeOrigin.AUTHORITATIVE,
        )

    async def resolve(self, cookies: list[Cookie]) -> dict[str, AttributeState]:
        entries = await self.query()
        index: dict[str, AttributeState] = {}
        for entry in entries:
            # Same name on several paths: the last one reported wins
            index[str(entry["name"])] = self.to_state(entry)
        return index


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════


def select_source(query: Optional[AttributeQuery], is_encrypted: bool) -> AttributeSource:
    """Capability probe: authoritative if a query is available, else heuristic."""
    if query is None:
        logger.info("No authoritative cookie source, using heuristic attributes")
        return HeuristicSource(is_encrypted)
    logger.info("Using authoritative cookie attribute source")
    return AuthoritativeSource(query)


async def resolve_attributes(
    cookies: list[Cookie],
    source: AttributeSource,
    is_encrypted: bool,
) -> AttributeIndex:
    """Resolve attributes for all cookies with a single source.

    Args:
        cookies: Parsed cookies
        source: Source picked by select_source()
        is_encrypted: Whether the page is served over HTTPS (heuristic fallback)

    Returns:
        AttributeIndex covering every cookie name
    """
    try:
        states = await source.resolve(cookies)
    except Exception as e:
        if isinstance(source, HeuristicSource):
            raise
        logger.warning(f"Authoritative cookie query failed, falling back to heuristics: {e}")
        source = HeuristicSource(is_encrypted)
        states = await source.resolve(cookies)

    return AttributeIndex(origin=source.origin, states=states)
