"""
CookieSec — Cookie Collector

Parses a `document.cookie` style string ("a=1; b=2") into Cookie entities.
Order is preserved and duplicate names are kept: cookies with the same name
on different paths or domains are all visible to page scripts.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import unquote

from cookiesec.models import Cookie

logger = logging.getLogger("cookiesec.collector")

# A '%' that does not start a two-digit hex escape
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def decode_component(text: str) -> str:
    """Percent-decode a cookie name or value.

    '+' is left alone (cookies are not form-encoded). Malformed escapes or
    escapes that do not form valid UTF-8 make the whole component come back
    untouched instead of half-decoded.
    """
    if "%" not in text:
        return text
    if _MALFORMED_ESCAPE.search(text):
        logger.debug(f"Malformed percent-escape, keeping raw text: {text[:50]!r}")
        return text
    try:
        return unquote(text, errors="strict")
    except UnicodeDecodeError:
        logger.debug(f"Escapes are not valid UTF-8, keeping raw text: {text[:50]!r}")
        return text


def parse_cookies(raw: str) -> list[Cookie]:
    """Split a raw cookie string into Cookie entities.

    Args:
        raw: Semicolon-separated name=value pairs. Values may contain '='.

    Returns:
        Cookies in input order. An empty string gives an empty list.
    """
    cookies: list[Cookie] = []
    if not raw:
        return cookies

    for token in raw.split(";"):
        token = token.strip()
        if not token:
            continue
        name, _, value = token.partition("=")
        cookies.append(Cookie(name=decode_component(name), value=decode_component(value)))

    logger.debug(f"Parsed {len(cookies)} cookie(s)")
    return cookies
