"""
CookieSec console theme (rich).
"""

from rich.theme import Theme

from cookiesec.models import SameSite, TriState

OK_GREEN = "#2aa55a"
WARN_RED = "#cc2222"
ACCENT_BLUE = "#22456b"
GHOST_GRAY = "#888888"

COOKIESEC_THEME = Theme({
    "info": f"bold {ACCENT_BLUE}",
    "success": f"bold {OK_GREEN}",
    "warning": f"bold {WARN_RED}",
    "error": f"bold {WARN_RED}",
    "muted": GHOST_GRAY,
})

TRISTATE_STYLE = {
    TriState.SET: "success",
    TriState.NOT_SET_WARN: "warning",
    TriState.UNKNOWN: "muted",
}

TRISTATE_TEXT = {
    TriState.SET: "set",
    TriState.NOT_SET_WARN: "missing",
    TriState.UNKNOWN: "?",
}


def same_site_style(value: SameSite) -> str:
    if value is SameSite.UNKNOWN:
        return "muted"
    if value is SameSite.NONE:
        return "warning"
    return "success"
