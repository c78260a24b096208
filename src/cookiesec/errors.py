"""
CookieSec — Exceptions

Only failures that abort a whole run are raised. Cookie-level problems
(bad percent-escapes, a missing or broken attribute source) are recovered
where they happen and never surface here.
"""


class CookieSecError(Exception):
    """Base class for all CookieSec errors."""


class ReportError(CookieSecError):
    """The report could not be rendered or written. No file was produced."""


class BrowserUnavailableError(CookieSecError):
    """Playwright is missing or the browser failed to start."""


class ConfigError(CookieSecError):
    """The configuration file could not be read or parsed."""
