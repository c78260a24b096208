"""
CookieSec - Test Configuration

Shared fixtures for all tests.
"""

from datetime import datetime

import pytest

# ═══════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def fixed_time():
    """Deterministic report timestamp."""
    return datetime(2026, 1, 15, 9, 30, 0)


@pytest.fixture
def make_query():
    """Build an authoritative query returning the given jar entries."""
    def factory(entries, calls=None):
        async def query():
            if calls is not None:
                calls.append(1)
            return entries
        return query
    return factory


@pytest.fixture
def failing_query():
    """Authoritative query that blows up when awaited."""
    async def query():
        raise RuntimeError("cookie store unavailable")
    return query


@pytest.fixture
def jar_entries():
    """Realistic Playwright BrowserContext.cookies() output."""
    return [
        {
            "name": "auth_token", "value": "eyJhbGciOi", "domain": "example.com", "path": "/",
            "expires": -1, "httpOnly": True, "secure": True, "sameSite": "Strict",
        },
        {
            "name": "lang", "value": "en", "domain": "example.com", "path": "/",
            "expires": 1800000000, "httpOnly": False, "secure": False, "sameSite": "Lax",
        },
        {
            "name": "_ga", "value": "GA1.2.1", "domain": ".example.com", "path": "/",
            "expires": 1800000000, "httpOnly": False, "secure": True, "sameSite": "None",
        },
    ]


@pytest.fixture
def sample_report(fixed_time):
    """Report with a mix of cookies on an HTTPS page, heuristic attributes."""
    from cookiesec.attributes import AttributeIndex, HeuristicSource
    from cookiesec.collector import parse_cookies
    from cookiesec.report import build_report

    cookies = parse_cookies("sessionid=abc123; XSRF-TOKEN=xyz; lang=en; _ga=GA1.2.3")
    source = HeuristicSource(is_encrypted=True)
    index = AttributeIndex(origin=source.origin, states={c.name: source.state() for c in cookies})
    return build_report("https://shop.example.com/cart", cookies, index, generated_at=fixed_time)


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Point config and log locations at a temp dir."""
    import cookiesec.config as config_module

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setattr(config_module, "CONFIG_FILE", home / ".cookiesec" / "config.yaml")
    for key in ("COOKIESEC_OUTPUT_DIR", "COOKIESEC_FORMAT", "COOKIESEC_HEADLESS", "COOKIESEC_TIMEOUT_MS"):
        monkeypatch.delenv(key, raising=False)
    return home
