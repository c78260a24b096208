"""
Tests for the attribute resolver — authoritative jar, heuristic fallback.
"""

import pytest
from pydantic import ValidationError

from cookiesec.attributes import (
    AttributeIndex,
    AuthoritativeSource,
    HeuristicSource,
    resolve_attributes,
    select_source,
)
from cookiesec.collector import parse_cookies
from cookiesec.models import AttributeOrigin, AttributeState, SameSite, TriState


class TestSelectSource:
    def test_no_query_is_heuristic(self):
        source = select_source(None, is_encrypted=True)
        assert isinstance(source, HeuristicSource)
        assert source.origin is AttributeOrigin.HEURISTIC

    def test_query_is_authoritative(self, make_query):
        source = select_source(make_query([]), is_encrypted=False)
        assert isinstance(source, AuthoritativeSource)
        assert source.origin is AttributeOrigin.AUTHORITATIVE


class TestHeuristicSource:
    @pytest.mark.asyncio
    async def test_https_flags_secure(self):
        cookies = parse_cookies("sessionid=abc; lang=en")
        index = await resolve_attributes(cookies, HeuristicSource(True), True)
        for name in ("sessionid", "lang"):
            state = index.lookup(name)
            assert state.secure is TriState.NOT_SET_WARN
            assert state.http_only is TriState.UNKNOWN
            assert state.same_site is SameSite.UNKNOWN

    @pytest.mark.asyncio
    async def test_plain_http_secure_unknown(self):
        cookies = parse_cookies("sessionid=abc")
        index = await resolve_attributes(cookies, HeuristicSource(False), False)
        assert index.lookup("sessionid").secure is TriState.UNKNOWN
        assert index.origin is AttributeOrigin.HEURISTIC

    @pytest.mark.asyncio
    async def test_never_claims_set(self):
        cookies = parse_cookies("a=1; b=2; c=")
        for encrypted in (True, False):
            index = await resolve_attributes(cookies, HeuristicSource(encrypted), encrypted)
            for state in index.states.values():
                assert TriState.SET not in (state.secure, state.http_only)
                assert state.http_only is TriState.UNKNOWN

    def test_model_rejects_heuristic_http_only_claim(self):
        with pytest.raises(ValidationError):
            AttributeState(http_only=TriState.NOT_SET_WARN, source=AttributeOrigin.HEURISTIC)

    def test_model_rejects_heuristic_same_site_claim(self):
        with pytest.raises(ValidationError):
            AttributeState(same_site=SameSite.LAX, source=AttributeOrigin.HEURISTIC)

    def test_model_rejects_heuristic_set(self):
        with pytest.raises(ValidationError):
            AttributeState(secure=TriState.SET, source=AttributeOrigin.HEURISTIC)


class TestAuthoritativeSource:
    @pytest.mark.asyncio
    async def test_maps_jar_entries(self, make_query, jar_entries):
        cookies = parse_cookies("auth_token=eyJhbGciOi; lang=en; _ga=GA1.2.1")
        index = await resolve_attributes(cookies, AuthoritativeSource(make_query(jar_entries)), True)

        assert index.origin is AttributeOrigin.AUTHORITATIVE
        auth = index.lookup("auth_token")
        assert (auth.secure, auth.http_only, auth.same_site) == (TriState.SET, TriState.SET, SameSite.STRICT)
        lang = index.lookup("lang")
        assert (lang.secure, lang.http_only, lang.same_site) == (
            TriState.NOT_SET_WARN, TriState.NOT_SET_WARN, SameSite.LAX,
        )
        assert index.lookup("_ga").same_site is SameSite.NONE

    @pytest.mark.asyncio
    async def test_queried_exactly_once(self, make_query, jar_entries):
        calls = []
        cookies = parse_cookies("auth_token=x; lang=en; _ga=1")
        await resolve_attributes(cookies, AuthoritativeSource(make_query(jar_entries, calls)), True)
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_cookie_missing_from_jar_is_unknown(self, make_query, jar_entries):
        cookies = parse_cookies("not_in_jar=1")
        index = await resolve_attributes(cookies, AuthoritativeSource(make_query(jar_entries)), True)
        state = index.lookup("not_in_jar")
        assert state.secure is TriState.UNKNOWN
        assert state.http_only is TriState.UNKNOWN
        assert state.same_site is SameSite.UNKNOWN
        assert state.source is AttributeOrigin.AUTHORITATIVE

    @pytest.mark.asyncio
    async def test_missing_flags_are_unknown(self, make_query):
        # CookieStore API shape: no httpOnly field at all
        entries = [{"name": "prefs", "secure": True, "sameSite": "lax"}]
        index = await resolve_attributes(parse_cookies("prefs=1"), AuthoritativeSource(make_query(entries)), True)
        state = index.lookup("prefs")
        assert state.secure is TriState.SET
        assert state.http_only is TriState.UNKNOWN
        assert state.same_site is SameSite.LAX

    @pytest.mark.asyncio
    async def test_snake_case_keys(self, make_query):
        entries = [{"name": "sid", "secure": False, "http_only": True, "same_site": "STRICT"}]
        index = await resolve_attributes(parse_cookies("sid=1"), AuthoritativeSource(make_query(entries)), True)
        state = index.lookup("sid")
        assert state.secure is TriState.NOT_SET_WARN
        assert state.http_only is TriState.SET
        assert state.same_site is SameSite.STRICT

    @pytest.mark.asyncio
    async def test_unrecognised_same_site(self, make_query):
        entries = [{"name": "x", "secure": True, "httpOnly": True, "sameSite": "bogus"}]
        index = await resolve_attributes(parse_cookies("x=1"), AuthoritativeSource(make_query(entries)), True)
        assert index.lookup("x").same_site is SameSite.UNKNOWN

    @pytest.mark.asyncio
    async def test_duplicate_names_last_wins(self, make_query):
        entries = [
            {"name": "id", "secure": False, "httpOnly": False, "sameSite": "Lax"},
            {"name": "id", "secure": True, "httpOnly": True, "sameSite": "Strict"},
        ]
        index = await resolve_attributes(parse_cookies("id=1; id=2"), AuthoritativeSource(make_query(entries)), True)
        assert index.lookup("id").same_site is SameSite.STRICT


class TestFallback:
    @pytest.mark.asyncio
    async def test_query_failure_falls_back_for_all(self, failing_query, caplog):
        cookies = parse_cookies("sessionid=abc; XSRF-TOKEN=xyz")
        with caplog.at_level("WARNING", logger="cookiesec.attributes"):
            index = await resolve_attributes(cookies, AuthoritativeSource(failing_query), True)

        assert index.origin is AttributeOrigin.HEURISTIC
        for c in cookies:
            state = index.lookup(c.name)
            assert state.secure is TriState.NOT_SET_WARN
            assert state.http_only is TriState.UNKNOWN
        assert "falling back" in caplog.text

    @pytest.mark.asyncio
    async def test_garbage_answer_falls_back(self, make_query):
        index = await resolve_attributes(parse_cookies("a=1"), AuthoritativeSource(make_query(None)), False)
        assert index.origin is AttributeOrigin.HEURISTIC
        assert index.lookup("a").secure is TriState.UNKNOWN

    @pytest.mark.asyncio
    async def test_entry_without_name_falls_back(self, make_query):
        index = await resolve_attributes(
            parse_cookies("a=1"), AuthoritativeSource(make_query([{"secure": True}])), True,
        )
        assert index.origin is AttributeOrigin.HEURISTIC


class TestSameSiteParse:
    @pytest.mark.parametrize("raw,expected", [
        ("Strict", SameSite.STRICT),
        ("lax", SameSite.LAX),
        ("NONE", SameSite.NONE),
        (" Lax ", SameSite.LAX),
        ("", SameSite.UNKNOWN),
        (None, SameSite.UNKNOWN),
        (3, SameSite.UNKNOWN),
    ])
    def test_parse(self, raw, expected):
        assert SameSite.parse(raw) is expected


class TestAttributeIndex:
    def test_lookup_default_uses_origin(self):
        index = AttributeIndex(origin=AttributeOrigin.AUTHORITATIVE)
        assert index.lookup("anything").source is AttributeOrigin.AUTHORITATIVE
