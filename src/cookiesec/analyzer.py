"""
CookieSec — Analysis Pipeline

  raw cookie string ──► parse_cookies ──► resolve_attributes ──► build_report ──► write_report
                                           (one optional await)

analyze() is a pure function of its inputs apart from the single optional
authoritative query: the page URL, the cookie string and the HTTPS flag are
all passed in explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from cookiesec.attributes import AttributeQuery, resolve_attributes, select_source
from cookiesec.collector import parse_cookies
from cookiesec.models import Report
from cookiesec.report import build_report, write_report

logger = logging.getLogger("cookiesec.analyzer")


def is_encrypted_url(url: str) -> bool:
    """True for https:// pages."""
    return urlparse(url).scheme.lower() == "https"


@dataclass
class PageSnapshot:
    """Everything the pipeline needs from a page."""
    url: str
    raw_cookies: str = ""
    attribute_query: Optional[AttributeQuery] = None

    @property
    def is_encrypted(self) -> bool:
        return is_encrypted_url(self.url)


async def analyze(
    raw_cookie_string: str,
    page_url: str,
    *,
    is_encrypted: Optional[bool] = None,
    attribute_query: Optional[AttributeQuery] = None,
    generated_at: Optional[datetime] = None,
) -> Report:
    """
    Build a cookie report for one page.

    Args:
        raw_cookie_string: document.cookie style string
        page_url: URL shown in the report header
        is_encrypted: Page served over HTTPS (default: derived from page_url)
        attribute_query: Optional authoritative cookie jar query
        generated_at: Report timestamp (default: now)

    Returns:
        Immutable Report
    """
    if is_encrypted is None:
        is_encrypted = is_encrypted_url(page_url)

    cookies = parse_cookies(raw_cookie_string)
    source = select_source(attribute_query, is_encrypted)
    attributes = await resolve_attributes(cookies, source, is_encrypted)

    report = build_report(page_url, cookies, attributes, generated_at=generated_at)
    logger.debug(
        f"Analyzed {report.cookie_count} cookie(s) for {page_url}",
        extra={
            "url": page_url,
            "cookie_count": report.cookie_count,
            "attribute_source": report.attribute_source.value,
        },
    )
    return report


async def run_analysis(
    snapshot: PageSnapshot,
    output_dir: str | Path,
    format: str = "html",
    filename: Optional[str] = None,
) -> tuple[Report, Path]:
    """Analyze a page snapshot and write the report. Returns (report, path)."""
    report = await analyze(
        snapshot.raw_cookies,
        snapshot.url,
        is_encrypted=snapshot.is_encrypted,
        attribute_query=snapshot.attribute_query,
    )
    path = write_report(report, output_dir, format=format, filename=filename)
    logger.info(
        f"Cookie report written: {path}",
        extra={"url": snapshot.url, "cookie_count": report.cookie_count, "format": format},
    )
    return report, path
