"""
CookieSec — Browser Capture (Playwright)

Opens a page in headless Chromium and takes the snapshot the pipeline needs:
  - document.cookie, exactly as page scripts see it
  - the final page URL (after redirects)
  - the context's cookie jar, which knows the real Secure / HttpOnly /
    SameSite flags and serves as the authoritative attribute source

The jar is read while the browser is open; the returned query just hands
back that list, so the browser can be closed before analysis starts. If the jar
can't be read, the snapshot carries no query and the report falls back to
heuristic attributes.
"""

import logging
from typing import Any, Optional

from cookiesec.analyzer import PageSnapshot
from cookiesec.attributes import AttributeQuery
from cookiesec.errors import BrowserUnavailableError

logger = logging.getLogger("cookiesec.browser")

try:
    from playwright.async_api import async_playwright, Page, TimeoutError as PlaywrightTimeout
    PLAYWRIGHT_AVAILABLE = True
except ImportError:
    PLAYWRIGHT_AVAILABLE = False
    Page = None

_INSTALL_HINT = "Run: pip install playwright && playwright install chromium"


async def _resilient_navigate(page: "Page", url: str, timeout: int = 30000) -> None:
    """Navigate, falling back to 'commit' if DOMContentLoaded never fires."""
    try:
        await page.goto(url, wait_until="domcontentloaded", timeout=timeout)
        return
    except PlaywrightTimeout:
        logger.warning(f"domcontentloaded timeout for {url}, falling back to commit")

    try:
        await page.goto(url, wait_until="commit", timeout=timeout)
    except PlaywrightTimeout:
        logger.warning(f"commit timeout for {url}, proceeding anyway")


def _jar_query(jar: list[dict[str, Any]]):
    async def query() -> list[dict[str, Any]]:
        return jar
    return query


async def _read_jar(context, url: str) -> Optional[AttributeQuery]:
    """Read the context's cookie jar for url. None if the jar can't be read."""
    try:
        jar = await context.cookies(url)
    except Exception as e:
        logger.warning(
            f"Cookie jar query failed, attributes will be heuristic: {e}",
            extra={"url": url},
        )
        return None

    logger.info(f"Captured {len(jar)} jar cookie(s) from {url}", extra={"url": url})
    return _jar_query(jar)


async def capture_page(url: str, *, headless: bool = True, timeout_ms: int = 30000) -> PageSnapshot:
    """
    Load a page and capture its cookies.

    Args:
        url: Page to open
        headless: Run Chromium without a window
        timeout_ms: Navigation timeout

    Returns:
        PageSnapshot with raw cookies and an authoritative attribute query
        (None when the cookie jar could not be read)

    Raises:
        BrowserUnavailableError: Playwright or Chromium is not usable
    """
    if not PLAYWRIGHT_AVAILABLE:
        raise BrowserUnavailableError(f"Playwright not installed. {_INSTALL_HINT}")

    async with async_playwright() as playwright:
        try:
            browser = await playwright.chromium.launch(headless=headless)
        except Exception as e:
            # Chromium not downloaded — most common failure
            raise BrowserUnavailableError(f"Browser launch failed: {e}. {_INSTALL_HINT}") from e

        try:
            context = await browser.new_context()
            page = await context.new_page()
            await _resilient_navigate(page, url, timeout=timeout_ms)

            raw_cookies = await page.evaluate("() => document.cookie")
            final_url = page.url
            jar_query = await _read_jar(context, final_url)
        finally:
            await browser.close()

    return PageSnapshot(
        url=final_url,
        raw_cookies=raw_cookies or "",
        attribute_query=jar_query,
    )
