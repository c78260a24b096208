"""
CookieSec — Entry Point

Usage:
    cookiesec check <url>                               # Open the page in Chromium
    cookiesec analyze --cookies "a=1; b=2" --url <url>  # Offline, from a cookie string
    cookiesec analyze ... --attributes jar.json         # ... with real attribute values
    cookiesec --verbose ...                             # Debug logging
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from cookiesec import __version__
from cookiesec.analyzer import PageSnapshot, run_analysis
from cookiesec.errors import CookieSecError
from cookiesec.logging_config import get_logger, setup_logging
from cookiesec.models import Report
from cookiesec.report import REPORT_FORMATS
from cookiesec.theme import COOKIESEC_THEME, TRISTATE_STYLE, TRISTATE_TEXT, same_site_style

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cookiesec",
        description="CookieSec — cookie security report for a web page",
        epilog="Examples:\n"
               "  cookiesec check https://example.com\n"
               "  cookiesec analyze --cookies 'sessionid=abc; lang=en' --url https://example.com\n",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"cookiesec {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--output-dir", "-o", help="Directory for the report (default: config output_dir)")
    common.add_argument("--format", "-f", choices=REPORT_FORMATS, help="Report format (default: config format)")
    common.add_argument("--filename", help="Report file name (default: cookie-security-report.<format>)")
    common.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser("check", parents=[common], help="Open a page in Chromium and report its cookies")
    check_parser.add_argument("url", help="URL to check (e.g. https://localhost:3000)")
    check_parser.add_argument("--show-browser", action="store_true", help="Show the browser window")

    analyze_parser = subparsers.add_parser("analyze", parents=[common], help="Report on a raw cookie string")
    analyze_parser.add_argument("--cookies", required=True, help="Raw cookie string, as in document.cookie")
    analyze_parser.add_argument("--url", required=True, help="Page the cookies belong to")
    analyze_parser.add_argument(
        "--attributes",
        type=Path,
        help="JSON array of {name, secure, httpOnly, sameSite} used as the authoritative source",
    )

    return parser


def _file_query(path: Path):
    """Authoritative query backed by a JSON cookie export. Read once, when awaited."""
    async def query() -> list[dict]:
        data = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = data.get("cookies", [])
        return data
    return query


def print_summary(console: Console, report: Report, path: Path):
    """Findings table + report path."""
    if not report.findings:
        console.print(f"[muted]No cookies found for {escape(report.page_url)}[/]")
    else:
        table = Table(title=Text(f"Cookies for {report.page_url}"), title_justify="left")
        table.add_column("#", justify="right", style="muted")
        table.add_column("Name")
        table.add_column("Purpose")
        table.add_column("Session")
        table.add_column("Important")
        table.add_column("Secure")
        table.add_column("HttpOnly")
        table.add_column("SameSite")

        for f in report.findings:
            attrs = f.attributes
            table.add_row(
                str(f.index),
                Text(f.cookie.name),
                f.classification.purpose.value,
                "yes" if f.classification.is_session else "",
                Text("yes", style="warning") if f.classification.is_important else "",
                Text(TRISTATE_TEXT[attrs.secure], style=TRISTATE_STYLE[attrs.secure]),
                Text(TRISTATE_TEXT[attrs.http_only], style=TRISTATE_STYLE[attrs.http_only]),
                Text(attrs.same_site.value, style=same_site_style(attrs.same_site)),
            )
        console.print(table)
        console.print(f"[muted]Attribute source: {report.attribute_source.value}[/]")

    console.print(f"[success]Report written:[/] {escape(str(path))}")


async def async_main(argv: Optional[list[str]] = None) -> int:
    """Async main entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose)
    console = Console(theme=COOKIESEC_THEME, stderr=False)

    try:
        from cookiesec.config import load_config
        config = load_config()

        output_dir = Path(args.output_dir) if args.output_dir else config.output_dir
        format = args.format or config.format

        if args.command == "check":
            from cookiesec.browser import capture_page
            logger.info("CookieSec check mode", extra={"url": args.url})
            snapshot = await capture_page(
                args.url,
                headless=config.headless and not args.show_browser,
                timeout_ms=config.timeout_ms,
            )
        else:
            snapshot = PageSnapshot(
                url=args.url,
                raw_cookies=args.cookies,
                attribute_query=_file_query(args.attributes) if args.attributes else None,
            )

        report, path = await run_analysis(snapshot, output_dir, format=format, filename=args.filename)

    except CookieSecError as e:
        logger.error(f"Run failed: {e}", exc_info=True)
        console.print(f"[error]\\[!] {escape(str(e))}[/]")
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        console.print(f"[error]\\[!] Fatal error: {escape(str(e))}[/]")
        return 1

    print_summary(console, report, path)
    return 0


def main():
    """Sync entry point for console_scripts (pyproject.toml)."""
    try:
        sys.exit(asyncio.run(async_main()))
    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(130)


if __name__ == "__main__":
    main()
