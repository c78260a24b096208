"""
CookieSec — Report Generator

Turns parsed cookies + resolved attributes into a Report, and renders it.

Formats:
  - HTML (.html) — default, standalone page with inline styles
  - Markdown (.md)
  - JSON (.json) — machine-readable

Sections:
  1. Header (page URL)
  2. Cookies Detected (N), or an explicit no-cookies notice
  3. One block per cookie: Purpose, Type, Importance, Value, Secure, HttpOnly, SameSite
  4. Best Practices & Security Recommendations (constant)
  5. Footer with generation timestamp

Renderers are pure functions of a Report. write_report() is the only place
that touches the filesystem, and it never leaves a partial file behind.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional

from cookiesec.attributes import AttributeIndex
from cookiesec.classifier import classify
from cookiesec.errors import ReportError
from cookiesec.models import (
    AttributeOrigin,
    AttributeState,
    Cookie,
    Finding,
    Recommendation,
    Report,
    SameSite,
    TriState,
)

logger = logging.getLogger("cookiesec.report")

VALUE_PREVIEW_LIMIT = 100
TRUNCATION_MARKER = "..."
DEFAULT_REPORT_NAME = "cookie-security-report"
REPORT_FORMATS = ("html", "md", "json")

NO_COOKIES_NOTICE = (
    "No cookies found for this domain "
    "(or all are HttpOnly, or set on a different path)."
)

# Light Markdown: **bold** and `code` are rendered in HTML output
RECOMMENDATIONS: tuple[Recommendation, ...] = (
    Recommendation(
        text="All cookies holding **session, authentication, or CSRF** data should be set with "
        "`Secure` (HTTPS only), `HttpOnly` (not accessible in JS), and `SameSite` "
        "(preferably **Lax** or **Strict**).",
    ),
    Recommendation(text="Session cookies should have no expiry or a short expiry."),
    Recommendation(
        text="If you see any cookies here that should be HttpOnly, but are accessible in JS, "
        "**review your backend settings**.",
    ),
    Recommendation(
        text="For **full visibility** (including HttpOnly, expiry, domain/path), use your browser DevTools:",
        steps=(
            "Network tab → review **Set-Cookie** headers",
            "Application/Storage tab → Cookies section",
        ),
    ),
    Recommendation(text="Avoid setting cookies on broad domains (e.g. `.example.com`) unless necessary."),
    Recommendation(text="Minimize number of cookies, and limit third-party cookies when possible."),
)


# ═══════════════════════════════════════════════════════════════════════════
# Escaping & truncation
# ═══════════════════════════════════════════════════════════════════════════


def escape_html(text: str) -> str:
    """Escape HTML special characters."""
    return (
        str(text)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#x27;")
    )


_MD_SPECIAL = re.compile(r"([\\`*_\[\]()#|!~])")
_LINE_BREAKS = re.compile(r"[\r\n]+")


def escape_md(text: str) -> str:
    """Escape text for inline use in Markdown.

    Line breaks become spaces so a value can never start a new block, Markdown
    punctuation is backslash-escaped, and raw HTML is entity-escaped.
    """
    text = _LINE_BREAKS.sub(" ", str(text))
    return escape_html(_MD_SPECIAL.sub(r"\\\1", text))


def truncate_value(value: str, limit: int = VALUE_PREVIEW_LIMIT) -> str:
    """Cut values longer than limit and append the truncation marker."""
    if len(value) <= limit:
        return value
    return value[:limit] + TRUNCATION_MARKER


def _inline_md(text: str) -> str:
    """Convert inline Markdown (bold, inline code) to HTML. HTML-safe."""
    text = escape_html(text)
    text = re.sub(r"`([^`]+)`", r"<code>\1</code>", text)
    text = re.sub(r"\*\*([^*]+)\*\*", r"<b>\1</b>", text)
    return text


# ═══════════════════════════════════════════════════════════════════════════
# Attribute wording
# ═══════════════════════════════════════════════════════════════════════════


def secure_label(state: AttributeState) -> str:
    if state.secure is TriState.SET:
        return "Set"
    if state.secure is TriState.NOT_SET_WARN:
        return "Not set (should be Secure)"
    if state.source is AttributeOrigin.HEURISTIC:
        return "Page is not HTTPS"
    return "Unknown"


def http_only_label(state: AttributeState) -> str:
    if state.http_only is TriState.SET:
        return "Set"
    if state.http_only is TriState.NOT_SET_WARN:
        return "Not set (readable from JS)"
    return "Unknown (not available to JS)"


def same_site_label(state: AttributeState) -> str:
    if state.same_site is SameSite.UNKNOWN:
        if state.source is AttributeOrigin.HEURISTIC:
            return "Unknown (not available via JS)"
        return "Unknown"
    return state.same_site.value


def type_label(finding: Finding) -> str:
    return "SESSION cookie" if finding.classification.is_session else "Persistent or other"


def importance_label(finding: Finding) -> str:
    if finding.classification.is_important:
        return "Important (session/auth/CSRF) cookie"
    return "Likely non-sensitive or application-specific cookie"


# ═══════════════════════════════════════════════════════════════════════════
# Assembly
# ═══════════════════════════════════════════════════════════════════════════


def build_report(
    page_url: str,
    cookies: list[Cookie],
    attributes: AttributeIndex,
    generated_at: Optional[datetime] = None,
) -> Report:
    """Combine cookies, attributes and classifications into a Report.

    Findings keep collector order. Duplicate names share the attribute
    state of their name.
    """
    findings = tuple(
        Finding(
            index=i,
            cookie=cookie,
            attributes=attributes.lookup(cookie.name),
            classification=classify(cookie),
        )
        for i, cookie in enumerate(cookies, 1)
    )
    return Report(
        page_url=page_url,
        findings=findings,
        recommendations=RECOMMENDATIONS,
        attribute_source=attributes.origin,
        generated_at=generated_at or datetime.now(),
    )


def _timestamp(report: Report) -> str:
    return report.generated_at.strftime("%Y-%m-%d %H:%M:%S")


# ═══════════════════════════════════════════════════════════════════════════
# HTML Report
# ═══════════════════════════════════════════════════════════════════════════

_HTML_STYLE = """
    body { font-family: sans-serif; max-width: 900px; margin: 2em auto; background: #f7fafc; }
    h1, h2 { color: #22456B; }
    .cookie-box { background: #fff; border-radius: 6px; margin-bottom: 18px; box-shadow: 0 1px 4px #0001; padding: 1em; }
    .cookie-box ul { margin: 0 0 0.5em 1em; }
    .key { color: #444; font-weight: bold; }
    .warn { color: #c22; font-weight: bold; }
    .ok { color: #2a5; font-weight: bold; }
    code { background: #eee; padding: 2px 5px; border-radius: 3px; }
    .purpose { font-size: 0.98em; }
    .footer { margin-top: 2em; color: #888; font-size: 90%; }
    summary { font-weight: bold; font-size: 1.07em; }
"""


def _tri_html(state: TriState, label: str) -> str:
    if state is TriState.SET:
        return f'<span class="ok">{escape_html(label)}</span>'
    if state is TriState.NOT_SET_WARN:
        return f'<span class="warn">{escape_html(label)}</span>'
    return escape_html(label)


def _finding_html(finding: Finding) -> str:
    cookie = finding.cookie
    attrs = finding.attributes
    if finding.classification.is_session:
        type_html = f'<span class="ok">{type_label(finding)}</span>'
    else:
        type_html = type_label(finding)
    if finding.classification.is_important:
        importance_html = f'<span class="warn">{importance_label(finding)}</span>'
    else:
        importance_html = importance_label(finding)

    return f"""<details class="cookie-box" open>
  <summary>Cookie #{finding.index}: <code>{escape_html(cookie.name)}</code></summary>
  <ul>
    <li><span class="key">Purpose:</span> <span class="purpose">{escape_html(finding.classification.purpose.value)}</span></li>
    <li><span class="key">Type:</span> {type_html}</li>
    <li>{importance_html}</li>
    <li><span class="key">Value:</span> <code>{escape_html(truncate_value(cookie.value))}</code></li>
    <li><span class="key">Secure:</span> {_tri_html(attrs.secure, secure_label(attrs))}</li>
    <li><span class="key">HttpOnly:</span> {_tri_html(attrs.http_only, http_only_label(attrs))}</li>
    <li><span class="key">SameSite:</span> {escape_html(same_site_label(attrs))}</li>
  </ul>
</details>"""


def _recommendation_html(item: Recommendation) -> str:
    if not item.steps:
        return f"    <li>{_inline_md(item.text)}</li>"
    steps = "\n".join(f"        <li>{_inline_md(step)}</li>" for step in item.steps)
    return f"    <li>{_inline_md(item.text)}\n      <ul>\n{steps}\n      </ul>\n    </li>"


def generate_html_report(report: Report) -> str:
    """Render the report as a standalone HTML page."""
    if report.findings:
        body = "\n".join(_finding_html(f) for f in report.findings)
    else:
        body = f'<div class="cookie-box"><b>{escape_html(NO_COOKIES_NOTICE)}</b></div>'

    recommendations = "\n".join(_recommendation_html(item) for item in report.recommendations)

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Cookie Security Analyzer Report</title>
<style>{_HTML_STYLE}</style>
</head>
<body>
<h1>Cookie Security Analyzer Report</h1>
<p>For page: <code>{escape_html(report.page_url)}</code></p>
<h2>Cookies Detected ({report.cookie_count})</h2>
{body}
<h2>Best Practices &amp; Security Recommendations</h2>
<div class="cookie-box">
  <ul>
{recommendations}
  </ul>
</div>
<div class="footer">Generated by Cookie Security Analyzer &bull; {_timestamp(report)}</div>
</body>
</html>
"""


# ═══════════════════════════════════════════════════════════════════════════
# Markdown Report
# ═══════════════════════════════════════════════════════════════════════════


def generate_markdown_report(report: Report) -> str:
    """Render the report as Markdown. Cookie data and the page URL go through escape_md."""
    lines: list[str] = []
    w = lines.append

    w("# Cookie Security Analyzer Report")
    w("")
    w(f"**Page:** {escape_md(report.page_url)}")
    w("")
    w(f"**Attribute source:** {report.attribute_source.value}")
    w("")
    w(f"## Cookies Detected ({report.cookie_count})")
    w("")

    if not report.findings:
        w(NO_COOKIES_NOTICE)
        w("")

    for finding in report.findings:
        attrs = finding.attributes
        w(f"### Cookie #{finding.index}: {escape_md(finding.cookie.name)}")
        w("")
        w(f"- **Purpose:** {finding.classification.purpose.value}")
        w(f"- **Type:** {type_label(finding)}")
        w(f"- {importance_label(finding)}")
        w(f"- **Value:** {escape_md(truncate_value(finding.cookie.value))}")
        w(f"- **Secure:** {secure_label(attrs)}")
        w(f"- **HttpOnly:** {http_only_label(attrs)}")
        w(f"- **SameSite:** {same_site_label(attrs)}")
        w("")

    w("## Best Practices & Security Recommendations")
    w("")
    for item in report.recommendations:
        w(f"- {item.text}")
        for step in item.steps:
            w(f"  - {step}")
    w("")
    w("---")
    w("")
    w(f"Generated by Cookie Security Analyzer • {_timestamp(report)}")
    w("")

    return "\n".join(lines)


# ═══════════════════════════════════════════════════════════════════════════
# JSON Report
# ═══════════════════════════════════════════════════════════════════════════


def generate_json_report(report: Report) -> str:
    """Generate machine-readable JSON report."""
    data = {
        "metadata": {
            "tool": "CookieSec",
            "page_url": report.page_url,
            "attribute_source": report.attribute_source.value,
            "timestamp": report.generated_at.isoformat(),
        },
        "summary": report.summary(),
        "findings": [f.to_dict() for f in report.findings],
        "recommendations": [item.model_dump(mode="json") for item in report.recommendations],
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


_RENDERERS = {
    "html": generate_html_report,
    "md": generate_markdown_report,
    "json": generate_json_report,
}


def render_report(report: Report, format: str = "html") -> str:
    """Render in the given format ("html", "md" or "json")."""
    try:
        renderer = _RENDERERS[format]
    except KeyError:
        raise ReportError(f"Unknown report format '{format}' (expected one of {', '.join(REPORT_FORMATS)})") from None
    try:
        return renderer(report)
    except Exception as e:
        raise ReportError(f"Failed to render {format} report: {e}") from e


# ═══════════════════════════════════════════════════════════════════════════
# Output
# ═══════════════════════════════════════════════════════════════════════════


def write_report(
    report: Report,
    output_dir: str | Path,
    format: str = "html",
    filename: Optional[str] = None,
) -> Path:
    """
    Write report to file.

    The document is rendered fully in memory, written to a temporary file
    next to the target and moved into place, so the target path either holds
    the complete report or is untouched.

    Args:
        report: Assembled report
        output_dir: Directory for output
        format: "html", "md", or "json"
        filename: Output file name (default: cookie-security-report.<format>)

    Returns:
        Path to generated report file

    Raises:
        ReportError: rendering or writing failed
    """
    content = render_report(report, format)

    output_dir = Path(output_dir)
    filepath = output_dir / (filename or f"{DEFAULT_REPORT_NAME}.{format}")

    # Lone surrogates (undecodable argv bytes) fail here, before any file exists
    try:
        data = content.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ReportError(f"Report for {report.page_url} is not valid UTF-8: {e}") from e

    tmp_name = None
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "wb",
            dir=output_dir,
            prefix=".cookiesec-",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(data)
        os.replace(tmp_name, filepath)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise ReportError(f"Could not write report to {filepath}: {e}") from e

    logger.debug(f"Report written: {filepath}")
    return filepath
