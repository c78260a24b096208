"""CookieSec — cookie hygiene report for a single page."""

__version__ = "1.0.0"
__description__ = "Classify the cookies a page exposes to scripts and report their security attributes."

from cookiesec.analyzer import PageSnapshot, analyze, run_analysis
from cookiesec.config import Config, load_config
from cookiesec.models import Report

__all__ = ["analyze", "run_analysis", "PageSnapshot", "Report", "load_config", "Config"]
