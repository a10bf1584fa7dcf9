# File: marketing_scout/report/__init__.py
"""marketing_scout.report: сохранение результатов обхода (JSON) и HTML-сводка."""

from __future__ import annotations

from marketing_scout.report.html_report import DEFAULT_TEMPLATE_DIR, render_html
from marketing_scout.report.json_report import load_records, persist

__all__ = ["persist", "load_records", "render_html", "DEFAULT_TEMPLATE_DIR"]
