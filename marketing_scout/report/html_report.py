# File: marketing_scout/report/html_report.py
"""marketing_scout.report.html_report: Генерация HTML-сводки с помощью Jinja2."""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from marketing_scout.crawler.models import MatchRecord

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


def render_html(
    records: Sequence[MatchRecord],
    template_dir: Union[Path, str],
    output_path: Union[Path, str],
) -> Path:
    """Рендерит HTML-сводку, сгруппированную по хосту источника, и сохраняет её.

    Args:
        records: найденные MatchRecord.
        template_dir: директория с шаблоном ``report.html.j2``.
        output_path: путь к итоговому HTML-файлу.

    Returns:
        Path до сохранённого HTML-файла.
    """
    template_dir = Path(template_dir)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template("report.html.j2")

    by_host: Dict[str, List[MatchRecord]] = defaultdict(list)
    for rec in records:
        by_host[rec.source_host].append(rec)

    context: dict[str, Any] = {
        "total": len(records),
        "hosts": sorted(by_host.items()),
    }

    html_content = template.render(**context)
    output_path.write_text(html_content, encoding="utf-8")

    return output_path
