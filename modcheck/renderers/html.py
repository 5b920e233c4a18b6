"""HTML renderer: MarkupSafe for fragments, a Jinja2 template for the document."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

from .. import symbols
from .base import ReportRenderer

TEMPLATE_NAME = "report.html.j2"


def _create_env(templates_dir: Path | None = None) -> Environment:
    directories = []
    if templates_dir:
        directories.append(str(templates_dir))
    directories.append(str(Path(__file__).with_name("templates")))
    return Environment(
        loader=FileSystemLoader(directories),
        autoescape=select_autoescape(enabled_extensions=("html", "j2"), default_for_string=True),
        trim_blocks=True,
        lstrip_blocks=True,
    )


class HtmlReportRenderer(ReportRenderer):
    format_name = "html"
    extension = "html"

    def __init__(self, templates_dir: Path | None = None) -> None:
        self._env = _create_env(templates_dir)

    def heading(self, text: str, level: int = 3) -> str:
        level = min(max(level, 1), 3)
        return str(Markup("<h{0}>{1}</h{0}>\n").format(level, text))

    def paragraph(self, text: str) -> str:
        return str(Markup("<p>{}</p>\n").format(text))

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
        parts = ["<table>\n<thead><tr>"]
        parts.extend(str(Markup("<th>{}</th>").format(header)) for header in headers)
        parts.append("</tr></thead>\n<tbody>\n")
        for row in rows:
            cells = "".join(str(Markup("<td>{}</td>").format(_multiline(cell))) for cell in row)
            parts.append(f"<tr>{cells}</tr>\n")
        parts.append("</tbody></table>\n")
        return "".join(parts)

    def warning(self, text: str) -> str:
        return str(Markup("<div class='warning'>{}{}</div>\n").format(symbols.WARNING, text))

    def info(self, text: str) -> str:
        return str(Markup("<div class='info'>{}{}</div>\n").format(symbols.INFO, text))

    def error(self, text: str) -> str:
        return str(Markup("<div class='error'>{}{}</div>\n").format(symbols.ERROR, text))

    def open_section(self) -> str:
        return "<div class='indented-section'>\n"

    def close_section(self) -> str:
        return "</div>\n"

    def wrap_document(self, title: str, body: str) -> str:
        template = self._env.get_template(TEMPLATE_NAME)
        return template.render(title=title, body=Markup(body))


def _multiline(value: str) -> Markup:
    return Markup("<br/>").join(escape(line) for line in value.splitlines()) if value else Markup("")
