from __future__ import annotations

import datetime as dt
import html
from pathlib import Path

import markdown

from .content import DATE_FMT, Metadata

PAGE_STYLE = (
    "body { max-width: 800px; margin: 0 auto; padding: 1rem; font-family: system-ui; line-height: 1.5; }"
    " .post-date { color: #666; display: block; margin-bottom: 2rem; }"
    " pre { overflow-x: auto; padding: 0.75rem; }"
    " table { border-collapse: collapse; } th, td { border: 1px solid #ddd; padding: 0.25rem 0.5rem; }"
)

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<title>{{title}}</title>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<style>{{style}}</style>
</head>
<body>
<header>
<h1>{{title}}</h1>
<time class="post-date" datetime="{{datetime}}">{{display_date}}</time>
</header>
<main>
<article>
<div class="content">
{{content}}
</div>
</article>
</main>
</body>
</html>
"""


def render_template(template: str, **context: str) -> str:
    output = template
    late_keys = {"content"}
    for key, value in context.items():
        if key in late_keys:
            continue
        output = output.replace(f"{{{{{key}}}}}", value)
    for key in late_keys:
        if key in context:
            output = output.replace(f"{{{{{key}}}}}", context[key])
    return output


def markdown_to_html(text: str) -> str:
    md = markdown.Markdown(
        extensions=["fenced_code", "tables", "codehilite"],
        extension_configs={"codehilite": {"noclasses": True, "guess_lang": False}},
    )
    return md.convert(text)


def format_date(value: dt.date | str) -> tuple[str, str]:
    """Return the ``datetime`` attribute and the display form of a date.

    Strings must be ``YYYY-MM-DD``; a malformed string raises ``ValueError``.
    """
    if isinstance(value, str):
        value = dt.datetime.strptime(value.strip(), DATE_FMT).date()
    elif isinstance(value, dt.datetime):
        value = value.date()
    display = f"{value:%B} {value.day}, {value.year}"
    return value.strftime(DATE_FMT), display


def render_page(metadata: Metadata, body_html: str) -> str:
    machine_date, display_date = format_date(metadata.date)
    return render_template(
        PAGE_TEMPLATE,
        title=html.escape(metadata.title),
        style=PAGE_STYLE,
        datetime=machine_date,
        display_date=display_date,
        content=body_html,
    )


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
