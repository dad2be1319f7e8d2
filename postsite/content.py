from __future__ import annotations

import datetime as dt
import re
import sys
from dataclasses import dataclass
from pathlib import Path

import yaml

DATE_FMT = "%Y-%m-%d"
MD_SUFFIX_RE = re.compile(r"\.md$")
UNSAFE_CHARS_RE = re.compile(r"[^\w\s-]", re.ASCII)
WHITESPACE_RE = re.compile(r"\s+")
FRONT_MATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(?P<header>.*?)^---[ \t]*\r?$\n?(?P<body>.*)",
    re.DOTALL | re.MULTILINE,
)


@dataclass(frozen=True)
class Document:
    path: Path
    raw_body: str


@dataclass(frozen=True)
class Metadata:
    title: str
    date: dt.date
    slug: str


class DefaultMetadata(Metadata):
    """Metadata derived entirely from the filename and the build time."""


def sanitize_filename(filename: str) -> str:
    text = MD_SUFFIX_RE.sub("", filename)
    text = UNSAFE_CHARS_RE.sub("", text)
    text = text.strip()
    text = WHITESPACE_RE.sub("-", text)
    return text.lower()


def title_from_filename(filename: str) -> str:
    text = MD_SUFFIX_RE.sub("", filename)
    text = text.replace("-", " ").strip()
    return text.capitalize() or "Untitled"


def default_metadata(filename: str, now: dt.datetime) -> DefaultMetadata:
    return DefaultMetadata(
        title=title_from_filename(filename),
        date=now.date(),
        slug=sanitize_filename(filename) or "post",
    )


def parse_date(value: object) -> dt.date | None:
    # datetime is a subclass of date, check it first
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return dt.datetime.strptime(value.strip(), DATE_FMT).date()
        except ValueError:
            return None
    return None


def _text_value(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def extract_metadata(text: str, filename: str, now: dt.datetime) -> tuple[Metadata, str]:
    """Split an optional YAML header from a markdown document.

    Returns ``(metadata, body)``. Without a header the whole text is the body
    and the metadata is a :class:`DefaultMetadata`. A header that does not
    parse into a mapping also yields :class:`DefaultMetadata`, but with an
    empty body.
    """
    clean_text = text.lstrip("\ufeff")
    defaults = default_metadata(filename, now)
    match = FRONT_MATTER_RE.match(clean_text)
    if match is None:
        return defaults, clean_text

    try:
        meta = yaml.safe_load(match.group("header"))
    except (yaml.YAMLError, ValueError, RecursionError) as exc:
        print(f"Invalid front matter in {filename}: {exc}", file=sys.stderr)
        return defaults, ""
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        print(f"Front matter in {filename} is not a mapping.", file=sys.stderr)
        return defaults, ""

    title = _text_value(meta.get("title")) or defaults.title
    date = parse_date(meta.get("date")) or defaults.date
    slug = sanitize_filename(_text_value(meta.get("slug"))) or defaults.slug
    return Metadata(title=title, date=date, slug=slug), match.group("body")


def read_document(path: Path, now: dt.datetime) -> tuple[Document, Metadata, str]:
    """Read and split one source file. Unreadable files get default metadata and no body."""
    try:
        document = Document(path=path, raw_body=path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Error reading {path.name} - {exc}", file=sys.stderr)
        return Document(path=path, raw_body=""), default_metadata(path.name, now), ""
    metadata, body = extract_metadata(document.raw_body, path.name, now)
    return document, metadata, body
