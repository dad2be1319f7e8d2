from __future__ import annotations

import datetime as dt
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from .content import Document, Metadata, read_document
from .links import rewrite_links
from .render import markdown_to_html, render_page, write_text
from .utils import clean_output_dir, ensure_directory

POSTS_SUBDIR = "posts"


class BuildError(Exception):
    """The build cannot run at all, e.g. the posts directory is missing."""


@dataclass(frozen=True)
class Post:
    document: Document
    metadata: Metadata
    content: str


@dataclass(frozen=True)
class RenderedPage:
    path: Path
    html: str


@dataclass
class BuildReport:
    written: list[Path] = field(default_factory=list)
    failed: list[tuple[Path, str]] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failed


class BuildPipeline:
    """One full pass from ``posts_dir`` to ``<output_dir>/posts/<slug>.html``.

    Nothing is kept between runs; every call to :meth:`run` reads, renders
    and writes every document again.
    """

    def __init__(
        self,
        posts_dir: Path,
        output_dir: Path,
        clock: Callable[[], dt.datetime] = dt.datetime.now,
        clean: bool = True,
    ) -> None:
        self.posts_dir = Path(posts_dir)
        self.output_dir = Path(output_dir)
        self.clock = clock
        self.clean = clean

    @property
    def pages_dir(self) -> Path:
        return self.output_dir / POSTS_SUBDIR

    def discover(self) -> list[Path]:
        files = (path for path in self.posts_dir.rglob("*.md") if path.is_file())
        return sorted(files, key=lambda p: p.as_posix())

    def build_post(self, path: Path, now: dt.datetime) -> Post:
        document, metadata, body = read_document(path, now)
        html_content = markdown_to_html(rewrite_links(body))
        return Post(document=document, metadata=metadata, content=html_content)

    def render(self, post: Post, slug: str) -> RenderedPage:
        return RenderedPage(
            path=self.pages_dir / f"{slug}.html",
            html=render_page(post.metadata, post.content),
        )

    def run(self) -> BuildReport:
        if not self.posts_dir.is_dir():
            raise BuildError(f"Posts directory does not exist: {self.posts_dir}")

        start = time.perf_counter()
        if self.clean:
            try:
                clean_output_dir(self.output_dir, self.posts_dir)
            except ValueError as exc:
                raise BuildError(str(exc)) from exc
        ensure_directory(self.pages_dir)

        now = self.clock()
        report = BuildReport()
        used_slugs: set[str] = set()
        for path in self.discover():
            try:
                post = self.build_post(path, now)
                slug = unique_slug(post.metadata.slug, used_slugs)
                if slug != post.metadata.slug:
                    print(
                        f"Duplicate slug '{post.metadata.slug}' for {path}, writing as '{slug}'.",
                        file=sys.stderr,
                    )
                page = self.render(post, slug)
                print(f"Generating {page.path}")
                write_text(page.path, page.html)
            except Exception as exc:
                print(f"Error generating file for post {path}: {exc}", file=sys.stderr)
                report.failed.append((path, str(exc)))
                continue
            used_slugs.add(slug)
            report.written.append(page.path)

        report.elapsed = time.perf_counter() - start
        return report


def unique_slug(slug: str, used: set[str]) -> str:
    if slug not in used:
        return slug
    counter = 2
    while f"{slug}-{counter}" in used:
        counter += 1
    return f"{slug}-{counter}"
