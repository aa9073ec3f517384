from __future__ import annotations

import datetime as dt
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Optional

from .content import parse_front_matter
from .errors import BuildError, DuplicateUrlError, FrontmatterError
from .markup import render_markdown
from .models import Article, build_article, resolve_location


def find_markdown_files(root: Path) -> list[Path]:
    return sorted((path for path in root.rglob("*.md") if path.is_file()), key=lambda p: p.as_posix())


def load_article(md_file: Path, content_root: Optional[Path], now: dt.datetime) -> Article:
    try:
        raw_text = md_file.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise FrontmatterError(md_file, f"not valid UTF-8 ({exc})") from exc
    front, body = parse_front_matter(raw_text, md_file)
    url = resolve_location(front, md_file, content_root=content_root, now=now)[-1]
    html_content, rendered = render_markdown(body, url)
    return build_article(front, body, md_file, html_content, rendered, content_root=content_root, now=now)


def scan_articles(content_root: Path, now: dt.datetime, workers: int = 1) -> list[Article]:
    """Parse every article under ``content_root``; any failure aborts the scan."""
    if not content_root.is_dir():
        raise BuildError(f"Content directory not found: {content_root}")
    md_files = find_markdown_files(content_root)

    def parse(md_file: Path) -> Article:
        return load_article(md_file, content_root, now)

    workers = max(1, min(int(workers or 1), len(md_files) or 1))
    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(parse, md_files))
    return [parse(md_file) for md_file in md_files]


def ensure_unique_urls(articles: Iterable[Article]) -> None:
    seen: dict[str, Article] = {}
    for article in articles:
        previous = seen.get(article.url)
        if previous is not None:
            raise DuplicateUrlError(article.url, previous.source_path, article.source_path)
        seen[article.url] = article


def is_published(article: Article, today: dt.date) -> bool:
    return article.publish_date.date() <= today


def filter_published(articles: Iterable[Article], today: dt.date) -> list[Article]:
    return [article for article in articles if is_published(article, today)]
