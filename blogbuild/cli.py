from __future__ import annotations

import argparse
import datetime as dt
import os
import sys
import time
from pathlib import Path
from typing import Optional

from .assets import copy_article_images, copy_global_images
from .config import load_config
from .errors import BuildError
from .markup import highlight_css
from .models import Article
from .pages import build_404, build_articles, build_index, build_projects, build_search_index
from .render import load_templates, read_stylesheet
from .scanner import ensure_unique_urls, filter_published, is_published, scan_articles
from .utils import clean_output_dir, parse_bool, parse_int


def describe_article(article: Article) -> str:
    languages = ""
    if article.languages_used:
        languages = f", languages: {', '.join(sorted(article.languages_used))}"
    return f"{article.title} ({article.read_time_minutes} min read{languages})"


def build_site(args: argparse.Namespace, now: Optional[dt.datetime] = None) -> int:
    """Run one full build and return the number of published articles."""
    now = now or dt.datetime.now()
    content_dir = Path(args.content)
    templates_dir = Path(args.templates)
    output_dir = Path(args.output)
    images_dir = Path(args.images)
    project_root = Path.cwd()

    build_workers = int(getattr(args, "build_workers", 0) or 0)
    if build_workers <= 0:
        build_workers = os.cpu_count() or 1
    build_workers = max(1, min(build_workers, 32))

    templates = load_templates(templates_dir)
    styles = read_stylesheet(Path(args.styles))
    highlight_style = (getattr(args, "highlight_style", "") or "").strip()
    if highlight_style:
        styles = f"{styles}\n{highlight_css(highlight_style)}"

    print("Parsing markdown files...")
    articles = scan_articles(content_dir, now, workers=build_workers)
    for article in articles:
        print(f"Parsed: {describe_article(article)}")
    ensure_unique_urls(articles)

    published = filter_published(articles, now.date())
    for article in articles:
        if not is_published(article, now.date()):
            print(f"Scheduled: {article.title} ({article.publish_date.date().isoformat()})")
    print(f"Found {len(articles)} articles, {len(published)} published")

    if parse_bool(getattr(args, "clean", True)):
        clean_output_dir(output_dir, project_root)
    output_dir.mkdir(parents=True, exist_ok=True)

    build_articles(output_dir, published, templates, styles, args, workers=build_workers)
    build_index(output_dir, published, templates, styles, args)
    build_projects(output_dir, published, templates, styles, args)
    build_404(output_dir, templates, styles, args)
    build_search_index(output_dir, published)

    copied = sum(copy_article_images(article, output_dir) for article in published)
    if copy_global_images(images_dir, output_dir):
        print(f"Copied global images from {images_dir}")
    if copied:
        print(f"Copied {copied} article images")

    print(f"Generated {len(published)} articles")
    languages = sorted({lang for article in published for lang in article.languages_used})
    if languages:
        print(f"Languages detected: {', '.join(languages)}")
    return len(published)


def main() -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args()
    config = load_config(Path(pre_args.config))

    def cfg_value(key: str, default: object) -> object:
        value = config.get(key)
        return default if value is None else value

    def cfg_str(key: str, default: str) -> str:
        value = cfg_value(key, default)
        return default if value is None else str(value)

    def cfg_bool(key: str, default: bool) -> bool:
        value = cfg_value(key, default)
        return parse_bool(value) if value is not None else default

    def cfg_int(key: str, default: int) -> int:
        value = cfg_value(key, default)
        return parse_int(value, default)

    parser = argparse.ArgumentParser(description="Compile Markdown articles into a static site.")
    parser.add_argument("--config", default=pre_args.config, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument(
        "--content", default=cfg_str("content", "articles"), help="Directory containing Markdown articles."
    )
    parser.add_argument(
        "--templates", default=cfg_str("templates", "templates"), help="Directory containing page templates."
    )
    parser.add_argument(
        "--styles", default=cfg_str("styles", "templates/styles.css"), help="Global stylesheet inlined into pages."
    )
    parser.add_argument(
        "--images", default=cfg_str("images", "images"), help="Global images directory copied verbatim."
    )
    parser.add_argument("--output", default=cfg_str("output", "dist"), help="Output directory for the site.")
    parser.add_argument("--site-name", default=cfg_str("site_name", "Blog"), help="Site title.")
    parser.add_argument(
        "--site-description",
        default=cfg_str("site_description", "A minimalist technical blog"),
        help="Site description.",
    )
    parser.add_argument(
        "--highlight-style",
        default=cfg_str("highlight_style", "default"),
        help="Pygments style appended to the stylesheet (empty to disable).",
    )
    parser.add_argument(
        "--build-workers",
        default=cfg_int("build_workers", 0),
        type=int,
        help="Number of worker threads for parsing/rendering (0 = auto).",
    )
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("clean", True),
        help="Clean output directory before build.",
    )
    args = parser.parse_args()
    start = time.perf_counter()
    try:
        count = build_site(args)
    except (BuildError, OSError) as exc:
        print(f"Build failed: {exc}", file=sys.stderr)
        sys.exit(1)
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"Site generated in: {args.output} ({count} articles)")
