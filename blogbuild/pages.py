from __future__ import annotations

import html
import json
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .content import plain_text_excerpt
from .models import Article
from .render import render_template, write_text
from .utils import iso_date

DATE_FMT = "%d-%m-%Y"
CARD_EXCERPT_LIMIT = 100
SEARCH_EXCERPT_LIMIT = 300


def format_date(article: Article) -> str:
    return article.publish_date.strftime(DATE_FMT)


def read_time_label(minutes: int) -> str:
    return f"{minutes} min read"


def sort_by_date(articles: list[Article]) -> list[Article]:
    # sorted() stays stable with reverse=True, so equal dates keep input order
    return sorted(articles, key=lambda a: a.publish_date, reverse=True)


def build_project_badge(article: Article) -> str:
    if not article.project_name:
        return ""
    return f'<span class="project-badge">{html.escape(article.project_name)}</span>'


def build_tag_list(tags: tuple[str, ...]) -> str:
    if not tags:
        return ""
    items = "".join(f'<li class="tag">{html.escape(tag)}</li>' for tag in tags)
    return f'<ul class="tag-list">{items}</ul>'


def build_description_block(article: Article) -> str:
    if not article.description:
        return ""
    return f'<p class="article-description">{html.escape(article.description)}</p>'


def render_layout(templates: dict[str, str], styles: str, title: str, description: str, content: str, args: object) -> str:
    return render_template(
        templates["layout"],
        title=html.escape(title),
        description=html.escape(description),
        content=content,
        styles=styles,
        site_name=html.escape(getattr(args, "site_name", "")),
        site_description=html.escape(getattr(args, "site_description", "")),
    )


def render_article_page(article: Article, templates: dict[str, str], styles: str, args: object) -> str:
    content = render_template(
        templates["article"],
        title=html.escape(article.title),
        content=article.html,
        date=format_date(article),
        datetime=iso_date(article.publish_date),
        read_time=read_time_label(article.read_time_minutes),
        project_badge=build_project_badge(article),
        tag_list=build_tag_list(article.tags),
        description_block=build_description_block(article),
        url=article.url,
    )
    return render_layout(templates, styles, article.title, article.description, content, args)


def build_articles(
    output_dir: Path,
    articles: list[Article],
    templates: dict[str, str],
    styles: str,
    args: object,
    workers: int = 1,
) -> None:
    def render_article(article: Article) -> None:
        html_doc = render_article_page(article, templates, styles, args)
        write_text(output_dir / article.url.strip("/") / "index.html", html_doc)
        print(f"Generated: {article.url}")

    workers = max(1, int(workers or 1))
    if workers <= 1 or len(articles) <= 1:
        for article in articles:
            render_article(article)
    else:
        max_workers = min(workers, len(articles))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            list(executor.map(render_article, articles))


def build_article_cards(articles: list[Article]) -> str:
    cards = []
    for article in articles:
        excerpt = plain_text_excerpt(article.raw_body, CARD_EXCERPT_LIMIT)
        tags_attr = ",".join(tag.lower() for tag in article.tags)
        cards.append(
            f'<article class="article-card" data-title="{html.escape(article.title.lower())}"'
            f' data-content="{html.escape(excerpt.lower())}"'
            f' data-project="{html.escape(article.project_name or "")}"'
            f' data-tags="{html.escape(tags_attr)}">'
            '<div class="article-meta">'
            f'<time datetime="{iso_date(article.publish_date)}">{format_date(article)}</time>'
            f'<span class="read-time">{read_time_label(article.read_time_minutes)}</span>'
            f"{build_project_badge(article)}"
            "</div>"
            f'<h2><a href="{article.url}">{html.escape(article.title)}</a></h2>'
            f"{build_description_block(article)}"
            f'<div class="article-tags">{build_tag_list(article.tags)}</div>'
            "</article>"
        )
    return "\n".join(cards)


def build_index(output_dir: Path, articles: list[Article], templates: dict[str, str], styles: str, args: object) -> None:
    ordered = sort_by_date(articles)
    content = render_template(
        templates["index"],
        articles=build_article_cards(ordered),
        count=str(len(ordered)),
    )
    html_doc = render_layout(
        templates,
        styles,
        getattr(args, "site_name", ""),
        getattr(args, "site_description", ""),
        content,
        args,
    )
    write_text(output_dir / "index.html", html_doc)


def group_projects(articles: list[Article]) -> dict[str, list[Article]]:
    groups: dict[str, list[Article]] = {}
    for article in articles:
        if article.is_project and article.project_name:
            groups.setdefault(article.project_name, []).append(article)
    return {name: sort_by_date(items) for name, items in groups.items()}


def build_projects(output_dir: Path, articles: list[Article], templates: dict[str, str], styles: str, args: object) -> None:
    sections = []
    for name, items in group_projects(articles).items():
        rows = []
        for article in items:
            rows.append(
                '<li class="project-article">'
                f'<a href="{article.url}">{html.escape(article.title)}</a>'
                f'<time datetime="{iso_date(article.publish_date)}">{format_date(article)}</time>'
                "</li>"
            )
        sections.append(
            '<section class="project-section">'
            f"<h2>{html.escape(name)}</h2>"
            f'<ul class="project-articles">{"".join(rows)}</ul>'
            "</section>"
        )
    if not sections:
        sections.append('<p class="projects-empty">No projects yet.</p>')
    content = render_template(templates["projects"], projects="\n".join(sections))
    html_doc = render_layout(
        templates,
        styles,
        "Projects",
        "Articles grouped by project",
        content,
        args,
    )
    write_text(output_dir / "projects" / "index.html", html_doc)


def build_404(output_dir: Path, templates: dict[str, str], styles: str, args: object) -> None:
    content = render_template(
        templates["404"],
        site_name=html.escape(getattr(args, "site_name", "")),
    )
    html_doc = render_layout(templates, styles, "Page not found", "", content, args)
    write_text(output_dir / "404.html", html_doc)


def search_record(article: Article) -> dict:
    return {
        "title": article.title,
        "description": article.description,
        "url": article.url,
        "date": iso_date(article.publish_date),
        "readTime": article.read_time_minutes,
        "projectName": article.project_name,
        "content": plain_text_excerpt(article.raw_body, SEARCH_EXCERPT_LIMIT),
        "languages": sorted(article.languages_used),
        "tags": list(article.tags),
    }


def build_search_index(output_dir: Path, articles: list[Article]) -> None:
    index = [search_record(article) for article in articles]
    write_text(output_dir / "search-index.json", json.dumps(index, indent=2, ensure_ascii=True))
