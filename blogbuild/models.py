"""Article records assembled from frontmatter, rendered body and source path."""

from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .content import FrontMatter, read_time
from .markup import RenderContext

PROJECTS_SEGMENT = "projects"


class Article(BaseModel):
    """One source document, immutable once built."""

    model_config = ConfigDict(frozen=True)

    title: str
    raw_body: str
    html: str
    publish_date: dt.datetime
    description: str = ""
    tags: tuple[str, ...] = ()
    source_path: Path
    is_project: bool = False
    project_name: Optional[str] = None
    slug: str
    url: str
    read_time_minutes: int = Field(ge=1)
    languages_used: frozenset[str] = frozenset()
    image_references: tuple[str, ...] = ()


def classify_project(relative_path: Path, front: FrontMatter) -> tuple[bool, Optional[str]]:
    """Return ``(is_project, project_name)``.

    ``projects/<name>/...`` in the directory part of the path marks a project
    article; an explicit ``project`` frontmatter key wins over the path.
    """
    if front.project:
        return True, front.project
    dirs = relative_path.parent.parts
    if PROJECTS_SEGMENT in dirs:
        index = dirs.index(PROJECTS_SEGMENT)
        if index + 1 < len(dirs):
            return True, dirs[index + 1]
    return False, None


def article_url(is_project: bool, project_name: Optional[str], publish_date: dt.datetime, slug: str) -> str:
    if is_project:
        return f"/articles/projects/{project_name}/{slug}"
    return f"/articles/{publish_date.year}/{slug}"


def relative_source(source_path: Path, content_root: Optional[Path]) -> Path:
    if content_root is None:
        return source_path
    try:
        return source_path.relative_to(content_root)
    except ValueError:
        return source_path


def resolve_location(
    front: FrontMatter,
    source_path: Path,
    *,
    content_root: Optional[Path] = None,
    now: dt.datetime,
) -> tuple[dt.datetime, bool, Optional[str], str, str]:
    """Everything the URL depends on, known before the body is rendered."""
    publish_date = front.date or now
    is_project, project_name = classify_project(relative_source(source_path, content_root), front)
    slug = source_path.stem
    url = article_url(is_project, project_name, publish_date, slug)
    return publish_date, is_project, project_name, slug, url


def build_article(
    front: FrontMatter,
    body: str,
    source_path: Path,
    html_content: str,
    rendered: RenderContext,
    *,
    content_root: Optional[Path] = None,
    now: dt.datetime,
) -> Article:
    publish_date, is_project, project_name, slug, url = resolve_location(
        front, source_path, content_root=content_root, now=now
    )
    return Article(
        title=front.title,
        raw_body=body,
        html=html_content,
        publish_date=publish_date,
        description=front.description,
        tags=tuple(front.tags),
        source_path=source_path,
        is_project=is_project,
        project_name=project_name,
        slug=slug,
        url=url,
        read_time_minutes=read_time(body),
        languages_used=frozenset(rendered.languages),
        image_references=tuple(rendered.image_references),
    )
