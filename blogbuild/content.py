from __future__ import annotations

import datetime as dt
import math
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import FrontmatterError, MissingFrontmatterError
from .render import strip_tags

WORDS_PER_MINUTE = 200
DAY_FIRST_FMT = "%d-%m-%Y"

FENCE_BLOCK_RE = re.compile(r"(`{3,}|~{3,})[\s\S]*?(?:\1|$)")
INLINE_CODE_RE = re.compile(r"`[^`]*`")
IMAGE_RE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]*\)")
HEADING_RE = re.compile(r"^[ \t]*#{1,6}\s+", re.MULTILINE)
BOLD_RE = re.compile(r"(\*\*|__)(.+?)\1")
ITALIC_RE = re.compile(r"(?<![\w*])([*_])(?!\s)(.+?)(?<!\s)\1(?![\w*])")
BLOCK_MARKER_RE = re.compile(r"^[ \t]*(?:[-+*]|\d+[.)])[ \t]+", re.MULTILINE)
QUOTE_RE = re.compile(r"^[ \t]*>+", re.MULTILINE)
WHITESPACE_RE = re.compile(r"\s+")


def parse_list(value: str) -> list[str]:
    value = value.strip()
    if value.startswith("[") and value.endswith("]"):
        inner = value[1:-1]
        items = [item.strip().strip("'\"") for item in inner.split(",")]
    else:
        items = [item.strip() for item in value.split(",")]
    return [item for item in items if item]


def parse_date(value: object) -> Optional[dt.datetime]:
    """Normalize a frontmatter date to a naive datetime.

    YAML already turns ``2025-01-15`` into a ``date``; strings are accepted as
    ISO dates/datetimes or as day-first ``DD-MM-YYYY`` literals. Aware values
    are converted to UTC before the offset is dropped.
    """
    if value is None or value == "":
        return None
    if isinstance(value, dt.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(dt.timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, dt.date):
        return dt.datetime.combine(value, dt.time())
    text = str(value).strip()
    try:
        return parse_date(dt.datetime.fromisoformat(text))
    except ValueError:
        pass
    try:
        return dt.datetime.strptime(text, DAY_FIRST_FMT)
    except ValueError:
        pass
    raise ValueError(f"unrecognised date {text!r} (expected YYYY-MM-DD or DD-MM-YYYY)")


class FrontMatter(BaseModel):
    """Known frontmatter keys; anything else lands in ``extra``."""

    model_config = ConfigDict(extra="allow")

    title: str = "Untitled"
    date: Optional[dt.datetime] = None
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    project: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value: Any) -> str:
        if value is None or str(value).strip() == "":
            return "Untitled"
        return str(value)

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("project", mode="before")
    @classmethod
    def _coerce_project(cls, value: Any) -> Optional[str]:
        if value is None or str(value).strip() == "":
            return None
        return str(value).strip()

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Optional[dt.datetime]:
        return parse_date(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return parse_list(value)
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value if item is not None]
        return [str(value)]

    @property
    def extra(self) -> dict:
        return dict(self.model_extra or {})


def split_front_matter(text: str, path: Path | str) -> tuple[str, str]:
    """Return the raw metadata block and the untouched body that follows it."""
    clean_text = text.lstrip("\ufeff")
    first_end = clean_text.find("\n")
    if first_end == -1 or clean_text[:first_end].strip() != "---":
        raise MissingFrontmatterError(path)

    start = pos = first_end + 1
    while pos <= len(clean_text):
        line_end = clean_text.find("\n", pos)
        if line_end == -1:
            line_end = len(clean_text)
        if clean_text[pos:line_end].strip() == "---":
            return clean_text[start:pos], clean_text[line_end + 1 :]
        pos = line_end + 1
    raise MissingFrontmatterError(path)


def parse_front_matter(text: str, path: Path | str) -> tuple[FrontMatter, str]:
    meta_text, body = split_front_matter(text, path)
    try:
        data = yaml.safe_load(meta_text)
    except yaml.YAMLError as exc:
        raise FrontmatterError(path, str(exc)) from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError(path, "metadata must be a mapping")
    # Keys match case-insensitively; YAML also allows non-string keys such as ``2024:``.
    data = {str(key).strip().lower(): value for key, value in data.items()}
    try:
        front = FrontMatter.model_validate(data)
    except ValidationError as exc:
        reasons = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise FrontmatterError(path, reasons) from exc
    return front, body


def count_words(text: str) -> int:
    return len(text.split())


def read_time(text: str) -> int:
    return max(1, math.ceil(count_words(text) / WORDS_PER_MINUTE))


def plain_text_excerpt(text: str, limit: int) -> str:
    """Reduce Markdown to a single line of searchable plain text."""
    text = FENCE_BLOCK_RE.sub(" ", text)
    text = INLINE_CODE_RE.sub(" ", text)
    text = IMAGE_RE.sub(" ", text)
    text = LINK_RE.sub(r"\1", text)
    text = HEADING_RE.sub("", text)
    text = BOLD_RE.sub(r"\2", text)
    text = ITALIC_RE.sub(r"\2", text)
    text = QUOTE_RE.sub("", text)
    text = BLOCK_MARKER_RE.sub("", text)
    text = strip_tags(text)
    text = WHITESPACE_RE.sub(" ", text).strip()
    return text[:limit]
