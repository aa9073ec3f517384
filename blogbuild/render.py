from __future__ import annotations

import re
from pathlib import Path

from .errors import TemplateError

TAG_RE = re.compile(r"<[^>]+>")
PLACEHOLDER_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")
TEMPLATE_NAMES = ("layout", "index", "article", "projects", "404")


def strip_tags(html_text: str) -> str:
    return TAG_RE.sub("", html_text)


def render_template(template: str, **context: str) -> str:
    """Replace every ``{{key}}`` token in a single pass.

    Unknown keys become empty strings. Substituted values are never rescanned,
    so article text containing ``{{...}}`` is emitted as written.
    """

    def repl(match: re.Match) -> str:
        value = context.get(match.group(1))
        return "" if value is None else str(value)

    return PLACEHOLDER_RE.sub(repl, template)


def read_template(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise TemplateError(f"Cannot read template {path}: {exc}") from exc


def load_templates(templates_dir: Path) -> dict[str, str]:
    return {name: read_template(templates_dir / f"{name}.html") for name in TEMPLATE_NAMES}


def read_stylesheet(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise TemplateError(f"Cannot read stylesheet {path}: {exc}") from exc


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
