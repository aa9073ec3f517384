from __future__ import annotations

from pathlib import Path


class BuildError(Exception):
    """Base class for conditions that abort the whole build."""


class MissingFrontmatterError(BuildError):
    def __init__(self, path: Path | str) -> None:
        super().__init__(f"No frontmatter found in {path}")
        self.path = path


class FrontmatterError(BuildError):
    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"Invalid frontmatter in {path}: {reason}")
        self.path = path
        self.reason = reason


class TemplateError(BuildError):
    pass


class DuplicateUrlError(BuildError):
    def __init__(self, url: str, first: Path | str, second: Path | str) -> None:
        super().__init__(f"Articles {first} and {second} both resolve to {url}")
        self.url = url
        self.first = first
        self.second = second
