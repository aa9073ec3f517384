from __future__ import annotations

import html
import re
import sys
from dataclasses import dataclass, field

import markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor
from markdown.treeprocessors import Treeprocessor

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .errors import BuildError

SUPPORTED_LANGUAGES = frozenset(
    {"javascript", "go", "typescript", "bash", "yaml", "json", "html", "css"}
)

FENCED_BLOCK_RE = re.compile(
    r"^(?P<indent>[ \t]*)(?P<fence>`{3,}|~{3,})[ ]*(?P<lang>[\w#.+-]*)[^\n]*\n"
    r"(?P<code>.*?)(?<=\n)(?P=indent)(?P=fence)[ ]*$",
    re.MULTILINE | re.DOTALL,
)
# scheme:..., //host/... and site-absolute /path are left alone
ABSOLUTE_URL_RE = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.-]*:|/)")

COPY_BUTTON = '<button class="code-copy-btn" type="button" data-code="{code}" aria-label="Copy code">Copy</button>'


@dataclass
class RenderContext:
    """Side-channel state collected while rendering one article."""

    article_url: str
    languages: set[str] = field(default_factory=set)
    image_references: list[str] = field(default_factory=list)


def _wrap_code(inner: str, raw_code: str, lang: str, code_class: str) -> str:
    lang_attr = html.escape(lang or "text")
    return (
        '<div class="code-block-wrapper">'
        f'<pre data-language="{lang_attr}"><code class="{html.escape(code_class)}">{inner}</code></pre>'
        f"{COPY_BUTTON.format(code=html.escape(raw_code))}"
        "</div>"
    )


def render_code_block(code: str, lang: str, context: RenderContext) -> str:
    lang = (lang or "").strip().lower()
    if lang in SUPPORTED_LANGUAGES:
        context.languages.add(lang)
        try:
            lexer = get_lexer_by_name(lang)
            highlighted = highlight(code, lexer, HtmlFormatter(nowrap=True)).rstrip("\n")
            return _wrap_code(highlighted, code, lang, f"highlight language-{lang}")
        except Exception as exc:
            print(f"Warning: could not highlight {lang} block: {exc}", file=sys.stderr)
    return _wrap_code(html.escape(code), code, lang, f"language-{lang}" if lang else "")


def _dedent(code: str, indent: str) -> str:
    if not indent:
        return code
    lines = code.split("\n")
    return "\n".join(
        line[len(indent):] if line.startswith(indent) else line.lstrip(" \t") for line in lines
    )


class FencedCodePreprocessor(Preprocessor):
    def __init__(self, md: markdown.Markdown, context: RenderContext):
        super().__init__(md)
        self.context = context

    def run(self, lines: list[str]) -> list[str]:
        text = "\n".join(lines)
        while True:
            m = FENCED_BLOCK_RE.search(text)
            if not m:
                break
            indent = m.group("indent")
            code = _dedent(m.group("code"), indent)
            if code.endswith("\n"):
                code = code[:-1]
            block = render_code_block(code, m.group("lang"), self.context)
            placeholder = self.md.htmlStash.store(block)
            # Keep the indentation so a fence inside a list item stays in it.
            text = f"{text[: m.start()]}\n{indent}{placeholder}\n{text[m.end():]}"
        return text.split("\n")


class ArticleImageTreeprocessor(Treeprocessor):
    def __init__(self, md: markdown.Markdown, context: RenderContext):
        super().__init__(md)
        self.context = context

    def run(self, root):
        base = self.context.article_url.rstrip("/")
        for el in root.iter("img"):
            src = (el.get("src") or "").strip()
            if not src or ABSOLUTE_URL_RE.match(src):
                continue
            if src.startswith("./"):
                src = src[2:]
            self.context.image_references.append(src)
            el.set("src", f"{base}/{src}")


class ArticleExtension(Extension):
    def __init__(self, context: RenderContext, **kwargs):
        super().__init__(**kwargs)
        self.context = context

    def extendMarkdown(self, md):
        # Same slot as the stock fenced_code preprocessor.
        md.preprocessors.register(
            FencedCodePreprocessor(md, self.context), "article_fenced_code", 25
        )
        # After "inline" (20) has turned image syntax into <img> elements.
        md.treeprocessors.register(
            ArticleImageTreeprocessor(md, self.context), "article_images", 15
        )


def render_markdown(text: str, article_url: str) -> tuple[str, RenderContext]:
    context = RenderContext(article_url=article_url)
    md = markdown.Markdown(extensions=["tables", ArticleExtension(context)])
    return md.convert(text), context


def highlight_css(style: str = "default") -> str:
    try:
        formatter = HtmlFormatter(style=style)
    except ClassNotFound as exc:
        raise BuildError(f"Unknown highlight style: {style}") from exc
    return formatter.get_style_defs(".highlight")
