import argparse
from pathlib import Path

import pytest

TEMPLATES = {
    "layout": "<html><head><title>{{title}}</title><style>{{styles}}</style></head><body>{{content}}</body></html>",
    "index": "<main>{{articles}}</main>",
    "article": (
        "<article><h1>{{title}}</h1><time>{{date}}</time><span>{{read_time}}</span>"
        "{{project_badge}}{{description_block}}{{tag_list}}<div>{{content}}</div></article>"
    ),
    "projects": "<main>{{projects}}</main>",
    "404": "<h1>404</h1><p>Back to {{site_name}}</p>",
}


@pytest.fixture
def templates() -> dict[str, str]:
    return dict(TEMPLATES)


@pytest.fixture
def site(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    templates_dir = tmp_path / "templates"
    templates_dir.mkdir()
    for name, text in TEMPLATES.items():
        (templates_dir / f"{name}.html").write_text(text, encoding="utf-8")
    (templates_dir / "styles.css").write_text("body { margin: 0; }", encoding="utf-8")
    (tmp_path / "articles").mkdir()
    return tmp_path


@pytest.fixture
def write_article():
    def write(root: Path, rel: str, front: str, body: str = "Some text.") -> Path:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"---\n{front}\n---\n{body}", encoding="utf-8")
        return path

    return write


@pytest.fixture
def build_args():
    def make(root: Path, **overrides) -> argparse.Namespace:
        values = {
            "content": str(root / "articles"),
            "templates": str(root / "templates"),
            "styles": str(root / "templates" / "styles.css"),
            "images": str(root / "images"),
            "output": str(root / "dist"),
            "site_name": "Test Blog",
            "site_description": "Notes",
            "highlight_style": "default",
            "build_workers": 1,
            "clean": True,
        }
        values.update(overrides)
        return argparse.Namespace(**values)

    return make
