from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path

from .models import Article

GLOBAL_IMAGES_DIR = "images"


def article_output_dir(output_dir: Path, article: Article) -> Path:
    return output_dir / article.url.strip("/")


def copy_article_images(article: Article, output_dir: Path) -> int:
    """Copy images referenced by ``article`` next to its page.

    Missing or unreadable sources are reported and skipped. Failures
    writing into the output directory propagate.
    """
    copied = 0
    source_dir = article.source_path.parent
    target_dir = article_output_dir(output_dir, article)
    for ref in article.image_references:
        src = source_dir / ref
        if not src.is_file():
            print(f"Warning: image not found for {article.source_path}: {ref}", file=sys.stderr)
            continue
        if not os.access(src, os.R_OK):
            print(f"Warning: image not readable for {article.source_path}: {ref}", file=sys.stderr)
            continue
        dest = target_dir / ref
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dest)
        copied += 1
    return copied


def copy_global_images(images_dir: Path, output_dir: Path) -> bool:
    if not images_dir.is_dir():
        return False
    shutil.copytree(images_dir, output_dir / GLOBAL_IMAGES_DIR, dirs_exist_ok=True)
    return True
