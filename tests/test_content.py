import datetime as dt

import pytest

from blogbuild.content import (
    parse_date,
    parse_front_matter,
    plain_text_excerpt,
    read_time,
    split_front_matter,
)
from blogbuild.errors import FrontmatterError, MissingFrontmatterError


def test_parse_front_matter_reads_known_and_unknown_keys() -> None:
    text = (
        "---\n"
        'title: "Hello"\n'
        "date: 2025-01-15\n"
        "description: First post\n"
        "tags: [go, Web, go]\n"
        "author: someone\n"
        "series:\n"
        "  name: basics\n"
        "  parts: [1, 2]\n"
        "---\n"
        "# Hi\n\nSome text."
    )
    front, body = parse_front_matter(text, "hello.md")

    assert front.title == "Hello"
    assert front.date == dt.datetime(2025, 1, 15)
    assert front.description == "First post"
    assert front.tags == ["go", "Web", "go"]
    assert front.extra == {"author": "someone", "series": {"name": "basics", "parts": [1, 2]}}
    assert body == "# Hi\n\nSome text."


def test_defaults_for_empty_frontmatter() -> None:
    front, body = parse_front_matter("---\n---\nBody", "empty.md")

    assert front.title == "Untitled"
    assert front.date is None
    assert front.description == ""
    assert front.tags == []
    assert front.project is None
    assert body == "Body"


def test_day_first_date_literal() -> None:
    front, _ = parse_front_matter("---\ndate: 15-01-2025\n---\n", "a.md")

    assert front.date == dt.datetime(2025, 1, 15)


def test_tags_given_as_string() -> None:
    front, _ = parse_front_matter('---\ntags: "python, yaml"\n---\n', "a.md")

    assert front.tags == ["python", "yaml"]


def test_numeric_title_is_kept_as_text() -> None:
    front, _ = parse_front_matter("---\ntitle: 2024\n---\n", "a.md")

    assert front.title == "2024"


def test_missing_frontmatter_rejects_file() -> None:
    with pytest.raises(MissingFrontmatterError, match="notes.md"):
        parse_front_matter("# Title\n\nNo metadata here.", "notes.md")


def test_unclosed_frontmatter_rejects_file() -> None:
    with pytest.raises(MissingFrontmatterError):
        split_front_matter("---\ntitle: x\nbody without closing", "a.md")


def test_frontmatter_must_start_the_file() -> None:
    with pytest.raises(MissingFrontmatterError):
        split_front_matter("intro\n---\ntitle: x\n---\n", "a.md")


def test_body_is_sliced_verbatim() -> None:
    meta, body = split_front_matter("\ufeff---\r\ntitle: x\r\n---\r\nline\x0cfeed\u2028sep\r\nend\n", "a.md")

    assert meta == "title: x\r\n"
    assert body == "line\x0cfeed\u2028sep\r\nend\n"


def test_malformed_yaml_is_fatal() -> None:
    with pytest.raises(FrontmatterError, match="broken.md"):
        parse_front_matter("---\ntitle: [unclosed\n---\nBody", "broken.md")


def test_non_mapping_metadata_is_fatal() -> None:
    with pytest.raises(FrontmatterError, match="mapping"):
        parse_front_matter("---\n- a\n- b\n---\nBody", "list.md")


def test_unparsable_date_is_fatal() -> None:
    with pytest.raises(FrontmatterError, match="date"):
        parse_front_matter("---\ndate: next tuesday\n---\n", "a.md")


def test_parse_date_accepts_datetimes_and_iso_strings() -> None:
    assert parse_date("2025-03-04T10:30:00") == dt.datetime(2025, 3, 4, 10, 30)
    assert parse_date(dt.date(2025, 3, 4)) == dt.datetime(2025, 3, 4)
    assert parse_date(None) is None


def test_aware_dates_are_normalized_to_utc() -> None:
    front, _ = parse_front_matter("---\ndate: 2025-01-15T10:00:00Z\n---\n", "a.md")

    assert front.date == dt.datetime(2025, 1, 15, 10, 0)
    assert parse_date("2025-01-15T19:00:00+09:00") == dt.datetime(2025, 1, 15, 10, 0)
    assert parse_date("2025-01-15T10:00:00Z") == dt.datetime(2025, 1, 15, 10, 0)


def test_read_time_is_at_least_one_minute() -> None:
    assert read_time("") == 1
    assert read_time("word " * 200) == 1
    assert read_time("word " * 201) == 2
    assert read_time("word\n" * 401) == 3


def test_plain_text_excerpt_strips_markdown() -> None:
    text = (
        "# Hi\n\n"
        "Some **bold** and *soft* [link](https://example.com) ![img](a.png)\n\n"
        "```go\nfmt.Println(1)\n```\n"
        "> quoted <b>html</b>\n"
        "- item `inline`\n"
    )

    assert plain_text_excerpt(text, 300) == "Hi Some bold and soft link quoted html item"


def test_plain_text_excerpt_truncates() -> None:
    assert plain_text_excerpt("word  " * 100, 300) == "word " * 60
    assert len(plain_text_excerpt("x" * 500, 300)) == 300
