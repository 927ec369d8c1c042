"""Unit tests for tag statistics, colours and filter sessions."""

import re

from services.schema import ParsedPost
from services.tags import FeedSession, extract_all_tags, get_tag_color, has_tag

POSTS = [
    {"title": "A", "tags": ["Law", "tech"]},
    {"title": "B", "tags": ["law"]},
    {"title": "C", "tags": ["Law", " ", "books"]},
    {"title": "D", "tags": []},
    {"title": "E"},
]


# ---------------------------------------------------------------------------
# get_tag_color
# ---------------------------------------------------------------------------


def test_known_tag_colour_is_case_insensitive():
    assert get_tag_color("Law") == "#3498db"
    assert get_tag_color("LEGAL WRITING") == "#8a2be2"


def test_hashed_colour_is_stable_hex():
    colour = get_tag_color("gardening")
    assert re.fullmatch(r"#[0-9a-f]{6}", colour)
    assert get_tag_color("Gardening") == colour


def test_hashed_colour_matches_string_hash():
    # "a": h = 97 -> bytes 61 00 00
    assert get_tag_color("a") == "#610000"


# ---------------------------------------------------------------------------
# extract_all_tags
# ---------------------------------------------------------------------------


def test_extract_all_tags_counts_and_order():
    tags = extract_all_tags(POSTS)
    assert [(t["name"], t["count"]) for t in tags] == [
        ("Law", 2),
        ("tech", 1),
        ("law", 1),
        ("books", 1),
    ]
    assert tags[0]["color"] == "#3498db"


def test_extract_all_tags_from_parsed_posts():
    posts = [
        ParsedPost(title="x", date="2024-01-01", tags=("a", "b"), content=""),
        ParsedPost(title="y", date="2024-01-01", tags=("b",), content=""),
    ]
    assert [t["name"] for t in extract_all_tags(posts)] == ["b", "a"]


def test_extract_all_tags_empty():
    assert extract_all_tags([]) == []


# ---------------------------------------------------------------------------
# FeedSession
# ---------------------------------------------------------------------------


def test_has_tag_case_insensitive():
    assert has_tag({"tags": ["Law"]}, "LAW")
    assert not has_tag({"tags": ["Law"]}, "tech")
    assert not has_tag({"title": "no tags"}, "law")


def test_session_without_filter_returns_everything():
    session = FeedSession()
    assert session.active_tag is None
    assert len(session.apply(POSTS)) == len(POSTS)


def test_session_filters_case_insensitively():
    session = FeedSession()
    session.filter_by_tag("LAW")
    assert [p["title"] for p in session.apply(POSTS)] == ["A", "B", "C"]
    assert session.active_tag == "LAW"


def test_session_clear_filter():
    session = FeedSession("books")
    assert [p["title"] for p in session.apply(POSTS)] == ["C"]
    session.clear_filter()
    assert session.active_tag is None
    assert len(session.apply(POSTS)) == 5


def test_session_blank_tag_means_no_filter():
    assert FeedSession("   ").active_tag is None


def test_session_no_matches():
    assert FeedSession("cooking").apply(POSTS) == []


def test_sessions_are_independent():
    first, second = FeedSession("law"), FeedSession()
    second.filter_by_tag("tech")
    assert first.active_tag == "law"
    assert [p["title"] for p in first.apply(POSTS)] == ["A", "B", "C"]
    assert [p["title"] for p in second.apply(POSTS)] == ["A"]


def test_is_active_highlight():
    session = FeedSession("Law")
    assert session.is_active("law")
    assert not session.is_active("tech")
    assert not FeedSession().is_active("law")
