"""Markdown -> HTML via ordered regex rewrites, plus preview/plain-text helpers.

This is not a CommonMark parser. Rules run in a fixed order and each one sees
the output of the previous ones, so reordering them changes the output:

    headings, blockquotes, fenced code, inline code, bold, italic,
    images, links, horizontal rules, lists, paragraphs

Fenced code is escaped and swapped out for a placeholder until the very end,
so nothing after step 3 touches it. Inline code gets no such protection.
"""

import math
import re
from datetime import datetime

DEFAULT_PREVIEW_LIMIT = 150
DEFAULT_WORDS_PER_MINUTE = 200

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#039;",
}
_ESCAPE_RE = re.compile(r"[&<>\"']")

# Longest marker first so `## x` is never read as `# ` + `# x`.
_HEADING_RES = [
    (level, re.compile(rf"^{'#' * level} (.*)$", re.MULTILINE)) for level in range(6, 0, -1)
]
_BLOCKQUOTE_RE = re.compile(r"^> (.*)$", re.MULTILINE)
_FENCE_RE = re.compile(r"```(?:([\w+#.-]*)[ \t]*\n)?(.*?)```", re.DOTALL)
_INLINE_CODE_RE = re.compile(r"`([^`\n]+)`")
_BOLD_RES = [re.compile(r"\*\*(.+?)\*\*"), re.compile(r"__(.+?)__")]
_ITALIC_RES = [re.compile(r"\*([^*\n]+?)\*"), re.compile(r"_([^_\n]+?)_")]
_IMAGE_RE = re.compile(r"!\[([^\]]+)\]\(([^)]+)\)")
_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_HR_RE = re.compile(r"^[ \t]*(?:---|\*\*\*|___)[ \t]*$", re.MULTILINE)
_UL_ITEM_RE = re.compile(r"^[ \t]*[*+-] (.*)$", re.MULTILINE)
_OL_ITEM_RE = re.compile(r"^[ \t]*\d+\. (.*)$", re.MULTILINE)
_UL_JOIN_RE = re.compile(r"</ul>\s*<ul>")
_OL_JOIN_RE = re.compile(r"</ol>\s*<ol>")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
_BLOCK_START_RE = re.compile(r"^</?(h[1-6]|ul|ol|li|blockquote|pre|hr|table|img)", re.IGNORECASE)
_EMPTY_P_RE = re.compile(r"<p>\s*</p>")

# Placeholders use control characters no rule above can match.
_CODE_TOKEN = "\x02{}\x03"
_CODE_TOKEN_RE = re.compile(r"\x02(\d+)\x03")

# Preview / plain-text helpers
_HEADING_LINE_RE = re.compile(r"^#+ .*$", re.MULTILINE)
_LIST_START_RE = re.compile(r"^(?:[*+-] |\d+\.\s)")
_STRIP_RULES = [
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"__(.*?)__"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"_(.*?)_"), r"\1"),
    (re.compile(r"!\[(.*?)\]\(.*?\)"), ""),
    (re.compile(r"\[(.*?)\]\(.*?\)"), r"\1"),
    (re.compile(r"`(.*?)`"), r"\1"),
    (re.compile(r"^#+\s*", re.MULTILINE), ""),
    (re.compile(r"^>\s*", re.MULTILINE), ""),
]
_WHITESPACE_RE = re.compile(r"\s+")


def escape_html(text) -> str:
    """Replace & < > " ' with HTML entities."""
    if not isinstance(text, str):
        return ""
    return _ESCAPE_RE.sub(lambda m: _HTML_ESCAPES[m.group(0)], text)


def _stash_code_blocks(html: str, blocks: list[str]) -> str:
    def _replace(match):
        lang, code = match.group(1), match.group(2)
        cls = f' class="language-{lang}"' if lang else ""
        blocks.append(f"<pre><code{cls}>{escape_html(code.strip())}</code></pre>")
        return _CODE_TOKEN.format(len(blocks) - 1)

    return _FENCE_RE.sub(_replace, html)


def _restore_code_blocks(html: str, blocks: list[str]) -> str:
    def _replace(match):
        index = int(match.group(1))
        return blocks[index] if index < len(blocks) else match.group(0)

    return _CODE_TOKEN_RE.sub(_replace, html)


def _wrap_paragraph(chunk: str) -> str:
    text = chunk.strip()
    if not text:
        return ""
    if _BLOCK_START_RE.match(text) or _CODE_TOKEN_RE.match(text):
        return chunk
    return "<p>" + text.replace("\n", "<br>") + "</p>"


def render_to_html(body) -> str:
    """Convert post body markup into an HTML fragment."""
    if not isinstance(body, str) or not body:
        return ""

    html = body.replace("\r\n", "\n")

    for level, pattern in _HEADING_RES:
        html = pattern.sub(rf"<h{level}>\1</h{level}>", html)

    html = _BLOCKQUOTE_RE.sub(r"<blockquote>\1</blockquote>", html)

    code_blocks: list[str] = []
    html = _stash_code_blocks(html, code_blocks)

    html = _INLINE_CODE_RE.sub(r"<code>\1</code>", html)

    for pattern in _BOLD_RES:
        html = pattern.sub(r"<strong>\1</strong>", html)
    for pattern in _ITALIC_RES:
        html = pattern.sub(r"<em>\1</em>", html)

    html = _IMAGE_RE.sub(r'<img src="\2" alt="\1">', html)
    html = _LINK_RE.sub(r'<a href="\2">\1</a>', html)

    html = _HR_RE.sub("<hr>", html)

    # One container per item, then adjacent containers of the same kind merge.
    html = _UL_ITEM_RE.sub(r"<ul><li>\1</li></ul>", html)
    html = _UL_JOIN_RE.sub("", html)
    html = _OL_ITEM_RE.sub(r"<ol><li>\1</li></ol>", html)
    html = _OL_JOIN_RE.sub("", html)

    html = "\n".join(_wrap_paragraph(chunk) for chunk in _PARAGRAPH_SPLIT_RE.split(html))
    html = _EMPTY_P_RE.sub("", html)

    return _restore_code_blocks(html, code_blocks).strip()


def _is_preview_candidate(paragraph: str) -> bool:
    return not (
        paragraph.startswith("```")
        or paragraph.startswith(">")
        or paragraph.startswith("![")
        or _LIST_START_RE.match(paragraph)
    )


def extract_preview_text(body, limit: int = DEFAULT_PREVIEW_LIMIT) -> str:
    """First ordinary paragraph of *body* (headings removed), cut to *limit* chars.

    Code fences, blockquotes, list items and images are skipped. If nothing
    qualifies, the start of the heading-stripped body is returned instead.
    """
    if not isinstance(body, str):
        return ""
    limit = max(int(limit), 0)
    stripped = _HEADING_LINE_RE.sub("", body.replace("\r\n", "\n")).strip()
    if not stripped:
        return ""

    for paragraph in _PARAGRAPH_SPLIT_RE.split(stripped):
        paragraph = paragraph.strip()
        if paragraph and _is_preview_candidate(paragraph):
            return paragraph[:limit]
    return stripped[:limit]


def strip_formatting_markers(text) -> str:
    """Drop inline markup and collapse all whitespace to single spaces."""
    if not isinstance(text, str) or not text:
        return ""
    for pattern, replacement in _STRIP_RULES:
        text = pattern.sub(replacement, text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def estimate_reading_time_minutes(body, words_per_minute: int = DEFAULT_WORDS_PER_MINUTE) -> int:
    """Whole minutes to read *body*, rounded up, never less than 1."""
    if not isinstance(body, str):
        return 1
    if not isinstance(words_per_minute, int | float) or words_per_minute <= 0:
        words_per_minute = DEFAULT_WORDS_PER_MINUTE
    words = len(body.split())
    return max(math.ceil(words / words_per_minute), 1)


def format_date(value) -> str:
    """Human-readable date for display: 'Jan 15, 2024'."""
    if not value or not isinstance(value, str):
        return "Unknown date"
    value = value.strip()
    if re.fullmatch(r"\d{4}", value):
        return value
    try:
        if re.fullmatch(r"\d{4}-\d{2}", value):
            return datetime.strptime(value, "%Y-%m").strftime("%B %Y")
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return "Invalid date"
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"
