"""Front-matter extraction: raw post text -> ParsedPost."""

import logging
import re

from services.schema import ParsedPost, normalize_date, parse_tags, title_from_body

log = logging.getLogger(__name__)

# Opening `---` line, key/value block, closing `---` line, then the body.
_FRONT_MATTER_RE = re.compile(
    r"\A[ \t]*---[ \t]*\r?\n(.*?)\r?\n[ \t]*---[ \t]*(?:\r?\n(.*))?\Z",
    re.DOTALL,
)
_OPENING_RE = re.compile(r"\A[ \t]*---[ \t]*\r?\n")


def split_front_matter(raw: str) -> tuple[str | None, str]:
    """Return (block, body). block is None when there is no closed front matter."""
    match = _FRONT_MATTER_RE.match(raw)
    if not match:
        return None, raw
    return match.group(1), match.group(2) or ""


def parse_block(block: str) -> dict:
    """Parse `key: value` lines. Keys are lowercased; tags become a tuple."""
    fields: dict = {}
    for line in block.splitlines():
        key, sep, value = line.partition(":")
        key = key.strip().lower()
        if not sep or not key:
            continue
        value = value.strip()
        if key == "tags":
            fields["tags"] = parse_tags(value)
        else:
            fields[key] = value
    return fields


def extract_front_matter(raw, source_id: str | None = None) -> ParsedPost:
    """Split raw post text into metadata and body.

    Malformed or missing front matter never raises: the whole text becomes the
    body and title/date/tags fall back to their defaults.
    """
    if not isinstance(raw, str):
        if raw is not None:
            log.warning("Non-string post source %s (%s)", source_id or "<unnamed>", type(raw).__name__)
        raw = ""
    raw = raw.removeprefix("\ufeff")

    block, body = split_front_matter(raw)
    if block is None:
        if _OPENING_RE.match(raw):
            log.warning("Unterminated front matter in %s; treating as body", source_id or "<unnamed>")
        fields = {}
    else:
        fields = parse_block(block)

    content = body.strip()
    title = fields.pop("title", "") or title_from_body(content)
    date = normalize_date(fields.pop("date", None))
    tags = fields.pop("tags", ())

    return ParsedPost(
        title=title,
        date=date,
        tags=tags,
        content=content,
        source_id=source_id,
        extra=fields,
    )
