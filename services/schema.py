"""Post records and front-matter field defaults."""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from types import MappingProxyType

DEFAULT_TITLE = "Untitled Post"
KNOWN_FIELDS = ("title", "date", "tags")

_H1_RE = re.compile(r"^#\s+(.+)$", re.MULTILINE)


@dataclass(frozen=True)
class FrontMatter:
    title: str = DEFAULT_TITLE
    date: str = ""
    tags: tuple[str, ...] = ()
    extra: MappingProxyType = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))


@dataclass(frozen=True)
class ParsedPost:
    """Front matter plus body. Produced once by the extractor, never mutated."""

    title: str
    date: str
    tags: tuple[str, ...]
    content: str
    source_id: str | None = None
    extra: MappingProxyType = field(default_factory=dict, hash=False)

    def __post_init__(self):
        # read-only copy, left out of the hash
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @property
    def front_matter(self) -> FrontMatter:
        return FrontMatter(self.title, self.date, self.tags, self.extra)

    def to_dict(self) -> dict:
        """JSON-ready view. Extra fields never shadow the known ones."""
        data = {k: v for k, v in self.extra.items() if k not in KNOWN_FIELDS}
        data.update(
            {
                "title": self.title,
                "date": self.date,
                "tags": list(self.tags),
                "content": self.content,
                "source_id": self.source_id,
            }
        )
        return data


def today_iso() -> str:
    """Current UTC date as YYYY-MM-DD."""
    return datetime.now(timezone.utc).date().isoformat()


def is_valid_date(value) -> bool:
    """True for ISO dates (2024-01-15) and ISO datetimes (2024-01-15T10:00:00Z)."""
    if isinstance(value, date):
        return True
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        datetime.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def normalize_date(value) -> str:
    """Return *value* as a string if it is a valid date, else today's date."""
    if isinstance(value, date):
        return value.isoformat()
    if is_valid_date(value):
        return value.strip()
    return today_iso()


def parse_tags(value) -> tuple[str, ...]:
    """Parse `[a, b]` or `a, b` (or a list) into trimmed, non-empty tags."""
    if value is None:
        return ()
    if isinstance(value, list | tuple):
        items = [str(item) for item in value if item is not None]
    else:
        text = str(value).strip()
        if text.startswith("[") and text.endswith("]"):
            text = text[1:-1]
        items = text.split(",")
    return tuple(t for t in (item.strip() for item in items) if t)


def title_from_body(body: str) -> str:
    """First level-1 heading in *body*, or the default title."""
    match = _H1_RE.search(body or "")
    if match and match.group(1).strip():
        return match.group(1).strip()
    return DEFAULT_TITLE
