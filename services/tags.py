"""Tag statistics, tag colours and per-viewer tag filtering."""

TAG_COLORS = {
    "law": "#3498db",
    "politics": "#e74c3c",
    "economics": "#2ecc71",
    "formula1": "#f39c12",
    "tech": "#9b59b6",
    "philosophy": "#1abc9c",
    "books": "#d35400",
    "movies": "#8e44ad",
    "legal writing": "#8a2be2",
    "constitutional law": "#1da1f2",
    "civil rights": "#ff6347",
    "law school": "#2ecc71",
    "case studies": "#f39c12",
}


def _normalize(tag: str) -> str:
    return tag.strip().lower()


def get_tag_color(name: str) -> str:
    """Palette colour for known tags, else a colour derived from the name's hash."""
    normalized = name.lower()
    if normalized in TAG_COLORS:
        return TAG_COLORS[normalized]

    # 32-bit string hash: h = ord(c) + h * 31
    h = 0
    for ch in normalized:
        h = (ord(ch) + (h << 5) - h) & 0xFFFFFFFF
    return "#" + "".join(f"{(h >> (i * 8)) & 0xFF:02x}" for i in range(3))


def _post_tags(post) -> list[str]:
    tags = post.get("tags") if isinstance(post, dict) else getattr(post, "tags", None)
    if not isinstance(tags, list | tuple):
        return []
    return [t for t in tags if isinstance(t, str)]


def extract_all_tags(posts) -> list[dict]:
    """Unique tags with post counts, most used first: [{name, count, color}]."""
    counts: dict[str, int] = {}
    for post in posts:
        for tag in _post_tags(post):
            tag = tag.strip()
            if tag:
                counts[tag] = counts.get(tag, 0) + 1
    stats = [{"name": name, "count": n, "color": get_tag_color(name)} for name, n in counts.items()]
    return sorted(stats, key=lambda s: s["count"], reverse=True)


def has_tag(post, tag: str) -> bool:
    """Case-insensitive tag membership."""
    wanted = _normalize(tag)
    return any(_normalize(t) == wanted for t in _post_tags(post))


class FeedSession:
    """Filter state for one viewer. Sessions never share state."""

    def __init__(self, active_tag: str | None = None):
        self._active_tag = None
        if active_tag:
            self.filter_by_tag(active_tag)

    @property
    def active_tag(self) -> str | None:
        return self._active_tag

    def filter_by_tag(self, tag: str) -> None:
        tag = (tag or "").strip()
        self._active_tag = tag or None

    def clear_filter(self) -> None:
        self._active_tag = None

    def is_active(self, tag: str) -> bool:
        """True when *tag* is the active filter (sidebar highlight)."""
        return self._active_tag is not None and _normalize(tag) == _normalize(self._active_tag)

    def apply(self, posts) -> list:
        """Posts matching the active tag, or all posts when no filter is set."""
        if self._active_tag is None:
            return list(posts)
        return [post for post in posts if has_tag(post, self._active_tag)]
