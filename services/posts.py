"""Post loading: manifest of markdown files or a JSON index, plus feed entries."""

import json
import logging
import os
import re
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import yaml

from config import NO_PREVIEW_TEXT, POSTS_DIR, PREVIEW_LIMIT, WORDS_PER_MINUTE
from services.frontmatter import extract_front_matter
from services.markdown import (
    estimate_reading_time_minutes,
    extract_preview_text,
    format_date,
    render_to_html,
    strip_formatting_markers,
)
from services.schema import (
    DEFAULT_TITLE,
    KNOWN_FIELDS,
    ParsedPost,
    normalize_date,
    parse_tags,
    title_from_body,
)

log = logging.getLogger(__name__)

_MAX_WORKERS = 8
_SLUG_RE = re.compile(r"[^a-z0-9]+")


def _safe_path(rel_path: str, posts_dir: str = None) -> tuple[str, str | None]:
    """Resolve and validate that path stays within posts_dir. Returns (abs_path, error)."""
    posts_dir = posts_dir or POSTS_DIR
    abs_path = os.path.realpath(os.path.join(posts_dir, rel_path))
    posts_real = os.path.realpath(posts_dir)
    if abs_path != posts_real and not abs_path.startswith(posts_real + os.sep):
        return abs_path, "Path traversal detected"
    return abs_path, None


def generate_id(title: str) -> str:
    """Slug from a title: 'Hello, World!' -> 'hello-world'."""
    return _SLUG_RE.sub("-", (title or "").lower()).strip("-")


def _read_index_file(path: str):
    """Read a .json document, or YAML for any other extension.

    Raises OSError, ValueError (bad JSON) or yaml.YAMLError.
    """
    with open(path, encoding="utf-8-sig") as f:
        if path.endswith(".json"):
            return json.load(f)
        return yaml.safe_load(f)


def read_post_file(filename: str, posts_dir: str = None) -> dict:
    """Read and parse one post file. Returns {post} or {error}."""
    clean = filename.lstrip("/")
    try:
        abs_path, err = _safe_path(clean, posts_dir)
    except ValueError as e:
        return {"error": str(e), "filename": clean}
    if err:
        return {"error": err, "filename": clean}
    if not os.path.isfile(abs_path):
        return {"error": "File not found", "filename": clean}
    try:
        with open(abs_path, encoding="utf-8-sig") as f:
            raw = f.read()
    except (OSError, UnicodeDecodeError) as e:
        return {"error": str(e), "filename": clean}
    return {"post": extract_front_matter(raw, source_id=clean)}


def load_manifest_posts(posts_dir: str = None, manifest: str = "manifest.json") -> dict:
    """Load every post listed in the manifest. Returns {posts, failed} or {error}.

    Individual files that cannot be read are logged and skipped; only a missing
    or malformed manifest is an error.
    """
    posts_dir = posts_dir or POSTS_DIR
    manifest_path, err = _safe_path(manifest, posts_dir)
    if err:
        return {"error": err}
    try:
        filenames = _read_index_file(manifest_path)
    except FileNotFoundError:
        return {"error": f"Manifest not found: {manifest}"}
    except (OSError, ValueError, yaml.YAMLError) as e:
        return {"error": f"Could not read manifest {manifest}: {e}"}

    if not isinstance(filenames, list) or not all(isinstance(n, str) for n in filenames):
        log.error("Post manifest %s is not a list of filenames", manifest_path)
        return {"error": "Post manifest is not a valid array of filenames."}

    if not filenames:
        return {"posts": [], "failed": []}

    with ThreadPoolExecutor(max_workers=min(_MAX_WORKERS, len(filenames))) as pool:
        results = list(pool.map(lambda name: read_post_file(name, posts_dir), filenames))

    posts, failed = [], []
    for result in results:
        if "error" in result:
            log.warning("Error loading post %s: %s", result["filename"], result["error"])
            failed.append(result["filename"])
        else:
            posts.append(result["post"])
    return {"posts": posts, "failed": failed}


def post_from_record(record: dict, index: int = 0) -> ParsedPost:
    """Build a post from a pre-structured index record, applying the usual defaults."""
    content = record.get("content")
    if not isinstance(content, str):
        content = ""
    content = content.strip()

    title = record.get("title")
    title = str(title).strip() if title is not None else ""
    title = title or title_from_body(content)

    record_id = record.get("id")
    if record_id in (None, ""):
        record_id = generate_id(title) or f"post-{index}"

    extra = {
        str(k): str(v)
        for k, v in record.items()
        if k not in KNOWN_FIELDS and k not in ("id", "content") and v is not None
    }
    return ParsedPost(
        title=title,
        date=normalize_date(record.get("date")),
        tags=parse_tags(record.get("tags")),
        content=content,
        source_id=str(record_id),
        extra=extra,
    )


def load_index_posts(index_path: str) -> dict:
    """Load posts from a JSON index: {"posts": [...]} or a bare list. Returns {posts, failed} or {error}."""
    try:
        data = _read_index_file(index_path)
    except FileNotFoundError:
        return {"error": f"Posts index not found: {os.path.basename(index_path)}"}
    except (OSError, ValueError, yaml.YAMLError) as e:
        return {"error": f"Could not read posts index: {e}"}

    records = data.get("posts", []) if isinstance(data, dict) else data
    if not isinstance(records, list):
        log.error("Posts index %s does not hold a list", index_path)
        return {"error": "Posts data is not a valid array."}

    posts, failed = [], []
    for i, record in enumerate(records):
        if not isinstance(record, dict):
            log.warning("Skipping post %d in %s: not an object", i, index_path)
            failed.append(str(i))
            continue
        post = post_from_record(record, i)
        if post.title == DEFAULT_TITLE and not post.content:
            log.warning("Post %d (%s) has neither title nor content", i, post.source_id)
        posts.append(post)
    return {"posts": posts, "failed": failed}


def _sort_key(post: ParsedPost) -> datetime:
    try:
        parsed = datetime.fromisoformat(post.date)
    except (TypeError, ValueError):
        return datetime.min
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def sort_posts(posts: list[ParsedPost]) -> list[ParsedPost]:
    """Newest first."""
    return sorted(posts, key=_sort_key, reverse=True)


def post_id(post: ParsedPost) -> str:
    """Stable identifier: index id, or the filename stem for file posts."""
    source = post.source_id or ""
    if source.endswith(".md"):
        source = source[:-3]
    return generate_id(os.path.basename(source)) or generate_id(post.title)


def build_entry(
    post: ParsedPost,
    preview_limit: int = PREVIEW_LIMIT,
    words_per_minute: int = WORDS_PER_MINUTE,
) -> dict:
    """Display record: metadata plus rendered HTML, preview text and reading time."""
    preview = strip_formatting_markers(extract_preview_text(post.content, preview_limit))
    return {
        "id": post_id(post),
        "filename": post.source_id,
        "title": post.title,
        "date": post.date,
        "display_date": format_date(post.date),
        "tags": list(post.tags),
        "html": render_to_html(post.content),
        "preview_text": preview or NO_PREVIEW_TEXT,
        "reading_time_minutes": estimate_reading_time_minutes(post.content, words_per_minute),
        "extra": dict(post.extra),
    }


def load_posts(settings: dict) -> dict:
    """Load, sort and render posts for the configured source. Returns {posts, failed} or {error}."""
    source = settings["source"]
    render = settings["render"]
    posts_dir = source["posts_dir"]

    if source["mode"] == "index":
        index_path, err = _safe_path(source["index"], posts_dir)
        if err:
            return {"error": err}
        result = load_index_posts(index_path)
    else:
        result = load_manifest_posts(posts_dir, source["manifest"])

    if "error" in result:
        return result

    entries = [
        build_entry(post, render["preview_limit"], render["words_per_minute"])
        for post in sort_posts(result["posts"])
    ]
    return {"posts": entries, "failed": result["failed"]}
