"""Feed endpoints: post list with tag filter, single post, tag stats, ad hoc rendering."""

from flask import Blueprint, jsonify, request

from services.frontmatter import extract_front_matter
from services.posts import build_entry, load_posts
from services.settings import load_settings
from services.tags import FeedSession, extract_all_tags

bp = Blueprint("feed", __name__)

# Fields sent in list views; the full entry (with html) comes from /api/posts/<id>.
_CARD_FIELDS = (
    "id",
    "title",
    "date",
    "display_date",
    "tags",
    "preview_text",
    "reading_time_minutes",
)


def _card(entry: dict) -> dict:
    return {k: entry[k] for k in _CARD_FIELDS}


@bp.route("/api/posts")
def list_posts():
    """All posts, newest first. ?tag= filters case-insensitively."""
    result = load_posts(load_settings())
    if "error" in result:
        return jsonify(result), 500

    session = FeedSession(request.args.get("tag"))
    posts = session.apply(result["posts"])
    return jsonify(
        {
            "posts": [_card(p) for p in posts],
            "count": len(posts),
            "total": len(result["posts"]),
            "active_tag": session.active_tag,
            "failed": result["failed"],
        }
    )


@bp.route("/api/posts/<post_id>")
def get_post(post_id):
    """Full post: metadata, rendered html and derived text."""
    result = load_posts(load_settings())
    if "error" in result:
        return jsonify(result), 500
    for entry in result["posts"]:
        if entry["id"] == post_id:
            return jsonify(entry)
    return jsonify({"error": f"Post not found: {post_id}"}), 404


@bp.route("/api/tags")
def list_tags():
    """Tag names with post counts and colours, most used first."""
    result = load_posts(load_settings())
    if "error" in result:
        return jsonify(result), 500

    session = FeedSession(request.args.get("active"))
    tags = extract_all_tags(result["posts"])
    for tag in tags:
        tag["active"] = session.is_active(tag["name"])
    return jsonify({"tags": tags})


@bp.route("/api/render", methods=["POST"])
def render():
    """Render raw post text (front matter optional) without storing it."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400
    content = data.get("content", "")
    if not isinstance(content, str):
        return jsonify({"error": "content must be a string"}), 400

    render_settings = load_settings()["render"]
    filename = data.get("filename")
    source_id = filename if isinstance(filename, str) and filename else None
    post = extract_front_matter(content, source_id=source_id)
    entry = build_entry(post, render_settings["preview_limit"], render_settings["words_per_minute"])
    return jsonify(entry)
