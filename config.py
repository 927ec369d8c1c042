"""Shared constants and path configuration for Blog Feed."""

import json
import os

_SETTINGS_FILE = os.path.expanduser("~/.config/blog-feed/settings.json")
_DEFAULT_POSTS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "posts")


def _read_setting(*keys, default=None):
    """Read a nested setting from the settings file."""
    try:
        with open(_SETTINGS_FILE) as f:
            data = json.load(f)
        for k in keys:
            data = data[k]
        return data
    except (FileNotFoundError, json.JSONDecodeError, KeyError, TypeError):
        return default


POSTS_DIR = os.environ.get("BLOG_FEED_POSTS_DIR") or _read_setting(
    "source", "posts_dir", default=_DEFAULT_POSTS_DIR
)
MANIFEST_FILE = "manifest.json"
INDEX_FILE = "posts.json"
PREVIEW_LIMIT = 150
WORDS_PER_MINUTE = 200
NO_PREVIEW_TEXT = "No preview available."
PORT = 4250
