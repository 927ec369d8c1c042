"""Settings persistence (~/.config/blog-feed/settings.json), merged with defaults.

Sections:
    source  where posts come from: a manifest of markdown files or a JSON index
    render  preview length and reading speed
"""

import json
import os

from config import (
    _SETTINGS_FILE,
    INDEX_FILE,
    MANIFEST_FILE,
    POSTS_DIR,
    PREVIEW_LIMIT,
    WORDS_PER_MINUTE,
)

SOURCE_MODES = ("manifest", "index")

_DEFAULTS = {
    "source": {
        "mode": "manifest",
        "posts_dir": POSTS_DIR,
        "manifest": MANIFEST_FILE,
        "index": INDEX_FILE,
    },
    "render": {
        "preview_limit": PREVIEW_LIMIT,
        "words_per_minute": WORDS_PER_MINUTE,
    },
}


def default_settings() -> dict:
    return {k: dict(v) for k, v in _DEFAULTS.items()}


def load_settings() -> dict:
    """Load saved settings, each section merged over its defaults."""
    try:
        with open(_SETTINGS_FILE) as f:
            saved = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        saved = {}
    if not isinstance(saved, dict):
        saved = {}

    settings = {}
    for key, default_val in _DEFAULTS.items():
        section = saved.get(key, {})
        settings[key] = {**default_val, **(section if isinstance(section, dict) else {})}
    return settings


def save_settings(settings: dict) -> None:
    """Persist known sections only."""
    os.makedirs(os.path.dirname(_SETTINGS_FILE), exist_ok=True)
    data = {key: settings[key] for key in _DEFAULTS if key in settings}
    with open(_SETTINGS_FILE, "w") as f:
        json.dump(data, f, indent=2)


def validate_settings(data: dict) -> list[str]:
    """Return validation errors for a partial settings update. Empty means valid."""
    errors = []

    source = data.get("source", {})
    if not isinstance(source, dict):
        errors.append("source must be an object")
        source = {}
    render = data.get("render", {})
    if not isinstance(render, dict):
        errors.append("render must be an object")
        render = {}

    if "mode" in source and source["mode"] not in SOURCE_MODES:
        errors.append(f"source.mode must be one of {list(SOURCE_MODES)}")
    for field in ("posts_dir", "manifest", "index"):
        if field in source and (not isinstance(source[field], str) or not source[field].strip()):
            errors.append(f"source.{field} must be a non-empty string")

    if "preview_limit" in render:
        v = render["preview_limit"]
        if not isinstance(v, int) or isinstance(v, bool) or not (10 <= v <= 1000):
            errors.append("render.preview_limit must be an integer between 10 and 1000")
    if "words_per_minute" in render:
        v = render["words_per_minute"]
        if not isinstance(v, int) or isinstance(v, bool) or v < 1:
            errors.append("render.words_per_minute must be a positive integer")

    return errors
