#!/usr/bin/env python3
"""Blog Feed server — JSON API over markdown posts rendered as a feed."""

import argparse
import logging
import os

from flask import Flask, jsonify

from config import PORT

app = Flask(__name__)

from routes.feed import bp as feed_bp  # noqa: E402
from routes.settings import bp as settings_bp  # noqa: E402

app.register_blueprint(feed_bp)
app.register_blueprint(settings_bp)


@app.route("/api/health")
def health():
    return jsonify({"ok": True})


def main():
    """Entry point for `blog-feed` CLI command."""
    from services.settings import load_settings, save_settings

    parser = argparse.ArgumentParser(description="Blog Feed Server")
    parser.add_argument(
        "--port", type=int, default=PORT, help=f"Port to listen on (default: {PORT})"
    )
    parser.add_argument("--posts-dir", help="Directory holding posts (saved to settings)")
    parser.add_argument(
        "--mode", choices=("manifest", "index"), help="Post source: manifest of files or JSON index"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    cli_args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if cli_args.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    settings = load_settings()
    changed = False
    if cli_args.posts_dir:
        settings["source"]["posts_dir"] = os.path.abspath(cli_args.posts_dir)
        changed = True
    if cli_args.mode:
        settings["source"]["mode"] = cli_args.mode
        changed = True
    if changed:
        save_settings(settings)

    print("\n  Blog Feed v0.1.0")
    print(f"  Port: {cli_args.port}")
    print(f"  Posts: {settings['source']['posts_dir']} ({settings['source']['mode']})")
    print(f"  API: http://localhost:{cli_args.port}/api/posts\n")

    app.run(port=cli_args.port, threaded=True)


if __name__ == "__main__":
    main()
