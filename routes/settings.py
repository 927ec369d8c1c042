"""Settings API — post source and rendering options."""

from flask import Blueprint, jsonify, request

from services.settings import load_settings, save_settings, validate_settings

bp = Blueprint("settings", __name__)


@bp.route("/api/settings", methods=["GET"])
def get_settings():
    """Return settings merged with defaults."""
    return jsonify(load_settings())


@bp.route("/api/settings", methods=["POST"])
def update_settings():
    """Validate and persist a partial settings update."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "settings must be an object"}), 400

    errors = validate_settings(data)
    if errors:
        return jsonify({"error": "Settings validation failed", "validation_errors": errors}), 400

    settings = load_settings()
    for section in ("source", "render"):
        if section in data:
            settings[section].update(
                {k: v for k, v in data[section].items() if k in settings[section]}
            )

    save_settings(settings)
    return jsonify(settings)
