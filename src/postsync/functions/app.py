"""Flask application serving the PostSync server functions.

Launch with::

    flask --app postsync.functions.app:create_app run --port 54321
"""

from __future__ import annotations

import logging

from flask import Flask, jsonify, request
from flask_cors import CORS

from postsync.config import Settings
from postsync.core.providers import ImageGenerator, default_generator
from postsync.functions.generate_image import handle_generate
from postsync.functions.team_invitation import handle_invitation
from postsync.logging_config import setup_logging

logger = logging.getLogger(__name__)

GENERATE_ROUTE = "/functions/v1/generate-image"
INVITATION_ROUTE = "/functions/v1/send-team-invitation"


def create_app(
    settings: Settings | None = None,
    generator: ImageGenerator | None = None,
) -> Flask:
    """Create the functions application.

    Args:
        settings: Application settings; loaded from the environment when
            omitted.
        generator: Image provider; the first available registered provider
            when omitted.

    Returns:
        Configured Flask application.
    """
    settings = settings or Settings()
    setup_logging(settings.log_level)
    generator = generator or default_generator(settings)

    app = Flask(__name__)
    CORS(
        app,
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Client-Info", "Apikey"],
    )

    @app.post(GENERATE_ROUTE)
    def generate_image():
        try:
            payload, status = handle_generate(
                request.get_json(silent=True), generator, settings
            )
        except Exception as exc:
            logger.exception("Error in image generation function")
            return jsonify({"error": "Internal server error", "message": str(exc)}), 500
        return jsonify(payload), status

    @app.post(INVITATION_ROUTE)
    def send_team_invitation():
        try:
            payload, status = handle_invitation(
                request.get_json(silent=True), request.headers.get("Origin"), settings
            )
        except Exception:
            logger.exception("Error processing invitation")
            return jsonify({"error": "Failed to process invitation"}), 500
        return jsonify(payload), status

    logger.info("Functions app ready (%s, %s)", GENERATE_ROUTE, INVITATION_ROUTE)
    return app
