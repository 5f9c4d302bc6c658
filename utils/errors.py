import logging

from flask import jsonify

from extensions import db

logger = logging.getLogger(__name__)


def api_error(message, status):
    return jsonify({"success": False, "error": message}), status


def handle_api_error(exc):
    db.session.rollback()
    logger.exception("API Error: %s", exc)
    return api_error(str(exc) or "An unknown error occurred", 500)
