# vera/routes/auth.py
import logging

from flask import Blueprint, jsonify, request

from ..errors import MissingCredentialsError, StoreError, StoreNotConfiguredError
from ..extensions import get_auth

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)


def _credentials():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        body = {}
    return body.get("email"), body.get("password")


@bp.post("/register")
def register():
    email, password = _credentials()
    try:
        user = get_auth().register(email, password)
    except StoreNotConfiguredError as e:
        return jsonify({"error": e.message}), 500
    except MissingCredentialsError as e:
        return jsonify({"error": e.message}), 400
    except StoreError as e:
        logger.info("Sign-up rejected: %s", e.message)
        return jsonify({"error": e.message}), 400

    return jsonify({
        "message": "Sign-up successful. Check your email if confirmation is required.",
        "user": user,
    }), 201


@bp.post("/login")
def login():
    email, password = _credentials()
    try:
        session = get_auth().login(email, password)
    except StoreNotConfiguredError as e:
        return jsonify({"error": e.message}), 500
    except MissingCredentialsError as e:
        return jsonify({"error": e.message}), 400
    except StoreError as e:
        logger.info("Sign-in rejected: %s", e.message)
        return jsonify({"error": e.message or "Invalid credentials."}), 401

    return jsonify({"message": "Login successful", "session": session})
