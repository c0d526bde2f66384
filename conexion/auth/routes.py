from firebase_admin import auth
from flask import current_app, jsonify, request, session
from flask_wtf.csrf import generate_csrf

from conexion.core.constants import USERS_COLLECTION
from conexion.core.db import get_db, get_document
from conexion.errors import AuthenticationError
from conexion.extensions import csrf
from conexion.user.forms import RegisterForm
from conexion.user.services import UserService
from conexion.utils import validate_form

from . import bp
from .decorators import current_user_id, login_required


@bp.route("/csrf-token", methods=["GET"])
def csrf_token():
    """Issue a CSRF token for the client to send in the X-CSRFToken header."""
    return jsonify({"csrfToken": generate_csrf()})


@bp.route("/session_login", methods=["POST"])
@csrf.exempt
def session_login():
    """
    This endpoint is called from the client-side after a successful Firebase login.
    It receives the ID token, verifies it, and creates a server-side session.
    """
    payload = request.get_json(silent=True) or {}
    id_token = payload.get("idToken")
    if not id_token:
        return jsonify({"error": "Falta el token de sesión"}), 400
    try:
        decoded_token = auth.verify_id_token(id_token)
    except Exception as e:
        current_app.logger.error(f"Error during session login: {e}")
        return jsonify({"error": "Token inválido"}), 401

    uid = decoded_token["uid"]
    user = get_document(get_db(), USERS_COLLECTION, uid)
    if user is None:
        return jsonify({"error": "Usuario no encontrado"}), 404

    session["user_id"] = uid
    session["is_admin"] = user.get("isAdmin", False)
    current_app.logger.info(f"Session started for user {uid}")
    return jsonify({"status": "success"})


@bp.route("/register", methods=["POST"])
@csrf.exempt
def register():
    """Create the user document for a freshly signed-up Firebase account."""
    form = validate_form(RegisterForm())
    try:
        decoded_token = auth.verify_id_token(form.idToken.data)
    except Exception as e:
        current_app.logger.error(f"Error during registration: {e}")
        raise AuthenticationError("Token inválido") from e

    user = UserService.create_profile(
        get_db(), decoded_token["uid"], form.name.data.strip(), form.email.data
    )
    session["user_id"] = user["id"]
    session["is_admin"] = user.get("isAdmin", False)
    return jsonify(user), 201


@bp.route("/logout", methods=["POST"])
def logout():
    """Clear the server-side session; the client signs out of Firebase itself."""
    session.clear()
    return jsonify({"status": "success"})


@bp.route("/me", methods=["GET"])
@login_required
def whoami():
    """Return the id of the authenticated caller."""
    return jsonify({"uid": current_user_id()})
