import logging

from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user

from services.auth_service import authenticate_user, change_password
from utils.errors import api_error

logger = logging.getLogger(__name__)

# Define the blueprint
auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


# =========================================================
# LOGIN ROUTE
# =========================================================
@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.json or {}
    email = data.get("email")
    password = data.get("password")

    # 1. Basic Validation
    if not email or not password:
        return api_error("Email and password are required", 400)

    # 2. Authenticate User (role is optional, the login form may pin one)
    user = authenticate_user(email, password, data.get("role"))
    if not user:
        logger.info("Failed login for %s", email)
        return api_error("Invalid credentials", 401)

    # 3. Log the user in with Flask-Login
    login_user(user)
    logger.info("User %s logged in as %s", user.user_id, user.role)

    return jsonify({"success": True, "data": {"user": user.to_dict()}})


# =========================================================
# LOGOUT ROUTE
# =========================================================
@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify({"success": True})


@auth_bp.route("/me")
@login_required
def me():
    return jsonify({"success": True, "data": current_user.to_dict()})


@auth_bp.route("/change-password", methods=["POST"])
@login_required
def change_password_route():
    data = request.json or {}
    current_password = data.get("currentPassword")
    new_password = data.get("newPassword")

    if not current_password or not new_password:
        return api_error("Current password and new password are required", 400)

    if not change_password(current_user, current_password, new_password):
        return api_error("Current password is incorrect", 401)

    return jsonify({"success": True, "message": "Password updated successfully"})
