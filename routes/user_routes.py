import logging

from flask import Blueprint, request, jsonify
from flask_login import current_user
from werkzeug.security import generate_password_hash

from extensions import db
from models import User, Attendance, Batch, BatchFeedback, CourseReview, Resource
from models.user import ROLES
from services.auth_service import regenerate_password
from utils.decorators import role_required
from utils.errors import api_error, handle_api_error

logger = logging.getLogger(__name__)

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.route("", methods=["GET"])
@role_required("admin")
def list_users():
    q = User.query
    role = request.args.get("role")
    if role:
        q = q.filter_by(role=role)
    users = q.order_by(User.full_name.asc()).all()
    return jsonify({"success": True, "data": [u.to_dict() for u in users]})


@users_bp.route("/<int:user_id>", methods=["GET"])
@role_required("admin", "instructor")
def get_user(user_id):
    user = db.session.get(User, user_id)
    if not user:
        return api_error("User not found", 404)
    return jsonify({"success": True, "data": user.to_dict()})


@users_bp.route("", methods=["POST"])
@role_required("admin")
def create_user():
    data = request.json or {}
    full_name = data.get("fullName")
    email = data.get("email")
    password = data.get("password")
    role = data.get("role", "student")

    if not full_name or not email or not password:
        return api_error("fullName, email and password are required", 400)
    if role not in ROLES:
        return api_error(f"Invalid role: {role}", 400)
    if User.query.filter_by(email=email).first():
        return api_error("A user with this email already exists", 400)

    try:
        user = User(
            full_name=full_name,
            email=email,
            role=role,
            phone_number=data.get("phoneNumber"),
            address=data.get("address"),
            password_hash=generate_password_hash(password),
            must_reset_password=True,
            is_active=True
        )
        db.session.add(user)
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    logger.info("User %s (%s) created by %s", user.user_id, role, current_user.user_id)
    return jsonify({"success": True, "data": user.to_dict()}), 201


@users_bp.route("/<int:user_id>", methods=["PUT"])
@role_required("admin")
def update_user(user_id):
    user = db.session.get(User, user_id)
    if not user:
        return api_error("User not found", 404)

    data = request.json or {}
    if "role" in data and data["role"] not in ROLES:
        return api_error(f"Invalid role: {data['role']}", 400)

    try:
        if "fullName" in data:
            user.full_name = data["fullName"]
        if "email" in data:
            user.email = data["email"]
        if "role" in data:
            user.role = data["role"]
        if "phoneNumber" in data:
            user.phone_number = data["phoneNumber"]
        if "address" in data:
            user.address = data["address"]
        if "isActive" in data:
            user.is_active = bool(data["isActive"])
        if data.get("password"):
            user.password_hash = generate_password_hash(data["password"])
            user.must_reset_password = True
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True, "data": user.to_dict()})


@users_bp.route("/<int:user_id>", methods=["DELETE"])
@role_required("admin")
def delete_user(user_id):
    # Prevent an admin from accidentally deleting themselves
    if user_id == current_user.user_id:
        return api_error("You cannot delete your own account", 400)

    user = db.session.get(User, user_id)
    if not user:
        return api_error("User not found", 404)

    try:
        Attendance.query.filter_by(user_id=user_id).delete(synchronize_session=False)
        Attendance.query.filter_by(marked_by=user_id).update({"marked_by": None}, synchronize_session=False)
        BatchFeedback.query.filter_by(student_id=user_id).delete(synchronize_session=False)
        CourseReview.query.filter_by(user_id=user_id).delete(synchronize_session=False)
        Batch.query.filter_by(instructor_id=user_id).update({"instructor_id": None}, synchronize_session=False)
        Resource.query.filter_by(uploaded_by=user_id).update({"uploaded_by": None}, synchronize_session=False)
        db.session.delete(user)
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    logger.info("User %s removed by %s", user_id, current_user.user_id)
    return jsonify({"success": True})


@users_bp.route("/<int:user_id>/regenerate-password", methods=["POST"])
@role_required("admin")
def regenerate_user_password(user_id):
    user = db.session.get(User, user_id)
    if not user:
        return api_error("User not found", 404)

    try:
        password = regenerate_password(user)
    except Exception as exc:
        return handle_api_error(exc)

    logger.info("Password for user %s regenerated by %s", user_id, current_user.user_id)
    return jsonify({"success": True, "data": {"password": password}})
