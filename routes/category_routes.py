from flask import Blueprint, request, jsonify
from flask_login import login_required

from extensions import db
from models import CourseCategory
from utils.decorators import role_required
from utils.errors import api_error, handle_api_error

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


def _name_taken(name, exclude_id=None):
    q = CourseCategory.query.filter_by(category_name=name)
    if exclude_id is not None:
        q = q.filter(CourseCategory.category_id != exclude_id)
    return q.first() is not None


@categories_bp.route("", methods=["GET"])
@login_required
def list_categories():
    categories = CourseCategory.query.order_by(CourseCategory.category_name.asc()).all()
    return jsonify({"success": True, "data": [c.to_dict() for c in categories]})


@categories_bp.route("/<int:category_id>", methods=["GET"])
@login_required
def get_category(category_id):
    category = db.session.get(CourseCategory, category_id)
    if not category:
        return api_error("Category not found", 404)

    data = category.to_dict()
    data["courses"] = [c.to_dict() for c in category.courses]
    return jsonify({"success": True, "data": data})


@categories_bp.route("", methods=["POST"])
@role_required("admin")
def create_category():
    name = ((request.json or {}).get("categoryName") or "").strip()
    if not name:
        return api_error("Category name is required", 400)
    if _name_taken(name):
        return api_error("A category with this name already exists", 400)

    try:
        category = CourseCategory(category_name=name)
        db.session.add(category)
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True, "data": category.to_dict()}), 201


@categories_bp.route("/<int:category_id>", methods=["PUT"])
@role_required("admin")
def update_category(category_id):
    category = db.session.get(CourseCategory, category_id)
    if not category:
        return api_error("Category not found", 404)

    name = ((request.json or {}).get("categoryName") or "").strip()
    if not name:
        return api_error("Category name is required", 400)
    if _name_taken(name, exclude_id=category_id):
        return api_error("A category with this name already exists", 400)

    try:
        category.category_name = name
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True, "data": category.to_dict()})


@categories_bp.route("/<int:category_id>", methods=["DELETE"])
@role_required("admin")
def delete_category(category_id):
    category = db.session.get(CourseCategory, category_id)
    if not category:
        return api_error("Category not found", 404)
    if category.courses:
        return api_error("Cannot delete category with associated courses", 400)

    try:
        db.session.delete(category)
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True})
