import logging

from flask import Blueprint, request, jsonify
from flask_login import login_required

from extensions import db
from models import Batch, Resource
from models.resource import RESOURCE_TYPES
from services import feedback_gate
from services.request_context import current_context, can_manage_batch, can_view_batch
from utils.errors import api_error, handle_api_error
from utils.parsing import to_int

logger = logging.getLogger(__name__)

resources_bp = Blueprint("resources", __name__, url_prefix="/api/resources")


@resources_bp.route("/batch/<int:batch_id>", methods=["GET"])
@login_required
def batch_resources(batch_id):
    ctx = current_context()
    batch = db.session.get(Batch, batch_id)
    if not batch:
        return api_error("Batch not found", 404)
    if not can_view_batch(ctx, batch):
        return api_error("You do not have access to this batch", 403)

    student_id = ctx.user_id if ctx.role == "student" else None
    items = feedback_gate.resources_with_lock_state(batch_id, student_id)
    return jsonify({"success": True, "data": items})


@resources_bp.route("/<int:resource_id>", methods=["GET"])
@login_required
def get_resource(resource_id):
    ctx = current_context()
    resource = db.session.get(Resource, resource_id)
    if not resource:
        return api_error("Resource not found", 404)
    if not can_view_batch(ctx, resource.batch):
        return api_error("You do not have access to this batch", 403)

    if ctx.role == "student" and not feedback_gate.is_resource_visible(resource, ctx.user_id):
        return api_error("Submit feedback for the previous resources to unlock this one", 403)

    return jsonify({"success": True, "data": resource.to_dict()})


@resources_bp.route("", methods=["POST"])
@login_required
def create_resource():
    ctx = current_context()
    data = request.json or {}
    batch_id = to_int(data.get("batchId"))
    title = data.get("title")
    resource_type = data.get("resourceType")
    file_url = data.get("fileUrl")

    if batch_id is None or not title or not file_url:
        return api_error("batchId, title and fileUrl are required", 400)
    if resource_type not in RESOURCE_TYPES:
        return api_error(f"resourceType must be one of {', '.join(RESOURCE_TYPES)}", 400)

    batch = db.session.get(Batch, batch_id)
    if not batch:
        return api_error("Batch not found", 404)
    if not can_manage_batch(ctx, batch):
        return api_error("Not authorized to upload resources for this batch", 403)

    try:
        resource = Resource(
            batch_id=batch_id,
            uploaded_by=ctx.user_id,
            title=title,
            description=data.get("description"),
            resource_type=resource_type,
            file_url=file_url,
            file_name=data.get("fileName")
        )
        db.session.add(resource)
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    logger.info("Resource %s added to batch %s by %s", resource.resource_id, batch_id, ctx.user_id)
    return jsonify({"success": True, "data": resource.to_dict()}), 201


@resources_bp.route("/<int:resource_id>", methods=["PUT"])
@login_required
def update_resource(resource_id):
    resource = db.session.get(Resource, resource_id)
    if not resource:
        return api_error("Resource not found", 404)
    if not can_manage_batch(current_context(), resource.batch):
        return api_error("Not authorized to edit this resource", 403)

    data = request.json or {}
    if "resourceType" in data and data["resourceType"] not in RESOURCE_TYPES:
        return api_error(f"resourceType must be one of {', '.join(RESOURCE_TYPES)}", 400)

    # batch_id and created_at stay fixed, they decide the resource's interval
    try:
        if "title" in data:
            resource.title = data["title"]
        if "description" in data:
            resource.description = data["description"]
        if "resourceType" in data:
            resource.resource_type = data["resourceType"]
        if "fileUrl" in data:
            resource.file_url = data["fileUrl"]
        if "fileName" in data:
            resource.file_name = data["fileName"]
        db.session.commit()
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True, "data": resource.to_dict()})


@resources_bp.route("/<int:resource_id>", methods=["DELETE"])
@login_required
def delete_resource(resource_id):
    resource = db.session.get(Resource, resource_id)
    if not resource:
        return api_error("Resource not found", 404)
    if not can_manage_batch(current_context(), resource.batch):
        return api_error("Not authorized to delete this resource", 403)

    try:
        result = feedback_gate.delete_resources([resource_id])
    except Exception as exc:
        return handle_api_error(exc)

    return jsonify({"success": True, "data": result})


@resources_bp.route("/bulk-delete", methods=["POST"])
@login_required
def bulk_delete_resources():
    ctx = current_context()
    raw_ids = (request.json or {}).get("resourceIds")
    if not isinstance(raw_ids, list) or not raw_ids:
        return api_error("resourceIds must be a non-empty list", 400)

    resource_ids = [to_int(r) for r in raw_ids]
    if any(r is None for r in resource_ids):
        return api_error("resourceIds must be integers", 400)

    resources = Resource.query.filter(Resource.resource_id.in_(resource_ids)).all()
    if len(resources) != len(set(resource_ids)):
        return api_error("One or more resources were not found", 404)

    for resource in resources:
        if not can_manage_batch(ctx, resource.batch):
            return api_error(f"Not authorized to delete resource {resource.resource_id}", 403)

    try:
        result = feedback_gate.delete_resources(resource_ids)
    except Exception as exc:
        return handle_api_error(exc)

    logger.info("Bulk deleted %s resources by %s", result["deleted"], ctx.user_id)
    return jsonify({"success": True, "data": result})
