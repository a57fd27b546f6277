import logging
from datetime import datetime

from flask import Blueprint, current_app, request, jsonify

from esg_readiness import store
from esg_readiness.errors import CompanyNotFoundError
from esg_readiness.task_service import (
    create_manual_task, current_period, sync_tasks, task_dashboard, update_task_status,
)

logger = logging.getLogger(__name__)

tasks_bp = Blueprint("tasks", __name__, url_prefix="/tasks")


def _require_company(company_id):
    if store.get_company_profile(company_id) is None:
        raise CompanyNotFoundError(company_id)


@tasks_bp.route("/dashboard/<int:company_id>")
def dashboard(company_id):
    """Sync generated tasks for the period, then return the dashboard."""
    _require_company(company_id)
    period = request.args.get("period") or current_period()
    user_id = request.args.get("user_id", type=int)

    sync = sync_tasks(
        company_id, user_id, period,
        window_days=current_app.config.get("ESG_EVIDENCE_EXPIRY_DAYS", 30),
    )
    result = task_dashboard(company_id)
    result["sync"] = {
        "created": len(sync["created"]),
        "skipped": sync["skipped"],
        "overdue": sync["overdue"],
    }
    return jsonify(result)


@tasks_bp.route("/<int:company_id>")
def list_tasks(company_id):
    _require_company(company_id)
    tasks = store.list_tasks(
        company_id,
        pillar=request.args.get("pillar"),
        priority=request.args.get("priority"),
        status=request.args.get("status"),
    )
    return jsonify({"tasks": [t.to_dict() for t in tasks]})


@tasks_bp.route("/<int:company_id>", methods=["POST"])
def create_task(company_id):
    _require_company(company_id)
    data = request.get_json(silent=True) or {}

    due_date = None
    if data.get("due_date"):
        try:
            due_date = datetime.fromisoformat(data["due_date"])
        except (TypeError, ValueError):
            due_date = None

    task = create_manual_task(
        company_id,
        data.get("user_id"),
        data.get("title"),
        data.get("pillar"),
        due_date,
        related_to=data.get("related_to", "Data"),
        priority=data.get("priority", "Medium"),
        description=data.get("description", ""),
        impact=data.get("impact", ""),
    )
    logger.info(f"Manual task {task.id} created for company {company_id}")
    return jsonify({"ok": True, "task": task.to_dict()}), 201


@tasks_bp.route("/<int:task_id>/status", methods=["PUT"])
def update_status(task_id):
    data = request.get_json(silent=True) or {}
    task = update_task_status(task_id, data.get("status"))
    if task is None:
        return jsonify({"ok": False, "error": "Task not found"}), 404
    return jsonify({"ok": True, "task": task.to_dict()})
