import logging
from datetime import datetime

from flask import Blueprint, current_app, request, jsonify

from esg_readiness import store
from esg_readiness.completeness import collection_hub, completeness_report
from esg_readiness.errors import CompanyNotFoundError, ValidationError
from esg_readiness.evidence import evidence_dashboard
from esg_readiness.scorecard import build_scorecard
from esg_readiness.scoring import compute_scores
from esg_readiness.task_service import current_period

logger = logging.getLogger(__name__)

esg_bp = Blueprint("esg", __name__, url_prefix="/esg")


def _require_company(company_id):
    company = store.get_company_profile(company_id)
    if company is None:
        raise CompanyNotFoundError(company_id)
    return company


def _parse_date(value):
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"Invalid date: {value}")


@esg_bp.route("/calculate/<int:company_id>", methods=["POST"])
def calculate(company_id):
    """Score a period from its latest snapshots and persist the result."""
    data = request.get_json(silent=True) or {}
    period = data.get("period") or request.args.get("period")
    if not period:
        raise ValidationError("Period is required")

    result = compute_scores(company_id, period)
    row = store.upsert_score(company_id, period, result)
    return jsonify({
        "ok": True,
        "score": row.to_dict(),
        "warnings": result["warnings"],
    })


@esg_bp.route("/scorecard/<int:company_id>")
def scorecard(company_id):
    _require_company(company_id)
    return jsonify(build_scorecard(company_id, request.args.get("period")))


@esg_bp.route("/completeness/<int:company_id>")
def completeness(company_id):
    _require_company(company_id)
    period = request.args.get("period") or current_period()
    return jsonify(completeness_report(company_id, period))


@esg_bp.route("/collection-hub/<int:company_id>")
def collection_status(company_id):
    _require_company(company_id)
    return jsonify(collection_hub(company_id))


@esg_bp.route("/metrics/<int:company_id>/<string:pillar>", methods=["POST"])
def save_metrics(company_id, pillar):
    """Append a metric snapshot. Body: {"period": "...", "data": {...}}."""
    _require_company(company_id)
    payload = request.get_json(silent=True) or {}
    period = payload.get("period")
    if not period:
        raise ValidationError("Period is required")
    data = payload.get("data")
    if not isinstance(data, dict):
        raise ValidationError("Metric data must be an object")

    snapshot = store.save_metric_snapshot(company_id, period, pillar, data)
    logger.info(f"Saved {pillar} metrics for company {company_id} {period}")
    return jsonify({
        "ok": True,
        "id": snapshot.id,
        "period": snapshot.period,
        "pillar": snapshot.pillar,
        "data": snapshot.data,
    }), 201


@esg_bp.route("/evidence/<int:company_id>", methods=["POST"])
def add_evidence(company_id):
    _require_company(company_id)
    payload = request.get_json(silent=True) or {}
    evidence = store.add_evidence(
        company_id,
        payload.get("evidence_type"),
        payload.get("pillar", "Environmental"),
        expiry_date=_parse_date(payload.get("expiry_date")),
        file_name=payload.get("file_name", ""),
    )
    return jsonify({
        "ok": True,
        "id": evidence.id,
        "evidence_type": evidence.evidence_type,
        "pillar": evidence.pillar,
        "expiry_date": evidence.expiry_date.isoformat() if evidence.expiry_date else None,
    }), 201


@esg_bp.route("/evidence/<int:company_id>")
def evidence_overview(company_id):
    _require_company(company_id)
    return jsonify(evidence_dashboard(
        company_id,
        window_days=current_app.config.get("ESG_EVIDENCE_EXPIRY_DAYS", 30),
    ))
