from flask import Blueprint, request, jsonify

from esg_readiness import store
from esg_readiness.errors import CompanyNotFoundError
from esg_readiness.readiness import readiness, readiness_message
from esg_readiness.task_service import current_period

compliance_bp = Blueprint("compliance", __name__, url_prefix="/compliance")


@compliance_bp.route("/readiness/<int:company_id>")
def brsr_readiness(company_id):
    if store.get_company_profile(company_id) is None:
        raise CompanyNotFoundError(company_id)
    period = request.args.get("period") or current_period()
    result = readiness(company_id, period)
    return jsonify({
        "company_id": company_id,
        "period": period,
        "message": readiness_message(result["overall_readiness"]),
        **result,
    })
