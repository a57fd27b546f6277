"""
ESG Score Calculator

Turns one period's Environmental / Social / Governance metric snapshots plus
the company profile into four 0-100 scores:

- Environmental (base 100): per-employee electricity, waste, water and carbon
  bands, plus renewable share x 0.3
- Social (base 50): gender diversity, training hours, incident rate, turnover
- Governance (base 50): board independence, anti-corruption / data-privacy
  policies, compliance violations
- Overall: 0.4 E + 0.3 S + 0.3 G

Snapshots are expected in canonical field names (see normalize.py). Absent or
blank incident, turnover and violation fields read as zero; any value that
is not numeric skips its adjustment and never turns into NaN.
"""

import logging
import math

from esg_readiness.errors import (
    CompanyNotFoundError, ComputationError, InvalidCompanyProfileError, MissingMetricsError,
)

logger = logging.getLogger(__name__)

FALLBACK_EMPLOYEE_COUNT = 100

PILLAR_WEIGHTS = {"Environmental": 0.4, "Social": 0.3, "Governance": 0.3}

GRADE_BANDS = [
    (90, "A+", "Excellent"),
    (80, "A", "Very Good"),
    (70, "B", "Good"),
    (60, "C", "Fair"),
    (50, "D", "Needs Improvement"),
    (0, "F", "Poor"),
]


def to_number(value):
    """Coerce a metric value to float. None for blanks, junk and NaN."""
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def to_number_or_zero(value):
    """Like to_number, but an absent or blank value counts as 0."""
    if value is None or value == "":
        return 0.0
    return to_number(value)


def _clamp(score):
    return max(0.0, min(100.0, score))


def resolve_employee_count(company):
    """Return the company's employee count, raising if it can't divide."""
    raw = company.get("employee_count") if company else None
    count = to_number(raw)
    if count is None or count <= 0:
        raise InvalidCompanyProfileError(company.get("id") if company else None, raw)
    return count


# ---------------------------------------------------------------------------
# Pillar scores
# ---------------------------------------------------------------------------

def environmental_score(metrics, employee_count):
    score = 100.0
    if not employee_count or employee_count <= 0:
        return _clamp(score)

    electricity = to_number(metrics.get("electricity_kwh"))
    if electricity is not None and electricity > 0:
        per_employee = electricity / employee_count
        # >500 kWh per employee is poor; the -8 band starts at 300 inclusive
        if per_employee > 500:
            score -= 15
        elif per_employee >= 300:
            score -= 8
        elif per_employee < 150:
            score += 5

    waste = to_number(metrics.get("waste_generated_kg"))
    if waste is not None and waste > 0:
        per_employee = waste / employee_count
        if per_employee > 100:
            score -= 15
        elif per_employee > 50:
            score -= 8
        else:
            score += 5

    water = to_number(metrics.get("water_usage_kl"))
    if water is not None and water > 0:
        per_employee = water / employee_count
        if per_employee > 5:
            score -= 10
        elif per_employee < 2:
            score += 5

    renewable = to_number(metrics.get("renewable_energy_percent"))
    if renewable is not None and 0 <= renewable <= 100:
        score += renewable * 0.3

    carbon = to_number(metrics.get("carbon_emissions_tons"))
    if carbon is not None and carbon > 0:
        per_employee = carbon / employee_count
        if per_employee > 5:
            score -= 10
        elif per_employee < 2:
            score += 5

    return _clamp(score)


def female_percentage(metrics):
    """Female share of the workforce, from the explicit field or from headcounts.

    Order: female_percent_workforce, then female_employees over
    total_employees, then female_employees over permanent + contractual.
    A present female_percent_workforce wins even when blank (0, no bonus).
    """
    explicit = metrics.get("female_percent_workforce")
    if explicit is not None:
        return to_number_or_zero(explicit)

    female = to_number(metrics.get("female_employees"))
    total = to_number(metrics.get("total_employees"))
    if female and total:
        return female / total * 100

    permanent = to_number(metrics.get("total_employees_permanent"))
    if permanent:
        headcount = permanent + (to_number(metrics.get("total_employees_contractual")) or 0)
        if female and headcount > 0:
            return female / headcount * 100
    return None


def social_score(metrics):
    score = 50.0

    female_pct = female_percentage(metrics)
    if female_pct is not None and female_pct > 0:
        if female_pct >= 40:
            score += 25
        elif female_pct >= 30:
            score += 18
        elif female_pct >= 20:
            score += 12
        elif female_pct >= 10:
            score += 6

    training = to_number(metrics.get("training_hours_per_employee"))
    if training is not None and training > 0:
        if training >= 40:
            score += 25
        elif training >= 24:
            score += 18
        elif training >= 12:
            score += 12
        elif training >= 6:
            score += 6

    incidents = to_number_or_zero(metrics.get("accident_incidents"))
    headcount = (to_number(metrics.get("total_employees_permanent"))
                 or to_number(metrics.get("total_employees")))
    if incidents is not None and headcount and headcount > 0:
        incident_rate = incidents / headcount * 100
        if incident_rate == 0:
            score += 25
        elif incident_rate < 1:
            score += 18
        elif incident_rate < 3:
            score += 10
        else:
            score -= 10

    turnover = to_number_or_zero(metrics.get("employee_turnover_percent"))
    if turnover is not None and turnover >= 0:
        if turnover < 5:
            score += 25
        elif turnover < 10:
            score += 18
        elif turnover < 15:
            score += 12
        elif turnover < 25:
            score += 6
        else:
            score -= 5

    return _clamp(score)


def governance_score(metrics):
    score = 50.0

    independent = to_number(metrics.get("independent_directors"))
    board = to_number(metrics.get("board_members"))
    if independent is not None and board and board > 0:
        ratio = independent / board
        if ratio >= 0.5:
            score += 30
        elif ratio >= 0.33:
            score += 20
        elif ratio >= 0.25:
            score += 10

    if metrics.get("anti_corruption_policy") is True:
        score += 20
    if metrics.get("data_privacy_policy") is True:
        score += 20

    violations = to_number_or_zero(metrics.get("compliance_violations"))
    if violations is not None:
        if violations == 0:
            score += 30
        elif violations == 1:
            score += 15
        elif violations == 2:
            score += 5
        else:
            score -= 20

    return _clamp(score)


# ---------------------------------------------------------------------------
# Combined result
# ---------------------------------------------------------------------------

def overall_score(environmental, social, governance):
    return round(
        environmental * PILLAR_WEIGHTS["Environmental"]
        + social * PILLAR_WEIGHTS["Social"]
        + governance * PILLAR_WEIGHTS["Governance"],
        1,
    )


def score_snapshots(env, social, gov, company, period=None,
                    fallback_employee_count=FALLBACK_EMPLOYEE_COUNT):
    """
    Score one period from its three snapshots.

    Args:
        env, social, gov: canonical metric dicts (None when the pillar is absent)
        company: profile dict with at least id and employee_count

    Returns dict with environmental, social, governance and overall scores
    (one decimal) and a warnings list.

    Raises MissingMetricsError naming the absent pillars, ComputationError when
    a score is NaN.
    """
    missing = [
        pillar for pillar, snapshot in
        (("Environmental", env), ("Social", social), ("Governance", gov))
        if snapshot is None
    ]
    if missing:
        raise MissingMetricsError(period, missing)

    warnings = []
    try:
        employee_count = resolve_employee_count(company)
    except InvalidCompanyProfileError as e:
        employee_count = fallback_employee_count
        msg = f"{e}; using {fallback_employee_count} for per-employee normalization"
        logger.warning(msg)
        warnings.append(msg)

    raw = {
        "environmental": environmental_score(env, employee_count),
        "social": social_score(social),
        "governance": governance_score(gov),
    }
    if any(math.isnan(v) for v in raw.values()):
        raise ComputationError(raw)

    environmental = round(raw["environmental"], 1)
    social_value = round(raw["social"], 1)
    governance = round(raw["governance"], 1)
    overall = overall_score(environmental, social_value, governance)
    if math.isnan(overall):
        raise ComputationError({**raw, "overall": overall})

    return {
        "environmental": environmental,
        "social": social_value,
        "governance": governance,
        "overall": overall,
        "warnings": warnings,
    }


def compute_scores(company_id, period):
    """Fetch the latest snapshots for a period and score them.

    The caller decides whether to persist the result (store.upsert_score).
    """
    from flask import current_app
    from esg_readiness import store

    company = store.get_company_profile(company_id)
    if company is None:
        raise CompanyNotFoundError(company_id)

    env = store.get_latest_metric(company_id, period, "Environmental")
    social = store.get_latest_metric(company_id, period, "Social")
    gov = store.get_latest_metric(company_id, period, "Governance")

    fallback = current_app.config.get("ESG_FALLBACK_EMPLOYEE_COUNT", FALLBACK_EMPLOYEE_COUNT)
    result = score_snapshots(env, social, gov, company, period=period,
                             fallback_employee_count=fallback)
    result["company_id"] = company_id
    result["period"] = period
    logger.info(
        f"Scored company {company_id} {period}: E={result['environmental']} "
        f"S={result['social']} G={result['governance']} overall={result['overall']}"
    )
    return result


# ---------------------------------------------------------------------------
# Bands
# ---------------------------------------------------------------------------

def score_grade(score):
    for threshold, grade, label in GRADE_BANDS:
        if score >= threshold:
            return {"grade": grade, "label": label}
    return {"grade": "F", "label": "Poor"}


def risk_level(score):
    if score >= 70:
        return "Low"
    if score >= 50:
        return "Medium"
    return "High"
