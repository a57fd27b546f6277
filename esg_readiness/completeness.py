"""
Data Completeness Analyzer

Independent of scoring: reports, per pillar, which disclosure fields are
filled and which are missing, split into critical and optional. Used to
explain a score ("it's low because ... is missing"), never to change it.
"""

import math

from esg_readiness.models import PILLARS

# Ordered (canonical key, label, critical) per pillar
FIELD_SPECS = {
    "Environmental": [
        ("electricity_kwh", "Electricity (kWh)", True),
        ("fuel_litres", "Fuel (L)", True),
        ("scope1_emissions", "Scope 1 Emissions", True),
        ("scope2_emissions", "Scope 2 Emissions", True),
        ("water_usage_kl", "Water Usage (KL)", True),
        ("total_waste_tonnes", "Total Waste (tonnes)", True),
        ("renewable_energy_percent", "Renewable Energy %", False),
        ("total_energy_consumption", "Total Energy Consumption", False),
    ],
    "Social": [
        ("total_employees_permanent", "Permanent Employees", True),
        ("total_employees_contractual", "Contractual Employees", True),
        ("female_percent_workforce", "Female % of Workforce", True),
        ("accident_incidents", "Accident Incidents", True),
        ("training_hours_per_employee", "Training Hours/Employee", True),
        ("csr_spend", "CSR Spend", False),
        ("total_employees", "Total Employees (Legacy)", False),
        ("female_employees", "Female Employees (Legacy)", False),
    ],
    "Governance": [
        ("board_members", "Board Members", True),
        ("independent_directors", "Independent Directors", True),
        ("compliance_violations", "Compliance Violations", True),
        ("anti_corruption_policy", "Anti-Corruption Policy", False),
        ("esg_committee_exists", "ESG Committee", False),
        ("board_diversity_percent", "Board Diversity %", False),
    ],
}

_PILLAR_NAMES = {"Environmental": "Environment", "Social": "Social", "Governance": "Governance"}


def is_missing(value):
    if value is None:
        return True
    if isinstance(value, str) and value == "":
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def pillar_completeness(pillar, snapshot, field_spec=None):
    """
    Completeness of one pillar's snapshot.

    Args:
        pillar: Environmental / Social / Governance
        snapshot: canonical metric dict, or None when nothing was entered
        field_spec: optional override of FIELD_SPECS[pillar]

    Returns dict with percentage (int), completed, missing and
    missing_critical label lists in field-spec order.
    """
    if field_spec is None:
        if pillar not in FIELD_SPECS:
            raise ValueError(f"Unknown pillar: {pillar}")
        field_spec = FIELD_SPECS[pillar]
    snapshot = snapshot or {}

    completed = []
    missing = []
    missing_critical = []
    for key, label, critical in field_spec:
        if not is_missing(snapshot.get(key)):
            completed.append(label)
        else:
            missing.append(label)
            if critical:
                missing_critical.append(label)

    total = len(field_spec)
    percentage = round(len(completed) / total * 100) if total else 0
    return {
        "percentage": percentage,
        "completed": completed,
        "missing": missing,
        "missing_critical": missing_critical,
    }


def overall_completeness(environmental, social, governance):
    return round((environmental + social + governance) / 3)


def impact_explanation(pillar, score, missing_critical):
    """Human-readable cause for a pillar score. Text only."""
    name = _PILLAR_NAMES.get(pillar, pillar)
    if not missing_critical:
        return f"Your {name} score is {score:.1f}. All critical data fields are completed."

    listed = ", ".join(missing_critical[:3])
    more = f" (+{len(missing_critical) - 3} more)" if len(missing_critical) > 3 else ""
    return (
        f"Your {name} score is {score:.1f}. It's low because {listed}{more} data is missing. "
        "Please fill these fields to improve your score."
    )


def completeness_report(company_id, period):
    """All three pillars for a period, explained against the persisted score if any."""
    from esg_readiness import store

    metrics = store.get_period_metrics(company_id, period)
    score = store.get_score(company_id, period)
    score_by_pillar = {
        "Environmental": score.environmental_score if score else None,
        "Social": score.social_score if score else None,
        "Governance": score.governance_score if score else None,
    }

    pillars = {}
    for pillar in PILLARS:
        result = pillar_completeness(pillar, metrics[pillar])
        result["has_data"] = metrics[pillar] is not None
        pillar_score = score_by_pillar[pillar]
        result["explanation"] = (
            impact_explanation(pillar, pillar_score, result["missing_critical"])
            if pillar_score is not None else None
        )
        pillars[pillar] = result

    return {
        "company_id": company_id,
        "period": period,
        "pillars": pillars,
        "overall": overall_completeness(
            pillars["Environmental"]["percentage"],
            pillars["Social"]["percentage"],
            pillars["Governance"]["percentage"],
        ),
    }


def collection_hub(company_id):
    """Which pillars have a snapshot in each period, newest period first."""
    from esg_readiness import store

    latest = {}
    for snapshot in store.list_snapshots(company_id):
        latest.setdefault((snapshot["period"], snapshot["pillar"]), snapshot)

    periods = sorted({period for period, _ in latest}, reverse=True)
    status = []
    for period in periods:
        modules = {}
        for pillar in PILLARS:
            snapshot = latest.get((period, pillar))
            modules[pillar] = {
                "exists": snapshot is not None,
                "snapshot_id": snapshot["id"] if snapshot else None,
                "last_updated": (
                    snapshot["created_at"].isoformat()
                    if snapshot and snapshot["created_at"] else None
                ),
            }
        present = sum(1 for m in modules.values() if m["exists"])
        status.append({
            "period": period,
            "is_complete": present == len(PILLARS),
            "completion_percentage": round(present / len(PILLARS) * 100),
            "modules": modules,
        })

    return {
        "company_id": company_id,
        "periods": status,
        "complete_periods": sum(1 for s in status if s["is_complete"]),
    }
