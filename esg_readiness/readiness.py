"""
BRSR Readiness

Evaluates every catalog requirement against the period's metric snapshots and
the company's evidence, groups coverage by pillar and ranks the uncovered
requirements into at most five next steps.

Coverage checks accept both the current BRSR field and its legacy
counterpart where the two differ in unit (e.g. total_waste_tonnes vs
waste_generated_kg); pure synonyms are already merged by normalize.py.
"""

import logging

from esg_readiness.brsr_requirements import BRSR_REQUIREMENTS, CATEGORY_ORDER, action_for
from esg_readiness.completeness import is_missing
from esg_readiness.models import PILLARS
from esg_readiness.scoring import to_number

logger = logging.getLogger(__name__)

MAX_NEXT_STEPS = 5
WARNING_THRESHOLD = 0.7


def _truthy(value):
    return not is_missing(value) and bool(value)


def _has_any(metrics, *keys):
    return any(_truthy(metrics.get(k)) for k in keys)


def _recorded(metrics, key):
    """Field was entered at all; zero counts as an answer."""
    return metrics.get(key) is not None


def _evidence_mentions(evidence, *keywords):
    for e in evidence:
        evidence_type = (e.get("evidence_type") or "").lower()
        if any(kw in evidence_type for kw in keywords):
            return True
    return False


# One predicate per requirement id: (env, social, gov, evidence) -> bool
_COVERAGE_CHECKS = {
    # Environmental
    "E1": lambda env, soc, gov, ev: _has_any(env, "electricity_kwh", "total_energy_consumption"),
    "E2": lambda env, soc, gov, ev: _has_any(env, "water_usage_kl"),
    "E3": lambda env, soc, gov, ev: _has_any(env, "total_waste_tonnes", "waste_generated_kg"),
    "E4": lambda env, soc, gov, ev: _has_any(env, "scope1_emissions", "carbon_emissions_tons"),
    "E5": lambda env, soc, gov, ev: (to_number(env.get("renewable_energy_percent")) or 0) > 0,
    "E6": lambda env, soc, gov, ev: _has_any(env, "environmental_policy_exists"),
    "E7": lambda env, soc, gov, ev: _evidence_mentions(ev, "waste", "disposal"),
    "E8": lambda env, soc, gov, ev: _truthy(env.get("scope1_emissions")) and _truthy(env.get("scope2_emissions")),
    # Social
    "S1": lambda env, soc, gov, ev: _has_any(
        soc, "total_employees_permanent", "total_employees", "total_employees_contractual"),
    "S2": lambda env, soc, gov, ev: _has_any(soc, "female_percent_workforce", "female_employees"),
    "S3": lambda env, soc, gov, ev: _has_any(soc, "training_hours_per_employee"),
    "S4": lambda env, soc, gov, ev: _recorded(soc, "accident_incidents"),
    "S5": lambda env, soc, gov, ev: _has_any(soc, "csr_spend"),
    "S6": lambda env, soc, gov, ev: _has_any(soc, "health_safety_policies"),
    # Governance
    "G1": lambda env, soc, gov, ev: _has_any(gov, "board_members"),
    "G2": lambda env, soc, gov, ev: _has_any(gov, "independent_directors"),
    "G3": lambda env, soc, gov, ev: _recorded(gov, "compliance_violations"),
    "G4": lambda env, soc, gov, ev: _has_any(gov, "anti_corruption_policy"),
    "G5": lambda env, soc, gov, ev: (_has_any(gov, "whistleblower_policy_exists")
                                     or _evidence_mentions(ev, "posh")),
    "G6": lambda env, soc, gov, ev: _has_any(gov, "code_of_conduct_exists"),
    "G7": lambda env, soc, gov, ev: _has_any(gov, "esg_committee_exists"),
}


def is_requirement_covered(requirement, env, social, gov, evidence):
    """True when the period's data / evidence satisfies the requirement."""
    check = _COVERAGE_CHECKS.get(requirement["id"])
    if check is None:
        return False
    return bool(check(env or {}, social or {}, gov or {}, evidence or []))


def _pillar_status(covered, total):
    if covered == total:
        return "complete"
    if covered >= total * WARNING_THRESHOLD:
        return "warning"
    return "critical"


def _step_priority(requirement):
    if requirement["mandatory"]:
        return "high"
    if requirement["category"] == "client-driven":
        return "medium"
    return "low"


def rank_next_steps(checks, limit=MAX_NEXT_STEPS):
    """Uncovered requirements, mandatory first, then by category. Stable."""
    uncovered = [c for c in checks if not c["covered"]]
    ranked = sorted(
        uncovered,
        key=lambda r: (not r["mandatory"], CATEGORY_ORDER.get(r["category"], len(CATEGORY_ORDER))),
    )
    return [
        {
            "priority": _step_priority(r),
            "action": action_for(r),
            "pillar": r["pillar"],
            "requirement": r["requirement"],
            "requirement_id": r["id"],
        }
        for r in ranked[:limit]
    ]


READINESS_MESSAGES = [
    (80, "You are very close to enterprise-level ESG compliance."),
    (60, "You are close to enterprise-level ESG compliance."),
    (40, "You need to do more work to achieve enterprise-level ESG compliance."),
    (0, "You need significant work to achieve enterprise-level ESG compliance."),
]


def readiness_message(overall):
    """One-line summary for an overall readiness percentage."""
    for threshold, message in READINESS_MESSAGES:
        if overall >= threshold:
            return message
    return READINESS_MESSAGES[-1][1]


def aggregate_readiness(env, social, gov, evidence, requirements=None):
    """
    BRSR readiness from already-fetched inputs.

    Returns dict with:
    - overall_readiness: covered / total x 100, integer
    - breakdown: per pillar {pillar, covered, total, missing, status, requirements}
    - next_steps: up to five {priority, action, pillar, requirement, requirement_id}
    """
    if requirements is None:
        requirements = BRSR_REQUIREMENTS

    checks = []
    for req in requirements:
        checks.append({**req, "covered": is_requirement_covered(req, env, social, gov, evidence)})

    breakdown = []
    for pillar in PILLARS:
        pillar_checks = [c for c in checks if c["pillar"] == pillar]
        total = len(pillar_checks)
        covered = sum(1 for c in pillar_checks if c["covered"])
        breakdown.append({
            "pillar": pillar,
            "covered": covered,
            "total": total,
            "missing": total - covered,
            "status": _pillar_status(covered, total),
            "requirements": [
                {
                    "id": c["id"],
                    "requirement": c["requirement"],
                    "covered": c["covered"],
                    "mandatory": c["mandatory"],
                    "category": c["category"],
                }
                for c in pillar_checks
            ],
        })

    total = len(checks)
    covered = sum(1 for c in checks if c["covered"])
    overall = round(covered / total * 100) if total else 0

    return {
        "overall_readiness": overall,
        "covered": covered,
        "total": total,
        "breakdown": breakdown,
        "next_steps": rank_next_steps(checks),
    }


def readiness(company_id, period):
    """Readiness for a company and period. Absent pillars count as empty."""
    from esg_readiness import store

    metrics = store.get_period_metrics(company_id, period)
    evidence = store.list_evidence(company_id)
    result = aggregate_readiness(
        metrics["Environmental"], metrics["Social"], metrics["Governance"], evidence,
    )
    logger.info(
        f"BRSR readiness for company {company_id} {period}: "
        f"{result['covered']}/{result['total']} ({result['overall_readiness']}%)"
    )
    return result
