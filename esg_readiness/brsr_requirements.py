"""
BRSR Requirement Catalog

Based on SEBI's Business Responsibility and Sustainability Reporting (BRSR)
format, trimmed to the disclosures an SME supplier is asked for.

Each requirement has:
- id: Unique identifier (E*, S*, G*)
- pillar: Environmental, Social or Governance
- requirement: What has to be disclosed
- mandatory: True when BRSR requires it outright
- category:
  - "mandatory" = required in the BRSR core
  - "client-driven" = routinely requested by large buyers in supplier audits
  - "future-ready" = expected in upcoming BRSR Core / assurance rounds
- action: The next-step text shown when the requirement is not covered

The catalog is immutable configuration; order matters (ties in the next-step
ranking keep catalog order).
"""

CATEGORY_ORDER = {"mandatory": 0, "client-driven": 1, "future-ready": 2}

BRSR_REQUIREMENTS = [
    # =========================================================================
    # ENVIRONMENTAL
    # =========================================================================
    {"id": "E1", "pillar": "Environmental", "requirement": "Energy consumption data",
     "mandatory": True, "category": "mandatory",
     "action": "Add electricity consumption data"},
    {"id": "E2", "pillar": "Environmental", "requirement": "Water consumption data",
     "mandatory": True, "category": "mandatory",
     "action": "Add water consumption data"},
    {"id": "E3", "pillar": "Environmental", "requirement": "Waste management data",
     "mandatory": True, "category": "mandatory",
     "action": "Add waste management data"},
    {"id": "E4", "pillar": "Environmental", "requirement": "Air emissions data",
     "mandatory": True, "category": "mandatory",
     "action": "Add air emissions data"},
    {"id": "E5", "pillar": "Environmental", "requirement": "Renewable energy usage",
     "mandatory": False, "category": "client-driven",
     "action": "Add renewable energy usage percentage"},
    {"id": "E6", "pillar": "Environmental", "requirement": "Environmental policy document",
     "mandatory": False, "category": "client-driven",
     "action": "Upload environmental policy document"},
    {"id": "E7", "pillar": "Environmental", "requirement": "Waste disposal proof",
     "mandatory": False, "category": "client-driven",
     "action": "Upload waste disposal proof"},
    {"id": "E8", "pillar": "Environmental", "requirement": "Carbon footprint calculation",
     "mandatory": False, "category": "future-ready",
     "action": "Calculate and add carbon footprint"},

    # =========================================================================
    # SOCIAL
    # =========================================================================
    {"id": "S1", "pillar": "Social", "requirement": "Total employee count",
     "mandatory": True, "category": "mandatory",
     "action": "Add total employee count"},
    {"id": "S2", "pillar": "Social", "requirement": "Gender diversity data",
     "mandatory": True, "category": "mandatory",
     "action": "Add gender diversity data"},
    {"id": "S3", "pillar": "Social", "requirement": "Training hours data",
     "mandatory": True, "category": "mandatory",
     "action": "Add training hours data"},
    {"id": "S4", "pillar": "Social", "requirement": "Safety incident data",
     "mandatory": True, "category": "mandatory",
     "action": "Add safety incident data"},
    {"id": "S5", "pillar": "Social", "requirement": "CSR spend data",
     "mandatory": False, "category": "client-driven",
     "action": "Add CSR spend data"},
    {"id": "S6", "pillar": "Social", "requirement": "Employee welfare policies",
     "mandatory": False, "category": "client-driven",
     "action": "Add employee welfare policies"},

    # =========================================================================
    # GOVERNANCE
    # =========================================================================
    {"id": "G1", "pillar": "Governance", "requirement": "Board composition data",
     "mandatory": True, "category": "mandatory",
     "action": "Add board composition details"},
    {"id": "G2", "pillar": "Governance", "requirement": "Independent directors data",
     "mandatory": True, "category": "mandatory",
     "action": "Add independent directors count"},
    {"id": "G3", "pillar": "Governance", "requirement": "Compliance violations data",
     "mandatory": True, "category": "mandatory",
     "action": "Add compliance violations data"},
    {"id": "G4", "pillar": "Governance", "requirement": "Anti-corruption policy",
     "mandatory": False, "category": "client-driven",
     "action": "Upload anti-corruption policy"},
    {"id": "G5", "pillar": "Governance", "requirement": "POSH policy",
     "mandatory": False, "category": "client-driven",
     "action": "Upload POSH policy"},
    {"id": "G6", "pillar": "Governance", "requirement": "Code of conduct",
     "mandatory": False, "category": "client-driven",
     "action": "Upload code of conduct"},
    {"id": "G7", "pillar": "Governance", "requirement": "ESG committee structure",
     "mandatory": False, "category": "future-ready",
     "action": "Add ESG committee structure"},
]


def get_requirements_by_pillar():
    """Group BRSR requirements by pillar, preserving catalog order."""
    pillars = {}
    for r in BRSR_REQUIREMENTS:
        pillars.setdefault(r["pillar"], []).append(r)
    return pillars


def get_requirement_by_id(requirement_id):
    """Look up a single requirement by ID."""
    for r in BRSR_REQUIREMENTS:
        if r["id"] == requirement_id:
            return r
    return None


def action_for(requirement):
    """Next-step text for an uncovered requirement."""
    return requirement.get("action") or f"Complete {requirement['requirement']}"
