"""Metric snapshots and evidence shared across tests."""

# Snapshots that cover all 21 BRSR requirements (evidence adds E7)
FULL_ENVIRONMENTAL = {
    "electricity_kwh": 30000,
    "fuel_litres": 1200,
    "water_usage_kl": 200,
    "total_waste_tonnes": 4,
    "scope1_emissions": 50,
    "scope2_emissions": 30,
    "renewable_energy_percent": 20,
    "total_energy_consumption": 40000,
    "environmental_policy_exists": True,
}

FULL_SOCIAL = {
    "total_employees_permanent": 120,
    "total_employees_contractual": 30,
    "female_percent_workforce": 32,
    "accident_incidents": 0,
    "training_hours_per_employee": 20,
    "csr_spend": 50000,
    "health_safety_policies": True,
}

FULL_GOVERNANCE = {
    "board_members": 6,
    "independent_directors": 3,
    "compliance_violations": 0,
    "anti_corruption_policy": True,
    "whistleblower_policy_exists": True,
    "code_of_conduct_exists": True,
    "esg_committee_exists": True,
}

WASTE_EVIDENCE = [{"id": 1, "evidence_type": "Waste Disposal Certificate",
                   "pillar": "Environmental", "expiry_date": None}]
