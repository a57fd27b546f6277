"""
Metric field normalization.

Metric snapshots arrive from two schema generations (the first, flat
"legacy" fields and the later BRSR-tab fields), in camelCase from the web
forms or snake_case from imports. Everything is rewritten to one canonical
snake_case name here, once, before scoring / completeness / coverage see it.

Only true synonyms are merged. Fields that differ in unit or meaning
(waste in kg vs tonnes, carbon tons vs Scope 1, total vs permanent headcount)
stay separate and the analytic code decides how to combine them.
"""

import re

# canonical name -> aliases accepted for it (already snake_case)
FIELD_ALIASES = {
    "Environmental": {
        "electricity_kwh": ("electricity_usage_kwh",),
        "fuel_litres": ("fuel_consumption_litres",),
    },
    "Social": {
        "training_hours_per_employee": ("total_training_hours_per_employee", "avg_training_hours"),
        "accident_incidents": ("workplace_incidents",),
    },
    "Governance": {},
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def to_snake_case(key):
    """electricityUsageKwh -> electricity_usage_kwh; scope1Emissions -> scope1_emissions."""
    return _CAMEL_BOUNDARY.sub("_", str(key)).lower()


def _is_blank(value):
    return value is None or value == ""


def normalize_metrics(pillar, raw):
    """Return a new dict of canonical field -> value for one pillar's metrics.

    A canonical value already present is never overwritten by an alias; the
    first non-blank alias (in declared order) fills it otherwise. Unknown keys
    pass through under their snake_case name.
    """
    if raw is None:
        return None
    if pillar not in FIELD_ALIASES:
        raise ValueError(f"Unknown pillar: {pillar}")

    data = {}
    for key, value in raw.items():
        data[to_snake_case(key)] = value

    for canonical, aliases in FIELD_ALIASES[pillar].items():
        for alias in aliases:
            if alias not in data:
                continue
            alias_value = data.pop(alias)
            if _is_blank(data.get(canonical)) and not _is_blank(alias_value):
                data[canonical] = alias_value
    return data
