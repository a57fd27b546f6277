"""Tests for metric field normalization."""
import pytest

from esg_readiness.normalize import normalize_metrics, to_snake_case


class TestSnakeCase:
    @pytest.mark.parametrize("raw,expected", [
        ("electricityUsageKwh", "electricity_usage_kwh"),
        ("scope1Emissions", "scope1_emissions"),
        ("female_percent_workforce", "female_percent_workforce"),
        ("csrSpend", "csr_spend"),
    ])
    def test_conversion(self, raw, expected):
        assert to_snake_case(raw) == expected


class TestNormalizeMetrics:
    def test_alias_maps_to_canonical(self):
        data = normalize_metrics("Environmental", {"electricityUsageKwh": 1000})
        assert data == {"electricity_kwh": 1000}

    def test_canonical_value_wins_over_alias(self):
        data = normalize_metrics("Environmental", {
            "electricity_kwh": 500, "electricity_usage_kwh": 900,
        })
        assert data == {"electricity_kwh": 500}

    def test_blank_canonical_filled_by_alias(self):
        data = normalize_metrics("Social", {"training_hours_per_employee": "", "avgTrainingHours": 12})
        assert data["training_hours_per_employee"] == 12
        assert "avg_training_hours" not in data

    def test_unit_distinct_fields_stay_separate(self):
        data = normalize_metrics("Environmental", {
            "wasteGeneratedKg": 2000, "totalWasteTonnes": 2,
        })
        assert data == {"waste_generated_kg": 2000, "total_waste_tonnes": 2}

    def test_social_incident_alias(self):
        assert normalize_metrics("Social", {"workplaceIncidents": 0}) == {"accident_incidents": 0}

    def test_none_passes_through(self):
        assert normalize_metrics("Governance", None) is None

    def test_unknown_pillar(self):
        with pytest.raises(ValueError):
            normalize_metrics("Economic", {})

    def test_input_not_mutated(self):
        raw = {"electricityUsageKwh": 1}
        normalize_metrics("Environmental", raw)
        assert raw == {"electricityUsageKwh": 1}
