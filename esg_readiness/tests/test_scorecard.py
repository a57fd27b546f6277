"""Tests for the scorecard built over persisted scores."""
from esg_readiness.scorecard import build_scorecard
from esg_readiness.store import upsert_score


def _score(company_id, period, e, s, g):
    overall = round(e * 0.4 + s * 0.3 + g * 0.3, 1)
    upsert_score(company_id, period, {
        "environmental": e, "social": s, "governance": g, "overall": overall,
    })


class TestScorecard:
    def test_no_scores(self, company):
        result = build_scorecard(company.id)
        assert result == {
            "scorecard": None,
            "trends": [],
            "periods": [],
            "message": "No ESG scores calculated yet",
        }

    def test_latest_period_with_change(self, company):
        _score(company.id, "2025-Q4", 80.0, 50.0, 60.0)
        _score(company.id, "2026-Q1", 90.0, 60.0, 80.0)

        result = build_scorecard(company.id)
        card = result["scorecard"]
        assert card["period"] == "2026-Q1"
        assert card["previous_period"] == "2025-Q4"
        assert card["change"]["environmental"] == 10.0
        assert card["change"]["governance"] == 20.0
        assert card["scores"]["environmental"]["grade"] == "A+"
        assert card["scores"]["overall"]["score"] == 78.0
        assert card["risk_level"] == "Low"
        assert result["periods"] == ["2026-Q1", "2025-Q4"]

    def test_recalculation_overwrites_period(self, company):
        _score(company.id, "2026-Q1", 50.0, 50.0, 50.0)
        _score(company.id, "2026-Q1", 70.0, 50.0, 50.0)
        result = build_scorecard(company.id)
        assert result["periods"] == ["2026-Q1"]
        assert result["scorecard"]["scores"]["environmental"]["score"] == 70.0
        assert result["scorecard"]["change"] is None

    def test_trend_is_chronological_and_capped(self, company):
        periods = ["2024-Q3", "2024-Q4", "2025-Q1", "2025-Q2", "2025-Q3", "2025-Q4", "2026-Q1"]
        for i, period in enumerate(periods):
            _score(company.id, period, 50.0 + i, 50.0, 50.0)

        trends = build_scorecard(company.id)["trends"]
        assert [t["period"] for t in trends] == periods[1:]
        assert trends[0]["change"] is None
        assert trends[1]["change"]["environmental"] == 1.0

    def test_requested_period(self, company):
        _score(company.id, "2025-Q4", 40.0, 40.0, 40.0)
        _score(company.id, "2026-Q1", 90.0, 90.0, 90.0)
        card = build_scorecard(company.id, "2025-Q4")["scorecard"]
        assert card["period"] == "2025-Q4"
        assert card["previous_period"] is None
        assert card["risk_level"] == "High"

    def test_unknown_period(self, company):
        _score(company.id, "2026-Q1", 90.0, 90.0, 90.0)
        result = build_scorecard(company.id, "2020-Q1")
        assert result["scorecard"] is None
        assert result["periods"] == ["2026-Q1"]
