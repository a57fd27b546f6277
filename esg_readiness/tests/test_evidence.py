"""Tests for the evidence dashboard."""
from datetime import timedelta

from esg_readiness.evidence import evidence_dashboard
from esg_readiness.store import add_evidence


class TestEvidenceDashboard:
    def test_empty(self, company, now):
        result = evidence_dashboard(company.id, now=now)
        assert result == {
            "statistics": {"total_documents": 0, "expiring_soon": 0, "expired": 0},
            "evidence_table": [],
        }

    def test_expiry_counts(self, company, now):
        add_evidence(company.id, "Pollution Certificate", "Environmental",
                     expiry_date=now + timedelta(days=10))
        add_evidence(company.id, "Fire NOC", "Social", expiry_date=now + timedelta(days=40))
        add_evidence(company.id, "Old Licence", "Governance", expiry_date=now - timedelta(days=1))
        add_evidence(company.id, "POSH Policy", "Governance", file_name="posh.pdf")

        result = evidence_dashboard(company.id, now=now)
        assert result["statistics"] == {"total_documents": 4, "expiring_soon": 1, "expired": 1}
        assert [row["evidence_type"] for row in result["evidence_table"]] == [
            "Pollution Certificate", "Fire NOC", "Old Licence", "POSH Policy",
        ]
        assert result["evidence_table"][0]["file_name"] == "-"
        assert result["evidence_table"][3]["file_name"] == "posh.pdf"
        assert result["evidence_table"][3]["expiry_date"] is None

    def test_window_bounds(self, company, now):
        add_evidence(company.id, "Expires today", "Environmental", expiry_date=now)
        add_evidence(company.id, "Window edge", "Environmental",
                     expiry_date=now + timedelta(days=30))

        stats = evidence_dashboard(company.id, now=now)["statistics"]
        assert stats["expiring_soon"] == 1
        assert stats["expired"] == 1

    def test_custom_window(self, company, now):
        add_evidence(company.id, "Fire NOC", "Social", expiry_date=now + timedelta(days=40))
        assert evidence_dashboard(company.id, now=now, window_days=60)["statistics"]["expiring_soon"] == 1
