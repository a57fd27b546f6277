"""HTTP-level tests for the JSON blueprints."""
from datetime import timedelta

from esg_readiness.compliance import routes as compliance_routes
from esg_readiness.errors import ValidationError
from esg_readiness.models import Task, utcnow
from esg_readiness.task_service import sync_tasks
from esg_readiness.tests.sample_data import FULL_ENVIRONMENTAL, FULL_GOVERNANCE, FULL_SOCIAL

PERIOD = "2026-Q1"


def _post_metrics(client, company_id, pillar, data, period=PERIOD):
    return client.post(f"/esg/metrics/{company_id}/{pillar}", json={"period": period, "data": data})


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "ok"
        assert "tasks" in body["tables"]


class TestEsgRoutes:
    def test_save_metrics_normalizes(self, client, company):
        resp = _post_metrics(client, company.id, "Environmental", {"electricityUsageKwh": 45000})
        assert resp.status_code == 201
        assert resp.get_json()["data"] == {"electricity_kwh": 45000}

    def test_save_metrics_unknown_pillar(self, client, company):
        resp = _post_metrics(client, company.id, "Economic", {})
        assert resp.status_code == 400

    def test_save_metrics_requires_period(self, client, company):
        resp = client.post(f"/esg/metrics/{company.id}/Social", json={"data": {}})
        assert resp.status_code == 400

    def test_calculate_missing_pillars(self, client, company):
        _post_metrics(client, company.id, "Environmental", FULL_ENVIRONMENTAL)
        resp = client.post(f"/esg/calculate/{company.id}", json={"period": PERIOD})
        assert resp.status_code == 422
        body = resp.get_json()
        assert body["missing_pillars"] == ["Social", "Governance"]
        assert body["period"] == PERIOD

    def test_calculate_and_scorecard(self, client, company):
        _post_metrics(client, company.id, "Environmental", {"electricity_kwh": 45000})
        _post_metrics(client, company.id, "Social", {})
        _post_metrics(client, company.id, "Governance", {"board_members": 5, "independent_directors": 3})

        resp = client.post(f"/esg/calculate/{company.id}", json={"period": PERIOD})
        assert resp.status_code == 200
        score = resp.get_json()["score"]
        assert score["environmental_score"] == 92.0
        assert score["social_score"] == 75.0
        assert score["governance_score"] == 100.0
        assert score["overall_score"] == 89.3

        card = client.get(f"/esg/scorecard/{company.id}").get_json()
        assert card["scorecard"]["period"] == PERIOD
        assert card["scorecard"]["risk_level"] == "Low"

    def test_calculate_warns_on_missing_employee_count(self, client, make_company):
        company = make_company(employee_count=None)
        for pillar in ("Environmental", "Social", "Governance"):
            _post_metrics(client, company.id, pillar, {})
        resp = client.post(f"/esg/calculate/{company.id}", json={"period": PERIOD})
        assert resp.status_code == 200
        assert len(resp.get_json()["warnings"]) == 1

    def test_calculate_unknown_company(self, client):
        resp = client.post("/esg/calculate/999", json={"period": PERIOD})
        assert resp.status_code == 404

    def test_scorecard_empty(self, client, company):
        body = client.get(f"/esg/scorecard/{company.id}").get_json()
        assert body["scorecard"] is None
        assert body["message"] == "No ESG scores calculated yet"

    def test_completeness(self, client, company):
        _post_metrics(client, company.id, "Social", FULL_SOCIAL)
        body = client.get(f"/esg/completeness/{company.id}?period={PERIOD}").get_json()
        assert body["pillars"]["Social"]["has_data"] is True
        assert body["pillars"]["Governance"]["percentage"] == 0

    def test_add_evidence(self, client, company):
        resp = client.post(f"/esg/evidence/{company.id}", json={
            "evidence_type": "POSH Policy", "pillar": "Governance", "expiry_date": "2026-12-31",
        })
        assert resp.status_code == 201
        assert resp.get_json()["expiry_date"] == "2026-12-31T00:00:00"

    def test_add_evidence_bad_date(self, client, company):
        resp = client.post(f"/esg/evidence/{company.id}", json={
            "evidence_type": "POSH Policy", "pillar": "Governance", "expiry_date": "someday",
        })
        assert resp.status_code == 400


class TestComplianceRoutes:
    def test_readiness(self, client, company):
        _post_metrics(client, company.id, "Governance", FULL_GOVERNANCE)
        body = client.get(f"/compliance/readiness/{company.id}?period={PERIOD}").get_json()
        assert body["total"] == 21
        assert body["covered"] == 7
        assert body["overall_readiness"] == 33
        assert body["breakdown"][2]["status"] == "complete"
        assert body["message"] == (
            "You need significant work to achieve enterprise-level ESG compliance."
        )

    def test_readiness_unknown_company(self, client):
        assert client.get("/compliance/readiness/999").status_code == 404


class TestTaskRoutes:
    def test_dashboard_syncs_once(self, client, company):
        body = client.get(f"/tasks/dashboard/{company.id}?period={PERIOD}&user_id=5").get_json()
        assert body["sync"]["created"] == 9
        assert body["statistics"]["pending_tasks"] == 9

        again = client.get(f"/tasks/dashboard/{company.id}?period={PERIOD}").get_json()
        assert again["sync"]["created"] == 0
        assert again["statistics"]["pending_tasks"] == 9

    def test_manual_task_and_status(self, client, company):
        resp = client.post(f"/tasks/{company.id}", json={
            "title": "Collect electricity bills",
            "pillar": "Environmental",
            "due_date": "2030-01-15",
            "priority": "High",
        })
        assert resp.status_code == 201
        task_id = resp.get_json()["task"]["id"]

        resp = client.put(f"/tasks/{task_id}/status", json={"status": "Completed"})
        assert resp.status_code == 200
        assert resp.get_json()["task"]["completed_at"] is not None

        listed = client.get(f"/tasks/{company.id}?status=Completed").get_json()["tasks"]
        assert [t["id"] for t in listed] == [task_id]

    def test_manual_task_invalid(self, client, company):
        resp = client.post(f"/tasks/{company.id}", json={"title": "x", "pillar": "Social"})
        assert resp.status_code == 400

    def test_status_unknown_task(self, client, app):
        resp = client.put("/tasks/999/status", json={"status": "Completed"})
        assert resp.status_code == 404

    def test_status_invalid(self, client, company):
        resp = client.post(f"/tasks/{company.id}", json={
            "title": "Collect bills", "pillar": "Social", "due_date": "2030-01-15",
        })
        task_id = resp.get_json()["task"]["id"]
        assert client.put(f"/tasks/{task_id}/status", json={"status": "Done"}).status_code == 400

    def test_reopen_refused_when_sync_replaced_task(self, client, company):
        now = utcnow()
        later = now + timedelta(days=10)
        sync_tasks(company.id, 1, PERIOD, now=now)
        sync_tasks(company.id, 1, PERIOD, now=later)
        sync_tasks(company.id, 1, PERIOD, now=later)
        old = Task.query.filter_by(company_id=company.id, source_id="env-water",
                                   status="Overdue").first()

        resp = client.put(f"/tasks/{old.id}/status", json={"status": "In Progress"})
        assert resp.status_code == 400
        assert "env-water" in resp.get_json()["error"]

        listed = client.get(f"/tasks/{company.id}?status=Overdue").get_json()["tasks"]
        assert old.id in [t["id"] for t in listed]


class TestCollectionAndEvidenceRoutes:
    def test_collection_hub(self, client, company):
        _post_metrics(client, company.id, "Environmental", {})
        body = client.get(f"/esg/collection-hub/{company.id}").get_json()
        assert body["periods"][0]["period"] == PERIOD
        assert body["periods"][0]["completion_percentage"] == 33

    def test_collection_hub_unknown_company(self, client):
        assert client.get("/esg/collection-hub/999").status_code == 404

    def test_evidence_dashboard(self, client, company):
        client.post(f"/esg/evidence/{company.id}", json={
            "evidence_type": "Waste Disposal Certificate", "pillar": "Environmental",
        })
        body = client.get(f"/esg/evidence/{company.id}").get_json()
        assert body["statistics"]["total_documents"] == 1
        assert body["evidence_table"][0]["evidence_type"] == "Waste Disposal Certificate"


class TestErrorMapping:
    def test_validation_error_is_a_value_error(self):
        assert issubclass(ValidationError, ValueError)

    def test_internal_value_error_is_a_server_error(self, app, client, company, monkeypatch):
        def broken(company_id, period):
            raise ValueError("math domain error")

        monkeypatch.setattr(compliance_routes, "readiness", broken)
        app.config["PROPAGATE_EXCEPTIONS"] = False
        resp = client.get(f"/compliance/readiness/{company.id}")
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Server error"}
