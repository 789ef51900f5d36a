"""API tests for report configurations, publication and published reports."""

import pytest
from sqlalchemy import select

from report_engine.models import AuditAction, AuditLog, SchoolStatus


def school_headers(school) -> dict[str, str]:
    return {"X-School-Id": str(school.id)}


@pytest.fixture
def published_setup(db, seed, school_setup):
    school, grading_scale, exam, config = school_setup
    alice = seed.student(school, "Alice", "Akello", guardian_phone="+256700000001")
    bob = seed.student(school, "Bob", "Byaruhanga")
    seed.marks(exam, alice, {"ENG": 85, "MTC": 85, "BIO": 85, "CHE": 85})
    seed.marks(exam, bob, {"ENG": 60, "MTC": 60, "BIO": 60, "CHE": 60})
    db.commit()
    return school, grading_scale, config, alice, bob


class TestSchoolScope:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Request-ID" in response.headers

    def test_missing_school_header(self, client, published_setup):
        _, _, config, _, _ = published_setup
        response = client.get(f"/api/v1/reports/configs/{config.id}")

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "VALIDATION_ERROR"

    def test_unknown_school(self, client, published_setup):
        _, _, config, _, _ = published_setup
        response = client.get(f"/api/v1/reports/configs/{config.id}", headers={"X-School-Id": "9999"})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_config_of_another_school_is_hidden(self, client, db, seed, published_setup):
        _, _, config, _, _ = published_setup
        other = seed.school()
        db.commit()

        response = client.get(f"/api/v1/reports/configs/{config.id}", headers=school_headers(other))
        assert response.status_code == 404

    def test_suspended_school_cannot_publish(self, client, db, published_setup):
        school, _, config, _, _ = published_setup
        school.status = SchoolStatus.SUSPENDED
        db.commit()

        response = client.post(f"/api/v1/reports/configs/{config.id}/publish", headers=school_headers(school))
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "SCHOOL_SUSPENDED"

        # Reads stay available
        response = client.get(f"/api/v1/reports/configs/{config.id}", headers=school_headers(school))
        assert response.status_code == 200


class TestReportConfigurationApi:
    def test_get_configuration(self, client, published_setup):
        school, grading_scale, config, _, _ = published_setup
        response = client.get(f"/api/v1/reports/configs/{config.id}", headers=school_headers(school))

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == config.name
        assert body["grading_scale_id"] == grading_scale.id
        assert len(body["sources"]) == 1
        assert float(body["sources"][0]["weight"]) == 100

    def test_get_grading_scale(self, client, published_setup):
        school, grading_scale, _, _, _ = published_setup
        response = client.get(f"/api/v1/grading-scales/{grading_scale.id}", headers=school_headers(school))

        assert response.status_code == 200
        body = response.json()
        assert body["fail_value"] == 9
        assert [g["name"] for g in body["grades"]][:2] == ["D1", "D2"]
        assert body["divisions"][0] == {"name": "Division 1", "min_aggregate": 4, "max_aggregate": 12}


class TestPublishApi:
    def test_publish_and_read_back(self, client, published_setup):
        school, _, config, alice, bob = published_setup
        headers = school_headers(school)

        response = client.post(f"/api/v1/reports/configs/{config.id}/publish", headers=headers)
        assert response.status_code == 200
        summary = response.json()
        assert summary["reports_generated"] == 2
        assert summary["notifications_sent"] == 0
        assert {o["status"] for o in summary["outcomes"]} == {"skipped"}

        response = client.get(
            f"/api/v1/reports/published/{alice.registration_number}",
            params={"config_id": config.id},
            headers=headers,
        )
        assert response.status_code == 200
        report = response.json()
        assert report["student_name"] == "Alice Akello"
        assert report["aggregate"] == 4
        assert report["division"] == {"kind": "classified", "name": "Division 1"}
        assert report["position"] == 1
        assert report["scores"]["ENG"] == {"final_score": 85, "grade": "D1", "value": 1}
        assert "ART" not in report["scores"]

    def test_list_published(self, client, published_setup):
        school, _, config, _, _ = published_setup
        headers = school_headers(school)
        client.post(f"/api/v1/reports/configs/{config.id}/publish", headers=headers)

        response = client.get(f"/api/v1/reports/configs/{config.id}/published", headers=headers)
        assert response.status_code == 200
        reports = response.json()
        assert [r["student_name"] for r in reports] == ["Alice Akello", "Bob Byaruhanga"]
        assert [r["position"] for r in reports] == [1, 2]

    def test_publish_with_class_filter(self, client, published_setup):
        school, _, config, _, _ = published_setup
        response = client.post(
            f"/api/v1/reports/configs/{config.id}/publish",
            json={"class_name": "S6", "notify": False},
            headers=school_headers(school),
        )
        assert response.status_code == 200
        assert response.json()["reports_generated"] == 0

    def test_publish_writes_audit_log(self, client, db, published_setup):
        school, _, config, _, _ = published_setup
        client.post(f"/api/v1/reports/configs/{config.id}/publish", headers=school_headers(school))

        log = db.execute(select(AuditLog)).scalar_one()
        assert log.action == AuditAction.REPORTS_PUBLISHED
        assert log.school_id == school.id

    def test_publish_unknown_configuration(self, client, published_setup):
        school, _, _, _, _ = published_setup
        response = client.post("/api/v1/reports/configs/9999/publish", headers=school_headers(school))
        assert response.status_code == 404

    def test_unpublished_report(self, client, published_setup):
        school, _, config, alice, _ = published_setup
        response = client.get(
            f"/api/v1/reports/published/{alice.registration_number}",
            params={"config_id": config.id},
            headers=school_headers(school),
        )
        assert response.status_code == 404
