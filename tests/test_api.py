"""
API 엔드포인트 테스트 (FastAPI TestClient)
"""
import pytest
from fastapi.testclient import TestClient

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from saju_core.main import app


@pytest.fixture(scope="module")
def client():
    return TestClient(app)


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_root(self, client):
        data = client.get("/").json()
        assert data["timezone"] == "Asia/Seoul"
        assert data["precise_range"] == [1950, 2050]


class TestCalculateEndpoint:
    """POST /api/v1/calculate"""

    def test_success(self, client):
        response = client.post(
            "/api/v1/calculate",
            json={"year": 2024, "month": 2, "day": 4, "hour": 18, "minute": 0}
        )
        assert response.status_code == 200
        data = response.json()

        assert data["success"] is True
        assert data["pillars"]["year"]["full"] == "甲辰"
        assert data["pillars"]["month"]["full"] == "丙寅"
        assert data["pillars"]["day"]["full"] == "戊戌"
        assert data["pillars"]["hour"]["full"] == "辛酉"
        assert data["pillars"]["year"]["full_kr"] == "갑진"

        analysis = data["analysis"]
        assert sum(analysis["balance"].values()) == 100
        assert analysis["day_master"] == "earth"
        assert analysis["yin_yang"] == {"yang": 75, "yin": 25}

        assert "戊土" in data["day_master_description"]
        assert data["day_master_label"] == "⛰️ 토(土)"
        assert data["quality"]["calculation_method"] == "lunar_python"
        assert data["quality"]["timezone"] == "Asia/Seoul"

    def test_minute_defaults_to_zero(self, client):
        response = client.post("/api/v1/calculate", json={"year": 1990, "month": 5, "day": 15, "hour": 23})
        assert response.status_code == 200
        data = response.json()
        assert data["input"]["minute"] == 0
        assert data["pillars"]["day"]["full"] == "庚辰"
        assert data["pillars"]["hour"]["branch"] == "子"

    def test_fallback_backend_reported(self, client):
        response = client.post("/api/v1/calculate", json={"year": 1920, "month": 8, "day": 8, "hour": 12})
        assert response.status_code == 200
        assert response.json()["quality"]["calculation_method"] == "ephem"

    @pytest.mark.parametrize("payload,field", [
        ({"year": 1800, "month": 1, "day": 1, "hour": 0}, "year"),
        ({"year": 2000, "month": 13, "day": 1, "hour": 0}, "month"),
        ({"year": 2000, "month": 1, "day": 1, "hour": 25}, "hour"),
        ({"year": 2000, "month": 1, "day": 1, "hour": 0, "minute": 60}, "minute"),
    ])
    def test_invalid_input(self, client, payload, field):
        response = client.post("/api/v1/calculate", json=payload)
        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["error_code"] == "INVALID_INPUT"
        assert field in detail["message"]

    def test_impossible_date(self, client):
        """2월 30일 → 백엔드 실패 (500)"""
        response = client.post("/api/v1/calculate", json={"year": 2023, "month": 2, "day": 30, "hour": 12})
        assert response.status_code == 500
        assert response.json()["detail"]["error_code"] == "CALCULATION_ERROR"

    def test_missing_field(self, client):
        response = client.post("/api/v1/calculate", json={"year": 2000, "month": 1})
        assert response.status_code == 422


class TestCompatibilityEndpoint:
    """POST /api/v1/compatibility"""

    def test_success(self, client):
        response = client.post(
            "/api/v1/compatibility",
            json={
                "me": {"year": 1990, "month": 5, "day": 15, "hour": 12},
                "partner": {"year": 1992, "month": 8, "day": 20, "hour": 12},
            }
        )
        assert response.status_code == 200
        data = response.json()
        assert 0 <= data["score"] <= 100
        assert data["relationship"]
        assert data["description"]

    def test_symmetric(self, client):
        me = {"year": 1985, "month": 3, "day": 10, "hour": 8}
        partner = {"year": 1988, "month": 10, "day": 2, "hour": 20}
        ab = client.post("/api/v1/compatibility", json={"me": me, "partner": partner}).json()
        ba = client.post("/api/v1/compatibility", json={"me": partner, "partner": me}).json()
        assert ab["score"] == ba["score"]
        assert ab["my_element"] == ba["partner_element"]

    def test_invalid_partner(self, client):
        response = client.post(
            "/api/v1/compatibility",
            json={
                "me": {"year": 1990, "month": 5, "day": 15, "hour": 12},
                "partner": {"year": 1990, "month": 5, "day": 15, "hour": 24},
            }
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "INVALID_INPUT"


class TestHourOptions:
    """GET /api/v1/calculate/hour-options"""

    def test_twelve_options(self, client):
        response = client.get("/api/v1/calculate/hour-options")
        assert response.status_code == 200
        options = response.json()
        assert len(options) == 12
        assert options[0]["ji_hanja"] == "子"
        assert options[0]["range_start"] == "23:00"
        assert [o["index"] for o in options] == list(range(12))
