from astrocore.main import app


def client():
    app.testing = True
    return app.test_client()


positions = {
    "Sun": 15.0, "Moon": 45.0, "Mercury": 75.0, "Venus": 105.0,
    "Mars": 195.0, "Jupiter": 255.0, "Saturn": 315.0, "Rahu": 130.0,
}

sample_chart = {"ascendant": 5.0, "positions": positions}

sample_birth = {"date": "1992-11-04", "time": "05:25", "tz": "Asia/Kolkata"}


def test_health():
    c = client()
    rv = c.get("/api/health")
    assert rv.status_code == 200
    data = rv.get_json()
    assert data["status"] == "ok"
    assert data["ok"] is True


def test_root_and_config():
    c = client()
    assert c.get("/").get_json()["service"] == "astrocore"
    data = c.get("/api/config").get_json()
    assert data["zodiac"] == "tropical"
    assert data["analysis"]["max_workers"] == 1


def test_chart():
    c = client()
    rv = c.post("/api/chart", json={"chart": sample_chart})
    assert rv.status_code == 200
    chart = rv.get_json()["chart"]
    assert chart["positions"]["Ketu"]["longitude"] == 310.0
    assert chart["positions"]["Mars"]["house"] == 7
    assert chart["house_system"] == "whole_sign"


def test_chart_with_birth_and_sidereal():
    c = client()
    payload = dict(sample_chart, birth=sample_birth, zodiac="sidereal")
    rv = c.post("/api/chart", json=payload)
    assert rv.status_code == 200
    chart = rv.get_json()["chart"]
    assert chart["zodiac"] == "sidereal"
    assert 23.0 < chart["ayanamsa"] < 25.0


def test_patterns():
    c = client()
    rv = c.post("/api/patterns", json={"chart": sample_chart, "max_workers": 3})
    assert rv.status_code == 200
    data = rv.get_json()
    assert [d["key"] for d in data["doshas"]] == ["kalasarpa", "pitru", "guru_chandal", "sarp", "manglik"]
    assert "manglik" in data["summary"]["present"]
    assert "sarp" in data["summary"]["present"]
    assert data["summary"]["errors"] == []
    assert data["summary"]["overall_level"] in ("Mild", "Moderate", "Severe", "Critical")
    assert list(data["remedies"]) == ["ritual", "gemstone", "mantra", "spiritual", "charitable", "lifestyle"]


def test_patterns_rejects_bad_worker_count():
    c = client()
    rv = c.post("/api/patterns", json={"chart": sample_chart, "max_workers": 0})
    assert rv.status_code == 422
    assert rv.get_json()["details"][0]["loc"] == ["max_workers"]


def test_stem_branch():
    c = client()
    rv = c.post("/api/stem-branch", json={"year": 1984, "month": 3, "day": 1, "hour": 0})
    assert rv.status_code == 200
    data = rv.get_json()
    assert data["pillars"]["year"]["stem"] == "Jia"
    assert data["pillars"]["year"]["animal"] == "Rat"
    assert data["pillars"]["day"]["index"] == 30
    assert len(data["pillars"]["summary"].split()) == 4

    rv = c.post("/api/stem-branch", json={"year": 1984.0, "month": 3, "day": 1, "hour": 0})
    assert rv.status_code == 200
    assert rv.get_json()["pillars"]["year"]["stem"] == "Jia"


def test_cartography_lines():
    c = client()
    rv = c.post("/api/cartography/lines", json={"positions": positions, "bodies": ["Jupiter"], "include_parallels": True})
    assert rv.status_code == 200
    data = rv.get_json()
    assert data["count"] == 9
    assert all(l["planet"] == "Jupiter" for l in data["lines"])
    assert all("description" in l for l in data["lines"])
    assert data["lines"][0]["meaning"] == "Expansion, luck, wisdom, spirituality, and travel"


def test_cartography_score_single():
    c = client()
    rv = c.post("/api/cartography/score", json={
        "positions": positions, "latitude": 28.61, "longitude": 77.21, "purpose": "career",
    })
    assert rv.status_code == 200
    data = rv.get_json()
    assert 0.0 <= data["overall_score"] <= 100.0
    assert data["purpose"] == "career"
    assert data["recommendations"][0]["type"] in ("excellent", "good", "moderate", "challenging")


def test_cartography_score_ranked():
    c = client()
    rv = c.post("/api/cartography/score", json={
        "chart": sample_chart,
        "locations": [
            {"latitude": 28.61, "longitude": 77.21},
            {"latitude": 51.5, "longitude": -0.12},
            {"latitude": 40.71, "longitude": -74.0},
        ],
    })
    assert rv.status_code == 200
    data = rv.get_json()
    assert data["count"] == 3
    scores = [r["overall_score"] for r in data["ranked"]]
    assert scores == sorted(scores, reverse=True)


def test_validation_errors_are_422():
    c = client()
    rv = c.post("/api/chart", json={"positions": {"Sun": 10.0}, "ascendant": 0.0})
    assert rv.status_code == 422
    data = rv.get_json()
    assert data["error"] == "validation_error"
    assert data["details"][0]["loc"] == ["positions", "Moon"]

    rv = c.post("/api/cartography/score", json={"positions": positions, "latitude": 95, "longitude": 0})
    assert rv.status_code == 422


def test_non_object_body_is_400():
    c = client()
    rv = c.post("/api/chart", json=[1, 2, 3])
    assert rv.status_code == 400
    assert rv.get_json()["error"] == "http_error"


def test_metrics():
    c = client()
    c.get("/api/health")
    rv = c.get("/metrics")
    assert rv.status_code == 200
    assert b"astro_api_requests_total" in rv.data
