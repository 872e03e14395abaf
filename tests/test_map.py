from types import SimpleNamespace

import pytest

import config
import geo

NYC = (40.7128, -74.0060)
LA = (34.0522, -118.2437)


def pin(lat, lng, category="accident", severity="low", id="r"):
    return SimpleNamespace(id=id, latitude=lat, longitude=lng, category=category, severity=severity)


def test_haversine_new_york_to_los_angeles():
    assert geo.calculate_distance(*NYC, *LA) == pytest.approx(3936, abs=5)


def test_haversine_same_point_is_zero():
    assert geo.calculate_distance(*NYC, *NYC) == 0


def test_format_distance():
    assert geo.format_distance(0.35) == "350m"
    assert geo.format_distance(2.44) == "2.4km"


def test_valid_coordinates():
    assert geo.has_valid_coordinates(pin(*NYC))
    assert not geo.has_valid_coordinates(pin(None, 10))
    assert not geo.has_valid_coordinates(pin(float("nan"), 10))
    assert not geo.has_valid_coordinates(pin(91, 10))
    assert not geo.has_valid_coordinates(pin(10, -181))


def test_reports_center():
    assert geo.reports_center([]) == config.DEFAULT_MAP_CENTER
    assert geo.reports_center([pin(10, 20), pin(20, 40)]) == (15, 30)
    assert geo.reports_center([pin(10, 20)], user_location=(1, 2)) == (1, 2)


def test_cluster_reports_groups_nearby_pins():
    pins = [
        pin(40.71, -74.00, category="accident", severity="low", id="a"),
        pin(40.73, -73.99, category="accident", severity="critical", id="b"),
        pin(40.75, -73.98, category="weather", severity="medium", id="c"),
        pin(*LA, id="d"),
        pin(None, None, id="e"),
    ]
    clusters = geo.cluster_reports(pins, zoom=5)
    assert [c["count"] for c in clusters] == [3, 1]

    nyc = clusters[0]
    assert nyc["dominant_category"] == "accident"
    assert nyc["severity"] == "critical"
    assert sorted(nyc["report_ids"]) == ["a", "b", "c"]
    assert nyc["lat"] == pytest.approx(40.73)


def test_cluster_reports_splits_at_high_zoom():
    pins = [pin(40.71, -74.00, id="a"), pin(40.75, -73.90, id="b")]
    assert len(geo.cluster_reports(pins, zoom=18)) == 2


def test_map_returns_active_reports_with_coordinates(client, make_report):
    make_report(title="NYC", latitude=NYC[0], longitude=NYC[1])
    make_report(title="LA", latitude=LA[0], longitude=LA[1])
    make_report(title="Nowhere", latitude=None, longitude=None)
    make_report(title="Fixed", status="resolved")

    resp = client.get("/reports/map")
    assert resp.status_code == 200
    body = resp.json()
    assert sorted(r["title"] for r in body["reports"]) == ["LA", "NYC"]
    assert body["zoom"] == 12
    assert body["center"] == pytest.approx([(NYC[0] + LA[0]) / 2, (NYC[1] + LA[1]) / 2])
    assert all(r["distance"] is None for r in body["reports"])
    assert body["reports"][0]["maps_url"].startswith("https://www.google.com/maps?q=")


def test_map_adds_distances_for_user_location(client, make_report):
    make_report(title="LA", latitude=LA[0], longitude=LA[1])
    make_report(title="NYC", latitude=40.7158, longitude=-74.0060)

    resp = client.get("/reports/map", params={"lat": NYC[0], "lng": NYC[1], "sort": "distance"})
    body = resp.json()
    assert [r["title"] for r in body["reports"]] == ["NYC", "LA"]
    assert body["reports"][0]["distance"] == "334m"
    assert body["reports"][1]["distance"].endswith("km")
    assert body["center"] == list(NYC)
    assert body["zoom"] == 15


def test_map_filters(client, make_report):
    make_report(title="Crash", category="accident", severity="high", reporter_name="Alex")
    make_report(title="Fog", category="weather", severity="low")

    resp = client.get("/reports/map", params={"categories": "weather"})
    assert [r["title"] for r in resp.json()["reports"]] == ["Fog"]

    resp = client.get("/reports/map", params={"severities": "high"})
    assert [r["title"] for r in resp.json()["reports"]] == ["Crash"]

    resp = client.get("/reports/map", params={"search": "alex"})
    assert [r["title"] for r in resp.json()["reports"]] == ["Crash"]


def test_map_requires_both_coordinates(client):
    assert client.get("/reports/map", params={"lat": 10}).status_code == 400
    assert client.get("/reports/map", params={"sort": "distance"}).status_code == 400


def test_map_clusters_endpoint(client, make_report):
    make_report(latitude=40.71, longitude=-74.00, severity="low")
    make_report(latitude=40.72, longitude=-74.01, severity="high")
    make_report(latitude=LA[0], longitude=LA[1])
    make_report(latitude=None, longitude=None)

    resp = client.get("/reports/map/clusters", params={"zoom": 6})
    assert resp.status_code == 200
    clusters = resp.json()
    assert [c["count"] for c in clusters] == [2, 1]
    assert clusters[0]["severity"] == "high"
