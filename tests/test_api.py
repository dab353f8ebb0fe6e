import json

from tourguide.errors import DelegateError


def create(client, delegate, payload, answer):
    delegate.responses.append(answer)
    return client.post("/tours", json=payload)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_create_and_read_tour(client, delegate, make_config_payload, sample_tour_json):
    resp = create(client, delegate, make_config_payload(), sample_tour_json)

    assert resp.status_code == 201
    body = resp.json()
    assert body["title"] == "Issyk-Kul Nomad Trail"
    assert body["destination"] == "issyk_kul"
    assert body["total_participants"] == 6
    assert body["budget_breakdown"]["meals"] == 0
    assert body["id"]
    assert body["created_at"]

    assert client.get(f"/tours/{body['id']}").json() == body
    assert [t["id"] for t in client.get("/tours").json()] == [body["id"]]


def test_create_rejects_infeasible_configuration(client, delegate, make_config_payload):
    payload = make_config_payload(vehicles=[{"type": "sedan", "occupants": 5, "capacity": 4}])

    resp = client.post("/tours", json=payload)

    assert resp.status_code == 400
    assert resp.json()["field"] == "vehicles[0].occupants"
    assert delegate.calls == []


def test_create_rejects_empty_fleet(client, make_config_payload):
    resp = client.post("/tours", json=make_config_payload(vehicles=[]))

    assert resp.status_code == 400
    assert resp.json()["field"] == "vehicles"


def test_create_rejects_out_of_range_values(client, make_config_payload):
    assert client.post("/tours", json=make_config_payload(budget=50)).status_code == 422
    assert client.post("/tours", json=make_config_payload(duration=45)).status_code == 422


def test_create_reports_model_failure(client, delegate, make_config_payload):
    delegate.error = DelegateError("Hugging Face is down")

    resp = client.post("/tours", json=make_config_payload())

    assert resp.status_code == 502
    assert "Hugging Face is down" in resp.json()["error"]


def test_unknown_tour_is_404(client):
    assert client.get("/tours/missing").status_code == 404
    assert client.put("/tours/missing", json={"budget": 500}).status_code == 404
    assert client.delete("/tours/missing").status_code == 404
    assert client.get("/tours/analytics/missing").status_code == 404
    assert client.get("/tours/missing/summary").status_code == 404


def test_update_and_delete(client, delegate, make_config_payload, sample_tour_json):
    tour = create(client, delegate, make_config_payload(), sample_tour_json).json()

    resp = client.put(f"/tours/{tour['id']}", json={"budget": 6000})
    assert resp.status_code == 200
    assert resp.json()["total_budget"] == 6000
    assert resp.json()["created_at"] == tour["created_at"]

    resp = client.delete(f"/tours/{tour['id']}")
    assert resp.json() == {"message": "Tour deleted successfully"}
    assert client.get("/tours").json() == []


def test_analytics(client, delegate, make_config_payload, sample_tour_json):
    payload = make_config_payload(budget=1000, vehicles=[{"type": "minivan", "occupants": 2, "capacity": 8}])
    tour = create(client, delegate, payload, sample_tour_json).json()

    body = client.get(f"/tours/analytics/{tour['id']}").json()

    assert body["cost_analysis"]["cost_per_person"] == 500
    assert body["cost_analysis"]["cost_per_day"] == 200
    assert body["time_analysis"]["average_stop_duration"] == 2.5
    assert body["time_analysis"]["travel_time"] == 1.0
    assert body["efficiency_metrics"]["locations_per_day"] == 0.4
    assert body["efficiency_metrics"]["budget_efficiency"] == 10
    assert body["efficiency_metrics"]["time_efficiency"] == 1
    assert body["efficiency_metrics"]["vehicle_utilization"] == 25
    assert body["suggestions"] == [
        "Add more activities to make better use of your time",
        "Consider consolidating to fewer vehicles to reduce costs",
    ]
    assert body["not_computable"] == []


def test_analytics_of_fallback_tour(client, delegate, make_config_payload):
    tour = create(client, delegate, make_config_payload(), "Plain text itinerary").json()

    body = client.get(f"/tours/analytics/{tour['id']}").json()

    assert body["cost_analysis"]["cost_per_day"] is None
    assert "cost_per_day" in body["not_computable"]
    assert body["cost_analysis"]["cost_per_person"] == 500


def test_vehicle_assignments_fallback(client, delegate):
    payload = {
        "participants": [{"name": n} for n in ["Aigul", "Bakyt", "Chinara", "Daniyar", "Elnura"]],
        "vehicles": [{"type": "sedan", "capacity": 2}, {"type": "suv_4wd", "capacity": 3}],
    }
    delegate.responses.append("I would put the tall people in the SUV.")

    body = client.post("/tours/vehicle-assignments", json=payload).json()

    assert body["source"] == "fallback"
    assert [(a["vehicle_index"], a["seat_number"]) for a in body["assignments"]] == [
        (0, 1), (0, 2), (1, 1), (1, 2), (1, 3)
    ]


def test_vehicle_assignments_strict_overflow(client):
    payload = {
        "participants": [{"name": "A"}, {"name": "B"}, {"name": "C"}],
        "vehicles": [{"type": "sedan", "capacity": 2}],
        "strict": True,
    }
    resp = client.post("/tours/vehicle-assignments", json=payload)

    assert resp.status_code == 409


def test_optimize(client, delegate, make_config_payload, sample_tour_json):
    tour = create(client, delegate, make_config_payload(), sample_tour_json).json()
    delegate.responses.append(json.dumps({"suggestions": "Leave earlier"}))

    resp = client.post("/tours/optimize", json={"tour_id": tour["id"]})

    assert resp.json() == {"suggestions": "Leave earlier", "alternative_routes": []}


def test_location_info(client, delegate):
    delegate.responses.append("Cholpon-Ata has petroglyphs.")
    assert client.get("/tours/location/Cholpon-Ata").json() == {"info": "Cholpon-Ata has petroglyphs."}


def test_location_info_model_down(client, delegate):
    delegate.error = DelegateError("timeout")
    assert client.get("/tours/location/Cholpon-Ata").status_code == 502


def test_recommendations(client, delegate):
    delegate.responses.append("Try kumys.")
    payload = {"budget": "low", "interests": ["food"], "travel_style": "backpacking", "duration": 3, "group_size": 1}

    assert client.post("/tours/recommendations", json=payload).json() == {"recommendations": "Try kumys."}


def test_summary_weather_and_alternatives(client, delegate, make_config_payload, sample_tour_json):
    tour = create(client, delegate, make_config_payload(), sample_tour_json).json()

    summary = client.get(f"/tours/{tour['id']}/summary").json()
    assert summary["overview"] == "5 days Issyk-Kul Nomad Trail in issyk_kul for 6 participants"
    assert summary["budget_summary"] == "Total budget: 3000 (500 per person)"

    impact = client.post(f"/tours/{tour['id']}/weather-impact", json={"condition": "rain"}).json()
    assert impact["affected_activities"] == ["Jeti-Oguz"]

    delegate.responses.append("1. Altyn-Arashan\n2. Barskoon")
    resp = client.get(f"/tours/{tour['id']}/alternatives", params={"location": "Karakol"})
    assert resp.json() == {"alternatives": ["Altyn-Arashan", "Barskoon"]}
