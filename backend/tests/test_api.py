import httpx
import openai
import pytest


def _seed(client):
    for d, w in [("2024-03-04", 187.0), ("2024-03-06", 186.0), ("2024-03-11", 185.0), ("2024-03-13", 184.0)]:
        assert client.post("/api/weights", json={"date": d, "weight": w}).status_code == 201
    client.post("/api/workouts", json={"date": "2024-03-05", "type": "lift", "muscle_groups": ["Back"]})
    client.post("/api/workouts", json={"date": "2024-03-12", "type": "run", "distance": 3.0})
    client.post("/api/workouts", json={"date": "2024-03-13", "type": "walk", "duration": 30})
    client.post("/api/birthdays", json={"name": "Mike", "date": "1985-03-16", "age": 39})


def test_root_health_and_version(client):
    assert client.get("/").json()["status"] == "healthy"
    assert client.get("/health").json() == {"status": "healthy", "data_source": "empty"}
    assert client.get("/api/version").json()["app_name"] == "Fitness Tracker API"


def test_weight_crud(client):
    created = client.post("/api/weights", json={"date": "2024-03-13", "weight": 184.4, "body_fat": 18.1})
    assert created.status_code == 201
    weight_id = created.json()["id"]

    assert client.get(f"/api/weights/{weight_id}").json()["weight"] == 184.4
    assert client.get("/api/weights/latest").json()["id"] == weight_id

    replaced = client.put(f"/api/weights/{weight_id}", json={"date": "2024-03-13", "weight": 184.0})
    assert replaced.status_code == 200
    new_id = replaced.json()["id"]
    assert new_id != weight_id
    assert client.get(f"/api/weights/{weight_id}").status_code == 404

    assert client.delete(f"/api/weights/{new_id}").status_code == 204
    assert client.get("/api/weights").json() == []
    assert client.delete(f"/api/weights/{new_id}").status_code == 404


def test_weights_are_listed_newest_first_with_filters(client):
    _seed(client)
    dates = [w["date"] for w in client.get("/api/weights").json()]
    assert dates == ["2024-03-13", "2024-03-11", "2024-03-06", "2024-03-04"]
    ranged = client.get("/api/weights", params={"start_date": "2024-03-05", "end_date": "2024-03-12"}).json()
    assert [w["date"] for w in ranged] == ["2024-03-11", "2024-03-06"]


@pytest.mark.parametrize("payload", [
    {"date": "2024-03-14", "type": "walk"},
    {"date": "2024-03-14", "type": "run", "duration": 25},
    {"date": "2024-03-14", "type": "run", "distance": 3, "muscle_groups": ["legs"]},
    {"date": "2024-03-14", "type": "yoga", "duration": 25},
])
def test_invalid_workouts_are_rejected(client, payload):
    assert client.post("/api/workouts", json=payload).status_code == 422
    assert client.get("/api/workouts").json() == []


def test_invalid_weight_is_rejected(client):
    assert client.post("/api/weights", json={"date": "2024-03-14", "weight": 0}).status_code == 422


def test_workout_filter_by_type(client):
    _seed(client)
    runs = client.get("/api/workouts", params={"type": "run"}).json()
    assert [w["type"] for w in runs] == ["run"]
    lift = client.get("/api/workouts", params={"type": "lift"}).json()[0]
    assert lift["muscle_groups"] == ["back"]


def test_upcoming_birthdays(client):
    _seed(client)
    upcoming = client.get("/api/birthdays/upcoming").json()
    assert [b["name"] for b in upcoming] == ["Mike"]


def test_empty_dashboard_shows_placeholders(client):
    body = client.get("/api/dashboard").json()
    display = body["weight"]["display"]
    assert display["current_weight"] == "--"
    assert display["trend"] == "--"
    assert display["total_lost"] == "0"
    assert body["workouts"]["this_week"] == 0
    assert body["workouts"]["trend"]["text"] == "same as last week"


def test_dashboard_cards(client):
    _seed(client)
    body = client.get("/api/dashboard").json()

    workouts = body["workouts"]
    assert (workouts["this_week"], workouts["last_week"]) == (2, 1)
    assert workouts["trend"] == {"text": "+1 vs last week", "sentiment": "positive", "detail": None}
    assert workouts["average_per_week"] == 1.5

    weight = body["weight"]
    assert weight["current_weight"] == 184.0
    assert weight["total_lost"] == 3.0
    assert weight["trend"]["text"] == "trending down"
    assert weight["display"]["trend"] == "trending down (-1.5 vs 7-day avg)"
    assert weight["display"]["this_week_average"] == "184.5 lbs"
    assert weight["display"]["last_week_average"] == "186.5 lbs"
    assert weight["weekly_change"] == {"text": "-2.0 lbs", "sentiment": "positive", "detail": None}

    assert body["birthdays"]["this_week"] == 1
    assert body["status"]["weights"] == 4


def test_weekly_insights(client):
    _seed(client)
    buckets = client.get("/api/insights/weekly", params={"metric": "weight", "weeks": 3}).json()
    assert [b["week_start"] for b in buckets] == ["2024-02-26", "2024-03-04", "2024-03-11"]
    assert buckets[0]["average"] is None
    assert buckets[2]["average"] == 184.5

    walks = client.get("/api/insights/weekly", params={"metric": "walking_minutes", "weeks": 1}).json()
    assert walks[0]["sum"] == 30.0


def test_trend_and_forecast(client):
    _seed(client)
    trend = client.get("/api/insights/trend").json()
    assert trend["observations"] == 4
    assert trend["recent_weekly_rate"] == pytest.approx(-3 / 9 * 7)

    assert client.get("/api/insights/forecast").status_code == 400

    forecast = client.get("/api/insights/forecast", params={"target": 180}).json()
    assert forecast["forecast"]["verdict"] == "on-track"
    assert forecast["forecast"]["weeks_remaining"] == pytest.approx(4 / (3 / 9 * 7))
    assert forecast["current_weight"] == 184.0
    assert forecast["summary"].startswith("About")


def test_progress(client):
    _seed(client)
    body = client.get("/api/insights/progress").json()
    assert body["walking_minutes"]["summary"]["text"] == "Up 30.0 minutes from last week"
    assert body["running_miles"]["this_week"] == 3.0
    assert body["weekly_workouts"] == [0, 0, 1, 2]
    assert body["intensity_by_type"] == {"walk": 3.0, "run": 30.0, "lift": 5.0}


def test_chart(client):
    _seed(client)
    body = client.get("/api/insights/chart", params={"days": "30", "ma_window": 2}).json()
    assert [p["date"] for p in body["points"]] == ["2024-03-04", "2024-03-06", "2024-03-11", "2024-03-13"]
    assert body["points"][0]["moving_average"] is None
    assert body["points"][1]["moving_average"] == 186.5
    assert body["change"] == -3.0
    assert body["change_summary"]["text"] == "down 3.0 lbs (last 30 days)"
    assert body["slope_per_week"] < 0

    assert client.get("/api/insights/chart", params={"days": "7"}).status_code == 422


def test_csv_export_and_import(client):
    _seed(client)
    exported = client.get("/api/data/export/weight_logs.csv")
    assert exported.status_code == 200
    assert exported.text.splitlines()[0] == "id,date,weight,body_fat,notes"
    assert len(exported.text.splitlines()) == 5

    csv_text = "date,type,duration,distance\n2024-03-14,walk,20,\n2024-03-14,run,,\n"
    result = client.post(
        "/api/data/import/workouts.csv",
        files={"file": ("workouts.csv", csv_text, "text/csv")},
    ).json()
    assert result["imported"] == 1
    assert result["skipped"] == 1
    assert len(client.get("/api/workouts").json()) == 4

    assert client.get("/api/data/export/meals.csv").status_code == 404


def test_json_export_import_and_reset(client):
    _seed(client)
    backup = client.get("/api/data/export.json").json()
    assert len(backup["weights"]) == 4

    assert client.post("/api/data/reset").json()["weights"] == 0
    assert client.get("/api/weights").json() == []

    result = client.post("/api/data/import", params={"overwrite": True}, json=backup).json()
    assert result == {"imported": 8, "skipped": 0, "errors": []}
    assert len(client.get("/api/weights").json()) == 4

    assert client.post("/api/data/import", json={"meals": []}).status_code == 400


def test_reload_reports_source(client):
    _seed(client)
    status = client.post("/api/data/reload").json()
    assert status["source"] == "local"
    assert status["weights"] == 4


def test_chat(client, fake_openai):
    fake_openai.chat.completions.reply = "You walked 30 minutes."
    body = client.post("/api/chat", json={"question": "How much did I walk?"}).json()
    assert body["reply"] == "You walked 30 minutes."
    assert [m["role"] for m in body["history"]] == ["user", "assistant"]


def test_chat_failure_is_bad_gateway(client, fake_openai):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    fake_openai.chat.completions.error = openai.RateLimitError(
        "slow down", response=httpx.Response(429, request=request), body=None
    )
    resp = client.post("/api/chat", json={"question": "How am I doing?"})
    assert resp.status_code == 502
    assert "Rate limit" in resp.json()["detail"]


def test_daily_insight_without_enough_data(client, fake_openai):
    body = client.get("/api/chat/daily-insight").json()
    assert body["generated"] is False
    assert fake_openai.calls == []


def test_daily_insight(client):
    _seed(client)
    body = client.get("/api/chat/daily-insight").json()
    assert body == {"insight": "Keep it up!", "generated": True}
