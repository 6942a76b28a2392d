"""CLI 入口测试"""

from __future__ import annotations

import json

from itinerary_engine.cli import main

_DAY = {
    "id": "day-1",
    "date": "2026-10-19",
    "activities": [
        {"kind": "place", "id": "a", "title": "Senso-ji", "durationMin": 60},
        {"kind": "place", "id": "b", "title": "Ueno Park", "durationMin": 45},
    ],
}


def test_schedule_prints_settled_day(tmp_path, capsys):
    path = tmp_path / "day.json"
    path.write_text(json.dumps(_DAY), encoding="utf-8")

    assert main(["schedule", str(path), "--order", "b,a"]) == 0
    data = json.loads(capsys.readouterr().out)

    assert [a["id"] for a in data["day"]["activities"]] == ["b", "a"]
    a = data["day"]["activities"][1]
    assert a["travelFromPrevious"]["isEstimated"] is True
    assert a["schedule"]["arrivalTime"] > "09:45"
    assert data["conflicts"]["summary"]["total"] == 0


def test_schedule_writes_output_file(tmp_path):
    path = tmp_path / "day.json"
    out = tmp_path / "out.json"
    path.write_text(json.dumps(_DAY), encoding="utf-8")

    assert main(["schedule", str(path), "--output", str(out)]) == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["day"]["activities"][0]["schedule"]["arrivalTime"] == "09:00"


def test_invalid_order_reports_domain_error(tmp_path, capsys):
    path = tmp_path / "day.json"
    path.write_text(json.dumps(_DAY), encoding="utf-8")

    assert main(["schedule", str(path), "--order", "a,zz"]) == 2
    body = json.loads(capsys.readouterr().out)
    assert body["code"] == "INVALID_SEQUENCE"
