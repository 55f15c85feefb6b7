import logging

import config
from main import create_arg_parser


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"ok": True}


def test_state_of_fresh_cube(client):
    data = client.get("/state").get_json()
    assert data["ok"] is True
    assert len(data["pieces"]) == 26
    assert data["moves"] == 0
    assert data["solved"] is True


def test_cors_header_present(client):
    response = client.get("/health", headers={"Origin": "http://localhost:3000"})
    assert response.headers.get("Access-Control-Allow-Origin") in ("*", "http://localhost:3000")


def test_move(client):
    response = client.post("/move", json={"slice": "R", "direction": "clockwise"})
    assert response.status_code == 200
    data = response.get_json()
    assert data["moves"] == 1
    assert data["solved"] is False
    assert data["message"] == "Applied R"


def test_move_rejections(client):
    for body in ({"slice": "X"}, {"slice": "R", "direction": "up"}, {"slice": "S"}, {}):
        response = client.post("/move", json=body)
        assert response.status_code == 400
        assert response.get_json()["ok"] is False
    assert client.get("/state").get_json()["moves"] == 0


def test_move_while_another_in_flight(client, status):
    status.state.move_lock.acquire()
    try:
        response = client.post("/move", json={"slice": "U", "direction": "clockwise"})
    finally:
        status.state.move_lock.release()
    assert response.status_code == 409
    assert response.get_json()["ok"] is False


def test_sequence(client):
    response = client.post("/sequence", json={"moves": "R U' F2"})
    assert response.status_code == 200
    assert response.get_json()["moves"] == 4

    response = client.post("/sequence", json={"moves": ["L", "Z"]})
    assert response.status_code == 400


def test_history(client):
    client.post("/sequence", json={"moves": "R U U'"})
    data = client.get("/history").get_json()
    assert len(data["moves"]) == 3
    assert data["effective"] == [{"slice": "R", "direction": "clockwise"}]


def test_rotations(client):
    data = client.get("/rotations").get_json()
    assert "S" not in data["enabled"]
    assert data["disabled"][0]["reason"] == "Color shift issues"


def test_scramble_and_solve(client):
    response = client.post("/scramble", json={"moves": 12, "seed": 3})
    assert response.status_code == 200
    data = response.get_json()
    assert data["moves"] == 12
    assert len(data["scramble"].split()) == 12

    response = client.post("/solve", json={"method": "reversal", "apply": True})
    data = response.get_json()
    assert data["ok"] is True
    assert data["method"] == "Reversal"
    assert data["moves"] == 12
    assert data["applied"] is True
    assert data["solved"] is True


def test_solve_without_apply_leaves_cube(client):
    client.post("/move", json={"slice": "F", "direction": "counterclockwise"})
    data = client.post("/solve", json={}).get_json()
    assert data["notation"] == "F"
    assert data["applied"] is False
    assert data["solved"] is False


def test_solve_untouched_cube(client):
    data = client.post("/solve", json={"method": "reversal"}).get_json()
    assert data["method"] == "Already Solved"
    assert data["moves"] == 0


def test_bad_requests(client):
    assert client.post("/scramble", json={"moves": "ten"}).status_code == 400
    assert client.post("/scramble", json={"moves": -3}).status_code == 400
    assert client.post("/solve", json={"method": "magic"}).status_code == 400
    assert client.get("/pieces/99").status_code == 400
    assert client.post("/solve", json={"method": 5}).status_code == 400
    assert client.post("/sequence", json={"moves": 5}).status_code == 400
    assert client.post("/sequence", json={"moves": [1]}).status_code == 400
    assert client.post("/move", json=["R", "clockwise"]).status_code == 400


def test_scramble_length_is_capped(client):
    too_long = config.MAX_SCRAMBLE_LENGTH + 1
    resp = client.post("/scramble", json={"moves": too_long})
    assert resp.status_code == 400
    assert resp.get_json()["ok"] is False
    assert client.get("/state").get_json()["moves"] == 0


def test_complexity_and_misplaced(client):
    client.post("/move", json={"slice": "U", "direction": "clockwise"})
    data = client.get("/complexity").get_json()
    assert data["score"] > 15
    assert data["misplaced_pieces"] == 8
    assert data["difficulty"] in ("Easy", "Medium", "Hard", "Very Hard")

    data = client.get("/pieces/misplaced").get_json()
    assert data["count"] == 8
    assert {"piece_id", "current_position", "expected_position", "is_correct", "move_count"} <= set(data["pieces"][0])


def test_piece_report(client):
    data = client.get("/pieces/25").get_json()
    assert data["is_correct"] is True
    assert data["expected_position"] == [1, 1, 1]


def test_reset_and_solved(client):
    client.post("/move", json={"slice": "L", "direction": "clockwise"})
    assert client.get("/solved").get_json()["solved"] is False
    client.post("/reset")
    assert client.get("/solved").get_json()["solved"] is True


def test_client_log_is_reemitted(client, caplog):
    caplog.set_level(logging.DEBUG, logger="client")
    response = client.post("/log", json={"type": "warn", "message": "SHAPE BUTTON CLICKED", "data": {"pieceId": 4}})
    assert response.status_code == 200
    records = [r for r in caplog.records if r.name == "client"]
    assert records and records[-1].levelno == logging.WARNING
    assert "SHAPE BUTTON CLICKED" in records[-1].getMessage()


def test_client_log_rejects_invalid_json(client):
    response = client.post("/log", data="not json", content_type="application/json")
    assert response.status_code == 400


def test_write_log_appends_text(client, log_file):
    client.post("/write-log", data="first line\n", content_type="text/plain")
    client.post("/write-log", data="second line\n", content_type="text/plain")
    assert log_file.read_text(encoding="utf-8") == "first line\nsecond line\n"


def test_cli_arguments():
    args = create_arg_parser().parse_args(["--port", "6000", "--no-verify", "--debug"])
    assert args.port == 6000
    assert args.verify is False
    assert args.debug is True
