from conftest import TestConfig, positions_by_content
from memory_match.scheduler import ManualScheduler
from memory_match.server import create_app


def cell(pos):
    return {"row": pos // 4, "col": pos % 4}


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.get_json() == {"status": "ok"}


def test_state_hides_face_down_contents(client):
    res = client.get("/state")
    assert res.status_code == 200
    state = res.get_json()["state"]
    assert state["round"] == 1
    assert state["revision"] == 0
    assert len(state["cards"]) == 16
    assert all(card["content"] is None for card in state["cards"])
    assert "result" not in state


def test_flip_reveals_card(client, engine):
    res = client.post("/flip", json=cell(5))
    assert res.status_code == 200
    data = res.get_json()
    assert data["accepted"] is True
    card = data["state"]["cards"][5]
    assert card["face_up"] is True
    assert card["content"] == engine.cards[5].content
    assert data["state"]["revision"] == 1


def test_flip_same_card_twice_is_not_accepted(client):
    client.post("/flip", json=cell(0))
    data = client.post("/flip", json=cell(0)).get_json()
    assert data["accepted"] is False
    assert data["state"]["revision"] == 1


def test_flip_validation_errors(client):
    for body in ({"row": 0}, {"row": "x", "col": 1}, {"row": 4, "col": 0}, {"row": 0, "col": -1}, [1, 2],
                 {"row": 0.9, "col": 0}, {"row": True, "col": 0}, {"row": 0, "col": 1.0}):
        res = client.post("/flip", json=body)
        assert res.status_code == 400
        assert res.get_json()["status"] == "error"

    res = client.post("/flip", data="not json", content_type="text/plain")
    assert res.status_code == 400

    res = client.post("/flip", json={"row": 0, "col": 0, "round": "later"})
    assert res.status_code == 400

    res = client.post("/flip", json={"row": 0, "col": 0, "round": 1.5})
    assert res.status_code == 400


def test_rejected_bodies_leave_the_board_alone(client, engine):
    client.post("/flip", json={"row": 0.9, "col": 0})
    client.post("/flip", json={"row": True, "col": 0})
    assert all(not card.face_up for card in engine.cards)
    assert engine.timer_running is False


def test_integer_strings_are_accepted(client, engine):
    data = client.post("/flip", json={"row": "0", "col": "2", "round": "1"}).get_json()
    assert data["accepted"] is True
    assert engine.cards[2].face_up is True


def test_revision_matches_snapshot_under_tick(client, engine, scheduler):
    client.post("/flip", json=cell(0))
    scheduler.advance(3)
    state = client.get("/state").get_json()["state"]
    # one flip plus three ticks
    assert state["elapsed"] == 3
    assert state["revision"] == 4


def test_flip_from_stale_round_is_ignored(client, engine):
    client.post("/reset")
    data = client.post("/flip", json={**cell(0), "round": 1}).get_json()
    assert data["accepted"] is False
    assert engine.cards[0].face_up is False

    data = client.post("/flip", json={**cell(0), "round": 2}).get_json()
    assert data["accepted"] is True


def test_mismatch_is_hidden_again_after_peek(client, engine, scheduler):
    by_content = positions_by_content(engine)
    a, b = by_content["1"][0], by_content["2"][0]
    client.post("/flip", json=cell(a))
    state = client.post("/flip", json=cell(b)).get_json()["state"]
    assert state["awaiting_resolution"] is True
    assert state["cards"][b]["content"] == "2"

    scheduler.advance(1)
    state = client.get("/state").get_json()["state"]
    assert state["cards"][a]["content"] is None
    assert state["cards"][b]["content"] is None
    assert state["elapsed"] == 1
    assert state["awaiting_resolution"] is False


def test_finished_game_reports_result(client, engine, scheduler):
    for a, b in positions_by_content(engine).values():
        client.post("/flip", json=cell(a))
        client.post("/flip", json=cell(b))
        scheduler.advance(1)

    state = client.get("/state").get_json()["state"]
    assert state["finished"] is True
    assert state["result"] == {"elapsed": 7, "score": 80}
    assert all(card["content"] is not None for card in state["cards"])


def test_reset_starts_new_round(client, engine):
    client.post("/flip", json=cell(0))
    data = client.post("/reset").get_json()
    assert data["status"] == "ok"
    assert data["state"]["round"] == 2
    assert data["state"]["score"] == 0
    assert data["state"]["revision"] == 2
    assert engine.round == 2


def test_app_builds_its_own_engine_from_config():
    class FastConfig(TestConfig):
        PEEK_DELAY_SEC = 0.25

    scheduler = ManualScheduler()
    app = create_app(FastConfig, scheduler=scheduler)
    engine = app.extensions["memory_match"]["engine"]
    client = app.test_client()

    by_content = positions_by_content(engine)
    client.post("/flip", json=cell(by_content["1"][0]))
    client.post("/flip", json=cell(by_content["2"][0]))
    assert engine.awaiting_resolution is True
    scheduler.advance(0.25)
    assert engine.awaiting_resolution is False
