# memory_match/server.py
from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify, request

from .config import Config
from .engine import GRID_COLUMNS, GameEngine
from .scheduler import Scheduler, ThreadingScheduler


def as_int(value) -> int:
    """Accept JSON integers and integer strings; floats and booleans are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise TypeError(f"not an integer: {value!r}")
    return int(value)


def create_app(
    config: Optional[type] = None,
    engine: Optional[GameEngine] = None,
    scheduler: Optional[Scheduler] = None,
) -> Flask:
    """One Flask app serves one table; the engine is built from config unless given."""
    app = Flask(__name__)
    app.config.from_object(config or Config)

    if engine is None:
        engine = GameEngine(
            scheduler or ThreadingScheduler(),
            peek_delay=float(app.config.get("PEEK_DELAY_SEC", 1.0)),
            tick_interval=float(app.config.get("TICK_INTERVAL_SEC", 1.0)),
        )

    table = {"engine": engine, "revision": 0}
    app.extensions["memory_match"] = table

    def on_change() -> None:
        table["revision"] += 1

    engine.subscribe(on_change)

    def board() -> dict:
        with engine.lock:
            state = engine.snapshot()
            state["revision"] = table["revision"]
        for card in state["cards"]:
            # face-down cards keep their secret
            if not card["face_up"] and not card["matched"]:
                card["content"] = None
        if state["finished"]:
            state["result"] = {"elapsed": state["elapsed"], "score": state["score"]}
        return state

    def parse_cell(data) -> int:
        try:
            row = as_int(data["row"])
            col = as_int(data["col"])
        except (KeyError, TypeError, ValueError):
            raise ValueError("row and col must be integers")
        rows = len(engine.cards) // GRID_COLUMNS
        if not (0 <= row < rows and 0 <= col < GRID_COLUMNS):
            raise ValueError("invalid coordinate")
        return row * GRID_COLUMNS + col

    def parse_round(data) -> Optional[int]:
        value = data.get("round")
        if value is None:
            return None
        try:
            return as_int(value)
        except (TypeError, ValueError):
            raise ValueError("round must be an integer")

    @app.get("/health")
    def api_health():
        return jsonify({"status": "ok"})

    @app.get("/state")
    def api_state():
        return jsonify({"status": "ok", "state": board()})

    @app.post("/flip")
    def api_flip():
        data = request.get_json(force=True, silent=True)
        try:
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            position = parse_cell(data)
            round_ = parse_round(data)
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400

        accepted = engine.flip_at(position, round_)
        return jsonify({"status": "ok", "accepted": accepted, "state": board()})

    @app.post("/reset")
    def api_reset():
        engine.reset()
        app.logger.info("table reset to round %d", engine.round)
        return jsonify({"status": "ok", "state": board()})

    return app


def main() -> None:
    logging.basicConfig(
        level=Config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app()
    # debug reloader would start a second engine with its own timers
    app.run(host=Config.HOST, port=Config.PORT, debug=Config.DEBUG, use_reloader=False)


if __name__ == "__main__":
    main()
