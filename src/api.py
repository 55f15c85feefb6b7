"""api.py — Flask JSON API for one puzzle
=========================================

This file exposes a `CubeStatus` over HTTP so a browser renderer (or curl)
can drive the puzzle. It also hosts the client log sink that the renderer
posts its debug output to.

Endpoints (JSON in, JSON out)
- GET  /health             -> liveness
- GET  /state              -> pieces, move count, solved flag
- GET  /history            -> global move log and its effective form
- GET  /rotations          -> rotation configuration
- POST /move               -> {slice, direction}
- POST /sequence           -> {moves: "R U' F2" | [..]}
- POST /reset
- POST /scramble           -> {moves: n, seed}
- POST /solve              -> {method: reversal|kociemba|auto, apply: bool}
- GET  /complexity
- GET  /solved
- GET  /pieces/misplaced
- GET  /pieces/<id>
- POST /log                -> {type, message, data}; re-emitted on the "client" logger
- POST /write-log          -> raw text appended to the debug log file

Errors are `{"ok": false, "error": ...}` with 400 for invalid input and 409
when a move is requested while another one is still in flight.

Threading model
- `create_app` is a plain app factory; tests use its test client directly.
- `APIServer` runs the app on a background Werkzeug server (`make_server`
  wrapped in `_Server`) so `main.py` keeps control of shutdown.
------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. MIT License.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.serving import make_server

import config
from app_types import MoveInFlightError
from cube_status import CubeStatus

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

client_logger = logging.getLogger("client")

_CLIENT_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "log": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _error(message: str, status: int = 400):
    return jsonify({"ok": False, "error": message}), status


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("JSON body must be an object")
    return data


def _state_payload(status: CubeStatus) -> Dict[str, Any]:
    return {
        "ok": True,
        "pieces": status.snapshot(),
        "moves": status.move_count,
        "solved": status.is_solved(),
    }


def create_app(status: Optional[CubeStatus] = None,
               log_file: Union[str, Path, None] = None) -> Flask:
    """Create a Flask app bound to `status` (a fresh puzzle if omitted)."""
    app = Flask(__name__)
    app.config["CUBE_STATUS"] = status if status is not None else CubeStatus()
    app.config["LOG_FILE_PATH"] = Path(log_file) if log_file else config.LOG_FILE_PATH

    # allow CORS for local development; the renderer is served from another port
    CORS(app, resources={r"/*": {"origins": "*"}})

    def cube() -> CubeStatus:
        return app.config["CUBE_STATUS"]

    @app.errorhandler(MoveInFlightError)
    def _in_flight(e):
        logger.warning("Move rejected, another move in flight: %s", e)
        return _error(str(e), 409)

    @app.errorhandler(ValueError)
    def _bad_value(e):
        return _error(str(e), 400)

    @app.route("/health")
    def _health():
        return jsonify({"ok": True})

    @app.route("/state")
    def _state():
        return jsonify(_state_payload(cube()))

    @app.route("/history")
    def _history():
        status = cube()
        return jsonify({
            "ok": True,
            "moves": [r.to_dict() for r in status.state.global_move_log],
            "effective": [m.to_dict() for m in status.effective_history()],
        })

    @app.route("/rotations")
    def _rotations():
        status = cube()
        return jsonify({
            "ok": True,
            "enabled": [s.value for s in status.enabled_slices()],
            "disabled": status.disabled_slices(),
        })

    @app.route("/move", methods=["POST"])
    def _move():
        data = _json_body()
        slice_ = data.get("slice")
        direction = data.get("direction", "clockwise")
        if slice_ is None:
            return _error("Missing 'slice'")
        ok, msg = cube().apply_move(slice_, direction)
        if not ok:
            return _error(msg)
        payload = _state_payload(cube())
        payload["message"] = msg
        return jsonify(payload)

    @app.route("/sequence", methods=["POST"])
    def _sequence():
        data = _json_body()
        moves = data.get("moves")
        if not moves:
            return _error("Missing 'moves'")
        if not isinstance(moves, str) and not (
                isinstance(moves, list) and all(isinstance(m, str) for m in moves)):
            return _error("'moves' must be a string or a list of strings")
        ok, msg = cube().apply_sequence(moves)
        if not ok:
            return _error(msg)
        payload = _state_payload(cube())
        payload["message"] = msg
        return jsonify(payload)

    @app.route("/reset", methods=["POST"])
    def _reset():
        cube().reset()
        return jsonify(_state_payload(cube()))

    @app.route("/scramble", methods=["POST"])
    def _scramble():
        data = _json_body()
        n = data.get("moves", config.DEFAULT_SCRAMBLE_LENGTH)
        seed = data.get("seed")
        if isinstance(n, bool) or not isinstance(n, int):
            return _error("'moves' must be an integer")
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            return _error("'seed' must be an integer")
        applied = cube().scramble(n, seed=seed)
        payload = _state_payload(cube())
        payload["scramble"] = " ".join(str(m) for m in applied)
        payload["applied"] = [m.to_dict() for m in applied]
        return jsonify(payload)

    @app.route("/solve", methods=["POST"])
    def _solve():
        data = _json_body()
        method = data.get("method", "reversal")
        if not isinstance(method, str):
            return _error("'method' must be a string")
        solution = cube().solve(method)
        payload = solution.to_dict()
        payload["ok"] = solution.success
        payload["applied"] = False
        if data.get("apply") and solution.success:
            ok, msg = cube().apply_solution(solution)
            payload["applied"] = ok
            payload["message"] = msg
        payload["solved"] = cube().is_solved()
        logger.info("Solve (%s): success=%s moves=%d", method, solution.success, len(solution.moves))
        return jsonify(payload)

    @app.route("/complexity")
    def _complexity():
        payload = cube().analyze_complexity().to_dict()
        payload["ok"] = True
        return jsonify(payload)

    @app.route("/solved")
    def _solved():
        return jsonify({"ok": True, "solved": cube().is_solved()})

    @app.route("/pieces/misplaced")
    def _misplaced():
        pieces = cube().misplaced_pieces()
        return jsonify({"ok": True, "count": len(pieces), "pieces": pieces})

    @app.route("/pieces/<int:piece_id>")
    def _piece(piece_id: int):
        report = cube().piece_report(piece_id)
        report["ok"] = True
        return jsonify(report)

    @app.route("/log", methods=["POST"])
    def _client_log():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _error("Invalid JSON")
        level = _CLIENT_LEVELS.get(str(data.get("type", "info")).lower(), logging.INFO)
        message = data.get("message", "")
        if data.get("data") is not None:
            client_logger.log(level, "%s %s", message, data["data"])
        else:
            client_logger.log(level, "%s", message)
        return jsonify({"ok": True})

    @app.route("/write-log", methods=["POST"])
    def _write_log():
        text = request.get_data(as_text=True)
        path: Path = app.config["LOG_FILE_PATH"]
        try:
            with open(path, "a", encoding="utf-8") as fh:
                fh.write(text)
        except OSError as e:
            logger.exception("Failed to write log file %s: %s", path, e)
            return _error("Failed to write log", 500)
        return jsonify({"ok": True})

    return app


# ---------- Flask server wrapper ----------
class _Server(threading.Thread):
    """Run the Flask app in a background daemon thread using `make_server`."""

    def __init__(self, app, host, port):
        super().__init__(daemon=True)
        self._app = app
        self._host = host
        self._port = port
        self._server = None
        self._ready = threading.Event()

    def run(self):
        try:
            self._server = make_server(self._host, self._port, self._app, threaded=True)
            self._ready.set()
            self._server.serve_forever()
        except Exception as e:
            logger.exception("[API] server stopped with error: %s", e)
        finally:
            self._ready.set()

    def wait_ready(self, timeout: Optional[float] = None) -> bool:
        return self._ready.wait(timeout) and self._server is not None

    def shutdown(self):
        if self._server:
            self._server.shutdown()


class APIServer:
    """Owns one puzzle, its Flask app and the background server thread."""

    def __init__(self, status: Optional[CubeStatus] = None,
                 host: str = config.API_HOST, port: int = config.API_PORT,
                 log_file: Union[str, Path, None] = None):
        self.status = status if status is not None else CubeStatus()
        self.host = host
        self.port = port
        self.app = create_app(self.status, log_file=log_file)
        self._thread: Optional[_Server] = None

    def start(self) -> bool:
        self._thread = _Server(self.app, self.host, self.port)
        self._thread.start()
        if not self._thread.wait_ready(timeout=5.0):
            logger.error("[API] failed to start on %s:%s", self.host, self.port)
            return False
        logger.info("[API] listening on http://%s:%s", self.host, self.port)
        return True

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread:
            self._thread.join(timeout)

    def shutdown(self) -> None:
        if self._thread:
            self._thread.shutdown()
            self._thread = None
        self.status.kociemba.clear_cache()
