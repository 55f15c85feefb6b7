"""
Shared fixtures for the cube state engine tests.

- `state`   a fresh solved CubeState
- `status`  a fresh CubeStatus (one independent puzzle)
- `client`  a Flask test client bound to `status`, with the debug log
            redirected to a temporary file
"""

import pytest

from api import create_app
from cube_state import CubeState
from cube_status import CubeStatus


@pytest.fixture
def state():
    return CubeState()


@pytest.fixture
def status():
    return CubeStatus()


@pytest.fixture
def log_file(tmp_path):
    return tmp_path / "cube-debug.log"


@pytest.fixture
def app(status, log_file):
    app = create_app(status, log_file=log_file)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
