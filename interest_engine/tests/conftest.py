from __future__ import annotations

import pytest
from flask import Flask
from flask.testing import FlaskClient

from interest_engine.app import create_app
from interest_engine.settings import EngineSettings, ServiceVersion


@pytest.fixture()
def app() -> Flask:
    flask_app = create_app(EngineSettings(active_version=ServiceVersion.VERSION_1, pool_size=4))
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    with app.test_client() as test_client:
        yield test_client
