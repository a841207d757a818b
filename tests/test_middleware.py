import logging
import re

import pytest
from flask import Flask

from shortlink.middleware import get_request_id, install_request_logging


class _Capture(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def captured():
    logger = logging.Logger("test-middleware")
    logger.setLevel(logging.DEBUG)
    handler = _Capture()
    logger.addHandler(handler)
    return logger, handler


def _build_app(logger):
    app = Flask("middleware-test")
    install_request_logging(app, logger)

    @app.get("/hello")
    def hello():
        return {"rid": get_request_id()}

    @app.get("/boom")
    def boom():
        raise RuntimeError("boom")

    return app


def _completed(handler):
    return [r for r in handler.records if r.getMessage() == "request completed"]


def test_install_logs_enabled_message(captured):
    logger, handler = captured
    client = _build_app(logger).test_client()
    assert handler.records[0].getMessage() == "logger middleware enabled"
    assert handler.records[0].attrs == {"component": "middleware/logger"}
    resp = client.get("/hello", headers={"X-Request-Id": "req-7"})
    assert resp.get_json() == {"rid": "req-7"}


def test_request_id_from_header_is_used(captured):
    logger, handler = captured
    client = _build_app(logger).test_client()
    resp = client.get("/hello", headers={"X-Request-Id": "req-42"})
    assert resp.get_json() == {"rid": "req-42"}
    records = _completed(handler)
    assert len(records) == 1
    attrs = records[0].attrs
    assert attrs["request_id"] == "req-42"
    assert attrs["status"] == 200
    assert attrs["method"] == "GET"
    assert attrs["path"] == "/hello"
    assert attrs["bytes"] == len(resp.data)
    assert attrs["duration"].endswith("s")


def test_generated_request_ids_are_distinct(captured):
    logger, _ = captured
    client = _build_app(logger).test_client()
    first = client.get("/hello").get_json()["rid"]
    second = client.get("/hello").get_json()["rid"]
    assert first != second
    assert re.fullmatch(r".+/.+-\d{6}", first)
    assert re.fullmatch(r".+/.+-\d{6}", second)


def test_get_request_id_outside_request_is_empty():
    assert get_request_id() == ""


def test_not_found_is_logged(captured):
    logger, handler = captured
    client = _build_app(logger).test_client()
    resp = client.get("/missing/path")
    assert resp.status_code == 404
    assert _completed(handler)[0].attrs["status"] == 404


def test_failing_view_is_logged_as_server_error(captured):
    logger, handler = captured
    client = _build_app(logger).test_client()
    resp = client.get("/boom")
    assert resp.status_code == 500
    assert _completed(handler)[0].attrs["status"] == 500