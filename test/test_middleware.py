"""
Tests for the structured logging middleware and formatter.
"""

import json
import logging

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from starlette.requests import Request as StarletteRequest

from sharehub.context import TenantContext
from sharehub.middleware.logging import (
    RequestIdFilter,
    StructuredFormatter,
    StructuredLoggingMiddleware,
    get_client_ip,
    request_id_var,
)


def _build_app() -> FastAPI:
    app = FastAPI()

    @app.get("/test")
    async def test_route():
        return {"message": "test"}

    @app.get("/scoped")
    async def scoped_route(request: Request):
        request.state.tenant_context = TenantContext(tenant_id=4, actor_type="admin", actor_id=9, can_write=True)
        return {"message": "scoped"}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.add_middleware(StructuredLoggingMiddleware, logger_name="test.access")
    return app


def _request(headers: dict, client=("10.1.2.3", 1234)) -> StarletteRequest:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
        "client": client,
    }
    return StarletteRequest(scope)


class TestStructuredLoggingMiddleware:
    def test_request_id_echoed(self):
        client = TestClient(_build_app())
        response = client.get("/test", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_generated(self):
        client = TestClient(_build_app())
        response = client.get("/test")
        assert len(response.headers["X-Request-ID"]) == 36

    def test_access_log_fields(self, caplog):
        client = TestClient(_build_app())
        with caplog.at_level(logging.INFO, logger="test.access"):
            client.get("/scoped")

        record = next(r for r in caplog.records if r.name == "test.access")
        assert record.method == "GET"
        assert record.path == "/scoped"
        assert record.status_code == 200
        assert record.tenant_id == 4
        assert record.actor == "admin:9"

    def test_not_found_logged_as_warning(self, caplog):
        client = TestClient(_build_app())
        with caplog.at_level(logging.INFO, logger="test.access"):
            client.get("/missing")

        record = next(r for r in caplog.records if r.name == "test.access")
        assert record.levelno == logging.WARNING

    def test_health_not_logged(self, caplog):
        client = TestClient(_build_app())
        with caplog.at_level(logging.INFO, logger="test.access"):
            client.get("/health")
        assert not [r for r in caplog.records if r.name == "test.access"]


class TestStructuredFormatter:
    def test_json_output(self):
        record = logging.LogRecord("sharehub.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        record.request_id = "abc"
        record.tenant_id = 7

        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "hello world"
        assert data["level"] == "INFO"
        assert data["request_id"] == "abc"
        assert data["tenant_id"] == 7
        assert "method" not in data

    def test_request_id_filter(self):
        token = request_id_var.set("ctx-id")
        try:
            record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", (), None)
            assert RequestIdFilter().filter(record) is True
            assert record.request_id == "ctx-id"
        finally:
            request_id_var.reset(token)


class TestGetClientIp:
    def test_forwarded_for_first_hop(self):
        assert get_client_ip(_request({"X-Forwarded-For": "203.0.113.9, 10.0.0.1"})) == "203.0.113.9"

    def test_real_ip(self):
        assert get_client_ip(_request({"X-Real-IP": "198.51.100.4"})) == "198.51.100.4"

    def test_socket_peer(self):
        assert get_client_ip(_request({})) == "10.1.2.3"

    def test_no_client(self):
        assert get_client_ip(_request({}, client=None)) == "unknown"
