"""
Integration Tests for the Widget Host Application

Renders widgets through FastAPI with a shared fragment cache.
"""

import json
import logging

import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from caching.cacheable import cacheable
from caching.fragment_cache import FragmentCache
from config.settings import CacheSettings, LoggingSettings, Settings
from observability.logging import LogFormat, LogLevel, get_logger
from web.app import create_app
from web.rendering import render_widget, widget_response
from widgets.widget import Widget

RENDERS = []


@pytest.fixture(autouse=True)
def isolated_logging(restore_logging):
    yield


@cacheable("sidebar")
class Sidebar(Widget):
    needs = ("user",)

    def content(self):
        RENDERS.append(self.user)
        self.rawtext("<aside>")
        self.text(f"Signed in as {self.user}")
        self.rawtext("</aside>")


class SignupForm(Widget):
    def content(self):
        with self.form_for("user", url="/signup") as f:
            f.label("email")
            f.text_field("email")


@pytest.fixture
def fragment_cache():
    return FragmentCache(max_size=10)


@pytest.fixture
def app(fragment_cache):
    RENDERS.clear()
    app = create_app(Settings(), cache_backend=fragment_cache)

    @app.get("/sidebar")
    def sidebar(request: Request, user: str = "ada"):
        return widget_response(Sidebar(user=user), request)

    @app.get("/signup")
    def signup(request: Request):
        return widget_response(SignupForm(), request)

    @app.get("/broken")
    def broken(request: Request):
        return widget_response(Sidebar(), request)

    return app


@pytest.fixture
def client(app):
    return TestClient(app)


class TestWidgetRendering:
    """Test rendering widgets in responses."""

    def test_widget_is_rendered_as_html(self, client):
        response = client.get("/sidebar", params={"user": "<ada>"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert response.text == "<aside>Signed in as &lt;ada&gt;</aside>"

    def test_fragment_is_served_from_cache(self, client):
        first = client.get("/sidebar", params={"user": "ada"})
        second = client.get("/sidebar", params={"user": "ada"})
        other = client.get("/sidebar", params={"user": "grace"})

        assert first.text == second.text
        assert other.text == "<aside>Signed in as grace</aside>"
        assert RENDERS == ["ada", "grace"]

    def test_form_rendering(self, client):
        response = client.get("/signup")

        assert response.text == (
            '<form accept-charset="UTF-8" action="/signup" method="post">'
            '<label for="user_email">Email</label>'
            '<input id="user_email" name="user[email]" type="text" />'
            "</form>"
        )

    def test_widget_errors_become_json(self, client):
        response = client.get("/broken")

        assert response.status_code == 422
        payload = response.json()
        assert payload["category"] == "validation_error"
        assert payload["message"] == "Missing parameter(s) for Sidebar: user"
        assert payload["details"]["path"] == "/broken"
        assert payload["recovery_suggestions"]

    def test_correlation_id_is_echoed(self, client):
        response = client.get("/sidebar", headers={"X-Correlation-ID": "trace-42"})

        assert response.headers["X-Correlation-ID"] == "trace-42"

    def test_correlation_id_is_generated(self, client):
        assert client.get("/sidebar").headers.get("X-Correlation-ID")

    def test_render_widget_without_request(self):
        assert render_widget(Sidebar(user="ada")) == "<aside>Signed in as ada</aside>"


class TestCacheEndpoints:
    """Test fragment cache administration."""

    def test_stats(self, client):
        client.get("/sidebar")
        client.get("/sidebar")

        stats = client.get("/cache/stats").json()

        assert stats["cache_size"] == 1
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == pytest.approx(50.0)

    def test_entries(self, client):
        client.get("/sidebar", params={"user": "ada"})

        entries = client.get("/cache/entries", params={"limit": 5}).json()

        assert len(entries) == 1
        assert entries[0]["key_parts"] == ["sidebar", "ada"]
        assert entries[0]["content"] == "<aside>Signed in as ada</aside>"

    def test_invalidate_by_pattern(self, client, fragment_cache):
        client.get("/sidebar", params={"user": "ada"})
        client.get("/sidebar", params={"user": "grace"})

        response = client.delete("/cache/entries", params={"pattern": "grace"})

        assert response.json() == {"removed": 1, "pattern": "grace"}
        assert fragment_cache.get_stats()["cache_size"] == 1

    def test_invalidate_requires_pattern(self, client):
        assert client.delete("/cache/entries").status_code == 422

    def test_clear(self, client):
        client.get("/sidebar", params={"user": "ada"})
        client.get("/sidebar", params={"user": "grace"})

        assert client.delete("/cache").json() == {"removed": 2, "pattern": None}
        client.get("/sidebar", params={"user": "ada"})
        assert RENDERS == ["ada", "grace", "ada"]

    def test_disabled_cache(self):
        app = create_app(Settings(cache=CacheSettings(enabled=False)))
        client = TestClient(app)

        response = client.get("/cache/stats")

        assert response.status_code == 404
        assert response.json()["detail"] == "Fragment caching is disabled"
        assert app.state.fragment_cache is None


class TestLogging:
    """Test logging set up by the host application."""

    def test_logging_settings_are_applied(self):
        create_app(Settings(logging=LoggingSettings(level="WARNING", format="text")))

        logger = get_logger("widgets.widget")

        assert logger.config.level == LogLevel.WARNING
        assert logger.config.format == LogFormat.TEXT
        assert logging.getLogger("widgets.widget").level == logging.WARNING

    def test_requests_are_logged(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="observability.logging"):
            client.get("/sidebar", headers={"X-Correlation-ID": "trace-7"})

        requests = [record for record in caplog.records if getattr(record, "request_type", None) == "http"]

        assert len(requests) == 1
        assert requests[0].getMessage() == "GET /sidebar - 200"
        assert requests[0].status_code == 200
        assert requests[0].correlation_id == "trace-7"

    def test_log_file_receives_json_records(self, temp_dir):
        log_file = temp_dir / "widgetry.log"
        client = TestClient(create_app(Settings(logging=LoggingSettings(file=str(log_file)))))

        client.get("/cache/stats")

        entries = [json.loads(line) for line in log_file.read_text().splitlines()]
        messages = [entry["message"] for entry in entries]
        assert "GET /cache/stats - 200" in messages
