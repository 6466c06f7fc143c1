"""Tests for the frontend module."""

from __future__ import annotations

from fastapi.testclient import TestClient

from findreplace.web.app import app
from findreplace.web.frontend import _load_template, router


class TestLoadTemplate:
    """Tests for _load_template function."""

    def test_load_template_contains_html(self) -> None:
        """Template contains valid HTML."""
        result = _load_template()
        assert "<!doctype" in result.lower()
        assert "</html>" in result.lower()

    def test_load_template_contains_branding(self) -> None:
        assert "FindReplace" in _load_template()


class TestRouter:
    """Tests for the frontend router."""

    def test_router_has_index_route(self) -> None:
        routes = [route.path for route in router.routes]
        assert "/" in routes

    def test_index_served(self) -> None:
        response = TestClient(app).get("/")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
