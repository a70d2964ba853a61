"""
Tests for the Strata FastAPI server.
"""

import pytest
from fastapi.testclient import TestClient

from strata.config import ExtractorConfig
from strata.hierarchy import IdentityCache
from strata.server import _state, _viewers, app

PAGE = """
<html><body>
  <section data-section-id="intro"><h1>Introduction</h1></section>
  <section data-section-id="part"><h2>Part</h2></section>
  <footer>outside</footer>
</body></html>
"""


@pytest.fixture(autouse=True)
def reset_state():
    """Reset server state before each test."""
    _state["document"] = None
    _state["identity"] = IdentityCache()
    _state["config"] = ExtractorConfig(initial_delays=(), debounce_delay=0.01)
    yield
    _state["document"] = None
    _viewers.clear()


@pytest.fixture
def client():
    """Create test client sharing one event loop across requests."""
    with TestClient(app) as test_client:
        yield test_client


class TestHealthEndpoint:
    def test_health_check(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "version" in data


class TestDocumentEndpoints:
    """Tests for loading and editing the live document."""

    def test_hierarchy_without_document(self, client):
        response = client.get("/api/hierarchy")
        assert response.status_code == 400
        assert "No document loaded" in response.json()["detail"]

    def test_load_and_scan(self, client):
        response = client.post("/api/document", json={"html": PAGE})
        assert response.status_code == 200
        assert response.json()["candidates"] == 2

        hierarchy = client.get("/api/hierarchy").json()["hierarchy"]
        assert hierarchy[0]["id"] == "intro"
        assert hierarchy[0]["children"][0]["id"] == "part"
        assert hierarchy[0]["children"][0]["depth"] == 2

    def test_synthetic_ids_stable_between_requests(self, client):
        client.post("/api/document", json={"html": "<section><h1>Untagged</h1></section>"})
        first = client.get("/api/hierarchy").json()["hierarchy"][0]["id"]
        second = client.get("/api/hierarchy").json()["hierarchy"][0]["id"]
        assert first == second
        assert first.startswith("sec-")

    def test_append_section(self, client):
        client.post("/api/document", json={"html": PAGE})
        response = client.post(
            "/api/document/sections",
            json={"html": '<section data-section-id="sub"><h3>Sub</h3></section>', "parent_section_id": "part"},
        )
        assert response.status_code == 200
        assert response.json()["added"] == 1

        part = client.get("/api/hierarchy").json()["hierarchy"][0]["children"][0]
        assert part["children"][0]["id"] == "sub"

    def test_append_to_unknown_parent(self, client):
        client.post("/api/document", json={"html": PAGE})
        response = client.post(
            "/api/document/sections",
            json={"html": "<section></section>", "parent_section_id": "nope"},
        )
        assert response.status_code == 404

    def test_remove_section(self, client):
        client.post("/api/document", json={"html": PAGE})
        assert client.delete("/api/document/sections/part").status_code == 200
        hierarchy = client.get("/api/hierarchy").json()["hierarchy"]
        assert hierarchy[0]["children"] == []

    def test_remove_unknown_section(self, client):
        client.post("/api/document", json={"html": PAGE})
        assert client.delete("/api/document/sections/nope").status_code == 404

    def test_empty_html_rejected_for_append(self, client):
        client.post("/api/document", json={"html": PAGE})
        response = client.post("/api/document/sections", json={"html": ""})
        assert response.status_code == 422


class TestHierarchySocket:
    """Tests for the viewer WebSocket channel."""

    def test_request_hierarchy(self, client):
        client.post("/api/document", json={"html": PAGE})
        with client.websocket_connect("/ws/hierarchy") as websocket:
            websocket.send_json({"type": "request-hierarchy"})
            message = websocket.receive_json()
        assert message["type"] == "hierarchy-update"
        assert message["hierarchy"][0]["label"] == "Introduction"

    def test_empty_document_reports_empty_hierarchy(self, client):
        with client.websocket_connect("/ws/hierarchy") as websocket:
            websocket.send_json({"type": "request-hierarchy"})
            message = websocket.receive_json()
        assert message == {"type": "hierarchy-update", "hierarchy": []}

    def test_garbage_frames_ignored(self, client):
        client.post("/api/document", json={"html": PAGE})
        with client.websocket_connect("/ws/hierarchy") as websocket:
            websocket.send_text("not json")
            websocket.send_json({"type": "unknown"})
            websocket.send_json({"type": "request-hierarchy"})
            message = websocket.receive_json()
        assert message["type"] == "hierarchy-update"

    def test_mutation_pushes_update(self, client):
        client.post("/api/document", json={"html": PAGE})
        with client.websocket_connect("/ws/hierarchy") as websocket:
            client.post(
                "/api/document/sections",
                json={"html": '<section data-section-id="late"><h1>Late</h1></section>'},
            )
            message = websocket.receive_json()
        assert message["type"] == "hierarchy-update"
        assert [root["id"] for root in message["hierarchy"]] == ["intro", "late"]

    def test_click_outside_clears_selection(self, client):
        client.post("/api/document", json={"html": PAGE})
        with client.websocket_connect("/ws/hierarchy") as websocket:
            websocket.send_json({"type": "scroll-to-section", "sectionId": "part"})
            client.post("/api/document/click", json={})
            message = websocket.receive_json()
        assert message == {"type": "selection-cleared"}

    def test_document_loaded_after_connect(self, client):
        with client.websocket_connect("/ws/hierarchy") as websocket:
            client.post("/api/document", json={"html": PAGE})
            pushed = websocket.receive_json()
            websocket.send_json({"type": "request-hierarchy"})
            requested = websocket.receive_json()
        assert pushed["hierarchy"][0]["id"] == "intro"
        assert requested == pushed

    def test_mutations_after_reload_reach_viewer(self, client):
        client.post("/api/document", json={"html": PAGE})
        with client.websocket_connect("/ws/hierarchy") as websocket:
            client.post("/api/document", json={"html": PAGE})
            websocket.receive_json()
            client.delete("/api/document/sections/part")
            message = websocket.receive_json()
        assert message["hierarchy"][0]["children"] == []

    def test_disconnect_forgets_viewer(self, client):
        client.post("/api/document", json={"html": PAGE})
        with client.websocket_connect("/ws/hierarchy") as websocket:
            websocket.send_json({"type": "request-hierarchy"})
            websocket.receive_json()
            assert len(_viewers) == 1
        client.get("/api/health")
        assert len(_viewers) == 0

    def test_disconnect_restores_selected_outline(self, client):
        client.post("/api/document", json={"html": PAGE})
        with client.websocket_connect("/ws/hierarchy") as websocket:
            websocket.send_json({"type": "scroll-to-section", "sectionId": "part"})
            websocket.send_json({"type": "request-hierarchy"})
            websocket.receive_json()
        client.get("/api/health")
        section = _state["document"].find_by_attribute("data-section-id", "part")
        assert not section.has_attr("style")
