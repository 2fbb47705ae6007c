import asyncio
import contextlib
import threading

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.routes import init_service, router
from infrastructure import InMemoryComponentStore
from services.component_service import ComponentService
from tests.samples import EXAMPLE_COMPONENT


PROPERTIES = {
    "text": "Hello",
    "color": "#ff0000",
    "backgroundColor": "#ffffff",
    "fontSize": 20,
    "fontWeight": "bold",
}


@pytest.fixture
def client():
    app = FastAPI()
    app.include_router(router)
    init_service(ComponentService(InMemoryComponentStore()))
    return TestClient(app)


@pytest.fixture
def component_id(client):
    return client.post("/api/component", json={"code": EXAMPLE_COMPONENT}).json()["id"]


# ===========================================================
# CRUD
# ===========================================================

class TestComponentCrud:

    def test_create(self, client):
        r = client.post("/api/component", json={"code": EXAMPLE_COMPONENT})
        assert r.status_code == 200
        assert r.json()["message"] == "Component created successfully"

    @pytest.mark.parametrize("body", [{}, {"code": 123}, {"code": ""}])
    def test_create_requires_code(self, client, body):
        r = client.post("/api/component", json=body)
        assert r.status_code == 400
        assert r.json()["detail"] == "Code is required and must be a string"

    def test_create_blank_code(self, client):
        r = client.post("/api/component", json={"code": "   "})
        assert r.status_code == 400
        assert r.json()["detail"] == "Code cannot be empty"

    def test_get(self, client, component_id):
        r = client.get(f"/api/component/{component_id}")
        assert r.status_code == 200
        assert set(r.json()) == {"id", "code", "createdAt", "updatedAt"}

    def test_get_missing(self, client):
        r = client.get("/api/component/nope")
        assert r.status_code == 404
        assert r.json()["detail"] == "Component not found: nope"

    def test_list(self, client, component_id):
        r = client.get("/api/component")
        assert [c["id"] for c in r.json()["components"]] == [component_id]

    def test_update(self, client, component_id):
        r = client.put(f"/api/component/{component_id}", json={"code": "  function ExampleComponent() {}  "})
        assert r.status_code == 200
        assert r.json()["component"]["code"] == "function ExampleComponent() {}"

    def test_update_missing(self, client):
        r = client.put("/api/component/nope", json={"code": "x"})
        assert r.status_code == 404

    def test_delete(self, client, component_id):
        r = client.delete(f"/api/component/{component_id}")
        assert r.status_code == 200
        assert r.json()["deletedComponent"]["id"] == component_id
        assert client.get(f"/api/component/{component_id}").status_code == 404


# ===========================================================
# Edits
# ===========================================================

class TestEdits:

    def test_patch(self, client):
        r = client.post("/api/patch", json={
            "code": EXAMPLE_COMPONENT, "targetId": "title", "properties": PROPERTIES,
        })
        assert r.status_code == 200
        body = r.json()
        assert body["changed"] is True
        assert body["range"] == {"startLine": 5, "endLine": 8}
        assert "}, 'Hello')," in body["code"]

    def test_patch_invalid_color(self, client):
        r = client.post("/api/patch", json={
            "code": EXAMPLE_COMPONENT, "targetId": "title", "properties": {"color": "red"},
        })
        assert r.status_code == 400
        assert "color" in r.json()["detail"]

    def test_patch_requires_target(self, client):
        r = client.post("/api/patch", json={"code": EXAMPLE_COMPONENT, "properties": PROPERTIES})
        assert r.status_code == 400
        assert r.json()["detail"] == "targetId is required"

    def test_edit_stored_component(self, client, component_id):
        r = client.post(f"/api/component/{component_id}/edit", json={
            "targetId": "cta", "properties": PROPERTIES,
        })
        assert r.status_code == 200
        assert r.json()["text"] == "line"
        stored = client.get(f"/api/component/{component_id}").json()["code"]
        assert "'Hello'" in stored

    def test_edit_missing_component(self, client):
        r = client.post("/api/component/nope/edit", json={"targetId": "cta", "properties": {}})
        assert r.status_code == 404

    def test_preview(self, client, component_id):
        r = client.get(f"/api/component/{component_id}/preview")
        assert r.status_code == 200
        body = r.json()
        assert body["ok"] is True
        assert body["root"]["children"][0]["markerId"] == "root"


# ===========================================================
# Sessions
# ===========================================================

class TestSessionFlow:

    def test_select_apply_save(self, client, component_id):
        base = f"/api/component/{component_id}/session"
        assert client.post(base).status_code == 200

        r = client.post(f"{base}/select", json={
            "targetId": "title",
            "text": "Welcome to React Editor",
            "computedStyle": {"color": "rgb(51, 51, 51)", "fontSize": "24px"},
        })
        assert r.status_code == 200
        assert r.json()["properties"]["color"] == "#333333"

        r = client.put(f"{base}/properties", json={"properties": PROPERTIES})
        assert r.json()["hasUnappliedChanges"] is True

        r = client.post(f"{base}/apply")
        assert r.status_code == 200
        assert r.json()["changed"] is True
        assert r.json()["isDirty"] is True

        preview = client.get(f"/api/component/{component_id}/preview?session=true").json()
        assert preview["ok"] is True

        r = client.post(f"{base}/save")
        assert "'Hello'" in r.json()["component"]["code"]

        assert client.delete(base).json() == {"message": "Session closed"}

    def test_apply_without_selection_conflicts(self, client, component_id):
        base = f"/api/component/{component_id}/session"
        client.post(base)
        r = client.post(f"{base}/apply")
        assert r.status_code == 409
        assert r.json()["detail"] == "No element selected"

    def test_select_without_session(self, client, component_id):
        r = client.post(f"/api/component/{component_id}/session/select", json={"targetId": "title"})
        assert r.status_code == 404

    def test_invalid_session_properties(self, client, component_id):
        base = f"/api/component/{component_id}/session"
        client.post(base)
        client.post(f"{base}/select", json={"targetId": "title"})
        r = client.put(f"{base}/properties", json={"properties": {"fontSize": -1}})
        assert r.status_code == 400


class TestApp:

    def test_health(self):
        from app.main import app
        r = TestClient(app).get("/health")
        assert r.json() == {"status": "ok"}


class TestAutosaveLoop:

    def test_flush_runs_off_the_event_loop_thread(self):
        from app.main import _autosave_loop

        threads = []

        class RecordingService:
            def flush_autosaves(self):
                threads.append(threading.current_thread())
                return []

        async def run():
            task = asyncio.create_task(_autosave_loop(RecordingService(), 0.01))
            for _ in range(200):
                if threads:
                    break
                await asyncio.sleep(0.01)
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        asyncio.run(run())
        assert threads
        assert threads[0] is not threading.current_thread()
