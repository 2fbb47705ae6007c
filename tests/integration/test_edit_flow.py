"""
End-to-end edit flows through ComponentService: concurrent edits on one
component, and an edit session that outlives an external update.
"""
from concurrent.futures import ThreadPoolExecutor

from core import FontWeight, PropertySet
from infrastructure import InMemoryComponentStore
from services.component_service import ComponentService
from services.preview import OutlineRenderer
from tests.samples import EXAMPLE_COMPONENT


def _service() -> ComponentService:
    return ComponentService(InMemoryComponentStore(), OutlineRenderer())


class TestConcurrentEdits:

    def test_edits_to_different_elements_all_land(self):
        service = _service()
        component_id = service.create(EXAMPLE_COMPONENT)["id"]
        edits = {
            "title": PropertySet(text="First", font_weight=FontWeight.BOLD),
            "description": PropertySet(text="Second"),
            "cta": PropertySet(text="Third"),
        }

        with ThreadPoolExecutor(max_workers=3) as pool:
            results = list(pool.map(
                lambda item: service.apply_edit(component_id, *item), edits.items(),
            ))

        assert all(r["changed"] for r in results)
        code = service.get(component_id)["code"]
        assert "}, 'First')," in code
        assert '}, "Second"),' in code
        assert "      'Third'" in code
        assert service.render_preview(component_id)["ok"] is True

    def test_repeated_edits_to_one_element(self):
        service = _service()
        component_id = service.create(EXAMPLE_COMPONENT)["id"]

        with ThreadPoolExecutor(max_workers=4) as pool:
            list(pool.map(
                lambda size: service.apply_edit(
                    component_id, "title", PropertySet(text="T", font_size=size),
                ),
                range(10, 30),
            ))

        code = service.get(component_id)["code"]
        # Every edit overwrote the same style attribute in place
        assert code.count("fontSize:") == EXAMPLE_COMPONENT.count("fontSize:")
        assert len(code.split("\n")) == len(EXAMPLE_COMPONENT.split("\n"))


class TestSessionFlow:

    def test_select_edit_autosave_then_preview(self):
        service = _service()
        component_id = service.create(EXAMPLE_COMPONENT)["id"]
        service.start_session(component_id)
        service.select_element(
            component_id, "description",
            PropertySet.from_computed_style("Edit me", {"color": "rgb(0, 0, 0)"}),
        )
        service.update_session_properties(
            component_id, PropertySet(text="Edited", color="#123456"),
        )
        assert service.apply_session(component_id)["changed"] is True

        preview = service.render_preview(component_id, use_session=True)
        assert preview["ok"] is True
        assert preview["warnings"] == []

        session = service.get_session(component_id)
        service.flush_autosaves(now=float("inf"))
        stored = service.get(component_id)["code"]
        assert stored == session.code
        assert "color: '#123456'" in stored
