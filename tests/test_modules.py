"""
Tests para los módulos de Escena3D.
"""

import pytest
import sys
import json
import sqlite3
import tempfile
import shutil
from pathlib import Path
from unittest.mock import patch, MagicMock

# Añadir directorio raíz al path
sys.path.insert(0, str(Path(__file__).parent.parent))


def _obj(shape="box", name="cubo1", position=(0.0, 0.0, 0.0), **kwargs):
    from modules.scene import SceneObject
    obj = SceneObject.create(shape, name, position=position)
    for key, value in kwargs.items():
        setattr(obj, key, value)
    return obj


# ─── Tests SceneStore ────────────────────────────────────────

class TestSceneStore:
    """Tests para modules/scene.py."""

    def test_create_uses_defaults(self):
        from modules.scene import SceneObject, DEFAULT_COLOR, DEFAULT_PARAMS
        from core.commands import Shape
        obj = SceneObject.create("sphere", "pelota1")
        assert obj.shape == Shape.SPHERE
        assert obj.params == DEFAULT_PARAMS[Shape.SPHERE]
        assert obj.color == DEFAULT_COLOR == "#4299e1"
        assert obj.position == (0.0, 0.0, 0.0)
        assert obj.id.startswith("sphere_")

    def test_custom_params_override_defaults(self):
        from modules.scene import SceneObject
        obj = SceneObject.create("box", "caja", params={"width": 3})
        assert obj.params == {"width": 3, "height": 1, "depth": 1}

    def test_add_sets_last_mention(self):
        from modules.scene import SceneStore
        store = SceneStore()
        obj = store.add_object(_obj())
        assert store.last_mention == obj.id
        assert store.get_object_names() == ["cubo1"]

    def test_update_object(self):
        from modules.scene import SceneStore
        store = SceneStore()
        a = store.add_object(_obj(name="a"))
        store.add_object(_obj(name="b"))
        updated = store.update_object(a.id, color="#000000")
        assert updated.color == "#000000"
        assert store.last_mention == a.id
        assert store.update_object("no-existe", color="#fff") is None

    def test_delete_clears_last_mention(self):
        from modules.scene import SceneStore
        store = SceneStore()
        obj = store.add_object(_obj())
        assert store.delete_object(obj.id)
        assert store.last_mention is None
        assert not store.delete_object(obj.id)

    def test_get_object_by_name_case_insensitive(self):
        from modules.scene import SceneStore
        store = SceneStore()
        obj = store.add_object(_obj(name="Torre"))
        assert store.get_object_by_name("torre") is obj
        assert store.get_object_by_name("otra") is None

    def test_generate_unique_name(self):
        from modules.scene import SceneStore
        store = SceneStore()
        assert store.generate_unique_name("box") == "box"
        store.add_object(_obj(name="box"))
        assert store.generate_unique_name("box") == "box1"
        store.add_object(_obj(name="BOX1"))
        assert store.generate_unique_name("box") == "box2"

    def test_build_context_uses_names(self):
        from modules.scene import SceneStore
        store = SceneStore()
        store.add_object(_obj(name="pelota1", shape="sphere"))
        cubo = store.add_object(_obj(name="cubo1"))
        ctx = store.build_context("en")
        assert ctx.current_objects == ("pelota1", "cubo1")
        assert ctx.last_mentioned_object == "cubo1"
        assert ctx.language == "en"
        store.delete_object(cubo.id)
        assert store.build_context().last_mentioned_object is None

    def test_round_trip_through_dict(self):
        from modules.scene import SceneStore
        store = SceneStore()
        obj = store.add_object(_obj(name="cubo1", position=(1.0, 2.0, 3.0)))
        data = json.loads(store.export_json())

        other = SceneStore()
        other.load(data)
        restored = other.get_object_by_id(obj.id)
        assert restored.name == "cubo1"
        assert restored.position == (1.0, 2.0, 3.0)
        assert other.last_mention == obj.id

    def test_load_invalid_keeps_scene(self):
        from modules.scene import SceneStore, SceneError
        store = SceneStore()
        store.add_object(_obj())
        with pytest.raises(SceneError):
            store.load({"objects": {"x": {"id": "x", "name": "x", "shape": "torus"}}})
        assert store.get_object_names() == ["cubo1"]

    def test_is_valid_scene(self):
        from modules.scene import is_valid_scene
        assert is_valid_scene({"objects": {}})
        assert not is_valid_scene({"objects": []})
        assert not is_valid_scene("escena")
        assert not is_valid_scene({"objects": {"a": {"id": "a", "name": "a", "shape": "box",
                                                     "position": [1, 2]}}})

    def test_stats(self):
        from modules.scene import SceneStore
        store = SceneStore()
        store.add_object(_obj(name="a"))
        store.add_object(_obj(name="b"))
        store.add_object(_obj(name="c", shape="sphere"))
        stats = store.get_stats()
        assert stats["object_count"] == 3
        assert stats["shape_count"] == {"box": 2, "sphere": 1}
        assert stats["total_size"] > 0

    def test_clear(self):
        from modules.scene import SceneStore
        store = SceneStore()
        store.add_object(_obj())
        store.clear()
        assert store.objects == []
        assert store.last_mention is None


# ─── Tests Geometry ──────────────────────────────────────────

class TestGeometry:
    """Tests para modules/geometry.py."""

    def test_sphere_box(self):
        from modules.geometry import calculate_bounding_box
        box = calculate_bounding_box(_obj(shape="sphere", name="s"))
        assert list(box.size) == pytest.approx([2, 2, 2])
        assert list(box.min) == pytest.approx([-1, -1, -1])

    def test_scaled_box(self):
        from modules.geometry import calculate_bounding_box
        obj = _obj(position=(1.0, 0.0, 0.0), scale=(2.0, 1.0, 1.0))
        box = calculate_bounding_box(obj)
        assert list(box.size) == pytest.approx([2, 1, 1])
        assert list(box.max) == pytest.approx([2, 0.5, 0.5])

    def test_plane_has_thickness(self):
        from modules.geometry import calculate_bounding_box, PLANE_THICKNESS
        box = calculate_bounding_box(_obj(shape="plane", name="suelo"))
        assert box.size[1] == pytest.approx(PLANE_THICKNESS)

    def test_capsule_and_cylinder(self):
        from modules.geometry import calculate_bounding_box
        capsule = calculate_bounding_box(_obj(shape="capsule", name="c"))
        assert list(capsule.size) == pytest.approx([1, 3, 1])
        cylinder = calculate_bounding_box(_obj(shape="cylinder", name="t"))
        assert list(cylinder.size) == pytest.approx([2, 2, 2])

    def test_position_above(self):
        from modules.geometry import position_above
        base = _obj(position=(2.0, 0.0, -1.0))
        target = _obj(shape="sphere", name="s", position=(9.0, 9.0, 9.0))
        assert position_above(target, base, 0.1) == pytest.approx((2.0, 1.6, -1.0))

    def test_combined_box(self):
        from modules.geometry import combined_bounding_box
        a = _obj(name="a")
        b = _obj(name="b", position=(3.0, 0.0, 0.0))
        combined = combined_bounding_box([a, b])
        assert list(combined.size) == pytest.approx([4, 1, 1])
        assert list(combined.center) == pytest.approx([1.5, 0, 0])
        assert combined_bounding_box([]) is None

    def test_box_is_centered_on_position(self):
        from modules.geometry import calculate_bounding_box
        box = calculate_bounding_box(_obj(position=(1.0, 2.0, 3.0)))
        assert list(box.center) == pytest.approx([1, 2, 3])
        assert list(box.min) == pytest.approx([0.5, 1.5, 2.5])


# ─── Tests CommandExecutor ───────────────────────────────────

class TestCommandExecutor:
    """Tests para modules/executor.py."""

    def setup_method(self):
        from modules.scene import SceneStore
        from modules.executor import CommandExecutor
        self.store = SceneStore()
        self.executor = CommandExecutor(self.store)

    def test_add_primitive_defaults(self):
        from core.commands import AddPrimitive, Shape
        applied = self.executor.apply(AddPrimitive(shape=Shape.BOX))
        assert applied.name == "box"
        assert applied.color == "#4299e1"
        obj = self.store.get_object_by_name("box")
        assert obj.position == (0.0, 0.0, 0.0)
        assert self.store.last_mention == obj.id

    def test_add_primitive_plain_string_shape(self):
        from core.commands import AddPrimitive, Shape
        applied = self.executor.apply(AddPrimitive(shape="cylinder"))
        assert applied.shape == Shape.CYLINDER
        assert self.store.get_object_by_name("cylinder").shape == Shape.CYLINDER

    def test_add_primitive_unique_names(self):
        from core.commands import AddPrimitive, Shape
        self.executor.apply(AddPrimitive(shape=Shape.SPHERE, name="luna"))
        applied = self.executor.apply(AddPrimitive(shape=Shape.SPHERE, name="luna"))
        assert applied.name == "luna1"
        assert self.store.get_object_names() == ["luna", "luna1"]

    def test_set_material_and_position(self):
        from core.commands import AddPrimitive, SetMaterial, SetPosition, Shape
        self.executor.apply(AddPrimitive(shape=Shape.BOX, name="cubo1"))
        self.executor.apply(SetMaterial(target="CUBO1", color="#000000"))
        self.executor.apply(SetPosition(target="cubo1", position=(1.0, 2.0, 3.0)))
        obj = self.store.get_object_by_name("cubo1")
        assert obj.color == "#000000"
        assert obj.position == (1.0, 2.0, 3.0)

    def test_place_above(self):
        from core.commands import AddPrimitive, PlaceAbove, Shape
        self.executor.apply(AddPrimitive(shape=Shape.BOX, name="cubo1"))
        self.executor.apply(AddPrimitive(shape=Shape.SPHERE, name="pelota1"))
        self.executor.apply(PlaceAbove(target="pelota1", base="cubo1"))
        assert self.store.get_object_by_name("pelota1").position == pytest.approx((0.0, 1.6, 0.0))

    def test_delete(self):
        from core.commands import AddPrimitive, Delete, Shape
        self.executor.apply(AddPrimitive(shape=Shape.BOX, name="cubo1"))
        self.executor.apply(Delete(target="cubo1"))
        assert self.store.objects == []

    def test_unknown_target_raises(self):
        from core.commands import Delete
        from modules.executor import ExecutionError
        with pytest.raises(ExecutionError):
            self.executor.apply(Delete(target="fantasma"))

    def test_invalid_command_raises(self):
        from core.commands import SetPosition
        from modules.executor import ExecutionError
        with pytest.raises(ExecutionError):
            self.executor.apply(SetPosition(target="cubo1", position=None))

    def test_ask_has_no_effect(self):
        from core.commands import Ask
        cmd = Ask(message="¿Qué?")
        assert self.executor.apply(cmd) is cmd
        assert self.store.objects == []

    def test_execute_stops_on_error(self):
        from core.commands import AddPrimitive, Delete, Shape
        from modules.executor import ExecutionError
        with pytest.raises(ExecutionError):
            self.executor.execute([
                Delete(target="fantasma"),
                AddPrimitive(shape=Shape.BOX),
            ])
        assert self.store.objects == []


# ─── Tests Memory ────────────────────────────────────────────

class TestMemory:
    """Tests para modules/memory.py."""

    def setup_method(self):
        self.test_dir = tempfile.mkdtemp(prefix="escena3d_test_")
        self.db_path = str(Path(self.test_dir) / "test.db")

    def teardown_method(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _scene(self, name="cubo1"):
        from modules.scene import SceneStore
        store = SceneStore()
        store.add_object(_obj(name=name))
        return store.to_dict()

    def test_save_and_load_scene(self):
        from modules.memory import Memory
        mem = Memory(db_path=self.db_path)
        data = self._scene()
        assert mem.save_scene("default", data)
        assert mem.load_scene("default") == data
        assert mem.load_scene("otra") is None

    def test_corrupt_scene_falls_back_to_backup(self):
        from modules.memory import Memory
        mem = Memory(db_path=self.db_path)
        first = self._scene("primero")
        mem.save_scene("default", first)
        mem.save_scene("default", self._scene("segundo"))

        with sqlite3.connect(self.db_path) as conn:
            conn.execute("UPDATE scenes SET data = ? WHERE id = ?", ("{roto", "default"))

        assert mem.load_scene("default") == first

    def test_corrupt_without_backup(self):
        from modules.memory import Memory
        mem = Memory(db_path=self.db_path)
        mem.save_scene("default", self._scene())
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("UPDATE scenes SET data = ? WHERE id = ?",
                         (json.dumps({"objects": "no"}), "default"))
        assert mem.load_scene("default") is None

    def test_scenes_are_independent(self):
        from modules.memory import Memory
        mem = Memory(db_path=self.db_path)
        mem.save_scene("a", self._scene("uno"))
        mem.save_scene("b", self._scene("dos"))
        assert mem.load_scene("a") != mem.load_scene("b")
        assert mem.get_stats()["scenes"] == 2

    def test_chat_log(self):
        from modules.memory import Memory
        mem = Memory(db_path=self.db_path)
        mem.save_chat_entry("crea un cubo", [{"action": "add_primitive", "shape": "box"}], "ok")
        mem.save_chat_entry("borra x", [], "error", success=False, error="no existe")
        log = mem.get_chat_log()
        assert [e["user_input"] for e in log] == ["crea un cubo", "borra x"]
        assert log[0]["commands"] == [{"action": "add_primitive", "shape": "box"}]
        assert log[1]["success"] is False
        assert log[1]["error"] == "no existe"
        assert mem.get_stats()["failed_entries"] == 1

    def test_chat_log_limit_keeps_latest(self):
        from modules.memory import Memory
        mem = Memory(db_path=self.db_path)
        for i in range(5):
            mem.save_chat_entry(f"cmd {i}", [], "ok")
        assert [e["user_input"] for e in mem.get_chat_log(limit=2)] == ["cmd 3", "cmd 4"]

    def test_preferences(self):
        from modules.memory import Memory
        mem = Memory(db_path=self.db_path)
        assert mem.get_preference("language", "es") == "es"
        mem.set_preference("language", "en")
        assert mem.get_preference("language") == "en"
        assert mem.get_all_preferences() == {"language": "en"}

    def test_unusable_database_degrades(self):
        from modules.memory import Memory
        mem = Memory(db_path=str(Path(self.test_dir) / "no" / "existe" / "x.db"))
        assert mem.save_scene("default", {"objects": {}}) is False
        assert mem.load_scene("default") is None
        assert mem.get_chat_log() == []
        assert mem.get_preference("language", "es") == "es"


# ─── Tests SceneAPIClient ────────────────────────────────────

def _response(status=200, payload=None, ok=None):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = ok if ok is not None else status < 400
    resp.json.return_value = payload
    return resp


class TestSceneAPIClient:
    """Tests para modules/scene_api.py."""

    def test_disabled_without_url(self):
        from modules.scene_api import SceneAPIClient, SceneAPIError
        client = SceneAPIClient("")
        assert not client.enabled
        with pytest.raises(SceneAPIError) as exc:
            client.load_scene("abc")
        assert exc.value.status_code == 0

    @patch("modules.scene_api.requests.post")
    def test_save_scene(self, mock_post):
        from modules.scene_api import SceneAPIClient
        mock_post.return_value = _response(201, {"success": True, "data": {"id": "abc"}})

        client = SceneAPIClient("http://localhost:3000/", timeout=5)
        assert client.save_scene({"objects": {}}) == {"id": "abc"}

        args, kwargs = mock_post.call_args
        assert args[0] == "http://localhost:3000/api/scenes"
        assert kwargs["json"] == {"data": {"objects": {}}, "userId": "default"}
        assert kwargs["timeout"] == 5

    @patch("modules.scene_api.requests.put")
    def test_update_scene(self, mock_put):
        from modules.scene_api import SceneAPIClient
        mock_put.return_value = _response(200, {"success": True, "data": {"id": "abc"}})
        SceneAPIClient("http://api").update_scene("abc", {"objects": {}})
        assert mock_put.call_args[0][0] == "http://api/api/scenes/abc"

    @patch("modules.scene_api.requests.get")
    def test_http_error(self, mock_get):
        from modules.scene_api import SceneAPIClient, SceneAPIError
        mock_get.return_value = _response(404, {"success": False, "error": "Scene not found"})
        with pytest.raises(SceneAPIError) as exc:
            SceneAPIClient("http://api").load_scene("nope")
        assert exc.value.status_code == 404
        assert exc.value.message == "Scene not found"

    @patch("modules.scene_api.requests.get")
    def test_http_error_without_body(self, mock_get):
        from modules.scene_api import SceneAPIClient, SceneAPIError
        resp = _response(502)
        resp.json.side_effect = ValueError("no json")
        mock_get.return_value = resp
        with pytest.raises(SceneAPIError) as exc:
            SceneAPIClient("http://api").load_scene("abc")
        assert exc.value.status_code == 502
        assert "502" in exc.value.message

    @patch("modules.scene_api.requests.get")
    def test_unsuccessful_envelope(self, mock_get):
        from modules.scene_api import SceneAPIClient, SceneAPIError
        mock_get.return_value = _response(200, {"success": False})
        with pytest.raises(SceneAPIError) as exc:
            SceneAPIClient("http://api").load_scene("abc")
        assert exc.value.status_code == 500

    @patch("modules.scene_api.requests.put")
    def test_network_failure(self, mock_put):
        import requests
        from modules.scene_api import SceneAPIClient, SceneAPIError
        mock_put.side_effect = requests.ConnectionError("refused")
        with pytest.raises(SceneAPIError) as exc:
            SceneAPIClient("http://api").update_scene("abc", {"objects": {}})
        assert exc.value.status_code == 0

    @patch("modules.scene_api.requests.get")
    def test_load_scene(self, mock_get):
        from modules.scene_api import SceneAPIClient
        doc = {"id": "abc", "data": {"objects": {}}}
        mock_get.return_value = _response(200, {"success": True, "data": doc})
        assert SceneAPIClient("http://api").load_scene("abc") == doc
        assert mock_get.call_args[0][0] == "http://api/api/scenes/abc"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
