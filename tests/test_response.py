"""
Tests para core/response.py — respuestas en lenguaje natural.
"""

import pytest
import sys
from pathlib import Path

# Añadir directorio raíz al path
sys.path.insert(0, str(Path(__file__).parent.parent))


class TestGenerateResponse:
    """Tests de generate_response."""

    def test_empty_list(self):
        from core.response import generate_response, NO_COMMANDS
        assert generate_response([], "es") == NO_COMMANDS["es"]
        assert generate_response([], "en") == NO_COMMANDS["en"]

    def test_is_idempotent(self):
        from core.response import generate_response
        from core.commands import AddPrimitive, Delete, Shape
        commands = [AddPrimitive(shape=Shape.BOX), Delete(target="cubo1")]
        assert generate_response(commands, "es") == generate_response(commands, "es")
        assert generate_response([], "en") == generate_response([], "en")

    def test_created_sphere_spanish(self):
        from core.response import generate_response
        from core.commands import AddPrimitive, Shape
        text = generate_response([AddPrimitive(shape=Shape.SPHERE, name="pelota1")], "es")
        assert "He creado" in text
        assert "pelota1" in text
        assert text == 'He creado una esfera llamada "pelota1"'

    def test_created_english(self):
        from core.response import generate_response
        from core.commands import AddPrimitive, Shape
        text = generate_response([AddPrimitive(shape=Shape.CYLINDER, name="tower")], "en")
        assert text == 'I created a cylinder called "tower"'

    def test_default_name(self):
        from core.response import generate_response
        from core.commands import AddPrimitive, Shape
        assert generate_response([AddPrimitive(shape=Shape.BOX)], "es") == 'He creado un cubo llamado "cubo"'
        assert generate_response([AddPrimitive(shape=Shape.BOX)], "en") == 'I created a box called "box"'

    def test_other_variants(self):
        from core.response import generate_response
        from core.commands import Delete, PlaceAbove, SetMaterial, SetPosition
        assert generate_response([Delete(target="cubo1")], "es") == 'He eliminado "cubo1"'
        assert generate_response([Delete(target="cubo1")], "en") == 'I deleted "cubo1"'
        assert "cubo1" in generate_response([SetMaterial(target="cubo1", color="#000000")], "es")
        assert "cubo1" in generate_response([SetPosition(target="cubo1", position=(0, 0, 0))], "en")
        placed = generate_response([PlaceAbove(target="pelota1", base="cubo1")], "es")
        assert "pelota1" in placed and "cubo1" in placed

    def test_create_without_shape(self):
        from core.response import generate_response
        from core.commands import command_from_dict
        cmd = command_from_dict({"action": "add_primitive", "name": "torre"})
        assert generate_response([cmd], "es") == 'He creado un objeto llamado "torre"'
        assert generate_response([cmd], "en") == 'I created an object called "torre"'

    def test_shape_as_plain_string(self):
        from core.response import generate_response
        from core.commands import AddPrimitive
        assert generate_response([AddPrimitive(shape="sphere", name="luna")], "es") == 'He creado una esfera llamada "luna"'

    def test_ask_is_echoed(self):
        from core.response import generate_response
        from core.commands import Ask
        assert generate_response([Ask(message="¿Cuál?")], "en") == "¿Cuál?"

    def test_sentences_joined(self):
        from core.response import generate_response
        from core.commands import Delete
        text = generate_response([Delete(target="a"), Delete(target="b")], "es")
        assert text == 'He eliminado "a". He eliminado "b"'

    def test_unknown_language_falls_back_to_spanish(self):
        from core.response import generate_response, NO_COMMANDS
        assert generate_response([], "fr") == NO_COMMANDS["es"]


class TestAskMessages:
    """Preguntas de aclaración."""

    def test_every_message_is_bilingual(self):
        from core.response import ASK_MESSAGES
        for key, texts in ASK_MESSAGES.items():
            assert set(texts) == {"es", "en"}, key
            assert texts["es"] != texts["en"]

    def test_ask_builds_command(self):
        from core.response import ask
        from core.commands import Ask
        assert ask("delete_target", "en") == Ask(message="Which object do you want to delete?")

    def test_execution_error_message(self):
        from core.response import execution_error_message
        assert execution_error_message("es") == "Hubo un error al procesar tu comando."
        assert execution_error_message("en") == "There was an error processing your command."


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
