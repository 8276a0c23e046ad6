"""
Escena3D — Response
Textos bilingües: preguntas de aclaración y confirmaciones de lo ejecutado.
"""

from typing import Iterable

from core.commands import (
    AddPrimitive,
    Ask,
    Command,
    Delete,
    PlaceAbove,
    SetMaterial,
    SetPosition,
    Shape,
)

# ─── Preguntas de aclaración ──────────────────────────────────

ASK_MESSAGES = {
    "unknown": {
        "es": "¿Podrías ser más específico? No entiendo qué quieres hacer.",
        "en": "Could you be more specific? I don't understand what you want to do.",
    },
    "error": {
        "es": "Hubo un error al interpretar tu comando. ¿Puedes intentar de nuevo?",
        "en": "There was an error interpreting your command. Can you try again?",
    },
    "delete_target": {
        "es": "¿Qué objeto quieres borrar?",
        "en": "Which object do you want to delete?",
    },
    "color_value": {
        "es": "¿De qué color quieres pintarlo?",
        "en": "What color do you want to paint it?",
    },
    "color_target": {
        "es": "¿Qué objeto quieres colorear?",
        "en": "Which object do you want to color?",
    },
    "move_position": {
        "es": '¿A dónde quieres moverlo? Ejemplo: "a x1 y2 z0"',
        "en": 'Where do you want to move it? Example: "to x1 y2 z0"',
    },
    "move_target": {
        "es": "¿Qué objeto quieres mover?",
        "en": "Which object do you want to move?",
    },
    "place_targets": {
        "es": "¿Qué objeto quieres colocar y sobre cuál?",
        "en": "Which object do you want to place and on which one?",
    },
}

NO_COMMANDS = {
    "es": "No se ejecutaron comandos.",
    "en": "No commands were executed.",
}

EXECUTION_ERROR = {
    "es": "Hubo un error al procesar tu comando.",
    "en": "There was an error processing your command.",
}

# (artículo + sustantivo, sustantivo, femenino)
SHAPE_NAMES_ES = {
    Shape.SPHERE: ("una esfera", "esfera", True),
    Shape.BOX: ("un cubo", "cubo", False),
    Shape.CYLINDER: ("un cilindro", "cilindro", False),
    Shape.CAPSULE: ("una cápsula", "cápsula", True),
    Shape.PLANE: ("un plano", "plano", False),
}


def normalize_language(language: str) -> str:
    """Solo hay dos idiomas; cualquier cosa que no sea "en" es español."""
    return "en" if language == "en" else "es"


def ask_message(key: str, language: str) -> str:
    return ASK_MESSAGES[key][normalize_language(language)]


def execution_error_message(language: str) -> str:
    return EXECUTION_ERROR[normalize_language(language)]


def ask(key: str, language: str) -> Ask:
    """Comando Ask con el mensaje de aclaración indicado."""
    return Ask(message=ask_message(key, language))


def default_name(shape: Shape, language: str) -> str:
    """Nombre que se muestra cuando el usuario no bautizó el objeto."""
    if normalize_language(language) == "es":
        return SHAPE_NAMES_ES[Shape(shape)][1]
    return Shape(shape).value


def _describe(command: Command, language: str) -> str:
    es = language == "es"

    if isinstance(command, AddPrimitive):
        try:
            shape = Shape(command.shape)
        except (ValueError, TypeError):
            # Comando sin forma válida (p. ej. venido de command_from_dict)
            if es:
                return f'He creado un objeto llamado "{command.name or "objeto"}"'
            return f'I created an object called "{command.name or "object"}"'
        name = command.name or default_name(shape, language)
        if es:
            article_noun, _, feminine = SHAPE_NAMES_ES[shape]
            called = "llamada" if feminine else "llamado"
            return f'He creado {article_noun} {called} "{name}"'
        return f'I created a {shape.value} called "{name}"'

    if isinstance(command, Delete):
        return f'He eliminado "{command.target}"' if es else f'I deleted "{command.target}"'

    if isinstance(command, SetMaterial):
        if es:
            return f'He cambiado el color de "{command.target}"'
        return f'I changed the color of "{command.target}"'

    if isinstance(command, SetPosition):
        if es:
            return f'He movido "{command.target}" a la nueva posición'
        return f'I moved "{command.target}" to the new position'

    if isinstance(command, PlaceAbove):
        if es:
            return f'He colocado "{command.target}" arriba de "{command.base}"'
        return f'I placed "{command.target}" above "{command.base}"'

    if isinstance(command, Ask):
        return command.message

    return ""


def generate_response(commands: Iterable[Command], language: str = "es") -> str:
    """
    Narra en lenguaje natural el resultado de una lista de comandos.

    Función pura: la misma entrada produce siempre el mismo texto.

    Args:
        commands: Comandos ejecutados (o preguntas pendientes).
        language: "es" o "en".

    Returns:
        Una frase por comando, unidas con ". ".
    """
    language = normalize_language(language)
    commands = list(commands)
    if not commands:
        return NO_COMMANDS[language]

    sentences = [_describe(command, language) for command in commands]
    return ". ".join(s for s in sentences if s)