"""
Escena3D — Command Parser
Interpreta texto libre (español/inglés) y lo traduce en comandos sobre la escena.

El intérprete no guarda estado: cada llamada depende solo del texto y del
ParseContext que construye quien llama a partir de la escena actual.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from core.color_map import detect_color
from core.commands import (
    DEFAULT_GAP,
    AddPrimitive,
    Command,
    Delete,
    PlaceAbove,
    SetMaterial,
    SetPosition,
    Shape,
    Vec3,
)
from core.response import ask
from core.vocab import (
    detect_shape,
    has_enclitic_pronoun,
    is_color_command,
    is_delete_command,
    is_move_command,
    is_place_command,
    is_pronoun,
)

logger = logging.getLogger("escena3d.parser")


class CommandFamily(str, Enum):
    """Categoría gruesa del comando, elegida antes de extraer campos."""
    CREATE = "create"
    DELETE = "delete"
    COLOR = "color"
    MOVE = "move"
    PLACE = "place"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ParseContext:
    """Instantánea de la escena que recibe el intérprete (solo lectura)."""
    current_objects: tuple = ()
    last_mentioned_object: Optional[str] = None
    language: str = "es"

    def __post_init__(self):
        object.__setattr__(self, "current_objects", tuple(self.current_objects or ()))


@dataclass(frozen=True)
class ParseResult:
    """
    Resultado total del intérprete: siempre hay comandos.
    Si algo falló por dentro, `error` guarda la excepción para que quien
    llama decida si registrarla.
    """
    commands: list = field(default_factory=list)
    error: Optional[Exception] = None


# ─── Patrones (el orden importa: gana el primero que coincide) ──

_NAME = r"([a-zA-ZáéíóúÁÉÍÓÚñÑ0-9]+)"
_NAME_EN = r"([a-zA-Z0-9]+)"

NAME_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        # Español
        rf"llamado\s+{_NAME}",
        rf"llamada\s+{_NAME}",
        rf"de\s+nombre\s+{_NAME}",
        rf"que\s+se\s+llame\s+{_NAME}",
        # Inglés
        rf"named\s+{_NAME_EN}",
        rf"called\s+{_NAME_EN}",
        rf"name\s+{_NAME_EN}",
    )
)

_NUM = r"([-+]?\d+(?:\.\d+)?)"
_XYZ = rf"x\s*{_NUM}\s+y\s*{_NUM}\s+z\s*{_NUM}"

POSITION_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        _XYZ,                                               # x1 y2 z3
        rf"en\s+{_XYZ}",                                    # en x1 y2 z3
        rf"at\s+{_XYZ}",                                    # at x1 y2 z3
        rf"posici[oó]n\s+{_XYZ}",                           # posición x1 y2 z3
        rf"position\s+{_XYZ}",                              # position x1 y2 z3
        rf"\(\s*{_NUM}\s*,\s*{_NUM}\s*,\s*{_NUM}\s*\)",     # (1, 2, 3)
        rf"x\s*:\s*{_NUM}\s+y\s*:\s*{_NUM}\s+z\s*:\s*{_NUM}",  # x:1 y:2 z:3
    )
)

PLACEMENT_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        # Español
        r"(.+?)\s+(?:arriba|encima|sobre)\s+(?:de\s+)?(.+)",
        r"(?:pon|poner|colocar|coloca)\s+(.+?)\s+(?:arriba|encima|sobre)\s+(?:de\s+)?(.+)",
        # Inglés
        r"(.+?)\s+(?:above|on\s+top\s+of|over)\s+(.+)",
        r"(?:put|place)\s+(.+?)\s+(?:above|on\s+top\s+of|over)\s+(.+)",
    )
)

_TOKEN_PUNCTUATION = ".,;:!?¡¿\"'()"


# ─── Extractores ──────────────────────────────────────────────

def tokenize(text: str) -> list[str]:
    """Separa por espacios, pasa a minúsculas y quita la puntuación pegada."""
    tokens = (token.strip(_TOKEN_PUNCTUATION) for token in text.lower().split())
    return [token for token in tokens if token]


def extract_shape(text: str) -> Optional[Shape]:
    """Primera palabra del texto que sea una forma conocida."""
    for token in tokenize(text):
        shape = detect_shape(token)
        if shape:
            return shape
    return None


def extract_custom_name(text: str) -> Optional[str]:
    """Nombre explícito ("llamado torre", "named tower"), o None."""
    for pattern in NAME_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def extract_position(text: str) -> Optional[Vec3]:
    """Coordenadas (x, y, z) mencionadas en el texto, o None."""
    for pattern in POSITION_PATTERNS:
        match = pattern.search(text)
        if match:
            x, y, z = (float(value) for value in match.groups())
            return (x, y, z)
    return None


def _match_by_name(text: str, objects: tuple) -> Optional[str]:
    normalized = text.lower()
    for object_name in objects:
        if object_name.lower() in normalized:
            return object_name
    return None


def _match_by_shape_word(tokens: list[str], objects: tuple) -> Optional[str]:
    """
    Para cada palabra de forma, el primer objeto cuyo nombre la contiene.
    Si ninguno contiene la palabra tal cual ("pelota"), se prueba con el
    nombre canónico ("sphere"), que es como se llaman los objetos sin nombre.
    """
    for token in tokens:
        shape = detect_shape(token)
        if not shape:
            continue
        for needle in (token, shape.value):
            for object_name in objects:
                if needle in object_name.lower():
                    return object_name
    return None


def extract_target(text: str, context: ParseContext) -> Optional[str]:
    """
    Resuelve el objeto al que se refiere el texto.

    1. Pronombre ("bórrala", "delete it") → último objeto mencionado.
    2. Nombre de un objeto existente contenido en el texto.
    3. Palabra de forma → primer objeto cuyo nombre la contiene.
    """
    tokens = tokenize(text)

    if context.last_mentioned_object:
        for token in tokens:
            if is_pronoun(token) or has_enclitic_pronoun(token):
                return context.last_mentioned_object

    by_name = _match_by_name(text, context.current_objects)
    if by_name:
        return by_name

    return _match_by_shape_word(tokens, context.current_objects)


def find_object_by_text(text: str, context: ParseContext) -> Optional[str]:
    """Como extract_target pero sin resolver pronombres."""
    by_name = _match_by_name(text, context.current_objects)
    if by_name:
        return by_name
    return _match_by_shape_word(tokenize(text), context.current_objects)


def extract_placement_targets(
    text: str, context: ParseContext
) -> tuple[Optional[str], Optional[str]]:
    """
    Separa "<objeto> encima de <base>" y resuelve cada lado por separado.

    Returns:
        (target, base); cualquiera de los dos puede ser None.
    """
    for pattern in PLACEMENT_PATTERNS:
        match = pattern.search(text)
        if match:
            target_text = match.group(1).strip()
            base_text = match.group(2).strip()
            return (
                find_object_by_text(target_text, context),
                find_object_by_text(base_text, context),
            )
    return None, None


# ─── Clasificación ────────────────────────────────────────────

def classify(text: str) -> CommandFamily:
    """
    Decide la familia del comando.

    Prioridad fija: borrar, color, mover, colocar, crear. Gana la primera
    familia que coincide, aunque el texto tenga palabras de varias.
    """
    if is_delete_command(text):
        return CommandFamily.DELETE
    if is_color_command(text):
        return CommandFamily.COLOR
    if is_move_command(text):
        return CommandFamily.MOVE
    if is_place_command(text):
        return CommandFamily.PLACE
    if extract_shape(text):
        return CommandFamily.CREATE
    return CommandFamily.UNKNOWN


# ─── Constructores por familia ────────────────────────────────

def _build_create(text: str, context: ParseContext) -> list[Command]:
    shape = extract_shape(text)
    if not shape:
        return [ask("unknown", context.language)]
    return [
        AddPrimitive(
            shape=shape,
            name=extract_custom_name(text),
            color=detect_color(text),
            position=extract_position(text),
        )
    ]


def _build_delete(text: str, context: ParseContext) -> list[Command]:
    target = extract_target(text, context)
    if not target:
        return [ask("delete_target", context.language)]
    return [Delete(target=target)]


def _build_color(text: str, context: ParseContext) -> list[Command]:
    color = detect_color(text)
    if not color:
        return [ask("color_value", context.language)]
    target = extract_target(text, context)
    if not target:
        return [ask("color_target", context.language)]
    return [SetMaterial(target=target, color=color)]


def _build_move(text: str, context: ParseContext) -> list[Command]:
    position = extract_position(text)
    if not position:
        return [ask("move_position", context.language)]
    target = extract_target(text, context)
    if not target:
        return [ask("move_target", context.language)]
    return [SetPosition(target=target, position=position)]


def _build_place(text: str, context: ParseContext) -> list[Command]:
    target, base = extract_placement_targets(text, context)
    if not target or not base or target == base:
        return [ask("place_targets", context.language)]
    return [PlaceAbove(target=target, base=base, gap=DEFAULT_GAP)]


_BUILDERS: dict[CommandFamily, Callable[[str, ParseContext], list[Command]]] = {
    CommandFamily.CREATE: _build_create,
    CommandFamily.DELETE: _build_delete,
    CommandFamily.COLOR: _build_color,
    CommandFamily.MOVE: _build_move,
    CommandFamily.PLACE: _build_place,
}


# ─── Punto de entrada ─────────────────────────────────────────

def parse_command_result(text: str, context: ParseContext) -> ParseResult:
    """
    Interpreta un comando y nunca lanza excepciones.

    Args:
        text: Texto del usuario.
        context: Objetos actuales, último mencionado e idioma.

    Returns:
        ParseResult con los comandos. Texto vacío → lista vacía. Cualquier
        fallo interno → un único Ask de disculpa y la excepción en `error`.
    """
    language = getattr(context, "language", "es")
    try:
        text = text.strip()
        if not text:
            return ParseResult(commands=[])

        family = classify(text)
        logger.debug(f"Familia detectada: {family.value} ← '{text}'")

        builder = _BUILDERS.get(family)
        if builder is None:
            return ParseResult(commands=[ask("unknown", language)])
        return ParseResult(commands=builder(text, context))

    except Exception as e:
        return ParseResult(commands=[ask("error", language)], error=e)


def parse_command(text: str, context: ParseContext) -> list[Command]:
    """Lista de comandos para el texto dado (ver parse_command_result)."""
    return parse_command_result(text, context).commands
