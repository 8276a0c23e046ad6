"""
Escena3D — Commands
Tipos de comando que produce el intérprete y su validación.
"""

import math
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, ClassVar, Optional, Tuple, Union

Vec3 = Tuple[float, float, float]

# Holgura por defecto entre objeto y base al colocar "encima de"
DEFAULT_GAP = 0.1


class CommandError(ValueError):
    """Comando mal formado (acción desconocida o datos no interpretables)."""


class Shape(str, Enum):
    """Primitivas geométricas soportadas."""
    SPHERE = "sphere"
    BOX = "box"
    CYLINDER = "cylinder"
    CAPSULE = "capsule"
    PLANE = "plane"

    def __str__(self) -> str:
        return self.value


class _BaseCommand:
    """Mixin con la serialización común a todas las variantes."""

    action: ClassVar[str] = ""

    def to_dict(self) -> dict:
        data = {"action": self.action}
        for key, value in asdict(self).items():
            if value is None:
                continue
            if isinstance(value, Shape):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            data[key] = value
        return data


@dataclass(frozen=True)
class AddPrimitive(_BaseCommand):
    action: ClassVar[str] = "add_primitive"

    shape: Shape
    name: Optional[str] = None
    color: Optional[str] = None
    position: Optional[Vec3] = None
    params: Optional[dict] = None


@dataclass(frozen=True)
class Delete(_BaseCommand):
    action: ClassVar[str] = "delete"

    target: str


@dataclass(frozen=True)
class SetMaterial(_BaseCommand):
    action: ClassVar[str] = "set_material"

    target: str
    color: str


@dataclass(frozen=True)
class SetPosition(_BaseCommand):
    action: ClassVar[str] = "set_position"

    target: str
    position: Vec3


@dataclass(frozen=True)
class PlaceAbove(_BaseCommand):
    action: ClassVar[str] = "place_above"

    target: str
    base: str
    gap: float = DEFAULT_GAP


@dataclass(frozen=True)
class Ask(_BaseCommand):
    """Petición de aclaración. No tiene efecto sobre la escena."""
    action: ClassVar[str] = "ask"

    message: str


Command = Union[AddPrimitive, Delete, SetMaterial, SetPosition, PlaceAbove, Ask]

COMMAND_TYPES = {
    cls.action: cls
    for cls in (AddPrimitive, Delete, SetMaterial, SetPosition, PlaceAbove, Ask)
}


# ─── Construcción desde datos externos ────────────────────────

def _to_vec3(value: Any) -> Optional[Vec3]:
    if value is None:
        return None
    try:
        x, y, z = value
        return (float(x), float(y), float(z))
    except (TypeError, ValueError):
        raise CommandError(f"Posición inválida: {value!r}")


def _to_shape(value: Any) -> Optional[Shape]:
    if value is None:
        return None
    try:
        return Shape(value)
    except ValueError:
        raise CommandError(f"Forma desconocida: {value!r}")


def command_from_dict(data: dict) -> Command:
    """
    Construye un comando a partir de un dict (log del chat, HTTP, etc.).

    No rellena campos ausentes: llegan como None y es validate_command
    quien decide si el comando es utilizable.

    Raises:
        CommandError: si falta la acción o no es conocida.
    """
    if not isinstance(data, dict):
        raise CommandError(f"Se esperaba un dict, recibido {type(data).__name__}")

    action = data.get("action")
    cls = COMMAND_TYPES.get(action)
    if cls is None:
        raise CommandError(f"Acción desconocida: {action!r}")

    if cls is AddPrimitive:
        return AddPrimitive(
            shape=_to_shape(data.get("shape")),
            name=data.get("name"),
            color=data.get("color"),
            position=_to_vec3(data.get("position")),
            params=data.get("params"),
        )
    if cls is Delete:
        return Delete(target=data.get("target"))
    if cls is SetMaterial:
        return SetMaterial(target=data.get("target"), color=data.get("color"))
    if cls is SetPosition:
        return SetPosition(
            target=data.get("target"),
            position=_to_vec3(data.get("position")),
        )
    if cls is PlaceAbove:
        gap = data.get("gap")
        return PlaceAbove(
            target=data.get("target"),
            base=data.get("base"),
            gap=DEFAULT_GAP if gap is None else gap,
        )
    return Ask(message=data.get("message"))


# ─── Validación ───────────────────────────────────────────────

def _non_empty(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _valid_position(value: Any) -> bool:
    if not isinstance(value, (tuple, list)) or len(value) != 3:
        return False
    return all(
        isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)
        for v in value
    )


def validate_command(command: Union[Command, dict]) -> bool:
    """
    Comprueba que un comando tenga los campos obligatorios de su variante.
    No repara ni completa nada. Nunca lanza excepciones.
    """
    if isinstance(command, dict):
        try:
            command = command_from_dict(command)
        except CommandError:
            return False

    if isinstance(command, AddPrimitive):
        if command.position is not None and not _valid_position(command.position):
            return False
        try:
            Shape(command.shape)
        except (ValueError, TypeError):
            return False
        return True
    if isinstance(command, Delete):
        return _non_empty(command.target)
    if isinstance(command, SetMaterial):
        return _non_empty(command.target)
    if isinstance(command, SetPosition):
        return _non_empty(command.target) and _valid_position(command.position)
    if isinstance(command, PlaceAbove):
        return (
            _non_empty(command.target)
            and _non_empty(command.base)
            and command.target != command.base
        )
    if isinstance(command, Ask):
        return _non_empty(command.message)
    return False
