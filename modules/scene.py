"""
Escena3D — Scene Module
Modelo de la escena: objetos primitivos en memoria y el último objeto mencionado.
"""

import json
import logging
import threading
import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from core.command_parser import ParseContext
from core.commands import Shape, Vec3

logger = logging.getLogger("escena3d.scene")

DEFAULT_COLOR = "#4299e1"
SCENE_VERSION = 1
UNITS = ("meters", "centimeters", "millimeters")

DEFAULT_PARAMS = {
    Shape.SPHERE: {"radius": 1, "widthSegments": 32, "heightSegments": 16},
    Shape.BOX: {"width": 1, "height": 1, "depth": 1},
    Shape.CYLINDER: {"radiusTop": 1, "radiusBottom": 1, "height": 2, "radialSegments": 32},
    Shape.CAPSULE: {"radius": 0.5, "length": 2, "capSegments": 4, "radialSegments": 16},
    Shape.PLANE: {"width": 2, "height": 2, "widthSegments": 1, "heightSegments": 1},
}


class SceneError(ValueError):
    """Datos de escena mal formados."""


def _vec3(value: Any, field_name: str) -> Vec3:
    try:
        x, y, z = value
        return (float(x), float(y), float(z))
    except (TypeError, ValueError):
        raise SceneError(f"'{field_name}' debe ser [x, y, z], recibido {value!r}")


@dataclass
class SceneObject:
    """Un objeto primitivo de la escena."""
    id: str
    name: str
    shape: Shape
    params: dict = field(default_factory=dict)
    position: Vec3 = (0.0, 0.0, 0.0)
    rotation: Vec3 = (0.0, 0.0, 0.0)
    scale: Vec3 = (1.0, 1.0, 1.0)
    color: str = DEFAULT_COLOR
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    @classmethod
    def create(
        cls,
        shape: Shape,
        name: str,
        params: Optional[dict] = None,
        color: Optional[str] = None,
        position: Optional[Vec3] = None,
    ) -> "SceneObject":
        """Objeto nuevo con los parámetros por defecto de su forma."""
        shape = Shape(shape)
        return cls(
            id=f"{shape.value}_{uuid.uuid4().hex[:8]}",
            name=name,
            shape=shape,
            params={**DEFAULT_PARAMS[shape], **(params or {})},
            position=tuple(position) if position else (0.0, 0.0, 0.0),
            color=color or DEFAULT_COLOR,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "shape": self.shape.value,
            "params": dict(self.params),
            "position": list(self.position),
            "rotation": list(self.rotation),
            "scale": list(self.scale),
            "material": {"color": self.color},
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SceneObject":
        """
        Reconstruye un objeto validando cada campo.

        Raises:
            SceneError: si falta un campo obligatorio o tiene un tipo inválido.
        """
        if not isinstance(data, dict):
            raise SceneError(f"Objeto inválido: {data!r}")

        for key in ("id", "name", "shape"):
            if not isinstance(data.get(key), str) or not data[key]:
                raise SceneError(f"Falta el campo '{key}' en el objeto")

        try:
            shape = Shape(data["shape"])
        except ValueError:
            raise SceneError(f"Forma desconocida: {data['shape']!r}")

        params = data.get("params", {})
        if not isinstance(params, dict):
            raise SceneError("'params' debe ser un objeto")

        material = data.get("material") or {}
        color = material.get("color", DEFAULT_COLOR) if isinstance(material, dict) else None
        if not isinstance(color, str):
            raise SceneError("'material.color' debe ser texto")

        now = time.time()
        return cls(
            id=data["id"],
            name=data["name"],
            shape=shape,
            params=dict(params),
            position=_vec3(data.get("position", (0, 0, 0)), "position"),
            rotation=_vec3(data.get("rotation", (0, 0, 0)), "rotation"),
            scale=_vec3(data.get("scale", (1, 1, 1)), "scale"),
            color=color,
            created_at=float(data.get("createdAt", now)),
            updated_at=float(data.get("updatedAt", now)),
        )


def parse_scene_objects(data: dict) -> dict[str, SceneObject]:
    """
    Valida un documento de escena y devuelve sus objetos indexados por id.

    Raises:
        SceneError: si el documento o alguno de sus objetos no es válido.
    """
    if not isinstance(data, dict):
        raise SceneError("El documento de escena debe ser un objeto")
    raw_objects = data.get("objects", {})
    if not isinstance(raw_objects, dict):
        raise SceneError("'objects' debe ser un objeto")

    objects = {}
    for raw in raw_objects.values():
        obj = SceneObject.from_dict(raw)
        objects[obj.id] = obj
    return objects


def is_valid_scene(data: Any) -> bool:
    try:
        parse_scene_objects(data)
        return True
    except SceneError:
        return False


class SceneStore:
    """
    Estado de la escena, compartido entre el REPL y el guardado automático.
    Todas las operaciones toman el mismo RLock.
    """

    def __init__(self, units: str = "meters"):
        self._lock = threading.RLock()
        self.units = units if units in UNITS else "meters"
        self._objects: dict[str, SceneObject] = {}
        self.last_mention: Optional[str] = None
        self.created_at = time.time()
        self.updated_at = self.created_at

    def _touch(self) -> None:
        self.updated_at = time.time()

    # ─── Mutaciones ───────────────────────────────────────────

    def add_object(self, obj: SceneObject) -> SceneObject:
        with self._lock:
            now = time.time()
            obj.created_at = now
            obj.updated_at = now
            self._objects[obj.id] = obj
            self.last_mention = obj.id
            self._touch()
            logger.debug(f"Objeto añadido: {obj.name} ({obj.id})")
            return obj

    def update_object(self, object_id: str, **changes) -> Optional[SceneObject]:
        """Aplica cambios a un objeto existente. None si el id no existe."""
        with self._lock:
            existing = self._objects.get(object_id)
            if existing is None:
                return None
            changes.pop("id", None)
            updated = replace(existing, **changes, updated_at=time.time())
            self._objects[object_id] = updated
            self.last_mention = object_id
            self._touch()
            return updated

    def delete_object(self, object_id: str) -> bool:
        with self._lock:
            removed = self._objects.pop(object_id, None)
            if removed is None:
                return False
            if self.last_mention == object_id:
                self.last_mention = None
            self._touch()
            logger.debug(f"Objeto eliminado: {removed.name} ({object_id})")
            return True

    def clear(self) -> None:
        with self._lock:
            self._objects.clear()
            self.last_mention = None
            self.created_at = time.time()
            self.updated_at = self.created_at

    def load(self, data: dict) -> None:
        """
        Reemplaza la escena por la de un documento serializado.

        Raises:
            SceneError: si el documento no es válido (la escena no cambia).
        """
        objects = parse_scene_objects(data)
        last_mention = data.get("lastMention")
        with self._lock:
            self._objects = objects
            if data.get("units") in UNITS:
                self.units = data["units"]
            self.last_mention = last_mention if last_mention in objects else None
            self.created_at = float(data.get("createdAt", time.time()))
            self._touch()
        logger.info(f"Escena cargada: {len(objects)} objetos")

    # ─── Consultas ────────────────────────────────────────────

    @property
    def objects(self) -> list[SceneObject]:
        with self._lock:
            return list(self._objects.values())

    def get_object_by_id(self, object_id: str) -> Optional[SceneObject]:
        with self._lock:
            return self._objects.get(object_id)

    def get_object_by_name(self, name: str) -> Optional[SceneObject]:
        """Búsqueda por nombre sin distinguir mayúsculas."""
        normalized = name.lower()
        with self._lock:
            for obj in self._objects.values():
                if obj.name.lower() == normalized:
                    return obj
        return None

    def get_object_names(self) -> list[str]:
        with self._lock:
            return [obj.name for obj in self._objects.values()]

    def generate_unique_name(self, base_name: str) -> str:
        """base, base1, base2... el primero que no esté en uso."""
        with self._lock:
            existing = {obj.name.lower() for obj in self._objects.values()}
        name = base_name
        counter = 1
        while name.lower() in existing:
            name = f"{base_name}{counter}"
            counter += 1
        return name

    def get_stats(self) -> dict:
        with self._lock:
            shape_count: dict[str, int] = {}
            for obj in self._objects.values():
                shape_count[obj.shape.value] = shape_count.get(obj.shape.value, 0) + 1
            return {
                "object_count": len(self._objects),
                "shape_count": shape_count,
                "total_size": len(self.export_json(indent=None)),
            }

    def to_dict(self) -> dict:
        with self._lock:
            data = {
                "version": SCENE_VERSION,
                "units": self.units,
                "objects": {oid: obj.to_dict() for oid, obj in self._objects.items()},
                "createdAt": self.created_at,
                "updatedAt": self.updated_at,
            }
            if self.last_mention:
                data["lastMention"] = self.last_mention
            return data

    def export_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def build_context(self, language: str = "es") -> ParseContext:
        """Instantánea para el intérprete: nombres de objetos y último mencionado."""
        with self._lock:
            last = self.get_object_by_id(self.last_mention) if self.last_mention else None
            return ParseContext(
                current_objects=tuple(self.get_object_names()),
                last_mentioned_object=last.name if last else None,
                language=language,
            )
