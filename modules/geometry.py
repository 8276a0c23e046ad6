"""
Escena3D — Geometry Module
Cajas envolventes alineadas a los ejes y posicionamiento relativo entre objetos.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from core.commands import Shape, Vec3

# Grosor que se le da a un plano para que tenga caja envolvente
PLANE_THICKNESS = 0.01


@dataclass(frozen=True)
class BoundingBox:
    min: np.ndarray
    max: np.ndarray
    center: np.ndarray
    size: np.ndarray


def _object_size(obj) -> np.ndarray:
    """Tamaño (ancho, alto, fondo) según la forma, sus parámetros y la escala."""
    params = obj.params
    sx, sy, sz = obj.scale
    shape = Shape(obj.shape)

    if shape == Shape.SPHERE:
        radius = (params.get("radius") or 1) * max(sx, sy, sz)
        return np.array([radius * 2] * 3, dtype=float)

    if shape == Shape.BOX:
        return np.array([
            (params.get("width") or 1) * sx,
            (params.get("height") or 1) * sy,
            (params.get("depth") or 1) * sz,
        ], dtype=float)

    if shape == Shape.CYLINDER:
        radius = max(params.get("radiusTop") or 1, params.get("radiusBottom") or 1) * max(sx, sz)
        return np.array([radius * 2, (params.get("height") or 2) * sy, radius * 2], dtype=float)

    if shape == Shape.CAPSULE:
        radius = (params.get("radius") or 0.5) * max(sx, sz)
        length = (params.get("length") or 2) * sy
        return np.array([radius * 2, length + radius * 2, radius * 2], dtype=float)

    # Plano
    return np.array([
        (params.get("width") or 2) * sx,
        PLANE_THICKNESS,
        (params.get("height") or 2) * sz,
    ], dtype=float)


def calculate_bounding_box(obj) -> BoundingBox:
    """Caja envolvente de un SceneObject centrada en su posición."""
    size = _object_size(obj)
    center = np.asarray(obj.position, dtype=float)
    half = size / 2
    return BoundingBox(min=center - half, max=center + half, center=center, size=size)


def combined_bounding_box(objects: Iterable) -> Optional[BoundingBox]:
    """Caja que envuelve a todos los objetos, o None si no hay ninguno."""
    boxes = [calculate_bounding_box(obj) for obj in objects]
    if not boxes:
        return None
    lo = np.min([b.min for b in boxes], axis=0)
    hi = np.max([b.max for b in boxes], axis=0)
    return BoundingBox(min=lo, max=hi, center=(lo + hi) / 2, size=hi - lo)


def position_above(target, base, gap: float = 0.0) -> Vec3:
    """
    Posición de `target` apoyado sobre `base`: misma x/z que la base y la
    cara inferior de target a `gap` unidades de la cara superior de base.
    """
    base_box = calculate_bounding_box(base)
    target_box = calculate_bounding_box(target)
    y = base_box.max[1] + target_box.size[1] / 2 + gap
    return (float(base.position[0]), float(y), float(base.position[2]))
