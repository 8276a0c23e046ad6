"""
Escena3D — Color Map
Nombres de color en español e inglés y detección de colores en texto libre.
"""

import re
from types import MappingProxyType
from typing import Optional

COLOR_MAP_ES = MappingProxyType({
    # Colores básicos
    "rojo": "#dc2626",
    "verde": "#16a34a",
    "azul": "#2563eb",
    "amarillo": "#eab308",
    "naranja": "#ea580c",
    "morado": "#9333ea",
    "púrpura": "#9333ea",
    "violeta": "#9333ea",
    "rosa": "#ec4899",
    "negro": "#000000",
    "blanco": "#ffffff",
    "gris": "#6b7280",
    "marrón": "#92400e",
    "café": "#92400e",
    "beige": "#f5f5dc",
    "crema": "#f5f5dc",

    # Variaciones
    "rojo claro": "#f87171",
    "rojo oscuro": "#991b1b",
    "verde claro": "#4ade80",
    "verde oscuro": "#14532d",
    "azul claro": "#60a5fa",
    "azul oscuro": "#1e3a8a",
    "amarillo claro": "#fde047",
    "amarillo oscuro": "#a16207",
    "naranja claro": "#fb923c",
    "naranja oscuro": "#c2410c",
    "morado claro": "#a855f7",
    "morado oscuro": "#581c87",
    "rosa claro": "#f9a8d4",
    "rosa oscuro": "#be185d",
    "gris claro": "#d1d5db",
    "gris oscuro": "#374151",
    "marrón claro": "#d97706",
    "marrón oscuro": "#451a03",

    # Especiales
    "dorado": "#fbbf24",
    "plateado": "#e5e7eb",
    "bronce": "#cd7f32",
    "cobre": "#b87333",
    "oro": "#ffd700",
    "plata": "#c0c0c0",
    "turquesa": "#06b6d4",
    "cyan": "#06b6d4",
    "lima": "#84cc16",
    "magenta": "#d946ef",
    "índigo": "#6366f1",
    "añil": "#6366f1",
    "escarlata": "#dc143c",
    "carmesí": "#dc143c",
    "coral": "#ff7f50",
    "salmón": "#fa8072",
    "lavanda": "#e6e6fa",
    "marfil": "#fffff0",
    "oliva": "#808000",
    "caqui": "#f0e68c",
    "granate": "#800000",
    "marino": "#000080",
    "teal": "#008080",
    "aguamarina": "#7fffd4",
})

COLOR_MAP_EN = MappingProxyType({
    # Basic colors
    "red": "#dc2626",
    "green": "#16a34a",
    "blue": "#2563eb",
    "yellow": "#eab308",
    "orange": "#ea580c",
    "purple": "#9333ea",
    "violet": "#9333ea",
    "pink": "#ec4899",
    "black": "#000000",
    "white": "#ffffff",
    "gray": "#6b7280",
    "grey": "#6b7280",
    "brown": "#92400e",
    "beige": "#f5f5dc",
    "cream": "#f5f5dc",

    # Variations
    "light red": "#f87171",
    "dark red": "#991b1b",
    "light green": "#4ade80",
    "dark green": "#14532d",
    "light blue": "#60a5fa",
    "dark blue": "#1e3a8a",
    "light yellow": "#fde047",
    "dark yellow": "#a16207",
    "light orange": "#fb923c",
    "dark orange": "#c2410c",
    "light purple": "#a855f7",
    "dark purple": "#581c87",
    "light pink": "#f9a8d4",
    "dark pink": "#be185d",
    "light gray": "#d1d5db",
    "light grey": "#d1d5db",
    "dark gray": "#374151",
    "dark grey": "#374151",
    "light brown": "#d97706",
    "dark brown": "#451a03",

    # Special colors
    "gold": "#ffd700",
    "silver": "#c0c0c0",
    "bronze": "#cd7f32",
    "copper": "#b87333",
    "turquoise": "#06b6d4",
    "cyan": "#06b6d4",
    "lime": "#84cc16",
    "magenta": "#d946ef",
    "indigo": "#6366f1",
    "scarlet": "#dc143c",
    "crimson": "#dc143c",
    "coral": "#ff7f50",
    "salmon": "#fa8072",
    "lavender": "#e6e6fa",
    "ivory": "#fffff0",
    "olive": "#808000",
    "khaki": "#f0e68c",
    "maroon": "#800000",
    "navy": "#000080",
    "teal": "#008080",
    "aqua": "#7fffd4",
    "aquamarine": "#7fffd4",
})

# Orden de iteración: primero ES, luego EN (los repetidos conservan su sitio)
COLOR_MAP = MappingProxyType({**COLOR_MAP_ES, **COLOR_MAP_EN})

COMMON_COLORS = (
    "rojo", "verde", "azul", "amarillo", "naranja", "morado", "rosa", "negro", "blanco", "gris", "marrón",
)

_HEX_PATTERN = re.compile(r"#[0-9a-fA-F]{6}")
_HEX_EXACT = re.compile(r"^#[0-9a-fA-F]{6}$")
_RGB_PATTERN = re.compile(r"rgb\s*\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)", re.IGNORECASE)
_RGB_EXACT = re.compile(r"^rgb\s*\(\s*\d+\s*,\s*\d+\s*,\s*\d+\s*\)$", re.IGNORECASE)


def _rgb_to_hex(r: int, g: int, b: int) -> str:
    return "#" + "".join(f"{min(max(c, 0), 255):02x}" for c in (r, g, b))


def detect_color(text: str) -> Optional[str]:
    """
    Detecta una referencia de color dentro de un texto.

    Orden de búsqueda:
    1. Coincidencia exacta con un nombre conocido.
    2. Primer nombre de la tabla contenido en el texto (orden de la tabla,
       no el de aparición en el texto).
    3. Hexadecimal "#rrggbb".
    4. "rgb(r, g, b)".

    Returns:
        Color en hexadecimal (minúsculas) o None si no se menciona ninguno.
    """
    normalized = text.lower().strip()

    exact = COLOR_MAP.get(normalized)
    if exact:
        return exact

    for color_name, color_value in COLOR_MAP.items():
        if color_name in normalized:
            return color_value

    hex_match = _HEX_PATTERN.search(text)
    if hex_match:
        return hex_match.group(0).lower()

    rgb_match = _RGB_PATTERN.search(text)
    if rgb_match:
        r, g, b = (int(v) for v in rgb_match.groups())
        return _rgb_to_hex(r, g, b)

    return None


def get_color_name(hex_value: str) -> Optional[str]:
    """Primer nombre de color con ese valor hexadecimal."""
    normalized = hex_value.lower()
    for color_name, color_value in COLOR_MAP.items():
        if color_value == normalized:
            return color_name
    return None


def get_similar_colors(color_name: str) -> list[str]:
    normalized = color_name.lower()
    return [
        value for name, value in COLOR_MAP.items()
        if name in normalized or normalized in name
    ]


def is_valid_color(color: str) -> bool:
    """Nombre conocido, "#rrggbb" o "rgb(r, g, b)"."""
    if color.lower() in COLOR_MAP:
        return True
    return bool(_HEX_EXACT.match(color) or _RGB_EXACT.match(color))


def get_colors_by_category() -> dict[str, list[str]]:
    return {
        "basic": ["rojo", "verde", "azul", "amarillo", "naranja", "morado", "rosa", "negro", "blanco", "gris"],
        "light": ["rojo claro", "verde claro", "azul claro", "amarillo claro", "naranja claro",
                  "morado claro", "rosa claro", "gris claro"],
        "dark": ["rojo oscuro", "verde oscuro", "azul oscuro", "amarillo oscuro", "naranja oscuro",
                 "morado oscuro", "rosa oscuro", "gris oscuro"],
        "special": ["dorado", "plateado", "bronce", "cobre", "turquesa", "lima", "magenta",
                    "índigo", "coral", "lavanda"],
    }