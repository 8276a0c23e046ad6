"""
Escena3D — Vocabulario
Tablas estáticas ES/EN: palabras de forma, verbos de acción y pronombres.
"""

import unicodedata
from types import MappingProxyType
from typing import Optional

from core.commands import Shape

# ─── Formas ───────────────────────────────────────────────────

SHAPE_VOCAB_ES = MappingProxyType({
    # Esfera
    "pelota": Shape.SPHERE,
    "bola": Shape.SPHERE,
    "esfera": Shape.SPHERE,
    "balón": Shape.SPHERE,
    "canica": Shape.SPHERE,

    # Caja/Cubo
    "cubo": Shape.BOX,
    "caja": Shape.BOX,
    "bloque": Shape.BOX,
    "dado": Shape.BOX,
    "prisma": Shape.BOX,
    "rectangulo": Shape.BOX,
    "rectángulo": Shape.BOX,

    # Cilindro
    "cilindro": Shape.CYLINDER,
    "tubo": Shape.CYLINDER,
    "poste": Shape.CYLINDER,
    "columna": Shape.CYLINDER,
    "lata": Shape.CYLINDER,
    "botella": Shape.CYLINDER,
    "cubeta": Shape.CYLINDER,
    "balde": Shape.CYLINDER,
    "tambor": Shape.CYLINDER,

    # Cápsula
    "capsula": Shape.CAPSULE,
    "cápsula": Shape.CAPSULE,
    "pildora": Shape.CAPSULE,
    "píldora": Shape.CAPSULE,
    "pastilla": Shape.CAPSULE,
    "palo": Shape.CAPSULE,
    "barra": Shape.CAPSULE,

    # Plano
    "plano": Shape.PLANE,
    "piso": Shape.PLANE,
    "suelo": Shape.PLANE,
    "mesa": Shape.PLANE,
    "tablero": Shape.PLANE,
    "superficie": Shape.PLANE,
    "hoja": Shape.PLANE,
    "papel": Shape.PLANE,
    "ventana": Shape.PLANE,
    "puerta": Shape.PLANE,
})

SHAPE_VOCAB_EN = MappingProxyType({
    "ball": Shape.SPHERE,
    "sphere": Shape.SPHERE,
    "orb": Shape.SPHERE,
    "globe": Shape.SPHERE,
    "marble": Shape.SPHERE,

    "box": Shape.BOX,
    "cube": Shape.BOX,
    "block": Shape.BOX,
    "brick": Shape.BOX,
    "die": Shape.BOX,
    "dice": Shape.BOX,
    "rectangle": Shape.BOX,
    "prism": Shape.BOX,

    "cylinder": Shape.CYLINDER,
    "tube": Shape.CYLINDER,
    "pipe": Shape.CYLINDER,
    "pole": Shape.CYLINDER,
    "column": Shape.CYLINDER,
    "can": Shape.CYLINDER,
    "bottle": Shape.CYLINDER,
    "barrel": Shape.CYLINDER,
    "drum": Shape.CYLINDER,

    "capsule": Shape.CAPSULE,
    "pill": Shape.CAPSULE,
    "tablet": Shape.CAPSULE,
    "rod": Shape.CAPSULE,
    "bar": Shape.CAPSULE,
    "stick": Shape.CAPSULE,

    "plane": Shape.PLANE,
    "floor": Shape.PLANE,
    "ground": Shape.PLANE,
    "table": Shape.PLANE,
    "board": Shape.PLANE,
    "surface": Shape.PLANE,
    "sheet": Shape.PLANE,
    "paper": Shape.PLANE,
    "window": Shape.PLANE,
    "door": Shape.PLANE,
    "wall": Shape.PLANE,
})

SHAPE_VOCAB = MappingProxyType({**SHAPE_VOCAB_ES, **SHAPE_VOCAB_EN})

# ─── Verbos de acción por familia ─────────────────────────────

ACTION_VERBS_ES = MappingProxyType({
    "create": ("crear", "crea", "haz", "hacer", "añadir", "añade", "poner", "pon", "generar", "genera"),
    "delete": ("borrar", "borra", "eliminar", "elimina", "quitar", "quita", "remover", "remueve", "destruir", "destruye"),
    "color": ("colorear", "colorea", "pintar", "pinta", "cambiar color", "color"),
    "move": ("mover", "mueve", "colocar", "coloca", "posicionar", "posiciona", "ubicar", "ubica"),
    "place": ("arriba", "encima", "sobre", "debajo", "abajo", "al lado", "junto", "cerca"),
})

ACTION_VERBS_EN = MappingProxyType({
    "create": ("create", "make", "add", "put", "generate", "build", "spawn"),
    "delete": ("delete", "remove", "destroy", "eliminate", "clear", "erase"),
    "color": ("color", "paint", "dye", "tint", "change color"),
    "move": ("move", "place", "position", "locate", "put"),
    "place": ("above", "on top", "over", "below", "under", "beside", "next to", "near"),
})

# ─── Pronombres y preposiciones ───────────────────────────────

PRONOUNS_ES = (
    "la", "el", "lo", "las", "los", "ella", "él", "ello", "ellos", "ellas",
    "esa", "ese", "eso", "esas", "esos", "esta", "este", "esto", "estas", "estos",
    "aquella", "aquel", "aquello", "aquellas", "aquellos",
)

PRONOUNS_EN = ("it", "that", "this", "them", "those", "these")

# Pronombres átonos que el español pega al imperativo: "bórrala", "muévelo"
ENCLITIC_PRONOUNS = ("las", "los", "les", "la", "lo", "le")

POSITION_PREPOSITIONS_ES = (
    "en", "a", "sobre", "encima", "arriba", "debajo", "abajo", "al lado", "junto", "cerca", "lejos",
)

POSITION_PREPOSITIONS_EN = (
    "at", "on", "above", "below", "beside", "next to", "near", "far", "over", "under",
)


def remove_accents(text: str) -> str:
    """Quita tildes y diacríticos ("bórrala" → "borrala")."""
    nfkd = unicodedata.normalize("NFKD", text)
    return "".join(c for c in nfkd if not unicodedata.combining(c))


def _fold(text: str) -> str:
    return remove_accents(text.lower())


# Versiones sin tildes de los verbos, calculadas una sola vez
_FOLDED_VERBS = MappingProxyType({
    family: tuple(
        _fold(verb)
        for verb in ACTION_VERBS_ES[family] + ACTION_VERBS_EN[family]
    )
    for family in ACTION_VERBS_ES
})

_VERB_STEMS = frozenset(
    verb
    for family in ("create", "delete", "color", "move")
    for verb in _FOLDED_VERBS[family]
    if " " not in verb
)


# ─── Consultas ────────────────────────────────────────────────

def detect_shape(word: str) -> Optional[Shape]:
    """Devuelve la forma canónica de una palabra, o None."""
    return SHAPE_VOCAB.get(word.lower().strip())


def is_pronoun(word: str) -> bool:
    normalized = word.lower().strip()
    return normalized in PRONOUNS_ES or normalized in PRONOUNS_EN


def has_enclitic_pronoun(word: str) -> bool:
    """
    Detecta un imperativo con pronombre pegado ("bórrala", "píntalos").
    La raíz que queda al quitar el pronombre tiene que ser un verbo conocido.
    """
    folded = _fold(word.strip())
    for suffix in ENCLITIC_PRONOUNS:
        if folded.endswith(suffix) and folded[: -len(suffix)] in _VERB_STEMS:
            return True
    return False


def _contains_family_verb(text: str, family: str) -> bool:
    normalized = _fold(text)
    return any(verb in normalized for verb in _FOLDED_VERBS[family])


def is_delete_command(text: str) -> bool:
    return _contains_family_verb(text, "delete")


def is_color_command(text: str) -> bool:
    return _contains_family_verb(text, "color")


def is_move_command(text: str) -> bool:
    return _contains_family_verb(text, "move")


def is_place_command(text: str) -> bool:
    """Posicionamiento relativo ("encima de", "above", ...)."""
    return _contains_family_verb(text, "place")


def detect_action(text: str) -> Optional[str]:
    """Primera familia de acción cuyo verbo aparece en el texto (ES antes que EN)."""
    normalized = _fold(text)
    for table in (ACTION_VERBS_ES, ACTION_VERBS_EN):
        for action, verbs in table.items():
            if any(_fold(verb) in normalized for verb in verbs):
                return action
    return None


def get_similar_shapes(word: str) -> list[Shape]:
    """Formas cuyo vocabulario contiene (o está contenido en) la palabra."""
    normalized = word.lower().strip()
    shapes: list[Shape] = []
    for vocab, shape in SHAPE_VOCAB.items():
        if (vocab in normalized or normalized in vocab) and shape not in shapes:
            shapes.append(shape)
    return shapes


def get_vocab_for_shape(shape: Shape) -> list[str]:
    return [word for word, word_shape in SHAPE_VOCAB.items() if word_shape == shape]
