"""
Escena3D — Punto de Entrada Principal
Editor de escenas 3D controlado con lenguaje natural.

Modo texto: cada línea es un comando ("crea un cubo rojo", "move the ball to x1 y2 z0").
"""

import sys
import logging
from pathlib import Path
from typing import Optional

# Asegurar que el directorio raíz está en el PATH
ROOT_DIR = Path(__file__).parent.resolve()
sys.path.insert(0, str(ROOT_DIR))

from config import DATA_DIR, LOGS_DIR

logger = logging.getLogger("escena3d.main")

EXIT_WORDS = ("salir", "exit", "quit")
SCENE_WORDS = ("escena", "scene")
CLEAR_WORDS = ("limpiar", "clear")
LANGUAGE_WORDS = ("idioma", "language")
STATS_WORDS = ("stats", "estadisticas", "estadísticas")
SAVE_WORDS = ("guardar", "save")

GREETING = {
    "es": "Escribe un comando para editar la escena. 'salir' para terminar.",
    "en": "Type a command to edit the scene. 'exit' to quit.",
}
FAREWELL = {
    "es": "Escena guardada. Hasta pronto.",
    "en": "Scene saved. Goodbye.",
}
CLEARED = {
    "es": "He vaciado la escena.",
    "en": "I cleared the scene.",
}
LANGUAGE_SET = {
    "es": "Idioma cambiado a español.",
    "en": "Language set to English.",
}
SAVED = {
    "es": "Escena guardada.",
    "en": "Scene saved.",
}
SAVE_FAILED = {
    "es": "No se pudo guardar la escena.",
    "en": "The scene could not be saved.",
}

STATS_LABELS = {
    "es": ("Objetos", "Tamaño de la escena", "Historial", "fallidas", "Preferencias"),
    "en": ("Objects", "Scene size", "History", "failed", "Preferences"),
}


def format_stats(stats: dict, language: str) -> str:
    """Texto de la orden `stats` a partir de Orchestrator.get_stats()."""
    objects, size, history, failed, prefs = STATS_LABELS[language]
    shapes = ", ".join(f"{shape}={count}" for shape, count in stats.get("shape_count", {}).items())
    lines = [f"  {objects}: {stats.get('object_count', 0)}" + (f" ({shapes})" if shapes else "")]
    if stats.get("bounds"):
        w, h, d = stats["bounds"]
        lines.append(f"  {size}: {w:g} x {h:g} x {d:g}")
    lines.append(
        f"  {history}: {stats.get('chat_entries', 0)} ({stats.get('failed_entries', 0)} {failed})"
    )
    if stats.get("preferences"):
        pairs = ", ".join(f"{k}={v}" for k, v in sorted(stats["preferences"].items()))
        lines.append(f"  {prefs}: {pairs}")
    return "\n".join(lines)


def initialize_core(config: dict = None):
    """Inicializa el orquestador (escena, memoria y API remoto)."""
    logger.info("=" * 60)
    logger.info("  Escena3D — Inicializando...")
    logger.info("=" * 60)

    from core.orchestrator import Orchestrator
    orchestrator = Orchestrator(config=config)

    api_status = "✅ Configurado" if orchestrator.api.enabled else "— Solo local"
    logger.info(f"  API de escenas: {api_status}")
    logger.info(f"  Objetos restaurados: {len(orchestrator.store.objects)}")
    return orchestrator


def handle_builtin(orchestrator, text: str) -> Optional[str]:
    """
    Comandos propios de la consola (no pasan por el intérprete).
    Devuelve la respuesta, o None si el texto no es un comando interno.
    """
    words = text.lower().split()
    if not words:
        return None

    if len(words) == 1 and words[0] in SCENE_WORDS:
        return orchestrator.describe_scene()

    if len(words) == 1 and words[0] in SAVE_WORDS:
        saved = orchestrator.flush()
        return (SAVED if saved else SAVE_FAILED)[orchestrator.language]

    if len(words) == 1 and words[0] in STATS_WORDS:
        return format_stats(orchestrator.get_stats(), orchestrator.language)

    if len(words) == 1 and words[0] in CLEAR_WORDS:
        orchestrator.clear_scene()
        return CLEARED[orchestrator.language]

    if len(words) == 2 and words[0] in LANGUAGE_WORDS and words[1] in ("es", "en"):
        language = orchestrator.set_language(words[1])
        return LANGUAGE_SET[language]

    return None


def run_text_mode(orchestrator):
    """Bucle de lectura de comandos por consola."""
    print("\n" + "=" * 60)
    print("  Escena3D — Modo Texto")
    print("=" * 60 + "\n")
    print(GREETING[orchestrator.language] + "\n")

    while True:
        try:
            user_input = input("> ").strip()

            if not user_input:
                continue

            if user_input.lower() in EXIT_WORDS:
                break

            response = handle_builtin(orchestrator, user_input)
            if response is None:
                response = orchestrator.process(user_input)
            print(f"\n{response}\n")

        except (KeyboardInterrupt, EOFError):
            print()
            break
        except Exception as e:
            print(f"\nError: {e}\n")
            logger.error(f"Error en modo texto: {e}")

    orchestrator.shutdown()
    print(f"\n{FAREWELL[orchestrator.language]}\n")


def main():
    """Función principal de Escena3D."""
    if sys.version_info < (3, 11):
        print("⚠️  Escena3D requiere Python 3.11 o superior.")
        print(f"   Versión actual: {sys.version}")
        sys.exit(1)

    DATA_DIR.mkdir(parents=True, exist_ok=True)
    LOGS_DIR.mkdir(parents=True, exist_ok=True)

    try:
        orchestrator = initialize_core()
    except Exception as e:
        logger.critical(f"Error fatal inicializando Escena3D: {e}")
        print(f"❌ Error fatal: {e}")
        sys.exit(1)

    run_text_mode(orchestrator)


if __name__ == "__main__":
    main()
