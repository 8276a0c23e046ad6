"""
Escena3D — Configuración Global
Editor de escenas 3D controlado con lenguaje natural (español/inglés)
"""

import os
import json
import logging
from pathlib import Path

# ─── Rutas Base ───────────────────────────────────────────────
BASE_DIR = Path(__file__).parent.resolve()
DATA_DIR = Path(os.environ.get("ESCENA3D_DATA_DIR", BASE_DIR / "data")).resolve()
LOGS_DIR = DATA_DIR / "logs"
CONFIG_FILE = DATA_DIR / "config.json"
SCENE_DB = DATA_DIR / "escena3d.db"

# ─── Crear directorios si no existen ──────────────────────────
for d in [DATA_DIR, LOGS_DIR]:
    d.mkdir(parents=True, exist_ok=True)

# ─── Logging ──────────────────────────────────────────────────
LOG_LEVEL = logging.INFO
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_FILE = LOGS_DIR / "escena3d.log"

logging.basicConfig(
    level=LOG_LEVEL,
    format=LOG_FORMAT,
    handlers=[
        logging.FileHandler(LOG_FILE, encoding="utf-8"),
        logging.StreamHandler(),
    ],
)

# ─── Idioma ──────────────────────────────────────────────────
LANGUAGE = "es"  # "es" o "en"

# ─── Escena ──────────────────────────────────────────────────
SCENE_ID = "default"
SCENE_UNITS = "meters"  # meters, centimeters, millimeters
DEFAULT_OBJECT_COLOR = "#4299e1"  # Azul por defecto

# ─── Guardado automático ─────────────────────────────────────
AUTOSAVE_ENABLED = True
AUTOSAVE_DELAY = 1.0  # segundos sin cambios antes de guardar

# ─── API remoto de escenas ───────────────────────────────────
# Vacío = solo guardado local en SQLite
SCENE_API_URL = ""
SCENE_API_TIMEOUT = 10  # segundos

# ─── Funciones de configuración ──────────────────────────────

DEFAULT_CONFIG = {
    "language": LANGUAGE,
    "scene_id": SCENE_ID,
    "units": SCENE_UNITS,
    "default_color": DEFAULT_OBJECT_COLOR,
    "autosave": AUTOSAVE_ENABLED,
    "autosave_delay": AUTOSAVE_DELAY,
    "scene_api_url": SCENE_API_URL,
    "scene_api_timeout": SCENE_API_TIMEOUT,
}


def load_config() -> dict:
    """Carga la configuración del usuario desde config.json."""
    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE, "r", encoding="utf-8") as f:
                user_config = json.load(f)
            merged = {**DEFAULT_CONFIG, **user_config}
            return merged
        except (json.JSONDecodeError, IOError):
            pass
    return DEFAULT_CONFIG.copy()


def save_config(config: dict) -> None:
    """Guarda la configuración del usuario en config.json."""
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=4, ensure_ascii=False)


def get_config_value(key: str, default=None):
    """Obtiene un valor específico de la configuración."""
    config = load_config()
    return config.get(key, default)


# Cargar configuración al importar
USER_CONFIG = load_config()
