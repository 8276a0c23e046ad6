"""
Escena3D — Memory Module
Persistencia local con SQLite: escenas (con copia de respaldo), historial del chat y preferencias.
"""

import json
import sqlite3
import logging
import uuid
from pathlib import Path
from typing import Optional

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import SCENE_DB
from modules.scene import is_valid_scene

logger = logging.getLogger("escena3d.memory")


class Memory:
    """Almacén persistente de Escena3D usando SQLite."""

    def __init__(self, db_path: str = None):
        self.db_path = db_path or str(SCENE_DB)
        self._init_db()
        logger.info(f"Memory inicializado: {self.db_path}")

    def _init_db(self) -> None:
        """Inicializa la base de datos y las tablas."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()

                # Documento actual de cada escena y el anterior como respaldo
                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS scenes (
                        id TEXT PRIMARY KEY,
                        data TEXT NOT NULL,
                        backup TEXT,
                        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    )
                """)

                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS chat_log (
                        id TEXT PRIMARY KEY,
                        user_input TEXT NOT NULL,
                        commands TEXT NOT NULL,
                        response TEXT NOT NULL,
                        success INTEGER NOT NULL,
                        error TEXT,
                        timestamp DATETIME DEFAULT CURRENT_TIMESTAMP
                    )
                """)

                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS preferences (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    )
                """)

                conn.commit()
                logger.info("Base de datos inicializada.")

        except Exception as e:
            logger.error(f"Error inicializando base de datos: {e}")

    # ─── Escenas ──────────────────────────────────────────────

    def save_scene(self, scene_id: str, data: dict) -> bool:
        """
        Guarda el documento de una escena. El documento que había pasa a
        ser la copia de respaldo.
        """
        try:
            payload = json.dumps(data, ensure_ascii=False)
            with sqlite3.connect(self.db_path) as conn:
                row = conn.execute(
                    "SELECT data FROM scenes WHERE id = ?", (scene_id,)
                ).fetchone()
                previous = row[0] if row else None
                conn.execute(
                    "INSERT OR REPLACE INTO scenes (id, data, backup, updated_at) "
                    "VALUES (?, ?, ?, CURRENT_TIMESTAMP)",
                    (scene_id, payload, previous),
                )
            logger.debug(f"Escena '{scene_id}' guardada")
            return True
        except Exception as e:
            logger.error(f"Error guardando escena: {e}")
            return False

    @staticmethod
    def _decode_scene(raw: Optional[str]) -> Optional[dict]:
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            return None
        return data if is_valid_scene(data) else None

    def load_scene(self, scene_id: str) -> Optional[dict]:
        """
        Carga una escena. Si el documento actual está corrupto se usa la
        copia de respaldo; si tampoco sirve, None.
        """
        try:
            with sqlite3.connect(self.db_path) as conn:
                row = conn.execute(
                    "SELECT data, backup FROM scenes WHERE id = ?", (scene_id,)
                ).fetchone()
        except Exception as e:
            logger.error(f"Error cargando escena: {e}")
            return None

        if not row:
            return None

        current = self._decode_scene(row[0])
        if current is not None:
            return current

        logger.warning(f"Escena '{scene_id}' corrupta, probando copia de respaldo")
        backup = self._decode_scene(row[1])
        if backup is None:
            logger.error(f"Escena '{scene_id}' sin respaldo válido")
        return backup

    # ─── Historial del chat ───────────────────────────────────

    def save_chat_entry(
        self,
        user_input: str,
        commands: list[dict],
        response: str,
        success: bool = True,
        error: str = None,
    ) -> Optional[str]:
        """Añade una entrada al historial. Devuelve su id."""
        entry_id = uuid.uuid4().hex
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    "INSERT INTO chat_log "
                    "(id, user_input, commands, response, success, error) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (
                        entry_id,
                        user_input,
                        json.dumps(commands, ensure_ascii=False),
                        response,
                        int(success),
                        error,
                    ),
                )
            return entry_id
        except Exception as e:
            logger.error(f"Error guardando entrada del chat: {e}")
            return None

    def get_chat_log(self, limit: int = 50) -> list[dict]:
        """Últimas entradas del historial en orden cronológico."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.execute(
                    "SELECT id, user_input, commands, response, success, error, timestamp "
                    "FROM chat_log ORDER BY rowid DESC LIMIT ?",
                    (limit,),
                )
                rows = cursor.fetchall()
                return [
                    {
                        "id": r[0],
                        "user_input": r[1],
                        "commands": json.loads(r[2]),
                        "response": r[3],
                        "success": bool(r[4]),
                        "error": r[5],
                        "timestamp": r[6],
                    }
                    for r in reversed(rows)
                ]
        except Exception as e:
            logger.error(f"Error obteniendo historial: {e}")
            return []

    # ─── Preferencias ─────────────────────────────────────────

    def set_preference(self, key: str, value: str) -> None:
        """Guarda una preferencia del usuario."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO preferences (key, value, updated_at) "
                    "VALUES (?, ?, CURRENT_TIMESTAMP)",
                    (key, value),
                )
        except Exception as e:
            logger.error(f"Error guardando preferencia: {e}")

    def get_preference(self, key: str, default: str = None) -> Optional[str]:
        """Obtiene una preferencia del usuario."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.execute(
                    "SELECT value FROM preferences WHERE key = ?",
                    (key,),
                )
                row = cursor.fetchone()
                return row[0] if row else default
        except Exception as e:
            logger.error(f"Error obteniendo preferencia: {e}")
            return default

    def get_all_preferences(self) -> dict:
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.execute("SELECT key, value FROM preferences")
                return {row[0]: row[1] for row in cursor.fetchall()}
        except Exception as e:
            logger.error(f"Error obteniendo preferencias: {e}")
            return {}

    # ─── Estadísticas ─────────────────────────────────────────

    def get_stats(self) -> dict:
        try:
            with sqlite3.connect(self.db_path) as conn:
                scenes = conn.execute("SELECT COUNT(*) FROM scenes").fetchone()[0]
                entries = conn.execute("SELECT COUNT(*) FROM chat_log").fetchone()[0]
                failed = conn.execute(
                    "SELECT COUNT(*) FROM chat_log WHERE success = 0"
                ).fetchone()[0]
            return {"scenes": scenes, "chat_entries": entries, "failed_entries": failed}
        except Exception as e:
            logger.error(f"Error obteniendo estadísticas: {e}")
            return {}
