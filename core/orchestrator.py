"""
Escena3D — Orchestrator
Une intérprete, escena, persistencia y API remoto.
Cada entrada del usuario pasa por: contexto → intérprete → ejecución → respuesta → historial → guardado.
"""

import logging
import threading
from typing import Optional
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import USER_CONFIG
from core.command_parser import parse_command_result
from core.commands import Ask
from core.response import execution_error_message, generate_response, normalize_language
from modules.executor import CommandExecutor, ExecutionError
from modules.geometry import combined_bounding_box
from modules.memory import Memory
from modules.scene import DEFAULT_COLOR, SceneError, SceneStore
from modules.scene_api import SceneAPIClient, SceneAPIError

logger = logging.getLogger("escena3d.orchestrator")


class Orchestrator:
    """
    Recibe texto del usuario, lo interpreta, aplica los comandos a la
    escena y devuelve la respuesta en el idioma activo.
    """

    def __init__(
        self,
        memory: Memory = None,
        store: SceneStore = None,
        api_client: SceneAPIClient = None,
        config: dict = None,
    ):
        self.config = {**USER_CONFIG, **(config or {})}
        self.memory = memory or Memory()
        self.store = store or SceneStore(units=self.config.get("units", "meters"))
        self.executor = CommandExecutor(
            self.store, self.config.get("default_color") or DEFAULT_COLOR
        )
        self.api = api_client or SceneAPIClient(
            self.config.get("scene_api_url", ""),
            timeout=self.config.get("scene_api_timeout", 10),
        )

        self.scene_id = self.config.get("scene_id", "default")
        self.autosave = self.config.get("autosave", True)
        self.autosave_delay = float(self.config.get("autosave_delay", 1.0))
        self.language = normalize_language(
            self.memory.get_preference("language", self.config.get("language", "es"))
        )

        self._save_timer: Optional[threading.Timer] = None
        self._timers: list[threading.Timer] = []
        self._timer_lock = threading.Lock()

        self._restore_scene()
        logger.info(
            f"Orchestrator inicializado. Escena '{self.scene_id}' con "
            f"{len(self.store.objects)} objetos, idioma '{self.language}'."
        )

    @property
    def _remote_key(self) -> str:
        return f"remote_scene_id:{self.scene_id}"

    def _restore_scene(self) -> None:
        data = self.memory.load_scene(self.scene_id)
        if data is None:
            data = self._load_remote()
        if data is None:
            return
        try:
            self.store.load(data)
        except SceneError as e:
            logger.error(f"Escena guardada inválida, se empieza vacía: {e}")

    # ─── Procesamiento principal ──────────────────────────────

    def process(self, user_input: str) -> str:
        """
        Procesa la entrada del usuario y devuelve la respuesta.

        Los comandos Ask no modifican la escena. Si un comando falla al
        ejecutarse, los siguientes no se aplican y la entrada del historial
        queda marcada como fallida.
        """
        context = self.store.build_context(self.language)
        result = parse_command_result(user_input, context)
        if result.error is not None:
            logger.warning(f"Error interpretando '{user_input}': {result.error}")

        applied = []
        error: Optional[str] = None
        for command in result.commands:
            try:
                applied.append(self.executor.apply(command))
            except ExecutionError as e:
                logger.error(f"Error ejecutando {command!r}: {e}")
                error = str(e)
                break

        if error is None:
            response = generate_response(applied, self.language)
        else:
            parts = [generate_response(applied, self.language)] if applied else []
            parts.append(execution_error_message(self.language))
            response = ". ".join(parts)

        self.memory.save_chat_entry(
            user_input=user_input if isinstance(user_input, str) else repr(user_input),
            commands=[command.to_dict() for command in result.commands],
            response=response,
            success=error is None,
            error=error,
        )

        if any(not isinstance(command, Ask) for command in applied):
            self._schedule_save()

        return response

    # ─── Guardado ─────────────────────────────────────────────

    def _schedule_save(self) -> None:
        """Guardado diferido: cada cambio reinicia la cuenta atrás."""
        if not self.autosave:
            return
        with self._timer_lock:
            if self._save_timer is not None:
                self._save_timer.cancel()
            self._save_timer = threading.Timer(self.autosave_delay, self._save_now)
            self._save_timer.daemon = True
            self._save_timer.start()
            self._timers = [t for t in self._timers if t.is_alive()] + [self._save_timer]

    def _save_now(self) -> bool:
        with self._timer_lock:
            self._save_timer = None

        data = self.store.to_dict()
        saved = self.memory.save_scene(self.scene_id, data)
        if saved:
            logger.info(f"Escena '{self.scene_id}' guardada ({len(data['objects'])} objetos)")
        self._sync_remote(data)
        return saved

    def _load_remote(self) -> Optional[dict]:
        """Escena guardada en el API remoto, si no hay copia local."""
        if not self.api.enabled:
            return None
        remote_id = self.memory.get_preference(self._remote_key)
        if not remote_id:
            return None
        try:
            remote = self.api.load_scene(remote_id) or {}
        except SceneAPIError as e:
            logger.warning(f"No se pudo cargar la escena remota (HTTP {e.status_code}): {e.message}")
            return None
        logger.info(f"Escena '{self.scene_id}' recuperada del API remoto ({remote_id})")
        return remote.get("data")

    def _sync_remote(self, data: dict) -> None:
        if not self.api.enabled:
            return
        remote_id = self.memory.get_preference(self._remote_key)
        try:
            if remote_id:
                self.api.update_scene(remote_id, data)
            else:
                created = self.api.save_scene(data) or {}
                if created.get("id"):
                    self.memory.set_preference(self._remote_key, created["id"])
            logger.info("Escena sincronizada con el API remoto")
        except SceneAPIError as e:
            logger.warning(f"No se pudo sincronizar la escena (HTTP {e.status_code}): {e.message}")

    def flush(self) -> bool:
        """Guarda inmediatamente, cancelando el guardado pendiente."""
        with self._timer_lock:
            if self._save_timer is not None:
                self._save_timer.cancel()
                self._save_timer = None
        return self._save_now()

    # ─── Utilidades ───────────────────────────────────────────

    def set_language(self, language: str) -> str:
        self.language = normalize_language(language)
        self.memory.set_preference("language", self.language)
        logger.info(f"Idioma cambiado a '{self.language}'")
        return self.language

    def clear_scene(self) -> None:
        self.store.clear()
        self._schedule_save()

    def get_chat_log(self, limit: int = 50) -> list[dict]:
        return self.memory.get_chat_log(limit)

    def get_stats(self) -> dict:
        """Resumen de la escena y del almacenamiento local."""
        stats = {
            **self.store.get_stats(),
            **self.memory.get_stats(),
            "preferences": self.memory.get_all_preferences(),
        }
        bounds = combined_bounding_box(self.store.objects)
        stats["bounds"] = (
            tuple(round(float(v), 3) for v in bounds.size) if bounds is not None else None
        )
        return stats

    def describe_scene(self) -> str:
        """Listado de los objetos de la escena, uno por línea."""
        objects = self.store.objects
        if not objects:
            return "La escena está vacía." if self.language == "es" else "The scene is empty."
        at = "en" if self.language == "es" else "at"
        lines = []
        for obj in objects:
            x, y, z = obj.position
            lines.append(f"  • {obj.name} ({obj.shape.value}) {obj.color} {at} ({x:g}, {y:g}, {z:g})")
        return "\n".join(lines)

    def shutdown(self) -> None:
        """Guarda los cambios pendientes antes de salir."""
        with self._timer_lock:
            pending = self._save_timer
            self._save_timer = None
            timers = list(self._timers)
        if pending is not None:
            pending.cancel()
        # Un guardado ya disparado puede seguir escribiendo en SQLite
        for timer in timers:
            if timer.is_alive() and timer is not threading.current_thread():
                timer.join()
        if pending is not None:
            self._save_now()
        logger.info("Orchestrator detenido.")
