"""
Escena3D — Scene API Client
Cliente HTTP del servicio remoto de escenas (/api/scenes).

Todas las respuestas llegan envueltas en {"success": bool, "data": ..., "error": ...}.
"""

import logging
from typing import Any, Optional

import requests

logger = logging.getLogger("escena3d.scene_api")


class SceneAPIError(Exception):
    """Fallo del servicio remoto. status_code es 0 si no hubo respuesta HTTP."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SceneAPIClient:
    """Cliente del API remoto de escenas."""

    def __init__(self, base_url: str = "", timeout: float = 10, user_id: str = "default"):
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout
        self.user_id = user_id

    @property
    def enabled(self) -> bool:
        """Sin URL base configurada el cliente no hace nada."""
        return bool(self.base_url)

    def _url(self, scene_id: Optional[str] = None) -> str:
        url = f"{self.base_url}/api/scenes"
        return f"{url}/{scene_id}" if scene_id else url

    def _request(self, method: str, url: str, **kwargs) -> Any:
        """
        Ejecuta la petición y desenvuelve la respuesta.

        Raises:
            SceneAPIError: error HTTP, respuesta con success=false o fallo de red.
        """
        if not self.enabled:
            raise SceneAPIError("API de escenas no configurado", 0)

        http = getattr(requests, method)
        try:
            resp = http(url, timeout=self.timeout, **kwargs)
        except requests.Timeout:
            logger.warning(f"Timeout con el API de escenas: {method.upper()} {url}")
            raise SceneAPIError("Tiempo de espera agotado", 0)
        except requests.RequestException as e:
            logger.error(f"No se puede conectar con el API de escenas: {e}")
            raise SceneAPIError(f"Error de conexión: {e}", 0)

        try:
            payload = resp.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if not resp.ok:
            message = payload.get("error") or f"HTTP error! status: {resp.status_code}"
            logger.error(f"API de escenas (HTTP {resp.status_code}): {message}")
            raise SceneAPIError(message, resp.status_code)

        if not payload.get("success"):
            message = payload.get("error") or "Unknown API error"
            logger.error(f"API de escenas rechazó la petición: {message}")
            raise SceneAPIError(message, 500)

        return payload.get("data")

    # ─── Operaciones ──────────────────────────────────────────

    def save_scene(self, scene_data: dict) -> dict:
        """Crea una escena nueva en el servidor. Devuelve el documento con su id."""
        return self._request(
            "post",
            self._url(),
            json={"data": scene_data, "userId": self.user_id},
        )

    def load_scene(self, scene_id: str) -> dict:
        return self._request("get", self._url(scene_id))

    def update_scene(self, scene_id: str, scene_data: dict) -> dict:
        return self._request("put", self._url(scene_id), json={"data": scene_data})
