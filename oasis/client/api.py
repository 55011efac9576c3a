# oasis/client/api.py
"""HTTP client for the city server, plus a background resource refresher."""
from __future__ import annotations

import logging
import threading
from typing import Any, Optional

import httpx

from oasis.client.predictive import PredictiveResources
from oasis.config import API_URL, CLIENT_REFRESH_SECONDS

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A rejection from the server, carrying its error code and message."""

    def __init__(self, status_code: int, code: str, message: str, detail: Optional[dict] = None):
        super().__init__(f"{status_code} {code}: {message}")
        self.status_code = status_code
        self.code = code
        self.message = message
        self.detail = detail or {}


class CityClient:
    """Thin wrapper over the JSON API for one signed-in profile."""

    def __init__(
        self,
        profile_id: str,
        *,
        base_url: str = API_URL,
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self.profile_id = profile_id
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self._owns_http = http is None
        self.resources = PredictiveResources()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "CityClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        resp = self._http.request(method, path, **kwargs)
        if resp.is_success:
            return resp.json()

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {"detail": body}
        detail = {k: v for k, v in body.items() if k not in ("error", "message")}
        raise ApiError(
            resp.status_code,
            str(body.get("error", "http_error")),
            str(body.get("message", resp.reason_phrase)),
            detail,
        )

    # ----------------------------
    # Actions
    # ----------------------------

    def sign_in(self, username: str, email: str) -> dict:
        profile = self._call(
            "POST",
            "/api/profile",
            json={"id": self.profile_id, "username": username, "email": email},
        )
        self.resources.replace(profile)
        return profile

    def refresh_resources(self) -> dict:
        snapshot = self._call("GET", f"/api/profile/{self.profile_id}/resources")
        self.resources.replace(snapshot)
        return snapshot

    def buildings(self) -> list[dict]:
        return self._call("GET", f"/api/profile/{self.profile_id}/buildings")

    def build(self, building_type: str, slot_index: int) -> dict:
        building = self._call(
            "POST",
            f"/api/profile/{self.profile_id}/buildings",
            json={"building_type": building_type, "slot_index": slot_index},
        )
        # Stocks were debited server side; drop the local baseline
        self.refresh_resources()
        return building

    def upgrade(self, building_id: int) -> dict:
        building = self._call("POST", f"/api/buildings/{building_id}/upgrade")
        self.refresh_resources()
        return building

    def catalog(self) -> dict:
        return self._call("GET", "/api/building-config")


class ResourceRefresher:
    """Re-fetches the resource snapshot on a fixed interval in a daemon thread."""

    def __init__(self, client: CityClient, interval: float = CLIENT_REFRESH_SECONDS):
        self.client = client
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=2.0)

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.client.refresh_resources()
            except (httpx.HTTPError, ApiError) as exc:
                # Keep ticking on the old baseline; the next round retries
                logger.warning("resource refresh failed: %s", exc)
            self._stop_event.wait(self.interval)
