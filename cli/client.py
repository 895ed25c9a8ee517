from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Thin HTTP client for the roast log service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=30.0)

    def close(self) -> None:
        self._client.close()

    def create_session(
        self,
        target_duration_minutes: Optional[int],
        interval_seconds: Optional[int],
        starting_reading: Optional[float],
        details: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "target_duration_minutes": target_duration_minutes,
            "interval_seconds": interval_seconds,
            "starting_reading": starting_reading,
        }
        if details:
            payload["details"] = details
        return self._request("POST", "/sessions", json=payload)

    def get_session(self, session_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/sessions/{session_id}")

    def start(self, session_id: str) -> Dict[str, Any]:
        return self._request("POST", f"/sessions/{session_id}/start")

    def stop(self, session_id: str) -> Dict[str, Any]:
        return self._request("POST", f"/sessions/{session_id}/stop")

    def reset(self, session_id: str) -> Dict[str, Any]:
        return self._request("POST", f"/sessions/{session_id}/reset")

    def submit_reading(
        self, session_id: str, value: float, boundary_index: Optional[int] = None
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"value": value}
        if boundary_index is not None:
            payload["boundary_index"] = boundary_index
        return self._request("POST", f"/sessions/{session_id}/readings", json=payload)

    def dismiss_prompt(
        self, session_id: str, boundary_index: Optional[int] = None
    ) -> Dict[str, Any]:
        params = {"boundary_index": boundary_index} if boundary_index is not None else None
        return self._request("POST", f"/sessions/{session_id}/prompts/dismiss", params=params)

    def correct_reading(self, session_id: str, boundary_index: int, value: float) -> Dict[str, Any]:
        return self._request(
            "PUT",
            f"/sessions/{session_id}/readings/{boundary_index}",
            json={"value": value},
        )

    def get_series(self, session_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/sessions/{session_id}/series")

    def get_boundaries(self, session_id: str) -> List[int]:
        payload = self._request("GET", f"/sessions/{session_id}/boundaries")
        return list(payload.get("boundaries") or [])

    def get_report(self, session_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/sessions/{session_id}/report")

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
