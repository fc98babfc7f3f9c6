"""HTTP client for the OfficeHub REST API."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional
from urllib.parse import urljoin

import requests

logger = logging.getLogger(__name__)


class ApiError(RuntimeError):
    """Failure while talking to the API."""

    def __init__(self, message: str, *, response: Optional[requests.Response] = None,
                 status_code: Optional[int] = None, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.response = response
        self.status_code = status_code if status_code is not None else (
            response.status_code if response is not None else None
        )
        self.detail = detail or message


def _error_detail(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(body, Mapping):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if value:
                return str(value)
    return response.text.strip()


class ApiClient:
    """Wraps the HTTP calls to the OfficeHub API."""

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: int = 15) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.token = token
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    def _request(self, method: str, path: str, **kwargs):
        url = self._url(path)
        kwargs.setdefault("timeout", self.timeout)
        headers = kwargs.setdefault("headers", {})
        headers.update(self._headers())
        try:
            response = requests.request(method, url, **kwargs)
        except requests.RequestException as exc:
            raise ApiError(str(exc)) from exc

        if response.status_code >= 400:
            detail = _error_detail(response)
            raise ApiError(
                f"API error {response.status_code}: {detail or response.reason}",
                response=response,
                detail=detail or None,
            )

        if response.headers.get("Content-Type", "").startswith("application/json"):
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                raise ApiError(f"Invalid JSON from {url}", response=response) from exc
        return response.content

    @staticmethod
    def _resource_path(resource: str, item_id: Any = None) -> str:
        path = "/api/" + resource.strip("/")
        if item_id is not None:
            path += f"/{item_id}"
        return path

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------
    def list_collection(self, resource: str, params: Optional[Mapping[str, Any]] = None) -> list[dict]:
        data = self._request("GET", self._resource_path(resource), params=dict(params or {}))
        if not isinstance(data, list):
            raise ApiError(f"Unexpected response shape from {resource}: expected a list")
        logger.debug("Fetched %d items from %s", len(data), resource)
        return data

    def create_item(self, resource: str, payload: Mapping[str, Any]) -> dict:
        data = self._request("POST", self._resource_path(resource), json=dict(payload))
        return data if isinstance(data, dict) else {}

    def update_item(self, resource: str, item_id: Any, payload: Mapping[str, Any]) -> dict:
        data = self._request("PUT", self._resource_path(resource, item_id), json=dict(payload))
        return data if isinstance(data, dict) else {}

    def delete_item(self, resource: str, item_id: Any) -> None:
        self._request("DELETE", self._resource_path(resource, item_id))

    def put_action(self, path: str, params: Optional[Mapping[str, Any]] = None) -> dict:
        """Call an action endpoint such as ``leave-requests/hr/{id}/approve``."""

        data = self._request("PUT", self._resource_path(path), params=dict(params or {}))
        return data if isinstance(data, dict) else {}

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------
    def submit_multipart(self, path: str, file_path: Path, metadata_field: str,
                         metadata: Mapping[str, Any], method: str = "POST") -> dict:
        """Send a file together with JSON metadata in one multipart request."""

        with file_path.open("rb") as file_handle:
            files = {"file": (file_path.name, file_handle)}
            data = {metadata_field: json.dumps(dict(metadata))}
            result = self._request(method, self._resource_path(path), files=files, data=data)
        return result if isinstance(result, dict) else {}

    def upload_file(self, path: str, file_path: Path, method: str = "POST") -> dict:
        """Upload a file on its own; the response references the stored file."""

        with file_path.open("rb") as file_handle:
            files = {"file": (file_path.name, file_handle)}
            result = self._request(method, self._resource_path(path), files=files)
        return result if isinstance(result, dict) else {}

    def file_url(self, file_path: str) -> str:
        """Absolute download URL for a stored file path."""

        if not file_path:
            return ""
        if file_path.startswith(("http://", "https://")):
            return file_path.replace("http://", "https://", 1)
        clean_path = file_path.lstrip("/")
        if not clean_path.startswith("uploads/"):
            clean_path = f"uploads/{clean_path}"
        return self._url(clean_path)


__all__ = ["ApiClient", "ApiError"]
