from __future__ import annotations

import datetime as dt
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import requests

from officehub_desktop.api_client import ApiError
from officehub_desktop.models import AttendanceRecord


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, *, content_type: str = "application/json",
                 text: Optional[str] = None, reason: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        self.headers = {"Content-Type": content_type} if content_type else {}
        if text is None:
            text = "" if body is None else json.dumps(body)
        self.text = text
        self.content = text.encode("utf-8")

    def json(self) -> Any:
        if not self.text:
            raise ValueError("No JSON body")
        return json.loads(self.text)


class RecordingTransport:
    """Replaces ``requests.request`` and replays queued responses."""

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.responses: List[Any] = []

    def queue(self, response: Any) -> None:
        self.responses.append(response)

    def __call__(self, method: str, url: str, **kwargs: Any) -> Any:
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0) if self.responses else FakeResponse(200, [])
        if isinstance(response, Exception):
            raise response
        return response


class FakeApiClient:
    """In-memory stand-in for :class:`ApiClient` used by controller tests."""

    def __init__(self) -> None:
        self.collections: Dict[str, List[Dict[str, Any]]] = {}
        self.failures: Dict[str, ApiError] = {}
        self.calls: List[tuple] = []
        self.next_id = 100
        self.create_response: Optional[Dict[str, Any]] = None

    def _fail(self, key: str) -> None:
        if key in self.failures:
            raise self.failures[key]

    def list_collection(self, resource: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        self.calls.append(("list", resource, dict(params or {})))
        self._fail(f"list:{resource}")
        return [dict(item) if isinstance(item, dict) else item for item in self.collections.get(resource, [])]

    def create_item(self, resource: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("create", resource, dict(payload)))
        self._fail("create")
        if self.create_response is not None:
            return dict(self.create_response)
        self.next_id += 1
        return {**payload, "id": self.next_id}

    def update_item(self, resource: str, item_id: Any, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("update", resource, item_id, dict(payload)))
        self._fail("update")
        return {**payload, "id": item_id}

    def delete_item(self, resource: str, item_id: Any) -> None:
        self.calls.append(("delete", resource, item_id))
        self._fail("delete")

    def put_action(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.calls.append(("action", path, dict(params or {})))
        self._fail("action")
        return {"id": path.split("/")[2], "status": "APPROVED", "employeeName": "Asha"}

    def submit_multipart(self, path: str, file_path: Path, metadata_field: str, metadata: Dict[str, Any],
                         method: str = "POST") -> Dict[str, Any]:
        self.calls.append(("multipart", path, file_path.name, metadata_field, dict(metadata), method))
        self._fail("multipart")
        self.next_id += 1
        return {**metadata, "id": self.next_id, "documentPath": f"uploads/{file_path.name}"}

    def upload_file(self, path: str, file_path: Path, method: str = "POST") -> Dict[str, Any]:
        self.calls.append(("upload", path, file_path.name, method))
        self._fail("upload")
        self.next_id += 1
        return {"id": self.next_id, "fileName": file_path.name, "documentType": path.split("/")[2]}

    def file_url(self, file_path: str) -> str:
        return f"https://files.example.com/{file_path.lstrip('/')}"


@pytest.fixture()
def transport(monkeypatch: pytest.MonkeyPatch) -> RecordingTransport:
    recorder = RecordingTransport()
    monkeypatch.setattr(requests, "request", recorder)
    return recorder


@pytest.fixture()
def fake_client() -> FakeApiClient:
    return FakeApiClient()


@pytest.fixture()
def sample_day() -> dt.date:
    return dt.date(2024, 6, 12)


@pytest.fixture()
def attendance_dtos() -> List[Dict[str, Any]]:
    return [
        {
            "id": 1,
            "employeeId": "EMP001",
            "employeeName": "Asha Rao",
            "department": "HR",
            "date": [2024, 6, 1],
            "checkInTime": "09:10",
            "checkOutTime": "18:00",
            "status": "present",
            "arrivalStatus": "Late",
            "workHours": 8.5,
            "workLocation": "Office",
        },
        {
            "id": 2,
            "employeeId": "EMP002",
            "employeeName": "Ravi Kumar",
            "department": "IT",
            "date": "2024-06-02T00:00:00",
            "checkInTime": [8, 50],
            "checkOutTime": None,
            "status": "present",
            "arrivalStatus": "On Time",
            "workHours": 7.5,
        },
        {
            "id": 3,
            "employeeId": "EMP003",
            "employeeName": None,
            "department": None,
            "date": "2024-06-03",
            "checkInTime": None,
            "status": "not_marked",
        },
    ]


@pytest.fixture()
def attendance_records(attendance_dtos) -> List[AttendanceRecord]:
    return [AttendanceRecord.from_dto(dto) for dto in attendance_dtos]
