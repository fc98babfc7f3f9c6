"""Generic list view controller shared by every list page.

The controller owns the fetched records of one page and runs them through the
filter, sort and aggregate pipeline. Mutations are reconciled with the
server-confirmed record only after the backend answered.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Sequence, TypeVar

from .api_client import ApiClient, ApiError
from .date_ranges import ViewMode, date_range
from .filters import apply_filters, distinct_values
from .models import ALL_CATEGORIES, ListState, Notice, SortOrder, StatsSummary
from .pages import PageDefinition, UploadMode
from .sorting import apply_sort

logger = logging.getLogger(__name__)

T = TypeVar("T")

NoticeListener = Callable[[Notice], None]


class ValidationError(ValueError):
    """Required fields are missing from a mutation payload."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Please fill in all required fields: {', '.join(self.missing)}")


def validate_required(payload: Mapping[str, Any], required_fields: Sequence[str]) -> None:
    missing = [name for name in required_fields if not payload.get(name)]
    if missing:
        raise ValidationError(missing)


@dataclass(slots=True)
class AuxiliaryResult:
    """Outcome of one reference-data fetch."""

    items: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None


class ListViewController(Generic[T]):
    """Fetch, filter, sort, aggregate and mutate the records of one page."""

    def __init__(
        self,
        api_client: ApiClient,
        page: PageDefinition,
        *,
        context: Optional[Mapping[str, Any]] = None,
        fetch_workers: int = 4,
    ) -> None:
        self.api_client = api_client
        self.page = page
        self.context = dict(context or {})
        self.fetch_workers = max(1, fetch_workers)

        self.records: List[T] = []
        self.loading = False
        self.error: Optional[str] = None
        self.list_state = ListState()
        self.view_params: Dict[str, str] = date_range(ViewMode.TODAY) if page.uses_date_range else {}
        self.notices: List[Notice] = []

        self._lock = threading.RLock()
        self._listeners: List[NoticeListener] = []
        self._fetch_generation = 0

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------
    def refresh(self) -> bool:
        """Replace the records with a fresh fetch.

        On failure the previous records stay in place and ``error`` is set.
        Only the response of the most recent call is applied.
        """

        with self._lock:
            self._fetch_generation += 1
            generation = self._fetch_generation
            self.loading = True
            self.error = None
            params = dict(self.view_params)

        try:
            raw_items = self.api_client.list_collection(self.page.list_path(self.context), params)
            records = [self.page.record_factory(item) for item in raw_items if isinstance(item, Mapping)]
        except ApiError as exc:
            logger.warning("Fetching %s failed: %s", self.page.resource, exc)
            with self._lock:
                if generation == self._fetch_generation:
                    self.loading = False
                    self.error = f"Failed to fetch {self.page.title.lower()}: {exc.detail}"
            return False

        with self._lock:
            if generation != self._fetch_generation:
                return False
            self.records = records
            self.loading = False
        logger.debug("Loaded %d %s records", len(records), self.page.key)
        return True

    def set_view_params(self, **params: str) -> bool:
        """Change the server-side range parameters and re-fetch.

        A new range starts unsorted.
        """

        with self._lock:
            self.view_params = {key: value for key, value in params.items() if value}
            self.list_state.sort_order = SortOrder.NONE
        return self.refresh()

    def set_view_mode(self, mode: ViewMode) -> bool:
        return self.set_view_params(**date_range(mode))

    def fetch_auxiliary(self, sources: Mapping[str, str]) -> Dict[str, AuxiliaryResult]:
        """Fetch reference collections concurrently.

        Every source reports its own error; one failure never hides the
        items of the others.
        """

        if not sources:
            return {}

        def _fetch(resource: str) -> AuxiliaryResult:
            try:
                return AuxiliaryResult(items=self.api_client.list_collection(resource))
            except ApiError as exc:
                logger.warning("Fetching %s failed: %s", resource, exc)
                return AuxiliaryResult(error=exc.detail)

        workers = min(self.fetch_workers, len(sources))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {name: executor.submit(_fetch, resource) for name, resource in sources.items()}
            return {name: future.result() for name, future in futures.items()}

    # ------------------------------------------------------------------
    # Filter / sort state
    # ------------------------------------------------------------------
    def set_search(self, term: str) -> None:
        with self._lock:
            self.list_state.search_term = term or ""

    def set_category(self, category: str) -> None:
        with self._lock:
            self.list_state.selected_category = category or ALL_CATEGORIES

    def toggle_sort_asc(self) -> None:
        with self._lock:
            self.list_state.sort_order = self.list_state.sort_order.toggle_asc()

    def toggle_sort_desc(self) -> None:
        with self._lock:
            self.list_state.sort_order = self.list_state.sort_order.toggle_desc()

    def reset_sort(self) -> None:
        with self._lock:
            self.list_state.sort_order = SortOrder.NONE

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------
    def filtered_records(self) -> List[T]:
        with self._lock:
            return apply_filters(self.records, self.list_state, self.page.search_fields, self.page.category_field)

    def visible_records(self) -> List[T]:
        filtered = self.filtered_records()
        if self.page.sort_key is None:
            return filtered
        return apply_sort(filtered, self.list_state.sort_order, self.page.sort_key)

    def stats(self) -> StatsSummary:
        return self.page.summarize(self.filtered_records())

    def categories(self) -> List[str]:
        if not self.page.category_field:
            return []
        with self._lock:
            return distinct_values(self.records, self.page.category_field)

    def find(self, item_id: Any) -> Optional[T]:
        with self._lock:
            return next((record for record in self.records if self._same_id(record, item_id)), None)

    def file_link(self, item_id: Any) -> Optional[str]:
        """Download URL of the file attached to a record, if any."""

        record = self.find(item_id) if self.page.file_field else None
        path = getattr(record, self.page.file_field, None) if record is not None else None
        if not path:
            return None
        return self.api_client.file_url(path)

    def details(self, item_id: Any) -> str:
        record = self.find(item_id) if self.page.detail_fn else None
        if record is None:
            return ""
        with self._lock:
            records = list(self.records)
        return self.page.detail_fn(records, record)

    # ------------------------------------------------------------------
    # Notices
    # ------------------------------------------------------------------
    def subscribe(self, listener: NoticeListener) -> None:
        self._listeners.append(listener)

    def _notify(self, level: str, message: str) -> Notice:
        notice = Notice(level=level, message=message)
        with self._lock:
            self.notices.append(notice)
        for listener in list(self._listeners):
            listener(notice)
        return notice

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def create(self, payload: Mapping[str, Any], file_path: Optional[Path] = None) -> Optional[T]:
        label = self.page.record_label
        try:
            self._check_writable()
            validate_required(payload, self.page.required_fields)
            data = self._send(payload, file_path)
        except ValidationError as exc:
            logger.info("Rejected %s create: %s", self.page.key, exc)
            self._notify("error", str(exc))
            return None
        except ApiError as exc:
            logger.warning("Creating %s failed: %s", self.page.resource, exc)
            self._notify("error", f"Failed to create {label.lower()}: {exc.detail}")
            return None

        record = self.page.record_factory(data)
        with self._lock:
            index = self._index_of(self.page.record_id(record))
            if index is None:
                self.records.append(record)
            else:
                self.records[index] = record
        self._notify("success", f"{label} created successfully")
        return record

    def update(self, item_id: Any, payload: Mapping[str, Any], file_path: Optional[Path] = None) -> Optional[T]:
        label = self.page.record_label
        try:
            self._check_writable()
            validate_required(payload, self.page.required_fields)
            data = self._send(payload, file_path, item_id=item_id)
        except ValidationError as exc:
            logger.info("Rejected %s update: %s", self.page.key, exc)
            self._notify("error", str(exc))
            return None
        except ApiError as exc:
            logger.warning("Updating %s/%s failed: %s", self.page.resource, item_id, exc)
            self._notify("error", f"Failed to update {label.lower()}: {exc.detail}")
            return None

        record = self.page.record_factory(data)
        self._replace(item_id, record)
        self._notify("success", f"{label} updated successfully")
        return record

    def remove(self, item_id: Any) -> bool:
        label = self.page.record_label
        try:
            self._check_writable()
            self.api_client.delete_item(self.page.resource, item_id)
        except ApiError as exc:
            logger.warning("Deleting %s/%s failed: %s", self.page.resource, item_id, exc)
            self._notify("error", f"Failed to delete {label.lower()}: {exc.detail}")
            return False

        with self._lock:
            self.records = [record for record in self.records if not self._same_id(record, item_id)]
        self._notify("success", f"{label} deleted successfully")
        return True

    def apply_action(self, item_id: Any, action: str, params: Optional[Mapping[str, Any]] = None) -> Optional[T]:
        """Run a page action such as approving a leave request."""

        params = dict(params or {})
        path = self.page.action_paths.get(action)
        if path is None:
            self._notify("error", f"Unsupported action: {action}")
            return None
        try:
            validate_required(params, self.page.action_required.get(action, ()))
            data = self.api_client.put_action(path.format(id=item_id), params)
        except ValidationError as exc:
            logger.info("Rejected %s %s: %s", self.page.key, action, exc)
            self._notify("error", str(exc))
            return None
        except ApiError as exc:
            logger.warning("Action %s on %s/%s failed: %s", action, self.page.resource, item_id, exc)
            self._notify("error", f"Failed to {action} {self.page.record_label.lower()}: {exc.detail}")
            return None

        record = self.page.record_factory(data) if data else None
        if record is not None:
            self._replace(item_id, record)
        else:
            self.refresh()
        done = action + ("d" if action.endswith("e") else "ed")
        self._notify("success", f"{self.page.record_label} {done} successfully")
        return record

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _check_writable(self) -> None:
        if self.page.read_only:
            raise ApiError(f"{self.page.title} is read-only")

    def _send(self, payload: Mapping[str, Any], file_path: Optional[Path], *, item_id: Any = None) -> Dict[str, Any]:
        page = self.page
        method = "POST" if item_id is None else "PUT"
        if file_path is None or page.upload_mode is UploadMode.NONE:
            if item_id is None:
                return page_result(self.api_client.create_item(page.resource, payload))
            return page_result(self.api_client.update_item(page.resource, item_id, payload))

        template = page.create_upload_path if item_id is None else page.update_upload_path
        if not template:
            raise ApiError(f"{page.title} does not accept file uploads")
        try:
            path = template.format_map({**payload, "id": item_id})
        except KeyError as exc:
            raise ValidationError([str(exc.args[0])]) from exc

        if page.upload_mode is UploadMode.MULTIPART:
            return page_result(
                self.api_client.submit_multipart(path, file_path, page.metadata_field or "data", payload, method=method)
            )

        uploaded = self.api_client.upload_file(path, file_path, method=method)
        if not page.reference_field:
            return page_result(uploaded)
        body = dict(payload)
        body[page.reference_field] = uploaded.get(page.reference_source)
        if item_id is None:
            return page_result(self.api_client.create_item(page.resource, body))
        return page_result(self.api_client.update_item(page.resource, item_id, body))

    def _same_id(self, record: Any, item_id: Any) -> bool:
        return str(self.page.record_id(record)) == str(item_id)

    def _index_of(self, item_id: Any) -> Optional[int]:
        for index, record in enumerate(self.records):
            if self._same_id(record, item_id):
                return index
        return None

    def _replace(self, item_id: Any, record: T) -> None:
        with self._lock:
            index = self._index_of(item_id)
            if index is not None:
                self.records[index] = record


def page_result(data: Any) -> Dict[str, Any]:
    """Server-confirmed record of a mutation; an empty body is an error."""

    if not isinstance(data, Mapping) or not data:
        raise ApiError("Unexpected response shape: expected the saved record")
    return dict(data)


__all__ = [
    "AuxiliaryResult",
    "ListViewController",
    "ValidationError",
    "validate_required",
]
