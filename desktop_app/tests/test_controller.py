from dataclasses import replace
from pathlib import Path

import pytest

from officehub_desktop.api_client import ApiError
from officehub_desktop.controller import ListViewController, ValidationError, validate_required
from officehub_desktop.date_ranges import ViewMode
from officehub_desktop.models import SortOrder
from officehub_desktop.pages import get_page

from conftest import FakeApiClient

MATERIAL = {"name": "Cable", "partNumber": "C-1", "quantity": 5, "type": "in"}


def _controller(client, key: str, **kwargs) -> ListViewController:
    return ListViewController(client, get_page(key), **kwargs)


@pytest.fixture()
def attendance(fake_client, attendance_dtos) -> ListViewController:
    fake_client.collections["attendance/by-date-range"] = attendance_dtos
    controller = _controller(fake_client, "attendance")
    assert controller.refresh()
    return controller


@pytest.fixture()
def materials(fake_client) -> ListViewController:
    fake_client.collections["materials"] = [
        {"id": 1, **MATERIAL},
        {"id": 2, "name": "Drill", "partNumber": "D-7", "quantity": 1, "type": "out"},
    ]
    controller = _controller(fake_client, "materials")
    controller.refresh()
    return controller


# ----------------------------------------------------------------------
# Fetching
# ----------------------------------------------------------------------
def test_refresh_replaces_records(materials, fake_client) -> None:
    fake_client.collections["materials"] = [{"id": 3, "name": "Tape", "type": "in"}]
    assert materials.refresh()
    assert [record.id for record in materials.records] == [3]
    assert materials.error is None
    assert not materials.loading


def test_failed_refresh_keeps_previous_records(fake_client) -> None:
    fake_client.collections["employees"] = [{"employeeId": "E1", "employeeName": "Asha"}]
    controller = _controller(fake_client, "employees")
    controller.refresh()

    fake_client.failures["list:employees"] = ApiError("API error 500: down", status_code=500, detail="down")
    assert not controller.refresh()
    assert controller.error == "Failed to fetch employees: down"
    assert [record.employee_id for record in controller.records] == ["E1"]
    assert not controller.loading


def test_refresh_skips_non_object_items(fake_client) -> None:
    fake_client.collections["employees"] = [{"employeeId": "E1"}, "garbage", None]
    controller = _controller(fake_client, "employees")
    controller.refresh()
    assert len(controller.records) == 1


def test_only_latest_refresh_is_applied(fake_client) -> None:
    class ReentrantClient(FakeApiClient):
        controller = None

        def list_collection(self, resource, params=None):
            if len(self.calls) == 0:
                stale = super().list_collection(resource, params)
                self.collections[resource] = [{"id": 9, "name": "Fresh", "type": "in"}]
                self.controller.refresh()
                return stale
            return super().list_collection(resource, params)

    client = ReentrantClient()
    client.collections["materials"] = [{"id": 1, "name": "Stale", "type": "in"}]
    controller = _controller(client, "materials")
    client.controller = controller

    assert not controller.refresh()
    assert [record.name for record in controller.records] == ["Fresh"]


def test_list_path_uses_context(fake_client) -> None:
    controller = _controller(fake_client, "memos", context={"user_id": "ADM01"})
    controller.refresh()
    assert fake_client.calls[0][:2] == ("list", "memos/admin/ADM01")


def test_view_params_are_sent_and_refetched(fake_client) -> None:
    controller = _controller(fake_client, "attendance")
    assert set(controller.view_params) == {"startDate", "endDate"}

    controller.set_view_params(startDate="2024-06-01", endDate="2024-06-30")
    assert fake_client.calls[-1] == (
        "list", "attendance/by-date-range", {"startDate": "2024-06-01", "endDate": "2024-06-30"},
    )


def test_pages_without_ranges_send_no_params(materials, fake_client) -> None:
    assert fake_client.calls[0] == ("list", "materials", {})


def test_fetch_auxiliary_reports_errors_per_source(fake_client) -> None:
    fake_client.collections["employees"] = [{"employeeId": "E1"}]
    fake_client.failures["list:bank-details"] = ApiError("API error 503: offline", detail="offline")
    controller = _controller(fake_client, "employees", fetch_workers=2)

    results = controller.fetch_auxiliary({"employees": "employees", "bank_details": "bank-details"})

    assert results["employees"].items == [{"employeeId": "E1"}]
    assert results["employees"].error is None
    assert results["bank_details"].items == []
    assert results["bank_details"].error == "offline"
    assert controller.fetch_auxiliary({}) == {}


# ----------------------------------------------------------------------
# Derived views
# ----------------------------------------------------------------------
def test_search_is_case_insensitive(attendance) -> None:
    attendance.set_search("as")
    assert [record.employee_name for record in attendance.visible_records()] == ["Asha Rao"]


def test_category_filter(attendance) -> None:
    assert attendance.categories() == ["HR", "IT", "Unknown"]
    attendance.set_category("hr")
    assert [record.employee_id for record in attendance.filtered_records()] == ["EMP001"]
    attendance.set_category("")
    assert len(attendance.filtered_records()) == 3


def test_sort_toggles(attendance) -> None:
    attendance.toggle_sort_asc()
    assert [record.id for record in attendance.visible_records()] == ["2", "1", "3"]
    attendance.toggle_sort_desc()
    assert attendance.list_state.sort_order is SortOrder.DESC
    assert [record.id for record in attendance.visible_records()] == ["1", "2", "3"]
    attendance.toggle_sort_desc()
    assert [record.id for record in attendance.visible_records()] == ["1", "2", "3"]
    attendance.toggle_sort_asc()
    attendance.reset_sort()
    assert attendance.list_state.sort_order is SortOrder.NONE


def test_stats_follow_filters(attendance) -> None:
    summary = attendance.stats()
    assert summary.total == 3
    assert summary.count("late") == 1
    assert summary.count("present") == 2
    assert summary.count("absent") == 0
    assert summary.average == "5.3"

    attendance.set_category("IT")
    assert attendance.stats().total == 1
    assert attendance.stats().count("late") == 0


def test_find(materials) -> None:
    assert materials.find("2").name == "Drill"
    assert materials.find(99) is None


# ----------------------------------------------------------------------
# Mutations
# ----------------------------------------------------------------------
def test_create_appends_server_record(materials, fake_client) -> None:
    fake_client.create_response = {"id": 42, **MATERIAL, "name": "Cable (server)"}
    notices = []
    materials.subscribe(notices.append)

    record = materials.create(MATERIAL)

    assert record.id == 42
    matching = [item for item in materials.records if item.id == 42]
    assert len(matching) == 1
    assert matching[0].name == "Cable (server)"
    assert notices[-1].level == "success"
    assert notices[-1].message == "Material transaction created successfully"


def test_create_replaces_record_already_fetched(materials, fake_client) -> None:
    fake_client.create_response = {"id": 2, "name": "Drill v2", "type": "out"}
    materials.create(MATERIAL)
    assert [record.name for record in materials.records] == ["Cable", "Drill v2"]


def test_create_with_missing_fields_makes_no_call(materials, fake_client) -> None:
    calls_before = len(fake_client.calls)
    assert materials.create({"name": "Cable"}) is None
    assert len(fake_client.calls) == calls_before
    assert materials.notices[-1].level == "error"
    assert materials.notices[-1].message == "Please fill in all required fields: partNumber, quantity, type"


def test_create_failure_reports_notice(materials, fake_client) -> None:
    fake_client.failures["create"] = ApiError("API error 400: Duplicate part", detail="Duplicate part")
    assert materials.create(MATERIAL) is None
    assert len(materials.records) == 2
    assert materials.notices[-1].message == "Failed to create material transaction: Duplicate part"


def test_create_rejects_empty_body(materials, fake_client) -> None:
    fake_client.create_response = {}
    assert materials.create(MATERIAL) is None
    assert len(materials.records) == 2
    assert materials.notices[-1].level == "error"


def test_update_replaces_in_place(materials) -> None:
    record = materials.update(1, {**MATERIAL, "quantity": 8})
    assert record.quantity == 8
    assert [item.quantity for item in materials.records] == [8, 1]
    assert materials.notices[-1].message == "Material transaction updated successfully"


def test_failed_update_leaves_records_untouched(materials, fake_client) -> None:
    before = list(materials.records)
    fake_client.failures["update"] = ApiError("API error 409: conflict", detail="conflict")
    assert materials.update(1, {**MATERIAL, "quantity": 8}) is None
    assert materials.records == before
    assert materials.notices[-1].message == "Failed to update material transaction: conflict"


def test_remove(materials, fake_client) -> None:
    assert materials.remove(1)
    assert [record.id for record in materials.records] == [2]
    assert fake_client.calls[-1] == ("delete", "materials", 1)


def test_failed_remove_keeps_record(materials, fake_client) -> None:
    fake_client.failures["delete"] = ApiError("API error 404: gone", detail="gone")
    assert not materials.remove(1)
    assert len(materials.records) == 2
    assert materials.notices[-1].message == "Failed to delete material transaction: gone"


def test_read_only_page_rejects_mutations(attendance, fake_client) -> None:
    calls_before = len(fake_client.calls)
    assert attendance.create({"employeeId": "EMP009"}) is None
    assert not attendance.remove("1")
    assert len(fake_client.calls) == calls_before
    assert attendance.notices[0].message == "Failed to create attendance record: Attendance is read-only"


def test_validate_required() -> None:
    validate_required({"a": "x"}, ("a",))
    with pytest.raises(ValidationError) as excinfo:
        validate_required({"a": "", "b": None}, ("a", "b"))
    assert excinfo.value.missing == ["a", "b"]


# ----------------------------------------------------------------------
# Uploads
# ----------------------------------------------------------------------
@pytest.fixture()
def receipt(tmp_path: Path) -> Path:
    path = tmp_path / "ticket.pdf"
    path.write_bytes(b"%PDF-1.4")
    return path


def test_travel_create_sends_multipart(fake_client, receipt) -> None:
    controller = _controller(fake_client, "travel")
    payload = {"vendor": "Air India", "fromDate": "2024-06-01", "toDate": "2024-06-03"}

    record = controller.create(payload, receipt)

    assert fake_client.calls[-1] == ("multipart", "travel/upload", "ticket.pdf", "travelData", payload, "POST")
    assert record.document_path == "uploads/ticket.pdf"
    assert controller.records == [record]


def test_petty_cash_update_uses_item_path(fake_client, receipt) -> None:
    fake_client.collections["petty-cash"] = [{"id": 5, "item_name": "Tea", "paid_to": "Cafe", "amount": 40}]
    controller = _controller(fake_client, "petty-cash")
    controller.refresh()

    payload = {"item_name": "Tea", "paid_to": "Cafe", "amount": 45}
    controller.update(5, payload, receipt)

    assert fake_client.calls[-1] == ("multipart", "petty-cash/upload/5", "ticket.pdf", "pettyCashData", payload, "PUT")
    assert controller.records[0].amount == 45


def test_json_create_without_file(fake_client) -> None:
    controller = _controller(fake_client, "travel")
    controller.create({"vendor": "Rail", "fromDate": "2024-06-01", "toDate": "2024-06-02"})
    assert fake_client.calls[-1][0] == "create"


def test_document_upload_returns_the_record(fake_client, receipt) -> None:
    controller = _controller(fake_client, "documents")
    record = controller.create({"employeeId": "E1", "documentType": "PAN"}, receipt)

    assert fake_client.calls[-1] == ("upload", "hr/upload/PAN/E1", "ticket.pdf", "POST")
    assert record.document_type == "pan"
    assert record.file_name == "ticket.pdf"


def test_upload_path_placeholders_must_be_filled(fake_client, receipt) -> None:
    page = replace(get_page("documents"), required_fields=())
    controller = ListViewController(fake_client, page)
    assert controller.create({"documentType": "PAN"}, receipt) is None
    assert controller.notices[-1].message == "Please fill in all required fields: employeeId"
    assert fake_client.calls == []


def test_upload_then_reference_embeds_file_uri(fake_client, receipt) -> None:
    class ReferencingClient(FakeApiClient):
        def upload_file(self, path, file_path, method="POST"):
            super().upload_file(path, file_path, method)
            return {"fileDownloadUri": "https://files.example.com/ticket.pdf"}

    client = ReferencingClient()
    page = replace(get_page("documents"), reference_field="documentUrl")
    controller = ListViewController(client, page)

    controller.create({"employeeId": "E1", "documentType": "PAN"}, receipt)

    assert client.calls[-1][0] == "create"
    assert client.calls[-1][2]["documentUrl"] == "https://files.example.com/ticket.pdf"


# ----------------------------------------------------------------------
# Actions
# ----------------------------------------------------------------------
@pytest.fixture()
def leaves(fake_client) -> ListViewController:
    fake_client.collections["leave-requests/hr/all"] = [
        {"id": 7, "employeeName": "Asha", "leaveType": "Casual", "status": "PENDING"},
    ]
    controller = _controller(fake_client, "leaves")
    controller.refresh()
    return controller


def test_approve_replaces_record(leaves, fake_client) -> None:
    record = leaves.apply_action(7, "approve", {"hrComments": "Approved"})

    assert fake_client.calls[-1] == ("action", "leave-requests/hr/7/approve", {"hrComments": "Approved"})
    assert record.status == "approved"
    assert leaves.records[0].status == "approved"
    assert leaves.notices[-1].message == "Leave request approved successfully"


def test_reject_requires_comments(leaves, fake_client) -> None:
    calls_before = len(fake_client.calls)
    assert leaves.apply_action(7, "reject") is None
    assert len(fake_client.calls) == calls_before
    assert leaves.notices[-1].message == "Please fill in all required fields: hrComments"

    leaves.apply_action(7, "reject", {"hrComments": "Short staffed"})
    assert fake_client.calls[-1][1] == "leave-requests/hr/7/reject"
    assert leaves.notices[-1].message == "Leave request rejected successfully"


def test_failed_action_keeps_status(leaves, fake_client) -> None:
    fake_client.failures["action"] = ApiError("API error 500: nope", detail="nope")
    assert leaves.apply_action(7, "approve") is None
    assert leaves.records[0].status == "pending"
    assert leaves.notices[-1].message == "Failed to approve leave request: nope"


def test_unknown_action(leaves) -> None:
    assert leaves.apply_action(7, "archive") is None
    assert leaves.notices[-1].message == "Unsupported action: archive"


# ----------------------------------------------------------------------
# Create form, range changes, attachments and details
# ----------------------------------------------------------------------
def test_blank_create_form_is_rejected(fake_client) -> None:
    controller = _controller(fake_client, "employees")
    template = controller.page.blank_payload()
    template["employeeId"] = "E9"

    assert controller.create(template) is None
    assert fake_client.calls == []
    assert controller.notices[-1].message == "Please fill in all required fields: employeeName, department"


def test_blank_memo_form_is_rejected(fake_client) -> None:
    controller = _controller(fake_client, "memos", context={"user_id": "ADM01"})
    assert controller.create(controller.page.blank_payload()) is None
    assert fake_client.calls == []
    assert controller.notices[-1].message == "Please fill in all required fields: subject, content"


def test_new_range_starts_unsorted(attendance, fake_client) -> None:
    attendance.toggle_sort_asc()
    attendance.set_view_mode(ViewMode.MONTH)
    assert attendance.list_state.sort_order is SortOrder.NONE
    assert [record.id for record in attendance.visible_records()] == ["1", "2", "3"]


def test_file_link(fake_client) -> None:
    fake_client.collections["hr/documents"] = [
        {"id": 1, "employeeId": "E1", "documentType": "PAN", "fileDownloadUri": "docs/pan.pdf"},
        {"id": 2, "employeeId": "E1", "documentType": "AADHAAR"},
    ]
    controller = _controller(fake_client, "documents")
    controller.refresh()

    assert controller.file_link(1) == "https://files.example.com/docs/pan.pdf"
    assert controller.file_link(2) is None
    assert controller.file_link(99) is None


def test_file_link_without_attachments(materials) -> None:
    assert materials.file_link(1) is None


def test_review_details(fake_client) -> None:
    employee = {"employeeId": "E1", "employeeName": "Asha Rao"}
    fake_client.collections["performance-reviews"] = [
        {"id": 1, "employee": employee, "rating": 3, "lastReviewDate": "2024-01-10", "reviewer": "Priya"},
        {"id": 2, "employee": employee, "rating": 5, "lastReviewDate": "2024-03-05", "reviewer": "Priya"},
        {"id": 3, "employee": {"employeeId": "E2"}, "rating": 1, "lastReviewDate": "2024-03-01"},
    ]
    controller = _controller(fake_client, "reviews")
    controller.refresh()

    assert controller.details(1) == (
        "Asha Rao: average rating 4.0 over 2 review(s), latest 5.0 (Increasing)\n"
        "Monthly averages: Jan 3.0, Mar 5.0"
    )
    assert controller.details(99) == ""


def test_pages_without_details(materials) -> None:
    assert materials.details(1) == ""
