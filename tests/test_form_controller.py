import asyncio

import httpx
import pytest

from booking_intake.api.v1.schemas import TravelBookingForm
from booking_intake.core.exceptions import ValidationError
from booking_intake.forms.attachments import CandidateFile
from booking_intake.forms.controller import TravelBookingFormController
from booking_intake.forms.drafts import FORM_STORAGE_KEY, DraftManager, MemoryDraftStorage
from booking_intake.forms.presets import PRESET_INCLUDES, PRESET_SPECIAL_TERMS


def _controller(client, storage=None, **kwargs) -> TravelBookingFormController:
    drafts = DraftManager(storage if storage is not None else MemoryDraftStorage())
    return TravelBookingFormController(client, drafts, autosave_delay=0.01, **kwargs)


def _fill(controller: TravelBookingFormController) -> None:
    controller.set_field("flight_information", "SQ123")
    controller.set_field("tour_fare", "2599")
    controller.attach(CandidateFile("itinerary.pdf", b"%PDF-1.4"))
    controller.choose_language("custom", " Malay ")


def _run_with_client(transport, scenario):
    async def main():
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            return await scenario(client)

    return asyncio.run(main())


def test_submit_end_to_end(app_factory, repository):
    storage = MemoryDraftStorage()

    async def scenario(client):
        controller = _controller(client, storage)
        _fill(controller)
        return controller, await controller.submit()

    controller, result = _run_with_client(httpx.ASGITransport(app=app_factory()), scenario)

    assert result.ok
    assert "no webhook configured" in result.message
    assert result.response["id"]
    assert len(repository) == 1

    record = next(iter(repository._bookings.values()))
    assert record["itinerary_language"] == "Malay"
    assert record["tour_fare"] == 2599.0
    assert record["tour_fair_includes"] == list(PRESET_INCLUDES)
    assert record["uploaded_file"]["filename"] == "itinerary.pdf"

    assert storage.get_item(FORM_STORAGE_KEY) is None
    assert controller.values == TravelBookingForm()
    assert controller.attachment.value is None
    assert controller.notices[-1] == result.message


def test_local_errors_never_reach_the_network():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    async def scenario(client):
        controller = _controller(client)
        return controller, await controller.submit()

    controller, result = _run_with_client(httpx.MockTransport(handler), scenario)

    assert calls == []
    assert result.ok is False
    assert result.message == "Document upload is required"
    assert set(controller.errors) == {"uploaded_file", "itinerary_language"}


def test_submission_in_flight_is_not_repeated():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    async def scenario(client):
        controller = _controller(client)
        _fill(controller)
        controller.submitting = True
        return await controller.submit()

    result = _run_with_client(httpx.MockTransport(handler), scenario)

    assert result.ok is False
    assert result.message == "A submission is already in progress"
    assert calls == []


def test_server_validation_errors_are_mapped_to_fields():
    body = {
        "success": False,
        "message": "Validation error",
        "errors": [{"field": "itinerary_language", "message": "Unsupported language"}],
    }

    async def scenario(client):
        controller = _controller(client)
        _fill(controller)
        return controller, await controller.submit()

    controller, result = _run_with_client(
        httpx.MockTransport(lambda request: httpx.Response(400, json=body)), scenario
    )

    assert result.ok is False
    assert result.message == "Validation error"
    assert controller.errors == {"itinerary_language": "Unsupported language"}
    assert controller.submitting is False


def test_non_json_error_reply_uses_status():
    async def scenario(client):
        controller = _controller(client)
        _fill(controller)
        return await controller.submit()

    result = _run_with_client(
        httpx.MockTransport(lambda request: httpx.Response(502, text="Bad Gateway")), scenario
    )

    assert result.message == "HTTP error! status: 502"


def test_network_failure_keeps_the_draft():
    storage = MemoryDraftStorage()

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async def scenario(client):
        controller = _controller(client, storage)
        _fill(controller)
        result = await controller.submit()
        await controller.autosaver.flush()
        return controller, result

    controller, result = _run_with_client(httpx.MockTransport(handler), scenario)

    assert result.ok is False
    assert result.message == "Failed to submit form. Please try again."
    assert controller.submitting is False
    assert controller.values.flight_information == "SQ123"
    assert storage.get_item(FORM_STORAGE_KEY) is not None


def test_edits_are_autosaved_after_the_quiet_period():
    storage = MemoryDraftStorage()

    async def scenario(client):
        controller = _controller(client, storage)
        controller.set_field("flight_information", "MH370")
        assert storage.get_item(FORM_STORAGE_KEY) is None
        await controller.autosaver.flush()

    _run_with_client(httpx.MockTransport(lambda request: httpx.Response(200)), scenario)

    restored = DraftManager(storage).load()
    assert restored.values.flight_information == "MH370"


def test_load_restores_draft_and_asks_for_the_file_again():
    storage = MemoryDraftStorage()
    DraftManager(storage).save(TravelBookingForm(
        flight_information="SQ123",
        tour_fair_includes=list(PRESET_INCLUDES) + ["Visa fee"],
        uploaded_file={"filename": "a.pdf", "size": 1, "type": "application/pdf", "data": "QQ=="},
    ))
    controller = _controller(httpx.AsyncClient(), storage)

    draft = controller.load()

    assert draft is not None
    assert controller.restored
    assert controller.needs_file_reselect
    assert controller.values.uploaded_file is None
    assert controller.includes.items[-1] == "Visa fee"
    assert "re-upload" in controller.notices[0]


def test_load_without_draft():
    controller = _controller(httpx.AsyncClient())

    assert controller.load() is None
    assert not controller.restored


def test_list_actions_follow_list_rules():
    controller = _controller(httpx.AsyncClient())

    with pytest.raises(ValidationError):
        controller.remove_item("tour_fair_includes", 0)

    index = controller.add_item("tour_fair_includes", "Visa fee")
    controller.edit_item("tour_fair_includes", index, "Visa fee (China)")
    assert controller.values.tour_fair_includes[-1] == "Visa fee (China)"

    controller.remove_item("tour_fair_includes", index)
    assert controller.values.tour_fair_includes == list(PRESET_INCLUDES)


def test_special_terms_quick_add_and_placeholder_edit():
    controller = _controller(httpx.AsyncClient())

    controller.quick_add_term(0)
    text = controller.edit_term_placeholder(0, 1, "RM650")

    assert text == PRESET_SPECIAL_TERMS[0].replace("{{RM500}}", "{{RM650}}")
    assert controller.values.special_terms == [text]


def test_unknown_language_is_rejected():
    controller = _controller(httpx.AsyncClient())

    with pytest.raises(ValidationError):
        controller.choose_language("Klingon")

    assert controller.choose_language("Chinese") == "Chinese"


def test_field_errors_clear_when_field_changes():
    controller = _controller(httpx.AsyncClient())
    controller.errors = {"tour_fare": "bad", "starting_date": "bad"}

    controller.set_field("tour_fare", "abc")

    assert controller.values.tour_fare is None
    assert controller.errors == {"starting_date": "bad"}


def test_error_reply_that_is_not_an_object_uses_status():
    async def scenario(client):
        controller = _controller(client)
        _fill(controller)
        return await controller.submit()

    result = _run_with_client(
        httpx.MockTransport(lambda request: httpx.Response(503, json=["upstream", "down"])), scenario
    )

    assert result.ok is False
    assert result.message == "HTTP error! status: 503"
    assert result.errors == []
