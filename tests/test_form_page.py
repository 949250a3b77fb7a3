import base64

from fastapi.testclient import TestClient

from booking_intake.forms.presets import PRESET_SPECIAL_TERMS

PDF = ("itinerary.pdf", b"%PDF-1.4", "application/pdf")


def _form(**changes) -> dict:
    data = {
        "meals_provided": "yes",
        "flight_information": "SQ123",
        "tour_fair_includes": ["x"],
        "tour_fair_excludes": ["y"],
        "file_size_limit_enabled": "on",
        "language_choice": "English",
    }
    data.update(changes)
    return data


def _stored(repository) -> dict:
    return next(iter(repository._bookings.values()))


def test_form_page_renders_presets(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Hotel Portage in/out luggage" in response.text
    assert "g)" in response.text
    assert 'accept=".pdf,.doc,.docx"' in response.text


def test_extended_form_accepts_more_file_types(app_factory):
    client = TestClient(app_factory(FORM_VARIANT="extended"))

    assert 'accept=".pdf,.doc,.docx,.xlsx,.md"' in client.get("/").text


def test_form_post_stores_booking(client, repository):
    response = client.post("/travel-booking/form", data=_form(), files={"document": PDF})

    assert response.status_code == 200
    assert "no webhook configured" in response.text

    record = _stored(repository)
    assert record["meals_provided"] is True
    assert record["tour_fair_includes"] == ["x"]
    assert record["itinerary_language"] == "English"
    assert record["uploaded_file"]["filename"] == "itinerary.pdf"
    assert base64.b64decode(record["uploaded_file"]["data"]) == b"%PDF-1.4"


def test_form_post_with_custom_language(client, repository):
    data = _form(language_choice="custom", custom_language="  Malay ")

    client.post("/travel-booking/form", data=data, files={"document": PDF})

    assert _stored(repository)["itinerary_language"] == "Malay"


def test_form_post_applies_placeholder_edits(client, repository):
    data = _form(
        special_terms_enabled="on",
        special_terms=[PRESET_SPECIAL_TERMS[0]],
        special_terms_0_1="RM650",
    )

    client.post("/travel-booking/form", data=data, files={"document": PDF})

    assert _stored(repository)["special_terms"] == [
        "A non-refundable deposit of {{RM650}} per person is required upon confirmation"
    ]


def test_form_post_rejects_wrong_file_type(client, repository):
    response = client.post(
        "/travel-booking/form",
        data=_form(),
        files={"document": ("photo.png", b"\x89PNG", "image/png")},
    )

    assert response.status_code == 400
    assert "Invalid file type. Please upload PDF, DOC, or DOCX files only." in response.text
    assert "Please fix the validation errors before submitting." in response.text
    assert len(repository) == 0


def test_form_post_without_language(client, repository):
    data = _form()
    del data["language_choice"]

    response = client.post("/travel-booking/form", data=data, files={"document": PDF})

    assert response.status_code == 400
    assert "Please select or enter an itinerary language" in response.text
    assert len(repository) == 0


def test_form_post_without_file(client, repository):
    response = client.post("/travel-booking/form", data=_form())

    assert response.status_code == 400
    assert "Document upload is required" in response.text
    assert len(repository) == 0
