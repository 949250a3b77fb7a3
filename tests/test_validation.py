import pytest

from booking_intake.api.v1.schemas import TravelBookingForm, UploadedFile
from booking_intake.forms.validation import (
    FormVariant,
    coerce_count,
    coerce_price,
    first_error,
    to_submission,
    validate_for_submit,
)


def _attachment() -> UploadedFile:
    return UploadedFile(filename="a.pdf", size=1, type="application/pdf", data="QQ==")


def _complete_form(**changes) -> TravelBookingForm:
    values = {"uploaded_file": _attachment(), "itinerary_language": "English"}
    values.update(changes)
    return TravelBookingForm(**values)


@pytest.mark.parametrize("raw, expected", [
    ("1250.50", 1250.5),
    (" 99 ", 99.0),
    (300, 300.0),
    ("", None),
    ("abc", None),
    ("nan", None),
    (None, None),
])
def test_coerce_price(raw, expected):
    assert coerce_price(raw) == expected


@pytest.mark.parametrize("raw, expected", [("3", 3), (4, 4), ("", 1), ("two", 1), (None, 1)])
def test_coerce_count(raw, expected):
    assert coerce_count(raw) == expected


def test_complete_form_has_no_errors():
    assert validate_for_submit(_complete_form()) == []


def test_fresh_form_reports_missing_file_first():
    errors = validate_for_submit(TravelBookingForm())

    assert [e.field for e in errors] == ["uploaded_file", "itinerary_language"]
    assert first_error(errors).message == "Document upload is required"


def test_whitespace_language_is_rejected():
    errors = validate_for_submit(_complete_form(itinerary_language="   "))

    assert [e.field for e in errors] == ["itinerary_language"]


def test_empty_lists_are_reported_in_form_order():
    errors = validate_for_submit(_complete_form(tour_fair_includes=[], tour_fair_excludes=[]))

    assert [e.field for e in errors] == ["tour_fair_includes", "tour_fair_excludes"]


def test_basic_variant_ignores_hotel_and_counts():
    form = _complete_form(hotel_selection="", number_of_delegates=0)

    assert validate_for_submit(form, FormVariant.BASIC) == []
    payload = to_submission(form, FormVariant.BASIC)
    assert "hotel_selection" not in payload
    assert "number_of_delegates" not in payload


def test_extended_variant_requires_hotel_and_counts():
    form = _complete_form(hotel_selection=" ", number_of_delegates=0, number_of_tour_leaders=0)

    errors = validate_for_submit(form, FormVariant.EXTENDED)

    assert [(e.field, e.message) for e in errors] == [
        ("number_of_delegates", "At least 1 delegate is required"),
        ("number_of_tour_leaders", "At least 1 tour leader is required"),
        ("hotel_selection", "Hotel selection is required"),
    ]


def test_negative_price_is_rejected():
    errors = validate_for_submit(_complete_form(tour_fare=-1))

    assert [e.field for e in errors] == ["tour_fare"]


def test_to_submission_normalises_values():
    form = _complete_form(starting_date="", itinerary_language="  Malay ", special_terms=["t"])

    payload = to_submission(form)

    assert payload["starting_date"] is None
    assert payload["itinerary_language"] == "Malay"
    assert payload["special_terms"] == []
    assert payload["uploaded_file"]["filename"] == "a.pdf"


def test_first_error_of_empty_list():
    assert first_error([]) is None
