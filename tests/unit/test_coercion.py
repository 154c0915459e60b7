from datetime import UTC, datetime

from bson import ObjectId

from resumeforge.core.coercion import (
    coerce_coordinates,
    coerce_dates,
    coerce_numbers,
    coerce_object_ids,
    ensure_arrays,
    parse_date,
    parse_float,
)


def test_coerce_dates_parses_strings_and_leaves_garbage_untouched() -> None:
    doc = {"startDate": "2021-03-04", "endDate": "not a date", "other": "2021-03-04"}
    result = coerce_dates(doc, ["startDate", "endDate", "missing"])

    assert result["startDate"] == datetime(2021, 3, 4, tzinfo=UTC)
    assert result["endDate"] == "not a date"
    assert result["other"] == "2021-03-04"
    assert "missing" not in result


def test_coerce_dates_fans_out_over_list_segments() -> None:
    doc = {
        "education": [
            {"startDate": "2010-09-01T00:00:00Z"},
            {"startDate": "2014-09-01", "endDate": ""},
            "not a mapping",
        ]
    }
    result = coerce_dates(doc, ["education.startDate", "education.endDate"])

    assert result["education"][0]["startDate"] == datetime(2010, 9, 1, tzinfo=UTC)
    assert result["education"][1]["startDate"] == datetime(2014, 9, 1, tzinfo=UTC)
    assert result["education"][1]["endDate"] == ""
    assert result["education"][2] == "not a mapping"


def test_coercion_abandons_path_when_intermediate_is_not_a_mapping() -> None:
    doc = {"personalInfo": "flat string", "adminApproval": None}
    result = coerce_dates(doc, ["personalInfo.startDate", "adminApproval.reviewedAt"])
    assert result == doc


def test_public_coercions_never_mutate_their_input() -> None:
    doc = {"rating": {"average": "4.5"}, "user": "507f1f77bcf86cd799439011"}
    numbers = coerce_numbers(doc, ["rating.average"])
    ids = coerce_object_ids(doc, ["user"])

    assert doc == {"rating": {"average": "4.5"}, "user": "507f1f77bcf86cd799439011"}
    assert numbers["rating"]["average"] == 4.5
    assert numbers["rating"] is not doc["rating"]
    assert ids["user"] == ObjectId("507f1f77bcf86cd799439011")


def test_coerce_numbers_uses_leading_float_semantics() -> None:
    doc = {"a": "12.5kg", "b": "abc", "c": "", "d": 7, "e": " -3e2 "}
    result = coerce_numbers(doc, ["a", "b", "c", "d", "e"])

    assert result["a"] == 12.5
    assert result["b"] == "abc"
    assert result["c"] == ""
    assert result["d"] == 7
    assert result["e"] == -300.0


def test_coerce_object_ids_only_converts_valid_hex_strings() -> None:
    doc = {"user": "not-an-id", "resume": "507f1f77bcf86cd799439011", "createdBy": None}
    result = coerce_object_ids(doc, ["user", "resume", "createdBy"])

    assert result["user"] == "not-an-id"
    assert isinstance(result["resume"], ObjectId)
    assert result["createdBy"] is None


def test_ensure_arrays_replaces_present_non_arrays_only() -> None:
    doc = {"skills": "python", "hobbies": None, "languages": [], "certifications": {"name": "x"}, "socialMedia": 0}
    result = ensure_arrays(doc, ["skills", "hobbies", "languages", "certifications", "socialMedia", "projects"])

    assert result["skills"] == []
    assert result["hobbies"] is None
    assert result["languages"] == []
    assert result["certifications"] == []
    assert result["socialMedia"] == 0
    assert "projects" not in result


def test_coerce_coordinates_handles_both_address_locations() -> None:
    doc = {
        "address": {"coordinates": {"lat": "40.7", "lng": "-74.0"}},
        "personalInfo": {"address": {"coordinates": {"lat": "north", "lng": 12}}},
    }
    result = coerce_coordinates(doc)

    assert result["address"]["coordinates"] == {"lat": 40.7, "lng": -74.0}
    assert result["personalInfo"]["address"]["coordinates"] == {"lat": "north", "lng": 12}


def test_parse_helpers() -> None:
    assert parse_date("March 4, 2021") == datetime(2021, 3, 4, tzinfo=UTC)
    assert parse_date("2021-03-04T10:00:00+02:00").utcoffset().total_seconds() == 7200
    assert parse_date("   ") is None
    assert parse_float(".5") == 0.5
    assert parse_float("Infinity") == float("inf")
    assert parse_float("e5") is None
