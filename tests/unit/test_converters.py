from datetime import UTC, datetime

import pytest
from bson import ObjectId

from resumeforge.core.converters import ENTITY_PLANS, convert

USER_ID = "507f1f77bcf86cd799439011"
RESUME_ID = "507f191e810c19729de860ea"


def test_resume_converter_normalizes_every_concern() -> None:
    body = {
        "_id": "should-be-dropped",
        "user": USER_ID,
        "personalInfo": {"address": {"coordinates": {"lat": "51.5", "lng": "-0.1"}}},
        "education": [{"startDate": "2010-09-01", "gpa": "3.7"}],
        "projects": [{"name": "P", "screenshots": ["https://x/1.png"], "startDate": "2020-01-01"}],
        "skills": "python",
        "adminApproval": {"reviewedBy": RESUME_ID, "reviewedAt": "2024-01-02T03:04:05Z"},
        "version": "2",
    }
    result = convert("resume", body)

    assert "_id" not in result
    assert result["user"] == ObjectId(USER_ID)
    assert result["personalInfo"]["address"]["coordinates"] == {"lat": 51.5, "lng": -0.1}
    assert result["education"][0]["startDate"] == datetime(2010, 9, 1, tzinfo=UTC)
    assert result["education"][0]["gpa"] == 3.7
    assert result["projects"][0]["startDate"] == datetime(2020, 1, 1, tzinfo=UTC)
    assert result["projects"][0]["screenshots"][0]["url"] == "https://x/1.png"
    assert result["projects"][0]["screenshots"][0]["caption"] == ""
    assert result["skills"] == []
    assert result["adminApproval"]["reviewedBy"] == ObjectId(RESUME_ID)
    assert result["version"] == 2.0
    assert body["user"] == USER_ID


def test_user_converter_parses_dates_and_coordinates_but_not_ids() -> None:
    body = {
        "lastLogin": "2024-02-03",
        "address": {"coordinates": {"lat": "10", "lng": "20.5"}},
        "user": USER_ID,
    }
    result = convert("user", body)

    assert result["lastLogin"] == datetime(2024, 2, 3, tzinfo=UTC)
    assert result["address"]["coordinates"] == {"lat": 10.0, "lng": 20.5}
    assert result["user"] == USER_ID


@pytest.mark.parametrize(
    ("kind", "number_field"),
    [("skill", "yearsOfExperience"), ("socialMedia", "followers")],
)
def test_entry_converters_coerce_references_and_numbers(kind: str, number_field: str) -> None:
    result = convert(kind, {"user": USER_ID, "resume": RESUME_ID, number_field: "5"})
    assert result["user"] == ObjectId(USER_ID)
    assert result["resume"] == ObjectId(RESUME_ID)
    assert result[number_field] == 5.0


def test_language_and_certification_converters_parse_nested_dates() -> None:
    language = convert("language", {"certification": {"issueDate": "2020-05-05"}})
    certification = convert("certification", {"issueDate": "2019-01-01", "expiryDate": "nope"})

    assert language["certification"]["issueDate"] == datetime(2020, 5, 5, tzinfo=UTC)
    assert certification["issueDate"] == datetime(2019, 1, 1, tzinfo=UTC)
    assert certification["expiryDate"] == "nope"


def test_template_converter_handles_rating_and_creator() -> None:
    result = convert("template", {"rating": {"average": "4.2", "count": "10"}, "createdBy": USER_ID})
    assert result["rating"] == {"average": 4.2, "count": 10.0}
    assert result["createdBy"] == ObjectId(USER_ID)


def test_unknown_kind_is_rejected() -> None:
    with pytest.raises(ValueError):
        convert("invoice", {})


def test_plan_registry_is_read_only() -> None:
    with pytest.raises(TypeError):
        ENTITY_PLANS["resume"] = ENTITY_PLANS["user"]  # type: ignore[index]


def test_resume_converter_handles_mixed_shapes_in_one_body() -> None:
    result = convert(
        "resume",
        {"personalInfo": {"startDate": "2020-01-15"}, "education": "notanarray", "user": USER_ID},
    )

    assert result["personalInfo"]["startDate"] == datetime(2020, 1, 15, tzinfo=UTC)
    assert result["education"] == []
    assert result["user"] == ObjectId(USER_ID)
