"""
Due date normalization tests.
"""

from datetime import date, datetime

import pytest

from taskboard.services import ValidationError, normalize_due_date


@pytest.mark.parametrize(
    "value",
    [
        "2024-03-15",
        "2024-03-15T10:30:00",
        "2024-03-15 23:59:59",
        "2024-03-15T10:30:00+02:00",
        "2024/03/15",
        "03/15/2024",
        "15 March 2024",
        "15 Mar 2024",
        "March 15, 2024",
        "  2024-03-15  ",
    ],
)
def test_accepted_formats(value):
    assert normalize_due_date(value) == date(2024, 3, 15)


def test_date_objects_pass_through():
    assert normalize_due_date(date(2024, 3, 15)) == date(2024, 3, 15)
    assert normalize_due_date(datetime(2024, 3, 15, 8, 0)) == date(2024, 3, 15)


@pytest.mark.parametrize("value", ["", "   ", None, "tomorrow", "2024-13-01", "2023-02-29"])
def test_rejected_values(value):
    with pytest.raises(ValidationError) as exc_info:
        normalize_due_date(value)
    assert exc_info.value.field == "dueDate"


def test_field_name_is_reported():
    with pytest.raises(ValidationError) as exc_info:
        normalize_due_date("nope", field="due_date")
    assert exc_info.value.to_payload()["errors"][0]["field"] == "due_date"
