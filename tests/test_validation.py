from app.domain.reservations.schemas import ReservationTypeSchema
from app.domain.reservations.validation import validate_details


def make_schema(*fields, requires_approval=False):
    return ReservationTypeSchema.model_validate(
        {"fields": list(fields), "requiresApproval": requires_approval}
    )


MEETING = make_schema(
    {"name": "title", "type": "string", "required": True},
    {"name": "attendees", "type": "number", "min": 1, "max": 20},
)


def test_valid_minimal_details():
    result = validate_details({"title": "Standup"}, MEETING)
    assert result.is_valid
    assert result.errors == []


def test_missing_required_field():
    result = validate_details({}, MEETING)
    assert not result.is_valid
    assert result.errors == ["Field 'title' is required"]


def test_empty_string_and_none_count_as_missing():
    assert validate_details({"title": ""}, MEETING).errors == ["Field 'title' is required"]
    assert validate_details({"title": None}, MEETING).errors == ["Field 'title' is required"]


def test_optional_field_absent_or_empty_is_skipped():
    assert validate_details({"title": "x", "attendees": ""}, MEETING).is_valid
    assert validate_details({"title": "x", "attendees": None}, MEETING).is_valid


def test_type_mismatch():
    result = validate_details({"title": 42, "attendees": "five"}, MEETING)
    assert result.errors == [
        "Field 'title' must be a string",
        "Field 'attendees' must be a number",
    ]


def test_boolean_is_not_a_number():
    result = validate_details({"title": "x", "attendees": True}, MEETING)
    assert result.errors == ["Field 'attendees' must be a number"]


def test_number_bounds_are_inclusive():
    assert validate_details({"title": "x", "attendees": 1}, MEETING).is_valid
    assert validate_details({"title": "x", "attendees": 20}, MEETING).is_valid
    assert validate_details({"title": "x", "attendees": 0}, MEETING).errors == [
        "Field 'attendees' must be at least 1"
    ]
    assert validate_details({"title": "x", "attendees": 20.5}, MEETING).errors == [
        "Field 'attendees' must be at most 20"
    ]


def test_errors_are_aggregated_in_schema_order():
    schema = make_schema(
        {"name": "a", "type": "string", "required": True},
        {"name": "b", "type": "boolean", "required": True},
        {"name": "c", "type": "number", "required": True, "max": 3},
    )
    result = validate_details({"b": "yes", "c": 10}, schema)
    assert result.errors == [
        "Field 'a' is required",
        "Field 'b' must be a boolean",
        "Field 'c' must be at most 3",
    ]


def test_scalar_options():
    schema = make_schema({"name": "room", "type": "string", "options": ["red", "blue"]})
    assert validate_details({"room": "red"}, schema).is_valid
    assert validate_details({"room": "green"}, schema).errors == [
        "Field 'room' must be one of: red, blue"
    ]


def test_options_compare_string_forms():
    schema = make_schema(
        {"name": "size", "type": "number", "options": ["1", "2"]},
        {"name": "vip", "type": "boolean", "options": ["true"]},
    )
    assert validate_details({"size": 2, "vip": True}, schema).is_valid
    assert validate_details({"size": 2.0}, schema).is_valid
    assert validate_details({"vip": False}, schema).errors == ["Field 'vip' must be one of: true"]


def test_array_options_report_each_bad_element():
    schema = make_schema({"name": "extras", "type": "array", "options": ["tv", "coffee"]})
    assert validate_details({"extras": ["tv"]}, schema).is_valid
    assert validate_details({"extras": []}, schema).is_valid
    result = validate_details({"extras": ["tv", "piano", "harp"]}, schema)
    assert result.errors == [
        "Field 'extras' contains invalid option 'piano'",
        "Field 'extras' contains invalid option 'harp'",
    ]


def test_array_and_object_types():
    schema = make_schema(
        {"name": "tags", "type": "array"},
        {"name": "extra", "type": "object"},
    )
    assert validate_details({"tags": ["a"], "extra": {"k": 1}}, schema).is_valid
    assert validate_details({"tags": "a", "extra": ["k"]}, schema).errors == [
        "Field 'tags' must be a array",
        "Field 'extra' must be a object",
    ]


def test_unknown_keys_are_ignored():
    result = validate_details({"title": "x", "legacyField": "anything", "n": 5}, MEETING)
    assert result.is_valid


def test_validation_is_repeatable():
    details = {"title": 3, "attendees": 99}
    first = validate_details(details, MEETING)
    second = validate_details(details, MEETING)
    assert first == second
    assert details == {"title": 3, "attendees": 99}


def test_empty_schema_accepts_anything():
    assert validate_details({"whatever": 1}, make_schema()).is_valid
