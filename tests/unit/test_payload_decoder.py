"""Tests for the repairing payload decoder."""

import json

import pytest

from plan_editor.actions.decoder import (
    DecodeFailure,
    Decoded,
    decode,
    repair_json_text,
    salvage_add_activity,
)


@pytest.mark.parametrize(
    "payload",
    [
        '{"dayNumber": 1, "activityIndex": 0}',
        '{"dayNumber": 2, "newOrder": [2, 0, 1]}',
        '{"dayNumber": 1, "activity": {"name": "Louvre", "time": "10:00", "cost": 22,'
        ' "location": {"lat": 48.86, "lng": 2.33, "address": "Rue de Rivoli"}}}',
    ],
)
def test_strict_payload_fields_preserved(payload: str) -> None:
    """Test that well-formed payloads decode strictly with every field intact."""
    result = decode(payload)

    assert isinstance(result, Decoded)
    assert result.stage == "strict"
    assert result.value == json.loads(payload)


def test_unquoted_keys_and_single_quotes_repaired() -> None:
    """Test the typical generator payload with bare keys and single quotes."""
    result = decode("{dayNumber:1, activity:{name:'Museum', time:'10:00', cost:20}}")

    assert isinstance(result, Decoded)
    assert result.stage == "repaired"
    assert result.value == {
        "dayNumber": 1,
        "activity": {"name": "Museum", "time": "10:00", "cost": 20},
    }


def test_trailing_commas_removed() -> None:
    """Test that trailing commas before closers are dropped."""
    result = decode('{"dayNumber": 1, "newOrder": [1, 0,],}')

    assert isinstance(result, Decoded)
    assert result.value == {"dayNumber": 1, "newOrder": [1, 0]}


def test_apostrophe_inside_single_quoted_string_survives() -> None:
    """Test that an apostrophe in a name does not end the string."""
    result = decode("{dayNumber: 1, activity: {name: 'Children's Museum', cost: 12}}")

    assert isinstance(result, Decoded)
    assert result.value["activity"]["name"] == "Children's Museum"


def test_double_quoted_strings_left_alone_during_repair() -> None:
    """Test that text inside double quotes is not rewritten as keys."""
    result = decode('{"dayNumber": 1, "title": "Food, wine: and more",}')

    assert isinstance(result, Decoded)
    assert result.value["title"] == "Food, wine: and more"


def test_python_literals_converted() -> None:
    """Test that True/False/None become JSON literals."""
    result = decode("{'dayNumber': 1, 'activity': {'name': 'Spa', 'booked': True, 'tip': None}}")

    assert isinstance(result, Decoded)
    assert result.value["activity"]["booked"] is True
    assert result.value["activity"]["tip"] is None


def test_code_fence_stripped() -> None:
    """Test that a markdown code fence around the payload is ignored."""
    result = decode('```json\n{"dayNumber": 3, "title": "Beach Day"}\n```')

    assert isinstance(result, Decoded)
    assert result.value == {"dayNumber": 3, "title": "Beach Day"}


def test_truncated_string_value_is_closed_empty() -> None:
    """Test that a value cut off mid-string is closed as an empty string."""
    result = decode('{"dayNumber": 2, "activity": {"name": "Sunset Cruise", "time": "18:')

    assert isinstance(result, Decoded)
    assert result.value == {"dayNumber": 2, "activity": {"name": "Sunset Cruise", "time": ""}}


def test_truncated_key_is_dropped() -> None:
    """Test that a key cut off mid-string is removed with its comma."""
    result = decode('{"dayNumber": 1, "activityIndex": 2, "upd')

    assert isinstance(result, Decoded)
    assert result.value == {"dayNumber": 1, "activityIndex": 2}


def test_dangling_key_without_value_is_dropped() -> None:
    """Test that a key with no value is removed."""
    result = decode('{"dayNumber": 1, "title":')

    assert isinstance(result, Decoded)
    assert result.value == {"dayNumber": 1}


def test_closers_appended_in_nesting_order() -> None:
    """Test that missing closers are appended innermost first."""
    assert repair_json_text('[{"a": 1') == '[{"a": 1}]'
    assert repair_json_text('{"a": [1, 2') == '{"a": [1, 2]}'


def test_salvage_rebuilds_add_activity_payload() -> None:
    """Test that salvage recovers the critical fields when repair cannot."""
    result = decode('{"dayNumber": 3 "name": "Night Market" "cost": 15}')

    assert isinstance(result, Decoded)
    assert result.stage == "salvaged"
    assert result.value == {
        "dayNumber": 3,
        "activity": {
            "name": "Night Market",
            "time": "12:00",
            "cost": 15,
            "type": "activity",
            "description": "Night Market",
        },
    }


def test_salvage_uses_configured_default_time() -> None:
    """Test that the salvage default time can be overridden."""
    result = decode('{"dayNumber": 1 "name": "Picnic"}', default_time="13:30")

    assert isinstance(result, Decoded)
    assert result.value["activity"]["time"] == "13:30"
    assert result.value["activity"]["cost"] == 0


def test_salvage_requires_day_and_name() -> None:
    """Test that salvage gives up without both critical fields."""
    assert salvage_add_activity('"name": "Picnic"') is None
    assert salvage_add_activity('"dayNumber": 2') is None


def test_unrecoverable_payload_returns_failure() -> None:
    """Test that garbage comes back as DecodeFailure, not an exception."""
    result = decode("definitely not a payload")

    assert isinstance(result, DecodeFailure)
    assert result.fragment == "definitely not a payload"


def test_empty_payload_returns_failure() -> None:
    """Test that an empty fragment fails cleanly."""
    result = decode("   ")

    assert isinstance(result, DecodeFailure)
    assert result.reason == "empty payload"


def test_salvage_can_be_disabled() -> None:
    """Test that callers decoding other action kinds get a failure instead of salvage."""
    payload = '{"dayNumber": 1, "activityIndex": 0, "updates": {"name": "New" "cost": 5}}'

    assert isinstance(decode(payload), Decoded)
    assert isinstance(decode(payload, allow_salvage=False), DecodeFailure)


def test_salvage_ignores_longer_field_names() -> None:
    """Test that field names embedded in other keys are not matched."""
    result = salvage_add_activity('"dayNumber": 2 "day_name": "Tuesday" "name": "Night Market"')

    assert result["dayNumber"] == 2
    assert result["activity"]["name"] == "Night Market"
    assert salvage_add_activity('"dayNumber": 2 "venue_name": "Opera"') is None
