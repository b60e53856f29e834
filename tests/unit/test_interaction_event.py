"""Unit tests for the interaction stream envelope."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from microlearn.db.models import InteractionType
from microlearn.interactions.schemas import InteractionEvent, InvalidEventEntry

NODE_ID = "5f0c6a3e-4a7b-4c1f-9f55-2d7d3c1e9a10"


def _fields(**overrides: str) -> dict[str, str]:
    fields = {
        "event_id": "0b8e7d36-1f3f-4e43-a2f7-7b8f6c3b5d21",
        "user_id": "42",
        "content_node_id": NODE_ID,
        "interaction_type": "VIDEO_COMPLETED",
        "data": '{"watchedSeconds":312}',
        "timestamp": "2026-01-01T12:00:00.123456+00:00",
    }
    fields.update(overrides)
    return fields


class TestToFields:
    def test_all_values_are_strings(self):
        event = InteractionEvent(
            event_id="e-1",
            user_id=42,
            content_node_id=NODE_ID,
            interaction_type=InteractionType.ARTICLE_VIEWED,
            data={"scroll": 0.5},
            timestamp=datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc),
        )
        fields = event.to_fields()
        assert all(isinstance(v, str) for v in fields.values())
        assert fields["user_id"] == "42"
        assert fields["interaction_type"] == "ARTICLE_VIEWED"
        assert fields["data"] == '{"scroll":0.5}'
        assert fields["timestamp"] == "2026-01-01T12:00:00+00:00"


class TestFromFields:
    def test_decodes_entry(self):
        event = InteractionEvent.from_fields(_fields())
        assert event.user_id == 42
        assert event.interaction_type is InteractionType.VIDEO_COMPLETED
        assert event.data == {"watchedSeconds": 312}
        assert event.timestamp == datetime(2026, 1, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)

    def test_missing_data_defaults_to_empty_object(self):
        fields = _fields()
        del fields["data"]
        assert InteractionEvent.from_fields(fields).data == {}

    @pytest.mark.parametrize("fields", [None, {}])
    def test_empty_entry(self, fields):
        with pytest.raises(InvalidEventEntry, match="empty"):
            InteractionEvent.from_fields(fields)

    def test_data_not_json(self):
        with pytest.raises(InvalidEventEntry, match="not JSON"):
            InteractionEvent.from_fields(_fields(data="{oops"))

    def test_data_not_object(self):
        with pytest.raises(InvalidEventEntry, match="not a JSON object"):
            InteractionEvent.from_fields(_fields(data="[1, 2]"))

    def test_unknown_interaction_type(self):
        with pytest.raises(InvalidEventEntry):
            InteractionEvent.from_fields(_fields(interaction_type="VIDEO_REWOUND"))

    def test_bad_user_id(self):
        with pytest.raises(InvalidEventEntry):
            InteractionEvent.from_fields(_fields(user_id="not-a-number"))
