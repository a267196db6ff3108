"""Tests for notification value objects."""
import dataclasses

import pytest

from localnotify.config import DEFAULT_CHANNEL_ID, Importance
from localnotify.models import NotificationChannel, NotificationRequest


class TestNotificationRequest:
    def test_defaults(self):
        request = NotificationRequest(id=1, title="T", content="C")
        assert request.delay_seconds == 0
        assert request.interval_seconds is None
        assert request.channel_id == DEFAULT_CHANNEL_ID
        assert not request.is_repeating

    def test_is_immutable(self):
        request = NotificationRequest(id=1, title="T", content="C")
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.title = "changed"

    def test_rejects_negative_delay(self):
        with pytest.raises(ValueError):
            NotificationRequest(id=1, title="T", content="C", delay_seconds=-1)

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            NotificationRequest(id=1, title="T", content="C", interval_seconds=0)

    def test_to_dict(self):
        request = NotificationRequest(
            id=7, title="Stand up", content="Stretch", delay_seconds=30,
            interval_seconds=3600, channel_id="health",
        )
        assert request.to_dict() == {
            "id": 7,
            "channel_id": "health",
            "title": "Stand up",
            "content": "Stretch",
            "delay": 30,
            "interval": 3600,
        }


class TestNotificationChannel:
    def test_rejects_empty_id(self):
        with pytest.raises(ValueError):
            NotificationChannel(id="", name="Nameless")

    def test_to_dict_uses_plain_values(self):
        channel = NotificationChannel(id="x", name="X", importance=Importance.HIGH, show_badge=False)
        assert channel.to_dict() == {
            "id": "x",
            "name": "X",
            "description": "",
            "importance": "high",
            "show_badge": False,
        }

    def test_importance_is_ordered(self):
        assert Importance.LOW.value < Importance.DEFAULT.value < Importance.HIGH.value
