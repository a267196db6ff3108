"""Tests for the Flet backend loader and extension result mapping."""
from types import SimpleNamespace

import pytest

import flet_local_notifications
from flet_local_notifications import FletLocalNotifications
from localnotify.registry import registry, Services
from localnotify.services.backend import register_flet_backend


class DummyExtension:
    def __init__(self):
        self.on_initialized = None


class TestRegisterFletBackend:
    def test_skipped_on_desktop(self):
        assert register_flet_backend("linux", registry) is None
        assert not registry.is_registered(Services.NOTIFICATION_BACKEND)

    def test_registers_on_android(self, monkeypatch):
        monkeypatch.setattr(flet_local_notifications, "FletLocalNotifications", DummyExtension)

        backend = register_flet_backend("android", registry)

        assert isinstance(backend, DummyExtension)
        assert registry.get(Services.NOTIFICATION_BACKEND) is backend


def _extension_stub(result=None, error=None):
    """Object standing in for the control: only _invoke_method is needed."""
    calls = []

    async def invoke(method_name, arguments=None):
        calls.append((method_name, arguments))
        if error is not None:
            raise error
        return result

    stub = SimpleNamespace(_invoke_method=invoke, calls=calls)
    stub._call = lambda method_name, arguments=None: FletLocalNotifications._call(stub, method_name, arguments)
    return stub


class TestExtensionResults:
    async def test_passes_result_through(self):
        stub = _extension_stub(result="ok")
        assert await FletLocalNotifications.cancel(stub, 3) == "ok"
        assert stub.calls == [("cancel", {"id": 3})]

    async def test_schedule_sends_request_dict(self):
        stub = _extension_stub(result="ok")
        request = {"id": 1, "title": "T"}
        await FletLocalNotifications.schedule(stub, request)
        assert stub.calls == [("schedule", request)]

    async def test_missing_response(self):
        stub = _extension_stub(result=None)
        assert await FletLocalNotifications.open_settings(stub) == "error:no_response"

    @pytest.mark.parametrize("error", [TimeoutError("late"), RuntimeError("detached")])
    async def test_transport_error_becomes_result(self, error):
        stub = _extension_stub(error=error)
        result = await FletLocalNotifications.has_post_notifications_permission(stub)
        assert result.startswith("error:")

    async def test_boolean_result_stringified(self):
        stub = _extension_stub(result=True)
        assert await FletLocalNotifications.has_exact_alarm_permission(stub) == "True"
