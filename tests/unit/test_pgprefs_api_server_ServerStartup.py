"""Unit tests for pgprefs.api.server.ServerStartup, ServerStatus and ServerAction."""

import pytest

from pgprefs.api.server import ServerAction, ServerStartup, ServerStatus

pytestmark = pytest.mark.server


class TestServerStartup:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (ServerStartup.AT_BOOT, ServerStartup.AT_BOOT),
            (1, ServerStartup.AT_BOOT),
            ("2", ServerStartup.AT_LOGIN),
            ("AtLogin", ServerStartup.AT_LOGIN),
            ("atboot", ServerStartup.AT_BOOT),
            ("at_boot", ServerStartup.AT_BOOT),
            (" Manual ", ServerStartup.MANUAL),
            (None, ServerStartup.MANUAL),
            (7, ServerStartup.MANUAL),
            ("whenever", ServerStartup.MANUAL),
            (True, ServerStartup.MANUAL),
        ],
    )
    def test_parse_is_tolerant(self, value, expected):
        assert ServerStartup.parse(value) is expected

    def test_labels(self):
        assert [s.label for s in ServerStartup] == ["Manual", "AtBoot", "AtLogin"]


class TestServerStatus:
    def test_processing_statuses(self):
        processing = {s for s in ServerStatus if s.processing}
        assert processing == {
            ServerStatus.STARTING,
            ServerStatus.STOPPING,
            ServerStatus.DELETING,
            ServerStatus.UPDATING,
            ServerStatus.RETRYING,
        }

    def test_started_statuses(self):
        assert {s for s in ServerStatus if s.started} == {ServerStatus.STARTED, ServerStatus.RETRYING}

    def test_values_are_display_names(self):
        assert ServerStatus.STARTED.value == "Started"
        assert ServerStatus.UNKNOWN.value == "Unknown"


def test_action_values():
    assert [a.value for a in ServerAction] == ["CheckStatus", "Start", "Stop", "Delete", "Create"]
