"""Unit tests for the pidfile registration and notifier."""

import os

import pytest

from pgkeeper.adapters.fakes import FakeCoordinatorRegistration
from pgkeeper.adapters.pidfile import (
    REGISTRY_RELOAD_SIGNAL,
    PidfileCoordinatorNotifier,
    PidfileRegistration,
)


@pytest.mark.tier(1)
@pytest.mark.tra("Adapter.Pidfile.Registration")
class TestPidfileRegistration:
    def test_publish_and_read(self, tmp_path):
        registration = PidfileRegistration(tmp_path / "run" / "pgkeeper.pid")
        registration.publish(4321)

        assert registration.read_pid() == 4321
        assert registration.path.read_text() == "4321\n"

    def test_publish_leaves_no_temporary_files(self, tmp_path):
        PidfileRegistration(tmp_path / "pgkeeper.pid").publish(4321)
        assert [p.name for p in tmp_path.iterdir()] == ["pgkeeper.pid"]

    def test_missing_file(self, tmp_path):
        assert PidfileRegistration(tmp_path / "none.pid").read_pid() is None

    @pytest.mark.parametrize("content", ["garbage", "", "-5", "0"])
    def test_malformed_content(self, tmp_path, content):
        path = tmp_path / "pgkeeper.pid"
        path.write_text(content)
        assert PidfileRegistration(path).read_pid() is None

    def test_withdraw_own_pid(self, tmp_path):
        registration = PidfileRegistration(tmp_path / "pgkeeper.pid")
        registration.publish(os.getpid())

        registration.withdraw()
        registration.withdraw()

        assert not registration.path.exists()

    def test_withdraw_keeps_other_process_record(self, tmp_path):
        registration = PidfileRegistration(tmp_path / "pgkeeper.pid")
        registration.publish(os.getpid() + 1)

        registration.withdraw()

        assert registration.read_pid() == os.getpid() + 1


@pytest.mark.tier(1)
@pytest.mark.tra("Adapter.Pidfile.Notifier")
class TestPidfileCoordinatorNotifier:
    @pytest.fixture
    def kills(self, monkeypatch):
        calls = []
        monkeypatch.setattr(
            "pgkeeper.adapters.pidfile.os.kill", lambda pid, sig: calls.append((pid, sig))
        )
        return calls

    def test_signals_registered_pid(self, kills):
        notifier = PidfileCoordinatorNotifier(FakeCoordinatorRegistration(pid=777))

        assert notifier.notify_registry_changed() is True
        assert kills == [(777, REGISTRY_RELOAD_SIGNAL)]

    def test_no_registered_coordinator(self, kills):
        notifier = PidfileCoordinatorNotifier(FakeCoordinatorRegistration())

        assert notifier.notify_registry_changed() is False
        assert kills == []

    @pytest.mark.parametrize("error", [ProcessLookupError, PermissionError])
    def test_dead_or_foreign_process(self, monkeypatch, error):
        def refuse(pid, sig):
            raise error()

        monkeypatch.setattr("pgkeeper.adapters.pidfile.os.kill", refuse)
        notifier = PidfileCoordinatorNotifier(FakeCoordinatorRegistration(pid=777))

        assert notifier.notify_registry_changed() is False
