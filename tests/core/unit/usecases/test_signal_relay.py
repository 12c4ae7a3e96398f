"""Unit tests for SignalRelay."""

import threading

import pytest

from pgkeeper.usecases.signal_relay import PRIORITY_ORDER, RelayFlag, SignalRelay


@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.SignalRelay")
class TestSignalRelay:
    def test_starts_with_nothing_pending(self):
        relay = SignalRelay()
        assert relay.pending() == []
        assert relay.terminate_requested is False

    def test_take_clears_reload_flags(self):
        relay = SignalRelay()
        relay.request_registry_reload()

        assert relay.is_raised(RelayFlag.RELOAD_REGISTRY) is True
        assert relay.take(RelayFlag.RELOAD_REGISTRY) is True
        assert relay.take(RelayFlag.RELOAD_REGISTRY) is False

    def test_terminate_is_sticky(self):
        relay = SignalRelay()
        relay.request_terminate()

        assert relay.take(RelayFlag.TERMINATE) is True
        assert relay.terminate_requested is True

    def test_pending_follows_priority_order(self):
        relay = SignalRelay()
        relay.request_registry_reload()
        relay.request_config_reload()
        relay.request_terminate()

        assert relay.pending() == [
            RelayFlag.TERMINATE,
            RelayFlag.RELOAD_CONFIG,
            RelayFlag.RELOAD_REGISTRY,
        ]
        assert PRIORITY_ORDER[0] is RelayFlag.TERMINATE

    def test_repeated_raises_coalesce(self):
        relay = SignalRelay()
        for _ in range(5):
            relay.request_registry_reload()

        assert relay.wait(0) is True
        assert relay.wait(0) is False
        assert relay.take(RelayFlag.RELOAD_REGISTRY) is True

    def test_wait_times_out_without_flags(self):
        assert SignalRelay().wait(0.01) is False

    def test_wait_returns_immediately_when_already_raised(self):
        relay = SignalRelay()
        relay.request_config_reload()
        assert relay.wait(5.0) is True

    def test_wait_is_woken_from_another_thread(self):
        relay = SignalRelay()
        timer = threading.Timer(0.05, relay.request_terminate)
        timer.start()
        try:
            assert relay.wait(1.5) is True
        finally:
            timer.join()
        assert relay.terminate_requested is True
