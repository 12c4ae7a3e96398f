"""Unit tests for the KeeperSettings domain entity."""

import pytest

from pgkeeper.domain.exceptions import PgKeeperConfigError
from pgkeeper.domain.settings import HOT_RELOADABLE_FIELDS, KeeperSettings


@pytest.mark.tier(1)
@pytest.mark.tra("Domain.Invariant.KeeperSettings")
class TestKeeperSettingsValidation:
    """Test KeeperSettings construction and validation."""

    def test_defaults(self):
        settings = KeeperSettings(node_name="node1")
        assert settings.heartbeat_interval_seconds == 5
        assert settings.failure_threshold == 1
        assert settings.post_promotion_command is None
        assert settings.primary_connection_target is None

    @pytest.mark.parametrize("node_name", ["", "   "])
    def test_node_name_is_mandatory(self, node_name):
        with pytest.raises(PgKeeperConfigError, match="node_name is mandatory"):
            KeeperSettings(node_name=node_name)

    @pytest.mark.parametrize("field", ["heartbeat_interval_seconds", "failure_threshold"])
    def test_integer_tunables_must_be_at_least_one(self, field):
        with pytest.raises(PgKeeperConfigError, match=f"{field} must be >= 1"):
            KeeperSettings(node_name="node1", **{field: 0})

    @pytest.mark.parametrize("field", ["heartbeat_interval_seconds", "failure_threshold"])
    def test_integer_tunables_reject_bool_and_float(self, field):
        for bad in (True, 2.5):
            with pytest.raises(PgKeeperConfigError, match="must be an integer"):
                KeeperSettings(node_name="node1", **{field: bad})

    @pytest.mark.parametrize("field", ["probe_timeout_seconds", "promotion_timeout_seconds"])
    def test_timeouts_must_be_positive(self, field):
        with pytest.raises(PgKeeperConfigError, match="must be positive"):
            KeeperSettings(node_name="node1", **{field: 0})

    @pytest.mark.parametrize("value", [0.5, 2, 2.9])
    def test_probe_timeout_leaves_room_to_connect_and_query(self, value):
        with pytest.raises(PgKeeperConfigError, match="probe_timeout_seconds must be >= 3"):
            KeeperSettings(node_name="node1", probe_timeout_seconds=value)

    def test_probe_timeout_minimum_is_accepted(self):
        assert KeeperSettings(node_name="node1", probe_timeout_seconds=3).probe_timeout_seconds == 3

    def test_log_level_must_be_known(self):
        with pytest.raises(PgKeeperConfigError, match="log_level"):
            KeeperSettings(node_name="node1", log_level="LOUD")

    def test_metrics_port_range(self):
        with pytest.raises(PgKeeperConfigError, match="metrics_port"):
            KeeperSettings(node_name="node1", metrics_port=70000)

    def test_require_primary_target(self):
        settings = KeeperSettings(node_name="node1", primary_connection_target="host=p")
        assert settings.require_primary_target() == "host=p"

    def test_require_primary_target_missing(self):
        with pytest.raises(PgKeeperConfigError, match="primary_connection_target"):
            KeeperSettings(node_name="node1").require_primary_target()


@pytest.mark.tier(1)
@pytest.mark.tra("Domain.Policy.HotReload")
class TestKeeperSettingsReload:
    """Test hot-reload field selection."""

    def test_with_reloaded_takes_only_hot_fields(self):
        current = KeeperSettings(node_name="node1", primary_connection_target="host=a")
        reloaded = KeeperSettings(
            node_name="node2",
            primary_connection_target="host=b",
            heartbeat_interval_seconds=9,
            failure_threshold=4,
            post_promotion_command="touch /tmp/promoted",
        )

        merged = current.with_reloaded(reloaded)

        assert merged.node_name == "node1"
        assert merged.primary_connection_target == "host=a"
        assert merged.heartbeat_interval_seconds == 9
        assert merged.failure_threshold == 4
        assert merged.post_promotion_command == "touch /tmp/promoted"

    def test_fixed_field_changes_lists_identity_and_target(self):
        current = KeeperSettings(node_name="node1", primary_connection_target="host=a")
        reloaded = KeeperSettings(node_name="node2", primary_connection_target="host=b")
        assert current.fixed_field_changes(reloaded) == [
            "node_name",
            "primary_connection_target",
        ]

    def test_identity_and_target_are_not_hot(self):
        assert "node_name" not in HOT_RELOADABLE_FIELDS
        assert "primary_connection_target" not in HOT_RELOADABLE_FIELDS
