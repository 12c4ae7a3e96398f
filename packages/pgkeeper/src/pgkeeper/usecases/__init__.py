"""Use cases: Application logic layer."""

from pgkeeper.usecases.signal_relay import RelayFlag, SignalRelay
from pgkeeper.usecases.heartbeat_prober import HeartbeatProber
from pgkeeper.usecases.topology_registry import TopologyRegistry
from pgkeeper.usecases.promotion_controller import PromotionController, PromotionResult
from pgkeeper.usecases.state_machine import (
    CoordinatorStateMachine,
    determine_initial_status,
)
from pgkeeper.usecases.coordinator import KeeperCoordinator
from pgkeeper.usecases.cluster_admin import ClusterAdmin, RELOAD_REGISTRY_SIGNAL
from pgkeeper.usecases.settings_loader import SettingsLoader

__all__ = [
    "RelayFlag",
    "SignalRelay",
    "HeartbeatProber",
    "TopologyRegistry",
    "PromotionController",
    "PromotionResult",
    "CoordinatorStateMachine",
    "determine_initial_status",
    "KeeperCoordinator",
    "ClusterAdmin",
    "RELOAD_REGISTRY_SIGNAL",
    "SettingsLoader",
]
