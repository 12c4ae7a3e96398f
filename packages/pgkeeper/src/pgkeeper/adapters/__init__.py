"""Interface adapters: ports and their stdlib-backed implementations."""

from pgkeeper.adapters.ports import (
    CommandRunnerPort,
    CoordinatorNotifierPort,
    CoordinatorRegistrationPort,
    DatabaseConnectorPort,
    DatabaseSession,
    EnvironmentNodeNameResolver,
    EventEmitterPort,
    LoggingPort,
    RealTimeProvider,
    RegistryStorePort,
    ReplicationConfigReaderPort,
    ServerControlPort,
    TimeProvider,
)
from pgkeeper.adapters.logging_adapter import StdlibLoggingAdapter
from pgkeeper.adapters.pidfile import PidfileCoordinatorNotifier, PidfileRegistration

__all__ = [
    "CommandRunnerPort",
    "CoordinatorNotifierPort",
    "CoordinatorRegistrationPort",
    "DatabaseConnectorPort",
    "DatabaseSession",
    "EnvironmentNodeNameResolver",
    "EventEmitterPort",
    "LoggingPort",
    "RealTimeProvider",
    "RegistryStorePort",
    "ReplicationConfigReaderPort",
    "ServerControlPort",
    "TimeProvider",
    "StdlibLoggingAdapter",
    "PidfileCoordinatorNotifier",
    "PidfileRegistration",
]
