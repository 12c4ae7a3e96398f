"""pgkeeper-py: PostgreSQL failover coordinator."""

__version__ = "0.1.0"

from pgkeeper.domain.settings import KeeperSettings
from pgkeeper.domain.exceptions import PgKeeperConfigError, PgKeeperError
from pgkeeper.usecases.settings_loader import SettingsLoader
from pgkeeper.usecases.cluster_admin import ClusterAdmin

__all__ = [
    "KeeperSettings",
    "PgKeeperConfigError",
    "PgKeeperError",
    "SettingsLoader",
    "ClusterAdmin",
]
