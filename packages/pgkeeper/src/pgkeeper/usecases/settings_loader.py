"""Settings loader use case for pgkeeper configuration files."""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from pgkeeper.domain.exceptions import PgKeeperConfigError
from pgkeeper.domain.settings import KeeperSettings

if TYPE_CHECKING:
    from pgkeeper.adapters.ports import EnvironmentNodeNameResolver

_KNOWN_KEYS = frozenset(f.name for f in dataclasses.fields(KeeperSettings))


class SettingsLoader:
    """Parses pgkeeper YAML configuration to KeeperSettings.

    The file is a flat mapping whose keys are KeeperSettings field names.
    node_name falls back to the PGKEEPER_NODE_NAME environment variable when
    the file does not set it.
    """

    def __init__(self, env_resolver: EnvironmentNodeNameResolver | None = None) -> None:
        """Initialize the loader.

        Args:
            env_resolver: Optional fallback source for node_name.
        """
        self._env_resolver = env_resolver

    def parse(self, yaml_str: str) -> KeeperSettings:
        """Parse a YAML document to settings.

        Args:
            yaml_str: YAML document.

        Returns:
            Validated KeeperSettings.

        Raises:
            PgKeeperConfigError: If the YAML is invalid, has unknown keys, or
                fails validation.
        """
        try:
            config = yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            raise PgKeeperConfigError(f"Invalid YAML: {e}") from e

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise PgKeeperConfigError("Config must be a mapping")

        unknown = sorted(str(key) for key in config if key not in _KNOWN_KEYS)
        if unknown:
            raise PgKeeperConfigError(f"Unknown settings: {', '.join(unknown)}")

        kwargs: dict[str, Any] = dict(config)
        if not kwargs.get("node_name") and self._env_resolver is not None:
            resolved = self._env_resolver.resolve_node_name()
            if resolved:
                kwargs["node_name"] = resolved
        if not kwargs.get("node_name"):
            raise PgKeeperConfigError("node_name is mandatory")

        return KeeperSettings(**kwargs)

    def load(self, path: str | Path) -> KeeperSettings:
        """Read and parse the configuration file at ``path``.

        Raises:
            PgKeeperConfigError: If the file cannot be read or parsed.
        """
        try:
            content = Path(path).read_text()
        except OSError as e:
            raise PgKeeperConfigError(f"Cannot read config file {path}: {e}") from e
        return self.parse(content)
