"""Settings reader for the FastAPI pgkeeper adapter."""

import dataclasses
from typing import Any

from pgkeeper.domain.exceptions import PgKeeperConfigError
from pgkeeper.domain.settings import KeeperSettings

_KNOWN_FIELDS = frozenset(f.name for f in dataclasses.fields(KeeperSettings))


def get_keeper_settings(pydantic_settings: dict[str, Any]) -> KeeperSettings:
    """Convert a Pydantic settings dict to a KeeperSettings domain object.

    Keys are KeeperSettings field names. Keys with a ``None`` value fall back
    to the domain defaults; keys that are not settings are ignored, so an
    application can pass its whole settings dump.

    Args:
        pydantic_settings: Pydantic settings dict with snake_case keys

    Returns:
        KeeperSettings domain object

    Raises:
        PgKeeperConfigError: If node_name is missing or a value is invalid
    """
    if not pydantic_settings.get("node_name"):
        raise PgKeeperConfigError("Missing required pgkeeper setting: node_name")

    kwargs = {
        key: value
        for key, value in pydantic_settings.items()
        if key in _KNOWN_FIELDS and value is not None
    }
    return KeeperSettings(**kwargs)
