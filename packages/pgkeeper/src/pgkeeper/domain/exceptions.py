"""Domain exceptions.

Exception hierarchy:
- PgKeeperError: Base for every error raised by pgkeeper itself.
  - PgKeeperConfigError: Invalid or missing configuration. Fatal at startup.
  - UnknownSignalError: Administrative notification with an unrecognized name.
  - CoordinatorInvariantError: Coordinator status reached an unknown combination.
  - PromotionTimeoutError: Local server did not confirm promotion in time.
  - RegistryConflictError: Registry insert rejected by a uniqueness rule.
  - AdminClientError: Administrative HTTP call failed or was rejected.
  - DatabaseError: Transport failure reaching a database node.
    - NodeUnreachableError: Session could not be established.
    - QueryFailedError: Session established but the statement failed.
"""


class PgKeeperError(Exception):
    """Base class for all pgkeeper errors."""

    pass


class PgKeeperConfigError(PgKeeperError):
    """Raised when pgkeeper configuration is invalid.

    This is the base exception for all domain-level configuration errors.
    It is raised by domain entities (e.g., KeeperSettings, Node) and by the
    settings loader when validation fails. A configuration error at startup
    prevents the coordinator from starting.
    """

    pass


class UnknownSignalError(PgKeeperError):
    """Raised when a coordinator notification names an unknown signal.

    Attributes:
        signal_name: The rejected signal name.
    """

    def __init__(self, signal_name: str) -> None:
        super().__init__(f"unrecognized coordinator signal: {signal_name!r}")
        self.signal_name = signal_name


class CoordinatorInvariantError(PgKeeperError):
    """Raised when the coordinator status reaches an unrecognized value.

    Fatal: the coordinator loop stops and the process exits. No automatic
    restart is attempted.
    """

    pass


class PromotionTimeoutError(PgKeeperError):
    """Raised when the local server does not leave recovery within the bound.

    Attributes:
        timeout_seconds: The bound that elapsed.
    """

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(
            f"server did not confirm promotion within {timeout_seconds:g}s"
        )
        self.timeout_seconds = timeout_seconds


class RegistryConflictError(PgKeeperError):
    """Raised when a registry insert would duplicate a name or a primary.

    Attributes:
        name: Name of the rejected row.
    """

    def __init__(self, message: str, name: str) -> None:
        super().__init__(message)
        self.name = name


class AdminClientError(PgKeeperError):
    """Raised when an administrative HTTP call cannot be completed.

    Attributes:
        status_code: HTTP status of the response, or None for transport errors.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DatabaseError(PgKeeperError):
    """Base exception for transport failures against a database node.

    Attributes:
        message: Human-readable error description.
        target: Connection target that failed (optional).
        original_error: The underlying driver exception (optional).
    """

    def __init__(
        self,
        message: str,
        target: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize DatabaseError.

        Args:
            message: Human-readable error description.
            target: Connection target that failed.
            original_error: The underlying exception that caused the failure.
        """
        super().__init__(message)
        self.message = message
        self.target = target
        self.original_error = original_error


class NodeUnreachableError(DatabaseError):
    """Raised when a session to a node cannot be established."""

    pass


class QueryFailedError(DatabaseError):
    """Raised when a statement fails on an established session."""

    pass
