"""Exception hierarchy shared by the core services and the API layer."""


class AiconError(Exception):
    """Base exception for all service errors."""

    pass


class ValidationError(AiconError):
    """Caller-supplied input is malformed."""

    pass


class DecodeError(AiconError):
    """Source bytes cannot be interpreted as a supported image."""

    pass


class StorageError(AiconError):
    """Blob put/get/delete failed."""

    pass


class StorageConnectionError(StorageError):
    """Storage backend is unreachable or misconfigured."""

    pass


class NotFoundError(AiconError):
    """Lookup miss for a record or a stored object."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}")
        self.resource = resource
        self.identifier = identifier


class PersistenceError(AiconError):
    """Record store operation failed."""

    def __init__(self, message: str, operation: str):
        super().__init__(f"Database {operation} failed: {message}")
        self.operation = operation


class InvalidStatusTransitionError(AiconError):
    """Generation status change not allowed by the state machine."""

    def __init__(self, favicon_id: str, current: str, requested: str):
        super().__init__(
            f"Favicon {favicon_id} cannot move from {current} to {requested}"
        )
        self.favicon_id = favicon_id
        self.current = current
        self.requested = requested
