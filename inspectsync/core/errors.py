"""Error taxonomy for the inspection sync core."""


class SyncError(Exception):
    """Base class for all inspection sync failures."""

    pass


class AuthError(SyncError):
    """Raised when the server rejects the credentials or returns no token."""

    pass


class NetworkError(SyncError):
    """Raised when a request fails at the transport level."""

    pass


class ParseError(SyncError):
    """Raised when a response body is not the JSON shape we expect."""

    pass


class ServerError(SyncError):
    """Raised when the server answers with `success: false` or an error status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class IdLookupError(SyncError, LookupError):
    """Raised when an id does not resolve to a live entity."""

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} with id {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class StoreNotReadyError(SyncError):
    """Raised when the store is queried before bootstrap has succeeded."""

    pass


class BootstrapTimeoutError(SyncError, TimeoutError):
    """Raised when waiting for bootstrap exceeds its time bound."""

    pass


class BootstrapCancelledError(SyncError):
    """Recorded when an in-flight bootstrap is cancelled by `close()`."""

    pass
