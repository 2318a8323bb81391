"""Enumerations for server endpoints, bootstrap state and change events."""

from enum import Enum


class Endpoint(str, Enum):
    """Logical endpoints on the inspection server.

    Each member carries its HTTP method, path (relative to the API base URL)
    and whether the session token must be sent as a query parameter.
    """

    TOKEN = "token"
    HIERARCHY = "hierarchy"
    RESULTS_READ = "results_read"
    RESULTS_WRITE = "results_write"

    @classmethod
    def get_route(cls, endpoint: "Endpoint") -> tuple[str, str, bool]:
        """Get (method, path, requires_token) for an endpoint."""
        routes = {
            cls.TOKEN: ("POST", "/users/token.json", False),
            cls.HIERARCHY: ("GET", "/sections.json", True),
            cls.RESULTS_READ: ("GET", "/results.json", True),
            cls.RESULTS_WRITE: ("POST", "/results/add", True),
        }
        return routes[endpoint]

    @property
    def method(self) -> str:
        return self.get_route(self)[0]

    @property
    def path(self) -> str:
        return self.get_route(self)[1]

    @property
    def requires_token(self) -> bool:
        return self.get_route(self)[2]


class BootstrapState(str, Enum):
    """Bootstrap lifecycle of an inspection store.

    Workflow:
    - PENDING: constructed, nothing requested yet
    - RUNNING: token or hierarchy request in flight
    - READY: hierarchy parsed, queries are valid
    - FAILED: terminal for the session, never retried
    """

    PENDING = "pending"
    RUNNING = "running"
    READY = "ready"
    FAILED = "failed"


class ChangeKind(str, Enum):
    """Change notifications emitted by the inspection store."""

    # Bootstrap
    HIERARCHY_LOADED = "hierarchy.loaded"
    BOOTSTRAP_FAILED = "bootstrap.failed"

    # Result
    RESULT_ADDED = "result.added"
    RESULT_REMOVED = "result.removed"
    RESULT_SEVERITY_CHANGED = "result.severity_changed"
    RESULT_NOTE_CHANGED = "result.note_changed"
    RESULT_PHOTO_CHANGED = "result.photo_changed"
    RESULT_FLAGS_CHANGED = "result.flags_changed"
    RESULT_SUBMITTED = "result.submitted"
