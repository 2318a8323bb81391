"""Inspection state store.

Owns the checklist reference data (sections, subsections, comments) loaded
once per session from the server, and the results a user attaches to
comments while inspecting.

Bootstrap runs on an asyncio event loop. Every read and write of the
collections goes through one re-entrant lock, so a UI thread calling queries
or mutations never races the loop thread installing the hierarchy.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass
from typing import Generic, TypeVar

from inspectsync.core.config import Settings, get_settings
from inspectsync.core.errors import (
    BootstrapCancelledError,
    BootstrapTimeoutError,
    IdLookupError,
    StoreNotReadyError,
    SyncError,
)
from inspectsync.core.metrics import observe_store_mutation
from inspectsync.core.structured_logging import log_json
from inspectsync.core.sync_context import new_session_id, session_context
from inspectsync.models.comment import SENTINEL_COMMENT_ID, Comment
from inspectsync.models.enums import BootstrapState, ChangeKind
from inspectsync.models.result import UNSYNCED_INSPECTION_ID, Result, next_severity
from inspectsync.models.section import Section, SubSection
from inspectsync.schemas.auth import AuthToken
from inspectsync.schemas.result import RemoteResult, ResultAck, ResultSubmission
from inspectsync.services.hierarchy_service import Hierarchy, build_hierarchy
from inspectsync.services.notification_service import ChangeNotifier, StoreEvent
from inspectsync.services.remote_client import Credentials, RemoteDataClient

logger = logging.getLogger(__name__)

NOT_FOUND_TEXT = "Not Found"

T = TypeVar("T")


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """Outcome of a lookup that never raises.

    `value` is always usable for display; `error` says whether it is a
    fallback.
    """

    value: T
    error: IdLookupError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class InspectionStore:
    """State of a single inspection session."""

    def __init__(
        self,
        client: RemoteDataClient,
        *,
        credentials: Credentials | None = None,
        settings: Settings | None = None,
        notifier: ChangeNotifier | None = None,
    ):
        self.client = client
        self.settings = settings or client.settings
        self.credentials = credentials or Credentials.from_settings(self.settings)
        self.notifier = notifier or ChangeNotifier()
        self.session_id = new_session_id()

        self._lock = threading.RLock()
        self._state = BootstrapState.PENDING
        self._bootstrap_error: SyncError | None = None
        self._bootstrap_task: asyncio.Task[bool] | None = None
        self._ready_async = asyncio.Event()
        self._ready_sync = threading.Event()
        self._token: AuthToken | None = None

        self._sections: dict[int, Section] = {}
        self._section_ids: list[int] = []
        self._subsections: dict[int, SubSection] = {}
        self._comments: dict[int, Comment] = {}

        # Indexed by result id; None marks a hole awaiting reuse.
        self._results: list[Result | None] = []
        self._next_result_id = 0
        self._reusable_result_ids: list[int] = []

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> InspectionStore:
        """Build a store with its own client from application settings."""
        settings = settings or get_settings()
        return cls(RemoteDataClient(settings), settings=settings)

    @property
    def state(self) -> BootstrapState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is BootstrapState.READY

    @property
    def had_bootstrap_error(self) -> bool:
        return self._state is BootstrapState.FAILED

    @property
    def bootstrap_error(self) -> SyncError | None:
        return self._bootstrap_error

    @property
    def token(self) -> AuthToken | None:
        return self._token

    def start(self) -> asyncio.Task[bool] | None:
        """Schedule bootstrap on the running loop.

        Returns the bootstrap task, or None when the store was never pending
        (hierarchy preloaded). Calling it again returns the same task.
        """
        if self._bootstrap_task is None and self._state is BootstrapState.PENDING:
            loop = asyncio.get_running_loop()
            self._bootstrap_task = loop.create_task(self._run_bootstrap())
        return self._bootstrap_task

    async def bootstrap(self) -> bool:
        """Run bootstrap (once) and return whether the store is ready."""
        task = self.start()
        if task is not None:
            await task
        return self.is_initialized

    async def wait_until_ready(self, timeout: float | None = None) -> bool:
        """Wait for bootstrap to finish.

        Returns True when the hierarchy is loaded and False when bootstrap
        failed. Raises BootstrapTimeoutError when `timeout` (default
        `bootstrap_timeout_seconds`) elapses first.
        """
        bound = self.settings.bootstrap_timeout_seconds if timeout is None else timeout
        try:
            await asyncio.wait_for(self._ready_async.wait(), timeout=bound)
        except asyncio.TimeoutError as exc:
            raise BootstrapTimeoutError(
                f"Inspection store not ready after {bound} seconds"
            ) from exc
        return self.is_initialized

    def wait_until_ready_sync(self, timeout: float | None = None) -> bool:
        """Blocking variant of `wait_until_ready` for threads outside the loop.

        Must not be called from the event loop thread running bootstrap.
        """
        bound = self.settings.bootstrap_timeout_seconds if timeout is None else timeout
        if not self._ready_sync.wait(bound):
            raise BootstrapTimeoutError(f"Inspection store not ready after {bound} seconds")
        return self.is_initialized

    def load_hierarchy(self, hierarchy: Hierarchy) -> None:
        """Install reference data and mark the store ready."""
        with self._lock:
            if self._state not in (BootstrapState.PENDING, BootstrapState.RUNNING):
                raise SyncError(f"Cannot load hierarchy in state {self._state.value}")
            self._sections = dict(hierarchy.sections)
            self._section_ids = list(self._sections)
            self._subsections = dict(hierarchy.subsections)
            self._comments = dict(hierarchy.comments)
            self._state = BootstrapState.READY

        self._ready_async.set()
        self._ready_sync.set()
        self.notifier.publish(StoreEvent(kind=ChangeKind.HIERARCHY_LOADED))

    async def close(self) -> None:
        """Cancel an in-flight bootstrap and close the HTTP client."""
        task = self._bootstrap_task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            # A task cancelled before its first step never reaches its handler.
            if self._state in (BootstrapState.PENDING, BootstrapState.RUNNING):
                self._fail(BootstrapCancelledError("Bootstrap was cancelled"))
        await self.client.aclose()

    async def _run_bootstrap(self) -> bool:
        with session_context(self.session_id):
            with self._lock:
                self._state = BootstrapState.RUNNING
            log_json(
                logger,
                logging.INFO,
                "bootstrap_start",
                base_url=self.settings.api_base_url,
                username=self.credentials.username,
            )

            try:
                token = await self.client.request_token(self.credentials)
                with self._lock:
                    self._token = token
                payload = await self.client.fetch_hierarchy(token)
                hierarchy = build_hierarchy(payload)
            except SyncError as exc:
                self._fail(exc)
                return False
            except asyncio.CancelledError:
                self._fail(BootstrapCancelledError("Bootstrap was cancelled"))
                raise

            self.load_hierarchy(hierarchy)
            log_json(
                logger,
                logging.INFO,
                "bootstrap_complete",
                sections=len(hierarchy.sections),
                subsections=len(hierarchy.subsections),
                comments=len(hierarchy.comments),
            )
            return True

    def _fail(self, error: SyncError) -> None:
        with self._lock:
            self._state = BootstrapState.FAILED
            self._bootstrap_error = error

        self._ready_async.set()
        self._ready_sync.set()
        log_json(
            logger,
            logging.ERROR,
            "bootstrap_failed",
            error=str(error),
            exception=error.__class__.__name__,
        )
        self.notifier.publish(StoreEvent(kind=ChangeKind.BOOTSTRAP_FAILED, value=error))

    def _require_ready(self) -> None:
        if self._state is BootstrapState.READY:
            return
        if self._state is BootstrapState.FAILED:
            raise StoreNotReadyError(
                f"Inspection store failed to bootstrap: {self._bootstrap_error}"
            )
        raise StoreNotReadyError("Inspection store has not finished bootstrapping")

    @property
    def sections(self) -> list[Section]:
        with self._lock:
            return list(self._sections.values())

    @property
    def subsections(self) -> list[SubSection]:
        with self._lock:
            return list(self._subsections.values())

    @property
    def comments(self) -> list[Comment]:
        with self._lock:
            return list(self._comments.values())

    @property
    def results(self) -> list[Result | None]:
        with self._lock:
            return list(self._results)

    @property
    def next_result_id(self) -> int:
        return self._next_result_id

    @property
    def reusable_result_ids(self) -> tuple[int, ...]:
        with self._lock:
            return tuple(self._reusable_result_ids)

    def get_result(self, result_id: int) -> Result | None:
        with self._lock:
            if 0 <= result_id < len(self._results):
                return self._results[result_id]
            return None

    def get_comment(self, comment_id: int) -> Comment | None:
        with self._lock:
            return self._comments.get(comment_id)

    def _section_at(self, position: int) -> Section | None:
        if 0 <= position < len(self._section_ids):
            return self._sections[self._section_ids[position]]
        return None

    def _subsection_at(self, section_position: int, subsection_position: int) -> SubSection | None:
        section = self._section_at(section_position)
        if section is None or not 0 <= subsection_position < len(section.subsection_ids):
            return None
        return self._subsections.get(section.subsection_ids[subsection_position])

    def get_subsection_text(self, section_index: int, subsection_position: int) -> str:
        """Name of the subsection shown at a section/subsection position.

        Returns NOT_FOUND_TEXT when the position or the subsection id does
        not resolve.
        """
        with self._lock:
            self._require_ready()
            subsection = self._subsection_at(section_index, subsection_position)
            if subsection is None:
                return NOT_FOUND_TEXT
            return subsection.name or ""

    def get_comment_id(
        self,
        section_position: int,
        subsection_position: int,
        row_position: int,
    ) -> int | None:
        """Translate a checklist row into a comment id.

        Variant rows are listed ahead of comment rows, so callers must pass
        `row_position >= len(variant_ids)`; rows that fall outside the
        comment list resolve to None.
        """
        with self._lock:
            self._require_ready()
            subsection = self._subsection_at(section_position, subsection_position)
            if subsection is None:
                return None

            comment_index = row_position - len(subsection.variant_ids)
            if not 0 <= comment_index < len(subsection.comment_ids):
                return None
            return subsection.comment_ids[comment_index]

    def lookup_comment_text(self, comment_id: int) -> Lookup[str]:
        with self._lock:
            self._require_ready()
            comment = self._comments.get(comment_id)
            if comment is None:
                return Lookup(
                    value=(
                        f"Error getting text for comment: Id {comment_id} "
                        f"out of range ({len(self._comments)})"
                    ),
                    error=IdLookupError("comment", comment_id),
                )
            return Lookup(value=comment.text)

    def get_comment_text(self, comment_id: int) -> str:
        return self.lookup_comment_text(comment_id).value

    def get_section_id_for_subsection(self, subsection_id: int) -> int | None:
        with self._lock:
            self._require_ready()
            subsection = self._subsections.get(subsection_id)
            return subsection.section_id if subsection is not None else None

    def next_inspection_id(self) -> int:
        # TODO: ask the server for the next inspection id once the offline
        # inspection cache exists; until then every result is unsynced.
        return UNSYNCED_INSPECTION_ID

    def _live_result(self, result_id: int) -> Result:
        result = None
        if 0 <= result_id < len(self._results):
            result = self._results[result_id]
        if result is None:
            raise IdLookupError("result", result_id)
        return result

    def _release_result(self, result: Result) -> None:
        comment = self._comments.get(result.comment_id)
        if comment is not None and comment.result_id == result.id:
            comment.result_id = None
        self._reusable_result_ids.append(result.id)
        self._results[result.id] = None

    def _emit(self, events: list[StoreEvent]) -> None:
        for event in events:
            observe_store_mutation(event.kind.value)
            self.notifier.publish(event)

    def add_result(self, comment_id: int) -> int:
        """Attach a new result to a comment and return its id.

        A comment holds at most one result: an existing one is removed first,
        which frees its id for the new result. Freed ids are reused last-in
        first-out before a new id is minted.
        """
        events: list[StoreEvent] = []
        with self._lock:
            self._require_ready()
            comment = self._comments.get(comment_id)
            if comment is None or comment_id == SENTINEL_COMMENT_ID:
                raise IdLookupError("comment", comment_id)

            if comment.result_id is not None:
                replaced = self._live_result(comment.result_id)
                self._release_result(replaced)
                events.append(StoreEvent(kind=ChangeKind.RESULT_REMOVED, entity_id=replaced.id))

            if self._reusable_result_ids:
                result_id = self._reusable_result_ids.pop()
                self._results[result_id] = Result(
                    id=result_id,
                    inspection_id=self.next_inspection_id(),
                    comment_id=comment_id,
                )
            else:
                result_id = self._next_result_id
                self._results.append(
                    Result(
                        id=result_id,
                        inspection_id=self.next_inspection_id(),
                        comment_id=comment_id,
                    )
                )
                self._next_result_id += 1

            comment.result_id = result_id
            events.append(
                StoreEvent(kind=ChangeKind.RESULT_ADDED, entity_id=result_id, value=comment_id)
            )

        with session_context(self.session_id):
            log_json(logger, logging.INFO, "result_added", result_id=result_id, comment_id=comment_id)
        self._emit(events)
        return result_id

    def remove_result(self, result_id: int) -> None:
        """Detach a result from its comment and free its id for reuse."""
        with self._lock:
            self._require_ready()
            result = self._live_result(result_id)
            self._release_result(result)

        with session_context(self.session_id):
            log_json(
                logger,
                logging.INFO,
                "result_removed",
                result_id=result_id,
                comment_id=result.comment_id,
            )
        self._emit([StoreEvent(kind=ChangeKind.RESULT_REMOVED, entity_id=result_id)])

    def change_severity(self, result_id: int) -> int:
        with self._lock:
            self._require_ready()
            result = self._live_result(result_id)
            result.severity = next_severity(result.severity)
            severity = result.severity

        self._emit(
            [StoreEvent(kind=ChangeKind.RESULT_SEVERITY_CHANGED, entity_id=result_id, value=severity)]
        )
        return severity

    def change_note(self, result_id: int, note: str) -> str:
        with self._lock:
            self._require_ready()
            self._live_result(result_id).note = note

        self._emit([StoreEvent(kind=ChangeKind.RESULT_NOTE_CHANGED, entity_id=result_id, value=note)])
        return note

    def change_photo(self, result_id: int, photo_path: str) -> str:
        with self._lock:
            self._require_ready()
            self._live_result(result_id).photo_path = photo_path

        self._emit(
            [StoreEvent(kind=ChangeKind.RESULT_PHOTO_CHANGED, entity_id=result_id, value=photo_path)]
        )
        return photo_path

    def change_flags(self, result_id: int, flags: list[int]) -> list[int]:
        with self._lock:
            self._require_ready()
            self._live_result(result_id).flags = list(flags)

        self._emit(
            [StoreEvent(kind=ChangeKind.RESULT_FLAGS_CHANGED, entity_id=result_id, value=flags)]
        )
        return flags

    def _session_token(self) -> AuthToken:
        self._require_ready()
        if self._token is None:
            raise StoreNotReadyError("Inspection store has no session token")
        return self._token

    async def submit_result(self, result_id: int) -> ResultAck:
        """Post one result to the server. Failures propagate; nothing is retried."""
        with self._lock:
            token = self._session_token()
            submission = ResultSubmission.from_result(self._live_result(result_id))

        with session_context(self.session_id):
            ack = await self.client.submit_result(token, submission)
            log_json(
                logger,
                logging.INFO,
                "result_submitted",
                result_id=result_id,
                comment_id=submission.com_id,
            )
        self._emit([StoreEvent(kind=ChangeKind.RESULT_SUBMITTED, entity_id=result_id, value=ack)])
        return ack

    async def pull_results(self) -> list[RemoteResult]:
        """Read the results the server already holds for this account."""
        with self._lock:
            token = self._session_token()

        with session_context(self.session_id):
            return await self.client.fetch_results(token)
