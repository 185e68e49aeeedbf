# app/services/autosave.py
"""
Debounced auto-save for one case-editing session.

Field edits are collected in memory; a single trailing write is issued once
the session has been quiet for the debounce window. Failed writes are retried
on a fixed backoff until they succeed or the session is closed. Writes from
one session never overlap.
"""
import asyncio
import datetime
import json
import logging
import time
import uuid
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from fastapi.concurrency import run_in_threadpool

from app.core.config import settings
from app.services.case_service import CaseService
from app.services.completion import estimate

logger = logging.getLogger(__name__)

Writer = Callable[[str, Dict[str, Any], int], Awaitable[Any]]
StatusCallback = Callable[["SaveStatus"], None]


class SaveState(str, Enum):
    IDLE = "idle"
    PENDING_SAVE = "pending_save"
    SAVING = "saving"
    ERROR = "error"


class SaveStatus(str, Enum):
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


def _serialize(form_data: Mapping[str, Any]) -> str:
    return json.dumps(form_data, sort_keys=True, default=str)


class AutoSaveCoordinator:
    def __init__(
        self,
        case_id: str,
        writer: Writer,
        *,
        initial_data: Mapping[str, Any] = None,
        debounce_seconds: float = None,
        retry_seconds: float = None,
        on_status: Optional[StatusCallback] = None,
        estimator: Callable[[Mapping[str, Any]], int] = estimate,
    ):
        self.case_id = case_id
        self._writer = writer
        self._estimator = estimator
        self._on_status = on_status
        self.debounce_seconds = (
            debounce_seconds if debounce_seconds is not None else settings.AUTOSAVE_DEBOUNCE_MS / 1000
        )
        self.retry_seconds = (
            retry_seconds if retry_seconds is not None else settings.AUTOSAVE_RETRY_MS / 1000
        )

        self._form_data: Dict[str, Any] = dict(initial_data or {})
        # what the store already holds, so opening a session does not rewrite it
        self._last_saved = _serialize(self._form_data)
        self._timer: Optional[asyncio.TimerHandle] = None
        self._write_lock = asyncio.Lock()
        self._flushes = set()
        self._closed = False
        self.last_activity = time.monotonic()

        self.state = SaveState.IDLE
        self.last_status: Optional[SaveStatus] = None
        self.last_saved_at: Optional[datetime.datetime] = None
        self.completion_percentage = self._estimator(self._form_data)

    @property
    def form_data(self) -> Dict[str, Any]:
        return dict(self._form_data)

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def touch(self):
        self.last_activity = time.monotonic()

    def idle_for(self) -> float:
        return time.monotonic() - self.last_activity

    def update_field(self, name: str, value: Any):
        self.update_fields({name: value})

    def update_fields(self, fields: Mapping[str, Any]):
        if self._closed:
            raise RuntimeError(f"auto-save session for case {self.case_id} is closed")
        self.touch()
        self._form_data.update(fields)
        self._schedule(self.debounce_seconds)

    async def save_now(self) -> Optional[SaveStatus]:
        """Skip the debounce wait and write the current snapshot."""
        self.touch()
        self._cancel_timer()
        await self._flush()
        return self.last_status

    async def close(self, flush: bool = True):
        """End the session: stop timers, optionally write outstanding edits once."""
        had_pending = self.pending
        self._cancel_timer()
        self._closed = True
        if flush and had_pending:
            await self._flush(retry=False)
        if self._flushes:
            await asyncio.gather(*self._flushes, return_exceptions=True)
        self._cancel_timer()

    # -------------------
    # scheduling
    # -------------------
    def _schedule(self, delay: float):
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, self._fire)
        if self.state != SaveState.SAVING:
            self.state = SaveState.PENDING_SAVE

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self):
        self._timer = None
        task = asyncio.ensure_future(self._flush())
        self._flushes.add(task)
        task.add_done_callback(self._flushes.discard)

    def _emit(self, status: SaveStatus):
        self.last_status = status
        if self._on_status is None:
            return
        try:
            self._on_status(status)
        except Exception:
            logger.exception("auto-save status callback failed for case %s", self.case_id)

    # -------------------
    # persistence
    # -------------------
    async def _flush(self, retry: bool = True):
        async with self._write_lock:
            snapshot = dict(self._form_data)
            serialized = _serialize(snapshot)
            if serialized == self._last_saved:
                if self._timer is None:
                    self.state = SaveState.IDLE
                return

            self.state = SaveState.SAVING
            self._emit(SaveStatus.SAVING)
            percentage = self._estimator(snapshot)
            try:
                await self._writer(self.case_id, snapshot, percentage)
            except Exception as exc:
                logger.warning("Auto-save failed for case %s: %s", self.case_id, exc)
                self.state = SaveState.ERROR
                self._emit(SaveStatus.ERROR)
                if retry and not self._closed:
                    # an edit may already have re-armed the debounce timer
                    if self._timer is None:
                        self._schedule(self.retry_seconds)
                        self.state = SaveState.ERROR
                    else:
                        self.state = SaveState.PENDING_SAVE
                return

            self._last_saved = serialized
            self.completion_percentage = percentage
            self.last_saved_at = datetime.datetime.now(datetime.timezone.utc)
            self.state = SaveState.PENDING_SAVE if self._timer is not None else SaveState.IDLE
            self._emit(SaveStatus.SAVED)
            logger.debug("Auto-saved case %s (%s%%)", self.case_id, percentage)


class CaseStoreWriter:
    """Writer that persists snapshots through CaseService on a worker thread."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def __call__(self, case_id: str, form_data: Dict[str, Any], completion_percentage: int):
        await run_in_threadpool(self._write, case_id, form_data, completion_percentage)

    def _write(self, case_id, form_data, completion_percentage):
        db = self.session_factory()
        try:
            saved = CaseService(db).save_form_data(case_id, form_data, completion_percentage)
            if saved is None:
                raise LookupError(f"case {case_id} not found")
        finally:
            db.close()


class AutoSaveRegistry:
    """
    Open editing sessions, one coordinator each.

    Sessions left untouched for idle_seconds are flushed and dropped the
    next time a session is opened or looked up.
    """

    def __init__(
        self,
        writer: Writer,
        debounce_seconds: float = None,
        retry_seconds: float = None,
        idle_seconds: float = None,
    ):
        self.writer = writer
        self.debounce_seconds = debounce_seconds
        self.retry_seconds = retry_seconds
        self.idle_seconds = idle_seconds if idle_seconds is not None else settings.AUTOSAVE_SESSION_IDLE_SECONDS
        self._sessions: Dict[str, AutoSaveCoordinator] = {}
        self._owners: Dict[str, Optional[str]] = {}

    def __len__(self):
        return len(self._sessions)

    async def open(self, case_id: str, initial_data: Mapping[str, Any] = None, owner: str = None):
        await self.close_idle()
        session_id = uuid.uuid4().hex
        coordinator = AutoSaveCoordinator(
            case_id,
            self.writer,
            initial_data=initial_data,
            debounce_seconds=self.debounce_seconds,
            retry_seconds=self.retry_seconds,
        )
        self._sessions[session_id] = coordinator
        self._owners[session_id] = owner
        logger.info("Opened auto-save session %s for case %s", session_id, case_id)
        return session_id, coordinator

    async def get(self, case_id: str, session_id: str, owner: str = None) -> Optional[AutoSaveCoordinator]:
        await self.close_idle()
        coordinator = self._sessions.get(session_id)
        if coordinator is None or coordinator.case_id != case_id:
            return None
        if owner is not None and self._owners.get(session_id) != owner:
            return None
        coordinator.touch()
        return coordinator

    async def close(self, session_id: str, flush: bool = True):
        coordinator = self._sessions.pop(session_id, None)
        self._owners.pop(session_id, None)
        if coordinator is not None:
            await coordinator.close(flush=flush)
        return coordinator

    async def close_idle(self) -> int:
        if not self.idle_seconds:
            return 0
        stale = [sid for sid, c in self._sessions.items() if c.idle_for() > self.idle_seconds]
        for session_id in stale:
            case_id = self._sessions[session_id].case_id
            logger.info("Closing idle auto-save session %s for case %s", session_id, case_id)
            await self.close(session_id)
        return len(stale)

    async def close_all(self):
        for session_id in list(self._sessions):
            await self.close(session_id)
