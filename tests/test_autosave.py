import asyncio

import pytest

from app.services.autosave import (
    AutoSaveCoordinator,
    AutoSaveRegistry,
    CaseStoreWriter,
    SaveState,
    SaveStatus,
)
from app.services.case_service import CaseService

DEBOUNCE = 0.2
RETRY = 0.1


class RecordingStore:
    """In-memory writer that records each snapshot and can fail on demand."""

    def __init__(self, fail_times=0, delay=0.0):
        self.fail_times = fail_times
        self.delay = delay
        self.writes = []
        self.stored = None
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, case_id, form_data, completion_percentage):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            self.writes.append((asyncio.get_running_loop().time(), dict(form_data), completion_percentage))
            if self.fail_times > 0:
                self.fail_times -= 1
                raise ConnectionError("store unavailable")
            self.stored = dict(form_data)
        finally:
            self.in_flight -= 1


def _coordinator(store, statuses=None, **kwargs):
    kwargs.setdefault("debounce_seconds", DEBOUNCE)
    kwargs.setdefault("retry_seconds", RETRY)
    return AutoSaveCoordinator(
        "case-1",
        store,
        on_status=statuses.append if statuses is not None else None,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_edits_within_window_coalesce_into_one_write():
    store = RecordingStore()
    coordinator = _coordinator(store)
    loop = asyncio.get_running_loop()

    coordinator.update_field("minor_name", "John")
    await asyncio.sleep(DEBOUNCE / 2)
    coordinator.update_field("minor_name", "John Doe")
    await asyncio.sleep(DEBOUNCE / 2)
    last_edit = loop.time()
    coordinator.update_field("minor_dob", "2010-05-15")
    assert coordinator.state == SaveState.PENDING_SAVE
    assert store.writes == []

    await asyncio.sleep(DEBOUNCE * 2.5)

    assert len(store.writes) == 1
    written_at, data, percentage = store.writes[0]
    assert data == {"minor_name": "John Doe", "minor_dob": "2010-05-15"}
    assert percentage == 2
    assert written_at >= last_edit + DEBOUNCE * 0.9
    assert coordinator.state == SaveState.IDLE
    assert coordinator.completion_percentage == 2
    assert coordinator.last_saved_at is not None


@pytest.mark.asyncio
async def test_unchanged_snapshot_is_not_rewritten():
    store = RecordingStore()
    statuses = []
    coordinator = _coordinator(store, statuses, initial_data={"minor_name": "John Doe"})

    await coordinator.save_now()
    assert store.writes == []

    coordinator.update_field("minor_name", "John Doe")
    await asyncio.sleep(DEBOUNCE * 2)
    assert store.writes == []
    assert statuses == []
    assert coordinator.state == SaveState.IDLE


@pytest.mark.asyncio
async def test_failed_writes_retry_until_they_succeed():
    store = RecordingStore(fail_times=2)
    statuses = []
    coordinator = _coordinator(store, statuses, debounce_seconds=0.05, retry_seconds=0.05)

    coordinator.update_fields({"minor_name": "John Doe", "guardian_name": "Jane Smith"})
    await asyncio.sleep(0.6)

    assert statuses == [
        SaveStatus.SAVING, SaveStatus.ERROR,
        SaveStatus.SAVING, SaveStatus.ERROR,
        SaveStatus.SAVING, SaveStatus.SAVED,
    ]
    assert len(store.writes) == 3
    assert store.stored == {"minor_name": "John Doe", "guardian_name": "Jane Smith"}
    assert coordinator.state == SaveState.IDLE


@pytest.mark.asyncio
async def test_retry_waits_for_backoff():
    store = RecordingStore(fail_times=1)
    coordinator = _coordinator(store, debounce_seconds=0.02, retry_seconds=0.3)

    coordinator.update_field("minor_name", "John Doe")
    await asyncio.sleep(0.1)
    assert len(store.writes) == 1
    assert coordinator.state == SaveState.ERROR
    assert coordinator.pending

    await asyncio.sleep(0.4)
    assert len(store.writes) == 2
    assert store.writes[1][0] - store.writes[0][0] >= 0.25
    assert coordinator.state == SaveState.IDLE


@pytest.mark.asyncio
async def test_edit_during_retry_wait_saves_latest_snapshot():
    store = RecordingStore(fail_times=1)
    coordinator = _coordinator(store, debounce_seconds=0.05, retry_seconds=0.5)

    coordinator.update_field("minor_name", "John")
    await asyncio.sleep(0.1)
    assert coordinator.state == SaveState.ERROR

    coordinator.update_field("minor_name", "John Doe")
    await asyncio.sleep(0.15)
    assert len(store.writes) == 2
    assert store.stored == {"minor_name": "John Doe"}
    assert coordinator.state == SaveState.IDLE


@pytest.mark.asyncio
async def test_writes_never_overlap():
    store = RecordingStore(delay=0.15)
    coordinator = _coordinator(store, debounce_seconds=0.02)

    coordinator.update_field("minor_name", "John")
    await asyncio.sleep(0.05)
    assert coordinator.state == SaveState.SAVING
    # lands while the first write is in flight
    coordinator.update_field("minor_name", "John Doe")
    await asyncio.sleep(0.5)

    assert store.max_in_flight == 1
    assert [data for _, data, _ in store.writes] == [{"minor_name": "John"}, {"minor_name": "John Doe"}]
    assert store.stored == {"minor_name": "John Doe"}
    assert coordinator.state == SaveState.IDLE


@pytest.mark.asyncio
async def test_save_now_skips_the_wait():
    store = RecordingStore()
    statuses = []
    coordinator = _coordinator(store, statuses)

    coordinator.update_field("minor_name", "John Doe")
    assert coordinator.pending
    assert await coordinator.save_now() == SaveStatus.SAVED
    assert not coordinator.pending
    assert len(store.writes) == 1

    await asyncio.sleep(DEBOUNCE * 1.5)
    assert len(store.writes) == 1
    assert statuses == [SaveStatus.SAVING, SaveStatus.SAVED]


@pytest.mark.asyncio
async def test_close_flushes_outstanding_edits_once():
    store = RecordingStore()
    coordinator = _coordinator(store)

    coordinator.update_field("minor_name", "John Doe")
    await coordinator.close()

    assert store.stored == {"minor_name": "John Doe"}
    assert len(store.writes) == 1
    with pytest.raises(RuntimeError):
        coordinator.update_field("minor_dob", "2010-05-15")


@pytest.mark.asyncio
async def test_close_after_failure_does_not_keep_retrying():
    store = RecordingStore(fail_times=10)
    coordinator = _coordinator(store, debounce_seconds=0.02, retry_seconds=0.05)

    coordinator.update_field("minor_name", "John Doe")
    await asyncio.sleep(0.03)
    await coordinator.close()
    writes = len(store.writes)
    await asyncio.sleep(0.2)
    assert len(store.writes) == writes
    assert not coordinator.pending


@pytest.mark.asyncio
async def test_close_without_flush_drops_edits():
    store = RecordingStore()
    coordinator = _coordinator(store)
    coordinator.update_field("minor_name", "John Doe")
    await coordinator.close(flush=False)
    await asyncio.sleep(DEBOUNCE * 1.5)
    assert store.writes == []


@pytest.mark.asyncio
async def test_status_callback_errors_are_contained():
    store = RecordingStore()

    def explode(status):
        raise ValueError("ui went away")

    coordinator = AutoSaveCoordinator("case-1", store, debounce_seconds=0.02, on_status=explode)
    coordinator.update_field("minor_name", "John Doe")
    assert await coordinator.save_now() == SaveStatus.SAVED
    assert store.stored == {"minor_name": "John Doe"}


@pytest.mark.asyncio
async def test_registry_sessions():
    store = RecordingStore()
    registry = AutoSaveRegistry(store, debounce_seconds=DEBOUNCE, retry_seconds=RETRY)

    session_id, coordinator = await registry.open("case-1", {"minor_name": "John"}, owner="demo@entrada.app")
    assert await registry.get("case-1", session_id) is coordinator
    assert await registry.get("case-1", session_id, owner="demo@entrada.app") is coordinator
    assert await registry.get("case-1", session_id, owner="stranger@example.com") is None
    assert await registry.get("case-2", session_id) is None

    coordinator.update_field("minor_name", "John Doe")
    await registry.close_all()
    assert await registry.get("case-1", session_id) is None
    assert store.stored == {"minor_name": "John Doe"}
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_idle_sessions_are_flushed_and_dropped():
    store = RecordingStore()
    registry = AutoSaveRegistry(store, debounce_seconds=1.0, retry_seconds=RETRY, idle_seconds=0.1)

    stale_id, stale = await registry.open("case-1")
    stale.update_field("minor_name", "John Doe")
    await asyncio.sleep(0.2)

    fresh_id, _ = await registry.open("case-2")
    assert store.stored == {"minor_name": "John Doe"}
    assert stale.pending is False
    assert await registry.get("case-1", stale_id) is None
    assert await registry.get("case-2", fresh_id) is not None
    assert len(registry) == 1
    await registry.close_all()


@pytest.mark.asyncio
async def test_lookup_keeps_a_session_alive():
    store = RecordingStore()
    registry = AutoSaveRegistry(store, debounce_seconds=DEBOUNCE, retry_seconds=RETRY, idle_seconds=0.3)

    session_id, coordinator = await registry.open("case-1")
    for _ in range(3):
        await asyncio.sleep(0.15)
        assert await registry.get("case-1", session_id) is coordinator
    assert len(registry) == 1
    await registry.close_all()


@pytest.mark.asyncio
async def test_zero_idle_timeout_keeps_sessions():
    registry = AutoSaveRegistry(RecordingStore(), debounce_seconds=DEBOUNCE, idle_seconds=0)

    session_id, coordinator = await registry.open("case-1")
    coordinator.last_activity -= 3600
    assert await registry.close_idle() == 0
    assert await registry.get("case-1", session_id) is coordinator
    await registry.close_all()


@pytest.mark.asyncio
async def test_case_store_writer_persists(db_session):
    from app.db.session import SessionLocal

    case = CaseService(db_session).create_case("demo@entrada.app")
    coordinator = AutoSaveCoordinator(case.id, CaseStoreWriter(SessionLocal), debounce_seconds=0.02)

    coordinator.update_fields({"minor_name": "John Doe", "minor_dob": "2010-05-15"})
    assert await coordinator.save_now() == SaveStatus.SAVED

    db_session.expire_all()
    stored = CaseService(db_session).get_case(case.id)
    assert stored.form_data == {"minor_name": "John Doe", "minor_dob": "2010-05-15"}
    assert stored.completion_percentage == 2
    assert stored.minor_name == "John Doe"


@pytest.mark.asyncio
async def test_case_store_writer_missing_case_is_an_error(db_session):
    from app.db.session import SessionLocal

    coordinator = AutoSaveCoordinator(
        "no-such-case", CaseStoreWriter(SessionLocal), debounce_seconds=0.02, retry_seconds=5
    )
    coordinator.update_field("minor_name", "John Doe")
    assert await coordinator.save_now() == SaveStatus.ERROR
    assert coordinator.state == SaveState.ERROR
    await coordinator.close(flush=False)
