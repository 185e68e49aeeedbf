from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.dependencies import get_autosave_registry, get_current_owner, get_db
from app.schemas.autosave import AutoSaveSessionOut, FieldEdits
from app.services.autosave import AutoSaveCoordinator, AutoSaveRegistry
from app.services.case_service import CaseService

router = APIRouter(tags=["Auto-save"])


def _session_out(session_id: str, coordinator: AutoSaveCoordinator) -> AutoSaveSessionOut:
    return AutoSaveSessionOut(
        session_id=session_id,
        case_id=coordinator.case_id,
        state=coordinator.state.value,
        status=coordinator.last_status.value if coordinator.last_status else None,
        completion_percentage=coordinator.completion_percentage,
        pending=coordinator.pending,
        last_saved_at=coordinator.last_saved_at,
    )


async def _get_session(registry: AutoSaveRegistry, case_id: str, session_id: str, owner: str) -> AutoSaveCoordinator:
    coordinator = await registry.get(case_id, session_id, owner=owner)
    if coordinator is None:
        raise HTTPException(status_code=404, detail="Editing session not found")
    return coordinator


@router.post("/{case_id}/sessions", response_model=AutoSaveSessionOut, status_code=201)
async def open_session(
    case_id: str,
    db: Session = Depends(get_db),
    owner: str = Depends(get_current_owner),
    registry: AutoSaveRegistry = Depends(get_autosave_registry),
):
    """
    Start an editing session seeded with the case's stored answers
    """
    c = CaseService(db).get_owned_case(case_id, owner)
    if not c:
        raise HTTPException(status_code=404, detail="Case not found")
    session_id, coordinator = await registry.open(case_id, initial_data=c.form_data, owner=owner)
    return _session_out(session_id, coordinator)


@router.patch("/{case_id}/sessions/{session_id}", response_model=AutoSaveSessionOut)
async def edit_fields(
    case_id: str,
    session_id: str,
    payload: FieldEdits,
    owner: str = Depends(get_current_owner),
    registry: AutoSaveRegistry = Depends(get_autosave_registry),
):
    coordinator = await _get_session(registry, case_id, session_id, owner)
    coordinator.update_fields(payload.fields)
    return _session_out(session_id, coordinator)


@router.post("/{case_id}/sessions/{session_id}/save", response_model=AutoSaveSessionOut)
async def save_now(
    case_id: str,
    session_id: str,
    owner: str = Depends(get_current_owner),
    registry: AutoSaveRegistry = Depends(get_autosave_registry),
):
    coordinator = await _get_session(registry, case_id, session_id, owner)
    await coordinator.save_now()
    return _session_out(session_id, coordinator)


@router.get("/{case_id}/sessions/{session_id}", response_model=AutoSaveSessionOut)
async def session_status(
    case_id: str,
    session_id: str,
    owner: str = Depends(get_current_owner),
    registry: AutoSaveRegistry = Depends(get_autosave_registry),
):
    return _session_out(session_id, await _get_session(registry, case_id, session_id, owner))


@router.delete("/{case_id}/sessions/{session_id}", response_model=AutoSaveSessionOut)
async def close_session(
    case_id: str,
    session_id: str,
    owner: str = Depends(get_current_owner),
    registry: AutoSaveRegistry = Depends(get_autosave_registry),
):
    """
    Save outstanding edits once and end the session
    """
    coordinator = await _get_session(registry, case_id, session_id, owner)
    await registry.close(session_id)
    return _session_out(session_id, coordinator)
