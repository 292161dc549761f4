"""Undo/redo and snapshot endpoints."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, status

from diet_planner.api.dependencies import (
    get_container,
    get_registry,
    require_api_token,
    require_client_access,
)
from diet_planner.api.schemas import CreateSnapshotRequest  # noqa: TC001
from diet_planner.services.history import SnapshotSaveError

if TYPE_CHECKING:
    from diet_planner.domain.snapshots import Snapshot
    from diet_planner.services.history import SnapshotUndoRedo

router = APIRouter(
    prefix="/clients/{client_id}",
    tags=["history"],
    dependencies=[Depends(require_api_token), Depends(require_client_access)],
)
snapshots_router = APIRouter(
    prefix="/snapshots", tags=["history"], dependencies=[Depends(require_api_token)]
)


@router.get("/history")
async def history_state(client_id: str, request: Request) -> dict[str, object]:
    """Return undo/redo availability and the snapshot stack."""
    history = await get_registry(request).history(client_id)
    return _history_payload(history)


@router.post("/history/undo")
async def undo(client_id: str, request: Request) -> dict[str, object]:
    """Undo the last change; ``applied`` is False when the request was dropped."""
    history = await get_registry(request).history(client_id)
    applied = await history.undo()
    return {"applied": applied, **_history_payload(history)}


@router.post("/history/redo")
async def redo(client_id: str, request: Request) -> dict[str, object]:
    """Redo the last undone change."""
    history = await get_registry(request).history(client_id)
    applied = await history.redo()
    return {"applied": applied, **_history_payload(history)}


@router.post("/history/refresh")
async def refresh(client_id: str, request: Request) -> dict[str, object]:
    """Reload history from the database."""
    history = await get_registry(request).reload(client_id)
    return _history_payload(history)


@router.post("/snapshots", status_code=status.HTTP_201_CREATED)
async def create_snapshot(
    client_id: str, payload: CreateSnapshotRequest, request: Request
) -> dict[str, object]:
    """Capture the current diet after an edit."""
    history = await get_registry(request).history(client_id)
    try:
        snapshot = await history.create_snapshot(
            payload.trigger_type, payload.trigger_description, payload.version_name
        )
    except SnapshotSaveError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Snapshot could not be saved",
        ) from exc
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Client not found"
        )
    return {"snapshot": _snapshot_summary(snapshot), **_history_payload(history)}


@router.delete("/snapshots")
async def prune_snapshots(
    client_id: str, request: Request, keep_count: int = 50
) -> dict[str, str]:
    """Delete old snapshots beyond ``keep_count``."""
    repository = get_container(request).snapshot_repository
    await asyncio.to_thread(repository.delete_old_snapshots, client_id, keep_count)
    return {"status": "ok"}


@snapshots_router.post("/{snapshot_id}/restore-notes")
async def restore_notes(snapshot_id: str, request: Request) -> dict[str, str]:
    """Restore a client's important notes from a snapshot."""
    repository = get_container(request).snapshot_repository
    restored = await asyncio.to_thread(
        repository.restore_important_notes_snapshot, snapshot_id
    )
    if not restored:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Snapshot has no important notes to restore",
        )
    return {"status": "ok"}


def _history_payload(history: SnapshotUndoRedo) -> dict[str, object]:
    stack = history.snapshot_stack
    return {
        "client_id": history.client_id,
        "can_undo": history.can_undo,
        "can_redo": history.can_redo,
        "is_loading": history.is_loading,
        "operation": history.operation,
        "current_snapshot_id": history.current_snapshot_id,
        "past": [_snapshot_summary(snap) for snap in stack.past] if stack else [],
        "future": [_snapshot_summary(snap) for snap in stack.future] if stack else [],
        "notices": [
            {
                "id": notice.id,
                "title": notice.title,
                "description": notice.description,
                "variant": notice.variant,
            }
            for notice in history.notices.active()
        ],
    }


def _snapshot_summary(snapshot: Snapshot) -> dict[str, object]:
    return {
        "id": snapshot.id,
        "created_at": snapshot.created_at.isoformat(),
        "trigger_type": snapshot.trigger_type,
        "trigger_description": snapshot.trigger_description,
        "version_name": snapshot.version_name,
        "is_current": snapshot.is_current,
        "total_calories": snapshot.total_calories,
    }
