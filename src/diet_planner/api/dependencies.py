"""Shared request dependencies: token auth and client allow list."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Depends, Header, HTTPException, Request, status

from diet_planner.config import parse_csv_ids

if TYPE_CHECKING:
    from diet_planner.containers import AppContainer
    from diet_planner.services.history import HistoryRegistry


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_registry(request: Request) -> HistoryRegistry:
    return get_container(request).history_registry


def _get_api_token(request: Request) -> str:
    return get_container(request).settings.api_token


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def ensure_client_allowed(request: Request, client_id: str) -> None:
    """Reject clients outside the configured allow list."""
    allowed = parse_csv_ids(get_container(request).settings.allowed_client_ids)
    if allowed is not None and client_id not in allowed:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)


async def require_client_access(client_id: str, request: Request) -> None:
    """Path dependency for routes scoped to ``{client_id}``."""
    ensure_client_allowed(request, client_id)
