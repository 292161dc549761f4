"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from diet_planner.adapters.macro_optimization_client import (
    HttpxMacroOptimizationClient,
)
from diet_planner.adapters.supabase_snapshot_repository import (
    SupabaseSnapshotRepository,
)
from diet_planner.config import Settings
from diet_planner.services.history import HistoryRegistry
from diet_planner.services.optimization import MacroOptimizationService
from diet_planner.services.snapshots import SnapshotRepository


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    snapshot_repository: SnapshotRepository
    history_registry: HistoryRegistry
    optimization_service: MacroOptimizationService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    snapshot_repository = SupabaseSnapshotRepository(supabase_client)
    history_registry = HistoryRegistry(
        repository=snapshot_repository,
        history_limit=resolved_settings.snapshot_history_limit,
        debounce_seconds=resolved_settings.undo_debounce_seconds,
        guard_release_seconds=resolved_settings.realtime_guard_release_seconds,
        slow_operation_seconds=resolved_settings.slow_operation_seconds,
        success_notice_seconds=resolved_settings.slow_success_notice_seconds,
        failure_notice_seconds=resolved_settings.failure_notice_seconds,
    )
    optimization_client = HttpxMacroOptimizationClient.create(
        base_url=resolved_settings.supabase_url,
        api_key=resolved_settings.supabase_service_key,
        timeout_seconds=resolved_settings.optimization_timeout_seconds,
    )
    optimization_service = MacroOptimizationService(
        client=optimization_client,
        retry_attempts=resolved_settings.optimization_retry_attempts,
    )

    async def close_resources() -> None:
        await optimization_client.close()

    return AppContainer(
        settings=resolved_settings,
        snapshot_repository=snapshot_repository,
        history_registry=history_registry,
        optimization_service=optimization_service,
        close_resources=close_resources,
    )
