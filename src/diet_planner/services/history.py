"""Snapshot-based undo/redo for a client's diet.

The local :class:`SnapshotStack` is only changed after the backend confirms a
restore, so a failed call never leaves the stack pointing at a snapshot the
database does not consider current. At most one undo/redo runs at a time;
requests arriving while busy, or within the debounce window of the previous
start, are dropped.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from diet_planner.domain.snapshots import Snapshot, SnapshotStack
from diet_planner.services.copy_paste import DayClipboard, MealClipboard
from diet_planner.services.notifications import DESTRUCTIVE_VARIANT, Notice, NoticeBoard
from diet_planner.services.realtime import RealtimeGuard
from diet_planner.services.snapshots import SnapshotRepository, build_snapshot_stack

_logger = logging.getLogger(__name__)

IDLE = "idle"
UNDO = "undo"
REDO = "redo"

BASELINE_TRIGGER = "client_created"
BASELINE_DESCRIPTION = "Automatyczny snapshot początkowy - punkt bazowy dla undo"

_PROGRESS_TITLES = {UNDO: "Cofanie...", REDO: "Przywracanie..."}
_SUCCESS_TITLES = {UNDO: "Cofnięto", REDO: "Przywrócono"}
_FAILURE_DESCRIPTIONS = {
    UNDO: "Nie udało się cofnąć operacji",
    REDO: "Nie udało się przywrócić operacji",
}
_SLOW_DESCRIPTION = "Operacja trwa dłużej niż zwykle"
_SUCCESS_DESCRIPTION = "Operacja została zakończona pomyślnie"


class SnapshotSaveError(RuntimeError):
    """Raised when a snapshot could not be written."""

    def __init__(self, client_id: str, trigger_type: str) -> None:
        super().__init__(f"Failed to save {trigger_type} snapshot for client {client_id}")
        self.client_id = client_id
        self.trigger_type = trigger_type


@dataclass
class SnapshotUndoRedo:
    """Undo/redo orchestrator for one client."""

    repository: SnapshotRepository
    client_id: str
    on_refresh: Callable[[], Awaitable[None]] | None = None
    on_close_editor: Callable[[], None] | None = None
    on_set_realtime_guard: Callable[[bool], None] | None = None
    notices: NoticeBoard = field(default_factory=NoticeBoard)
    clock: Callable[[], float] = time.monotonic
    history_limit: int = 20
    debounce_seconds: float = 0.5
    guard_release_seconds: float = 0.5
    slow_operation_seconds: float = 1.0
    success_notice_seconds: float = 0.5
    failure_notice_seconds: float = 5.0
    snapshot_stack: SnapshotStack | None = None
    current_snapshot_id: str | None = None
    is_loading: bool = False
    operation: str = IDLE
    _last_started_at: float | None = field(default=None, init=False, repr=False)
    _guard_release: asyncio.TimerHandle | None = field(
        default=None, init=False, repr=False
    )

    @property
    def can_undo(self) -> bool:
        return self.snapshot_stack is not None and bool(self.snapshot_stack.past)

    @property
    def can_redo(self) -> bool:
        return self.snapshot_stack is not None and bool(self.snapshot_stack.future)

    async def undo(self) -> bool:
        """Restore the previous snapshot; return True when it was applied."""
        return await self._run(UNDO)

    async def redo(self) -> bool:
        """Restore the next snapshot; return True when it was applied."""
        return await self._run(REDO)

    async def refresh_snapshots(self) -> None:
        """Reload history from the backend, creating a baseline if empty."""
        self.is_loading = True
        try:
            snapshots = await self._list_snapshots()
            if not snapshots:
                baseline = await asyncio.to_thread(
                    self.repository.create_snapshot,
                    self.client_id,
                    BASELINE_TRIGGER,
                    BASELINE_DESCRIPTION,
                    True,
                )
                if baseline is None:
                    _logger.error(
                        "Failed to create baseline snapshot for client %s",
                        self.client_id,
                    )
                    return
                self.snapshot_stack = SnapshotStack(past=[], current=baseline, future=[])
                self.current_snapshot_id = baseline.id
                return

            if not any(snapshot.is_current for snapshot in snapshots):
                _logger.warning(
                    "No current snapshot for client %s, repairing", self.client_id
                )
                await asyncio.to_thread(
                    self.repository.ensure_current_snapshot, self.client_id
                )
                snapshots = await self._list_snapshots()

            self.snapshot_stack = build_snapshot_stack(snapshots)
            self.current_snapshot_id = (
                self.snapshot_stack.current.id if self.snapshot_stack else None
            )
        except Exception:
            _logger.exception("Failed to load snapshots for client %s", self.client_id)
            self._post_failure("Nie udało się wczytać historii zmian")
        finally:
            self.is_loading = False

    def add_new_snapshot(self, snapshot: Snapshot) -> None:
        """Make a freshly created snapshot current and drop the redo branch."""
        stack = self.snapshot_stack
        if stack is None:
            self.snapshot_stack = SnapshotStack(past=[], current=snapshot, future=[])
        else:
            self.snapshot_stack = SnapshotStack(
                past=[stack.current, *stack.past], current=snapshot, future=[]
            )
        self.current_snapshot_id = snapshot.id

    async def create_snapshot(
        self,
        trigger_type: str,
        trigger_description: str | None = None,
        version_name: str | None = None,
    ) -> Snapshot | None:
        """Capture the diet and, unless manual, push it onto the history.

        Raises :class:`SnapshotSaveError` after posting a failure notice when
        the backend could not save it.
        """
        try:
            snapshot = await asyncio.to_thread(
                self.repository.create_snapshot,
                self.client_id,
                trigger_type,
                trigger_description,
                False,
                version_name,
            )
        except Exception as exc:
            _logger.exception(
                "Failed to create %s snapshot for client %s", trigger_type, self.client_id
            )
            self._post_failure("Nie udało się zapisać zmian w historii")
            raise SnapshotSaveError(self.client_id, trigger_type) from exc
        if snapshot is not None and not snapshot.is_manual:
            self.add_new_snapshot(snapshot)
        return snapshot

    async def _list_snapshots(self) -> list[Snapshot]:
        return await asyncio.to_thread(
            self.repository.list_snapshots, self.client_id, self.history_limit, True
        )

    def _accepts_request(self) -> bool:
        if self.operation != IDLE:
            _logger.debug("Rejected %s: %s in progress", self.client_id, self.operation)
            return False
        if (
            self._last_started_at is not None
            and self.clock() - self._last_started_at < self.debounce_seconds
        ):
            _logger.debug("Rejected %s: debounced", self.client_id)
            return False
        return True

    async def _run(self, kind: str) -> bool:
        if not self._accepts_request():
            return False
        stack = self.snapshot_stack
        if stack is None or not (stack.past if kind == UNDO else stack.future):
            _logger.warning("Nothing to %s for client %s", kind, self.client_id)
            return False

        self.operation = kind
        self.is_loading = True
        started_at = self.clock()
        self._last_started_at = started_at
        loop = asyncio.get_running_loop()
        slow_notice: list[Notice] = []
        slow_timer = loop.call_later(
            self.slow_operation_seconds,
            lambda: slow_notice.append(
                self.notices.post(_PROGRESS_TITLES[kind], _SLOW_DESCRIPTION)
            ),
        )
        if self.on_close_editor is not None:
            self.on_close_editor()
        self._raise_guard()

        target = stack.past[0] if kind == UNDO else stack.future[-1]
        try:
            restored = await self._restore(target)
            if not restored:
                self._post_failure(_FAILURE_DESCRIPTIONS[kind])
                return False

            if kind == UNDO:
                self.snapshot_stack = SnapshotStack(
                    past=stack.past[1:],
                    current=target,
                    future=[*stack.future, stack.current],
                )
            else:
                self.snapshot_stack = SnapshotStack(
                    past=[stack.current, *stack.past],
                    current=target,
                    future=stack.future[:-1],
                )
            self.current_snapshot_id = target.id
            _logger.info("%s for client %s -> snapshot %s", kind, self.client_id, target.id)

            if self.on_refresh is not None:
                try:
                    await self.on_refresh()
                except Exception:
                    _logger.exception("Refresh after %s failed", kind)

            if self.clock() - started_at > self.slow_operation_seconds:
                self.notices.post(
                    _SUCCESS_TITLES[kind],
                    _SUCCESS_DESCRIPTION,
                    duration_seconds=self.success_notice_seconds,
                )
            return True
        finally:
            slow_timer.cancel()
            for notice in slow_notice:
                self.notices.dismiss(notice.id)
            self.operation = IDLE
            self.is_loading = False
            self._schedule_guard_release(loop)

    def _post_failure(self, description: str) -> None:
        self.notices.post(
            "Błąd",
            description,
            variant=DESTRUCTIVE_VARIANT,
            duration_seconds=self.failure_notice_seconds,
        )

    async def _restore(self, target: Snapshot) -> bool:
        try:
            return await asyncio.to_thread(
                self.repository.restore_snapshot, target.id, True
            )
        except Exception:
            _logger.exception(
                "Restore of snapshot %s failed for client %s", target.id, self.client_id
            )
            return False

    def _raise_guard(self) -> None:
        if self._guard_release is not None:
            self._guard_release.cancel()
            self._guard_release = None
        if self.on_set_realtime_guard is not None:
            self.on_set_realtime_guard(True)

    def _schedule_guard_release(self, loop: asyncio.AbstractEventLoop) -> None:
        if self.on_set_realtime_guard is None:
            return
        if self.guard_release_seconds <= 0:
            self.on_set_realtime_guard(False)
            return
        self._guard_release = loop.call_later(
            self.guard_release_seconds, self.on_set_realtime_guard, False
        )


@dataclass
class ClientSession:
    """Per-client editing state."""

    history: SnapshotUndoRedo
    meal_clipboard: MealClipboard
    day_clipboard: DayClipboard
    realtime_guard: RealtimeGuard
    loaded: bool = False
    load_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)


@dataclass
class HistoryRegistry:
    """Creates and keeps one :class:`ClientSession` per client id."""

    repository: SnapshotRepository
    history_limit: int = 20
    debounce_seconds: float = 0.5
    guard_release_seconds: float = 0.5
    slow_operation_seconds: float = 1.0
    success_notice_seconds: float = 0.5
    failure_notice_seconds: float = 5.0
    clock: Callable[[], float] = time.monotonic
    sessions: dict[str, ClientSession] = field(default_factory=dict)

    def session(self, client_id: str) -> ClientSession:
        """Return the client's session, creating it without loading history."""
        session = self.sessions.get(client_id)
        if session is None:
            guard = RealtimeGuard(client_id)
            history = SnapshotUndoRedo(
                repository=self.repository,
                client_id=client_id,
                on_set_realtime_guard=guard.set,
                notices=NoticeBoard(clock=self.clock),
                clock=self.clock,
                history_limit=self.history_limit,
                debounce_seconds=self.debounce_seconds,
                guard_release_seconds=self.guard_release_seconds,
                slow_operation_seconds=self.slow_operation_seconds,
                success_notice_seconds=self.success_notice_seconds,
                failure_notice_seconds=self.failure_notice_seconds,
            )
            session = ClientSession(
                history=history,
                meal_clipboard=MealClipboard(),
                day_clipboard=DayClipboard(),
                realtime_guard=guard,
            )
            self.sessions[client_id] = session
            _logger.info("Created history session for client %s", client_id)
        return session

    async def history(self, client_id: str) -> SnapshotUndoRedo:
        """Return the client's orchestrator, loading history on first use.

        Concurrent first calls wait for a single load. A load that produced no
        history is retried on the next call.
        """
        session = self.session(client_id)
        async with session.load_lock:
            if not session.loaded:
                await self._load(session)
        return session.history

    async def reload(self, client_id: str) -> SnapshotUndoRedo:
        """Reload the client's history from the backend."""
        session = self.session(client_id)
        async with session.load_lock:
            await self._load(session)
        return session.history

    @staticmethod
    async def _load(session: ClientSession) -> None:
        await session.history.refresh_snapshots()
        session.loaded = session.history.snapshot_stack is not None
