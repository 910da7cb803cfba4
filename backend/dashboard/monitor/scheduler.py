"""Drive reconciliation cycles on mount, on user request and on a timer.

At most one cycle is active at a time. A cycle that gets superseded or torn
down keeps running until its network calls return, but its results are
dropped because its cancellation token is checked before anything is
applied.
"""

from __future__ import annotations

import asyncio
import contextlib
from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

from dashboard.monitor.cancellation import CancellationToken
from shared.auth.session import AuthRequiredError
from shared.dal.errors import PersistenceError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from shared.dal.models import ServerRecord

    CycleRunner = Callable[[CancellationToken], Awaitable[list[ServerRecord]]]
    UpdateCallback = Callable[[list[ServerRecord], "RefreshTrigger"], Awaitable[None]]
    ErrorCallback = Callable[[Exception], Awaitable[None]]

logger = structlog.get_logger()

DEFAULT_REFRESH_INTERVAL_SECONDS = 120.0


class SchedulerState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    REFRESHING_USER = "refreshing_user"
    REFRESHING_TIMER = "refreshing_timer"
    TORN_DOWN = "torn_down"


class RefreshTrigger(StrEnum):
    INITIAL = "initial"
    USER = "user"
    TIMER = "timer"


_STATE_FOR_TRIGGER = {
    RefreshTrigger.INITIAL: SchedulerState.LOADING,
    RefreshTrigger.USER: SchedulerState.REFRESHING_USER,
    RefreshTrigger.TIMER: SchedulerState.REFRESHING_TIMER,
}


class RefreshScheduler:
    """Own the timing and cancellation of reconciliation cycles for one view.

    ``run_cycle`` performs one fetch-and-reconcile pass. ``on_update``
    receives every applied collection; ``on_error`` receives every failure
    of a cycle that was not cancelled. Call ``start()`` when the view
    mounts and ``teardown()`` when it goes away.
    """

    def __init__(
        self,
        run_cycle: CycleRunner,
        *,
        interval_seconds: float = DEFAULT_REFRESH_INTERVAL_SECONDS,
        on_update: UpdateCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self._run_cycle = run_cycle
        self._interval_seconds = interval_seconds
        self._on_update = on_update
        self._on_error = on_error
        self._state = SchedulerState.IDLE
        self._records: list[ServerRecord] = []
        self._cycle_task: asyncio.Task[None] | None = None
        self._cycle_token: CancellationToken | None = None
        self._timer_task: asyncio.Task[None] | None = None
        self._started = False

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def records(self) -> list[ServerRecord]:
        """Last applied collection (empty until the first cycle completes)."""
        return list(self._records)

    @property
    def is_active(self) -> bool:
        return self._cycle_task is not None and not self._cycle_task.done()

    @property
    def timer_armed(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    def start(self) -> None:
        """Begin the initial load. Calling it again is a no-op."""
        if self._started or self._state is SchedulerState.TORN_DOWN:
            return
        self._started = True
        self._start_cycle(RefreshTrigger.INITIAL)

    def refresh_now(self) -> bool:
        """Start a user-triggered cycle. Return False when one is already running."""
        if self._state is SchedulerState.TORN_DOWN:
            return False
        if self.is_active:
            logger.debug("manual refresh ignored, cycle already active", state=self._state)
            return False
        self._started = True
        self._start_cycle(RefreshTrigger.USER)
        return True

    def reload(self) -> None:
        """Supersede any active cycle with a fresh user-triggered one.

        Used when the session changes: results fetched for the previous user
        must never be applied.
        """
        if self._state is SchedulerState.TORN_DOWN:
            return
        task = self._cycle_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        self._started = True
        self._start_cycle(RefreshTrigger.USER)

    async def wait_for_cycle(self) -> list[ServerRecord]:
        """Wait for the active cycle (if any) and return the current collection."""
        task = self._cycle_task
        if task is not None and task is not asyncio.current_task():
            await asyncio.wait({task})
        return self.records

    async def teardown(self) -> None:
        """Cancel in-flight work and the pending timer. Final state is TORN_DOWN."""
        if self._state is SchedulerState.TORN_DOWN:
            return
        self._state = SchedulerState.TORN_DOWN

        timer = self._timer_task
        self._timer_task = None
        if timer is not None and timer is not asyncio.current_task():
            timer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await timer

        if self._cycle_token is not None:
            self._cycle_token.cancel()
        task = self._cycle_task
        self._cycle_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        logger.debug("refresh scheduler torn down")

    def _start_cycle(self, trigger: RefreshTrigger) -> None:
        if self._cycle_token is not None:
            self._cycle_token.cancel()
        token = CancellationToken()
        self._cycle_token = token
        self._state = _STATE_FOR_TRIGGER[trigger]
        self._cycle_task = asyncio.create_task(self._run(trigger, token))

    async def _run(self, trigger: RefreshTrigger, token: CancellationToken) -> None:
        log = logger.bind(trigger=trigger)
        try:
            records = await self._run_cycle(token)
            if token.cancelled:
                log.debug("discarding results of cancelled cycle")
                return
            self._records = records
            log.debug("refresh cycle applied", server_count=len(records))
            if self._on_update is not None:
                await self._on_update(self.records, trigger)
        except (PersistenceError, AuthRequiredError) as e:
            if not token.cancelled:
                log.warning("refresh cycle failed", error=str(e))
                await self._report(e)
        except Exception as e:
            if not token.cancelled:
                log.exception("refresh cycle crashed")
                await self._report(e)
        finally:
            if self._cycle_token is token and self._state is not SchedulerState.TORN_DOWN:
                self._state = SchedulerState.IDLE
                self._cycle_task = None
                self._arm_timer()

    async def _report(self, exc: Exception) -> None:
        if self._on_error is not None:
            await self._on_error(exc)

    def _arm_timer(self) -> None:
        if self._state is SchedulerState.TORN_DOWN or self.timer_armed:
            return
        self._timer_task = asyncio.create_task(self._wait_and_fire())

    async def _wait_and_fire(self) -> None:
        await asyncio.sleep(self._interval_seconds)
        self._timer_task = None
        if self._state is SchedulerState.TORN_DOWN:
            return
        if self.is_active:
            logger.debug("timer fire dropped, cycle already active", state=self._state)
            self._arm_timer()
            return
        self._start_cycle(RefreshTrigger.TIMER)
