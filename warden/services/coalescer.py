"""Run-or-defer scheduling of auto-action cycles for a single channel."""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class CycleState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    RUNNING_WITH_DEFERRED = "running_with_deferred"


class CycleCoalescer:
    """Guarantees at most one running cycle, remembering at most one re-run.

    Triggers that arrive while a cycle runs collapse into a single deferred
    run, which starts as soon as the current cycle completes.
    """

    def __init__(self, run_cycle: Callable[[], Awaitable[None]], name: str = ""):
        self._run_cycle = run_cycle
        self._name = name
        self._state = CycleState.IDLE
        self._task: Optional[asyncio.Task] = None
        self.completed_cycles = 0

    @property
    def state(self) -> CycleState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is not CycleState.IDLE

    def trigger(self) -> CycleState:
        """Start a cycle now, or defer one if a cycle is already running."""

        if self._state is CycleState.IDLE:
            self._state = CycleState.RUNNING
            self._task = asyncio.get_running_loop().create_task(self._drive())
        elif self._state is CycleState.RUNNING:
            self._state = CycleState.RUNNING_WITH_DEFERRED
            logger.debug("Cycle for %s deferred until the current one completes", self._name)
        return self._state

    def clear_deferred(self) -> None:
        """Forget a pending re-run; a cycle already running finishes normally."""

        if self._state is CycleState.RUNNING_WITH_DEFERRED:
            self._state = CycleState.RUNNING

    async def wait_idle(self) -> None:
        """Wait until no cycle is running or deferred."""

        while self._task is not None and not self._task.done():
            await asyncio.shield(self._task)

    async def _drive(self) -> None:
        while True:
            try:
                await self._run_cycle()
            except Exception:
                logger.exception("Auto-action cycle for %s failed", self._name)
            self.completed_cycles += 1

            if self._state is CycleState.RUNNING_WITH_DEFERRED:
                self._state = CycleState.RUNNING
                continue
            self._state = CycleState.IDLE
            return
