"""Remote engine health tracking.

``OrchestratorState`` owns the health record and the user's remote
preference for the lifetime of one orchestrator. It is created and passed
in explicitly; nothing here is module-level state.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from isogas.core.models import EngineHealth, HealthStatus

logger = logging.getLogger(__name__)

DEFAULT_HEALTH_INTERVAL = 30.0  # s

Probe = Callable[[], Awaitable[Any]]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class OrchestratorState:
    """Health state and remote preference of a hybrid converter.

    Lifecycle: ``start()`` runs an initial probe and schedules periodic
    probes every *interval* seconds; ``refresh()`` re-checks on demand;
    ``stop()`` cancels polling.

    Args:
        probe: Coroutine function that succeeds when the remote engine is
            reachable. ``None`` means no remote engine is configured.
        interval: Polling period [s].
        remote_enabled: Initial remote preference.
    """

    def __init__(
        self,
        probe: Probe | None = None,
        interval: float = DEFAULT_HEALTH_INTERVAL,
        remote_enabled: bool = True,
    ):
        self._probe = probe
        self.interval = interval
        self._health = EngineHealth()
        self._remote_enabled = remote_enabled and probe is not None
        self._task: asyncio.Task | None = None
        self._probe_lock = asyncio.Lock()

    # --- Read access ---

    @property
    def health(self) -> EngineHealth:
        return self._health

    @property
    def remote_enabled(self) -> bool:
        return self._remote_enabled

    @property
    def use_remote(self) -> bool:
        """True if the remote engine should be tried for the next conversion."""
        return self._remote_enabled and self._health.is_connected

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # --- Remote preference ---

    def enable_remote(self) -> bool:
        """Re-enable the remote engine; only possible while connected."""
        if not self._health.is_connected:
            logger.warning("Cannot enable remote engine while %s", self._health.status.value)
            return False
        self._remote_enabled = True
        return True

    def disable_remote(self) -> None:
        self._remote_enabled = False

    # --- Probing ---

    def _set_health(self, health: EngineHealth) -> None:
        previous = self._health.status
        self._health = health
        if health.status != previous:
            logger.info("Remote engine %s -> %s", previous.value, health.status.value)

    async def check(self) -> EngineHealth:
        """Probe the remote engine once and record the outcome."""
        if self._probe is None:
            self._set_health(EngineHealth(HealthStatus.DISCONNECTED, "No remote engine configured", _now()))
            return self._health

        async with self._probe_lock:
            try:
                await self._probe()
            except Exception as exc:
                self._set_health(EngineHealth(HealthStatus.DISCONNECTED, str(exc), _now()))
                if self._remote_enabled:
                    logger.warning("Remote engine unavailable (%s); remote conversion disabled", exc)
                self._remote_enabled = False
            else:
                self._set_health(EngineHealth(HealthStatus.CONNECTED, None, _now()))
        return self._health

    async def refresh(self) -> EngineHealth:
        """Explicit re-check requested by the user."""
        self._set_health(
            EngineHealth(HealthStatus.CHECKING, self._health.last_error, self._health.last_checked_at)
        )
        return await self.check()

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.check()

    async def start(self) -> EngineHealth:
        """Run the initial probe and start periodic polling."""
        health = await self.check()
        if not self.running and self._probe is not None:
            self._task = asyncio.get_running_loop().create_task(self._poll())
        return health

    async def stop(self) -> None:
        """Cancel periodic polling."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
