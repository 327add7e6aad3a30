"""
Per-entity device state controller.

Owns the observed state, the optimistic overlay and the connectivity status
for one hub entity, together with its polling loop, refresh throttle and
post-command follow-up polls. All timers run on the event loop through
``loop.call_later``; disposing the controller cancels them but never cancels
requests already in flight, whose results are dropped instead.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, List, Optional, Sequence, Set

from src.domain.entities.device import (
    CONTROLLABLE_DOMAINS,
    DeviceCommand,
    DeviceDomain,
    DeviceSnapshot,
    EntityState,
    parse_entity_id,
    resolve_service,
)
from src.domain.entities.errors import (
    CommandError,
    CommandInProgressError,
    ConfigurationError,
    DomainError,
    HttpError,
    UnsupportedCommandError,
)
from src.domain.gateways.home_assistant_gateway import IHomeAssistantGateway
from src.domain.services.state_reconciler import (
    displayed_state,
    is_network_failure,
    predict_toggle,
    reconcile_overlay,
)
from src.shared import get_logger

logger = get_logger(__name__)

DEFAULT_REFRESH_INTERVAL = 5.0
DEFAULT_THROTTLE_INTERVAL = 0.3
DEFAULT_FOLLOW_UP_DELAYS = (0.2, 0.6, 1.2)


class DeviceStateController:
    """Optimistic state reconciliation for a single hub entity."""

    def __init__(
        self,
        gateway: IHomeAssistantGateway,
        entity_id: Optional[str],
        domain: Optional[DeviceDomain] = None,
        *,
        auto_refresh: bool = True,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        throttle_interval: float = DEFAULT_THROTTLE_INTERVAL,
        follow_up_delays: Sequence[float] = DEFAULT_FOLLOW_UP_DELAYS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            gateway: Hub client used for reads and commands.
            entity_id: ``domain.object_id`` identifier; ``None`` or empty leaves
                the controller unconfigured (disconnected, not controllable).
            domain: Explicit domain; derived from ``entity_id`` when omitted.
            auto_refresh: Whether ``start()`` fetches and begins polling.
            refresh_interval: Seconds between background polls.
            throttle_interval: Minimum seconds between two hub reads.
            follow_up_delays: Seconds after command issuance at which extra
                polls pick up the hub's eventual consistency.
            clock: Monotonic clock, injectable for tests.

        Raises:
            InvalidEntityIdError: If ``entity_id`` is set but malformed.
        """
        self._gateway = gateway
        self._entity_id = (entity_id or "").strip() or None
        if domain is None and self._entity_id:
            entity_domain, _ = parse_entity_id(self._entity_id)
            domain = DeviceDomain.from_value(entity_domain)
        self._domain = domain

        self._auto_refresh = auto_refresh
        self._refresh_interval = refresh_interval
        self._throttle_interval = throttle_interval
        self._follow_up_delays = tuple(follow_up_delays)
        self._clock = clock

        self._state: Optional[EntityState] = None
        self._optimistic: Optional[str] = None
        self._connected = False
        self._error: Optional[str] = None
        self._action_in_progress = False
        self._missing = False
        self._alive = True
        self._last_refresh_at: Optional[float] = None

        self._poll_handle: Optional[asyncio.TimerHandle] = None
        self._follow_up_handles: List[asyncio.TimerHandle] = []
        self._tasks: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------ state

    @property
    def entity_id(self) -> Optional[str]:
        return self._entity_id

    @property
    def domain(self) -> Optional[DeviceDomain]:
        return self._domain

    @property
    def state(self) -> Optional[EntityState]:
        return self._state

    @property
    def observed_state(self) -> Optional[str]:
        return self._state.state if self._state else None

    @property
    def optimistic_state(self) -> Optional[str]:
        return self._optimistic

    @property
    def displayed_state(self) -> Optional[str]:
        return displayed_state(self.observed_state, self._optimistic)

    @property
    def is_locked(self) -> bool:
        return self.displayed_state == "locked"

    @property
    def is_on(self) -> bool:
        return self.displayed_state == "on"

    @property
    def is_open(self) -> bool:
        return self.displayed_state == "open"

    @property
    def is_loading(self) -> bool:
        return self._action_in_progress

    @property
    def is_connected(self) -> bool:
        return self._connected and not self._missing

    @property
    def is_missing(self) -> bool:
        return self._missing

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def is_controllable(self) -> bool:
        return (
            self._entity_id is not None
            and self._domain in CONTROLLABLE_DOMAINS
            and not self._missing
        )

    @property
    def is_alive(self) -> bool:
        return self._alive

    @property
    def is_polling(self) -> bool:
        return self._poll_handle is not None

    def snapshot(self) -> DeviceSnapshot:
        return DeviceSnapshot(
            entity_id=self._entity_id,
            domain=self._domain,
            state=self._state,
            displayed_state=self.displayed_state,
            optimistic_state=self._optimistic,
            is_loading=self.is_loading,
            is_connected=self.is_connected,
            is_controllable=self.is_controllable,
            error=self._error,
        )

    # -------------------------------------------------------------- lifecycle

    async def start(self) -> DeviceSnapshot:
        """Fetch the initial state and begin background polling."""
        if not self._alive or not self._entity_id or not self._auto_refresh:
            return self.snapshot()

        await self.refresh()
        self._start_polling()
        return self.snapshot()

    def dispose(self) -> None:
        """Cancel every pending timer; later results are discarded."""
        if not self._alive:
            return
        self._alive = False
        self._stop_polling()
        self._cancel_follow_ups()
        logger.debug("devices.controller.disposed", entity_id=self._entity_id)

    # ---------------------------------------------------------------- refresh

    async def refresh(self) -> DeviceSnapshot:
        """
        Poll the hub once.

        Calls closer together than the throttle interval collapse into the
        first one. Failures are recorded, never raised; only network-class
        failures mark the controller disconnected.
        """
        if not self._alive or not self._entity_id or self._missing:
            return self.snapshot()

        now = self._clock()
        if (
            self._last_refresh_at is not None
            and now - self._last_refresh_at < self._throttle_interval
        ):
            return self.snapshot()
        self._last_refresh_at = now

        try:
            state = await self._gateway.get_state(self._entity_id)
        except HttpError as exc:
            if not self._alive:
                return self.snapshot()
            if exc.status_code == 404:
                self._mark_missing()
            else:
                self._record_refresh_failure(exc)
            return self.snapshot()
        except DomainError as exc:
            if self._alive:
                self._record_refresh_failure(exc)
            return self.snapshot()

        if not self._alive:
            return self.snapshot()

        self._state = state
        self._optimistic = reconcile_overlay(state.state, self._optimistic)
        self._connected = True
        self._error = None
        return self.snapshot()

    def _record_refresh_failure(self, exc: DomainError) -> None:
        self._error = exc.message
        if is_network_failure(exc):
            self._connected = False
            self._state = None
        logger.warning(
            "devices.refresh.failed",
            entity_id=self._entity_id,
            error=exc.message,
            connected=self._connected,
        )

    def _mark_missing(self) -> None:
        self._missing = True
        self._connected = False
        self._error = None
        self._stop_polling()
        self._cancel_follow_ups()
        logger.info("devices.entity.missing", entity_id=self._entity_id)

    # --------------------------------------------------------------- commands

    async def lock(self) -> DeviceSnapshot:
        return await self.execute(DeviceCommand.LOCK)

    async def unlock(self) -> DeviceSnapshot:
        return await self.execute(DeviceCommand.UNLOCK)

    async def turn_on(self) -> DeviceSnapshot:
        return await self.execute(DeviceCommand.TURN_ON)

    async def turn_off(self) -> DeviceSnapshot:
        return await self.execute(DeviceCommand.TURN_OFF)

    async def open(self) -> DeviceSnapshot:
        return await self.execute(DeviceCommand.OPEN)

    async def close(self) -> DeviceSnapshot:
        return await self.execute(DeviceCommand.CLOSE)

    async def stop(self) -> DeviceSnapshot:
        return await self.execute(DeviceCommand.STOP)

    async def toggle(self) -> DeviceSnapshot:
        return await self.execute(DeviceCommand.TOGGLE)

    def clear_optimistic(self) -> None:
        if self._alive:
            self._optimistic = None

    async def execute(self, command: DeviceCommand) -> DeviceSnapshot:
        """
        Issue ``command`` with an optimistic overlay.

        Raises:
            ConfigurationError: No entity configured, or the hub is not configured.
            UnsupportedCommandError: The command does not apply to this domain, or
                the hub does not know the entity.
            CommandInProgressError: Another command is still in flight.
            CommandError: The hub call failed; the overlay has been rolled back.
        """
        if self._missing:
            raise UnsupportedCommandError(
                f"Entity {self._entity_id} was not found in Home Assistant",
                details={"entity_id": self._entity_id},
            )
        if not self._alive:
            raise CommandError("Device controller has been disposed")
        if not self._entity_id:
            raise ConfigurationError("Entity ID no configurado")
        if self._domain not in CONTROLLABLE_DOMAINS:
            raise UnsupportedCommandError(
                f"Entity {self._entity_id} is not controllable",
                details={"entity_id": self._entity_id},
            )
        if self._action_in_progress:
            raise CommandInProgressError(
                f"A command for {self._entity_id} is already in progress",
                details={"entity_id": self._entity_id},
            )

        command, predicted = self._plan(command)

        self._cancel_follow_ups()
        issued_at = self._clock()
        if predicted is not None:
            self._optimistic = predicted
        self._action_in_progress = True
        self._error = None
        logger.info(
            "devices.command.started",
            entity_id=self._entity_id,
            command=command.value,
            predicted_state=predicted,
        )

        try:
            await self._gateway.send_command(self._entity_id, command, self._domain)
        except Exception as exc:
            if self._alive:
                self._optimistic = None
                self._action_in_progress = False
                self._error = str(getattr(exc, "message", exc))
                if is_network_failure(exc):
                    self._connected = False
            logger.error(
                "devices.command.failed",
                entity_id=self._entity_id,
                command=command.value,
                error=str(exc),
            )
            if isinstance(exc, ConfigurationError):
                raise
            raise CommandError(
                f"Command {command.value} failed for {self._entity_id}: {exc}",
                cause=exc,
                details={"entity_id": self._entity_id, "command": command.value},
            ) from exc

        if not self._alive:
            return self.snapshot()

        self._action_in_progress = False
        self._error = None
        self._schedule_follow_ups(issued_at)
        logger.info(
            "devices.command.completed",
            entity_id=self._entity_id,
            command=command.value,
        )
        return self.snapshot()

    def _plan(self, command: DeviceCommand):
        """Resolve a command into the concrete one to send and its predicted state."""
        if command != DeviceCommand.TOGGLE:
            return command, resolve_service(self._domain, command).predicted_state

        predicted = predict_toggle(self._domain, self.displayed_state)
        if self._domain == DeviceDomain.LOCK:
            command = (
                DeviceCommand.LOCK if predicted == "locked" else DeviceCommand.UNLOCK
            )
        elif self._domain in (DeviceDomain.COVER, DeviceDomain.MOTOR):
            command = (
                DeviceCommand.CLOSE if predicted == "closed" else DeviceCommand.OPEN
            )
        else:
            resolve_service(self._domain, command)
        return command, predicted

    # ----------------------------------------------------------------- timers

    def _schedule_follow_ups(self, issued_at: float) -> None:
        self._cancel_follow_ups()
        loop = asyncio.get_running_loop()
        elapsed = self._clock() - issued_at
        for delay in self._follow_up_delays:
            self._follow_up_handles.append(
                loop.call_later(max(0.0, delay - elapsed), self._on_follow_up)
            )

    def _cancel_follow_ups(self) -> None:
        for handle in self._follow_up_handles:
            handle.cancel()
        self._follow_up_handles = []

    def _start_polling(self) -> None:
        if (
            not self._alive
            or not self._auto_refresh
            or not self._entity_id
            or self._missing
            or self._poll_handle is not None
        ):
            return
        loop = asyncio.get_running_loop()
        self._poll_handle = loop.call_later(self._refresh_interval, self._on_poll_tick)

    def _stop_polling(self) -> None:
        if self._poll_handle is not None:
            self._poll_handle.cancel()
            self._poll_handle = None

    def _on_poll_tick(self) -> None:
        self._poll_handle = None
        if not self._alive or self._missing:
            return
        # Ticks that overlap a command are skipped, not queued.
        if not self._action_in_progress:
            self._spawn_refresh()
        self._start_polling()

    def _on_follow_up(self) -> None:
        # A later command owns the entity until it settles.
        if self._alive and not self._action_in_progress:
            self._spawn_refresh()

    def _spawn_refresh(self) -> None:
        if not self._alive:
            return
        task = asyncio.get_running_loop().create_task(self._background_refresh())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _background_refresh(self) -> None:
        try:
            await self.refresh()
        except Exception:
            logger.exception(
                "devices.refresh.unexpected_error", entity_id=self._entity_id
            )
