"""Process-scoped registry of per-entity device controllers."""

from __future__ import annotations

import time
from collections import OrderedDict
from typing import Callable, Dict, List, Optional, Sequence

from src.application.services.device_state_controller import (
    DEFAULT_FOLLOW_UP_DELAYS,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_THROTTLE_INTERVAL,
    DeviceStateController,
)
from src.domain.entities.device import DeviceDomain, DeviceSnapshot, parse_entity_id
from src.domain.gateways.home_assistant_gateway import IHomeAssistantGateway
from src.shared import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_CONTROLLERS = 64
DEFAULT_IDLE_TIMEOUT = 300.0


class DeviceControllerRegistry:
    """
    Hands out one controller per entity id.

    Controllers never share state; the registry only keeps them alive between
    requests. Each one polls the hub, so a controller is disposed and dropped
    when its entity turns out not to exist, when nobody has asked for it in
    ``idle_timeout`` seconds, or when ``max_controllers`` newer ones push it
    out. The next request for that entity simply starts a fresh controller.
    """

    def __init__(
        self,
        gateway: IHomeAssistantGateway,
        *,
        auto_refresh: bool = True,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        throttle_interval: float = DEFAULT_THROTTLE_INTERVAL,
        follow_up_delays: Sequence[float] = DEFAULT_FOLLOW_UP_DELAYS,
        max_controllers: int = DEFAULT_MAX_CONTROLLERS,
        idle_timeout: Optional[float] = DEFAULT_IDLE_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._gateway = gateway
        self._auto_refresh = auto_refresh
        self._refresh_interval = refresh_interval
        self._throttle_interval = throttle_interval
        self._follow_up_delays = tuple(follow_up_delays)
        self._max_controllers = max(1, max_controllers)
        self._idle_timeout = idle_timeout
        self._clock = clock
        # Least recently used first.
        self._controllers: "OrderedDict[str, DeviceStateController]" = OrderedDict()
        self._last_used: Dict[str, float] = {}

    async def get(
        self, entity_id: str, domain: Optional[DeviceDomain] = None
    ) -> DeviceStateController:
        """
        Return the controller for ``entity_id``, creating and starting it on first use.

        A controller whose entity the hub does not know is returned so the
        caller can report it, but it is not kept.

        Raises:
            InvalidEntityIdError: If ``entity_id`` is malformed.
        """
        parse_entity_id(entity_id)
        now = self._clock()
        self._evict_stale(now)

        controller = self._controllers.get(entity_id)
        if controller is not None:
            self._controllers.move_to_end(entity_id)
            self._last_used[entity_id] = now
            return controller

        controller = DeviceStateController(
            self._gateway,
            entity_id,
            domain,
            auto_refresh=self._auto_refresh,
            refresh_interval=self._refresh_interval,
            throttle_interval=self._throttle_interval,
            follow_up_delays=self._follow_up_delays,
        )
        logger.info("devices.controller.created", entity_id=entity_id)
        await controller.start()

        if controller.is_missing:
            controller.dispose()
            logger.info(
                "devices.controller.evicted", entity_id=entity_id, reason="missing"
            )
            return controller

        self._controllers[entity_id] = controller
        self._last_used[entity_id] = now
        self._enforce_capacity()
        return controller

    def entity_ids(self) -> List[str]:
        return sorted(self._controllers)

    def snapshots(self) -> List[DeviceSnapshot]:
        return [self._controllers[entity_id].snapshot() for entity_id in self.entity_ids()]

    def close(self) -> None:
        for controller in self._controllers.values():
            controller.dispose()
        if self._controllers:
            logger.info("devices.registry.closed", controllers=len(self._controllers))
        self._controllers.clear()
        self._last_used.clear()

    def _evict_stale(self, now: float) -> None:
        for entity_id, controller in list(self._controllers.items()):
            if controller.is_missing:
                self._evict(entity_id, "missing")
            elif (
                self._idle_timeout is not None
                and not controller.is_loading
                and now - self._last_used[entity_id] >= self._idle_timeout
            ):
                self._evict(entity_id, "idle")

    def _enforce_capacity(self) -> None:
        for entity_id, controller in list(self._controllers.items()):
            if len(self._controllers) <= self._max_controllers:
                return
            # A controller with a command in flight is never dropped.
            if not controller.is_loading:
                self._evict(entity_id, "capacity")

    def _evict(self, entity_id: str, reason: str) -> None:
        controller = self._controllers.pop(entity_id)
        self._last_used.pop(entity_id, None)
        controller.dispose()
        logger.info("devices.controller.evicted", entity_id=entity_id, reason=reason)
