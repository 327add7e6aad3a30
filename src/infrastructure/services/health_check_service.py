"""Infrastructure implementation for system health checks."""

from __future__ import annotations

import asyncio
from time import perf_counter
from typing import Dict, List, Optional

import httpx

from src.domain.entities.health import (
    CheckFailure,
    DependencyStatus,
    ServiceStatus,
    SystemHealth,
)
from src.domain.ports.services import IHealthCheckService
from src.shared import CIRCLE_PUBLIC_KEY_PATH, NGROK_SKIP_BROWSER_WARNING


class HealthCheckService(IHealthCheckService):
    """Collect health information for the hub and the payments provider."""

    def __init__(
        self,
        home_assistant_url: Optional[str],
        home_assistant_token: Optional[str],
        circle_url: str,
        circle_api_key: Optional[str],
        *,
        http_timeout: float = 5.0,
    ) -> None:
        self._home_assistant_url = (home_assistant_url or "").rstrip("/")
        self._home_assistant_token = home_assistant_token
        self._circle_url = (circle_url or "").rstrip("/")
        self._circle_api_key = circle_api_key
        self._http_timeout = http_timeout

    async def evaluate(self) -> SystemHealth:
        """Run checks concurrently and aggregate system health."""

        checks = {
            "home_assistant": asyncio.create_task(self._check_home_assistant()),
            "circle": asyncio.create_task(self._check_circle()),
        }

        dependency_statuses: List[DependencyStatus] = []

        for name, task in checks.items():
            try:
                dependency_statuses.append(await task)
            except Exception as exc:  # pragma: no cover - unexpected failure
                dependency_statuses.append(
                    DependencyStatus(
                        name=name,
                        status=ServiceStatus.DOWN,
                        message=str(exc),
                    )
                )

        return SystemHealth.aggregate(dependency_statuses)

    async def _check_home_assistant(self) -> DependencyStatus:
        if not self._home_assistant_url:
            return DependencyStatus(
                name="home_assistant",
                status=ServiceStatus.UNKNOWN,
                reason=CheckFailure.NOT_CONFIGURED,
                message="Home Assistant host not configured.",
            )

        headers = {NGROK_SKIP_BROWSER_WARNING: "true"}
        if self._home_assistant_token:
            headers["Authorization"] = f"Bearer {self._home_assistant_token}"

        return await self._hit_http_endpoint(
            name="home_assistant",
            url=f"{self._home_assistant_url}/api/",
            headers=headers,
        )

    async def _check_circle(self) -> DependencyStatus:
        if not self._circle_api_key:
            return DependencyStatus(
                name="circle",
                status=ServiceStatus.UNKNOWN,
                reason=CheckFailure.NOT_CONFIGURED,
                message="Circle API key not configured.",
            )

        return await self._hit_http_endpoint(
            name="circle",
            url=f"{self._circle_url}{CIRCLE_PUBLIC_KEY_PATH}",
            headers={"Authorization": f"Bearer {self._circle_api_key}"},
        )

    async def _hit_http_endpoint(
        self,
        *,
        name: str,
        url: str,
        headers: Dict[str, str],
    ) -> DependencyStatus:
        start = perf_counter()

        try:
            async with httpx.AsyncClient(timeout=self._http_timeout) as client:
                response = await client.get(url, headers=headers)

            latency_ms = (perf_counter() - start) * 1000
            status_code = response.status_code
            content_type = response.headers.get("content-type", "")

            reason = CheckFailure.from_http_response(status_code, content_type)
            message = f"HTTP {status_code}"
            if reason is CheckFailure.TUNNEL_PAGE:
                message = "Tunnel returned an HTML page"

            return DependencyStatus(
                name=name,
                status=ServiceStatus.from_http_response(status_code, content_type),
                reason=reason,
                message=message,
                latency_ms=latency_ms,
                details={"url": url, "status_code": status_code},
            )

        except httpx.RequestError as exc:
            latency_ms = (perf_counter() - start) * 1000
            timed_out = isinstance(exc, httpx.TimeoutException)
            return DependencyStatus(
                name=name,
                status=ServiceStatus.DOWN,
                reason=(
                    CheckFailure.TIMEOUT if timed_out else CheckFailure.UNREACHABLE
                ),
                message=f"HTTP request failed: {exc}",
                latency_ms=latency_ms,
                details={"url": url},
            )
