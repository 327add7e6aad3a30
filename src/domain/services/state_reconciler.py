"""Pure helpers for merging optimistic and observed device state.

The displayed state is always ``optimistic if set else observed``. An
optimistic value is dropped as soon as the hub reports the same value; a
disagreeing report leaves it in place until it matches or a failed command
rolls it back.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from src.domain.entities.device import DeviceDomain, normalize_state
from src.domain.entities.errors import NetworkError

_NETWORK_FAILURE_PATTERN = re.compile(
    r"timeout|timed out|network|failed to fetch|connection refused|"
    r"connecterror|name or service not known|nodename nor servname|"
    r"getaddrinfo|temporary failure in name resolution|cors|"
    r"access-control-allow-origin",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class ReconciledState:
    observed: Optional[str]
    optimistic: Optional[str]
    displayed: Optional[str]


def reconcile_overlay(
    observed: Optional[str], optimistic: Optional[str]
) -> Optional[str]:
    """Return the optimistic value that survives a fresh observation."""
    if optimistic is None or observed is None:
        return optimistic
    if normalize_state(observed) == normalize_state(optimistic):
        return None
    return optimistic


def displayed_state(
    observed: Optional[str], optimistic: Optional[str]
) -> Optional[str]:
    if optimistic is not None:
        return normalize_state(optimistic)
    return normalize_state(observed)


def reconcile(observed: Optional[str], optimistic: Optional[str]) -> ReconciledState:
    overlay = reconcile_overlay(observed, optimistic)
    return ReconciledState(
        observed=normalize_state(observed),
        optimistic=overlay,
        displayed=displayed_state(observed, overlay),
    )


def predict_toggle(domain: DeviceDomain, current: Optional[str]) -> Optional[str]:
    """Predict the state a toggle will land on, given what is displayed now."""
    current = normalize_state(current)
    if domain in (DeviceDomain.SWITCH, DeviceDomain.LIGHT):
        return "off" if current == "on" else "on"
    if domain in (DeviceDomain.COVER, DeviceDomain.MOTOR):
        return "closed" if current == "open" else "open"
    if domain == DeviceDomain.LOCK:
        return "unlocked" if current == "locked" else "locked"
    return None


def is_network_failure(error: BaseException) -> bool:
    """True for connectivity-class failures (timeouts, DNS, refused, CORS)."""
    if isinstance(error, NetworkError):
        return True
    return bool(_NETWORK_FAILURE_PATTERN.search(str(error)))
