"""Domain services package."""

from .state_reconciler import (
    ReconciledState,
    displayed_state,
    is_network_failure,
    predict_toggle,
    reconcile,
    reconcile_overlay,
)

__all__ = [
    "ReconciledState",
    "displayed_state",
    "is_network_failure",
    "predict_toggle",
    "reconcile",
    "reconcile_overlay",
]
