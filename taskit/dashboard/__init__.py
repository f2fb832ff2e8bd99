"""Interactive, read-only dashboard over the event journal."""

from __future__ import annotations

from .app import key_to_message, run_dashboard
from .state import DashboardState, update

__all__ = ["DashboardState", "key_to_message", "run_dashboard", "update"]
