"""Session configuration and state."""

from __future__ import annotations

from .config_service import ConfigService
from .state import ShellState

__all__ = ["ConfigService", "ShellState"]
