"""
Exception hierarchy for the Mars Dashboard.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

from typing import Optional


class DashboardError(Exception):
    """Base exception for all dashboard errors."""


class ConfigError(DashboardError):
    """Invalid configuration value."""


class UpstreamError(DashboardError):
    """NASA API request failed (network, timeout, non-200, invalid JSON)."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, url: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(message)
