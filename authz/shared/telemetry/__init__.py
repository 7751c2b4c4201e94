"""Logging setup for the authorization core."""

from authz.shared.telemetry.logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
