"""Shared utilities (datetime helpers, id generators)."""

from authz.shared.utils.datetime import ensure_utc, utc_now
from authz.shared.utils.generators import generate_cuid

__all__ = ["ensure_utc", "generate_cuid", "utc_now"]
