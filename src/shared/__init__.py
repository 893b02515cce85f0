"""Shared utilities and configuration."""

from src.shared.config import Config
from src.shared.utils import parse_timestamp, setup_logger, to_utc, utc_now

__all__ = ["Config", "setup_logger", "to_utc", "utc_now", "parse_timestamp"]
