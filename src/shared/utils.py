"""Shared utility functions for the macro indicator service."""

import logging
from datetime import date, datetime
from pathlib import Path

import pytz


def setup_logger(
    name: str, log_file: Path | None = None, level: int | str = logging.INFO
) -> logging.Logger:
    """Set up logger with console and file handlers.

    Handlers are attached only once per logger name, so collectors and
    orchestrators can be constructed repeatedly without duplicating output.

    Args:
        name: Logger name
        log_file: Optional path to log file
        level: Logging level (int constant or string name like 'DEBUG', 'INFO')

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Convert string level to int if needed
    if isinstance(level, str):
        numeric_level = getattr(logging, level.upper(), logging.INFO)
        logger.setLevel(numeric_level)
    else:
        logger.setLevel(level)

    if logger.handlers:
        return logger

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(pytz.UTC)


def to_utc(dt: datetime, from_tz: str = "UTC") -> datetime:
    """Convert datetime to UTC."""
    if dt.tzinfo is None:
        dt = pytz.timezone(from_tz).localize(dt)
    return dt.astimezone(pytz.UTC)


def parse_timestamp(value: str | int | float | datetime | date | None) -> datetime | None:
    """Parse the timestamp shapes providers hand back into an aware UTC datetime.

    Accepts ISO 8601 strings (with or without ``Z``), ``YYYY-MM-DD`` dates,
    epoch milliseconds and datetime/date objects. Returns None when the value
    is missing or cannot be interpreted.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, date):
        return pytz.UTC.localize(datetime(value.year, value.month, value.day))
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000.0, tz=pytz.UTC)
    try:
        return to_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))
    except ValueError:
        return None


def round_one(value: float | None) -> float | None:
    """Round a percentage-style value to one decimal place, passing None through."""
    if value is None:
        return None
    return round(float(value), 1)
