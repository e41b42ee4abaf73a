"""
Helper utilities for the Tracked Attachments Console.

This module provides common utility functions used throughout the application.
"""

import os
import re
from datetime import datetime
from typing import Optional

from core.utils.logger import get_module_logger

logger = get_module_logger(__name__)

# RFC 3339 as emitted by the API, fractional seconds up to nanoseconds
_TIMESTAMP_RE = re.compile(
    r'^(?P<base>\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2})'
    r'(?:\.(?P<fraction>\d+))?'
    r'(?P<tz>Z|[+-]\d{2}:?\d{2})?$'
)

_ORDINAL_SUFFIXES = {1: 'st', 2: 'nd', 3: 'rd'}


def get_safe_filename(filename: str) -> str:
    """
    Convert a string to a safe filename by removing invalid characters.

    Args:
        filename: Original filename

    Returns:
        Safe filename
    """
    safe_filename = re.sub(r'[<>:"/\\|?*]', '_', filename)
    safe_filename = re.sub(r'[\x00-\x1f\x7f-\x9f]', '', safe_filename)  # Remove control characters
    safe_filename = safe_filename.strip('. ')

    if not safe_filename:
        safe_filename = 'unnamed'
    if len(safe_filename) > 255:
        safe_filename = safe_filename[:255]

    return safe_filename


def ensure_directory(path: str) -> str:
    """Ensure directory exists, create if necessary."""
    abs_path = os.path.abspath(path)
    os.makedirs(abs_path, exist_ok=True)
    return abs_path


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an API timestamp into an aware datetime.

    Fractions beyond microseconds are truncated and a missing offset is read
    as UTC. Unparseable values are logged and yield None.
    """
    if not value:
        return None

    match = _TIMESTAMP_RE.match(value.strip())
    if not match:
        logger.warning("Unrecognized timestamp", value=value)
        return None

    text = match.group('base').replace(' ', 'T')
    fraction = match.group('fraction')
    if fraction:
        text += '.' + fraction[:6].ljust(6, '0')

    tz = match.group('tz')
    if not tz or tz == 'Z':
        text += '+00:00'
    elif ':' not in tz:
        text += f"{tz[:3]}:{tz[3:]}"
    else:
        text += tz

    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.warning("Unrecognized timestamp", value=value)
        return None


def format_timestamp(value: Optional[datetime]) -> str:
    """
    Format a timestamp for display, e.g. 'March 3rd 2024, 4:05:09 pm'.

    Aware values are converted to local time.
    """
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone()

    day = value.day
    if 11 <= day % 100 <= 13:
        suffix = 'th'
    else:
        suffix = _ORDINAL_SUFFIXES.get(day % 10, 'th')

    hour = value.hour % 12 or 12
    meridiem = 'am' if value.hour < 12 else 'pm'
    return f"{value.strftime('%B')} {day}{suffix} {value.year}, {hour}:{value.strftime('%M:%S')} {meridiem}"


