"""
Time helpers
"""
import os
import time
import pytz
from datetime import datetime, timezone
from offline_sync.utils.loguru_setting import logger

def get_local_timezone() -> timezone:
    """
    Local timezone, from the TZ environment variable when set

    Returns:
        timezone: local timezone
    """
    tz_str = os.environ.get('TZ')
    if tz_str:
        try:
            return pytz.timezone(tz_str)
        except pytz.UnknownTimeZoneError:
            logger.warning(f"Unknown timezone: {tz_str}, using system timezone")

    try:
        return datetime.now().astimezone().tzinfo or timezone.utc
    except Exception as e:
        logger.warning(f"Failed to get system timezone: {e}, using UTC")
        return timezone.utc


def current_time_millis() -> int:
    """Wall-clock time in milliseconds since the epoch"""
    return int(time.time() * 1000)
