"""
Platform capability probe

Periodic, persisted jobs are only offered from MIN_PERIODIC_JOB_API_LEVEL on.
The API level of the host comes from settings (``platform.api_level``) so
that packagers for older hosts can switch scheduling off.
"""
from typing import Optional

from offline_sync.global_const.const_config import MIN_PERIODIC_JOB_API_LEVEL
from offline_sync.global_const.global_const import settings
from offline_sync.utils.loguru_setting import logger


def get_platform_api_level() -> int:
    """Configured API level of the host platform"""
    return int(settings.get("platform.api_level", MIN_PERIODIC_JOB_API_LEVEL))


def supports_periodic_jobs(api_level: Optional[int] = None) -> bool:
    """
    Whether periodic jobs can be scheduled on this platform

    Args:
        api_level: API level to check, defaults to the configured one
    """
    level = get_platform_api_level() if api_level is None else int(api_level)
    supported = level >= MIN_PERIODIC_JOB_API_LEVEL
    if not supported:
        logger.debug(
            f"[PLATFORM] periodic jobs unavailable: api level {level} < {MIN_PERIODIC_JOB_API_LEVEL}"
        )
    return supported
