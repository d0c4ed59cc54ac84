"""
Database table tasks
"""

from offline_sync.global_const.const_config import (
    TABLE_CREATION_MAX_RETRIES,
    TABLE_CREATION_RETRY_DELAY,
)
from offline_sync.tasks.base_task import TaskExecutor
from offline_sync.utils.create_table import create_tables
from offline_sync.utils.loguru_setting import logger


def safe_create_tables(engine=None) -> bool:
    """
    Create the database tables, retrying connection errors

    A failure is logged and reported, never raised, so the scheduler can
    still start; later database access will surface the problem.

    Returns:
        bool: True if the tables are ready
    """
    result = TaskExecutor.execute_with_retry(
        create_tables,
        "TABLE_TASK",
        max_retries=TABLE_CREATION_MAX_RETRIES,
        retry_delay=TABLE_CREATION_RETRY_DELAY,
        engine=engine,
    )
    if not result['success']:
        logger.warning(f"[TABLE_TASK] table creation failed: {result['error']}")
    return result['success']
