"""
Jobs run by the job service

- base_task: retry and result handling
- table_tasks: table creation
- available_offline_sync_task: the available offline synchronization job
"""

from .base_task import BaseTask, TaskExecutor
from .table_tasks import safe_create_tables
from .available_offline_sync_task import (
    AvailableOfflineSyncTask,
    register_file_uploader,
    run_available_offline_sync,
)

__all__ = [
    'BaseTask',
    'TaskExecutor',
    'safe_create_tables',
    'AvailableOfflineSyncTask',
    'register_file_uploader',
    'run_available_offline_sync',
]
