"""
Payload and checkpoint models, and the checkpoint store
"""

from .data_models import (
    AvailableOfflineSync,
    CheckpointExistsError,
    FilesForAccount,
    OfflineFile,
    PayloadError,
)
from .available_offline_sync_storage import AvailableOfflineSyncStorageManager

__all__ = [
    'AvailableOfflineSync',
    'AvailableOfflineSyncStorageManager',
    'CheckpointExistsError',
    'FilesForAccount',
    'OfflineFile',
    'PayloadError',
]
