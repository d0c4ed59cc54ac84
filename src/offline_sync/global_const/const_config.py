"""
@Project ：offline_sync
@File    ：const_config.py
@Desc     : job identifiers, extras keys and intervals shared by the
            scheduler side and the job handler side
"""

from enum import Enum, IntEnum


class JobId(IntEnum):
    """Periodic job identifiers.

    An id must stay the same across releases: registering a job under an id
    that is already scheduled replaces the previous registration.
    """

    AVAILABLE_OFFLINE = 2


class JobExtra(str, Enum):
    """Keys of the extras mapping handed to a job at execution time"""

    AVAILABLE_OFFLINE_SYNC_JOB_ID = "AVAILABLE_OFFLINE_SYNC_JOB_ID"
    AVAILABLE_OFFLINE_FILES_FOR_ACCOUNT = "AVAILABLE_OFFLINE_FILES_FOR_ACCOUNT"


# Execute the available offline job every 15 minutes
MILLISECONDS_INTERVAL_AVAILABLE_OFFLINE = 900000

# Lowest platform API level providing periodic persisted jobs
MIN_PERIODIC_JOB_API_LEVEL = 21

# Handler reference resolved by the job service, "module:function"
AVAILABLE_OFFLINE_JOB_HANDLER = (
    "offline_sync.tasks.available_offline_sync_task:run_available_offline_sync"
)

# Version written into every serialized files-for-account payload
PAYLOAD_SCHEMA_VERSION = 1

# Singleton checkpoint row
AVAILABLE_OFFLINE_SYNC_ROW_ID = 1

# Table creation retries
TABLE_CREATION_MAX_RETRIES = 3
TABLE_CREATION_RETRY_DELAY = 5
