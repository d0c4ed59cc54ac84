"""
Data Models for the available offline synchronization

This module defines the payload handed to the periodic job (files kept in
sync for one account) and the synchronization checkpoint value object.

The payload crosses the scheduling boundary as a JSON string: the job store
persists it and the job handler rebuilds it, so it must never carry live
object references.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from offline_sync.global_const.const_config import (
    AVAILABLE_OFFLINE_SYNC_ROW_ID,
    PAYLOAD_SCHEMA_VERSION,
)


class PayloadError(ValueError):
    """A job payload could not be deserialized or failed validation"""


class CheckpointExistsError(RuntimeError):
    """The singleton checkpoint record already exists"""


# ============================================================================
# Payload
# ============================================================================


@dataclass
class OfflineFile:
    """
    A file marked as available offline

    Attributes:
        remote_path: Path of the file on the server, e.g. "/Documents/a.txt"
        storage_path: Path of the local copy, None if not downloaded yet
        file_id: Server side file id (optional)
    """

    remote_path: str
    storage_path: Optional[str] = None
    file_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "remote_path": self.remote_path,
            "storage_path": self.storage_path,
            "file_id": self.file_id,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "OfflineFile":
        if not isinstance(data, dict):
            raise PayloadError(f"file entry must be an object, got {type(data).__name__}")

        remote_path = data.get("remote_path")
        if not isinstance(remote_path, str) or not remote_path:
            raise PayloadError("file entry has no remote_path")

        storage_path = data.get("storage_path")
        if storage_path is not None and not isinstance(storage_path, str):
            raise PayloadError(f"storage_path of {remote_path} must be a string")

        file_id = data.get("file_id")
        if file_id is not None and not isinstance(file_id, str):
            raise PayloadError(f"file_id of {remote_path} must be a string")

        return cls(remote_path=remote_path, storage_path=storage_path, file_id=file_id)


@dataclass
class FilesForAccount:
    """
    Available offline files scoped to one account

    Attributes:
        account_name: Account the files belong to, e.g. "alice@cloud.example.com"
        files: Files kept in sync, in the order they were listed
    """

    account_name: str
    files: List[OfflineFile] = field(default_factory=list)

    def to_json(self) -> str:
        """Flat string form passed across the scheduling boundary"""
        return json.dumps(
            {
                "schema_version": PAYLOAD_SCHEMA_VERSION,
                "account_name": self.account_name,
                "files": [f.to_dict() for f in self.files],
            },
            ensure_ascii=False,
            separators=(",", ":"),
        )

    @classmethod
    def from_json(cls, payload: Any) -> "FilesForAccount":
        """
        Rebuild the payload, validating every field

        Raises:
            PayloadError: the payload is not a string, not JSON, has an
                unsupported schema version or malformed entries
        """
        if not isinstance(payload, str):
            raise PayloadError(f"payload must be a string, got {type(payload).__name__}")

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise PayloadError(f"payload is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise PayloadError("payload must be a JSON object")

        version = data.get("schema_version")
        if version != PAYLOAD_SCHEMA_VERSION:
            raise PayloadError(f"unsupported payload schema_version: {version!r}")

        account_name = data.get("account_name")
        if not isinstance(account_name, str) or not account_name:
            raise PayloadError("payload has no account_name")

        files = data.get("files")
        if not isinstance(files, list):
            raise PayloadError("payload files must be a list")

        return cls(
            account_name=account_name,
            files=[OfflineFile.from_dict(entry) for entry in files],
        )


# ============================================================================
# Checkpoint
# ============================================================================


@dataclass
class AvailableOfflineSync:
    """
    Synchronization checkpoint

    Attributes:
        available_offline_last_sync: Last synchronized point in time (ms since epoch)
        id: Row id, always the singleton id
    """

    available_offline_last_sync: int
    id: int = AVAILABLE_OFFLINE_SYNC_ROW_ID
