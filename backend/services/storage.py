# backend/services/storage.py
"""
Resume file storage.

Uploaded files are written under UPLOAD_DIR using the object key
`resumes/<session>_<epoch-ms>.<ext>` and served back by the API under /files.
"""

import logging
import re
import time
from pathlib import Path
from typing import Optional

import config
from services.persistence import DataResult

logger = logging.getLogger(__name__)

RESUME_PREFIX = "resumes"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def file_extension(filename: str) -> str:
    """Text after the last dot, reduced to safe characters ("bin" when none)."""
    if "." not in (filename or ""):
        return "bin"
    ext = _UNSAFE_CHARS.sub("", filename.rsplit(".", 1)[1]).lower()[:10]
    return ext or "bin"


class ResumeStorage:
    def __init__(self, root_dir: Optional[str] = None, public_base_url: Optional[str] = None):
        self.root_dir = Path(root_dir or config.UPLOAD_DIR)
        self.public_base_url = (public_base_url or config.PUBLIC_FILES_URL).rstrip("/")

    @staticmethod
    def object_key(session_id: str, filename: str, timestamp_ms: Optional[int] = None) -> str:
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        safe_session = _UNSAFE_CHARS.sub("_", session_id)
        return f"{RESUME_PREFIX}/{safe_session}_{timestamp_ms}.{file_extension(filename)}"

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    def upload(self, session_id: str, filename: str, data: bytes) -> DataResult:
        """
        Write the file and return {"path": key, "url": public URL}.
        """
        key = self.object_key(session_id, filename)
        target = self.root_dir / key
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            logger.exception(f"Failed to store {filename} for session {session_id}")
            return DataResult.failed(f"Failed to upload file: {e}")

        logger.info(f"Stored {len(data)} bytes at {key}")
        return DataResult.ok({"path": key, "url": self.public_url(key)})


_storage_instance: Optional[ResumeStorage] = None


def get_storage() -> ResumeStorage:
    global _storage_instance

    if _storage_instance is None:
        _storage_instance = ResumeStorage()

    return _storage_instance


def reset_storage():
    """Reset the singleton instance (useful for testing)."""
    global _storage_instance
    _storage_instance = None
