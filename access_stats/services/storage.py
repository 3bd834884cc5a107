"""
LogStore Class - Handles file I/O operations

This module manages access log file storage and retrieval.
"""

import logging
import os
from typing import Any, Dict, Iterator

from access_stats.models.data_models import HealthStatus

logger = logging.getLogger(__name__)


class LogStore:
    """
    Manages access log file storage and retrieval.
    Responsibilities:
    - Save uploaded log files
    - Read log file lines
    - Provide file statistics
    """

    def __init__(self, file_path: str):
        self.file_path = file_path

    def save_upload(self, content: bytes) -> Dict[str, Any]:
        """
        Save uploaded access log (overwrites the stored one).
        Returns metadata about saved file
        """
        if not content:
            raise ValueError("Empty file content")

        text = content.decode("utf-8", errors="replace").strip()
        if not text:
            raise ValueError("Empty file after decoding")

        self._ensure_parent_dir()
        with open(self.file_path, "w", encoding="utf-8") as f:
            f.write(text + "\n")

        line_count = sum(1 for ln in text.splitlines() if ln.strip())
        logger.info("Stored %d line(s) at %s", line_count, self.file_path)
        return {"written": line_count, "path": os.path.abspath(self.file_path)}

    def read_lines(self) -> Iterator[str]:
        """
        Iterator over non-blank lines, newline stripped.
        A missing or unreadable file raises; callers treat that as fatal.
        """
        with open(self.file_path, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                line = line.rstrip("\r\n")
                if line.strip():
                    yield line

    def exists(self) -> bool:
        return os.path.isfile(self.file_path)

    def stat(self) -> HealthStatus:
        """Get file statistics"""
        exists = self.exists()
        size_bytes = os.path.getsize(self.file_path) if exists else 0
        total_lines = sum(1 for _ in self.read_lines()) if exists else 0

        return HealthStatus(
            status="ok",
            log_file_exists=exists,
            path=os.path.abspath(self.file_path),
            size_bytes=size_bytes,
            total_lines=total_lines,
        )

    def _ensure_parent_dir(self) -> None:
        """Create parent directories if needed"""
        os.makedirs(os.path.dirname(os.path.abspath(self.file_path)), exist_ok=True)
