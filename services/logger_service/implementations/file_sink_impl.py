"""Rotating JSON-lines file sink.

Each record is one JSON line. The file rotates at ``max_bytes``; rotated
backups are gzip-compressed, at most ``backup_count`` are kept and backups
older than ``max_age_days`` are removed on rotation.
"""

from __future__ import annotations

import asyncio
import gzip
import json
import logging
import os
import shutil
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path

from library_core.messages import LogRecordV1

from services.logger_service.protocols import LogFileSinkProtocol


class GzipRotatingFileHandler(RotatingFileHandler):
    def __init__(
        self, filename: str, max_bytes: int, backup_count: int, max_age_days: int
    ) -> None:
        super().__init__(
            filename, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8", delay=True
        )
        self.max_age_seconds = max_age_days * 24 * 60 * 60
        self.namer = self._gz_name
        self.rotator = self._compress

    @staticmethod
    def _gz_name(default_name: str) -> str:
        return f"{default_name}.gz"

    def _compress(self, source: str, dest: str) -> None:
        with open(source, "rb") as src, gzip.open(dest, "wb") as dst:
            shutil.copyfileobj(src, dst)
        os.remove(source)
        self._prune_expired()

    def handleError(self, record: logging.LogRecord) -> None:
        # Called from inside emit's except block; re-raise so the record is requeued
        raise

    def _prune_expired(self) -> None:
        cutoff = time.time() - self.max_age_seconds
        base = Path(self.baseFilename)
        for backup in base.parent.glob(f"{base.name}.*.gz"):
            if backup.stat().st_mtime < cutoff:
                backup.unlink(missing_ok=True)


class RotatingJsonFileSink(LogFileSinkProtocol):
    def __init__(
        self,
        path: str,
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
        max_age_days: int = 30,
    ) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        self.handler = GzipRotatingFileHandler(path, max_bytes, backup_count, max_age_days)
        self.handler.setFormatter(logging.Formatter("%(message)s"))

    async def write(self, record: LogRecordV1) -> None:
        line = json.dumps(record.to_wire(), ensure_ascii=False, sort_keys=True)
        entry = logging.makeLogRecord({"msg": line, "levelno": logging.INFO})
        await asyncio.to_thread(self.handler.handle, entry)

    def close(self) -> None:
        self.handler.close()
