import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from tinylink.core.exceptions import CodeExistsError, LinkNotFoundError, StorageUnavailableError
from tinylink.db.base import LinkStorage
from tinylink.db.Models.models import utcnow
from tinylink.schemas.LinkRecord import LinkRecord

logger = logging.getLogger(__name__)

# Rows saved without a creation time sort as the oldest
UNKNOWN_CREATED_AT = datetime(1970, 1, 1, tzinfo=timezone.utc)


class FileLinkStorage(LinkStorage):
    """Links kept as one JSON array on disk.

    Every call reads the whole snapshot. Mutations run as a single critical
    section (load, change, rewrite) and the rewrite replaces the file
    atomically, so readers never see a half-written snapshot and need no lock.
    The lock is per process: run one worker per snapshot file.
    """

    name = "file"

    def __init__(self, path):
        self.path = Path(path)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Cannot create data directory for %s: %s", self.path, e)
            raise StorageUnavailableError(f"cannot create {self.path.parent}: {e}") from e
        self._lock = threading.Lock()
        logger.warning("Using file-backed link storage at %s", self.path)

    def _load(self) -> List[Dict[str, Any]]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.error("Failed to read %s: %s", self.path, e)
            raise StorageUnavailableError(f"cannot read {self.path}: {e}") from e

        if not raw.strip():
            return []
        try:
            rows = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Corrupt link snapshot %s: %s", self.path, e)
            raise StorageUnavailableError(f"corrupt snapshot {self.path}: {e}") from e
        if not isinstance(rows, list):
            raise StorageUnavailableError(f"corrupt snapshot {self.path}: expected a list")
        return rows

    def _save(self, rows: List[Dict[str, Any]]) -> None:
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".links-", suffix=".tmp")
        except OSError as e:
            logger.error("Failed to write %s: %s", self.path, e)
            raise StorageUnavailableError(f"cannot write {self.path}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(rows, fh, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to write %s: %s", self.path, e)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise StorageUnavailableError(f"cannot write {self.path}: {e}") from e

    @staticmethod
    def _index_of(rows: List[Dict[str, Any]], code: str) -> int:
        for idx, row in enumerate(rows):
            if row.get("code") == code:
                return idx
        return -1

    @staticmethod
    def _to_record(row: Dict[str, Any]) -> LinkRecord:
        return LinkRecord(
            id=row.get("id"),
            code=row["code"],
            target_url=row["target_url"],
            total_clicks=row.get("total_clicks") or 0,
            created_at=row.get("created_at") or UNKNOWN_CREATED_AT,
            last_clicked=row.get("last_clicked"),
        )

    def insert(self, code: str, target_url: str) -> LinkRecord:
        with self._lock:
            rows = self._load()
            if self._index_of(rows, code) != -1:
                logger.info("Code collision in file storage: %s", code)
                raise CodeExistsError(code)

            next_id = max((r.get("id") or 0 for r in rows), default=0) + 1
            row = {
                "id": next_id,
                "code": code,
                "target_url": target_url,
                "total_clicks": 0,
                "created_at": utcnow().isoformat(),
                "last_clicked": None,
            }
            rows.append(row)
            self._save(rows)
        return self._to_record(row)

    def list(self) -> List[LinkRecord]:
        records = [self._to_record(r) for r in self._load()]
        return sorted(records, key=lambda r: (r.created_at, r.id or 0), reverse=True)

    def find_by_code(self, code: str) -> LinkRecord:
        rows = self._load()
        idx = self._index_of(rows, code)
        if idx == -1:
            raise LinkNotFoundError(code)
        return self._to_record(rows[idx])

    def increment_clicks(self, code: str) -> str:
        with self._lock:
            rows = self._load()
            idx = self._index_of(rows, code)
            if idx == -1:
                raise LinkNotFoundError(code)
            row = rows[idx]
            row["total_clicks"] = (row.get("total_clicks") or 0) + 1
            row["last_clicked"] = utcnow().isoformat()
            self._save(rows)
        return row["target_url"]

    def delete(self, code: str) -> None:
        with self._lock:
            rows = self._load()
            idx = self._index_of(rows, code)
            if idx == -1:
                raise LinkNotFoundError(code)
            removed = rows.pop(idx)
            self._save(rows)
        logger.info("Deleted link %s (id=%s), %d remaining", code, removed.get("id"), len(rows))

    def health_check(self) -> bool:
        try:
            self._load()
            return True
        except StorageUnavailableError:
            return False
