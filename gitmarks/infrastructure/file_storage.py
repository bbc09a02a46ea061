from __future__ import annotations
import logging
import os
import tempfile
from pathlib import Path
from urllib.parse import quote

from gitmarks.domain.entities import Snapshot
from gitmarks.domain.errors import CacheWriteFailure
from gitmarks.domain.interfaces import ISnapshotStore
from .snapshot_codec import decode_snapshot, encode_snapshot

log = logging.getLogger(__name__)


class JsonFileSnapshotStore(ISnapshotStore):
    """
    Concrete implementation of ISnapshotStore: one JSON file per cache key.

    The directory is created lazily on first write. Keys are percent-encoded
    so any identity maps to exactly one file name inside the directory.
    """

    def __init__(self, directory: str | os.PathLike) -> None:
        self._dir = Path(directory).expanduser()

    def path_for(self, key: str) -> Path:
        return self._dir / f"{quote(key, safe='')}.json"

    def read(self, key: str) -> Snapshot | None:
        path = self.path_for(key)
        try:
            payload = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("Could not read cache file %s: %s", path, exc)
            return None
        return decode_snapshot(payload)

    def write(self, key: str, snapshot: Snapshot) -> None:
        """
        Write to a temp file in the same directory, then os.replace it over
        the old one, so a crash mid-write never leaves a half-written entry.
        """
        payload = encode_snapshot(snapshot)
        path    = self.path_for(key)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._dir, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise CacheWriteFailure(f"Could not write cache file {path}: {exc}") from exc
        log.debug("Wrote %d rows to %s", len(snapshot.rows), path)

    def clear(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise CacheWriteFailure(f"Could not remove cache file {path}: {exc}") from exc
