from __future__ import annotations

from gitmarks.domain.entities import Snapshot
from gitmarks.domain.interfaces import ISnapshotStore
from .snapshot_codec import decode_snapshot, encode_snapshot


class InMemorySnapshotStore(ISnapshotStore):
    """
    Dict-backed store holding serialized JSON text, like browser storage.
    Lives only as long as the process.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def read(self, key: str) -> Snapshot | None:
        return decode_snapshot(self._data.get(key))

    def write(self, key: str, snapshot: Snapshot) -> None:
        self._data[key] = encode_snapshot(snapshot)

    def clear(self, key: str) -> None:
        self._data.pop(key, None)

    def raw(self, key: str) -> str | None:
        return self._data.get(key)

    def put_raw(self, key: str, payload: str) -> None:
        self._data[key] = payload
