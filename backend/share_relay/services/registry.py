import threading
from collections.abc import Mapping

from share_relay.models import ShareRecord


class ShareRegistry:
    """In-memory map of share identifiers to their records.

    Entries live for the lifetime of the process: nothing is evicted,
    expired or persisted, and a restart forgets every issued identifier.
    """

    def __init__(self, records: Mapping[str, ShareRecord] | None = None) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, ShareRecord] = dict(records or {})

    def put(self, unique_id: str, record: ShareRecord) -> None:
        with self._lock:
            self._records[unique_id] = record

    def get(self, unique_id: str) -> ShareRecord | None:
        with self._lock:
            return self._records.get(unique_id)

    def __contains__(self, unique_id: object) -> bool:
        with self._lock:
            return unique_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
