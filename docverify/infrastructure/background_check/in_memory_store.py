"""
Adapter: In-Memory Background Check Store

Process-local store for background-check records, keyed by request_id.
Passed explicitly to the provider; never a module-level global.
"""

import asyncio
from datetime import datetime

from docverify.core.interfaces.background_check import (
    BackgroundCheckRecord,
    BackgroundCheckStatus,
    IBackgroundCheckStore,
)


class InMemoryBackgroundCheckStore(IBackgroundCheckStore):
    """Dict guarded by an asyncio.Lock; safe to share between tasks of one loop."""

    def __init__(self):
        self._records: dict[str, BackgroundCheckRecord] = {}
        self._lock = asyncio.Lock()

    async def get(self, request_id: str) -> BackgroundCheckRecord | None:
        async with self._lock:
            return self._records.get(request_id)

    async def put(self, record: BackgroundCheckRecord) -> None:
        async with self._lock:
            self._records[record.request_id] = record

    async def complete_if_pending(
        self, request_id: str, has_record: bool, details: str, at: datetime
    ) -> BackgroundCheckRecord | None:
        async with self._lock:
            record = self._records.get(request_id)
            if record is None:
                return None
            if record.status == BackgroundCheckStatus.PENDING:
                record = record.completed(has_record=has_record, details=details, at=at)
                self._records[request_id] = record
            return record

    def __len__(self) -> int:
        return len(self._records)
