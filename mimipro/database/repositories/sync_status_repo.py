"""
Sync status flags.

Records are marked `pending` after they change locally. There is no remote
transport: `perform_sync` only flips pending flags to `synced` and stamps
`last_attempt`, so the badge and the pending list have something to show.
"""
from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, List, Optional

from ...constants import STORE_SYNC_STATUS, SYNC_PENDING, SYNC_SYNCED
from ...utils.helpers import now_iso
from ..store import RecordStore

_log = logging.getLogger(__name__)


class SyncStatusRepo:
    def __init__(self, store: RecordStore):
        self.store = store

    def mark_pending(self, store_name: str, record_id: int) -> int:
        return self.store.add(STORE_SYNC_STATUS, {
            "store_name": store_name,
            "record_id": int(record_id),
            "status": SYNC_PENDING,
            "last_attempt": None,
            "created_at": now_iso(),
        })

    def pending_items(self) -> List[dict]:
        return self.store.get_by_index(STORE_SYNC_STATUS, "status", SYNC_PENDING)

    def pending_summary(self) -> Dict[str, int]:
        """{store_name: pending count}, in first-seen order."""
        return dict(Counter(item["store_name"] for item in self.pending_items()))

    def perform_sync(self) -> int:
        """Mark every pending flag as synced. Returns how many were flipped."""
        pending = self.pending_items()
        if not pending:
            return 0
        stamp = now_iso()
        with self.store.transaction():
            for item in pending:
                item["status"] = SYNC_SYNCED
                item["last_attempt"] = stamp
                self.store.update(STORE_SYNC_STATUS, item)
        _log.info("Marked %d record(s) as synced", len(pending))
        return len(pending)

    def last_sync_time(self) -> Optional[str]:
        synced = self.store.get_by_index(STORE_SYNC_STATUS, "status", SYNC_SYNCED)
        stamps = [s["last_attempt"] for s in synced if s.get("last_attempt")]
        return max(stamps) if stamps else None
