"""Download accounting - per-file download counter.

No authorization happens here; callers decide who may count a download.
"""
import uuid

from cloudshare.services.file_records import FileRecordStore


class DownloadAccounting:
    def __init__(self, store: FileRecordStore):
        self.store = store

    async def record_download(self, file_id: uuid.UUID) -> int:
        """Count one download and return the new total."""
        return await self.store.increment_download_count(file_id)
