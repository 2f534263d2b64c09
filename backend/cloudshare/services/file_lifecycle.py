"""File lifecycle coordinator.

Composes the object store, the record store, share tokens and download
accounting into the operations the API exposes. Ordering rules:

- upload writes bytes first and only then creates the record, so a failed or
  cancelled upload never leaves a visible record behind;
- delete removes bytes first and keeps the record if that fails, so a record
  never points at missing bytes.
"""
import asyncio
import logging
import os
import uuid
from typing import BinaryIO

from fastapi.concurrency import run_in_threadpool

from cloudshare.models.file_record import DISPLAY_NAME_MAX_LENGTH, MEDIA_TYPE_MAX_LENGTH
from cloudshare.services.download_accounting import DownloadAccounting
from cloudshare.services.errors import (
    InvalidInput,
    PermissionDenied,
    StorageUnavailable,
    Unauthenticated,
)
from cloudshare.services.file_records import FileRecordStore, FileSnapshot, OwnerTotals
from cloudshare.services.file_storage import ObjectStore, ObjectStoreError
from cloudshare.services.file_utils import make_storage_key, resolve_media_type
from cloudshare.services.share_tokens import ShareTokenService

logger = logging.getLogger(__name__)


def _stream_size(stream: BinaryIO) -> int:
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


class FileLifecycleCoordinator:
    def __init__(
        self,
        store: FileRecordStore,
        object_store: ObjectStore,
        shares: ShareTokenService,
        downloads: DownloadAccounting,
        max_upload_bytes: int,
        storage_timeout: float,
    ):
        self.store = store
        self.object_store = object_store
        self.shares = shares
        self.downloads = downloads
        self.max_upload_bytes = max_upload_bytes
        self.storage_timeout = storage_timeout

    async def upload(
        self,
        owner_id: str,
        display_name: str,
        media_type: str | None,
        stream: BinaryIO,
    ) -> FileSnapshot:
        """Store the bytes, then create a private record with zero downloads."""
        if not owner_id:
            raise Unauthenticated()
        if not display_name or not display_name.strip():
            raise InvalidInput("A file name is required")

        display_name = display_name.strip()
        if len(display_name) > DISPLAY_NAME_MAX_LENGTH:
            raise InvalidInput(f"File name is longer than {DISPLAY_NAME_MAX_LENGTH} characters")
        resolved_type = resolve_media_type(display_name, media_type)
        if len(resolved_type) > MEDIA_TYPE_MAX_LENGTH:
            raise InvalidInput(f"Media type is longer than {MEDIA_TYPE_MAX_LENGTH} characters")

        size_bytes = await run_in_threadpool(_stream_size, stream)
        if size_bytes == 0:
            raise InvalidInput("Empty files cannot be uploaded")
        if size_bytes > self.max_upload_bytes:
            raise InvalidInput(
                f"File is too large: {size_bytes} bytes (limit {self.max_upload_bytes})"
            )

        key = make_storage_key(display_name)

        try:
            stored = await asyncio.wait_for(self.object_store.put(key, stream), self.storage_timeout)
        except asyncio.TimeoutError:
            logger.error(f"Object store write timed out after {self.storage_timeout}s for key {key}")
            await self._discard_partial_object(key)
            raise StorageUnavailable("Upload timed out, please retry")
        except ObjectStoreError as e:
            logger.error(f"Object store write failed for key {key}: {e}")
            raise StorageUnavailable("Could not store the file, please retry") from e

        try:
            record = await self.store.create(
                owner_id=owner_id,
                display_name=display_name,
                storage_key=stored.key,
                storage_url=stored.url,
                size_bytes=size_bytes,
                media_type=resolved_type,
            )
        except StorageUnavailable:
            logger.warning(f"Orphaned object {stored.key}: record creation failed after upload")
            raise

        logger.info(f"Uploaded file {record.id} ({size_bytes} bytes, {resolved_type}) for owner {owner_id}")
        return record

    async def _discard_partial_object(self, key: str) -> None:
        try:
            await asyncio.wait_for(self.object_store.delete(key), self.storage_timeout)
        except (asyncio.TimeoutError, ObjectStoreError) as e:
            logger.warning(f"Orphaned object {key}: cleanup after timed-out upload failed: {e}")

    async def get_file(self, owner_id: str, file_id: uuid.UUID) -> FileSnapshot:
        record = await self.store.get_by_id(file_id)
        if record.owner_id != owner_id:
            raise PermissionDenied("You do not have access to this file")
        return record

    async def delete(self, requester_id: str, file_id: uuid.UUID) -> None:
        """Owner-only hard delete: object first, then record."""
        record = await self.store.get_by_id(file_id)
        if record.owner_id != requester_id:
            raise PermissionDenied("Only the owner can delete this file")

        try:
            await asyncio.wait_for(self.object_store.delete(record.storage_key), self.storage_timeout)
        except asyncio.TimeoutError:
            logger.error(f"Object store delete timed out for file {file_id}; record kept")
            raise StorageUnavailable("Delete timed out, please retry")
        except ObjectStoreError as e:
            logger.error(f"Object store delete failed for file {file_id}; record kept: {e}")
            raise StorageUnavailable("Could not delete the stored file, please retry") from e

        await self.store.delete(file_id)
        logger.info(f"Deleted file {file_id} for owner {requester_id}")

    async def list_files(self, owner_id: str) -> list[FileSnapshot]:
        return await self.store.list_by_owner(owner_id)

    async def owner_stats(self, owner_id: str) -> OwnerTotals:
        return await self.store.owner_totals(owner_id)

    async def share(self, owner_id: str, file_id: uuid.UUID) -> str:
        return await self.shares.generate_share_link(owner_id, file_id)

    async def get_public_file(self, token: str) -> FileSnapshot:
        return await self.shares.resolve_public(token)

    async def download_own(self, owner_id: str, file_id: uuid.UUID) -> tuple[FileSnapshot, str]:
        record = await self.get_file(owner_id, file_id)
        return await self._count_download(record)

    async def download_public(self, token: str) -> tuple[FileSnapshot, str]:
        record = await self.shares.resolve_public(token)
        return await self._count_download(record)

    async def _count_download(self, record: FileSnapshot) -> tuple[FileSnapshot, str]:
        await self.downloads.record_download(record.id)
        # Re-read so count and updated_at come from the same point in time
        refreshed = await self.store.get_by_id(record.id)
        return refreshed, refreshed.storage_url
