"""File record store - the persistence contract over the ``files`` table.

Every method opens its own short-lived session and returns ``FileSnapshot``
values, never live ORM instances, so callers must re-fetch to observe
changes made by other requests.

The two writes that race under load are done as single statements:
the download counter is an ``UPDATE ... SET download_count = download_count + 1
RETURNING``, and sharing is a compare-and-set on ``share_token IS NULL``
backed by the unique index on ``share_token``.
"""
import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cloudshare.models.base import utcnow
from cloudshare.models.file_record import FileRecord
from cloudshare.services.errors import NotFound, ShareTokenConflict, StorageUnavailable

logger = logging.getLogger(__name__)

files_table = FileRecord.__table__


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class FileSnapshot:
    """Point-in-time copy of a file record."""
    id: uuid.UUID
    owner_id: str
    display_name: str
    storage_key: str
    storage_url: str
    size_bytes: int
    media_type: str
    share_token: str | None
    is_public: bool
    download_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "FileSnapshot":
        return cls(
            id=row["id"],
            owner_id=row["owner_id"],
            display_name=row["display_name"],
            storage_key=row["storage_key"],
            storage_url=row["storage_url"],
            size_bytes=row["size_bytes"],
            media_type=row["media_type"],
            share_token=row["share_token"],
            is_public=bool(row["is_public"]),
            download_count=row["download_count"],
            created_at=_as_utc(row["created_at"]),
            updated_at=_as_utc(row["updated_at"]),
        )


@dataclass(frozen=True)
class OwnerTotals:
    file_count: int
    total_bytes: int
    total_downloads: int
    shared_count: int


class FileRecordStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self):
        async with self._session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Record store failure: {e.__class__.__name__}: {e}")
                raise StorageUnavailable("Record store unavailable") from e

    async def create(
        self,
        owner_id: str,
        display_name: str,
        storage_key: str,
        storage_url: str,
        size_bytes: int,
        media_type: str,
    ) -> FileSnapshot:
        now = utcnow()
        values = {
            "id": uuid.uuid4(),
            "owner_id": owner_id,
            "display_name": display_name,
            "storage_key": storage_key,
            "storage_url": storage_url,
            "size_bytes": size_bytes,
            "media_type": media_type,
            "share_token": None,
            "is_public": False,
            "download_count": 0,
            "created_at": now,
            "updated_at": now,
        }
        async with self._session() as db:
            db.add(FileRecord(**values))
            await db.commit()
        return FileSnapshot.from_mapping(values)

    async def get_by_id(self, file_id: uuid.UUID) -> FileSnapshot:
        async with self._session() as db:
            result = await db.execute(select(files_table).where(files_table.c.id == file_id))
            row = result.mappings().one_or_none()
        if row is None:
            raise NotFound()
        return FileSnapshot.from_mapping(row)

    async def get_by_share_token(self, token: str) -> FileSnapshot:
        async with self._session() as db:
            result = await db.execute(
                select(files_table).where(files_table.c.share_token == token)
            )
            row = result.mappings().one_or_none()
        if row is None:
            raise NotFound()
        return FileSnapshot.from_mapping(row)

    async def list_by_owner(self, owner_id: str) -> list[FileSnapshot]:
        """Owner's records, newest first."""
        async with self._session() as db:
            result = await db.execute(
                select(files_table)
                .where(files_table.c.owner_id == owner_id)
                .order_by(files_table.c.created_at.desc(), files_table.c.id.desc())
            )
            rows = result.mappings().all()
        return [FileSnapshot.from_mapping(r) for r in rows]

    async def update_share_fields(self, file_id: uuid.UUID, token: str) -> FileSnapshot:
        """Set the share token and make the file public, once.

        Only applies while ``share_token`` is still null. If another request
        already shared the file, its record (and token) is returned unchanged.
        Raises ShareTokenConflict when ``token`` is already taken by another file.
        """
        stmt = (
            update(files_table)
            .where(files_table.c.id == file_id, files_table.c.share_token.is_(None))
            .values(share_token=token, is_public=True, updated_at=utcnow())
            .returning(files_table)
        )
        async with self._session() as db:
            try:
                result = await db.execute(stmt)
                row = result.mappings().one_or_none()
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                raise ShareTokenConflict() from e
        if row is None:
            return await self.get_by_id(file_id)
        return FileSnapshot.from_mapping(row)

    async def increment_download_count(self, file_id: uuid.UUID) -> int:
        """Atomically add one to the download counter and return the new value."""
        stmt = (
            update(files_table)
            .where(files_table.c.id == file_id)
            .values(download_count=files_table.c.download_count + 1, updated_at=utcnow())
            .returning(files_table.c.download_count)
        )
        async with self._session() as db:
            result = await db.execute(stmt)
            new_count = result.scalar_one_or_none()
            await db.commit()
        if new_count is None:
            raise NotFound()
        return new_count

    async def delete(self, file_id: uuid.UUID) -> None:
        async with self._session() as db:
            result = await db.execute(delete(files_table).where(files_table.c.id == file_id))
            await db.commit()
        if result.rowcount == 0:
            raise NotFound()

    async def owner_totals(self, owner_id: str) -> OwnerTotals:
        stmt = select(
            func.count(files_table.c.id),
            func.coalesce(func.sum(files_table.c.size_bytes), 0),
            func.coalesce(func.sum(files_table.c.download_count), 0),
            func.count(files_table.c.share_token),
        ).where(files_table.c.owner_id == owner_id)
        async with self._session() as db:
            result = await db.execute(stmt)
            file_count, total_bytes, total_downloads, shared_count = result.one()
        return OwnerTotals(
            file_count=int(file_count),
            total_bytes=int(total_bytes),
            total_downloads=int(total_downloads),
            shared_count=int(shared_count),
        )
