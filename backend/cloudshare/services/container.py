"""Service container built once per process by the application lifespan."""
import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from cloudshare.config import Settings
from cloudshare.database import build_engine, build_session_factory
from cloudshare.models import Base
from cloudshare.services.download_accounting import DownloadAccounting
from cloudshare.services.file_lifecycle import FileLifecycleCoordinator
from cloudshare.services.file_records import FileRecordStore
from cloudshare.services.file_storage import ObjectStore, build_object_store
from cloudshare.services.identity import JWTIdentityProvider
from cloudshare.services.share_tokens import ShareTokenService

logger = logging.getLogger(__name__)


@dataclass
class FileServices:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    object_store: ObjectStore
    identity: JWTIdentityProvider
    records: FileRecordStore
    shares: ShareTokenService
    downloads: DownloadAccounting
    files: FileLifecycleCoordinator

    @classmethod
    def build(cls, settings: Settings, object_store: ObjectStore | None = None) -> "FileServices":
        engine = build_engine(settings.DATABASE_URL)
        session_factory = build_session_factory(engine)
        object_store = object_store or build_object_store(settings)
        records = FileRecordStore(session_factory)
        shares = ShareTokenService(
            records,
            settings.PUBLIC_BASE_URL,
            token_bytes=settings.SHARE_TOKEN_BYTES,
            max_attempts=settings.SHARE_TOKEN_MAX_ATTEMPTS,
        )
        downloads = DownloadAccounting(records)
        files = FileLifecycleCoordinator(
            records,
            object_store,
            shares,
            downloads,
            max_upload_bytes=settings.MAX_UPLOAD_BYTES,
            storage_timeout=settings.STORAGE_TIMEOUT_SECONDS,
        )
        identity = JWTIdentityProvider(
            settings.SECRET_KEY,
            settings.ALGORITHM,
            settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        )
        return cls(
            settings=settings,
            engine=engine,
            session_factory=session_factory,
            object_store=object_store,
            identity=identity,
            records=records,
            shares=shares,
            downloads=downloads,
            files=files,
        )

    async def start(self) -> None:
        """Create tables if missing."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("File services started")

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("File services stopped")
