"""Object store abstraction. Local filesystem for dev/prod, in-memory for tests."""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Protocol
from urllib.parse import quote

import aiofiles
from fastapi.concurrency import run_in_threadpool

from cloudshare.config import Settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class ObjectStoreError(Exception):
    """Raised when the object store cannot complete a read, write or delete."""
    pass


@dataclass(frozen=True)
class StoredObject:
    key: str
    url: str


class ObjectStore(Protocol):
    async def put(self, key: str, stream: BinaryIO) -> StoredObject: ...

    async def read(self, key: str) -> bytes: ...

    async def delete(self, key: str) -> None: ...


async def _iter_chunks(stream: BinaryIO):
    # Upload streams are blocking file objects; read them off the event loop
    while True:
        chunk = await run_in_threadpool(stream.read, CHUNK_SIZE)
        if not chunk:
            break
        yield chunk


class LocalObjectStore:
    """Stores objects as files under ``base_path``, served at ``<base_url>/storage``."""

    def __init__(self, base_path: str | Path, base_url: str):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url.rstrip("/")

    def _path_for(self, key: str) -> Path:
        path = (self.base_path / key).resolve()
        if self.base_path.resolve() not in path.parents:
            raise ObjectStoreError(f"Storage key escapes the storage root: {key!r}")
        return path

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/storage/{quote(key)}"

    async def put(self, key: str, stream: BinaryIO) -> StoredObject:
        """Write the stream to disk. Returns the key and its fetchable URL."""
        path = self._path_for(key)
        try:
            async with aiofiles.open(path, "wb") as f:
                async for chunk in _iter_chunks(stream):
                    await f.write(chunk)
        except OSError as e:
            raise ObjectStoreError(f"Failed to write object {key!r}: {e}") from e
        return StoredObject(key=key, url=self.url_for(key))

    async def read(self, key: str) -> bytes:
        path = self._path_for(key)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise ObjectStoreError(f"Failed to read object {key!r}: {e}") from e

    async def delete(self, key: str) -> None:
        """Delete the object. Deleting a missing key is not an error."""
        path = self._path_for(key)
        if not path.exists():
            logger.info("Object %s already absent from local storage", key)
            return
        try:
            os.remove(path)
        except OSError as e:
            raise ObjectStoreError(f"Failed to delete object {key!r}: {e}") from e


class MemoryObjectStore:
    """Keeps objects in a dict. Used for development and tests."""

    def __init__(self, base_url: str = "memory://"):
        # "memory://" keeps its double slash; "http://host/" loses the trailing one
        self.base_url = base_url if base_url.endswith("://") else base_url.rstrip("/") + "/"
        self.objects: dict[str, bytes] = {}

    async def put(self, key: str, stream: BinaryIO) -> StoredObject:
        self.objects[key] = b"".join([chunk async for chunk in _iter_chunks(stream)])
        return StoredObject(key=key, url=f"{self.base_url}{quote(key)}")

    async def read(self, key: str) -> bytes:
        try:
            return self.objects[key]
        except KeyError:
            raise ObjectStoreError(f"No such object {key!r}") from None

    async def delete(self, key: str) -> None:
        self.objects.pop(key, None)


def build_object_store(settings: Settings) -> ObjectStore:
    if settings.FILE_STORAGE_TYPE == "local":
        return LocalObjectStore(settings.FILE_STORAGE_PATH, settings.PUBLIC_BASE_URL)
    if settings.FILE_STORAGE_TYPE == "memory":
        return MemoryObjectStore()
    raise ValueError(f"Unknown storage type: {settings.FILE_STORAGE_TYPE}")
