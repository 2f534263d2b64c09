"""Share token service - mints public links and resolves them.

A share token is the only secret guarding a public file, so it is drawn from
``secrets`` and never written to logs or error messages.
"""
import logging
import secrets
import uuid

from cloudshare.services.errors import NotFound, PermissionDenied, ShareTokenConflict, StorageUnavailable
from cloudshare.services.file_records import FileRecordStore, FileSnapshot

logger = logging.getLogger(__name__)

MIN_TOKEN_BYTES = 16


def generate_share_token(nbytes: int = 24) -> str:
    """URL-safe random token; 24 bytes gives 32 characters / 192 bits."""
    return secrets.token_urlsafe(max(nbytes, MIN_TOKEN_BYTES))


class ShareTokenService:
    def __init__(
        self,
        store: FileRecordStore,
        public_base_url: str,
        token_bytes: int = 24,
        max_attempts: int = 5,
    ):
        self.store = store
        self.public_base_url = public_base_url.rstrip("/")
        self.token_bytes = token_bytes
        self.max_attempts = max_attempts

    async def generate_share_link(self, owner_id: str, file_id: uuid.UUID) -> str:
        """Return the file's share token, minting one on first call.

        Re-sharing returns the existing token so links already handed out keep
        working.
        """
        record = await self.store.get_by_id(file_id)
        if record.owner_id != owner_id:
            raise PermissionDenied("Only the owner can share this file")
        if record.share_token is not None:
            return record.share_token

        for attempt in range(1, self.max_attempts + 1):
            token = generate_share_token(self.token_bytes)
            try:
                updated = await self.store.update_share_fields(file_id, token)
            except ShareTokenConflict:
                logger.warning(
                    f"Share token collision for file {file_id} "
                    f"(attempt {attempt}/{self.max_attempts}), regenerating"
                )
                continue
            if updated.share_token != token:
                logger.info(f"File {file_id} was shared concurrently, reusing existing link")
            else:
                logger.info(f"Share link generated for file {file_id}")
            return updated.share_token

        logger.error(f"Could not mint a unique share token for file {file_id} after {self.max_attempts} attempts")
        raise StorageUnavailable("Could not generate a share link, please retry")

    async def resolve_public(self, token: str) -> FileSnapshot:
        """Look up a publicly shared file. Every miss is a plain NotFound."""
        if not token or not token.strip():
            raise NotFound()
        try:
            record = await self.store.get_by_share_token(token)
        except NotFound:
            raise NotFound() from None
        if not record.is_public or record.share_token != token:
            raise NotFound()
        return record

    def share_url(self, token: str) -> str:
        return f"{self.public_base_url}/share/{token}"
