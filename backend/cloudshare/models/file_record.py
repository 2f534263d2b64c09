"""FileRecord model - file metadata (actual bytes live in the object store)."""
import uuid
from sqlalchemy import String, BigInteger, Boolean, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from cloudshare.models.base import Base, TimestampMixin, OwnerMixin

DEFAULT_MEDIA_TYPE = "application/octet-stream"
DISPLAY_NAME_MAX_LENGTH = 500
MEDIA_TYPE_MAX_LENGTH = 255


class FileRecord(Base, TimestampMixin, OwnerMixin):
    __tablename__ = "files"
    __table_args__ = (
        CheckConstraint(
            "(share_token IS NULL AND is_public = false) "
            "OR (share_token IS NOT NULL AND is_public = true)",
            name="ck_files_share_token_public",
        ),
        CheckConstraint("download_count >= 0", name="ck_files_download_count"),
        CheckConstraint("size_bytes >= 0", name="ck_files_size_bytes"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    display_name: Mapped[str] = mapped_column(String(DISPLAY_NAME_MAX_LENGTH), nullable=False)
    storage_key: Mapped[str] = mapped_column(String(1000), nullable=False, unique=True)
    storage_url: Mapped[str] = mapped_column(String(2000), nullable=False)
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    media_type: Mapped[str] = mapped_column(String(MEDIA_TYPE_MAX_LENGTH), nullable=False, default=DEFAULT_MEDIA_TYPE)
    share_token: Mapped[str | None] = mapped_column(String(64), nullable=True, unique=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    download_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
