"""File request/response schemas."""
import uuid
from datetime import datetime
from typing import Optional

from cloudshare.schemas.base import CamelORMModel


class FileResponse(CamelORMModel):
    """Owner view of a file record."""
    id: uuid.UUID
    owner_id: str
    display_name: str
    media_type: str
    size_bytes: int
    size_label: str
    storage_url: str
    share_token: Optional[str] = None
    share_url: Optional[str] = None
    is_public: bool
    download_count: int
    created_at: datetime
    updated_at: datetime


class PublicFileResponse(CamelORMModel):
    """What an anonymous holder of a share link gets to see."""
    display_name: str
    media_type: str
    type_label: str
    size_bytes: int
    size_label: str
    download_count: int
    created_at: datetime


class ShareLinkResponse(CamelORMModel):
    token: str
    url: str


class OwnerStatsResponse(CamelORMModel):
    file_count: int
    total_bytes: int
    total_size_label: str
    total_downloads: int
    shared_count: int
