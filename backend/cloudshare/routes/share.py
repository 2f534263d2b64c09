"""Public share-link routes. No authentication; the token is the only secret."""
from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from cloudshare.dependencies import get_file_service
from cloudshare.schemas.common import PUBLIC_ERROR_RESPONSES
from cloudshare.schemas.file import PublicFileResponse
from cloudshare.services.file_lifecycle import FileLifecycleCoordinator
from cloudshare.services.file_records import FileSnapshot
from cloudshare.services.file_utils import file_type_label, format_file_size

router = APIRouter(prefix="/api/share", tags=["share"], responses=PUBLIC_ERROR_RESPONSES)


@router.get("/{token}", response_model=PublicFileResponse)
async def get_public_file(
    token: str,
    files: FileLifecycleCoordinator = Depends(get_file_service),
):
    """Public metadata for a shared file."""
    record = await files.get_public_file(token)
    return _to_public_response(record)


@router.get("/{token}/download")
async def download_public_file(
    token: str,
    files: FileLifecycleCoordinator = Depends(get_file_service),
):
    """Count a public download and redirect to the stored bytes."""
    _, url = await files.download_public(token)
    return RedirectResponse(url, status_code=307)


def _to_public_response(record: FileSnapshot) -> dict:
    return {
        "display_name": record.display_name,
        "media_type": record.media_type,
        "type_label": file_type_label(record.media_type),
        "size_bytes": record.size_bytes,
        "size_label": format_file_size(record.size_bytes),
        "download_count": record.download_count,
        "created_at": record.created_at,
    }
