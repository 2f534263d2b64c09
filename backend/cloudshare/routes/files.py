"""Owner-facing files API routes. Every route requires a bearer token."""
from uuid import UUID
from fastapi import APIRouter, Depends, UploadFile, File as FastAPIFile
from fastapi.responses import RedirectResponse

from cloudshare.dependencies import get_current_user_id, get_file_service
from cloudshare.schemas.common import DeleteResponse, OWNER_ERROR_RESPONSES
from cloudshare.schemas.file import FileResponse, OwnerStatsResponse, ShareLinkResponse
from cloudshare.services.file_lifecycle import FileLifecycleCoordinator
from cloudshare.services.file_records import FileSnapshot
from cloudshare.services.file_utils import format_file_size

router = APIRouter(prefix="/api/files", tags=["files"], responses=OWNER_ERROR_RESPONSES)


@router.post("/upload", response_model=FileResponse, status_code=201)
async def upload_file(
    file: UploadFile = FastAPIFile(...),
    owner_id: str = Depends(get_current_user_id),
    files: FileLifecycleCoordinator = Depends(get_file_service),
):
    """Upload a file and create its (private) record."""
    record = await files.upload(owner_id, file.filename or "", file.content_type, file.file)
    return _to_response(record, files)


@router.get("", response_model=list[FileResponse])
async def list_files(
    owner_id: str = Depends(get_current_user_id),
    files: FileLifecycleCoordinator = Depends(get_file_service),
):
    """List the caller's files, newest first."""
    records = await files.list_files(owner_id)
    return [_to_response(r, files) for r in records]


@router.get("/stats", response_model=OwnerStatsResponse)
async def get_stats(
    owner_id: str = Depends(get_current_user_id),
    files: FileLifecycleCoordinator = Depends(get_file_service),
):
    """File count, storage used and downloads across the caller's files."""
    totals = await files.owner_stats(owner_id)
    return {
        "file_count": totals.file_count,
        "total_bytes": totals.total_bytes,
        "total_size_label": format_file_size(totals.total_bytes),
        "total_downloads": totals.total_downloads,
        "shared_count": totals.shared_count,
    }


@router.get("/{file_id}", response_model=FileResponse)
async def get_file_metadata(
    file_id: UUID,
    owner_id: str = Depends(get_current_user_id),
    files: FileLifecycleCoordinator = Depends(get_file_service),
):
    """Get one of the caller's files by ID."""
    record = await files.get_file(owner_id, file_id)
    return _to_response(record, files)


@router.get("/{file_id}/download")
async def download_file(
    file_id: UUID,
    owner_id: str = Depends(get_current_user_id),
    files: FileLifecycleCoordinator = Depends(get_file_service),
):
    """Count an owner download and redirect to the stored bytes."""
    _, url = await files.download_own(owner_id, file_id)
    return RedirectResponse(url, status_code=307)


@router.delete("/{file_id}", response_model=DeleteResponse)
async def delete_file(
    file_id: UUID,
    owner_id: str = Depends(get_current_user_id),
    files: FileLifecycleCoordinator = Depends(get_file_service),
):
    """Delete a file's stored bytes and its record."""
    await files.delete(owner_id, file_id)
    return {"deleted": True, "id": str(file_id)}


@router.post("/{file_id}/share", response_model=ShareLinkResponse)
async def share_file(
    file_id: UUID,
    owner_id: str = Depends(get_current_user_id),
    files: FileLifecycleCoordinator = Depends(get_file_service),
):
    """Make a file public and return its share link. Calling again returns the same link."""
    token = await files.share(owner_id, file_id)
    return {"token": token, "url": files.shares.share_url(token)}


def _to_response(record: FileSnapshot, files: FileLifecycleCoordinator) -> dict:
    """Convert a record snapshot to a response dict."""
    return {
        "id": record.id,
        "owner_id": record.owner_id,
        "display_name": record.display_name,
        "media_type": record.media_type,
        "size_bytes": record.size_bytes,
        "size_label": format_file_size(record.size_bytes),
        "storage_url": record.storage_url,
        "share_token": record.share_token,
        "share_url": files.shares.share_url(record.share_token) if record.share_token else None,
        "is_public": record.is_public,
        "download_count": record.download_count,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }
