"""Filename, media type and size helpers shared by the file services."""
import mimetypes
import re
import secrets
from datetime import datetime, timezone
from pathlib import PurePath

from cloudshare.models.file_record import DEFAULT_MEDIA_TYPE

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]

FILE_TYPE_LABELS: dict[str, str] = {
    "pdf": "PDF Document",
    "png": "PNG Image",
    "jpg": "JPEG Image",
    "jpeg": "JPEG Image",
    "gif": "GIF Image",
    "mp4": "MP4 Video",
    "mp3": "MP3 Audio",
    "txt": "Text File",
    "plain": "Text File",
    "zip": "ZIP Archive",
    "csv": "CSV File",
    "msword": "Word Document",
    "doc": "Word Document",
    "docx": "Word Document",
    "xls": "Excel File",
    "xlsx": "Excel File",
    "ppt": "PowerPoint Presentation",
    "pptx": "PowerPoint Presentation",
}


def sanitize_filename(name: str) -> str:
    """Reduce a user-supplied filename to a safe object-store path segment."""
    base = PurePath(name.replace("\\", "/")).name
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned[:200] or "file"


def make_storage_key(display_name: str, now: datetime | None = None) -> str:
    """Build a storage key unique per upload.

    Timestamp prefix plus a 128-bit random suffix: two uploads of the same
    name in the same millisecond land on different keys, and keys cannot be
    guessed from the upload time.
    """
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    return f"{millis}-{secrets.token_hex(16)}-{sanitize_filename(display_name)}"


def resolve_media_type(display_name: str, media_type: str | None) -> str:
    if media_type and media_type.strip():
        return media_type.strip()
    guessed, _ = mimetypes.guess_type(display_name)
    return guessed or DEFAULT_MEDIA_TYPE


def format_file_size(size_bytes: int) -> str:
    """Human readable size, e.g. 5242880 -> '5 MB'."""
    if size_bytes <= 0:
        return "0 Bytes"
    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    rounded = round(value, 2)
    if rounded == int(rounded):
        rounded = int(rounded)
    return f"{rounded} {_SIZE_UNITS[unit]}"


def file_type_label(media_type: str) -> str:
    """Friendly label for a media type, e.g. 'application/pdf' -> 'PDF Document'."""
    subtype = media_type.split("/", 1)[1] if "/" in media_type else media_type
    subtype = subtype.split(";", 1)[0].strip().lower()
    if not subtype:
        return "FILE"
    return FILE_TYPE_LABELS.get(subtype, subtype.upper())
