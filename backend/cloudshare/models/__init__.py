"""Import all models so SQLAlchemy metadata knows about them."""
from cloudshare.models.base import Base
from cloudshare.models.file_record import FileRecord

__all__ = ["Base", "FileRecord"]
