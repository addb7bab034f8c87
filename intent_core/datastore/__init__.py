from .base import BaseDatastore
from .fss.service import FileSystemService

__all__ = ["BaseDatastore", "FileSystemService"]
