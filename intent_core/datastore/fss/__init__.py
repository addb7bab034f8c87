from .service import FileSystemService

__all__ = ["FileSystemService"]
