"""Files Package - archive extraction, backups and the server file layout."""

from .archive import copy_tree, move_files, remove_path, unzip
from .backup import Backup
from .file_manager import FileManager, FileStore

__all__ = [
    "Backup",
    "FileManager",
    "FileStore",
    "copy_tree",
    "move_files",
    "remove_path",
    "unzip"
]
