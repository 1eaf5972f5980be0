import shutil
import tempfile
from pathlib import Path
from typing import Optional, Union

from ...core.errors import (
    BackupActiveError,
    BackupCreateError,
    BackupDeleteError,
    BackupMissingError,
    BackupRestoreError,
    FileOperationError,
)
from .archive import copy_tree, move_files


class Backup:
    """
    Single-slot copy of a directory tree taken before a mutating operation

    Only one backup can be active at a time. It ends either with remove()
    when the operation succeeded or with restore() when it failed.
    """

    PREFIX = "hearthmods-backup-"

    def __init__(self, temp_dir: Optional[Union[str, Path]] = None):
        self._temp_dir = str(temp_dir) if temp_dir else None
        self._location: Optional[Path] = None

    @property
    def path(self) -> Optional[Path]:
        """Location of the active backup, or None"""
        return self._location

    @property
    def is_active(self) -> bool:
        return self._location is not None

    def create(self, source: Union[str, Path]) -> Path:
        """
        Copies the source tree into a fresh temporary directory

        Args:
            source: Directory to back up

        Returns:
            The backup location

        Raises:
            BackupActiveError: A backup is already active
            BackupCreateError: The source could not be walked or copied
        """
        if self._location is not None:
            raise BackupActiveError(f"a backup is already active at {self._location}")

        source = Path(source)
        if not source.is_dir():
            raise BackupCreateError(f"unable to create backup, {source} is not a directory")

        try:
            location = Path(tempfile.mkdtemp(prefix=self.PREFIX, dir=self._temp_dir))
        except OSError as exc:
            raise BackupCreateError("unable to allocate backup directory") from exc

        try:
            copy_tree(source, location)
        except FileOperationError as exc:
            shutil.rmtree(location, ignore_errors=True)
            raise BackupCreateError(f"unable to create backup of {source}") from exc

        self._location = location
        return location

    def restore(self, destination: Union[str, Path]) -> None:
        """
        Replaces the destination with the backup contents, then deletes the backup

        Raises:
            BackupMissingError: No backup is active
            BackupRestoreError: The destination could not be rebuilt
            BackupDeleteError: The emptied backup directory could not be deleted
        """
        if self._location is None:
            raise BackupMissingError("backup is missing")

        destination = Path(destination)
        try:
            if destination.exists():
                shutil.rmtree(destination)
            destination.mkdir(parents=True, exist_ok=True)
            move_files(self._location, destination)
        except (OSError, FileOperationError) as exc:
            raise BackupRestoreError(f"unable to restore backup into {destination}") from exc

        location, self._location = self._location, None
        try:
            shutil.rmtree(location)
        except OSError as exc:
            raise BackupDeleteError(f"unable to delete backup {location}") from exc

    def abandon(self) -> Optional[Path]:
        """
        Forgets the active backup without deleting it

        Returns:
            Where the backup copy was left, or None when no backup was active
        """
        location, self._location = self._location, None
        return location

    def remove(self) -> None:
        """Deletes the active backup. Does nothing when no backup is active"""
        if self._location is None:
            return
        try:
            shutil.rmtree(self._location)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise BackupDeleteError(f"unable to delete backup {self._location}") from exc
        self._location = None
