"""
Filesystem primitives used by the file manager and backups: archive
extraction, copying and moving folder contents, and tolerant deletes
"""
import os
import shutil
import zipfile
from pathlib import Path
from typing import Callable, Optional, Union

from ...core.errors import (
    DirectoryCreateError,
    DirectoryOpenError,
    FileCopyError,
    FileOpenError,
    FileRenameError,
    FileWriteError,
    ZipReadError,
)

PathLike = Union[str, Path]


def unzip(
    source: PathLike,
    destination: PathLike,
    log_callback: Optional[Callable[[str], None]] = None
) -> int:
    """
    Extracts every entry of a zip archive into a destination folder

    Args:
        source: Path to the zip archive
        destination: Folder to extract into (created if missing)
        log_callback: Function to report progress

    Returns:
        Number of archive entries extracted
    """
    try:
        os.makedirs(destination, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreateError(f"unable to create {destination}") from exc

    try:
        zip_ref = zipfile.ZipFile(source, 'r')
    except zipfile.BadZipFile as exc:
        raise ZipReadError(f"unable to read zip archive {source}") from exc
    except OSError as exc:
        raise FileOpenError(f"unable to open {source}") from exc

    with zip_ref:
        members = zip_ref.namelist()
        if log_callback:
            log_callback(f"Extracting {len(members)} files...\n")
        try:
            zip_ref.extractall(destination)
        except (zipfile.BadZipFile, RuntimeError) as exc:
            raise ZipReadError(f"unable to read zip archive {source}") from exc
        except OSError as exc:
            raise FileWriteError(f"unable to extract {source} into {destination}") from exc

    return len(members)


def move_files(source: PathLike, destination: PathLike) -> None:
    """
    Moves every entry of the source folder into the destination folder,
    replacing entries that already exist there
    """
    source = Path(source)
    destination = Path(destination)

    try:
        entries = list(source.iterdir())
    except OSError as exc:
        raise DirectoryOpenError(f"unable to open {source}") from exc

    for entry in entries:
        target = destination / entry.name
        try:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            elif target.exists() or target.is_symlink():
                target.unlink()
            shutil.move(str(entry), str(target))
        except OSError as exc:
            raise FileRenameError(f"unable to move {entry} to {target}") from exc


def remove_path(path: PathLike) -> None:
    """Deletes a file or folder. A path that doesn't exist counts as deleted"""
    path = Path(path)
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except FileNotFoundError:
        pass


def copy_tree(source: PathLike, destination: PathLike) -> None:
    """Copies a folder recursively, keeping file modes and timestamps"""
    try:
        shutil.copytree(source, destination, dirs_exist_ok=True, copy_function=shutil.copy2)
    except (OSError, shutil.Error) as exc:
        raise FileCopyError(f"unable to copy {source} to {destination}") from exc
