import contextlib
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from ...core.download import ArchiveDownloader
from ...core.errors import (
    AllModFilesDeleteError,
    BackupError,
    BackupRestoreError,
    DirectoryCreateError,
    FrameworkFilesDeleteError,
    FrameworkFilesInstallError,
    FrameworkFilesUpdateError,
    ModFilesDeleteError,
    ZipDeleteError,
)
from ...storage.models import FRAMEWORK_NAME
from .archive import move_files, remove_path, unzip
from .backup import Backup


class FileStore(ABC):
    """On-disk side of the mod and framework lifecycle"""

    @abstractmethod
    def install_mod(
        self,
        url: str,
        full_name: str,
        progress_callback: Optional[Callable[[int], None]] = None
    ) -> Path:
        """Downloads and extracts a mod release, returning its install folder"""

    @abstractmethod
    def remove_mod(self, full_name: str) -> None:
        """Deletes a single mod folder"""

    @abstractmethod
    def remove_all_mods(self) -> None:
        """Empties the plugin folder"""

    @abstractmethod
    def install_framework(
        self,
        url: str,
        full_name: str,
        progress_callback: Optional[Callable[[int], None]] = None,
        commit: Optional[Callable[[], None]] = None
    ) -> Path:
        """Installs the framework into the server root"""

    @abstractmethod
    def update_framework(
        self,
        url: str,
        full_name: str,
        progress_callback: Optional[Callable[[int], None]] = None,
        commit: Optional[Callable[[], None]] = None
    ) -> None:
        """Replaces the installed framework, keeping installed mods"""

    @abstractmethod
    def remove_framework(self, commit: Optional[Callable[[], None]] = None) -> None:
        """Deletes the framework files from the server root"""


class FileManager(FileStore):
    """
    Handles mod and framework files inside a Valheim server directory

    Every mutating call backs up the root it touches first. The backup is
    discarded when the call succeeds and restored when anything in it fails.
    """

    # Framework archives wrap their payload in this folder
    FRAMEWORK_CONTENTS_DIR = FRAMEWORK_NAME

    # Everything the framework places in the server root
    FRAMEWORK_FILES = (
        "BepInEx",
        "doorstop_libs",
        "doorstop_config.ini",
        "icon.png",
        "manifest.json",
        "README.md",
        "winhttp.dll",
        "start_game_bepinex.sh",
        "start_server_bepinex.sh",
        "CHANGELOG.md",
        "changelog.txt",
    )

    def __init__(
        self,
        server_directory: Union[str, Path],
        downloader: Optional[ArchiveDownloader] = None,
        backup: Optional[Backup] = None,
        log_callback: Optional[Callable[[str], None]] = None
    ):
        self.server_directory = Path(server_directory)
        self.mod_directory = self.server_directory / "BepInEx" / "plugins"
        self.downloader = downloader or ArchiveDownloader()
        self.backup = backup or Backup()
        self.log_callback = log_callback

    def _log(self, message: str):
        if self.log_callback:
            self.log_callback(message)

    @contextlib.contextmanager
    def guard(self, root: Path) -> Iterator[Path]:
        """
        Backs up root for the duration of the block

        The backup is removed when the block completes and restored into
        root when it raises, interrupts included. If the restore itself fails
        the copy is left where it is and its location is logged. The
        exception is always re-raised.
        """
        self.backup.create(root)
        try:
            yield root
        except BaseException:
            self._log(f"Restoring {root} from backup...\n")
            with contextlib.suppress(BackupError):
                try:
                    self.backup.restore(root)
                except BackupRestoreError:
                    location = self.backup.abandon()
                    self._log(f"... unable to restore {root}, backup left at {location}\n")
            raise
        self.backup.remove()

    # ==================== MODS ====================

    def install_mod(
        self,
        url: str,
        full_name: str,
        progress_callback: Optional[Callable[[int], None]] = None
    ) -> Path:
        """
        Downloads a mod archive and extracts it into its own plugin folder

        Args:
            url: Release download URL
            full_name: namespace-name-version key, used as the folder name
            progress_callback: Callback function to update progress (0-100)

        Returns:
            The mod's install folder
        """
        self._ensure_directory(self.mod_directory)

        destination = self.mod_directory / full_name
        with self.guard(self.mod_directory):
            archive = self.mod_directory / f"{full_name}.zip"
            self._log(f"Downloading {full_name}...\n")
            self.downloader.download(url, archive, progress_callback)
            unzip(archive, destination, self.log_callback)
            self._delete_archive(archive)

        return destination

    def remove_mod(self, full_name: str) -> None:
        """Deletes a mod folder. A folder that's already gone counts as removed"""
        path = self.mod_directory / full_name
        if not path.exists():
            return

        with self.guard(self.mod_directory):
            try:
                remove_path(path)
            except OSError as exc:
                raise ModFilesDeleteError(f"unable to delete {path}") from exc

    def remove_all_mods(self) -> None:
        """Deletes the plugin folder with everything in it and recreates it empty"""
        self._ensure_directory(self.mod_directory)

        with self.guard(self.mod_directory):
            try:
                shutil.rmtree(self.mod_directory)
            except OSError as exc:
                raise AllModFilesDeleteError(f"unable to delete {self.mod_directory}") from exc
            self._ensure_directory(self.mod_directory)

    # ==================== FRAMEWORK ====================

    def install_framework(
        self,
        url: str,
        full_name: str,
        progress_callback: Optional[Callable[[int], None]] = None,
        commit: Optional[Callable[[], None]] = None
    ) -> Path:
        """
        Downloads the framework and merges it into the server root

        Mods already sitting in the plugin folder are carried over into the
        freshly installed one.

        Args:
            url: Release download URL
            full_name: namespace-name-version key of the release
            progress_callback: Callback function to update progress (0-100)
            commit: Called once the files are in place; if it raises, the
                server root is restored

        Returns:
            The server root
        """
        with self.guard(self.server_directory):
            with self._plugins_held():
                self._install_framework_files(url, full_name, progress_callback)
            if commit:
                commit()
        return self.server_directory

    def update_framework(
        self,
        url: str,
        full_name: str,
        progress_callback: Optional[Callable[[int], None]] = None,
        commit: Optional[Callable[[], None]] = None
    ) -> None:
        """Swaps the installed framework for a new release without losing mods"""
        with self.guard(self.server_directory):
            with self._plugins_held():
                self._remove_framework_files()
                self._install_framework_files(url, full_name, progress_callback)
            if commit:
                commit()

    def remove_framework(self, commit: Optional[Callable[[], None]] = None) -> None:
        """Deletes every known framework file from the server root"""
        with self.guard(self.server_directory):
            self._remove_framework_files()
            if commit:
                commit()

    def _install_framework_files(
        self,
        url: str,
        full_name: str,
        progress_callback: Optional[Callable[[int], None]] = None
    ):
        archive = self.server_directory / f"{full_name}.zip"
        self._log(f"Downloading {full_name}...\n")
        self.downloader.download(url, archive, progress_callback)
        unzip(archive, self.server_directory, self.log_callback)
        self._delete_archive(archive)

        contents = self.server_directory / self.FRAMEWORK_CONTENTS_DIR
        if not contents.is_dir():
            raise FrameworkFilesInstallError(
                f"{full_name} has no {self.FRAMEWORK_CONTENTS_DIR} folder"
            )

        self._log("Moving framework files into the server directory...\n")
        move_files(contents, self.server_directory)
        try:
            remove_path(contents)
        except OSError as exc:
            raise FrameworkFilesInstallError(f"unable to delete {contents}") from exc

    def _remove_framework_files(self):
        for name in self.FRAMEWORK_FILES:
            path = self.server_directory / name
            try:
                remove_path(path)
            except OSError as exc:
                raise FrameworkFilesDeleteError(f"unable to delete {path}") from exc

    @contextlib.contextmanager
    def _plugins_held(self) -> Iterator[Path]:
        """Parks the plugin folder contents outside the server root for the block"""
        try:
            hold = Path(tempfile.mkdtemp(prefix="hearthmods-plugins-"))
        except OSError as exc:
            raise FrameworkFilesUpdateError("unable to create plugin holding folder") from exc

        try:
            if self.mod_directory.is_dir():
                move_files(self.mod_directory, hold)
            yield hold
            self._ensure_directory(self.mod_directory)
            move_files(hold, self.mod_directory)
        finally:
            shutil.rmtree(hold, ignore_errors=True)

    # ==================== HELPERS ====================

    @staticmethod
    def _ensure_directory(path: Path):
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryCreateError(f"unable to create {path}") from exc

    @staticmethod
    def _delete_archive(archive: Path):
        try:
            archive.unlink()
        except OSError as exc:
            raise ZipDeleteError(f"unable to delete {archive}") from exc
