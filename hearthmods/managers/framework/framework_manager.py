import dataclasses
from typing import Callable, Iterable, Optional

from ...core.api import PackageRegistry, Release
from ...core.errors import (
    LOWER_LAYER_ERRORS,
    FetchNoResultsError,
    FrameworkNotFoundError,
    FrameworkNotInstalledError,
    RegistryError,
    StorageError,
    UnableToInstallFrameworkError,
    UnableToRemoveFrameworkError,
    UnableToUpdateFrameworkError,
)
from ...storage import FRAMEWORK_NAME, FRAMEWORK_NAMESPACE, Framework, FrameworksRepository
from ...utils.confirmation import LONG_TOKENS, SHORT_TOKENS, confirm, line_source
from ..files import FileStore


class FrameworkManager:
    """
    Manages the BepInEx installation every mod depends on

    File changes run under a backup of the whole server directory, and the
    frameworks table is written before that backup is released, so a failed
    database write rolls the files back as well.
    """

    def __init__(
        self,
        frameworks_repo: FrameworksRepository,
        file_manager: FileStore,
        registry: PackageRegistry,
        input_stream: Iterable[str],
        log_callback: Optional[Callable[[str], None]] = None,
        progress_callback: Optional[Callable[[int], None]] = None
    ):
        self.frameworks_repo = frameworks_repo
        self.file_manager = file_manager
        self.registry = registry
        self.lines = line_source(input_stream)
        self.log_callback = log_callback
        self.progress_callback = progress_callback

    def _log(self, message: str):
        if self.log_callback:
            self.log_callback(message)

    def install_framework(self) -> bool:
        """
        Installs BepInEx unless it's already recorded

        Returns:
            True if BepInEx is installed when the call returns

        Raises:
            MaxAttemptsError: The confirmation was not answered
            FrameworkNotFoundError: The registry doesn't know the package
            UnableToInstallFrameworkError: The files or the record could not be written
        """
        try:
            self.frameworks_repo.get_framework(FRAMEWORK_NAME)
            return True
        except FetchNoResultsError:
            pass
        except StorageError:
            raise UnableToInstallFrameworkError("unable to install mod framework") from None

        self._log("... BepInEx installation is missing ...\n")
        if not confirm(self.lines, "Did you want to install BepInEx?", SHORT_TOKENS, self.log_callback):
            self._log("... aborting ...\n")
            return False

        release = self._latest_release()
        framework = self._to_framework(release)
        try:
            self.file_manager.install_framework(
                release.download_url,
                release.full_name,
                self.progress_callback,
                commit=lambda: self.frameworks_repo.insert_framework(framework),
            )
        except LOWER_LAYER_ERRORS:
            raise UnableToInstallFrameworkError("unable to install mod framework") from None

        self._log(f"... successfully installed BepInEx {release.version_number} ...\n")
        return True

    def update_framework(self) -> bool:
        """
        Replaces BepInEx with the latest release, keeping installed mods

        Returns:
            True if a new version was installed

        Raises:
            FrameworkNotInstalledError: BepInEx is not recorded
            FrameworkNotFoundError: The registry doesn't know the package
            MaxAttemptsError: The confirmation was not answered
            UnableToUpdateFrameworkError: The files or the record could not be written
        """
        try:
            current = self.frameworks_repo.get_framework(FRAMEWORK_NAME)
        except FetchNoResultsError:
            raise FrameworkNotInstalledError("BepInEx is not installed") from None
        except StorageError:
            raise UnableToUpdateFrameworkError("unable to update mod framework") from None

        release = self._latest_release()
        # Plain string ordering, same as mods
        if not current.version < release.version_number:
            self._log(f"... Latest version of BepInEx already installed ({current.version})\n")
            return False

        self._log(f"Found a new version ({release.version_number}) of BepInEx ...\n")
        if not confirm(self.lines, "Did you want to update BepInEx?", SHORT_TOKENS, self.log_callback):
            self._log("... aborting ...\n")
            return False

        framework = dataclasses.replace(self._to_framework(release), id=current.id)
        try:
            self.file_manager.update_framework(
                release.download_url,
                release.full_name,
                self.progress_callback,
                commit=lambda: self.frameworks_repo.update_framework(framework),
            )
        except LOWER_LAYER_ERRORS:
            raise UnableToUpdateFrameworkError("unable to update mod framework") from None

        self._log(f"... successfully updated BepInEx to {release.version_number} ...\n")
        return True

    def remove_framework(self) -> bool:
        """
        Deletes the BepInEx files and record

        Returns:
            True if BepInEx was removed, False if the user declined

        Raises:
            MaxAttemptsError: The confirmation was not answered
            UnableToRemoveFrameworkError: The files or the record could not be deleted
        """
        if not confirm(self.lines, "Are you sure you want to remove BepInEx?", LONG_TOKENS,
                       self.log_callback):
            self._log("... aborting ...\n")
            return False

        try:
            self.file_manager.remove_framework(
                commit=lambda: self.frameworks_repo.delete_framework(FRAMEWORK_NAME)
            )
        except LOWER_LAYER_ERRORS:
            raise UnableToRemoveFrameworkError("unable to remove mod framework") from None

        self._log("... successfully removed BepInEx ...\n")
        return True

    def _latest_release(self) -> Release:
        try:
            return self.registry.get_package(FRAMEWORK_NAMESPACE, FRAMEWORK_NAME).latest
        except RegistryError:
            raise FrameworkNotFoundError("BepInEx was not found") from None

    @staticmethod
    def _to_framework(release: Release) -> Framework:
        return Framework(
            name=release.name,
            namespace=release.namespace,
            version=release.version_number,
            website_url=release.website_url,
            description=release.description,
        )
