import contextlib
from typing import Callable, Iterable, List, Optional

from ...core.api import PackageRegistry, Release
from ...core.errors import (
    LOWER_LAYER_ERRORS,
    AddDependenciesError,
    FetchNoResultsError,
    ModAlreadyInstalledError,
    ModFetchNoResultsError,
    ModInstallError,
    ModNotFoundError,
    ModNotInstalledError,
    RegistryError,
    StorageError,
    UnableToListModsError,
    UnableToRemoveModError,
    UnableToUpdateModError,
)
from ...storage import FRAMEWORK_NAME, FrameworksRepository, Mod, ModsRepository
from ...storage.models import parse_dependency
from ...utils.confirmation import LONG_TOKENS, SHORT_TOKENS, confirm, line_source
from ..files import FileStore


class ModManager:
    """
    Coordinates the mods table and the plugin folder so they change together

    Every public method either completes or raises one of the service errors
    from hearthmods.core.errors. Lower level causes are not chained.
    """

    def __init__(
        self,
        mods_repo: ModsRepository,
        file_manager: FileStore,
        registry: PackageRegistry,
        input_stream: Iterable[str],
        log_callback: Optional[Callable[[str], None]] = None,
        frameworks_repo: Optional[FrameworksRepository] = None,
        progress_callback: Optional[Callable[[int], None]] = None
    ):
        self.mods_repo = mods_repo
        self.file_manager = file_manager
        self.registry = registry
        self.lines = line_source(input_stream)
        self.log_callback = log_callback
        self.frameworks_repo = frameworks_repo
        self.progress_callback = progress_callback

    def _log(self, message: str):
        if self.log_callback:
            self.log_callback(message)

    def _confirm(self, question: str, tokens=SHORT_TOKENS) -> bool:
        return confirm(self.lines, question, tokens, self.log_callback)

    # ==================== QUERIES ====================

    def list_mods(self) -> List[Mod]:
        """Returns every installed mod. Storage errors propagate unchanged"""
        self._log("Retrieving list of mods...\n")
        return self.mods_repo.list_mods()

    # ==================== INSTALL ====================

    def add_mod(self, namespace: str, name: str) -> Mod:
        """
        Installs a mod and its direct dependencies

        Args:
            namespace: Package owner on Thunderstore
            name: Package name

        Returns:
            The recorded mod

        Raises:
            ModAlreadyInstalledError: A mod with this name is already recorded
            ModNotFoundError: The registry doesn't know the package
            ModInstallError: The files or the record could not be written
            AddDependenciesError: The mod was installed but a dependency wasn't
        """
        try:
            self.mods_repo.get_mod(name)
        except ModFetchNoResultsError:
            pass
        except StorageError:
            raise ModInstallError(f"unable to install {name}") from None
        else:
            raise ModAlreadyInstalledError(f"{name} is already installed")

        self._log(f"Installing {name}...\n")
        release = self._latest_release(namespace, name)
        self._log(f"Found version {release.version_number}...\n")

        try:
            mod = self._install_release(release)
        except LOWER_LAYER_ERRORS:
            raise ModInstallError(f"unable to install {name}") from None

        self._install_dependencies(release.dependencies)
        self._log(f"...Successfully installed {name}!\n")
        return mod

    # ==================== UPDATE ====================

    def update_mod(self, name: str) -> bool:
        """
        Updates an installed mod when the registry has a newer release

        Returns:
            True if a new version was installed

        Raises:
            ModNotInstalledError: No mod with this name is recorded
            ModNotFoundError: The registry doesn't know the package
            MaxAttemptsError: The confirmation was not answered
            UnableToUpdateModError: The files or the record could not be written
            AddDependenciesError: The mod was updated but a dependency wasn't
        """
        try:
            current = self.mods_repo.get_mod(name)
        except ModFetchNoResultsError:
            raise ModNotInstalledError(f"{name} is not installed") from None
        except StorageError:
            raise UnableToUpdateModError(f"unable to update {name}") from None

        latest = self._latest_release(current.namespace, current.name)
        if not self._is_newer(current, latest):
            self._log(
                f"... Latest version of {current.namespace} {current.name} "
                f"already installed ({current.version})\n"
            )
            return False

        self._log(
            f"Found a new version ({latest.version_number}) of "
            f"{current.namespace} {current.name} ...\n"
        )
        if not self._confirm("Did you want to update this mod?"):
            self._log("... Aborting\n")
            return False

        self._log(f"Updating {name} to {latest.version_number}...\n")
        self._replace(current, latest)
        self._log(f"...Successfully updated {name}!\n")
        return True

    def update_all_mods(self) -> int:
        """
        Updates every installed mod after a single confirmation

        Mods are processed in listing order and the first failure stops the run.

        Returns:
            Number of mods that were updated
        """
        if not self._confirm("Are you sure you wanted to update ALL mods?"):
            self._log("... Aborting\n")
            return 0

        self._log("Updating all mods...\n")
        try:
            mods = self.mods_repo.list_mods()
        except StorageError:
            raise UnableToListModsError("unable to list mods") from None
        self._log(f"Found {len(mods)} mods...\n")

        updated = 0
        for current in mods:
            latest = self._latest_release(current.namespace, current.name)
            if not self._is_newer(current, latest):
                self._log(f"{current.name} is up-to-date...\n")
                continue

            self._log(f"Updating {current.name} to {latest.version_number}...\n")
            self._replace(current, latest)
            updated += 1

        self._log("...Successfully updated all mods!\n")
        return updated

    # ==================== REMOVE ====================

    def remove_mod(self, namespace: str, name: str) -> bool:
        """
        Deletes a mod record and then its files

        Returns:
            True if the mod was removed, False if the user declined

        Raises:
            MaxAttemptsError: The confirmation was not answered
            ModNotInstalledError: No mod with this name and namespace is recorded
            UnableToRemoveModError: The record or the files could not be deleted
        """
        if not self._confirm("Are you sure you want to remove this mod?"):
            self._log("Aborting ...\n")
            return False

        self._log(f"Removing {name}...\n")
        try:
            current = self.mods_repo.get_mod(name)
        except ModFetchNoResultsError:
            raise ModNotInstalledError(f"{name} is not installed") from None
        except StorageError:
            raise UnableToRemoveModError(f"unable to remove {name}") from None
        if current.namespace != namespace:
            raise ModNotInstalledError(f"{name} by {namespace} is not installed")
        self._log(f"Found version {current.version}...\n")

        try:
            self.mods_repo.delete_mod(name, namespace)
            self.file_manager.remove_mod(current.full_name)
        except LOWER_LAYER_ERRORS:
            raise UnableToRemoveModError(f"unable to remove {name}") from None

        self._log(f"...Successfully removed {name}!\n")
        return True

    def remove_all_mods(self) -> int:
        """
        Deletes every mod record and empties the plugin folder

        Returns:
            Number of mods removed
        """
        if not self._confirm("Are you sure you want to remove ALL mods?", LONG_TOKENS):
            self._log("Aborting...\n")
            return 0

        try:
            mods = self.mods_repo.list_mods()
        except StorageError:
            raise UnableToListModsError("unable to list mods") from None
        if not mods:
            self._log("...No mods are installed\n")
            return 0

        self._log(f"Removing {len(mods)} mods...\n")
        try:
            self.mods_repo.delete_all_mods()
            self.file_manager.remove_all_mods()
        except LOWER_LAYER_ERRORS:
            raise UnableToRemoveModError("unable to remove all mods") from None

        self._log("...Successfully removed all mods!\n")
        return len(mods)

    # ==================== HELPERS ====================

    @staticmethod
    def _is_newer(current: Mod, latest: Release) -> bool:
        # Plain string ordering, so "0.0.10" sorts before "0.0.9"
        return current.version < latest.version_number

    def _latest_release(self, namespace: str, name: str) -> Release:
        try:
            return self.registry.get_package(namespace, name).latest
        except RegistryError:
            raise ModNotFoundError(f"{namespace}-{name} was not found") from None

    def _replace(self, current: Mod, latest: Release):
        try:
            self.file_manager.remove_mod(current.full_name)
            self._install_release(latest)
        except LOWER_LAYER_ERRORS:
            raise UnableToUpdateModError(f"unable to update {current.name}") from None

        self._install_dependencies(latest.dependencies)

    def _install_release(self, release: Release) -> Mod:
        """Installs the files of a release, then upserts its record"""
        try:
            path = self.file_manager.install_mod(
                release.download_url, release.full_name, self.progress_callback
            )
        except LOWER_LAYER_ERRORS:
            with contextlib.suppress(StorageError):
                self.mods_repo.delete_mod(release.name, release.namespace)
            raise

        mod = Mod(
            name=release.name,
            namespace=release.namespace,
            version=release.version_number,
            file_path=str(path),
            website_url=release.website_url,
            description=release.description,
            dependencies=list(release.dependencies),
            framework_id=self._framework_id(),
        )
        self.mods_repo.upsert_mod(mod)
        return mod

    def _install_dependencies(self, dependencies: List[str]) -> int:
        """
        Installs the direct dependencies of a release

        The framework is skipped and dependencies of dependencies are not
        followed.
        """
        pending = []
        for key in dependencies:
            parsed = parse_dependency(key)
            if parsed is None:
                raise AddDependenciesError(f"malformed dependency {key}")
            if parsed[1] != FRAMEWORK_NAME:
                pending.append(parsed)

        if not pending:
            return 0

        self._log(f"Found {len(pending)} dependencies, installing them ...\n")
        for namespace, name, _ in pending:
            try:
                release = self.registry.get_package(namespace, name).latest
                self._install_release(release)
            except LOWER_LAYER_ERRORS:
                raise AddDependenciesError(
                    f"unable to install dependency {namespace}-{name}"
                ) from None
        return len(pending)

    def _framework_id(self) -> int:
        if self.frameworks_repo is None:
            return 0
        try:
            return self.frameworks_repo.get_framework(FRAMEWORK_NAME).id
        except FetchNoResultsError:
            return 0
