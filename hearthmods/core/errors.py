"""
Error taxonomy for HearthMods

Each layer raises its own family of exceptions. The lifecycle managers
re-classify everything below them into the small ServiceError family that the
command line reports to the user.
"""


class HearthModsError(Exception):
    """Base exception for HearthMods."""


# ==================== REGISTRY / TRANSPORT ====================

class RegistryError(HearthModsError):
    """Raised when the package registry cannot answer a request."""


class PackageNotFoundError(RegistryError):
    """Raised when the registry has no package for a namespace/name pair."""


class ThunderstoreAPIError(RegistryError):
    """Raised when the registry answers with an unexpected status code."""


class HTTPClientError(RegistryError):
    """Raised when an HTTP request cannot be sent or completed."""


class ByteIOError(RegistryError):
    """Raised when a response body cannot be read."""


class JSONParseError(RegistryError):
    """Raised when a response body is not valid JSON."""


# ==================== FILE PRIMITIVES ====================

class FileOperationError(HearthModsError):
    """Raised when a filesystem operation fails."""


class FileOpenError(FileOperationError):
    pass


class FileCreateError(FileOperationError):
    pass


class FileWriteError(FileOperationError):
    pass


class FileRenameError(FileOperationError):
    pass


class FileCopyError(FileOperationError):
    pass


class DirectoryCreateError(FileOperationError):
    pass


class DirectoryOpenError(FileOperationError):
    pass


class ZipReadError(FileOperationError):
    pass


class ZipDeleteError(FileOperationError):
    pass


class ModFilesDeleteError(FileOperationError):
    """Raised when a mod's install directory cannot be removed."""


class AllModFilesDeleteError(FileOperationError):
    """Raised when the plugin directory cannot be emptied."""


class FrameworkFilesInstallError(FileOperationError):
    pass


class FrameworkFilesUpdateError(FileOperationError):
    pass


class FrameworkFilesDeleteError(FileOperationError):
    pass


# ==================== BACKUP ====================

class BackupError(HearthModsError):
    """Raised when a backup cannot be created, restored or deleted."""


class BackupCreateError(BackupError):
    pass


class BackupRestoreError(BackupError):
    pass


class BackupDeleteError(BackupError):
    pass


class BackupMissingError(BackupError):
    """Raised when a restore is requested but no backup is active."""


class BackupActiveError(BackupError):
    """Raised when a backup is requested while another one is still active."""


# ==================== METADATA STORE ====================

class StorageError(HearthModsError):
    """Raised when the metadata database cannot complete an operation."""


class InvalidStatementError(StorageError):
    pass


class TransactionError(StorageError):
    pass


class FetchNoResultsError(StorageError):
    """Raised when a lookup by unique key matches no rows."""


class FetchMultipleResultsError(StorageError):
    """Raised when a lookup by unique key matches more than one row."""


class ModListError(StorageError):
    pass


class ModFetchError(StorageError):
    pass


class ModMappingError(StorageError):
    pass


class ModFetchNoResultsError(FetchNoResultsError):
    pass


class ModFetchMultipleResultsError(FetchMultipleResultsError):
    pass


class ModInsertError(StorageError):
    pass


class ModUpdateError(StorageError):
    pass


class ModDeleteError(StorageError):
    pass


class ModDeleteAllError(StorageError):
    pass


class FrameworkFetchError(StorageError):
    pass


class FrameworkMappingError(StorageError):
    pass


class FrameworkFetchNoResultsError(FetchNoResultsError):
    pass


class FrameworkFetchMultipleResultsError(FetchMultipleResultsError):
    pass


class FrameworkInsertError(StorageError):
    pass


class FrameworkUpdateError(StorageError):
    pass


class FrameworkDeleteError(StorageError):
    pass


# Everything the registry, file, backup and storage layers can raise
LOWER_LAYER_ERRORS = (RegistryError, FileOperationError, BackupError, StorageError)


# ==================== CONFIGURATION ====================

class ConfigError(HearthModsError):
    """Raised when the configuration file cannot be used."""


class ConfigReadError(ConfigError):
    pass


class ConfigWriteError(ConfigError):
    pass


class InvalidConfigKeyError(ConfigError):
    pass


# ==================== SERVICES ====================

class ServiceError(HearthModsError):
    """Coarse error reported by a lifecycle manager."""


class MaxAttemptsError(ServiceError):
    def __init__(self, message: str = "too many invalid answers, aborting"):
        super().__init__(message)


class ModAlreadyInstalledError(ServiceError):
    pass


class ModInstallError(ServiceError):
    pass


class ModNotFoundError(ServiceError):
    pass


class ModNotInstalledError(ServiceError):
    pass


class UnableToListModsError(ServiceError):
    pass


class UnableToUpdateModError(ServiceError):
    pass


class UnableToRemoveModError(ServiceError):
    pass


class AddDependenciesError(ServiceError):
    pass


class FrameworkNotFoundError(ServiceError):
    pass


class FrameworkNotInstalledError(ServiceError):
    pass


class UnableToInstallFrameworkError(ServiceError):
    pass


class UnableToUpdateFrameworkError(ServiceError):
    pass


class UnableToRemoveFrameworkError(ServiceError):
    pass


class InvalidGameTypeError(ServiceError):
    pass


class ServerStartError(ServiceError):
    pass
