"""Storage Package - SQLite metadata for installed mods and frameworks."""

from .database import create_tables, open_database
from .frameworks_repo import FrameworksRepository
from .models import FRAMEWORK_NAME, FRAMEWORK_NAMESPACE, Framework, Mod
from .mods_repo import ModsRepository

__all__ = [
    "FRAMEWORK_NAME",
    "FRAMEWORK_NAMESPACE",
    "Framework",
    "FrameworksRepository",
    "Mod",
    "ModsRepository",
    "create_tables",
    "open_database"
]
