import dataclasses
import sqlite3
from typing import List

from ..core.errors import (
    ModDeleteAllError,
    ModDeleteError,
    ModFetchError,
    ModFetchMultipleResultsError,
    ModFetchNoResultsError,
    ModInsertError,
    ModListError,
    ModMappingError,
    ModUpdateError,
)
from .database import Repository
from .models import Mod


class ModsRepository(Repository):
    """CRUD operations over the mods table"""

    def list_mods(self) -> List[Mod]:
        try:
            rows = self._query("SELECT * FROM mods ORDER BY id")
        except sqlite3.Error as exc:
            raise ModListError("unable to return list of records from mods table") from exc
        return self._map_rows(rows)

    def get_mod(self, name: str) -> Mod:
        """
        Fetches the single installed mod with the given name

        Raises:
            ModFetchNoResultsError: No mod with that name is recorded
            ModFetchMultipleResultsError: More than one row matched
            ModFetchError: The query itself failed
        """
        try:
            rows = self._query("SELECT * FROM mods WHERE name = ?", (name,))
        except sqlite3.Error as exc:
            raise ModFetchError(f"unable to fetch {name} from mods table") from exc

        mods = self._map_rows(rows)
        if not mods:
            raise ModFetchNoResultsError(f"fetch query returned no results for {name}")
        if len(mods) > 1:
            raise ModFetchMultipleResultsError(f"fetch query returned multiple results for {name}")
        return mods[0]

    def insert_mod(self, mod: Mod) -> None:
        sql = """INSERT INTO mods(name, namespace, filePath, version, websiteUrl, description, frameworkId)
                 VALUES (?, ?, ?, ?, ?, ?, ?)"""
        self._execute(
            sql,
            (mod.name, mod.namespace, mod.file_path, mod.version,
             mod.website_url, mod.description, mod.framework_id),
            ModInsertError,
        )

    def update_mod(self, mod: Mod) -> None:
        sql = """UPDATE mods
                 SET name = ?, namespace = ?, filePath = ?, version = ?, websiteUrl = ?,
                     description = ?, frameworkId = ?
                 WHERE id = ?"""
        self._execute(
            sql,
            (mod.name, mod.namespace, mod.file_path, mod.version,
             mod.website_url, mod.description, mod.framework_id, mod.id),
            ModUpdateError,
        )

    def upsert_mod(self, mod: Mod) -> None:
        """Inserts the mod, or overwrites the existing record with the same name"""
        try:
            current = self.get_mod(mod.name)
        except ModFetchNoResultsError:
            self.insert_mod(mod)
            return
        self.update_mod(dataclasses.replace(mod, id=current.id))

    def delete_mod(self, name: str, namespace: str) -> None:
        self._execute(
            "DELETE FROM mods WHERE name = ? AND namespace = ?",
            (name, namespace),
            ModDeleteError,
        )

    def delete_all_mods(self) -> None:
        # Row delete instead of DROP TABLE, the table must keep existing
        self._execute("DELETE FROM mods WHERE id IS NOT NULL", (), ModDeleteAllError)

    @staticmethod
    def _map_rows(rows) -> List[Mod]:
        try:
            return [
                Mod(
                    id=row["id"],
                    framework_id=row["frameworkId"],
                    name=row["name"],
                    namespace=row["namespace"],
                    file_path=row["filePath"],
                    version=row["version"],
                    website_url=row["websiteUrl"] or "",
                    description=row["description"] or "",
                )
                for row in rows
            ]
        except (IndexError, KeyError, TypeError) as exc:
            raise ModMappingError("unable to map mod record") from exc
