import sqlite3
from typing import List

from ..core.errors import (
    FrameworkDeleteError,
    FrameworkFetchError,
    FrameworkFetchMultipleResultsError,
    FrameworkFetchNoResultsError,
    FrameworkInsertError,
    FrameworkMappingError,
    FrameworkUpdateError,
)
from .database import Repository
from .models import Framework


class FrameworksRepository(Repository):
    """CRUD operations over the frameworks table"""

    def get_framework(self, name: str) -> Framework:
        try:
            rows = self._query("SELECT * FROM frameworks WHERE name = ?", (name,))
        except sqlite3.Error as exc:
            raise FrameworkFetchError(f"unable to fetch {name} from frameworks table") from exc

        frameworks = self._map_rows(rows)
        if not frameworks:
            raise FrameworkFetchNoResultsError(f"fetch query returned no results for {name}")
        if len(frameworks) > 1:
            raise FrameworkFetchMultipleResultsError(
                f"fetch query returned multiple results for {name}"
            )
        return frameworks[0]

    def insert_framework(self, framework: Framework) -> None:
        sql = """INSERT INTO frameworks(name, namespace, version, websiteUrl, description)
                 VALUES (?, ?, ?, ?, ?)"""
        self._execute(
            sql,
            (framework.name, framework.namespace, framework.version,
             framework.website_url, framework.description),
            FrameworkInsertError,
        )

    def update_framework(self, framework: Framework) -> None:
        sql = """UPDATE frameworks
                 SET name = ?, namespace = ?, version = ?, websiteUrl = ?, description = ?
                 WHERE id = ?"""
        self._execute(
            sql,
            (framework.name, framework.namespace, framework.version,
             framework.website_url, framework.description, framework.id),
            FrameworkUpdateError,
        )

    def delete_framework(self, name: str) -> None:
        self._execute("DELETE FROM frameworks WHERE name = ?", (name,), FrameworkDeleteError)

    @staticmethod
    def _map_rows(rows) -> List[Framework]:
        try:
            return [
                Framework(
                    id=row["id"],
                    name=row["name"],
                    namespace=row["namespace"],
                    version=row["version"],
                    website_url=row["websiteUrl"] or "",
                    description=row["description"] or "",
                )
                for row in rows
            ]
        except (IndexError, KeyError, TypeError) as exc:
            raise FrameworkMappingError("unable to map framework record") from exc
