import contextlib
import sqlite3
from pathlib import Path
from typing import Sequence, Type, Union

from ..core.errors import InvalidStatementError, StorageError, TransactionError

MODS_TABLE_SQL = """CREATE TABLE IF NOT EXISTS mods (
    "id" INTEGER NOT NULL PRIMARY KEY AUTOINCREMENT,
    "name" TEXT NOT NULL,
    "namespace" TEXT NOT NULL,
    "filePath" TEXT NOT NULL,
    "version" TEXT NOT NULL,
    "websiteUrl" TEXT,
    "description" TEXT,
    "frameworkId" INTEGER NOT NULL,
    FOREIGN KEY (frameworkId) REFERENCES frameworks(id)
);"""

FRAMEWORKS_TABLE_SQL = """CREATE TABLE IF NOT EXISTS frameworks (
    "id" INTEGER NOT NULL PRIMARY KEY AUTOINCREMENT,
    "name" TEXT NOT NULL,
    "namespace" TEXT NOT NULL,
    "version" TEXT NOT NULL,
    "websiteUrl" TEXT,
    "description" TEXT
);"""


def open_database(db_file: Union[str, Path]) -> sqlite3.Connection:
    """
    Opens the metadata database

    The connection runs in autocommit mode so every write can open its
    own explicit transaction.
    """
    try:
        connection = sqlite3.connect(str(db_file), isolation_level=None)
        connection.execute("SELECT 1")
    except sqlite3.Error as exc:
        raise StorageError(f"unable to open database {db_file}") from exc
    connection.row_factory = sqlite3.Row
    return connection


def create_tables(connection: sqlite3.Connection) -> None:
    """Creates the frameworks and mods tables if they don't already exist"""
    for statement in (FRAMEWORKS_TABLE_SQL, MODS_TABLE_SQL):
        try:
            connection.execute(statement)
        except sqlite3.Error as exc:
            raise StorageError("unable to create database tables") from exc


class Repository:
    """Shared transaction handling for the metadata repositories"""

    def __init__(self, db: sqlite3.Connection):
        self.db = db

    def _query(self, sql: str, params: Sequence = ()) -> list:
        # Reads don't open a transaction
        return self.db.execute(sql, params).fetchall()

    def _execute(self, sql: str, params: Sequence, failure: Type[StorageError]) -> None:
        """
        Runs a single write statement inside its own transaction

        Args:
            sql: The statement to run
            params: Statement parameters
            failure: Error raised if the statement fails to execute

        Raises:
            TransactionError: A transaction could not be started
            InvalidStatementError: The statement is not a complete SQL statement
            failure: The statement failed to execute
        """
        try:
            self.db.execute("BEGIN")
        except sqlite3.Error as exc:
            raise TransactionError("unable to start a SQL transaction") from exc

        if not sqlite3.complete_statement(sql.rstrip().rstrip(";") + ";"):
            self._rollback()
            raise InvalidStatementError("SQL statement is invalid or incorrectly formatted")

        try:
            self.db.execute(sql, params)
        except sqlite3.Error as exc:
            self._rollback()
            raise failure(str(exc)) from exc

        try:
            self.db.execute("COMMIT")
        except sqlite3.Error as exc:
            self._rollback()
            raise failure(f"unable to commit transaction: {exc}") from exc

    def _rollback(self) -> None:
        if self.db.in_transaction:
            with contextlib.suppress(sqlite3.Error):
                self.db.execute("ROLLBACK")
