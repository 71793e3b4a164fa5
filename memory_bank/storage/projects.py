"""Project registry backed by the SQLite ``projects`` table."""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from memory_bank.errors import DependencyFailureError, InvalidArgumentError
from memory_bank.models.project import Project
from memory_bank.storage.database import get_connection

logger = logging.getLogger(__name__)


class ProjectRegistry:
    """Stores project records and answers project-existence queries.

    Args:
        db_path: Path to an initialized SQLite database.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = db_path

    def insert(self, project: Project) -> Project:
        """Insert a new project record.

        Raises:
            InvalidArgumentError: If the project name is already taken.
        """
        try:
            conn = get_connection(self._db_path)
            try:
                conn.execute(
                    "INSERT INTO projects (id, name, created_at, last_modified_at) "
                    "VALUES (?, ?, ?, ?)",
                    (
                        project.id,
                        project.name,
                        project.created_at.isoformat(),
                        project.last_modified_at.isoformat(),
                    ),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.IntegrityError as e:
            raise InvalidArgumentError(f"Project name '{project.name}' already exists.") from e
        except sqlite3.Error as e:
            logger.exception("DB error inserting project %s", project.id)
            raise DependencyFailureError(f"DB error inserting project: {e}") from e
        return project

    def get(self, project_id: str) -> Project | None:
        rows = self._query("SELECT * FROM projects WHERE id = ?", (project_id,))
        return _row_to_project(rows[0]) if rows else None

    def get_by_name(self, name: str) -> Project | None:
        rows = self._query("SELECT * FROM projects WHERE name = ?", (name,))
        return _row_to_project(rows[0]) if rows else None

    def list_all(self) -> list[Project]:
        rows = self._query("SELECT * FROM projects ORDER BY created_at, name", ())
        return [_row_to_project(row) for row in rows]

    def exists(self, project_id: str) -> bool:
        if not project_id:
            return False
        return self.get(project_id) is not None

    def touch(self, project_id: str) -> None:
        """Set a project's last-modified timestamp to now."""
        self._execute(
            "UPDATE projects SET last_modified_at = ? WHERE id = ?",
            (datetime.now().isoformat(), project_id),
        )

    def delete(self, project_id: str) -> None:
        self._execute("DELETE FROM projects WHERE id = ?", (project_id,))

    def _query(self, sql: str, params: tuple) -> list[sqlite3.Row]:
        try:
            conn = get_connection(self._db_path)
            try:
                return conn.execute(sql, params).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.exception("DB error reading projects")
            raise DependencyFailureError(f"DB error reading projects: {e}") from e

    def _execute(self, sql: str, params: tuple) -> None:
        try:
            conn = get_connection(self._db_path)
            try:
                conn.execute(sql, params)
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.exception("DB error writing projects")
            raise DependencyFailureError(f"DB error writing projects: {e}") from e


def _row_to_project(row: sqlite3.Row) -> Project:
    return Project(
        id=row["id"],
        name=row["name"],
        created_at=datetime.fromisoformat(row["created_at"]),
        last_modified_at=datetime.fromisoformat(row["last_modified_at"]),
    )
