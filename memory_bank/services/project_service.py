"""Project registry operations."""

import logging

from memory_bank.errors import NotFoundError
from memory_bank.models.project import Project
from memory_bank.models.requests import CreateProjectRequest, parse_request
from memory_bank.storage.chunk_store import ChunkStore
from memory_bank.storage.projects import ProjectRegistry

logger = logging.getLogger(__name__)


class ProjectService:
    """Creates, looks up and deletes projects.

    Deleting a project cascades to every chunk it owns.
    """

    def __init__(self, registry: ProjectRegistry, store: ChunkStore) -> None:
        self._registry = registry
        self._store = store

    def create_project(self, name: str) -> Project:
        request = parse_request(CreateProjectRequest, name=name)
        project = self._registry.insert(Project(name=request.name))
        logger.info("Project created: %s (%s)", project.name, project.id)
        return project

    def delete_project(self, project_id: str) -> None:
        """Delete a project's chunks, then the project record.

        Raises:
            NotFoundError: If the project does not exist.
        """
        self.require_project(project_id)
        self._store.delete_project(project_id)
        self._registry.delete(project_id)
        logger.info("Project deleted: %s", project_id)

    def list_projects(self) -> list[Project]:
        return self._registry.list_all()

    def get_project_by_name(self, name: str) -> Project | None:
        return self._registry.get_by_name(name)

    def project_exists(self, project_id: str) -> bool:
        return self._registry.exists(project_id)

    def require_project(self, project_id: str) -> None:
        if not self._registry.exists(project_id):
            raise NotFoundError(f"Project with ID '{project_id}' not found.")

    def touch(self, project_id: str) -> None:
        self._registry.touch(project_id)
