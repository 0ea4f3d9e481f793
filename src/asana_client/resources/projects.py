"""
Projects: prioritized lists of tasks in a workspace or organization.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from ..options import Options
from ..pagination import NextPage
from ..runtime.errors import PayloadValidationError
from .base import Resource
from .sections import Section, SectionBase, SectionInsertRequest, create_section, insert_section

if TYPE_CHECKING:
    from ..client import Client


class ProjectStatus(Resource):
    """Project status: a color (green, yellow or red) and a short text."""
    color: Optional[str] = None
    text: Optional[str] = None
    author: Optional[Resource] = None


class Project(Resource):
    """A project in a workspace or organization."""
    archived: Optional[bool] = None
    public: Optional[bool] = None
    color: Optional[str] = None
    notes: Optional[str] = None
    layout: Optional[str] = None
    due_on: Optional[str] = None
    start_on: Optional[str] = None
    owner: Optional[Resource] = None
    team: Optional[Resource] = None
    workspace: Optional[Resource] = None
    current_status: Optional[ProjectStatus] = None
    members: Optional[List[Resource]] = None
    followers: Optional[List[Resource]] = None

    def fetch(self, client: Client, *options: Options) -> Project:
        """Load the full details for this project."""
        client.trace("Loading project details for %r", self.name)
        result, _ = client.get(f"/projects/{self.gid}", None, Project, *options)
        return result

    def sections(self, client: Client, *options: Options) -> Tuple[List[Section], Optional[NextPage]]:
        """List one page of sections in this project."""
        client.trace("Listing sections in %r", self.name)
        return client.get(f"/projects/{self.gid}/sections", None, List[Section], *options)

    def create_section(self, client: Client, name: str) -> Section:
        return create_section(client, self.gid, SectionBase(name=name))

    def insert_section(self, client: Client, request: SectionInsertRequest) -> None:
        insert_section(client, self.gid, request)


@dataclass
class CreateProjectRequest:
    """Fields for a new project. A workspace or a team is required."""
    name: str
    workspace: Optional[str] = None
    team: Optional[str] = None
    owner: Optional[str] = None
    notes: Optional[str] = None
    color: Optional[str] = None
    layout: Optional[str] = None
    public: Optional[bool] = None
    due_on: Optional[str] = None
    start_on: Optional[str] = None
    custom_fields: Optional[Dict[str, str]] = None

    def validate(self) -> None:
        if not self.name:
            raise PayloadValidationError("Project name is required")
        if not (self.workspace or self.team):
            raise PayloadValidationError("A workspace or team is required")


def create_project(client: Client, request: CreateProjectRequest) -> Project:
    """Create a new project."""
    client.info("Creating project %r", request.name)
    return client.post("/projects", request, Project)
