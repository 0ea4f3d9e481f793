"""Resource call sites built on the client's request primitives."""

from .base import Resource
from .attachments import Attachment, create_attachment
from .sections import Section, SectionBase, SectionInsertRequest, create_section, insert_section
from .projects import Project, ProjectStatus, CreateProjectRequest, create_project
from .workspaces import Workspace

__all__ = [
    "Resource",
    "Attachment",
    "create_attachment",
    "Section",
    "SectionBase",
    "SectionInsertRequest",
    "create_section",
    "insert_section",
    "Project",
    "ProjectStatus",
    "CreateProjectRequest",
    "create_project",
    "Workspace",
]
