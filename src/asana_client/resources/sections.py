"""
Sections: subdivisions of a project that group tasks, shown as headers in
list views and as columns in board views.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..options import Options
from ..runtime.errors import PayloadValidationError
from .base import Resource

if TYPE_CHECKING:
    from ..client import Client


class Section(Resource):
    """A section of a project."""
    project: Optional[Resource] = None
    created_at: Optional[str] = None

    def fetch(self, client: Client, *options: Options) -> Section:
        """Load the full details for this section."""
        client.trace("Loading section details for %r", self.name)
        result, _ = client.get(f"/sections/{self.gid}", None, Section, *options)
        return result


@dataclass
class SectionBase:
    """Writable fields of a section."""
    name: str


@dataclass
class SectionInsertRequest:
    """
    Move a section relative to another one in a board view.

    Exactly one of ``before_section`` and ``after_section`` must be given.
    Sections cannot be moved between projects.
    """
    section: str
    before_section: Optional[str] = None
    after_section: Optional[str] = None

    def validate(self) -> None:
        if bool(self.before_section) == bool(self.after_section):
            raise PayloadValidationError(
                "Exactly one of before_section or after_section is required",
                details={"section": self.section},
            )


def create_section(client: Client, project_gid: str, section: SectionBase) -> Section:
    """Create a new section in a project."""
    client.info("Creating section %r", section.name)
    return client.post(f"/projects/{project_gid}/sections", section, Section)


def insert_section(client: Client, project_gid: str, request: SectionInsertRequest) -> None:
    """Move a section within a project."""
    client.info("Moving section %s", request.section)
    client.post(f"/projects/{project_gid}/sections/insert", request)
