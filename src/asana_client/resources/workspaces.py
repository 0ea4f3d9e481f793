"""Workspaces and organizations."""

from __future__ import annotations
from typing import TYPE_CHECKING, List, Optional, Tuple

from ..options import Options
from ..pagination import NextPage, fetch_all
from .base import Resource
from .projects import Project

if TYPE_CHECKING:
    from ..client import Client


class Workspace(Resource):
    """A workspace or organization."""
    is_organization: Optional[bool] = None

    def projects(self, client: Client, *options: Options) -> Tuple[List[Project], Optional[NextPage]]:
        """List one page of projects in this workspace."""
        client.trace("Listing projects in %r", self.name)
        return client.get(f"/workspaces/{self.gid}/projects", None, List[Project], *options)

    def all_projects(self, client: Client, *options: Options) -> List[Project]:
        """Page through every project in this workspace."""
        return fetch_all(lambda *page: self.projects(client, *page), *options)
