"""File attachments on tasks."""

from __future__ import annotations
from typing import TYPE_CHECKING, BinaryIO, Optional

from .base import Resource

if TYPE_CHECKING:
    from ..client import Client


class Attachment(Resource):
    """A file attached to a task."""
    host: Optional[str] = None
    download_url: Optional[str] = None
    view_url: Optional[str] = None
    parent: Optional[Resource] = None


def create_attachment(client: Client, task_gid: str, stream: BinaryIO, filename: str,
                      content_type: Optional[str] = None) -> Attachment:
    """Upload a file and attach it to a task. ``stream`` is closed afterwards."""
    client.info("Attaching %r to task %s", filename, task_gid)
    return client.post_multipart(f"/tasks/{task_gid}/attachments", "file", stream,
                                 filename, content_type, Attachment)
