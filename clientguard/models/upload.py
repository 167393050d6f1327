"""File upload data models."""

from pydantic import BaseModel


class UploadedFile(BaseModel):
    """Metadata of a user-selected file."""

    name: str
    size: int
    content_type: str
