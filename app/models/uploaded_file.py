"""Uploaded report metadata; the bytes live in object storage under file_url."""
import uuid
from datetime import datetime

from sqlmodel import Field, SQLModel

from .analysis import utcnow


class UploadedFile(SQLModel, table=True):
    __tablename__ = "files"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(index=True)
    file_name: str
    file_url: str = Field(index=True)  # storage path, e.g. "<user_id>/<epoch_ms>-scan.png"
    file_type: str | None = None  # MIME type sent by the client
    file_size: int | None = None
    category: str = "lab-results"
    uploaded_at: datetime = Field(default_factory=utcnow, index=True)
