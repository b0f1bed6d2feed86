from datetime import datetime

from pydantic import BaseModel


class SummaryItem(BaseModel):
    id: str
    summary_text: str | None = None
    processing_status: str
    error_message: str | None = None
    created_at: str


class FileItem(BaseModel):
    id: str
    user_id: str
    file_name: str
    file_url: str
    file_type: str | None = None
    file_size: int | None = None
    category: str
    uploaded_at: str
    report_summaries: list[SummaryItem] = []


class AnalysisStatus(BaseModel):
    success: bool
    summary: str | None = None
    summary_id: str | None = None
    persisted: bool = False
    error: str | None = None


class UploadResponse(BaseModel):
    file: FileItem
    analysis: AnalysisStatus | None = None


def iso(value: datetime | None) -> str:
    return value.isoformat() if value else ""
