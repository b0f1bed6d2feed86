from pydantic import BaseModel


class AnalyzeReportResponse(BaseModel):
    success: bool = True
    summary: str
    summary_id: str | None = None
    persisted: bool


class ErrorResponse(BaseModel):
    error: str
