from .analyze import AnalyzeReportResponse, ErrorResponse
from .appointments import AppointmentCreate, AppointmentItem, DoctorItem
from .chat import ChatResponse
from .files import AnalysisStatus, FileItem, SummaryItem, UploadResponse

__all__ = [
    "AnalysisStatus",
    "AnalyzeReportResponse",
    "AppointmentCreate",
    "AppointmentItem",
    "ChatResponse",
    "DoctorItem",
    "ErrorResponse",
    "FileItem",
    "SummaryItem",
    "UploadResponse",
]
