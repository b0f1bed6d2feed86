from .analysis import AnalysisRecord, InvalidTransition, ProcessingStatus
from .appointment import Appointment
from .error_log import ErrorLog
from .uploaded_file import UploadedFile

__all__ = [
    "AnalysisRecord",
    "Appointment",
    "ErrorLog",
    "InvalidTransition",
    "ProcessingStatus",
    "UploadedFile",
]
