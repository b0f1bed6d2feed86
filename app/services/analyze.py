"""
Report analysis workflow: intake -> record (processing) -> fetch -> classify -> summarize -> record (completed | failed).
Single attempt, strictly sequential.
"""
import logging
from dataclasses import dataclass
from typing import Any

from app.services.completion import CompletionClient
from app.services.errors import PDF_NOT_SUPPORTED, AnalysisError, InvalidRequest, UnsupportedFormat
from app.services.persistence import Completed, Failed, RecordGateway
from app.services.storage import LocalStorage

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "bmp", "tiff"})


@dataclass(frozen=True)
class IntakeRequest:
    report_id: str
    file_path: str
    user_id: str


@dataclass(frozen=True)
class AnalysisResult:
    success: bool
    summary: str | None
    summary_id: str | None
    persisted: bool
    error: str | None = None


def validate_intake(body: Any) -> IntakeRequest:
    """Only presence is checked; values are used as given."""
    if not isinstance(body, dict):
        raise InvalidRequest()
    report_id = body.get("report_id")
    file_path = body.get("file_path")
    user_id = body.get("user_id")
    if not report_id or not file_path or not user_id:
        raise InvalidRequest()
    return IntakeRequest(report_id=str(report_id), file_path=str(file_path), user_id=str(user_id))


def classify(file_path: str) -> str:
    """Returns the image extension to summarize with. Decided by suffix only, never by content."""
    lower = file_path.lower()
    extension = lower.rsplit(".", 1)[-1] if "." in lower else ""
    if extension in IMAGE_EXTENSIONS:
        return extension
    if extension == "pdf":
        raise UnsupportedFormat(PDF_NOT_SUPPORTED)
    raise UnsupportedFormat()


class ReportAnalysisWorkflow:
    def __init__(self, gateway: RecordGateway, storage: LocalStorage, completion: CompletionClient):
        self.gateway = gateway
        self.storage = storage
        self.completion = completion

    def run(self, request: IntakeRequest) -> AnalysisResult:
        handle = self.gateway.create_pending(request.report_id, request.user_id)
        summary_id = handle.id if handle else None
        logger.info(
            "Analyzing report %s (%s) record=%s",
            request.report_id,
            request.file_path,
            summary_id or "-",
        )
        try:
            content = self.storage.download(request.file_path)
            extension = classify(request.file_path)
            summary = self.completion.summarize_image(content, extension)
        except AnalysisError as e:
            logger.error("Error processing report %s: %s", request.report_id, e.message)
            persisted = self.gateway.finalize(handle, Failed(e.message))
            return AnalysisResult(
                success=False,
                summary=None,
                summary_id=summary_id,
                persisted=persisted,
                error=e.message,
            )
        except Exception as e:
            # Record still ends in a terminal state; the request boundary reports a generic 500
            self.gateway.finalize(handle, Failed(str(e) or "Unknown error"))
            raise
        persisted = self.gateway.finalize(handle, Completed(summary))
        return AnalysisResult(success=True, summary=summary, summary_id=summary_id, persisted=persisted)
