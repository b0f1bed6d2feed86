"""Report analysis records: processing -> completed | failed."""
import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Timezone-aware UTC; datetime columns reject naive values."""
    return datetime.now(timezone.utc)


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


# Terminal states have no outgoing transitions
_TRANSITIONS: dict[ProcessingStatus, frozenset[ProcessingStatus]] = {
    ProcessingStatus.PENDING: frozenset({ProcessingStatus.PROCESSING}),
    ProcessingStatus.PROCESSING: frozenset({ProcessingStatus.COMPLETED, ProcessingStatus.FAILED}),
    ProcessingStatus.COMPLETED: frozenset(),
    ProcessingStatus.FAILED: frozenset(),
}


class InvalidTransition(Exception):
    def __init__(self, current: ProcessingStatus, target: ProcessingStatus):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move analysis from {current.value} to {target.value}")


def can_transition(current: ProcessingStatus, target: ProcessingStatus) -> bool:
    return target in _TRANSITIONS[current]


def is_terminal(status: ProcessingStatus) -> bool:
    return not _TRANSITIONS[status]


class AnalysisRecord(SQLModel, table=True):
    __tablename__ = "report_summaries"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    report_id: str = Field(index=True)  # files.id of the analysed upload
    user_id: str = Field(index=True)
    processing_status: ProcessingStatus = Field(default=ProcessingStatus.PENDING, index=True)
    summary_text: str | None = None  # only when completed
    error_message: str | None = None  # only when failed
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def transition(self, target: ProcessingStatus) -> None:
        current = ProcessingStatus(self.processing_status)
        if not can_transition(current, target):
            raise InvalidTransition(current, target)
        self.processing_status = target
        self.updated_at = utcnow()
