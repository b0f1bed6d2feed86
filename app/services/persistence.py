"""
Advisory persistence for analysis records.
Write failures never reach the caller: they are logged and reported through return values.
"""
import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.models import AnalysisRecord, InvalidTransition, ProcessingStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordHandle:
    id: str


@dataclass(frozen=True)
class Completed:
    summary: str


@dataclass(frozen=True)
class Failed:
    error_message: str


AnalysisOutcome = Completed | Failed


class RecordGateway:
    def __init__(self, db: Session):
        self.db = db

    def create_pending(self, report_id: str, user_id: str) -> RecordHandle | None:
        """Inserts a record in `processing`. None means: carry on without persistence."""
        record = AnalysisRecord(report_id=report_id, user_id=user_id)
        record.transition(ProcessingStatus.PROCESSING)
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning("Error creating summary record for report %s: %s", report_id, e)
            return None
        return RecordHandle(id=record.id)

    def finalize(self, handle: RecordHandle | None, outcome: AnalysisOutcome) -> bool:
        """Writes the terminal status. True only if the update was stored."""
        if handle is None:
            return False
        try:
            record = self.db.get(AnalysisRecord, handle.id)
            if record is None:
                logger.warning("Summary record %s disappeared before update", handle.id)
                return False
            if isinstance(outcome, Completed):
                record.transition(ProcessingStatus.COMPLETED)
                record.summary_text = outcome.summary
            else:
                record.transition(ProcessingStatus.FAILED)
                record.error_message = outcome.error_message
            self.db.add(record)
            self.db.commit()
        except (SQLAlchemyError, InvalidTransition) as e:
            self.db.rollback()
            logger.warning("Error updating summary record %s: %s", handle.id, e)
            return False
        return True
