"""Assistant chat: user context from recent reports and appointments, fixed persona, same completion transport."""
import datetime as dt
import logging

from sqlmodel import Session, select

from app.models import AnalysisRecord, Appointment, ProcessingStatus, UploadedFile
from app.services.completion import CHAT_TEMPERATURE, CompletionClient
from app.services.errors import EmptyResponse

logger = logging.getLogger(__name__)

CONTEXT_LIMIT = 5
SUMMARY_PREVIEW_CHARS = 200

PERSONA_TEMPLATE = """You are {title} AI, a helpful medical assistant for the {title} healthcare platform. You help users understand their medical reports, manage appointments, and answer general health questions.

Key capabilities:
- Explain medical reports and lab results in simple terms
- Help users understand their health metrics
- Provide information about upcoming appointments
- Answer general health and wellness questions
- Offer guidance on when to seek medical attention

Important guidelines:
- Always be empathetic and supportive
- Explain medical terms in layman's language
- Never provide definitive diagnoses - encourage users to consult their healthcare provider
- Be clear that you're an AI assistant, not a replacement for professional medical advice
- If asked about specific medications or treatments, always recommend consulting with their doctor

{context}

Remember to be conversational, friendly, and helpful while maintaining medical accuracy and appropriate boundaries."""


def _short_date(value: dt.date | dt.datetime) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def _recent_reports(db: Session, user_id: str) -> list[tuple[UploadedFile, AnalysisRecord | None]]:
    files = list(
        db.exec(
            select(UploadedFile)
            .where(UploadedFile.user_id == user_id)
            .order_by(UploadedFile.uploaded_at.desc())
            .limit(CONTEXT_LIMIT)
        ).all()
    )
    if not files:
        return []
    summaries = db.exec(
        select(AnalysisRecord)
        .where(AnalysisRecord.report_id.in_([f.id for f in files]))
        .order_by(AnalysisRecord.created_at.desc())
    ).all()
    latest: dict[str, AnalysisRecord] = {}
    for s in summaries:
        latest.setdefault(s.report_id, s)
    return [(f, latest.get(f.id)) for f in files]


def _upcoming_appointments(db: Session, user_id: str, today: dt.date) -> list[Appointment]:
    return list(
        db.exec(
            select(Appointment)
            .where(Appointment.user_id == user_id, Appointment.date >= today)
            .order_by(Appointment.date.asc())
            .limit(CONTEXT_LIMIT)
        ).all()
    )


def format_context(
    reports: list[tuple[UploadedFile, AnalysisRecord | None]],
    appointments: list[Appointment],
) -> str:
    context = ""
    if reports:
        context += "\n\nUser's Recent Medical Reports:\n"
        for f, summary in reports:
            context += f"- {f.file_name} (uploaded {_short_date(f.uploaded_at)})\n"
            if summary and summary.processing_status == ProcessingStatus.COMPLETED and summary.summary_text:
                context += f"  Summary: {summary.summary_text[:SUMMARY_PREVIEW_CHARS]}...\n"
    if appointments:
        context += "\n\nUser's Upcoming Appointments:\n"
        for apt in appointments:
            context += (
                f"- {apt.doctor_name or 'Doctor'} ({apt.specialty or 'General'}) "
                f"on {_short_date(apt.date)} at {apt.time}\n"
            )
            if apt.notes:
                context += f"  Notes: {apt.notes}\n"
    return context


def build_user_context(db: Session, user_id: str, today: dt.date | None = None) -> str:
    """Best effort: any failure yields an empty context instead of an error."""
    try:
        reports = _recent_reports(db, user_id)
        appointments = _upcoming_appointments(db, user_id, today or dt.date.today())
    except Exception as e:
        logger.warning("Error fetching user context for %s: %s", user_id, e)
        db.rollback()
        return ""
    return format_context(reports, appointments)


def build_system_message(context: str, title: str = "Nirogya") -> dict:
    return {"role": "system", "content": PERSONA_TEMPLATE.format(title=title, context=context)}


class ChatAssistant:
    def __init__(self, completion: CompletionClient, db: Session | None = None, title: str = "Nirogya"):
        self.completion = completion
        self.db = db
        self.title = title

    def reply(self, messages: list[dict], user_id: str | None = None) -> str:
        context = build_user_context(self.db, user_id) if user_id and self.db is not None else ""
        api_messages = [build_system_message(context, self.title), *messages]
        text = self.completion.complete(
            api_messages,
            temperature=CHAT_TEMPERATURE,
            purpose="Medical Assistant",
        )
        if not text:
            raise EmptyResponse("No response from AI")
        return text
