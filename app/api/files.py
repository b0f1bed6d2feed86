"""Uploaded reports: upload (+ analysis), dashboard listing, delete."""
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
from starlette.concurrency import run_in_threadpool

from app.api.deps import get_completion_client, get_storage
from app.core.config import settings
from app.core.database import get_db
from app.core.rate_limit import limiter, per_minute_limit
from app.models import AnalysisRecord, ProcessingStatus, UploadedFile
from app.schemas import AnalysisStatus, FileItem, SummaryItem, UploadResponse
from app.schemas.files import iso
from app.services.analyze import IntakeRequest, ReportAnalysisWorkflow
from app.services.completion import CompletionClient
from app.services.errors import ContentNotFound
from app.services.persistence import RecordGateway
from app.services.storage import LocalStorage, object_path

log = logging.getLogger("nirogya")

router = APIRouter(prefix="/files", tags=["files"])

ALLOWED_UPLOAD_TYPES = {"image/jpeg", "image/png", "image/gif", "application/pdf"}


def _summary_item(r: AnalysisRecord) -> SummaryItem:
    return SummaryItem(
        id=r.id,
        summary_text=r.summary_text,
        processing_status=ProcessingStatus(r.processing_status).value,
        error_message=r.error_message,
        created_at=iso(r.created_at),
    )


def _file_item(f: UploadedFile, summaries: list[AnalysisRecord] | None = None) -> FileItem:
    return FileItem(
        id=f.id,
        user_id=f.user_id,
        file_name=f.file_name,
        file_url=f.file_url,
        file_type=f.file_type,
        file_size=f.file_size,
        category=f.category,
        uploaded_at=iso(f.uploaded_at),
        report_summaries=[_summary_item(s) for s in summaries or []],
    )


@router.post("/upload", response_model=UploadResponse)
@limiter.limit(per_minute_limit)
async def upload_file(
    request: Request,
    user_id: str = Form(...),
    file: UploadFile = File(...),
    category: str = Form("lab-results"),
    analyze: bool = Form(True),
    db: Session = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
    completion: CompletionClient = Depends(get_completion_client),
):
    """multipart/form-data: user_id, file (JPG, PNG, GIF or PDF), category, analyze."""
    user_id = user_id.strip()
    if not user_id:
        raise HTTPException(status_code=400, detail="user_id is required.")
    content_type = (file.content_type or "").lower()
    if content_type not in ALLOWED_UPLOAD_TYPES:
        raise HTTPException(status_code=400, detail="Only JPG, PNG, GIF or PDF files can be uploaded.")
    content = await file.read()
    if len(content) == 0:
        raise HTTPException(status_code=400, detail="File is empty.")
    if len(content) > settings.upload_max_mb * 1024 * 1024:
        raise HTTPException(status_code=413, detail=f"File must be at most {settings.upload_max_mb} MB.")
    filename = file.filename or "upload"
    path = object_path(user_id, filename)
    try:
        storage.upload(path, content)
    except ContentNotFound:
        raise HTTPException(status_code=400, detail="Invalid storage path.")
    except OSError as e:
        log.exception("Storage upload failed for %s: %s", path, e)
        raise HTTPException(status_code=500, detail="Upload failed")
    record = UploadedFile(
        user_id=user_id,
        file_name=filename,
        file_url=path,
        file_type=content_type,
        file_size=len(content),
        category=category or "lab-results",
    )
    try:
        db.add(record)
        db.commit()
        db.refresh(record)
    except SQLAlchemyError as e:
        db.rollback()
        log.exception("files/upload: row insert failed for %s: %s", path, e)
        storage.delete(path)
        raise HTTPException(status_code=500, detail="Upload failed")
    log.info("files/upload: file_id=%s path=%s size=%s", record.id, path, len(content))

    analysis = None
    if analyze:
        workflow = ReportAnalysisWorkflow(RecordGateway(db), storage, completion)
        result = await run_in_threadpool(workflow.run, IntakeRequest(record.id, path, user_id))
        analysis = AnalysisStatus(
            success=result.success,
            summary=result.summary,
            summary_id=result.summary_id,
            persisted=result.persisted,
            error=result.error,
        )
    summaries = list(db.exec(select(AnalysisRecord).where(AnalysisRecord.report_id == record.id)).all())
    return UploadResponse(file=_file_item(record, summaries), analysis=analysis)


@router.get("", response_model=list[FileItem])
def list_files(
    user_id: str,
    q: str | None = None,
    db: Session = Depends(get_db),
):
    """Dashboard: the user's files, newest first, each with its analysis records."""
    files = list(
        db.exec(
            select(UploadedFile)
            .where(UploadedFile.user_id == user_id)
            .order_by(UploadedFile.uploaded_at.desc())
        ).all()
    )
    if q and q.strip():
        needle = q.strip().lower()
        files = [f for f in files if needle in f.file_name.lower()]
    by_report: dict[str, list[AnalysisRecord]] = {}
    if files:
        records = db.exec(
            select(AnalysisRecord)
            .where(AnalysisRecord.report_id.in_([f.id for f in files]))
            .order_by(AnalysisRecord.created_at.desc())
        ).all()
        for r in records:
            by_report.setdefault(r.report_id, []).append(r)
    return [_file_item(f, by_report.get(f.id)) for f in files]


@router.delete("/{file_id}")
def delete_file(
    file_id: str,
    user_id: str,
    db: Session = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
):
    record = db.get(UploadedFile, file_id)
    if not record or record.user_id != user_id:
        raise HTTPException(status_code=404, detail="File not found.")
    if not storage.delete(record.file_url):
        log.warning("files/delete: object %s was not removed from storage", record.file_url)
    for summary in db.exec(select(AnalysisRecord).where(AnalysisRecord.report_id == file_id)).all():
        db.delete(summary)
    db.delete(record)
    db.commit()
    return {"ok": True, "id": file_id}
