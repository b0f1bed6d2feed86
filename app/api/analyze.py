import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from app.api.deps import get_completion_client, get_record_gateway, get_storage
from app.core.rate_limit import limiter, per_minute_limit
from app.schemas import AnalyzeReportResponse, ErrorResponse
from app.services.analyze import ReportAnalysisWorkflow, validate_intake
from app.services.completion import CompletionClient
from app.services.errors import InvalidRequest
from app.services.persistence import RecordGateway
from app.services.storage import LocalStorage

log = logging.getLogger("nirogya")

router = APIRouter(tags=["analysis"])


async def read_json_body(request: Request):
    """Raw JSON body, or None when it is missing or not JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


@router.post(
    "/analyze",
    response_model=AnalyzeReportResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit(per_minute_limit)
async def analyze_report(
    request: Request,
    gateway: RecordGateway = Depends(get_record_gateway),
    storage: LocalStorage = Depends(get_storage),
    completion: CompletionClient = Depends(get_completion_client),
):
    """Summarizes one uploaded report image. Body: {report_id, file_path, user_id}."""
    body = await read_json_body(request)
    try:
        intake = validate_intake(body)
    except InvalidRequest as e:
        return JSONResponse(status_code=400, content={"error": e.message})
    workflow = ReportAnalysisWorkflow(gateway, storage, completion)
    result = await run_in_threadpool(workflow.run, intake)
    if not result.success:
        return JSONResponse(status_code=500, content={"error": result.error})
    log.info(
        "/analyze done: report_id=%s summary_id=%s persisted=%s",
        intake.report_id,
        result.summary_id,
        result.persisted,
    )
    return AnalyzeReportResponse(
        success=True,
        summary=result.summary or "",
        summary_id=result.summary_id,
        persisted=result.persisted,
    )
