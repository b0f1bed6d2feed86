import logging
import time
import traceback
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root wherever uvicorn is started from
_PROJ_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJ_ROOT / ".env")

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlmodel import Session

from app.api.analyze import router as analyze_router
from app.api.appointments import router as appointments_router
from app.api.chat import router as chat_router
from app.api.files import router as files_router
from app.core.config import resolve_provider, settings
from app.core.database import engine, init_db, ping_db
from app.core.rate_limit import limiter
from app.logging import setup_logging
from app.models import (  # noqa: F401
    AnalysisRecord,
    Appointment,
    ErrorLog,
    UploadedFile,
)
from app.services.completion import CompletionClient
from app.services.storage import LocalStorage

setup_logging(level=settings.log_level)
log = logging.getLogger("nirogya")


def _cors_origins_list() -> list[str]:
    if not settings.cors_origins or settings.cors_origins.strip() == "*":
        return ["*"]
    return [o.strip() for o in settings.cors_origins.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    storage = LocalStorage(settings.storage_dir)
    storage.ensure_root()
    provider = resolve_provider(settings)
    app.state.storage = storage
    app.state.provider = provider
    app.state.completion_client = CompletionClient(provider, timeout=settings.completion_timeout_seconds)
    if provider is None:
        log.warning("No completion provider configured (set OPENAI_API_KEY or OPENROUTER_API_KEY in .env)")
    else:
        log.info("Completion provider: %s model=%s", provider.kind.value, provider.model)
    log.info("Object storage root: %s", storage.root)
    yield
    app.state.completion_client.close()


app = FastAPI(
    title="Nirogya API",
    description="Medical report analysis and assistant chat",
    lifespan=lifespan,
)
app.state.limiter = limiter


def _error_response(request: Request, status_code: int, detail: str) -> JSONResponse:
    rid = getattr(request.state, "request_id", None)
    body = {"error": detail, "status_code": status_code}
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=status_code, content=body)


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    log.warning("Rate limit exceeded: path=%s limit=%s", request.url.path, exc.detail)
    rid = getattr(request.state, "request_id", None)
    body = {"error": "Too many requests", "detail": f"Rate limit exceeded: {exc.detail}", "status_code": 429}
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=429, content=body)


def _validation_error_message(exc: RequestValidationError) -> str:
    errs = exc.errors()
    if not errs:
        return "Invalid request."
    first = errs[0]
    loc = list(first.get("loc") or [])
    field = str(loc[-1]) if loc else None
    if first.get("type") == "missing" and field:
        return f"Missing required field: {field}"
    msg = first.get("msg") or "Invalid request."
    return f"{field}: {msg}" if field else msg


def _jsonable_errors(errs) -> list[dict]:
    return [{"loc": list(e.get("loc") or []), "msg": e.get("msg"), "type": e.get("type")} for e in errs]


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errs = exc.errors()
    log.warning(
        "Request validation error (422): path=%s method=%s detail=%s",
        request.url.path,
        request.method,
        errs,
    )
    rid = getattr(request.state, "request_id", None)
    body = {"error": _validation_error_message(exc), "status_code": 422, "detail": _jsonable_errors(errs)}
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=422, content=body)


app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)


@app.exception_handler(HTTPException)
def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(request, exc.status_code, exc.detail if isinstance(exc.detail, str) else str(exc.detail))


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled exception: path=%s %s", request.url.path, exc, exc_info=exc)
    try:
        with Session(engine) as db:
            db.add(ErrorLog(
                endpoint=request.url.path,
                method=request.method,
                error_message=str(exc)[:2000],
                stack_trace="".join(traceback.format_exception(exc))[:10000],
            ))
            db.commit()
    except Exception as e:
        log.warning("ErrorLog write failed: %s", e)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.middleware("http")
async def request_id_and_latency(request: Request, call_next):
    request.state.request_id = str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    latency_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = request.state.request_id
    log.info(
        "request_id=%s method=%s path=%s status=%s latency_ms=%.2f",
        request.state.request_id,
        request.method,
        request.url.path,
        response.status_code,
        latency_ms,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(analyze_router)
app.include_router(chat_router)
app.include_router(files_router)
app.include_router(appointments_router)


@app.get("/health")
def health(request: Request):
    provider = getattr(request.app.state, "provider", None)
    return {
        "status": "ok",
        "completion_configured": provider is not None,
        "provider": provider.kind.value if provider else None,
        "database": "ok" if ping_db() else "error",
    }


@app.get("/")
def index():
    return {"status": "ready", "service": "nirogya-api"}
