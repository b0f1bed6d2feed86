"""POST /analyze end to end against the fake completion upstream."""
import base64

from fastapi.testclient import TestClient
from sqlmodel import select

from app.api.deps import get_completion_client
from app.main import app
from app.models import AnalysisRecord, ErrorLog, ProcessingStatus
from app.services.completion import SUMMARY_SYSTEM_PROMPT
from app.services.errors import PDF_NOT_SUPPORTED

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


def _body(file_path="u1/1700000000000-scan.png", report_id="r1", user_id="u1"):
    return {"report_id": report_id, "file_path": file_path, "user_id": user_id}


def _records(db):
    db.expire_all()
    return list(db.exec(select(AnalysisRecord)).all())


def test_missing_parameters_returns_400(client: TestClient, upstream, db):
    r = client.post("/analyze", json={"report_id": "r1", "user_id": "u1"})
    assert r.status_code == 400
    assert r.json() == {"error": "Missing required parameters"}
    assert upstream.calls == 0
    assert _records(db) == []


def test_non_json_body_returns_400(client: TestClient, upstream):
    r = client.post("/analyze", content=b"not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["error"] == "Missing required parameters"
    assert upstream.calls == 0


def test_png_report_is_summarized_and_recorded(client: TestClient, upstream, storage, db):
    storage.upload("u1/1700000000000-scan.png", PNG_BYTES)
    r = client.post("/analyze", json=_body())
    assert r.status_code == 200
    j = r.json()
    assert j["success"] is True
    assert j["summary"] == "Summary X"
    assert j["persisted"] is True

    records = _records(db)
    assert len(records) == 1
    record = records[0]
    assert j["summary_id"] == record.id
    assert record.report_id == "r1"
    assert record.user_id == "u1"
    assert record.processing_status == ProcessingStatus.COMPLETED
    assert record.summary_text == "Summary X"

    assert upstream.calls == 1
    sent = upstream.last_body()
    assert sent["model"] == "gpt-4o"
    assert sent["temperature"] == 0.3
    assert sent["max_tokens"] == 1000
    assert sent["messages"][0] == {"role": "system", "content": SUMMARY_SYSTEM_PROMPT}
    image_part = sent["messages"][1]["content"][1]
    assert image_part["type"] == "image_url"
    assert image_part["image_url"]["detail"] == "high"
    expected_uri = "data:image/png;base64," + base64.standard_b64encode(PNG_BYTES).decode()
    assert image_part["image_url"]["url"] == expected_uri
    assert "HTTP-Referer" not in upstream.requests[0].headers


def test_summary_is_trimmed(client: TestClient, upstream, storage):
    storage.upload("u1/scan.jpg", PNG_BYTES)
    upstream.reply_with("\n  Everything looks normal.  \n")
    r = client.post("/analyze", json=_body("u1/scan.jpg"))
    assert r.status_code == 200
    assert r.json()["summary"] == "Everything looks normal."


def test_uppercase_extension_uses_lowercase_mime(client: TestClient, upstream, storage):
    storage.upload("u1/SCAN.JPEG", PNG_BYTES)
    r = client.post("/analyze", json=_body("u1/SCAN.JPEG"))
    assert r.status_code == 200
    url = upstream.last_body()["messages"][1]["content"][1]["image_url"]["url"]
    assert url.startswith("data:image/jpeg;base64,")


def test_pdf_is_rejected_without_upstream_call(client: TestClient, upstream, storage, db):
    storage.upload("u1/report.pdf", b"%PDF-1.4")
    r = client.post("/analyze", json=_body("u1/report.pdf"))
    assert r.status_code == 500
    assert r.json() == {"error": PDF_NOT_SUPPORTED}
    assert upstream.calls == 0
    records = _records(db)
    assert len(records) == 1
    assert records[0].processing_status == ProcessingStatus.FAILED
    assert records[0].error_message == PDF_NOT_SUPPORTED


def test_unknown_suffix_is_unsupported(client: TestClient, upstream, storage):
    storage.upload("u1/notes.txt", b"hello")
    r = client.post("/analyze", json=_body("u1/notes.txt"))
    assert r.status_code == 500
    assert r.json() == {"error": "Unsupported file type for analysis"}
    assert upstream.calls == 0


def test_missing_object_marks_record_failed(client: TestClient, upstream, db):
    r = client.post("/analyze", json=_body("u1/missing.png"))
    assert r.status_code == 500
    assert r.json() == {"error": "File not found in storage"}
    assert upstream.calls == 0
    records = _records(db)
    assert [rec.processing_status for rec in records] == [ProcessingStatus.FAILED]
    assert records[0].error_message == "File not found in storage"


def test_upstream_error_is_reported(client: TestClient, upstream, storage, db):
    storage.upload("u1/scan.png", PNG_BYTES)
    upstream.fail_with(503, "Service Unavailable")
    r = client.post("/analyze", json=_body("u1/scan.png"))
    assert r.status_code == 500
    assert r.json() == {"error": "API error: 503 - Service Unavailable"}
    assert upstream.calls == 1
    assert _records(db)[0].error_message == "API error: 503 - Service Unavailable"


def test_blank_upstream_content(client: TestClient, upstream, storage):
    storage.upload("u1/scan.png", PNG_BYTES)
    upstream.reply_with("   ")
    r = client.post("/analyze", json=_body("u1/scan.png"))
    assert r.status_code == 500
    assert r.json() == {"error": "API returned no content"}


def test_missing_credential(client: TestClient, upstream, storage, db):
    app.dependency_overrides[get_completion_client] = lambda: upstream.client(None)
    storage.upload("u1/scan.png", PNG_BYTES)
    r = client.post("/analyze", json=_body("u1/scan.png"))
    assert r.status_code == 500
    assert r.json()["error"].startswith("API key not configured")
    assert upstream.calls == 0
    assert _records(db)[0].processing_status == ProcessingStatus.FAILED


def test_router_provider_sends_attribution_headers(client: TestClient, upstream, storage, openrouter_provider):
    app.dependency_overrides[get_completion_client] = lambda: upstream.client(openrouter_provider)
    storage.upload("u1/scan.png", PNG_BYTES)
    r = client.post("/analyze", json=_body("u1/scan.png"))
    assert r.status_code == 200
    request = upstream.requests[0]
    assert request.headers["HTTP-Referer"] == "https://nirogya.app"
    assert request.headers["X-Title"] == "Nirogya Medical Analysis"
    assert request.headers["Authorization"] == "Bearer sk-or-v1-test"
    assert upstream.last_body()["model"] == "openai/gpt-4o"


def test_unexpected_failure_returns_generic_500(upstream, storage, db, monkeypatch):
    def explode(path):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr("app.services.analyze.classify", explode)
    storage.upload("u1/scan.png", PNG_BYTES)
    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.post("/analyze", json=_body("u1/scan.png"))
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}
    records = _records(db)
    assert records[0].processing_status == ProcessingStatus.FAILED
    logs = list(db.exec(select(ErrorLog)).all())
    assert logs and logs[0].endpoint == "/analyze"
