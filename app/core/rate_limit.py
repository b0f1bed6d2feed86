"""Per-IP rate limiting (SlowAPI); honours X-Forwarded-For behind a proxy."""
from fastapi import Request

from slowapi import Limiter

from .config import settings


def _get_client_ip(request: Request) -> str:
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


def per_minute_limit() -> str:
    # Evaluated per request so the limit follows the current settings
    return f"{settings.rate_limit_per_minute}/minute"


limiter = Limiter(key_func=_get_client_ip)
