# bootcamp_api/middleware/logger.py
import logging

from fastapi import Request

logger = logging.getLogger("bootcamp_api.requests")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


async def log_requests(request: Request, call_next):
    logger.info("method:%s, url:%s", request.method, request.url)
    return await call_next(request)


async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    return response
