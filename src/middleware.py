import time
import json
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from src.config import Settings

logger = logging.getLogger("docrelay.middleware")


def get_status_color(status_code: int) -> str:
    if 200 <= status_code < 300:
        return "\033[92m"  # Green
    elif 400 <= status_code < 500:
        return "\033[93m"  # Yellow
    elif 500 <= status_code < 600:
        return "\033[91m"  # Red
    else:
        return "\033[0m"   # Default


def register_middleware(app: FastAPI, settings: Settings):

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        status_color = get_status_color(response.status_code)
        reset_color = "\033[0m"

        client = f"{request.client.host}:{request.client.port}" if request.client else "-"
        log_msg = (
            f"{client} - {request.method} {request.url.path} - "
            f"Status: {status_color}{response.status_code}{reset_color} - Time: {process_time:.2f}s"
        )

        if response.status_code >= 400:
            body = b""
            async for chunk in response.body_iterator:
                body += chunk
            response = Response(
                content=body,
                status_code=response.status_code,
                headers=dict(response.headers),
                media_type=response.media_type,
            )
            try:
                error_content = json.loads(body.decode())
                reason = error_content.get("error", error_content) if isinstance(error_content, dict) else error_content
                log_msg += f" - Reason: {reason}"
            except ValueError:
                log_msg += f" - Reason: {body.decode(errors='ignore')}"

        logger.info(log_msg)
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
