# careerforge/main.py
# FastAPI entrypoint: health, job listing, and the streaming skill-gap chat route.

import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, File, Form, Query, Request, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from .config import get_settings, log_settings_summary
from .errors import ChatError
from .job_api import get_jobs
from .logging_config import setup_logging
from .orchestrator import ChatService, build_chat_service
from .rate_limit import client_identifier
from .schemas import ErrorBody
from .validation import validate_chat_form

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
}


def create_app(service: Optional[ChatService] = None) -> FastAPI:
    """Create the application. Tests pass a ChatService wired with fakes."""
    if service is None:
        load_dotenv()
        settings = get_settings()
        setup_logging(settings.log_level)
        log_settings_summary(settings)
        service = build_chat_service(settings)
    settings = service.settings

    app = FastAPI(title="CareerForge Skill Gap Assistant", version="1.0.0")
    app.state.chat_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins.split(","),
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-RateLimit-Remaining", "X-Opik-Trace-ID", "Retry-After"],
    )

    @app.exception_handler(ChatError)
    async def chat_error_handler(request: Request, exc: ChatError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=exc.headers or None)

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.get("/api/jobs")
    async def list_jobs(
        response: Response,
        q: Optional[str] = None,
        country: str = "us",
        limit: int = Query(20, ge=1),
    ):
        response.headers.update(SECURITY_HEADERS)
        jobs = await get_jobs(
            settings,
            query=q or "software developer",
            country=country,
            limit=min(limit, 50),
        )
        return [j.model_dump(by_alias=True) for j in jobs]

    # Main skill-gap endpoint: multipart in, plain-text stream out
    @app.post(
        "/chat",
        response_class=StreamingResponse,
        responses={code: {"model": ErrorBody} for code in (400, 422, 429, 500)},
    )
    async def chat(
        request: Request,
        message: Optional[str] = Form(None),
        pdf: Optional[UploadFile] = File(None),
        messages: Optional[str] = Form(None),
        jobId: Optional[str] = Form(None),
    ):
        chat_service: ChatService = request.app.state.chat_service
        pdf_bytes = await pdf.read() if pdf is not None else None
        logger.info(f"Received request: message={(message or '')[:50]!r} has_pdf={bool(pdf_bytes)}")

        try:
            inbound = validate_chat_form(
                chat_service.settings,
                message=message,
                pdf_bytes=pdf_bytes,
                pdf_content_type=pdf.content_type if pdf is not None else None,
                pdf_filename=pdf.filename if pdf is not None else None,
                messages_raw=messages,
                job_id=jobId,
            )
            identifier = client_identifier(request.headers)
            reply = await chat_service.handle_chat(inbound, identifier)
        except ChatError:
            raise
        except Exception:
            logger.exception("Chat route error")
            return JSONResponse(
                status_code=500,
                content={"error": "Failed to process request", "details": "An unexpected error occurred."},
            )

        headers = {"X-RateLimit-Remaining": str(reply.remaining)}
        if reply.trace_id:
            headers["X-Opik-Trace-ID"] = reply.trace_id
        return StreamingResponse(
            reply.stream.iter_text(),
            media_type="text/plain; charset=utf-8",
            headers=headers,
        )

    return app


if __name__ == "__main__":
    import uvicorn

    config = get_settings()
    uvicorn.run("careerforge.main:create_app", factory=True, host=config.host, port=config.port)
