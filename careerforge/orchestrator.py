# careerforge/orchestrator.py
# Chat pipeline: rate limit -> extract -> resolve job -> compose prompt -> stream -> schedule evaluation.

import logging
import math
from dataclasses import dataclass
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from .config import Settings
from .errors import ConfigurationError, RateLimitedError
from .evaluator import SkillGapEvaluator
from .job_api import resolve_job
from .llm import CompletionStream, ChatModel, build_chat_model, new_trace_id
from .observability import get_sink
from .pdf_extractor import extract_text_from_pdf
from .prompts import compose_prompt
from .rate_limit import RateLimiter
from .schemas import InboundRequest

logger = logging.getLogger(__name__)


@dataclass
class ChatReply:
    """What the route needs to build the streaming response."""
    stream: CompletionStream
    remaining: int
    trace_id: Optional[str] = None


class ChatService:
    """Process-wide collaborators for /chat, constructed once and injected into the app."""

    def __init__(
        self,
        settings: Settings,
        rate_limiter: RateLimiter,
        chat_model: Optional[ChatModel] = None,
        evaluator: Optional[SkillGapEvaluator] = None,
    ):
        self.settings = settings
        self.rate_limiter = rate_limiter
        self.chat_model = chat_model
        self.evaluator = evaluator

    def _check_rate_limit(self, identifier: str) -> int:
        result = self.rate_limiter.check(identifier)
        if not result.allowed:
            wait = max(1, math.ceil(result.reset_in))
            logger.info(f"Rate limit exceeded for {identifier}")
            raise RateLimitedError(
                "Too many requests",
                f"Rate limit exceeded. Please wait {wait} seconds before trying again.",
                headers={"X-RateLimit-Remaining": "0", "Retry-After": str(wait)},
            )
        return result.remaining

    async def handle_chat(self, request: InboundRequest, identifier: str) -> ChatReply:
        # 1) Rate limit before doing any expensive work
        remaining = self._check_rate_limit(identifier)

        # 2) Pull text out of the résumé, off the event loop
        extracted: Optional[str] = None
        if request.has_pdf:
            extracted = await run_in_threadpool(
                extract_text_from_pdf, request.pdf_bytes, self.settings.pdf_max_pages
            )
            logger.info(f"Extracted {len(extracted)} chars from {request.pdf_filename or 'upload'}")

        # 3) Pick the posting and build the prompt
        job = resolve_job(request.job_id)
        bundle = compose_prompt(extracted, request.message, job, request.prior_messages)

        # 4) Start streaming
        if self.chat_model is None:
            raise ConfigurationError(
                "API key not configured",
                "Please set OPENAI_API_KEY in your .env file and restart the server",
            )
        stream = await self.chat_model.stream(bundle)

        # 5) Evaluate in the background once the full text exists
        trace_id = None
        if self.settings.tracing_enabled:
            trace_id = new_trace_id()
            if self.evaluator is not None:
                stream.keep_alive = True
                self.evaluator.schedule(stream.text, bundle.user_profile, bundle.job_requirements, trace_id)

        return ChatReply(stream=stream, remaining=remaining, trace_id=trace_id)


def build_chat_service(settings: Settings) -> ChatService:
    """Wire the production collaborators from settings."""
    rate_limiter = RateLimiter(
        window_seconds=settings.rate_limit_window_seconds,
        max_requests=settings.rate_limit_max_requests,
        max_entries=settings.rate_limit_max_entries,
    )
    chat_model = build_chat_model(settings.openai_api_key, settings.primary_model, settings.primary_temperature)

    evaluator = None
    if settings.tracing_enabled:
        judge = build_chat_model(settings.openai_api_key, settings.judge_model, settings.judge_temperature)
        if judge is not None:
            evaluator = SkillGapEvaluator(judge, sink=get_sink(settings))
    return ChatService(settings, rate_limiter, chat_model=chat_model, evaluator=evaluator)
