# careerforge/llm.py
# OpenAI wrapper: streaming primary completion and single-shot judge completion.

import asyncio
import logging
import random
import string
import time
from functools import lru_cache
from typing import Any, AsyncIterator, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from .errors import UpstreamError
from .schemas import PromptBundle

logger = logging.getLogger(__name__)

_DONE = object()
_TRACE_ALPHABET = string.digits + string.ascii_lowercase


def new_trace_id() -> str:
    """Timestamp plus random suffix. Unique enough for tracing, not guaranteed."""
    suffix = "".join(random.choices(_TRACE_ALPHABET, k=9))
    return f"trace-{int(time.time() * 1000)}-{suffix}"


def _mark_retrieved(fut: asyncio.Future) -> None:
    # Nobody may await a failed completion; read the exception so asyncio stays quiet.
    if not fut.cancelled():
        fut.exception()


class CompletionStream:
    """
    Live view of one streamed completion.

    A pump task drains upstream fragments into a queue as soon as the stream is
    created. `iter_text()` yields them to the HTTP body, and `text` resolves to the
    full output once generation finishes. If the reader goes away early the pump
    is cancelled, unless `keep_alive` is set because something still needs `text`.

    A mid-stream upstream failure ends `iter_text()` early and fails `text`;
    bytes already sent cannot be turned into an error response.
    """

    def __init__(self, fragments: AsyncIterator[str], keep_alive: bool = False):
        loop = asyncio.get_running_loop()
        self.keep_alive = keep_alive
        self.text: asyncio.Future = loop.create_future()
        self.text.add_done_callback(_mark_retrieved)
        self._queue: asyncio.Queue = asyncio.Queue()
        self._task = loop.create_task(self._pump(fragments))
        self._task.add_done_callback(self._on_pump_done)

    async def _pump(self, fragments: AsyncIterator[str]) -> None:
        parts: List[str] = []
        try:
            async for fragment in fragments:
                if fragment:
                    parts.append(fragment)
                    self._queue.put_nowait(fragment)
        except Exception as e:
            logger.error(f"Upstream stream failed after {len(parts)} fragment(s): {e}")
            if not self.text.done():
                self.text.set_exception(
                    UpstreamError("Stream interrupted", "The AI response ended unexpectedly.")
                )
        else:
            if not self.text.done():
                self.text.set_result("".join(parts))
        finally:
            self._queue.put_nowait(_DONE)

    def _on_pump_done(self, task: asyncio.Task) -> None:
        if not self.text.done():
            self.text.cancel()

    @property
    def finished(self) -> bool:
        return self._task.done()

    async def iter_text(self) -> AsyncIterator[str]:
        completed = False
        try:
            while True:
                item = await self._queue.get()
                if item is _DONE:
                    completed = True
                    return
                yield item
        finally:
            if not completed and not self.keep_alive and not self._task.done():
                logger.info("Client went away mid-stream; abandoning generation")
                self._task.cancel()


async def _iter_deltas(upstream: Any) -> AsyncIterator[str]:
    """Text deltas of an OpenAI chat completion stream; closes the stream on exit."""
    try:
        async for chunk in upstream:
            if not chunk.choices:
                continue
            content = chunk.choices[0].delta.content
            if content:
                yield content
    finally:
        await upstream.close()


@lru_cache
def _client_for(api_key: str) -> AsyncOpenAI:
    # One HTTP client per process and key.
    return AsyncOpenAI(api_key=api_key)


class ChatModel:
    """A configured model: `stream()` for the analysis, `complete()` for the judge."""

    def __init__(self, client: AsyncOpenAI, model: str, temperature: float):
        self._client = client
        self.model = model
        self.temperature = temperature

    @staticmethod
    def _to_openai_messages(bundle: PromptBundle) -> List[Dict[str, str]]:
        messages = [{"role": "system", "content": bundle.system_prompt}]
        messages.extend({"role": m.role, "content": m.content} for m in bundle.messages)
        return messages

    async def stream(self, bundle: PromptBundle) -> CompletionStream:
        """Start a streamed completion. Initiation failures raise before any byte is sent."""
        logger.info(f"Calling {self.model} with {len(bundle.messages)} message(s)")
        try:
            upstream = await self._client.chat.completions.create(
                model=self.model,
                messages=self._to_openai_messages(bundle),
                temperature=self.temperature,
                stream=True,
            )
        except OpenAIError as e:
            logger.error(f"Failed to start completion stream: {type(e).__name__}: {e}")
            raise UpstreamError(
                "Failed to process request",
                "The AI service could not be reached. Please try again later.",
            ) from e
        return CompletionStream(_iter_deltas(upstream))

    async def complete(self, prompt: str, temperature: Optional[float] = None) -> str:
        resp = await self._client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature if temperature is None else temperature,
        )
        return resp.choices[0].message.content or ""


def build_chat_model(api_key: Optional[str], model: str, temperature: float) -> Optional[ChatModel]:
    """A ChatModel for the given key, or None when no key is configured."""
    if not api_key:
        return None
    return ChatModel(_client_for(api_key), model=model, temperature=temperature)
