# careerforge/evaluator.py
# Detached judge evaluation of a finished analysis. Never affects the HTTP response.

import asyncio
import logging
import time
from typing import Optional, Set

from .judge import get_judge_prompt, neutral_scores, parse_judge_response
from .llm import ChatModel
from .observability import ObservabilitySink
from .schemas import EvaluationResult, SkillGapInput

logger = logging.getLogger(__name__)


class SkillGapEvaluator:
    """
    Scores analyses with a judge model and forwards the result to an optional sink.

    `schedule()` chains an evaluation off a completion future and returns at once.
    Every failure inside the background task is logged at the task boundary.
    """

    def __init__(self, judge: ChatModel, sink: Optional[ObservabilitySink] = None):
        self._judge = judge
        self._sink = sink
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def evaluate(self, data: SkillGapInput, trace_id: Optional[str] = None) -> EvaluationResult:
        start = time.monotonic()
        try:
            response = await self._judge.complete(get_judge_prompt(data))
            scores = parse_judge_response(response)
        except Exception as e:
            logger.error(f"Judge call failed: {type(e).__name__}: {e}")
            scores = neutral_scores(f"Evaluation failed: {type(e).__name__}")

        sink_trace_id = None
        if self._sink is not None:
            metadata = {
                "evaluationType": "llm-as-judge",
                "judgeModel": self._judge.model,
                "latencyMs": int((time.monotonic() - start) * 1000),
                "requestTraceId": trace_id,
            }
            try:
                sink_trace_id = await asyncio.to_thread(self._sink.record_evaluation, data, scores, metadata)
            except Exception:
                logger.exception("Failed to log evaluation to observability sink")

        return EvaluationResult(scores=scores, trace_id=sink_trace_id or trace_id, timestamp=time.time())

    async def _evaluate_when_ready(
        self,
        text: asyncio.Future,
        user_profile: str,
        job_requirements: str,
        trace_id: Optional[str],
    ) -> Optional[EvaluationResult]:
        try:
            analysis = await asyncio.shield(text)
        except asyncio.CancelledError:
            if not text.cancelled():
                raise
            logger.info(f"Completion abandoned; skipping evaluation (trace_id={trace_id})")
            return None
        except Exception as e:
            logger.warning(f"Completion failed; skipping evaluation (trace_id={trace_id}): {e}")
            return None

        if not analysis.strip():
            logger.info(f"Empty completion; skipping evaluation (trace_id={trace_id})")
            return None

        data = SkillGapInput(user_profile=user_profile, job_requirements=job_requirements, ai_analysis=analysis)
        try:
            result = await self.evaluate(data, trace_id)
        except Exception:
            logger.exception(f"Async evaluation failed (trace_id={trace_id})")
            return None

        logger.info(f"Async evaluation complete: overall={result.scores.overall:.1f} trace_id={result.trace_id}")
        return result

    def schedule(
        self,
        text: asyncio.Future,
        user_profile: str,
        job_requirements: str,
        trace_id: Optional[str] = None,
    ) -> asyncio.Task:
        """Evaluate once `text` resolves. The caller does not await the returned task."""
        task = asyncio.get_running_loop().create_task(
            self._evaluate_when_ready(text, user_profile, job_requirements, trace_id)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
