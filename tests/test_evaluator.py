# tests/test_evaluator.py
# Detached evaluation: chaining off the completion future and swallowing failures.

import asyncio
import json

import pytest
from conftest import FakeChatModel

from careerforge.evaluator import SkillGapEvaluator
from careerforge.judge import PARSE_FAILED_REASONING
from careerforge.observability import ObservabilitySink, trace_input
from careerforge.schemas import SkillGapInput

JUDGE_JSON = json.dumps(
    {"accuracy": 90, "completeness": 80, "relevance": 70, "falsePositives": 60, "actionability": 50, "reasoning": "ok"}
)


class RecordingSink(ObservabilitySink):
    def __init__(self, fail: bool = False):
        self.calls = []
        self.fail = fail

    def record_evaluation(self, data, scores, metadata):
        if self.fail:
            raise ConnectionError("opik down")
        self.calls.append((data, scores, metadata))
        return "opik-trace-1"


class ExplodingJudge(FakeChatModel):
    async def complete(self, prompt, temperature=None):
        raise RuntimeError("quota exceeded")


def _input() -> SkillGapInput:
    return SkillGapInput(user_profile="P" * 600, job_requirements="R", ai_analysis="A" * 1200)


def test_evaluate_scores_and_reports_to_sink():
    judge = FakeChatModel(judge_response=f"```json\n{JUDGE_JSON}\n```")
    sink = RecordingSink()
    evaluator = SkillGapEvaluator(judge, sink=sink)

    result = asyncio.run(evaluator.evaluate(_input(), trace_id="trace-1-abc"))

    assert result.scores.accuracy == 90
    assert result.scores.overall == pytest.approx(90 * 0.3 + 80 * 0.25 + 70 * 0.2 + 60 * 0.15 + 50 * 0.1)
    assert result.trace_id == "opik-trace-1"
    data, scores, metadata = sink.calls[0]
    assert metadata["judgeModel"] == "fake-model"
    assert metadata["requestTraceId"] == "trace-1-abc"
    assert "latencyMs" in metadata
    assert "P" * 600 in judge.prompts[0]


def test_trace_input_snippets_are_truncated():
    snippet = trace_input(_input())
    assert len(snippet["userProfile"]) == 500
    assert len(snippet["aiAnalysis"]) == 1000
    assert snippet["jobRequirements"] == "R"


def test_sink_failure_is_swallowed():
    evaluator = SkillGapEvaluator(FakeChatModel(judge_response=JUDGE_JSON), sink=RecordingSink(fail=True))
    result = asyncio.run(evaluator.evaluate(_input(), trace_id="trace-9"))
    assert result.scores.accuracy == 90
    assert result.trace_id == "trace-9"


def test_judge_failure_degrades_to_neutral():
    result = asyncio.run(SkillGapEvaluator(ExplodingJudge()).evaluate(_input()))
    assert result.scores.overall == 50
    assert result.scores.reasoning == "Evaluation failed: RuntimeError"


def test_unparseable_judge_answer_degrades_to_neutral():
    result = asyncio.run(SkillGapEvaluator(FakeChatModel(judge_response="no idea")).evaluate(_input()))
    assert result.scores.accuracy == 50
    assert result.scores.reasoning == PARSE_FAILED_REASONING


def test_schedule_waits_for_full_text():
    judge = FakeChatModel(judge_response=JUDGE_JSON)
    evaluator = SkillGapEvaluator(judge)

    async def run():
        text = asyncio.get_running_loop().create_future()
        task = evaluator.schedule(text, "profile", "requirements", trace_id="t")
        await asyncio.sleep(0)
        assert judge.prompts == []
        assert evaluator.pending == 1
        text.set_result("## Skill Gaps\n- Docker")
        return await task

    result = asyncio.run(run())
    assert result.scores.accuracy == 90
    assert "## Skill Gaps\n- Docker" in judge.prompts[0]
    assert evaluator.pending == 0


def test_schedule_skips_failed_completion():
    judge = FakeChatModel(judge_response=JUDGE_JSON)
    evaluator = SkillGapEvaluator(judge)

    async def run():
        text = asyncio.get_running_loop().create_future()
        task = evaluator.schedule(text, "profile", "requirements")
        text.set_exception(RuntimeError("stream broke"))
        return await task

    assert asyncio.run(run()) is None
    assert judge.prompts == []


def test_schedule_skips_abandoned_completion():
    judge = FakeChatModel(judge_response=JUDGE_JSON)
    evaluator = SkillGapEvaluator(judge)

    async def run():
        text = asyncio.get_running_loop().create_future()
        task = evaluator.schedule(text, "profile", "requirements")
        text.cancel()
        return await task

    assert asyncio.run(run()) is None
    assert judge.prompts == []


def test_schedule_contains_unexpected_errors(monkeypatch):
    evaluator = SkillGapEvaluator(FakeChatModel(judge_response=JUDGE_JSON))

    async def boom(data, trace_id=None):
        raise ValueError("unexpected")

    monkeypatch.setattr(evaluator, "evaluate", boom)

    async def run():
        text = asyncio.get_running_loop().create_future()
        task = evaluator.schedule(text, "profile", "requirements")
        text.set_result("analysis")
        return await task

    assert asyncio.run(run()) is None
