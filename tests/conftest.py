# tests/conftest.py
# Shared fakes: settings without .env, a scripted chat model, and a manual clock.

from typing import List, Optional, Sequence

import pytest

from careerforge.config import Settings
from careerforge.llm import CompletionStream
from careerforge.schemas import PromptBundle


class FakeChatModel:
    """Stands in for ChatModel: streams fixed fragments, answers the judge with a fixed text."""

    model = "fake-model"

    def __init__(self, fragments: Sequence[str] = ("## Skill Gaps\n", "- Docker\n"), judge_response: str = ""):
        self.fragments = list(fragments)
        self.judge_response = judge_response
        self.bundles: List[PromptBundle] = []
        self.prompts: List[str] = []

    async def stream(self, bundle: PromptBundle) -> CompletionStream:
        self.bundles.append(bundle)

        async def gen():
            for f in self.fragments:
                yield f

        return CompletionStream(gen())

    async def complete(self, prompt: str, temperature: Optional[float] = None) -> str:
        self.prompts.append(prompt)
        return self.judge_response


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


ENV_KEYS = (
    "OPENAI_API_KEY",
    "OPIK_API_KEY",
    "EVALUATION_ENABLED",
    "ADZUNA_APP_ID",
    "ADZUNA_APP_KEY",
    "RATE_LIMIT_MAX_REQUESTS",
    "RATE_LIMIT_WINDOW_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Shell or .env values must not leak into Settings built by tests."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        openai_api_key=None,
        opik_api_key=None,
        evaluation_enabled=False,
        adzuna_app_id=None,
        adzuna_app_key=None,
    )


@pytest.fixture
def fake_model() -> FakeChatModel:
    return FakeChatModel()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
