# careerforge/observability.py
# Observability sink for judge scores. Opik when OPIK_API_KEY is set, nothing otherwise.

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .config import Settings
from .schemas import EvaluationScores, SkillGapInput
from .utils import truncate

logger = logging.getLogger(__name__)

# Snippet lengths sent along with each evaluation trace.
PROFILE_SNIPPET = 500
REQUIREMENTS_SNIPPET = 500
ANALYSIS_SNIPPET = 1000

FEEDBACK_NAMES = {
    "accuracy": "accuracy",
    "completeness": "completeness",
    "relevance": "relevance",
    "false_positives": "false-positives",
    "actionability": "actionability",
    "overall": "overall",
}


def trace_input(data: SkillGapInput) -> Dict[str, str]:
    return {
        "userProfile": truncate(data.user_profile, PROFILE_SNIPPET),
        "jobRequirements": truncate(data.job_requirements, REQUIREMENTS_SNIPPET),
        "aiAnalysis": truncate(data.ai_analysis, ANALYSIS_SNIPPET),
    }


class ObservabilitySink(ABC):
    """Receives one scored evaluation per request. Implementations may raise; callers swallow."""

    @abstractmethod
    def record_evaluation(
        self,
        data: SkillGapInput,
        scores: EvaluationScores,
        metadata: Dict[str, Any],
    ) -> Optional[str]:
        """Record the evaluation and return the sink's trace id, if any."""


class OpikSink(ObservabilitySink):
    def __init__(self, api_key: str, workspace: str, project_name: str):
        # Imported here so the service starts without touching Opik when tracing is off.
        import opik

        self._client = opik.Opik(api_key=api_key, workspace=workspace, project_name=project_name)
        logger.info(f"Opik sink ready (workspace={workspace}, project={project_name})")

    def record_evaluation(
        self,
        data: SkillGapInput,
        scores: EvaluationScores,
        metadata: Dict[str, Any],
    ) -> Optional[str]:
        trace = self._client.trace(
            name="skill-gap-evaluation",
            input=trace_input(data),
            output=scores.model_dump(),
            metadata=metadata,
        )
        values = scores.model_dump()
        for field, name in FEEDBACK_NAMES.items():
            trace.log_feedback_score(name=name, value=values[field] / 100)
        trace.end()
        return trace.id


def get_sink(settings: Settings) -> Optional[ObservabilitySink]:
    if not settings.opik_api_key:
        return None
    try:
        return OpikSink(
            api_key=settings.opik_api_key,
            workspace=settings.opik_workspace,
            project_name=settings.opik_project,
        )
    except Exception:
        logger.exception("Opik unavailable; evaluations will only be logged")
        return None
