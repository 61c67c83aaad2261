# careerforge/judge.py
# LLM-as-judge prompt and score parsing for skill-gap analyses.

import json
import logging
import re
from typing import Any, Dict, Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .schemas import EvaluationScores, SkillGapInput

logger = logging.getLogger(__name__)

SCORING_WEIGHTS: Dict[str, float] = {
    "accuracy": 0.30,
    "completeness": 0.25,
    "relevance": 0.20,
    "false_positives": 0.15,
    "actionability": 0.10,
}

NEUTRAL_SCORE = 50.0
PARSE_FAILED_REASONING = "Failed to parse evaluation response"

_FENCED_RE = re.compile(r"```json\s*([\s\S]*?)\s*```")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


class _JudgeOutput(BaseModel):
    """Shape of the judge's JSON answer. Missing or null scores count as 0."""
    model_config = ConfigDict(populate_by_name=True)

    accuracy: float = Field(default=0, ge=0, le=100)
    completeness: float = Field(default=0, ge=0, le=100)
    relevance: float = Field(default=0, ge=0, le=100)
    false_positives: float = Field(default=0, ge=0, le=100, alias="falsePositives")
    actionability: float = Field(default=0, ge=0, le=100)
    reasoning: str = "No reasoning provided"

    @field_validator("accuracy", "completeness", "relevance", "false_positives", "actionability", mode="before")
    @classmethod
    def _null_score(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("reasoning", mode="before")
    @classmethod
    def _null_reasoning(cls, v: Any) -> Any:
        return v or "No reasoning provided"


def get_judge_prompt(data: SkillGapInput) -> str:
    return f"""You are an expert evaluator assessing the quality of skill gap analysis for software developers.

**USER PROFILE:**
{data.user_profile}

**JOB REQUIREMENTS:**
{data.job_requirements}

**AI ANALYSIS TO EVALUATE:**
{data.ai_analysis}

---

**YOUR TASK:**
Evaluate the AI's skill gap analysis on these 5 dimensions (score 0-100 for each):

1. **Accuracy (0-100)**: Are the identified skill gaps actually missing from the user's profile? Are they truly required for the job?

2. **Completeness (0-100)**: Did the analysis catch ALL major skill gaps? Are there important missing skills that weren't mentioned?

3. **Relevance (0-100)**: Do the identified gaps actually matter for this specific job? Are they core requirements vs. nice-to-haves?

4. **False Positives (0-100)**: Did the analysis hallucinate or misidentify skills? Higher score = fewer false positives.

5. **Actionability (0-100)**: Are the learning recommendations specific, practical, and helpful? Do they include concrete resources, realistic timelines, and clear next steps?

**OUTPUT FORMAT (JSON only):**
```json
{{
  "accuracy": <number 0-100>,
  "completeness": <number 0-100>,
  "relevance": <number 0-100>,
  "falsePositives": <number 0-100>,
  "actionability": <number 0-100>,
  "reasoning": "<2-3 sentence explanation of your scoring>"
}}
```

Be strict but fair. A perfect score (100) should be rare. Provide honest, constructive evaluation."""


def calculate_overall_score(scores: Dict[str, float]) -> float:
    return sum(scores[name] * weight for name, weight in SCORING_WEIGHTS.items())


def neutral_scores(reasoning: str = PARSE_FAILED_REASONING) -> EvaluationScores:
    return EvaluationScores(
        accuracy=NEUTRAL_SCORE,
        completeness=NEUTRAL_SCORE,
        relevance=NEUTRAL_SCORE,
        false_positives=NEUTRAL_SCORE,
        actionability=NEUTRAL_SCORE,
        overall=NEUTRAL_SCORE,
        reasoning=reasoning,
    )


def _json_candidates(text: str) -> Iterator[str]:
    """A ```json block first, then the outermost {...}, then the raw text."""
    m = _FENCED_RE.search(text)
    if m:
        yield m.group(1)
    m = _OBJECT_RE.search(text)
    if m:
        yield m.group(0)
    yield text


def _load_json_object(text: str) -> Dict[str, Any]:
    error: Exception = ValueError("no JSON object in judge response")
    for candidate in _json_candidates(text):
        try:
            raw = json.loads(candidate)
        except ValueError as e:
            error = e
            continue
        if isinstance(raw, dict):
            return raw
    raise error


def parse_judge_response(response: str) -> EvaluationScores:
    """Parse the judge's answer; any failure yields neutral scores instead of an error."""
    try:
        parsed = _JudgeOutput.model_validate(_load_json_object(response or ""))
    except Exception as e:
        logger.warning(f"Failed to parse judge response: {type(e).__name__}")
        return neutral_scores()

    values = parsed.model_dump(exclude={"reasoning"})
    return EvaluationScores(**values, overall=calculate_overall_score(values), reasoning=parsed.reasoning)
