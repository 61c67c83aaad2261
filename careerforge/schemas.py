# careerforge/schemas.py
# Pydantic models for request, prompt, job, and evaluation contracts.

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional


RoleType = Literal["frontend", "backend", "fullstack", "devops", "mobile", "data"]


class ChatMessage(BaseModel):
    """One prior chat turn, owned by the client and sent back with each request."""
    id: str
    role: Literal["user", "assistant"]
    content: str


class InboundRequest(BaseModel):
    """A validated /chat request. Transient; never persisted."""
    message: str = ""
    pdf_bytes: Optional[bytes] = None
    pdf_filename: Optional[str] = None
    prior_messages: List[ChatMessage] = Field(default_factory=list)
    job_id: Optional[str] = None

    @property
    def has_pdf(self) -> bool:
        return bool(self.pdf_bytes)


class JobPosting(BaseModel):
    """A job posting whose requirements the user profile is compared against."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    company: str
    location: str = "Unknown"
    role_type: RoleType = Field(default="fullstack", alias="roleType")
    requirements: List[str] = Field(default_factory=list)
    preferred: List[str] = Field(default_factory=list)
    description: str = ""


class PromptMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"] = "user"
    content: str


class PromptBundle(BaseModel):
    """System prompt plus ordered model messages; the analysis prompt is always last."""
    model_config = ConfigDict(frozen=True)

    system_prompt: str
    messages: List[PromptMessage]
    user_profile: str
    job_requirements: str


class SkillGapInput(BaseModel):
    """Everything the judge model needs to score one analysis."""
    user_profile: str
    job_requirements: str
    ai_analysis: str


class EvaluationScores(BaseModel):
    accuracy: float = Field(ge=0, le=100)         # identified gaps are really missing
    completeness: float = Field(ge=0, le=100)     # caught all important gaps
    relevance: float = Field(ge=0, le=100)        # gaps matter for this job
    false_positives: float = Field(ge=0, le=100)  # higher = fewer hallucinated gaps
    actionability: float = Field(ge=0, le=100)    # recommendations are specific
    overall: float
    reasoning: str


class EvaluationResult(BaseModel):
    scores: EvaluationScores
    trace_id: Optional[str] = None
    timestamp: float


class ErrorBody(BaseModel):
    """JSON body of every non-streaming error response."""
    error: str
    details: Optional[str] = None
