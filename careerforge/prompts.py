# careerforge/prompts.py
# Prompt assembly for the skill-gap analysis. Pure and deterministic.

from typing import Dict, List, Optional, Sequence

from .schemas import ChatMessage, JobPosting, PromptBundle, PromptMessage

SYSTEM_BASE = """You are CareerForgeAI, an expert career guidance assistant for programmers. Your role is to analyze a user's skills against job requirements and provide structured, actionable feedback.

When analyzing skills, provide:
1. **Skill Gaps** - Skills the user lacks that are required for the position
2. **Weak Skills** - Skills the user has but may need to strengthen
3. **Recommended Learning Path** - Prioritized list of skills to learn, with suggested resources and timeline
4. **Strength Areas** - Skills the user already has that match the requirements

Format your response using clear markdown with headers, bullet points, and structured sections. Be encouraging and constructive."""

ROLE_LABELS: Dict[str, str] = {
    "frontend": "Frontend",
    "backend": "Backend",
    "fullstack": "Full-Stack",
    "devops": "DevOps",
    "mobile": "Mobile",
    "data": "Data",
}

ROLE_SPECIFIC_GUIDANCE: Dict[str, str] = {
    "frontend": "Focus on UI/UX skills, frameworks (React, Vue), accessibility, performance, and design systems.",
    "backend": "Focus on APIs, databases, security, scalability, and server-side technologies.",
    "fullstack": "Balance frontend and backend skills; emphasize integration, deployment, and full product ownership.",
    "devops": "Focus on CI/CD, infrastructure as code, monitoring, and reliability.",
    "mobile": "Focus on React Native or native mobile development, app store deployment, and mobile UX.",
    "data": "Focus on data pipelines, SQL, analytics, and ML/BI tooling.",
}

# Prior turns containing this marker are earlier analysis prompts, not user context.
ANALYSIS_MARKER = "Analyze the following"

MAX_PRIOR_MESSAGES = 3


def get_role_label(role_type: Optional[str]) -> str:
    return ROLE_LABELS.get(role_type or "", "Software")


def get_system_prompt(role_type: Optional[str]) -> str:
    guidance = ROLE_SPECIFIC_GUIDANCE.get(role_type or "")
    if not guidance:
        return SYSTEM_BASE
    return f"{SYSTEM_BASE}\n\nThis analysis is for a **{get_role_label(role_type)}** role. {guidance}"


def build_user_profile(extracted_text: Optional[str], free_text: str) -> str:
    if extracted_text:
        return f"Resume/PDF Content:\n{extracted_text}\n\nAdditional Skills:\n{free_text}"
    return f"User Skills Description:\n{free_text}"


def build_job_requirements_text(job: JobPosting) -> str:
    required = "\n".join(job.requirements)
    preferred = "\n".join(job.preferred)
    return (
        f"Job Title: {job.title}\n"
        f"Company: {job.company}\n\n"
        f"Required Skills:\n{required}\n\n"
        f"Preferred Skills:\n{preferred}"
    )


def get_analysis_prompt(user_profile: str, job_requirements: str) -> str:
    return (
        f"{ANALYSIS_MARKER} user profile against this job posting:\n\n"
        f"{user_profile}\n\n"
        "---\n\n"
        f"{job_requirements}\n\n"
        "Provide a comprehensive skill gap analysis with actionable recommendations."
    )


def select_recent_messages(prior: Sequence[ChatMessage]) -> List[PromptMessage]:
    """
    Keep context from the tail of the conversation: take the last three turns,
    then drop assistant turns and anything that looks like an earlier analysis prompt.
    """
    tail = list(prior)[-MAX_PRIOR_MESSAGES:]
    return [
        PromptMessage(role="user", content=m.content)
        for m in tail
        if m.role == "user" and ANALYSIS_MARKER not in m.content
    ]


def compose_prompt(
    extracted_text: Optional[str],
    free_text: str,
    job: JobPosting,
    prior: Sequence[ChatMessage],
) -> PromptBundle:
    user_profile = build_user_profile(extracted_text, free_text)
    job_requirements = build_job_requirements_text(job)
    messages = select_recent_messages(prior)
    messages.append(PromptMessage(role="user", content=get_analysis_prompt(user_profile, job_requirements)))
    return PromptBundle(
        system_prompt=get_system_prompt(job.role_type),
        messages=messages,
        user_profile=user_profile,
        job_requirements=job_requirements,
    )
