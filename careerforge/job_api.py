# careerforge/job_api.py
# Job posting lookup: bundled mock catalogue, with optional Adzuna search.

import json
import logging
import random
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from .config import Settings
from .schemas import JobPosting
from .utils import split_description

logger = logging.getLogger(__name__)

ADZUNA_BASE = "https://api.adzuna.com/v1/api/jobs"

_DATA_PATH = Path(__file__).parent / "data" / "mock_jobs.json"
_JOBS: List[JobPosting] = [
    JobPosting.model_validate(item)
    for item in json.loads(_DATA_PATH.read_text(encoding="utf-8"))
]
_BY_ID: Dict[str, JobPosting] = {j.id: j for j in _JOBS}


def get_mock_jobs() -> List[JobPosting]:
    return list(_JOBS)


def get_job(job_id: Optional[str]) -> Optional[JobPosting]:
    if not job_id:
        return None
    return _BY_ID.get(job_id)


def random_job() -> JobPosting:
    return random.choice(_JOBS)


def resolve_job(job_id: Optional[str]) -> JobPosting:
    """The requested posting, or a random one when the id is missing or unknown."""
    job = get_job(job_id)
    if job is None:
        if job_id:
            logger.info(f"Unknown jobId {job_id!r}; falling back to a random posting")
        job = random_job()
    return job


def map_adzuna_result(item: Dict[str, Any]) -> JobPosting:
    description = item.get("description") or ""
    requirements = split_description(description)
    return JobPosting(
        id=f"adzuna-{item.get('id')}",
        title=item.get("title") or "Untitled role",
        company=(item.get("company") or {}).get("display_name") or "Company",
        location=(item.get("location") or {}).get("display_name") or "Unknown",
        role_type="fullstack",
        requirements=requirements or ["See job description"],
        preferred=[],
        description=description,
    )


async def fetch_jobs_from_adzuna(
    settings: Settings,
    query: str = "developer",
    country: str = "us",
    limit: int = 10,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[JobPosting]:
    """Search Adzuna; returns [] when unconfigured or on any error."""
    if not settings.adzuna_configured:
        return []

    params = {
        "app_id": settings.adzuna_app_id,
        "app_key": settings.adzuna_app_key,
        "results_per_page": limit,
        "what": query,
    }
    try:
        async with httpx.AsyncClient(timeout=10.0, transport=transport) as client:
            resp = await client.get(f"{ADZUNA_BASE}/{country}/search/1", params=params)
            resp.raise_for_status()
            results = resp.json().get("results") or []
        return [map_adzuna_result(item) for item in results]
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Adzuna API error: {e}")
        return []


async def get_jobs(
    settings: Settings,
    query: str = "software developer",
    country: str = "us",
    limit: int = 20,
) -> List[JobPosting]:
    from_api = await fetch_jobs_from_adzuna(settings, query=query, country=country, limit=limit)
    if from_api:
        return from_api
    return get_mock_jobs()
