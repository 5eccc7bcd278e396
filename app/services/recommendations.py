"""Job recommendations for a profile over a list of open jobs."""

import logging
import math

from app.services.llm_client import ask_for_json

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 5


def _job_block(idx: int, job) -> str:
    return (
        f"{idx}. JOB ID: {job.id}\n"
        f"   Title: {job.title}\n"
        f"   Type: {job.type}\n"
        f"   Location: {job.location or 'Not specified'}\n"
        f"   Description: {(job.description or '')[:300]}...\n"
        f"   Requirements: {job.requirements or 'Not specified'}\n"
        f"   Tags: {', '.join(job.tags or [])}"
    )


def _build_prompt(profile, jobs: list) -> str:
    jobs_block = "\n\n".join(_job_block(i + 1, j) for i, j in enumerate(jobs))
    return f"""You are a career advisor AI. Recommend the best jobs for this student.

USER PROFILE:
- Name: {profile.full_name or 'N/A'}
- Bio: {profile.bio or 'N/A'}
- Skills: {', '.join(profile.skills or []) or 'None'}
- Interests: {', '.join(profile.interests or []) or 'None'}
- Department: {profile.department or 'N/A'}
- Year: {profile.year or 'N/A'}

AVAILABLE JOBS:
{jobs_block}

Recommend at most 5 jobs ordered by score (0-100, highest first). Return ONLY JSON:
{{"recommendations": [{{"jobId": "...", "score": 95, "reasoning": "...", "matchHighlights": ["..."], "growthPotential": "..."}}],
"careerInsights": "...", "topSkillsToLearn": ["..."]}}"""


def get_recommendations(profile, jobs: list) -> dict:
    """Returns {recommendations, careerInsights, topSkillsToLearn}."""
    try:
        data = ask_for_json(_build_prompt(profile, jobs))
        recs = data.get("recommendations")
        if not isinstance(recs, list):
            raise ValueError("Invalid recommendations format")
        known = {j.id for j in jobs}
        valid = [r for r in recs if isinstance(r, dict) and r.get("jobId") in known]
        return {
            "recommendations": valid[:MAX_RECOMMENDATIONS],
            "careerInsights": data.get("careerInsights")
            or "Continue building your skills and applying to relevant opportunities.",
            "topSkillsToLearn": list(data.get("topSkillsToLearn") or []),
        }
    except Exception as e:
        logger.warning("AI recommendations failed for profile=%s: %s", getattr(profile, "id", None), e)
        return fallback_recommendations(profile, jobs)


def fallback_recommendations(profile, jobs: list) -> dict:
    user_tags = list(profile.skills or []) + list(profile.interests or [])
    bio = (profile.bio or "").lower()
    department = (profile.department or "").lower()

    scored = []
    for job in jobs:
        tags = list(job.tags or [])
        score = 0.0
        highlights: list[str] = []

        matching = [t for t in tags if any(t.lower() in u.lower() or u.lower() in t.lower() for u in user_tags)]
        if matching:
            score += len(matching) / max(len(tags), 1) * 60
            plural = "s" if len(matching) > 1 else ""
            highlights.append(f"{len(matching)} matching skill{plural}")

        desc = (job.description or "").lower()
        for tag in user_tags:
            t = tag.lower()
            if t in desc:
                score += 5
                if bio and len(t) > 3:
                    highlights.append(f"Relevant experience in {tag}")

        if department and any(department in t.lower() for t in tags):
            score += 10
            highlights.append("Department match")

        scored.append(
            {
                "jobId": job.id,
                "score": min(int(math.floor(score + 0.5)), 100),
                "reasoning": (
                    f"This position matches your profile with {len(matching)} overlapping skills "
                    "and relevant requirements."
                ),
                "matchHighlights": highlights or ["General fit based on profile"],
                "growthPotential": "Opportunity to expand your skills and gain valuable experience.",
            }
        )

    scored.sort(key=lambda r: r["score"], reverse=True)
    return {
        "recommendations": scored[:MAX_RECOMMENDATIONS],
        "careerInsights": "Focus on roles that match your current skills while offering growth opportunities.",
        "topSkillsToLearn": ["Communication", "Problem Solving", "Leadership"],
    }
