"""Applicant-to-job match scoring: LLM first, deterministic heuristic as fallback."""

import logging
import math
from dataclasses import dataclass, field

from app.services.llm_client import ask_for_json

logger = logging.getLogger(__name__)


@dataclass
class MatchScoreRequest:
    job_title: str
    job_description: str
    job_requirements: str | None = None
    job_tags: list[str] = field(default_factory=list)
    applicant_skills: list[str] = field(default_factory=list)
    applicant_interests: list[str] = field(default_factory=list)
    applicant_bio: str | None = None
    applicant_proposal: str | None = None
    applicant_department: str | None = None
    applicant_year: str | None = None


def build_request(job, profile, proposal: str | None = None) -> MatchScoreRequest:
    return MatchScoreRequest(
        job_title=job.title or "",
        job_description=job.description or "",
        job_requirements=job.requirements,
        job_tags=list(job.tags or []),
        applicant_skills=list(profile.skills or []),
        applicant_interests=list(profile.interests or []),
        applicant_bio=profile.bio,
        applicant_proposal=proposal,
        applicant_department=profile.department,
        applicant_year=profile.year,
    )


def _overlaps(a: str, b: str) -> bool:
    a, b = a.lower(), b.lower()
    return a in b or b in a


def _round(x: float) -> int:
    return int(math.floor(x + 0.5))


def _build_prompt(req: MatchScoreRequest) -> str:
    return f"""You are an expert recruiter analyzing how well a candidate matches a job posting.

JOB DETAILS:
Title: {req.job_title}
Description: {req.job_description}
Requirements: {req.job_requirements or 'Not specified'}
Required Skills/Tags: {', '.join(req.job_tags)}

APPLICANT DETAILS:
Department: {req.applicant_department or 'Not specified'}
Year: {req.applicant_year or 'Not specified'}
Bio: {req.applicant_bio or 'Not provided'}
Skills: {', '.join(req.applicant_skills) if req.applicant_skills else 'None listed'}
Interests: {', '.join(req.applicant_interests) if req.applicant_interests else 'None listed'}
Application Proposal: {req.applicant_proposal or 'No proposal provided'}

TASK:
Score the match from 0-100 (90+ excellent, 75-89 very good, 60-74 good, 40-59 moderate, below 40 poor).
Consider technical skills, experience level, motivation, and transferable skills.

Return ONLY JSON in this exact format:
{{"score": <number 0-100>, "reasoning": "<2-3 sentences>", "strengths": ["..."], "gaps": ["..."], "recommendation": "<brief hiring recommendation>"}}"""


def calculate_match_score(req: MatchScoreRequest) -> dict:
    """Returns {score, reasoning, strengths, gaps, recommendation}. Never raises."""
    try:
        obj = ask_for_json(_build_prompt(req))
        score = float(obj.get("score"))
        score = max(0, min(100, _round(score)))
        return {
            "score": score,
            "reasoning": obj.get("reasoning") or "AI analysis completed",
            "strengths": list(obj.get("strengths") or []),
            "gaps": list(obj.get("gaps") or []),
            "recommendation": obj.get("recommendation") or "",
        }
    except Exception as e:
        logger.warning("AI match score failed, using heuristic: %s", e)
        return calculate_basic_match_score(req)


def calculate_basic_match_score(req: MatchScoreRequest) -> dict:
    score = 0.0
    strengths: list[str] = []
    gaps: list[str] = []

    # Skills: 40 points max
    matching_skills = [s for s in req.applicant_skills if any(_overlaps(t, s) for t in req.job_tags)]
    if req.job_tags:
        score += min(40, len(matching_skills) / len(req.job_tags) * 40)
        if matching_skills:
            strengths.append(f"Matches {len(matching_skills)} required skills")
        else:
            gaps.append("No direct skill matches with job requirements")

    # Interests: 20 points max
    matching_interests = [i for i in req.applicant_interests if any(_overlaps(t, i) for t in req.job_tags)]
    if matching_interests:
        score += min(20, len(matching_interests) * 7)
        strengths.append("Interests align with job domain")

    # Profile completeness: 20 points max
    completeness = 0
    if req.applicant_bio:
        completeness += 5
    if req.applicant_skills:
        completeness += 7
    if req.applicant_proposal:
        completeness += 8
    score += completeness
    if completeness > 15:
        strengths.append("Strong application with detailed information")
    else:
        gaps.append("Limited profile information provided")

    if req.applicant_department and req.applicant_department.lower() in req.job_description.lower():
        score += 10
        strengths.append("Relevant academic background")

    if req.applicant_proposal and len(req.applicant_proposal) > 100:
        score += 10
        strengths.append("Thoughtful application proposal")
    elif not req.applicant_proposal:
        gaps.append("No application proposal provided")

    if score < 60 and not gaps:
        gaps.extend(["Profile could be more complete", "Limited skill matches"])
    if score >= 60 and not strengths:
        strengths.append("Reasonable fit for the position")

    final = _round(min(100, max(0, score)))
    if final >= 75:
        recommendation = "Strong candidate - Recommend for interview"
    elif final >= 60:
        recommendation = "Good candidate - Worth considering"
    elif final >= 40:
        recommendation = "Moderate fit - Review carefully"
    else:
        recommendation = "May not be the best fit for this role"

    return {
        "score": final,
        "reasoning": (
            f"Calculated based on skill alignment ({len(matching_skills)}/{len(req.job_tags)} matches), "
            "profile completeness, and relevant experience."
        ),
        "strengths": strengths[:3],
        "gaps": gaps[:3],
        "recommendation": recommendation,
    }


def calculate_simple_match(job_tags: list[str], skills: list[str], interests: list[str]) -> int:
    """Percentage of job tags covered by the user's skills and interests."""
    if not job_tags:
        return 0
    user_tags = list(skills or []) + list(interests or [])
    matching = [t for t in job_tags if any(_overlaps(t, u) for u in user_tags)]
    return math.floor(len(matching) / len(job_tags) * 100)
