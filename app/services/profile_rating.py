import logging

from app.services.llm_client import call_llm, extract_json_object

logger = logging.getLogger(__name__)

COMPLETENESS_WEIGHTS = (
    ("full_name", 15),
    ("bio", 20),
    ("skills", 25),
    ("interests", 20),
    ("department", 10),
    ("year", 10),
)


def calculate_profile_completeness(profile) -> int:
    return sum(weight for attr, weight in COMPLETENESS_WEIGHTS if getattr(profile, attr, None))


def _fallback(feedback: str = "") -> dict:
    return {
        "rating": 5,
        "summary": "Unable to generate detailed analysis at this time.",
        "strengths": ["Profile exists", "Account is active", "Basic information provided"],
        "improvements": ["Add more details to bio", "List more skills", "Expand interests"],
        "feedback": feedback,
    }


def _build_prompt(profile, completeness: int) -> str:
    role = "Talent Seeker" if profile.role == "SEEKER" else "Talent Finder"
    skills = ", ".join(profile.skills or []) or "No skills listed"
    interests = ", ".join(profile.interests or []) or "No interests listed"
    return f"""Profile Analysis Request:
Full Name: {profile.full_name or 'Not provided'}
Role: {role}
Department: {profile.department or 'Not provided'}
Year: {profile.year or 'Not provided'}
Bio: {profile.bio or 'Not provided'}
Skills: {skills}
Interests: {interests}
Profile Completeness: {completeness}%

Rate the profile out of 10, summarize it in 2-3 sentences, list three strengths and three improvements,
and give a detailed feedback paragraph. Return ONLY JSON:
{{"rating": <1-10>, "summary": "...", "strengths": ["..."], "improvements": ["..."], "feedback": "..."}}"""


def rate_profile(profile) -> dict:
    completeness = calculate_profile_completeness(profile)
    text = ""
    try:
        text = call_llm(_build_prompt(profile, completeness))
        obj = extract_json_object(text)
        if obj is None:
            logger.warning("Profile rating response had no JSON for profile=%s", profile.id)
            result = _fallback(text[:500])
        else:
            try:
                rating = float(obj.get("rating"))
            except (TypeError, ValueError):
                rating = 5
            result = {
                "rating": max(1, min(10, rating)),
                "summary": obj.get("summary") or "",
                "strengths": list(obj.get("strengths") or []),
                "improvements": list(obj.get("improvements") or []),
                "feedback": obj.get("feedback") or "",
            }
    except Exception as e:
        logger.warning("AI profile rating failed for profile=%s: %s", profile.id, e)
        result = _fallback(text[:500])
    result["profileCompleteness"] = completeness
    return result
