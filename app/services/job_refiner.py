import logging

from app.services.llm_client import ask_for_json

logger = logging.getLogger(__name__)


def _build_prompt(
    role: str,
    current_description: str | None,
    current_requirements: str | None,
    job_type: str | None,
    duration: str | None,
    compensation: str | None,
) -> str:
    context = []
    if current_description:
        context.append(f"CURRENT DESCRIPTION: {current_description}")
    if current_requirements:
        context.append(f"CURRENT REQUIREMENTS: {current_requirements}")
    if job_type:
        context.append(f"JOB TYPE: {job_type}")
    if duration:
        context.append(f"DURATION: {duration}")
    if compensation:
        context.append(f"COMPENSATION: {compensation}")
    context_block = "\n".join(context)
    return f"""You are an expert HR professional. Refine this campus job posting to be professional, clear, and attractive to students.

ROLE: {role}
{context_block}

Produce: a polished title, a 3-4 paragraph description, 5-8 bullet requirements, 5-8 searchable tags,
a suggested duration, a suggested team size, and a suggested compensation if none was given.

Return ONLY JSON in this exact format:
{{"title": "...", "description": "...", "requirements": "• Requirement 1\\n• Requirement 2", "suggestedTags": ["..."], "duration": "3-6 months", "teamSize": "2-3 people", "compensation": "..."}}"""


def refine_job(
    role: str,
    *,
    current_description: str | None = None,
    current_requirements: str | None = None,
    job_type: str | None = None,
    duration: str | None = None,
    compensation: str | None = None,
) -> dict:
    """Polish a job posting. Falls back to a template built from the role."""
    try:
        data = ask_for_json(
            _build_prompt(role, current_description, current_requirements, job_type, duration, compensation)
        )
        return {
            "title": data.get("title") or role,
            "description": data.get("description") or "No description provided",
            "requirements": data.get("requirements") or "",
            "suggestedTags": list(data.get("suggestedTags") or []),
            "duration": data.get("duration") or duration or "Flexible",
            "teamSize": data.get("teamSize") or "To be determined",
            "compensation": data.get("compensation") or compensation or "To be discussed",
        }
    except Exception as e:
        logger.warning("AI job refinement failed for role=%s: %s", role, e)
        return fallback_refinement(
            role,
            current_description=current_description,
            current_requirements=current_requirements,
            duration=duration,
            compensation=compensation,
        )


def fallback_refinement(
    role: str,
    *,
    current_description: str | None = None,
    current_requirements: str | None = None,
    duration: str | None = None,
    compensation: str | None = None,
) -> dict:
    return {
        "title": role,
        "description": current_description or f"We are looking for a talented {role} to join our team.",
        "requirements": current_requirements
        or f"• Relevant experience in {role}\n• Strong communication skills\n• Ability to work independently",
        "suggestedTags": [role.split(" ")[0], "Student", "Campus"],
        "duration": duration or "Flexible",
        "teamSize": "2-4 people",
        "compensation": compensation or "To be discussed",
    }


def generate_job_from_role(role: str, job_type: str | None = None) -> dict:
    return refine_job(role, job_type=job_type)
