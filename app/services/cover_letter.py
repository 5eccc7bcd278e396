import logging

from app.services.llm_client import ask_for_json

logger = logging.getLogger(__name__)

FALLBACK_KEY_POINTS = ["Relevant skills match", "Strong motivation", "Ready to contribute"]


def _build_prompt(
    job_title: str,
    company_name: str,
    job_description: str,
    requirements: str,
    applicant_name: str,
    applicant_bio: str,
    skills: list[str],
    experience: str | None,
) -> str:
    experience_line = f"- Experience: {experience}\n" if experience else ""
    return f"""You are a professional career advisor. Write a compelling, personalized cover letter (250-350 words).

JOB DETAILS:
- Position: {job_title}
- Company: {company_name}
- Description: {job_description}
- Requirements: {requirements}

APPLICANT PROFILE:
- Name: {applicant_name}
- Bio: {applicant_bio}
- Skills: {', '.join(skills)}
{experience_line}
Return ONLY JSON: {{"coverLetter": "...", "tone": "professional", "wordCount": 300, "keyPoints": ["..."]}}"""


def _fallback_letter(job_title: str, company_name: str, applicant_name: str, applicant_bio: str, skills: list[str]) -> str:
    return (
        "Dear Hiring Manager,\n\n"
        f"I am writing to express my strong interest in the {job_title} position at {company_name}. {applicant_bio}\n\n"
        "I am particularly drawn to this opportunity because it aligns perfectly with my skills and career goals. "
        f"With expertise in {', '.join(skills[:3])}, I am confident in my ability to contribute effectively to your team.\n\n"
        "The requirements you've outlined for this position match well with my background. I am especially excited "
        f"about the opportunity to apply my knowledge and grow professionally in a dynamic environment like {company_name}.\n\n"
        "I am eager to bring my passion, dedication, and technical skills to your organization. I would welcome the "
        "opportunity to discuss how my background and enthusiasm can benefit your team.\n\n"
        f"Thank you for considering my application. I look forward to the possibility of contributing to {company_name}'s success.\n\n"
        "Sincerely,\n"
        f"{applicant_name}"
    )


def generate_cover_letter(
    *,
    job_title: str,
    company_name: str,
    job_description: str,
    requirements: str,
    applicant_name: str,
    applicant_bio: str,
    skills: list[str],
    experience: str | None = None,
) -> dict:
    """Returns {coverLetter, tone, wordCount, keyPoints}."""
    try:
        data = ask_for_json(
            _build_prompt(
                job_title, company_name, job_description, requirements, applicant_name, applicant_bio, skills, experience
            )
        )
        letter = data.get("coverLetter") or _fallback_letter(
            job_title, company_name, applicant_name, applicant_bio, skills
        )
        return {
            "coverLetter": letter,
            "tone": data.get("tone") or "professional",
            "wordCount": data.get("wordCount") or len(letter.split()),
            "keyPoints": list(data.get("keyPoints") or []),
        }
    except Exception as e:
        logger.warning("AI cover letter failed for job=%s: %s", job_title, e)
        return {
            "coverLetter": _fallback_letter(job_title, company_name, applicant_name, applicant_bio, skills),
            "tone": "professional",
            "wordCount": 250,
            "keyPoints": list(FALLBACK_KEY_POINTS),
        }
