import logging

from app.services.llm_client import ask_for_json

logger = logging.getLogger(__name__)


def _build_prompt(job_title: str, job_description: str, requirements: str, skills: list[str], experience: str | None) -> str:
    experience_line = f"- Experience: {experience}\n" if experience else ""
    return f"""You are an expert career coach specializing in interview preparation.

JOB DETAILS:
- Position: {job_title}
- Description: {job_description}
- Requirements: {requirements}

CANDIDATE PROFILE:
- Skills: {', '.join(skills)}
{experience_line}
Give 5-7 role-specific questions with suggested answers, key points to highlight, things to avoid,
a preparation checklist and overall advice. Return ONLY JSON:
{{"commonQuestions": [{{"question": "...", "suggestedAnswer": "...", "tips": "..."}}],
"keyPointsToHighlight": ["..."], "thingsToAvoid": ["..."], "preparationChecklist": ["..."], "overallAdvice": "..."}}"""


def generate_interview_tips(
    job_title: str,
    job_description: str,
    requirements: str,
    skills: list[str],
    experience: str | None = None,
) -> dict:
    try:
        data = ask_for_json(_build_prompt(job_title, job_description, requirements, skills, experience))
        return {
            "commonQuestions": list(data.get("commonQuestions") or []),
            "keyPointsToHighlight": list(data.get("keyPointsToHighlight") or []),
            "thingsToAvoid": list(data.get("thingsToAvoid") or []),
            "preparationChecklist": list(data.get("preparationChecklist") or []),
            "overallAdvice": data.get("overallAdvice") or "Prepare thoroughly and be yourself!",
        }
    except Exception as e:
        logger.warning("AI interview tips failed for job=%s: %s", job_title, e)
        return fallback_tips(job_title, skills)


def fallback_tips(job_title: str, skills: list[str]) -> dict:
    return {
        "commonQuestions": [
            {
                "question": "Tell me about yourself and your background",
                "suggestedAnswer": (
                    "Provide a brief overview of your education, skills, and what makes you passionate about this field."
                ),
                "tips": "Keep it to 2-3 minutes, focus on relevant experience",
            },
            {
                "question": f"Why are you interested in this {job_title} position?",
                "suggestedAnswer": "Express genuine interest in the role and explain how it aligns with your career goals.",
                "tips": "Show that you researched the role and company",
            },
            {
                "question": "What are your relevant skills for this position?",
                "suggestedAnswer": f"Highlight your skills in {', '.join(skills[:3])} and how you've applied them.",
                "tips": "Use specific examples from your experience",
            },
            {
                "question": "What are your strengths and weaknesses?",
                "suggestedAnswer": (
                    "Choose strengths relevant to the role. For weaknesses, mention areas you are actively improving."
                ),
                "tips": "Be honest but strategic in your response",
            },
            {
                "question": "Where do you see yourself in 5 years?",
                "suggestedAnswer": "Express goals that align with potential growth in this role.",
                "tips": "Show ambition while being realistic",
            },
        ],
        "keyPointsToHighlight": [
            f"Your expertise in {skills[0] if skills else 'relevant technologies'}",
            "Your enthusiasm and motivation for the role",
            "Your ability to learn and adapt quickly",
            "Any relevant projects or achievements",
            "Your teamwork and communication skills",
        ],
        "thingsToAvoid": [
            "Speaking negatively about previous employers or experiences",
            "Being unprepared with questions about the role",
            "Appearing uninterested or distracted",
            "Exaggerating or lying about your experience",
            "Failing to ask questions at the end",
        ],
        "preparationChecklist": [
            "Research the company and understand their mission",
            "Review the job description and requirements thoroughly",
            "Prepare specific examples of your work and achievements",
            "Practice answering common interview questions",
            "Prepare thoughtful questions to ask the interviewer",
            "Test your technology setup if it is a virtual interview",
            "Plan your outfit and arrive/log in 10 minutes early",
        ],
        "overallAdvice": (
            f"For this {job_title} position, focus on demonstrating both your technical skills and your enthusiasm "
            f"for the role. Be prepared to discuss specific examples of how you've used your skills in "
            f"{' and '.join(skills[:2])}. Remember to show genuine interest, ask insightful questions, and let your "
            "personality shine through. Good luck!"
        ),
    }
