"""Resume analysis: skills, experience level, score and suggestions."""

import logging
import re

from app.services.llm_client import ask_for_json

logger = logging.getLogger(__name__)

EXPERIENCE_LEVELS = ("Entry Level", "Junior", "Mid Level", "Senior", "Expert")
MIN_AI_TEXT_LENGTH = 100

COMMON_SKILLS = [
    "javascript", "typescript", "python", "java", "c++", "react", "angular", "vue",
    "node.js", "express", "django", "flask", "spring", "sql", "mongodb", "postgresql",
    "aws", "azure", "docker", "kubernetes", "git", "agile", "scrum", "leadership",
    "communication", "problem solving", "teamwork", "html", "css", "rest api",
]
_EXPERIENCE_KEYWORDS = ("years of experience", "years experience", "year experience")


def _build_prompt(resume_text: str, file_name: str) -> str:
    return f"""You are an expert resume analyzer and career counselor. Analyze the following resume.

RESUME FILE: {file_name}
RESUME CONTENT:
{resume_text[:8000]}

Extract all technical and soft skills, determine the experience level (Entry Level, Junior, Mid Level, Senior, Expert),
estimate years of experience, list strengths and improvements, suggest job titles and rate the resume 0-100.

Return ONLY JSON in this exact format:
{{"summary": "...", "detectedSkills": ["..."], "experienceLevel": "<level>", "yearsOfExperience": <number>,
"strengths": ["..."], "improvements": ["..."], "suggestedJobTitles": ["..."], "overallScore": <number 0-100>,
"insights": {{"education": "...", "professionalSummary": "...", "keyAchievements": ["..."]}}}}"""


def _list(value, limit: int) -> list:
    return list(value)[:limit] if isinstance(value, list) else []


def _normalize(obj: dict) -> dict:
    level = obj.get("experienceLevel")
    years = obj.get("yearsOfExperience")
    insights = obj.get("insights") if isinstance(obj.get("insights"), dict) else {}
    try:
        score = float(obj.get("overallScore") or 50)
    except (TypeError, ValueError):
        score = 50
    return {
        "summary": obj.get("summary") or "No summary available",
        "detectedSkills": _list(obj.get("detectedSkills"), 20),
        "experienceLevel": level if level in EXPERIENCE_LEVELS else "Mid Level",
        "yearsOfExperience": years if isinstance(years, (int, float)) and not isinstance(years, bool) else 0,
        "strengths": _list(obj.get("strengths"), 5),
        "improvements": _list(obj.get("improvements"), 5),
        "suggestedJobTitles": _list(obj.get("suggestedJobTitles"), 5),
        "overallScore": max(0, min(100, score)),
        "insights": {
            "education": insights.get("education") or "Not specified",
            "professionalSummary": insights.get("professionalSummary") or "Not available",
            "keyAchievements": _list(insights.get("keyAchievements"), 3),
        },
    }


def analyze_resume(resume_text: str, file_name: str) -> dict:
    if not resume_text or len(resume_text.strip()) < MIN_AI_TEXT_LENGTH:
        logger.info("Resume text too short for AI analysis (file=%s), using keyword analysis", file_name)
        return analyze_resume_basic(resume_text or "")
    try:
        return _normalize(ask_for_json(_build_prompt(resume_text, file_name)))
    except Exception as e:
        logger.warning("AI resume analysis failed for file=%s: %s", file_name, e)
        return analyze_resume_basic(resume_text)


def analyze_resume_basic(resume_text: str) -> dict:
    text = resume_text.lower()
    detected = [s for s in COMMON_SKILLS if s in text]

    years = 0
    for keyword in _EXPERIENCE_KEYWORDS:
        m = re.search(rf"(\d+)\+?\s*{re.escape(keyword)}", resume_text, re.IGNORECASE)
        if m:
            years = max(years, int(m.group(1)))

    if years >= 7:
        level = "Senior"
    elif years >= 4:
        level = "Mid Level"
    elif years >= 2:
        level = "Junior"
    else:
        level = "Entry Level"

    score = 50
    if len(detected) > 10:
        score += 20
    elif len(detected) > 5:
        score += 10
    if "bachelor" in text or "degree" in text:
        score += 10
    if "master" in text or "phd" in text:
        score += 10
    if "project" in text or "developed" in text:
        score += 10

    return {
        "summary": f"Professional with {years} years of experience and skills in {', '.join(detected[:3])}.",
        "detectedSkills": detected[:15],
        "experienceLevel": level,
        "yearsOfExperience": years,
        "strengths": [
            f"{len(detected)} technical skills identified",
            "Well-structured resume format",
            "Clear professional experience",
        ],
        "improvements": [
            "Add more quantifiable achievements",
            "Include specific project outcomes",
            "Expand on technical skills",
        ],
        "suggestedJobTitles": ["Software Developer", "Full Stack Engineer", "Technical Consultant"],
        "overallScore": min(100, score),
        "insights": {
            "education": "Education details detected",
            "professionalSummary": f"{years} years of professional experience",
            "keyAchievements": ["Multiple technical projects", "Diverse skill set"],
        },
    }
