# backend/services/resume_scoring.py
"""
Resume readiness scoring.

Cheap, deterministic heuristics run on the extracted resume text right after
parsing. The result is stored as the resume's `analysis_result` so the
dashboard has an overall score without another model call.
"""

import re
from typing import Any, Dict, List, Optional

EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
PHONE_RE = re.compile(r"(\+?\d{1,3}[\s-]?)?(\(?\d{3}\)?[\s.-]?)\d{3}[\s.-]?\d{4}")
URL_RE = re.compile(r"(https?://\S+|www\.\S+|linkedin\.com/\S+|github\.com/\S+)", re.IGNORECASE)
METRIC_RE = re.compile(r"(\b\d+(\.\d+)?\s?%|[$₹€]\s?\d+|\b\d+\s?(ms|sec|mins|hours|days|x)\b|\b\d{3,}\b)", re.IGNORECASE)

SECTION_HINTS = {
    "summary": ["summary", "professional summary", "profile", "objective"],
    "experience": ["experience", "work experience", "employment"],
    "skills": ["skills", "technical skills", "core skills"],
    "education": ["education", "academics", "qualifications"],
}

MIN_CONTENT_CHARS = 1500


def _has_any(text: str, needles: List[str]) -> bool:
    t = text.lower()
    return any(n in t for n in needles)


def _as_str_list(value: Any) -> List[str]:
    if isinstance(value, list):
        return [str(v) for v in value if v]
    return []


def find_sections(resume_text: str) -> List[str]:
    return [name for name, hints in SECTION_HINTS.items() if _has_any(resume_text, hints)]


def score_resume(resume_text: str, parsed_data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Score a resume for ATS readiness.

    Args:
        resume_text: Plain text of the resume
        parsed_data: Structured profile from the parse_resume action, if any

    Returns:
        {
            "overallScore": 0-100,
            "breakdown": {"essentials", "searchability", "content", "recruiterTips"},
            "strengths": [...],
            "improvements": [...],
            "recommendations": [...]
        }
    """
    text = resume_text or ""
    parsed = parsed_data if isinstance(parsed_data, dict) else {}

    email_ok = bool(EMAIL_RE.search(text))
    phone_ok = bool(PHONE_RE.search(text))
    url_ok = bool(URL_RE.search(text))
    sections = find_sections(text)
    metrics_count = len(METRIC_RE.findall(text))
    has_bullets = "•" in text or "\n-" in text or "\n*" in text

    # searchability: can a recruiter reach and find the candidate (0-25)
    searchability = (8 if email_ok else 0) + (6 if phone_ok else 0) + (6 if url_ok else 0)
    searchability += min(5, len(sections))

    # essentials: standard sections, bullets, enough content (0-25)
    essentials = min(10, len(sections) * 2 + (2 if "skills" in sections else 0))
    essentials += 10 if has_bullets else 5
    essentials += 5 if len(text) > MIN_CONTENT_CHARS else 2

    # content: quantified achievements (0-30)
    content = min(30, 10 + metrics_count * 2)

    # recruiter tips (0-20)
    recruiter_tips = min(16, metrics_count * 2) + (4 if url_ok else 0)

    overall = (
        0.25 * (min(25, essentials) / 25 * 100)
        + 0.25 * (min(25, searchability) / 25 * 100)
        + 0.30 * (content / 30 * 100)
        + 0.20 * (min(20, recruiter_tips) / 20 * 100)
    )

    recommendations = []
    if not email_ok:
        recommendations.append("Add a professional email address at the top of the resume.")
    if not phone_ok:
        recommendations.append("Include a phone number recruiters can reach you on.")
    if not url_ok:
        recommendations.append("Link your LinkedIn, GitHub or portfolio.")
    for missing in (name for name in SECTION_HINTS if name not in sections):
        recommendations.append(f"Add a clearly titled '{missing.title()}' section.")
    if metrics_count < 3:
        recommendations.append("Quantify results with numbers: %, time saved, revenue or scale.")
    if len(text) <= MIN_CONTENT_CHARS:
        recommendations.append("Expand on your experience; the resume looks short for ATS screening.")

    return {
        "overallScore": int(round(min(100, overall))),
        "breakdown": {
            "essentials": int(min(25, essentials)),
            "searchability": int(min(25, searchability)),
            "content": int(content),
            "recruiterTips": int(min(20, recruiter_tips)),
        },
        "strengths": _as_str_list(parsed.get("strengths")),
        "improvements": _as_str_list(parsed.get("improvements")),
        "recommendations": recommendations,
    }
