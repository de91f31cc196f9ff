# backend/prompts/career_prompts.py
"""
Career Assistant Prompt Templates

One template per AI gateway action. Every template interpolates the request
data and ends with the exact JSON shape the model must return, with an
explicit instruction not to wrap it in prose or code fences.

Usage:
    from prompts.career_prompts import CareerPrompts

    prompt = CareerPrompts.analyze_skills({
        "currentSkills": ["Python", "SQL"],
        "targetRole": "Data Engineer"
    })
"""

import json
from typing import Any, Dict


# Resume text beyond this many characters is cut to bound the request size
MAX_RESUME_CHARS = 10_000

JSON_ONLY = "Return ONLY one valid JSON object with this exact structure (no markdown, no code blocks, no text outside the JSON):"


def _json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _text(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


class CareerPrompts:
    """
    Static prompt builders, one per gateway action.

    Each method accepts the raw `data` object of the gateway request and
    fills in defaults for missing fields, so a template is never empty.
    """

    DEFAULT_EXPERIENCE_LEVEL = "Mid-level"
    DEFAULT_INTERVIEW_QUESTIONS = 5
    DEFAULT_ASSESSMENT_DIFFICULTY = "Mixed"
    DEFAULT_ASSESSMENT_QUESTIONS = 10
    DEFAULT_JOB_LOCATION = "India"

    @staticmethod
    def parse_resume(data: Dict[str, Any]) -> str:
        """
        Extract a structured profile from resume text.

        The resume text is truncated to MAX_RESUME_CHARS.
        """
        resume_text = str(data.get("resumeText") or "")[:MAX_RESUME_CHARS]

        return f"""You are an expert resume parser. Analyze the following resume text and extract structured information.

Resume Text:
{resume_text}

{JSON_ONLY}
{{
  "personalInfo": {{
    "name": "Full Name",
    "email": "email@example.com",
    "phone": "phone number",
    "location": "city, country"
  }},
  "summary": "Professional summary or objective",
  "skills": ["skill1", "skill2", "skill3"],
  "experience": [
    {{
      "title": "Job Title",
      "company": "Company Name",
      "duration": "Start - End",
      "description": "Job description and achievements"
    }}
  ],
  "education": [
    {{
      "degree": "Degree Name",
      "institution": "Institution Name",
      "year": "Graduation Year"
    }}
  ],
  "certifications": ["cert1", "cert2"],
  "strengths": ["strength1", "strength2"],
  "improvements": ["area1", "area2"]
}}"""

    @staticmethod
    def analyze_skills(data: Dict[str, Any]) -> str:
        current_skills = data.get("currentSkills") or []
        target_role = _text(data.get("targetRole"), "Not specified")

        return f"""You are a career advisor analyzing skill gaps. Based on the user's current skills and target role, identify the skill gaps and the market demand for the role.

Current Skills: {_json(current_skills)}
Target Role: {target_role}

{JSON_ONLY}
{{
  "skillGaps": [
    {{
      "skill": "Skill Name",
      "importance": "High/Medium/Low",
      "currentLevel": "Beginner/Intermediate/Advanced/None",
      "targetLevel": "Intermediate/Advanced/Expert",
      "priority": 1
    }}
  ],
  "marketDemand": {{
    "trending": ["trending skill1", "trending skill2"],
    "essential": ["essential skill1", "essential skill2"],
    "nice_to_have": ["optional skill1", "optional skill2"]
  }},
  "recommendations": "Overall recommendations for skill development"
}}"""

    @staticmethod
    def generate_learning_path(data: Dict[str, Any]) -> str:
        skill_gaps = data.get("skillGaps") or []
        target_role = _text(data.get("targetRole"), "Not specified")

        return f"""You are a learning path designer. Create a personalized learning roadmap that closes the identified skill gaps.

Skill Gaps: {_json(skill_gaps)}
Target Role: {target_role}

{JSON_ONLY}
{{
  "learningPath": [
    {{
      "skill": "Skill Name",
      "priority": 1,
      "courses": [
        {{
          "title": "Course Title",
          "provider": "Platform Name",
          "duration": "X weeks/months",
          "level": "Beginner/Intermediate/Advanced",
          "topics": ["topic1", "topic2"]
        }}
      ],
      "certifications": ["Certification Name"],
      "estimatedTime": "X months",
      "resources": ["Free resource 1", "Free resource 2"]
    }}
  ],
  "totalDuration": "X months",
  "milestones": [
    {{
      "month": 1,
      "goals": ["goal1", "goal2"]
    }}
  ]
}}"""

    @staticmethod
    def career_guidance(data: Dict[str, Any]) -> str:
        profile = data.get("profile") or {}
        skills = data.get("skills") or []
        experience = data.get("experience") or []

        return f"""You are a career counselor providing personalized career guidance.

User Profile: {_json(profile)}
Current Skills: {_json(skills)}
Experience: {_json(experience)}

{JSON_ONLY}
{{
  "recommendedCareers": [
    {{
      "title": "Career Title",
      "matchScore": 85,
      "description": "Career description",
      "requiredSkills": ["skill1", "skill2"],
      "growthPotential": "High/Medium/Low",
      "averageSalary": "Salary range in INR",
      "demandTrend": "Growing/Stable/Declining",
      "whyGoodFit": "Explanation of why this career suits the user"
    }}
  ],
  "careerPathways": [
    {{
      "from": "Current Role",
      "to": "Target Role",
      "steps": ["step1", "step2"],
      "timeline": "X years"
    }}
  ]
}}"""

    @staticmethod
    def mock_interview(data: Dict[str, Any]) -> str:
        job_role = _text(data.get("jobRole"), "Not specified")
        experience_level = _text(data.get("experienceLevel"), CareerPrompts.DEFAULT_EXPERIENCE_LEVEL)
        question_count = data.get("questionCount") or CareerPrompts.DEFAULT_INTERVIEW_QUESTIONS

        return f"""You are an expert interviewer. Generate realistic interview questions for the specified role.

Job Role: {job_role}
Experience Level: {experience_level}
Number of Questions: {question_count}

{JSON_ONLY}
{{
  "questions": [
    {{
      "id": 1,
      "question": "Interview question text",
      "type": "Technical/Behavioral/Situational",
      "difficulty": "Easy/Medium/Hard",
      "expectedPoints": ["point1", "point2", "point3"]
    }}
  ],
  "tips": ["tip1", "tip2"]
}}"""

    @staticmethod
    def evaluate_answer(data: Dict[str, Any]) -> str:
        question = _text(data.get("question"), "Not specified")
        expected_points = data.get("expectedPoints") or []
        answer = _text(data.get("answer"), "(no answer given)")

        return f"""You are an interview evaluator. Assess the candidate's answer to the interview question.

Question: {question}
Expected Points: {_json(expected_points)}
Candidate's Answer: {answer}

{JSON_ONLY}
{{
  "score": 75,
  "strengths": ["strength1", "strength2"],
  "improvements": ["area1", "area2"],
  "feedback": "Detailed feedback on the answer",
  "suggestedAnswer": "Example of a strong answer"
}}"""

    @staticmethod
    def skill_assessment(data: Dict[str, Any]) -> str:
        skill_category = _text(data.get("skillCategory"), "General")
        difficulty = _text(data.get("difficulty"), CareerPrompts.DEFAULT_ASSESSMENT_DIFFICULTY)
        question_count = data.get("questionCount") or CareerPrompts.DEFAULT_ASSESSMENT_QUESTIONS

        return f"""You are a skill assessment creator. Generate assessment questions for the specified skill category.

Skill Category: {skill_category}
Difficulty Level: {difficulty}
Number of Questions: {question_count}

{JSON_ONLY}
{{
  "questions": [
    {{
      "id": 1,
      "question": "Question text",
      "type": "MCQ/True-False/Short-Answer",
      "options": ["option1", "option2", "option3", "option4"],
      "correctAnswer": "correct option or answer",
      "explanation": "Explanation of the correct answer",
      "difficulty": "Easy/Medium/Hard"
    }}
  ]
}}"""

    @staticmethod
    def match_jobs(data: Dict[str, Any]) -> str:
        skills = data.get("skills") or []
        experience = _text(data.get("experience"), "Not specified")
        location = _text(data.get("location"), CareerPrompts.DEFAULT_JOB_LOCATION)
        target_roles = data.get("targetRoles") or []

        return f"""You are a job matching expert. Generate relevant job opportunities based on the user's profile.

User Skills: {_json(skills)}
Experience: {experience}
Location Preference: {location}
Target Roles: {_json(target_roles)}

{JSON_ONLY}
{{
  "jobs": [
    {{
      "title": "Job Title",
      "company": "Company Name (realistic companies hiring in {location})",
      "location": "City, {location}",
      "type": "Full-time/Part-time/Contract",
      "experience": "X-Y years",
      "salary": "Salary range in local currency",
      "description": "Job description",
      "requirements": ["requirement1", "requirement2"],
      "compatibilityScore": 85,
      "matchReason": "Why this job matches the user's profile",
      "applyUrl": "https://careers.company.com/job-id"
    }}
  ]
}}"""
