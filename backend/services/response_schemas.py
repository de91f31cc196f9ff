# backend/services/response_schemas.py
"""
Response schemas for the AI gateway actions.

The prompts document the full JSON shape of every answer, but only the
fields the workflows depend on are required here. Everything else is allowed
through untouched, so the gateway returns the model's object exactly as
parsed once it passes validation.
"""

from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, StrictBool, StrictFloat, StrictInt, StrictStr, ValidationError


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="allow")


# ---------- parse_resume ----------
class ParsedResume(_Lenient):
    skills: List[StrictStr]


# ---------- analyze_skills ----------
class SkillGapItem(_Lenient):
    skill: StrictStr


class SkillAnalysis(_Lenient):
    skillGaps: List[SkillGapItem]


# ---------- generate_learning_path ----------
class LearningStep(_Lenient):
    skill: StrictStr


class LearningPlan(_Lenient):
    learningPath: List[LearningStep]


# ---------- career_guidance ----------
class CareerOption(_Lenient):
    title: StrictStr


class CareerGuidance(_Lenient):
    recommendedCareers: List[CareerOption]


# ---------- mock_interview ----------
class InterviewQuestion(_Lenient):
    question: StrictStr


class InterviewPlan(_Lenient):
    questions: List[InterviewQuestion]


# ---------- evaluate_answer ----------
class AnswerEvaluation(_Lenient):
    score: Union[StrictInt, StrictFloat]
    feedback: StrictStr


# ---------- skill_assessment ----------
class AssessmentQuestion(_Lenient):
    question: StrictStr
    correctAnswer: Union[StrictStr, StrictInt, StrictFloat, StrictBool]


class AssessmentPlan(_Lenient):
    questions: List[AssessmentQuestion]


# ---------- match_jobs ----------
class JobOpening(_Lenient):
    title: StrictStr


class JobMatches(_Lenient):
    jobs: List[JobOpening]


ACTION_SCHEMAS: Dict[str, Type[BaseModel]] = {
    "parse_resume": ParsedResume,
    "analyze_skills": SkillAnalysis,
    "generate_learning_path": LearningPlan,
    "career_guidance": CareerGuidance,
    "mock_interview": InterviewPlan,
    "evaluate_answer": AnswerEvaluation,
    "skill_assessment": AssessmentPlan,
    "match_jobs": JobMatches,
}


def validate_action_payload(action: str, payload: Any) -> Optional[str]:
    """
    Check a parsed model response against the action's schema.

    Returns:
        None when the payload is valid, otherwise a message naming the
        offending fields.
    """
    schema = ACTION_SCHEMAS[action]

    if not isinstance(payload, dict):
        return f"Model response for {action} is not a JSON object"

    try:
        schema.model_validate(payload)
    except ValidationError as e:
        problems = []
        for err in e.errors():
            location = ".".join(str(part) for part in err["loc"]) or "<root>"
            problems.append(f"{location} ({err['msg']})")
        return f"Model response for {action} is missing required fields: {', '.join(problems)}"

    return None
