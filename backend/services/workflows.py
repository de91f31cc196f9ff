# backend/services/workflows.py
"""
Career Workflows

Orchestrates the user-facing features on top of the AI gateway, the
persistence gateway and resume storage:

- resume upload (or pasted text) -> parse_resume -> readiness score -> Resume
- skill gap analysis against a target role
- learning path for the latest skill gap
- job matching and career guidance from the latest resume
- mock interviews answered one question at a time, each answer evaluated
- skill assessments answered one question at a time, scored at the end
- dashboard summary

Every user-facing failure is raised as WorkflowError carrying the HTTP status
the API should answer with.
"""

import logging
import math
from typing import Any, Dict, List, Optional

import config

from services.ai_gateway import AICareerGateway, Action, is_degraded
from services.persistence import DataResult, PersistenceGateway
from services.resume_extraction import ExtractionFailed, UnsupportedFormat, extract_text
from services.resume_scoring import score_resume
from services.storage import ResumeStorage

logger = logging.getLogger(__name__)

PASTED_FILE_NAME = "pasted-resume.txt"
DEFAULT_JOB_LOCATION = "India"
DEFAULT_EXPERIENCE_LEVEL = "Mid-level"
DEFAULT_DIFFICULTY = "Mixed"
INTERVIEW_COMPLETE_MESSAGE = "Interview completed successfully!"
DASHBOARD_JOB_LIMIT = 5


class WorkflowError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def round_half_up(value: float) -> int:
    """Round .5 upwards, the way browser clients round scores."""
    return int(math.floor(value + 0.5))


def _parse_number(value: Any) -> Optional[float]:
    """Numbers and numeric strings become floats; anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _as_number(value: Any) -> float:
    number = _parse_number(value)
    return 0.0 if number is None else number


def _answer_key(value: Any) -> str:
    # 4.0 and 4 must compare equal to the answer "4"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool):
        return str(value).lower()
    return "" if value is None else str(value)


def _unique(items: List[Any]) -> List[str]:
    seen: List[str] = []
    for item in items:
        text = str(item).strip()
        if text and text not in seen:
            seen.append(text)
    return seen


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


class CareerWorkflows:
    def __init__(
        self,
        gateway: AICareerGateway,
        persistence: PersistenceGateway,
        storage: ResumeStorage,
        max_upload_bytes: Optional[int] = None,
    ):
        self.gateway = gateway
        self.persistence = persistence
        self.storage = storage
        self.max_upload_bytes = max_upload_bytes or config.MAX_UPLOAD_BYTES

    # ---------- helpers ----------

    def _unwrap(self, result: DataResult, operation: str) -> Any:
        if result.is_error:
            raise WorkflowError(f"Could not {operation}. Please try again.", status_code=500)
        return result.data

    def _require(self, result: DataResult, operation: str, missing_message: str) -> Any:
        if result.is_not_found:
            raise WorkflowError(missing_message, status_code=404)
        return self._unwrap(result, operation)

    def _optional(self, result: DataResult, operation: str) -> Any:
        if result.is_not_found:
            return None
        return self._unwrap(result, operation)

    def _invoke(self, action: Action, data: Dict[str, Any], allow_degraded: bool = False) -> Dict[str, Any]:
        result = self.gateway.invoke(action.value, data)
        if not result.success:
            raise WorkflowError(result.error or "AI request failed", status_code=502)
        if is_degraded(result.data) and not allow_degraded:
            logger.warning(f"Unreadable model output for {action.value}")
            raise WorkflowError("The AI response could not be read. Please try again.", status_code=502)
        return result.data

    def _ensure_session(self, session_id: str) -> None:
        self._unwrap(self.persistence.ensure_session(session_id), "start your session")

    def _latest_resume(self, session_id: str):
        return self._require(
            self.persistence.get_latest_resume(session_id),
            "load your resume",
            "Please upload your resume first",
        )

    # ---------- resumes ----------

    def upload_resume(self, session_id: str, filename: str, content_type: str, data: bytes):
        """
        Store an uploaded resume, extract its text and analyze it.

        Returns:
            The saved Resume row
        """
        if len(data) > self.max_upload_bytes:
            raise WorkflowError("File size must be less than 1MB", status_code=413)
        if not data:
            raise WorkflowError("Uploaded file is empty", status_code=400)

        self._ensure_session(session_id)

        stored = self._unwrap(self.storage.upload(session_id, filename, data), "upload the file")

        try:
            text = extract_text(data, filename=filename, content_type=content_type)
        except UnsupportedFormat as e:
            raise WorkflowError(str(e), status_code=415)
        except ExtractionFailed as e:
            raise WorkflowError(str(e), status_code=422)

        if not text.strip():
            raise WorkflowError(
                "No text could be extracted from the file. Please paste your resume text instead.",
                status_code=422,
            )

        return self._analyze_and_save(
            session_id,
            text,
            file_name=filename,
            file_url=stored["url"],
            file_type=content_type or "",
        )

    def submit_resume_text(self, session_id: str, text: str):
        """Manual paste fallback for files that could not be read."""
        if not text or not text.strip():
            raise WorkflowError("Please paste your resume text", status_code=400)

        self._ensure_session(session_id)
        return self._analyze_and_save(
            session_id,
            text,
            file_name=PASTED_FILE_NAME,
            file_url="",
            file_type="text/plain",
        )

    def _analyze_and_save(self, session_id: str, text: str, file_name: str, file_url: str, file_type: str):
        # an unreadable answer is kept as-is; the dashboard shows rawResponse
        parsed = self._invoke(Action.PARSE_RESUME, {"resumeText": text}, allow_degraded=True)
        analysis = score_resume(text, parsed)
        logger.info(f"Resume for {session_id} scored {analysis['overallScore']}")

        return self._unwrap(
            self.persistence.save_resume(
                session_id,
                file_name=file_name,
                file_url=file_url,
                file_type=file_type,
                parsed_data=parsed,
                analysis_result=analysis,
            ),
            "save your resume",
        )

    # ---------- skill gaps & learning paths ----------

    def analyze_skill_gap(self, session_id: str, target_role: str):
        target_role = (target_role or "").strip()
        if not target_role:
            raise WorkflowError("Please enter a target role", status_code=400)

        resume = self._latest_resume(session_id)
        skills = _as_list((resume.parsed_data or {}).get("skills"))
        if not skills:
            raise WorkflowError(
                "No skills found in your resume. Please upload a resume with a skills section.",
                status_code=400,
            )

        analysis = self._invoke(Action.ANALYZE_SKILLS, {"currentSkills": skills, "targetRole": target_role})

        return self._unwrap(
            self.persistence.save_skill_gap(
                session_id,
                target_role=target_role,
                current_skills=skills,
                identified_gaps=analysis.get("skillGaps") or [],
                market_demand=analysis.get("marketDemand") or {},
                resume_id=resume.id,
            ),
            "save the skill gap analysis",
        )

    def generate_learning_path(self, session_id: str):
        skill_gap = self._require(
            self.persistence.get_latest_skill_gap(session_id),
            "load your skill gap analysis",
            "Please complete a skill gap analysis first",
        )

        plan = self._invoke(Action.GENERATE_LEARNING_PATH, {
            "skillGaps": skill_gap.identified_gaps,
            "targetRole": skill_gap.target_role,
        })
        steps = _as_list(plan.get("learningPath"))

        return self._unwrap(
            self.persistence.save_learning_path(
                session_id,
                recommendations=steps,
                priority_order=[step["skill"] for step in steps if isinstance(step, dict) and step.get("skill")],
                estimated_duration=plan.get("totalDuration") or "Not specified",
                skill_gap_id=skill_gap.id,
            ),
            "save the learning path",
        )

    # ---------- jobs & guidance ----------

    def match_jobs(self, session_id: str, location: Optional[str] = None,
                   target_roles: Optional[List[str]] = None):
        resume = self._latest_resume(session_id)
        parsed = resume.parsed_data or {}
        experience_count = len(_as_list(parsed.get("experience")))
        experience = f"{experience_count}-{experience_count + 2} years" if experience_count else "0-2 years"

        result = self._invoke(Action.MATCH_JOBS, {
            "skills": _as_list(parsed.get("skills")),
            "experience": experience,
            "location": location or DEFAULT_JOB_LOCATION,
            "targetRoles": target_roles or [],
        })

        matches = []
        for job in _as_list(result.get("jobs")):
            matches.append({
                "resume_id": resume.id,
                "job_title": job.get("title"),
                "company": job.get("company"),
                "location": job.get("location"),
                "description": job.get("description"),
                "requirements": _as_list(job.get("requirements")),
                "compatibility_score": _parse_number(job.get("compatibilityScore")),
                "match_details": {
                    "type": job.get("type"),
                    "experience": job.get("experience"),
                    "salary": job.get("salary"),
                    "matchReason": job.get("matchReason"),
                    "applyUrl": job.get("applyUrl"),
                },
            })

        logger.info(f"Saving {len(matches)} job matches for {session_id}")
        return self._unwrap(self.persistence.save_job_matches(session_id, matches), "save job matches")

    def career_guidance(self, session_id: str) -> Dict[str, Any]:
        resume = self._latest_resume(session_id)
        parsed = resume.parsed_data or {}
        return self._invoke(Action.CAREER_GUIDANCE, {
            "profile": parsed.get("personalInfo") or {},
            "skills": _as_list(parsed.get("skills")),
            "experience": _as_list(parsed.get("experience")),
        })

    # ---------- mock interviews ----------

    def start_mock_interview(self, session_id: str, job_role: str,
                             experience_level: Optional[str] = None,
                             question_count: Optional[int] = None):
        job_role = (job_role or "").strip()
        if not job_role:
            raise WorkflowError("Please enter a job role", status_code=400)

        self._ensure_session(session_id)
        plan = self._invoke(Action.MOCK_INTERVIEW, {
            "jobRole": job_role,
            "experienceLevel": experience_level or DEFAULT_EXPERIENCE_LEVEL,
            "questionCount": question_count or 5,
        })
        questions = plan["questions"]
        if not questions:
            raise WorkflowError("No interview questions were generated. Please try again.", status_code=502)

        return self._unwrap(
            self.persistence.save_mock_interview(session_id, job_role, questions),
            "save the interview",
        )

    def submit_interview_answer(self, session_id: str, interview_id: str, answer: str) -> Dict[str, Any]:
        """
        Evaluate the answer to the current question and record it.

        The current question is the first unanswered one. After the last
        answer the interview is completed with the rounded mean score.

        Returns:
            {"interview": MockInterview, "evaluation": {...}}
        """
        if not answer or not answer.strip():
            raise WorkflowError("Please provide an answer", status_code=400)

        interview = self._require(
            self.persistence.get_mock_interview(session_id, interview_id),
            "load the interview",
            "Mock interview not found",
        )
        answers = list(interview.answers or [])
        questions = interview.questions or []
        if interview.completed or len(answers) >= len(questions):
            raise WorkflowError("This interview is already completed", status_code=409)

        index = len(answers)
        question = questions[index]
        evaluation = self._invoke(Action.EVALUATE_ANSWER, {
            "question": question.get("question"),
            "expectedPoints": question.get("expectedPoints") or [],
            "answer": answer,
        })

        answers.append({
            "questionId": question.get("id", index + 1),
            "answer": answer,
            "score": evaluation.get("score"),
            "feedback": evaluation.get("feedback"),
            "strengths": _as_list(evaluation.get("strengths")),
            "improvements": _as_list(evaluation.get("improvements")),
            "suggestedAnswer": evaluation.get("suggestedAnswer"),
        })

        if len(answers) == len(questions):
            overall = round_half_up(sum(_as_number(a.get("score")) for a in answers) / len(answers))
            feedback = {
                "overallScore": overall,
                "strengths": _unique([s for a in answers for s in a["strengths"]]),
                "improvements": _unique([s for a in answers for s in a["improvements"]]),
                "detailedFeedback": INTERVIEW_COMPLETE_MESSAGE,
            }
            logger.info(f"Interview {interview_id} completed with score {overall}")
            result = self.persistence.update_mock_interview(
                session_id, interview_id, answers=answers, feedback=feedback, score=overall, completed=True,
            )
        else:
            result = self.persistence.update_mock_interview(session_id, interview_id, answers=answers)

        return {
            "interview": self._unwrap(result, "save your answer"),
            "evaluation": evaluation,
        }

    # ---------- skill assessments ----------

    def start_assessment(self, session_id: str, skill_category: str,
                         difficulty: Optional[str] = None,
                         question_count: Optional[int] = None):
        skill_category = (skill_category or "").strip()
        if not skill_category:
            raise WorkflowError("Please choose a skill category", status_code=400)

        self._ensure_session(session_id)
        plan = self._invoke(Action.SKILL_ASSESSMENT, {
            "skillCategory": skill_category,
            "difficulty": difficulty or DEFAULT_DIFFICULTY,
            "questionCount": question_count or 10,
        })
        questions = plan["questions"]
        if not questions:
            raise WorkflowError("No assessment questions were generated. Please try again.", status_code=502)

        return self._unwrap(
            self.persistence.save_skill_assessment(session_id, skill_category, questions),
            "save the assessment",
        )

    def submit_assessment_answer(self, session_id: str, assessment_id: str, answer: str) -> Dict[str, Any]:
        """
        Record the answer to the current assessment question.

        Returns:
            {"assessment": SkillAssessment, "isCorrect": bool,
             "correctAnswer": ..., "explanation": ...}
        """
        if answer is None or not str(answer).strip():
            raise WorkflowError("Please provide an answer", status_code=400)

        assessment = self._require(
            self.persistence.get_skill_assessment(session_id, assessment_id),
            "load the assessment",
            "Skill assessment not found",
        )
        answers = list(assessment.answers or [])
        questions = assessment.questions or []
        if assessment.completed or len(answers) >= len(questions):
            raise WorkflowError("This assessment is already completed", status_code=409)

        index = len(answers)
        question = questions[index]
        correct_answer = question.get("correctAnswer")
        is_correct = str(answer).strip().lower() == _answer_key(correct_answer).lower()

        answers.append({
            "questionId": question.get("id", index + 1),
            "answer": answer,
            "isCorrect": is_correct,
        })

        if len(answers) == len(questions):
            results = self._assessment_results(questions, answers)
            logger.info(f"Assessment {assessment_id} completed with score {results['score']}")
            result = self.persistence.update_skill_assessment(
                session_id, assessment_id, answers=answers, results=results,
                score=results["score"], completed=True,
            )
        else:
            result = self.persistence.update_skill_assessment(session_id, assessment_id, answers=answers)

        return {
            "assessment": self._unwrap(result, "save your answer"),
            "isCorrect": is_correct,
            "correctAnswer": correct_answer,
            "explanation": question.get("explanation"),
        }

    @staticmethod
    def _assessment_results(questions: List[Dict[str, Any]], answers: List[Dict[str, Any]]) -> Dict[str, Any]:
        total = len(questions)
        correct = sum(1 for a in answers if a.get("isCorrect"))

        by_difficulty: Dict[str, List[int]] = {}
        for question, answer in zip(questions, answers):
            bucket = by_difficulty.setdefault(question.get("difficulty") or "Unspecified", [0, 0])
            bucket[0] += 1 if answer.get("isCorrect") else 0
            bucket[1] += 1

        score = round_half_up(correct / total * 100)
        return {
            "totalQuestions": total,
            "correctAnswers": correct,
            "score": score,
            "categoryBreakdown": {
                name: round_half_up(hits / count * 100) for name, (hits, count) in by_difficulty.items()
            },
        }

    # ---------- history ----------

    def list_resumes(self, session_id: str):
        return self._unwrap(self.persistence.list_resumes(session_id), "load your resumes")

    def latest_resume(self, session_id: str):
        return self._require(
            self.persistence.get_latest_resume(session_id),
            "load your resume",
            "No resume uploaded yet",
        )

    def list_skill_gaps(self, session_id: str):
        return self._unwrap(self.persistence.list_skill_gaps(session_id), "load skill gap analyses")

    def latest_skill_gap(self, session_id: str):
        return self._require(
            self.persistence.get_latest_skill_gap(session_id),
            "load your skill gap analysis",
            "No skill gap analysis yet",
        )

    def list_learning_paths(self, session_id: str):
        return self._unwrap(self.persistence.list_learning_paths(session_id), "load learning paths")

    def list_job_matches(self, session_id: str, limit: int = 20):
        return self._unwrap(self.persistence.list_job_matches(session_id, limit=limit), "load job matches")

    def list_mock_interviews(self, session_id: str):
        return self._unwrap(self.persistence.list_mock_interviews(session_id), "load interviews")

    def list_assessments(self, session_id: str):
        return self._unwrap(self.persistence.list_skill_assessments(session_id), "load assessments")

    # ---------- dashboard ----------

    def dashboard(self, session_id: str) -> Dict[str, Any]:
        p = self.persistence
        resume = self._optional(p.get_latest_resume(session_id), "load your resume")
        skill_gap = self._optional(p.get_latest_skill_gap(session_id), "load your skill gap analysis")
        learning_paths = self._unwrap(p.list_learning_paths(session_id), "load learning paths")
        interviews = self._unwrap(p.list_mock_interviews(session_id), "load interviews")
        assessments = self._unwrap(p.list_skill_assessments(session_id), "load assessments")
        job_matches = self._unwrap(p.list_job_matches(session_id, limit=DASHBOARD_JOB_LIMIT), "load job matches")

        completed_interviews = [i for i in interviews if i.completed]
        completed_assessments = [a for a in assessments if a.completed]
        average_score = 0
        if completed_interviews:
            average_score = round_half_up(
                sum(i.score or 0 for i in completed_interviews) / len(completed_interviews)
            )

        return {
            "resume": resume,
            "skillGap": skill_gap,
            "learningPaths": learning_paths,
            "mockInterviews": interviews,
            "skillAssessments": assessments,
            "jobMatches": job_matches,
            "stats": {
                "completedInterviews": len(completed_interviews),
                "completedAssessments": len(completed_assessments),
                "averageInterviewScore": average_score,
                "resumeScore": (resume.analysis_result or {}).get("overallScore") if resume else None,
            },
        }


_workflows_instance: Optional[CareerWorkflows] = None


def get_workflows() -> CareerWorkflows:
    """
    Get or create singleton CareerWorkflows wired to the shared gateway,
    persistence and storage instances.
    """
    global _workflows_instance

    if _workflows_instance is None:
        from services.ai_gateway import get_ai_gateway
        from services.persistence import get_persistence
        from services.storage import get_storage

        _workflows_instance = CareerWorkflows(get_ai_gateway(), get_persistence(), get_storage())

    return _workflows_instance


def reset_workflows():
    """Reset the singleton instance (useful for testing)."""
    global _workflows_instance
    _workflows_instance = None
