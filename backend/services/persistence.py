# backend/services/persistence.py
"""
Persistence Gateway

Thin data-access layer over the SQLModel tables. Every operation is scoped by
the visitor's session token and never raises: the outcome is a DataResult
whose status is one of

    ok          the operation succeeded; `data` holds the row(s)
    not_found   the lookup matched nothing
    error       the database rejected the operation; `error` holds a message

Rows are returned detached (expire_on_commit=False) so they can be read and
serialized after the session closes.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.attributes import flag_modified
from sqlmodel import Session, SQLModel, select

from models import (
    JobMatch,
    LearningPath,
    MockInterview,
    Resume,
    SkillAssessment,
    SkillGap,
    UserSession,
    utcnow,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

STATUS_OK = "ok"
STATUS_NOT_FOUND = "not_found"
STATUS_ERROR = "error"

JSON_FIELDS = {"answers", "feedback", "results", "questions", "user_data"}


@dataclass
class DataResult(Generic[T]):
    status: str
    data: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: T) -> "DataResult[T]":
        return cls(status=STATUS_OK, data=data)

    @classmethod
    def not_found(cls) -> "DataResult[T]":
        return cls(status=STATUS_NOT_FOUND)

    @classmethod
    def failed(cls, error: str) -> "DataResult[T]":
        return cls(status=STATUS_ERROR, error=error)

    @property
    def is_ok(self) -> bool:
        return self.status == STATUS_OK

    @property
    def is_not_found(self) -> bool:
        return self.status == STATUS_NOT_FOUND

    @property
    def is_error(self) -> bool:
        return self.status == STATUS_ERROR


class PersistenceGateway:
    """
    Data access for sessions, resumes, skill gaps, learning paths, mock
    interviews, skill assessments and job matches.

    Args:
        engine: SQLAlchemy engine the tables live in
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    # ---------- internals ----------

    def _session(self) -> Session:
        return Session(self.engine, expire_on_commit=False)

    def _run(self, operation: str, fn: Callable[[Session], DataResult]) -> DataResult:
        try:
            with self._session() as session:
                return fn(session)
        except SQLAlchemyError as e:
            logger.exception(f"{operation} failed")
            return DataResult.failed(f"{operation} failed: {e}")

    def _insert(self, operation: str, row: SQLModel) -> DataResult:
        def work(session: Session) -> DataResult:
            session.add(row)
            session.commit()
            session.refresh(row)
            return DataResult.ok(row)

        return self._run(operation, work)

    def _list(self, operation: str, model: Type[SQLModel], session_id: str,
              limit: Optional[int] = None) -> DataResult:
        def work(session: Session) -> DataResult:
            stmt = (
                select(model)
                .where(model.session_id == session_id)
                .order_by(model.created_at.desc())
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            return DataResult.ok(list(session.exec(stmt).all()))

        return self._run(operation, work)

    def _latest(self, operation: str, model: Type[SQLModel], session_id: str) -> DataResult:
        def work(session: Session) -> DataResult:
            stmt = (
                select(model)
                .where(model.session_id == session_id)
                .order_by(model.created_at.desc())
                .limit(1)
            )
            row = session.exec(stmt).first()
            return DataResult.ok(row) if row is not None else DataResult.not_found()

        return self._run(operation, work)

    def _get_owned(self, operation: str, model: Type[SQLModel], session_id: str,
                   record_id: str) -> DataResult:
        def work(session: Session) -> DataResult:
            row = session.get(model, record_id)
            if row is None or row.session_id != session_id:
                return DataResult.not_found()
            return DataResult.ok(row)

        return self._run(operation, work)

    def _update_progress(self, operation: str, model: Type[SQLModel], session_id: str,
                         record_id: str, changes: Dict[str, Any]) -> DataResult:
        """
        Apply changes to an interview or assessment in progress.

        Completed records are frozen, and `answers` may only grow.
        """
        def work(session: Session) -> DataResult:
            row = session.get(model, record_id)
            if row is None or row.session_id != session_id:
                return DataResult.not_found()

            if row.completed:
                logger.warning(f"{operation}: record {record_id} is already completed")
                return DataResult.failed(f"{operation} rejected: record {record_id} is already completed")

            new_answers = changes.get("answers")
            if new_answers is not None and len(new_answers) < len(row.answers or []):
                logger.warning(f"{operation}: refusing to drop answers on {record_id}")
                return DataResult.failed(f"{operation} rejected: answers cannot be removed")

            for field, value in changes.items():
                if value is None:
                    continue
                setattr(row, field, value)
                if field in JSON_FIELDS:
                    flag_modified(row, field)

            session.add(row)
            session.commit()
            session.refresh(row)
            return DataResult.ok(row)

        return self._run(operation, work)

    # ---------- sessions ----------

    def ensure_session(self, session_id: str) -> DataResult[UserSession]:
        """Create the session row on first sight, otherwise refresh last_active."""
        def work(session: Session) -> DataResult:
            row = session.exec(
                select(UserSession).where(UserSession.session_id == session_id)
            ).first()
            if row is None:
                row = UserSession(session_id=session_id)
            else:
                row.last_active = utcnow()
            session.add(row)
            try:
                session.commit()
            except IntegrityError:
                # created concurrently by another request
                session.rollback()
                row = session.exec(
                    select(UserSession).where(UserSession.session_id == session_id)
                ).one()
            session.refresh(row)
            return DataResult.ok(row)

        return self._run("ensure_session", work)

    def create_session(self, session_id: str,
                       user_data: Optional[Dict[str, Any]] = None) -> DataResult[UserSession]:
        return self._insert(
            "create_session",
            UserSession(session_id=session_id, user_data=user_data or {}),
        )

    def get_session(self, session_id: str) -> DataResult[UserSession]:
        def work(session: Session) -> DataResult:
            row = session.exec(
                select(UserSession).where(UserSession.session_id == session_id)
            ).first()
            return DataResult.ok(row) if row is not None else DataResult.not_found()

        return self._run("get_session", work)

    def touch_session(self, session_id: str) -> DataResult[UserSession]:
        def work(session: Session) -> DataResult:
            row = session.exec(
                select(UserSession).where(UserSession.session_id == session_id)
            ).first()
            if row is None:
                return DataResult.not_found()
            row.last_active = utcnow()
            session.add(row)
            session.commit()
            session.refresh(row)
            return DataResult.ok(row)

        return self._run("touch_session", work)

    # ---------- resumes ----------

    def save_resume(
        self,
        session_id: str,
        file_name: str,
        file_url: str = "",
        file_type: str = "",
        parsed_data: Optional[Dict[str, Any]] = None,
        analysis_result: Optional[Dict[str, Any]] = None,
    ) -> DataResult[Resume]:
        return self._insert("save_resume", Resume(
            session_id=session_id,
            file_name=file_name,
            file_url=file_url,
            file_type=file_type,
            parsed_data=parsed_data or {},
            analysis_result=analysis_result or {},
        ))

    def list_resumes(self, session_id: str) -> DataResult[List[Resume]]:
        return self._list("list_resumes", Resume, session_id)

    def get_latest_resume(self, session_id: str) -> DataResult[Resume]:
        return self._latest("get_latest_resume", Resume, session_id)

    # ---------- skill gaps ----------

    def save_skill_gap(
        self,
        session_id: str,
        target_role: str,
        current_skills: List[str],
        identified_gaps: List[Dict[str, Any]],
        market_demand: Dict[str, Any],
        resume_id: Optional[str] = None,
    ) -> DataResult[SkillGap]:
        return self._insert("save_skill_gap", SkillGap(
            session_id=session_id,
            resume_id=resume_id,
            target_role=target_role,
            current_skills=current_skills,
            identified_gaps=identified_gaps,
            market_demand=market_demand,
        ))

    def list_skill_gaps(self, session_id: str) -> DataResult[List[SkillGap]]:
        return self._list("list_skill_gaps", SkillGap, session_id)

    def get_latest_skill_gap(self, session_id: str) -> DataResult[SkillGap]:
        return self._latest("get_latest_skill_gap", SkillGap, session_id)

    # ---------- learning paths ----------

    def save_learning_path(
        self,
        session_id: str,
        recommendations: List[Dict[str, Any]],
        priority_order: List[str],
        estimated_duration: str = "Not specified",
        skill_gap_id: Optional[str] = None,
    ) -> DataResult[LearningPath]:
        return self._insert("save_learning_path", LearningPath(
            session_id=session_id,
            skill_gap_id=skill_gap_id,
            recommendations=recommendations,
            priority_order=priority_order,
            estimated_duration=estimated_duration,
        ))

    def list_learning_paths(self, session_id: str) -> DataResult[List[LearningPath]]:
        return self._list("list_learning_paths", LearningPath, session_id)

    # ---------- mock interviews ----------

    def save_mock_interview(self, session_id: str, job_role: str,
                            questions: List[Dict[str, Any]]) -> DataResult[MockInterview]:
        return self._insert("save_mock_interview", MockInterview(
            session_id=session_id,
            job_role=job_role,
            questions=questions,
            answers=[],
            feedback={},
        ))

    def get_mock_interview(self, session_id: str, interview_id: str) -> DataResult[MockInterview]:
        return self._get_owned("get_mock_interview", MockInterview, session_id, interview_id)

    def update_mock_interview(
        self,
        session_id: str,
        interview_id: str,
        answers: Optional[List[Dict[str, Any]]] = None,
        feedback: Optional[Dict[str, Any]] = None,
        score: Optional[int] = None,
        completed: Optional[bool] = None,
    ) -> DataResult[MockInterview]:
        return self._update_progress("update_mock_interview", MockInterview, session_id, interview_id, {
            "answers": answers,
            "feedback": feedback,
            "score": score,
            "completed": completed,
        })

    def list_mock_interviews(self, session_id: str) -> DataResult[List[MockInterview]]:
        return self._list("list_mock_interviews", MockInterview, session_id)

    # ---------- skill assessments ----------

    def save_skill_assessment(self, session_id: str, skill_category: str,
                              questions: List[Dict[str, Any]]) -> DataResult[SkillAssessment]:
        return self._insert("save_skill_assessment", SkillAssessment(
            session_id=session_id,
            skill_category=skill_category,
            questions=questions,
            answers=[],
            results={},
        ))

    def get_skill_assessment(self, session_id: str, assessment_id: str) -> DataResult[SkillAssessment]:
        return self._get_owned("get_skill_assessment", SkillAssessment, session_id, assessment_id)

    def update_skill_assessment(
        self,
        session_id: str,
        assessment_id: str,
        answers: Optional[List[Dict[str, Any]]] = None,
        results: Optional[Dict[str, Any]] = None,
        score: Optional[int] = None,
        completed: Optional[bool] = None,
    ) -> DataResult[SkillAssessment]:
        return self._update_progress("update_skill_assessment", SkillAssessment, session_id, assessment_id, {
            "answers": answers,
            "results": results,
            "score": score,
            "completed": completed,
        })

    def list_skill_assessments(self, session_id: str) -> DataResult[List[SkillAssessment]]:
        return self._list("list_skill_assessments", SkillAssessment, session_id)

    # ---------- job matches ----------

    def save_job_matches(self, session_id: str,
                         matches: List[Dict[str, Any]]) -> DataResult[List[JobMatch]]:
        """Insert a batch of job matches in one transaction."""
        def work(session: Session) -> DataResult:
            rows = [JobMatch(session_id=session_id, **match) for match in matches]
            session.add_all(rows)
            session.commit()
            for row in rows:
                session.refresh(row)
            return DataResult.ok(rows)

        return self._run("save_job_matches", work)

    def list_job_matches(self, session_id: str, limit: int = 20) -> DataResult[List[JobMatch]]:
        """Best matches first, newest first among equal scores."""
        def work(session: Session) -> DataResult:
            stmt = (
                select(JobMatch)
                .where(JobMatch.session_id == session_id)
                .order_by(JobMatch.compatibility_score.desc().nulls_last(), JobMatch.created_at.desc())
                .limit(limit)
            )
            return DataResult.ok(list(session.exec(stmt).all()))

        return self._run("list_job_matches", work)


_persistence_instance: Optional[PersistenceGateway] = None


def get_persistence() -> PersistenceGateway:
    """
    Get or create singleton PersistenceGateway bound to the app engine.
    """
    global _persistence_instance

    if _persistence_instance is None:
        from db import engine
        _persistence_instance = PersistenceGateway(engine)

    return _persistence_instance


def reset_persistence():
    """Reset the singleton instance (useful for testing)."""
    global _persistence_instance
    _persistence_instance = None
    logger.info("PersistenceGateway singleton reset")
