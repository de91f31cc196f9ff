# models.py
"""
Database tables for the Career Assistant.

Every record is owned by an anonymous visitor session and carries its token
in `session_id`. Structured payloads (parsed resume, questions, answers...)
are stored as JSON columns so the shapes returned by the model can evolve
without migrations.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


class UserSession(SQLModel, table=True):
    __tablename__ = "sessions"

    id: str = Field(default_factory=new_id, primary_key=True)
    session_id: str = Field(index=True, unique=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    last_active: datetime = Field(default_factory=utcnow, nullable=False)
    user_data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))


class Resume(SQLModel, table=True):
    """
    One uploaded resume.

    `parsed_data` holds the structured profile returned by the parse_resume
    action as-is; `analysis_result` holds the heuristic readiness score.
    """
    __tablename__ = "resumes"

    id: str = Field(default_factory=new_id, primary_key=True)
    session_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)

    file_name: str
    file_url: str = ""
    file_type: str = ""

    parsed_data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    analysis_result: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))


class SkillGap(SQLModel, table=True):
    __tablename__ = "skill_gaps"

    id: str = Field(default_factory=new_id, primary_key=True)
    session_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)

    resume_id: Optional[str] = None
    target_role: str

    # frozen at analysis time; a new analysis creates a new row
    current_skills: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    identified_gaps: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    market_demand: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))


class LearningPath(SQLModel, table=True):
    __tablename__ = "learning_paths"

    id: str = Field(default_factory=new_id, primary_key=True)
    session_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)

    skill_gap_id: Optional[str] = None
    recommendations: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    priority_order: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    estimated_duration: str = "Not specified"


class MockInterview(SQLModel, table=True):
    __tablename__ = "mock_interviews"

    id: str = Field(default_factory=new_id, primary_key=True)
    session_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)

    job_role: str
    questions: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    answers: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    feedback: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    score: Optional[int] = None
    completed: bool = False


class SkillAssessment(SQLModel, table=True):
    __tablename__ = "skill_assessments"

    id: str = Field(default_factory=new_id, primary_key=True)
    session_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)

    skill_category: str
    questions: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    answers: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    results: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    score: Optional[int] = None
    completed: bool = False


class JobMatch(SQLModel, table=True):
    __tablename__ = "job_matches"

    id: str = Field(default_factory=new_id, primary_key=True)
    session_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)

    resume_id: Optional[str] = None
    job_title: str
    company: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    requirements: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    compatibility_score: Optional[float] = None
    match_details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
