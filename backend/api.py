# api.py
"""
HTTP surface of the AI Career Assistant.

- POST /api/ai-career-assistant is the stateless AI gateway ({action, data} in,
  {success, data?, error?} out)
- every other /api route is scoped by the visitor's session token, read from
  the X-Session-Id header or the career_session_id cookie
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, File, Query, Request, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

import config
from db import init_db
from services.ai_gateway import AICareerGateway, GatewayResult, get_ai_gateway
from services.session_identity import (
    SESSION_HEADER,
    SESSION_KEY,
    get_or_create_token,
    is_valid_token,
)
from services.workflows import CareerWorkflows, WorkflowError, get_workflows

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------- FastAPI & CORS ----------
app = FastAPI(title="AI Career Assistant")
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[SESSION_HEADER],
)

Path(config.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/files", StaticFiles(directory=config.UPLOAD_DIR), name="files")


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("Database tables ready")


@app.exception_handler(WorkflowError)
def workflow_error_handler(request: Request, exc: WorkflowError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# ---------- Session ----------
def session_token(
    request: Request,
    response: Response,
    workflows: CareerWorkflows = Depends(get_workflows),
) -> str:
    """
    Resolve the visitor's token: the X-Session-Id header wins, then the
    cookie; a new token is issued as a cookie when neither is usable.
    """
    token = request.headers.get(SESSION_HEADER)
    if not is_valid_token(token):
        cookies = dict(request.cookies)
        token = get_or_create_token(cookies)
        if request.cookies.get(SESSION_KEY) != token:
            response.set_cookie(SESSION_KEY, token, httponly=True, samesite="lax", max_age=60 * 60 * 24 * 365)

    response.headers[SESSION_HEADER] = token

    result = workflows.persistence.ensure_session(token)
    if result.is_error:
        logger.warning(f"Could not record session {token}: {result.error}")
    return token


# ---------- Request models ----------
class GatewayReq(BaseModel):
    action: str
    data: Any = Field(default_factory=dict)


class ResumeTextReq(BaseModel):
    text: str


class SkillGapReq(BaseModel):
    targetRole: str


class JobMatchReq(BaseModel):
    location: Optional[str] = None
    targetRoles: List[str] = Field(default_factory=list)


class MockInterviewReq(BaseModel):
    jobRole: str
    experienceLevel: Optional[str] = None
    questionCount: Optional[int] = Field(default=None, ge=1, le=20)


class AssessmentReq(BaseModel):
    skillCategory: str
    difficulty: Optional[str] = None
    questionCount: Optional[int] = Field(default=None, ge=1, le=30)


class AnswerReq(BaseModel):
    answer: str


# ---------- AI gateway ----------
@app.post("/api/ai-career-assistant")
def ai_career_assistant(
    req: GatewayReq,
    response: Response,
    gateway: AICareerGateway = Depends(get_ai_gateway),
) -> Dict[str, Any]:
    try:
        result = gateway.invoke(req.action, req.data)
    except Exception as e:
        logger.exception("ai-career-assistant failed")
        result = GatewayResult.fail(str(e))

    response.status_code = result.status_code
    return result.to_envelope()


# ---------- Session & health ----------
@app.get("/api/session")
def get_session(token: str = Depends(session_token)) -> Dict[str, str]:
    return {"sessionId": token}


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


# ---------- Resumes ----------
@app.post("/api/resumes")
def upload_resume(
    file: UploadFile = File(...),
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    # one byte over the limit is enough to reject
    data = file.file.read(workflows.max_upload_bytes + 1)
    logger.info(f"Resume upload '{file.filename}' ({file.content_type}, {len(data)} bytes)")
    return workflows.upload_resume(token, file.filename or "", file.content_type or "", data)


@app.post("/api/resumes/text")
def submit_resume_text(
    req: ResumeTextReq,
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.submit_resume_text(token, req.text)


@app.get("/api/resumes")
def list_resumes(
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.list_resumes(token)


@app.get("/api/resumes/latest")
def latest_resume(
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.latest_resume(token)


# ---------- Skill gaps & learning paths ----------
@app.post("/api/skill-gaps")
def analyze_skill_gap(
    req: SkillGapReq,
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.analyze_skill_gap(token, req.targetRole)


@app.get("/api/skill-gaps")
def list_skill_gaps(
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.list_skill_gaps(token)


@app.get("/api/skill-gaps/latest")
def latest_skill_gap(
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.latest_skill_gap(token)


@app.post("/api/learning-paths")
def generate_learning_path(
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.generate_learning_path(token)


@app.get("/api/learning-paths")
def list_learning_paths(
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.list_learning_paths(token)


# ---------- Jobs & guidance ----------
@app.post("/api/jobs/match")
def match_jobs(
    req: JobMatchReq,
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.match_jobs(token, location=req.location, target_roles=req.targetRoles)


@app.get("/api/jobs")
def list_jobs(
    limit: int = Query(default=20, ge=1, le=100),
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.list_job_matches(token, limit=limit)


@app.post("/api/career-guidance")
def career_guidance(
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.career_guidance(token)


# ---------- Mock interviews ----------
@app.post("/api/mock-interviews")
def start_mock_interview(
    req: MockInterviewReq,
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.start_mock_interview(token, req.jobRole, req.experienceLevel, req.questionCount)


@app.post("/api/mock-interviews/{interview_id}/answers")
def submit_interview_answer(
    interview_id: str,
    req: AnswerReq,
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.submit_interview_answer(token, interview_id, req.answer)


@app.get("/api/mock-interviews")
def list_mock_interviews(
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.list_mock_interviews(token)


# ---------- Skill assessments ----------
@app.post("/api/assessments")
def start_assessment(
    req: AssessmentReq,
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.start_assessment(token, req.skillCategory, req.difficulty, req.questionCount)


@app.post("/api/assessments/{assessment_id}/answers")
def submit_assessment_answer(
    assessment_id: str,
    req: AnswerReq,
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.submit_assessment_answer(token, assessment_id, req.answer)


@app.get("/api/assessments")
def list_assessments(
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.list_assessments(token)


# ---------- Dashboard ----------
@app.get("/api/dashboard")
def dashboard(
    token: str = Depends(session_token),
    workflows: CareerWorkflows = Depends(get_workflows),
):
    return workflows.dashboard(token)
