# backend/services/__init__.py
"""
Services Package for the AI Career Assistant

    - session_identity: anonymous visitor tokens
    - resume_extraction: PDF / plain-text resume reading
    - resume_scoring: heuristic resume readiness score
    - response_schemas: required fields of every model answer
    - ai_gateway: prompt dispatch to the streaming model endpoint
    - storage: uploaded resume files
    - persistence: session-scoped data access
    - workflows: the user-facing features built on the above
"""

from .session_identity import (
    SESSION_HEADER,
    SESSION_KEY,
    clear_session,
    generate_session_token,
    get_or_create_token,
    is_valid_token,
)
from .resume_extraction import (
    ExtractionFailed,
    UnsupportedFormat,
    extract_text,
)
from .resume_scoring import score_resume
from .ai_gateway import (
    Action,
    AICareerGateway,
    GatewayResult,
    get_ai_gateway,
    reset_ai_gateway,
)
from .persistence import (
    DataResult,
    PersistenceGateway,
    get_persistence,
    reset_persistence,
)
from .storage import (
    ResumeStorage,
    get_storage,
    reset_storage,
)
from .workflows import (
    CareerWorkflows,
    WorkflowError,
    get_workflows,
    reset_workflows,
)

__all__ = [
    # Sessions
    "SESSION_HEADER",
    "SESSION_KEY",
    "clear_session",
    "generate_session_token",
    "get_or_create_token",
    "is_valid_token",
    # Resumes
    "ExtractionFailed",
    "UnsupportedFormat",
    "extract_text",
    "score_resume",
    # AI gateway
    "Action",
    "AICareerGateway",
    "GatewayResult",
    "get_ai_gateway",
    "reset_ai_gateway",
    # Data
    "DataResult",
    "PersistenceGateway",
    "get_persistence",
    "reset_persistence",
    "ResumeStorage",
    "get_storage",
    "reset_storage",
    # Workflows
    "CareerWorkflows",
    "WorkflowError",
    "get_workflows",
    "reset_workflows",
]
