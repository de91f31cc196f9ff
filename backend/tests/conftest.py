"""
Pytest configuration and shared fixtures for all tests.

This file is automatically loaded by pytest before running tests.
It points the app at an in-memory database and a scratch upload directory,
and provides a scripted model endpoint so no test touches the network.
"""

import json
import os
import sys
import tempfile

# Add backend directory to path for imports FIRST
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

# Hermetic settings: these win over anything in backend/.env
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="career-uploads-")
os.environ["INTEGRATIONS_API_KEY"] = "test-api-key-for-testing"

import fitz
import httpx
import pytest

from db import build_engine, init_db
from services.ai_gateway import AICareerGateway
from services.persistence import PersistenceGateway
from services.storage import ResumeStorage
from services.workflows import CareerWorkflows


MODEL_URL = "https://model.test/v1/stream?alt=sse"


# ============================================================================
# Model endpoint helpers
# ============================================================================

def sse_event(text: str) -> str:
    event = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    return f"data: {json.dumps(event)}"


def sse_body(*chunks: str, extra_lines=()) -> bytes:
    """Build an SSE stream carrying `chunks` as consecutive text deltas."""
    lines = list(extra_lines) + [sse_event(chunk) for chunk in chunks]
    return ("\n\n".join(lines) + "\n\n").encode() if lines else b""


def split_in_two(text: str):
    middle = len(text) // 2
    return text[:middle], text[middle:]


class FakeModel:
    """
    Scripted stand-in for the streaming model endpoint.

    Replies are consumed in order, one per request; every request is kept
    so tests can inspect the prompt and headers that were sent.
    """

    def __init__(self):
        self.replies = []
        self.requests = []

    def reply_json(self, payload, fenced: bool = False) -> "FakeModel":
        text = json.dumps(payload)
        if fenced:
            text = f"```json\n{text}\n```"
        return self.reply_text(text)

    def reply_text(self, text: str) -> "FakeModel":
        self.replies.append((200, sse_body(*split_in_two(text))))
        return self

    def reply_raw(self, status: int, body: bytes) -> "FakeModel":
        self.replies.append((status, body))
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.replies:
            raise AssertionError(f"Unexpected model call #{len(self.requests)}")
        status, body = self.replies.pop(0)
        return httpx.Response(status, content=body, headers={"content-type": "text/event-stream"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def prompt(self, index: int = -1) -> str:
        body = json.loads(self.requests[index].content)
        return body["contents"][0]["parts"][0]["text"]


def make_pdf(pages) -> bytes:
    """Build a PDF with one page per string."""
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def engine():
    """Fresh in-memory database with every table created."""
    test_engine = build_engine("sqlite://")
    init_db(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def persistence(engine):
    return PersistenceGateway(engine)


@pytest.fixture
def storage(tmp_path):
    return ResumeStorage(root_dir=str(tmp_path / "uploads"), public_base_url="http://testserver/files")


@pytest.fixture
def fake_model():
    return FakeModel()


@pytest.fixture
def gateway(fake_model):
    return AICareerGateway(api_key="test-key", endpoint=MODEL_URL, transport=fake_model.transport)


@pytest.fixture
def workflows(gateway, persistence, storage):
    return CareerWorkflows(gateway, persistence, storage)
