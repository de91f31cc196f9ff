# config.py
"""
Runtime configuration for the Career Assistant backend.

Values come from the process environment, optionally seeded from a `.env`
file next to this module. Secrets (the model credential) are read where they
are used so tests can swap them without reloading this module.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent / ".env"
load_dotenv(dotenv_path=env_path)


DATABASE_URL = os.getenv("DATABASE_URL")

# Gemini-compatible streaming endpoint (server-sent events)
AI_GATEWAY_URL = os.getenv(
    "AI_GATEWAY_URL",
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-2.5-flash:streamGenerateContent?alt=sse",
)
AI_AUTH_HEADER = os.getenv("AI_AUTH_HEADER", "X-Gateway-Authorization")
API_KEY_ENV = "INTEGRATIONS_API_KEY"

UPLOAD_DIR = os.getenv("UPLOAD_DIR", str(Path(__file__).parent / "uploads"))
PUBLIC_FILES_URL = os.getenv("PUBLIC_FILES_URL", "http://localhost:8000/files").rstrip("/")

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
    ).split(",")
    if origin.strip()
]

MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(1024 * 1024)))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
