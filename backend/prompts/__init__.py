# backend/prompts/__init__.py
"""
Career Assistant Prompts Package

Contains the LLM prompt templates used by the AI gateway.
"""

from .career_prompts import CareerPrompts, MAX_RESUME_CHARS

__all__ = [
    "CareerPrompts",
    "MAX_RESUME_CHARS",
]
