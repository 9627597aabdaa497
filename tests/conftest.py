"""
Shared test setup.

Settings are instantiated at import time, so the required secrets must be
in the environment before any kanoon_sathi module is imported.
"""

import os

os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-must-be-long-enough-32chars")
os.environ.setdefault("JWT_ALGO", "HS256")
os.environ.setdefault("GRAMMAR_CORRECTION_ENABLED", "false")

import pytest  # noqa: E402

from kanoon_sathi.retrieval.models import Passage  # noqa: E402


@pytest.fixture
def make_passage():
    def _make(content="text", score=0.9, **metadata):
        return Passage(content=content, score=score, metadata=metadata)
    return _make
