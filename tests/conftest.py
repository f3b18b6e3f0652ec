"""Shared test fixtures.

JWT_SECRET is set before anything builds a Config so tests never need a .env.
"""
import os

import pytest
import pytest_asyncio

os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ.setdefault("LLM_PROVIDER", "rules")

from synapse.llm.base import LLMProvider, ProviderResponse
from synapse.store import create_store


class StubProvider(LLMProvider):
    """Returns canned responses and records every prompt it receives."""

    name = "stub"

    def __init__(self, response: ProviderResponse | str = ""):
        if isinstance(response, str):
            response = ProviderResponse(raw_output=response)
        self.response = response
        self.prompts: list[str] = []

    async def invoke(self, prompt: str) -> ProviderResponse:
        self.prompts.append(prompt)
        return self.response


@pytest.fixture
def stub_provider():
    """Factory for StubProvider instances."""
    return StubProvider


@pytest_asyncio.fixture
async def store(tmp_path):
    """User store backed by a throwaway SQLite file."""
    user_store = create_store(f"sqlite+aiosqlite:///{tmp_path / 'synapse-test.db'}")
    await user_store.create_schema()
    yield user_store
    await user_store.dispose()
