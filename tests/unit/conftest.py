"""Unit-level conftest: mocks for the Anthropic client, gateway and Streamlit session."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from journey_copilot.composer import PromptComposer
from journey_copilot.extraction import FieldExtractor
from journey_copilot.gateway import AnthropicGateway
from journey_copilot.knowledge import KnowledgeBase
from journey_copilot.orchestrator import ConversationOrchestrator
from journey_copilot.validation import InputValidator, OutputValidator
from journey_copilot.workflow import WorkflowStateMachine


# ---------------------------------------------------------------------------
# Anthropic mock helpers
# ---------------------------------------------------------------------------


def _make_anthropic_response(text="", stop_reason="end_turn"):
    """Factory for Anthropic API message responses."""
    content = []
    if text:
        content.append(SimpleNamespace(type="text", text=text))
    return SimpleNamespace(
        content=content,
        usage=SimpleNamespace(input_tokens=100, output_tokens=50),
        stop_reason=stop_reason,
    )


class FakeAPIError(Exception):
    """Stand-in for an SDK error carrying an HTTP status."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


@pytest.fixture
def mock_anthropic_client():
    """Mock AsyncAnthropic client; messages.create is awaitable."""
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=_make_anthropic_response("Default response"))
    return client


@pytest.fixture
def gateway(mock_anthropic_client):
    """Real AnthropicGateway over the mock client, no retry sleeps."""
    return AnthropicGateway(
        client=mock_anthropic_client,
        model="test-model",
        max_attempts=3,
        backoff_seconds=0,
    )


# ---------------------------------------------------------------------------
# Knowledge + orchestrator
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def knowledge():
    return KnowledgeBase.from_embedded()


@pytest.fixture
def mock_gateway():
    """Gateway double: send() is an AsyncMock returning a canned reply."""
    gw = MagicMock()
    gw.send = AsyncMock(return_value="Hi, I'm Da Vinci. Tell me about your USP and ICP.")
    return gw


@pytest.fixture
def orchestrator(knowledge, mock_gateway):
    return ConversationOrchestrator(
        extractor=FieldExtractor(),
        state_machine=WorkflowStateMachine(),
        knowledge=knowledge,
        composer=PromptComposer(),
        gateway=mock_gateway,
        input_validator=InputValidator(),
        output_validator=OutputValidator(),
    )


# ---------------------------------------------------------------------------
# Session state fixture with st patching for state.py
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_session_state_for_state(mock_session_state):
    """MockSessionState patched into journey_copilot.state.st.session_state."""
    mock_st = MagicMock()
    mock_st.session_state = mock_session_state
    with patch("journey_copilot.state.st", mock_st):
        yield mock_session_state
