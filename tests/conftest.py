"""Root conftest: MockSessionState, transcript builders and shared fixtures."""

import pytest

from journey_copilot.models import ConversationMessage


class MockSessionState(dict):
    """Dict subclass with attribute access: mirrors Streamlit session_state.

    Supports both st.session_state["key"] and st.session_state.key.
    """

    def __getattr__(self, key):
        try:
            return self[key]
        except KeyError:
            raise AttributeError(key)

    def __setattr__(self, key, value):
        self[key] = value

    def __delattr__(self, key):
        try:
            del self[key]
        except KeyError:
            raise AttributeError(key)

    def __contains__(self, key):
        return dict.__contains__(self, key)


def _fresh_session_state(**overrides) -> MockSessionState:
    """Build a MockSessionState with the canonical shape from state.py."""
    state = MockSessionState(
        initialized=True,
        messages=[],
        turn_count=0,
        last_response=None,
        base_system_prompt=None,
    )
    state.update(overrides)
    return state


def user(content: str) -> ConversationMessage:
    return ConversationMessage.create("user", content)


def model(content: str) -> ConversationMessage:
    return ConversationMessage.create("model", content)


# Assistant turns that satisfy each completion detector
VALIDATION_SUMMARY = (
    "Let me summarize my understanding: your USP is eco-friendly packaging "
    "and your ICP is busy parents. Is that correct?"
)
CIRCLE_CONFIRMATION = (
    "Great. So your intended audience is existing customers, the Customer "
    "circle of trust. Shall we continue?"
)
ANALYSIS_TURN = (
    "Analysis: driving repeat purchases is highly appropriate for the customer "
    "circle, and the goal aligns with their relationship status."
)


@pytest.fixture
def mock_session_state():
    """Provide a fresh MockSessionState for each test."""
    return _fresh_session_state()
