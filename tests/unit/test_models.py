"""Unit tests for journey_copilot.models: roles, steps, wire models."""

import pytest
from pydantic import ValidationError

from journey_copilot.models import (
    ChatRequest,
    ChatResponse,
    ConversationMessage,
    ExtractedContext,
    WorkflowStep,
    normalize_role,
)


class TestRoles:
    @pytest.mark.parametrize("role", ["model", "ai", "assistant", "Assistant "])
    def test_model_aliases(self, role):
        assert normalize_role(role) == "model"

    @pytest.mark.parametrize("role", ["user", "human", "", None])
    def test_everything_else_is_user(self, role):
        assert normalize_role(role) == "user"

    def test_message_create_normalizes(self):
        msg = ConversationMessage.create("ai", None)
        assert msg.is_model
        assert msg.content == ""


class TestWorkflowStep:
    def test_ordinals(self):
        assert [int(s) for s in WorkflowStep] == list(range(8))

    def test_label(self):
        assert WorkflowStep.CIRCLE_CONFIRMATION.label == "Circle Confirmation"


class TestExtractedContext:
    def test_vertical_not_a_core_field(self):
        ctx = ExtractedContext(usp="x", vertical="dtc")
        assert ctx.filled_core_fields() == 1
        assert ctx.facts() == {"usp": "x", "vertical": "dtc"}


class TestWireModels:
    def test_request_accepts_aliases_and_names(self):
        by_alias = ChatRequest.model_validate({"currentMessage": "hi", "baseSystemPrompt": "p"})
        by_name = ChatRequest(current_message="hi", base_system_prompt="p")
        assert by_alias == by_name

    def test_request_is_frozen(self):
        request = ChatRequest(current_message="hi")
        with pytest.raises(ValidationError):
            request.current_message = "changed"

    def test_response_from_context(self):
        ctx = ExtractedContext(usp="speed", trust_tier="follower")
        response = ChatResponse.from_context("ok", WorkflowStep.DISCOVERY, ctx)
        assert response.to_payload() == {
            "message": "ok",
            "workflowStep": 1,
            "extractedUSP": "speed",
            "currentCircle": "follower",
        }
