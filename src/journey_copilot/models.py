"""Data model shared by extraction, workflow inference, composition and transport."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MODEL_ROLE = "model"
USER_ROLE = "user"

# Roles the frontend or other clients use for assistant turns
MODEL_ROLE_ALIASES = frozenset({"model", "ai", "assistant"})


def normalize_role(role: str) -> str:
    """Collapse assistant-role spellings to 'model'; anything else is a user turn."""
    if (role or "").strip().lower() in MODEL_ROLE_ALIASES:
        return MODEL_ROLE
    return USER_ROLE


class WorkflowStep(IntEnum):
    INTRODUCTION = 0
    DISCOVERY = 1
    VALIDATION = 2
    FRAMEWORK_APPLICATION = 3
    CIRCLE_CONFIRMATION = 4
    GOAL_SETTING = 5
    ANALYSIS = 6
    EXECUTION = 7

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


TRUST_TIERS = ("stranger", "follower", "customer", "advocate")


@dataclass(frozen=True)
class ConversationMessage:
    role: str
    content: str

    @classmethod
    def create(cls, role: str, content: str) -> "ConversationMessage":
        return cls(role=normalize_role(role), content=content or "")

    @property
    def is_model(self) -> bool:
        return self.role == MODEL_ROLE


@dataclass(frozen=True)
class ExtractedContext:
    """Facts recovered from one request's transcript. Absent facts are None."""

    usp: Optional[str] = None
    icp: Optional[str] = None
    vertical: Optional[str] = None
    trust_tier: Optional[str] = None
    proposed_outcome: Optional[str] = None
    history: tuple = ()

    def filled_core_fields(self) -> int:
        """Count of usp/icp/trust_tier/proposed_outcome that are present."""
        return sum(
            1 for v in (self.usp, self.icp, self.trust_tier, self.proposed_outcome) if v
        )

    def facts(self) -> dict:
        """Present facts only, in display order."""
        items = {
            "usp": self.usp,
            "icp": self.icp,
            "vertical": self.vertical,
            "trust_tier": self.trust_tier,
            "proposed_outcome": self.proposed_outcome,
        }
        return {k: v for k, v in items.items() if v}


@dataclass(frozen=True)
class OutputFormatSpec:
    kind: str = "text"
    include_table: bool = False
    table_columns: tuple = ()
    max_content_length: int = 220
    readability_level: str = "Grade6"
    # From the resolved sequence template, when there is one
    cadence: Optional[str] = None
    touch_points: Optional[int] = None


@dataclass(frozen=True)
class Framework:
    name: str
    acronym: str
    components: tuple = ()
    best_for: tuple = ()
    tone: str = ""
    funnel_stage: str = ""
    example: str = ""
    criticisms: str = ""
    relevance_score: float = 0.0


@dataclass(frozen=True)
class SequenceTemplate:
    outcome: str
    vertical: str
    duration: str
    touch_points: int
    triggers: frozenset = field(default_factory=frozenset)
    cadence: str = ""
    frameworks: tuple = ()
    key_messages: tuple = ()
    branching_logic: str = ""


@dataclass(frozen=True)
class VerticalGuidance:
    vertical_name: str
    characteristics: tuple = ()
    key_principles: tuple = ()
    common_outcomes: tuple = ()
    unique_considerations: str = ""


# ---------------------------------------------------------------------------
# Wire models (camelCase on the wire, snake_case in Python)
# ---------------------------------------------------------------------------


class HistoryItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: str
    content: str = ""

    @field_validator("content", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else v


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    current_message: str = Field(default="", alias="currentMessage")
    conversation_history: list[HistoryItem] = Field(
        default_factory=list, alias="conversationHistory"
    )
    base_system_prompt: Optional[str] = Field(default=None, alias="baseSystemPrompt")
    user_metadata: Optional[dict[str, Any]] = Field(default=None, alias="userMetadata")

    @field_validator("current_message", mode="before")
    @classmethod
    def _message_none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("conversation_history", mode="before")
    @classmethod
    def _history_none_to_empty(cls, v):
        return [] if v is None else v

    def history_messages(self) -> tuple:
        """History as ConversationMessage with canonical roles."""
        return tuple(
            ConversationMessage.create(item.role, item.content)
            for item in self.conversation_history
        )


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    workflow_step: int = Field(default=0, alias="workflowStep")
    extracted_usp: Optional[str] = Field(default=None, alias="extractedUSP")
    extracted_icp: Optional[str] = Field(default=None, alias="extractedICP")
    identified_vertical: Optional[str] = Field(default=None, alias="identifiedVertical")
    current_circle: Optional[str] = Field(default=None, alias="currentCircle")
    proposed_outcome: Optional[str] = Field(default=None, alias="proposedOutcome")
    error: Optional[str] = None
    # HTTP-equivalent status for the transport layer, never serialized
    status_code: int = Field(default=200, exclude=True)

    @classmethod
    def from_context(cls, message: str, step: WorkflowStep, ctx: ExtractedContext) -> "ChatResponse":
        return cls(
            message=message,
            workflow_step=int(step),
            extracted_usp=ctx.usp,
            extracted_icp=ctx.icp,
            identified_vertical=ctx.vertical,
            current_circle=ctx.trust_tier,
            proposed_outcome=ctx.proposed_outcome,
        )

    def to_payload(self) -> dict:
        """Wire dict with absent fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)
