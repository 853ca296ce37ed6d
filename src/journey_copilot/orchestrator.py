"""Per-request chat pipeline.

    validate -> extract -> infer step -> knowledge context -> compose
             -> model gateway -> advisory output review -> ChatResponse

Nothing is remembered between requests: the caller sends the whole
transcript each turn and every fact and the step are re-derived from it.
"""

import asyncio
import logging
from pathlib import Path

from pydantic import ValidationError

from . import config
from .composer import PromptComposer
from .errors import GatewayFailure, InputRejected, MalformedRequest
from .extraction import FieldExtractor
from .gateway import AnthropicGateway
from .knowledge import KnowledgeBase
from .models import ChatRequest, ChatResponse, ExtractedContext, WorkflowStep
from .validation import InputValidator, OutputValidator
from .workflow import WorkflowStateMachine

logger = logging.getLogger("journey.orchestrator")

REFUSAL_MESSAGE = (
    "I'm sorry, but I cannot fulfill that request as it conflicts with "
    "my core operational security protocols."
)
RETRY_MESSAGE = "Error processing your request. Please try again."
MALFORMED_MESSAGE = "Invalid request format."

ERROR_INPUT_REJECTED = "input_rejected"
ERROR_MALFORMED = "malformed_request"
ERROR_GATEWAY = "gateway_failure"


class ConversationOrchestrator:
    def __init__(
        self,
        extractor: FieldExtractor,
        state_machine: WorkflowStateMachine,
        knowledge: KnowledgeBase,
        composer: PromptComposer,
        gateway,
        input_validator: InputValidator,
        output_validator: OutputValidator,
        temperature: float = None,
        max_tokens: int = None,
    ):
        self.extractor = extractor
        self.state_machine = state_machine
        self.knowledge = knowledge
        self.composer = composer
        self.gateway = gateway
        self.input_validator = input_validator
        self.output_validator = output_validator
        self.temperature = config.TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or config.MAX_TOKENS

    def analyze(self, request: ChatRequest) -> tuple[ExtractedContext, WorkflowStep, str]:
        """Synchronous half of the pipeline: facts, step, and the composed system prompt."""
        ctx = self.extractor.extract(request.current_message, request.history_messages())
        step = self.state_machine.step(ctx)

        knowledge_context = self.knowledge.build_context(step, ctx.proposed_outcome, ctx.vertical)
        template = self.knowledge.template_for(ctx.proposed_outcome, ctx.vertical)
        output_format = self.composer.output_format_for(step, template)

        system_prompt = self.composer.compose(
            request.base_system_prompt,
            step,
            ctx,
            knowledge_context,
            output_format,
        )
        return ctx, step, system_prompt

    async def process_chat_request(self, request: ChatRequest, timeout: float = None) -> ChatResponse:
        try:
            self.input_validator.validate(request.current_message)
        except InputRejected as e:
            logger.warning("Input rejected: %s", e.reason)
            return ChatResponse(message=REFUSAL_MESSAGE, error=ERROR_INPUT_REJECTED, status_code=400)

        ctx, step, system_prompt = self.analyze(request)
        logger.info(
            "Turn: step=%d (%s), facts=%s, history=%d",
            step, step.label, sorted(ctx.facts()), len(ctx.history),
        )

        call = self.gateway.send(
            system_prompt,
            ctx.history,
            request.current_message,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        try:
            if timeout is not None:
                reply = await asyncio.wait_for(call, timeout=timeout)
            else:
                reply = await call
        except asyncio.TimeoutError:
            logger.error("Model call timed out after %.1fs", timeout)
            return self._failure(step, ctx)
        except GatewayFailure as e:
            logger.error("Gateway failure at step %d: %s", step, e)
            return self._failure(step, ctx)

        self.output_validator.review(reply, step)
        return ChatResponse.from_context(reply, step, ctx)

    async def process_chat_request_stream(self, request: ChatRequest, timeout: float = None):
        """Same pipeline, yielded as a single chunk."""
        response = await self.process_chat_request(request, timeout=timeout)
        yield response.message

    async def handle_payload(self, payload: dict, timeout: float = None) -> ChatResponse:
        """Parse a raw camelCase payload, then run the pipeline."""
        try:
            request = parse_request(payload)
        except MalformedRequest as e:
            logger.warning("Malformed request: %s", e)
            return ChatResponse(message=MALFORMED_MESSAGE, error=ERROR_MALFORMED, status_code=400)
        return await self.process_chat_request(request, timeout=timeout)

    def _failure(self, step: WorkflowStep, ctx: ExtractedContext) -> ChatResponse:
        response = ChatResponse.from_context(RETRY_MESSAGE, step, ctx)
        return response.model_copy(update={"error": ERROR_GATEWAY, "status_code": 502})


def parse_request(payload) -> ChatRequest:
    if not isinstance(payload, dict):
        raise MalformedRequest(f"expected a JSON object, got {type(payload).__name__}")
    try:
        return ChatRequest.model_validate(payload)
    except ValidationError as e:
        raise MalformedRequest(str(e)) from e


def load_knowledge(knowledge_dir: str = None) -> KnowledgeBase:
    knowledge_dir = knowledge_dir or config.KNOWLEDGE_DIR
    if knowledge_dir:
        return KnowledgeBase.from_directory(Path(knowledge_dir))
    return KnowledgeBase.from_embedded()


def build_orchestrator(gateway=None, knowledge: KnowledgeBase = None) -> ConversationOrchestrator:
    """Wire the production collaborators. Raises KnowledgeLoadError at startup."""
    return ConversationOrchestrator(
        extractor=FieldExtractor(),
        state_machine=WorkflowStateMachine(),
        knowledge=knowledge or load_knowledge(),
        composer=PromptComposer(),
        gateway=gateway or AnthropicGateway(),
        input_validator=InputValidator(),
        output_validator=OutputValidator(),
    )
