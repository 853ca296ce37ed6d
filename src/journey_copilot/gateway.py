"""Model gateway: one async Anthropic Messages call with bounded retry.

The call is a coroutine on AsyncAnthropic, so cancelling the awaiting task
(or an asyncio.wait_for timeout) cancels the in-flight HTTP request instead
of waiting it out.
"""

import logging

import anthropic
from anthropic import AsyncAnthropic
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from . import config
from .errors import GatewayFailure
from .models import MODEL_ROLE, USER_ROLE, normalize_role

logger = logging.getLogger("journey.gateway")

TRANSIENT_STATUS_CODES = frozenset({429, 500, 502, 503, 529})
TRANSIENT_MARKERS = ("overloaded", "rate limit", "unavailable", "resource_exhausted", "503", "429")

# Anthropic requires a user turn first and rejects empty content
OPENING_USER_TURN = "Hello."
EMPTY_MESSAGE_PLACEHOLDER = "Let's get started."


def is_transient_error(exc: BaseException) -> bool:
    """Overload / rate-limit / unavailable failures are worth another attempt."""
    if isinstance(exc, (anthropic.APIConnectionError, anthropic.APITimeoutError)):
        return True
    status = getattr(exc, "status_code", None)
    if status in TRANSIENT_STATUS_CODES:
        return True
    if not isinstance(exc, Exception):
        return False
    message = str(exc).lower()
    return any(marker in message for marker in TRANSIENT_MARKERS)


def build_messages(history, user_message: str) -> list[dict]:
    """Anthropic `messages` for the transcript plus the current user turn.

    Roles are normalized ("model" -> "assistant"), empty turns dropped and
    consecutive same-role turns merged so the API's alternation rule holds.
    """
    turns = []
    for msg in history:
        role = msg.role if hasattr(msg, "role") else msg["role"]
        content = msg.content if hasattr(msg, "content") else msg["content"]
        api_role = "assistant" if normalize_role(role) == MODEL_ROLE else USER_ROLE
        content = (content or "").strip()
        if content:
            turns.append((api_role, content))

    turns.append((USER_ROLE, (user_message or "").strip() or EMPTY_MESSAGE_PLACEHOLDER))

    if turns[0][0] != USER_ROLE:
        turns.insert(0, (USER_ROLE, OPENING_USER_TURN))

    messages: list[dict] = []
    for role, content in turns:
        if messages and messages[-1]["role"] == role:
            messages[-1]["content"] += "\n\n" + content
        else:
            messages.append({"role": role, "content": content})
    return messages


def response_text(response) -> str:
    return "".join(
        block.text for block in response.content if getattr(block, "type", None) == "text"
    ).strip()


class AnthropicGateway:
    """Anthropic Messages adapter.

    Without an injected client, each send() opens its own AsyncAnthropic so
    the HTTP pool belongs to the running event loop (Streamlit runs every
    turn under a fresh asyncio.run).
    """

    def __init__(
        self,
        client: AsyncAnthropic = None,
        model: str = None,
        max_attempts: int = None,
        backoff_seconds: float = None,
        api_key: str = None,
    ):
        self.client = client
        self.api_key = api_key or config.ANTHROPIC_API_KEY
        self.model = model or config.MODEL_NAME
        self.max_attempts = max_attempts or config.MAX_ATTEMPTS
        self.backoff_seconds = config.RETRY_BACKOFF_SECONDS if backoff_seconds is None else backoff_seconds

    async def send(
        self,
        system_instructions: str,
        history,
        user_message: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Return the model's reply text. Raises GatewayFailure on final failure."""
        messages = build_messages(history, user_message)
        if self.client is not None:
            return await self._send(self.client, system_instructions, messages, temperature, max_tokens)
        async with AsyncAnthropic(api_key=self.api_key) as client:
            return await self._send(client, system_instructions, messages, temperature, max_tokens)

    async def _send(self, client, system_instructions, messages, temperature, max_tokens) -> str:
        retryer = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.backoff_seconds, increment=self.backoff_seconds),
            retry=retry_if_exception(is_transient_error),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        attempts = 0
        try:
            async for attempt in retryer:
                with attempt:
                    attempts += 1
                    response = await client.messages.create(
                        model=self.model,
                        max_tokens=max_tokens,
                        temperature=temperature,
                        system=system_instructions,
                        messages=messages,
                    )
        except Exception as e:
            logger.error("Model call failed after %d attempt(s): %s", attempts, e)
            raise GatewayFailure(f"Model call failed: {e}", attempts=attempts) from e

        logger.debug(
            "Model call ok: attempts=%d, input_tokens=%s, output_tokens=%s",
            attempts,
            getattr(response.usage, "input_tokens", "?"),
            getattr(response.usage, "output_tokens", "?"),
        )

        text = response_text(response)
        if not text:
            logger.warning("Model returned no text (stop_reason=%s)", getattr(response, "stop_reason", None))
            raise GatewayFailure("Model returned an empty response", attempts=attempts)
        return text
