"""Error taxonomy for the chat pipeline.

Every error is local to a single request except the two startup errors
(KnowledgeLoadError, ConfigurationError), which abort process start.
"""


class JourneyCopilotError(Exception):
    """Base class for all Journey Copilot errors."""


class InputRejected(JourneyCopilotError):
    """Current message looks like prompt injection, a jailbreak, or is too long.

    `reason` is for logs only. Callers see a fixed refusal message.
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class MalformedRequest(JourneyCopilotError):
    """Payload could not be parsed into a ChatRequest."""


class GatewayFailure(JourneyCopilotError):
    """Model call failed after retries, or failed with a non-retryable error."""

    def __init__(self, message: str, attempts: int = 1):
        super().__init__(message)
        self.attempts = attempts


class KnowledgeLoadError(JourneyCopilotError):
    """Knowledge tables could not be loaded at startup."""


class ConfigurationError(JourneyCopilotError):
    """Required settings are missing."""
