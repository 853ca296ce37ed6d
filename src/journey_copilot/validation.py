"""Input screening and advisory output review.

Input patterns are anchored on word boundaries and on instruction-shaped
phrases so everyday marketing copy ("free shipping", "product description",
"select items from our store") passes. Output review never blocks.
"""

import logging
import re
from dataclasses import dataclass

from . import config
from .errors import InputRejected
from .models import WorkflowStep

logger = logging.getLogger("journey.validation")

PROMPT_INJECTION_PATTERNS = [
    re.compile(r"\b(ignore|forget|override|disregard)\b.*\b(previous|prior|above|earlier)\b.*\b(instructions?|prompts?|rules|directions)\b"),
    re.compile(r"\b(system|developer|hidden)\s*prompt\b"),
    re.compile(r"\b(repeat|show|display|print|reveal)\b.*\b(your|system)\s+(instructions|prompt|rules)\b"),
    re.compile(r"\bhere\s+are\s+your\s+(new\s+)?instructions\b"),
    re.compile(r"\b(from|starting)\s+now\b.*\bdo\s+not\b"),
    re.compile(r"\broleplay\b.*\b(developer|admin|root)\b"),
    re.compile(r"\b(you\s+are\s+now|act\s+as|pretend\s+to\s+be)\b.*\b(dan|unrestricted|uncensored|jailbroken|developer|admin)\b"),
]

JAILBREAK_PATTERNS = [
    re.compile(r"\bjailbr(eak|oken)\w*\b"),
    re.compile(r"\b(dan|developer|god)\s+mode\b"),
    re.compile(r"\bdo\s+anything\s+now\b"),
    re.compile(r"\b(uncensored|unfiltered)\b"),
    re.compile(r"\bno\s+(rules|restrictions|filters)\b"),
    re.compile(r"\bhack(ing)?\s+(the|your|this)\s+(system|prompt|model|instructions|ai)\b"),
]

CODE_INJECTION_PATTERNS = [
    re.compile(r"\bselect\s+\*\s+from\b"),
    re.compile(r"\bunion\s+(all\s+)?select\b"),
    re.compile(r"\bdrop\s+table\b"),
    re.compile(r";\s*(delete|insert|update)\b"),
    re.compile(r"<\s*script\b"),
    re.compile(r"\b(eval|exec)\s*\("),
    re.compile(r"\bjavascript\s*:"),
]

# A fenced block only counts when it also carries program-like keywords
CODE_FENCE = "```"
_CODE_KEYWORDS = re.compile(r"\b(import|def|func|package|function|var|const)\b")

SPAM_PHRASES = (
    "click here now", "limited time", "act now", "urgent",
    "guaranteed", "free money", "no risk", "100% free",
)
SPAM_FLAG_THRESHOLD = 3


class InputValidator:
    def __init__(self, max_chars: int = None):
        self.max_chars = max_chars or config.MAX_INPUT_CHARS

    def validate(self, text: str) -> None:
        """Raise InputRejected if `text` should never reach the model."""
        text = text or ""
        if len(text) > self.max_chars:
            raise InputRejected(f"input too long ({len(text)} > {self.max_chars} chars)")

        lowered = text.lower()
        for kind, patterns in (
            ("prompt injection", PROMPT_INJECTION_PATTERNS),
            ("jailbreak attempt", JAILBREAK_PATTERNS),
            ("code injection", CODE_INJECTION_PATTERNS),
        ):
            for pattern in patterns:
                if pattern.search(lowered):
                    raise InputRejected(f"{kind} detected: /{pattern.pattern}/")

        if CODE_FENCE in lowered and _CODE_KEYWORDS.search(lowered):
            raise InputRejected("code injection detected: fenced code block")


@dataclass(frozen=True)
class OutputReview:
    spam_hits: tuple = ()
    flagged: bool = False


class OutputValidator:
    """Counts spam-indicator phrases in model output. Advisory only."""

    def __init__(self, threshold: int = SPAM_FLAG_THRESHOLD):
        self.threshold = threshold

    def review(self, text: str, step: WorkflowStep) -> OutputReview:
        lowered = (text or "").lower()
        hits = tuple(p for p in SPAM_PHRASES if p in lowered)
        flagged = len(hits) > self.threshold
        if flagged:
            logger.warning(
                "Output flagged at step %d: %d spam indicators %s", step, len(hits), list(hits)
            )
        return OutputReview(spam_hits=hits, flagged=flagged)
