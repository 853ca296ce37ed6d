"""Heuristic fact extraction from a raw conversation transcript.

Each field is driven by a module-level rule table so rules can be tested on
their own and replaced without touching the workflow state machine:

    USP_RULES / ICP_RULES / OUTCOME_RULES  ordered regexes, first capture wins
    VERTICAL_KEYWORDS                      keyword vote, >= 2 distinct hits
    TRUST_TIER_KEYWORDS                    word-boundary hits behind a gate

Nothing here raises on "no match": a missing fact is returned as None and the
state machine reads the absence as "not discussed yet".
"""

import logging
import re

from .models import ConversationMessage, ExtractedContext

logger = logging.getLogger("journey.extraction")

# A captured value runs to the end of the sentence or line
_VALUE = r"([^.!?\n]+)"

USP_RULES = [
    re.compile(r"\busp[:\s]+" + _VALUE, re.IGNORECASE),
    re.compile(r"\bunique(?:\s+selling\s+proposition)?[:\s]+" + _VALUE, re.IGNORECASE),
    re.compile(r"\bwhat\s+makes\s+us\s+different\s+is[:\s]+" + _VALUE, re.IGNORECASE),
]

ICP_RULES = [
    re.compile(r"\bicp[:\s]+" + _VALUE, re.IGNORECASE),
    re.compile(r"\btarget(?:\s+audience|\s+customer|\s+market)?[:\s]+" + _VALUE, re.IGNORECASE),
    re.compile(r"\bwe\s+sell\s+to[:\s]+" + _VALUE, re.IGNORECASE),
    re.compile(r"\bmy\s+customers\s+are[:\s]+" + _VALUE, re.IGNORECASE),
]

# Rules run over every role, so a model question such as "What is the desired
# outcome for this sequence?" can be captured ahead of the user's answer.
OUTCOME_RULES = [
    re.compile(r"\b(?:goal|outcome|objective)[:\s]+" + _VALUE, re.IGNORECASE),
    re.compile(r"\b(?:my|our)\s+goal\s+is\s+" + _VALUE, re.IGNORECASE),
    re.compile(r"\bdesired\s+(?:outcome|result)[:\s]+" + _VALUE, re.IGNORECASE),
    re.compile(r"\b(?:i|we)\s+want\s+to\s+" + _VALUE, re.IGNORECASE),
    re.compile(r"\b(?:i|we)\s+need\s+to\s+" + _VALUE, re.IGNORECASE),
    re.compile(r"\b(?:i|we)(?:'m|'re)?\s+looking\s+to\s+" + _VALUE, re.IGNORECASE),
    re.compile(r"\b(?:i|we)'d\s+like\s+to\s+" + _VALUE, re.IGNORECASE),
    # Specific outcome verbs only; "get" is too generic
    re.compile(
        r"\b(?:achieve|accomplish|obtain|generate|create|build|establish|develop)\s+([^.!?\n]{5,50})",
        re.IGNORECASE,
    ),
]

# Generic sentence continuations that are not outcomes ("I want to start ...")
OUTCOME_STOPLIST = frozenset({
    "to", "started", "going", "start", "begin", "beginning",
    "here", "there", "this", "that", "it", "them", "us",
    "more", "less", "better", "worse", "good", "bad",
    "some", "any", "all", "none", "one", "two", "three",
})
OUTCOME_MIN_LENGTH = 5
OUTCOME_MIN_SINGLE_WORD_LENGTH = 8

# Enumeration order breaks ties when two verticals both reach the threshold
VERTICAL_KEYWORDS = {
    "supplements": ("supplement", "vitamin", "nutrition", "protein", "fda", "health"),
    "coaching": ("coach", "training", "mentorship", "course", "learning", "transformation"),
    "ecommerce": ("product", "store", "shop", "merchandise", "inventory", "cart"),
    "skincare": ("skin", "beauty", "cosmetic", "skincare", "serum", "routine"),
    "subscription": ("subscription", "recurring", "membership", "box", "monthly"),
    "nonprofit": ("nonprofit", "charity", "donation", "cause", "mission", "advocacy"),
    "education": ("school", "college", "university", "campus", "students", "enroll"),
}
VERTICAL_MIN_HITS = 2

TRUST_TIER_KEYWORDS = {
    "stranger": (
        "stranger", "strangers", "cold audience", "cold lead", "new audience",
        "new prospect", "top of funnel", "tofu", "awareness stage",
    ),
    "follower": (
        "follower", "followers", "subscriber", "subscribers", "email subscriber",
        "newsletter subscriber", "warm lead", "engaged audience",
    ),
    "customer": (
        "customer", "customers", "buyer", "purchased", "made a purchase", "bought",
        "client", "paid customer", "existing customer",
    ),
    "advocate": (
        "advocate", "advocates", "loyal customer", "repeat customer", "champion",
        "referral", "brand advocate",
    ),
}

# Phrases that mean the user is actually making a targeting decision
TRUST_TIER_GATE_PHRASES = (
    "circle of trust", "buyers' circle", "targeting", "intended audience", "audience is",
)
# Weaker discourse words accepted when no gate phrase is present
TRUST_TIER_DISCOURSE_WORDS = ("circle", "audience", "target", "focus")


def _tier_pattern(keyword: str):
    # Phrases also match their plural ("loyal customers"); single words list
    # plurals explicitly so "buyers' circle" is not read as "buyer".
    suffix = r"s?\b" if " " in keyword else r"\b"
    return re.compile(r"\b" + re.escape(keyword) + suffix)


_TIER_PATTERNS = {
    tier: [_tier_pattern(k) for k in keywords]
    for tier, keywords in TRUST_TIER_KEYWORDS.items()
}


def _tier_hits(lowered: str):
    """(tier, start, end) for every keyword occurrence, in table order."""
    return [
        (tier, m.start(), m.end())
        for tier, patterns in _TIER_PATTERNS.items()
        for p in patterns
        for m in p.finditer(lowered)
    ]


def combine_text(current_message: str, history) -> str:
    """Current message followed by every history body, one per line, roles ignored."""
    parts = [current_message or ""]
    parts.extend(m.content for m in history)
    return "\n".join(parts)


def first_capture(rules, text: str):
    """Trimmed first capture of the first matching rule, or None."""
    for rule in rules:
        match = rule.search(text)
        if match:
            value = match.group(1).strip()
            if value:
                return value
    return None


def is_plausible_outcome(candidate: str) -> bool:
    if len(candidate) < OUTCOME_MIN_LENGTH:
        return False
    lowered = candidate.lower()
    words = lowered.split()
    if lowered in OUTCOME_STOPLIST or words[0] in OUTCOME_STOPLIST:
        return False
    if len(words) == 1 and len(words[0]) < OUTCOME_MIN_SINGLE_WORD_LENGTH:
        return False
    return True


def extract_usp(text: str):
    return first_capture(USP_RULES, text)


def extract_icp(text: str):
    return first_capture(ICP_RULES, text)


def extract_outcome(text: str):
    """First outcome capture that survives the plausibility filter.

    A rejected capture falls through to the next rule rather than ending the search.
    """
    for rule in OUTCOME_RULES:
        match = rule.search(text)
        if not match:
            continue
        candidate = match.group(1).strip()
        if is_plausible_outcome(candidate):
            return candidate
        logger.debug("Rejected outcome candidate %r", candidate)
    return None


def identify_vertical(text: str):
    lowered = text.lower()
    for vertical, keywords in VERTICAL_KEYWORDS.items():
        hits = sum(1 for k in keywords if k in lowered)
        if hits >= VERTICAL_MIN_HITS:
            return vertical
    return None


def identify_trust_tier(text: str):
    lowered = text.lower()
    gated = any(p in lowered for p in TRUST_TIER_GATE_PHRASES)
    if not gated and not any(w in lowered for w in TRUST_TIER_DISCOURSE_WORDS):
        # "customer" in unrelated prose is not a targeting decision
        return None
    hits = _tier_hits(lowered)
    # A hit inside a longer phrase belongs to that phrase: "loyal customers"
    # is an advocate, not a customer.
    standalone = [
        (tier, start, end) for tier, start, end in hits
        if not any(
            s <= start and end <= e and (e - s) > (end - start)
            for _, s, e in hits
        )
    ]
    for tier in _TIER_PATTERNS:
        if any(t == tier for t, _, _ in standalone):
            return tier
    return None


class FieldExtractor:
    """Builds an ExtractedContext from the current message plus history."""

    def extract(self, current_message: str, history=()) -> ExtractedContext:
        history = tuple(
            m if isinstance(m, ConversationMessage) else ConversationMessage.create(m["role"], m["content"])
            for m in history
        )
        text = combine_text(current_message, history)

        ctx = ExtractedContext(
            usp=extract_usp(text),
            icp=extract_icp(text),
            vertical=identify_vertical(text),
            trust_tier=identify_trust_tier(text),
            proposed_outcome=extract_outcome(text),
            history=history,
        )
        logger.debug("Extracted facts: %s", ctx.facts())
        return ctx
