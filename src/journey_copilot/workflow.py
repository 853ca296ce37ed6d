"""Infer the current workflow step from extracted facts and the assistant's past turns.

There is no server-side cursor. Progress is re-derived every request: the
facts decide the candidate step, and the assistant's own earlier messages
decide whether a confirmation step was already delivered and can be skipped.
The detectors require co-occurring keyword families, so they err toward
re-asking rather than skipping a step that never happened.
"""

import logging

from .models import ExtractedContext, WorkflowStep

logger = logging.getLogger("journey.workflow")

VALIDATION_CUE_WORDS = (
    "understanding", "summary", "confirm", "correct", "accurate",
    "let me summarize", "to confirm", "based on", "so you",
)
VALIDATION_SUBJECT_WORDS = (
    "usp", "unique selling", "icp", "ideal customer", "target audience",
)

CIRCLE_CONFIRMATION_PHRASES = (
    "circle of trust", "buyers' circle", "intended audience",
    "targeting", "focusing on", "audience is",
)

ANALYSIS_CUE_WORDS = (
    "appropriate", "inappropriate", "aligns", "aligns perfectly",
    "highly appropriate", "well-suited", "matches", "fits",
    "circle of trust", "desired outcome", "analysis",
    "demonstrating", "motivations", "relationship status",
)
ANALYSIS_OUTCOME_WORDS = ("outcome", "goal")
ANALYSIS_SEGMENT_WORDS = ("circle", "customer", "stranger", "follower", "advocate")


def _model_turns(history):
    for msg in history:
        if msg.is_model:
            yield msg.content.lower()


def _mentions(text: str, words) -> bool:
    return any(w in text for w in words)


def validation_summary_given(history) -> bool:
    """A model turn confirmed/summarized AND named the USP/ICP/target audience."""
    return any(
        _mentions(text, VALIDATION_CUE_WORDS) and _mentions(text, VALIDATION_SUBJECT_WORDS)
        for text in _model_turns(history)
    )


def circle_confirmation_given(history) -> bool:
    return any(_mentions(text, CIRCLE_CONFIRMATION_PHRASES) for text in _model_turns(history))


def analysis_given(history) -> bool:
    """A model turn judged appropriateness, citing both an outcome and a segment."""
    return any(
        _mentions(text, ANALYSIS_CUE_WORDS)
        and _mentions(text, ANALYSIS_OUTCOME_WORDS)
        and _mentions(text, ANALYSIS_SEGMENT_WORDS)
        for text in _model_turns(history)
    )


class WorkflowStateMachine:
    def step(self, ctx: ExtractedContext) -> WorkflowStep:
        step = self._infer(ctx)
        logger.debug("Workflow step %d (%s) from %d facts", step, step.label, ctx.filled_core_fields())
        return step

    def _infer(self, ctx: ExtractedContext) -> WorkflowStep:
        has_usp = bool(ctx.usp)
        has_icp = bool(ctx.icp)
        has_tier = bool(ctx.trust_tier)
        has_outcome = bool(ctx.proposed_outcome)
        filled = ctx.filled_core_fields()

        if filled == 0:
            return WorkflowStep.INTRODUCTION

        if filled == 1 and (has_usp or has_icp):
            return WorkflowStep.DISCOVERY

        if has_usp and has_icp and not has_tier:
            if validation_summary_given(ctx.history):
                return WorkflowStep.FRAMEWORK_APPLICATION
            return WorkflowStep.VALIDATION

        if has_usp and has_icp and has_tier and not has_outcome:
            if circle_confirmation_given(ctx.history):
                return WorkflowStep.GOAL_SETTING
            return WorkflowStep.CIRCLE_CONFIRMATION

        if filled == 4:
            if analysis_given(ctx.history):
                return WorkflowStep.EXECUTION
            return WorkflowStep.ANALYSIS

        # e.g. a trust tier or outcome with no USP/ICP yet
        return WorkflowStep.INTRODUCTION
