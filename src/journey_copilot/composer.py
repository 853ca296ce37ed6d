"""Six-layer system prompt assembly.

Layer order is fixed and load-bearing; later layers refine earlier ones and
never contradict the compliance mandate:

    1. base persona / workflow   (caller-overridable)
    2. compliance mandate        (fixed)
    3. current step focus
    4. knowledge context
    5. output format requirements
    6. recap of extracted facts
"""

import logging
import re

from . import config
from .models import ExtractedContext, OutputFormatSpec, SequenceTemplate, WorkflowStep
from .prompts import (
    BASE_SYSTEM_PROMPT,
    COMPLIANCE_MANDATE,
    OUTPUT_FORMAT_TEMPLATE,
    STEP_DIRECTIVES,
    STEP_FOCUS_TEMPLATE,
    TABLE_FORMAT_TEMPLATE,
)

logger = logging.getLogger("journey.composer")

RECAP_LABELS = (
    ("usp", "EXTRACTED USP"),
    ("icp", "EXTRACTED ICP"),
    ("vertical", "DETECTED VERTICAL"),
    ("trust_tier", "CURRENT CIRCLE"),
    ("proposed_outcome", "PROPOSED OUTCOME"),
)

_EVERY_N_DAYS = re.compile(r"every\s+(\d+)(?:\s*-\s*\d+)?\s+days?", re.IGNORECASE)
_OFFSET = re.compile(r"(\d+)\s*([hd])\b", re.IGNORECASE)


def suggested_delays(cadence: str | None, touch_points: int | None) -> list[int] | None:
    """Whole-day delays for a template cadence, first always 0, never decreasing.

    "Every 2-3 days" x5 -> [0, 2, 4, 6, 8]; "15d, 30d, 45d" x4 -> [0, 15, 30, 45];
    "1h, 12h, 24h" x3 -> [0, 0, 1]. Unparseable cadences give None.
    """
    if not cadence or not touch_points or touch_points < 1:
        return None

    every = _EVERY_N_DAYS.search(cadence)
    if every:
        gap = int(every.group(1))
        return [i * gap for i in range(touch_points)]

    offsets = _OFFSET.findall(cadence)
    if not offsets:
        return None
    days = [int(n) // 24 if unit.lower() == "h" else int(n) for n, unit in offsets]
    if len(days) < touch_points:
        days.insert(0, 0)
    days[0] = 0
    while len(days) < touch_points:
        step = days[-1] - days[-2] if len(days) > 1 else 1
        days.append(days[-1] + max(step, 1))

    delays, floor = [], 0
    for d in days[:touch_points]:
        floor = max(floor, d)
        delays.append(floor)
    return delays


class PromptComposer:
    def output_format_for(self, step: WorkflowStep, template: SequenceTemplate | None = None) -> OutputFormatSpec:
        """Table requirements only at Execution; cadence comes from the resolved template."""
        if step != WorkflowStep.EXECUTION:
            return OutputFormatSpec(
                kind="text",
                max_content_length=config.MAX_EMAIL_LENGTH,
                readability_level=config.READABILITY_LEVEL,
            )
        return OutputFormatSpec(
            kind="email_sequence",
            include_table=True,
            table_columns=tuple(config.TABLE_COLUMNS),
            max_content_length=config.MAX_EMAIL_LENGTH,
            readability_level=config.READABILITY_LEVEL,
            cadence=template.cadence if template else None,
            touch_points=template.touch_points if template else None,
        )

    def compose(
        self,
        base_instructions: str | None,
        step: WorkflowStep,
        context: ExtractedContext,
        knowledge_context: str,
        output_format: OutputFormatSpec,
    ) -> str:
        layers = [
            base_instructions.strip() if base_instructions and base_instructions.strip() else BASE_SYSTEM_PROMPT.strip(),
            COMPLIANCE_MANDATE,
            self._step_layer(step),
            (knowledge_context or "").strip(),
            self._format_layer(output_format),
            self._recap_layer(context),
        ]
        prompt = "\n\n".join(layer for layer in layers if layer)
        logger.debug("Composed %d-char prompt for step %d", len(prompt), step)
        return prompt

    def _step_layer(self, step: WorkflowStep) -> str:
        return STEP_FOCUS_TEMPLATE.format(directive=STEP_DIRECTIVES[int(step)])

    def _format_layer(self, fmt: OutputFormatSpec) -> str:
        text = OUTPUT_FORMAT_TEMPLATE.format(
            kind=fmt.kind,
            max_length=fmt.max_content_length,
            readability=fmt.readability_level,
        )
        if not fmt.include_table or not fmt.table_columns:
            return text

        header = "| " + " | ".join(fmt.table_columns) + " |"
        separator = "|" + " --- |" * len(fmt.table_columns)

        cadence_clause = ""
        if fmt.cadence:
            cadence_clause = f' "{fmt.cadence}"'
            delays = suggested_delays(fmt.cadence, fmt.touch_points)
            if delays:
                cadence_clause += f" (for example: {', '.join(str(d) for d in delays)})"

        if fmt.touch_points:
            row_rule = f"Exactly {fmt.touch_points} rows, one per touch point."
        else:
            row_rule = "One row per email in the sequence."

        return text + "\n" + TABLE_FORMAT_TEMPLATE.format(
            header=header,
            separator=separator,
            cadence_clause=cadence_clause,
            row_rule=row_rule,
        )

    def _recap_layer(self, context: ExtractedContext) -> str:
        facts = context.facts()
        return "\n".join(f"{label}: {facts[key]}" for key, label in RECAP_LABELS if key in facts)
