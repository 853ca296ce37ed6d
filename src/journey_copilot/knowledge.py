"""Knowledge resolver: read-only framework, sequence and vertical lookup.

The tables are loaded once (embedded dicts or a JSON directory) and never
change afterwards, so every resolved lookup is cached for the life of the
process. The cache is a plain dict behind a lock: Streamlit serves sessions
from several threads.
"""

import json
import logging
import re
import threading
from pathlib import Path

from . import knowledge_data
from .errors import KnowledgeLoadError
from .models import Framework, SequenceTemplate, VerticalGuidance, WorkflowStep

logger = logging.getLogger("journey.knowledge")

FUZZY_MATCH_THRESHOLD = 0.6
FALLBACK_VERTICAL = "dtc"

KNOWLEDGE_FILES = {
    "frameworks": "frameworks.json",
    "sequences": "sequences.json",
    "verticals": "verticals.json",
}


def _normalize(key: str) -> str:
    return (key or "").strip().lower()


def similarity_score(query: str, key: str, name: str) -> float:
    """Fraction of query words found inside the candidate key or display name."""
    words = query.lower().split()
    if not words:
        return 0.0
    key, name = key.lower(), name.lower()
    hits = sum(1 for w in words if w in key or w in name)
    return hits / len(words)


def _build_framework(raw: dict) -> Framework:
    return Framework(
        name=raw["name"],
        acronym=raw["acronym"],
        components=tuple(raw.get("components", ())),
        best_for=tuple(raw.get("best_for", ())),
        tone=raw.get("tone", raw.get("emotional_tone", "")),
        funnel_stage=raw.get("funnel_stage", ""),
        example=raw.get("example", ""),
        criticisms=raw.get("criticisms", ""),
        relevance_score=float(raw.get("relevance_score", raw.get("score", 0.0))),
    )


def _build_sequence(raw: dict) -> SequenceTemplate:
    return SequenceTemplate(
        outcome=raw["outcome"],
        vertical=raw["vertical"],
        duration=raw.get("duration", ""),
        touch_points=int(raw.get("touch_points", 0)),
        triggers=frozenset(raw.get("triggers", ())),
        cadence=raw.get("cadence", ""),
        frameworks=tuple(raw.get("frameworks", ())),
        key_messages=tuple(raw.get("key_messages", ())),
        branching_logic=raw.get("branching_logic", ""),
    )


def _build_vertical(raw: dict) -> VerticalGuidance:
    return VerticalGuidance(
        vertical_name=raw["vertical_name"],
        characteristics=tuple(raw.get("characteristics", ())),
        key_principles=tuple(raw.get("key_principles", ())),
        common_outcomes=tuple(raw.get("common_outcomes", ())),
        unique_considerations=raw.get("unique_considerations", ""),
    )


class KnowledgeBase:
    """Immutable lookup tables plus a never-invalidated resolution cache."""

    def __init__(
        self,
        frameworks: dict,
        sequences: dict,
        verticals: dict,
        step_frameworks: dict | None = None,
        vertical_frameworks: dict | None = None,
        outcome_aliases: list | None = None,
    ):
        self._frameworks = {_normalize(k): v for k, v in frameworks.items()}
        self._sequences = {_normalize(k): v for k, v in sequences.items()}
        self._verticals = {_normalize(k): v for k, v in verticals.items()}
        self._step_frameworks = step_frameworks or knowledge_data.STEP_FRAMEWORKS
        self._vertical_frameworks = vertical_frameworks or knowledge_data.VERTICAL_FRAMEWORKS
        self._outcome_aliases = outcome_aliases or knowledge_data.OUTCOME_ALIASES
        self._cache: dict = {}
        self._lock = threading.Lock()

    # -------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------

    @classmethod
    def from_tables(cls, frameworks: dict, sequences: dict, verticals: dict) -> "KnowledgeBase":
        """Build typed records from raw dict tables; any bad row is fatal."""
        try:
            return cls(
                frameworks={k: _build_framework(v) for k, v in frameworks.items()},
                sequences={k: _build_sequence(v) for k, v in sequences.items()},
                verticals={k: _build_vertical(v) for k, v in verticals.items()},
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise KnowledgeLoadError(f"Invalid knowledge table entry: {e!r}") from e

    @classmethod
    def from_embedded(cls) -> "KnowledgeBase":
        kb = cls.from_tables(
            knowledge_data.FRAMEWORKS,
            knowledge_data.SEQUENCE_TEMPLATES,
            knowledge_data.VERTICAL_GUIDES,
        )
        logger.info("Knowledge base loaded from embedded tables")
        return kb

    @classmethod
    def from_directory(cls, directory: Path) -> "KnowledgeBase":
        """Load frameworks.json, sequences.json and verticals.json from a directory."""
        directory = Path(directory)
        tables = {}
        for table, filename in KNOWLEDGE_FILES.items():
            path = directory / filename
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise KnowledgeLoadError(f"Failed to load {table} from {path}: {e}") from e
            if not isinstance(data, dict) or not data:
                raise KnowledgeLoadError(f"{path} must contain a non-empty JSON object")
            tables[table] = data

        kb = cls.from_tables(tables["frameworks"], tables["sequences"], tables["verticals"])
        logger.info("Knowledge base loaded from %s", directory)
        return kb

    # -------------------------------------------------------------------
    # Cache
    # -------------------------------------------------------------------

    def _cached(self, cache_key: str, resolve):
        with self._lock:
            if cache_key in self._cache:
                return self._cache[cache_key]
        value = resolve()
        if value is not None:
            with self._lock:
                value = self._cache.setdefault(cache_key, value)
        return value

    # -------------------------------------------------------------------
    # Frameworks
    # -------------------------------------------------------------------

    def framework(self, name: str) -> Framework | None:
        """Exact acronym lookup, falling back to word-overlap fuzzy matching."""
        key = _normalize(name)
        if not key:
            return None
        return self._cached(f"fw:{key}", lambda: self._frameworks.get(key) or self._best_match(key))

    def _best_match(self, query: str) -> Framework | None:
        best, best_score = None, 0.0
        for key, fw in self._frameworks.items():
            score = similarity_score(query, key, fw.name)
            if score > best_score and score > FUZZY_MATCH_THRESHOLD:
                best, best_score = fw, score
        if best is not None:
            logger.debug("Fuzzy framework match %r -> %s (%.2f)", query, best.acronym, best_score)
        return best

    def _resolve_frameworks(self, keys) -> list[Framework]:
        frameworks = []
        for key in keys:
            fw = self.framework(key)
            if fw is not None:
                frameworks.append(fw)
        return frameworks

    def frameworks_for_step(self, step: WorkflowStep) -> list[Framework]:
        return self._resolve_frameworks(self._step_frameworks.get(WorkflowStep(step).name, []))

    def frameworks_for_vertical(self, vertical: str) -> list[Framework]:
        return self._resolve_frameworks(self._vertical_frameworks.get(_normalize(vertical), []))

    def list_frameworks(self) -> list[Framework]:
        return sorted(self._frameworks.values(), key=lambda fw: fw.relevance_score, reverse=True)

    # -------------------------------------------------------------------
    # Sequences
    # -------------------------------------------------------------------

    def sequence_for(self, outcome: str, vertical: str) -> SequenceTemplate | None:
        """Exact `outcome_vertical` template, else the outcome's DTC template."""
        outcome_key, vertical_key = _normalize(outcome), _normalize(vertical)
        if not outcome_key:
            return None

        def resolve():
            return (
                self._sequences.get(f"{outcome_key}_{vertical_key}")
                or self._sequences.get(f"{outcome_key}_{FALLBACK_VERTICAL}")
            )

        return self._cached(f"seq:{outcome_key}:{vertical_key}", resolve)

    def sequences_for_vertical(self, vertical: str) -> list[SequenceTemplate]:
        suffix = "_" + _normalize(vertical)
        return [t for key, t in self._sequences.items() if key.endswith(suffix)]

    def outcome_key(self, outcome_text: str) -> str:
        """Map a free-text outcome onto a template outcome key.

        'recover abandoned carts faster' -> 'cart_abandonment'. Unknown text
        falls back to a slug so exact template keys still resolve.
        """
        lowered = _normalize(outcome_text)
        for cues, key in self._outcome_aliases:
            if any(cue in lowered for cue in cues):
                return key
        return re.sub(r"[^a-z0-9]+", "_", lowered).strip("_")

    # -------------------------------------------------------------------
    # Verticals
    # -------------------------------------------------------------------

    def vertical_guidance(self, vertical: str) -> VerticalGuidance | None:
        key = _normalize(vertical)
        if not key:
            return None
        return self._cached(f"vg:{key}", lambda: self._verticals.get(key))

    # -------------------------------------------------------------------
    # Prompt context
    # -------------------------------------------------------------------

    def build_context(self, step: WorkflowStep, outcome: str | None, vertical: str | None) -> str:
        """Knowledge block for the prompt: only what the current step needs.

        Frameworks are injected at Execution only; earlier steps are question
        and confirmation turns and must not start drafting copy.
        """
        parts = []

        if step == WorkflowStep.EXECUTION:
            frameworks = self.frameworks_for_step(step)
            if vertical:
                frameworks += self.frameworks_for_vertical(vertical)
            unique = list(dict.fromkeys(frameworks))
            if unique:
                parts.append(_format_frameworks(unique))

        template = self.template_for(outcome, vertical)
        if template is not None:
            parts.append(_format_sequence(template))

        if vertical:
            guidance = self.vertical_guidance(vertical)
            if guidance is not None:
                parts.append(_format_vertical(guidance))

        return "\n\n".join(parts)

    def template_for(self, outcome: str | None, vertical: str | None) -> SequenceTemplate | None:
        """Template for extracted facts; needs both an outcome and a vertical."""
        if not outcome or not vertical:
            return None
        return self.sequence_for(self.outcome_key(outcome), vertical)


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def _format_frameworks(frameworks: list[Framework]) -> str:
    lines = ["## APPLICABLE COPYWRITING FRAMEWORKS", ""]
    for fw in frameworks:
        best_for = ", ".join(fw.best_for)
        lines.append(f"**{fw.name} ({fw.acronym})** - Score: {fw.relevance_score:.1f}")
        lines.append(f"Best for: {best_for}")
        if fw.tone:
            lines.append(f"Tone: {fw.tone}")
        if fw.components:
            lines.append(f"Components: {' | '.join(fw.components)}")
        lines.append("")
    return "\n".join(lines).rstrip()


def _format_sequence(t: SequenceTemplate) -> str:
    return "\n".join([
        "## RECOMMENDED SEQUENCE TEMPLATE",
        "",
        f"Outcome: {t.outcome} ({t.vertical})",
        f"Duration: {t.duration} ({t.touch_points} touch points)",
        f"Triggers: {', '.join(sorted(t.triggers))}",
        f"Cadence: {t.cadence}",
        f"Recommended Frameworks: {', '.join(t.frameworks)}",
        f"Key Messages: {' → '.join(t.key_messages)}",
        f"Branching Logic: {t.branching_logic}",
    ])


def _format_vertical(g: VerticalGuidance) -> str:
    lines = [
        "## VERTICAL GUIDANCE",
        "",
        f"Vertical: {g.vertical_name}",
        f"Characteristics: {'; '.join(g.characteristics)}",
        f"Key Principles: {'; '.join(g.key_principles)}",
    ]
    if g.common_outcomes:
        lines.append(f"Common Outcomes: {'; '.join(g.common_outcomes)}")
    if g.unique_considerations:
        lines.append(f"Watch For: {g.unique_considerations}")
    return "\n".join(lines)
