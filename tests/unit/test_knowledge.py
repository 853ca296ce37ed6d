"""Unit tests for journey_copilot.knowledge: lookups, cache, loaders, context block."""

import json

import pytest

from journey_copilot import knowledge_data
from journey_copilot.errors import KnowledgeLoadError
from journey_copilot.knowledge import KnowledgeBase, similarity_score
from journey_copilot.models import WorkflowStep


def _write_tables(directory, frameworks=None, sequences=None, verticals=None):
    tables = {
        "frameworks.json": knowledge_data.FRAMEWORKS if frameworks is None else frameworks,
        "sequences.json": knowledge_data.SEQUENCE_TEMPLATES if sequences is None else sequences,
        "verticals.json": knowledge_data.VERTICAL_GUIDES if verticals is None else verticals,
    }
    for name, data in tables.items():
        (directory / name).write_text(json.dumps(data), encoding="utf-8")


# ===================================================================
# Framework lookup
# ===================================================================


class TestFrameworkLookup:
    def test_exact_key_is_case_insensitive(self, knowledge):
        assert knowledge.framework("AIDA").acronym == "AIDA"
        assert knowledge.framework("4ps").relevance_score == 9.4

    def test_fuzzy_match_accepts_close_name(self, knowledge):
        assert knowledge.framework("aida framework").acronym == "AIDA"

    def test_fuzzy_match_rejects_unknown(self, knowledge):
        assert knowledge.framework("banana") is None

    def test_fuzzy_threshold_is_strict(self, knowledge):
        # Only "framework" hits: 1/2 = 0.5, below the 0.6 bar
        assert knowledge.framework("banana framework") is None

    def test_similarity_score(self):
        assert similarity_score("hero section", "hero", "Hero Section Framework") == 1.0
        assert similarity_score("hero banana", "hero", "Hero Section Framework") == 0.5
        assert similarity_score("", "hero", "Hero") == 0.0

    def test_repeat_lookup_returns_cached_object(self, knowledge):
        assert knowledge.framework("bab framework") is knowledge.framework("bab framework")

    def test_list_frameworks_sorted_by_score(self, knowledge):
        scores = [fw.relevance_score for fw in knowledge.list_frameworks()]
        assert scores == sorted(scores, reverse=True)
        assert len(scores) == 6


class TestStepAndVerticalFrameworks:
    def test_execution_frameworks_in_order(self, knowledge):
        acronyms = [fw.acronym for fw in knowledge.frameworks_for_step(WorkflowStep.EXECUTION)]
        assert acronyms == ["4Ps", "FAB", "PAS"]

    def test_introduction_uses_hero(self, knowledge):
        acronyms = [fw.acronym for fw in knowledge.frameworks_for_step(WorkflowStep.INTRODUCTION)]
        assert acronyms == ["Hero"]

    def test_vertical_frameworks(self, knowledge):
        acronyms = [fw.acronym for fw in knowledge.frameworks_for_vertical("Coaching")]
        assert acronyms == ["BAB", "4Ps", "PAS"]

    def test_unknown_vertical_has_no_frameworks(self, knowledge):
        assert knowledge.frameworks_for_vertical("aerospace") == []


# ===================================================================
# Sequences + verticals
# ===================================================================


class TestSequences:
    def test_exact_template(self, knowledge):
        t = knowledge.sequence_for("onboarding", "supplements")
        assert t.outcome == "Habit Formation"
        assert t.touch_points == 5

    def test_falls_back_to_dtc(self, knowledge):
        t = knowledge.sequence_for("cart_abandonment", "skincare")
        assert t.vertical == "DTC"
        assert t.cadence == "1h, 12h, 24h"

    def test_unknown_outcome_is_absent(self, knowledge):
        assert knowledge.sequence_for("world_domination", "dtc") is None

    def test_triggers_are_a_set(self, knowledge):
        t = knowledge.sequence_for("first_purchase", "dtc")
        assert t.triggers == frozenset({"Subscribed", "Viewed Product"})

    def test_sequences_for_vertical(self, knowledge):
        outcomes = {t.outcome for t in knowledge.sequences_for_vertical("dtc")}
        assert outcomes == {"First Purchase Acquisition", "Cart Recovery"}

    @pytest.mark.parametrize("text,key", [
        ("recover abandoned carts faster", "cart_abandonment"),
        ("turn one-time donors into monthly givers", "donor_escalation"),
        ("build a daily habit", "onboarding"),
        ("book more discovery calls", "lead_nurture"),
        ("get the first purchase", "first_purchase"),
        ("Reactivate Lapsed Users", "reactivate_lapsed_users"),
    ])
    def test_outcome_key(self, knowledge, text, key):
        assert knowledge.outcome_key(text) == key

    def test_template_for_needs_outcome_and_vertical(self, knowledge):
        assert knowledge.template_for("recover abandoned carts", None) is None
        assert knowledge.template_for(None, "dtc") is None
        assert knowledge.template_for("recover abandoned carts", "ecommerce").outcome == "Cart Recovery"


class TestVerticalGuidance:
    def test_known_vertical(self, knowledge):
        g = knowledge.vertical_guidance("Nonprofit")
        assert g.vertical_name == "Nonprofit"
        assert g.key_principles

    def test_every_detectable_vertical_has_guidance(self, knowledge):
        from journey_copilot.extraction import VERTICAL_KEYWORDS

        for vertical in VERTICAL_KEYWORDS:
            assert knowledge.vertical_guidance(vertical) is not None, vertical

    def test_unknown_vertical(self, knowledge):
        assert knowledge.vertical_guidance("aerospace") is None
        assert knowledge.vertical_guidance("") is None


# ===================================================================
# Context block
# ===================================================================


class TestBuildContext:
    def test_frameworks_only_at_execution(self, knowledge):
        early = knowledge.build_context(WorkflowStep.ANALYSIS, "recover abandoned carts", "ecommerce")
        late = knowledge.build_context(WorkflowStep.EXECUTION, "recover abandoned carts", "ecommerce")
        assert "APPLICABLE COPYWRITING FRAMEWORKS" not in early
        assert "APPLICABLE COPYWRITING FRAMEWORKS" in late

    def test_execution_frameworks_deduplicated(self, knowledge):
        block = knowledge.build_context(WorkflowStep.EXECUTION, None, "ecommerce")
        # Step gives 4Ps, FAB, PAS; ecommerce adds PAS, FAB, Hero
        assert block.count("**PAS Framework (PAS)**") == 1
        assert block.index("4Ps Framework") < block.index("Hero Section Framework")

    def test_sequence_section_needs_outcome_and_vertical(self, knowledge):
        assert "RECOMMENDED SEQUENCE TEMPLATE" not in knowledge.build_context(
            WorkflowStep.ANALYSIS, "recover abandoned carts", None
        )
        block = knowledge.build_context(WorkflowStep.ANALYSIS, "recover abandoned carts", "ecommerce")
        assert "RECOMMENDED SEQUENCE TEMPLATE" in block
        assert "Cadence: 1h, 12h, 24h" in block

    def test_vertical_guidance_section(self, knowledge):
        block = knowledge.build_context(WorkflowStep.DISCOVERY, None, "skincare")
        assert "VERTICAL GUIDANCE" in block
        assert "Vertical: Skincare" in block

    def test_empty_when_nothing_known(self, knowledge):
        assert knowledge.build_context(WorkflowStep.INTRODUCTION, None, None) == ""


# ===================================================================
# Loaders
# ===================================================================


class TestLoaders:
    def test_from_directory(self, tmp_path):
        _write_tables(tmp_path)
        kb = KnowledgeBase.from_directory(tmp_path)
        assert kb.framework("pas").name == "PAS Framework"
        assert kb.sequence_for("lead_nurture", "coaching").touch_points == 12

    def test_missing_file_raises(self, tmp_path):
        _write_tables(tmp_path)
        (tmp_path / "verticals.json").unlink()
        with pytest.raises(KnowledgeLoadError, match="verticals"):
            KnowledgeBase.from_directory(tmp_path)

    def test_invalid_json_raises(self, tmp_path):
        _write_tables(tmp_path)
        (tmp_path / "frameworks.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(KnowledgeLoadError):
            KnowledgeBase.from_directory(tmp_path)

    def test_empty_table_raises(self, tmp_path):
        _write_tables(tmp_path, sequences={})
        with pytest.raises(KnowledgeLoadError, match="non-empty"):
            KnowledgeBase.from_directory(tmp_path)

    def test_bad_row_raises(self):
        with pytest.raises(KnowledgeLoadError):
            KnowledgeBase.from_tables({"x": {"acronym": "X"}}, {}, {})
